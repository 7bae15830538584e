"""Single-file JSON storage for the trainer profile, team, opponent and progress.

Every mutation writes through to disk. Unreadable files fall back to defaults
(logged); failed writes raise ``StorageError`` so callers can retry.
"""
from __future__ import annotations
import copy
import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from pokebattle.battle.core import Combatant
from pokebattle.battle.factory import combatant_from_record, record_from_combatant
from pokebattle.core.errors import StorageError
from pokebattle.core.logging import logger
from pokebattle.core.paths import default_save_path

INITIAL_PROGRESS = {"round": 1, "wins": 0}

COSTS = {"REVIVE": 50, "NEW_POKEMON": 100, "HEAL_ALL": 75}
REWARDS = {"WIN_BATTLE": 25, "DEFEAT_POKEMON": 10}


@dataclass
class ProfileStats:
    totalBattles: int = 0
    totalWins: int = 0
    bestStreak: int = 0
    currentStreak: int = 0


@dataclass
class Profile:
    username: str = "Trainer"
    avatar: str = "🎮"
    coins: int = 500
    stats: ProfileStats = field(default_factory=ProfileStats)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Profile":
        stats = ProfileStats(**{k: v for k, v in (data.get("stats") or {}).items()
                                if k in ProfileStats.__dataclass_fields__})
        return cls(
            username=data.get("username", "Trainer"),
            avatar=data.get("avatar", "🎮"),
            coins=int(data.get("coins", 500)),
            stats=stats,
        )


@dataclass
class Progress:
    round: int = 1
    wins: int = 0


class Storage:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else default_save_path()
        self._doc: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if self.path.exists():
            try:
                doc = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(doc, dict):
                    logger.debug("SaveLoaded", file=str(self.path))
                    return doc
                logger.warn("SaveMalformedUsingDefaults", file=str(self.path))
            except (OSError, ValueError) as e:
                logger.warn("SaveParseFailedUsingDefaults", file=str(self.path), error=str(e))
        return {}

    def _commit(self, doc: Dict[str, Any]):
        """Write ``doc`` to disk, adopting it in memory only once the write succeeded."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise StorageError(str(self.path), str(e)) from e
        self._doc = doc
        logger.debug("GameSaved", file=str(self.path))

    def _set(self, key: str, value: Any):
        doc = dict(self._doc)
        doc[key] = value
        self._commit(doc)

    def _drop(self, key: str):
        doc = dict(self._doc)
        doc.pop(key, None)
        self._commit(doc)

    # --- Profile & coins ---
    def profile(self) -> Profile:
        return Profile.from_json(self._doc.get("profile") or {})

    def save_profile(self, profile: Profile):
        self._set("profile", asdict(profile))

    def record_battle_result(self, won: bool) -> Profile:
        p = self.profile()
        p.stats.totalBattles += 1
        if won:
            p.stats.totalWins += 1
            p.stats.currentStreak += 1
            p.stats.bestStreak = max(p.stats.bestStreak, p.stats.currentStreak)
            p.coins += REWARDS["WIN_BATTLE"]
        else:
            p.stats.currentStreak = 0
        self.save_profile(p)
        return p

    def coins(self) -> int:
        return self.profile().coins

    def add_coins(self, amount: int) -> int:
        p = self.profile()
        p.coins += amount
        self.save_profile(p)
        return p.coins

    def can_afford(self, amount: int) -> bool:
        return self.coins() >= amount

    def spend_coins(self, amount: int) -> bool:
        p = self.profile()
        if p.coins < amount:
            return False
        p.coins -= amount
        self.save_profile(p)
        return True

    # --- Team ---
    def save_team(self, team: List[Combatant]):
        self._set("team", [record_from_combatant(c) for c in team])

    def load_team(self) -> Optional[List[Combatant]]:
        raw = self._doc.get("team")
        if not raw:
            return None
        return [combatant_from_record(r) for r in copy.deepcopy(raw)]

    def clear_team(self):
        self._drop("team")

    # --- Opponent ---
    def save_enemy(self, enemy: Combatant):
        self._set("enemy", record_from_combatant(enemy))

    def load_enemy(self) -> Optional[Combatant]:
        raw = self._doc.get("enemy")
        return combatant_from_record(copy.deepcopy(raw)) if raw else None

    def clear_enemy(self):
        self._drop("enemy")

    # --- Progress ---
    def save_progress(self, round_number: int, wins: int):
        self._set("progress", asdict(Progress(round=round_number, wins=wins)))

    def load_progress(self) -> Progress:
        raw = self._doc.get("progress") or INITIAL_PROGRESS
        return Progress(round=int(raw.get("round", 1)), wins=int(raw.get("wins", 0)))

    def reset_progress(self):
        self.save_progress(INITIAL_PROGRESS["round"], INITIAL_PROGRESS["wins"])


__all__ = ["Storage", "Profile", "ProfileStats", "Progress", "COSTS", "REWARDS"]
