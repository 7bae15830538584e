"""Battle session: one party of combatants against a single opponent.

The session is an explicit value (party, active slot, opponent, round & win
counters) driven through ``begin`` / ``advance_round`` or all at once through
``run``. It never sleeps; pacing belongs to whoever consumes the outcomes.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .core import AttackOutcome, BattleCore, Combatant
from pokebattle.core.errors import BattleBusyError, ValidationError
from pokebattle.core.logging import logger

INITIAL_ROUND = 1
INITIAL_WINS = 0


class SessionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    WON = "won"
    ACTIVE_DEFEATED = "active_defeated"
    STALEMATE = "stalemate"


class BattleResult(str, Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"
    STALEMATE = "stalemate"


_RESULTS = {
    SessionState.WON: BattleResult.VICTORY,
    SessionState.ACTIVE_DEFEATED: BattleResult.DEFEAT,
    SessionState.STALEMATE: BattleResult.STALEMATE,
}


@dataclass
class Party:
    members: List[Combatant]
    active_index: int = 0

    def active(self) -> Combatant:
        return self.members[self.active_index]

    def has_available(self) -> bool:
        return any(not m.is_fainted() for m in self.members)

    def first_available(self) -> Optional[int]:
        for i, m in enumerate(self.members):
            if not m.is_fainted():
                return i
        return None

    def auto_switch_if_fainted(self) -> Optional[Combatant]:
        if not self.active().is_fainted():
            return None
        idx = self.first_available()
        if idx is None:
            return None
        self.active_index = idx
        return self.members[idx]


@dataclass
class SequenceReport:
    result: BattleResult
    outcomes: List[AttackOutcome] = field(default_factory=list)
    rounds: int = 0
    fainted: Optional[str] = None       # name of whichever side fainted
    switched_to: Optional[str] = None   # auto-switch target after a defeat
    game_over: bool = False             # whole party down; counters were reset
    wins_before_reset: int = 0


class BattleSession:
    def __init__(self, party: Party, opponent: Combatant, core: Optional[BattleCore] = None, *,
                 round_number: int = INITIAL_ROUND, wins: int = INITIAL_WINS):
        if not party.members:
            raise ValidationError("Party needs at least one combatant")
        self.party = party
        self.opponent = opponent
        self.core = core or BattleCore()
        self.round_number = round_number
        self.wins = wins
        self.state = SessionState.IDLE
        self.rounds = 0
        self.outcomes: List[AttackOutcome] = []
        self.log: List[str] = []
        self._streaming = False  # outcomes still being handed to the caller
        self._report: Optional[SequenceReport] = None  # set once the finished sequence is settled

    @property
    def busy(self) -> bool:
        return self.state is SessionState.RUNNING or self._streaming

    @property
    def max_rounds(self) -> int:
        return self.core.tuning.max_rounds

    def result(self) -> Optional[BattleResult]:
        return _RESULTS.get(self.state)

    # ---------------- Sequencing -----------------
    def begin(self):
        if self.busy:
            raise BattleBusyError("attack")
        active = self.party.active()
        if not self.party.has_available():
            raise ValidationError("All your combatants have fainted!")
        if active.is_fainted():
            raise ValidationError(f"{active.name} has fainted! Select another combatant.")
        if self.opponent.is_fainted():
            raise ValidationError(f"{self.opponent.name} has already fainted.")
        self.state = SessionState.RUNNING
        self.rounds = 0
        self.outcomes = []
        self._report = None
        logger.debug("SequenceStart", player=active.name, opponent=self.opponent.name, round=self.round_number)

    def _attack(self, attacker: Combatant, defender: Combatant, is_player: bool) -> AttackOutcome:
        out = self.core.execute_attack(attacker, defender, is_player)
        self.outcomes.append(out)
        self.log.append(out.describe())
        return out

    def advance_round(self) -> List[AttackOutcome]:
        """Play one round: faster side attacks, then the other unless it fainted."""
        if self.state is not SessionState.RUNNING:
            raise ValidationError("No battle sequence is running")
        player = self.party.active()
        foe = self.opponent
        self.rounds += 1
        if self.core.determine_first(player, foe):
            order = [(player, foe, True), (foe, player, False)]
        else:
            order = [(foe, player, False), (player, foe, True)]
        played: List[AttackOutcome] = []
        for attacker, defender, is_player in order:
            out = self._attack(attacker, defender, is_player)
            played.append(out)
            if out.defender_fainted:
                self.state = SessionState.WON if is_player else SessionState.ACTIVE_DEFEATED
                break
        if self.state is SessionState.RUNNING and self.rounds >= self.max_rounds:
            self.state = SessionState.STALEMATE
            logger.warn("SequenceTimeout", rounds=self.rounds, player=player.name, opponent=foe.name)
        return played

    def run(self, on_outcome: Optional[Callable[[AttackOutcome], None]] = None) -> SequenceReport:
        """Run a full sequence until someone faints or the round limit hits."""
        self.begin()
        self._streaming = True
        try:
            while self.state is SessionState.RUNNING:
                for out in self.advance_round():
                    if on_outcome:
                        on_outcome(out)
        except BaseException:
            if self.state is SessionState.RUNNING:
                self.state = SessionState.IDLE
            raise
        finally:
            self._streaming = False
        return self.settle()

    def settle(self) -> SequenceReport:
        """Apply the terminal state's consequences to the session counters.

        Counters move once per sequence; later calls return the same report.
        """
        if self._report is not None:
            return self._report
        result = self.result()
        if result is None:
            raise ValidationError(f"Sequence not finished (state={self.state.value})")
        report = SequenceReport(result=result, outcomes=list(self.outcomes), rounds=self.rounds)
        if self.state is SessionState.WON:
            self.wins += 1
            self.round_number += 1
            report.fainted = self.opponent.name
            logger.info("BattleWon", winner=self.party.active().name, opponent=self.opponent.name,
                        wins=self.wins, round=self.round_number)
        elif self.state is SessionState.ACTIVE_DEFEATED:
            fallen = self.party.active()
            report.fainted = fallen.name
            nxt = self.party.auto_switch_if_fainted()
            if nxt is not None:
                report.switched_to = nxt.name
                logger.info("AutoSwitch", fainted=fallen.name, next=nxt.name)
            else:
                report.game_over = True
                report.wins_before_reset = self.wins
                self.reset_counters()
                logger.info("PartyDefeated", streak=report.wins_before_reset)
        self._report = report
        return report

    def reset_counters(self):
        self.round_number = INITIAL_ROUND
        self.wins = INITIAL_WINS

    # ---------------- Party management -----------------
    def select(self, slot: int) -> bool:
        """Make ``slot`` the active combatant. False if it already is."""
        if self.busy:
            raise BattleBusyError("switch")
        if slot < 0 or slot >= len(self.party.members):
            raise ValidationError(f"No combatant in slot {slot + 1}")
        pick = self.party.members[slot]
        if pick.is_fainted():
            raise ValidationError(f"{pick.name} has fainted and can't battle!")
        if slot == self.party.active_index:
            return False
        prev = self.party.active()
        self.party.active_index = slot
        self.log.append(f"Go, {pick.name}! {prev.name}, come back!")
        return True

    def replace_opponent(self, opponent: Combatant):
        if self.busy:
            raise BattleBusyError("replace the opponent")
        self.opponent = opponent
        self.state = SessionState.IDLE


__all__ = ["BattleSession", "Party", "SessionState", "BattleResult", "SequenceReport"]
