"""Battle service: the command layer between a front-end and the session.

Owns the current :class:`BattleSession` and talks to the two collaborators:
the creature catalog (new teams, replacement opponents) and storage (team,
opponent, progress, profile/coins). Commands are rejected while a sequence is
running; collaborator failures surface as errors without touching combat state.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .core import AttackOutcome, BattleCore, Combatant
from .session import BattleSession, BattleResult, Party, SequenceReport
from pokebattle.core.errors import (BattleBusyError, CatalogError, InsufficientFundsError,
                                    ReplacementError, StorageError, ValidationError)
from pokebattle.core.logging import logger
from pokebattle.data.catalog import CreatureCatalog, TEAM_SIZE
from pokebattle.system.save import COSTS, REWARDS, Storage


@dataclass
class BattleReport:
    sequence: SequenceReport
    messages: List[str] = field(default_factory=list)
    coins_earned: int = 0
    replacement: Optional[Combatant] = None
    errors: List[str] = field(default_factory=list)

    @property
    def result(self) -> BattleResult:
        return self.sequence.result


class BattleService:
    def __init__(self, catalog: CreatureCatalog, storage: Storage, core: Optional[BattleCore] = None, *,
                 autosave: bool = True):
        self.catalog = catalog
        self.storage = storage
        self.core = core or BattleCore()
        self.autosave = autosave
        self.session: Optional[BattleSession] = None
        self.loading = False
        self.pending_replacement = False

    # ---------------- State helpers -----------------
    @property
    def busy(self) -> bool:
        return self.loading or (self.session is not None and self.session.busy)

    def require_session(self) -> BattleSession:
        if self.session is None:
            raise ValidationError("No battle loaded")
        return self.session

    def _guard(self, command: str):
        if self.busy:
            raise BattleBusyError(command)

    def _snapshot(self, report: Optional[BattleReport] = None):
        """Persist team & opponent; failures are reported, combat state is already final."""
        if not self.autosave or self.session is None:
            return
        try:
            self.storage.save_team(self.session.party.members)
            self.storage.save_enemy(self.session.opponent)
        except StorageError as e:
            logger.error("SnapshotFailed", error=str(e))
            if report is None:
                raise
            report.errors.append(str(e))

    def _persist(self, report: BattleReport, write: Callable[..., object], *args) -> bool:
        """Run one storage write; a failure lands in ``report.errors`` and the rest still run."""
        try:
            write(*args)
        except StorageError as e:
            logger.error("SaveFailed", action=write.__name__, error=str(e))
            report.errors.append(str(e))
            return False
        return True

    # ---------------- Loading -----------------
    def load(self) -> List[str]:
        """Restore the saved game or draw a fresh team and opponent."""
        self._guard("load")
        self.loading = True
        try:
            team = self.storage.load_team()
            new_team = not team or len(team) != TEAM_SIZE
            if new_team:
                team = self.catalog.random_team(TEAM_SIZE)
            enemy = self.storage.load_enemy()
            new_enemy = enemy is None
            if new_enemy:
                enemy = self.catalog.random_creature()
            progress = self.storage.load_progress()
            first = Party(team).first_available()
            self.session = BattleSession(Party(team, first or 0), enemy, self.core,
                                         round_number=progress.round, wins=progress.wins)
            self.pending_replacement = enemy.is_fainted()
            if new_team or new_enemy:
                self._snapshot()
        finally:
            self.loading = False
        logger.info("GameLoaded", new_team=new_team, new_enemy=new_enemy, round=progress.round, wins=progress.wins)
        if new_team:
            names = ", ".join(c.name for c in team)
            return [f"Your new team: {names}! Battle against {enemy.name}!"]
        active = self.session.party.active()
        if new_enemy:
            return [f"Go, {active.name}! A wild {enemy.name} appeared!"]
        return [f"Go, {active.name}! Your opponent {enemy.name} awaits!"]

    # ---------------- Attack -----------------
    def attack(self, on_outcome: Optional[Callable[[AttackOutcome], None]] = None) -> BattleReport:
        """Run one battle sequence and apply its consequences."""
        self._guard("attack")
        session = self.require_session()
        if self.pending_replacement:
            self.retry_replacement()
        sequence = session.run(on_outcome)
        report = BattleReport(sequence=sequence)
        if sequence.result is BattleResult.VICTORY:
            self._on_victory(report)
        elif sequence.result is BattleResult.DEFEAT:
            self._on_defeat(report)
        else:
            report.messages.append(
                f"{session.party.active().name} and {session.opponent.name} are too evenly matched! "
                f"The battle ended after {sequence.rounds} rounds.")
            self._snapshot(report)
        return report

    def _on_victory(self, report: BattleReport):
        session = self.require_session()
        winner = session.party.active()
        beaten = session.opponent
        self._persist(report, self.storage.save_progress, session.round_number, session.wins)
        if self._persist(report, self.storage.record_battle_result, True):
            report.coins_earned += REWARDS["WIN_BATTLE"]
        if self._persist(report, self.storage.add_coins, REWARDS["DEFEAT_POKEMON"]):
            report.coins_earned += REWARDS["DEFEAT_POKEMON"]
        report.messages.append(f"{winner.name} defeated {beaten.name}! You earned {report.coins_earned} coins!")
        self._snapshot(report)
        self.pending_replacement = True
        report.messages.append("A new challenger approaches...")
        try:
            report.replacement = self._replace_opponent(report)
        except ReplacementError as e:
            e.report = report
            raise
        report.messages.append(f"A wild {report.replacement.name} appeared! Ready to battle?")

    def _on_defeat(self, report: BattleReport):
        session = self.require_session()
        seq = report.sequence
        if not seq.game_over:
            nxt = session.party.active()
            report.messages.append(f"{seq.fainted} fainted! Go, {nxt.name}!")
            report.messages.append(f"{nxt.name} is ready to battle!")
            self._snapshot(report)
            return
        report.messages.append(
            f"All your combatants have fainted! Your streak of {seq.wins_before_reset} wins has ended.")
        self._persist(report, self.storage.record_battle_result, False)
        self._persist(report, self.storage.reset_progress)
        self._snapshot(report)
        report.messages.append("Revive your team, or reset for a new one.")

    def retry_replacement(self) -> Combatant:
        """Fetch a new opponent after a win. Safe to call again after a failure."""
        self._guard("look for a new challenger")
        return self._replace_opponent()

    def _replace_opponent(self, report: Optional[BattleReport] = None) -> Combatant:
        session = self.require_session()
        try:
            new_enemy = self.catalog.random_creature()
        except CatalogError as e:
            self.pending_replacement = True
            logger.warn("ReplacementFetchFailed", error=str(e))
            raise ReplacementError("Failed to find a new challenger. Try again.") from e
        session.replace_opponent(new_enemy)
        self.pending_replacement = False
        self._snapshot(report)
        logger.info("OpponentReplaced", opponent=new_enemy.name)
        return new_enemy

    # ---------------- Party commands -----------------
    def switch(self, slot: int) -> str:
        self._guard("switch")
        session = self.require_session()
        prev = session.party.active()
        if not session.select(slot):
            return f"{prev.name} is already in battle!"
        return f"Go, {session.party.active().name}! {prev.name}, come back!"

    def reset(self) -> List[str]:
        """Start over with a new team, opponent and counters."""
        self._guard("reset")
        self.loading = True
        try:
            team = self.catalog.random_team(TEAM_SIZE)
            enemy = self.catalog.random_creature()
            self.storage.clear_team()
            self.storage.clear_enemy()
            self.storage.reset_progress()
            self.session = BattleSession(Party(team), enemy, self.core)
            self.pending_replacement = False
            self._snapshot()
        finally:
            self.loading = False
        logger.info("GameReset", team=[c.name for c in team], opponent=enemy.name)
        names = ", ".join(c.name for c in team)
        return [f"New adventure begins! Your team: {names}. Battle against {enemy.name}!"]

    def _member(self, slot: int) -> Combatant:
        members = self.require_session().party.members
        if slot < 0 or slot >= len(members):
            raise ValidationError(f"No combatant in slot {slot + 1}")
        return members[slot]

    def _pay(self, cost_key: str):
        cost = COSTS[cost_key]
        if not self.storage.spend_coins(cost):
            raise InsufficientFundsError(cost, self.storage.coins())

    def revive(self, slot: int) -> str:
        self._guard("revive")
        member = self._member(slot)
        if not member.is_fainted():
            raise ValidationError(f"{member.name} hasn't fainted.")
        self._pay("REVIVE")
        member.restore()
        self._snapshot()
        return f"{member.name} has been revived!"

    def heal_all(self) -> str:
        self._guard("heal")
        members = self.require_session().party.members
        if all(m.current_hp == m.max_hp for m in members):
            raise ValidationError("Your team is already at full health.")
        self._pay("HEAL_ALL")
        for m in members:
            m.restore()
        self._snapshot()
        return "All your combatants have been healed!"

    def replace_member(self, slot: int) -> str:
        self._guard("replace")
        old = self._member(slot)
        self._pay("NEW_POKEMON")
        try:
            new = self.catalog.random_creature()
        except CatalogError:
            self.storage.add_coins(COSTS["NEW_POKEMON"])
            raise
        self.require_session().party.members[slot] = new
        self._snapshot()
        return f"{old.name} was replaced by {new.name}!"


__all__ = ["BattleService", "BattleReport"]
