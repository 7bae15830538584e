import pytest

from pokebattle.battle.core import BattleCore, Combatant
from pokebattle.battle.service import BattleService
from pokebattle.battle.session import BattleResult
from pokebattle.core.errors import (BattleBusyError, CatalogError, InsufficientFundsError,
                                    ReplacementError, StorageError, ValidationError)
from pokebattle.system.save import Storage


class FixedRng:
    def random(self): return 0.5


def brute(name):
    return Combatant(name=name, max_hp=300, attack=200, strength=100, types=("normal",))


def weakling(name, hp=100):
    return Combatant(name=name, max_hp=100, current_hp=hp, attack=10, strength=1, types=("normal",))


class StubCatalog:
    """Hands out brutes for the team and weaklings as opponents unless told otherwise."""
    def __init__(self, team_factory=brute, foe_factory=weakling):
        self.team_factory = team_factory
        self.foe_factory = foe_factory
        self.fail = False
        self.drawn = 0

    def random_creature(self):
        if self.fail:
            raise CatalogError("catalog offline")
        self.drawn += 1
        return self.foe_factory(f"Wild{self.drawn}")

    def random_team(self, count=3):
        if self.fail:
            raise CatalogError("catalog offline")
        return [self.team_factory(f"Member{i + 1}") for i in range(count)]


@pytest.fixture
def storage(tmp_path):
    return Storage(tmp_path / "save.json")


def make_service(storage, catalog=None):
    svc = BattleService(catalog or StubCatalog(), storage, BattleCore(FixedRng()))
    svc.load()
    return svc


def test_fresh_load_draws_team_and_persists_it(storage):
    svc = BattleService(StubCatalog(), storage, BattleCore(FixedRng()))
    msgs = svc.load()
    assert msgs == ["Your new team: Member1, Member2, Member3! Battle against Wild1!"]
    assert [c.name for c in storage.load_team()] == ["Member1", "Member2", "Member3"]
    assert storage.load_enemy().name == "Wild1"

    again = BattleService(StubCatalog(), Storage(storage.path))
    assert again.load() == ["Go, Member1! Your opponent Wild1 awaits!"]


def test_victory_pays_out_and_brings_a_new_challenger(storage):
    svc = make_service(storage)
    report = svc.attack()
    assert report.result is BattleResult.VICTORY
    assert report.coins_earned == 35
    assert storage.coins() == 535
    assert report.replacement.name == "Wild2"
    assert svc.session.opponent is report.replacement
    assert not svc.pending_replacement
    assert report.messages[0] == "Member1 defeated Wild1! You earned 35 coins!"
    assert report.messages[-1] == "A wild Wild2 appeared! Ready to battle?"
    progress = storage.load_progress()
    assert (progress.round, progress.wins) == (2, 1)
    stats = storage.profile().stats
    assert (stats.totalBattles, stats.totalWins, stats.currentStreak, stats.bestStreak) == (1, 1, 1, 1)
    assert storage.load_enemy().name == "Wild2"


def test_failed_replacement_keeps_the_win_and_can_be_retried(storage):
    catalog = StubCatalog()
    svc = make_service(storage, catalog)
    catalog.fail = True
    with pytest.raises(ReplacementError) as exc:
        svc.attack()
    assert exc.value.retryable
    assert exc.value.report.result is BattleResult.VICTORY
    assert svc.session.wins == 1
    assert svc.pending_replacement
    assert svc.session.opponent.is_fainted()

    with pytest.raises(ReplacementError):
        svc.attack()
    assert svc.session.wins == 1

    catalog.fail = False
    new = svc.retry_replacement()
    assert svc.session.opponent is new
    assert not svc.pending_replacement
    assert svc.attack().result is BattleResult.VICTORY
    assert svc.session.wins == 2


def test_attack_fetches_pending_replacement_first(storage):
    catalog = StubCatalog()
    svc = make_service(storage, catalog)
    catalog.fail = True
    with pytest.raises(ReplacementError):
        svc.attack()
    catalog.fail = False
    report = svc.attack()
    assert report.result is BattleResult.VICTORY
    assert report.sequence.outcomes[0].defender == "Wild2"


def test_defeat_switches_then_ends_the_run(storage):
    catalog = StubCatalog(team_factory=weakling, foe_factory=brute)
    svc = make_service(storage, catalog)
    storage.save_progress(5, 4)
    svc.session.round_number, svc.session.wins = 5, 4

    first = svc.attack()
    assert first.result is BattleResult.DEFEAT
    assert first.messages == ["Member1 fainted! Go, Member2!", "Member2 is ready to battle!"]
    assert svc.session.party.active().name == "Member2"
    svc.attack()
    last = svc.attack()
    assert last.sequence.game_over
    assert last.messages[0] == "All your combatants have fainted! Your streak of 4 wins has ended."
    assert (svc.session.round_number, svc.session.wins) == (1, 0)
    progress = storage.load_progress()
    assert (progress.round, progress.wins) == (1, 0)
    stats = storage.profile().stats
    assert (stats.totalBattles, stats.totalWins, stats.currentStreak) == (1, 0, 0)
    assert storage.coins() == 500
    assert all(c.is_fainted() for c in storage.load_team())

    with pytest.raises(ValidationError):
        svc.attack()


def test_commands_rejected_during_a_sequence(storage):
    svc = BattleService(StubCatalog(), storage, BattleCore(FixedRng()))
    svc.load()
    svc.session.opponent = Combatant(name="Tank", max_hp=1000, types=("normal",))
    rejected = []

    def meddle(_outcome):
        for cmd in (lambda: svc.switch(1), lambda: svc.revive(0), svc.heal_all,
                    lambda: svc.replace_member(0), svc.reset, svc.attack, svc.retry_replacement):
            with pytest.raises(BattleBusyError):
                cmd()
            rejected.append(cmd)

    svc.attack(on_outcome=meddle)
    assert rejected
    assert svc.session.party.active_index == 0
    assert not svc.busy


def test_switch_messages(storage):
    svc = make_service(storage)
    assert svc.switch(0) == "Member1 is already in battle!"
    assert svc.switch(2) == "Go, Member3! Member1, come back!"
    with pytest.raises(ValidationError):
        svc.switch(5)


def test_revive_and_heal_cost_coins(storage):
    catalog = StubCatalog(team_factory=weakling, foe_factory=brute)
    svc = make_service(storage, catalog)
    svc.attack()
    fallen = svc.session.party.members[0]
    assert fallen.is_fainted()

    with pytest.raises(ValidationError):
        svc.revive(1)
    assert svc.revive(0) == "Member1 has been revived!"
    assert fallen.current_hp == fallen.max_hp
    assert storage.coins() == 450
    assert storage.load_team()[0].current_hp == 100

    with pytest.raises(ValidationError):
        svc.heal_all()
    svc.session.party.members[2].current_hp = 40
    assert svc.heal_all() == "All your combatants have been healed!"
    assert storage.coins() == 375
    assert all(m.current_hp == m.max_hp for m in svc.session.party.members)


def test_not_enough_coins(storage):
    catalog = StubCatalog(team_factory=weakling, foe_factory=brute)
    svc = make_service(storage, catalog)
    svc.attack()
    storage.spend_coins(460)
    with pytest.raises(InsufficientFundsError) as exc:
        svc.revive(0)
    assert (exc.value.needed, exc.value.available) == (50, 40)
    assert svc.session.party.members[0].is_fainted()
    assert storage.coins() == 40


def test_replace_member_and_refund_on_failure(storage):
    catalog = StubCatalog()
    svc = make_service(storage, catalog)
    assert svc.replace_member(1) == "Member2 was replaced by Wild2!"
    assert svc.session.party.members[1].name == "Wild2"
    assert storage.coins() == 400

    catalog.fail = True
    with pytest.raises(CatalogError):
        svc.replace_member(0)
    assert storage.coins() == 400
    assert svc.session.party.members[0].name == "Member1"


def test_reset_failure_leaves_game_untouched(storage):
    catalog = StubCatalog()
    svc = make_service(storage, catalog)
    svc.attack()
    before = svc.session
    catalog.fail = True
    with pytest.raises(CatalogError):
        svc.reset()
    assert svc.session is before
    assert not svc.busy
    assert storage.load_team() is not None
    assert storage.load_progress().wins == 1


def test_reset_starts_over(storage):
    svc = make_service(storage)
    svc.attack()
    msgs = svc.reset()
    assert msgs[0].startswith("New adventure begins! Your team: Member1, Member2, Member3.")
    assert (svc.session.round_number, svc.session.wins) == (1, 0)
    assert storage.load_progress().wins == 0
    assert storage.coins() == 535


def test_storage_failures_are_reported_not_raised(storage, monkeypatch):
    svc = make_service(storage)

    def broken(_doc):
        raise StorageError(str(storage.path), "disk full")

    monkeypatch.setattr(storage, "_commit", broken)
    report = svc.attack()
    assert report.result is BattleResult.VICTORY
    assert svc.session.wins == 1
    assert report.replacement is not None
    assert report.errors
    assert all("disk full" in e for e in report.errors)


def test_stalemate_report(storage):
    catalog = StubCatalog(foe_factory=lambda name: Combatant(name=name, types=("ghost",)))
    svc = make_service(storage, catalog)
    report = svc.attack()
    assert report.result is BattleResult.STALEMATE
    assert report.messages == [
        "Member1 and Wild1 are too evenly matched! The battle ended after 50 rounds."]
    assert (svc.session.round_number, svc.session.wins) == (1, 0)


def test_failed_progress_save_still_pays_rewards(storage, monkeypatch):
    svc = make_service(storage)

    def broken(round_number, wins):
        raise StorageError(str(storage.path), "disk full")

    monkeypatch.setattr(storage, "save_progress", broken)
    report = svc.attack()
    assert report.coins_earned == 35
    assert report.messages[0] == "Member1 defeated Wild1! You earned 35 coins!"
    assert storage.coins() == 535
    assert storage.profile().stats.totalWins == 1
    assert report.errors == [f"Failed to write {storage.path}: disk full"]
