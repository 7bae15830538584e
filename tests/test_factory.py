import pytest

from pokebattle.battle.core import Combatant
from pokebattle.battle.factory import (combatant_from_api, combatant_from_record, record_from_api,
                                       record_from_combatant, strength_score, strength_tier)

BULBASAUR = {
    "id": 1,
    "name": "bulbasaur",
    "base_experience": 64,
    "stats": [
        {"base_stat": 45, "stat": {"name": "hp"}},
        {"base_stat": 49, "stat": {"name": "attack"}},
    ],
    "types": [
        {"slot": 2, "type": {"name": "poison"}},
        {"slot": 1, "type": {"name": "grass"}},
    ],
    "sprites": {"front_default": "front.png", "back_default": "back.png"},
}


def test_record_from_api():
    rec = record_from_api(BULBASAUR)
    assert rec["name"] == "Bulbasaur"
    assert rec["hp"] == rec["maxHp"] == 68
    assert rec["attack"] == 49
    assert rec["types"] == ["grass", "poison"]
    assert rec["strength"] == 11
    assert rec["sprite"] == "front.png" and rec["spriteBack"] == "back.png"


def test_sparse_payload_gets_defaults():
    rec = record_from_api({"id": 999, "name": "missingno"})
    assert rec["hp"] == 75
    assert rec["attack"] == 50
    assert rec["types"] == ["normal"]
    assert rec["baseExperience"] == 100
    assert rec["strength"] == 16


@pytest.mark.parametrize("base_exp,score", [(36, 6), (608, 100), (900, 100), (1, 1), (None, 16), (304, 50)])
def test_strength_score(base_exp, score):
    assert strength_score(base_exp) == score


@pytest.mark.parametrize("strength,tier", [(100, "S"), (80, "S"), (79, "A"), (60, "A"), (45, "B"),
                                           (20, "C"), (19, "D"), (1, "D"), (None, "B")])
def test_strength_tier(strength, tier):
    assert strength_tier(strength).name == tier


def test_combatant_from_api_primary_type_first():
    c = combatant_from_api(BULBASAUR)
    assert c.types == ("grass", "poison")
    assert c.current_hp == c.max_hp == 68
    assert c.species_id == 1
    assert c.extra["sprite"] == "front.png"


def test_record_round_trip_keeps_damage_and_extras():
    c = combatant_from_api(BULBASAUR)
    c.current_hp = 12
    rec = record_from_combatant(c)
    assert rec["hp"] == 12 and rec["maxHp"] == 68
    back = combatant_from_record(rec)
    assert back == c


def test_record_accepts_snake_case_max_hp_and_clamps():
    c = combatant_from_record({"name": "Odd", "max_hp": 40, "hp": 90})
    assert c.max_hp == 40
    assert c.current_hp == 40
    assert c.attack == 50 and c.strength == 50


def test_bare_string_type_is_one_type():
    assert combatant_from_record({"name": "Flare", "types": "fire"}).types == ("fire",)
    assert combatant_from_record({"name": "Flare", "types": ""}).types == ("normal",)
    assert Combatant(name="Flare", types="Fire").types == ("fire",)
