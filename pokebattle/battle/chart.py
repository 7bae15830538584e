"""Type chart & effectiveness resolution.

Only the attacker's primary (first) type is used offensively; a dual-type
attacker's second type never contributes. Every defending type multiplies in,
so a single immunity (0) zeroes the whole matchup.
"""
from __future__ import annotations
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Sequence

_CHART: dict[str, dict[str, float]] = {
    "normal":  {"rock": 0.5, "ghost": 0.0, "steel": 0.5},
    "fire":    {"fire": 0.5, "water": 0.5, "grass": 2.0, "ice": 2.0, "bug": 2.0, "rock": 0.5, "dragon": 0.5, "steel": 2.0},
    "water":   {"fire": 2.0, "water": 0.5, "grass": 0.5, "ground": 2.0, "rock": 2.0, "dragon": 0.5},
    "electric":{"water": 2.0,"electric": 0.5,"grass": 0.5,"ground": 0.0,"flying": 2.0,"dragon": 0.5},
    "grass":   {"fire": 0.5, "water": 2.0, "grass": 0.5, "poison": 0.5, "ground": 2.0, "flying": 0.5, "bug": 0.5, "rock": 2.0, "dragon": 0.5, "steel": 0.5},
    "ice":     {"fire": 0.5,"water": 0.5,"grass": 2.0,"ice": 0.5,"ground": 2.0,"flying": 2.0,"dragon": 2.0,"steel": 0.5},
    "fighting":{"normal": 2.0,"ice": 2.0,"poison": 0.5,"flying": 0.5,"psychic": 0.5,"bug": 0.5,"rock": 2.0,"ghost": 0.0,"dark": 2.0,"steel": 2.0,"fairy": 0.5},
    "poison":  {"grass": 2.0,"poison": 0.5,"ground": 0.5,"rock": 0.5,"ghost": 0.5,"steel": 0.0,"fairy": 2.0},
    "ground":  {"fire": 2.0,"electric": 2.0,"grass": 0.5,"poison": 2.0,"flying": 0.0,"bug": 0.5,"rock": 2.0,"steel": 2.0},
    "flying":  {"electric": 0.5,"grass": 2.0,"fighting": 2.0,"bug": 2.0,"rock": 0.5,"steel": 0.5},
    "psychic": {"fighting": 2.0,"poison": 2.0,"psychic": 0.5,"dark": 0.0,"steel": 0.5},
    "bug":     {"fire": 0.5,"grass": 2.0,"fighting": 0.5,"poison": 0.5,"flying": 0.5,"psychic": 2.0,"ghost": 0.5,"dark": 2.0,"steel": 0.5,"fairy": 0.5},
    "rock":    {"fire": 2.0,"ice": 2.0,"fighting": 0.5,"ground": 0.5,"flying": 2.0,"bug": 2.0,"steel": 0.5},
    "ghost":   {"normal": 0.0,"psychic": 2.0,"ghost": 2.0,"dark": 0.5},
    "dragon":  {"dragon": 2.0,"steel": 0.5,"fairy": 0.0},
    "dark":    {"fighting": 0.5,"psychic": 2.0,"ghost": 2.0,"dark": 0.5,"fairy": 0.5},
    "steel":   {"fire": 0.5,"water": 0.5,"electric": 0.5,"ice": 2.0,"rock": 2.0,"steel": 0.5,"fairy": 2.0},
    "fairy":   {"fire": 0.5,"fighting": 2.0,"poison": 0.5,"dragon": 2.0,"dark": 2.0,"steel": 0.5},
}

TYPE_CHART: Mapping[str, Mapping[str, float]] = MappingProxyType(
    {atk: MappingProxyType(row) for atk, row in _CHART.items()}
)
KNOWN_TYPES: tuple[str, ...] = tuple(_CHART)

_EMPTY_ROW: Mapping[str, float] = MappingProxyType({})


class EffectivenessLabel(str, Enum):
    NONE = "none"
    SUPER = "super"
    NOT_VERY = "not-very"
    NEUTRAL = "neutral"


_MESSAGES = {
    EffectivenessLabel.NONE: "It has no effect...",
    EffectivenessLabel.SUPER: "It's super effective!",
    EffectivenessLabel.NOT_VERY: "It's not very effective...",
    EffectivenessLabel.NEUTRAL: "",
}


def lookup(attacking: str, defending: str) -> float:
    """Single chart cell; absent pairs are neutral."""
    return TYPE_CHART.get(attacking.lower(), _EMPTY_ROW).get(defending.lower(), 1.0)


def effectiveness(attacker_types: Sequence[str], defender_types: Sequence[str]) -> float:
    if not attacker_types:
        return 1.0
    row = TYPE_CHART.get(attacker_types[0].lower(), _EMPTY_ROW)
    mult = 1.0
    for t in defender_types:
        mult *= row.get(t.lower(), 1.0)
    return mult


def classify(multiplier: float) -> EffectivenessLabel:
    if multiplier == 0:
        return EffectivenessLabel.NONE
    if multiplier >= 2:
        return EffectivenessLabel.SUPER
    if multiplier < 1:
        return EffectivenessLabel.NOT_VERY
    return EffectivenessLabel.NEUTRAL


def describe_effectiveness(multiplier: float) -> str:
    return _MESSAGES[classify(multiplier)]


class Matchup(str, Enum):
    ADVANTAGE = "advantage"
    MUTUAL = "mutual"
    DISADVANTAGE = "disadvantage"
    NEUTRAL = "neutral"


def matchup(own_types: Sequence[str], foe_types: Sequence[str]) -> Matchup:
    """Overall matchup of one combatant against another, looking both ways."""
    offense = effectiveness(own_types, foe_types)
    defense = effectiveness(foe_types, own_types)
    if offense >= 2 and defense < 2:
        return Matchup.ADVANTAGE
    if offense >= 2 and defense >= 2:
        return Matchup.MUTUAL
    if offense < 1 or defense >= 2:
        return Matchup.DISADVANTAGE
    if offense >= 1.5:
        return Matchup.ADVANTAGE
    return Matchup.NEUTRAL


__all__ = [
    "TYPE_CHART", "KNOWN_TYPES", "EffectivenessLabel", "Matchup",
    "lookup", "effectiveness", "classify", "describe_effectiveness", "matchup",
]
