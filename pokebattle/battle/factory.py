"""Factory helpers for constructing Combatant instances from creature records.

Two record shapes are understood:
- game records (what storage persists): name/hp/maxHp/attack/strength/types
- catalog records shaped like PokeAPI ``/pokemon`` payloads (stats, types, base_experience)
"""
from __future__ import annotations
from typing import Any, Dict, Mapping, NamedTuple

from .core import Combatant, DEFAULT_ATTACK, DEFAULT_STRENGTH, DEFAULT_TYPES, DEFAULT_MAX_HP, round_half_up

HP_SCALE = 1.5
MAX_BASE_EXPERIENCE = 608
DEFAULT_BASE_EXPERIENCE = 100
DEFAULT_BASE_STAT = 50

_KNOWN_KEYS = {"id", "name", "hp", "maxHp", "max_hp", "attack", "strength", "types"}


def strength_score(base_experience: int | None) -> int:
    """Scale base experience (~36..608) onto a 1..100 strength score."""
    be = base_experience or DEFAULT_BASE_EXPERIENCE
    return min(100, max(1, round_half_up(be / MAX_BASE_EXPERIENCE * 100)))


class StrengthTier(NamedTuple):
    name: str
    style: str


def strength_tier(strength: int | None) -> StrengthTier:
    s = strength or DEFAULT_STRENGTH
    if s >= 80: return StrengthTier("S", "bold magenta")
    if s >= 60: return StrengthTier("A", "bold red")
    if s >= 40: return StrengthTier("B", "bold yellow")
    if s >= 20: return StrengthTier("C", "green")
    return StrengthTier("D", "dim")


def _base_stat(data: Mapping[str, Any], stat: str) -> int:
    for entry in data.get("stats", []) or []:
        if (entry.get("stat") or {}).get("name") == stat:
            return int(entry.get("base_stat") or DEFAULT_BASE_STAT)
    return DEFAULT_BASE_STAT


def record_from_api(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a PokeAPI-shaped payload into a game record."""
    hp = round_half_up(_base_stat(data, "hp") * HP_SCALE)
    types = [t["type"]["name"] for t in sorted(data.get("types", []) or [], key=lambda t: t.get("slot", 0))]
    base_exp = data.get("base_experience") or DEFAULT_BASE_EXPERIENCE
    sprites = data.get("sprites") or {}
    name = str(data.get("name", "???"))
    return {
        "id": data.get("id"),
        "name": name[:1].upper() + name[1:],
        "hp": hp,
        "maxHp": hp,
        "attack": _base_stat(data, "attack"),
        "types": types or list(DEFAULT_TYPES),
        "sprite": sprites.get("front_default"),
        "spriteBack": sprites.get("back_default"),
        "baseExperience": base_exp,
        "strength": strength_score(base_exp),
    }


def combatant_from_record(record: Mapping[str, Any]) -> Combatant:
    max_hp = record.get("maxHp", record.get("max_hp")) or DEFAULT_MAX_HP
    hp = record.get("hp")
    types = record.get("types") or DEFAULT_TYPES
    if isinstance(types, str):
        types = [types]
    return Combatant(
        name=str(record.get("name") or "???"),
        max_hp=int(max_hp),
        current_hp=None if hp is None else int(hp),
        attack=record.get("attack") or DEFAULT_ATTACK,
        strength=record.get("strength") or DEFAULT_STRENGTH,
        types=tuple(types),
        species_id=record.get("id"),
        extra={k: v for k, v in record.items() if k not in _KNOWN_KEYS},
    )


def record_from_combatant(c: Combatant) -> Dict[str, Any]:
    rec: Dict[str, Any] = {
        "id": c.species_id,
        "name": c.name,
        "hp": c.current_hp,
        "maxHp": c.max_hp,
        "attack": c.attack,
        "strength": c.strength,
        "types": list(c.types),
    }
    rec.update(c.extra)
    return rec


def combatant_from_api(data: Mapping[str, Any]) -> Combatant:
    return combatant_from_record(record_from_api(data))


__all__ = [
    "combatant_from_record", "record_from_combatant", "record_from_api", "combatant_from_api",
    "strength_score", "strength_tier", "StrengthTier",
]
