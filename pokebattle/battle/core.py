"""Combat resolution core: combatants, damage, attack execution & turn order.

All randomness flows through ``BattleCore.rng`` so a seeded ``random.Random``
(or any object exposing ``random()``) makes every roll reproducible.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple, Dict, Any
import math
import random

from .chart import effectiveness, classify, describe_effectiveness, EffectivenessLabel
from pokebattle.core.logging import logger

CRIT_CHANCE = 0.10
CRIT_MULTIPLIER = 1.5
RANDOM_RANGE = (0.85, 1.15)        # [lo, hi)
STRENGTH_RANGE = (0.8, 1.5)        # [lo, hi]
DAMAGE_SCALE = 0.4
MAX_ROUNDS = 50
TURN_ORDER_JITTER = (0.0, 20.0)    # [lo, hi)

DEFAULT_ATTACK = 50
DEFAULT_STRENGTH = 50
DEFAULT_TYPES: Tuple[str, ...] = ("normal",)
DEFAULT_MAX_HP = 100


@dataclass(frozen=True)
class Tuning:
    crit_chance: float = CRIT_CHANCE
    crit_multiplier: float = CRIT_MULTIPLIER
    random_range: Tuple[float, float] = RANDOM_RANGE
    strength_range: Tuple[float, float] = STRENGTH_RANGE
    damage_scale: float = DAMAGE_SCALE
    max_rounds: int = MAX_ROUNDS
    turn_order_jitter: Tuple[float, float] = TURN_ORDER_JITTER
    default_attack: int = DEFAULT_ATTACK
    default_strength: int = DEFAULT_STRENGTH
    default_types: Tuple[str, ...] = DEFAULT_TYPES


@dataclass
class Combatant:
    name: str
    max_hp: int = DEFAULT_MAX_HP
    current_hp: Optional[int] = None  # None => full health
    attack: Optional[int] = DEFAULT_ATTACK
    strength: Optional[int] = DEFAULT_STRENGTH
    types: Tuple[str, ...] = DEFAULT_TYPES
    species_id: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)  # catalog fields the engine ignores (sprites, base_experience)

    def __post_init__(self):
        self.max_hp = max(1, int(self.max_hp))
        if self.current_hp is None:
            self.current_hp = self.max_hp
        self.current_hp = max(0, min(int(self.current_hp), self.max_hp))
        if isinstance(self.types, str):
            self.types = (self.types,)
        self.types = tuple(t.lower() for t in (self.types or ())) or DEFAULT_TYPES

    def is_fainted(self) -> bool:
        return (self.current_hp or 0) <= 0

    def restore(self):
        """Full heal; used by revive/heal-all outside of battle."""
        self.current_hp = self.max_hp


@dataclass
class DamageResult:
    damage: int
    is_critical: bool
    label: EffectivenessLabel
    type_multiplier: float
    strength_multiplier: float
    random_factor: float
    message: str = ""


@dataclass
class AttackOutcome:
    attacker: str
    defender: str
    damage: int
    label: EffectivenessLabel
    is_critical: bool
    defender_fainted: bool
    is_player_attack: bool
    type_multiplier: float = 1.0
    message: str = ""

    def describe(self) -> str:
        text = f"{self.attacker} attacks {self.defender} for {self.damage} damage!"
        if self.message:
            text += f" {self.message}"
        if self.defender_fainted:
            text += f" {self.defender} fainted!"
        return text


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


class BattleCore:
    def __init__(self, rng: Optional[random.Random] = None, tuning: Optional[Tuning] = None):
        self.rng = rng or random.Random()
        self.tuning = tuning or Tuning()

    # ------------------------------------------------------------------
    # Input defaulting
    # ------------------------------------------------------------------
    def _attack_of(self, c: Combatant) -> int:
        return c.attack if c.attack else self.tuning.default_attack

    def _strength_of(self, c: Combatant) -> int:
        return c.strength if c.strength else self.tuning.default_strength

    def _types_of(self, c: Combatant) -> Tuple[str, ...]:
        return c.types or self.tuning.default_types

    # ------------------------------------------------------------------
    # Mechanics
    # ------------------------------------------------------------------
    def strength_multiplier(self, strength: int) -> float:
        lo, hi = self.tuning.strength_range
        return lo + (strength / 100) * (hi - lo)

    def roll_random_factor(self) -> float:
        lo, hi = self.tuning.random_range
        return lo + self.rng.random() * (hi - lo)

    def roll_crit(self) -> bool:
        return self.rng.random() < self.tuning.crit_chance

    def calc_damage(self, attacker: Combatant, defender: Combatant) -> DamageResult:
        t = self.tuning
        strength_mult = self.strength_multiplier(self._strength_of(attacker))
        type_mult = effectiveness(self._types_of(attacker), self._types_of(defender))
        rand = self.roll_random_factor()
        crit = self.roll_crit()
        crit_mult = t.crit_multiplier if crit else 1.0
        raw = round_half_up(self._attack_of(attacker) * t.damage_scale * strength_mult * type_mult * rand * crit_mult)
        dmg = 0 if type_mult == 0 else max(1, raw)
        msg = describe_effectiveness(type_mult)
        if crit and dmg > 0:
            msg = ("Critical hit! " + msg).strip()
        return DamageResult(
            damage=dmg,
            is_critical=crit,
            label=classify(type_mult),
            type_multiplier=type_mult,
            strength_multiplier=strength_mult,
            random_factor=rand,
            message=msg,
        )

    def execute_attack(self, attacker: Combatant, defender: Combatant, is_player_attack: bool) -> AttackOutcome:
        """Roll damage and apply it to the defender. Not idempotent: each call deals damage."""
        res = self.calc_damage(attacker, defender)
        defender.current_hp = max(0, (defender.current_hp or 0) - res.damage)
        fainted = defender.current_hp <= 0
        logger.debug("Attack", attacker=attacker.name, defender=defender.name, damage=res.damage,
                     crit=res.is_critical, mult=res.type_multiplier, hp=defender.current_hp)
        return AttackOutcome(
            attacker=attacker.name,
            defender=defender.name,
            damage=res.damage,
            label=res.label,
            is_critical=res.is_critical,
            defender_fainted=fainted,
            is_player_attack=is_player_attack,
            type_multiplier=res.type_multiplier,
            message=res.message,
        )

    def speed(self, c: Combatant) -> float:
        lo, hi = self.tuning.turn_order_jitter
        return self._strength_of(c) + lo + self.rng.random() * (hi - lo)

    def determine_first(self, a: Combatant, b: Combatant) -> bool:
        """True if ``a`` acts first this round; ties go to ``a``."""
        return self.speed(a) >= self.speed(b)


__all__ = [
    "Combatant", "Tuning", "DamageResult", "AttackOutcome", "BattleCore", "round_half_up",
    "CRIT_CHANCE", "CRIT_MULTIPLIER", "RANDOM_RANGE", "STRENGTH_RANGE", "DAMAGE_SCALE",
    "MAX_ROUNDS", "TURN_ORDER_JITTER",
]
