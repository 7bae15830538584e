"""Creature catalog: supplies fresh combatants for teams and opponents.

``LocalCatalog`` serves PokeAPI-shaped records from a bundled JSON file; any
object satisfying ``CreatureCatalog`` can stand in (tests use stubs that fail
on demand).
"""
from __future__ import annotations
import json
import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from pokebattle.battle.core import Combatant
from pokebattle.battle.factory import combatant_from_api
from pokebattle.core.errors import CatalogError
from pokebattle.core.logging import logger
from pokebattle.core.paths import CREATURES

TEAM_SIZE = 3


class CreatureCatalog(Protocol):
    def random_creature(self) -> Combatant: ...
    def random_team(self, count: int = TEAM_SIZE) -> List[Combatant]: ...


class LocalCatalog:
    def __init__(self, path: Path = CREATURES, rng: Optional[random.Random] = None):
        self.path = Path(path)
        self.rng = rng or random.Random()
        self._records: Optional[Dict[int, Dict[str, Any]]] = None

    def _load(self) -> Dict[int, Dict[str, Any]]:
        if self._records is not None:
            return self._records
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CatalogError(f"Failed to load {self.path}: {e}") from e
        records = {int(r["id"]): r for r in raw if "id" in r}
        if not records:
            raise CatalogError(f"No creatures in {self.path}")
        logger.debug("CatalogLoaded", path=str(self.path), count=len(records))
        self._records = records
        return records

    def ids(self) -> List[int]:
        return sorted(self._load())

    def get(self, id_or_name: int | str) -> Combatant:
        records = self._load()
        if isinstance(id_or_name, int) or str(id_or_name).isdigit():
            rec = records.get(int(id_or_name))
        else:
            wanted = str(id_or_name).lower()
            rec = next((r for r in records.values() if r.get("name") == wanted), None)
        if rec is None:
            raise CatalogError(f"Creature not found: {id_or_name}")
        return combatant_from_api(rec)

    def random_creature(self) -> Combatant:
        sid = self.rng.choice(self.ids())
        logger.debug("CatalogRandom", id=sid)
        return self.get(sid)

    def random_team(self, count: int = TEAM_SIZE) -> List[Combatant]:
        ids = self.ids()
        if count > len(ids):
            raise CatalogError(f"Catalog holds {len(ids)} creatures, {count} requested")
        picked = self.rng.sample(ids, count)
        logger.debug("CatalogTeam", ids=picked)
        return [self.get(i) for i in picked]


__all__ = ["CreatureCatalog", "LocalCatalog", "TEAM_SIZE"]
