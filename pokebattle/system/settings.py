from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional
from pokebattle.core.logging import logger

SETTINGS_FILENAME = ".pokebattle_settings.json"

# Seconds between battle messages at text_speed 2; 1 halves, 3 doubles.
PACE_SCALE = {1: 0.5, 2: 1.0, 3: 2.0}

@dataclass
class SettingsData:
    text_speed: int = 2            # 1 fast, 2 normal, 3 slow
    log_level: str = "WARN"        # DEBUG / INFO / WARN / ERROR
    autosave: bool = True          # Persist team/progress after every battle sequence
    debug: bool = False            # Verbose battle/debug prints
    seed: Optional[int] = None     # Fixed rng seed for reproducible battles

    def normalize(self):
        if self.text_speed not in {0,1,2,3}:
            self.text_speed = 2
        if self.log_level not in {"DEBUG","INFO","WARN","ERROR"}:
            self.log_level = "WARN"
        if self.seed is not None and not isinstance(self.seed, int):
            self.seed = None

    @property
    def pace(self) -> float:
        return PACE_SCALE.get(self.text_speed, 0.0)

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path

    @classmethod
    def _resolve_path(cls) -> Path:
        home = Path(os.path.expanduser("~"))
        if home.is_dir() and os.access(home, os.W_OK):
            return home / SETTINGS_FILENAME
        return Path.cwd() / SETTINGS_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        path = path or cls._resolve_path()
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                # Backfill missing fields (migration safe)
                field_names = {f.name for f in fields(SettingsData)}
                data = SettingsData(**{k: v for k, v in raw.items() if k in field_names})
                data.normalize()
                logger.debug("SettingsLoaded", path=str(path))
                return cls(data, path)
            except (OSError, ValueError, TypeError) as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        data = SettingsData()
        data.normalize()
        return cls(data, path)

    def save(self):
        try:
            self.path.write_text(json.dumps(asdict(self.data), indent=2))
            logger.debug("SettingsSaved", path=str(self.path))
        except OSError as e:
            logger.error("SettingsSaveFailed", error=str(e))

    def apply(self):
        """Push settings into process-wide collaborators (logger level)."""
        level = "DEBUG" if self.data.debug else self.data.log_level
        logger.set_level(level)  # type: ignore[arg-type]
