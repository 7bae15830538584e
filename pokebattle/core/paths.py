"""
Centralized path helpers (works with the current flat layout).
"""
from __future__ import annotations
import os
from pathlib import Path

# This file lives at pokebattle/core/paths.py
PACKAGE = Path(__file__).resolve().parents[1]
DATA = PACKAGE / "data"
CREATURES = DATA / "creatures.json"

SAVE_DIR_NAME = ".pokebattle"
SAVE_FILENAME = "save.json"

def save_dir() -> Path:
    home = Path(os.path.expanduser("~"))
    if home.is_dir() and os.access(home, os.W_OK):
        return home / SAVE_DIR_NAME
    return Path.cwd() / SAVE_DIR_NAME

def default_save_path() -> Path:
    return save_dir() / SAVE_FILENAME
