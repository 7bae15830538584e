"""
Error classes for clearer exception sources.
"""
from __future__ import annotations

class PokeBattleError(Exception):
    pass


class ValidationError(PokeBattleError):
    pass

class BattleBusyError(PokeBattleError):
    """Raised when a command arrives while a battle sequence is running."""
    def __init__(self, command: str):
        super().__init__(f"Can't {command} during battle!")
        self.command = command

class CatalogError(PokeBattleError):
    pass

class ReplacementError(CatalogError):
    """The opponent was defeated but no replacement could be fetched. Retry the fetch."""
    retryable = True

    def __init__(self, message: str, report=None):
        super().__init__(message)
        self.report = report  # the finished battle the failed fetch followed, if any

class StorageError(PokeBattleError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to write {path}: {detail}")
        self.path = path
        self.detail = detail

class InsufficientFundsError(PokeBattleError):
    def __init__(self, needed: int, available: int):
        super().__init__(f"Not enough coins! Need {needed}, have {available}")
        self.needed = needed
        self.available = available
