"""
Error types shared by the statistics core, loaders and CLI.
"""

from typing import Iterable


class InvalidInput(ValueError):
    """Raised when a statistic is undefined for the given input."""


class DataPathNotFoundError(FileNotFoundError):
    """Raised when none of the candidate data paths exist."""

    def __init__(self, description: str, tried: Iterable[str]):
        self.tried = [str(p) for p in tried]
        lines = "\n".join(f"  - {p}" for p in self.tried)
        super().__init__(f"Could not find {description}. Tried:\n{lines}")
