"""Hash port interface."""

from pathlib import Path
from typing import Protocol


class HashPort(Protocol):
    """Port for hash operations."""

    def sha256(self, path: Path) -> str:
        """Calculate the hex SHA256 of a file."""
        ...
