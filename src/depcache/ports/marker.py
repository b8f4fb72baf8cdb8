"""Marker port interface."""

from pathlib import Path
from typing import Protocol


class MarkerPort(Protocol):
    """Port for the local install markers."""

    def read(self, path: Path) -> str | None:
        """Return the recorded lockfile hash, or None if there is no marker."""
        ...

    def write(self, path: Path, lockfile_sha256: str) -> None:
        """Record the lockfile hash that produced the installed tree."""
        ...

    def clear(self, path: Path) -> None:
        """Remove the marker if present."""
        ...
