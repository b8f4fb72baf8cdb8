"""Archive port interface."""

from pathlib import Path
from typing import Protocol


class ArchivePort(Protocol):
    """Port for packing and unpacking dependency directories."""

    def create(self, source_dir: Path, archive: Path, compress: bool) -> None:
        """Archive the contents of source_dir under a single root component."""
        ...

    def extract(self, archive: Path, target_dir: Path) -> None:
        """Extract archive into target_dir, stripping one leading component."""
        ...
