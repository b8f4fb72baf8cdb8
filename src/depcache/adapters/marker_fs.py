"""Filesystem marker adapter."""

from pathlib import Path


class FsMarkerAdapter:
    """Stores install markers as one-line text files."""

    def read(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8").strip() or None
        except FileNotFoundError:
            return None

    def write(self, path: Path, lockfile_sha256: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"{lockfile_sha256}\n", encoding="utf-8")

    def clear(self, path: Path) -> None:
        path.unlink(missing_ok=True)
