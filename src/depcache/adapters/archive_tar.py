"""Tar archive adapter."""

import tarfile
from collections.abc import Iterator
from pathlib import Path

from ..core.errors import ArchiveError


class TarArchiveAdapter:
    """Tar implementation of ArchivePort.

    Archives store the directory contents under a single ``.`` root entry, so
    stripping one leading component restores them into any target directory.

    Extraction uses the ``tar`` filter: member paths may not escape the target,
    but symlink targets are kept as saved. Dependency trees rely on links
    such as a virtualenv's ``bin/python -> /usr/bin/python3``.
    """

    def create(self, source_dir: Path, archive: Path, compress: bool) -> None:
        mode = "w:gz" if compress else "w"
        try:
            with tarfile.open(archive, mode) as tar:
                tar.add(source_dir, arcname=".")
        except (tarfile.TarError, OSError) as e:
            raise ArchiveError(f"Failed to archive {source_dir}: {e}") from e

    def extract(self, archive: Path, target_dir: Path) -> None:
        try:
            with tarfile.open(archive, "r:*") as tar:
                members = list(_strip_leading_component(tar))
                tar.extractall(target_dir, members=members, filter="tar")
        except (tarfile.TarError, OSError) as e:
            raise ArchiveError(f"Failed to extract {archive}: {e}") from e


def _strip_component(name: str) -> str:
    parts = name.lstrip("/").split("/", 1)
    return parts[1] if len(parts) == 2 else ""


def _strip_leading_component(tar: tarfile.TarFile) -> Iterator[tarfile.TarInfo]:
    """Equivalent of ``tar --strip-components=1``."""
    for member in tar.getmembers():
        stripped = _strip_component(member.name)
        if not stripped:
            continue
        member.name = stripped
        if member.islnk():
            member.linkname = _strip_component(member.linkname)
        yield member
