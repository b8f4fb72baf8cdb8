"""Storage port interface."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Protocol


@dataclass
class ObjectHead:
    """S3 object metadata."""

    key: str
    size: int
    etag: str
    last_modified: datetime
    metadata: dict[str, str] = field(default_factory=dict)


class StoragePort(Protocol):
    """Port for object storage operations.

    Keys are passed as ``bucket/key`` strings.
    """

    def head(self, key: str) -> ObjectHead | None:
        """Get object metadata, or None if the object does not exist."""
        ...

    def list(self, prefix: str) -> Iterator[ObjectHead]:
        """List objects under ``bucket/prefix``."""
        ...

    def get(self, key: str) -> BinaryIO:
        """Get object content as a stream."""
        ...

    def put(self, key: str, body: Path, metadata: dict[str, str]) -> None:
        """Upload a local file as a single object."""
        ...

    def delete(self, key: str) -> None:
        """Delete object."""
        ...
