"""SHA256 hash adapter."""

import hashlib
from pathlib import Path


class Sha256Adapter:
    """SHA256 implementation of HashPort."""

    def sha256(self, path: Path) -> str:
        sha = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                sha.update(chunk)
        return sha.hexdigest()
