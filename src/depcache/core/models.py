"""Core domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

HASH_LENGTH = 16

STACKS = {
    "bundle": "ruby",
    "npm": "node",
    "pip": "python",
    "cargo": "rust",
    "gomod": "go",
}


def stack_for(cache_type: str) -> str:
    """Storage namespace for a cache type; unknown types are their own stack."""
    return STACKS.get(cache_type, cache_type)


@dataclass(frozen=True)
class CacheKey:
    """Content-addressed location of one cache archive."""

    bucket: str
    prefix: str
    cache_type: str
    lockfile_hash: str
    extension: str

    @property
    def stack(self) -> str:
        return stack_for(self.cache_type)

    @property
    def key(self) -> str:
        parts = [p for p in (self.prefix, self.stack) if p]
        parts.append(f"{self.cache_type}-{self.lockfile_hash}.{self.extension}")
        return "/".join(parts)

    @property
    def full_key(self) -> str:
        return f"{self.bucket}/{self.key}"

    @property
    def url(self) -> str:
        return f"s3://{self.full_key}"


class CacheOutcome(str, Enum):
    """Result of a cache operation."""

    DISABLED = "disabled"
    NO_LOCKFILE = "no_lockfile"
    NO_SOURCE = "no_source"
    MISS = "miss"
    RESTORED = "restored"
    RESTORE_FAILED = "restore_failed"
    SAVED = "saved"
    ALREADY_CACHED = "already_cached"
    SAVE_FAILED = "save_failed"


class ProbeResult(str, Enum):
    """Typed result of an existence probe."""

    FOUND = "found"
    MISSING = "missing"
    ERROR = "error"


class InstallOutcome(str, Enum):
    """How an ecosystem's dependencies became usable."""

    RESTORED = "restored"
    UP_TO_DATE = "up_to_date"
    INSTALLED = "installed"


@dataclass
class RestoreSummary:
    """Summary of a restore operation."""

    cache_type: str
    outcome: CacheOutcome
    key: str | None = None
    lockfile_hash: str | None = None
    archive_size: int | None = None
    error: str | None = None

    @property
    def restored(self) -> bool:
        return self.outcome is CacheOutcome.RESTORED

    def to_dict(self) -> dict[str, Any]:
        return {
            "cache_type": self.cache_type,
            "outcome": self.outcome.value,
            "restored": self.restored,
            "key": self.key,
            "lockfile_hash": self.lockfile_hash,
            "archive_size": self.archive_size,
            "error": self.error,
        }


@dataclass
class SaveSummary:
    """Summary of a save operation."""

    cache_type: str
    outcome: CacheOutcome
    key: str | None = None
    lockfile_hash: str | None = None
    archive_size: int | None = None
    error: str | None = None

    @property
    def saved(self) -> bool:
        return self.outcome in (CacheOutcome.SAVED, CacheOutcome.ALREADY_CACHED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cache_type": self.cache_type,
            "outcome": self.outcome.value,
            "saved": self.saved,
            "key": self.key,
            "lockfile_hash": self.lockfile_hash,
            "archive_size": self.archive_size,
            "error": self.error,
        }


@dataclass
class PruneResult:
    """Result of pruning a cache type's namespace."""

    cache_type: str
    prefix: str
    cutoff: datetime | None = None
    scanned: int = 0
    deleted: list[str] = field(default_factory=list)
    bytes_freed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cache_type": self.cache_type,
            "prefix": self.prefix,
            "cutoff": self.cutoff.isoformat() if self.cutoff else None,
            "scanned": self.scanned,
            "deleted_count": len(self.deleted),
            "deleted": self.deleted,
            "bytes_freed": self.bytes_freed,
            "errors": self.errors,
        }


@dataclass
class InstallSummary:
    """Summary of one ecosystem's install-or-restore run."""

    ecosystem: str
    outcome: InstallOutcome
    restore: RestoreSummary | None = None
    installed: bool = False
    verified: bool = False
    save_dispatched: bool = False
    duration: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "ecosystem": self.ecosystem,
            "outcome": self.outcome.value,
            "restore": self.restore.to_dict() if self.restore else None,
            "installed": self.installed,
            "verified": self.verified,
            "save_dispatched": self.save_dispatched,
            "duration": round(self.duration, 3),
        }
