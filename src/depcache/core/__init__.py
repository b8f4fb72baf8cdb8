"""Core domain logic."""

from .config import CacheConfig
from .dispatch import DetachedProcessSaveDispatcher, SaveDispatcher, ThreadSaveDispatcher
from .ecosystems import BUILTIN_ECOSYSTEMS, Ecosystem, detect_ecosystems, get_ecosystem
from .errors import (
    ArchiveError,
    CacheTimeoutError,
    DepCacheError,
    InstallFailedError,
    LockfileNotFoundError,
    StorageError,
)
from .models import (
    HASH_LENGTH,
    CacheKey,
    CacheOutcome,
    InstallOutcome,
    InstallSummary,
    ProbeResult,
    PruneResult,
    RestoreSummary,
    SaveSummary,
    stack_for,
)
from .orchestrator import InstallOrchestrator
from .service import CacheService

__all__ = [
    "ArchiveError",
    "BUILTIN_ECOSYSTEMS",
    "CacheConfig",
    "CacheKey",
    "CacheOutcome",
    "CacheService",
    "CacheTimeoutError",
    "DepCacheError",
    "DetachedProcessSaveDispatcher",
    "Ecosystem",
    "HASH_LENGTH",
    "InstallFailedError",
    "InstallOrchestrator",
    "InstallOutcome",
    "InstallSummary",
    "LockfileNotFoundError",
    "ProbeResult",
    "PruneResult",
    "RestoreSummary",
    "SaveDispatcher",
    "SaveSummary",
    "StorageError",
    "ThreadSaveDispatcher",
    "detect_ecosystems",
    "get_ecosystem",
    "stack_for",
]
