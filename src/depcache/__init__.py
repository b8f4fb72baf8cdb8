"""depcache - Lockfile-keyed dependency cache backed by S3."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("depcache")
except PackageNotFoundError:
    # Package is not installed, so version is not available
    __version__ = "0.0.0+unknown"

from .app.factory import create_orchestrator, create_service  # noqa: E402
from .core import (  # noqa: E402
    CacheConfig,
    CacheOutcome,
    CacheService,
    Ecosystem,
    InstallFailedError,
    InstallOrchestrator,
)

__all__ = [
    "CacheConfig",
    "CacheOutcome",
    "CacheService",
    "Ecosystem",
    "InstallFailedError",
    "InstallOrchestrator",
    "__version__",
    "create_orchestrator",
    "create_service",
]
