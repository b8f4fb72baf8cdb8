"""Adapters for depcache ports."""

from .archive_tar import TarArchiveAdapter
from .clock_utc import UtcClockAdapter
from .hash_sha256 import Sha256Adapter
from .logger_std import StdLoggerAdapter
from .marker_fs import FsMarkerAdapter
from .metrics import LoggingMetricsAdapter, NoopMetricsAdapter
from .runner_subprocess import SubprocessRunnerAdapter
from .storage_s3 import S3StorageAdapter

__all__ = [
    "FsMarkerAdapter",
    "LoggingMetricsAdapter",
    "NoopMetricsAdapter",
    "S3StorageAdapter",
    "Sha256Adapter",
    "StdLoggerAdapter",
    "SubprocessRunnerAdapter",
    "TarArchiveAdapter",
    "UtcClockAdapter",
]
