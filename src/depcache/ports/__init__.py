"""Port interfaces for depcache."""

from .archive import ArchivePort
from .clock import ClockPort
from .hash import HashPort
from .logger import LoggerPort
from .marker import MarkerPort
from .metrics import MetricsPort
from .runner import CommandResult, RunnerPort
from .storage import ObjectHead, StoragePort

__all__ = [
    "ArchivePort",
    "ClockPort",
    "CommandResult",
    "HashPort",
    "LoggerPort",
    "MarkerPort",
    "MetricsPort",
    "ObjectHead",
    "RunnerPort",
    "StoragePort",
]
