"""Fire-and-forget dispatch of cache saves."""

import concurrent.futures
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from .models import SaveSummary

if TYPE_CHECKING:
    from ..ports import LoggerPort
    from .service import CacheService


class SaveDispatcher(Protocol):
    """Starts a cache save without waiting for it."""

    def dispatch(self, cache_type: str, lockfile: Path, source_dir: Path) -> object:
        ...


class ThreadSaveDispatcher:
    """Runs saves on a background thread pool; results are only logged."""

    def __init__(self, service: "CacheService", max_workers: int = 2):
        self.service = service
        self.logger = service.logger
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="depcache-save"
        )
        self.pending: list[concurrent.futures.Future[SaveSummary]] = []

    def dispatch(
        self, cache_type: str, lockfile: Path, source_dir: Path
    ) -> "concurrent.futures.Future[SaveSummary]":
        future = self._executor.submit(self._save, cache_type, lockfile, source_dir)
        self.pending.append(future)
        self.logger.debug("Background cache save started", type=cache_type)
        return future

    def wait(self, timeout: float | None = None) -> None:
        """Block until dispatched saves finish (for shutdown and tests)."""
        concurrent.futures.wait(self.pending, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _save(self, cache_type: str, lockfile: Path, source_dir: Path) -> SaveSummary:
        try:
            summary = self.service.save(cache_type, lockfile, source_dir)
        except Exception as e:
            self.logger.error(f"Background cache save crashed: {e}")
            raise
        if summary.saved:
            self.logger.info(
                f"{cache_type} dependencies cached to S3 (background)",
                outcome=summary.outcome.value,
            )
        else:
            self.logger.warning(
                f"Background cache save for {cache_type} did not complete",
                outcome=summary.outcome.value,
                error=summary.error,
            )
        return summary


class DetachedProcessSaveDispatcher:
    """Runs each save in a detached ``depcache save`` process.

    The child runs in its own session, so the caller can exit or move on
    while the upload continues.
    """

    def __init__(
        self,
        logger: "LoggerPort",
        python: str = sys.executable,
        log_path: Path | None = None,
    ):
        self.logger = logger
        self.python = python
        self.log_path = log_path

    def command(self, cache_type: str, lockfile: Path, source_dir: Path) -> list[str]:
        return [
            self.python,
            "-m",
            "depcache",
            "save",
            cache_type,
            str(Path(lockfile).resolve()),
            str(Path(source_dir).resolve()),
        ]

    def dispatch(
        self, cache_type: str, lockfile: Path, source_dir: Path
    ) -> subprocess.Popen[bytes] | None:
        command = self.command(cache_type, lockfile, source_dir)
        log = open(self.log_path, "ab") if self.log_path else None
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=log if log is not None else subprocess.DEVNULL,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            self.logger.warning("Failed to start background cache save", error=str(e))
            return None
        finally:
            if log is not None:
                log.close()

        self.logger.info("Background cache save started", type=cache_type, pid=process.pid)
        return process
