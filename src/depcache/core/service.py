"""Core CacheService orchestration."""

import concurrent.futures
import os
import tempfile
import threading
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, TypeVar

from .. import __version__
from ..ports import (
    ArchivePort,
    ClockPort,
    HashPort,
    LoggerPort,
    MarkerPort,
    MetricsPort,
    StoragePort,
)
from .config import CacheConfig
from .errors import ArchiveError, CacheTimeoutError, LockfileNotFoundError, StorageError
from .models import (
    HASH_LENGTH,
    CacheKey,
    CacheOutcome,
    ProbeResult,
    PruneResult,
    RestoreSummary,
    SaveSummary,
    stack_for,
)

T = TypeVar("T")

MARKER_NAME = ".installed"


class CacheService:
    """Restore, save and prune lockfile-keyed dependency archives."""

    def __init__(
        self,
        config: CacheConfig,
        storage: StoragePort,
        archiver: ArchivePort,
        hasher: HashPort,
        markers: MarkerPort,
        clock: ClockPort,
        logger: LoggerPort,
        metrics: MetricsPort,
        tool_version: str | None = None,
    ):
        """Initialize service with ports.

        Args:
            tool_version: Version string for object metadata. If None, uses package __version__.
        """
        if tool_version is None:
            tool_version = f"depcache/{__version__}"
        self.config = config
        self.storage = storage
        self.archiver = archiver
        self.hasher = hasher
        self.markers = markers
        self.clock = clock
        self.logger = logger
        self.metrics = metrics
        self.tool_version = tool_version

    def is_enabled(self) -> bool:
        """Check whether caching is configured. Never touches the network."""
        return self.config.is_enabled

    def full_hash(self, lockfile: Path) -> str:
        """Full SHA256 of the lockfile contents, as stored in markers."""
        lockfile = Path(lockfile)
        if not lockfile.is_file():
            raise LockfileNotFoundError(f"Lockfile not found: {lockfile}")
        return self.hasher.sha256(lockfile)

    def lockfile_hash(self, lockfile: Path) -> str:
        """Truncated SHA256 of the lockfile contents, used in cache keys."""
        return self.full_hash(lockfile)[:HASH_LENGTH]

    def cache_key(self, cache_type: str, lockfile_hash: str) -> CacheKey:
        """Derive the object key for a cache type and lockfile hash."""
        return CacheKey(
            bucket=self.config.bucket or "",
            prefix=self.config.prefix,
            cache_type=cache_type,
            lockfile_hash=lockfile_hash,
            extension=self.config.archive_extension,
        )

    def probe(self, full_key: str) -> ProbeResult:
        """Check whether an object exists without fetching it."""
        self.logger.debug("Checking cache existence", key=full_key)
        try:
            head = self._with_timeout(f"HEAD {full_key}", self.storage.head, full_key)
        except StorageError as e:
            self.logger.warning("Cache existence check failed", key=full_key, error=str(e))
            return ProbeResult.ERROR
        return ProbeResult.FOUND if head is not None else ProbeResult.MISSING

    def exists(self, full_key: str) -> bool:
        return self.probe(full_key) is ProbeResult.FOUND

    def restore(
        self,
        cache_type: str,
        lockfile: Path,
        target_dir: Path,
        marker_path: Path | None = None,
    ) -> RestoreSummary:
        """Populate target_dir from the cache entry for lockfile.

        A miss is an expected outcome. Failures after a hit are reported as
        RESTORE_FAILED so the caller installs fresh instead.
        """
        lockfile = Path(lockfile)
        target_dir = Path(target_dir)

        if not self.is_enabled():
            self.logger.debug("Caching disabled (missing S3 config or credentials)")
            return RestoreSummary(cache_type=cache_type, outcome=CacheOutcome.DISABLED)
        if not lockfile.is_file():
            self.logger.debug("Lockfile not found", lockfile=str(lockfile))
            return RestoreSummary(cache_type=cache_type, outcome=CacheOutcome.NO_LOCKFILE)

        start_time = self.clock.now()
        full_sha = self.full_hash(lockfile)
        key = self.cache_key(cache_type, full_sha[:HASH_LENGTH])
        summary = RestoreSummary(
            cache_type=cache_type,
            outcome=CacheOutcome.MISS,
            key=key.full_key,
            lockfile_hash=key.lockfile_hash,
        )

        self.logger.debug("Attempting to restore from cache", key=key.url)
        if self.probe(key.full_key) is not ProbeResult.FOUND:
            self.logger.info("Cache miss", type=cache_type, hash=key.lockfile_hash)
            self.metrics.increment("depcache.restore.miss")
            self._finish("restore", summary.outcome, key, start_time, {})
            return summary

        self.logger.info("Cache hit, downloading", key=key.url)
        tmp_path = self._temp_archive(cache_type, key)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            self._with_timeout(f"GET {key.full_key}", self._download, key.full_key, tmp_path)
            summary.archive_size = tmp_path.stat().st_size
            self.logger.debug("Extracting cache", archive=str(tmp_path), target=str(target_dir))
            self.archiver.extract(tmp_path, target_dir)
            marker = Path(marker_path) if marker_path else target_dir / MARKER_NAME
            self.markers.write(marker, full_sha)
        except (StorageError, ArchiveError, OSError) as e:
            self.logger.warning("Failed to restore cache", key=key.url, error=str(e))
            self.metrics.increment("depcache.restore.failed")
            summary.outcome = CacheOutcome.RESTORE_FAILED
            summary.error = str(e)
            self._finish("restore", summary.outcome, key, start_time, {})
            return summary
        finally:
            tmp_path.unlink(missing_ok=True)

        summary.outcome = CacheOutcome.RESTORED
        self.logger.info("Cache restored", type=cache_type, target=str(target_dir))
        self.metrics.increment("depcache.restore.hit")
        self._finish("restore", summary.outcome, key, start_time, {"archive": summary.archive_size})
        return summary

    def save(self, cache_type: str, lockfile: Path, source_dir: Path) -> SaveSummary:
        """Upload source_dir as the cache entry for lockfile.

        Entries are immutable: an existing key is treated as already saved.
        Failures are reported in the summary, never raised.
        """
        lockfile = Path(lockfile)
        source_dir = Path(source_dir)

        if not self.is_enabled():
            self.logger.debug("Caching disabled (missing S3 config or credentials)")
            return SaveSummary(cache_type=cache_type, outcome=CacheOutcome.DISABLED)
        if not lockfile.is_file():
            self.logger.debug("Lockfile not found", lockfile=str(lockfile))
            return SaveSummary(cache_type=cache_type, outcome=CacheOutcome.NO_LOCKFILE)
        if not source_dir.is_dir() or not any(source_dir.iterdir()):
            self.logger.debug("Source directory missing or empty", source=str(source_dir))
            return SaveSummary(cache_type=cache_type, outcome=CacheOutcome.NO_SOURCE)

        start_time = self.clock.now()
        full_sha = self.full_hash(lockfile)
        key = self.cache_key(cache_type, full_sha[:HASH_LENGTH])
        summary = SaveSummary(
            cache_type=cache_type,
            outcome=CacheOutcome.SAVE_FAILED,
            key=key.full_key,
            lockfile_hash=key.lockfile_hash,
        )

        probe = self.probe(key.full_key)
        if probe is ProbeResult.FOUND:
            self.logger.info("Cache already exists", key=key.url)
            self.metrics.increment("depcache.save.skipped")
            summary.outcome = CacheOutcome.ALREADY_CACHED
            self._finish("save", summary.outcome, key, start_time, {})
            return summary
        if probe is ProbeResult.ERROR:
            # Unknown state: never overwrite an entry that might exist
            summary.error = "existence check failed"
            self.metrics.increment("depcache.save.failed")
            self._finish("save", summary.outcome, key, start_time, {})
            return summary

        self.logger.info("Saving to cache", key=key.url)
        tmp_path = self._temp_archive(cache_type, key)
        try:
            self.logger.debug("Creating archive", source=str(source_dir), archive=str(tmp_path))
            self.archiver.create(source_dir, tmp_path, self.config.compression)
            summary.archive_size = tmp_path.stat().st_size
            metadata = {
                "tool": self.tool_version,
                "lockfile-sha256": full_sha,
                "cache-type": cache_type,
                "created-at": self.clock.now().isoformat(),
            }
            self._with_timeout(
                f"PUT {key.full_key}", self.storage.put, key.full_key, tmp_path, metadata
            )
        except (StorageError, ArchiveError, OSError) as e:
            self.logger.warning("Failed to upload cache", key=key.url, error=str(e))
            self.metrics.increment("depcache.save.failed")
            summary.error = str(e)
            self._finish("save", summary.outcome, key, start_time, {})
            return summary
        finally:
            tmp_path.unlink(missing_ok=True)

        summary.outcome = CacheOutcome.SAVED
        self.logger.info("Cache saved", key=key.url, size=summary.archive_size)
        self.metrics.increment("depcache.save.saved")
        self.metrics.gauge("depcache.save.archive_size", summary.archive_size)
        self._finish("save", summary.outcome, key, start_time, {"archive": summary.archive_size})
        return summary

    def prune(self, cache_type: str, days_to_keep: int = 30) -> PruneResult:
        """Delete entries of cache_type last modified at or before the cutoff.

        Lists the whole namespace of the cache type; run it as maintenance,
        not on every install.
        """
        if not self.is_enabled():
            self.logger.debug("Caching disabled")
            return PruneResult(cache_type=cache_type, prefix="")

        start_time = self.clock.now()
        parts = [p for p in (self.config.prefix, stack_for(cache_type)) if p]
        key_prefix = "/".join(parts) + f"/{cache_type}-"
        bucket = self.config.bucket
        cutoff = start_time - timedelta(days=days_to_keep)
        result = PruneResult(cache_type=cache_type, prefix=key_prefix, cutoff=cutoff)

        self.logger.info(
            "Pruning caches", type=cache_type, days_to_keep=days_to_keep, prefix=key_prefix
        )
        try:
            objects = self._with_timeout(
                f"LIST {bucket}/{key_prefix}",
                lambda: list(self.storage.list(f"{bucket}/{key_prefix}")),
            )
        except StorageError as e:
            self.logger.error(f"Failed to list {bucket}/{key_prefix}: {e}")
            result.errors.append(f"Failed to list {key_prefix}: {e}")
            return result

        for obj in objects:
            result.scanned += 1
            if obj.last_modified > cutoff:
                continue
            try:
                self._with_timeout(f"DELETE {obj.key}", self.storage.delete, f"{bucket}/{obj.key}")
            except StorageError as e:
                result.errors.append(f"Failed to delete {obj.key}: {e}")
                self.logger.error(f"Failed to delete {obj.key}: {e}")
                continue
            result.deleted.append(obj.key)
            result.bytes_freed += obj.size
            self.logger.debug("Deleted old cache", key=f"s3://{bucket}/{obj.key}")

        duration = (self.clock.now() - start_time).total_seconds()
        self.logger.info(
            "Prune complete",
            type=cache_type,
            scanned=result.scanned,
            deleted=len(result.deleted),
            failed=len(result.errors),
            duration=duration,
        )
        self.metrics.gauge("depcache.prune.deleted", len(result.deleted))
        self.metrics.timing("depcache.prune.duration", duration)
        return result

    def _download(self, full_key: str, dest: Path) -> None:
        # Open before the request so a timed-out call cannot recreate a removed temp file
        with open(dest, "r+b") as f:
            stream = self.storage.get(full_key)
            try:
                for chunk in iter(lambda: stream.read(65536), b""):
                    f.write(chunk)
            finally:
                close = getattr(stream, "close", None)
                if close is not None:
                    close()

    def _temp_archive(self, cache_type: str, key: CacheKey) -> Path:
        """Create a unique temp file so concurrent invocations never share a path."""
        fd, name = tempfile.mkstemp(
            prefix=f"cache-{cache_type}-{key.lockfile_hash}-",
            suffix=f".{key.extension}",
            dir=self.config.temp_dir,
        )
        os.close(fd)
        return Path(name)

    def _with_timeout(self, description: str, fn: Callable[..., T], *args: Any) -> T:
        """Run a network call with a hard deadline.

        The call runs on a daemon thread: a request still stalled after the
        deadline is abandoned and never keeps the interpreter alive at exit.
        """
        future: concurrent.futures.Future[T] = concurrent.futures.Future()

        def run() -> None:
            try:
                future.set_result(fn(*args))
            except BaseException as e:  # re-raised by future.result()
                future.set_exception(e)

        threading.Thread(target=run, name="depcache-io", daemon=True).start()
        try:
            return future.result(timeout=self.config.timeout)
        except concurrent.futures.TimeoutError as e:
            raise CacheTimeoutError(
                f"{description} timed out after {self.config.timeout}s"
            ) from e

    def _finish(
        self,
        op: str,
        outcome: CacheOutcome,
        key: CacheKey,
        start_time: datetime,
        sizes: dict[str, int | None],
    ) -> None:
        duration = (self.clock.now() - start_time).total_seconds()
        self.logger.log_operation(
            op=op,
            key=key.full_key,
            cache_type=key.cache_type,
            sizes={k: v for k, v in sizes.items() if v is not None},
            durations={"total": duration},
            outcome=outcome.value,
        )
        self.metrics.timing(f"depcache.{op}.duration", duration)
