"""Shared pytest fixtures for depcache tests."""

from __future__ import annotations

import io
import time
from collections.abc import Callable, Iterator, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from depcache.adapters import FsMarkerAdapter, Sha256Adapter, TarArchiveAdapter
from depcache.core import CacheConfig, CacheService, StorageError
from depcache.ports import CommandResult, ObjectHead

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class FakeStorage:
    """In-memory StoragePort keyed by ``bucket/key``."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, dict[str, str], datetime]] = {}
        self.put_calls: list[str] = []
        self.deleted: list[str] = []
        self.fail_head = False
        self.fail_get = False
        self.fail_put = False
        self.fail_delete: set[str] = set()
        self.get_delay = 0.0

    def add(self, full_key: str, data: bytes, last_modified: datetime = NOW) -> None:
        self.objects[full_key] = (data, {}, last_modified)

    def head(self, key: str) -> ObjectHead | None:
        if self.fail_head:
            raise StorageError("head failed")
        if key not in self.objects:
            return None
        data, metadata, modified = self.objects[key]
        return ObjectHead(
            key=key.split("/", 1)[1],
            size=len(data),
            etag="",
            last_modified=modified,
            metadata=metadata,
        )

    def list(self, prefix: str) -> Iterator[ObjectHead]:
        for full_key in sorted(self.objects):
            if full_key.startswith(prefix):
                data, metadata, modified = self.objects[full_key]
                yield ObjectHead(
                    key=full_key.split("/", 1)[1],
                    size=len(data),
                    etag="",
                    last_modified=modified,
                )

    def get(self, key: str) -> io.BytesIO:
        if self.get_delay:
            time.sleep(self.get_delay)
        if self.fail_get or key not in self.objects:
            raise StorageError(f"get failed: {key}")
        return io.BytesIO(self.objects[key][0])

    def put(self, key: str, body: Path, metadata: dict[str, str]) -> None:
        if self.fail_put:
            raise StorageError("put failed")
        self.put_calls.append(key)
        self.objects[key] = (body.read_bytes(), dict(metadata), NOW)

    def delete(self, key: str) -> None:
        if key in self.fail_delete:
            raise StorageError(f"delete failed: {key}")
        self.objects.pop(key, None)
        self.deleted.append(key)


class FixedClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current


class RecordingLogger:
    """LoggerPort that keeps every record for assertions."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []
        self.operations: list[dict[str, Any]] = []

    def debug(self, message: str, **kwargs: Any) -> None:
        self.records.append(("debug", message, kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self.records.append(("info", message, kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self.records.append(("warning", message, kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self.records.append(("error", message, kwargs))

    def log_operation(self, **kwargs: Any) -> None:
        self.operations.append(kwargs)

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m, _ in self.records if level is None or lvl == level]


class RecordingMetrics:
    def __init__(self) -> None:
        self.counters: dict[str, int] = {}

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        self.counters[name] = self.counters.get(name, 0) + value

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        pass

    def timing(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        pass


class FakeRunner:
    """RunnerPort returning scripted exit codes; runs optional hooks per command."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.returncodes: dict[tuple[str, ...], int | Callable[[], int]] = {}
        self.hooks: dict[tuple[str, ...], Callable[[Path], None]] = {}

    def run(self, command: Sequence[str], cwd: Path, quiet: bool = False) -> CommandResult:
        command = tuple(command)
        self.calls.append(command)
        hook = self.hooks.get(command)
        if hook is not None:
            hook(cwd)
        returncode = self.returncodes.get(command, 0)
        if callable(returncode):
            returncode = returncode()
        return CommandResult(returncode=returncode)


class RecordingDispatcher:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Path, Path]] = []

    def dispatch(self, cache_type: str, lockfile: Path, source_dir: Path) -> None:
        self.calls.append((cache_type, lockfile, source_dir))


@pytest.fixture()
def config(tmp_path: Path) -> CacheConfig:
    temp_dir = tmp_path / "tmp"
    temp_dir.mkdir()
    return CacheConfig(
        bucket="test-bucket",
        prefix="test-prefix",
        access_key_id="test-key",
        secret_access_key="test-secret",
        temp_dir=str(temp_dir),
    )


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture()
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def make_service(
    storage: FakeStorage, logger: RecordingLogger, metrics: RecordingMetrics, clock: FixedClock
) -> Callable[[CacheConfig], CacheService]:
    def factory(cfg: CacheConfig) -> CacheService:
        return CacheService(
            config=cfg,
            storage=storage,
            archiver=TarArchiveAdapter(),
            hasher=Sha256Adapter(),
            markers=FsMarkerAdapter(),
            clock=clock,
            logger=logger,
            metrics=metrics,
            tool_version="depcache/test",
        )

    return factory


@pytest.fixture()
def service(make_service: Callable[[CacheConfig], CacheService], config: CacheConfig) -> CacheService:
    return make_service(config)


@pytest.fixture()
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture()
def lockfile(tmp_path: Path) -> Path:
    path = tmp_path / "project" / "Gemfile.lock"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("gems: sinatra 3.0\n")
    return path


@pytest.fixture()
def gem_tree(tmp_path: Path) -> Path:
    source = tmp_path / "src_bundle"
    (source / "gems").mkdir(parents=True)
    (source / "gems" / "test.gem").write_bytes(b"gem payload \x00\x01")
    (source / "specifications").mkdir()
    (source / "specifications" / "test.gemspec").write_text("Gem::Specification.new\n")
    return source
