"""Wiring of adapters into services."""

from ..adapters import (
    FsMarkerAdapter,
    LoggingMetricsAdapter,
    NoopMetricsAdapter,
    S3StorageAdapter,
    Sha256Adapter,
    StdLoggerAdapter,
    SubprocessRunnerAdapter,
    TarArchiveAdapter,
    UtcClockAdapter,
)
from ..core import CacheConfig, CacheService, InstallOrchestrator, SaveDispatcher
from ..ports import MetricsPort


def create_metrics(metrics_type: str) -> MetricsPort:
    if metrics_type == "noop":
        return NoopMetricsAdapter()
    if metrics_type == "logging":
        return LoggingMetricsAdapter()
    raise ValueError(f"Unknown metrics backend: {metrics_type!r} (expected 'noop' or 'logging')")


def create_service(config: CacheConfig | None = None) -> CacheService:
    """Create service with wired adapters."""
    if config is None:
        config = CacheConfig.from_env()

    logger = StdLoggerAdapter(level=config.log_level)
    for warning in config.warnings:
        logger.warning(warning)

    return CacheService(
        config=config,
        storage=S3StorageAdapter.from_config(config),
        archiver=TarArchiveAdapter(),
        hasher=Sha256Adapter(),
        markers=FsMarkerAdapter(),
        clock=UtcClockAdapter(),
        logger=logger,
        metrics=create_metrics(config.metrics_type),
    )


def create_orchestrator(service: CacheService, dispatcher: SaveDispatcher) -> InstallOrchestrator:
    return InstallOrchestrator(
        cache=service,
        runner=SubprocessRunnerAdapter(),
        dispatcher=dispatcher,
    )
