"""Install-or-restore orchestration per ecosystem."""

from pathlib import Path

from ..ports import RunnerPort
from .dispatch import SaveDispatcher
from .ecosystems import Ecosystem, detect_ecosystems, format_command
from .errors import InstallFailedError, LockfileNotFoundError
from .models import CacheOutcome, InstallOutcome, InstallSummary
from .service import CacheService


class InstallOrchestrator:
    """Makes an ecosystem's dependency tree usable, from cache when possible.

    The cache only ever speeds things up: every cache failure falls back to a
    real install, and only a failing installer raises (InstallFailedError).
    """

    def __init__(self, cache: CacheService, runner: RunnerPort, dispatcher: SaveDispatcher):
        self.cache = cache
        self.runner = runner
        self.dispatcher = dispatcher
        self.logger = cache.logger
        self.markers = cache.markers
        self.clock = cache.clock

    def bootstrap(
        self, project_dir: Path, ecosystems: list[Ecosystem] | None = None
    ) -> list[InstallSummary]:
        """Run ensure() for every ecosystem detected in project_dir."""
        project_dir = Path(project_dir)
        self.log_cache_status()

        if ecosystems is None:
            ecosystems = detect_ecosystems(project_dir)
        if not ecosystems:
            self.logger.info("No supported dependency manifests found", project=str(project_dir))
        return [self.ensure(ecosystem, project_dir) for ecosystem in ecosystems]

    def log_cache_status(self) -> None:
        config = self.cache.config
        if self.cache.is_enabled():
            self.logger.info(
                "S3 cache enabled",
                bucket=f"s3://{config.bucket}/",
                endpoint=config.endpoint_url or "aws",
            )
        else:
            self.logger.info("S3 cache disabled (credentials not configured)")

    def ensure(self, ecosystem: Ecosystem, project_dir: Path) -> InstallSummary:
        """Restore or install ecosystem's dependencies in project_dir."""
        project_dir = Path(project_dir)
        start_time = self.clock.now()
        name = ecosystem.cache_type
        lockfile = ecosystem.lockfile_path(project_dir)
        target_dir = ecosystem.target_path(project_dir)
        marker = ecosystem.marker_path(project_dir)

        has_lockfile = lockfile.is_file()
        restore = None
        if has_lockfile:
            restore = self.cache.restore(name, lockfile, target_dir, marker_path=marker)
            if restore.restored:
                self.logger.info(f"{name} dependencies restored from S3 cache")
            elif restore.outcome in (CacheOutcome.MISS, CacheOutcome.RESTORE_FAILED):
                self.logger.info(f"Cache miss for {name} dependencies - will install fresh")
        else:
            self.logger.warning(f"{ecosystem.lockfile} not found - first run will be slower")
            if ecosystem.lockfile_hint:
                self.logger.info(ecosystem.lockfile_hint)

        summary = InstallSummary(ecosystem=name, outcome=InstallOutcome.INSTALLED, restore=restore)

        if self.is_usable(ecosystem, project_dir):
            summary.verified = True
            if restore is not None and restore.restored:
                summary.outcome = InstallOutcome.RESTORED
            else:
                summary.outcome = InstallOutcome.UP_TO_DATE
                self.logger.info(f"{name} dependencies up to date (using local install)")
            summary.duration = (self.clock.now() - start_time).total_seconds()
            return summary

        self.install(ecosystem, project_dir)
        summary.installed = True
        self.logger.info(f"{name} dependencies installed")

        if has_lockfile:
            if self._smoke_check(ecosystem, project_dir):
                summary.verified = True
                self.markers.write(marker, self.cache.full_hash(lockfile))
                if self.cache.is_enabled():
                    self.dispatcher.dispatch(name, lockfile, target_dir)
                    summary.save_dispatched = True
            else:
                self.logger.warning(
                    f"{name} dependencies failed verification after install; not caching"
                )

        summary.duration = (self.clock.now() - start_time).total_seconds()
        return summary

    def is_usable(self, ecosystem: Ecosystem, project_dir: Path) -> bool:
        """True if the marker matches the lockfile AND the smoke check passes.

        The marker can outlive the files it describes, so it is never
        sufficient on its own.
        """
        lockfile = ecosystem.lockfile_path(project_dir)
        marker = ecosystem.marker_path(project_dir)
        try:
            current = self.cache.full_hash(lockfile)
        except LockfileNotFoundError:
            return False

        recorded = self.markers.read(marker)
        if recorded != current:
            self.logger.debug(
                "Install marker does not match lockfile",
                marker=str(marker),
                recorded=recorded,
                current=current,
            )
            return False

        if not self._smoke_check(ecosystem, project_dir):
            self.logger.info(
                f"{ecosystem.cache_type} install marker is current but dependencies are unusable"
            )
            return False
        return True

    def install(self, ecosystem: Ecosystem, project_dir: Path) -> None:
        """Run the ecosystem's install commands; raise InstallFailedError on failure."""
        self.markers.clear(ecosystem.marker_path(project_dir))
        self.logger.info(f"Installing {ecosystem.cache_type} dependencies...")
        for command in ecosystem.install_commands:
            self.logger.debug("Running install command", command=format_command(command))
            result = self.runner.run(command, cwd=project_dir)
            if not result.ok:
                self.logger.error(
                    f"{format_command(command)} failed",
                    returncode=result.returncode,
                )
                raise InstallFailedError(
                    ecosystem.cache_type, format_command(command), result.returncode
                )

    def _smoke_check(self, ecosystem: Ecosystem, project_dir: Path) -> bool:
        if ecosystem.verify_command is None:
            return True
        result = self.runner.run(ecosystem.verify_command, cwd=project_dir, quiet=True)
        if not result.ok:
            self.logger.debug(
                "Smoke check failed",
                command=format_command(ecosystem.verify_command),
                returncode=result.returncode,
                output=result.output.strip()[-500:],
            )
        return result.ok
