"""CLI main entry point."""

import dataclasses
import json
import sys
from pathlib import Path
from typing import Any

import click

from ...core import (
    BUILTIN_ECOSYSTEMS,
    CacheConfig,
    CacheService,
    DetachedProcessSaveDispatcher,
    Ecosystem,
    InstallFailedError,
    LockfileNotFoundError,
    SaveDispatcher,
    ThreadSaveDispatcher,
)
from ...core.ecosystems import parse_command
from ..factory import create_orchestrator, create_service


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2))


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--verbose", is_flag=True, help="Verbose cache logging (CACHE_VERBOSE)")
@click.pass_context
def cli(ctx: click.Context, debug: bool, verbose: bool) -> None:
    """depcache - Lockfile-keyed dependency cache backed by S3."""
    overrides: dict[str, Any] = {}
    if verbose:
        overrides["verbose"] = True
    if debug or verbose:
        overrides["log_level"] = "DEBUG"
    ctx.obj = create_service(CacheConfig.from_env(**overrides))


@cli.command()
@click.pass_obj
def status(service: CacheService) -> None:
    """Show cache configuration; exit 1 when caching is disabled."""
    config = service.config
    _echo_json(
        {
            "enabled": service.is_enabled(),
            "bucket": config.bucket,
            "prefix": config.prefix,
            "region": config.region,
            "endpoint_url": config.endpoint_url,
            "compression": config.compression,
            "verbose": config.verbose,
            "timeout": config.timeout,
        }
    )
    if not service.is_enabled():
        sys.exit(1)


@cli.command("hash")
@click.argument("lockfile", type=click.Path(path_type=Path))
@click.option("--full", is_flag=True, help="Print the full SHA256 instead of the 16-character key hash")
@click.pass_obj
def hash_(service: CacheService, lockfile: Path, full: bool) -> None:
    """Print the cache hash of a lockfile."""
    try:
        click.echo(service.full_hash(lockfile) if full else service.lockfile_hash(lockfile))
    except LockfileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("cache_type")
@click.argument("lockfile", type=click.Path(path_type=Path))
@click.pass_obj
def key(service: CacheService, cache_type: str, lockfile: Path) -> None:
    """Print the object key a lockfile maps to."""
    try:
        click.echo(service.cache_key(cache_type, service.lockfile_hash(lockfile)).url)
    except LockfileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _default_marker(cache_type: str, lockfile: Path, target_dir: Path) -> Path | None:
    """Built-in marker location, but only when TARGET_DIR is the built-in layout.

    Otherwise None, which puts the marker inside TARGET_DIR.
    """
    ecosystem = BUILTIN_ECOSYSTEMS.get(cache_type)
    if ecosystem is None:
        return None
    project_dir = lockfile.parent
    if ecosystem.target_path(project_dir).resolve() != target_dir.resolve():
        return None
    return ecosystem.marker_path(project_dir)


@cli.command()
@click.argument("cache_type")
@click.argument("lockfile", type=click.Path(path_type=Path))
@click.argument("target_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option("--marker", type=click.Path(dir_okay=False, path_type=Path), help="Install marker path")
@click.pass_obj
def restore(
    service: CacheService,
    cache_type: str,
    lockfile: Path,
    target_dir: Path,
    marker: Path | None,
) -> None:
    """Restore TARGET_DIR from cache; exit 1 on miss."""
    if marker is None:
        marker = _default_marker(cache_type, lockfile, target_dir)
    summary = service.restore(cache_type, lockfile, target_dir, marker_path=marker)
    _echo_json(summary.to_dict())
    if not summary.restored:
        sys.exit(1)


@cli.command()
@click.argument("cache_type")
@click.argument("lockfile", type=click.Path(path_type=Path))
@click.argument("source_dir", type=click.Path(file_okay=False, path_type=Path))
@click.pass_obj
def save(service: CacheService, cache_type: str, lockfile: Path, source_dir: Path) -> None:
    """Save SOURCE_DIR to cache; exit 1 unless saved or already cached."""
    summary = service.save(cache_type, lockfile, source_dir)
    _echo_json(summary.to_dict())
    if not summary.saved:
        sys.exit(1)


@cli.command()
@click.argument("cache_type")
@click.option("--days", type=int, default=30, show_default=True, help="Days of entries to keep")
@click.pass_obj
def prune(service: CacheService, cache_type: str, days: int) -> None:
    """Delete cache entries older than --days (maintenance only)."""
    if not service.is_enabled():
        click.echo("Error: caching disabled (missing S3 config or credentials)", err=True)
        sys.exit(1)
    result = service.prune(cache_type, days)
    _echo_json(result.to_dict())
    if result.errors:
        sys.exit(1)


def _dispatcher(service: CacheService, wait_for_save: bool, save_log: Path | None) -> SaveDispatcher:
    if wait_for_save:
        return ThreadSaveDispatcher(service)
    return DetachedProcessSaveDispatcher(service.logger, log_path=save_log)


def _finish_dispatcher(dispatcher: SaveDispatcher) -> None:
    if isinstance(dispatcher, ThreadSaveDispatcher):
        dispatcher.wait(timeout=dispatcher.service.config.timeout)
        dispatcher.shutdown(wait=False)


def _resolve_ecosystem(
    name: str,
    lockfile: str | None,
    target: str | None,
    marker: str | None,
    install_cmds: tuple[str, ...],
    verify_cmd: str | None,
    no_verify: bool,
) -> Ecosystem:
    install_commands = tuple(parse_command(c) for c in install_cmds) or None
    verify_command = parse_command(verify_cmd) if verify_cmd else None

    base = BUILTIN_ECOSYSTEMS.get(name)
    if base is None:
        if not (lockfile and target and install_commands):
            known = ", ".join(sorted(BUILTIN_ECOSYSTEMS))
            raise click.UsageError(
                f"Unknown ecosystem {name!r} (known: {known}); custom ecosystems need "
                "--lockfile, --target and --install-cmd"
            )
        base = Ecosystem(
            cache_type=name,
            manifest=lockfile,
            lockfile=lockfile,
            target_dir=target,
            marker=marker or f"{target}/.installed",
            install_commands=install_commands,
        )

    ecosystem = base.replace(
        lockfile=lockfile,
        target_dir=target,
        marker=marker,
        install_commands=install_commands,
        verify_command=verify_command,
    )
    if no_verify:
        ecosystem = dataclasses.replace(ecosystem, verify_command=None)
    return ecosystem


@cli.command()
@click.argument("ecosystem_name", metavar="ECOSYSTEM")
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Project root (default: current directory)",
)
@click.option("--lockfile", help="Lockfile path relative to the project")
@click.option("--target", help="Dependency directory relative to the project")
@click.option("--marker", help="Install marker path relative to the project")
@click.option("--install-cmd", "install_cmds", multiple=True, help="Install command (repeatable)")
@click.option("--verify-cmd", help="Smoke command proving the dependencies work")
@click.option("--no-verify", is_flag=True, help="Trust the install marker without a smoke check")
@click.option("--wait-for-save", is_flag=True, help="Wait for the cache upload before exiting")
@click.option("--save-log", type=click.Path(dir_okay=False, path_type=Path), help="Log file for background saves")
@click.pass_obj
def install(
    service: CacheService,
    ecosystem_name: str,
    project_dir: Path,
    lockfile: str | None,
    target: str | None,
    marker: str | None,
    install_cmds: tuple[str, ...],
    verify_cmd: str | None,
    no_verify: bool,
    wait_for_save: bool,
    save_log: Path | None,
) -> None:
    """Restore ECOSYSTEM's dependencies from cache, or install and cache them."""
    ecosystem = _resolve_ecosystem(
        ecosystem_name, lockfile, target, marker, install_cmds, verify_cmd, no_verify
    )
    dispatcher = _dispatcher(service, wait_for_save, save_log)
    orchestrator = create_orchestrator(service, dispatcher)
    try:
        summary = orchestrator.ensure(ecosystem, project_dir)
    except InstallFailedError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        _finish_dispatcher(dispatcher)
    _echo_json(summary.to_dict())


@cli.command()
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Project root (default: current directory)",
)
@click.option("--wait-for-save", is_flag=True, help="Wait for cache uploads before exiting")
@click.option("--save-log", type=click.Path(dir_okay=False, path_type=Path), help="Log file for background saves")
@click.pass_obj
def bootstrap(
    service: CacheService, project_dir: Path, wait_for_save: bool, save_log: Path | None
) -> None:
    """Detect ecosystems in the project and restore or install each."""
    dispatcher = _dispatcher(service, wait_for_save, save_log)
    orchestrator = create_orchestrator(service, dispatcher)
    try:
        summaries = orchestrator.bootstrap(project_dir)
    except InstallFailedError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        _finish_dispatcher(dispatcher)
    _echo_json([s.to_dict() for s in summaries])


def main() -> None:
    """Main entry point."""
    cli()
