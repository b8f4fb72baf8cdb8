"""Per-ecosystem install descriptors."""

import dataclasses
import shlex
from dataclasses import dataclass
from pathlib import Path

Command = tuple[str, ...]


@dataclass(frozen=True)
class Ecosystem:
    """Everything the orchestrator needs to know about one package manager.

    Paths are relative to the project directory.
    """

    cache_type: str
    manifest: str
    lockfile: str
    target_dir: str
    marker: str
    install_commands: tuple[Command, ...]
    verify_command: Command | None = None
    lockfile_hint: str | None = None

    def lockfile_path(self, project_dir: Path) -> Path:
        return project_dir / self.lockfile

    def target_path(self, project_dir: Path) -> Path:
        return project_dir / self.target_dir

    def marker_path(self, project_dir: Path) -> Path:
        return project_dir / self.marker

    def replace(self, **changes: object) -> "Ecosystem":
        """Return a copy with the given fields replaced; None values are ignored."""
        return dataclasses.replace(self, **{k: v for k, v in changes.items() if v is not None})


def parse_command(command: str) -> Command:
    return tuple(shlex.split(command))


def format_command(command: Command) -> str:
    return shlex.join(command)


BUNDLE = Ecosystem(
    cache_type="bundle",
    manifest="Gemfile",
    lockfile="Gemfile.lock",
    target_dir="vendor/bundle",
    marker=".bundle/.installed",
    install_commands=(
        ("bundle", "config", "set", "--local", "path", "vendor/bundle"),
        ("bundle", "config", "set", "--local", "without", "production"),
        ("bundle", "install", "--jobs", "4"),
    ),
    verify_command=("bundle", "exec", "ruby", "-e", "exit 0"),
    lockfile_hint="Run 'bundle lock' locally to generate Gemfile.lock for caching",
)

NPM = Ecosystem(
    cache_type="npm",
    manifest="package.json",
    lockfile="package-lock.json",
    target_dir="node_modules",
    marker="node_modules/.installed",
    install_commands=(("npm", "install"),),
    verify_command=("npm", "ls", "--depth=0"),
    lockfile_hint="Run 'npm install' locally to generate package-lock.json for caching",
)

PIP = Ecosystem(
    cache_type="pip",
    manifest="requirements.txt",
    lockfile="requirements.txt",
    target_dir=".venv",
    marker=".venv/.installed",
    install_commands=(
        ("python3", "-m", "venv", ".venv"),
        (".venv/bin/pip", "install", "-r", "requirements.txt"),
    ),
    verify_command=(".venv/bin/python", "-c", "import sys"),
    lockfile_hint="Pin dependencies in requirements.txt for caching",
)

BUILTIN_ECOSYSTEMS: dict[str, Ecosystem] = {e.cache_type: e for e in (BUNDLE, NPM, PIP)}


def get_ecosystem(name: str) -> Ecosystem:
    try:
        return BUILTIN_ECOSYSTEMS[name]
    except KeyError:
        known = ", ".join(sorted(BUILTIN_ECOSYSTEMS))
        raise KeyError(f"Unknown ecosystem {name!r} (known: {known})") from None


def detect_ecosystems(project_dir: Path) -> list[Ecosystem]:
    """Built-in ecosystems whose manifest exists in project_dir."""
    return [e for e in BUILTIN_ECOSYSTEMS.values() if (project_dir / e.manifest).is_file()]
