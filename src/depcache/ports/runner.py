"""Command runner port interface."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass
class CommandResult:
    """Exit status of an external command."""

    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class RunnerPort(Protocol):
    """Port for running package-manager commands."""

    def run(self, command: Sequence[str], cwd: Path, quiet: bool = False) -> CommandResult:
        """Run command in cwd. quiet captures output instead of passing it through."""
        ...
