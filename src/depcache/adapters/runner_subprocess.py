"""Subprocess command runner adapter."""

import subprocess
from collections.abc import Sequence
from pathlib import Path

from ..ports.runner import CommandResult


class SubprocessRunnerAdapter:
    """Runs package-manager commands with subprocess."""

    def run(self, command: Sequence[str], cwd: Path, quiet: bool = False) -> CommandResult:
        try:
            completed = subprocess.run(
                list(command),
                cwd=cwd,
                check=False,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE if quiet else None,
                stderr=subprocess.STDOUT if quiet else None,
                text=True,
            )
        except OSError as e:
            # Command not found or not executable
            return CommandResult(returncode=127, output=str(e))
        return CommandResult(returncode=completed.returncode, output=completed.stdout or "")
