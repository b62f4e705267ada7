"""Shell execution utilities.

Thin wrapper around subprocess for the external tools fsreap falls
back to (currently only ``df``).
"""

import os
import shutil
import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of an external command.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0

    @property
    def last_line(self) -> str:
        """Return the final non-blank line of stdout, or an empty string."""
        lines = [line for line in self.stdout.splitlines() if line.strip()]
        return lines[-1] if lines else ""


def run_command(
    args: list[str],
    *,
    timeout: float | None = 60.0,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Execute a command and capture its output.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for command.
        env: Extra environment variables merged over the current environment.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    full_env = {**os.environ, **env} if env else None
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
        env=full_env,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH."""
    return shutil.which(name) is not None
