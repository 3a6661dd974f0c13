"""
External command execution with captured output.

Every adapter step runs through :func:`run_command`, which merges stdout
and stderr into one text stream and never raises for an ordinary failure.
The result is a :class:`CommandResult` the adapter turns into an outcome.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from pathlib import Path

from pydantic import BaseModel

from todosync.core.vcs.errors import StorageRootMissingError

logger = logging.getLogger(__name__)


class CommandResult(BaseModel):
    """Structured result from one external command."""

    command: list[str]
    """Command and arguments as executed."""

    returncode: int | None
    """Exit status, or None if the command never ran or timed out."""

    output: str
    """Combined standard output and standard error."""

    duration_ms: int = 0
    """Execution duration in milliseconds."""

    timed_out: bool = False
    """Whether the command was killed because it exceeded the timeout."""

    error: str | None = None
    """Why the command could not complete, when it did not exit on its own."""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def cause(self) -> str:
        """Short description of the failure for ``Failed.cause``."""
        if self.error:
            return self.error
        if self.returncode is None:
            return "command did not complete"
        return f"{self.command[0]} exited with status {self.returncode}"


def run_command(
    command: list[str],
    *,
    cwd: Path,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """
    Run a command in ``cwd`` and capture its combined output.

    Args:
        command: Command and arguments (e.g. ``["git", "status"]``).
        cwd: Working directory, normally the storage root.
        timeout: Seconds before the command is killed. Adapters leave it
            unset so a slow pull or push runs to completion.
        env: Extra environment variables merged over ``os.environ``.

    Returns:
        CommandResult describing the run. Non-zero exits, a missing binary
        and timeouts are all reported here rather than raised.

    Raises:
        StorageRootMissingError: If ``cwd`` does not exist.
    """
    if not cwd.is_dir():
        raise StorageRootMissingError(cwd)

    process_env = None
    if env is not None:
        process_env = os.environ.copy()
        process_env.update(env)

    logger.debug("Running command: %s (cwd=%s)", " ".join(command), cwd)
    started = time.monotonic()

    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            timeout=timeout,
            env=process_env,
        )
    except subprocess.TimeoutExpired as e:
        output = e.output or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        logger.warning("Command timed out after %ss: %s", timeout, " ".join(command))
        return CommandResult(
            command=command,
            returncode=None,
            output=output,
            duration_ms=int((time.monotonic() - started) * 1000),
            timed_out=True,
            error=f"{command[0]} timed out after {timeout}s",
        )
    except FileNotFoundError:
        # cwd was checked above, so the executable itself is missing
        if not cwd.is_dir():
            raise StorageRootMissingError(cwd) from None
        logger.warning("Executable not found: %s", command[0])
        return CommandResult(
            command=command,
            returncode=None,
            output=f"{command[0]}: command not found",
            error=f"{command[0]} not found in PATH",
        )

    result = CommandResult(
        command=command,
        returncode=completed.returncode,
        output=completed.stdout or "",
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    if not result.success:
        logger.debug("Command exited %s: %s", result.returncode, result.output.strip())
    return result
