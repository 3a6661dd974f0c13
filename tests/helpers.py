"""Shared test helpers: git history inspection and a fake command runner."""

import shutil
import subprocess
from pathlib import Path

import pytest

from todosync.core.vcs.process import CommandResult

requires_jj = pytest.mark.skipif(shutil.which("jj") is None, reason="jj is not installed")


def git(*args: str, cwd: Path) -> str:
    """Run git and return stdout; fail the test on a non-zero exit."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def history(repo: Path, ref: str = "HEAD") -> list[str]:
    """Commit subjects, newest first. Empty for an unborn branch."""
    result = subprocess.run(
        ["git", "log", "--format=%s", ref],
        cwd=repo,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        return []
    return result.stdout.splitlines()


def last_message(repo: Path) -> str:
    """Full message of the newest commit."""
    return git("log", "-1", "--format=%B", cwd=repo).strip()


class RecordingRunner:
    """
    Fake command runner for adapter tests.

    Records every command and answers from ``responses``, a mapping of
    argument prefixes (without the executable and ``--color=never``) to
    ``(returncode, output)``. Anything unmatched succeeds with no output.
    """

    def __init__(self, responses: dict[tuple[str, ...], tuple[int, str]] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[list[str]] = []
        self.options: list[dict[str, object]] = []

    def __call__(self, command: list[str], *, cwd: Path, **kwargs: object) -> CommandResult:
        self.calls.append(list(command))
        self.options.append(dict(kwargs))
        args = self._strip(command)
        for prefix, (returncode, output) in self.responses.items():
            if tuple(args[: len(prefix)]) == prefix:
                return CommandResult(command=list(command), returncode=returncode, output=output)
        return CommandResult(command=list(command), returncode=0, output="")

    @staticmethod
    def _strip(command: list[str]) -> list[str]:
        return [a for a in command[1:] if a != "--color=never"]

    @property
    def subcommands(self) -> list[list[str]]:
        """Recorded calls without the executable and global flags."""
        return [self._strip(c) for c in self.calls]
