"""
Error output and exit codes shared by the todosync commands.

Every failure is printed as a red or yellow headline, an optional dim
reason and a "Try:" line telling the user what to do next.
"""

from enum import IntEnum

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from todosync.core.vcs.models import Failed, Stage

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Process exit status of a todosync command."""

    SUCCESS = 0

    GENERAL_ERROR = 1
    """A sync step failed or another error occurred."""

    USER_ERROR = 2
    """Bad configuration or arguments; fixable by the user."""

    NOT_PUBLISHED = 3
    """The change was committed locally but the push failed."""

    SIGINT = 130
    """Interrupted with Ctrl+C."""


_STAGE_PROBLEMS = {
    Stage.INIT: "Could not initialize the storage repository",
    Stage.PULL: "Could not synchronize with the remote; your change was not recorded",
    Stage.COMMIT: "Could not record the change; the files on disk are changed but uncommitted",
    Stage.PUSH: "Committed locally, but the push to the remote failed",
}


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print an error headline, optionally followed by why and how to fix it.

    Example:
        >>> print_error(
        ...     "No VCS available",
        ...     reason="todosync requires git or jj",
        ...     solution="install git",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def print_operation_failed(outcome: Failed, storage_path: str | None = None) -> None:
    """
    Print a failed outcome: the stage, the command's verbatim output and
    the instruction to reconcile the repository by hand.
    """
    problem = _STAGE_PROBLEMS[outcome.stage]
    label = "[yellow]Warning:[/yellow]" if outcome.committed_locally else "[red]Error:[/red]"
    console.print(f"{label} {problem} [dim]({outcome.stage.value}: {escape(outcome.cause)})[/dim]")

    if outcome.raw_output.strip():
        console.print(
            Panel(
                escape(outcome.raw_output.rstrip()),
                title=f"{outcome.stage.value} output",
                border_style="dim",
            )
        )

    where = f" in {storage_path}" if storage_path else ""
    console.print(
        f"[cyan]→ Try:[/cyan] resolve the repository state{where} manually "
        "with your VCS, then retry. Nothing is retried automatically."
    )


def print_vcs_not_found_error() -> None:
    """Print error when neither git nor jj is installed."""
    print_error(
        "No supported version control tool found",
        reason="todosync requires either 'git' or 'jj' to be installed",
        solution="install git (https://git-scm.com) or jj (https://jj-vcs.github.io/jj)",
    )


def exit_code_for(outcome: Failed) -> ExitCode:
    if outcome.committed_locally:
        return ExitCode.NOT_PUBLISHED
    return ExitCode.GENERAL_ERROR
