"""
todosync CLI - repository commands.

init, sync, commit, pull and push. Long-running operations go through the
SyncDispatcher so a spinner keeps animating while git/jj run.
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from todosync.cli.errors import (
    ExitCode,
    exit_code_for,
    print_error,
    print_operation_failed,
)
from todosync.core.config.loader import load_config
from todosync.core.vcs import (
    ChangeSet,
    CommitOrchestrator,
    Failed,
    OperationInProgressError,
    OperationMessage,
    StorageRootMissingError,
    SyncDispatcher,
)
from todosync.core.vcs.orchestrator import default_snapshot_provider

console = Console()


def _config_path(ctx: typer.Context) -> Path | None:
    obj = ctx.obj or {}
    return obj.get("config_path")


def _orchestrator(ctx: typer.Context) -> CommitOrchestrator:
    return CommitOrchestrator(default_snapshot_provider(_config_path(ctx)))


def _ensure_storage_dir(ctx: typer.Context) -> Path:
    storage_path = load_config(config_path=_config_path(ctx), use_cache=False).storage.resolved_path()
    storage_path.mkdir(parents=True, exist_ok=True)
    return storage_path


async def _dispatch(
    orchestrator: CommitOrchestrator,
    start: Callable[[SyncDispatcher], object],
    status: str,
) -> OperationMessage:
    dispatcher = SyncDispatcher(orchestrator)
    with console.status(status, spinner="dots"):
        start(dispatcher)
        return await dispatcher.next_message()


def _run_dispatch(
    orchestrator: CommitOrchestrator,
    start: Callable[[SyncDispatcher], object],
    status: str,
) -> OperationMessage:
    try:
        return asyncio.run(_dispatch(orchestrator, start, status))
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted.[/yellow] Check the storage repository before retrying.")
        raise typer.Exit(ExitCode.SIGINT)


def _report(message: OperationMessage, storage_path: Path | None = None) -> None:
    """Print a completion message and exit non-zero on failure."""
    if message.error is not None:
        if isinstance(message.error, (OperationInProgressError, StorageRootMissingError)):
            print_error(str(message.error))
            raise typer.Exit(ExitCode.GENERAL_ERROR)
        message.raise_for_error()

    outcome = message.outcome
    if outcome is None:
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if isinstance(outcome, Failed):
        print_operation_failed(outcome, str(storage_path) if storage_path else None)
        raise typer.Exit(exit_code_for(outcome))

    if outcome.changed:
        console.print(f"[green]✓[/green] {escape(outcome.summary())}")
    else:
        console.print(f"[blue]{escape(outcome.message or 'Nothing to do')}[/blue]")


def init(ctx: typer.Context) -> None:
    """
    Initialize the storage repository.

    Creates the storage directory if needed, initializes the configured
    VCS and records the INIT sentinel in the first commit. Safe to re-run.
    """
    storage_path = _ensure_storage_dir(ctx)
    message = _run_dispatch(_orchestrator(ctx), lambda d: d.init(), "Initializing repository...")
    _report(message, storage_path)


def sync(ctx: typer.Context) -> None:
    """
    Initialize if needed and pull remote changes.

    This is what runs at startup when a remote is enabled.
    """
    storage_path = _ensure_storage_dir(ctx)
    message = _run_dispatch(
        _orchestrator(ctx), lambda d: d.synchronize(), "Fetching data from remote..."
    )
    _report(message, storage_path)


def commit(
    ctx: typer.Context,
    paths: list[str] = typer.Argument(
        ...,
        help="Changed paths, relative to the storage root",
    ),
    message: str = typer.Option(
        ...,
        "--message",
        "-m",
        help="Commit message",
    ),
) -> None:
    """
    Commit changed paths as one history entry.

    Pulls first and pushes afterwards when the remote is enabled.

    Examples:
        todosync commit p1/t1.json -m "create: Buy milk"
        todosync commit p1/a.json p1/b.json -m "delete: 2 tasks"
    """
    try:
        change_set = ChangeSet(paths=paths, message=message)
    except ValueError as e:
        print_error("Invalid change set", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    result = _run_dispatch(_orchestrator(ctx), lambda d: d.commit(change_set), "Committing...")
    _report(result)


def pull(ctx: typer.Context) -> None:
    """Fetch remote changes and rebase local history onto them."""
    message = _run_dispatch(_orchestrator(ctx), lambda d: d.pull(), "Pulling...")
    _report(message)


def push(ctx: typer.Context) -> None:
    """Publish local history to the remote."""
    message = _run_dispatch(_orchestrator(ctx), lambda d: d.push(), "Pushing...")
    _report(message)
