"""
todosync CLI - identity commands.

whoami and contributors. Both degrade to "unknown" instead of failing when
the backend has no identity configured.
"""

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from todosync.cli.errors import ExitCode, print_error
from todosync.core.vcs import StorageRootMissingError
from todosync.core.vcs.orchestrator import CommitOrchestrator, default_snapshot_provider

console = Console()


def _orchestrator(ctx: typer.Context) -> CommitOrchestrator:
    obj = ctx.obj or {}
    return CommitOrchestrator(default_snapshot_provider(obj.get("config_path")))


def whoami(ctx: typer.Context) -> None:
    """Show the identity the configured backend commits as."""
    try:
        identity = _orchestrator(ctx).current_user()
    except StorageRootMissingError as e:
        print_error(str(e), solution="todosync init")
        raise typer.Exit(ExitCode.USER_ERROR)

    if identity.is_empty:
        console.print("[dim]unknown[/dim]")
        return
    console.print(escape(identity.display()))


def contributors(ctx: typer.Context) -> None:
    """List everyone who appears in the repository history."""
    try:
        resolver = _orchestrator(ctx).identity_resolver()
        suggestions = resolver.rank_assignees()
    except StorageRootMissingError as e:
        print_error(str(e), solution="todosync init")
        raise typer.Exit(ExitCode.USER_ERROR)

    if not suggestions:
        console.print("[dim]No contributors yet[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("")

    for suggestion in suggestions:
        table.add_row(
            escape(suggestion.identity.name),
            escape(suggestion.identity.email),
            "[green]you[/green]" if suggestion.is_current_user else "",
        )

    console.print(table)
