"""
todosync CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from todosync import __version__
from todosync.cli import identity, sync
from todosync.cli.errors import ExitCode, print_error, print_vcs_not_found_error
from todosync.core.config.env import load_layered_env
from todosync.core.config.loader import get_user_config_path, load_config
from todosync.core.vcs import available_backends

app = typer.Typer(
    name="todosync",
    help="Versioned storage for your todo list, backed by git or jj",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool) -> None:
    """
    Configure logging for CLI commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"todosync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the config file",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    todosync - every task change is a commit.

    Quick Start:
        todosync init                        # Create the storage repository
        todosync commit p1/t1.json -m "create: Buy milk"
        todosync sync                        # Pull remote changes
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)

    ctx.obj = {"debug": debug, "config_path": config_path}

    if ctx.invoked_subcommand == "config":
        return

    try:
        load_config(config_path=config_path, use_cache=False)
    except ValidationError as e:
        print_error(
            "Invalid configuration",
            reason=str(e),
            solution=f"edit {config_path or get_user_config_path()}",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    if not available_backends():
        print_vcs_not_found_error()
        raise typer.Exit(ExitCode.USER_ERROR)


@app.command(name="config")
def show_config(ctx: typer.Context) -> None:
    """Show the effective configuration as JSON."""
    try:
        config = load_config(config_path=ctx.obj.get("config_path"), use_cache=False)
    except ValidationError as e:
        print_error("Invalid configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)
    console.print_json(config.model_dump_json())


app.command(name="init")(sync.init)
app.command(name="sync")(sync.sync)
app.command(name="commit")(sync.commit)
app.command(name="pull")(sync.pull)
app.command(name="push")(sync.push)
app.command(name="whoami")(identity.whoami)
app.command(name="contributors")(identity.contributors)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
