"""Seed TODOSYNC_* variables from .env files.

Files are consulted from highest to lowest priority and the first value
found for a key wins:

    process environment > ./.env.local > ./.env > ~/.config/todosync/.env

Only TODOSYNC_* keys are taken from the files, so running todosync inside
some other project's directory does not import that project's settings.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

ENV_PREFIX = "TODOSYNC_"


def default_env_files(project_dir: Path | None = None) -> list[Path]:
    """Candidate .env files, highest priority first."""
    project_dir = project_dir or Path.cwd()
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return [
        project_dir / ".env.local",
        project_dir / ".env",
        xdg_home / "todosync" / ".env",
    ]


def load_layered_env(
    *,
    project_dir: Path | None = None,
    env_files: Iterable[Path] | None = None,
) -> dict[str, str]:
    """Export TODOSYNC_* values from .env files into ``os.environ``.

    Args:
        project_dir: Directory holding the project .env files (defaults to cwd)
        env_files: Explicit files, highest priority first; overrides the defaults

    Returns:
        The keys that were set, with their values
    """
    files = list(env_files) if env_files is not None else default_env_files(project_dir)

    loaded: dict[str, str] = {}
    for path in files:
        if not path.is_file():
            continue
        for key, value in dotenv_values(path).items():
            if value is None or not key.startswith(ENV_PREFIX):
                continue
            if key in os.environ:
                continue
            os.environ[key] = value
            loaded[key] = value
            logger.debug("Loaded %s from %s", key, path)
    return loaded
