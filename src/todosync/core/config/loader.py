"""
Layered configuration loading.

Sources, lowest precedence first:

    built-in defaults < config.json < TODOSYNC_* environment

config.json is read from $XDG_CONFIG_HOME/todosync/ (normally
~/.config/todosync/) unless the CLI passes an explicit --config path.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import TodosyncConfig

logger = logging.getLogger(__name__)

# Last loaded config; the orchestrator bypasses it and re-reads per operation
_config_cache: TodosyncConfig | None = None

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def get_xdg_config_home() -> Path:
    """$XDG_CONFIG_HOME, or ~/.config when unset."""
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    return get_xdg_config_home() / "todosync" / "config.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``, recursing into nested dicts.

    Example:
        >>> deep_merge({"git": {"remote": {"enable": False}}}, {"git": {"default_branch": "trunk"}})
        {'git': {'remote': {'enable': False}, 'default_branch': 'trunk'}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Read a JSON object from ``path``.

    A missing file, unreadable JSON or a non-object top level all yield None;
    the last two are logged as warnings so a typo never blocks startup.
    """
    try:
        text = path.read_text()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring config at %s: top level is not an object", path)
        return None
    return data


def _parse_bool(name: str, raw: str) -> bool | None:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning("Invalid %s value '%s', ignoring", name, raw)
    return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        TODOSYNC_STORAGE_PATH - overrides storage.path
        TODOSYNC_BACKEND - overrides vcs.backend
        TODOSYNC_REMOTE_ENABLE - overrides <backend>.remote.enable
        TODOSYNC_PUSH_ON_COMMIT - overrides <backend>.push_on_commit

    The last two apply to the section of the backend in effect after
    TODOSYNC_BACKEND has been applied.

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = copy.deepcopy(config_dict)

    if storage_path := os.environ.get("TODOSYNC_STORAGE_PATH"):
        result.setdefault("storage", {})["path"] = storage_path

    if backend := os.environ.get("TODOSYNC_BACKEND"):
        result.setdefault("vcs", {})["backend"] = backend.strip().lower()

    section_name = result.get("vcs", {}).get("backend", "git")
    if section_name not in ("git", "jj"):
        # Leave it for validation to reject
        return result

    if (remote_str := os.environ.get("TODOSYNC_REMOTE_ENABLE")) is not None:
        remote_enable = _parse_bool("TODOSYNC_REMOTE_ENABLE", remote_str)
        if remote_enable is not None:
            section = result.setdefault(section_name, {})
            section.setdefault("remote", {})["enable"] = remote_enable

    if (push_str := os.environ.get("TODOSYNC_PUSH_ON_COMMIT")) is not None:
        push_on_commit = _parse_bool("TODOSYNC_PUSH_ON_COMMIT", push_str)
        if push_on_commit is not None:
            result.setdefault(section_name, {})["push_on_commit"] = push_on_commit

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "storage": {"path": str(Path.home() / ".todosync")},
        "vcs": {"backend": "git"},
        "git": {
            "default_branch": "main",
            "push_on_commit": True,
            "remote": {"enable": False, "name": "origin"},
        },
        "jj": {
            "default_branch": "main",
            "push_on_commit": True,
            "colocate": False,
            "remote": {"enable": False, "name": "origin"},
        },
    }


def load_config(config_path: Path | None = None, use_cache: bool = True) -> TodosyncConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (TODOSYNC_*)
        2. Config file (config_path, or ~/.config/todosync/config.json)
        3. Hardcoded defaults

    Args:
        config_path: Explicit config file to read instead of the user config
        use_cache: If True, return cached config from previous load

    Returns:
        Validated TodosyncConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation

    Example:
        >>> config = load_config()
        >>> config.vcs.backend
        'git'
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    path = config_path or get_user_config_path()
    if file_config := load_json_file(path):
        merged = deep_merge(merged, file_config)

    merged = apply_env_overrides(merged)

    config = TodosyncConfig(**merged)

    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
