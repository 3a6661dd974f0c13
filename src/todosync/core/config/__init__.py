"""
Configuration models and loading.

This module provides Pydantic models for todosync configuration
with multi-layer merging: defaults < user config < env vars.
"""

from .env import load_layered_env
from .loader import (
    clear_cache,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import (
    GitConfig,
    JjConfig,
    RemoteConfig,
    StorageConfig,
    TodosyncConfig,
    VcsConfig,
)

__all__ = [
    # Models
    "GitConfig",
    "JjConfig",
    "RemoteConfig",
    "StorageConfig",
    "TodosyncConfig",
    "VcsConfig",
    # Loader functions
    "clear_cache",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_layered_env",
]
