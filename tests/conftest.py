"""
Pytest configuration and shared fixtures.

Provides an isolated git/jj environment per test, storage roots, bare
remotes and snapshot providers.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from helpers import git
from todosync.core.config.loader import clear_cache
from todosync.core.vcs.models import Backend, RepositorySnapshot
from todosync.core.vcs.sentinel import Sentinel

GIT_CONFIG = """\
[user]
\tname = Test User
\temail = test@example.com
[commit]
\tgpgSign = false
[init]
\tdefaultBranch = main
[advice]
\tdetachedHead = false
"""

JJ_CONFIG = """\
[user]
name = "Test User"
email = "test@example.com"

[signing]
behavior = "drop"
"""

TODOSYNC_ENV_VARS = (
    "TODOSYNC_STORAGE_PATH",
    "TODOSYNC_BACKEND",
    "TODOSYNC_REMOTE_ENABLE",
    "TODOSYNC_PUSH_ON_COMMIT",
)

# ==============================================================================
# Environment Fixtures
# ==============================================================================

@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Give every test its own HOME with a known git and jj identity.

    System-wide git config and any TODOSYNC_* variables from the developer's
    shell are ignored.
    """
    home = tmp_path / "home"
    home.mkdir()

    gitconfig = home / ".gitconfig"
    gitconfig.write_text(GIT_CONFIG)
    jjconfig = home / "jjconfig.toml"
    jjconfig.write_text(JJ_CONFIG)

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("JJ_CONFIG", str(jjconfig))
    for var in ("GIT_AUTHOR_NAME", "GIT_AUTHOR_EMAIL", "GIT_COMMITTER_NAME", "GIT_COMMITTER_EMAIL"):
        monkeypatch.delenv(var, raising=False)
    for var in TODOSYNC_ENV_VARS:
        # setenv first so teardown also removes values written by .env loading
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)

    clear_cache()
    yield home
    clear_cache()

@pytest.fixture
def no_identity(isolated_home: Path) -> None:
    """Remove the configured user from the global git and jj config."""
    (isolated_home / ".gitconfig").write_text("[commit]\n\tgpgSign = false\n")
    (isolated_home / "jjconfig.toml").write_text("")

# ==============================================================================
# Repository Fixtures
# ==============================================================================

@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Provide an empty storage root directory."""
    root = tmp_path / "storage"
    root.mkdir()
    return root

@pytest.fixture
def bare_remote(tmp_path: Path) -> Path:
    """Provide an empty bare git repository acting as the remote."""
    remote = tmp_path / "remote.git"
    git("init", "--bare", "--initial-branch", "main", str(remote), cwd=tmp_path)
    return remote

@pytest.fixture
def cloned_storage_root(tmp_path: Path, bare_remote: Path) -> Path:
    """Provide a storage root cloned from the (empty) bare remote."""
    root = tmp_path / "storage"
    git("clone", str(bare_remote), str(root), cwd=tmp_path)
    return root

@pytest.fixture
def make_snapshot() -> Callable[..., RepositorySnapshot]:
    """Build a RepositorySnapshot, deriving `initialized` from the sentinel."""

    def factory(storage_path: Path, **overrides: object) -> RepositorySnapshot:
        values: dict[str, object] = {
            "storage_path": storage_path,
            "backend": Backend.GIT,
            "initialized": Sentinel(storage_path).exists(),
        }
        values.update(overrides)
        return RepositorySnapshot(**values)

    return factory

@pytest.fixture
def snapshot_provider(
    make_snapshot: Callable[..., RepositorySnapshot],
) -> Callable[..., Callable[[], RepositorySnapshot]]:
    """Provider factory re-reading the sentinel on every call, like the real one."""

    def factory(storage_path: Path, **overrides: object) -> Callable[[], RepositorySnapshot]:
        return lambda: make_snapshot(storage_path, **overrides)

    return factory

