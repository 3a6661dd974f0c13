"""
VCS backend protocol and registry.

This module defines the VcsBackend protocol that both adapters implement
(git for linear history, jj for the working-copy model), a small base class
with the shared command plumbing, and the registry that picks the adapter
for a repository snapshot.

Callers never branch on the backend type: everything backend-specific,
including how "nothing to commit" is detected, lives behind this protocol.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from todosync.core.vcs.errors import UnknownBackendError
from todosync.core.vcs.models import (
    Backend,
    ChangeSet,
    ContributorSet,
    Done,
    Failed,
    Identity,
    OperationOutcome,
    RepositorySnapshot,
    Stage,
)
from todosync.core.vcs.process import CommandResult, run_command
from todosync.core.vcs.sentinel import Sentinel

logger = logging.getLogger(__name__)

INITIAL_COMMIT_MESSAGE = "Initial commit"

NOT_INITIALIZED_OUTPUT = (
    "trying to pull but the local repository is not initialized.\n"
    "Please disable the remote and try again, or run init first."
)


@runtime_checkable
class VcsBackend(Protocol):
    """
    Protocol for version-control adapters.

    Every operation returns a ``Done`` or ``Failed`` value; ordinary command
    failures never cross this boundary as exceptions.
    """

    @property
    def backend_name(self) -> str:
        """Backend name (e.g. 'git', 'jj')."""
        ...

    def init(self) -> OperationOutcome:
        """
        Bootstrap the storage root.

        A no-op returning ``Done(changed=False)`` when the sentinel exists.
        Otherwise creates the repository, writes the sentinel and records it
        in exactly one initial commit.
        """
        ...

    def commit(self, change_set: ChangeSet) -> OperationOutcome:
        """
        Stage the change set's paths and commit them with its message.

        Returns ``Done(changed=False)`` without creating a commit when the
        paths carry no effective change.
        """
        ...

    def pull(self) -> OperationOutcome:
        """Fetch the remote and replay local commits on top of it."""
        ...

    def push(self) -> OperationOutcome:
        """Publish local history, creating the remote ref if needed."""
        ...

    def current_user(self) -> Identity:
        """Configured identity, or an empty Identity when unset."""
        ...

    def all_contributors(self) -> ContributorSet:
        """Identities of every author and committer in history."""
        ...


class CommandBackend:
    """
    Shared plumbing for adapters that drive a VCS command-line tool.

    Subclasses set ``executable`` and implement the protocol methods using
    :meth:`_run` and :meth:`_failed`.
    """

    executable: str = ""

    def __init__(
        self,
        repo: RepositorySnapshot,
        runner: Callable[..., CommandResult] = run_command,
    ) -> None:
        self.repo = repo
        self.sentinel = Sentinel(repo.storage_path)
        self._runner = runner

    @property
    def backend_name(self) -> str:
        return self.repo.backend.value

    def commit(self, change_set: ChangeSet) -> OperationOutcome:
        raise NotImplementedError

    def push(self) -> OperationOutcome:
        raise NotImplementedError

    def _run(self, *args: str) -> CommandResult:
        return self._runner([self.executable, *args], cwd=self.repo.storage_path)

    def _failed(self, stage: Stage, result: CommandResult) -> Failed:
        logger.warning(
            "%s %s failed: %s",
            self.executable,
            stage.value,
            result.output.strip() or result.cause,
        )
        return Failed(stage=stage, raw_output=result.output, cause=result.cause)

    def _not_initialized(self) -> Failed:
        logger.warning("Refusing to pull: %s is not initialized", self.repo.storage_path)
        return Failed(
            stage=Stage.PULL,
            raw_output=NOT_INITIALIZED_OUTPUT,
            cause="repository not initialized",
        )

    def _already_initialized(self) -> Done:
        logger.debug("Sentinel present in %s, skipping init", self.repo.storage_path)
        return Done(stage=Stage.INIT, changed=False, message="already initialized")

    def _bootstrap_commit(self) -> OperationOutcome:
        """Write the sentinel, commit it, and publish it if a remote is set."""
        self.sentinel.create()
        outcome = self.commit(
            ChangeSet(paths=[self.sentinel.relative_path], message=INITIAL_COMMIT_MESSAGE)
        )
        if isinstance(outcome, Failed):
            return Failed(stage=Stage.INIT, raw_output=outcome.raw_output, cause=outcome.cause)

        if self.repo.remote_enabled:
            pushed = self.push()
            if not pushed.ok:
                return pushed

        logger.info("Initialized %s repository in %s", self.executable, self.repo.storage_path)
        return Done(stage=Stage.INIT, message="repository initialized")

    def _read_config_value(self, *args: str) -> str:
        result = self._run(*args)
        if not result.success:
            return ""
        return result.output.strip()


# Backend registry
_backends: dict[Backend, type[CommandBackend]] = {}


def register_backend(
    backend: Backend,
) -> Callable[[type[CommandBackend]], type[CommandBackend]]:
    """
    Decorator to register an adapter implementation.

    Usage:
        @register_backend(Backend.GIT)
        class GitBackend(CommandBackend):
            ...

    Args:
        backend: Backend the class implements

    Returns:
        Decorator function
    """

    def decorator(backend_class: type[CommandBackend]) -> type[CommandBackend]:
        _backends[backend] = backend_class
        return backend_class

    return decorator


def get_backend(
    repo: RepositorySnapshot,
    runner: Callable[..., CommandResult] | None = None,
) -> VcsBackend:
    """
    Instantiate the adapter for a repository snapshot.

    Args:
        repo: Snapshot naming the active backend
        runner: Optional command runner (tests substitute a fake)

    Returns:
        VcsBackend instance bound to the snapshot

    Raises:
        UnknownBackendError: If no adapter is registered for the backend
    """
    backend_class = _backends.get(repo.backend)
    if backend_class is None:
        available = ", ".join(b.value for b in _backends)
        raise UnknownBackendError(
            f"Backend '{repo.backend.value}' not registered. Available backends: {available}"
        )

    if runner is None:
        return backend_class(repo)
    return backend_class(repo, runner=runner)


def list_backends() -> list[str]:
    """List registered backend names."""
    return [b.value for b in _backends]


def available_backends() -> list[str]:
    """List registered backends whose executable is on PATH."""
    return [
        backend.value
        for backend, backend_class in _backends.items()
        if shutil.which(backend_class.executable) is not None
    ]
