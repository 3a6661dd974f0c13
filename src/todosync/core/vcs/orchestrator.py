"""
Commit orchestration.

Sequences the adapter steps for one user action:

    Init (if needed) -> Pull (if remote) -> Commit -> Push (if remote and
    push-on-commit)

A failed step stops the sequence and its ``Failed`` outcome is returned.
A push failure does not roll the commit back: the outcome is
``Failed(stage=PUSH)``, which callers show as "committed locally, not yet
published".

Only one operation may run against a storage root at a time. A second
request for the same root is rejected with OperationInProgressError.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from todosync.core.config.loader import load_config
from todosync.core.vcs.backend import VcsBackend, get_backend
from todosync.core.vcs.errors import OperationInProgressError
from todosync.core.vcs.identity import IdentityResolver
from todosync.core.vcs.models import (
    ChangeSet,
    ContributorSet,
    Done,
    Failed,
    Identity,
    OperationOutcome,
    RepositorySnapshot,
    Stage,
)

logger = logging.getLogger(__name__)

SnapshotProvider = Callable[[], RepositorySnapshot]
BackendFactory = Callable[[RepositorySnapshot], VcsBackend]

# Storage root -> name of the operation currently holding it
_in_flight: dict[Path, str] = {}
_in_flight_lock = threading.Lock()


def default_snapshot_provider(config_path: Path | None = None) -> SnapshotProvider:
    """Provider that re-reads configuration from disk on every call."""

    def provide() -> RepositorySnapshot:
        return RepositorySnapshot.capture(load_config(config_path=config_path, use_cache=False))

    return provide


@contextmanager
def storage_root_guard(storage_path: Path, operation: str) -> Iterator[None]:
    """
    Hold exclusive ownership of a storage root for one operation.

    Raises:
        OperationInProgressError: If another operation holds the root
    """
    key = storage_path.resolve()
    with _in_flight_lock:
        current = _in_flight.get(key)
        if current is not None:
            raise OperationInProgressError(key, current)
        _in_flight[key] = operation
    try:
        yield
    finally:
        with _in_flight_lock:
            _in_flight.pop(key, None)


def is_busy(storage_path: Path) -> bool:
    """Whether an operation currently holds the storage root."""
    with _in_flight_lock:
        return storage_path.resolve() in _in_flight


class CommitOrchestrator:
    """
    Runs Init/Pull/Commit/Push for each user action.

    Configuration is re-read through ``snapshot_provider`` at the start of
    every operation and frozen for its duration.

    Example:
        >>> orchestrator = CommitOrchestrator()
        >>> outcome = orchestrator.commit(ChangeSet(paths=["a.json"], message="create: A"))
        >>> outcome.ok
        True
    """

    def __init__(
        self,
        snapshot_provider: SnapshotProvider | None = None,
        backend_factory: BackendFactory = get_backend,
    ) -> None:
        self.snapshot_provider = snapshot_provider or default_snapshot_provider()
        self.backend_factory = backend_factory
        # Storage root of the most recent operation, for messages only
        self.last_storage_path: Path | None = None

    def snapshot(self) -> RepositorySnapshot:
        return self.snapshot_provider()

    def _prepare(self) -> tuple[RepositorySnapshot, VcsBackend]:
        repo = self.snapshot()
        self.last_storage_path = repo.storage_path
        return repo, self.backend_factory(repo)

    def _ensure_initialized(
        self, repo: RepositorySnapshot, backend: VcsBackend
    ) -> OperationOutcome:
        if repo.initialized:
            return Done(stage=Stage.INIT, changed=False, message="already initialized")
        logger.info("Storage root %s not initialized, running init", repo.storage_path)
        outcome = backend.init()
        if isinstance(outcome, Failed) and outcome.stage is not Stage.INIT:
            # The caller's change is not recorded yet, so this is an init failure
            return Failed(
                stage=Stage.INIT,
                raw_output=outcome.raw_output,
                cause=f"initial {outcome.stage.value} failed: {outcome.cause}",
            )
        return outcome

    def commit(self, change_set: ChangeSet) -> OperationOutcome:
        """
        Record one change set, pulling first and pushing after as configured.

        Args:
            change_set: Paths already written to disk plus the commit message

        Returns:
            Done on success (including "nothing to commit"), otherwise the
            Failed outcome of the first step that failed

        Raises:
            OperationInProgressError: If the storage root is busy
            StorageRootMissingError: If the storage root does not exist
        """
        repo, backend = self._prepare()

        with storage_root_guard(repo.storage_path, "commit"):
            outcome = self._ensure_initialized(repo, backend)
            if not outcome.ok:
                return outcome

            if repo.remote_enabled:
                outcome = backend.pull()
                if not outcome.ok:
                    logger.warning("Pull failed, not committing: %s", change_set.message)
                    return outcome

            committed = backend.commit(change_set)
            if not committed.ok:
                return committed

            if repo.remote_enabled and repo.push_on_commit:
                pushed = backend.push()
                if not pushed.ok:
                    logger.warning("Committed locally but push failed: %s", change_set.message)
                    return pushed

            return committed

    def init(self) -> OperationOutcome:
        repo, backend = self._prepare()
        with storage_root_guard(repo.storage_path, "init"):
            return backend.init()

    def pull(self) -> OperationOutcome:
        repo, backend = self._prepare()
        with storage_root_guard(repo.storage_path, "pull"):
            return backend.pull()

    def push(self) -> OperationOutcome:
        repo, backend = self._prepare()
        with storage_root_guard(repo.storage_path, "push"):
            return backend.push()

    def synchronize(self) -> OperationOutcome:
        """
        Startup sync: initialize if needed, then pull when a remote is set.

        Returns:
            Done (stage PULL when a pull ran, INIT otherwise) or the Failed
            outcome of the failing step
        """
        repo, backend = self._prepare()

        with storage_root_guard(repo.storage_path, "synchronize"):
            outcome = self._ensure_initialized(repo, backend)
            if not outcome.ok or not repo.remote_enabled:
                return outcome
            return backend.pull()

    def current_user(self) -> Identity:
        _, backend = self._prepare()
        return IdentityResolver(backend).current_user()

    def all_contributors(self) -> ContributorSet:
        _, backend = self._prepare()
        return IdentityResolver(backend).contributors()

    def identity_resolver(self) -> IdentityResolver:
        _, backend = self._prepare()
        return IdentityResolver(backend)
