"""
Versioned storage synchronization.

Turns every mutation of the storage root into a version-controlled change
using either git or jj, with the same Done/Failed outcomes for both.

Example:
    >>> from todosync.core.vcs import ChangeSet, CommitOrchestrator
    >>> orchestrator = CommitOrchestrator()
    >>> outcome = orchestrator.commit(ChangeSet(paths=["a.json"], message="create: A"))
    >>> if not outcome.ok:
    ...     print(outcome.raw_output)
"""

from todosync.core.vcs.backend import (
    VcsBackend,
    available_backends,
    get_backend,
    list_backends,
    register_backend,
)
from todosync.core.vcs.dispatch import OperationMessage, SyncDispatcher
from todosync.core.vcs.errors import (
    OperationInProgressError,
    StorageRootMissingError,
    TodosyncError,
    UnknownBackendError,
)
from todosync.core.vcs.identity import IdentityResolver, parse_identity
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
from todosync.core.vcs.orchestrator import CommitOrchestrator
from todosync.core.vcs.sentinel import SENTINEL_NAME, Sentinel

# Import adapters to trigger registration
from todosync.core.vcs import git  # noqa: F401, E402
from todosync.core.vcs import jj  # noqa: F401, E402

__all__ = [
    # Models
    "Backend",
    "ChangeSet",
    "ContributorSet",
    "Done",
    "Failed",
    "Identity",
    "OperationOutcome",
    "RepositorySnapshot",
    "Stage",
    # Adapters and registry
    "VcsBackend",
    "available_backends",
    "get_backend",
    "list_backends",
    "register_backend",
    # Orchestration
    "CommitOrchestrator",
    "IdentityResolver",
    "OperationMessage",
    "SyncDispatcher",
    "parse_identity",
    # Sentinel
    "SENTINEL_NAME",
    "Sentinel",
    # Errors
    "OperationInProgressError",
    "StorageRootMissingError",
    "TodosyncError",
    "UnknownBackendError",
]
