"""
Data models for the versioned storage layer.

Defines the value types passed across the adapter boundary: the backend
choice, the immutable repository snapshot, change sets, identities and the
uniform Done/Failed operation outcome.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from todosync.core.config.models import TodosyncConfig


class Backend(str, Enum):
    """Version-control tool driving a storage root."""

    GIT = "git"
    JJ = "jj"


class Stage(str, Enum):
    """Step of an orchestrated operation."""

    INIT = "init"
    PULL = "pull"
    COMMIT = "commit"
    PUSH = "push"


class RepositorySnapshot(BaseModel):
    """
    Immutable view of the repository configuration for one operation.

    Captured once at the start of every orchestrated operation and passed
    down to the adapter, so a configuration change made while an operation
    runs can never produce a torn read.

    Example:
        >>> snapshot = RepositorySnapshot.capture(load_config(use_cache=False))
        >>> snapshot.backend
        <Backend.GIT: 'git'>
    """

    model_config = ConfigDict(frozen=True)

    storage_path: Path = Field(description="Storage root directory")
    backend: Backend = Field(default=Backend.GIT, description="Active VCS backend")
    remote_enabled: bool = Field(default=False, description="Pull/push against a remote")
    remote_name: str = Field(default="origin", description="Name of the remote")
    push_on_commit: bool = Field(default=True, description="Push after every commit")
    default_branch: str = Field(
        default="main",
        description="Default branch (git) or bookmark (jj) name",
    )
    colocate: bool = Field(default=False, description="Colocate .git with .jj (jj only)")
    initialized: bool = Field(
        default=False,
        description="Whether the sentinel existed when the snapshot was taken",
    )

    @classmethod
    def capture(cls, config: TodosyncConfig) -> RepositorySnapshot:
        """Freeze the active backend's configuration section."""
        from todosync.core.vcs.sentinel import Sentinel

        backend = Backend(config.vcs.backend)
        section = config.active_section()
        storage_path = config.storage.resolved_path()

        return cls(
            storage_path=storage_path,
            backend=backend,
            remote_enabled=section.remote.enable,
            remote_name=section.remote.name,
            push_on_commit=section.push_on_commit,
            default_branch=section.default_branch,
            colocate=getattr(section, "colocate", False),
            initialized=Sentinel(storage_path).exists(),
        )


class ChangeSet(BaseModel):
    """
    One logical mutation: the changed paths and a commit message.

    Paths are relative to the storage root. A change set is recorded as a
    single history entry.
    """

    model_config = ConfigDict(frozen=True)

    paths: tuple[str, ...] = Field(description="Relative paths that changed, in order")
    message: str = Field(description="Human-readable commit message")

    @field_validator("paths", mode="before")
    @classmethod
    def _coerce_paths(cls, value: object) -> object:
        if isinstance(value, (str, Path)):
            return (str(value),)
        if isinstance(value, Iterable):
            return tuple(str(p) for p in value)
        return value

    @field_validator("paths")
    @classmethod
    def _non_empty_paths(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("a change set needs at least one path")
        for path in value:
            if not path.strip():
                raise ValueError("change set paths cannot be blank")
            if Path(path).is_absolute():
                raise ValueError(f"change set paths must be relative: {path}")
        return value

    @field_validator("message")
    @classmethod
    def _non_empty_message(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("commit message cannot be empty")
        return value


class Identity(BaseModel):
    """
    A contributor's name and email.

    Either part may be empty when the backend has nothing configured;
    consumers treat an empty identity as "unknown" instead of failing.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.name and not self.email

    @property
    def key(self) -> str:
        """Deduplication key: email, case-insensitive, else the name."""
        if self.email:
            return self.email.casefold()
        return self.name.casefold()

    def display(self) -> str:
        """Render as ``Name <email>``."""
        if self.name and self.email:
            return f"{self.name} <{self.email}>"
        if self.email:
            return f"<{self.email}>"
        return self.name

    def __str__(self) -> str:
        return self.display()


class ContributorSet:
    """
    Identities mined from history, deduplicated on email (case-insensitive).

    The first spelling of a name seen for an email wins. Iteration order is
    sorted by display name so suggestion lists are stable.
    """

    def __init__(self, identities: Iterable[Identity] = ()) -> None:
        self._by_key: dict[str, Identity] = {}
        for identity in identities:
            self.add(identity)

    def add(self, identity: Identity) -> None:
        if identity.is_empty:
            return
        key = identity.key
        existing = self._by_key.get(key)
        if existing is None:
            self._by_key[key] = identity
        elif not existing.name and identity.name:
            self._by_key[key] = identity

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Identity):
            return item.key in self._by_key
        if isinstance(item, str):
            return item.casefold() in self._by_key
        return False

    def __iter__(self) -> Iterator[Identity]:
        return iter(sorted(self._by_key.values(), key=lambda i: i.display().casefold()))

    def __len__(self) -> int:
        return len(self._by_key)

    def __repr__(self) -> str:
        return f"ContributorSet({[i.display() for i in self]!r})"

    def emails(self) -> list[str]:
        return [i.email for i in self if i.email]


class Done(BaseModel):
    """Successful outcome, possibly a no-op."""

    model_config = ConfigDict(frozen=True)

    stage: Stage = Field(description="Last step that ran")
    changed: bool = Field(
        default=True,
        description="False when the step had nothing to do (e.g. nothing to commit)",
    )
    message: str = Field(default="", description="Human-readable detail")

    @property
    def ok(self) -> bool:
        return True

    def summary(self) -> str:
        if self.message:
            return f"{self.stage.value} succeeded: {self.message}"
        return f"{self.stage.value} succeeded"


class Failed(BaseModel):
    """
    Failed outcome carrying the verbatim output of the failing command.

    ``raw_output`` is kept untouched so the user can reconcile the
    repository by hand.
    """

    model_config = ConfigDict(frozen=True)

    stage: Stage = Field(description="Step that failed")
    raw_output: str = Field(default="", description="Combined stdout/stderr of the command")
    cause: str = Field(default="", description="Short description of why the step failed")

    @property
    def ok(self) -> bool:
        return False

    @property
    def committed_locally(self) -> bool:
        """True when only publishing failed; the change is recorded locally."""
        return self.stage is Stage.PUSH

    def summary(self) -> str:
        return f"{self.stage.value} failed: {self.cause or 'unknown error'}"


OperationOutcome = Union[Done, Failed]
