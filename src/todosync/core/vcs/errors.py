"""Exceptions raised by the versioned storage layer.

Ordinary command failures are returned as ``Failed`` outcomes. These
exceptions cover the conditions that cannot be expressed that way.
"""

from __future__ import annotations

from pathlib import Path


class TodosyncError(Exception):
    """Base class for todosync errors."""


class StorageRootMissingError(TodosyncError):
    """The storage root does not exist (or disappeared mid-operation)."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Storage root does not exist: {path}")
        self.path = path


class OperationInProgressError(TodosyncError):
    """Another synchronization operation already owns this storage root."""

    def __init__(self, path: Path | None, operation: str | None = None) -> None:
        where = f" for {path}" if path else ""
        detail = f" ({operation})" if operation else ""
        super().__init__(f"A sync operation is already running{where}{detail}")
        self.path = path
        self.operation = operation


class UnknownBackendError(TodosyncError, ValueError):
    """No adapter is registered under the requested backend name."""
