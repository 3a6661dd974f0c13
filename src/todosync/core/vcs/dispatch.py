"""
Async dispatch of orchestrated operations.

Each operation runs in a worker thread (``asyncio.to_thread``) so the event
loop keeps rendering while git/jj run. When it finishes, exactly one
:class:`OperationMessage` is put on the dispatcher's inbox queue; callers
react to that message instead of polling. Identity lookups are dispatched
the same way and carry their result in ``value``.

Example:
    >>> dispatcher = SyncDispatcher(CommitOrchestrator())
    >>> dispatcher.commit(ChangeSet(paths=["a.json"], message="create: A"))
    >>> message = await dispatcher.next_message()
    >>> message.outcome
    Done(stage=<Stage.COMMIT: 'commit'>, changed=True, message='create: A')
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from todosync.core.vcs.errors import OperationInProgressError
from todosync.core.vcs.models import (
    ChangeSet,
    ContributorSet,
    Done,
    Failed,
    Identity,
    OperationOutcome,
)
from todosync.core.vcs.orchestrator import CommitOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationMessage:
    """Completion message for one dispatched operation."""

    operation: str
    outcome: OperationOutcome | None = None
    value: Any = None
    """Result of a lookup (Identity or ContributorSet); outcome stays None."""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        if self.error is not None:
            return False
        if self.outcome is not None:
            return self.outcome.ok
        return self.value is not None

    def raise_for_error(self) -> None:
        """Re-raise an unrecoverable error carried by the message."""
        if self.error is not None:
            raise self.error


class SyncDispatcher:
    """
    Starts orchestrator operations as asyncio tasks.

    At most one operation is in flight per dispatcher; starting another
    while one runs raises OperationInProgressError immediately. The
    orchestrator additionally guards the storage root across dispatchers.

    Must be used from inside a running event loop.
    """

    def __init__(
        self,
        orchestrator: CommitOrchestrator,
        inbox: asyncio.Queue[OperationMessage] | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.inbox: asyncio.Queue[OperationMessage] = inbox or asyncio.Queue()
        self._task: asyncio.Task[OperationMessage] | None = None
        self._operation: str | None = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def current_operation(self) -> str | None:
        return self._operation if self.busy else None

    def init(self) -> asyncio.Task[OperationMessage]:
        return self._dispatch("init", self.orchestrator.init)

    def commit(self, change_set: ChangeSet) -> asyncio.Task[OperationMessage]:
        return self._dispatch("commit", self.orchestrator.commit, change_set)

    def pull(self) -> asyncio.Task[OperationMessage]:
        return self._dispatch("pull", self.orchestrator.pull)

    def push(self) -> asyncio.Task[OperationMessage]:
        return self._dispatch("push", self.orchestrator.push)

    def synchronize(self) -> asyncio.Task[OperationMessage]:
        return self._dispatch("synchronize", self.orchestrator.synchronize)

    def current_user(self) -> asyncio.Task[OperationMessage]:
        return self._dispatch("current_user", self.orchestrator.current_user)

    def all_contributors(self) -> asyncio.Task[OperationMessage]:
        return self._dispatch("all_contributors", self.orchestrator.all_contributors)

    async def next_message(self) -> OperationMessage:
        return await self.inbox.get()

    def _dispatch(
        self,
        operation: str,
        func: Callable[..., OperationOutcome | Identity | ContributorSet],
        *args: Any,
    ) -> asyncio.Task[OperationMessage]:
        if self.busy:
            raise OperationInProgressError(self.orchestrator.last_storage_path, self._operation)

        loop = asyncio.get_running_loop()
        self._operation = operation
        self._task = loop.create_task(self._run(operation, func, *args))
        logger.debug("Dispatched %s", operation)
        return self._task

    async def _run(
        self,
        operation: str,
        func: Callable[..., OperationOutcome | Identity | ContributorSet],
        *args: Any,
    ) -> OperationMessage:
        try:
            result = await asyncio.to_thread(func, *args)
        except Exception as e:
            logger.exception("Operation %s raised", operation)
            message = OperationMessage(operation=operation, error=e)
        else:
            if isinstance(result, (Done, Failed)):
                message = OperationMessage(operation=operation, outcome=result)
            else:
                message = OperationMessage(operation=operation, value=result)

        await self.inbox.put(message)
        return message
