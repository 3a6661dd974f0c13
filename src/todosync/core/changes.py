"""
Change set builders for task and project mutations.

The file-mutation layer writes records to disk first, then calls these
helpers to describe what changed. One user action always becomes one
ChangeSet, and so one history entry, even when it touches many files.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from pathlib import PurePosixPath

from todosync.core.vcs.models import ChangeSet


class ChangeKind(str, Enum):
    """Commit message prefixes, one per kind of user action."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    COMPLETE = "complete"
    REOPEN = "reopen"
    START_PROGRESS = "starting progress"
    STOP_PROGRESS = "stopping progress"


def task_path(project_id: str, task_id: str) -> str:
    """Storage-relative path of a task record."""
    return str(PurePosixPath(project_id) / f"{task_id}.json")


def project_path(project_id: str) -> str:
    """Storage-relative path of a project record."""
    return str(PurePosixPath(project_id) / "project.json")


def single_change(kind: ChangeKind, path: str, title: str) -> ChangeSet:
    """
    ChangeSet for one item.

    Example:
        >>> single_change(ChangeKind.CREATE, "p1/t1.json", "Buy milk").message
        'create: Buy milk'
    """
    return ChangeSet(paths=[path], message=f"{kind.value}: {title}")


def batch_change(kind: ChangeKind, items: Sequence[tuple[str, str]], noun: str = "items") -> ChangeSet:
    """
    ChangeSet for a bulk action over several items.

    The subject line counts the items; the body lists every title, so the
    single history entry still names everything it touched.

    Args:
        kind: What happened to the items
        items: (path, title) pairs, in the order the user selected them
        noun: Plural noun for the subject line (e.g. "tasks")

    Returns:
        One ChangeSet covering all paths

    Raises:
        ValueError: If items is empty

    Example:
        >>> cs = batch_change(ChangeKind.DELETE, [("p/a.json", "A"), ("p/b.json", "B")], "tasks")
        >>> print(cs.message)
        delete: 2 tasks
        <BLANKLINE>
        - A
        - B
    """
    if not items:
        raise ValueError("batch change needs at least one item")

    if len(items) == 1:
        path, title = items[0]
        return single_change(kind, path, title)

    # Dedupe paths but keep selection order
    paths = list(dict.fromkeys(path for path, _ in items))
    body = "\n".join(f"- {title}" for _, title in items)
    message = f"{kind.value}: {len(items)} {noun}\n\n{body}"
    return ChangeSet(paths=paths, message=message)
