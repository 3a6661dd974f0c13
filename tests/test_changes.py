"""Tests for change set builders."""

import pytest

from todosync.core.changes import (
    ChangeKind,
    batch_change,
    project_path,
    single_change,
    task_path,
)


class TestPaths:
    def test_task_path(self):
        assert task_path("p1", "t1") == "p1/t1.json"

    def test_project_path(self):
        assert project_path("p1") == "p1/project.json"


class TestSingleChange:
    """Test messages for one item."""

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (ChangeKind.CREATE, "create: Buy milk"),
            (ChangeKind.UPDATE, "update: Buy milk"),
            (ChangeKind.COMPLETE, "complete: Buy milk"),
            (ChangeKind.REOPEN, "reopen: Buy milk"),
            (ChangeKind.START_PROGRESS, "starting progress: Buy milk"),
            (ChangeKind.STOP_PROGRESS, "stopping progress: Buy milk"),
        ],
    )
    def test_message_prefix(self, kind, expected):
        cs = single_change(kind, "p1/t1.json", "Buy milk")
        assert cs.message == expected
        assert cs.paths == ("p1/t1.json",)


class TestBatchChange:
    """Test bulk change sets."""

    def test_lists_every_title(self):
        """Test that the body names every item in selection order."""
        cs = batch_change(
            ChangeKind.DELETE,
            [("p/a.json", "Alpha"), ("p/b.json", "Beta"), ("p/c.json", "Gamma")],
            "tasks",
        )

        assert cs.paths == ("p/a.json", "p/b.json", "p/c.json")
        assert cs.message == "delete: 3 tasks\n\n- Alpha\n- Beta\n- Gamma"

    def test_single_item_uses_single_message(self):
        cs = batch_change(ChangeKind.COMPLETE, [("p/a.json", "Alpha")], "tasks")
        assert cs.message == "complete: Alpha"

    def test_duplicate_paths_collapse(self):
        cs = batch_change(ChangeKind.UPDATE, [("p/a.json", "Alpha"), ("p/a.json", "Alpha again")])

        assert cs.paths == ("p/a.json",)
        assert cs.message.startswith("update: 2 items")

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="at least one item"):
            batch_change(ChangeKind.DELETE, [])
