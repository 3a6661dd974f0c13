"""
Git adapter (linear history).

Drives the ``git`` CLI inside the storage root:

- init:   ``git init --initial-branch <branch>`` then the sentinel commit
- commit: ``git add`` the paths, check ``git diff --cached --quiet -- <paths>``
  (exit status 0 means nothing staged, 1 means changes), then
  ``git commit --only -- <paths>`` so nothing else in the index is swept in
- pull:   ``git pull --rebase --autostash <remote> <branch>``
- push:   ``git push --set-upstream <remote> <branch>``
"""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath

from todosync.core.vcs.backend import CommandBackend, register_backend
from todosync.core.vcs.models import (
    Backend,
    ChangeSet,
    ContributorSet,
    Done,
    Identity,
    OperationOutcome,
    Stage,
)

logger = logging.getLogger(__name__)

# Placeholders separated by a tab so names containing spaces survive parsing
_LOG_FORMAT = "--format=%aN%x09%aE%n%cN%x09%cE"


@register_backend(Backend.GIT)
class GitBackend(CommandBackend):
    """
    Linear-history adapter built on git.

    Example:
        >>> backend = GitBackend(RepositorySnapshot(storage_path=Path("~/.todosync")))
        >>> backend.init()
        Done(stage=<Stage.INIT: 'init'>, changed=True, message='repository initialized')
    """

    executable = "git"

    def init(self) -> OperationOutcome:
        if self.sentinel.exists():
            return self._already_initialized()

        result = self._run("init", "--initial-branch", self.repo.default_branch)
        if not result.success:
            return self._failed(Stage.INIT, result)

        return self._bootstrap_commit()

    def commit(self, change_set: ChangeSet) -> OperationOutcome:
        indexed = self._run("ls-files", "-z", "--", *change_set.paths)
        if not indexed.success:
            return self._failed(Stage.COMMIT, indexed)
        # Fails on an unborn branch, where nothing is committed yet
        committed = self._run("ls-tree", "-r", "-z", "--name-only", "HEAD", "--", *change_set.paths)
        in_index = _split_paths(indexed.output)
        in_head = _split_paths(committed.output) if committed.success else set()

        # `git add` rejects paths it cannot find on disk or in the index
        to_stage = [p for p in change_set.paths if self._present(p, in_index)]
        # A path absent everywhere was already recorded as deleted
        to_record = to_stage + [
            p for p in change_set.paths if p not in to_stage and _matches(p, in_head)
        ]
        if not to_record:
            logger.info("Nothing to commit for: %s", change_set.message)
            return Done(stage=Stage.COMMIT, changed=False, message="nothing to commit")

        if to_stage:
            # --all stages deletions of tracked paths as well as new files
            result = self._run("add", "--all", "--", *to_stage)
            if not result.success:
                return self._failed(Stage.COMMIT, result)

        staged = self._run("diff", "--cached", "--quiet", "--", *to_record)
        if staged.returncode == 0:
            logger.info("Nothing to commit for: %s", change_set.message)
            return Done(stage=Stage.COMMIT, changed=False, message="nothing to commit")
        if staged.returncode != 1:
            return self._failed(Stage.COMMIT, staged)

        # --only leaves anything else staged in the index out of this commit
        result = self._run("commit", "--message", change_set.message, "--only", "--", *to_record)
        if not result.success:
            return self._failed(Stage.COMMIT, result)

        logger.info("Committed %d path(s): %s", len(to_record), change_set.message)
        return Done(stage=Stage.COMMIT, message=change_set.message)

    def _present(self, path: str, indexed: set[PurePosixPath]) -> bool:
        return os.path.lexists(self.repo.storage_path / path) or _matches(path, indexed)

    def pull(self) -> OperationOutcome:
        if not self.sentinel.exists():
            return self._not_initialized()

        result = self._run(
            "pull",
            "--rebase",
            "--autostash",
            self.repo.remote_name,
            self.repo.default_branch,
        )
        if not result.success:
            return self._failed(Stage.PULL, result)

        logger.info("Pulled %s/%s", self.repo.remote_name, self.repo.default_branch)
        return Done(stage=Stage.PULL)

    def push(self) -> OperationOutcome:
        result = self._run(
            "push",
            "--set-upstream",
            self.repo.remote_name,
            self.repo.default_branch,
        )
        if not result.success:
            return self._failed(Stage.PUSH, result)

        logger.info("Pushed %s to %s", self.repo.default_branch, self.repo.remote_name)
        return Done(stage=Stage.PUSH)

    def current_user(self) -> Identity:
        # `git config` exits 1 for unset keys; that reads as an empty value
        return Identity(
            name=self._read_config_value("config", "user.name"),
            email=self._read_config_value("config", "user.email"),
        )

    def all_contributors(self) -> ContributorSet:
        result = self._run("log", _LOG_FORMAT)
        if not result.success:
            # An unborn branch has no history yet
            logger.debug("git log failed, no contributors: %s", result.output.strip())
            return ContributorSet()

        contributors = ContributorSet()
        for line in result.output.splitlines():
            name, _, email = line.partition("\t")
            contributors.add(Identity(name=name.strip(), email=email.strip()))
        return contributors


def _split_paths(output: str) -> set[PurePosixPath]:
    """Paths from NUL-separated ``ls-files -z`` / ``ls-tree -z`` output."""
    return {PurePosixPath(p) for p in output.split("\0") if p}


def _matches(path: str, known: set[PurePosixPath]) -> bool:
    """Whether ``path`` names a known file or a directory containing one."""
    relative = PurePosixPath(Path(path).as_posix())
    return any(k == relative or relative in k.parents for k in known)
