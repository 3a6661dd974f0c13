"""
Jujutsu adapter (working-copy model).

jj snapshots the working copy automatically, so there is no staging step.
"Nothing to commit" means the working-copy commit ``@`` has an empty diff
for the change set's paths.

- init:   ``jj git init [--colocate]`` then the sentinel commit
- commit: ``jj diff --summary -r @ <filesets>``, then ``jj commit``
- pull:   ``jj git fetch`` then ``jj rebase --branch @ --destination
  <bookmark>@<remote>``
- push:   ``jj bookmark set <bookmark> --revision @-`` then
  ``jj git push --allow-new``
"""

from __future__ import annotations

import logging

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
from todosync.core.vcs.process import CommandResult

logger = logging.getLogger(__name__)

_LOG_TEMPLATE = (
    'author.name() ++ "\\t" ++ author.email() ++ "\\n" ++ '
    'committer.name() ++ "\\t" ++ committer.email() ++ "\\n"'
)


def fileset(path: str) -> str:
    """Quote a storage-relative path as a jj fileset rooted at the workspace."""
    escaped = path.replace("\\", "\\\\").replace('"', '\\"')
    return f'root:"{escaped}"'


@register_backend(Backend.JJ)
class JujutsuBackend(CommandBackend):
    """Working-copy adapter built on jj (git-compatible storage)."""

    executable = "jj"

    def _run(self, *args: str) -> CommandResult:
        return super()._run("--color=never", *args)

    @property
    def _remote_bookmark(self) -> str:
        return f"{self.repo.default_branch}@{self.repo.remote_name}"

    def init(self) -> OperationOutcome:
        if self.sentinel.exists():
            return self._already_initialized()

        # A cloned workspace already has its .jj directory
        if not (self.repo.storage_path / ".jj").is_dir():
            args = ["git", "init"]
            if self.repo.colocate:
                args.append("--colocate")
            result = self._run(*args)
            if not result.success:
                return self._failed(Stage.INIT, result)

        return self._bootstrap_commit()

    def commit(self, change_set: ChangeSet) -> OperationOutcome:
        filesets = [fileset(p) for p in change_set.paths]

        diff = self._run("diff", "--summary", "--revisions", "@", "--", *filesets)
        if not diff.success:
            return self._failed(Stage.COMMIT, diff)
        if not diff.output.strip():
            logger.info("Nothing to commit for: %s", change_set.message)
            return Done(stage=Stage.COMMIT, changed=False, message="nothing to commit")

        result = self._run("commit", "--message", change_set.message, "--", *filesets)
        if not result.success:
            return self._failed(Stage.COMMIT, result)

        logger.info("Committed %d path(s): %s", len(change_set.paths), change_set.message)
        return Done(stage=Stage.COMMIT, message=change_set.message)

    def pull(self) -> OperationOutcome:
        if not self.sentinel.exists():
            return self._not_initialized()

        result = self._run("git", "fetch", "--remote", self.repo.remote_name)
        if not result.success:
            return self._failed(Stage.PULL, result)

        result = self._run(
            "rebase",
            "--branch",
            "@",
            "--destination",
            self._remote_bookmark,
        )
        if not result.success:
            return self._failed(Stage.PULL, result)

        logger.info("Fetched and rebased onto %s", self._remote_bookmark)
        return Done(stage=Stage.PULL)

    def push(self) -> OperationOutcome:
        # The working-copy commit @ is always the empty change after a commit
        result = self._run(
            "bookmark",
            "set",
            self.repo.default_branch,
            "--revision",
            "@-",
        )
        if not result.success:
            return self._failed(Stage.PUSH, result)

        result = self._run(
            "git",
            "push",
            "--allow-new",
            "--remote",
            self.repo.remote_name,
            "--bookmark",
            self.repo.default_branch,
        )
        if not result.success:
            return self._failed(Stage.PUSH, result)

        logger.info("Pushed bookmark %s to %s", self.repo.default_branch, self.repo.remote_name)
        return Done(stage=Stage.PUSH)

    def current_user(self) -> Identity:
        return Identity(
            name=self._read_config_value("config", "get", "user.name"),
            email=self._read_config_value("config", "get", "user.email"),
        )

    def all_contributors(self) -> ContributorSet:
        result = self._run("log", "--no-graph", "--revisions", "all()", "--template", _LOG_TEMPLATE)
        if not result.success:
            logger.debug("jj log failed, no contributors: %s", result.output.strip())
            return ContributorSet()

        contributors = ContributorSet()
        for line in result.output.splitlines():
            name, _, email = line.partition("\t")
            # The root commit has an empty author and is skipped by the set
            contributors.add(Identity(name=name.strip(), email=email.strip()))
        return contributors
