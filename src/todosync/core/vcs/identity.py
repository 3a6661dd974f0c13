"""
Identity resolution.

Wraps an adapter's ``current_user()`` and ``all_contributors()`` with the
fallback and normalization policy used by author defaulting and assignee
suggestions:

- an unconfigured identity is "unknown": no auto-fill, no highlighting
- contributor identities are trimmed, angle brackets are stripped from
  emails, and duplicates collapse case-insensitively on the email
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from todosync.core.vcs.backend import VcsBackend
from todosync.core.vcs.models import ContributorSet, Identity

logger = logging.getLogger(__name__)

_BRACKETED = re.compile(r"^(?P<name>.*?)\s*<(?P<email>[^<>]*)>\s*$")


def add_angle_brackets(value: str) -> str:
    """
    Wrap the email in a ``name email`` string with angle brackets.

    The email is taken to be the last word containing ``@``. Strings that
    are already bracketed, or contain no email, are returned unchanged.

    Example:
        >>> add_angle_brackets("Jane Doe jane@example.com")
        'Jane Doe <jane@example.com>'
    """
    at = value.find("@")
    if at == -1:
        return value
    start = value.rfind(" ", 0, at) + 1
    email = value[start:]
    if email.startswith("<") and email.endswith(">"):
        return value
    return f"{value[:start]}<{email}>"


def parse_identity(value: str) -> Identity:
    """
    Parse ``Name <email>``, ``Name email@host`` or a bare email.

    A value without an ``@`` is treated as a bare name.
    """
    value = add_angle_brackets(value.strip())
    if not value:
        return Identity()

    match = _BRACKETED.match(value)
    if match:
        return normalize_identity(Identity(name=match["name"], email=match["email"]))
    return normalize_identity(Identity(name=value))


def normalize_identity(identity: Identity) -> Identity:
    """Trim whitespace and strip stray angle brackets from the email."""
    email = identity.email.strip().strip("<>").strip()
    return Identity(name=" ".join(identity.name.split()), email=email)


def normalize_contributors(identities: Iterable[Identity]) -> ContributorSet:
    return ContributorSet(normalize_identity(i) for i in identities)


@dataclass(frozen=True)
class AssigneeSuggestion:
    """One entry in an assignee suggestion list."""

    identity: Identity
    is_current_user: bool = False

    def label(self) -> str:
        text = self.identity.display()
        if self.is_current_user:
            return f"{text} (you)"
        return text


class IdentityResolver:
    """
    Current-user and contributor lookups with graceful degradation.

    Example:
        >>> resolver = IdentityResolver(get_backend(snapshot))
        >>> resolver.default_author()  # None when nothing is configured
        'Jane Doe <jane@example.com>'
    """

    def __init__(self, backend: VcsBackend) -> None:
        self.backend = backend

    def current_user(self) -> Identity:
        """The configured identity, or an empty Identity when unknown."""
        identity = normalize_identity(self.backend.current_user())
        if identity.is_empty:
            logger.info("No %s identity configured", self.backend.backend_name)
        return identity

    def contributors(self) -> ContributorSet:
        return normalize_contributors(self.backend.all_contributors())

    def default_author(self) -> str | None:
        """Author string for new items, or None to skip auto-fill."""
        identity = self.current_user()
        if identity.is_empty:
            return None
        return identity.display()

    def is_current_user(self, identity: Identity | str) -> bool:
        me = self.current_user()
        if not me.email:
            return False
        if isinstance(identity, str):
            identity = parse_identity(identity)
        return identity.email.casefold() == me.email.casefold()

    def rank_assignees(self, extra: Iterable[str] = ()) -> list[AssigneeSuggestion]:
        """
        Suggestions for an assignee field.

        Contributors from history plus any ``extra`` raw strings (e.g.
        assignees already used in tasks). The current user, when known, is
        listed first and flagged; everyone else keeps the set's sorted order.

        Args:
            extra: Additional ``Name <email>`` strings to merge in

        Returns:
            Ordered list of AssigneeSuggestion
        """
        candidates = self.contributors()
        for raw in extra:
            candidates.add(parse_identity(raw))

        me = self.current_user()
        me_key = me.email.casefold() if me.email else None

        ranked: list[AssigneeSuggestion] = []
        others: list[AssigneeSuggestion] = []
        for identity in candidates:
            if me_key is not None and identity.key == me_key:
                ranked.append(AssigneeSuggestion(identity, is_current_user=True))
            else:
                others.append(AssigneeSuggestion(identity))
        return ranked + others
