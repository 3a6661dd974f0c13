"""Tests for identity parsing and resolution."""

import pytest

from todosync.core.vcs.identity import (
    AssigneeSuggestion,
    IdentityResolver,
    add_angle_brackets,
    normalize_identity,
    parse_identity,
)
from todosync.core.vcs.models import ContributorSet, Identity


class FakeIdentityBackend:
    backend_name = "fake"

    def __init__(self, me=None, contributors=()):
        self.me = me or Identity()
        self.contributors = list(contributors)

    def current_user(self):
        return self.me

    def all_contributors(self):
        return ContributorSet(self.contributors)


JANE = Identity(name="Jane Doe", email="jane@example.com")
BOB = Identity(name="Bob", email="bob@example.com")


class TestAddAngleBrackets:
    """Test wrapping the email part in angle brackets."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Jane Doe jane@example.com", "Jane Doe <jane@example.com>"),
            ("jane@example.com", "<jane@example.com>"),
            ("Jane Doe <jane@example.com>", "Jane Doe <jane@example.com>"),
            ("Jane Doe", "Jane Doe"),
        ],
    )
    def test_add_angle_brackets(self, value, expected):
        assert add_angle_brackets(value) == expected


class TestParseIdentity:
    """Test parsing free-form identity strings."""

    def test_bracketed(self):
        assert parse_identity("Jane Doe <jane@example.com>") == JANE

    def test_unbracketed(self):
        assert parse_identity("Jane Doe jane@example.com") == JANE

    def test_bare_email(self):
        assert parse_identity("jane@example.com") == Identity(email="jane@example.com")

    def test_bracketed_email_only(self):
        assert parse_identity("<jane@example.com>") == Identity(email="jane@example.com")

    def test_bare_name(self):
        assert parse_identity("  Jane   Doe ") == Identity(name="Jane Doe")

    def test_empty(self):
        assert parse_identity("   ").is_empty


class TestNormalizeIdentity:
    def test_strips_brackets_and_whitespace(self):
        raw = Identity(name="  Jane \t Doe ", email=" <jane@example.com> ")
        assert normalize_identity(raw) == JANE


class TestIdentityResolver:
    """Test current-user fallbacks and assignee ranking."""

    def test_default_author(self):
        resolver = IdentityResolver(FakeIdentityBackend(me=JANE))
        assert resolver.default_author() == "Jane Doe <jane@example.com>"

    def test_default_author_unknown(self):
        """Test that an unconfigured identity disables auto-fill."""
        resolver = IdentityResolver(FakeIdentityBackend())
        assert resolver.default_author() is None
        assert resolver.current_user().is_empty

    def test_is_current_user(self):
        resolver = IdentityResolver(FakeIdentityBackend(me=JANE))

        assert resolver.is_current_user("Jane <JANE@example.com>")
        assert resolver.is_current_user(JANE)
        assert not resolver.is_current_user(BOB)

    def test_is_current_user_unknown(self):
        """Test that nobody is highlighted when the identity is unknown."""
        resolver = IdentityResolver(FakeIdentityBackend(me=Identity(name="Jane Doe")))
        assert not resolver.is_current_user(JANE)

    def test_rank_assignees_puts_current_user_first(self):
        resolver = IdentityResolver(FakeIdentityBackend(me=JANE, contributors=[BOB, JANE]))

        ranked = resolver.rank_assignees()

        assert ranked == [
            AssigneeSuggestion(JANE, is_current_user=True),
            AssigneeSuggestion(BOB),
        ]
        assert ranked[0].label() == "Jane Doe <jane@example.com> (you)"
        assert ranked[1].label() == "Bob <bob@example.com>"

    def test_rank_assignees_merges_extra(self):
        """Test that extra raw strings are parsed and deduplicated."""
        resolver = IdentityResolver(FakeIdentityBackend(contributors=[BOB]))

        ranked = resolver.rank_assignees(["Carol carol@example.com", "Bob <BOB@example.com>"])

        assert [s.identity.name for s in ranked] == ["Bob", "Carol"]
        assert not any(s.is_current_user for s in ranked)

    def test_contributors_are_normalized(self):
        backend = FakeIdentityBackend(contributors=[Identity(name=" Bob ", email="<bob@example.com>")])
        assert list(IdentityResolver(backend).contributors()) == [BOB]
