"""
Unit tests for the route table.
"""

import pytest

from switchyard.routing.pattern import MatcherKind
from switchyard.routing.table import RESERVED_KEYS, RouteTable


def handler_a(app, next):
    return "a"


def handler_b(app, next):
    return "b"


class TestRouteTable:
    """Tests for RouteTable."""

    def test_register_and_lookup(self):
        """Test a registered entry can be looked up by key."""
        table = RouteTable()
        entry = table.register("/users", handler_a)

        assert table.lookup("/users") is entry
        assert entry.handlers == (handler_a,)
        assert not entry.is_chain

    def test_multi_controller_entry(self):
        """Test several handlers make one chained entry."""
        table = RouteTable()
        entry = table.register("/admin", handler_a, handler_b)

        assert entry.handlers == (handler_a, handler_b)
        assert entry.is_chain

    def test_register_without_handlers_raises(self):
        """Test the handler list is never empty."""
        with pytest.raises(ValueError):
            RouteTable().register("/users")

    def test_entries_follow_registration_order(self):
        """Test registration order is match order."""
        table = RouteTable()
        table.register("/b", handler_a)
        table.register("/a", handler_a)
        table.register("/c", handler_a)

        assert [entry.key for entry in table.entries()] == ["/b", "/a", "/c"]

    def test_reregistration_replaces_in_place(self):
        """Test last write wins and the key keeps its position."""
        table = RouteTable()
        table.register("/x", handler_a)
        table.register("/y", handler_a)
        table.register("/x", handler_b)

        assert len(table) == 2
        assert table.lookup("/x").handlers == (handler_b,)
        assert [entry.key for entry in table.entries()] == ["/x", "/y"]

    def test_reserved_keys_are_not_iterated(self):
        """Test 404/error/crash never take part in path matching."""
        table = RouteTable()
        for key in RESERVED_KEYS:
            table.set(key, handler_a)
        table.register("/", handler_b)

        assert [entry.key for entry in table.entries()] == ["/"]
        assert table.lookup("404").handlers == (handler_a,)
        assert "crash" in table

    def test_compiled_pattern_is_cached(self):
        """Test patterns compile once per key."""
        table = RouteTable()
        table.register("/users/:id", handler_a)

        first = table.compiled("/users/:id")
        assert first.kind is MatcherKind.NAMED_REGEX
        assert table.compiled("/users/:id") is first

    def test_reregistration_invalidates_cache(self):
        """Test registering a key again drops its compiled pattern."""
        table = RouteTable()
        table.register("/users/:id", handler_a)
        first = table.compiled("/users/:id")

        table.register("/users/:id", handler_b)

        assert table.compiled("/users/:id") is not first

    def test_remove(self):
        """Test entries can be removed."""
        table = RouteTable()
        table.register("/x", handler_a)

        assert table.remove("/x") is True
        assert table.remove("/x") is False
        assert table.lookup("/x") is None

    def test_keys_include_reserved(self):
        """Test keys() lists every stored key."""
        table = RouteTable()
        table.register("/", handler_a)
        table.set("404", handler_b)

        assert table.keys() == ["/", "404"]
