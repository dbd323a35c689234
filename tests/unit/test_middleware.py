"""
Unit tests for the middleware chain protocol.
"""

import pytest

from switchyard.errors import BadMiddlewareError
from switchyard.middleware.base import (
    FunctionMiddleware,
    Middleware,
    MiddlewareChain,
    function_middleware,
    to_middleware,
)
from switchyard.routing.router import Router


class Recorder(Middleware):
    """Records before/after markers around next()."""

    calls = None

    def __init__(self, name="rec", calls=None):
        self.label = name
        self.calls = calls if calls is not None else []

    def call(self):
        self.calls.append(f"{self.label} before")
        self.next()
        self.calls.append(f"{self.label} after")


class Header(Middleware):
    """Middleware importable by "module:Class" reference."""

    def call(self):
        self.app.output.header("X-Test", "yes")
        self.next()


class TestToMiddleware:
    """Tests for coercing registration values."""

    def test_instance_is_kept(self):
        """Test Middleware instances are used as is."""
        unit = Recorder()
        assert to_middleware(unit) is unit

    def test_class_is_instantiated(self):
        """Test Middleware subclasses are instantiated."""
        assert isinstance(to_middleware(Recorder), Recorder)

    def test_class_reference_string(self):
        """Test "module:Class" references are imported and instantiated."""
        unit = to_middleware(f"{__name__}:Header")
        assert isinstance(unit, Header)

    def test_callable_is_wrapped(self):
        """Test plain callables become FunctionMiddleware."""
        def noop(app, next):
            next()

        unit = to_middleware(noop)
        assert isinstance(unit, FunctionMiddleware)
        assert unit.name == "noop"

    @pytest.mark.parametrize("value", [42, None, object(), "not a reference", f"{__name__}:Recorder.label"])
    def test_bad_values_raise(self, value):
        """Test anything else raises BadMiddlewareError."""
        with pytest.raises(BadMiddlewareError, match="Bad middleware can not be added"):
            to_middleware(value)

    def test_non_middleware_class_raises(self):
        """Test classes that aren't Middleware are rejected."""
        with pytest.raises(BadMiddlewareError):
            to_middleware(dict)

    def test_bad_middleware_is_a_type_error(self):
        """Test callers catching TypeError still see the failure."""
        with pytest.raises(TypeError):
            to_middleware(42)


class TestMiddlewareChain:
    """Tests for MiddlewareChain."""

    def test_add_and_len(self):
        """Test units are appended in order."""
        chain = MiddlewareChain()
        first = chain.add(Recorder("a"))
        second = chain.add(Recorder("b"))

        assert len(chain) == 2
        assert list(chain) == [first, second]

    def test_use_adds_several_and_chains(self, make_cli_app):
        """Test use() coerces each value in order and returns the chain."""
        app = make_cli_app()
        chain = MiddlewareChain()

        def noop(app, next):
            next()

        assert chain.use(Recorder("a"), f"{__name__}:Header", noop) is chain

        first, second, third = list(chain)
        assert isinstance(first, Recorder)
        assert isinstance(second, Header)
        assert isinstance(third, FunctionMiddleware)

        head = chain.link(app, app.router)
        assert head is first
        assert first.get_next() is second
        assert second.get_next() is third
        assert third.get_next() is app.router

    def test_use_rejects_bad_values(self):
        """Test use() fails like add() on unusable values."""
        with pytest.raises(BadMiddlewareError):
            MiddlewareChain().use(Recorder(), 42)

    def test_link_appends_terminal(self, make_cli_app):
        """Test the terminal unit ends the chain."""
        app = make_cli_app()
        chain = MiddlewareChain()
        first = chain.add(Recorder("a"))

        head = chain.link(app, app.router)

        assert head is first
        assert first.get_next() is app.router
        assert app.router.get_next() is None
        assert first.app is app

    def test_link_does_not_duplicate_terminal(self, make_cli_app):
        """Test a terminal already in the chain isn't added twice."""
        app = make_cli_app()
        chain = MiddlewareChain()
        chain.add(app.router)
        after = chain.add(Recorder("after router"))

        head = chain.link(app, app.router)

        assert head is app.router
        assert app.router.get_next() is after
        assert after.get_next() is None

    def test_link_without_units_returns_terminal(self, make_cli_app):
        """Test an empty chain is just the terminal."""
        app = make_cli_app()

        assert MiddlewareChain().link(app, app.router) is app.router

    def test_call_order(self, make_cli_app):
        """Test units run inward in order and unwind in reverse."""
        app = make_cli_app()
        calls = []
        chain = MiddlewareChain()
        chain.add(Recorder("a", calls))
        chain.add(Recorder("b", calls))

        chain.link(app, Recorder("terminal", calls)).call()

        assert calls == [
            "a before", "b before",
            "terminal before", "terminal after",
            "b after", "a after",
        ]

    def test_next_without_successor_is_noop(self):
        """Test next() at the end of the chain does nothing."""
        unit = Recorder()
        unit.call()

        assert unit.calls == ["rec before", "rec after"]


class TestFunctionMiddleware:
    """Tests for function middleware."""

    def test_decorator(self, make_cli_app):
        """Test @function_middleware builds a unit from a function."""
        app = make_cli_app()

        @function_middleware
        def powered_by(app, next):
            app.output.header("X-Powered-By", "switchyard")
            next()

        powered_by.set_app(app)
        powered_by.call()

        assert app.output.header("X-Powered-By") == "switchyard"

    def test_return_value_is_echoed(self, make_cli_app):
        """Test a str return value is written out."""
        app = make_cli_app()
        unit = FunctionMiddleware(lambda app, next: "banner")
        unit.set_app(app)

        unit.call()

        assert app.output.body() == "banner"


class TestStop:
    """Tests for Stop inside middleware."""

    def test_stop_prevents_later_units(self, make_cli_app, stream):
        """Test Stop skips the rest of the chain, router included."""
        app = make_cli_app(["/"])
        calls = []

        def gate(app, next):
            app.echo("denied")
            app.stop()

        app.add(gate)
        app.add(lambda app, next: calls.append("second middleware"))
        app.on("/", lambda app, next: calls.append("route"))

        app.run()

        assert calls == []
        assert app.output.body() == "denied"
        assert stream.getvalue() == "denied"

    def test_stop_after_next_keeps_everything(self, make_cli_app):
        """Test Stop after next() keeps route output and the unit's own."""
        app = make_cli_app(["/"])

        def tail(app, next):
            next()
            app.echo(" + footer")
            app.stop()

        app.add(tail)
        app.on("/", lambda app, next: "page")

        app.run()

        assert app.output.body() == "page + footer"

    def test_router_receives_the_app(self, make_cli_app):
        """Test the router is linked as terminal with the app."""
        app = make_cli_app(["/"])
        recorder = app.add(Recorder("mw"))
        app.on("/", lambda app, next: "ok")

        app.run()

        assert isinstance(recorder.get_next(), Router)
        assert recorder.get_next().app is app
        assert app.output.body() == "ok"
