"""
Unit tests for controllers and the controller factory.
"""

import pytest

from switchyard.controller import Controller, factory, with_action
from switchyard.errors import HandlerResolutionError
from switchyard.middleware.base import Middleware


def show(app, next):
    return "show"


class Articles(Controller):
    def index(self):
        return "articles"

    def handle(self):
        return "default"


class Audit(Middleware):
    def call(self):
        self.next()


class NoDefault(Controller):
    def index(self):
        return "index only"


NOT_CALLABLE = 42


class TestFactory:
    """Tests for resolving handler references."""

    def test_function(self):
        """Test functions are wrapped in a Controller."""
        unit = factory(show)

        assert isinstance(unit, Controller)
        assert unit.action is show
        assert unit.name == "show"

    def test_unit_instance(self):
        """Test chain units are used as is."""
        unit = Audit()
        assert factory(unit) is unit

    def test_unit_class(self):
        """Test unit classes are instantiated."""
        assert isinstance(factory(Articles), Articles)
        assert isinstance(factory(Audit), Audit)

    def test_function_reference(self):
        """Test "module:function" references."""
        unit = factory(f"{__name__}:show")

        assert unit.action is show

    def test_class_reference(self):
        """Test "module:Class" references."""
        assert isinstance(factory(f"{__name__}:Articles"), Articles)

    def test_named_method_without_default_action(self):
        """Test a class without handle() still resolves when a method is named."""
        unit = factory(f"{__name__}:NoDefault.index")

        assert isinstance(unit, NoDefault)
        assert unit.action == "index"

    def test_missing_default_action_fails_at_resolution(self, make_cli_app):
        """Test the route attempt fails before any handler runs."""
        app = make_cli_app()
        app.on("/", NoDefault)

        with pytest.raises(HandlerResolutionError, match="no default action"):
            app.router.dispatch("/")

    def test_method_reference(self):
        """Test "module:Class.method" binds the action."""
        unit = factory(f"{__name__}:Articles.index")

        assert isinstance(unit, Articles)
        assert unit.action == "index"
        assert unit.name == "Articles.index"

    @pytest.mark.parametrize("reference", [
        "no_such_module_xyz:handler",
        "missing_colon",
        f"{__name__}:nothing_here",
        f"{__name__}:Articles.nothing",
        f"{__name__}:Audit.call",
        f"{__name__}:NoDefault",
        NoDefault,
        Controller,
        NOT_CALLABLE,
        dict,
    ])
    def test_unresolvable(self, reference):
        """Test bad references raise HandlerResolutionError."""
        with pytest.raises(HandlerResolutionError):
            factory(reference)


class TestControllerInvoke:
    """Tests for running controllers."""

    def test_default_action(self, make_cli_app):
        """Test controllers without an action call handle()."""
        app = make_cli_app()
        unit = Articles().set_app(app)

        unit.call()

        assert app.output.body() == "default"

    def test_named_action(self, make_cli_app):
        """Test the named method is called with the args."""
        app = make_cli_app()

        class Echo(Controller):
            def say(self, word):
                return word

        unit = Echo(action="say").set_args(("hello",))
        unit.set_app(app)
        unit.call()

        assert app.output.body() == "hello"

    def test_missing_handle(self, make_cli_app):
        """Test a bare Controller has no default action."""
        unit = Controller().set_app(make_cli_app())

        with pytest.raises(NotImplementedError):
            unit.call()

    def test_non_text_results_are_ignored(self, make_cli_app):
        """Test only str/bytes results are echoed."""
        app = make_cli_app()
        unit = Controller(lambda app, next: {"not": "text"}).set_app(app)

        unit.call()

        assert app.output.body() == ""


class TestWithAction:
    """Tests for pointing references at an HTTP-method action."""

    def test_class_string(self):
        """Test class references get the action appended."""
        assert with_action(f"{__name__}:Articles", "get") == f"{__name__}:Articles.get"

    def test_method_string_unchanged(self):
        """Test references already naming a method are kept."""
        reference = f"{__name__}:Articles.index"
        assert with_action(reference, "get") == reference

    def test_controller_class(self):
        """Test Controller subclasses become bound instances."""
        unit = with_action(Articles, "post")

        assert isinstance(unit, Articles)
        assert unit.action == "post"

    def test_function_unchanged(self):
        """Test plain functions are returned as is."""
        assert with_action(show, "get") is show
