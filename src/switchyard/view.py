"""
=============================================================================
VIEW RENDERING
=============================================================================

Templates are looked up relative to the ``views`` directory. The engine is
picked by file extension:

    app.engine("md", MarkdownEngine)       # class, instance or "mod:Class"
    app.render("index.html", {"title": "Home"})   → Jinja2 (default)
    app.render("notes.md", {"notes": notes})      → MarkdownEngine

An engine is anything with ``render(path, data, directory) -> str``.

=============================================================================
"""

from typing import Any, Mapping, Optional, Protocol

from jinja2 import Environment, FileSystemLoader, select_autoescape


class Engine(Protocol):
    def render(self, path: str, data: Mapping[str, Any], directory: str) -> str:
        ...


class Jinja2Engine:
    """Default engine: Jinja2 with autoescaping for markup templates."""

    def __init__(self):
        self._environments = {}

    def environment(self, directory: str) -> Environment:
        env = self._environments.get(directory)
        if env is None:
            env = self._environments[directory] = Environment(
                loader=FileSystemLoader(directory),
                autoescape=select_autoescape(
                    enabled_extensions=["html", "htm", "xml"],
                    default_for_string=True,
                ),
            )
        return env

    def render(self, path: str, data: Mapping[str, Any], directory: str) -> str:
        return self.environment(directory).get_template(path).render(**data)


default_engine = Jinja2Engine()


class View:
    """
    A template bound to its data.

    Usage:
        View("hello.html", {"name": "Bob"}, directory="views").render()
        str(view)    # same thing
    """

    def __init__(
        self,
        path: str,
        data: Optional[Mapping[str, Any]] = None,
        engine: Optional[Engine] = None,
        directory: str = "views",
    ):
        self.path = path
        self.data = dict(data or {})
        self.engine = engine or default_engine
        self.directory = directory

    def render(self) -> str:
        return self.engine.render(self.path, self.data, self.directory)

    def __str__(self) -> str:
        return self.render()
