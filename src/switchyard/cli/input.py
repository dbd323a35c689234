"""
Command-line input.

The first positional argument is the route path; the rest are exposed as
``arguments``, and ``--name=value`` / ``--flag`` options as ``options``:

    python -m switchyard call app:setup /report/daily --format=csv extra
        path()        "/report/daily"
        options       {"format": "csv"}
        arguments     ["extra"]
"""

import sys
from typing import Dict, List, Optional, Sequence, Union

from ..transport import Input


class CliInput(Input):
    """Request data taken from argv."""

    def __init__(self, argv: Optional[Sequence[str]] = None):
        super().__init__()
        self.argv: List[str] = list(sys.argv[1:] if argv is None else argv)
        self.options: Dict[str, Union[str, bool]] = {}
        self.arguments: List[str] = []
        self._path = "/"
        self._parse()

    def _parse(self) -> None:
        positional = []
        for arg in self.argv:
            if arg.startswith("--") and len(arg) > 2:
                name, sep, value = arg[2:].partition("=")
                self.options[name] = value if sep else True
            else:
                positional.append(arg)
        if positional:
            self._path = positional[0] or "/"
            self.arguments = positional[1:]

    def path(self) -> str:
        return self._path

    def method(self) -> str:
        return "CLI"

    def option(self, name: str, default: Optional[Union[str, bool]] = None) -> Optional[Union[str, bool]]:
        return self.options.get(name, default)
