"""Command-line output: the body goes to a text stream, headers are ignored."""

import sys
from typing import Optional, TextIO, Union

from ..transport import Output


class CliOutput(Output):
    """
    Response adapter for terminals.

    The status code only survives as the process exit code (see exit_code).
    """

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__()
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved late so pytest's capsys and redirected stdout are honoured
        return self._stream if self._stream is not None else sys.stdout

    @property
    def exit_code(self) -> int:
        return 0 if self._status < 400 else 1

    def send(self, data: Union[str, bytes]) -> None:
        if isinstance(data, bytes):
            data = data.decode(self.charset)
        if data:
            self.stream.write(data)
            self.stream.flush()
