"""Command-line transport: argv in, text stream out."""

from .input import CliInput
from .output import CliOutput

__all__ = ["CliInput", "CliOutput"]
