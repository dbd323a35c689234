"""
Unit tests for the output buffer.
"""

import pytest

from switchyard.buffer import OutputBuffer


class TestOutputBuffer:
    """Tests for OutputBuffer."""

    def test_start_returns_previous_level(self):
        """Test scopes are identified by the level before opening."""
        buffer = OutputBuffer()

        assert buffer.start() == 0
        assert buffer.start() == 1
        assert buffer.level == 2

    def test_write_without_scope_raises(self):
        """Test writing needs an open scope."""
        with pytest.raises(RuntimeError):
            OutputBuffer().write("x")

    def test_end_returns_outermost_first(self):
        """Test closing nested scopes joins them in order."""
        buffer = OutputBuffer()
        level = buffer.start()
        buffer.write("outer ")
        buffer.start()
        buffer.write(b"inner")

        assert buffer.end(level) == "outer inner"
        assert buffer.level == 0

    def test_discard_drops_text(self):
        """Test discard closes scopes without returning anything."""
        buffer = OutputBuffer()
        buffer.start()
        buffer.write("kept")
        level = buffer.start()
        buffer.write("dropped")

        buffer.discard(level)

        assert buffer.level == 1
        assert buffer.contents() == "kept"

    def test_clean_and_clean_all(self):
        """Test cleaning empties scopes but keeps them open."""
        buffer = OutputBuffer()
        buffer.start()
        buffer.write("a")
        buffer.start()
        buffer.write("b")

        buffer.clean()
        assert buffer.contents() == ""
        assert buffer.level == 2

        buffer.clean_all()
        assert buffer.end(0) == ""

    def test_get_clean(self):
        """Test get_clean closes only the innermost scope."""
        buffer = OutputBuffer()
        buffer.start()
        buffer.start()
        buffer.write("inner")

        assert buffer.get_clean() == "inner"
        assert buffer.level == 1
        assert OutputBuffer().get_clean() == ""
