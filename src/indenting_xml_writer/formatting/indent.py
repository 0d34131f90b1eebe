"""Indentation state machine for structural writes."""

from typing import Optional

from ..stream import StreamWriter


class IndentEngine:
    """Computes the newline and indentation preceding start tags, end tags and comments.

    Opening always starts a new line. Closing starts a new line only when it
    is not the first close since the most recent open, so a leaf keeps its end
    tag on its own line while sibling and ancestor closes each get one.

    When ``indent_unit`` is ``None`` every operation is a no-op.
    """

    def __init__(self, writer: StreamWriter, indent_unit: Optional[str]) -> None:
        self._writer = writer
        self.indent_unit = indent_unit
        self.level = 0
        self.closing = False

    @property
    def enabled(self) -> bool:
        return self.indent_unit is not None

    def newline(self) -> None:
        """Write a newline followed by the indentation of the current level."""
        if self.indent_unit is not None:
            self._writer.write_characters("\n" + self.indent_unit * self.level)

    def before_start(self) -> None:
        if not self.enabled:
            return
        self.newline()
        self.level += 1
        self.closing = False

    def before_end(self) -> None:
        if not self.enabled:
            return
        # an unbalanced end is left for the underlying writer to reject
        if self.level > 0:
            self.level -= 1
        if self.closing:
            self.newline()
        self.closing = True

    def before_comment(self) -> None:
        self.newline()
