"""Line-based text storage for in-memory buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from codemarks.marks.positions import EditDescriptor, Position


@dataclass(slots=True)
class BufferDocument:
    """Text kept as a list of lines without their ``\\n`` terminators.

    Edits never mutate a document; :meth:`apply` returns a successor with the
    version bumped.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(_lines=text.split("\n"), version=0)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def clamp(self, position: Position) -> Position:
        """Nearest valid position, for targets that drifted past the text."""

        line = min(position.line, len(self._lines) - 1)
        column = min(position.column, len(self._lines[line]))
        return Position(line, column)

    def apply(self, edit: EditDescriptor) -> "BufferDocument":
        start, end = edit.range.start, edit.range.end
        head = self._lines[start.line][: start.column]
        tail = self._lines[end.line][end.column :]
        replacement = (head + edit.text + tail).split("\n")
        lines = list(self._lines)
        lines[start.line : end.line + 1] = replacement
        return BufferDocument(_lines=lines, version=self.version + 1)
