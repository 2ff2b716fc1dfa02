"""Cursor and open/closed state for buffers."""

from __future__ import annotations

from dataclasses import dataclass, field

from codemarks.marks.positions import Position


@dataclass(slots=True)
class BufferState:
    """Mutable cursor and lifecycle flag of one buffer."""

    cursor: Position = field(default_factory=lambda: Position(0, 0))
    closed: bool = False

    def set_cursor(self, line: int, column: int) -> None:
        self.cursor = Position(line, column)
