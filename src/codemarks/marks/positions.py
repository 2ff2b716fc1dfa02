"""Value types describing document positions and text edits."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Zero-based ``(line, column)`` location inside a buffer."""

    line: int
    column: int

    def __post_init__(self) -> None:
        if self.line < 0 or self.column < 0:
            raise ValueError(f"Position must be non-negative, got {self.as_tuple()}")

    def as_tuple(self) -> tuple[int, int]:
        return (self.line, self.column)

    def shifted(self, *, columns: int = 0) -> "Position":
        return Position(self.line, self.column + columns)


@dataclass(frozen=True, slots=True)
class EditRange:
    """Half-open ``[start, end)`` span of replaced text."""

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"EditRange end {self.end} precedes start {self.start}")

    @classmethod
    def at(cls, position: Position) -> "EditRange":
        return cls(position, position)

    @classmethod
    def from_tuples(
        cls, start: tuple[int, int], end: tuple[int, int]
    ) -> "EditRange":
        return cls(Position(*start), Position(*end))

    @property
    def line_span(self) -> int:
        return self.end.line - self.start.line

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True, slots=True)
class EditDescriptor:
    """One atomic replacement: ``range`` is removed and ``text`` inserted."""

    range: EditRange
    text: str = ""

    @classmethod
    def insert(cls, position: Position, text: str) -> "EditDescriptor":
        return cls(EditRange.at(position), text)

    @classmethod
    def delete(cls, span: EditRange) -> "EditDescriptor":
        return cls(span, "")

    @classmethod
    def replace(cls, start: Position, end: Position, text: str) -> "EditDescriptor":
        return cls(EditRange(start, end), text)

    @property
    def inserted_line_breaks(self) -> int:
        return self.text.count("\n")

    @property
    def last_line_length(self) -> int:
        return len(self.text.rsplit("\n", 1)[-1])

    @property
    def is_multiline(self) -> bool:
        return "\n" in self.text


__all__ = ["Position", "EditRange", "EditDescriptor"]
