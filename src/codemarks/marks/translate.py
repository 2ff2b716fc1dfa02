"""Keep a position pointing at the same text while the buffer is edited.

Every edit is a replaced range plus the inserted text. A position is first
classified against the range and then moved:

* before the range: untouched;
* after the range: shifted by the lines (and, on the range's last line, the
  columns) that the edit removed and inserted;
* inside the range: its text is gone, so it snaps to the end of the insertion.
  Overlapped marks are relocated, never deleted.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from .positions import EditDescriptor, EditRange, Position


class Relation(Enum):
    BEFORE = -1
    INSIDE = 0
    AFTER = 1


def classify(position: Position, span: EditRange) -> Relation:
    if position.line > span.end.line:
        return Relation.AFTER
    if position.line == span.end.line and position.column >= span.end.column:
        return Relation.AFTER
    if position.line < span.start.line:
        return Relation.BEFORE
    if position.line == span.start.line and position.column < span.start.column:
        return Relation.BEFORE
    return Relation.INSIDE


def translate(position: Position, edit: EditDescriptor) -> Position:
    """Return where ``position`` lands after ``edit``; the same object if unmoved."""

    span = edit.range
    relation = classify(position, span)
    if relation is Relation.BEFORE:
        return position

    inserted_lines = edit.inserted_line_breaks
    tail = edit.last_line_length

    if relation is Relation.INSIDE:
        if edit.is_multiline:
            return Position(span.start.line + inserted_lines, span.end.column + tail)
        return Position(span.start.line, span.start.column + tail)

    column = position.column
    if position.line == span.end.line:
        if edit.is_multiline:
            column = tail + (position.column - span.end.column)
        else:
            column = position.column + tail - (span.end.column - span.start.column)
    line = position.line + inserted_lines - span.line_span
    moved = Position(line, column)
    return position if moved == position else moved


def translate_all(position: Position, edits: Iterable[EditDescriptor]) -> Position:
    """Apply ``edits`` in order, feeding each result into the next edit."""

    for edit in edits:
        position = translate(position, edit)
    return position


__all__ = ["Relation", "classify", "translate", "translate_all"]
