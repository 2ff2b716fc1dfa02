"""Validation helpers shared across buffer services."""

from __future__ import annotations

from codemarks.marks.positions import EditDescriptor, Position

from .document import BufferDocument


class BufferValidationError(RuntimeError):
    """Raised when a position or edit does not fit the buffer's text."""

    def __init__(self, message: str, *, position: Position | None = None) -> None:
        super().__init__(message)
        self.position = position


def ensure_position(document: BufferDocument, position: Position) -> Position:
    if position.line >= document.line_count:
        raise BufferValidationError("Line out of range", position=position)
    if position.column > len(document.get_line(position.line)):
        raise BufferValidationError("Column out of range", position=position)
    return position


def ensure_edit(document: BufferDocument, edit: EditDescriptor) -> EditDescriptor:
    ensure_position(document, edit.range.start)
    ensure_position(document, edit.range.end)
    return edit
