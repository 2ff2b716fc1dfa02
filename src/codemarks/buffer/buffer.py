"""Editable in-memory buffer that reports its edits as descriptors."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from codemarks.marks.positions import EditDescriptor, EditRange, Position
from codemarks.runtime import telemetry

from .document import BufferDocument
from .state import BufferState
from .validation import ensure_edit, ensure_position

EditListener = Callable[["Buffer", Sequence[EditDescriptor]], None]


class Buffer:
    """One open document, addressed by the integer ``handle`` its host assigned."""

    def __init__(
        self,
        handle: int,
        *,
        name: str,
        path: Optional[str] = None,
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        on_edit: Optional[EditListener] = None,
    ) -> None:
        self.handle = handle
        self.name = name
        self.path = path
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self._on_edit = on_edit

    def __repr__(self) -> str:
        return f"Buffer(handle={self.handle}, name={self.name!r}, path={self.path!r})"

    @property
    def is_closed(self) -> bool:
        return self.state.closed

    @property
    def is_untitled(self) -> bool:
        return self.path is None

    @property
    def cursor(self) -> Position:
        return self.state.cursor

    @property
    def text(self) -> str:
        return self.document.text

    def set_cursor(self, position: Position) -> None:
        position = ensure_position(self.document, position)
        self.state.set_cursor(position.line, position.column)

    def apply_edits(self, edits: Sequence[EditDescriptor]) -> None:
        """Apply ``edits`` in order and report them as a single change.

        The batch is all or nothing: if any edit does not fit, the buffer is
        left untouched and nothing is reported.
        """

        edits = tuple(edits)
        if not edits:
            return
        with telemetry.span(
            name="buffer::edit",
            component=True,
            metadata={"buffer": self.name, "edits": len(edits)},
        ):
            document = self.document
            for edit in edits:
                ensure_edit(document, edit)
                document = document.apply(edit)
            self.document = document
            self.state.cursor = _insertion_end(edits[-1])
        if self._on_edit is not None:
            self._on_edit(self, edits)

    def replace_range(self, start: Position, end: Position, text: str) -> EditDescriptor:
        edit = EditDescriptor(EditRange(start, end), text)
        self.apply_edits([edit])
        return edit

    def insert_text(self, text: str, *, position: Optional[Position] = None) -> EditDescriptor:
        at = position or self.state.cursor
        return self.replace_range(at, at, text)

    def delete_range(self, start: Position, end: Position) -> EditDescriptor:
        return self.replace_range(start, end, "")


def _insertion_end(edit: EditDescriptor) -> Position:
    start = edit.range.start
    if edit.is_multiline:
        return Position(start.line + edit.inserted_line_breaks, edit.last_line_length)
    return Position(start.line, start.column + len(edit.text))
