"""In-memory editor host: owns buffers, focus, and per-buffer decorations."""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Dict, List, Optional

from codemarks.host.events import (
    BUFFER_CLOSED,
    BUFFER_EDITED,
    BUFFER_OPENED,
    CONFIG_CHANGED,
    EDITOR_ACTIVATED,
    BufferClosed,
    BufferEdited,
    BufferOpened,
    EditorActivated,
    HostEventBus,
)
from codemarks.host.protocol import BufferLoadError, resolve_path
from codemarks.marks.decorations import DecorationSet
from codemarks.marks.positions import EditDescriptor, Position
from codemarks.runtime import telemetry
from codemarks.runtime.config import MarkSettings

from .buffer import Buffer
from .document import BufferDocument


class Workspace:
    """Implements :class:`~codemarks.host.EditorHost` over plain ``Buffer`` objects."""

    def __init__(
        self,
        *,
        settings: Optional[MarkSettings] = None,
        events: Optional[HostEventBus] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.events = events or HostEventBus()
        self.encoding = encoding
        self._settings = settings or MarkSettings.from_env()
        self._buffers: Dict[int, Buffer] = {}
        self._decorations: Dict[int, DecorationSet] = {}
        self._handles = itertools.count(1)
        self._untitled = itertools.count(1)
        self._active: Optional[Buffer] = None
        self.logger = telemetry.get_logger("codemarks.workspace")

    # -- buffers -------------------------------------------------------------------

    def buffers(self) -> List[Buffer]:
        return list(self._buffers.values())

    def find_by_path(self, path: str) -> Optional[Buffer]:
        resolved = resolve_path(path)
        for buffer in self._buffers.values():
            if buffer.path is not None and resolve_path(buffer.path) == resolved:
                return buffer
        return None

    def open_text(
        self,
        text: str = "",
        *,
        path: Optional[str] = None,
        name: Optional[str] = None,
        activate: bool = True,
    ) -> Buffer:
        """Open a buffer holding ``text``; without ``path`` it is untitled."""

        if path is not None:
            existing = self.find_by_path(path)
            if existing is not None:
                if activate:
                    self.activate(existing)
                return existing
        if name is None:
            name = Path(path).name if path else f"Untitled-{next(self._untitled)}"
        buffer = Buffer(
            next(self._handles),
            name=name,
            path=path,
            document=BufferDocument.from_text(text),
            on_edit=self._emit_edit,
        )
        self._buffers[buffer.handle] = buffer
        telemetry.record_event(
            "buffer.opened",
            level="debug",
            data={"buffer": buffer.handle, "name": name, "path": path or ""},
        )
        self.events.emit(BUFFER_OPENED, BufferOpened(buffer))
        if activate:
            self.activate(buffer)
        return buffer

    def open_file(self, path: str, *, activate: bool = True) -> Buffer:
        existing = self.find_by_path(path)
        if existing is not None:
            if activate:
                self.activate(existing)
            return existing
        try:
            text = Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise BufferLoadError(path, str(exc)) from exc
        return self.open_text(text, path=path, activate=activate)

    async def open_buffer(self, path: str) -> Buffer:
        return self.open_file(path, activate=False)

    def close_buffer(self, buffer: Buffer) -> None:
        if self._buffers.pop(buffer.handle, None) is None:
            return
        buffer.state.closed = True
        self._decorations.pop(buffer.handle, None)
        self.events.emit(BUFFER_CLOSED, BufferClosed(buffer))
        if self._active is buffer:
            self._active = None
            remaining = self.buffers()
            if remaining:
                self.activate(remaining[-1])

    # -- focus ---------------------------------------------------------------------

    def active_buffer(self) -> Optional[Buffer]:
        return self._active

    def activate(self, buffer: Buffer) -> None:
        if buffer.is_closed:
            raise ValueError(f"{buffer!r} is closed")
        self._active = buffer
        self.events.emit(EDITOR_ACTIVATED, EditorActivated(buffer))

    async def reveal(self, buffer: Buffer, position: Position) -> bool:
        if buffer.is_closed:
            return False
        if self._active is not buffer:
            self.activate(buffer)
        buffer.set_cursor(buffer.document.clamp(position))
        return True

    # -- decorations / settings ------------------------------------------------------

    def set_decorations(self, buffer: Buffer, decorations: DecorationSet) -> None:
        self._decorations[buffer.handle] = decorations

    def decorations_for(self, buffer: Buffer) -> Optional[DecorationSet]:
        return self._decorations.get(buffer.handle)

    def settings(self) -> MarkSettings:
        return self._settings

    def update_settings(self, **changes: str) -> MarkSettings:
        self._settings = self._settings.replace(**changes)
        self.events.emit(CONFIG_CHANGED, self._settings)
        return self._settings

    def _emit_edit(self, buffer: Buffer, edits: tuple[EditDescriptor, ...]) -> None:
        self.events.emit(BUFFER_EDITED, BufferEdited(buffer, edits))


__all__ = ["Workspace"]
