"""Boundary types describing what the mark core needs from an editor host."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

from codemarks.runtime.config import MarkSettings

from .events import HostEventBus

if TYPE_CHECKING:  # pragma: no cover
    from codemarks.marks.decorations import DecorationSet
    from codemarks.marks.positions import Position


class BufferLoadError(RuntimeError):
    """Raised by hosts that cannot open the buffer for ``path``."""

    def __init__(self, path: str, reason: str = "") -> None:
        message = f"Cannot open buffer for '{path}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path
        self.reason = reason


class BufferRef(Protocol):
    """What the core reads from an open buffer."""

    handle: int
    name: str
    path: Optional[str]

    @property
    def is_closed(self) -> bool:
        ...

    @property
    def cursor(self) -> Position:
        ...


class EditorHost(Protocol):
    """Services a host editor provides to :class:`~codemarks.marks.MarkManager`."""

    events: HostEventBus

    def active_buffer(self) -> Optional[BufferRef]:
        """Return the focused buffer, if any."""
        ...

    async def open_buffer(self, path: str) -> BufferRef:
        """Open (or return the already open) buffer for ``path``.

        Raises :class:`BufferLoadError` when the file cannot be loaded.
        """
        ...

    async def reveal(self, buffer: BufferRef, position: Position) -> bool:
        """Focus ``buffer`` and put its cursor at ``position``."""
        ...

    def set_decorations(self, buffer: BufferRef, decorations: "DecorationSet") -> None:
        """Redraw the mark markers shown for ``buffer``."""
        ...

    def settings(self) -> MarkSettings:
        ...


def resolve_path(path: str) -> str:
    """Canonical absolute form of ``path`` used to match closed buffers."""

    return str(Path(path).expanduser().resolve())


def durable_path(buffer: BufferRef) -> Optional[str]:
    """Resolved path of ``buffer`` or ``None`` for untitled buffers."""

    if buffer.path is None:
        return None
    return resolve_path(buffer.path)


def display_path(buffer: BufferRef) -> str:
    return durable_path(buffer) or buffer.name


__all__ = [
    "BufferLoadError",
    "BufferRef",
    "EditorHost",
    "display_path",
    "durable_path",
    "resolve_path",
]
