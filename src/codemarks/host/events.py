"""Synchronous host event bus with explicit subscription handles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from codemarks.marks.positions import EditDescriptor

    from .protocol import BufferRef

BUFFER_EDITED = "buffer.edited"
BUFFER_OPENED = "buffer.opened"
BUFFER_CLOSED = "buffer.closed"
EDITOR_ACTIVATED = "editor.activated"
CONFIG_CHANGED = "config.changed"

Callback = Callable[[object], None]


@dataclass(frozen=True, slots=True)
class BufferEdited:
    buffer: "BufferRef"
    edits: Sequence["EditDescriptor"]


@dataclass(frozen=True, slots=True)
class BufferOpened:
    buffer: "BufferRef"


@dataclass(frozen=True, slots=True)
class BufferClosed:
    buffer: "BufferRef"


@dataclass(frozen=True, slots=True)
class EditorActivated:
    buffer: "BufferRef"


class Subscription:
    """Handle returned by ``HostEventBus.subscribe``; ``dispose`` detaches it."""

    def __init__(self, bus: "HostEventBus", event: str, callback: Callback) -> None:
        self.event = event
        self._bus = bus
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def dispose(self) -> None:
        if not self._active:
            return
        self._active = False
        self._bus._detach(self.event, self._callback)


class HostEventBus:
    """Delivers host notifications to subscribers in subscription order."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Callback]] = {}

    def subscribe(self, event: str, callback: Callback) -> Subscription:
        self._subscribers.setdefault(event, []).append(callback)
        return Subscription(self, event, callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(payload)

    def subscriber_count(self, event: str) -> int:
        return len(self._subscribers.get(event, []))

    def _detach(self, event: str, callback: Callback) -> None:
        callbacks = self._subscribers.get(event)
        if not callbacks:
            return
        callbacks.remove(callback)
        if not callbacks:
            self._subscribers.pop(event, None)


__all__ = [
    "BUFFER_EDITED",
    "BUFFER_OPENED",
    "BUFFER_CLOSED",
    "EDITOR_ACTIVATED",
    "CONFIG_CHANGED",
    "BufferEdited",
    "BufferOpened",
    "BufferClosed",
    "EditorActivated",
    "HostEventBus",
    "Subscription",
]
