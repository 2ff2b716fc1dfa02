"""Host editor boundary: protocols, events, and failure types."""

from .events import (
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
    Subscription,
)
from .protocol import (
    BufferLoadError,
    BufferRef,
    EditorHost,
    display_path,
    durable_path,
    resolve_path,
)

__all__ = [
    "BUFFER_CLOSED",
    "BUFFER_EDITED",
    "BUFFER_OPENED",
    "CONFIG_CHANGED",
    "EDITOR_ACTIVATED",
    "BufferClosed",
    "BufferEdited",
    "BufferOpened",
    "EditorActivated",
    "HostEventBus",
    "Subscription",
    "BufferLoadError",
    "BufferRef",
    "EditorHost",
    "display_path",
    "durable_path",
    "resolve_path",
]
