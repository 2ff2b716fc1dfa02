"""In-memory buffers and the workspace host that owns them."""

from .buffer import Buffer
from .document import BufferDocument
from .state import BufferState
from .validation import BufferValidationError, ensure_edit, ensure_position
from .workspace import Workspace

__all__ = [
    "Buffer",
    "BufferDocument",
    "BufferState",
    "BufferValidationError",
    "Workspace",
    "ensure_edit",
    "ensure_position",
]
