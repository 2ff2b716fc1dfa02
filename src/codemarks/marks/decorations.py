"""Per-buffer underline markers for marks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from codemarks.host.protocol import BufferRef
from codemarks.runtime.config import MarkSettings

from .positions import EditRange, Position
from .store import MarkStore


@dataclass(frozen=True, slots=True)
class DecorationStyle:
    border_color: str
    border_width: str = "0px 0px 2px 0px"
    border_style: str = "solid"


@dataclass(frozen=True, slots=True)
class MarkDecoration:
    name: str
    range: EditRange
    hover_message: str
    is_global: bool

    @classmethod
    def for_mark(
        cls, name: str, position: Position, *, is_global: bool
    ) -> "MarkDecoration":
        kind = "Global" if is_global else "Local"
        return cls(
            name=name,
            range=EditRange(position, position.shifted(columns=1)),
            hover_message=f"{kind} Mark `{name}`",
            is_global=is_global,
        )


@dataclass(frozen=True, slots=True)
class DecorationSet:
    """Everything a host needs to redraw mark markers for one buffer."""

    local: Tuple[MarkDecoration, ...]
    global_: Tuple[MarkDecoration, ...]
    local_style: DecorationStyle
    global_style: DecorationStyle

    @property
    def is_empty(self) -> bool:
        return not self.local and not self.global_


def styles_from_settings(
    settings: MarkSettings,
) -> Tuple[DecorationStyle, DecorationStyle]:
    return (
        DecorationStyle(border_color=settings.local_mark_color),
        DecorationStyle(border_color=settings.global_mark_color),
    )


def build_decorations(
    store: MarkStore,
    buffer: BufferRef,
    *,
    local_style: DecorationStyle,
    global_style: DecorationStyle,
) -> DecorationSet:
    local = tuple(
        MarkDecoration.for_mark(mark.name, mark.position, is_global=False)
        for mark in store.local_marks(buffer)
    )
    global_ = tuple(
        MarkDecoration.for_mark(mark.name, mark.position, is_global=True)
        for mark in store.global_marks_for(buffer)
    )
    return DecorationSet(
        local=local,
        global_=global_,
        local_style=local_style,
        global_style=global_style,
    )


__all__ = [
    "DecorationStyle",
    "MarkDecoration",
    "DecorationSet",
    "styles_from_settings",
    "build_decorations",
]
