"""Uniform, path-sorted view over every kind of mark."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from codemarks.host.protocol import BufferRef, display_path

from .positions import Position
from .store import MarkStore

LOCAL_LABEL = "Local"
GLOBAL_LABEL = "Global"
ORPHANED_LABEL = "Global (closed)"


@dataclass(frozen=True, slots=True)
class MarkListing:
    """One selectable row describing a local, global, or orphaned mark."""

    name: str
    resolved_path: str
    position: Position
    is_global: bool
    kind_label: str
    buffer: Optional[BufferRef] = None

    @property
    def label(self) -> str:
        return self.name

    @property
    def description(self) -> str:
        return f"{self.resolved_path}:{self.position.line}:{self.position.column}"

    @property
    def is_orphaned(self) -> bool:
        return self.is_global and self.buffer is None


def collect_listing(store: MarkStore) -> List[MarkListing]:
    """Local marks, then live globals, then orphans, stably sorted by path."""

    entries: List[MarkListing] = []
    for buffer, mark in store.iter_local():
        entries.append(
            MarkListing(
                name=mark.name,
                resolved_path=display_path(buffer),
                position=mark.position,
                is_global=False,
                kind_label=LOCAL_LABEL,
                buffer=buffer,
            )
        )
    for mark in store.global_marks():
        entries.append(
            MarkListing(
                name=mark.name,
                resolved_path=display_path(mark.buffer),
                position=mark.position,
                is_global=True,
                kind_label=GLOBAL_LABEL,
                buffer=mark.buffer,
            )
        )
    for orphan in store.orphaned_marks():
        entries.append(
            MarkListing(
                name=orphan.name,
                resolved_path=orphan.path,
                position=orphan.position,
                is_global=True,
                kind_label=ORPHANED_LABEL,
            )
        )
    entries.sort(key=lambda entry: entry.resolved_path)
    return entries


__all__ = [
    "LOCAL_LABEL",
    "GLOBAL_LABEL",
    "ORPHANED_LABEL",
    "MarkListing",
    "collect_listing",
]
