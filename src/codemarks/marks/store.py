"""In-memory tables of local, global, and orphaned marks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

from codemarks.host.protocol import BufferRef, durable_path
from codemarks.runtime.telemetry import record_event, span

from .names import GlobalName, LocalName, MarkName
from .positions import EditDescriptor, Position
from .translate import translate_all


@dataclass(slots=True)
class LocalMark:
    name: str
    position: Position


@dataclass(slots=True)
class GlobalMark:
    name: str
    position: Position
    buffer: BufferRef


@dataclass(slots=True)
class OrphanedGlobalMark:
    """A global mark whose buffer was closed, frozen at its last position."""

    name: str
    position: Position
    path: str


class MarkStore:
    """Owns every live mark plus the orphans of closed buffers.

    Local marks are grouped per buffer handle. Global marks and orphans are
    keyed by letter; a letter is never live and orphaned at the same time.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._local: Dict[int, List[LocalMark]] = {}
        self._local_buffers: Dict[int, BufferRef] = {}
        self._global: Dict[str, GlobalMark] = {}
        self._orphans: Dict[str, OrphanedGlobalMark] = {}
        self._logger_name = logger_name

    # -- reads -----------------------------------------------------------------

    def local_marks(self, buffer: BufferRef) -> Sequence[LocalMark]:
        return tuple(self._local.get(buffer.handle, ()))

    def get_local(self, buffer: BufferRef, name: str) -> Optional[LocalMark]:
        for mark in self._local.get(buffer.handle, ()):
            if mark.name == name:
                return mark
        return None

    def get_global(self, name: str) -> Optional[GlobalMark]:
        return self._global.get(name)

    def get_orphan(self, name: str) -> Optional[OrphanedGlobalMark]:
        return self._orphans.get(name)

    def iter_local(self) -> Iterator[tuple[BufferRef, LocalMark]]:
        for handle, marks in self._local.items():
            buffer = self._local_buffers[handle]
            for mark in marks:
                yield buffer, mark

    def global_marks(self) -> Sequence[GlobalMark]:
        return tuple(self._global.values())

    def global_marks_for(self, buffer: BufferRef) -> Sequence[GlobalMark]:
        return tuple(
            mark for mark in self._global.values() if mark.buffer.handle == buffer.handle
        )

    def orphaned_marks(self) -> Sequence[OrphanedGlobalMark]:
        return tuple(self._orphans.values())

    def tracks(self, buffer: BufferRef) -> bool:
        if self._local.get(buffer.handle):
            return True
        return any(m.buffer.handle == buffer.handle for m in self._global.values())

    def is_empty(self) -> bool:
        return not (any(self._local.values()) or self._global or self._orphans)

    # -- writes ----------------------------------------------------------------

    def set_local(self, buffer: BufferRef, name: str, position: Position) -> LocalMark:
        marks = self._local.setdefault(buffer.handle, [])
        self._local_buffers[buffer.handle] = buffer
        for index, existing in enumerate(marks):
            if existing.name == name:
                del marks[index]
                break
        mark = LocalMark(name=name, position=position)
        marks.append(mark)
        return mark

    def toggle_local_at(self, buffer: BufferRef, name: str, position: Position) -> bool:
        """Set local mark ``name`` at ``position``; clear it if already there.

        Returns ``True`` when the mark exists afterwards.
        """

        with span(
            "marks::toggle_local",
            logger_name=self._logger_name,
            component="marks",
            metadata={"buffer": buffer.handle, "mark": name},
        ):
            existing = self.get_local(buffer, name)
            if existing is not None and existing.position == position:
                self._local[buffer.handle].remove(existing)
                self._event("mark.toggled", mark=name, kind="local")
                return False
            self.set_local(buffer, name, position)
            self._event(
                "mark.created", mark=name, kind="local", position=position.as_tuple()
            )
            return True

    def set_global(self, name: str, buffer: BufferRef, position: Position) -> bool:
        """Set global mark ``name``, toggling it off when already at ``position``.

        Only the letter and position are compared, so a live mark at the same
        coordinates in another buffer is toggled off too. A stale orphan for the
        same letter is dropped either way.
        """

        with span(
            "marks::toggle_global",
            logger_name=self._logger_name,
            component="marks",
            metadata={"buffer": buffer.handle, "mark": name},
        ):
            self._orphans.pop(name, None)
            existing = self._global.pop(name, None)
            if existing is not None and existing.position == position:
                self._event("mark.toggled", mark=name, kind="global")
                return False
            self._global[name] = GlobalMark(name=name, position=position, buffer=buffer)
            self._event(
                "mark.created", mark=name, kind="global", position=position.as_tuple()
            )
            return True

    def apply_edit(self, buffer: BufferRef, edits: Sequence[EditDescriptor]) -> bool:
        """Move every mark of ``buffer`` through ``edits``.

        Returns ``True`` when the buffer has marks, which is when its
        decorations need redrawing.
        """

        touched = False
        for mark in self._local.get(buffer.handle, ()):
            mark.position = translate_all(mark.position, edits)
            touched = True
        for mark in self._global.values():
            if mark.buffer.handle == buffer.handle:
                mark.position = translate_all(mark.position, edits)
                touched = True
        return touched

    def close_buffer(self, buffer: BufferRef) -> None:
        with span(
            "marks::close_buffer",
            logger_name=self._logger_name,
            component="marks",
            metadata={"buffer": buffer.handle},
        ):
            self.delete_local_buffer(buffer)
            path = durable_path(buffer)
            for name, mark in list(self._global.items()):
                if mark.buffer.handle != buffer.handle:
                    continue
                del self._global[name]
                if path is None:
                    self._event("mark.discarded", mark=name)
                    continue
                self._orphans[name] = OrphanedGlobalMark(
                    name=name, position=mark.position, path=path
                )
                self._event("mark.orphaned", mark=name, path=path)

    def open_buffer(self, buffer: BufferRef) -> List[GlobalMark]:
        """Rehydrate every orphan recorded for ``buffer``'s path."""

        path = durable_path(buffer)
        if path is None:
            return []
        restored: List[GlobalMark] = []
        for name, orphan in list(self._orphans.items()):
            if orphan.path != path:
                continue
            del self._orphans[name]
            mark = GlobalMark(name=name, position=orphan.position, buffer=buffer)
            self._global[name] = mark
            restored.append(mark)
            self._event("mark.restored", mark=name, path=path)
        return restored

    def delete_by_name(self, name: MarkName, buffer: BufferRef | None = None) -> bool:
        """Remove one mark; local names need the owning ``buffer``."""

        if isinstance(name, GlobalName):
            removed_live = self._global.pop(name.letter, None) is not None
            removed_orphan = self._orphans.pop(name.letter, None) is not None
            return removed_live or removed_orphan
        if isinstance(name, LocalName) and buffer is not None:
            existing = self.get_local(buffer, name.letter)
            if existing is None:
                return False
            self._local[buffer.handle].remove(existing)
            return True
        return False

    def delete_local_buffer(self, buffer: BufferRef) -> bool:
        self._local_buffers.pop(buffer.handle, None)
        return bool(self._local.pop(buffer.handle, None))

    def clear_all(self) -> None:
        self._local.clear()
        self._local_buffers.clear()
        self._global.clear()
        self._orphans.clear()
        self._event("marks.cleared")

    def _event(self, name: str, **data: object) -> None:
        record_event(name, data=data, logger_name=self._logger_name)


__all__ = ["LocalMark", "GlobalMark", "OrphanedGlobalMark", "MarkStore"]
