"""Mark lifecycle: host events in, store mutations and decoration refreshes out."""

from __future__ import annotations

from typing import List, Optional, Sequence

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
    Subscription,
)
from codemarks.host.protocol import BufferLoadError, BufferRef, EditorHost
from codemarks.runtime import telemetry
from codemarks.runtime.config import MarkSettings

from .decorations import DecorationSet, build_decorations, styles_from_settings
from .listing import MarkListing, collect_listing
from .names import GlobalName, LocalName, MarkName, parse_mark_name
from .positions import EditDescriptor, Position
from .store import MarkStore


class MarkManager:
    """Owns the :class:`MarkStore` and keeps it in step with the host.

    Construct it explicitly, call :meth:`start` to subscribe to host events and
    :meth:`shutdown` to release the subscriptions. It also works as a context
    manager doing both.
    """

    def __init__(
        self,
        host: EditorHost,
        *,
        store: MarkStore | None = None,
        logger_name: str | None = None,
    ) -> None:
        self.host = host
        self._logger_name = logger_name or "codemarks.marks"
        self.store = store or MarkStore(logger_name=self._logger_name)
        self.logger = telemetry.get_logger(self._logger_name)
        self._subscriptions: List[Subscription] = []
        self._local_style, self._global_style = styles_from_settings(host.settings())

    # -- lifecycle ---------------------------------------------------------------

    @property
    def running(self) -> bool:
        return bool(self._subscriptions)

    def start(self) -> None:
        if self._subscriptions:
            return
        bus = self.host.events
        self._subscriptions = [
            bus.subscribe(BUFFER_EDITED, self._handle_edited),
            bus.subscribe(BUFFER_OPENED, self._handle_opened),
            bus.subscribe(BUFFER_CLOSED, self._handle_closed),
            bus.subscribe(EDITOR_ACTIVATED, self._handle_activated),
            bus.subscribe(CONFIG_CHANGED, self._handle_config),
        ]
        telemetry.record_event("marks.started", logger_name=self._logger_name)

    def shutdown(self) -> None:
        if not self._subscriptions:
            return
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
        telemetry.record_event("marks.stopped", logger_name=self._logger_name)

    def __enter__(self) -> "MarkManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.shutdown()
        return False

    # -- host notifications ------------------------------------------------------

    def on_buffer_edited(
        self, buffer: BufferRef, edits: Sequence[EditDescriptor]
    ) -> bool:
        changed = self.store.apply_edit(buffer, edits)
        if changed:
            self.refresh_decorations()
        return changed

    def on_buffer_opened(self, buffer: BufferRef) -> None:
        if self.store.open_buffer(buffer):
            self.refresh_decorations()

    def on_buffer_closed(self, buffer: BufferRef) -> None:
        self.store.close_buffer(buffer)

    def on_settings_changed(self, settings: MarkSettings) -> None:
        self._local_style, self._global_style = styles_from_settings(settings)
        self.refresh_decorations()

    def _handle_edited(self, payload: object) -> None:
        if isinstance(payload, BufferEdited):
            self.on_buffer_edited(payload.buffer, payload.edits)

    def _handle_opened(self, payload: object) -> None:
        if isinstance(payload, BufferOpened):
            self.on_buffer_opened(payload.buffer)

    def _handle_closed(self, payload: object) -> None:
        if isinstance(payload, BufferClosed):
            self.on_buffer_closed(payload.buffer)

    def _handle_activated(self, payload: object) -> None:
        if isinstance(payload, EditorActivated):
            self.refresh_decorations(payload.buffer)

    def _handle_config(self, payload: object) -> None:
        settings = payload if isinstance(payload, MarkSettings) else self.host.settings()
        self.on_settings_changed(settings)

    # -- create / jump -----------------------------------------------------------

    def create_or_toggle(
        self, name: MarkName, buffer: BufferRef, position: Position
    ) -> bool:
        """Create ``name`` at ``position``, or remove it if it already sits there.

        Returns ``True`` when the mark exists afterwards.
        """

        if isinstance(name, LocalName):
            exists = self.store.toggle_local_at(buffer, name.letter, position)
        else:
            exists = self.store.set_global(name.letter, buffer, position)
        self.refresh_decorations()
        return exists

    def create_or_toggle_mark(self, letter: str) -> bool:
        name = parse_mark_name(letter)
        buffer = self.host.active_buffer()
        if name is None or buffer is None:
            return False
        return self.create_or_toggle(name, buffer, buffer.cursor)

    async def jump_to(self, name: MarkName, current_buffer: Optional[BufferRef]) -> bool:
        """Reveal mark ``name``; ``False`` when there is nothing to jump to."""

        if isinstance(name, LocalName):
            if current_buffer is None:
                return False
            local = self.store.get_local(current_buffer, name.letter)
            if local is None:
                return False
            return await self.host.reveal(current_buffer, local.position)

        live = self.store.get_global(name.letter)
        if live is not None:
            return await self.host.reveal(live.buffer, live.position)

        orphan = self.store.get_orphan(name.letter)
        if orphan is None:
            return False
        position = orphan.position
        try:
            buffer = await self.host.open_buffer(orphan.path)
        except BufferLoadError as exc:
            telemetry.record_event(
                "mark.jump_aborted",
                level="warning",
                data={"mark": name.letter, "path": orphan.path, "reason": str(exc)},
                logger_name=self._logger_name,
            )
            return False
        return await self.host.reveal(buffer, position)

    async def jump_to_mark(self, letter: str) -> bool:
        name = parse_mark_name(letter)
        if name is None:
            return False
        return await self.jump_to(name, self.host.active_buffer())

    # -- listing facade ----------------------------------------------------------

    def list_marks(self) -> List[MarkListing]:
        return collect_listing(self.store)

    async def jump_to_any_mark(self, entry: MarkListing) -> bool:
        if entry.is_global:
            return await self.jump_to(GlobalName(entry.name), None)
        if entry.buffer is None or entry.buffer.is_closed:
            return False
        return await self.host.reveal(entry.buffer, entry.position)

    def delete_any_mark(self, entry: MarkListing) -> bool:
        """Delete the listed mark.

        Global entries remove the letter from whichever of the live and orphan
        tables holds it. Local entries drop every local mark of their buffer.
        """

        if entry.is_global:
            removed = self.store.delete_by_name(GlobalName(entry.name))
        elif entry.buffer is not None:
            removed = self.store.delete_local_buffer(entry.buffer)
        else:
            removed = False
        self.refresh_decorations()
        return removed

    def clear_all_marks(self) -> None:
        self.store.clear_all()
        self.refresh_decorations()

    # -- decorations ---------------------------------------------------------------

    def decorations_for(self, buffer: BufferRef) -> DecorationSet:
        return build_decorations(
            self.store,
            buffer,
            local_style=self._local_style,
            global_style=self._global_style,
        )

    def refresh_decorations(self, buffer: Optional[BufferRef] = None) -> None:
        """Push fresh markers for ``buffer`` (default: the active buffer)."""

        target = buffer or self.host.active_buffer()
        if target is None or target.is_closed:
            return
        self.host.set_decorations(target, self.decorations_for(target))


__all__ = ["MarkManager"]
