"""UI-free bridge between a Textual text widget and the mark engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from codemarks.buffer import Buffer, BufferDocument, Workspace
from codemarks.commands import CommandResult, MarkCommands, Picker
from codemarks.host.events import EDITOR_ACTIVATED, EditorActivated, Subscription
from codemarks.marks.decorations import DecorationSet, MarkDecoration
from codemarks.marks.manager import MarkManager
from codemarks.marks.positions import Position

Location = Tuple[int, int]


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    load_text: Callable[[str], None]
    move_cursor: Callable[[Location], None] = _noop
    update_status: Callable[[str], None] = _noop
    show_marks: Callable[[str], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


def render_decorations(decorations: Optional[DecorationSet]) -> str:
    """Render a decoration set as Rich markup, one coloured letter per mark."""

    if decorations is None or decorations.is_empty:
        return ""
    styled: List[tuple[MarkDecoration, str]] = [
        (item, decorations.local_style.border_color) for item in decorations.local
    ]
    styled.extend(
        (item, decorations.global_style.border_color) for item in decorations.global_
    )
    styled.sort(key=lambda pair: pair[0].range.start)
    parts = []
    for item, color in styled:
        start = item.range.start
        location = f"{start.line + 1}:{start.column + 1}"
        parts.append(f"[underline {color}]{item.name}[/] {location}")
    return "  ".join(parts)


class TextualMarksAdapter:
    """Mirrors widget edits into the workspace and routes mark commands."""

    def __init__(
        self,
        workspace: Workspace,
        hooks: TextualUIHooks,
        *,
        picker: Optional[Picker] = None,
    ) -> None:
        self.workspace = workspace
        self.hooks = hooks
        self.manager = MarkManager(workspace)
        self.commands = MarkCommands(self.manager, picker=picker)
        self.manager.start()
        self._subscriptions: List[Subscription] = [
            workspace.events.subscribe(EDITOR_ACTIVATED, self._on_activated)
        ]
        active = workspace.active_buffer()
        if active is not None:
            self._show_buffer(active)

    @property
    def capturing(self) -> bool:
        return self.commands.pending is not None

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
        self.manager.shutdown()

    # -- widget -> engine ----------------------------------------------------------

    def handle_widget_edit(
        self, from_location: Location, to_location: Location, text: str
    ) -> None:
        buffer = self.workspace.active_buffer()
        if buffer is None:
            return
        start, end = sorted((Position(*from_location), Position(*to_location)))
        self._log_state("edit ->", start=start.as_tuple(), end=end.as_tuple(), text=text)
        buffer.replace_range(start, end, text)
        self._render_marks(buffer)

    def handle_cursor(self, location: Location) -> None:
        buffer = self.workspace.active_buffer()
        if buffer is None:
            return
        buffer.set_cursor(buffer.document.clamp(Position(*location)))

    def resync_text(self, text: str) -> None:
        """Adopt widget text that changed without an edit (undo, reload)."""

        buffer = self.workspace.active_buffer()
        if buffer is None or buffer.text == text:
            return
        self._log_state("resync ->", length=len(text))
        buffer.document = BufferDocument.from_text(text)
        buffer.state.cursor = buffer.document.clamp(buffer.cursor)

    async def handle_key_text(self, text: Optional[str]) -> Optional[CommandResult]:
        """Hand a key to an armed capture; ``None`` when nothing was armed."""

        if not self.capturing:
            return None
        if not text:
            self.commands.cancel()
            self.hooks.update_status("mark cancelled")
            return None
        result = await self.commands.type_text(text)
        self._after_command(result)
        return result

    async def run_command(self, command_id: str) -> CommandResult:
        self._log_state("command ->", command=command_id)
        result = await self.commands.execute(command_id)
        self._after_command(result)
        return result

    # -- buffer switching ------------------------------------------------------------

    def cycle_buffer(self, step: int = 1) -> Optional[Buffer]:
        buffers = self.workspace.buffers()
        active = self.workspace.active_buffer()
        if not buffers:
            return None
        index = buffers.index(active) if active in buffers else -1
        target = buffers[(index + step) % len(buffers)]
        if target is not active:
            self.workspace.activate(target)
        return target

    def close_active(self) -> Optional[Buffer]:
        active = self.workspace.active_buffer()
        if active is None:
            return None
        self.workspace.close_buffer(active)
        if self.workspace.active_buffer() is None:
            self.hooks.load_text("")
            self.hooks.show_marks("")
        return self.workspace.active_buffer()

    # -- engine -> widget ----------------------------------------------------------

    def _after_command(self, result: CommandResult) -> None:
        status = result.status
        if result.message:
            status = f"{status}:{result.message}"
        self.hooks.update_status(status)
        active = self.workspace.active_buffer()
        if active is not None:
            self.hooks.move_cursor(active.cursor.as_tuple())
            self._render_marks(active)
        self._log_state("result <-", status=result.status, message=result.message)

    def _on_activated(self, payload: object) -> None:
        if isinstance(payload, EditorActivated):
            self._show_buffer(payload.buffer)

    def _show_buffer(self, buffer: Buffer) -> None:
        self.hooks.load_text(buffer.text)
        self.hooks.move_cursor(buffer.cursor.as_tuple())
        self.hooks.update_status(buffer.path or buffer.name)
        self._render_marks(buffer)

    def _render_marks(self, buffer: Buffer) -> None:
        self.hooks.show_marks(render_decorations(self.workspace.decorations_for(buffer)))

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.workspace.active_buffer()
        if buffer is None:
            return {"buffer": None, "capturing": self.capturing}
        return {
            "buffer": buffer.name,
            "cursor": buffer.cursor.as_tuple(),
            "version": buffer.document.version,
            "capturing": self.capturing,
        }


__all__ = ["TextualMarksAdapter", "TextualUIHooks", "render_decorations"]
