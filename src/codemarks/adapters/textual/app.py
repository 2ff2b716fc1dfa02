"""Executable Textual app that edits files with codemarks enabled."""

from __future__ import annotations

import argparse
import asyncio
from typing import List, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.screen import ModalScreen
    from textual.widgets import Footer, Header, OptionList, Static, TextArea
    from textual.widgets.text_area import Edit, EditResult
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use codemarks.adapters.textual.app"
    ) from exc

from codemarks import commands
from codemarks.buffer import Workspace
from codemarks.host.protocol import BufferLoadError
from codemarks.marks.listing import MarkListing
from codemarks.runtime import telemetry

from .controller import Location, TextualMarksAdapter, TextualUIHooks

WELCOME_TEXT = """codemarks demo

ctrl+b then a letter   set / clear a mark (a-z local, A-Z global)
ctrl+g then a letter   jump to a mark
ctrl+l                 pick a mark to jump to
ctrl+r                 pick a mark to delete
ctrl+t                 clear every mark
ctrl+n / ctrl+o        next buffer / close buffer
"""


class MarkedTextArea(TextArea):
    """TextArea that reports every edit and lets the adapter steal mark letters."""

    adapter: TextualMarksAdapter | None = None

    def edit(self, edit: Edit) -> EditResult:
        result = super().edit(edit)
        if self.adapter is not None:
            self.adapter.handle_widget_edit(
                edit.from_location, edit.to_location, edit.text
            )
        return result

    async def _on_key(self, event: events.Key) -> None:
        if self.adapter is not None and self.adapter.capturing:
            event.stop()
            event.prevent_default()
            await self.adapter.handle_key_text(event.character)
            return
        await super()._on_key(event)


class MarkPicker(ModalScreen[Optional[int]]):
    """Modal list of marks; dismisses with the chosen index or ``None``."""

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, entries: Sequence[MarkListing]) -> None:
        super().__init__()
        self._entries = list(entries)

    def compose(self) -> ComposeResult:
        yield OptionList(
            *[
                f"{entry.label}  {entry.description}  ({entry.kind_label})"
                for entry in self._entries
            ],
            id="mark-picker",
        )

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option_index)

    def action_cancel(self) -> None:
        self.dismiss(None)


class CodemarksApp(App[None]):
    """Minimal editor around :class:`TextualMarksAdapter`."""

    ENABLE_COMMAND_PALETTE = False

    CSS = """
	Screen {
		layout: vertical;
	}

	#editor {
		height: 1fr;
	}

	#marks-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}

	MarkPicker {
		align: center middle;
	}

	#mark-picker {
		width: 80%;
		max-height: 60%;
		border: round $accent;
	}
	"""

    BINDINGS = [
        Binding("ctrl+b", f"command('{commands.CREATE_MARK}')", "Mark", priority=True),
        Binding("ctrl+g", f"command('{commands.JUMP_TO_MARK}')", "Jump", priority=True),
        Binding("ctrl+l", f"command('{commands.LIST_MARKS}')", "List", priority=True),
        Binding("ctrl+r", f"command('{commands.LIST_MARKS_DELETE}')", "Delete", priority=True),
        Binding("ctrl+t", f"command('{commands.CLEAR_ALL_MARKS}')", "Clear", priority=True),
        Binding("ctrl+n", "next_buffer", "Next", priority=True),
        Binding("ctrl+o", "close_buffer", "Close", priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, paths: Sequence[str] = ()) -> None:
        super().__init__()
        self._paths = list(paths)
        self.workspace = Workspace()
        self.adapter: TextualMarksAdapter | None = None
        self._editor: MarkedTextArea | None = None
        self._marks_widget: Static | None = None
        self._status_widget: Static | None = None
        self.logger = telemetry.get_logger("codemarks.textual")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        self._editor = MarkedTextArea(id="editor")
        yield self._editor
        self._marks_widget = Static("", id="marks-line")
        self._status_widget = Static("", id="status-line")
        yield self._marks_widget
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        failures: List[str] = []
        for path in self._paths:
            try:
                self.workspace.open_file(path)
            except BufferLoadError as exc:
                failures.append(str(exc))
        if not self.workspace.buffers():
            self.workspace.open_text(WELCOME_TEXT)
        hooks = TextualUIHooks(
            load_text=self._load_text,
            move_cursor=self._move_cursor,
            update_status=self._update_status,
            show_marks=self._show_marks,
            log=self._log_line,
        )
        self.adapter = TextualMarksAdapter(self.workspace, hooks, picker=self._pick)
        if self._editor is not None:
            self._editor.adapter = self.adapter
            self._editor.focus()
        if failures:
            self._update_status(failures[-1])

    def on_unmount(self) -> None:
        if self.adapter is not None:
            self.adapter.close()
            self.adapter = None

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if self.adapter is not None:
            self.adapter.resync_text(event.text_area.text)

    def on_text_area_selection_changed(self, event: TextArea.SelectionChanged) -> None:
        if self.adapter is not None:
            self.adapter.handle_cursor(event.selection.end)

    def action_command(self, command_id: str) -> None:
        if self.adapter is None:
            return
        self.run_worker(self.adapter.run_command(command_id), exclusive=True)

    def action_next_buffer(self) -> None:
        if self.adapter is not None:
            self.adapter.cycle_buffer()

    def action_close_buffer(self) -> None:
        if self.adapter is not None:
            self.adapter.close_active()

    async def _pick(self, entries: Sequence[MarkListing]) -> Optional[MarkListing]:
        loop = asyncio.get_running_loop()
        chosen: asyncio.Future[Optional[int]] = loop.create_future()

        def _dismissed(index: Optional[int]) -> None:
            if not chosen.done():
                chosen.set_result(index)

        self.push_screen(MarkPicker(entries), _dismissed)
        index = await chosen
        return None if index is None else entries[index]

    def _load_text(self, text: str) -> None:
        if self._editor is not None:
            self._editor.load_text(text)

    def _move_cursor(self, location: Location) -> None:
        if self._editor is not None:
            self._editor.move_cursor(location)

    def _update_status(self, status: str) -> None:
        if self._status_widget is not None:
            self._status_widget.update(status)

    def _show_marks(self, markup: str) -> None:
        if self._marks_widget is not None:
            self._marks_widget.update(markup)

    def _log_line(self, line: str) -> None:
        self.logger.debug(line)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edit files with codemarks.")
    parser.add_argument("paths", nargs="*", help="Files to open")
    parser.add_argument(
        "--log-preset",
        choices=("development", "production"),
        default=None,
        help="telelog preset to use instead of CODEMARKS_* environment settings",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    app = CodemarksApp(args.paths)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()


__all__ = ["CodemarksApp", "MarkPicker", "MarkedTextArea", "main"]
