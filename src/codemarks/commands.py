"""Command ids exposed to the host and the one-shot typed-letter capture."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, Dict, Optional, Sequence

from codemarks.marks.listing import MarkListing
from codemarks.marks.manager import MarkManager
from codemarks.marks.names import parse_mark_name
from codemarks.runtime import telemetry

CREATE_MARK = "codemarks.createMark"
JUMP_TO_MARK = "codemarks.jumpToMark"
LIST_MARKS = "codemarks.listMarks"
LIST_MARKS_DELETE = "codemarks.listMarksDelete"
CLEAR_ALL_MARKS = "codemarks.clearAllMarks"

Picker = Callable[[Sequence[MarkListing]], Awaitable[Optional[MarkListing]]]


@dataclass(slots=True)
class CommandResult:
    """Outcome of a command or of the letter typed after one."""

    status: str
    consumed: bool = True
    message: Optional[str] = None


class MarkCommands:
    """Dispatches ``codemarks.*`` commands onto a :class:`MarkManager`.

    ``createMark`` and ``jumpToMark`` do nothing on their own: they arm a
    capture and the next :meth:`type_text` call supplies the mark letter.
    """

    def __init__(self, manager: MarkManager, *, picker: Optional[Picker] = None) -> None:
        self.manager = manager
        self.picker = picker
        self._pending: Optional[str] = None

    @property
    def pending(self) -> Optional[str]:
        return self._pending

    @staticmethod
    def command_ids() -> tuple[str, ...]:
        return tuple(_COMMAND_HANDLERS)

    async def execute(self, command_id: str) -> CommandResult:
        handler = _COMMAND_HANDLERS.get(command_id)
        telemetry.record_event(
            "command.execute",
            level="debug",
            data={"command": command_id, "known": handler is not None},
        )
        if handler is None:
            return CommandResult(status="command_error", message=command_id)
        return await handler(self)

    async def type_text(self, text: str) -> CommandResult:
        """Feed typed text to an armed capture; only its first character counts."""

        pending, self._pending = self._pending, None
        if pending is None:
            return CommandResult(status="passthrough", consumed=False)
        letter = text[:1]
        if parse_mark_name(letter) is None:
            return CommandResult(status="ignored", message=letter or None)
        if pending == CREATE_MARK:
            exists = self.manager.create_or_toggle_mark(letter)
            status = "mark_set" if exists else "mark_unset"
        else:
            jumped = await self.manager.jump_to_mark(letter)
            status = "mark_jump" if jumped else "mark_missing"
        return CommandResult(status=status, message=letter)

    def arm(self, command_id: str) -> None:
        """Make the next :meth:`type_text` call complete ``command_id``."""

        self._pending = command_id

    def cancel(self) -> None:
        self._pending = None

    async def pick(self) -> Optional[MarkListing]:
        entries = self.manager.list_marks()
        if not entries or self.picker is None:
            return None
        return await self.picker(entries)


async def _arm(commands: MarkCommands, command_id: str) -> CommandResult:
    commands.arm(command_id)
    return CommandResult(status="awaiting_mark", message=command_id)


async def _handle_list(commands: MarkCommands, *, delete: bool = False) -> CommandResult:
    picked = await commands.pick()
    if picked is None:
        return CommandResult(status="no_selection")
    if delete:
        removed = commands.manager.delete_any_mark(picked)
        status = "mark_deleted" if removed else "mark_missing"
    else:
        jumped = await commands.manager.jump_to_any_mark(picked)
        status = "mark_jump" if jumped else "mark_missing"
    return CommandResult(status=status, message=picked.name)


async def _handle_clear(commands: MarkCommands) -> CommandResult:
    commands.manager.clear_all_marks()
    return CommandResult(status="marks_cleared")


_COMMAND_HANDLERS: Dict[str, Callable[[MarkCommands], Awaitable[CommandResult]]] = {
    CREATE_MARK: partial(_arm, command_id=CREATE_MARK),
    JUMP_TO_MARK: partial(_arm, command_id=JUMP_TO_MARK),
    LIST_MARKS: _handle_list,
    LIST_MARKS_DELETE: partial(_handle_list, delete=True),
    CLEAR_ALL_MARKS: _handle_clear,
}


__all__ = [
    "CREATE_MARK",
    "JUMP_TO_MARK",
    "LIST_MARKS",
    "LIST_MARKS_DELETE",
    "CLEAR_ALL_MARKS",
    "CommandResult",
    "MarkCommands",
    "Picker",
]
