from __future__ import annotations

import asyncio
from pathlib import Path

from codemarks.buffer import Buffer, Workspace
from codemarks.host import BUFFER_EDITED, EDITOR_ACTIVATED
from codemarks.marks import GlobalName, LocalName, MarkManager, Position
from codemarks.runtime.config import MarkSettings


def make_manager() -> tuple[Workspace, MarkManager]:
    workspace = Workspace(settings=MarkSettings())
    manager = MarkManager(workspace)
    manager.start()
    return workspace, manager


def make_file(tmp_path: Path, name: str, text: str = "alpha\nbeta\ngamma\n") -> str:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def place(buffer: Buffer, line: int, column: int) -> None:
    buffer.set_cursor(Position(line, column))


def test_creating_twice_at_the_cursor_toggles_the_mark() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("hello\nworld")
    place(buffer, 1, 2)

    assert manager.create_or_toggle_mark("a") is True
    assert manager.store.get_local(buffer, "a").position == Position(1, 2)
    assert manager.create_or_toggle_mark("a") is False
    assert manager.store.is_empty()


def test_non_letters_are_ignored() -> None:
    workspace, manager = make_manager()
    workspace.open_text("text")

    assert manager.create_or_toggle_mark("1") is False
    assert manager.create_or_toggle_mark("ab") is False
    assert asyncio.run(manager.jump_to_mark("?")) is False
    assert manager.store.is_empty()


def test_buffer_edits_move_marks() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("hello\nworld")
    place(buffer, 1, 2)
    manager.create_or_toggle_mark("a")
    manager.create_or_toggle_mark("G")

    buffer.insert_text("new\n", position=Position(0, 0))

    assert manager.store.get_local(buffer, "a").position == Position(2, 2)
    assert manager.store.get_global("G").position == Position(2, 2)
    decorations = workspace.decorations_for(buffer)
    assert [d.range.start for d in decorations.local] == [Position(2, 2)]


def test_marks_inside_deleted_text_are_relocated() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("one\ntwo\nthree\nfour")
    place(buffer, 2, 3)
    manager.create_or_toggle_mark("a")

    buffer.delete_range(Position(1, 1), Position(3, 0))

    assert buffer.text == "one\ntfour"
    assert manager.store.get_local(buffer, "a").position == Position(1, 1)


def test_local_marks_vanish_with_their_buffer() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("text")
    manager.create_or_toggle_mark("a")

    workspace.close_buffer(buffer)

    assert manager.store.local_marks(buffer) == ()
    assert manager.list_marks() == []


def test_global_mark_survives_close_and_reopen(tmp_path: Path) -> None:
    workspace, manager = make_manager()
    path = make_file(tmp_path, "notes.txt")
    buffer = workspace.open_file(path)
    place(buffer, 2, 3)
    manager.create_or_toggle_mark("A")

    workspace.close_buffer(buffer)
    orphan = manager.store.get_orphan("A")
    assert orphan is not None
    assert orphan.position == Position(2, 3)

    reopened = workspace.open_file(path)

    assert reopened is not buffer
    assert manager.store.get_orphan("A") is None
    assert manager.store.get_global("A").buffer is reopened
    assert [d.name for d in workspace.decorations_for(reopened).global_] == ["A"]


def test_jump_to_local_mark_moves_the_cursor() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("hello\nworld")
    place(buffer, 1, 4)
    manager.create_or_toggle_mark("a")
    place(buffer, 0, 0)

    assert asyncio.run(manager.jump_to_mark("a")) is True
    assert buffer.cursor == Position(1, 4)
    assert asyncio.run(manager.jump_to_mark("b")) is False


def test_local_marks_only_resolve_in_the_current_buffer() -> None:
    workspace, manager = make_manager()
    first = workspace.open_text("first")
    manager.create_or_toggle_mark("a")
    second = workspace.open_text("second")

    assert asyncio.run(manager.jump_to(LocalName("a"), second)) is False
    assert asyncio.run(manager.jump_to(LocalName("a"), first)) is True
    assert workspace.active_buffer() is first


def test_jump_to_global_mark_switches_buffers() -> None:
    workspace, manager = make_manager()
    first = workspace.open_text("first\nbuffer")
    place(first, 1, 3)
    manager.create_or_toggle_mark("A")
    second = workspace.open_text("second")
    assert workspace.active_buffer() is second

    assert asyncio.run(manager.jump_to_mark("A")) is True
    assert workspace.active_buffer() is first
    assert first.cursor == Position(1, 3)


def test_jump_to_orphan_reopens_its_file(tmp_path: Path) -> None:
    workspace, manager = make_manager()
    path = make_file(tmp_path, "orphan.txt")
    buffer = workspace.open_file(path)
    place(buffer, 1, 2)
    manager.create_or_toggle_mark("B")
    workspace.close_buffer(buffer)

    assert asyncio.run(manager.jump_to(GlobalName("B"), None)) is True

    active = workspace.active_buffer()
    assert active is not None
    assert active.path == path
    assert active.cursor == Position(1, 2)
    assert manager.store.get_global("B").buffer is active


def test_jump_to_orphan_of_missing_file_is_aborted(tmp_path: Path) -> None:
    workspace, manager = make_manager()
    path = make_file(tmp_path, "gone.txt")
    buffer = workspace.open_file(path)
    manager.create_or_toggle_mark("C")
    workspace.close_buffer(buffer)
    Path(path).unlink()

    assert asyncio.run(manager.jump_to_mark("C")) is False
    assert manager.store.get_orphan("C") is not None
    assert workspace.active_buffer() is None


def test_listing_is_sorted_by_path(tmp_path: Path) -> None:
    workspace, manager = make_manager()
    a_path = make_file(tmp_path, "a.txt")
    b_path = make_file(tmp_path, "b.txt")
    c_path = make_file(tmp_path, "c.txt")

    workspace.open_file(c_path)
    manager.create_or_toggle_mark("c")
    workspace.open_file(a_path)
    manager.create_or_toggle_mark("A")
    b_buffer = workspace.open_file(b_path)
    manager.create_or_toggle_mark("B")
    workspace.close_buffer(b_buffer)

    entries = manager.list_marks()

    assert [entry.name for entry in entries] == ["A", "B", "c"]
    assert [entry.kind_label for entry in entries] == [
        "Global",
        "Global (closed)",
        "Local",
    ]
    assert entries[0].resolved_path == str(Path(a_path).resolve())
    assert entries[1].is_orphaned
    assert entries[2].description == f"{Path(c_path).resolve()}:0:0"


def test_listing_keeps_creation_order_within_one_path(tmp_path: Path) -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_file(make_file(tmp_path, "same.txt"))
    for line, letter in enumerate("baC"):
        place(buffer, line, 0)
        manager.create_or_toggle_mark(letter)

    entries = manager.list_marks()

    assert [entry.name for entry in entries] == ["b", "a", "C"]
    assert [entry.position.line for entry in entries] == [0, 1, 2]


def test_listing_names_untitled_buffers() -> None:
    workspace, manager = make_manager()
    workspace.open_text("scratch")
    manager.create_or_toggle_mark("a")

    (entry,) = manager.list_marks()

    assert entry.resolved_path == "Untitled-1"
    assert entry.label == "a"


def test_jump_to_any_mark_uses_the_listed_position() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("one\ntwo")
    place(buffer, 1, 1)
    manager.create_or_toggle_mark("a")
    (entry,) = manager.list_marks()
    workspace.open_text("elsewhere")

    assert asyncio.run(manager.jump_to_any_mark(entry)) is True
    assert workspace.active_buffer() is buffer
    assert buffer.cursor == Position(1, 1)


def test_jump_to_any_mark_of_closed_local_buffer_fails() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("one")
    manager.create_or_toggle_mark("a")
    (entry,) = manager.list_marks()
    workspace.close_buffer(buffer)

    assert asyncio.run(manager.jump_to_any_mark(entry)) is False


def test_deleting_an_orphan_keeps_the_others(tmp_path: Path) -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_file(make_file(tmp_path, "two.txt"))
    manager.create_or_toggle_mark("A")
    place(buffer, 1, 0)
    manager.create_or_toggle_mark("B")
    workspace.close_buffer(buffer)

    target = next(entry for entry in manager.list_marks() if entry.name == "B")

    assert manager.delete_any_mark(target) is True
    assert [entry.name for entry in manager.list_marks()] == ["A"]


def test_deleting_a_local_entry_drops_every_local_of_its_buffer() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("one\ntwo\nthree")
    manager.create_or_toggle_mark("a")
    place(buffer, 2, 0)
    manager.create_or_toggle_mark("b")
    manager.create_or_toggle_mark("Z")

    local = next(entry for entry in manager.list_marks() if entry.name == "a")

    assert manager.delete_any_mark(local) is True
    assert manager.store.local_marks(buffer) == ()
    assert manager.store.get_global("Z") is not None
    assert workspace.decorations_for(buffer).local == ()


def test_clear_all_marks_removes_everything(tmp_path: Path) -> None:
    workspace, manager = make_manager()
    closed = workspace.open_file(make_file(tmp_path, "closed.txt"))
    manager.create_or_toggle_mark("A")
    workspace.close_buffer(closed)
    buffer = workspace.open_text("open")
    manager.create_or_toggle_mark("a")
    manager.create_or_toggle_mark("B")

    manager.clear_all_marks()

    assert manager.list_marks() == []
    assert workspace.decorations_for(buffer).is_empty


def test_decorations_follow_settings_changes() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("abc")
    place(buffer, 0, 1)
    manager.create_or_toggle_mark("a")
    manager.create_or_toggle_mark("A")

    decorations = workspace.decorations_for(buffer)
    (local,) = decorations.local
    assert local.range.end == Position(0, 2)
    assert local.hover_message == "Local Mark `a`"
    assert decorations.global_[0].hover_message == "Global Mark `A`"
    assert decorations.local_style.border_color == "#37b24d"
    assert decorations.global_style.border_width == "0px 0px 2px 0px"

    workspace.update_settings(local_mark_color="#FF0000")

    assert workspace.decorations_for(buffer).local_style.border_color == "#ff0000"
    assert workspace.decorations_for(buffer).global_style.border_color == "#f59f00"


def test_shutdown_releases_host_subscriptions() -> None:
    workspace, manager = make_manager()
    buffer = workspace.open_text("text")
    manager.create_or_toggle_mark("a")
    assert manager.running

    manager.shutdown()
    buffer.insert_text("more\n", position=Position(0, 0))

    assert not manager.running
    assert workspace.events.subscriber_count(BUFFER_EDITED) == 0
    assert manager.store.get_local(buffer, "a").position == Position(0, 0)


def test_manager_as_context_manager_starts_and_stops() -> None:
    workspace = Workspace(settings=MarkSettings())

    with MarkManager(workspace) as manager:
        assert workspace.events.subscriber_count(EDITOR_ACTIVATED) == 1
        assert manager.running

    assert workspace.events.subscriber_count(EDITOR_ACTIVATED) == 0
