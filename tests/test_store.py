from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import pytest

from codemarks.marks import store as store_module
from codemarks.marks import (
    EditDescriptor,
    GlobalName,
    LocalName,
    MarkStore,
    Position,
)


@dataclass
class FakeBuffer:
    handle: int
    name: str
    path: Optional[str] = None
    is_closed: bool = False
    cursor: Position = field(default_factory=lambda: Position(0, 0))


def make_buffer(handle: int, path: Optional[str] = None) -> FakeBuffer:
    name = Path(path).name if path else f"Untitled-{handle}"
    return FakeBuffer(handle=handle, name=name, path=path)


def test_local_toggle_sets_then_clears() -> None:
    store = MarkStore()
    buffer = make_buffer(1)

    assert store.toggle_local_at(buffer, "a", Position(2, 3)) is True
    assert store.get_local(buffer, "a").position == Position(2, 3)
    assert store.toggle_local_at(buffer, "a", Position(2, 3)) is False
    assert store.get_local(buffer, "a") is None
    assert store.is_empty()


def test_local_toggle_elsewhere_moves_the_mark() -> None:
    store = MarkStore()
    buffer = make_buffer(1)
    store.toggle_local_at(buffer, "a", Position(0, 0))

    assert store.toggle_local_at(buffer, "a", Position(4, 1)) is True
    assert [m.position for m in store.local_marks(buffer)] == [Position(4, 1)]


def test_local_marks_are_scoped_per_buffer() -> None:
    store = MarkStore()
    first, second = make_buffer(1), make_buffer(2)
    store.toggle_local_at(first, "a", Position(1, 0))
    store.toggle_local_at(second, "a", Position(5, 0))

    assert store.get_local(first, "a").position == Position(1, 0)
    assert store.get_local(second, "a").position == Position(5, 0)


def test_global_toggle_compares_only_letter_and_position() -> None:
    store = MarkStore()
    first, second = make_buffer(1, "/tmp/one.txt"), make_buffer(2, "/tmp/two.txt")
    store.set_global("A", first, Position(3, 3))

    assert store.set_global("A", second, Position(3, 3)) is False
    assert store.get_global("A") is None


def test_global_letter_moves_between_buffers() -> None:
    store = MarkStore()
    first, second = make_buffer(1, "/tmp/one.txt"), make_buffer(2, "/tmp/two.txt")
    store.set_global("A", first, Position(0, 0))

    assert store.set_global("A", second, Position(1, 1)) is True
    assert store.get_global("A").buffer is second
    assert store.global_marks_for(first) == ()


def test_apply_edit_moves_local_and_global_marks_of_that_buffer_only() -> None:
    store = MarkStore()
    edited, other = make_buffer(1, "/tmp/a.txt"), make_buffer(2, "/tmp/b.txt")
    store.toggle_local_at(edited, "a", Position(2, 4))
    store.set_global("B", edited, Position(3, 0))
    store.set_global("C", other, Position(2, 4))

    touched = store.apply_edit(edited, [EditDescriptor.insert(Position(0, 0), "x\n")])

    assert touched is True
    assert store.get_local(edited, "a").position == Position(3, 4)
    assert store.get_global("B").position == Position(4, 0)
    assert store.get_global("C").position == Position(2, 4)


def test_apply_edit_reports_untracked_buffers() -> None:
    store = MarkStore()
    buffer = make_buffer(1)

    edit = EditDescriptor.insert(Position(0, 0), "x")

    assert store.apply_edit(buffer, [edit]) is False


def test_close_orphans_globals_and_reopen_restores_them(tmp_path: Path) -> None:
    path = str(tmp_path / "notes.txt")
    store = MarkStore()
    closed = make_buffer(1, path)
    store.toggle_local_at(closed, "a", Position(0, 1))
    store.set_global("A", closed, Position(2, 5))
    store.set_global("B", closed, Position(7, 0))

    store.close_buffer(closed)

    assert store.local_marks(closed) == ()
    assert store.get_global("A") is None
    assert {o.name for o in store.orphaned_marks()} == {"A", "B"}
    assert store.get_orphan("A").position == Position(2, 5)

    reopened = make_buffer(9, path)
    restored = store.open_buffer(reopened)

    assert {mark.name for mark in restored} == {"A", "B"}
    assert store.orphaned_marks() == ()
    assert store.get_global("A").buffer is reopened
    assert store.get_global("B").position == Position(7, 0)


def test_reopening_another_path_leaves_orphans_alone(tmp_path: Path) -> None:
    store = MarkStore()
    store.set_global("A", make_buffer(1, str(tmp_path / "a.txt")), Position(0, 0))
    store.close_buffer(make_buffer(1, str(tmp_path / "a.txt")))

    assert store.open_buffer(make_buffer(2, str(tmp_path / "b.txt"))) == []
    assert store.get_orphan("A") is not None


def test_untitled_buffer_globals_are_discarded_on_close() -> None:
    store = MarkStore()
    untitled = make_buffer(1)
    store.set_global("A", untitled, Position(0, 0))

    store.close_buffer(untitled)

    assert store.get_global("A") is None
    assert store.get_orphan("A") is None
    assert store.is_empty()


def test_setting_a_global_drops_its_stale_orphan(tmp_path: Path) -> None:
    store = MarkStore()
    old = make_buffer(1, str(tmp_path / "old.txt"))
    store.set_global("A", old, Position(1, 1))
    store.close_buffer(old)

    store.set_global("A", make_buffer(2, str(tmp_path / "new.txt")), Position(0, 0))

    assert store.get_orphan("A") is None
    assert store.open_buffer(make_buffer(3, str(tmp_path / "old.txt"))) == []


def test_delete_by_name_removes_orphans_by_letter(tmp_path: Path) -> None:
    store = MarkStore()
    buffer = make_buffer(1, str(tmp_path / "f.txt"))
    store.set_global("A", buffer, Position(0, 0))
    store.set_global("B", buffer, Position(1, 0))
    store.close_buffer(buffer)

    assert store.delete_by_name(GlobalName("B")) is True
    assert [o.name for o in store.orphaned_marks()] == ["A"]
    assert store.delete_by_name(GlobalName("B")) is False


def test_delete_by_name_local_needs_its_buffer() -> None:
    store = MarkStore()
    buffer = make_buffer(1)
    store.toggle_local_at(buffer, "a", Position(0, 0))

    assert store.delete_by_name(LocalName("a")) is False
    assert store.delete_by_name(LocalName("a"), buffer) is True
    assert store.get_local(buffer, "a") is None


def test_clear_all_empties_every_table(tmp_path: Path) -> None:
    store = MarkStore()
    kept = make_buffer(1, str(tmp_path / "kept.txt"))
    closed = make_buffer(2, str(tmp_path / "closed.txt"))
    store.toggle_local_at(kept, "a", Position(0, 0))
    store.set_global("A", kept, Position(0, 0))
    store.set_global("B", closed, Position(0, 0))
    store.close_buffer(closed)

    store.clear_all()

    assert store.is_empty()
    assert list(store.iter_local()) == []


def test_lifecycle_events_use_the_store_logger(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: List[tuple[str, Optional[str]]] = []

    def capture(name: str, *, logger_name: Optional[str] = None, **_: object) -> None:
        calls.append((name, logger_name))

    monkeypatch.setattr(store_module, "record_event", capture)
    store = MarkStore(logger_name="codemarks.test")
    buffer = make_buffer(1, str(tmp_path / "log.txt"))

    store.toggle_local_at(buffer, "a", Position(0, 0))
    store.set_global("A", buffer, Position(0, 0))
    store.close_buffer(buffer)
    store.open_buffer(make_buffer(2, str(tmp_path / "log.txt")))
    store.clear_all()

    assert [name for name, _ in calls] == [
        "mark.created",
        "mark.created",
        "mark.orphaned",
        "mark.restored",
        "marks.cleared",
    ]
    assert {logger for _, logger in calls} == {"codemarks.test"}
