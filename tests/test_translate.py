from __future__ import annotations

import pytest

from codemarks.marks import (
    EditDescriptor,
    EditRange,
    Position,
    Relation,
    classify,
    translate,
    translate_all,
)


def make_edit(
    start: tuple[int, int], end: tuple[int, int], text: str
) -> EditDescriptor:
    return EditDescriptor(EditRange.from_tuples(start, end), text)


def test_mark_before_edit_is_returned_unchanged() -> None:
    mark = Position(1, 3)
    edit = make_edit((2, 0), (4, 1), "replacement\ntext")

    assert translate(mark, edit) is mark


def test_mark_on_start_line_left_of_multiline_range_is_before() -> None:
    mark = Position(1, 2)
    edit = make_edit((1, 5), (3, 0), "")

    assert classify(mark, edit.range) is Relation.BEFORE
    assert translate(mark, edit) is mark


def test_insertion_at_empty_line_start_moves_mark_to_insert_end() -> None:
    mark = Position(2, 0)
    edit = EditDescriptor.insert(Position(2, 0), "X\nY")

    assert translate(mark, edit) == Position(3, 1)


def test_pure_deletion_shifts_mark_on_end_line() -> None:
    mark = Position(5, 10)
    edit = EditDescriptor.delete(EditRange.from_tuples((4, 0), (5, 5)))

    assert translate(mark, edit) == Position(4, 5)


def test_single_line_replace_shifts_column_on_same_line() -> None:
    mark = Position(0, 6)
    edit = make_edit((0, 2), (0, 4), "hello")

    assert translate(mark, edit) == Position(0, 9)


def test_after_edit_line_count_is_conserved() -> None:
    mark = Position(10, 4)
    edit = make_edit((1, 0), (3, 0), "a\nb\nc\nd")

    moved = translate(mark, edit)

    assert moved.line - mark.line == 3 - (3 - 1)
    assert moved.column == 4


def test_multiline_insert_before_mark_on_end_line_rebases_column() -> None:
    mark = Position(3, 7)
    edit = make_edit((3, 2), (3, 4), "one\ntwo!")

    assert translate(mark, edit) == Position(4, 4 + (7 - 4))


def test_mark_inside_single_line_replacement_snaps_to_insert_end() -> None:
    mark = Position(1, 5)
    edit = make_edit((1, 2), (1, 8), "xy")

    assert classify(mark, edit.range) is Relation.INSIDE
    assert translate(mark, edit) == Position(1, 4)


def test_mark_inside_multiline_replacement_uses_range_end_column() -> None:
    mark = Position(2, 0)
    edit = make_edit((1, 2), (3, 4), "ab\ncd")

    assert translate(mark, edit) == Position(2, 4 + 2)


def test_mark_swallowed_by_deletion_is_relocated_not_dropped() -> None:
    mark = Position(4, 1)
    edit = make_edit((2, 3), (6, 0), "")

    assert translate(mark, edit) == Position(2, 3)


def test_mark_at_range_end_counts_as_after() -> None:
    mark = Position(2, 4)
    span = EditRange.from_tuples((2, 1), (2, 4))

    assert classify(mark, span) is Relation.AFTER
    assert translate(mark, EditDescriptor(span, "")) == Position(2, 1)


def test_translate_all_threads_edits_in_order() -> None:
    mark = Position(0, 5)
    edits = [
        EditDescriptor.insert(Position(0, 0), "ab"),
        EditDescriptor.insert(Position(0, 0), "line\n"),
    ]

    assert translate_all(mark, edits) == Position(1, 7)


def test_edit_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        EditRange.from_tuples((3, 0), (1, 0))


def test_position_rejects_negative_values() -> None:
    with pytest.raises(ValueError):
        Position(-1, 0)
