from __future__ import annotations

from quirks.buffer import Selection, SelectionKind


def make_selection(
    kind: SelectionKind, anchor: tuple[int, int], cursor: tuple[int, int]
) -> Selection:
    selection = Selection.new(kind, *anchor)
    selection.update_cursor(*cursor)
    return selection


def test_new_selection_is_collapsed() -> None:
    selection = Selection.new(SelectionKind.CHAR, 2, 3)

    assert selection.normalized() == (2, 3, 2, 3)


def test_normalized_orders_backwards_selection() -> None:
    selection = make_selection(SelectionKind.CHAR, (3, 1), (1, 4))

    assert selection.normalized() == (1, 4, 3, 1)
    assert selection.line_range() == (1, 3)
    assert selection.col_range() == (1, 4)


def test_update_cursor_keeps_anchor() -> None:
    selection = make_selection(SelectionKind.CHAR, (0, 0), (0, 5))

    selection.update_cursor(2, 2)

    assert (selection.anchor_line, selection.anchor_col) == (0, 0)
    assert (selection.cursor_line, selection.cursor_col) == (2, 2)


def test_char_contains() -> None:
    selection = make_selection(SelectionKind.CHAR, (0, 3), (2, 1))

    assert selection.contains(0, 3)
    assert not selection.contains(0, 2)
    assert selection.contains(1, 99)
    assert selection.contains(2, 1)
    assert not selection.contains(2, 2)


def test_line_contains_every_column() -> None:
    selection = make_selection(SelectionKind.LINE, (1, 5), (2, 0))

    assert selection.contains(1, 0)
    assert selection.contains(2, 40)
    assert not selection.contains(0, 0)


def test_block_contains_fixed_column_window() -> None:
    selection = make_selection(SelectionKind.BLOCK, (0, 4), (3, 2))

    assert selection.contains(1, 3)
    assert selection.contains(3, 4)
    assert not selection.contains(2, 5)
    assert not selection.contains(2, 1)


def test_swap_exchanges_ends() -> None:
    selection = make_selection(SelectionKind.CHAR, (0, 1), (2, 3))

    selection.swap()

    assert (selection.anchor_line, selection.anchor_col) == (2, 3)
    assert (selection.cursor_line, selection.cursor_col) == (0, 1)
    assert selection.normalized() == (0, 1, 2, 3)
