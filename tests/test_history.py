from __future__ import annotations

from pathlib import Path

from quirks.buffer import Buffer, History, Rope, TextStore


def make_history(text: str = "", capacity: int = 1000) -> History:
    history = History(capacity)
    history.init(Rope(text), (0, 0))
    return history


def test_base_snapshot_is_the_floor() -> None:
    history = make_history("base")

    assert history.undo(Rope("base"), (0, 0)) is None
    assert history.can_undo() is False


def test_record_skips_identical_content() -> None:
    history = make_history("base")

    assert history.record(Rope("base"), (0, 0)) is False
    assert history.record(Rope("edited"), (0, 1)) is True
    assert history.undo_count == 2


def test_undo_returns_previous_snapshot_and_redo_restores() -> None:
    history = make_history("one")
    history.record(Rope("two"), (0, 3))

    snapshot = history.undo(Rope("two"), (0, 3))
    assert snapshot is not None
    assert str(snapshot.text) == "one"
    assert snapshot.cursor == (0, 0)

    again = history.redo()
    assert again is not None
    assert str(again.text) == "two"
    assert history.redo() is None


def test_undo_steps_back_to_checkpoint_when_text_moved_on() -> None:
    history = make_history("one")

    snapshot = history.undo(Rope("one more"), (0, 8))

    assert snapshot is not None
    assert str(snapshot.text) == "one"
    assert history.can_redo()
    assert str(history.redo().text) == "one more"


def test_record_discards_redo() -> None:
    history = make_history("a")
    history.record(Rope("b"), (0, 0))
    history.undo(Rope("b"), (0, 0))
    assert history.can_redo()

    history.record(Rope("c"), (0, 0))

    assert history.can_redo() is False


def test_capacity_evicts_oldest() -> None:
    history = make_history("0", capacity=3)
    for value in ("1", "2", "3"):
        history.record(Rope(value), (0, 0))

    assert history.undo_count == 3
    assert str(history.undo(Rope("3"), (0, 0)).text) == "2"
    assert str(history.undo(Rope("2"), (0, 0)).text) == "1"
    assert history.undo(Rope("1"), (0, 0)) is None


def test_empty_store_keeps_its_path() -> None:
    buffer = Buffer(text=TextStore(path="new.txt"))

    assert buffer.path == Path("new.txt")
    assert buffer.name == "new.txt"


def test_buffer_transaction_round_trip() -> None:
    buffer = Buffer.from_text("hello")
    with buffer.transaction("prefix"):
        buffer.text.insert(0, ">")
    buffer.cursor.move_to(buffer.text, 0, 6)

    with buffer.transaction("append"):
        buffer.text.insert(6, " world")
        buffer.cursor.move_to(buffer.text, 0, 12)

    assert buffer.undo()
    assert buffer.text.text == ">hello"
    assert buffer.cursor.position == (0, 6)

    assert buffer.redo()
    assert buffer.text.text == ">hello world"
    assert buffer.cursor.position == (0, 12)

    assert buffer.undo()
    assert buffer.undo()
    assert buffer.text.text == "hello"
    assert buffer.undo() is False


def test_edit_after_undo_drops_redo() -> None:
    buffer = Buffer.from_text("a")
    with buffer.transaction("first"):
        buffer.text.insert(1, "b")
    buffer.undo()

    with buffer.transaction("second"):
        buffer.text.insert(1, "c")

    assert buffer.redo() is False
    assert buffer.text.text == "ac"
