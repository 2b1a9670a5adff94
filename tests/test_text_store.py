from __future__ import annotations

from pathlib import Path

import pytest

from quirks.buffer import NoFileNameError, Rope, TextDecodeError, TextStore


def make_store(text: str = "") -> TextStore:
    return TextStore(text)


def test_empty_store_has_one_line() -> None:
    store = make_store()

    assert store.line_count() == 1
    assert store.is_modified() is False
    assert store.is_empty()
    assert store.line(0) == ""


def test_insert_splits_lines() -> None:
    store = make_store()

    store.insert(0, "Hello\nWorld")

    assert store.line_count() == 2
    assert store.line(0) == "Hello"
    assert store.line(1) == "World"
    assert store.is_modified()


def test_delete_clamps_range() -> None:
    store = make_store("e\u0301x\U0001F1EB\U0001F1F7!")

    assert store.line_len(0) == 4
    assert store.char_at(0, 0) == "e\u0301"
    assert store.char_at(0, 2) == "\U0001F1EB\U0001F1F7"
    assert store.col_to_char(0, 3) == 5
    assert store.offset_to_position(5) == (0, 3)


def test_delete_grapheme_removes_whole_cluster() -> None:
    store = make_store("ae\u0301b")

    store.delete_grapheme(0, 1)

    assert store.text == "ab"


def test_delete_grapheme_at_line_end_joins() -> None:
    store = make_store("ab\ncd")

    store.delete_grapheme(0, 2)

    assert store.text == "abcd"


def test_backspace_joins_previous_line() -> None:
    store = make_store("ab\ncd")

    assert store.backspace(1, 0) == (0, 2)
    assert store.text == "abcd"
    assert store.backspace(0, 2) == (0, 1)
    assert store.text == "acd"
    assert store.backspace(0, 0) == (0, 0)


def test_line_edits() -> None:
    store = make_store("one\ntwo\nthree")

    store.delete_line(1)
    assert store.text == "one\nthree"

    store.delete_line(1)
    assert store.text == "one"

    store.insert_line_below(0, "two")
    store.insert_line_above(0, "zero")
    assert store.text == "zero\none\ntwo"


def test_join_lines_inserts_single_space() -> None:
    store = make_store("foo\nbar\nbaz \nqux")

    assert store.join_lines(0)
    assert store.text == "foo bar\nbaz \nqux"

    assert store.join_lines(1)
    assert store.text == "foo bar\nbaz qux"

    assert store.join_lines(1) is False


def test_indent_and_outdent() -> None:
    store = make_store("  text")

    store.indent_line(0, 4)
    assert store.line(0) == "      text"

    assert store.outdent_line(0, 8) == 6
    assert store.line(0) == "text"
    assert store.outdent_line(0, 2) == 0


def test_load_save_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "sample.txt"
    payload = "crlf line\r\nunicode é中\n\nno trailing".encode("utf-8")
    path.write_bytes(payload)

    store = TextStore.load(path)
    store.save()

    assert path.read_bytes() == payload
    assert store.is_modified() is False
    assert store.byte_len() == len(payload)


def test_empty_file_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "empty.txt"
    path.write_bytes(b"")

    store = TextStore.load(path)
    assert store.is_empty()
    assert store.path == path

    store.insert(0, "hi")
    store.save()

    assert path.read_bytes() == b"hi"


def test_save_as_clears_modified(tmp_path: Path) -> None:
    store = make_store()
    store.insert(0, "data")

    written = store.save_as(tmp_path / "out.txt")

    assert written == 4
    assert store.path == tmp_path / "out.txt"
    assert store.is_modified() is False
    assert (tmp_path / "out.txt").read_text(encoding="utf-8") == "data"


def test_save_without_path_raises() -> None:
    with pytest.raises(NoFileNameError):
        make_store("x").save()


def test_load_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "binary.bin"
    path.write_bytes(b"ok\xff\xfe")

    with pytest.raises(TextDecodeError) as info:
        TextStore.load(path)

    assert info.value.position == 2


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        TextStore.load(tmp_path / "missing.txt")


def test_rope_is_persistent() -> None:
    base = Rope("hello world")

    edited = base.insert(5, ",").delete(0, 1)

    assert str(base) == "hello world"
    assert str(edited) == "ello, world"
    assert edited == Rope("ello, world")


def test_rope_line_index() -> None:
    rope = Rope("a\nbb\n\nccc")

    assert rope.line_count == 4
    assert rope.line_start(1) == 2
    assert rope.line_end(1) == 4
    assert rope.line_text(3) == "ccc"
    assert rope.line_of(5) == 2


def test_rope_large_edit_stays_balanced() -> None:
    rope = Rope()
    for index in range(2000):
        rope = rope.insert(len(rope), f"{index}\n")

    assert rope.line_count == 2001
    assert rope.height < 40
    assert rope.line_text(1999) == "1999"
