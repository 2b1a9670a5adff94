from __future__ import annotations

from typing import List

from quirks.buffer import RegisterKind, SelectionKind
from quirks.editor import Editor
from quirks.keymaps import Binding, KeySequence, KeymapRegistry, load_default_keymaps
from quirks.modes import KeyInput, ModeResult, NormalMode


def make_editor(text: str = "") -> Editor:
    return Editor.with_text(text)


def press(editor: Editor, key: str, *modifiers: str) -> ModeResult:
    return editor.handle_key(KeyInput(key, modifiers))


def test_active_mode_starts_normal() -> None:
    editor = make_editor("abc")

    assert editor.mode == "normal"
    assert isinstance(editor.manager.active_mode, NormalMode)
    assert set(editor.manager.modes) == {
        "normal",
        "insert",
        "visual",
        "visual_line",
        "visual_block",
        "command",
        "search",
        "help",
    }


def test_dd_deletes_line_into_unnamed_and_ring() -> None:
    editor = make_editor("one\ntwo\nthree")
    writes: List[object] = []
    editor.bus.subscribe("register.write", writes.append)

    editor.feed("dd")

    assert editor.text == "two\nthree"
    assert editor.buffer.text.line_count() == 2
    assert editor.registers.get('"').text == "one\n"
    assert editor.registers.get("1").kind is RegisterKind.LINES
    assert editor.registers.get("1").text == "one\n"
    assert editor.message == "1 line deleted"
    assert writes == [{"register": '"', "kind": "lines", "delete": True}]


def test_undo_and_redo_keys() -> None:
    editor = make_editor("one\ntwo\nthree")
    editor.feed("dd")

    assert editor.feed("u").status == "undo"
    assert editor.text == "one\ntwo\nthree"

    assert press(editor, "r", "ctrl").status == "redo"
    assert editor.text == "two\nthree"

    editor.feed("uu")
    assert editor.message == "Already at oldest change"


def test_unbound_key_is_not_consumed() -> None:
    editor = make_editor("abc")

    result = editor.feed("Q")

    assert result.consumed is False
    assert result.status == "miss"


def test_count_repeats_motion() -> None:
    editor = make_editor("hello world")

    assert editor.feed("3").status == "count"
    editor.feed("l")
    assert editor.cursor == (0, 3)

    editor.feed("0")
    assert editor.cursor == (0, 0)

    editor.feed("10l")
    assert editor.cursor == (0, 10)


def test_escape_drops_pending_count() -> None:
    editor = make_editor("hello")

    editor.feed("3")
    assert press(editor, "ESC").status == "cancelled"
    editor.feed("l")

    assert editor.cursor == (0, 1)


def test_gg_and_G() -> None:
    editor = make_editor("one\ntwo\nthree")

    editor.feed("G")
    assert editor.cursor == (2, 5)

    assert editor.feed("g").status == "pending"
    editor.feed("g")
    assert editor.cursor == (0, 0)


def test_custom_sequence_waits_for_second_key() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    registry.register_binding(
        Binding(
            id="normal.z_z",
            mode="normal",
            sequence=KeySequence.from_strings("z", "z"),
            action_id="motion.buffer_end",
        )
    )
    editor = Editor(keymap_registry=registry)
    editor.context.buffer.text.insert(0, "one\ntwo")

    assert editor.feed("z").status == "pending"
    assert editor.feed("z").status == "motion"
    assert editor.cursor == (1, 3)

    editor.feed("z")
    result = editor.feed("x")
    assert result.consumed is True
    assert result.status == "miss"
    assert editor.text == "one\ntwo"


def test_replace_char_is_one_undo_step() -> None:
    editor = make_editor("abc")

    editor.feed("rx")
    assert editor.text == "xbc"
    assert editor.cursor == (0, 0)

    editor.feed("u")
    assert editor.text == "abc"


def test_escape_abandons_replace() -> None:
    editor = make_editor("abc")

    editor.feed("r")
    press(editor, "ESC")
    editor.feed("l")

    assert editor.text == "abc"
    assert editor.cursor == (0, 1)


def test_find_char_and_repeat() -> None:
    editor = make_editor("a,b,c,d")

    editor.feed("f,")
    assert editor.cursor == (0, 1)

    editor.feed(";")
    assert editor.cursor == (0, 3)

    editor.feed(",")
    assert editor.cursor == (0, 1)

    editor.feed("Fa")
    assert editor.cursor == (0, 0)


def test_operator_cancelled_by_other_key() -> None:
    editor = make_editor("one\ntwo")

    editor.feed("d")
    assert editor.feed("j").status == "cancelled"
    assert editor.text == "one\ntwo"
    assert editor.cursor == (0, 0)

    editor.feed("j")
    assert editor.cursor == (1, 0)


def test_named_register_yank_and_paste() -> None:
    editor = make_editor("one\ntwo")

    assert editor.feed('"').status == "awaiting"
    assert editor.feed("a").status == "register"
    editor.feed("yy")

    assert editor.registers.get("a").text == "one\n"
    assert editor.registers.get("0").is_empty()
    assert editor.message == "1 line yanked"

    editor.feed('"ap')
    assert editor.text == "one\none\ntwo"
    assert editor.cursor == (1, 0)


def test_paste_characterwise_after_cursor() -> None:
    editor = make_editor("abc")

    editor.feed("x")
    assert editor.registers.get("-").text == "a"

    editor.feed("p")
    assert editor.text == "bac"
    assert editor.cursor == (0, 1)


def test_paste_from_empty_register() -> None:
    editor = make_editor("abc")

    result = editor.feed("p")

    assert result.status == "empty_register"
    assert editor.message == 'Nothing in register "'


def test_join_and_shift_lines() -> None:
    editor = make_editor("one\ntwo")

    editor.feed("J")
    assert editor.text == "one two"
    assert editor.cursor == (0, 3)

    editor.feed(">>")
    assert editor.text == "    one two"
    assert editor.cursor == (0, 4)

    editor.feed("<<")
    assert editor.text == "one two"


def test_insert_session_is_single_undo_step() -> None:
    editor = make_editor("")

    editor.feed("ihello")
    assert editor.mode == "insert"
    assert editor.text == "hello"

    press(editor, "ESC")
    assert editor.mode == "normal"
    assert editor.cursor == (0, 4)

    editor.feed("u")
    assert editor.text == ""


def test_insert_named_keys() -> None:
    editor = make_editor("ab")

    editor.feed("a")
    press(editor, "ENTER")
    editor.feed("x")
    press(editor, "BACKSPACE")
    press(editor, "BACKSPACE")

    assert editor.text == "ab"
    assert editor.cursor == (0, 1)


def test_open_line_below() -> None:
    editor = make_editor("one")

    editor.feed("otwo")
    press(editor, "ESC")
    assert editor.text == "one\ntwo"

    editor.feed("u")
    assert editor.text == "one"


def test_visual_yank_characterwise() -> None:
    editor = make_editor("hello world")

    editor.feed("v")
    assert editor.mode == "visual"
    assert editor.selection is not None

    editor.feed("llll")
    assert editor.selection.normalized() == (0, 0, 0, 4)

    editor.feed("y")
    assert editor.registers.get('"').text == "hello"
    assert editor.mode == "normal"
    assert editor.selection is None


def test_visual_line_delete() -> None:
    editor = make_editor("one\ntwo\nthree")

    editor.feed("Vjd")

    assert editor.text == "three"
    assert editor.registers.get("1").text == "one\ntwo\n"
    assert editor.registers.get("1").kind is RegisterKind.LINES
    assert editor.mode == "normal"


def test_visual_block_delete() -> None:
    editor = make_editor("abcd\nefgh")

    editor.feed("l")
    press(editor, "v", "ctrl")
    assert editor.mode == "visual_block"
    editor.feed("jld")

    assert editor.text == "ad\neh"
    value = editor.registers.get('"')
    assert value.kind is RegisterKind.BLOCK
    assert value.rows == ("bc", "fg")
    assert editor.cursor == (0, 1)


def test_visual_change_then_single_undo() -> None:
    editor = make_editor("hello world")

    editor.feed("vllc")
    assert editor.mode == "insert"
    assert editor.text == "lo world"

    editor.feed("HEL")
    press(editor, "ESC")
    assert editor.text == "HELlo world"

    editor.feed("u")
    assert editor.text == "hello world"


def test_visual_kind_switch_keeps_anchor() -> None:
    editor = make_editor("one\ntwo")

    editor.feed("lvj")
    editor.feed("V")

    assert editor.mode == "visual_line"
    selection = editor.selection
    assert selection is not None
    assert selection.kind is SelectionKind.LINE
    assert (selection.anchor_line, selection.anchor_col) == (0, 1)

    editor.feed("V")
    assert editor.mode == "normal"
    assert editor.selection is None


def test_visual_escape_clears_selection() -> None:
    editor = make_editor("abc")

    editor.feed("vl")
    press(editor, "ESC")

    assert editor.mode == "normal"
    assert editor.selection is None
    assert editor.text == "abc"


def test_visual_indent() -> None:
    editor = make_editor("a\nb\nc")

    editor.feed("Vj>")

    assert editor.text == "    a\n    b\nc"
    assert editor.mode == "normal"


def test_command_line_unknown_command() -> None:
    editor = make_editor("abc")

    editor.feed(":frob")
    assert editor.mode == "command"
    assert editor.command_text == "frob"

    press(editor, "ENTER")
    assert editor.mode == "normal"
    assert editor.message == "Unknown command: frob"


def test_command_line_backspace_and_escape() -> None:
    editor = make_editor("abc")

    editor.feed(":ab")
    press(editor, "BACKSPACE")
    assert editor.command_text == "a"

    press(editor, "ESC")
    assert editor.mode == "normal"
    assert editor.command_text == ""

    editor.feed(":")
    press(editor, "BACKSPACE")
    assert editor.mode == "normal"


def test_write_command_saves_file(tmp_path) -> None:
    target = tmp_path / "out.txt"
    editor = make_editor("hello")
    editor.feed("x")

    editor.feed(f":w {target}")
    press(editor, "ENTER")

    assert target.read_text(encoding="utf-8") == "ello"
    assert editor.buffer.modified is False
    assert editor.message == f'"{target}" 1L, 4B written'


def test_quit_refuses_modified_buffers() -> None:
    editor = make_editor("abc")
    editor.feed("x")

    editor.run_command("q")
    assert editor.should_quit is False
    assert editor.message == "No write since last change (add ! to override)"

    editor.run_command("q!")
    assert editor.should_quit is True


def test_quit_clean_buffer() -> None:
    editor = make_editor("abc")

    editor.feed(":q")
    press(editor, "ENTER")

    assert editor.should_quit is True


def test_edit_and_switch_buffers(tmp_path) -> None:
    target = tmp_path / "other.txt"
    target.write_text("first\nsecond", encoding="utf-8")
    editor = make_editor("abc")

    editor.run_command(f"e {target}")
    assert editor.text == "first\nsecond"
    assert editor.message == f'"{target}" 2L, 12B'
    assert len(editor.context.buffers) == 2

    editor.run_command("b 1")
    assert editor.text == "abc"

    editor.run_command("bn")
    assert editor.text == "first\nsecond"

    editor.run_command("b 9")
    assert editor.message == "Buffer 9 does not exist"


def test_edit_missing_file_opens_new_buffer(tmp_path) -> None:
    target = tmp_path / "new.txt"
    editor = make_editor("abc")

    editor.run_command(f"e {target}")

    assert editor.text == ""
    assert editor.message == f'"{target}" [New]'
    assert editor.buffer.path == target


def test_substitute_command_is_undoable() -> None:
    editor = make_editor("foo bar foo\nfoo")

    editor.run_command("s/foo/baz/g")
    assert editor.text == "baz bar baz\nfoo"
    assert editor.message == "2 substitutions on 1 line"

    editor.run_command("%s/foo/x/")
    assert editor.text == "baz bar baz\nx"

    editor.feed("u")
    assert editor.text == "baz bar baz\nfoo"


def test_set_command() -> None:
    editor = make_editor("abc")

    editor.run_command("set ts=2 noet")
    assert editor.message == "tab_width=2 noexpand_tab"
    assert editor.config.tab_width == 2

    editor.run_command("set bogus")
    assert editor.message == "Unknown option: bogus"


def test_goto_line_command() -> None:
    editor = make_editor("one\n  two\nthree")

    editor.run_command("2")

    assert editor.cursor == (1, 2)


def test_help_mode_opens_and_closes() -> None:
    editor = make_editor("abc")

    editor.run_command("help")
    assert editor.mode == "help"
    lines = editor.help_lines
    assert lines[0].startswith("quirks key reference")
    assert "Normal mode" in lines
    assert "Commands" in lines

    assert editor.feed("x").status == "noop"
    editor.feed("j")
    assert editor.context.extras["help_state"]["top"] == 1

    editor.feed("q")
    assert editor.mode == "normal"
    assert editor.help_lines == []
    assert editor.text == "abc"


def test_search_forward_and_navigation() -> None:
    editor = make_editor("beta alpha beta alpha")

    editor.feed("/alpha")
    assert editor.mode == "search"
    assert editor.search_text == "alpha"

    press(editor, "ENTER")
    assert editor.mode == "normal"
    assert editor.cursor == (0, 5)
    assert editor.message == "1/2"

    editor.feed("n")
    assert editor.cursor == (0, 16)
    assert editor.message == "2/2"

    editor.feed("n")
    assert editor.cursor == (0, 5)

    editor.feed("N")
    assert editor.cursor == (0, 16)


def test_search_backward() -> None:
    editor = make_editor("one two one")

    editor.feed("$?one")
    press(editor, "ENTER")

    assert editor.cursor == (0, 8)


def test_search_miss_and_cancel() -> None:
    editor = make_editor("abc")

    editor.feed("/zzz")
    press(editor, "ENTER")
    assert editor.message == "Pattern not found"
    assert editor.cursor == (0, 0)

    editor.feed("/ab")
    press(editor, "ESC")
    assert editor.mode == "normal"
    assert editor.search_text == ""


def test_next_without_pattern() -> None:
    editor = make_editor("abc")

    editor.feed("n")

    assert editor.message == "No previous regular expression"
