from __future__ import annotations

from typing import List, Optional

import pytest

from quirks.adapters.textual import TextualEditorAdapter, TextualUIHooks, translate_key
from quirks.adapters.textual.app import render_mirror
from quirks.buffer import BufferMirror, BufferSync
from quirks.editor import Editor
from quirks.modes import KeyInput


class Recorder:
    def __init__(self) -> None:
        self.mirrors: List[BufferMirror] = []
        self.statuses: List[str] = []
        self.prompts: List[str] = []
        self.events: List[tuple[str, object | None]] = []
        self.quits = 0

    def hooks(self) -> TextualUIHooks:
        return TextualUIHooks(
            update_buffer=self.mirrors.append,
            update_status=self.statuses.append,
            show_prompt=self.prompts.append,
            handle_event=lambda name, payload: self.events.append((name, payload)),
            quit=self._quit,
        )

    def _quit(self) -> None:
        self.quits += 1


def make_adapter(text: str = "") -> tuple[TextualEditorAdapter, Recorder]:
    recorder = Recorder()
    adapter = TextualEditorAdapter(Editor.with_text(text), recorder.hooks())
    return adapter, recorder


def type_keys(adapter: TextualEditorAdapter, keys: str) -> None:
    for char in keys:
        adapter.handle_textual_key(char, character=char)


@pytest.mark.parametrize(
    ("key", "character", "expected"),
    [
        ("a", "a", KeyInput("a", text="a")),
        ("A", "A", KeyInput("A", text="A")),
        ("space", " ", KeyInput(" ", text=" ")),
        ("question_mark", "?", KeyInput("?", text="?")),
        ("escape", None, KeyInput("ESC")),
        ("enter", "\r", KeyInput("ENTER")),
        ("ctrl+r", "\x12", KeyInput("r", ("ctrl",))),
        ("shift+tab", None, KeyInput("TAB", ("shift",))),
        ("f5", None, KeyInput("F5")),
    ],
)
def test_translate_key(key: str, character: Optional[str], expected: KeyInput) -> None:
    assert translate_key(key, character) == expected


def test_translate_key_unknown_name() -> None:
    assert translate_key("question_mark") is None


def test_adapter_refreshes_on_construction() -> None:
    _, recorder = make_adapter("abc")

    assert recorder.mirrors[-1].text == "abc"
    assert recorder.statuses[-1] == "-- NORMAL -- [No Name]  1:1"
    assert recorder.prompts[-1] == ""


def test_adapter_updates_buffer_and_status() -> None:
    adapter, recorder = make_adapter()

    adapter.handle_textual_key("i", character="i")
    assert recorder.statuses[-1].startswith("-- INSERT --")

    type_keys(adapter, "hi")
    adapter.handle_textual_key("escape")

    assert recorder.mirrors[-1].text == "hi"
    assert recorder.mirrors[-1].modified is True
    assert recorder.statuses[-1] == "-- NORMAL -- [No Name] [+]  1:2"


def test_unknown_key_is_ignored() -> None:
    adapter, recorder = make_adapter("abc")
    before = len(recorder.mirrors)

    assert adapter.handle_textual_key("question_mark") is None
    assert len(recorder.mirrors) == before


def test_prompt_line_follows_command_and_search() -> None:
    adapter, recorder = make_adapter("abc")

    adapter.handle_textual_key("colon", character=":")
    assert recorder.prompts[-1] == ":"
    type_keys(adapter, "fo")
    assert recorder.prompts[-1] == ":fo"

    adapter.handle_textual_key("escape")
    adapter.handle_textual_key("question_mark", character="?")
    type_keys(adapter, "b")
    assert recorder.prompts[-1] == "?b"


def test_prompt_line_shows_last_message() -> None:
    adapter, recorder = make_adapter("abc")

    type_keys(adapter, ":frob")
    adapter.handle_textual_key("enter")

    assert recorder.prompts[-1] == "Unknown command: frob"


def test_adapter_relays_command_events_and_quits() -> None:
    adapter, recorder = make_adapter("abc")

    type_keys(adapter, ":q")
    adapter.handle_textual_key("enter")

    assert recorder.events == [
        ("command.start", None),
        ("command.submit", "q"),
        ("command.quit", {"force": False}),
        ("command.end", ""),
    ]
    assert recorder.quits == 1


def test_adapter_relays_visual_yank() -> None:
    adapter, recorder = make_adapter("hello")

    type_keys(adapter, "vly")

    name, payload = recorder.events[-1]
    assert name == "visual.yank"
    assert isinstance(payload, dict)
    assert payload["text"] == "he"
    assert payload["kind"] == "char"


def test_state_snapshot() -> None:
    adapter, _ = make_adapter("one\ntwo")

    type_keys(adapter, "jx")

    assert adapter.state_snapshot() == {
        "mode": "normal",
        "cursor": (1, 0),
        "buffer": "[No Name]",
        "modified": True,
        "message": "",
    }


def test_adapter_serves_buffer_snapshots() -> None:
    adapter, _ = make_adapter("abc")
    sync: BufferSync = adapter

    mirror = sync.pull_buffer()

    assert mirror.text == "abc"
    assert mirror.attributes["mode"] == "normal"


def test_render_mirror_plain_text() -> None:
    mirror = BufferMirror(text="ab\nc", cursor=(1, 1))

    assert render_mirror(mirror).plain == "1 ab \n2 c "
    assert render_mirror(mirror, line_numbers=False).plain == "ab \nc "
