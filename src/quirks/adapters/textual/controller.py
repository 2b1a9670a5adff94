"""Adapter that feeds Textual key events to an Editor and pushes state back."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from quirks.buffer import BufferMirror
from quirks.editor import Editor
from quirks.keymaps import normalize_key
from quirks.modes import KeyInput, ModeResult
from quirks.runtime import telemetry

MODIFIERS = ("ctrl", "alt", "shift")

# bus events surfaced to the host
FORWARDED_EVENTS = (
    "buffer.open",
    "buffer.save",
    "buffer.close",
    "buffer.switch",
    "command.start",
    "command.end",
    "command.submit",
    "command.quit",
    "command.error",
    "search.execute",
    "visual.yank",
    "visual.delete",
    "visual.change",
    "visual.shift",
)


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


def translate_key(key: str, character: Optional[str] = None) -> Optional[KeyInput]:
    """Map a Textual ``Key`` event (``key``/``character``) to a KeyInput.

    Returns ``None`` for keys the editor has no name for.
    """

    parts = key.split("+")
    name = parts[-1] or "+"
    modifiers = tuple(mod for mod in parts[:-1] if mod in MODIFIERS)
    chorded = any(mod != "shift" for mod in modifiers)
    if not chorded and character and character.isprintable():
        return KeyInput(character, text=character)
    if len(name) == 1:
        return KeyInput(name, modifiers)
    normalized = normalize_key(name)
    if normalized == name and not name.isupper():
        # Textual names punctuation (``question_mark``); those arrive via ``character``
        return None
    return KeyInput(normalized, modifiers)


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    show_prompt: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    quit: Callable[[], None] = _noop


class TextualEditorAdapter:
    """Bridges an Editor and its bus events to a Textual-friendly surface."""

    def __init__(self, editor: Editor, hooks: TextualUIHooks) -> None:
        self.editor = editor
        self.hooks = hooks
        self.logger = telemetry.get_logger("quirks.adapters.textual")
        for event in FORWARDED_EVENTS:
            editor.bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )
        self.refresh()

    def handle_textual_key(
        self, key: str, *, character: Optional[str] = None
    ) -> Optional[ModeResult]:
        """Translate and dispatch one key; ``None`` when the key is unknown."""

        key_input = translate_key(key, character)
        if key_input is None:
            return None
        result = self.editor.handle_key(key_input)
        self.refresh()
        if self.editor.should_quit:
            self.hooks.quit()
        return result

    def pull_buffer(self) -> BufferMirror:
        return self.editor.mirror()

    def refresh(self) -> None:
        self.hooks.update_buffer(self.pull_buffer())
        self.hooks.update_status(self.status_line())
        self.hooks.show_prompt(self.prompt_line())

    def status_line(self) -> str:
        editor = self.editor
        buffer = editor.buffer
        line, col = editor.cursor
        flag = " [+]" if buffer.modified else ""
        return f"-- {editor.mode_label} -- {buffer.name}{flag}  {line + 1}:{col + 1}"

    def prompt_line(self) -> str:
        editor = self.editor
        if editor.mode == "command":
            return f":{editor.command_text}"
        if editor.mode == "search":
            mode = editor.manager.get_mode("search")
            return f"{getattr(mode, 'prompt', '/')}{editor.search_text}"
        return (editor.message or "").split("\n")[-1]

    def state_snapshot(self) -> Dict[str, object]:
        editor = self.editor
        return {
            "mode": editor.mode,
            "cursor": editor.cursor,
            "buffer": editor.buffer.name,
            "modified": editor.buffer.modified,
            "message": editor.message or "",
        }

    def _handle_event(self, name: str, payload: object | None) -> None:
        telemetry.record_event(
            "adapter.event", level="debug", data={"event": name, "payload": payload}
        )
        self.hooks.handle_event(name, payload)


__all__ = ["FORWARDED_EVENTS", "TextualEditorAdapter", "TextualUIHooks", "translate_key"]
