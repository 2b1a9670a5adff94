"""Executable Textual app that hosts the editor core."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import grapheme
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from quirks.buffer import BufferMirror
from quirks.editor import Editor
from quirks.runtime import telemetry
from quirks.runtime.config import EditorConfig

from .controller import TextualEditorAdapter, TextualUIHooks


def _column_offsets(line_text: str) -> list[int]:
    """String offset of every grapheme column, plus the end of the line."""

    offsets = [0]
    for cluster in grapheme.graphemes(line_text):
        offsets.append(offsets[-1] + len(cluster))
    return offsets


def render_mirror(
    mirror: BufferMirror, *, line_numbers: bool = True, wrap: bool = False
) -> Text:
    """Buffer text with the cursor, selection and search matches styled."""

    lines = mirror.lines
    gutter = len(str(len(lines))) + 1 if line_numbers else 0
    rendered = Text(no_wrap=not wrap)
    highlights: dict[int, list[tuple[int, int]]] = {}
    for line, start, end in mirror.highlights:
        highlights.setdefault(line, []).append((start, end))
    for index, line_text in enumerate(lines):
        if line_numbers:
            rendered.append(f"{index + 1:>{gutter - 1}} ", style="dim")
        offsets = _column_offsets(line_text)

        def at(col: int) -> int:
            # columns past the end land on the padding cell
            return offsets[col] if col < len(offsets) else offsets[-1] + 1

        row = Text(line_text + " ")
        for start, end in highlights.get(index, ()):
            row.stylize("black on yellow", at(start), at(end))
        if mirror.selection is not None:
            _stylize_selection(row, mirror.selection, mirror.selection_kind, index, at)
        if index == mirror.cursor[0]:
            col = mirror.cursor[1]
            row.stylize("reverse", at(col), at(col + 1))
        rendered.append_text(row)
        if index < len(lines) - 1:
            rendered.append("\n")
    return rendered


def _stylize_selection(
    row: Text,
    selection: tuple[int, int, int, int],
    kind: Optional[str],
    index: int,
    at: Callable[[int], int],
) -> None:
    start_line, start_col, end_line, end_col = selection
    if not start_line <= index <= end_line:
        return
    end = len(row.plain)
    if kind == "line":
        row.stylize("on blue", 0, end)
    elif kind == "block":
        left, right = sorted((start_col, end_col))
        row.stylize("on blue", at(left), at(right + 1))
    else:
        first = at(start_col) if index == start_line else 0
        last = at(end_col + 1) if index == end_line else end
        row.stylize("on blue", first, last)


@dataclass
class UIState:
    buffer_text: Text | str = ""
    status_text: str = ""
    prompt_text: str = ""


class QuirksApp(App[None]):
    """Minimal Textual UI embedding the editor core."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		padding: 0 1;
		content-align: left top;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#prompt-line {
		height: 1;
		padding: 0 1;
	}
	"""

    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(self, *, path: Optional[str] = None, config: Optional[EditorConfig] = None) -> None:
        super().__init__()
        self._state = UIState()
        self._path = path
        self.editor = Editor(config or EditorConfig.from_env())
        self.adapter: TextualEditorAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None
        self._prompt_widget: Static | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line")
        self._prompt_widget = Static("", id="prompt-line")
        yield self._status_widget
        yield self._prompt_widget

    def on_mount(self) -> None:
        if self._path:
            self.editor.open(self._path)
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            show_prompt=self._show_prompt,
            handle_event=self._handle_event,
            quit=self.exit,
        )
        self.adapter = TextualEditorAdapter(self.editor, hooks)

    def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        result = self.adapter.handle_textual_key(event.key, character=event.character)
        if result is not None:
            event.stop()

    def _update_buffer(self, mirror: BufferMirror) -> None:
        if self.editor.mode == "help":
            self._state.buffer_text = "\n".join(self._visible_help())
        else:
            config = self.editor.config
            self._state.buffer_text = render_mirror(
                mirror, line_numbers=config.line_numbers, wrap=config.wrap
            )
        if self._buffer_widget:
            self._buffer_widget.update(self._state.buffer_text)

    def _visible_help(self) -> list[str]:
        state = self.editor.context.extras.get("help_state")
        top = state.get("top", 0) if isinstance(state, dict) else 0
        return self.editor.help_lines[top:]

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _show_prompt(self, prompt: str) -> None:
        self._state.prompt_text = prompt
        if self._prompt_widget:
            self._prompt_widget.update(prompt)

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name == "buffer.save" and isinstance(payload, dict):
            self.sub_title = str(payload.get("path", ""))


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the quirks editor in a terminal.")
    parser.add_argument("path", nargs="?", help="File to open")
    parser.add_argument(
        "--log-preset",
        default=telemetry.env("LOG_PRESET"),
        choices=sorted(telemetry.PRESETS),
        help="telelog preset",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    app = QuirksApp(path=args.path)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
