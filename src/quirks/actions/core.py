"""Core action implementations shared across modes."""

from __future__ import annotations

from typing import MutableMapping, cast

from quirks.buffer import Buffer, SelectionKind
from quirks.keymaps import ResolutionMatch
from quirks.modes.base_mode import ModeContext, ModeResult
from quirks.modes.operator_pipeline import pending_state

VISUAL_MODES = {
    SelectionKind.CHAR: "visual",
    SelectionKind.LINE: "visual_line",
    SelectionKind.BLOCK: "visual_block",
}


def _leading_indent(buffer: Buffer, line: int) -> str:
    text = buffer.text.line(line)
    return text[: len(text) - len(text.lstrip(" \t"))]


def _begin_insert(context: ModeContext, status: str) -> ModeResult:
    context.buffer.checkpoint()
    return ModeResult(consumed=True, switch_to="insert", status=status)


def enter_insert_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _begin_insert(context, "enter_insert")


def append_after_cursor(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    cursor = buffer.cursor
    cursor.move_to(buffer.text, cursor.line, cursor.col + 1)
    return _begin_insert(context, "enter_insert")


def insert_at_line_start(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    buffer.cursor.move_to_first_non_blank(buffer.text)
    return _begin_insert(context, "enter_insert")


def append_at_line_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    buffer.cursor.move_to_line_end(buffer.text)
    return _begin_insert(context, "enter_insert")


def open_line_below(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line = buffer.cursor.line
    indent = _leading_indent(buffer, line) if context.config.auto_indent else ""
    result = _begin_insert(context, "open_line")
    buffer.text.insert_line_below(line, indent)
    buffer.cursor.move_to(buffer.text, line + 1, len(indent))
    return result


def open_line_above(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line = buffer.cursor.line
    indent = _leading_indent(buffer, line) if context.config.auto_indent else ""
    result = _begin_insert(context, "open_line")
    buffer.text.insert_line_above(line, indent)
    buffer.cursor.move_to(buffer.text, line, len(indent))
    return result


def exit_insert_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    if buffer.cursor.col > 0:
        buffer.cursor.move_left(buffer.text)
    return ModeResult(consumed=True, switch_to="normal", status="exit_insert")


def exit_to_normal_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return ModeResult(consumed=True, switch_to="normal")


def cancel_pending(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Esc in normal mode: forget counts, operators and register prefixes."""

    del match
    pending_state(context).clear()
    return ModeResult(consumed=True, status="cancelled")


def enter_visual_mode(
    context: ModeContext,
    match: ResolutionMatch,
    *,
    kind: SelectionKind = SelectionKind.CHAR,
) -> ModeResult:
    """Start a selection, switch its kind, or leave when ``kind`` is active."""

    del context
    target = VISUAL_MODES[kind]
    if match.binding.mode == target:
        return ModeResult(consumed=True, switch_to="normal")
    return ModeResult(consumed=True, switch_to=target)


def enter_command_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    state = cast(
        MutableMapping[str, object], context.extras.setdefault("command_state", {})
    )
    state["text"] = ""
    return ModeResult(consumed=True, switch_to="command", status="enter_command")


def _help_state(context: ModeContext) -> MutableMapping[str, object]:
    return cast(
        MutableMapping[str, object], context.extras.setdefault("help_state", {})
    )


def scroll_help(context: ModeContext, match: ResolutionMatch, *, delta: int) -> ModeResult:
    del match
    state = _help_state(context)
    lines = cast(list, state.get("lines", []))
    top = cast(int, state.get("top", 0)) + delta
    state["top"] = max(0, min(top, max(len(lines) - 1, 0)))
    return ModeResult(consumed=True, status="help_scroll")


__all__ = [
    "VISUAL_MODES",
    "append_after_cursor",
    "append_at_line_end",
    "cancel_pending",
    "enter_command_mode",
    "enter_insert_mode",
    "enter_visual_mode",
    "exit_insert_mode",
    "exit_to_normal_mode",
    "insert_at_line_start",
    "open_line_above",
    "open_line_below",
    "scroll_help",
]
