"""Cursor motions; inside a visual mode they also drag the selection."""

from __future__ import annotations

from typing import Callable

from quirks.buffer import Cursor, TextStore
from quirks.keymaps import ResolutionMatch
from quirks.modes.base_mode import ModeContext, ModeResult
from quirks.modes.operator_pipeline import FindState, pending_state

Motion = Callable[[Cursor, TextStore], None]


def _after_motion(context: ModeContext) -> ModeResult:
    buffer = context.buffer
    selection = buffer.selection
    if selection is not None:
        selection.update_cursor(*buffer.cursor.position)
        context.bus.emit(
            "visual.selection",
            {
                "anchor": (selection.anchor_line, selection.anchor_col),
                "cursor": buffer.cursor.position,
            },
        )
    return ModeResult(consumed=True, status="motion")


def _repeat(context: ModeContext, motion: Motion) -> ModeResult:
    buffer = context.buffer
    for _ in range(pending_state(context).take_count()):
        motion(buffer.cursor, buffer.text)
    return _after_motion(context)


def _once(context: ModeContext, motion: Motion) -> ModeResult:
    buffer = context.buffer
    motion(buffer.cursor, buffer.text)
    return _after_motion(context)


def move_left(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _repeat(context, Cursor.move_left)


def move_right(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _repeat(context, Cursor.move_right)


def move_up(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _repeat(context, Cursor.move_up)


def move_down(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _repeat(context, Cursor.move_down)


def word_forward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _repeat(context, Cursor.move_word_forward)


def word_backward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _repeat(context, Cursor.move_word_backward)


def word_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _repeat(context, Cursor.move_word_end)


def line_start(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _once(context, lambda cursor, text: cursor.move_to_line_start())


def first_non_blank(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _once(context, Cursor.move_to_first_non_blank)


def line_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _once(context, Cursor.move_to_line_end)


def buffer_start(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _once(context, lambda cursor, text: cursor.move_to_buffer_start())


def buffer_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _once(context, Cursor.move_to_buffer_end)


def match_bracket(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    target = buffer.cursor.match_bracket(buffer.text)
    if target is None:
        return ModeResult(consumed=True, status="no_match")
    buffer.cursor.move_to(buffer.text, *target)
    return _after_motion(context)


def find_char(context: ModeContext, target: str, *, forward: bool) -> ModeResult:
    """``f``/``F`` completion: jump to ``target`` and remember it for ``;``."""

    buffer = context.buffer
    pending_state(context).last_find = FindState(target=target, forward=forward)
    if not buffer.cursor.find_char_on_line(buffer.text, target, forward):
        return ModeResult(consumed=True, status="no_match")
    return _after_motion(context)


def _repeat_find(context: ModeContext, *, reverse: bool) -> ModeResult:
    buffer = context.buffer
    last = pending_state(context).last_find
    if last is None:
        return ModeResult(consumed=True, status="no_match")
    forward = last.forward != reverse
    if not buffer.cursor.find_char_on_line(buffer.text, last.target, forward):
        return ModeResult(consumed=True, status="no_match")
    return _after_motion(context)


def repeat_find(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _repeat_find(context, reverse=False)


def repeat_find_reverse(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _repeat_find(context, reverse=True)


__all__ = [
    "buffer_end",
    "buffer_start",
    "find_char",
    "first_non_blank",
    "line_end",
    "line_start",
    "match_bracket",
    "move_down",
    "move_left",
    "move_right",
    "move_up",
    "repeat_find",
    "repeat_find_reverse",
    "word_backward",
    "word_end",
    "word_forward",
]
