"""Actions dedicated to Visual mode selection management."""

from __future__ import annotations

from typing import List, Optional, Tuple

from quirks.buffer import Buffer, RegisterValue, Selection, SelectionKind, TextStore
from quirks.keymaps import ResolutionMatch
from quirks.modes.base_mode import ModeContext, ModeResult
from quirks.modes.operator_pipeline import pending_state

from .edit import store_register

Span = Tuple[int, int]


def _line_end_offset(text: TextStore, line: int) -> int:
    return text.line_to_char(line) + len(text.line(line))


def char_span(text: TextStore, selection: Selection) -> Span:
    """Flat ``[start, end)`` covering a character-wise selection.

    The end column is inclusive; when it sits at or past the end of a line
    that is not the last one, the line break is part of the selection.
    """

    start_line, start_col, end_line, end_col = selection.normalized()
    start = text.position_to_offset(start_line, start_col)
    if end_col < text.line_len(end_line):
        end = text.position_to_offset(end_line, end_col + 1)
    else:
        end = _line_end_offset(text, end_line)
        if end_line < text.last_line():
            end += 1
    return start, max(start, end)


def line_span(text: TextStore, selection: Selection) -> Span:
    """Flat range removing whole lines; takes the preceding break at the end."""

    first, last = selection.line_range()
    if last < text.last_line():
        return text.line_to_char(first), text.line_to_char(last + 1)
    if first > 0:
        return _line_end_offset(text, first - 1), len(text)
    return 0, len(text)


def line_content(text: TextStore, selection: Selection) -> str:
    first, last = selection.line_range()
    return "".join(text.line(line) + "\n" for line in range(first, last + 1))


def block_rows(text: TextStore, selection: Selection) -> List[str]:
    first, last = selection.line_range()
    left, right = selection.col_range()
    return [
        "".join(text.graphemes(line)[left : right + 1]) for line in range(first, last + 1)
    ]


def extract(text: TextStore, selection: Selection) -> RegisterValue:
    if selection.kind is SelectionKind.LINE:
        return RegisterValue.linewise(line_content(text, selection))
    if selection.kind is SelectionKind.BLOCK:
        return RegisterValue.block(block_rows(text, selection))
    return RegisterValue.chars(text.slice(*char_span(text, selection)))


def remove(buffer: Buffer, selection: Selection) -> None:
    """Delete the selected text and park the cursor at the selection start."""

    text = buffer.text
    start_line, start_col, _, _ = selection.normalized()
    if selection.kind is SelectionKind.BLOCK:
        first, last = selection.line_range()
        left, right = selection.col_range()
        for line in range(last, first - 1, -1):
            width = text.line_len(line)
            if left >= width:
                continue
            text.delete(
                text.position_to_offset(line, left),
                text.position_to_offset(line, min(right + 1, width)),
            )
        buffer.cursor.move_to(text, first, left)
        return
    if selection.kind is SelectionKind.LINE:
        text.delete(*line_span(text, selection))
        buffer.cursor.move_to(text, start_line, 0)
        buffer.cursor.move_to_first_non_blank(text)
        return
    text.delete(*char_span(text, selection))
    buffer.cursor.move_to(text, start_line, start_col)


def _require_selection(context: ModeContext) -> Optional[Selection]:
    return context.buffer.selection


def _finish(context: ModeContext, event: str, selection: Selection, value: RegisterValue) -> None:
    context.buffer.selection = None
    context.bus.emit(
        event,
        {
            "kind": selection.kind.value,
            "range": selection.normalized(),
            "text": value.text,
        },
    )


def _line_message(count: int, verb: str) -> str:
    return f"1 line {verb}" if count == 1 else f"{count} lines {verb}"


def yank_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    selection = _require_selection(context)
    if selection is None:
        return ModeResult(consumed=False, status="no_selection")
    buffer = context.buffer
    value = extract(buffer.text, selection)
    register = pending_state(context).take_register()
    store_register(context, value, delete=False, name=register)
    start_line, start_col, _, _ = selection.normalized()
    if selection.kind is SelectionKind.BLOCK:
        start_col = selection.col_range()[0]
    buffer.cursor.move_to(buffer.text, start_line, start_col)
    _finish(context, "visual.yank", selection, value)
    message = None
    if selection.kind is SelectionKind.LINE:
        first, last = selection.line_range()
        message = _line_message(last - first + 1, "yanked")
    elif selection.kind is SelectionKind.BLOCK:
        first, last = selection.line_range()
        message = f"block of {last - first + 1} lines yanked"
    return ModeResult(consumed=True, switch_to="normal", status="visual_yank", message=message)


def delete_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    selection = _require_selection(context)
    if selection is None:
        return ModeResult(consumed=False, status="no_selection")
    buffer = context.buffer
    value = extract(buffer.text, selection)
    register = pending_state(context).take_register()
    with buffer.transaction("visual_delete"):
        store_register(context, value, delete=True, name=register)
        remove(buffer, selection)
    _finish(context, "visual.delete", selection, value)
    return ModeResult(consumed=True, switch_to="normal", status="visual_delete")


def change_selection(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    selection = _require_selection(context)
    if selection is None:
        return ModeResult(consumed=False, status="no_selection")
    buffer = context.buffer
    text = buffer.text
    value = extract(text, selection)
    register = pending_state(context).take_register()
    with buffer.transaction("visual_change"):
        store_register(context, value, delete=True, name=register)
        if selection.kind is SelectionKind.LINE:
            # keep one empty line to type into
            first, last = selection.line_range()
            text.delete(text.line_to_char(first), _line_end_offset(text, last))
            buffer.cursor.move_to(text, first, 0)
        else:
            remove(buffer, selection)
    _finish(context, "visual.change", selection, value)
    return ModeResult(consumed=True, switch_to="insert", status="visual_change")


def swap_anchor(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    selection = _require_selection(context)
    if selection is None:
        return ModeResult(consumed=False, status="no_selection")
    buffer = context.buffer
    selection.swap()
    buffer.cursor.move_to(buffer.text, selection.cursor_line, selection.cursor_col)
    context.bus.emit(
        "visual.selection",
        {
            "anchor": (selection.anchor_line, selection.anchor_col),
            "cursor": buffer.cursor.position,
            "swap": True,
        },
    )
    return ModeResult(consumed=True, status="visual_swap")


def shift_selection(
    context: ModeContext, match: ResolutionMatch, *, outdent: bool = False
) -> ModeResult:
    """``>``/``<``: shift every selected line by ``shift_width``."""

    del match
    selection = _require_selection(context)
    if selection is None:
        return ModeResult(consumed=False, status="no_selection")
    buffer = context.buffer
    width = context.config.shift_width
    first, last = selection.line_range()
    with buffer.transaction("visual_shift"):
        for line in range(first, last + 1):
            if outdent:
                buffer.text.outdent_line(line, width)
            elif buffer.text.line(line):
                buffer.text.indent_line(line, width)
        buffer.cursor.move_to(buffer.text, first, 0)
        buffer.cursor.move_to_first_non_blank(buffer.text)
    buffer.selection = None
    context.bus.emit("visual.shift", {"lines": (first, last), "outdent": outdent})
    return ModeResult(consumed=True, switch_to="normal", status="visual_shift")


__all__ = [
    "block_rows",
    "change_selection",
    "char_span",
    "delete_selection",
    "extract",
    "line_content",
    "line_span",
    "remove",
    "shift_selection",
    "swap_anchor",
    "yank_selection",
]
