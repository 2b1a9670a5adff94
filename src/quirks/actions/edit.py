"""Normal and insert mode editing verbs: deletes, pastes, operators, undo."""

from __future__ import annotations

from typing import Callable, Dict, Optional

import grapheme

from quirks.buffer import Buffer, RegisterKind, RegisterValue
from quirks.keymaps import ResolutionMatch
from quirks.modes.base_mode import ModeContext, ModeResult
from quirks.modes.operator_pipeline import ExecutionPlan, OperatorPipeline, pending_state

UNNAMED = '"'


def _last_token(match: ResolutionMatch) -> str:
    return match.binding.sequence.tokens[-1]


def store_register(
    context: ModeContext, value: RegisterValue, *, delete: bool, name: Optional[str]
) -> None:
    """Write a yank or delete to ``name`` (the unnamed routing when unset)."""

    if not context.registers.store(name, value, delete=delete):
        context.registers.store(None, value, delete=delete)
    context.bus.emit(
        "register.write",
        {"register": name or UNNAMED, "kind": value.kind.value, "delete": delete},
    )


# -- pending prefixes ------------------------------------------------------


def begin_operator(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    OperatorPipeline(pending_state(context)).begin(_last_token(match))
    return ModeResult(consumed=True, status="operator_pending")


def await_char(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """``r``, ``f``, ``F`` and ``"`` take the next typed character."""

    pending_state(context).awaiting = _last_token(match)
    return ModeResult(consumed=True, status="awaiting")


# -- single key edits ------------------------------------------------------


def delete_char(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    cursor = buffer.cursor
    if cursor.col >= buffer.text.line_len(cursor.line) and cursor.line >= buffer.text.last_line():
        return ModeResult(consumed=True, status="noop")
    register = pending_state(context).take_register()
    with buffer.transaction("delete_char"):
        removed = buffer.text.char_at(cursor.line, cursor.col)
        if removed is not None:
            store_register(
                context, RegisterValue.chars(removed), delete=True, name=register
            )
        buffer.text.delete_grapheme(cursor.line, cursor.col)
    return ModeResult(consumed=True, status="edit")


def replace_char(context: ModeContext, char: str) -> ModeResult:
    """``r`` completion: swap the grapheme under the cursor for ``char``."""

    buffer = context.buffer
    cursor = buffer.cursor
    if buffer.text.char_at(cursor.line, cursor.col) is None:
        return ModeResult(consumed=True, status="noop")
    with buffer.transaction("replace_char"):
        offset = cursor.char_offset(buffer.text)
        buffer.text.delete_grapheme(cursor.line, cursor.col)
        buffer.text.insert(offset, char)
    return ModeResult(consumed=True, status="edit")


def join_lines(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line = buffer.cursor.line
    if line >= buffer.text.last_line():
        return ModeResult(consumed=True, status="noop")
    with buffer.transaction("join_lines"):
        joined_at = buffer.text.line_len(line)
        buffer.text.join_lines(line)
        buffer.cursor.move_to(buffer.text, line, joined_at)
    return ModeResult(consumed=True, status="edit")


# -- paste -----------------------------------------------------------------


def _paste_lines(buffer: Buffer, value: RegisterValue, *, after: bool) -> None:
    line = buffer.cursor.line
    if after:
        buffer.text.insert_line_below(line, value.text)
        line += 1
    else:
        buffer.text.insert_line_above(line, value.text)
    buffer.cursor.move_to(buffer.text, line, 0)
    buffer.cursor.move_to_first_non_blank(buffer.text)


def _paste_chars(buffer: Buffer, value: RegisterValue, *, after: bool) -> None:
    text = buffer.text
    line, col = buffer.cursor.position
    length = text.line_len(line)
    if after:
        col = min(col + 1, length) if length else 0
    offset = text.position_to_offset(line, col)
    text.insert(offset, value.text)
    end_line, end_col = text.offset_to_position(offset + len(value.text))
    buffer.cursor.move_to(text, end_line, end_col - 1 if end_col > 0 else 0)


def _paste_block(buffer: Buffer, value: RegisterValue, *, after: bool) -> None:
    text = buffer.text
    first, col = buffer.cursor.position
    length = text.line_len(first)
    if after:
        col = min(col + 1, length) if length else 0
    for index, row in enumerate(value.rows):
        line = first + index
        if line > text.last_line():
            text.insert(len(text), "\n")
        width = text.line_len(line)
        if width < col:
            text.insert(text.position_to_offset(line, width), " " * (col - width))
        text.insert(text.position_to_offset(line, col), row)
    buffer.cursor.move_to(text, first, col)


_PASTERS: Dict[RegisterKind, Callable[..., None]] = {
    RegisterKind.LINES: _paste_lines,
    RegisterKind.CHARS: _paste_chars,
    RegisterKind.BLOCK: _paste_block,
}


def paste(context: ModeContext, match: ResolutionMatch, *, after: bool = True) -> ModeResult:
    del match
    name = pending_state(context).take_register() or UNNAMED
    value = context.registers.get(name)
    if value is None or value.is_empty():
        return ModeResult(
            consumed=True, status="empty_register", message=f"Nothing in register {name}"
        )
    buffer = context.buffer
    with buffer.transaction("paste"):
        _PASTERS[value.kind](buffer, value, after=after)
    return ModeResult(consumed=True, status="edit")


# -- history ---------------------------------------------------------------


def undo(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if not context.buffer.undo():
        return ModeResult(consumed=True, status="noop", message="Already at oldest change")
    return ModeResult(consumed=True, status="undo")


def redo(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if not context.buffer.redo():
        return ModeResult(consumed=True, status="noop", message="Already at newest change")
    return ModeResult(consumed=True, status="redo")


# -- doubled operators -----------------------------------------------------


def _current_line_value(buffer: Buffer) -> RegisterValue:
    return RegisterValue.linewise(buffer.text.line(buffer.cursor.line))


def delete_line(context: ModeContext, register: Optional[str]) -> ModeResult:
    buffer = context.buffer
    with buffer.transaction("delete_line"):
        store_register(context, _current_line_value(buffer), delete=True, name=register)
        buffer.text.delete_line(buffer.cursor.line)
        buffer.cursor.clamp(buffer.text)
        buffer.cursor.move_to_first_non_blank(buffer.text)
    return ModeResult(consumed=True, status="edit", message="1 line deleted")


def yank_line(context: ModeContext, register: Optional[str]) -> ModeResult:
    store_register(
        context, _current_line_value(context.buffer), delete=False, name=register
    )
    return ModeResult(consumed=True, status="yank", message="1 line yanked")


def change_line(context: ModeContext, register: Optional[str]) -> ModeResult:
    buffer = context.buffer
    line = buffer.cursor.line
    current = buffer.text.line(line)
    indent = ""
    if context.config.auto_indent:
        indent = current[: len(current) - len(current.lstrip(" \t"))]
    # the insert session that follows belongs to this undo step
    with buffer.transaction("change_line"):
        store_register(context, _current_line_value(buffer), delete=True, name=register)
        buffer.text.replace_line(line, indent)
        buffer.cursor.move_to(buffer.text, line, grapheme.length(indent))
    return ModeResult(consumed=True, switch_to="insert", status="edit")


def indent_line(context: ModeContext, register: Optional[str]) -> ModeResult:
    del register
    buffer = context.buffer
    with buffer.transaction("indent_line"):
        buffer.text.indent_line(buffer.cursor.line, context.config.shift_width)
        buffer.cursor.move_to_first_non_blank(buffer.text)
    return ModeResult(consumed=True, status="edit")


def outdent_line(context: ModeContext, register: Optional[str]) -> ModeResult:
    del register
    buffer = context.buffer
    if not buffer.text.line(buffer.cursor.line).startswith(" "):
        return ModeResult(consumed=True, status="noop")
    with buffer.transaction("outdent_line"):
        buffer.text.outdent_line(buffer.cursor.line, context.config.shift_width)
        buffer.cursor.move_to_first_non_blank(buffer.text)
    return ModeResult(consumed=True, status="edit")


OperatorHandler = Callable[[ModeContext, Optional[str]], ModeResult]

OPERATOR_HANDLERS: Dict[str, OperatorHandler] = {
    "delete": delete_line,
    "yank": yank_line,
    "change": change_line,
    "indent": indent_line,
    "outdent": outdent_line,
}


def run_operator(context: ModeContext, plan: ExecutionPlan) -> ModeResult:
    context.bus.emit(
        "operator.plan",
        {"operator": plan.operator_id, "register": plan.register_name},
    )
    return OPERATOR_HANDLERS[plan.operator_id](context, plan.register_name)


# -- insert mode -----------------------------------------------------------


def insert_text(context: ModeContext, text: str) -> ModeResult:
    """Type ``text`` at the cursor; the cursor lands after it."""

    buffer = context.buffer
    offset = buffer.cursor.char_offset(buffer.text)
    buffer.text.insert(offset, text)
    buffer.cursor.move_to(buffer.text, *buffer.text.offset_to_position(offset + len(text)))
    return ModeResult(consumed=True, status="insert")


def insert_newline(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    indent = ""
    if context.config.auto_indent:
        buffer = context.buffer
        current = buffer.text.line(buffer.cursor.line)
        indent = current[: len(current) - len(current.lstrip(" \t"))]
        # never carry more indent than sits before the cursor
        indent = indent[: buffer.text.col_to_char(buffer.cursor.line, buffer.cursor.col)]
    return insert_text(context, "\n" + indent)


def insert_tab(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return insert_text(context, context.config.indent_unit())


def backspace(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    line, col = buffer.text.backspace(*buffer.cursor.position)
    buffer.cursor.move_to(buffer.text, line, col)
    return ModeResult(consumed=True, status="insert")


def delete_forward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    buffer.text.delete_grapheme(*buffer.cursor.position)
    buffer.cursor.clamp(buffer.text)
    return ModeResult(consumed=True, status="insert")


__all__ = [
    "OPERATOR_HANDLERS",
    "await_char",
    "backspace",
    "begin_operator",
    "change_line",
    "delete_char",
    "delete_forward",
    "delete_line",
    "indent_line",
    "insert_newline",
    "insert_tab",
    "insert_text",
    "join_lines",
    "outdent_line",
    "paste",
    "redo",
    "replace_char",
    "run_operator",
    "store_register",
    "undo",
    "yank_line",
]
