"""Actions that evaluate Ex-style command lines."""

from __future__ import annotations

import re
from dataclasses import replace
from functools import partial
from typing import Callable, Dict, List, MutableMapping, Optional, cast

from quirks.buffer import Buffer, TextDecodeError, TextStore
from quirks.keymaps import ResolutionMatch
from quirks.modes.base_mode import ModeContext, ModeResult
from quirks.runtime import telemetry
from quirks.runtime.config import ConfigError
from quirks.search import SubstituteCommand, parse_substitute_command, substitute

CommandHandler = Callable[[ModeContext, str], ModeResult]

_COMMAND = re.compile(r"^([A-Za-z]+!?)\s*(.*)$")

NO_WRITE = "No write since last change (add ! to override)"


def _command_state(context: ModeContext) -> MutableMapping[str, object]:
    state = cast(
        MutableMapping[str, object], context.extras.setdefault("command_state", {})
    )
    state.setdefault("text", "")
    state.setdefault("history", [])
    return state


def _done(
    message: Optional[str] = None,
    *,
    status: str = "command",
    switch_to: str = "normal",
) -> ModeResult:
    return ModeResult(consumed=True, switch_to=switch_to, status=status, message=message)


def command_backspace(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    state = _command_state(context)
    text = str(state["text"])
    if not text:
        return _done(status="command_cancel")
    state["text"] = text[:-1]
    return ModeResult(consumed=True, status="editing")


def submit_command_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    state = _command_state(context)
    text = str(state.get("text", "")).strip()
    state["text"] = ""
    if not text:
        return _done(status="command_empty")
    history = state.get("history")
    if isinstance(history, list):
        history.append(text)
    context.bus.emit("command.submit", text)
    with telemetry.span("command::execute", component="commands", metadata={"command": text}):
        return execute_command(context, text)


def execute_command(context: ModeContext, text: str) -> ModeResult:
    """Run one command line (without the leading ``:``)."""

    command = parse_substitute_command(text)
    if command is not None:
        return _handle_substitute(context, command)
    if text.isdigit():
        return _handle_goto_line(context, text)
    found = _COMMAND.match(text)
    handler = _COMMAND_HANDLERS.get(found.group(1)) if found else None
    if handler is None or found is None:
        return _unknown_command(context, text)
    return handler(context, found.group(2).strip())


def _unknown_command(context: ModeContext, command: str) -> ModeResult:
    context.bus.emit("command.error", command)
    return _done(f"Unknown command: {command}", status="command_error")


def _handle_goto_line(context: ModeContext, text: str) -> ModeResult:
    buffer = context.buffer
    buffer.cursor.move_to(buffer.text, int(text) - 1, 0)
    buffer.cursor.move_to_first_non_blank(buffer.text)
    return _done(status="command_goto")


# -- quitting and writing --------------------------------------------------


def _handle_quit(context: ModeContext, arg: str, *, force: bool = False) -> ModeResult:
    del arg
    if not force and any(buffer.modified for buffer in context.buffers):
        return _done(NO_WRITE, status="command_error")
    _emit_quit(context, force=force)
    return _done(status="quit")


def _write(context: ModeContext, buffer: Buffer, path: str) -> Optional[str]:
    """Save ``buffer``; returns an error message instead of raising."""

    try:
        written = buffer.save_as(path) if path else buffer.save()
    except OSError as exc:
        telemetry.record_event(
            "buffer.save_failed",
            level="error",
            data={"buffer": buffer.name, "error": str(exc)},
        )
        return f"Error saving: {exc}"
    _emit_write(context, buffer, written)
    return None


def _written_message(buffer: Buffer) -> str:
    return (
        f'"{buffer.name}" {buffer.text.line_count()}L, '
        f"{buffer.text.byte_len()}B written"
    )


def _handle_write(context: ModeContext, arg: str, *, force: bool = False) -> ModeResult:
    del force
    buffer = context.buffer
    error = _write(context, buffer, arg)
    if error:
        return _done(error, status="command_error")
    return _done(_written_message(buffer), status="command_write")


def _handle_wq(context: ModeContext, arg: str, *, force: bool = False) -> ModeResult:
    buffer = context.buffer
    error = _write(context, buffer, arg)
    if error:
        return _done(error, status="command_error")
    return _handle_quit(context, "", force=force)


def _handle_x(context: ModeContext, arg: str, *, force: bool = False) -> ModeResult:
    buffer = context.buffer
    if buffer.modified or arg:
        return _handle_wq(context, arg, force=force)
    return _handle_quit(context, "", force=force)


# -- buffers ---------------------------------------------------------------


def _handle_edit(context: ModeContext, arg: str, *, force: bool = False) -> ModeResult:
    if not arg:
        return _done("Argument required", status="command_error")
    buffers = context.buffers
    existing = buffers.find(arg)
    if existing is not None:
        buffers.switch_to(existing)
        return _done(f'"{context.buffer.name}"', status="command_edit")
    try:
        buffer = Buffer.open(arg, history_capacity=context.config.history_capacity)
    except FileNotFoundError:
        buffer = Buffer(
            text=TextStore(path=arg), history_capacity=context.config.history_capacity
        )
        message = f'"{arg}" [New]'
    except (TextDecodeError, OSError) as exc:
        return _done(f"Error opening: {exc}", status="command_error")
    else:
        message = f'"{arg}" {buffer.text.line_count()}L, {buffer.text.byte_len()}B'
    buffers.add(buffer)
    context.bus.emit("buffer.open", {"path": arg, "force": force})
    return _done(message, status="command_edit")


def _handle_buffer(context: ModeContext, arg: str, *, force: bool = False) -> ModeResult:
    del force
    if not arg.isdigit():
        return _done("Argument required", status="command_error")
    if not context.buffers.switch_to(int(arg) - 1):
        return _done(f"Buffer {arg} does not exist", status="command_error")
    context.bus.emit("buffer.switch", {"index": int(arg) - 1})
    return _done(f'"{context.buffer.name}"', status="command_buffer")


def _handle_buffer_delete(
    context: ModeContext, arg: str, *, force: bool = False
) -> ModeResult:
    del arg
    if context.buffer.modified and not force:
        return _done(NO_WRITE, status="command_error")
    closed = context.buffers.close_current()
    context.bus.emit("buffer.close", {"name": closed.name})
    return _done(status="command_buffer")


def _handle_buffer_next(
    context: ModeContext, arg: str, *, force: bool = False, step: int = 1
) -> ModeResult:
    del arg, force
    if step > 0:
        context.buffers.next()
    else:
        context.buffers.prev()
    return _done(f'"{context.buffer.name}"', status="command_buffer")


def _handle_list(context: ModeContext, arg: str, *, force: bool = False) -> ModeResult:
    del arg, force
    return _done("\n".join(context.buffers.describe()), status="command_list")


# -- search, help, options -------------------------------------------------


def _handle_nohlsearch(
    context: ModeContext, arg: str, *, force: bool = False
) -> ModeResult:
    del arg, force
    context.search.clear_highlight()
    return _done(status="command_noh")


def _handle_help(context: ModeContext, arg: str, *, force: bool = False) -> ModeResult:
    del arg, force
    return _done(switch_to="help", status="command_help")


def _handle_set(context: ModeContext, arg: str, *, force: bool = False) -> ModeResult:
    del force
    config = context.config
    if not arg:
        return _done(
            " ".join(config.describe(name) for name in ("tab_width", "shift_width", "expand_tab")),
            status="command_set",
        )
    messages: List[str] = []
    try:
        for assignment in arg.split():
            messages.append(config.apply(assignment))
    except ConfigError as exc:
        return _done(str(exc), status="command_error")
    finally:
        context.search.configure(
            ignore_case=config.ignore_case, smart_case=config.smart_case
        )
    return _done(" ".join(messages), status="command_set")


def _handle_substitute(context: ModeContext, command: SubstituteCommand) -> ModeResult:
    if not command.pattern:
        if not context.search.pattern:
            return _done("No previous regular expression", status="command_error")
        command = replace(command, pattern=context.search.pattern)
    buffer = context.buffer
    lines = list(buffer.text.lines())
    result = substitute(lines, command, current_line=buffer.cursor.line)
    if result.error or not result.count:
        return _done(result.describe(), status="command_error")
    with buffer.transaction("substitute"):
        for index in reversed(result.changed):
            buffer.text.replace_line(index, lines[index])
        buffer.cursor.move_to(buffer.text, result.changed[-1], 0)
        buffer.cursor.move_to_first_non_blank(buffer.text)
    context.bus.emit("command.substitute", {"count": result.count, "lines": result.lines})
    return _done(result.describe(), status="command_substitute")


# -- events ----------------------------------------------------------------


def _emit_write(context: ModeContext, buffer: Buffer, written: int) -> None:
    payload = {"path": str(buffer.path), "bytes": written}
    context.bus.emit("buffer.save", payload)


def _emit_quit(context: ModeContext, *, force: bool) -> None:
    payload = {"force": force}
    context.bus.emit("command.quit", payload)


_COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "quit": _handle_quit,
    "q": _handle_quit,
    "quit!": partial(_handle_quit, force=True),
    "q!": partial(_handle_quit, force=True),
    "write": _handle_write,
    "w": _handle_write,
    "write!": partial(_handle_write, force=True),
    "w!": partial(_handle_write, force=True),
    "wq": _handle_wq,
    "wq!": partial(_handle_wq, force=True),
    "x": _handle_x,
    "x!": partial(_handle_x, force=True),
    "exit": _handle_x,
    "edit": _handle_edit,
    "e": _handle_edit,
    "edit!": partial(_handle_edit, force=True),
    "e!": partial(_handle_edit, force=True),
    "buffer": _handle_buffer,
    "b": _handle_buffer,
    "bdelete": _handle_buffer_delete,
    "bd": _handle_buffer_delete,
    "bdelete!": partial(_handle_buffer_delete, force=True),
    "bd!": partial(_handle_buffer_delete, force=True),
    "bnext": _handle_buffer_next,
    "bn": _handle_buffer_next,
    "bprevious": partial(_handle_buffer_next, step=-1),
    "bp": partial(_handle_buffer_next, step=-1),
    "ls": _handle_list,
    "buffers": _handle_list,
    "nohlsearch": _handle_nohlsearch,
    "noh": _handle_nohlsearch,
    "help": _handle_help,
    "h": _handle_help,
    "set": _handle_set,
    "se": _handle_set,
}


__all__ = ["command_backspace", "execute_command", "submit_command_line"]
