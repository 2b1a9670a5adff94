"""Search prompt and match navigation actions."""

from __future__ import annotations

from typing import MutableMapping, Optional, cast

from quirks.keymaps import ResolutionMatch
from quirks.modes.base_mode import ModeContext, ModeResult
from quirks.search import SearchDirection, SearchMatch

NOT_FOUND = "Pattern not found"


def search_state(context: ModeContext) -> MutableMapping[str, object]:
    state = cast(
        MutableMapping[str, object], context.extras.setdefault("search_state", {})
    )
    state.setdefault("text", "")
    state.setdefault("direction", SearchDirection.FORWARD)
    return state


def start_search(
    context: ModeContext,
    match: ResolutionMatch,
    *,
    direction: SearchDirection = SearchDirection.FORWARD,
) -> ModeResult:
    del match
    state = search_state(context)
    state["text"] = ""
    state["direction"] = direction
    return ModeResult(consumed=True, switch_to="search", status="search_start")


def _jump(context: ModeContext, found: SearchMatch) -> None:
    buffer = context.buffer
    buffer.cursor.move_to(buffer.text, found.line, found.start_col)
    selection = buffer.selection
    if selection is not None:
        selection.update_cursor(*buffer.cursor.position)


def run_search(context: ModeContext, pattern: str, direction: SearchDirection) -> Optional[SearchMatch]:
    """Compile ``pattern``, collect matches and jump to the nearest one."""

    engine = context.search
    buffer = context.buffer
    engine.start(direction)
    engine.set_pattern(pattern)
    found = engine.execute(buffer.text.lines(), *buffer.cursor.position)
    if found is not None:
        _jump(context, found)
    context.bus.emit("search.execute", {"pattern": pattern, "matches": len(engine.matches)})
    return found


def submit_search(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    state = search_state(context)
    engine = context.search
    pattern = str(state["text"]) or engine.pattern
    direction = cast(SearchDirection, state["direction"])
    state["text"] = ""
    if not pattern:
        return ModeResult(consumed=True, switch_to="normal", status="search_empty")
    found = run_search(context, pattern, direction)
    if found is None:
        return ModeResult(
            consumed=True, switch_to="normal", status="search_miss", message=NOT_FOUND
        )
    return ModeResult(
        consumed=True,
        switch_to="normal",
        status="search_hit",
        message=engine.match_info(),
    )


def search_backspace(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    state = search_state(context)
    text = str(state["text"])
    if not text:
        return ModeResult(consumed=True, switch_to="normal", status="search_cancel")
    state["text"] = text[:-1]
    return ModeResult(consumed=True, status="editing")


def cancel_search(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    search_state(context)["text"] = ""
    context.search.clear_highlight()
    return ModeResult(consumed=True, switch_to="normal", status="search_cancel")


def _step(context: ModeContext, *, forward: bool) -> ModeResult:
    engine = context.search
    if not engine.pattern:
        return ModeResult(consumed=True, status="noop", message="No previous regular expression")
    if not engine.matches:
        # empty after a miss; the text may have changed since
        buffer = context.buffer
        engine.execute(buffer.text.lines(), *buffer.cursor.position)
        found = engine.current()
    else:
        engine.highlight_active = True
        found = engine.next_match() if forward else engine.prev_match()
    if found is None:
        return ModeResult(consumed=True, status="search_miss", message=NOT_FOUND)
    _jump(context, found)
    return ModeResult(consumed=True, status="search_hit", message=engine.match_info())


def next_match(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _step(context, forward=True)


def prev_match(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _step(context, forward=False)


__all__ = [
    "cancel_search",
    "next_match",
    "prev_match",
    "run_search",
    "search_backspace",
    "search_state",
    "start_search",
    "submit_search",
]
