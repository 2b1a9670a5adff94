"""Built-in keymaps that seed each mode with sensible defaults."""

from __future__ import annotations

from functools import partial
from typing import Callable, Iterable, Mapping, Sequence

from quirks.actions import command as command_actions
from quirks.actions import core as core_actions
from quirks.actions import edit as edit_actions
from quirks.actions import motion as motion_actions
from quirks.actions import search as search_actions
from quirks.actions import visual as visual_actions
from quirks.buffer import SelectionKind
from quirks.search import SearchDirection

from .models import ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

VISUAL_MODES = ("visual", "visual_line", "visual_block")


def action(action_id: str, handler: Callable[..., object], description: str) -> ActionRef:
    return ActionRef(id=action_id, handler=handler, description=description)


def default_actions() -> tuple[ActionRef, ...]:
    """Fresh action table for :func:`load_default_keymaps`."""

    return (
        # mode switches
        action("core.enter_insert", core_actions.enter_insert_mode, "Insert before the cursor"),
        action("core.append", core_actions.append_after_cursor, "Append after the cursor"),
        action("core.insert_line_start", core_actions.insert_at_line_start, "Insert at the first non-blank"),
        action("core.append_line_end", core_actions.append_at_line_end, "Append at the end of the line"),
        action("core.open_below", core_actions.open_line_below, "Open a line below"),
        action("core.open_above", core_actions.open_line_above, "Open a line above"),
        action("core.exit_insert", core_actions.exit_insert_mode, "Leave insert mode"),
        action("core.exit_to_normal", core_actions.exit_to_normal_mode, "Return to normal mode"),
        action("core.cancel", core_actions.cancel_pending, "Cancel a pending count or operator"),
        action("core.enter_command", core_actions.enter_command_mode, "Enter command-line mode"),
        action(
            "core.visual_char",
            partial(core_actions.enter_visual_mode, kind=SelectionKind.CHAR),
            "Character-wise visual mode",
        ),
        action(
            "core.visual_line",
            partial(core_actions.enter_visual_mode, kind=SelectionKind.LINE),
            "Line-wise visual mode",
        ),
        action(
            "core.visual_block",
            partial(core_actions.enter_visual_mode, kind=SelectionKind.BLOCK),
            "Block-wise visual mode",
        ),
        action("core.help_down", partial(core_actions.scroll_help, delta=1), "Scroll help down"),
        action("core.help_up", partial(core_actions.scroll_help, delta=-1), "Scroll help up"),
        # motions
        action("motion.left", motion_actions.move_left, "Move left"),
        action("motion.right", motion_actions.move_right, "Move right"),
        action("motion.up", motion_actions.move_up, "Move up"),
        action("motion.down", motion_actions.move_down, "Move down"),
        action("motion.word_forward", motion_actions.word_forward, "Next word start"),
        action("motion.word_backward", motion_actions.word_backward, "Previous word start"),
        action("motion.word_end", motion_actions.word_end, "Next word end"),
        action("motion.line_start", motion_actions.line_start, "Start of line"),
        action("motion.first_non_blank", motion_actions.first_non_blank, "First non-blank character"),
        action("motion.line_end", motion_actions.line_end, "End of line"),
        action("motion.buffer_start", motion_actions.buffer_start, "First line"),
        action("motion.buffer_end", motion_actions.buffer_end, "Last line"),
        action("motion.match_bracket", motion_actions.match_bracket, "Matching bracket"),
        action("motion.repeat_find", motion_actions.repeat_find, "Repeat the last f/F"),
        action("motion.repeat_find_reverse", motion_actions.repeat_find_reverse, "Repeat the last f/F backwards"),
        # edits
        action("edit.delete_char", edit_actions.delete_char, "Delete the character under the cursor"),
        action("edit.join_lines", edit_actions.join_lines, "Join with the next line"),
        action("edit.paste_after", partial(edit_actions.paste, after=True), "Paste after the cursor"),
        action("edit.paste_before", partial(edit_actions.paste, after=False), "Paste before the cursor"),
        action("edit.undo", edit_actions.undo, "Undo"),
        action("edit.redo", edit_actions.redo, "Redo"),
        action("edit.operator", edit_actions.begin_operator, "Start an operator (doubled applies to the line)"),
        action("edit.await_char", edit_actions.await_char, "Wait for a character argument"),
        action("edit.newline", edit_actions.insert_newline, "Split the line"),
        action("edit.tab", edit_actions.insert_tab, "Insert indentation"),
        action("edit.backspace", edit_actions.backspace, "Delete before the cursor"),
        action("edit.delete_forward", edit_actions.delete_forward, "Delete under the cursor"),
        # visual
        action("visual.yank", visual_actions.yank_selection, "Yank the selection"),
        action("visual.delete", visual_actions.delete_selection, "Delete the selection"),
        action("visual.change", visual_actions.change_selection, "Change the selection"),
        action("visual.swap_anchor", visual_actions.swap_anchor, "Swap selection ends"),
        action("visual.indent", visual_actions.shift_selection, "Indent selected lines"),
        action(
            "visual.outdent",
            partial(visual_actions.shift_selection, outdent=True),
            "Outdent selected lines",
        ),
        # command line
        action("command.submit_line", command_actions.submit_command_line, "Run the command line"),
        action("command.backspace", command_actions.command_backspace, "Delete the last character"),
        # search
        action(
            "search.forward",
            partial(search_actions.start_search, direction=SearchDirection.FORWARD),
            "Search forward",
        ),
        action(
            "search.backward",
            partial(search_actions.start_search, direction=SearchDirection.BACKWARD),
            "Search backward",
        ),
        action("search.submit", search_actions.submit_search, "Run the search"),
        action("search.backspace", search_actions.search_backspace, "Delete the last character"),
        action("search.cancel", search_actions.cancel_search, "Cancel the search"),
        action("search.next", search_actions.next_match, "Next match"),
        action("search.prev", search_actions.prev_match, "Previous match"),
    )


def _bind(mode: str, keys: Sequence[str], action_id: str, description: str = "") -> Binding:
    name = "_".join(_slug(key) for key in keys)
    return Binding(
        id=f"{mode}.{name}",
        mode=mode,
        sequence=KeySequence.from_strings(*keys),
        action_id=action_id,
        description=description,
        source="defaults",
    )


_SLUGS = {
    ":": "colon", "/": "slash", "?": "question", "$": "dollar", "^": "caret",
    "%": "percent", ";": "semicolon", ",": "comma", '"': "quote", ">": "gt",
    "<": "lt",
}


def _slug(key: str) -> str:
    if key in _SLUGS:
        return _SLUGS[key]
    if len(key) == 1 and key.isupper():
        return f"S{key}"
    return key.replace("+", "-")


# keys shared by normal and every visual mode
_MOTION_KEYS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("h",), "motion.left"),
    (("LEFT",), "motion.left"),
    (("l",), "motion.right"),
    (("RIGHT",), "motion.right"),
    (("k",), "motion.up"),
    (("UP",), "motion.up"),
    (("j",), "motion.down"),
    (("DOWN",), "motion.down"),
    (("w",), "motion.word_forward"),
    (("b",), "motion.word_backward"),
    (("e",), "motion.word_end"),
    (("0",), "motion.line_start"),
    (("HOME",), "motion.line_start"),
    (("^",), "motion.first_non_blank"),
    (("$",), "motion.line_end"),
    (("END",), "motion.line_end"),
    (("g", "g"), "motion.buffer_start"),
    (("G",), "motion.buffer_end"),
    (("%",), "motion.match_bracket"),
    (("n",), "search.next"),
    (("N",), "search.prev"),
)

_NORMAL_KEYS: tuple[tuple[tuple[str, ...], str], ...] = (
    ((";",), "motion.repeat_find"),
    ((",",), "motion.repeat_find_reverse"),
    (("i",), "core.enter_insert"),
    (("a",), "core.append"),
    (("I",), "core.insert_line_start"),
    (("A",), "core.append_line_end"),
    (("o",), "core.open_below"),
    (("O",), "core.open_above"),
    (("x",), "edit.delete_char"),
    (("DELETE",), "edit.delete_char"),
    (("J",), "edit.join_lines"),
    (("p",), "edit.paste_after"),
    (("P",), "edit.paste_before"),
    (("u",), "edit.undo"),
    (("ctrl+r",), "edit.redo"),
    (("d",), "edit.operator"),
    (("y",), "edit.operator"),
    (("c",), "edit.operator"),
    ((">",), "edit.operator"),
    (("<",), "edit.operator"),
    (("r",), "edit.await_char"),
    (("f",), "edit.await_char"),
    (("F",), "edit.await_char"),
    (('"',), "edit.await_char"),
    (("/",), "search.forward"),
    (("?",), "search.backward"),
    ((":",), "core.enter_command"),
    (("v",), "core.visual_char"),
    (("V",), "core.visual_line"),
    (("ctrl+v",), "core.visual_block"),
    (("ESC",), "core.cancel"),
)

_VISUAL_KEYS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("y",), "visual.yank"),
    (("d",), "visual.delete"),
    (("x",), "visual.delete"),
    (("DELETE",), "visual.delete"),
    (("c",), "visual.change"),
    (("o",), "visual.swap_anchor"),
    ((">",), "visual.indent"),
    (("<",), "visual.outdent"),
    (("v",), "core.visual_char"),
    (("V",), "core.visual_line"),
    (("ctrl+v",), "core.visual_block"),
    ((":",), "core.enter_command"),
    (("ESC",), "core.exit_to_normal"),
)

_INSERT_KEYS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("ESC",), "core.exit_insert"),
    (("ENTER",), "edit.newline"),
    (("TAB",), "edit.tab"),
    (("BACKSPACE",), "edit.backspace"),
    (("DELETE",), "edit.delete_forward"),
    (("LEFT",), "motion.left"),
    (("RIGHT",), "motion.right"),
    (("UP",), "motion.up"),
    (("DOWN",), "motion.down"),
    (("HOME",), "motion.line_start"),
    (("END",), "motion.line_end"),
)

_PROMPT_KEYS: tuple[tuple[str, tuple[str, ...], str], ...] = (
    ("command", ("ESC",), "core.exit_to_normal"),
    ("command", ("ENTER",), "command.submit_line"),
    ("command", ("BACKSPACE",), "command.backspace"),
    ("search", ("ESC",), "search.cancel"),
    ("search", ("ENTER",), "search.submit"),
    ("search", ("BACKSPACE",), "search.backspace"),
    ("help", ("q",), "core.exit_to_normal"),
    ("help", ("ESC",), "core.exit_to_normal"),
    ("help", ("ENTER",), "core.exit_to_normal"),
    ("help", ("j",), "core.help_down"),
    ("help", ("DOWN",), "core.help_down"),
    ("help", ("k",), "core.help_up"),
    ("help", ("UP",), "core.help_up"),
)


def _default_bindings() -> tuple[Binding, ...]:
    bindings = [_bind("normal", keys, action_id) for keys, action_id in _MOTION_KEYS]
    bindings.extend(_bind("normal", keys, action_id) for keys, action_id in _NORMAL_KEYS)
    for mode in VISUAL_MODES:
        bindings.extend(_bind(mode, keys, action_id) for keys, action_id in _MOTION_KEYS)
        bindings.extend(_bind(mode, keys, action_id) for keys, action_id in _VISUAL_KEYS)
    bindings.extend(_bind("insert", keys, action_id) for keys, action_id in _INSERT_KEYS)
    bindings.extend(_bind(mode, keys, action_id) for mode, keys, action_id in _PROMPT_KEYS)
    return tuple(bindings)


DEFAULT_BINDINGS: tuple[Binding, ...] = _default_bindings()


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    include_actions: Sequence[str] | None = None,
    exclude_actions: Sequence[str] | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
    per_mode_overrides: Mapping[str, Iterable[Binding]] | None = None,
) -> None:
    """Register built-in actions and bindings for every mode."""

    allowed_actions = _build_filters(include_actions, exclude_actions)
    allowed_bindings = _build_filters(include_bindings, exclude_bindings)

    registered: set[str] = set()
    for action in default_actions():
        if not _selected(action.id, allowed_actions):
            continue
        registry.register_action(action, replace=replace)
        registered.add(action.id)

    for binding in DEFAULT_BINDINGS:
        if not _selected(binding.id, allowed_bindings):
            continue
        if binding.action_id not in registered:
            continue
        registry.register_binding(binding, replace=replace)

    if extra_bindings:
        for binding in extra_bindings:
            registry.register_binding(binding, replace=replace)

    if per_mode_overrides:
        for mode, bindings in per_mode_overrides.items():
            for binding in bindings:
                if binding.mode != mode:
                    raise ValueError(
                        f"Override binding '{binding.id}' must target mode '{mode}'"
                    )
                registry.register_binding(binding, replace=True)


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    include_set = set(include) if include else None
    exclude_set = set(exclude or ())
    return include_set, exclude_set


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    if item_id in exclude:
        return False
    return True


__all__ = ["load_default_keymaps", "default_actions", "DEFAULT_BINDINGS"]
