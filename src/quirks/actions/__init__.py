"""High-level editing verbs reused across modes."""

from .core import enter_insert_mode, exit_to_normal_mode
from .edit import paste, run_operator, store_register
from .visual import (
    change_selection,
    delete_selection,
    extract,
    shift_selection,
    swap_anchor,
    yank_selection,
)
from .command import execute_command, submit_command_line
from .search import next_match, prev_match, run_search

__all__ = [
    "enter_insert_mode",
    "exit_to_normal_mode",
    "paste",
    "run_operator",
    "store_register",
    "extract",
    "swap_anchor",
    "yank_selection",
    "delete_selection",
    "change_selection",
    "shift_selection",
    "execute_command",
    "submit_command_line",
    "next_match",
    "prev_match",
    "run_search",
]
