"""Editing core of a modal, vi-style text editor."""

__all__ = [
    "adapters",
    "actions",
    "buffer",
    "editor",
    "keymaps",
    "modes",
    "runtime",
    "search",
]

__version__ = "0.1.0"
