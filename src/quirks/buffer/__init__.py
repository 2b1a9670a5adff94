"""Text storage, cursor, selection, registers, and undo history."""

from .buffer import Buffer, Transaction
from .buffers import BufferList
from .cursor import Cursor
from .registers import RegisterBank, RegisterKind, RegisterValue
from .rope import Rope
from .selection import Selection, SelectionKind
from .sync import BufferMirror, BufferSync
from .text_store import NoFileNameError, TextDecodeError, TextStore
from .undo import History, Snapshot

__all__ = [
    "Buffer",
    "BufferList",
    "BufferMirror",
    "BufferSync",
    "Cursor",
    "History",
    "NoFileNameError",
    "RegisterBank",
    "RegisterKind",
    "RegisterValue",
    "Rope",
    "Selection",
    "SelectionKind",
    "Snapshot",
    "TextDecodeError",
    "TextStore",
    "Transaction",
]
