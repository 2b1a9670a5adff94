"""High-level buffer façade combining text, cursor, selection, and history."""

from __future__ import annotations

from contextlib import AbstractContextManager
from pathlib import Path
from typing import ContextManager, Optional

from quirks.runtime import telemetry

from .cursor import Cursor
from .selection import Selection
from .sync import BufferMirror
from .text_store import PathLike, TextStore
from .undo import DEFAULT_CAPACITY, History

NO_NAME = "[No Name]"


class Buffer:
    """One open document and the editing state that belongs to it."""

    def __init__(
        self,
        *,
        name: Optional[str] = None,
        text: Optional[TextStore] = None,
        history_capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self.text = text if text is not None else TextStore()
        self.cursor = Cursor()
        self.selection: Optional[Selection] = None
        self.history = History(history_capacity)
        self.history.init(self.text.rope, self.cursor.position)
        self._name = name

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        name: Optional[str] = None,
        history_capacity: int = DEFAULT_CAPACITY,
    ) -> "Buffer":
        return cls(name=name, text=TextStore(text), history_capacity=history_capacity)

    @classmethod
    def open(cls, path: PathLike, *, history_capacity: int = DEFAULT_CAPACITY) -> "Buffer":
        return cls(text=TextStore.load(path), history_capacity=history_capacity)

    @property
    def name(self) -> str:
        if self._name:
            return self._name
        if self.text.path is not None:
            return str(self.text.path)
        return NO_NAME

    @property
    def path(self) -> Optional[Path]:
        return self.text.path

    @property
    def modified(self) -> bool:
        return self.text.is_modified()

    def checkpoint(self) -> bool:
        """Record the current state as the point the next undo returns to."""

        return self.history.record(self.text.rope, self.cursor.position)

    def transaction(self, label: str) -> "Transaction":
        return Transaction(self, label)

    def undo(self) -> bool:
        snapshot = self.history.undo(self.text.rope, self.cursor.position)
        if snapshot is None:
            return False
        self.text.restore(snapshot.text)
        self.cursor.move_to(self.text, *snapshot.cursor)
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.text.restore(snapshot.text)
        self.cursor.move_to(self.text, *snapshot.cursor)
        return True

    def save(self) -> int:
        return self.text.save()

    def save_as(self, path: PathLike) -> int:
        return self.text.save_as(path)

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        selection = self.selection
        return BufferMirror(
            text=self.text.text,
            cursor=self.cursor.position,
            name=self.name,
            modified=self.modified,
            selection=selection.normalized() if selection else None,
            selection_kind=selection.kind.value if selection else None,
            attributes=dict(attributes or {}),
        )

    def __repr__(self) -> str:
        return f"Buffer(name={self.name!r}, cursor={self.cursor.position})"


class Transaction(AbstractContextManager["Transaction"]):
    """Checkpoint history on entry and clamp the cursor on exit."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self.recorded = False
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        self.recorded = self.buffer.checkpoint()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.buffer.cursor.clamp(self.buffer.text)
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["Buffer", "Transaction", "NO_NAME"]
