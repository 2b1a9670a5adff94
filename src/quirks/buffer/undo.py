"""Snapshot-based undo/redo history."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple

from .rope import Rope

Position = Tuple[int, int]

DEFAULT_CAPACITY = 1000


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Whole-document content plus the cursor at capture time.

    ``text`` is a persistent :class:`Rope`, so holding a snapshot costs a
    reference rather than a copy.
    """

    text: Rope
    cursor: Position

    def matches(self, text: Rope) -> bool:
        return self.text == text


class History:
    """Linear undo/redo stacks of snapshots.

    The bottom of the undo stack is the floor: ``undo`` never pops it. When the
    stack is full the oldest snapshot is evicted and the next one becomes the
    floor.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("history capacity must be positive")
        self.capacity = capacity
        self._undo: Deque[Snapshot] = deque(maxlen=capacity)
        self._redo: List[Snapshot] = []

    def init(self, text: Rope, cursor: Position) -> None:
        self._undo.clear()
        self._redo.clear()
        self._undo.append(Snapshot(text, cursor))

    def record(self, text: Rope, cursor: Position) -> bool:
        """Checkpoint the state about to be edited.

        Returns ``False`` when ``text`` equals the latest snapshot. That
        snapshot is left as is, so undoing the edit restores the cursor it
        was taken with rather than ``cursor``.
        """

        self._redo.clear()
        if self._undo and self._undo[-1].matches(text):
            return False
        self._undo.append(Snapshot(text, cursor))
        return True

    def undo(self, current: Rope, cursor: Position) -> Optional[Snapshot]:
        if not self._undo:
            return None
        top = self._undo[-1]
        if not top.matches(current):
            # edits since the last checkpoint: step back to it, keep it as floor
            self._redo.append(Snapshot(current, cursor))
            return top
        if len(self._undo) < 2:
            return None
        self._redo.append(Snapshot(current, cursor))
        self._undo.pop()
        return self._undo[-1]

    def redo(self) -> Optional[Snapshot]:
        if not self._redo:
            return None
        snapshot = self._redo.pop()
        self._undo.append(snapshot)
        return snapshot

    def can_undo(self, current: Optional[Rope] = None) -> bool:
        if current is not None and self._undo and not self._undo[-1].matches(current):
            return True
        return len(self._undo) >= 2

    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_count(self) -> int:
        return len(self._undo)

    @property
    def redo_count(self) -> int:
        return len(self._redo)

    def clear(self) -> None:
        floor = self._undo[-1] if self._undo else None
        self._undo.clear()
        self._redo.clear()
        if floor is not None:
            self._undo.append(floor)


__all__ = ["History", "Snapshot", "DEFAULT_CAPACITY"]
