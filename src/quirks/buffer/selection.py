"""Visual selection extents in TextStore coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class SelectionKind(str, Enum):
    CHAR = "char"
    LINE = "line"
    BLOCK = "block"


@dataclass(slots=True)
class Selection:
    kind: SelectionKind
    anchor_line: int
    anchor_col: int
    cursor_line: int
    cursor_col: int

    @classmethod
    def new(cls, kind: SelectionKind, line: int, col: int) -> "Selection":
        return cls(kind, line, col, line, col)

    def update_cursor(self, line: int, col: int) -> None:
        self.cursor_line = line
        self.cursor_col = col

    def swap(self) -> None:
        self.anchor_line, self.cursor_line = self.cursor_line, self.anchor_line
        self.anchor_col, self.cursor_col = self.cursor_col, self.anchor_col

    def normalized(self) -> Tuple[int, int, int, int]:
        """``(start_line, start_col, end_line, end_col)`` in document order."""

        anchor = (self.anchor_line, self.anchor_col)
        cursor = (self.cursor_line, self.cursor_col)
        start, end = (anchor, cursor) if anchor <= cursor else (cursor, anchor)
        return start[0], start[1], end[0], end[1]

    def line_range(self) -> Tuple[int, int]:
        return (
            min(self.anchor_line, self.cursor_line),
            max(self.anchor_line, self.cursor_line),
        )

    def col_range(self) -> Tuple[int, int]:
        return (
            min(self.anchor_col, self.cursor_col),
            max(self.anchor_col, self.cursor_col),
        )

    def contains(self, line: int, col: int) -> bool:
        first, last = self.line_range()
        if line < first or line > last:
            return False
        if self.kind is SelectionKind.LINE:
            return True
        if self.kind is SelectionKind.BLOCK:
            left, right = self.col_range()
            return left <= col <= right
        start_line, start_col, end_line, end_col = self.normalized()
        if start_line == end_line:
            return start_col <= col <= end_col
        if line == start_line:
            return col >= start_col
        if line == end_line:
            return col <= end_col
        return True


__all__ = ["Selection", "SelectionKind"]
