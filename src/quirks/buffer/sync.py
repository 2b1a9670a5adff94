"""Adapter boundary types for handing buffer state to host widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple

Position = Tuple[int, int]
Span = Tuple[int, int, int, int]


@dataclass(slots=True)
class BufferMirror:
    """Read-only snapshot a renderer draws from.

    ``selection`` is the normalized ``(start_line, start_col, end_line,
    end_col)`` extent and ``selection_kind`` its visual kind, both ``None``
    outside visual modes.
    """

    text: str
    cursor: Position
    name: str = ""
    modified: bool = False
    selection: Optional[Span] = None
    selection_kind: Optional[str] = None
    highlights: Tuple[Tuple[int, int, int], ...] = ()
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")


class BufferSync(Protocol):
    """How adapters pull renderable state out of the editor."""

    def pull_buffer(self) -> BufferMirror:
        """Return the latest buffer snapshot that the host should render."""
        ...


__all__ = ["BufferMirror", "BufferSync"]
