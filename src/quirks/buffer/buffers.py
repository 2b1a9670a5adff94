"""Ordered list of open buffers with a current index."""

from __future__ import annotations

from typing import Iterator, List, Optional

from .buffer import Buffer


class BufferList:
    """Backs ``:e``, ``:b N``, ``:bd``, ``:bn``, ``:bp`` and ``:ls``.

    The list is never empty: closing the last buffer replaces it with a fresh
    unnamed one.
    """

    def __init__(self, initial: Optional[Buffer] = None) -> None:
        self._buffers: List[Buffer] = [initial or Buffer()]
        self._current = 0

    def __len__(self) -> int:
        return len(self._buffers)

    def __iter__(self) -> Iterator[Buffer]:
        return iter(self._buffers)

    @property
    def current(self) -> Buffer:
        return self._buffers[self._current]

    @property
    def current_index(self) -> int:
        return self._current

    def add(self, buffer: Buffer) -> int:
        """Append ``buffer`` and make it current.

        An untouched unnamed buffer in the current slot is replaced instead.
        """

        current = self.current
        if current.path is None and not current.modified and current.text.is_empty():
            self._buffers[self._current] = buffer
        else:
            self._buffers.append(buffer)
            self._current = len(self._buffers) - 1
        return self._current

    def find(self, path: str) -> Optional[int]:
        for index, buffer in enumerate(self._buffers):
            if buffer.path is not None and str(buffer.path) == path:
                return index
        return None

    def switch_to(self, index: int) -> bool:
        if 0 <= index < len(self._buffers):
            self._current = index
            return True
        return False

    def next(self) -> Buffer:
        self._current = (self._current + 1) % len(self._buffers)
        return self.current

    def prev(self) -> Buffer:
        self._current = (self._current - 1) % len(self._buffers)
        return self.current

    def close_current(self) -> Buffer:
        """Remove the current buffer and return it."""

        closed = self._buffers.pop(self._current)
        if not self._buffers:
            self._buffers.append(Buffer())
        self._current = min(self._current, len(self._buffers) - 1)
        return closed

    def describe(self) -> List[str]:
        """``:ls`` rows: 1-based number, current marker, modified flag, name."""

        rows = []
        for index, buffer in enumerate(self._buffers):
            marker = "%a" if index == self._current else "  "
            flag = "+" if buffer.modified else " "
            rows.append(f"{index + 1:>3} {marker} {flag} \"{buffer.name}\"")
        return rows


__all__ = ["BufferList"]
