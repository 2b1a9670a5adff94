"""Rope-backed text storage with grapheme-aware line and column indexing."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import grapheme

from quirks.runtime import telemetry

from .rope import Rope

PathLike = Union[str, "os.PathLike[str]"]


class TextDecodeError(ValueError):
    """Raised when a file is not valid UTF-8."""

    def __init__(self, path: Path, reason: UnicodeDecodeError) -> None:
        super().__init__(f"{path}: not valid UTF-8 (byte {reason.start})")
        self.path = path
        self.position = reason.start


class NoFileNameError(OSError):
    """Raised by ``save`` when the store has no associated path."""

    def __init__(self) -> None:
        super().__init__("No file name")


def clusters(text: str) -> List[str]:
    return list(grapheme.graphemes(text))


class TextStore:
    """Document text plus its file association and modified flag.

    Flat offsets are string indices into :attr:`text`; columns are grapheme
    cluster counts within a line. Every mutating call clamps its arguments
    instead of raising.
    """

    def __init__(self, text: str = "", *, path: Optional[PathLike] = None) -> None:
        self._rope = Rope(text)
        self.path: Optional[Path] = Path(path) if path is not None else None
        self.modified = False

    @classmethod
    def load(cls, path: PathLike) -> "TextStore":
        target = Path(path)
        with telemetry.span("text_store::load", metadata={"path": str(target)}) as span:
            data = target.read_bytes()
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise TextDecodeError(target, exc) from exc
            span.add_metadata("bytes", len(data))
        return cls(text, path=target)

    def save(self) -> int:
        if self.path is None:
            raise NoFileNameError()
        written = _write_atomic(self.path, self.text)
        self.modified = False
        return written

    def save_as(self, path: PathLike) -> int:
        target = Path(path)
        written = _write_atomic(target, self.text)
        self.path = target
        self.modified = False
        return written

    # -- queries ---------------------------------------------------------

    @property
    def rope(self) -> Rope:
        return self._rope

    @property
    def text(self) -> str:
        return str(self._rope)

    def __len__(self) -> int:
        """Length in code points; see :meth:`byte_len` for the UTF-8 size."""
        return len(self._rope)

    def byte_len(self) -> int:
        return len(self.text.encode("utf-8"))

    def is_empty(self) -> bool:
        return len(self._rope) == 0

    def is_modified(self) -> bool:
        return self.modified

    def line_count(self) -> int:
        return self._rope.line_count

    def last_line(self) -> int:
        return self._rope.newlines

    def line(self, idx: int) -> str:
        return self._rope.line_text(idx)

    def lines(self) -> Iterator[str]:
        for idx in range(self.line_count()):
            yield self.line(idx)

    def graphemes(self, idx: int) -> List[str]:
        return clusters(self.line(idx))

    def line_len(self, idx: int) -> int:
        return grapheme.length(self.line(idx))

    def line_to_char(self, idx: int) -> int:
        return self._rope.line_start(min(max(idx, 0), self.last_line()))

    def col_to_char(self, idx: int, col: int) -> int:
        """In-line string offset of grapheme column ``col`` (clamped)."""

        if col <= 0:
            return 0
        return sum(len(item) for item in self.graphemes(idx)[:col])

    def position_to_offset(self, line: int, col: int) -> int:
        line = min(max(line, 0), self.last_line())
        return self.line_to_char(line) + self.col_to_char(line, col)

    def offset_to_position(self, offset: int) -> Tuple[int, int]:
        offset = min(max(offset, 0), len(self._rope))
        line = self._rope.line_of(offset)
        prefix = self._rope.slice(self._rope.line_start(line), offset)
        return line, grapheme.length(prefix)

    def char_at(self, line: int, col: int) -> Optional[str]:
        if line < 0 or line > self.last_line() or col < 0:
            return None
        items = self.graphemes(line)
        return items[col] if col < len(items) else None

    def slice(self, start: int, end: int) -> str:
        return self._rope.slice(start, end)

    # -- edits -----------------------------------------------------------

    def insert(self, offset: int, text: str) -> None:
        if not text:
            return
        self._rope = self._rope.insert(offset, text)
        self.modified = True

    def insert_char(self, offset: int, char: str) -> None:
        self.insert(offset, char)

    def delete(self, start: int, end: int) -> None:
        end = min(end, len(self._rope))
        start = min(start, end)
        if start >= end:
            return
        self._rope = self._rope.delete(start, end)
        self.modified = True

    def restore(self, rope: Rope) -> None:
        if rope is self._rope:
            return
        self._rope = rope
        self.modified = True

    def delete_grapheme(self, line: int, col: int) -> None:
        if line < 0 or line > self.last_line():
            return
        items = self.graphemes(line)
        start = self.line_to_char(line)
        if col < len(items):
            offset = start + self.col_to_char(line, col)
            self.delete(offset, offset + len(items[col]))
        elif line < self.last_line():
            newline = self._rope.line_end(line)
            self.delete(newline, newline + 1)

    def backspace(self, line: int, col: int) -> Tuple[int, int]:
        if line < 0 or line > self.last_line():
            return max(line, 0), max(col, 0)
        if col > 0:
            items = self.graphemes(line)
            col = min(col, len(items))
            offset = self.line_to_char(line) + self.col_to_char(line, col)
            self.delete(offset - len(items[col - 1]), offset)
            return line, col - 1
        if line == 0:
            return 0, 0
        joined_col = self.line_len(line - 1)
        newline = self._rope.line_end(line - 1)
        self.delete(newline, newline + 1)
        return line - 1, joined_col

    def delete_line(self, idx: int) -> None:
        last = self.last_line()
        if idx < 0 or idx > last:
            return
        if idx < last:
            self.delete(self._rope.line_start(idx), self._rope.line_start(idx + 1))
        elif idx > 0:
            self.delete(self._rope.line_end(idx - 1), len(self._rope))
        else:
            self.delete(0, len(self._rope))

    def insert_line_above(self, idx: int, text: str) -> None:
        idx = min(max(idx, 0), self.last_line())
        self.insert(self._rope.line_start(idx), _strip_terminator(text) + "\n")

    def insert_line_below(self, idx: int, text: str) -> None:
        idx = min(max(idx, 0), self.last_line())
        body = _strip_terminator(text)
        if idx == self.last_line():
            # the last line never carries a terminator of its own
            self.insert(len(self._rope), "\n" + body)
        else:
            self.insert(self._rope.line_start(idx + 1), body + "\n")

    def replace_line(self, idx: int, text: str) -> None:
        if idx < 0 or idx > self.last_line():
            return
        start = self._rope.line_start(idx)
        end = self._rope.line_end(idx)
        if self._rope.slice(start, end) == text:
            return
        self.delete(start, end)
        self.insert(start, text)

    def join_lines(self, idx: int) -> bool:
        if idx < 0 or idx >= self.last_line():
            return False
        current = self.line(idx)
        following = self.line(idx + 1)
        newline = self._rope.line_end(idx)
        self.delete(newline, newline + 1)
        if current and following and not current[-1].isspace():
            self.insert(newline, " ")
        return True

    def indent_line(self, idx: int, n: int) -> None:
        if idx < 0 or idx > self.last_line() or n <= 0:
            return
        self.insert(self._rope.line_start(idx), " " * n)

    def outdent_line(self, idx: int, n: int) -> int:
        if idx < 0 or idx > self.last_line() or n <= 0:
            return 0
        text = self.line(idx)
        removable = min(n, len(text) - len(text.lstrip(" ")))
        if removable:
            start = self._rope.line_start(idx)
            self.delete(start, start + removable)
        return removable

    def __repr__(self) -> str:
        return (
            f"TextStore(path={self.path!s}, lines={self.line_count()}, "
            f"modified={self.modified})"
        )


def _strip_terminator(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def _write_atomic(path: Path, text: str) -> int:
    data = text.encode("utf-8")
    with telemetry.span("text_store::save", metadata={"path": str(path)}):
        fd, temp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            mode = path.stat().st_mode & 0o7777 if path.exists() else 0o644
            os.chmod(temp_name, mode)
            os.replace(temp_name, path)
        except BaseException:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise
    return len(data)


__all__ = [
    "TextStore",
    "TextDecodeError",
    "NoFileNameError",
    "clusters",
]
