"""Cursor position and the motion algorithms that read a TextStore."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .text_store import TextStore

BRACKET_PAIRS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_CLOSERS = {close: open_ for open_, close in BRACKET_PAIRS.items()}


class CharClass(Enum):
    WORD = "word"
    PUNCTUATION = "punctuation"
    WHITESPACE = "whitespace"


def char_class(item: str) -> CharClass:
    head = item[:1]
    if not head or head.isspace():
        return CharClass.WHITESPACE
    if head.isalnum() or head == "_":
        return CharClass.WORD
    return CharClass.PUNCTUATION


def _is_blank(item: str) -> bool:
    return char_class(item) is CharClass.WHITESPACE


@dataclass(slots=True)
class Cursor:
    """``(line, col)`` in grapheme columns plus the remembered sticky column."""

    line: int = 0
    col: int = 0
    sticky_col: int = 0

    @property
    def position(self) -> Tuple[int, int]:
        return self.line, self.col

    def _land(self, line: int, col: int) -> None:
        self.line = line
        self.col = col
        self.sticky_col = col

    def move_to(self, text: TextStore, line: int, col: int) -> None:
        line = min(max(line, 0), text.last_line())
        self._land(line, min(max(col, 0), text.line_len(line)))

    def clamp(self, text: TextStore) -> None:
        self.line = min(max(self.line, 0), text.last_line())
        self.col = min(max(self.col, 0), text.line_len(self.line))

    def char_offset(self, text: TextStore) -> int:
        return text.position_to_offset(self.line, self.col)

    # -- character and line motions --------------------------------------

    def move_left(self, text: TextStore) -> None:
        if self.col > 0:
            self._land(self.line, self.col - 1)
        elif self.line > 0:
            self._land(self.line - 1, text.line_len(self.line - 1))

    def move_right(self, text: TextStore) -> None:
        if self.col < text.line_len(self.line):
            self._land(self.line, self.col + 1)
        elif self.line < text.last_line():
            self._land(self.line + 1, 0)

    def move_up(self, text: TextStore) -> None:
        if self.line > 0:
            self.line -= 1
            self.col = min(self.sticky_col, text.line_len(self.line))

    def move_down(self, text: TextStore) -> None:
        if self.line < text.last_line():
            self.line += 1
            self.col = min(self.sticky_col, text.line_len(self.line))

    def move_to_line_start(self) -> None:
        self.col = 0

    def move_to_first_non_blank(self, text: TextStore) -> None:
        items = text.graphemes(self.line)
        col = 0
        while col < len(items) and _is_blank(items[col]):
            col += 1
        self._land(self.line, col)

    def move_to_line_end(self, text: TextStore) -> None:
        self._land(self.line, text.line_len(self.line))

    def move_to_buffer_start(self) -> None:
        self.line = 0
        self.col = 0

    def move_to_buffer_end(self, text: TextStore) -> None:
        line = text.last_line()
        self._land(line, text.line_len(line))

    # -- word motions ----------------------------------------------------

    def move_word_forward(self, text: TextStore) -> None:
        last = text.last_line()
        line = self.line
        items = text.graphemes(line)
        col = self.col
        if col < len(items):
            kind = char_class(items[col])
            while col < len(items) and char_class(items[col]) is kind:
                col += 1
        while True:
            while col < len(items) and _is_blank(items[col]):
                col += 1
            if col < len(items):
                self._land(line, col)
                return
            if line >= last:
                self._land(line, max(len(items) - 1, 0))
                return
            line += 1
            items = text.graphemes(line)
            col = 0

    def move_word_backward(self, text: TextStore) -> None:
        position = self._step_back(text, self.line, self.col)
        if position is None:
            self._land(0, 0)
            return
        line, col = position
        items = text.graphemes(line)
        while _is_blank(items[col]):
            position = self._step_back(text, line, col)
            if position is None:
                self._land(0, 0)
                return
            line, col = position
            items = text.graphemes(line)
        kind = char_class(items[col])
        while col > 0 and char_class(items[col - 1]) is kind:
            col -= 1
        self._land(line, col)

    def move_word_end(self, text: TextStore) -> None:
        last = text.last_line()
        line = self.line
        items = text.graphemes(line)
        col = self.col
        if col + 1 < len(items):
            col += 1
        elif line < last:
            line += 1
            items = text.graphemes(line)
            col = 0
        while True:
            while col < len(items) and _is_blank(items[col]):
                col += 1
            if col < len(items):
                break
            if line >= last:
                self._land(line, max(len(items) - 1, 0))
                return
            line += 1
            items = text.graphemes(line)
            col = 0
        kind = char_class(items[col])
        while col + 1 < len(items) and char_class(items[col + 1]) is kind:
            col += 1
        self._land(line, col)

    @staticmethod
    def _step_back(
        text: TextStore, line: int, col: int
    ) -> Optional[Tuple[int, int]]:
        """Previous grapheme position, crossing to the end of earlier lines."""

        if col > 0 and text.line_len(line):
            return line, min(col, text.line_len(line)) - 1
        while line > 0:
            line -= 1
            length = text.line_len(line)
            if length:
                return line, length - 1
        return None

    # -- searches on the current line ------------------------------------

    def find_char_on_line(self, text: TextStore, target: str, forward: bool) -> bool:
        items = text.graphemes(self.line)
        if forward:
            candidates = range(self.col + 1, len(items))
        else:
            candidates = range(min(self.col, len(items)) - 1, -1, -1)
        for col in candidates:
            if items[col] == target:
                self._land(self.line, col)
                return True
        return False

    def match_bracket(self, text: TextStore) -> Optional[Tuple[int, int]]:
        """Position of the delimiter paired with the one under the cursor."""

        current = text.char_at(self.line, self.col)
        if current in BRACKET_PAIRS:
            opener, closer, forward = current, BRACKET_PAIRS[current], True
        elif current in _CLOSERS:
            opener, closer, forward = _CLOSERS[current], current, False
        else:
            return None

        depth = 0
        line = self.line
        items: List[str] = text.graphemes(line)
        col = self.col
        while True:
            item = items[col]
            if item == opener:
                depth += 1 if forward else -1
            elif item == closer:
                depth += -1 if forward else 1
            if depth == 0:
                return line, col
            if forward:
                col += 1
                while col >= len(items):
                    if line >= text.last_line():
                        return None
                    line += 1
                    items = text.graphemes(line)
                    col = 0
            else:
                col -= 1
                while col < 0:
                    if line == 0:
                        return None
                    line -= 1
                    items = text.graphemes(line)
                    col = len(items) - 1


__all__ = ["Cursor", "CharClass", "char_class", "BRACKET_PAIRS"]
