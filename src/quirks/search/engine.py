"""Pattern search over buffer lines with directional, wrapping navigation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Pattern, Tuple

import grapheme

from quirks.runtime import telemetry


class SearchDirection(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True, slots=True)
class SearchMatch:
    """A match in grapheme columns; ``end_col`` is exclusive."""

    line: int
    start_col: int
    end_col: int


def wants_ignore_case(pattern: str, *, ignore_case: bool, smart_case: bool) -> bool:
    if not ignore_case:
        return False
    return not (smart_case and any(char.isupper() for char in pattern))


def compile_pattern(pattern: str, *, ignore_case: bool = False) -> Optional[Pattern[str]]:
    """Compile ``pattern`` as a regex, falling back to a literal match."""

    if not pattern:
        return None
    flags = re.IGNORECASE if ignore_case else 0
    try:
        return re.compile(pattern, flags)
    except re.error:
        return re.compile(re.escape(pattern), flags)


class SearchEngine:
    def __init__(self, *, ignore_case: bool = False, smart_case: bool = False) -> None:
        self.ignore_case = ignore_case
        self.smart_case = smart_case
        self.pattern = ""
        self.direction = SearchDirection.FORWARD
        self.highlight_active = False
        self._regex: Optional[Pattern[str]] = None
        self._matches: List[SearchMatch] = []
        self._current: Optional[int] = None

    @property
    def regex(self) -> Optional[Pattern[str]]:
        return self._regex

    @property
    def matches(self) -> Tuple[SearchMatch, ...]:
        return tuple(self._matches)

    def configure(self, *, ignore_case: bool, smart_case: bool) -> None:
        self.ignore_case = ignore_case
        self.smart_case = smart_case
        self._compile()

    def start(self, direction: SearchDirection) -> None:
        self.direction = direction
        self.pattern = ""
        self._regex = None
        self._matches.clear()
        self._current = None

    def set_pattern(self, pattern: str) -> None:
        self.pattern = pattern
        self._compile()

    def push_char(self, char: str) -> None:
        self.pattern += char
        self._compile()

    def pop_char(self) -> bool:
        if not self.pattern:
            return False
        self.pattern = self.pattern[:-1]
        self._compile()
        return True

    def is_empty(self) -> bool:
        return not self.pattern

    def _compile(self) -> None:
        ignore = wants_ignore_case(
            self.pattern, ignore_case=self.ignore_case, smart_case=self.smart_case
        )
        self._regex = compile_pattern(self.pattern, ignore_case=ignore)

    def execute(
        self, lines: Iterable[str], cursor_line: int, cursor_col: int
    ) -> Optional[SearchMatch]:
        """Collect every match in document order and select the nearest one."""

        self._matches.clear()
        self._current = None
        if self._regex is None:
            return None

        with telemetry.span("search::execute", metadata={"pattern": self.pattern}) as span:
            for index, line in enumerate(lines):
                for found in self._regex.finditer(line):
                    self._matches.append(
                        SearchMatch(
                            line=index,
                            start_col=grapheme.length(line[: found.start()]),
                            end_col=grapheme.length(line[: found.end()]),
                        )
                    )
            span.add_metadata("matches", len(self._matches))

        if not self._matches:
            return None
        self.highlight_active = True
        self._current = self._nearest(cursor_line, cursor_col)
        return self._matches[self._current]

    def _nearest(self, cursor_line: int, cursor_col: int) -> int:
        cursor = (cursor_line, cursor_col)
        if self.direction is SearchDirection.FORWARD:
            for index, found in enumerate(self._matches):
                if (found.line, found.start_col) >= cursor:
                    return index
            return 0
        for index in range(len(self._matches) - 1, -1, -1):
            found = self._matches[index]
            if (found.line, found.start_col) < cursor:
                return index
        return len(self._matches) - 1

    def next_match(self) -> Optional[SearchMatch]:
        if not self._matches:
            return None
        if self._current is None:
            self._current = 0
        else:
            self._current = (self._current + 1) % len(self._matches)
        return self._matches[self._current]

    def prev_match(self) -> Optional[SearchMatch]:
        if not self._matches:
            return None
        if self._current is None:
            self._current = len(self._matches) - 1
        else:
            self._current = (self._current - 1) % len(self._matches)
        return self._matches[self._current]

    def current(self) -> Optional[SearchMatch]:
        if self._current is None:
            return None
        return self._matches[self._current]

    @property
    def current_index(self) -> Optional[int]:
        return self._current

    def match_info(self) -> str:
        if not self._matches:
            return "No matches" if self.pattern else ""
        position = self._current + 1 if self._current is not None else 0
        return f"{position}/{len(self._matches)}"

    def clear_highlight(self) -> None:
        self.highlight_active = False

    def highlights(self) -> Tuple[Tuple[int, int, int], ...]:
        """``(line, start_col, end_col)`` triples while highlighting is on."""

        if not self.highlight_active:
            return ()
        return tuple((m.line, m.start_col, m.end_col) for m in self._matches)


__all__ = [
    "SearchDirection",
    "SearchEngine",
    "SearchMatch",
    "compile_pattern",
    "wants_ignore_case",
]
