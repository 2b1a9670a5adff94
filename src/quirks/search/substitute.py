"""``:[range]s/pattern/replacement/[flags]`` parsing and execution."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Match, Optional, Tuple, Union

Address = Union[int, str]  # 1-based line number, "." or "$"

_RANGE = re.compile(r"^\s*(?:(%)|([.$]|\d+)(?:\s*,\s*([.$]|\d+))?)?\s*s(?:ubstitute)?(?=\W)")


@dataclass(frozen=True, slots=True)
class SubstituteFlags:
    replace_all: bool = False
    ignore_case: bool = False
    confirm: bool = False
    print_lines: bool = False

    @classmethod
    def parse(cls, text: str) -> "SubstituteFlags":
        return cls(
            replace_all="g" in text,
            ignore_case="i" in text or "I" in text,
            confirm="c" in text,
            print_lines="p" in text,
        )


@dataclass(frozen=True, slots=True)
class LineRange:
    start: Address = "."
    end: Address = "."

    @classmethod
    def whole(cls) -> "LineRange":
        return cls(1, "$")

    def resolve(self, current_line: int, last_line: int) -> Tuple[int, int]:
        """0-based inclusive ``(first, last)`` clamped to the document."""

        first = _address(self.start, current_line, last_line)
        last = _address(self.end, current_line, last_line)
        if first > last:
            first, last = last, first
        return first, last


@dataclass(frozen=True, slots=True)
class SubstituteCommand:
    pattern: str
    replacement: str
    flags: SubstituteFlags = field(default_factory=SubstituteFlags)
    range: LineRange = field(default_factory=LineRange)


@dataclass(slots=True)
class SubstituteResult:
    count: int = 0
    lines: int = 0
    error: Optional[str] = None
    changed: List[int] = field(default_factory=list)

    def describe(self) -> str:
        if self.error:
            return self.error
        if not self.count:
            return "Pattern not found"
        noun = "substitution" if self.count == 1 else "substitutions"
        where = "line" if self.lines == 1 else "lines"
        return f"{self.count} {noun} on {self.lines} {where}"


def _address(value: Address, current_line: int, last_line: int) -> int:
    if value == ".":
        index = current_line
    elif value == "$":
        index = last_line
    else:
        index = int(value) - 1
    return min(max(index, 0), last_line)


def split_by_delimiter(text: str, delimiter: str) -> List[str]:
    """Split on ``delimiter`` unless it is backslash escaped.

    ``\\<delimiter>`` becomes the bare delimiter; other escapes are kept for
    the regex engine.
    """

    parts: List[str] = []
    current: List[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\" and index + 1 < len(text):
            following = text[index + 1]
            current.append(following if following == delimiter else char + following)
            index += 2
            continue
        if char == delimiter:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    parts.append("".join(current))
    return parts


def parse_substitute_command(text: str) -> Optional[SubstituteCommand]:
    """Recognise ``[range]s/pattern/replacement/[flags]``; ``None`` otherwise."""

    head = _RANGE.match(text)
    if head is None:
        return None
    rest = text[head.end():]
    delimiter = rest[:1]
    if not delimiter or delimiter.isalnum() or delimiter in ' \\"|':
        return None

    parts = split_by_delimiter(rest[1:], delimiter)
    if len(parts) < 2:
        return None

    whole, start, end = head.groups()
    if whole:
        line_range = LineRange.whole()
    elif start:
        line_range = LineRange(_parse_address(start), _parse_address(end or start))
    else:
        line_range = LineRange()

    flags = SubstituteFlags.parse(parts[2].strip()) if len(parts) > 2 else SubstituteFlags()
    return SubstituteCommand(
        pattern=parts[0], replacement=parts[1], flags=flags, range=line_range
    )


def _parse_address(token: str) -> Address:
    return token if token in (".", "$") else int(token)


def expand_replacement(template: str, found: Match[str]) -> str:
    """Vim replacement syntax: ``&`` and ``\\0`` whole match, ``\\1``-``\\9`` groups."""

    out: List[str] = []
    index = 0
    while index < len(template):
        char = template[index]
        if char == "&":
            out.append(found.group(0))
        elif char == "\\" and index + 1 < len(template):
            index += 1
            escaped = template[index]
            if escaped.isdigit():
                group = int(escaped)
                if group <= (found.re.groups or 0):
                    out.append(found.group(group) or "")
            elif escaped == "n":
                out.append("\n")
            elif escaped == "t":
                out.append("\t")
            else:
                out.append(escaped)
        else:
            out.append(char)
        index += 1
    return "".join(out)


def substitute(
    lines: List[str],
    command: SubstituteCommand,
    *,
    current_line: int = 0,
) -> SubstituteResult:
    """Apply ``command`` to ``lines`` in place."""

    if not lines:
        return SubstituteResult()
    flags = re.IGNORECASE if command.flags.ignore_case else 0
    try:
        regex = re.compile(command.pattern, flags)
    except re.error as exc:
        return SubstituteResult(error=f"Invalid pattern: {exc}")

    first, last = command.range.resolve(current_line, len(lines) - 1)
    result = SubstituteResult()
    for index in range(first, last + 1):
        updated, count = regex.subn(
            lambda found: expand_replacement(command.replacement, found),
            lines[index],
            count=0 if command.flags.replace_all else 1,
        )
        if count:
            lines[index] = updated
            result.count += count
            result.lines += 1
            result.changed.append(index)
    return result


__all__ = [
    "LineRange",
    "SubstituteCommand",
    "SubstituteFlags",
    "SubstituteResult",
    "expand_replacement",
    "parse_substitute_command",
    "split_by_delimiter",
    "substitute",
]
