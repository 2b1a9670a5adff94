"""Register storage: unnamed, named, numbered ring, small delete, black hole."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

UNNAMED = '"'
SMALL_DELETE = "-"
BLACK_HOLE = "_"
RING_SIZE = 10


class RegisterKind(str, Enum):
    CHARS = "chars"
    LINES = "lines"
    BLOCK = "block"


@dataclass(frozen=True, slots=True)
class RegisterValue:
    """Register content tagged with its paste kind.

    ``lines`` content is always newline terminated; ``block`` content keeps its
    rows in ``rows`` and ``text`` joins them with newlines.
    """

    kind: RegisterKind = RegisterKind.CHARS
    text: str = ""
    rows: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def chars(cls, text: str) -> "RegisterValue":
        return cls(RegisterKind.CHARS, text)

    @classmethod
    def linewise(cls, text: str) -> "RegisterValue":
        if not text.endswith("\n"):
            text += "\n"
        return cls(RegisterKind.LINES, text)

    @classmethod
    def block(cls, rows: List[str]) -> "RegisterValue":
        return cls(RegisterKind.BLOCK, "\n".join(rows), tuple(rows))

    @property
    def is_linewise(self) -> bool:
        return self.kind is RegisterKind.LINES

    def is_empty(self) -> bool:
        return not self.text and not self.rows

    def is_small(self) -> bool:
        return self.kind is RegisterKind.CHARS and "\n" not in self.text

    def lines(self) -> List[str]:
        if self.kind is RegisterKind.BLOCK:
            return list(self.rows)
        if self.kind is RegisterKind.LINES:
            return self.text[:-1].split("\n")
        return self.text.split("\n")

    def concat(self, other: "RegisterValue") -> "RegisterValue":
        """Append ``other`` when kinds agree; otherwise ``other`` replaces."""

        if self.kind is not other.kind or self.is_empty():
            return other
        if self.kind is RegisterKind.BLOCK:
            return RegisterValue.block(list(self.rows) + list(other.rows))
        return RegisterValue(self.kind, self.text + other.text)


EMPTY = RegisterValue()


class RegisterBank:
    """Tracks unnamed, named, numbered, and special registers."""

    def __init__(self) -> None:
        self._unnamed: RegisterValue = EMPTY
        self._small_delete: RegisterValue = EMPTY
        self._named: Dict[str, RegisterValue] = {}
        self._ring: List[RegisterValue] = [EMPTY] * RING_SIZE

    def yank(self, value: RegisterValue) -> None:
        self._ring[0] = value
        self._unnamed = value

    def delete(self, value: RegisterValue) -> None:
        if value.is_small():
            self._small_delete = value
        else:
            self._ring[2:] = self._ring[1:-1]
            self._ring[1] = value
        self._unnamed = value

    def set_named(self, name: str, value: RegisterValue) -> None:
        if not name.isalpha() or len(name) != 1 or not name.isascii():
            raise KeyError(name)
        slot = name.lower()
        if name.isupper():
            value = self._named.get(slot, EMPTY).concat(value)
        self._named[slot] = value

    def get_named(self, name: str) -> RegisterValue:
        return self._named.get(name.lower(), EMPTY)

    def get(self, name: str) -> Optional[RegisterValue]:
        """Read a register by name; ``None`` for names no register answers to."""

        if name == UNNAMED:
            return self._unnamed
        if name == SMALL_DELETE:
            return self._small_delete
        if name == BLACK_HOLE:
            return EMPTY
        if len(name) == 1 and name.isdigit():
            return self._ring[int(name)]
        if len(name) == 1 and name.isascii() and name.isalpha():
            return self.get_named(name)
        return None

    @property
    def unnamed(self) -> RegisterValue:
        return self._unnamed

    def set_unnamed(self, value: RegisterValue) -> None:
        self._unnamed = value

    def store(self, name: Optional[str], value: RegisterValue, *, delete: bool) -> bool:
        """Route a yank or delete, honouring a ``"x`` register prefix.

        Returns ``False`` when ``name`` is not writable.
        """

        if name is None or name == UNNAMED:
            if delete:
                self.delete(value)
            else:
                self.yank(value)
            return True
        if name == BLACK_HOLE:
            return True
        if len(name) == 1 and name.isascii() and name.isalpha():
            self.set_named(name, value)
            self._unnamed = self.get_named(name)
            return True
        return False

    def clear(self) -> None:
        self._unnamed = EMPTY
        self._small_delete = EMPTY
        self._named.clear()
        self._ring = [EMPTY] * RING_SIZE

    def ring(self) -> List[RegisterValue]:
        return list(self._ring)


def is_register_name(name: str) -> bool:
    return len(name) == 1 and (
        name in (UNNAMED, SMALL_DELETE, BLACK_HOLE)
        or name.isdigit()
        or (name.isascii() and name.isalpha())
    )


__all__ = [
    "RegisterBank",
    "RegisterKind",
    "RegisterValue",
    "EMPTY",
    "UNNAMED",
    "SMALL_DELETE",
    "BLACK_HOLE",
    "is_register_name",
]
