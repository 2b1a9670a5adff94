"""Persistent rope used as the TextStore backing sequence.

Nodes are immutable: every edit returns a new root that shares all untouched
subtrees with the previous version, so History can keep whole-document
snapshots for the price of a reference. The tree is height balanced (AVL
join/split), which keeps insert, delete, offset-to-line and line-to-offset
lookups logarithmic in the document size.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple, Union

LEAF_SIZE = 512


class _Leaf:
    __slots__ = ("text", "length", "newlines", "height")

    def __init__(self, text: str) -> None:
        self.text = text
        self.length = len(text)
        self.newlines = text.count("\n")
        self.height = 1


class _Branch:
    __slots__ = ("left", "right", "length", "newlines", "height")

    def __init__(self, left: "_Node", right: "_Node") -> None:
        self.left = left
        self.right = right
        self.length = left.length + right.length
        self.newlines = left.newlines + right.newlines
        self.height = max(left.height, right.height) + 1


_Node = Union[_Leaf, _Branch]


def _build(text: str, start: int, end: int) -> Optional[_Node]:
    if start >= end:
        return None
    if end - start <= LEAF_SIZE:
        return _Leaf(text[start:end])
    middle = start + (end - start) // 2
    left = _build(text, start, middle)
    right = _build(text, middle, end)
    assert left is not None and right is not None
    return _Branch(left, right)


def _rotate_left(node: _Branch) -> _Branch:
    pivot = node.right
    assert isinstance(pivot, _Branch)
    return _Branch(_Branch(node.left, pivot.left), pivot.right)


def _rotate_right(node: _Branch) -> _Branch:
    pivot = node.left
    assert isinstance(pivot, _Branch)
    return _Branch(pivot.left, _Branch(pivot.right, node.right))


def _balance(node: _Branch) -> _Branch:
    skew = node.left.height - node.right.height
    if skew > 1:
        left = node.left
        assert isinstance(left, _Branch)
        if left.right.height > left.left.height:
            node = _Branch(_rotate_left(left), node.right)
        return _rotate_right(node)
    if skew < -1:
        right = node.right
        assert isinstance(right, _Branch)
        if right.left.height > right.right.height:
            node = _Branch(node.left, _rotate_right(right))
        return _rotate_left(node)
    return node


def _join(left: Optional[_Node], right: Optional[_Node]) -> Optional[_Node]:
    if left is None:
        return right
    if right is None:
        return left
    if left.height > right.height + 1:
        assert isinstance(left, _Branch)
        joined = _join(left.right, right)
        assert joined is not None
        return _balance(_Branch(left.left, joined))
    if right.height > left.height + 1:
        assert isinstance(right, _Branch)
        joined = _join(left, right.left)
        assert joined is not None
        return _balance(_Branch(joined, right.right))
    if (
        isinstance(left, _Leaf)
        and isinstance(right, _Leaf)
        and left.length + right.length <= LEAF_SIZE
    ):
        return _Leaf(left.text + right.text)
    return _Branch(left, right)


def _split(node: Optional[_Node], index: int) -> Tuple[Optional[_Node], Optional[_Node]]:
    if node is None:
        return None, None
    if index <= 0:
        return None, node
    if index >= node.length:
        return node, None
    if isinstance(node, _Leaf):
        return _Leaf(node.text[:index]), _Leaf(node.text[index:])
    if index < node.left.length:
        head, tail = _split(node.left, index)
        return head, _join(tail, node.right)
    head, tail = _split(node.right, index - node.left.length)
    return _join(node.left, head), tail


def _chunks(node: Optional[_Node], start: int, end: int) -> Iterator[str]:
    """Yield leaf text covering ``[start, end)`` of ``node``."""

    stack: List[Tuple[_Node, int]] = []
    if node is not None:
        stack.append((node, 0))
    while stack:
        current, offset = stack.pop()
        if offset >= end or offset + current.length <= start:
            continue
        if isinstance(current, _Leaf):
            lo = max(start - offset, 0)
            hi = min(end - offset, current.length)
            yield current.text[lo:hi]
            continue
        stack.append((current.right, offset + current.left.length))
        stack.append((current.left, offset))


class Rope:
    """Immutable text sequence with logarithmic edits and line indexing."""

    __slots__ = ("_root",)

    def __init__(self, text: str = "") -> None:
        self._root: Optional[_Node] = _build(text, 0, len(text))

    @classmethod
    def _from_root(cls, root: Optional[_Node]) -> "Rope":
        rope = cls.__new__(cls)
        rope._root = root
        return rope

    def __len__(self) -> int:
        return self._root.length if self._root else 0

    def __str__(self) -> str:
        return "".join(_chunks(self._root, 0, len(self)))

    def __repr__(self) -> str:
        return f"Rope(len={len(self)}, lines={self.line_count})"

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if isinstance(other, Rope):
            if self._root is other._root:
                return True
            if len(self) != len(other) or self.newlines != other.newlines:
                return False
            return str(self) == str(other)
        if isinstance(other, str):
            return len(self) == len(other) and str(self) == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    @property
    def newlines(self) -> int:
        return self._root.newlines if self._root else 0

    @property
    def line_count(self) -> int:
        return self.newlines + 1

    @property
    def height(self) -> int:
        return self._root.height if self._root else 0

    def insert(self, index: int, text: str) -> "Rope":
        if not text:
            return self
        index = min(max(index, 0), len(self))
        head, tail = _split(self._root, index)
        middle = _build(text, 0, len(text))
        return Rope._from_root(_join(_join(head, middle), tail))

    def delete(self, start: int, end: int) -> "Rope":
        end = min(max(end, 0), len(self))
        start = min(max(start, 0), end)
        if start == end:
            return self
        head, rest = _split(self._root, start)
        _, tail = _split(rest, end - start)
        return Rope._from_root(_join(head, tail))

    def slice(self, start: int, end: int) -> str:
        end = min(max(end, 0), len(self))
        start = min(max(start, 0), end)
        return "".join(_chunks(self._root, start, end))

    def line_start(self, line: int) -> int:
        """Offset of the first character of ``line`` (clamped)."""

        if line <= 0 or self._root is None:
            return 0
        if line > self.newlines:
            return len(self)
        node: _Node = self._root
        offset = 0
        while isinstance(node, _Branch):
            if line <= node.left.newlines:
                node = node.left
            else:
                line -= node.left.newlines
                offset += node.left.length
                node = node.right
        position = -1
        for _ in range(line):
            position = node.text.index("\n", position + 1)
        return offset + position + 1

    def line_end(self, line: int) -> int:
        """Offset of the newline terminating ``line``, or the rope length."""

        if line >= self.newlines:
            return len(self)
        return self.line_start(line + 1) - 1

    def line_of(self, index: int) -> int:
        """Line containing ``index`` (number of newlines before it)."""

        index = min(max(index, 0), len(self))
        node = self._root
        line = 0
        while isinstance(node, _Branch):
            if index < node.left.length:
                node = node.left
            else:
                line += node.left.newlines
                index -= node.left.length
                node = node.right
        if node is not None:
            line += node.text.count("\n", 0, index)
        return line

    def line_text(self, line: int) -> str:
        if line < 0 or line > self.newlines:
            return ""
        return self.slice(self.line_start(line), self.line_end(line))

    def char_at(self, index: int) -> Optional[str]:
        if index < 0 or index >= len(self):
            return None
        return self.slice(index, index + 1)

    def ends_with_newline(self) -> bool:
        return len(self) > 0 and self.char_at(len(self) - 1) == "\n"


__all__ = ["Rope", "LEAF_SIZE"]
