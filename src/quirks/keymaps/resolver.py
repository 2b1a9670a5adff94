"""Resolve typed key tokens to bindings through a per-mode prefix tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Sequence

from quirks.runtime.telemetry import span

from .models import ActionRef, Binding
from .registry import KeymapRegistry

Status = Literal["match", "pending", "miss"]


@dataclass(slots=True)
class _Node:
    ends: list[str] = field(default_factory=list)
    next: Dict[str, "_Node"] = field(default_factory=dict)


def _build_tree(bindings: Sequence[Binding]) -> _Node:
    root = _Node()
    for binding in bindings:
        node = root
        for token in binding.sequence.tokens:
            node = node.next.setdefault(token, _Node())
        node.ends.append(binding.id)
    return root


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    binding: Binding
    action: ActionRef


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """What the tokens typed so far amount to.

    ``pending`` is returned only when the tokens complete no binding but
    prefix at least one; ``next_expected`` then lists the tokens that would
    extend them. A complete binding always wins over longer ones.
    """

    status: Status
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()


class KeymapResolver:
    """Answers ``resolve(mode, tokens)`` against a registry.

    Trees are rebuilt lazily whenever the registry revision moves.
    """

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._trees: Dict[str, _Node] = {}
        self._built_at = -1

    def resolve(self, mode: str, tokens: Sequence[str]) -> ResolutionResult:
        typed = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode, "length": len(typed)},
        ) as handle:
            result = self._walk(self._tree(mode), typed)
            handle.add_metadata("status", result.status)
            if result.match is not None:
                handle.add_metadata("binding_id", result.match.binding.id)
            return result

    def _walk(self, node: _Node, typed: tuple[str, ...]) -> ResolutionResult:
        for depth, token in enumerate(typed):
            step = node.next.get(token)
            if step is None:
                return ResolutionResult(status="miss", consumed=depth)
            node = step
        consumed = len(typed)
        if node.ends:
            # ties within one mode resolve to the lowest binding id
            binding = self._registry.get_binding(min(node.ends))
            found = ResolutionMatch(binding, self._registry.get_action(binding.action_id))
            return ResolutionResult(status="match", match=found, consumed=consumed)
        if node.next:
            return ResolutionResult(
                status="pending",
                consumed=consumed,
                next_expected=tuple(sorted(node.next)),
            )
        return ResolutionResult(status="miss", consumed=consumed)

    def _tree(self, mode: str) -> _Node:
        revision = self._registry.revision()
        if revision != self._built_at:
            self._trees.clear()
            self._built_at = revision
        tree = self._trees.get(mode)
        if tree is None:
            tree = self._trees[mode] = _build_tree(
                list(self._registry.iter_bindings(mode))
            )
        return tree


__all__ = [
    "KeymapResolver",
    "ResolutionMatch",
    "ResolutionResult",
]
