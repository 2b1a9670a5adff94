"""Helper utilities for keymap-driven modes."""

from __future__ import annotations

from typing import List, Optional

from quirks.keymaps.models import make_token
from quirks.keymaps.resolver import KeymapResolver, ResolutionMatch
from quirks.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult


def key_to_token(key: KeyInput) -> str:
    return make_token(key.key, key.modifiers)


def require_keymap_resolver(context: ModeContext) -> KeymapResolver:
    resolver = context.extras.get("keymap_resolver")
    if not isinstance(resolver, KeymapResolver):
        raise RuntimeError("ModeContext.extras missing 'keymap_resolver'")
    return resolver


def execute_match(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    with telemetry.span(
        "keymaps::execute",
        component="keymaps",
        metadata={"binding_id": match.binding.id, "action": match.action.id},
    ):
        outcome = match.action(context, match)

    if isinstance(outcome, ModeResult):
        return outcome
    return ModeResult(consumed=True)


class KeymapMode(Mode):
    """Mode whose keys resolve through the keymap trie.

    Tokens accumulate while the resolver reports ``pending``; a miss drops
    them and hands the key back to the subclass.
    """

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger(f"quirks.modes.{self.name}")
        self._resolver = require_keymap_resolver(context)
        self._pending: List[str] = []

    @property
    def pending_tokens(self) -> tuple[str, ...]:
        return tuple(self._pending)

    def on_exit(self, next_mode: Optional[str]) -> None:
        del next_mode
        self._pending.clear()

    def dispatch(self, key: KeyInput) -> Optional[ModeResult]:
        """Resolve ``key`` against this mode's bindings; ``None`` on a miss."""

        self._pending.append(key_to_token(key))
        result = self._resolver.resolve(self.name, tuple(self._pending))

        if result.status == "match" and result.match:
            self._pending.clear()
            return execute_match(self.context, result.match)

        if result.status == "pending":
            return ModeResult(consumed=True, status="pending")

        stale = len(self._pending) > 1
        self._pending.clear()
        if stale:
            # an unfinished sequence such as ``g`` followed by ``x``
            return ModeResult(consumed=True, status="miss")
        return None


__all__ = [
    "KeymapMode",
    "execute_match",
    "key_to_token",
    "require_keymap_resolver",
]
