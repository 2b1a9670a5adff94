"""Search prompt mode: typed characters build the pattern."""

from __future__ import annotations

from typing import MutableMapping, Optional, cast

from quirks.search import SearchDirection

from .base_mode import KeyInput, ModeResult
from .keymap_helpers import KeymapMode


class SearchMode(KeymapMode):
    name = "search"

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        state = self._search_state()
        state.setdefault("direction", SearchDirection.FORWARD)
        state["text"] = ""

    def on_exit(self, next_mode: Optional[str]) -> None:
        super().on_exit(next_mode)
        self._search_state()["text"] = ""

    @property
    def prompt(self) -> str:
        direction = self._search_state().get("direction")
        return "?" if direction is SearchDirection.BACKWARD else "/"

    @property
    def current_pattern(self) -> str:
        return str(self._search_state().get("text", ""))

    def handle_key(self, key: KeyInput) -> ModeResult:
        result = self.dispatch(key)
        if result is not None:
            return result

        text = key.printable
        if text is None:
            return ModeResult(consumed=False, status="miss")
        self._search_state()["text"] = self.current_pattern + text
        return ModeResult(consumed=True, status="editing")

    def _search_state(self) -> MutableMapping[str, object]:
        return cast(
            MutableMapping[str, object],
            self.context.extras.setdefault("search_state", {}),
        )


__all__ = ["SearchMode"]
