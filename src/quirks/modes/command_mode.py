"""Command-line mode with inline editing and keymap integration."""

from __future__ import annotations

from typing import MutableMapping, Optional, cast

from .base_mode import KeyInput, ModeResult
from .keymap_helpers import KeymapMode


class CommandMode(KeymapMode):
    name = "command"

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        self._command_state()["text"] = ""
        self.context.bus.emit("command.start", None)

    def on_exit(self, next_mode: Optional[str]) -> None:
        super().on_exit(next_mode)
        state = self._command_state()
        self.context.bus.emit("command.end", self.current_command)
        state["text"] = ""

    @property
    def current_command(self) -> str:
        return str(self._command_state().get("text", ""))

    def handle_key(self, key: KeyInput) -> ModeResult:
        result = self.dispatch(key)
        if result is not None:
            return result

        text = key.printable
        if text is None:
            return ModeResult(consumed=False, status="miss")
        self._command_state()["text"] = self.current_command + text
        return ModeResult(consumed=True, status="editing")

    def _command_state(self) -> MutableMapping[str, object]:
        return cast(
            MutableMapping[str, object],
            self.context.extras.setdefault("command_state", {}),
        )


__all__ = ["CommandMode"]
