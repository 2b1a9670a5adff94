"""Insert mode: typed text goes into the buffer, named keys resolve via keymaps."""

from __future__ import annotations

from typing import Optional

from quirks.actions import edit as edit_actions
from quirks.runtime import telemetry

from .base_mode import KeyInput, ModeContext, ModeResult
from .keymap_helpers import KeymapMode
from .operator_pipeline import pending_state


class InsertMode(KeymapMode):
    """Everything typed between entering and leaving is one undo step.

    The command that enters insert mode checkpoints history; keys handled
    here edit without recording.
    """

    name = "insert"

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self._typed = 0

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        self._typed = 0
        pending_state(self.context).clear()

    def on_exit(self, next_mode: Optional[str]) -> None:
        super().on_exit(next_mode)
        telemetry.record_event(
            "insert.session",
            level="debug",
            data={"typed": self._typed, "buffer": self.context.buffer.name},
        )

    def handle_key(self, key: KeyInput) -> ModeResult:
        result = self.dispatch(key)
        if result is not None:
            return result

        text = key.printable
        if text is None:
            return ModeResult(consumed=False, status="miss")
        self._typed += 1
        return edit_actions.insert_text(self.context, text)


__all__ = ["InsertMode"]
