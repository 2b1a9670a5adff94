"""Visual modes: a selection follows the cursor until an operator consumes it."""

from __future__ import annotations

from typing import Optional

from quirks.buffer.selection import Selection, SelectionKind
from quirks.runtime import telemetry

from .base_mode import KeyInput, ModeContext, ModeResult
from .keymap_helpers import KeymapMode
from .operator_pipeline import pending_state

VISUAL_MODE_NAMES = frozenset({"visual", "visual_line", "visual_block"})


class VisualMode(KeymapMode):
    """Characterwise selection, inclusive at both ends."""

    name = "visual"
    kind = SelectionKind.CHAR

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.state = pending_state(context)

    def on_enter(self, previous: Optional[str]) -> None:
        buffer = self.context.buffer
        self.state.clear()
        if previous in VISUAL_MODE_NAMES and buffer.selection is not None:
            # v/V/ctrl+v inside visual mode switch the kind, keeping the anchor
            buffer.selection.kind = self.kind
        else:
            buffer.selection = Selection.new(self.kind, *buffer.cursor.position)
        telemetry.record_event(
            "visual.enter",
            level="debug",
            data={"kind": self.kind.value, "from": previous or ""},
        )

    def on_exit(self, next_mode: Optional[str]) -> None:
        super().on_exit(next_mode)
        self.state.clear()
        if next_mode not in VISUAL_MODE_NAMES:
            self.context.buffer.selection = None

    def handle_key(self, key: KeyInput) -> ModeResult:
        if self._counts(key):
            self.state.push_digit(key.key)
            return ModeResult(consumed=True, status="count")

        result = self.dispatch(key)
        if result is None:
            self.state.count = ""
            return ModeResult(consumed=False, status="miss")
        if result.status != "pending":
            self.state.count = ""
        return result

    def _counts(self, key: KeyInput) -> bool:
        if self._pending or key.modifiers or len(key.key) != 1 or not key.key.isdigit():
            return False
        return key.key != "0" or bool(self.state.count)


class VisualLineMode(VisualMode):
    """Whole lines between anchor and cursor."""

    name = "visual_line"
    kind = SelectionKind.LINE


class VisualBlockMode(VisualMode):
    """The rectangle spanned by anchor and cursor columns."""

    name = "visual_block"
    kind = SelectionKind.BLOCK


__all__ = ["VISUAL_MODE_NAMES", "VisualBlockMode", "VisualLineMode", "VisualMode"]
