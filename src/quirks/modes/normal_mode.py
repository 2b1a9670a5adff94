"""Normal mode: pending-key layers in front of the keymap dispatch."""

from __future__ import annotations

from typing import Optional

from quirks.actions import edit as edit_actions
from quirks.actions import motion as motion_actions
from quirks.buffer.registers import is_register_name

from .base_mode import KeyInput, ModeContext, ModeResult
from .keymap_helpers import KeymapMode, key_to_token
from .operator_pipeline import OperatorPipeline, pending_state

# statuses after which counts and the register prefix stay armed
PREFIX_STATUSES = frozenset({"pending", "awaiting", "operator_pending", "register"})


class NormalMode(KeymapMode):
    """Decodes keys through the layers below, in order.

    1. a pending ``r`` replaces the grapheme under the cursor
    2. a pending ``f``/``F`` finds a character on the line
    3. a pending ``"`` selects the register for the next command
    4. a pending operator completes when the same key repeats
    5. digits accumulate a count
    6. everything else resolves through the keymap trie
    """

    name = "normal"

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.state = pending_state(context)
        self.pipeline = OperatorPipeline(self.state)

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        self.state.clear()
        self._pending.clear()
        buffer = self.context.buffer
        buffer.cursor.clamp(buffer.text)

    def handle_key(self, key: KeyInput) -> ModeResult:
        if self.state.awaiting is not None:
            return self._complete_awaiting(key)

        if self.state.operator is not None:
            plan = self.pipeline.feed(key_to_token(key))
            if plan is None:
                return ModeResult(consumed=True, status="cancelled")
            return edit_actions.run_operator(self.context, plan)

        if self._counts(key):
            self.state.push_digit(key.key)
            return ModeResult(consumed=True, status="count")

        result = self.dispatch(key)
        if result is None:
            self.state.clear()
            return ModeResult(consumed=False, status="miss")
        if result.status not in PREFIX_STATUSES:
            self.state.count = ""
            self.state.register = None
        return result

    def _counts(self, key: KeyInput) -> bool:
        if self._pending or key.modifiers or len(key.key) != 1 or not key.key.isdigit():
            return False
        return key.key != "0" or bool(self.state.count)

    def _complete_awaiting(self, key: KeyInput) -> ModeResult:
        command = self.state.awaiting
        self.state.awaiting = None
        char = key.printable
        if char is None:
            # Esc or another named key abandons the command
            self.state.clear()
            return ModeResult(consumed=True, status="cancelled")

        if command == '"':
            if not is_register_name(char):
                self.state.clear()
                return ModeResult(consumed=True, status="cancelled")
            self.state.register = char
            return ModeResult(consumed=True, status="register")

        self.state.count = ""
        if command == "r":
            result = edit_actions.replace_char(self.context, char)
        else:
            result = motion_actions.find_char(self.context, char, forward=command == "f")
        self.state.register = None
        return result


__all__ = ["NormalMode", "PREFIX_STATUSES"]
