"""Pending-key state for normal mode: counts, operators, awaited characters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, cast

from quirks.runtime import telemetry

from .base_mode import ModeContext

OPERATORS = {
    "d": "delete",
    "y": "yank",
    "c": "change",
    ">": "indent",
    "<": "outdent",
}

# keys whose command is completed by the next typed character
AWAITING = ("r", "f", "F", '"')


@dataclass(slots=True)
class FindState:
    target: str
    forward: bool


@dataclass(slots=True)
class PendingState:
    count: str = ""
    operator: Optional[str] = None
    awaiting: Optional[str] = None
    register: Optional[str] = None
    last_find: Optional[FindState] = None

    def push_digit(self, digit: str) -> None:
        self.count += digit

    def take_count(self) -> int:
        count = int(self.count) if self.count else 1
        self.count = ""
        return count

    def take_register(self) -> Optional[str]:
        register, self.register = self.register, None
        return register

    def is_idle(self) -> bool:
        return (
            not self.count
            and self.operator is None
            and self.awaiting is None
            and self.register is None
        )

    def clear(self) -> None:
        """Drop everything except the last find, which ``;`` still repeats."""

        self.count = ""
        self.operator = None
        self.awaiting = None
        self.register = None


def pending_state(context: ModeContext) -> PendingState:
    state = context.extras.get("pending_state")
    if not isinstance(state, PendingState):
        state = PendingState()
        context.extras["pending_state"] = state
    return cast(PendingState, state)


@dataclass(slots=True)
class ExecutionPlan:
    operator_id: str
    register_name: Optional[str]
    raw_input: Tuple[str, ...]


class OperatorPipeline:
    """Completes doubled operators (``dd``, ``yy``, ``cc``, ``>>``, ``<<``).

    Operator plus motion combinations are not part of the grammar: any key
    other than the operator itself cancels the pending operator.
    """

    def __init__(self, state: PendingState) -> None:
        self.state = state

    def begin(self, key: str) -> None:
        if key not in OPERATORS:
            raise KeyError(f"Unknown operator '{key}'")
        self.state.operator = key

    def feed(self, token: str) -> Optional[ExecutionPlan]:
        operator = self.state.operator
        if operator is None:
            return None
        self.state.operator = None
        with telemetry.span(
            "operator::parse",
            component=True,
            metadata={"keys": f"{operator}{token}"},
        ) as handle:
            if token != operator:
                handle.add_metadata("status", "cancelled")
                self.state.count = ""
                self.state.register = None
                return None
            self.state.count = ""
            return ExecutionPlan(
                operator_id=OPERATORS[operator],
                register_name=self.state.take_register(),
                raw_input=(operator, token),
            )


__all__ = [
    "AWAITING",
    "ExecutionPlan",
    "FindState",
    "OPERATORS",
    "OperatorPipeline",
    "PendingState",
    "pending_state",
]
