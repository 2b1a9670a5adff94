"""Key events, mode results, the shared context and the mode base class."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from quirks.buffer import Buffer, BufferList, RegisterBank
from quirks.runtime.config import EditorConfig
from quirks.search import SearchEngine


@dataclass(slots=True)
class KeyInput:
    """Normalized key event passed to modes.

    ``key`` is either a single printable character or a named key such as
    ``ESC``/``ENTER``; ``text`` carries the character a printable key types.
    """

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None

    @property
    def printable(self) -> Optional[str]:
        """The typed character, ignoring keys chorded with ctrl or alt."""

        if any(mod in ("ctrl", "alt") for mod in self.modifiers):
            return None
        if self.text:
            return self.text
        if len(self.key) == 1:
            return self.key
        return None


@dataclass(slots=True)
class ModeResult:
    """What a mode did with a key.

    ``consumed=False`` hands the key back to the host; ``switch_to`` names
    the mode to enter next.
    """

    consumed: bool
    switch_to: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None


@dataclass(slots=True)
class ModeContext:
    """Buffers, registers, search and settings shared by all modes."""

    buffers: BufferList
    registers: RegisterBank
    bus: "ModeBus"
    search: SearchEngine = field(default_factory=SearchEngine)
    config: EditorConfig = field(default_factory=EditorConfig)
    extras: Dict[str, object] = field(default_factory=dict)

    @property
    def buffer(self) -> Buffer:
        return self.buffers.current


class ModeBus:
    """Named events with payloads, delivered to subscribers in order."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(payload)


class Mode:
    """A mode receives keys while it is active."""

    name: str = "mode"

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    def on_enter(
        self, previous: Optional[str]
    ) -> None:  # pragma: no cover - default no-op
        del previous

    def on_exit(
        self, next_mode: Optional[str]
    ) -> None:  # pragma: no cover - default no-op
        del next_mode

    def handle_key(
        self, key: KeyInput
    ) -> ModeResult:  # pragma: no cover - abstract override
        raise NotImplementedError
