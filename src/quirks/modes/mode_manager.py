"""The set of editor modes and the one currently receiving keys."""

from __future__ import annotations

from typing import Dict, Optional, Type

from quirks.keymaps import KeymapRegistry, KeymapResolver, load_default_keymaps
from quirks.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult

KEYMAP_LOGGER = "quirks.keymaps"


class ModeManager:
    """Routes keys to the active mode and performs the switches it asks for.

    Without an explicit ``keymap_registry`` the default bindings are loaded
    into a fresh one. Registry and resolver are published on
    ``context.extras`` so modes can reach them.
    """

    def __init__(
        self, context: ModeContext, *, keymap_registry: KeymapRegistry | None = None
    ) -> None:
        if keymap_registry is None:
            keymap_registry = KeymapRegistry(logger_name=KEYMAP_LOGGER)
            load_default_keymaps(keymap_registry)
        self.context = context
        self.keymap_registry = keymap_registry
        self.keymap_resolver = KeymapResolver(keymap_registry, logger_name=KEYMAP_LOGGER)
        self.logger = telemetry.get_logger("quirks.modes")
        self._modes: Dict[str, Mode] = {}
        self._current: Optional[Mode] = None
        context.extras.update(
            keymap_registry=self.keymap_registry,
            keymap_resolver=self.keymap_resolver,
        )

    @property
    def active_mode(self) -> Optional[Mode]:
        return self._current

    @property
    def modes(self) -> tuple[str, ...]:
        return tuple(self._modes)

    def get_mode(self, name: str) -> Mode:
        return self._modes[name]

    def register_mode(self, mode_cls: Type[Mode]) -> Mode:
        """Create ``mode_cls`` on the shared context; the first one starts active."""

        mode = mode_cls(self.context)
        if mode.name in self._modes:
            raise ValueError(f"Mode '{mode.name}' already registered")
        self._modes[mode.name] = mode
        if self._current is None:
            self._current = mode
            mode.on_enter(None)
        return mode

    def switch_mode(self, name: str) -> None:
        target = self._modes.get(name)
        if target is None:
            raise KeyError(f"Unknown mode '{name}'")
        previous = self._current
        if previous is target:
            return
        origin = previous.name if previous is not None else None
        if previous is not None:
            previous.on_exit(name)
        self._current = target
        target.on_enter(origin)
        telemetry.record_event(
            "mode.switch", level="debug", data={"mode": name, "from": origin or ""}
        )

    def handle_key(self, key: KeyInput) -> ModeResult:
        mode = self._current
        if mode is None:
            raise RuntimeError("No active mode registered")
        with telemetry.span(
            f"mode::{mode.name}",
            component=True,
            metadata={"key": key.key, "mode": mode.name},
        ) as handle:
            result = mode.handle_key(key)
            handle.add_metadata("status", result.status)
        if result.switch_to:
            self.switch_mode(result.switch_to)
        return result


__all__ = ["ModeManager"]
