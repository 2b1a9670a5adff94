"""Editor settings passed explicitly into the Editor and its modes."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict

from .telemetry import env, env_flag

# vim short names accepted by ``:set``
OPTION_ALIASES: Dict[str, str] = {
    "ts": "tab_width",
    "tabstop": "tab_width",
    "sw": "shift_width",
    "shiftwidth": "shift_width",
    "et": "expand_tab",
    "expandtab": "expand_tab",
    "ai": "auto_indent",
    "autoindent": "auto_indent",
    "ic": "ignore_case",
    "ignorecase": "ignore_case",
    "scs": "smart_case",
    "smartcase": "smart_case",
    "hls": "hlsearch",
    "nu": "line_numbers",
    "number": "line_numbers",
    "ul": "history_capacity",
    "undolevels": "history_capacity",
}


class ConfigError(ValueError):
    """Raised when a ``:set`` assignment cannot be applied."""


@dataclass(slots=True)
class EditorConfig:
    tab_width: int = 4
    shift_width: int = 4
    expand_tab: bool = True
    auto_indent: bool = False
    ignore_case: bool = False
    smart_case: bool = False
    hlsearch: bool = True
    line_numbers: bool = True
    wrap: bool = False
    history_capacity: int = 1000

    @classmethod
    def from_env(cls) -> "EditorConfig":
        """Defaults overridden by ``QUIRKS_<OPTION>`` environment variables."""

        config = cls()
        for item in fields(cls):
            raw = env(item.name.upper())
            if raw is None:
                continue
            if isinstance(getattr(config, item.name), bool):
                setattr(config, item.name, env_flag(item.name.upper(), False))
            else:
                config._set_int(item.name, raw)
        return config

    def apply(self, assignment: str) -> str:
        """Apply one ``:set`` argument and return a status line.

        Forms: ``name``, ``noname``, ``name!``/``invname``, ``name=value``
        and ``name?``.
        """

        text = assignment.strip()
        if not text:
            raise ConfigError("Argument required")

        if text.endswith("?"):
            name = self._resolve(text[:-1])
            return self.describe(name)

        if "=" in text:
            raw_name, value = text.split("=", 1)
            name = self._resolve(raw_name)
            if isinstance(getattr(self, name), bool):
                raise ConfigError(f"Invalid argument: {text}")
            self._set_int(name, value)
            return self.describe(name)

        if text.endswith("!") or text.startswith("inv"):
            name = self._resolve(text[:-1] if text.endswith("!") else text[3:])
            self._require_bool(name, text)
            setattr(self, name, not getattr(self, name))
            return self.describe(name)

        if text.startswith("no") and self._known(text[2:]):
            name = self._resolve(text[2:])
            self._require_bool(name, text)
            setattr(self, name, False)
            return self.describe(name)

        name = self._resolve(text)
        if not isinstance(getattr(self, name), bool):
            return self.describe(name)
        setattr(self, name, True)
        return self.describe(name)

    def describe(self, name: str) -> str:
        value = getattr(self, name)
        if isinstance(value, bool):
            return name if value else f"no{name}"
        return f"{name}={value}"

    def indent_unit(self) -> str:
        return " " * self.tab_width if self.expand_tab else "\t"

    def _known(self, raw: str) -> bool:
        key = raw.strip().lower()
        return key in OPTION_ALIASES or key in _FIELD_NAMES

    def _resolve(self, raw: str) -> str:
        key = raw.strip().lower()
        name = OPTION_ALIASES.get(key, key)
        if name not in _FIELD_NAMES:
            raise ConfigError(f"Unknown option: {raw.strip()}")
        return name

    def _require_bool(self, name: str, text: str) -> None:
        if not isinstance(getattr(self, name), bool):
            raise ConfigError(f"Invalid argument: {text}")

    def _set_int(self, name: str, raw: str) -> None:
        try:
            value = int(raw.strip())
        except ValueError as exc:
            raise ConfigError(f"Number required after =: {name}={raw}") from exc
        if value <= 0:
            raise ConfigError(f"Argument must be positive: {name}={value}")
        setattr(self, name, value)


_FIELD_NAMES = frozenset(item.name for item in fields(EditorConfig))

__all__ = ["EditorConfig", "ConfigError", "OPTION_ALIASES"]
