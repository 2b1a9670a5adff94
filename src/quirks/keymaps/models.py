"""Key tokens, key sequences, actions and the bindings that join them."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

# canonical name -> spellings accepted in keymaps and from terminal hosts
_NAMED_KEYS = {
    "ESC": ("esc", "escape", "<esc>"),
    "ENTER": ("enter", "return", "<cr>", "<enter>", "<return>"),
    "BACKSPACE": ("backspace", "<bs>"),
    "DELETE": ("delete", "<del>"),
    "TAB": ("tab", "<tab>"),
    " ": ("space", "<space>"),
    "LEFT": ("left", "<left>"),
    "RIGHT": ("right", "<right>"),
    "UP": ("up", "<up>"),
    "DOWN": ("down", "<down>"),
    "HOME": ("home", "<home>"),
    "END": ("end", "<end>"),
    "PAGEUP": ("pageup", "page_up"),
    "PAGEDOWN": ("pagedown", "page_down"),
}

KEY_ALIASES: Mapping[str, str] = MappingProxyType(
    {alias: name for name, aliases in _NAMED_KEYS.items() for alias in aliases}
)


def normalize_key(key: str) -> str:
    """Canonical key name: aliases resolved, named keys upper-cased."""

    if len(key) == 1:
        return key
    lowered = key.lower()
    if lowered in KEY_ALIASES:
        return KEY_ALIASES[lowered]
    if lowered.startswith("f") and lowered[1:].isdigit():
        return lowered.upper()
    return key


def _modifier_set(modifiers: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted({mod.strip().lower() for mod in modifiers if mod.strip()}))


def make_token(key: str, modifiers: Iterable[str] = ()) -> str:
    """Token such as ``x``, ``ESC`` or ``ctrl+r``.

    Shift is dropped for printable characters since the character already
    carries it; any other chord lower-cases the character.
    """

    key = normalize_key(key)
    mods = _modifier_set(modifiers)
    if len(key) == 1:
        mods = tuple(mod for mod in mods if mod != "shift")
        key = key.lower() if mods else key
    return "+".join(mods + (key,))


@dataclass(frozen=True, slots=True)
class KeyStroke:
    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        object.__setattr__(self, "key", normalize_key(self.key))
        object.__setattr__(self, "modifiers", _modifier_set(self.modifiers))

    @classmethod
    def parse(cls, spelling: str) -> "KeyStroke":
        """Read ``x``, ``ESC``, ``ctrl+r`` or ``ctrl++``."""

        if len(spelling) < 2 or "+" not in spelling[:-1]:
            return cls(spelling)
        if spelling.endswith("++"):
            return cls("+", tuple(spelling[:-2].split("+")))
        *mods, key = spelling.split("+")
        return cls(key, tuple(mods))

    @property
    def token(self) -> str:
        return make_token(self.key, self.modifiers)


@dataclass(frozen=True, slots=True)
class KeySequence:
    """One or more strokes typed in order."""

    strokes: tuple[KeyStroke, ...]

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("KeySequence requires at least one stroke")

    @classmethod
    def from_strings(cls, *keys: str) -> "KeySequence":
        return cls(tuple(KeyStroke.parse(key) for key in keys if key))

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(stroke.token for stroke in self.strokes)

    def display(self) -> str:
        """``gg`` for plain characters, ``<ctrl+r>`` for anything longer."""
        return "".join(t if len(t) == 1 else f"<{t}>" for t in self.tokens)


@dataclass(frozen=True, slots=True)
class ActionRef:
    """A named handler called as ``handler(context, match)``."""

    id: str
    handler: Callable[..., object]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    description: str = ""
    source: str | None = None

    def __post_init__(self) -> None:
        for name in ("id", "mode", "action_id"):
            if not getattr(self, name):
                raise ValueError(f"binding {name} cannot be empty")

    @property
    def key_signature(self) -> str:
        return " ".join(self.sequence.tokens)


__all__ = [
    "ActionRef",
    "Binding",
    "KEY_ALIASES",
    "KeySequence",
    "KeyStroke",
    "make_token",
    "normalize_key",
]
