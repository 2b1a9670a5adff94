"""Read-only key reference built from the live keymap registry."""

from __future__ import annotations

from typing import List, MutableMapping, Optional, cast

from quirks.keymaps.registry import KeymapRegistry

from .base_mode import KeyInput, ModeResult
from .keymap_helpers import KeymapMode

HELP_SECTIONS = (
    ("normal", "Normal mode"),
    ("insert", "Insert mode"),
    ("visual", "Visual mode"),
    ("command", "Command-line mode"),
    ("search", "Search prompt"),
)

COMMAND_SUMMARY = (
    (":w [file]", "write the buffer"),
    (":q / :q!", "quit / quit discarding changes"),
    (":wq / :x", "write and quit"),
    (":e file", "edit a file in a new buffer"),
    (":b N / :bn / :bp", "switch buffers"),
    (":bd", "close the current buffer"),
    (":ls", "list buffers"),
    (":s/pat/rep/g", "substitute (% for the whole buffer)"),
    (":set opt=val", "change an option"),
    (":noh", "clear search highlighting"),
)


def build_help_lines(registry: Optional[KeymapRegistry]) -> List[str]:
    lines: List[str] = ["quirks key reference (q or Esc to close)", ""]
    if registry is not None:
        for mode, title in HELP_SECTIONS:
            rows = registry.describe(mode)
            if not rows:
                continue
            lines.append(title)
            lines.extend(f"  {keys:<10} {description}" for keys, description in rows)
            lines.append("")
    lines.append("Commands")
    lines.extend(f"  {keys:<18} {description}" for keys, description in COMMAND_SUMMARY)
    return lines


class HelpMode(KeymapMode):
    name = "help"

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        registry = self.context.extras.get("keymap_registry")
        state = self._help_state()
        state["lines"] = build_help_lines(
            registry if isinstance(registry, KeymapRegistry) else None
        )
        state["top"] = 0

    def on_exit(self, next_mode: Optional[str]) -> None:
        super().on_exit(next_mode)
        self.context.extras.pop("help_state", None)

    @property
    def lines(self) -> List[str]:
        return cast(List[str], self._help_state().get("lines", []))

    def handle_key(self, key: KeyInput) -> ModeResult:
        result = self.dispatch(key)
        if result is not None:
            return result
        # every other key is swallowed while the reference is open
        return ModeResult(consumed=True, status="noop")

    def _help_state(self) -> MutableMapping[str, object]:
        return cast(
            MutableMapping[str, object],
            self.context.extras.setdefault("help_state", {}),
        )


__all__ = ["HelpMode", "build_help_lines"]
