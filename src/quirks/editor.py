"""Editor orchestrator: owns the buffers and services and runs the mode machine."""

from __future__ import annotations

from typing import Optional, Tuple

from quirks.actions import execute_command
from quirks.buffer import (
    Buffer,
    BufferList,
    BufferMirror,
    RegisterBank,
    Selection,
    TextDecodeError,
    TextStore,
)
from quirks.buffer.text_store import PathLike
from quirks.keymaps import KeymapRegistry
from quirks.modes import (
    CommandMode,
    HelpMode,
    InsertMode,
    KeyInput,
    ModeBus,
    ModeContext,
    ModeResult,
    NormalMode,
    SearchMode,
    VisualBlockMode,
    VisualLineMode,
    VisualMode,
)
from quirks.modes.mode_manager import ModeManager
from quirks.runtime import telemetry
from quirks.runtime.config import EditorConfig
from quirks.search import SearchEngine

MODE_LABELS = {
    "normal": "NORMAL",
    "insert": "INSERT",
    "visual": "VISUAL",
    "visual_line": "V-LINE",
    "visual_block": "V-BLOCK",
    "command": "COMMAND",
    "search": "SEARCH",
    "help": "HELP",
}


class Editor:
    """One editing session.

    Key events go through :meth:`handle_key`; renderers read :meth:`mirror`
    and :attr:`message` afterwards. Nothing here raises for IO or decode
    failures: they end up in :attr:`message` instead.
    """

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        *,
        keymap_registry: Optional[KeymapRegistry] = None,
        bus: Optional[ModeBus] = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.logger = telemetry.get_logger("quirks.editor")
        self.context = ModeContext(
            buffers=BufferList(Buffer(history_capacity=self.config.history_capacity)),
            registers=RegisterBank(),
            bus=bus or ModeBus(),
            search=SearchEngine(
                ignore_case=self.config.ignore_case, smart_case=self.config.smart_case
            ),
            config=self.config,
        )
        self.manager = ModeManager(self.context, keymap_registry=keymap_registry)
        for mode_cls in (
            NormalMode,
            InsertMode,
            VisualMode,
            VisualLineMode,
            VisualBlockMode,
            CommandMode,
            SearchMode,
            HelpMode,
        ):
            self.manager.register_mode(mode_cls)
        self.message: Optional[str] = None
        self.should_quit = False

    @classmethod
    def with_text(cls, text: str, config: Optional[EditorConfig] = None) -> "Editor":
        editor = cls(config)
        editor.context.buffers.add(
            Buffer.from_text(text, history_capacity=editor.config.history_capacity)
        )
        return editor

    # -- state -------------------------------------------------------------

    @property
    def bus(self) -> ModeBus:
        return self.context.bus

    @property
    def buffer(self) -> Buffer:
        return self.context.buffer

    @property
    def registers(self) -> RegisterBank:
        return self.context.registers

    @property
    def search(self) -> SearchEngine:
        return self.context.search

    @property
    def mode(self) -> str:
        active = self.manager.active_mode
        return active.name if active else "normal"

    @property
    def mode_label(self) -> str:
        return MODE_LABELS.get(self.mode, self.mode.upper())

    @property
    def text(self) -> str:
        return self.buffer.text.text

    @property
    def cursor(self) -> Tuple[int, int]:
        return self.buffer.cursor.position

    @property
    def selection(self) -> Optional[Selection]:
        return self.buffer.selection

    @property
    def command_text(self) -> str:
        return self._prompt_text("command_state")

    @property
    def search_text(self) -> str:
        return self._prompt_text("search_state")

    @property
    def help_lines(self) -> list[str]:
        state = self.context.extras.get("help_state")
        if isinstance(state, dict):
            return list(state.get("lines", []))
        return []

    def _prompt_text(self, key: str) -> str:
        state = self.context.extras.get(key)
        if isinstance(state, dict):
            return str(state.get("text", ""))
        return ""

    # -- input -------------------------------------------------------------

    def handle_key(self, key: KeyInput) -> ModeResult:
        """Dispatch one key event and publish its status message."""

        self.message = None
        result = self.manager.handle_key(key)
        self.message = result.message
        if result.status == "quit":
            self.should_quit = True
        return result

    def feed(self, keys: str) -> ModeResult:
        """Type ``keys`` one character at a time, mostly for scripted use."""

        result = ModeResult(consumed=False)
        for char in keys:
            result = self.handle_key(KeyInput(char, text=char))
        return result

    def run_command(self, text: str) -> ModeResult:
        """Execute ``text`` as if typed after ``:`` in normal mode."""

        self.message = None
        result = execute_command(self.context, text.lstrip(":"))
        self.message = result.message
        if result.status == "quit":
            self.should_quit = True
        if result.switch_to and result.switch_to != self.mode:
            self.manager.switch_mode(result.switch_to)
        return result

    # -- files -------------------------------------------------------------

    def open(self, path: PathLike) -> bool:
        """Load ``path`` into a new current buffer.

        A missing file opens as an empty buffer bound to ``path``. Decode and
        IO failures leave an empty buffer and report through :attr:`message`.
        """

        capacity = self.config.history_capacity
        with telemetry.span(
            "editor::open", component="editor", metadata={"path": str(path)}
        ) as span:
            try:
                buffer = Buffer.open(path, history_capacity=capacity)
            except FileNotFoundError:
                buffer = Buffer(text=TextStore(path=path), history_capacity=capacity)
                self.message = f'"{path}" [New]'
            except (TextDecodeError, OSError) as exc:
                span.fail(str(exc))
                telemetry.record_event(
                    "buffer.open_failed",
                    level="error",
                    data={"path": str(path), "error": str(exc)},
                )
                self.context.buffers.add(Buffer(history_capacity=capacity))
                self.message = f"Error opening: {exc}"
                return False
            else:
                self.message = (
                    f'"{buffer.name}" {buffer.text.line_count()}L, '
                    f"{buffer.text.byte_len()}B"
                )
        self.context.buffers.add(buffer)
        self.bus.emit("buffer.open", {"path": str(path), "force": False})
        return True

    def save(self, path: Optional[PathLike] = None) -> bool:
        result = self.run_command(f"w {path}" if path is not None else "w")
        return result.status == "command_write"

    # -- rendering ---------------------------------------------------------

    def mirror(self) -> BufferMirror:
        attributes = {"mode": self.mode, "mode_label": self.mode_label}
        if self.mode == "command":
            attributes["command"] = self.command_text
        elif self.mode == "search":
            attributes["search"] = self.search_text
        if self.message:
            attributes["message"] = self.message
        mirror = self.buffer.mirror(attributes=attributes)
        if self.config.hlsearch:
            mirror.highlights = self.search.highlights()
        return mirror

    def __repr__(self) -> str:
        return f"Editor(mode={self.mode!r}, buffer={self.buffer!r})"


__all__ = ["Editor", "MODE_LABELS"]
