"""Editor modes, the operator pipeline, and key dispatch."""

from .base_mode import KeyInput, Mode, ModeBus, ModeContext, ModeResult
from .keymap_helpers import KeymapMode
from .operator_pipeline import ExecutionPlan, OperatorPipeline, PendingState
from .normal_mode import NormalMode
from .insert_mode import InsertMode
from .visual_mode import VisualBlockMode, VisualLineMode, VisualMode
from .command_mode import CommandMode
from .search_mode import SearchMode
from .help_mode import HelpMode

__all__ = [
    "KeyInput",
    "KeymapMode",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeResult",
    "NormalMode",
    "InsertMode",
    "VisualMode",
    "VisualLineMode",
    "VisualBlockMode",
    "CommandMode",
    "SearchMode",
    "HelpMode",
    "OperatorPipeline",
    "PendingState",
    "ExecutionPlan",
]
