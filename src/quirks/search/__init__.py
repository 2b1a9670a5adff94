"""Pattern search and ``:s`` substitution."""

from .engine import (
    SearchDirection,
    SearchEngine,
    SearchMatch,
    compile_pattern,
    wants_ignore_case,
)
from .substitute import (
    LineRange,
    SubstituteCommand,
    SubstituteFlags,
    SubstituteResult,
    parse_substitute_command,
    substitute,
)

__all__ = [
    "LineRange",
    "SearchDirection",
    "SearchEngine",
    "SearchMatch",
    "SubstituteCommand",
    "SubstituteFlags",
    "SubstituteResult",
    "compile_pattern",
    "parse_substitute_command",
    "substitute",
    "wants_ignore_case",
]
