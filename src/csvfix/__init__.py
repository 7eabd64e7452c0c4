"""csvfix: fold line breaks out of quoted CSV fields and collapse CR CR LF."""

from csvfix.config import (
    DEFAULT_REPLACEMENT_NAME,
    REPLACEMENT_TOKENS,
    InputError,
    RepairConfig,
    resolve_replacement,
)
from csvfix.newlines import (
    NEWLINE_CATALOG,
    QUIRKY_BREAK,
    collapse_quirky_breaks,
    count_char,
    count_line_breaks,
)
from csvfix.pipeline import FileRepairReport, RepairFailed, repair_file
from csvfix.scanner import find_guard, iter_spans, normalize_guarded, repair_text
from csvfix.types import (
    CursorOverrun,
    LineBreakCounts,
    NormalizedField,
    RepairOutcome,
    RepairResult,
    Span,
    UnterminatedGuard,
)

__all__ = [
    "CursorOverrun",
    "DEFAULT_REPLACEMENT_NAME",
    "FileRepairReport",
    "InputError",
    "LineBreakCounts",
    "NEWLINE_CATALOG",
    "NormalizedField",
    "QUIRKY_BREAK",
    "REPLACEMENT_TOKENS",
    "RepairConfig",
    "RepairFailed",
    "RepairOutcome",
    "RepairResult",
    "Span",
    "UnterminatedGuard",
    "collapse_quirky_breaks",
    "count_char",
    "count_line_breaks",
    "find_guard",
    "iter_spans",
    "normalize_guarded",
    "repair_file",
    "repair_text",
    "resolve_replacement",
]
