"""Core types for guarded-span scanning and line-break repair."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


type SpanKind = Literal["guarded", "unguarded"]
type NewlineToken = Literal["CRLF", "LF", "CR"]


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open ``[start, end)`` slice of the input buffer.

    Boundaries sit just past guard characters: an unguarded span ends with
    the opening guard it ran into, a guarded span ends with its closing guard.
    """

    start: int
    end: int
    kind: SpanKind

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end <= self.start:
            raise ValueError(f"end must be > start, got {self.end} <= {self.start}")


@dataclass(frozen=True, slots=True)
class UnterminatedGuard:
    """An opening guard character with no closing guard before end of input."""

    opened_at: int
    stalled_at: int
    total_length: int

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return (
            f"Unterminated guarded field: opening guard at offset {self.opened_at}, "
            f"no closing guard found scanning from offset {self.stalled_at} "
            f"to end of input ({self.total_length} characters)"
        )


@dataclass(frozen=True, slots=True)
class CursorOverrun:
    """Scan position moved past the end of the input buffer."""

    position: int
    total_length: int

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return (
            f"Scan position {self.position} is past the end of input "
            f"({self.total_length} characters)"
        )


type ScanError = UnterminatedGuard | CursorOverrun


@dataclass(frozen=True, slots=True)
class LineBreakCounts:
    """Carriage-return and linefeed tallies for one buffer."""

    cr: int = 0
    lf: int = 0


@dataclass(frozen=True, slots=True)
class NormalizedField:
    """Guarded span text after newline replacement."""

    text: str
    replacements: int = 0

    @property
    def changed(self) -> bool:
        return self.replacements > 0


@dataclass(frozen=True, slots=True)
class RepairResult:
    """Rewritten buffer plus the diagnostics gathered while producing it."""

    text: str
    input_counts: LineBreakCounts
    output_counts: LineBreakCounts
    quirky_breaks: int = 0
    guarded_spans: int = 0
    normalized_spans: int = 0
    replaced_newlines: int = 0

    def __post_init__(self) -> None:
        for name in ("quirky_breaks", "guarded_spans", "normalized_spans", "replaced_newlines"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.normalized_spans > self.guarded_spans:
            raise ValueError("normalized_spans cannot exceed guarded_spans")

    @property
    def ok(self) -> bool:
        return True


type RepairOutcome = RepairResult | UnterminatedGuard | CursorOverrun


def repair_result_to_dict(result: RepairResult) -> dict[str, object]:
    """Summarize a result for JSON reports (the rewritten text is omitted)."""
    return {
        "input_counts": {"cr": result.input_counts.cr, "lf": result.input_counts.lf},
        "output_counts": {"cr": result.output_counts.cr, "lf": result.output_counts.lf},
        "quirky_breaks": result.quirky_breaks,
        "guarded_spans": result.guarded_spans,
        "normalized_spans": result.normalized_spans,
        "replaced_newlines": result.replaced_newlines,
        "output_length": len(result.text),
    }


def scan_error_to_dict(error: ScanError) -> dict[str, object]:
    """Serialize a scan error value with its offsets."""
    if isinstance(error, UnterminatedGuard):
        return {
            "error": "unterminated_guard",
            "message": error.message,
            "opened_at": error.opened_at,
            "stalled_at": error.stalled_at,
            "total_length": error.total_length,
        }
    return {
        "error": "cursor_overrun",
        "message": error.message,
        "position": error.position,
        "total_length": error.total_length,
    }
