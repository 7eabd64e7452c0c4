"""Guarded-span scanner and rewriter.

The input is walked once, left to right, by a two-state machine. Outside a
guarded field the scan looks for an opening guard; inside one it looks for the
closing guard. Each guard character is consumed exactly once, so spans
alternate unguarded/guarded and partition the buffer with no gaps.

Unguarded spans are copied verbatim. Guarded spans have every embedded line
break replaced by the configured token, so each field lands on one logical
line. A final guard-unaware pass collapses CR CR LF into CR LF.

Failures come back as values (``UnterminatedGuard``, ``CursorOverrun``), never
as a partially rewritten buffer.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator

from csvfix.config import DEFAULT_GUARD, RepairConfig
from csvfix.newlines import collapse_quirky_breaks, count_line_breaks
from csvfix.types import (
    CursorOverrun,
    NormalizedField,
    RepairOutcome,
    RepairResult,
    Span,
    UnterminatedGuard,
)

log = logging.getLogger(__name__)


class ScanState(enum.Enum):
    UNGUARDED = "unguarded"
    GUARDED = "guarded"


def find_guard(text: str, start: int, guard: str = DEFAULT_GUARD) -> int | None:
    """Offset of the next ``guard`` at or after ``start``, or None.

    A start past the end of ``text`` is treated as "none remain" rather than
    an error; the scan loop does its own bounds check.
    """
    if not text or start > len(text):
        return None
    pos = text.find(guard, start)
    return pos if pos >= 0 else None


def iter_spans(
    text: str,
    guard: str = DEFAULT_GUARD,
) -> Iterator[Span | UnterminatedGuard | CursorOverrun]:
    """Lazily classify ``text`` into alternating unguarded/guarded spans.

    Yields ``Span`` objects in order. When the scan fails, the error value is
    yielded as the last item.
    """
    total = len(text)
    state = ScanState.UNGUARDED
    cursor = 0
    opened_at = -1

    while True:
        found = find_guard(text, cursor, guard)

        if state is ScanState.UNGUARDED:
            if found is None:
                if cursor < total:
                    yield Span(cursor, total, "unguarded")
                return
            yield Span(cursor, found + 1, "unguarded")
            opened_at = found
            state = ScanState.GUARDED
        else:
            if found is None:
                yield UnterminatedGuard(
                    opened_at=opened_at,
                    stalled_at=cursor,
                    total_length=total,
                )
                return
            yield Span(cursor, found + 1, "guarded")
            state = ScanState.UNGUARDED

        cursor = found + 1
        if cursor > total:
            yield CursorOverrun(position=cursor, total_length=total)
            return


def normalize_guarded(
    text: str,
    newline_catalog: tuple[str, ...],
    replacement: str,
) -> NormalizedField:
    """Replace every catalog newline token in ``text`` with ``replacement``.

    Tokens are applied in catalog order; the catalog lists CRLF first so a
    two-character break becomes a single replacement.
    """
    working = text
    replaced = 0
    for token in newline_catalog:
        hits = working.count(token)
        if hits:
            working = working.replace(token, replacement)
            replaced += hits

    if len(working) != len(text):
        log.debug(
            "Normalized guarded field: %d chars in, %d chars out",
            len(text),
            len(working),
        )
    return NormalizedField(text=working, replacements=replaced)


def repair_text(text: str, config: RepairConfig | None = None) -> RepairOutcome:
    """Rewrite ``text`` so guarded fields hold no line breaks.

    Returns a ``RepairResult`` on success, or the ``UnterminatedGuard`` /
    ``CursorOverrun`` value that stopped the scan.
    """
    cfg = config or RepairConfig()
    pieces: list[str] = []
    guarded_spans = 0
    normalized_spans = 0
    replaced_newlines = 0

    for step in iter_spans(text, cfg.guard):
        match step:
            case UnterminatedGuard() | CursorOverrun():
                return step
            case Span(start=start, end=end, kind="unguarded"):
                pieces.append(text[start:end])
            case Span(start=start, end=end, kind="guarded"):
                field = normalize_guarded(
                    text[start:end],
                    cfg.newline_catalog,
                    cfg.replacement,
                )
                guarded_spans += 1
                if field.changed:
                    normalized_spans += 1
                    replaced_newlines += field.replacements
                pieces.append(field.text)

    rewritten, quirky = collapse_quirky_breaks("".join(pieces))
    if quirky:
        log.debug("Collapsed %d quirky line breaks", quirky)

    return RepairResult(
        text=rewritten,
        input_counts=count_line_breaks(text),
        output_counts=count_line_breaks(rewritten),
        quirky_breaks=quirky,
        guarded_spans=guarded_spans,
        normalized_spans=normalized_spans,
        replaced_newlines=replaced_newlines,
    )
