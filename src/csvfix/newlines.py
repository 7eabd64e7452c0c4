"""Line-break catalog, quirky-break collapsing, and CR/LF tallies."""

from __future__ import annotations

from csvfix.types import LineBreakCounts, NewlineToken


CARRIAGE_RETURN = "\r"
LINEFEED = "\n"
STANDARD_BREAK = CARRIAGE_RETURN + LINEFEED

# Legacy Mac break immediately followed by a standard break: 0d 0d 0a.
QUIRKY_BREAK = CARRIAGE_RETURN + STANDARD_BREAK

NEWLINE_LITERALS: dict[NewlineToken, str] = {
    "CRLF": STANDARD_BREAK,
    "LF": LINEFEED,
    "CR": CARRIAGE_RETURN,
}

# CRLF must precede its one-character constituents, otherwise a CRLF pair
# would be replaced twice.
NEWLINE_CATALOG: tuple[str, ...] = (
    NEWLINE_LITERALS["CRLF"],
    NEWLINE_LITERALS["LF"],
    NEWLINE_LITERALS["CR"],
)


def validate_catalog(catalog: tuple[str, ...]) -> None:
    """Reject catalogs that would double-process a multi-character token.

    A token must come before every shorter token it contains.
    """
    if not catalog:
        raise ValueError("newline catalog cannot be empty")
    for idx, token in enumerate(catalog):
        if not token:
            raise ValueError("newline catalog cannot contain empty tokens")
        for earlier in catalog[:idx]:
            if earlier != token and earlier in token:
                raise ValueError(
                    f"newline token {token!r} must precede {earlier!r} in the catalog",
                )


def count_char(text: str, char: str) -> int:
    """Count occurrences of a single character."""
    if len(char) != 1:
        raise ValueError(f"char must be a single character, got {char!r}")
    return text.count(char)


def count_line_breaks(text: str) -> LineBreakCounts:
    return LineBreakCounts(
        cr=count_char(text, CARRIAGE_RETURN),
        lf=count_char(text, LINEFEED),
    )


def collapse_quirky_breaks(text: str) -> tuple[str, int]:
    """Replace every CR CR LF with CR LF in one left-to-right pass.

    Returns the rewritten text and the number of sequences collapsed. Each
    collapse removes exactly one character, so the count is the length delta.
    """
    if QUIRKY_BREAK not in text:
        return text, 0
    collapsed = text.replace(QUIRKY_BREAK, STANDARD_BREAK)
    return collapsed, len(text) - len(collapsed)
