"""Run configuration: replacement-token names, defaults, and validation."""

from __future__ import annotations

import codecs
from dataclasses import dataclass

from csvfix.newlines import CARRIAGE_RETURN, LINEFEED, NEWLINE_CATALOG, validate_catalog


DEFAULT_GUARD = '"'
DEFAULT_ENCODING = "utf-8"
DEFAULT_BACKUP_SUFFIX = ".bak"

NONBREAKING_SPACE = "\u00a0"

REPLACEMENT_TOKENS: dict[str, str] = {
    "space": " ",
    "nonbreaking-space": NONBREAKING_SPACE,
    "nbsp": NONBREAKING_SPACE,
    "tab": "\t",
}
DEFAULT_REPLACEMENT_NAME = "nonbreaking-space"


class InputError(ValueError):
    """Raised when CLI/config input is invalid."""


def resolve_replacement(name: str | None) -> str:
    """Map a symbolic replacement name to its literal token.

    ``None`` or blank selects DEFAULT_REPLACEMENT_NAME. Matching ignores case
    and surrounding whitespace.
    """
    key = (name or "").strip().lower() or DEFAULT_REPLACEMENT_NAME
    token = REPLACEMENT_TOKENS.get(key)
    if token is None:
        choices = ", ".join(sorted(REPLACEMENT_TOKENS))
        raise InputError(f"Unknown replacement {name!r}; expected one of: {choices}")
    return token


def check_encoding(name: str) -> str:
    """Canonical codec name for ``name``; unknown codecs raise InputError."""
    try:
        return codecs.lookup(name).name
    except LookupError as exc:
        raise InputError(f"Unknown encoding {name!r}") from exc


@dataclass(frozen=True, slots=True)
class RepairConfig:
    """Explicit per-run settings for the repair core."""

    guard: str = DEFAULT_GUARD
    replacement: str = NONBREAKING_SPACE
    newline_catalog: tuple[str, ...] = NEWLINE_CATALOG

    def __post_init__(self) -> None:
        if len(self.guard) != 1:
            raise ValueError(f"guard must be exactly one character, got {self.guard!r}")
        if self.guard in (CARRIAGE_RETURN, LINEFEED):
            raise ValueError("guard cannot be a line-break character")
        if not self.replacement:
            raise ValueError("replacement cannot be empty")
        if CARRIAGE_RETURN in self.replacement or LINEFEED in self.replacement:
            raise ValueError("replacement cannot contain line-break characters")
        if self.guard in self.replacement:
            raise ValueError("replacement cannot contain the guard character")
        validate_catalog(self.newline_catalog)

    @classmethod
    def from_names(
        cls,
        *,
        guard: str = DEFAULT_GUARD,
        replacement_name: str | None = None,
    ) -> RepairConfig:
        """Build a config from CLI-level values, raising InputError when invalid."""
        token = resolve_replacement(replacement_name)
        try:
            return cls(guard=guard, replacement=token)
        except ValueError as exc:
            raise InputError(str(exc)) from exc
