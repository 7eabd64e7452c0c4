"""File-system helpers: line-break-preserving reads/writes, backups, file details."""
from __future__ import annotations

import logging
import shutil
import stat
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from csvfix.config import DEFAULT_BACKUP_SUFFIX, DEFAULT_ENCODING

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BackupOutcome:
    """Where the backup landed and whether an older backup had to be moved aside."""

    backup_path: Path
    displaced_path: Path | None = None

    @property
    def collision(self) -> bool:
        return self.displaced_path is not None


def read_document(path: Path, encoding: str = DEFAULT_ENCODING) -> str:
    """Read a whole file as text with newline translation disabled."""
    with open(path, encoding=encoding, newline="") as f:
        return f.read()


def write_document(path: Path, text: str, encoding: str = DEFAULT_ENCODING) -> None:
    """Write text exactly as given; no newline translation."""
    with open(path, "w", encoding=encoding, newline="") as f:
        f.write(text)


def backup_path_for(path: Path, suffix: str = DEFAULT_BACKUP_SUFFIX) -> Path:
    """``data.csv`` -> ``data.csv.bak``."""
    return path.with_name(path.name + suffix)


def next_free_name(path: Path) -> Path:
    """First ``<path>_<n>`` (n = 1, 2, ...) that does not exist yet."""
    counter = 1
    candidate = path.with_name(f"{path.name}_{counter}")
    while candidate.exists():
        counter += 1
        candidate = path.with_name(f"{path.name}_{counter}")
    return candidate


def make_backup(source: Path, backup: Path) -> BackupOutcome:
    """Copy ``source`` to ``backup``, first renaming any existing backup aside."""
    if backup.resolve() == source.resolve():
        raise ValueError(f"backup path {backup} is the source file itself")
    displaced: Path | None = None
    if backup.exists():
        displaced = next_free_name(backup)
        backup.rename(displaced)
        log.warning(
            "Backup file %s already exists; renamed it to %s",
            backup,
            displaced,
        )
    shutil.copy2(source, backup)
    return BackupOutcome(backup_path=backup, displaced_path=displaced)


def clear_readonly(path: Path) -> bool:
    """Give the owner write permission. Returns True when a change was made."""
    if not path.exists():
        return False
    mode = path.stat().st_mode
    if mode & stat.S_IWUSR:
        return False
    path.chmod(mode | stat.S_IWUSR)
    return True


def _iso_utc(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, UTC).isoformat()


def describe_file(path: Path) -> dict[str, Any]:
    """Name, size, timestamps and read-only flag for a report."""
    if not path.exists():
        return {"name": path.name, "path": str(path.resolve()), "exists": False}
    info = path.stat()
    return {
        "name": path.name,
        "path": str(path.resolve()),
        "exists": True,
        "size_bytes": info.st_size,
        "created_at": _iso_utc(getattr(info, "st_birthtime", info.st_ctime)),
        "modified_at": _iso_utc(info.st_mtime),
        "read_only": not bool(info.st_mode & stat.S_IWUSR),
    }
