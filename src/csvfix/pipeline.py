"""Repair one file on disk: read, rewrite in memory, back up, overwrite."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from csvfix.config import (
    DEFAULT_BACKUP_SUFFIX,
    DEFAULT_ENCODING,
    InputError,
    RepairConfig,
    check_encoding,
)
from csvfix.files import (
    BackupOutcome,
    backup_path_for,
    clear_readonly,
    describe_file,
    make_backup,
    read_document,
    write_document,
)
from csvfix.scanner import repair_text
from csvfix.types import (
    CursorOverrun,
    RepairResult,
    ScanError,
    UnterminatedGuard,
    repair_result_to_dict,
    scan_error_to_dict,
)

log = logging.getLogger(__name__)


class RepairFailed(RuntimeError):
    """Raised when a document cannot be repaired; no file has been written."""

    def __init__(self, path: Path, error: ScanError) -> None:
        super().__init__(f"{path}: {error.message}")
        self.path = path
        self.error = error


@dataclass(frozen=True, slots=True)
class FileRepairReport:
    """Outcome of one successful file repair."""

    input_path: Path
    backup: BackupOutcome
    result: RepairResult
    input_details: dict[str, Any]
    output_details: dict[str, Any]


def check_backup_target(path: Path, backup_suffix: str) -> Path:
    """Backup path for ``path``; InputError when it would be the input itself."""
    backup = backup_path_for(path, backup_suffix)
    if backup.resolve() == path.resolve():
        raise InputError(
            f"Backup suffix {backup_suffix!r} would make the backup overwrite {path}",
        )
    return backup


def repair_file(
    path: Path,
    config: RepairConfig | None = None,
    *,
    encoding: str = DEFAULT_ENCODING,
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX,
) -> FileRepairReport:
    """Repair ``path`` in place, keeping the original as a backup.

    The document is rewritten in memory first; on a scan error RepairFailed is
    raised before any backup or output is written. Invalid encoding or backup
    settings raise InputError before the file is touched.
    """
    cfg = config or RepairConfig()
    check_encoding(encoding)
    backup_path = check_backup_target(path, backup_suffix)
    input_details = describe_file(path)
    text = read_document(path, encoding)

    outcome = repair_text(text, cfg)
    match outcome:
        case UnterminatedGuard() | CursorOverrun():
            raise RepairFailed(path, outcome)

    backup = make_backup(path, backup_path)
    log.info("Backed up %s to %s", path, backup.backup_path)

    if clear_readonly(path):
        log.info("Cleared read-only flag on %s", path)
    write_document(path, outcome.text, encoding)

    return FileRepairReport(
        input_path=path,
        backup=backup,
        result=outcome,
        input_details=input_details,
        output_details=describe_file(path),
    )


def report_to_dict(report: FileRepairReport) -> dict[str, Any]:
    """JSON-ready summary of a file repair."""
    return {
        "status": "ok",
        "input_path": str(report.input_path),
        "backup_path": str(report.backup.backup_path),
        "displaced_backup_path": (
            str(report.backup.displaced_path) if report.backup.displaced_path else None
        ),
        "backup_collision": report.backup.collision,
        "input_file": report.input_details,
        "output_file": report.output_details,
        "repair": repair_result_to_dict(report.result),
    }


def failure_to_dict(failure: RepairFailed) -> dict[str, Any]:
    """JSON-ready summary of a failed repair."""
    return {
        "status": "failed",
        "input_path": str(failure.path),
        **scan_error_to_dict(failure.error),
    }
