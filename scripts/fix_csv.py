#!/usr/bin/env python3
"""Fold line breaks out of quoted CSV fields, in place, keeping a backup.

Quoted fields that span several lines are rewritten onto one line by
replacing each embedded CR LF, LF or CR with a replacement token. Quirky
CR CR LF breaks anywhere in the file are collapsed to CR LF. The original
file is copied to ``<name>.bak`` (an existing backup is renamed aside to
``<name>.bak_<n>``) before the input is overwritten.

Usage::

    python3 scripts/fix_csv.py export.csv
    python3 scripts/fix_csv.py export.csv --replacement space --report-out out/report.json

Outputs structured JSON to stdout, human messages to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from csvfix.config import (
    DEFAULT_BACKUP_SUFFIX,
    DEFAULT_ENCODING,
    DEFAULT_GUARD,
    DEFAULT_REPLACEMENT_NAME,
    REPLACEMENT_TOKENS,
    InputError,
    RepairConfig,
    check_encoding,
)
from csvfix.io_utils import dumps_json, save_json
from csvfix.pipeline import (
    FileRepairReport,
    RepairFailed,
    check_backup_target,
    failure_to_dict,
    repair_file,
    report_to_dict,
)

log = logging.getLogger("fix_csv")

EXIT_OK = 0
EXIT_RUNTIME = 1
EXIT_FILENAME_MISSING = 2
EXIT_FILE_NOT_FOUND = 3
EXIT_BACKUP_COLLISION = 4


def dump_json(obj: object) -> None:
    sys.stdout.buffer.write(dumps_json(obj))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fold line breaks out of quoted CSV fields (in place, with backup).",
    )
    parser.add_argument(
        "input_file", nargs="?", type=Path,
        help="CSV file to repair",
    )
    parser.add_argument(
        "--replacement", default=DEFAULT_REPLACEMENT_NAME,
        choices=sorted(REPLACEMENT_TOKENS),
        help=f"Token substituted for embedded line breaks (default: {DEFAULT_REPLACEMENT_NAME})",
    )
    parser.add_argument(
        "--guard", default=DEFAULT_GUARD,
        help="Field guard (quote) character (default: double quote)",
    )
    parser.add_argument("--encoding", default=DEFAULT_ENCODING)
    parser.add_argument("--backup-suffix", default=DEFAULT_BACKUP_SUFFIX)
    parser.add_argument(
        "--report-out", type=Path, default=None,
        help="Optional path for the JSON report",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the full report instead of the summary",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def _log_report(report: FileRepairReport) -> None:
    result = report.result
    log.info(
        "Input file: %s (%s bytes)",
        report.input_details.get("path"),
        report.input_details.get("size_bytes"),
    )
    if result.quirky_breaks:
        log.info("%d quirky line endings were found and fixed", result.quirky_breaks)
    log.info(
        "Guarded fields: %d, normalized: %d, line breaks replaced: %d",
        result.guarded_spans,
        result.normalized_spans,
        result.replaced_newlines,
    )
    log.info(
        "Input file:  CR count = %d, LF count = %d",
        result.input_counts.cr,
        result.input_counts.lf,
    )
    log.info(
        "Output file: CR count = %d, LF count = %d",
        result.output_counts.cr,
        result.output_counts.lf,
    )
    log.info(
        "Output file: %s (%s bytes)",
        report.output_details.get("path"),
        report.output_details.get("size_bytes"),
    )


def _write_report(payload: dict[str, object], path: Path) -> bool:
    try:
        save_json(payload, path)
    except OSError:
        log.exception("Could not write report to %s", path)
        return False
    log.info("Report written to %s", path)
    return True


def _summary(payload: dict[str, object]) -> dict[str, object]:
    keys = ("status", "input_path", "backup_path", "backup_collision", "repair")
    return {key: payload[key] for key in keys if key in payload}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if args.input_file is None:
        parser.print_usage(sys.stderr)
        log.error("Name of the CSV file to process is required")
        return EXIT_FILENAME_MISSING

    try:
        config = RepairConfig.from_names(
            guard=args.guard,
            replacement_name=args.replacement,
        )
        check_encoding(args.encoding)
    except InputError as exc:
        log.error("%s", exc)
        return EXIT_FILENAME_MISSING

    input_path: Path = args.input_file
    if not input_path.is_file():
        log.error("File to process not found: %s", input_path)
        return EXIT_FILE_NOT_FOUND

    try:
        check_backup_target(input_path, args.backup_suffix)
    except InputError as exc:
        log.error("%s", exc)
        return EXIT_FILENAME_MISSING

    log.info("Processing %s", input_path)
    try:
        report = repair_file(
            input_path,
            config,
            encoding=args.encoding,
            backup_suffix=args.backup_suffix,
        )
    except RepairFailed as exc:
        log.error("Repair failed, no output written: %s", exc)
        payload = failure_to_dict(exc)
        if args.report_out is not None:
            _write_report(payload, args.report_out)
        dump_json(payload)
        return EXIT_RUNTIME
    except InputError as exc:
        log.error("%s", exc)
        return EXIT_FILENAME_MISSING
    except (OSError, UnicodeError) as exc:
        log.exception("Runtime error while processing %s", input_path)
        dump_json({"status": "failed", "input_path": str(input_path), "error": str(exc)})
        return EXIT_RUNTIME

    _log_report(report)
    payload = report_to_dict(report)
    report_written = args.report_out is None or _write_report(payload, args.report_out)
    dump_json(payload if args.json else _summary(payload))

    if not report_written:
        return EXIT_RUNTIME
    if report.backup.collision:
        return EXIT_BACKUP_COLLISION
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
