"""Tests for the scripts/fix_csv.py command-line entry point."""
from __future__ import annotations

import importlib.util
import logging
from pathlib import Path

import orjson
import pytest


def _load_cli_module() -> object:
    root = Path(__file__).resolve().parents[1]
    script_path = root / "scripts" / "fix_csv.py"
    spec = importlib.util.spec_from_file_location("fix_csv", script_path)
    assert spec is not None
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


def test_repairs_file_and_prints_summary(
    tmp_path: Path, capsys: pytest.CaptureFixture[str],
) -> None:
    mod = _load_cli_module()
    path = tmp_path / "export.csv"
    path.write_bytes(b'a,"b\r\nc",d\r\n')

    rc = mod.main([str(path), "--replacement", "space"])

    assert rc == mod.EXIT_OK
    assert path.read_bytes() == b'a,"b c",d\r\n'
    payload = orjson.loads(capsys.readouterr().out)
    assert payload["status"] == "ok"
    assert payload["repair"]["normalized_spans"] == 1
    assert "input_file" not in payload


def test_json_flag_prints_full_report_and_report_out(
    tmp_path: Path, capsys: pytest.CaptureFixture[str],
) -> None:
    mod = _load_cli_module()
    path = tmp_path / "export.csv"
    path.write_bytes(b"x\r\r\ny\r\n")
    report_path = tmp_path / "out" / "report.json"

    rc = mod.main([str(path), "--json", "--report-out", str(report_path)])

    assert rc == mod.EXIT_OK
    printed = orjson.loads(capsys.readouterr().out)
    assert printed["input_file"]["name"] == "export.csv"
    assert printed["repair"]["quirky_breaks"] == 1
    saved = orjson.loads(report_path.read_bytes())
    assert saved["repair"] == printed["repair"]


def test_missing_filename(capsys: pytest.CaptureFixture[str]) -> None:
    mod = _load_cli_module()
    assert mod.main([]) == mod.EXIT_FILENAME_MISSING
    assert "usage:" in capsys.readouterr().err


def test_file_not_found(tmp_path: Path) -> None:
    mod = _load_cli_module()
    assert mod.main([str(tmp_path / "absent.csv")]) == mod.EXIT_FILE_NOT_FOUND


def test_backup_collision_exit_code(tmp_path: Path) -> None:
    mod = _load_cli_module()
    path = tmp_path / "export.csv"
    path.write_bytes(b"a,b\n")
    (tmp_path / "export.csv.bak").write_bytes(b"old")

    assert mod.main([str(path)]) == mod.EXIT_BACKUP_COLLISION
    assert (tmp_path / "export.csv.bak_1").read_bytes() == b"old"


def test_unterminated_guard_fails_without_writing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str],
) -> None:
    mod = _load_cli_module()
    path = tmp_path / "broken.csv"
    path.write_bytes(b'"unterminated,field\n')

    rc = mod.main([str(path)])

    assert rc == mod.EXIT_RUNTIME
    assert path.read_bytes() == b'"unterminated,field\n'
    assert not (tmp_path / "broken.csv.bak").exists()
    payload = orjson.loads(capsys.readouterr().out)
    assert payload["error"] == "unterminated_guard"
    assert payload["opened_at"] == 0


def test_invalid_guard_rejected(tmp_path: Path) -> None:
    mod = _load_cli_module()
    path = tmp_path / "export.csv"
    path.write_bytes(b"a,b\n")
    assert mod.main([str(path), "--guard", "ab"]) == mod.EXIT_FILENAME_MISSING
    assert path.read_bytes() == b"a,b\n"


def test_unknown_replacement_name_is_usage_error() -> None:
    mod = _load_cli_module()
    with pytest.raises(SystemExit) as excinfo:
        mod.main(["x.csv", "--replacement", "emoji"])
    assert excinfo.value.code == 2


def test_empty_backup_suffix_leaves_input_in_place(tmp_path: Path) -> None:
    mod = _load_cli_module()
    path = tmp_path / "export.csv"
    path.write_bytes(b'a,"b\nc"\n')

    rc = mod.main([str(path), "--backup-suffix", ""])

    assert rc == mod.EXIT_FILENAME_MISSING
    assert path.read_bytes() == b'a,"b\nc"\n'
    assert sorted(p.name for p in tmp_path.iterdir()) == ["export.csv"]


def test_unknown_encoding_is_usage_error(tmp_path: Path) -> None:
    mod = _load_cli_module()
    path = tmp_path / "export.csv"
    path.write_bytes(b'a,"b\nc"\n')

    rc = mod.main([str(path), "--encoding", "no-such-codec"])

    assert rc == mod.EXIT_FILENAME_MISSING
    assert path.read_bytes() == b'a,"b\nc"\n'
    assert not (tmp_path / "export.csv.bak").exists()


def test_unwritable_report_out_is_runtime_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str],
) -> None:
    mod = _load_cli_module()
    path = tmp_path / "export.csv"
    path.write_bytes(b"a,b\n")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    rc = mod.main([str(path), "--report-out", str(blocker / "report.json")])

    assert rc == mod.EXIT_RUNTIME
    payload = orjson.loads(capsys.readouterr().out)
    assert payload["status"] == "ok"


def test_logs_quirky_break_count_only_when_present(
    tmp_path: Path, caplog: pytest.LogCaptureFixture,
) -> None:
    mod = _load_cli_module()
    caplog.set_level(logging.INFO)
    quirky = tmp_path / "quirky.csv"
    quirky.write_bytes(b"x\r\r\ny\r\n")
    clean = tmp_path / "clean.csv"
    clean.write_bytes(b"x\r\ny\r\n")

    assert mod.main([str(quirky)]) == mod.EXIT_OK
    assert "1 quirky line endings were found and fixed" in caplog.text
    assert "Input file:  CR count = 3, LF count = 2" in caplog.text

    caplog.clear()
    assert mod.main([str(clean)]) == mod.EXIT_OK
    assert "quirky line endings" not in caplog.text
