"""Tests for the gate-eval command line."""

from __future__ import annotations

import json

import pytest
from sarif_utils import result, sarif, write_sarif

from scout_gate.cli import main
from scout_gate.report import RECORD_NAME


def run_cli(tmp_path, doc, *extra: str) -> int:
    scan = write_sarif(tmp_path / "scout-cves.sarif", doc)
    return main(["--input", str(scan), "--out", str(tmp_path / "out"), "--image", "app:latest", *extra])


def read_record(tmp_path) -> dict:
    return json.loads((tmp_path / "out" / RECORD_NAME).read_text())


def test_critical_on_main_exits_one(tmp_path, capsys) -> None:
    code = run_cli(tmp_path, sarif(result("error", 9.5)), "--branch", "main")
    out = capsys.readouterr().out
    assert code == 1
    assert "::error::Production deployment blocked" in out
    assert read_record(tmp_path)["security_gate"] == "BLOCK_CRITICAL"


def test_critical_on_dev_exits_zero_with_warning(tmp_path, capsys) -> None:
    code = run_cli(tmp_path, sarif(result("error", 9.5)), "--branch", "dev")
    out = capsys.readouterr().out
    assert code == 0
    assert "::warning::" in out
    assert read_record(tmp_path)["enforcement"]["action"] == "continue_with_warning"


def test_protected_branch_flag(tmp_path) -> None:
    doc = sarif(result("error", 9.5))
    assert run_cli(tmp_path, doc, "--branch", "release", "--protected-branch", "release") == 1
    assert run_cli(tmp_path, doc, "--branch", "main", "--protected-branch", "release") == 0


def test_high_threshold_flag(tmp_path) -> None:
    doc = sarif(*[result("error", 7.5)] * 3)
    assert run_cli(tmp_path, doc, "--branch", "main") == 0
    assert run_cli(tmp_path, doc, "--branch", "main", "--high-threshold", "2") == 1
    assert read_record(tmp_path)["security_gate"] == "BLOCK_HIGH"


def test_environment_flag_overrides_branch(tmp_path) -> None:
    doc = sarif(result("error", 9.5))
    assert run_cli(tmp_path, doc, "--branch", "feature/x", "--environment", "production") == 1
    assert run_cli(tmp_path, doc, "--branch", "main", "--environment", "development") == 0


def test_environment_variables_are_read(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_REF_NAME", "main")
    monkeypatch.setenv("GATE_HIGH_THRESHOLD", "0")
    assert run_cli(tmp_path, sarif(result("error", 7.5))) == 1
    assert read_record(tmp_path)["meta"]["branch"] == "main"


def test_missing_input_passes(tmp_path) -> None:
    code = main(["--input", str(tmp_path / "nope.sarif"), "--branch", "main", "--out", str(tmp_path / "out")])
    assert code == 0
    record = read_record(tmp_path)
    assert record["degraded_input"] is True
    assert record["security_gate"] == "PASS"


@pytest.mark.parametrize(
    "args",
    [
        ["--tier-priority", "medium"],
        ["--high-threshold", "-1"],
        ["--environment", "staging"],
        ["--timeout", "0"],
    ],
)
def test_bad_arguments_exit_two(tmp_path, args) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--input", str(tmp_path / "x.sarif"), *args])
    assert exc.value.code == 2


def test_broken_recommendations_still_write_report(tmp_path) -> None:
    recs = tmp_path / "scout-recommendations.sarif"
    recs.write_text(json.dumps({"runs": [{"results": 5}]}))
    code = run_cli(tmp_path, sarif(result("error", 9.5)), "--branch", "dev", "--recommendations", str(recs))
    assert code == 0
    record = read_record(tmp_path)
    assert record["security_gate"] == "BLOCK_CRITICAL"
    assert record["enrichments"][-1]["detail"] == "0 recommendation(s)"
