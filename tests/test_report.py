import json

from executor.result import ValidationResult
from gate.report import summary_lines, validation_report, write_outputs, write_validation_artifact


def _result():
    return ValidationResult(
        files_validated=2,
        files_passed=1,
        files_failed=1,
        errors=["A.PO: bad syntax"],
        validated_files=["A.PO", "B.PO"],
    )


def test_outputs_appended_to_github_output(tmp_path):
    out = tmp_path / "github_output"
    out.write_text("existing=1\n", encoding="utf-8")
    write_outputs(_result(), str(out))
    assert out.read_text(encoding="utf-8").splitlines() == [
        "existing=1",
        "files-validated=2",
        "files-passed=1",
        "files-failed=1",
    ]


def test_outputs_skipped_without_target():
    assert write_outputs(_result(), None) is None


def test_artifact_write(tmp_path):
    path = write_validation_artifact(_result(), "abc123", root=str(tmp_path))
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    assert payload["run_id"] == "abc123"
    assert payload["passed"] is False
    assert payload["errors"] == ["A.PO: bad syntax"]
    assert payload["validated_files"] == ["A.PO", "B.PO"]


def test_summary_lists_attempted_files():
    lines = summary_lines(_result(), "[P]")
    assert "[P] Files Validated: 2" in lines
    assert "[P]   - B.PO" in lines
    assert "[P] Files Failed: 1" in lines


def test_report_line_is_machine_readable():
    line = validation_report(_result(), "ssh", "refs/heads/main")
    prefix, payload = line.split(" ", 1)
    assert prefix == "POWERON_GATE_REPORT"
    assert json.loads(payload)["files_failed"] == 1


def test_empty_result_counts_hold():
    result = ValidationResult.empty()
    result.validate_counts()
    assert result.passed
