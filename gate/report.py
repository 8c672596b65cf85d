import json
import os

from executor.result import utc_iso8601
from gate.logger import log_event

OUTPUT_NAMES = ("files-validated", "files-passed", "files-failed")


def validation_report(result, connection_type, target_ref=None):
    payload = {
        "connection_type": connection_type,
        "target_ref": target_ref,
        "passed": result.passed,
        "files_validated": result.files_validated,
        "files_failed": result.files_failed,
    }
    return "POWERON_GATE_REPORT " + json.dumps(payload, sort_keys=True)


def summary_lines(result, prefix):
    rule = f"{prefix} ========================================"
    lines = ["", rule, f"{prefix} Validation Summary", rule]
    lines.append(f"{prefix} Files Validated: {result.files_validated}")
    if result.validated_files:
        lines.append(f"{prefix} Validated Files:")
        lines.extend(f"{prefix}   - {name}" for name in result.validated_files)
    lines.append(f"{prefix} Files Passed: {result.files_passed}")
    lines.append(f"{prefix} Files Failed: {result.files_failed}")
    lines.append(rule)
    return lines


def output_values(result):
    return {
        "files-validated": result.files_validated,
        "files-passed": result.files_passed,
        "files-failed": result.files_failed,
    }


def write_outputs(result, path=None):
    """Append step outputs to the file the runner names in GITHUB_OUTPUT."""
    path = path or os.environ.get("GITHUB_OUTPUT")
    if not path:
        return None
    with open(path, "a", encoding="utf-8") as f:
        for name, value in output_values(result).items():
            f.write(f"{name}={value}\n")
    return path


def write_validation_artifact(result, run_id, root="artifacts/poweron"):
    os.makedirs(root, exist_ok=True)
    payload = {
        "run_id": run_id,
        "timestamp": utc_iso8601(),
        "passed": result.passed,
        **result.to_dict(),
    }
    path = os.path.join(root, f"validation-{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, sort_keys=True, indent=2)
        f.write("\n")
    status = "PASS" if result.passed else "FAIL"
    log_event("artifact", f"wrote validation-{run_id}.json status={status}")
    return path
