import os
import subprocess

from gate.logger import log_event


class ChangeSetError(Exception):
    pass


def workspace_dir():
    # Actions checkouts land in GITHUB_WORKSPACE; fall back to the process cwd.
    return os.environ.get("GITHUB_WORKSPACE") or None


def _run_git(args, cwd=None):
    cmd = ["git", *args]
    try:
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=cwd if cwd is not None else workspace_dir(),
            check=False,
        )
    except FileNotFoundError as exc:
        log_event("git", f"git_unavailable cmd={' '.join(cmd)}")
        raise ChangeSetError("git executable not found on PATH") from exc


def verify_ref(ref, cwd=None):
    result = _run_git(["rev-parse", "--verify", ref], cwd=cwd)
    return result.returncode == 0


def diff_name_status(ref, path, cwd=None):
    result = _run_git(["diff", "--name-status", ref, "--", path], cwd=cwd)
    if result.returncode != 0:
        log_event("git", f"diff_failed ref={ref} path={path} rc={result.returncode}")
        raise ChangeSetError(
            f"git diff against '{ref}' failed (exit {result.returncode}): {result.stderr.strip()}"
        )
    return result.stdout
