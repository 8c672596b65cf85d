import posixpath
from pathlib import Path

from changeset import git
from changeset.branches import resolve_branch
from changeset.git import ChangeSetError
from executor.result import ChangedFile
from gate.logger import log_event

POWERON_PATTERN = "*.PO"

_STATUS_NAMES = {"A": "added", "M": "modified"}


def _is_ignored(file_path, ignore_list):
    return posixpath.basename(file_path) in ignore_list


def parse_name_status(output, ignore_list=()):
    """Parse `git diff --name-status` output, keeping the order git printed."""
    changed = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) < 2:
            continue
        status, file_path = parts[0], parts[1]
        if status == "D" or _is_ignored(file_path, ignore_list):
            continue
        changed.append(ChangedFile(file_path=file_path, status=_STATUS_NAMES.get(status, status)))
    return changed


def find_poweron_files(poweron_directory, cwd=None):
    base = Path(cwd or git.workspace_dir() or ".")
    root = base / poweron_directory
    if not root.is_dir():
        log_event("scanner", f"directory_missing path={root}")
        raise ChangeSetError(f"PowerOn directory not found: {poweron_directory}")
    return [
        (Path(poweron_directory) / path.relative_to(root)).as_posix()
        for path in sorted(root.rglob(POWERON_PATTERN))
        if path.is_file()
    ]


def get_changed_files(target_branch, poweron_directory, ignore_list=(), *, resolved_ref=None, cwd=None):
    if not target_branch:
        files = [
            ChangedFile(file_path=path, status="existing")
            for path in find_poweron_files(poweron_directory, cwd=cwd)
            if not _is_ignored(path, ignore_list)
        ]
        log_event("scanner", f"full_scan dir={poweron_directory} files={len(files)}")
        return files

    ref = resolved_ref or resolve_branch(target_branch, cwd=cwd)
    output = git.diff_name_status(ref, poweron_directory, cwd=cwd)
    files = parse_name_status(output, ignore_list)
    log_event("scanner", f"diff_scan ref={ref} dir={poweron_directory} files={len(files)}")
    return files
