from changeset.branches import (
    BranchNotFoundError,
    branch_candidates,
    resolve_branch,
)
from changeset.git import (
    ChangeSetError,
    diff_name_status,
    verify_ref,
)
from changeset.scanner import (
    find_poweron_files,
    get_changed_files,
    parse_name_status,
)

__all__ = [
    "BranchNotFoundError",
    "ChangeSetError",
    "branch_candidates",
    "diff_name_status",
    "find_poweron_files",
    "get_changed_files",
    "parse_name_status",
    "resolve_branch",
    "verify_ref",
]
