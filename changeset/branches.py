from changeset import git
from changeset.git import ChangeSetError
from gate.logger import log_event


class BranchNotFoundError(ChangeSetError):
    def __init__(self, requested):
        super().__init__(
            f"Target branch '{requested}' not found. Make sure you have checked out with "
            "sufficient depth (fetch-depth: 0) and the branch exists."
        )
        self.requested = requested


def branch_candidates(target_branch):
    """
    Ordered ref spellings to try for a requested branch.
    Checkout actions materialize refs differently depending on fetch depth,
    so the same branch may only exist under one of these names.
    """
    name = target_branch[len("origin/"):] if target_branch.startswith("origin/") else target_branch
    return [
        target_branch,
        f"refs/remotes/origin/{name}",
        name,
        f"refs/heads/{name}",
        f"remotes/origin/{name}",
    ]


def resolve_branch(target_branch, cwd=None):
    for candidate in branch_candidates(target_branch):
        if git.verify_ref(candidate, cwd=cwd):
            log_event("branch_resolver", f"resolved requested={target_branch} ref={candidate}")
            return candidate
    log_event("branch_resolver", f"unresolved requested={target_branch}")
    raise BranchNotFoundError(target_branch)
