"""Bringing the update branch into a known state before committing to it.

The update branch name is derived from the manifest path, so each manifest
has at most one update branch. What happens to it depends on what is there:

- no branch: create it at the starting commit
- branch with a conflicting open pull request: force it back to the starting commit
- branch with another open pull request: an update is already pending, stop
- branch without an open pull request: delete it and create it again
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence

from ..github import ExistingBranch, GitHubClient, PullRequestState
from ..typing import RepositoryId

logger = logging.getLogger(__name__)

class BranchStateKind(Enum):
    NO_BRANCH = "no-branch"
    BRANCH_NO_OPEN_PR = "branch-no-open-pr"
    BRANCH_OPEN_PR_MERGEABLE = "branch-open-pr-mergeable"
    BRANCH_OPEN_PR_CONFLICTING = "branch-open-pr-conflicting"

class ReconcileDecision(Enum):
    CREATED = "created"
    RESET = "reset"
    RECREATED = "recreated"
    ALREADY_PENDING = "already-pending"

def classify_branch(existing_branch: Optional[ExistingBranch],
                    pull_requests: Sequence[PullRequestState]) -> BranchStateKind:
    """Current remote state of the update branch.

    A conflicting pull request wins over any other open one. MERGEABLE and
    UNKNOWN both count as an update that is still pending.
    """
    if existing_branch is None:
        return BranchStateKind.NO_BRANCH
    if any(pr.conflicting for pr in pull_requests):
        return BranchStateKind.BRANCH_OPEN_PR_CONFLICTING
    if pull_requests:
        return BranchStateKind.BRANCH_OPEN_PR_MERGEABLE
    return BranchStateKind.BRANCH_NO_OPEN_PR

def reconcile_branch(github: GitHubClient, repository_id: RepositoryId, branch_name: str,
                     existing_branch: Optional[ExistingBranch],
                     pull_requests: List[PullRequestState], start_oid: str) -> ReconcileDecision:
    """Perform the one remote mutation the branch state calls for."""
    state = classify_branch(existing_branch, pull_requests)
    logger.info(f"Update branch {branch_name}: {state.value}")

    if state is BranchStateKind.NO_BRANCH:
        github.create_branch(repository_id, branch_name, start_oid)
        return ReconcileDecision.CREATED

    assert existing_branch is not None

    if state is BranchStateKind.BRANCH_OPEN_PR_CONFLICTING:
        numbers = ", ".join(f"#{pr.number}" for pr in pull_requests if pr.conflicting)
        logger.info(f"Pull request {numbers} has conflicts, resetting {branch_name}")
        github.update_ref(existing_branch.id, start_oid, force=True)
        return ReconcileDecision.RESET

    if state is BranchStateKind.BRANCH_OPEN_PR_MERGEABLE:
        return ReconcileDecision.ALREADY_PENDING

    logger.info(f"Branch {branch_name} has no open pull request, recreating it")
    github.delete_ref(existing_branch.id)
    github.create_branch(repository_id, branch_name, start_oid)
    return ReconcileDecision.RECREATED
