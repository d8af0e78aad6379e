"""Dependency update run: reconcile the branch, commit updates, open the pull request."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .commit_chain import CommitChain
from .reconcile import ReconcileDecision, reconcile_branch
from ..config import head_branch_name, manifest_abspath, pull_request_title, relative_manifest_path
from ..config.models import PyupdepsConfig
from ..github import GitHubClient
from ..packagemanager import PackageManager, PlannedUpdate, UpdateCommand, executable
from ..typing import CommitOid, ConfigurationError, ProcessRunnerProtocol

logger = logging.getLogger(__name__)

class RunOutcome(Enum):
    COMPLETED = "completed"
    NO_CHANGES = "no-changes"
    ALREADY_PENDING = "already-pending"

@dataclass
class RunResult:
    outcome: RunOutcome
    pull_request_number: Optional[int] = None
    commits: List[CommitOid] = field(default_factory=list)
    pull_request_reused: bool = False

def pull_request_body(commands: List[UpdateCommand]) -> str:
    lines: List[str] = []
    for command in commands:
        lines.append(f"- {command.description}")
        if command.detailed_description:
            for detail in command.detailed_description.splitlines():
                lines.append(f"  - {detail}")
    return "\n".join(lines)

def build_plan(config: PyupdepsConfig, package_manager: PackageManager) -> List[PlannedUpdate]:
    """Ordered update plan for the configured manifest."""
    return package_manager.list_update_groups(
        exclude_deps=config.update.exclude_deps,
        include_deps=config.update.include_deps,
        manifest_path=manifest_abspath(config),
    )

class DependencyUpdater:
    """One update run for one manifest."""

    def __init__(self, config: PyupdepsConfig, github: GitHubClient,
                 package_manager: PackageManager, runner: ProcessRunnerProtocol):
        self.config = config
        self.github = github
        self.package_manager = package_manager
        self.runner = runner

    def plan(self) -> List[PlannedUpdate]:
        return build_plan(self.config, self.package_manager)

    def run(self) -> RunResult:
        branch_name = head_branch_name(self.config)
        manifest = relative_manifest_path(self.config)
        initial = self.github.load_initial_data(branch_name)
        start_oid = CommitOid(self.config.run.sha) if self.config.run.sha else initial.repository.default_branch_oid
        if start_oid is None:
            raise ConfigurationError("Could not determine the commit to start the update branch from")
        base_ref_name = initial.repository.default_branch

        decision = reconcile_branch(
            self.github,
            initial.repository.id,
            branch_name,
            initial.existing_branch,
            initial.pull_requests,
            start_oid,
        )
        if decision is ReconcileDecision.ALREADY_PENDING:
            logger.warning(f"Pull request for {manifest} is already open")
            return RunResult(RunOutcome.ALREADY_PENDING)

        plan = self.plan()
        commands = executable(plan)
        if not commands:
            logger.info("No updates needed")
            return RunResult(RunOutcome.NO_CHANGES)

        logger.info(f"Applying {len(commands)} update(s) to {branch_name}")
        chain = CommitChain(
            self.github,
            self.runner,
            self.package_manager,
            workspace=self.config.run.workspace,
            branch_name=branch_name,
            manifest_path=manifest_abspath(self.config),
            start_oid=start_oid,
        )
        commits = chain.apply(plan)

        if decision is ReconcileDecision.RESET:
            # The conflicting pull request tracks the branch and now shows the new commits
            number = next(pr.number for pr in initial.pull_requests if pr.conflicting)
            logger.info(f"Pull request #{number} updated")
            return RunResult(RunOutcome.COMPLETED, pull_request_number=number, commits=commits,
                             pull_request_reused=True)

        logger.info("Opening pull request")
        number = self.github.open_pull_request(
            base_ref_name=base_ref_name,
            head_ref_name=branch_name,
            title=pull_request_title(self.config),
            body=pull_request_body(commands),
        )
        logger.info(f"Pull request #{number} opened")
        return RunResult(RunOutcome.COMPLETED, pull_request_number=number, commits=commits)
