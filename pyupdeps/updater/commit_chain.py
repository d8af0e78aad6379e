"""Publishing update commands as a chain of remote commits."""

import os
import logging
from typing import List, Sequence

from ..exec import log_group
from ..github import FileAddition, GitHubClient
from ..packagemanager import PackageManager, PlannedUpdate, SkippedUpdate, UpdateCommand
from ..typing import CommitOid, ProcessRunnerProtocol
from ..util import encode_contents

logger = logging.getLogger(__name__)

class CommitChain:
    """Runs update commands one by one, committing each result on the branch.

    Every commit names the commit it expects at the branch tip. The token
    starts at the branch's starting commit and is replaced by each commit's
    oid, so commits land strictly in plan order and a concurrent push makes
    the next commit fail instead of silently overwriting it.
    """

    def __init__(self, github: GitHubClient, runner: ProcessRunnerProtocol,
                 package_manager: PackageManager, workspace: str,
                 branch_name: str, manifest_path: str, start_oid: str):
        self.github = github
        self.runner = runner
        self.package_manager = package_manager
        self.workspace = workspace
        self.branch_name = branch_name
        self.manifest_path = manifest_path
        self.token = CommitOid(start_oid)
        self.commits: List[CommitOid] = []

    def file_additions(self) -> List[FileAddition]:
        """Current contents of every file the package manager may have touched."""
        additions: List[FileAddition] = []
        for path in self.package_manager.list_touched_files(self.manifest_path):
            if not os.path.exists(path):
                logger.warning(f"{path} does not exist, not committing it")
                continue
            with open(path, 'rb') as f:
                contents = f.read()
            relative = os.path.relpath(os.path.abspath(path), self.workspace).replace(os.sep, "/")
            additions.append(FileAddition(path=relative, contents=encode_contents(contents)))
        return additions

    def commit(self, command: UpdateCommand) -> CommitOid:
        """Apply one command and commit its result on top of the token."""
        self.runner.run(command.cwd, command.args, label=f"Preparing update: {command.description}")

        with log_group(f"Committing update: {command.description}"):
            oid = self.github.create_commit_on_branch(
                branch_name=self.branch_name,
                expected_head_oid=self.token,
                commit_headline=command.description,
                commit_body=command.detailed_description,
                additions=self.file_additions(),
            )
        logger.info(f"Committed {oid[:8]}: {command.description}")
        self.token = oid
        self.commits.append(oid)
        return oid

    def apply(self, plan: Sequence[PlannedUpdate]) -> List[CommitOid]:
        """Commit every executable entry of the plan, in order.

        A failure stops the chain; commits already created stay on the branch.
        """
        for entry in plan:
            if isinstance(entry, SkippedUpdate):
                logger.info(entry.description)
                continue
            self.commit(entry)
        return list(self.commits)
