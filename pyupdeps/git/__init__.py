"""Git interfaces and implementation."""

import os
import shlex
import logging
from typing import Optional
import git
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

# Get module logger
logger = logging.getLogger(__name__)

class GitError(Exception):
    """A local git command failed."""
    pass

class RealGit:
    """Real Git implementation, read-only use of the local checkout."""
    def __init__(self, directory: Optional[str] = None):
        """Initialize with the directory to search for a repository from."""
        self.directory = directory or os.getcwd()
        self._repo: Optional[git.Repo] = None

    @property
    def repo(self) -> git.Repo:
        if self._repo is None:
            try:
                self._repo = git.Repo(self.directory, search_parent_directories=True)
            except (InvalidGitRepositoryError, NoSuchPathError):
                raise GitError(f"Not in a git repository: {self.directory}")
        return self._repo

    def run_cmd(self, command: str) -> str:
        """Run git command."""
        cmd_str = command.strip()
        logger.debug(f"> git {cmd_str}")
        try:
            cmd_parts = shlex.split(cmd_str)
            git_command = cmd_parts[0]
            git_args = cmd_parts[1:]
            method = getattr(self.repo.git, git_command.replace('-', '_'))
            result = method(*git_args)
            return result if isinstance(result, str) else str(result)
        except GitCommandError as e:
            raise GitError(f"Git command failed: {str(e)}")
