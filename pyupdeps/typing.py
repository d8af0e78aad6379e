"""Common types used across the codebase."""

from typing import List, NewType, Optional, Protocol, Sequence

# Git object identifiers as returned by the GitHub GraphQL API
CommitOid = NewType('CommitOid', str)
RefId = NewType('RefId', str)
RepositoryId = NewType('RepositoryId', str)


class GitInterface(Protocol):
    """Protocol for the local git wrapper."""
    def run_cmd(self, command: str) -> str:
        ...


class ProcessRunnerProtocol(Protocol):
    """Protocol for running external commands in a working directory."""
    def run(self, cwd: str, args: Sequence[str], ignore_return_code: bool = False,
            label: Optional[str] = None) -> str:
        ...


class PyupdepsError(Exception):
    """Base class for errors that abort a run."""
    pass


class ConfigurationError(PyupdepsError):
    """Missing or invalid input, detected before any remote mutation."""
    pass


class UnsupportedPackageManagerError(ConfigurationError):
    """The configured package manager type has no backend."""
    def __init__(self, package_manager_type: str):
        self.package_manager_type = package_manager_type
        super().__init__(f"Package manager type '{package_manager_type}' isn't supported")


class ConstraintError(ConfigurationError):
    """A version constraint or version string could not be understood."""
    pass


class CommandError(PyupdepsError):
    """An external command exited with a non-zero status."""
    def __init__(self, args: Sequence[str], returncode: int, output: str):
        self.args_list: List[str] = list(args)
        self.returncode = returncode
        self.output = output
        message = f"Command '{' '.join(self.args_list)}' failed with exit code {returncode}"
        if output.strip():
            message += f":\n{output.strip()}"
        super().__init__(message)


class GitHubAPIError(PyupdepsError):
    """The GitHub API returned errors or an unexpected payload."""
    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors: List[str] = errors or []
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)
