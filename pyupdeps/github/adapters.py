"""Adapter classes to wrap PyGithub objects with our protocol interfaces."""

from typing import Dict, Optional
import logging

from github import Auth, Github
from github.Repository import Repository
from github.PullRequest import PullRequest as PyGithubPullRequest

from . import GitHubPullRequestProtocol, GitHubRepoProtocol, PyGithubProtocol
from .types import GitHubRequester, GraphQLResponseType

logger = logging.getLogger(__name__)


class PyGithubPullRequestAdapter(GitHubPullRequestProtocol):
    """Adapter for PyGithub PullRequest objects."""

    def __init__(self, pr: PyGithubPullRequest) -> None:
        self._pr = pr

    @property
    def number(self) -> int:
        return self._pr.number


class PyGithubRepoAdapter(GitHubRepoProtocol):
    """Adapter for PyGithub Repository objects."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def create_pull(self, title: str, body: str, base: str, head: str,
                    maintainer_can_modify: bool = True, draft: bool = False) -> GitHubPullRequestProtocol:
        """Create a new pull request."""
        pr = self._repo.create_pull(
            title=title,
            body=body,
            base=base,
            head=head,
            maintainer_can_modify=maintainer_can_modify,
            draft=draft
        )
        return PyGithubPullRequestAdapter(pr)


class PyGithubRequesterAdapter(GitHubRequester):
    """Adapter for PyGithub's requester to handle GraphQL."""

    def __init__(self, requester: GitHubRequester) -> None:
        self._requester = requester

    def requestJsonAndCheck(
        self, verb: str, url: str, parameters: Optional[Dict[str, object]] = None,
        headers: Optional[Dict[str, str]] = None, input: Optional[Dict[str, object]] = None
    ) -> GraphQLResponseType:
        """Make a request and return (headers, data); raises GithubException on HTTP errors."""
        response_headers, data = self._requester.requestJsonAndCheck(
            verb, url, parameters=parameters, headers=headers, input=input
        )
        # Ensure headers is never None
        return (response_headers or {}, data)


class PyGithubAdapter(PyGithubProtocol):
    """Adapter for the main PyGithub object."""

    def __init__(self, github: Github) -> None:
        self._github = github
        # Cache the requester adapter
        self._requester_adapter: Optional[PyGithubRequesterAdapter] = None

    @classmethod
    def from_token(cls, token: str, base_url: str = "https://api.github.com") -> "PyGithubAdapter":
        return cls(Github(auth=Auth.Token(token), base_url=base_url))

    def get_repo(self, full_name_or_id: str) -> GitHubRepoProtocol:
        """Get a repository by full name."""
        return PyGithubRepoAdapter(self._github.get_repo(full_name_or_id))

    @property
    def requester(self) -> GitHubRequester:
        """Access the requester for GraphQL calls."""
        if self._requester_adapter is None:
            # Access the private attribute from the real PyGithub object
            real_requester = getattr(self._github, '_Github__requester')
            self._requester_adapter = PyGithubRequesterAdapter(real_requester)
        return self._requester_adapter
