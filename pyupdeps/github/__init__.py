"""GitHub interfaces and implementation."""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar, runtime_checkable

from pydantic import BaseModel

from . import queries
from .types import (
    CreateCommitOnBranchData,
    CreateRefData,
    DeleteRefData,
    GitHubRequester,
    GraphQLResponseType,
    MergeableState,
    PRNode,
    RepositoryData as RepositoryDataResponse,
    RepositoryNode,
    UpdateRefData,
    parse_graphql_response,
)
from ..config.models import PyupdepsConfig
from ..typing import CommitOid, GitHubAPIError, RefId, RepositoryId

M = TypeVar('M', bound=BaseModel)

# Get module logger
logger = logging.getLogger(__name__)

@dataclass
class RepositoryData:
    """Repository facts needed before touching branches."""
    id: RepositoryId
    default_branch: str
    default_branch_oid: Optional[CommitOid] = None

@dataclass
class ExistingBranch:
    """A branch ref as GitHub reports it."""
    id: RefId
    name: str
    oid: Optional[CommitOid] = None

@dataclass
class PullRequestState:
    """An open pull request and whether it still merges cleanly."""
    id: str
    number: int
    mergeable: MergeableState = 'UNKNOWN'
    base_ref: Optional[str] = None
    head_ref: Optional[str] = None

    @property
    def conflicting(self) -> bool:
        return self.mergeable == 'CONFLICTING'

@dataclass
class InitialData:
    repository: RepositoryData
    existing_branch: Optional[ExistingBranch]
    pull_requests: List[PullRequestState] = field(default_factory=list)

@dataclass(frozen=True)
class FileAddition:
    """A file to write in a commit; contents are base64 of the raw bytes."""
    path: str
    contents: str

# Define protocols for GitHub objects
@runtime_checkable
class GitHubPullRequestProtocol(Protocol):
    """Protocol for GitHub pull request objects (real or fake)."""
    @property
    def number(self) -> int:
        """Get the PR number."""
        ...

@runtime_checkable
class GitHubRepoProtocol(Protocol):
    """Protocol for GitHub repository objects (real or fake)."""
    def create_pull(self, title: str, body: str, base: str, head: str,
                    maintainer_can_modify: bool = True, draft: bool = False) -> GitHubPullRequestProtocol:
        """Create a new pull request."""
        ...

@runtime_checkable
class PyGithubProtocol(Protocol):
    """Protocol for PyGithub implementations (real or fake).

    This protocol defines the interface that both the real PyGithub library
    (through its adapter) and the test fake must satisfy.
    """
    def get_repo(self, full_name_or_id: str) -> GitHubRepoProtocol:
        """Get a repository by full name or ID."""
        ...

    @property
    def requester(self) -> GitHubRequester:
        """Requester used for GraphQL calls."""
        ...

def find_github_token(explicit: Optional[str] = None) -> Optional[str]:
    """Find GitHub token from the explicit value, env var or gh CLI config."""
    import yaml

    if explicit:
        return explicit

    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    # Then try gh CLI config at ~/.config/gh/hosts.yml
    try:
        gh_config_path = Path.home() / ".config" / "gh" / "hosts.yml"
        if gh_config_path.exists():
            with open(gh_config_path, "r") as f:
                gh_config = yaml.safe_load(f)
                if gh_config and "github.com" in gh_config:
                    github_config: Dict[str, object] = gh_config["github.com"]
                    if "oauth_token" in github_config:
                        token = github_config["oauth_token"]
                        if isinstance(token, str):
                            return token
    except Exception as e:
        logger.error(f"Error reading gh CLI config: {e}")

    return None

def _pull_request_state(node: PRNode) -> PullRequestState:
    return PullRequestState(
        id=node.id,
        number=node.number,
        mergeable=node.mergeable,
        base_ref=node.baseRefName,
        head_ref=node.headRefName,
    )

class GitHubClient:
    """GitHub client implementation."""
    def __init__(self, config: PyupdepsConfig, github_client: PyGithubProtocol):
        """Initialize with config and GitHub client implementation.

        Args:
            config: The configuration
            github_client: GitHub client implementation (real or fake)
        """
        self.config = config
        self.client = github_client
        self._repo: Optional[GitHubRepoProtocol] = None

    @property
    def repo(self) -> GitHubRepoProtocol:
        """Get GitHub repository."""
        if self._repo is None:
            self._repo = self.client.get_repo(self.config.repo.full_name)
        return self._repo

    @repo.setter
    def repo(self, value: GitHubRepoProtocol) -> None:
        """Set the GitHub repository."""
        self._repo = value

    def _repo_variables(self) -> Dict[str, Any]:
        return {
            "repositoryOwner": self.config.repo.github_repo_owner,
            "repositoryName": self.config.repo.github_repo_name,
        }

    def graphql(self, query: str, variables: Dict[str, Any], model: Type[M]) -> M:
        """Run a GraphQL document and validate its data against a model.

        GitHub answers GraphQL errors with HTTP 200, so the errors array is
        checked here and raised as GitHubAPIError.
        """
        result: GraphQLResponseType = self.client.requester.requestJsonAndCheck(
            "POST",
            self.config.repo.graphql_url,
            input={
                "query": query,
                "variables": variables,
            }
        )
        _headers, resp = result
        graphql_resp = parse_graphql_response(resp)
        if graphql_resp.errors:
            raise GitHubAPIError("GraphQL request failed", [e.message for e in graphql_resp.errors])
        if graphql_resp.data is None:
            raise GitHubAPIError("GraphQL response has no data")
        try:
            return model.model_validate(graphql_resp.data)
        except ValueError as e:
            raise GitHubAPIError(f"Unexpected GraphQL response: {e}")

    def _repository(self, query: str, variables: Dict[str, Any]) -> RepositoryNode:
        data = self.graphql(query, {**self._repo_variables(), **variables}, RepositoryDataResponse)
        if data.repository is None:
            raise GitHubAPIError(f"Repository {self.config.repo.full_name} not found")
        return data.repository

    @staticmethod
    def _repository_data(repository: RepositoryNode) -> RepositoryData:
        if repository.defaultBranchRef is None:
            raise GitHubAPIError("Repository has no default branch")
        default_oid = repository.defaultBranchRef.target.oid if repository.defaultBranchRef.target else None
        return RepositoryData(
            id=RepositoryId(repository.id),
            default_branch=repository.defaultBranchRef.name,
            default_branch_oid=CommitOid(default_oid) if default_oid else None,
        )

    @staticmethod
    def _existing_branch(repository: RepositoryNode) -> Optional[ExistingBranch]:
        if repository.ref is None:
            return None
        oid = repository.ref.target.oid if repository.ref.target else None
        return ExistingBranch(
            id=RefId(repository.ref.id),
            name=repository.ref.name,
            oid=CommitOid(oid) if oid else None,
        )

    def get_repository_data(self) -> RepositoryData:
        logger.info("> github fetch repository")
        return self._repository_data(self._repository(queries.GET_REPOSITORY_DATA, {}))

    def get_existing_branch(self, branch_name: str) -> Optional[ExistingBranch]:
        logger.info(f"> github fetch branch {branch_name}")
        repository = self._repository(queries.GET_EXISTING_BRANCH, {
            "qualifiedName": f"refs/heads/{branch_name}",
        })
        return self._existing_branch(repository)

    def list_open_pull_requests(self, base_ref_name: str, head_ref_name: str) -> List[PullRequestState]:
        logger.info(f"> github fetch open pull requests {head_ref_name} -> {base_ref_name}")
        repository = self._repository(queries.LIST_OPEN_PULL_REQUESTS, {
            "baseRefName": base_ref_name,
            "headRefName": head_ref_name,
        })
        nodes = repository.pullRequests.nodes if repository.pullRequests else []
        return [_pull_request_state(node) for node in nodes]

    def load_initial_data(self, branch_name: str) -> InitialData:
        """Repository data, the update branch and its open pull requests in one query.

        Only pull requests targeting the default branch are kept.
        """
        logger.info(f"> github fetch initial data for {branch_name}")
        repository = self._repository(queries.LOAD_INITIAL_DATA, {
            "qualifiedName": f"refs/heads/{branch_name}",
            "headRefName": branch_name,
        })
        repository_data = self._repository_data(repository)
        existing_branch = self._existing_branch(repository)
        pull_requests: List[PullRequestState] = []
        if existing_branch is not None and repository.pullRequests is not None:
            pull_requests = [
                _pull_request_state(node) for node in repository.pullRequests.nodes
                if node.baseRefName in (None, repository_data.default_branch)
            ]
        for pr in pull_requests:
            logger.debug(f"  PR #{pr.number}: mergeable={pr.mergeable}")
        return InitialData(repository_data, existing_branch, pull_requests)

    def create_branch(self, repository_id: RepositoryId, branch_name: str, oid: str) -> None:
        logger.info(f"> github create branch {branch_name} at {oid[:8]}")
        self.graphql(queries.CREATE_REF, {
            "repositoryId": repository_id,
            "name": f"refs/heads/{branch_name}",
            "oid": oid,
        }, CreateRefData)

    def delete_ref(self, ref_id: RefId) -> None:
        logger.info(f"> github delete ref {ref_id}")
        self.graphql(queries.DELETE_REF, {"refId": ref_id}, DeleteRefData)

    def update_ref(self, ref_id: RefId, oid: str, force: bool) -> None:
        logger.info(f"> github update ref {ref_id} to {oid[:8]}{' (force)' if force else ''}")
        self.graphql(queries.UPDATE_REF, {
            "refId": ref_id,
            "oid": oid,
            "force": force,
        }, UpdateRefData)

    def create_commit_on_branch(self, branch_name: str, expected_head_oid: str,
                                commit_headline: str, commit_body: Optional[str],
                                additions: List[FileAddition]) -> CommitOid:
        """Create one commit on a branch; GitHub rejects it if the tip moved."""
        logger.info(f"> github commit on {branch_name} after {expected_head_oid[:8]} : {commit_headline}")
        data = self.graphql(queries.CREATE_COMMIT_ON_BRANCH, {
            "githubRepository": self.config.repo.full_name,
            "branchName": branch_name,
            "expectedHeadOid": expected_head_oid,
            "commitHeadline": commit_headline,
            "commitBody": commit_body,
            "fileChanges": {
                "additions": [{"path": a.path, "contents": a.contents} for a in additions],
            },
        }, CreateCommitOnBranchData)
        return CommitOid(data.createCommitOnBranch.commit.oid)

    def open_pull_request(self, base_ref_name: str, head_ref_name: str, title: str, body: str = "") -> int:
        logger.info(f"> github create pull request {head_ref_name} -> {base_ref_name} : {title}")
        pr = self.repo.create_pull(title=title, body=body, base=base_ref_name, head=head_ref_name)
        return pr.number
