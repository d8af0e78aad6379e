"""Type definitions for GitHub API responses."""

from typing import Any, Dict, List, Literal, Optional, Protocol, Tuple, Union
from pydantic import BaseModel, Field

MergeableState = Literal['CONFLICTING', 'MERGEABLE', 'UNKNOWN']

# GraphQL response types with Pydantic models
class GitObjectNode(BaseModel):
    oid: str

class RefNode(BaseModel):
    id: str
    name: str
    target: Optional[GitObjectNode] = None

class DefaultBranchRefNode(BaseModel):
    name: str
    target: Optional[GitObjectNode] = None

class PRNode(BaseModel):
    id: str
    number: int
    mergeable: MergeableState = 'UNKNOWN'
    baseRefName: Optional[str] = None
    headRefName: Optional[str] = None

class PRNodes(BaseModel):
    nodes: List[PRNode] = Field(default_factory=list)

class RepositoryNode(BaseModel):
    id: str
    defaultBranchRef: Optional[DefaultBranchRefNode] = None
    ref: Optional[RefNode] = None
    pullRequests: Optional[PRNodes] = None

class RepositoryData(BaseModel):
    repository: Optional[RepositoryNode] = None

class CreateRefPayload(BaseModel):
    ref: Optional[RefNode] = None

class CreateRefData(BaseModel):
    createRef: Optional[CreateRefPayload] = None

class UpdateRefPayload(BaseModel):
    ref: Optional[RefNode] = None

class UpdateRefData(BaseModel):
    updateRef: Optional[UpdateRefPayload] = None

class DeleteRefPayload(BaseModel):
    clientMutationId: Optional[str] = None

class DeleteRefData(BaseModel):
    deleteRef: Optional[DeleteRefPayload] = None

class CommitPayload(BaseModel):
    commit: GitObjectNode

class CreateCommitOnBranchData(BaseModel):
    createCommitOnBranch: CommitPayload

class GraphQLErrorLocation(BaseModel):
    line: int
    column: int

class GraphQLError(BaseModel):
    message: str
    type: Optional[str] = None
    locations: Optional[List[GraphQLErrorLocation]] = None
    path: Optional[List[Union[str, int]]] = None
    extensions: Optional[Dict[str, object]] = None

class GraphQLResponse(BaseModel):
    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[GraphQLError]] = None

# Type for PyGithub GraphQL response
# First element is headers dict, second is the response data
GraphQLResponseType = Tuple[Dict[str, object], Dict[str, object]]

def parse_graphql_response(response: Dict[str, object]) -> GraphQLResponse:
    """Parse GraphQL response into Pydantic model."""
    try:
        return GraphQLResponse.model_validate(response)
    except Exception as e:
        raise TypeError(f"Invalid GraphQL response: {e}")

class GitHubRequester(Protocol):
    """Type for PyGithub requester to handle GraphQL calls.

    This types the internal _Github__requester that's needed for GraphQL.
    We use a Protocol since the requester is a private implementation detail.
    """
    def requestJsonAndCheck(
        self,
        verb: str,
        url: str,
        parameters: Optional[Dict[str, object]] = None,
        headers: Optional[Dict[str, str]] = None,
        input: Optional[Dict[str, object]] = None
    ) -> GraphQLResponseType:
        ...
