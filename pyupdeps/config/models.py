"""Pydantic models for config types."""

from typing import List, Optional
from pydantic import BaseModel, Field

DEFAULT_BRANCH_PREFIX = "update-deps"

class RepoConfig(BaseModel):
    """Repository configuration."""
    github_repo_owner: Optional[str] = None
    github_repo_name: Optional[str] = None
    github_api_url: str = "https://api.github.com"
    github_graphql_url: Optional[str] = None

    class Config:
        """Pydantic config."""
        extra = "allow"

    @property
    def full_name(self) -> str:
        return f"{self.github_repo_owner}/{self.github_repo_name}"

    @property
    def graphql_url(self) -> str:
        """GraphQL endpoint, derived from the REST url unless set explicitly."""
        if self.github_graphql_url:
            return self.github_graphql_url
        api_url = self.github_api_url.rstrip("/")
        # GitHub Enterprise serves REST on /api/v3 and GraphQL on /api/graphql
        if api_url.endswith("/v3"):
            api_url = api_url[:-3]
        return f"{api_url}/graphql"

class UpdateConfig(BaseModel):
    """What to update and where to publish it."""
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    package_manager_type: str = "composer"
    manifest_path: Optional[str] = None
    include_deps: List[str] = Field(default_factory=list)
    exclude_deps: List[str] = Field(default_factory=list)

    class Config:
        """Pydantic config."""
        extra = "allow"

class RunConfig(BaseModel):
    """Per-run values taken from the environment or the checkout."""
    workspace: str = "."
    sha: Optional[str] = None
    github_token: Optional[str] = Field(default=None, repr=False)

    class Config:
        """Pydantic config."""
        extra = "allow"

class PyupdepsConfig(BaseModel):
    """Full pyupdeps configuration."""
    repo: RepoConfig = Field(default_factory=RepoConfig)
    update: UpdateConfig = Field(default_factory=UpdateConfig)
    run: RunConfig = Field(default_factory=RunConfig)

    class Config:
        """Pydantic config."""
        extra = "allow"
