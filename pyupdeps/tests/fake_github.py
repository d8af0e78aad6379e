"""Fake PyGithub implementation for testing.

Keeps repository state in memory (refs, pull requests, commits) and answers
the GraphQL documents GitHubClient sends, the way GitHub would.
"""

from __future__ import annotations

import base64
import hashlib
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

START_SHA = "a" * 40

OPERATION_RE = re.compile(r'\b(?:query|mutation)\s+(\w+)')

@dataclass
class FakeRef:
    id: str
    name: str
    oid: str

@dataclass
class FakePullRequestData:
    """Database record for a pull request."""
    id: str
    number: int
    title: str
    body: str
    base_ref: str
    head_ref: str
    state: str = "open"
    mergeable: str = "MERGEABLE"

@dataclass
class FakeCommitRecord:
    oid: str
    branch: str
    parent: str
    headline: str
    body: Optional[str]
    additions: List[Dict[str, str]]

    def file(self, path: str) -> bytes:
        for addition in self.additions:
            if addition["path"] == path:
                return base64.b64decode(addition["contents"])
        raise KeyError(path)

@dataclass
class FakePullRequest:
    """API response object for a pull request."""
    data_record: FakePullRequestData

    @property
    def number(self) -> int:
        return self.data_record.number

class FakeRepository:
    """Fake implementation of the Repository class from PyGithub."""
    def __init__(self, github: 'FakeGithub'):
        self.github = github

    def create_pull(self, title: str, body: str, base: str, head: str,
                    maintainer_can_modify: bool = True, draft: bool = False) -> FakePullRequest:
        self.github.calls.append("create_pull")
        if head not in self.github.refs:
            raise RuntimeError(f"Head ref {head} does not exist")
        for pr in self.github.pull_requests:
            if pr.state == "open" and pr.head_ref == head and pr.base_ref == base:
                raise RuntimeError(f"A pull request already exists for {head}")
        data = FakePullRequestData(
            id=f"PR_{self.github.next_pr_number}",
            number=self.github.next_pr_number,
            title=title,
            body=body,
            base_ref=base,
            head_ref=head,
        )
        self.github.next_pr_number += 1
        self.github.pull_requests.append(data)
        return FakePullRequest(data)

class FakeRequester:
    """Answers GraphQL requests from FakeGithub state."""
    def __init__(self, github: 'FakeGithub'):
        self.github = github

    def requestJsonAndCheck(self, verb: str, url: str, parameters: Optional[Dict[str, object]] = None,
                            headers: Optional[Dict[str, str]] = None,
                            input: Optional[Dict[str, Any]] = None) -> Tuple[Dict[str, object], Dict[str, Any]]:
        assert verb == "POST"
        assert input is not None
        match = OPERATION_RE.search(input["query"])
        assert match is not None, "GraphQL document without an operation name"
        operation = match.group(1)
        variables: Dict[str, Any] = input.get("variables") or {}
        self.github.calls.append(operation)
        self.github.requests.append((url, operation, variables))
        handler = getattr(self, f"_{operation}")
        try:
            return {}, {"data": handler(variables)}
        except FakeGraphQLError as e:
            return {}, {"data": None, "errors": [{"message": str(e)}]}

    # Queries

    def _repository(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        gh = self.github
        if (variables["repositoryOwner"], variables["repositoryName"]) != (gh.owner, gh.name):
            raise FakeGraphQLError(f"Could not resolve to a Repository with the name "
                                   f"'{variables['repositoryOwner']}/{variables['repositoryName']}'.")
        return {
            "id": gh.repository_id,
            "defaultBranchRef": {"name": gh.default_branch, "target": {"oid": gh.default_oid}},
        }

    def _ref(self, qualified_name: str) -> Optional[Dict[str, Any]]:
        branch = qualified_name[len("refs/heads/"):]
        ref = self.github.refs.get(branch)
        if ref is None:
            return None
        return {"id": ref.id, "name": ref.name, "target": {"oid": ref.oid}}

    def _pull_requests(self, head: str, base: Optional[str] = None) -> Dict[str, Any]:
        nodes = []
        for pr in self.github.pull_requests:
            if pr.state != "open" or pr.head_ref != head:
                continue
            if base is not None and pr.base_ref != base:
                continue
            nodes.append({
                "id": pr.id,
                "number": pr.number,
                "mergeable": pr.mergeable,
                "baseRefName": pr.base_ref,
                "headRefName": pr.head_ref,
            })
        return {"nodes": nodes}

    def _LoadInitialData(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        repository = self._repository(variables)
        repository["ref"] = self._ref(variables["qualifiedName"])
        repository["pullRequests"] = self._pull_requests(variables["headRefName"])
        return {"repository": repository}

    def _GetRepositoryData(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        return {"repository": self._repository(variables)}

    def _GetExistingBranch(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        repository = self._repository(variables)
        repository["ref"] = self._ref(variables["qualifiedName"])
        return {"repository": repository}

    def _ListAlreadyOpenPullRequests(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        repository = self._repository(variables)
        repository["pullRequests"] = self._pull_requests(variables["headRefName"], variables["baseRefName"])
        return {"repository": repository}

    # Mutations

    def _find_ref(self, ref_id: str) -> FakeRef:
        for ref in self.github.refs.values():
            if ref.id == ref_id:
                return ref
        raise FakeGraphQLError(f"Could not resolve to a node with the global id of '{ref_id}'")

    def _CreateRef(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        if variables["repositoryId"] != self.github.repository_id:
            raise FakeGraphQLError("Repository not found")
        name = variables["name"]
        assert name.startswith("refs/heads/")
        branch = name[len("refs/heads/"):]
        if branch in self.github.refs:
            raise FakeGraphQLError(f"A ref named \"{name}\" already exists in the repository.")
        ref = self.github.add_ref(branch, variables["oid"])
        return {"createRef": {"ref": {"id": ref.id, "name": ref.name}}}

    def _DeleteRef(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        ref = self._find_ref(variables["refId"])
        del self.github.refs[ref.name]
        for pr in self.github.pull_requests:
            if pr.head_ref == ref.name:
                pr.state = "closed"
        return {"deleteRef": {"clientMutationId": None}}

    def _UpdateRef(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        ref = self._find_ref(variables["refId"])
        if not variables["force"]:
            raise FakeGraphQLError("Only force updates are supported by the fake")
        ref.oid = variables["oid"]
        return {"updateRef": {"ref": {"id": ref.id, "name": ref.name}}}

    def _CreateCommitOnBranch(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        gh = self.github
        if variables["githubRepository"] != f"{gh.owner}/{gh.name}":
            raise FakeGraphQLError("Repository not found")
        ref = gh.refs.get(variables["branchName"])
        if ref is None:
            raise FakeGraphQLError(f"Branch {variables['branchName']} not found")
        if ref.oid != variables["expectedHeadOid"]:
            raise FakeGraphQLError(
                f"Expected branch to point to \"{variables['expectedHeadOid']}\" but it did not. Pull and try again.")
        oid = hashlib.sha1(f"{ref.oid}:{len(gh.commits)}".encode()).hexdigest()
        gh.commits.append(FakeCommitRecord(
            oid=oid,
            branch=ref.name,
            parent=ref.oid,
            headline=variables["commitHeadline"],
            body=variables.get("commitBody"),
            additions=list(variables["fileChanges"].get("additions", [])),
        ))
        ref.oid = oid
        return {"createCommitOnBranch": {"commit": {"oid": oid}}}

class FakeGraphQLError(Exception):
    pass

@dataclass
class FakeGithub:
    """Fake implementation of the Github class from PyGithub."""
    owner: str = "octo"
    name: str = "app"
    repository_id: str = "R_kgDOtest"
    default_branch: str = "main"
    default_oid: str = START_SHA
    refs: Dict[str, FakeRef] = field(default_factory=dict)
    pull_requests: List[FakePullRequestData] = field(default_factory=list)
    commits: List[FakeCommitRecord] = field(default_factory=list)
    calls: List[str] = field(default_factory=list)
    requests: List[Tuple[str, str, Dict[str, Any]]] = field(default_factory=list)
    next_pr_number: int = 1
    next_ref_number: int = 1

    def __post_init__(self) -> None:
        if self.default_branch not in self.refs:
            self.add_ref(self.default_branch, self.default_oid)

    def add_ref(self, branch: str, oid: str) -> FakeRef:
        ref = FakeRef(id=f"REF_{self.next_ref_number}", name=branch, oid=oid)
        self.next_ref_number += 1
        self.refs[branch] = ref
        return ref

    def add_pull_request(self, head: str, mergeable: str = "MERGEABLE", base: Optional[str] = None) -> FakePullRequestData:
        data = FakePullRequestData(
            id=f"PR_{self.next_pr_number}",
            number=self.next_pr_number,
            title=f"Update deps ({head})",
            body="",
            base_ref=base or self.default_branch,
            head_ref=head,
            mergeable=mergeable,
        )
        self.next_pr_number += 1
        self.pull_requests.append(data)
        return data

    def get_repo(self, full_name_or_id: str) -> FakeRepository:
        if full_name_or_id != f"{self.owner}/{self.name}":
            raise RuntimeError(f"Unknown repository {full_name_or_id}")
        return FakeRepository(self)

    @property
    def requester(self) -> FakeRequester:
        return FakeRequester(self)

    @property
    def mutations(self) -> List[str]:
        return [c for c in self.calls if c in ("CreateRef", "DeleteRef", "UpdateRef", "CreateCommitOnBranch", "create_pull")]
