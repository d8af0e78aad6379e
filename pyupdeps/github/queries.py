"""GraphQL documents sent to the GitHub API."""

LOAD_INITIAL_DATA = """
query LoadInitialData($repositoryOwner: String!, $repositoryName: String!, $qualifiedName: String!, $headRefName: String!) {
  repository(owner: $repositoryOwner, name: $repositoryName) {
    id
    defaultBranchRef {
      name
      target {
        oid
      }
    }
    ref(qualifiedName: $qualifiedName) {
      id
      name
      target {
        oid
      }
    }
    pullRequests(first: 100, states: OPEN, headRefName: $headRefName) {
      nodes {
        id
        number
        mergeable
        baseRefName
        headRefName
      }
    }
  }
}
"""

GET_REPOSITORY_DATA = """
query GetRepositoryData($repositoryOwner: String!, $repositoryName: String!) {
  repository(owner: $repositoryOwner, name: $repositoryName) {
    id
    defaultBranchRef {
      name
      target {
        oid
      }
    }
  }
}
"""

GET_EXISTING_BRANCH = """
query GetExistingBranch($repositoryOwner: String!, $repositoryName: String!, $qualifiedName: String!) {
  repository(owner: $repositoryOwner, name: $repositoryName) {
    id
    ref(qualifiedName: $qualifiedName) {
      id
      name
      target {
        oid
      }
    }
  }
}
"""

LIST_OPEN_PULL_REQUESTS = """
query ListAlreadyOpenPullRequests($repositoryOwner: String!, $repositoryName: String!, $baseRefName: String!, $headRefName: String!) {
  repository(owner: $repositoryOwner, name: $repositoryName) {
    id
    pullRequests(first: 100, states: OPEN, baseRefName: $baseRefName, headRefName: $headRefName) {
      nodes {
        id
        number
        mergeable
        baseRefName
        headRefName
      }
    }
  }
}
"""

CREATE_REF = """
mutation CreateRef($repositoryId: ID!, $name: String!, $oid: GitObjectID!) {
  createRef(input: {repositoryId: $repositoryId, name: $name, oid: $oid}) {
    ref {
      id
      name
    }
  }
}
"""

DELETE_REF = """
mutation DeleteRef($refId: ID!) {
  deleteRef(input: {refId: $refId}) {
    clientMutationId
  }
}
"""

UPDATE_REF = """
mutation UpdateRef($refId: ID!, $oid: GitObjectID!, $force: Boolean!) {
  updateRef(input: {refId: $refId, oid: $oid, force: $force}) {
    ref {
      id
      name
    }
  }
}
"""

CREATE_COMMIT_ON_BRANCH = """
mutation CreateCommitOnBranch($githubRepository: String!, $branchName: String!, $expectedHeadOid: GitObjectID!, $commitHeadline: String!, $commitBody: String, $fileChanges: FileChanges!) {
  createCommitOnBranch(input: {
    branch: {repositoryNameWithOwner: $githubRepository, branchName: $branchName},
    expectedHeadOid: $expectedHeadOid,
    message: {headline: $commitHeadline, body: $commitBody},
    fileChanges: $fileChanges
  }) {
    commit {
      oid
    }
  }
}
"""
