"""GraphQL round trips against the hosting service.

Each method is one request. Failures surface as ``RemoteCallError`` tagged
with the stage name; nothing here retries.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .errors import RemoteCallError
from .graphql_client import GraphQLClient
from .models import (
    BranchRef,
    CommitRequest,
    CommitResult,
    PullRequest,
    PullRequestRequest,
    RemoteRepositoryState,
    RepositoryRef,
)

logger = logging.getLogger(__name__)

RESOLVE_DEFAULT_BRANCH = """
query($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    id
    defaultBranchRef { name target { oid } }
  }
}
"""

RESOLVE_NAMED_BRANCH = """
query($owner: String!, $name: String!, $qualifiedName: String!) {
  repository(owner: $owner, name: $name) {
    id
    ref(qualifiedName: $qualifiedName) { name target { oid } }
  }
}
"""

FIND_BRANCH = """
query($owner: String!, $name: String!, $branchName: String!) {
  repository(owner: $owner, name: $name) {
    ref(qualifiedName: $branchName) { name target { oid } }
  }
}
"""

CREATE_REF = """
mutation($input: CreateRefInput!) {
  createRef(input: $input) { ref { name target { oid } } }
}
"""

CREATE_COMMIT_ON_BRANCH = """
mutation($input: CreateCommitOnBranchInput!) {
  createCommitOnBranch(input: $input) { commit { url oid } }
}
"""

CREATE_PULL_REQUEST = """
mutation($input: CreatePullRequestInput!) {
  createPullRequest(input: $input) { pullRequest { id url } }
}
"""


def qualified_branch(branch: str) -> str:
    return f"refs/heads/{branch}"


def _repository(data: Dict[str, Any], stage: str, repo: RepositoryRef) -> Dict[str, Any]:
    repository = data.get("repository")
    if not repository:
        raise RemoteCallError(stage, f"repository {repo} not found")
    return repository


def _ref_target_oid(ref: Optional[Dict[str, Any]]) -> Optional[str]:
    if not ref:
        return None
    target = ref.get("target") or {}
    return target.get("oid")


class GithubRemote:
    def __init__(self, client: GraphQLClient) -> None:
        self.client = client

    def resolve(
        self, repo: RepositoryRef, base_branch: Optional[str] = None
    ) -> RemoteRepositoryState:
        """Look up the repository id and the tip of the branch new work forks from.

        Without ``base_branch`` the repository's configured default branch is used.
        """
        stage = "resolve repository"
        variables: Dict[str, Any] = {"owner": repo.owner, "name": repo.name}
        if base_branch:
            variables["qualifiedName"] = qualified_branch(base_branch)
            data = self.client.execute(stage, RESOLVE_NAMED_BRANCH, variables)
            repository = _repository(data, stage, repo)
            ref = repository.get("ref")
        else:
            data = self.client.execute(stage, RESOLVE_DEFAULT_BRANCH, variables)
            repository = _repository(data, stage, repo)
            ref = repository.get("defaultBranchRef")

        oid = _ref_target_oid(ref)
        if not oid:
            missing = base_branch or "default branch"
            raise RemoteCallError(stage, f"unable to lookup oid of {missing} in {repo}")
        state = RemoteRepositoryState(
            repository_id=str(repository["id"]),
            default_branch_name=str(ref.get("name") or base_branch),
            default_branch_tip_oid=str(oid),
        )
        logger.info(
            "[resolve] %s base branch %s at %s",
            repo,
            state.default_branch_name,
            state.default_branch_tip_oid,
        )
        return state

    def find_branch(self, repo: RepositoryRef, branch: str) -> Optional[BranchRef]:
        stage = "lookup branch"
        data = self.client.execute(
            stage,
            FIND_BRANCH,
            {
                "owner": repo.owner,
                "name": repo.name,
                "branchName": qualified_branch(branch),
            },
        )
        ref = _repository(data, stage, repo).get("ref")
        if ref and ref.get("name"):
            logger.info("[branch] branch found: %s", ref["name"])
            return BranchRef(name=ref["name"], oid=_ref_target_oid(ref) or "")
        logger.info("[branch] a branch with the name %s was not found", branch)
        return None

    def branch_exists(self, repo: RepositoryRef, branch: str) -> bool:
        return self.find_branch(repo, branch) is not None

    def create_branch(self, repository_id: str, branch: str, base_oid: str) -> None:
        self.client.execute(
            "create branch",
            CREATE_REF,
            {
                "input": {
                    "repositoryId": repository_id,
                    "name": qualified_branch(branch),
                    "oid": base_oid,
                }
            },
        )
        logger.info("[branch] %s branch created at %s", branch, base_oid)

    def create_commit(self, request: CommitRequest) -> CommitResult:
        """Create one commit on ``request.branch`` from the change set.

        The service rejects the mutation when the branch tip is not
        ``request.expected_head_oid``; that surfaces as ConcurrencyConflictError.
        """
        data = self.client.execute(
            "commit",
            CREATE_COMMIT_ON_BRANCH,
            {
                "input": {
                    "branch": {
                        "repositoryNameWithOwner": request.repository.name_with_owner,
                        "branchName": request.branch,
                    },
                    "message": {"headline": request.message},
                    "fileChanges": {
                        "additions": [
                            {"path": c.path, "contents": c.contents}
                            for c in request.changes
                        ]
                    },
                    "expectedHeadOid": request.expected_head_oid,
                }
            },
        )
        commit = (data.get("createCommitOnBranch") or {}).get("commit") or {}
        result = CommitResult(url=str(commit.get("url") or ""), oid=commit.get("oid"))
        logger.info("[commit] mutation complete: %s", result.url)
        return result

    def open_pull_request(self, request: PullRequestRequest) -> PullRequest:
        data = self.client.execute(
            "create pull request",
            CREATE_PULL_REQUEST,
            {
                "input": {
                    "repositoryId": request.repository_id,
                    "baseRefName": request.base,
                    "headRefName": request.head,
                    "title": request.title,
                }
            },
        )
        pr = (data.get("createPullRequest") or {}).get("pullRequest") or {}
        result = PullRequest(id=str(pr.get("id") or ""), url=pr.get("url"))
        logger.info(
            "[pr] pull request created %s -> %s %s",
            request.head,
            request.base,
            result.url or result.id,
        )
        return result
