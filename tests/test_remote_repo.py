from __future__ import annotations

from typing import Any

import pytest

from github_signer.errors import ConcurrencyConflictError, RemoteCallError
from github_signer.models import (
    BranchRef,
    CommitRequest,
    FileChange,
    PullRequestRequest,
    RepositoryRef,
)
from github_signer.remote_repo import (
    CREATE_COMMIT_ON_BRANCH,
    CREATE_PULL_REQUEST,
    CREATE_REF,
    RESOLVE_DEFAULT_BRANCH,
    RESOLVE_NAMED_BRANCH,
    GithubRemote,
)

REPO = RepositoryRef(owner="org", name="repo")


class _Client:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict]] = []

    def execute(self, stage: str, document: str, variables: dict) -> dict:
        self.calls.append((stage, document, variables))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_resolve_uses_default_branch_ref() -> None:
    client = _Client(
        {
            "repository": {
                "id": "R_1",
                "defaultBranchRef": {"name": "main", "target": {"oid": "main-tip"}},
            }
        }
    )

    state = GithubRemote(client).resolve(REPO)

    assert state.repository_id == "R_1"
    assert state.default_branch_name == "main"
    assert state.default_branch_tip_oid == "main-tip"
    stage, document, variables = client.calls[0]
    assert document == RESOLVE_DEFAULT_BRANCH
    assert variables == {"owner": "org", "name": "repo"}


def test_resolve_with_explicit_base_branch() -> None:
    client = _Client(
        {"repository": {"id": "R_1", "ref": {"name": "develop", "target": {"oid": "d"}}}}
    )

    state = GithubRemote(client).resolve(REPO, base_branch="develop")

    assert state.default_branch_name == "develop"
    assert state.default_branch_tip_oid == "d"
    _, document, variables = client.calls[0]
    assert document == RESOLVE_NAMED_BRANCH
    assert variables["qualifiedName"] == "refs/heads/develop"


def test_resolve_fails_when_repository_missing() -> None:
    with pytest.raises(RemoteCallError, match="resolve repository failed"):
        GithubRemote(_Client({"repository": None})).resolve(REPO)


def test_resolve_fails_for_empty_repository() -> None:
    client = _Client({"repository": {"id": "R_1", "defaultBranchRef": None}})
    with pytest.raises(RemoteCallError, match="unable to lookup oid"):
        GithubRemote(client).resolve(REPO)


def test_branch_exists_true_for_non_empty_ref_name() -> None:
    client = _Client(
        {"repository": {"ref": {"name": "feature-x", "target": {"oid": "T"}}}}
    )
    remote = GithubRemote(client)

    assert remote.find_branch(REPO, "feature-x") == BranchRef(name="feature-x", oid="T")
    assert client.calls[0][2]["branchName"] == "refs/heads/feature-x"


@pytest.mark.parametrize("ref", [None, {"name": ""}])
def test_branch_exists_false_for_unknown_branch(ref: Any) -> None:
    remote = GithubRemote(_Client({"repository": {"ref": ref}}))
    assert remote.branch_exists(REPO, "unknown") is False


def test_create_branch_sends_qualified_ref_and_base_oid() -> None:
    client = _Client({"createRef": {"ref": {"name": "feature-x"}}})

    GithubRemote(client).create_branch("R_1", "feature-x", "main-tip")

    stage, document, variables = client.calls[0]
    assert stage == "create branch"
    assert document == CREATE_REF
    assert variables == {
        "input": {"repositoryId": "R_1", "name": "refs/heads/feature-x", "oid": "main-tip"}
    }


def test_create_commit_builds_additions_and_expected_head() -> None:
    client = _Client(
        {"createCommitOnBranch": {"commit": {"url": "https://x/commit/1", "oid": "c1"}}}
    )
    request = CommitRequest(
        repository=REPO,
        branch="feature-x",
        message="update files",
        changes=(FileChange("a.txt", "YQ=="), FileChange("b.txt", "Yg==")),
        expected_head_oid="main-tip",
    )

    result = GithubRemote(client).create_commit(request)

    assert result.url == "https://x/commit/1"
    assert result.oid == "c1"
    _, document, variables = client.calls[0]
    assert document == CREATE_COMMIT_ON_BRANCH
    assert variables["input"] == {
        "branch": {"repositoryNameWithOwner": "org/repo", "branchName": "feature-x"},
        "message": {"headline": "update files"},
        "fileChanges": {
            "additions": [
                {"path": "a.txt", "contents": "YQ=="},
                {"path": "b.txt", "contents": "Yg=="},
            ]
        },
        "expectedHeadOid": "main-tip",
    }


def test_create_commit_propagates_conflict() -> None:
    conflict = ConcurrencyConflictError("commit", "Expected branch to point to")
    request = CommitRequest(REPO, "feature-x", "m", (FileChange("a", "YQ=="),), "old")

    with pytest.raises(ConcurrencyConflictError):
        GithubRemote(_Client(conflict)).create_commit(request)


def test_open_pull_request() -> None:
    client = _Client(
        {"createPullRequest": {"pullRequest": {"id": "PR_1", "url": "https://x/pull/1"}}}
    )

    pr = GithubRemote(client).open_pull_request(
        PullRequestRequest(repository_id="R_1", base="main", head="feature-x", title="t")
    )

    assert pr.id == "PR_1"
    assert pr.url == "https://x/pull/1"
    _, document, variables = client.calls[0]
    assert document == CREATE_PULL_REQUEST
    assert variables["input"] == {
        "repositoryId": "R_1",
        "baseRefName": "main",
        "headRefName": "feature-x",
        "title": "t",
    }
