from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

from .config import SignerConfig
from .models import (
    BranchRef,
    BranchTarget,
    ChangeSet,
    CommitResult,
    FileStatus,
    PullRequest,
    RemoteRepositoryState,
    RepositoryRef,
)
from .reference_store import LocalReferenceStore
from .remote_repo import GithubRemote

DEFAULT_MESSAGE = "updated with github-signer"


class StatusProvider(Protocol):
    root: object

    def status(self) -> dict[str, FileStatus]: ...


@dataclass
class SignerState:
    repository: RepositoryRef
    branch: str
    message: str = DEFAULT_MESSAGE
    open_pull_request: bool = False
    changes: ChangeSet = ()
    remote: Optional[RemoteRepositoryState] = None
    existing_branch: Optional[BranchRef] = None
    target: Optional[BranchTarget] = None
    created_branch: bool = False
    commit: Optional[CommitResult] = None
    pull_request: Optional[PullRequest] = None


@dataclass
class SignerDeps:
    remote: GithubRemote
    working_tree: StatusProvider
    references: Optional[LocalReferenceStore] = None
    config: SignerConfig = field(default_factory=SignerConfig)


@dataclass(frozen=True)
class SignResult:
    branch: str
    committed: bool
    created_branch: bool = False
    expected_head_oid: Optional[str] = None
    commit_url: Optional[str] = None
    pull_request: Optional[PullRequest] = None

    @classmethod
    def from_state(cls, state: SignerState) -> "SignResult":
        return cls(
            branch=state.branch,
            committed=state.commit is not None,
            created_branch=state.created_branch,
            expected_head_oid=state.target.base_oid if state.target else None,
            commit_url=state.commit.url if state.commit else None,
            pull_request=state.pull_request,
        )
