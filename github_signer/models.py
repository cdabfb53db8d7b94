from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple


class ChangeKind(str, enum.Enum):
    UNMODIFIED = "unmodified"
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    UNTRACKED = "untracked"


@dataclass(frozen=True)
class FileStatus:
    staged: ChangeKind = ChangeKind.UNMODIFIED
    unstaged: ChangeKind = ChangeKind.UNMODIFIED


@dataclass(frozen=True)
class FileChange:
    """A single file addition; ``contents`` is base64 encoded."""

    path: str
    contents: str


ChangeSet = Tuple[FileChange, ...]


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    name: str

    @property
    def name_with_owner(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.name_with_owner


@dataclass(frozen=True)
class RemoteRepositoryState:
    repository_id: str
    default_branch_name: str
    default_branch_tip_oid: str


@dataclass(frozen=True)
class BranchRef:
    name: str
    oid: str


@dataclass(frozen=True)
class BranchTarget:
    name: str
    base_oid: str


@dataclass(frozen=True)
class CommitRequest:
    repository: RepositoryRef
    branch: str
    message: str
    changes: ChangeSet
    expected_head_oid: str


@dataclass(frozen=True)
class CommitResult:
    url: str
    oid: Optional[str] = None


@dataclass(frozen=True)
class PullRequestRequest:
    repository_id: str
    base: str
    head: str
    title: str


@dataclass(frozen=True)
class PullRequest:
    id: str
    url: Optional[str] = None
