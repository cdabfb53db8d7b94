from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Dict, Mapping, Union

from dulwich import porcelain
from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from .errors import FileReadError, SignerError
from .models import ChangeKind, ChangeSet, FileChange, FileStatus

logger = logging.getLogger(__name__)

_STAGED_KINDS = {
    "add": ChangeKind.ADDED,
    "modify": ChangeKind.MODIFIED,
    "delete": ChangeKind.DELETED,
}

PathLike = Union[str, bytes]


def _to_str(path: PathLike) -> str:
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="surrogateescape")
    return str(path)


def qualifies(status: FileStatus) -> bool:
    """Whether a path's status makes it part of the commit (deletions never do)."""
    return (
        status.unstaged == ChangeKind.MODIFIED
        or status.staged == ChangeKind.ADDED
        or status.staged == ChangeKind.MODIFIED
    )


class WorkingTree:
    def __init__(self, path: Path | str = ".") -> None:
        try:
            self.repo = Repo.discover(str(path))
        except NotGitRepository as exc:
            raise SignerError(f"unable to open repository: {exc}") from exc
        self.root = Path(self.repo.path)

    def status(self) -> Dict[str, FileStatus]:
        """Return ``path -> FileStatus`` for every path that is not clean."""
        raw = porcelain.status(self.repo)
        staged: Dict[str, ChangeKind] = {}
        for key, kind in _STAGED_KINDS.items():
            for path in raw.staged.get(key, []):
                staged[_to_str(path)] = kind

        unstaged: Dict[str, ChangeKind] = {}
        for path in raw.unstaged:
            name = _to_str(path)
            exists = (self.root / name).exists()
            unstaged[name] = ChangeKind.MODIFIED if exists else ChangeKind.DELETED

        result: Dict[str, FileStatus] = {}
        for name in set(staged) | set(unstaged):
            result[name] = FileStatus(
                staged=staged.get(name, ChangeKind.UNMODIFIED),
                unstaged=unstaged.get(name, ChangeKind.UNMODIFIED),
            )
        for path in raw.untracked:
            name = _to_str(path)
            result.setdefault(
                name,
                FileStatus(staged=ChangeKind.UNTRACKED, unstaged=ChangeKind.UNTRACKED),
            )
        return result


def collect_changes(status: Mapping[str, FileStatus], root: Path | str) -> ChangeSet:
    """Read and base64-encode every qualifying path, sorted by path.

    An empty tuple means there is nothing to commit.
    """
    root = Path(root)
    changes: list[FileChange] = []
    for name in sorted(p for p, s in status.items() if qualifies(s)):
        logger.info("[collect] adding %s", name)
        try:
            data = (root / name).read_bytes()
        except OSError as exc:
            raise FileReadError(name, exc.strerror or str(exc)) from exc
        changes.append(
            FileChange(path=name, contents=base64.b64encode(data).decode("ascii"))
        )
    if not changes:
        logger.info("[collect] no changes to commit")
    return tuple(changes)
