from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, Optional

from dulwich import porcelain
from dulwich.repo import Repo

from .errors import ReferenceLookupError
from .git_urls import strip_auth_from_url, token_auth_github_url

logger = logging.getLogger(__name__)


def _remote_tracking_ref(branch: str) -> bytes:
    return f"refs/remotes/origin/{branch}".encode()


class LocalReferenceStore:
    """Remote-tracking refs of the local checkout, refreshable from origin."""

    def __init__(self, path: Path | str = ".", token: Optional[str] = None) -> None:
        self.repo = Repo.discover(str(path))
        self.token = token

    def origin_url(self) -> str:
        cfg = self.repo.get_config()
        try:
            url = cfg.get((b"remote", b"origin"), b"url")
        except KeyError as exc:
            raise ReferenceLookupError("repository has no origin remote") from exc
        return url.decode() if isinstance(url, bytes) else str(url)

    def _fetch_url(self) -> str:
        origin = self.origin_url()
        if self.token:
            token_url = token_auth_github_url(origin, self.token)
            if token_url:
                return token_url
        return origin

    def fetch(self) -> Dict[bytes, bytes]:
        """Fetch from origin and rewrite ``refs/remotes/origin/*`` from the result."""
        fetch_url = self._fetch_url()
        logger.info("[branch] fetching from %s", strip_auth_from_url(self.origin_url()))
        out = io.StringIO()
        err = io.BytesIO()
        result = porcelain.fetch(
            self.repo.path, fetch_url, outstream=out, errstream=err
        )
        remote_refs: Dict[bytes, bytes] = dict(getattr(result, "refs", result))

        # dulwich does not populate origin/* tracking refs when fetching by URL.
        written = 0
        for ref_name, sha in remote_refs.items():
            if not ref_name.startswith(b"refs/heads/") or sha is None:
                continue
            branch_name = ref_name[len(b"refs/heads/") :]
            self.repo.refs[b"refs/remotes/origin/" + branch_name] = sha
            written += 1
        logger.info("[branch] fetch updated %d origin/* tracking refs", written)
        return remote_refs

    def lookup(self, branch: str) -> str:
        ref = _remote_tracking_ref(branch)
        try:
            sha = self.repo.refs[ref]
        except KeyError as exc:
            raise ReferenceLookupError(
                f"unable to find HEAD for branch {branch}: {ref.decode()} missing"
            ) from exc
        return sha.decode("ascii") if isinstance(sha, bytes) else str(sha)
