from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import requests
from github import Auth, Github
from github.GithubException import GithubException

from .config import SignerConfig
from .errors import ConcurrencyConflictError, RemoteCallError

logger = logging.getLogger(__name__)

_STALE_MARKER = "expected branch to point to"


def _error_messages(errors: Sequence[Any]) -> str:
    messages = []
    for err in errors:
        if isinstance(err, Mapping):
            messages.append(str(err.get("message") or err))
        else:
            messages.append(str(err))
    return "; ".join(messages)


def _is_stale(errors: Sequence[Any]) -> bool:
    for err in errors:
        if not isinstance(err, Mapping):
            continue
        if str(err.get("type") or "").upper() == "STALE_DATA":
            return True
        if _STALE_MARKER in str(err.get("message") or "").lower():
            return True
    return False


def remote_error(
    stage: str, payload: Any, status: Optional[int] = None
) -> RemoteCallError:
    errors: list[Any] = []
    message = ""
    if isinstance(payload, Mapping):
        errors = list(payload.get("errors") or [])
        message = _error_messages(errors) or str(payload.get("message") or "")
    elif payload:
        message = str(payload)
    if not message:
        message = f"HTTP {status}" if status else "unknown error"
    if _is_stale(errors) or _STALE_MARKER in message.lower():
        return ConcurrencyConflictError(stage, message, errors, status)
    return RemoteCallError(stage, message, errors, status)


class GraphQLClient:
    """Single authenticated GraphQL endpoint shared by every round trip."""

    def __init__(self, requester: Any) -> None:
        self._requester = requester

    @classmethod
    def from_config(cls, config: SignerConfig) -> "GraphQLClient":
        if not config.token:
            logger.warning("GITHUB_TOKEN not set; remote calls will be unauthenticated")
        gh = Github(
            auth=Auth.Token(config.token) if config.token else None,
            base_url=config.api_url,
            timeout=config.timeout_seconds,
            retry=None,
        )
        return cls(gh.requester)

    def execute(
        self, stage: str, document: str, variables: Dict[str, Any]
    ) -> Dict[str, Any]:
        try:
            _headers, payload = self._requester.graphql_query(document, variables)
        except GithubException as exc:
            raise remote_error(stage, exc.data, exc.status) from exc
        except requests.exceptions.RequestException as exc:
            raise RemoteCallError(stage, str(exc) or type(exc).__name__) from exc
        if not isinstance(payload, Mapping):
            raise RemoteCallError(stage, f"unexpected response: {payload!r}")
        if payload.get("errors"):
            raise remote_error(stage, payload)
        data = payload["data"] if "data" in payload else payload
        return dict(data or {})
