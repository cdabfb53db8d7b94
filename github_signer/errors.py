"""Errors raised while pushing a signed commit.

Every failure that ends a run derives from :class:`SignerError` so the CLI
can report it as a single diagnostic line.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class SignerError(RuntimeError):
    """Base class for fatal run errors."""


class RepositoryIdentifierError(SignerError, ValueError):
    """Raised when a repository identifier is not of the form owner/name."""


class FileReadError(SignerError):
    """Raised when a changed file cannot be read from the working tree."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"unable to read {path}: {reason}")
        self.path = path


class ReferenceLookupError(SignerError):
    """Raised when a local tracking reference cannot be refreshed or found."""


class RemoteCallError(SignerError):
    """Raised when a GraphQL query or mutation fails."""

    def __init__(
        self,
        stage: str,
        message: str,
        errors: Optional[Sequence[Any]] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(f"{stage} failed: {message}")
        self.stage = stage
        self.errors = list(errors or [])
        self.status = status


class ConcurrencyConflictError(RemoteCallError):
    """Raised when the branch tip moved away from the expected head oid."""
