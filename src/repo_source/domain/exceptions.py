"""Domain exception hierarchy.

Every failure the virtual filesystem can report is one of these.  Each layer
raises only the kinds it can detect locally and never swallows or retries an
error from the layer below; the interface layer maps them to HTTP statuses.
"""

from __future__ import annotations

from datetime import datetime


class RepoSourceError(Exception):
    """Base exception for the entire package."""


# ── Path validation ─────────────────────────────────────────────────────────


class InvalidPathError(RepoSourceError):
    """The path escapes the repository root or is otherwise malformed."""


# ── Remote transport errors ─────────────────────────────────────────────────


class EntryNotFoundError(RepoSourceError):
    """The path does not exist at the requested revision (404)."""


class AccessDeniedError(RepoSourceError):
    """Bad or insufficient credential (401 / 403)."""


class RateLimitedError(AccessDeniedError):
    """Access denied because the rate-limit quota is exhausted (429 / 403 with rate-limit header)."""

    def __init__(
        self,
        message: str,
        reset_at: datetime | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        self.reset_at = reset_at
        self.retry_after = retry_after


class TransientFailureError(RepoSourceError):
    """Network failure, timeout, malformed transport response, or any 5xx."""


class UnclassifiedRemoteError(RepoSourceError):
    """The remote answered with a status none of the other kinds covers."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# ── Decoding errors ─────────────────────────────────────────────────────────


class CorruptContentError(RepoSourceError):
    """The response body could not be decoded into an entry."""


class ContentTooLargeError(RepoSourceError):
    """The remote declined to inline the file content."""


# ── Access errors ───────────────────────────────────────────────────────────


class UnsupportedEntryKindError(RepoSourceError):
    """The entry exists but cannot be read the way the caller asked."""


class ReadonlyError(RepoSourceError):
    """A write, append, create or truncate was attempted on the read-only filesystem."""
