"""Retry decorator around any ContentsClient.

The core client is single-attempt; this wrapper adds backoff for the two error
kinds where trying again can succeed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Generator

import backoff

from repo_source.domain.entities import RawResponse
from repo_source.domain.exceptions import RateLimitedError, TransientFailureError
from repo_source.domain.ports.contents_client import ContentsClient

logger = logging.getLogger(__name__)

RETRYABLE = (TransientFailureError, RateLimitedError)


class RetryingContentsClient:
    """Retries :class:`TransientFailureError` and :class:`RateLimitedError`.

    Transient failures back off exponentially with full jitter.  A rate limit
    that names its reset time (``reset_at`` or ``retry_after``) is retried once
    that time has passed, not before; one that resets further away than
    ``max_time`` is raised immediately, since waiting it out is the caller's
    decision.
    """

    def __init__(
        self,
        inner: ContentsClient,
        max_tries: int = 3,
        max_time: float = 30.0,
        base_delay: float = 1.0,
    ) -> None:
        if max_tries < 1:
            raise ValueError("max_tries must be at least 1")
        self._inner = inner
        self._max_tries = max_tries
        self._max_time = max_time
        self._base_delay = base_delay

    async def fetch(self, remote_path: str) -> RawResponse:
        @backoff.on_exception(
            _wait_for,
            RETRYABLE,
            max_tries=self._max_tries,
            max_time=self._max_time,
            giveup=self._give_up,
            on_backoff=_log_backoff,
            jitter=None,
            factor=self._base_delay,
        )
        async def _attempt() -> RawResponse:
            return await self._inner.fetch(remote_path)

        return await _attempt()

    def _give_up(self, exc: Exception) -> bool:
        wait = _rate_limit_wait(exc)
        return wait is not None and wait > self._max_time


def _rate_limit_wait(exc: BaseException | None) -> float | None:
    """Seconds until a rate limit lifts, when the error says so."""
    if not isinstance(exc, RateLimitedError):
        return None
    if exc.reset_at is not None:
        return max(0.0, (exc.reset_at - datetime.now(tz=timezone.utc)).total_seconds())
    return exc.retry_after


def _wait_for(factor: float = 1.0) -> Generator[float, BaseException | None, None]:
    """Backoff wait generator; backoff sends in the exception that triggered each wait."""
    attempt = 0
    exc = yield  # type: ignore[misc]
    while True:
        wait = _rate_limit_wait(exc)
        if wait is None:
            wait = backoff.full_jitter(factor * 2**attempt)
        attempt += 1
        exc = yield wait


def _log_backoff(details: Any) -> None:
    logger.warning(
        "Retrying contents fetch in %.2fs after attempt %d: %s",
        details["wait"],
        details["tries"],
        details.get("exception"),
    )
