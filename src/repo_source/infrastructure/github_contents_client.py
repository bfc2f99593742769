"""GitHub REST contents client — implements the ContentsClient port."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import NoReturn
from urllib.parse import quote

import httpx

from repo_source.domain.entities import RawResponse
from repo_source.domain.exceptions import (
    AccessDeniedError,
    EntryNotFoundError,
    RateLimitedError,
    TransientFailureError,
    UnclassifiedRemoteError,
)
from repo_source.domain.value_objects import RepositoryCoordinates

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"


class GitHubContentsClient:
    """Single-attempt ``GET /repos/{owner}/{repo}/contents/{path}`` against the v3 REST API.

    No retries happen here: every call costs one request of rate-limit quota,
    and every non-200 outcome is raised as a classified transport error.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        coordinates: RepositoryCoordinates,
        api_url: str = GITHUB_API,
    ) -> None:
        self._client = client
        self._coordinates = coordinates
        self._base = f"{api_url.rstrip('/')}/repos/{coordinates.owner}/{coordinates.name}/contents"
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "repo-source/1.0",
        }
        if coordinates.credential:
            self._headers["Authorization"] = f"Bearer {coordinates.credential}"

    @property
    def coordinates(self) -> RepositoryCoordinates:
        return self._coordinates

    def url_for(self, remote_path: str) -> str:
        if not remote_path:
            return self._base
        return f"{self._base}/{quote(remote_path, safe='/')}"

    async def fetch(self, remote_path: str) -> RawResponse:
        """GET the contents of *remote_path* at the configured revision."""
        url = self.url_for(remote_path)
        params = {"ref": self._coordinates.revision} if self._coordinates.revision else None
        logger.debug("GET %s (ref=%s)", url, self._coordinates.revision or "<default>")
        try:
            resp = await self._client.get(
                url, headers=self._headers, params=params, follow_redirects=True
            )
        except httpx.TimeoutException as exc:
            raise TransientFailureError(f"Timed out fetching {url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransientFailureError(f"Network error fetching {url}: {exc}") from exc

        if resp.status_code == 200:
            return RawResponse(
                status_code=resp.status_code,
                body=resp.content,
                headers=dict(resp.headers),
            )

        self._raise_for_status(resp, remote_path)

    def _raise_for_status(self, resp: httpx.Response, remote_path: str) -> NoReturn:
        where = f"'{remote_path or '/'}' in {self._coordinates.full_name}"
        if self._coordinates.revision:
            where += f"@{self._coordinates.revision}"
        status = resp.status_code

        if status == 404:
            logger.debug("GitHub returned HTTP 404 for %s", where)
            raise EntryNotFoundError(f"Not found: {where}.")

        logger.warning("GitHub returned HTTP %d for %s", status, where)

        if status in (401, 403):
            if resp.headers.get("x-ratelimit-remaining", "") == "0":
                reset_at = _parse_reset(resp.headers.get("x-ratelimit-reset", ""))
                reset_str = reset_at.strftime("%Y-%m-%d %H:%M:%S UTC") if reset_at else "unknown"
                raise RateLimitedError(
                    f"GitHub API rate limit exceeded fetching {where}. Resets at {reset_str}.",
                    reset_at=reset_at,
                )
            if status == 403 and "retry-after" in resp.headers:
                raise RateLimitedError(
                    f"GitHub secondary rate limit hit fetching {where}. "
                    f"Retry after {resp.headers['retry-after']}s.",
                    retry_after=_parse_retry_after(resp.headers["retry-after"]),
                )
            raise AccessDeniedError(
                f"Access denied to {where}. The credential may be missing, "
                "invalid, or lack access to a private repository."
            )

        if status == 429:
            raise RateLimitedError(
                f"GitHub API rate limit exceeded (HTTP 429) fetching {where}.",
                retry_after=_parse_retry_after(resp.headers.get("retry-after", "")),
            )

        if status >= 500:
            raise TransientFailureError(f"GitHub API returned HTTP {status} for {where}.")

        raise UnclassifiedRemoteError(
            f"GitHub API returned HTTP {status} for {where}.", status_code=status
        )


def _parse_reset(raw: str) -> datetime | None:
    try:
        return datetime.fromtimestamp(int(raw), tz=timezone.utc)
    except (ValueError, OSError, OverflowError):
        return None


def _parse_retry_after(raw: str) -> float | None:
    try:
        seconds = float(raw)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None
