"""GitHubFs — read-only virtual filesystem over a remote GitHub repository.

Every ``open`` runs one independent pipeline::

    resolve(path) → ContentsClient.fetch → decode → FileHandle

Errors from each stage propagate unchanged.  Write intent is rejected before
any path resolution or network traffic.
"""

from __future__ import annotations

import logging

import httpx

from repo_source.domain.entities import Entry
from repo_source.domain.ports.contents_client import ContentsClient
from repo_source.domain.value_objects import RepositoryCoordinates
from repo_source.infrastructure.config import Settings
from repo_source.infrastructure.github_contents_client import GITHUB_API, GitHubContentsClient
from repo_source.infrastructure.retrying_client import RetryingContentsClient
from repo_source.services.entry_cache import EntryCache
from repo_source.services.entry_decoder import decode
from repo_source.services.read_only_fs import ReadOnlyFs

logger = logging.getLogger(__name__)


class GitHubFs(ReadOnlyFs):
    """Concrete ``SourceFs`` backed by the GitHub contents API.

    Parameters
    ----------
    coordinates:
        Repository (and optional revision) every call targets.
    client:
        Fetches one remote path per call; usually a :class:`GitHubContentsClient`,
        optionally wrapped in a :class:`RetryingContentsClient`.
    cache:
        Optional read-through entry cache shared by all calls on this instance.
    """

    def __init__(
        self,
        coordinates: RepositoryCoordinates,
        client: ContentsClient,
        cache: EntryCache | None = None,
    ) -> None:
        self._coordinates = coordinates
        self._client = client
        self._cache = cache

    @classmethod
    def connect(
        cls,
        http_client: httpx.AsyncClient,
        owner: str,
        name: str,
        credential: str | None = None,
        revision: str | None = None,
        *,
        api_url: str = GITHUB_API,
        cache: EntryCache | None = None,
    ) -> GitHubFs:
        """Build an adapter with a plain single-attempt client."""
        coordinates = RepositoryCoordinates(
            owner=owner, name=name, revision=revision, credential=credential
        )
        client = GitHubContentsClient(http_client, coordinates, api_url=api_url)
        return cls(coordinates, client, cache=cache)

    @classmethod
    def from_settings(
        cls,
        http_client: httpx.AsyncClient,
        coordinates: RepositoryCoordinates,
        settings: Settings,
    ) -> GitHubFs:
        """Wire client, retry wrapper and cache the way *settings* describes."""
        client: ContentsClient = GitHubContentsClient(
            http_client, coordinates, api_url=settings.github_api_url
        )
        if settings.retry_max_tries > 1:
            client = RetryingContentsClient(
                client,
                max_tries=settings.retry_max_tries,
                max_time=settings.retry_max_time_seconds,
            )
        cache = None
        if settings.cache_enabled:
            cache = EntryCache(
                max_entries=settings.cache_max_entries,
                ttl_seconds=settings.cache_ttl_seconds,
            )
        logger.info(
            "GitHubFs for %s (ref=%s, authenticated=%s, cache=%s)",
            coordinates.full_name,
            coordinates.revision or "<default>",
            bool(coordinates.credential),
            cache is not None,
        )
        return cls(coordinates, client, cache=cache)

    @property
    def coordinates(self) -> RepositoryCoordinates:
        return self._coordinates

    async def _load(self, resolved_path: str) -> Entry:
        if self._cache is not None:
            cached = self._cache.get(resolved_path)
            if cached is not None:
                return cached

        raw = await self._client.fetch(resolved_path)
        entry = decode(resolved_path, raw)

        if self._cache is not None:
            self._cache.put(resolved_path, entry)
        return entry
