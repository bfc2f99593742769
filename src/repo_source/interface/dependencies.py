"""FastAPI dependency injection wiring."""

from __future__ import annotations

from collections import OrderedDict

import httpx
from fastapi import HTTPException

from repo_source.domain.value_objects import RepositoryCoordinates
from repo_source.infrastructure.config import get_settings
from repo_source.infrastructure.github_fs import GitHubFs

_MAX_ADAPTERS = 64

_http_client: httpx.AsyncClient | None = None
_adapters: OrderedDict[tuple[str, str, str | None], GitHubFs] = OrderedDict()


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.request_timeout_seconds))


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client  # noqa: PLW0603

    _adapters.clear()
    if _http_client:
        await _http_client.aclose()
        _http_client = None


def get_fs(owner: str, repo: str, ref: str | None = None) -> GitHubFs:
    """Return a long-lived adapter per (owner, repo, ref) so its entry cache is reused."""
    assert _http_client is not None, "startup() was not called"

    key = (owner, repo, ref)
    adapter = _adapters.get(key)
    if adapter is not None:
        _adapters.move_to_end(key)
        return adapter

    settings = get_settings()
    try:
        coordinates = RepositoryCoordinates(
            owner=owner, name=repo, revision=ref, credential=settings.token
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    adapter = GitHubFs.from_settings(_http_client, coordinates, settings)
    _adapters[key] = adapter
    while len(_adapters) > _MAX_ADAPTERS:
        _adapters.popitem(last=False)
    return adapter
