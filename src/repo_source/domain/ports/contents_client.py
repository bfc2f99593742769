"""Port: repository-contents client — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from repo_source.domain.entities import RawResponse


class ContentsClient(Protocol):
    """Abstract contract for fetching one path from a remote contents endpoint.

    Implementations make exactly one request per call and raise a transport
    error from :mod:`repo_source.domain.exceptions` on any non-success status.
    """

    async def fetch(self, remote_path: str) -> RawResponse:
        """Return the raw successful response for *remote_path* (``""`` is the root)."""
        ...
