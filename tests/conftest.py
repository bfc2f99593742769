"""Shared fixtures wired around the stub GitHub in :mod:`stubs`."""

from __future__ import annotations

import httpx
import pytest

from repo_source.domain.value_objects import RepositoryCoordinates
from repo_source.infrastructure.github_contents_client import GitHubContentsClient
from repo_source.infrastructure.github_fs import GitHubFs
from stubs import (
    APP_PY,
    NAME,
    OWNER,
    README,
    REQUIREMENTS,
    TOKEN,
    StubGitHub,
    listing_item,
)


@pytest.fixture
def coordinates() -> RepositoryCoordinates:
    return RepositoryCoordinates(owner=OWNER, name=NAME, credential=TOKEN)


@pytest.fixture
def github() -> StubGitHub:
    """A stub repository with a README, a source directory and a requirements file."""
    stub = StubGitHub()
    stub.add(
        "",
        [
            listing_item("src", "dir"),
            listing_item("README.md", "file", len(README)),
            listing_item("requirements.txt", "file", len(REQUIREMENTS)),
            listing_item("vendor", "submodule"),
        ],
    )
    stub.add("src", [listing_item("app.py", "file", len(APP_PY), parent="src")])
    stub.add_file("README.md", README)
    stub.add_file("requirements.txt", REQUIREMENTS)
    stub.add_file("src/app.py", APP_PY)
    stub.add(
        "vendor",
        {"type": "submodule", "size": 0, "name": "vendor", "path": "vendor",
         "submodule_git_url": "https://github.com/acme/vendor.git"},
    )
    return stub


@pytest.fixture
def http_client(github: StubGitHub) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=github.transport())


@pytest.fixture
def contents_client(
    http_client: httpx.AsyncClient, coordinates: RepositoryCoordinates
) -> GitHubContentsClient:
    return GitHubContentsClient(http_client, coordinates)


@pytest.fixture
def fs(coordinates: RepositoryCoordinates, contents_client: GitHubContentsClient) -> GitHubFs:
    return GitHubFs(coordinates, contents_client)
