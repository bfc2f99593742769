from __future__ import annotations

import asyncio
import os

import httpx
import pytest

from repo_source.domain.entities import ChildRef, EntryKind, FileEntry
from repo_source.domain.exceptions import (
    AccessDeniedError,
    ContentTooLargeError,
    CorruptContentError,
    EntryNotFoundError,
    InvalidPathError,
    ReadonlyError,
    TransientFailureError,
    UnsupportedEntryKindError,
)
from repo_source.domain.value_objects import RepositoryCoordinates
from repo_source.infrastructure.config import Settings
from repo_source.infrastructure.github_contents_client import GitHubContentsClient
from repo_source.infrastructure.github_fs import GitHubFs
from repo_source.infrastructure.retrying_client import RetryingContentsClient
from repo_source.services.entry_cache import EntryCache
from stubs import APP_PY, README, REQUIREMENTS, StubGitHub, listing_item

WRITE_FLAGS = [
    os.O_WRONLY,
    os.O_RDWR,
    os.O_RDWR | os.O_CREAT,
    os.O_APPEND,
    os.O_WRONLY | os.O_TRUNC,
    "w",
    "a",
    "r+",
]


# ── Reading content ─────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("path", "expected"),
    [("README.md", README), ("/requirements.txt", REQUIREMENTS), ("src//app.py", APP_PY)],
)
async def test_open_reproduces_remote_bytes(fs: GitHubFs, path: str, expected: bytes) -> None:
    handle = await fs.open(path)

    assert handle.read() == expected
    assert handle.read() == b""
    assert handle.stat().size == len(expected)


async def test_open_binary_file(fs: GitHubFs, github: StubGitHub) -> None:
    data = bytes(range(256)) * 17
    github.add_file("assets/logo.png", data)

    assert await fs.read_file("assets/logo.png") == data


async def test_entry_path_is_the_normalized_path(fs: GitHubFs) -> None:
    handle = await fs.open("//src/./app.py/")

    assert handle.path == "src/app.py"
    assert isinstance(handle.entry, FileEntry)


async def test_open_file_read_only_behaves_like_open(fs: GitHubFs) -> None:
    for flags in (os.O_RDONLY, "r", "rb"):
        handle = await fs.open_file("README.md", flags, 0o644)
        assert handle.read_all() == README


# ── Root ────────────────────────────────────────────────────────────────────


async def test_empty_and_slash_both_open_the_root(fs: GitHubFs, github: StubGitHub) -> None:
    empty = await fs.open("")
    slash = await fs.open("/")

    assert empty.is_dir and slash.is_dir
    assert empty.entry == slash.entry
    assert empty.path == slash.path == ""
    assert [r.url.path for r in github.requests] == ["/repos/acme/widgets/contents"] * 2


# ── Directory listings ──────────────────────────────────────────────────────


async def test_listing_order_matches_remote_order(fs: GitHubFs) -> None:
    names = [child.name for child in await fs.read_dir("")]

    assert names == ["src", "README.md", "requirements.txt", "vendor"]


async def test_listing_kinds_and_sizes(fs: GitHubFs) -> None:
    children = await fs.read_dir("/")

    assert children == [
        ChildRef(name="src", kind=EntryKind.DIRECTORY),
        ChildRef(name="README.md", kind=EntryKind.FILE, size=len(README)),
        ChildRef(name="requirements.txt", kind=EntryKind.FILE, size=len(REQUIREMENTS)),
        ChildRef(name="vendor", kind=EntryKind.OTHER),
    ]


async def test_unsorted_remote_listing_is_not_sorted(fs: GitHubFs, github: StubGitHub) -> None:
    github.add("z", [listing_item(n, "file", 1, parent="z") for n in ("c", "a", "b")])

    assert [c.name for c in await fs.read_dir("z")] == ["c", "a", "b"]


async def test_reiterating_a_directory_makes_no_further_calls(fs: GitHubFs, github: StubGitHub) -> None:
    handle = await fs.open("")
    calls = github.calls

    first = list(handle)
    second = list(handle.iterdir())

    assert first == second
    assert len(first) == 4
    assert github.calls == calls == 1


# ── Read-only contract ──────────────────────────────────────────────────────


@pytest.mark.parametrize("flags", WRITE_FLAGS)
@pytest.mark.parametrize("path", ["README.md", "", "/", "does/not/exist", "../escape"])
async def test_write_intent_fails_without_network(
    fs: GitHubFs, github: StubGitHub, path: str, flags: int | str
) -> None:
    with pytest.raises(ReadonlyError):
        await fs.open_file(path, flags, 0o644)

    assert github.calls == 0


async def test_handle_from_adapter_is_read_only(fs: GitHubFs) -> None:
    handle = await fs.open("README.md")

    with pytest.raises(ReadonlyError):
        handle.write(b"pwned")
    with pytest.raises(ReadonlyError):
        handle.truncate(0)
    assert await fs.read_file("README.md") == README


# ── Errors ──────────────────────────────────────────────────────────────────


@pytest.mark.parametrize("path", ["../escape", "src/../../x", ".."])
async def test_traversal_fails_before_any_network_call(
    fs: GitHubFs, github: StubGitHub, path: str
) -> None:
    with pytest.raises(InvalidPathError):
        await fs.open(path)
    with pytest.raises(InvalidPathError):
        await fs.stat(path)

    assert github.calls == 0


async def test_404_is_not_found(fs: GitHubFs) -> None:
    with pytest.raises(EntryNotFoundError):
        await fs.open("nope.txt")


async def test_403_is_access_denied(fs: GitHubFs, github: StubGitHub) -> None:
    github.add("secret", {"message": "Forbidden"}, status=403)

    with pytest.raises(AccessDeniedError):
        await fs.open("secret")


async def test_malformed_json_is_corrupt(fs: GitHubFs, github: StubGitHub) -> None:
    github.add("broken.txt", raw=b"<html>oops</html>")

    with pytest.raises(CorruptContentError):
        await fs.open("broken.txt")


async def test_large_file_is_too_large(fs: GitHubFs, github: StubGitHub) -> None:
    github.add("big.bin", {"type": "file", "encoding": "none", "size": 50_000_000, "content": ""})

    with pytest.raises(ContentTooLargeError):
        await fs.open("big.bin")


async def test_submodule_opens_but_cannot_be_read(fs: GitHubFs) -> None:
    handle = await fs.open("vendor")

    assert handle.kind is EntryKind.OTHER
    with pytest.raises(UnsupportedEntryKindError):
        handle.read()
    with pytest.raises(UnsupportedEntryKindError):
        await fs.read_dir("vendor")


async def test_reading_a_directory_as_a_file_is_unsupported(fs: GitHubFs) -> None:
    with pytest.raises(UnsupportedEntryKindError):
        await fs.read_file("src")


async def test_timeouts_surface_as_transient(coordinates: RepositoryCoordinates) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("deadline exceeded")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        fs = GitHubFs(coordinates, GitHubContentsClient(http_client, coordinates))
        with pytest.raises(TransientFailureError):
            await fs.open("README.md")


# ── Stat, exists, walk ──────────────────────────────────────────────────────


async def test_stat(fs: GitHubFs) -> None:
    file_meta = await fs.stat("src/app.py")
    dir_meta = await fs.stat("src")
    root_meta = await fs.stat("")

    assert (file_meta.name, file_meta.kind, file_meta.size) == ("app.py", EntryKind.FILE, len(APP_PY))
    assert (dir_meta.name, dir_meta.kind) == ("src", EntryKind.DIRECTORY)
    assert (root_meta.path, root_meta.name) == ("", "")


async def test_exists(fs: GitHubFs, github: StubGitHub) -> None:
    assert await fs.exists("README.md")
    assert await fs.exists("src")
    assert not await fs.exists("package.json")

    github.add("secret", {}, status=403)
    with pytest.raises(AccessDeniedError):
        await fs.exists("secret")


async def test_walk_is_top_down(fs: GitHubFs) -> None:
    seen = [
        (path, [d.name for d in dirs], [f.name for f in files])
        async for path, dirs, files in fs.walk()
    ]

    assert seen == [
        ("", ["src"], ["README.md", "requirements.txt"]),
        ("src", [], ["app.py"]),
    ]


async def test_walk_can_be_pruned(fs: GitHubFs, github: StubGitHub) -> None:
    async for _path, dirs, _files in fs.walk("/"):
        dirs.clear()

    assert github.calls == 1


async def test_backslash_names_are_walked_and_read(fs: GitHubFs, github: StubGitHub) -> None:
    github.add("", [listing_item("win\\dir", "dir"), listing_item("a\\b.txt", "file", 2)])
    github.add("win\\dir", [listing_item("c.txt", "file", 1, parent="win\\dir")])
    github.add_file("a\\b.txt", b"ab")

    seen = [(path, [f.name for f in files]) async for path, _dirs, files in fs.walk()]

    assert seen == [("", ["a\\b.txt"]), ("win\\dir", ["c.txt"])]
    assert await fs.read_file("a\\b.txt") == b"ab"


# ── Cache ───────────────────────────────────────────────────────────────────


async def test_cache_serves_repeated_opens(
    coordinates: RepositoryCoordinates, contents_client: GitHubContentsClient, github: StubGitHub
) -> None:
    fs = GitHubFs(coordinates, contents_client, cache=EntryCache())

    assert await fs.read_file("README.md") == README
    assert await fs.read_file("/README.md") == README
    assert (await fs.stat("README.md")).size == len(README)
    assert github.calls_for("README.md") == 1


async def test_cache_never_stores_failures(
    coordinates: RepositoryCoordinates, contents_client: GitHubContentsClient, github: StubGitHub
) -> None:
    fs = GitHubFs(coordinates, contents_client, cache=EntryCache())

    assert not await fs.exists("later.txt")
    github.add_file("later.txt", b"now here")
    assert await fs.read_file("later.txt") == b"now here"
    assert github.calls_for("later.txt") == 2


async def test_cache_does_not_bypass_the_read_only_guard(
    coordinates: RepositoryCoordinates, contents_client: GitHubContentsClient, github: StubGitHub
) -> None:
    fs = GitHubFs(coordinates, contents_client, cache=EntryCache())
    await fs.open("README.md")

    with pytest.raises(ReadonlyError):
        await fs.open_file("README.md", os.O_RDWR)
    assert github.calls == 1


# ── Concurrency ─────────────────────────────────────────────────────────────


async def test_concurrent_opens_on_disjoint_paths(fs: GitHubFs, github: StubGitHub) -> None:
    files = {f"pkg/mod_{i}.py": f"# module {i}\n".encode() * (i + 1) for i in range(40)}
    for path, data in files.items():
        github.add_file(path, data)

    results = await asyncio.gather(*(fs.read_file(path) for path in files))

    assert dict(zip(files, results)) == files
    assert github.calls == len(files)


async def test_concurrent_opens_with_shared_cache(
    coordinates: RepositoryCoordinates, contents_client: GitHubContentsClient, github: StubGitHub
) -> None:
    fs = GitHubFs(coordinates, contents_client, cache=EntryCache(max_entries=8))
    paths = ["README.md", "requirements.txt", "src/app.py"] * 20
    expected = {"README.md": README, "requirements.txt": REQUIREMENTS, "src/app.py": APP_PY}

    results = await asyncio.gather(*(fs.read_file(p) for p in paths))

    assert results == [expected[p] for p in paths]


# ── Construction ────────────────────────────────────────────────────────────


async def test_connect(http_client: httpx.AsyncClient, github: StubGitHub) -> None:
    fs = GitHubFs.connect(http_client, "acme", "widgets", credential="tok", revision="main")

    assert await fs.read_file("README.md") == README
    assert fs.coordinates.revision == "main"
    assert github.requests[0].url.params["ref"] == "main"
    assert github.requests[0].headers["Authorization"] == "Bearer tok"


def test_from_settings_wires_retry_and_cache(
    http_client: httpx.AsyncClient, coordinates: RepositoryCoordinates
) -> None:
    settings = Settings(retry_max_tries=4, cache_enabled=True, cache_max_entries=3)

    fs = GitHubFs.from_settings(http_client, coordinates, settings)

    assert isinstance(fs._client, RetryingContentsClient)
    assert isinstance(fs._cache, EntryCache)


def test_from_settings_without_retry_or_cache(
    http_client: httpx.AsyncClient, coordinates: RepositoryCoordinates
) -> None:
    settings = Settings(retry_max_tries=1, cache_enabled=False)

    fs = GitHubFs.from_settings(http_client, coordinates, settings)

    assert isinstance(fs._client, GitHubContentsClient)
    assert fs._cache is None
