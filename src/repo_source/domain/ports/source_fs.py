"""Port: read-only source filesystem — what detection logic programs against."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from repo_source.domain.entities import ChildRef, EntryMetadata

if TYPE_CHECKING:
    from repo_source.services.file_handle import FileHandle


@runtime_checkable
class SourceFs(Protocol):
    """Abstract contract shared by the remote and local-disk adapters."""

    async def open(self, path: str) -> FileHandle:
        """Open *path* for reading."""
        ...

    async def open_file(
        self, path: str, flags: int | str, permission: int = 0
    ) -> FileHandle:
        """Open *path* with explicit flags; any write intent is rejected."""
        ...

    async def stat(self, path: str) -> EntryMetadata:
        """Return kind and size of *path*."""
        ...

    async def read_file(self, path: str) -> bytes:
        """Return the whole content of the file at *path*."""
        ...

    async def read_dir(self, path: str) -> list[ChildRef]:
        """Return the children of the directory at *path*."""
        ...

    async def exists(self, path: str) -> bool:
        """Return whether *path* exists."""
        ...
