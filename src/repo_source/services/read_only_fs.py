"""Shared read-only filesystem surface.

Adapters supply ``_load(resolved_path) -> Entry``; everything callers see is
built on top of it here, so the remote and local adapters behave identically.
"""

from __future__ import annotations

import abc
from typing import AsyncIterator

from repo_source.domain.entities import ChildRef, Entry, EntryKind, EntryMetadata
from repo_source.domain.exceptions import EntryNotFoundError
from repo_source.services.file_handle import FileHandle
from repo_source.services.path_resolver import join, resolve
from repo_source.services.readonly_guard import ensure_read_only


class ReadOnlyFs(abc.ABC):
    """Base for ``SourceFs`` implementations."""

    @abc.abstractmethod
    async def _load(self, resolved_path: str) -> Entry:
        """Fetch and decode the entry at an already-resolved path."""

    # ── Core operations ─────────────────────────────────────────────────

    async def open(self, path: str) -> FileHandle:
        """Open *path* for reading and return a handle over the fetched entry."""
        return FileHandle(await self._load(resolve(path)))

    async def open_file(
        self, path: str, flags: int | str, permission: int = 0
    ) -> FileHandle:
        """Open *path* with ``os.O_*`` flags or an ``open()`` mode string.

        Any write, append, create or truncate intent raises ``ReadonlyError``
        before the path is even resolved.  *permission* is accepted for
        signature compatibility and ignored.
        """
        ensure_read_only(flags, path)
        return await self.open(path)

    async def stat(self, path: str) -> EntryMetadata:
        """Return kind and size of *path* (costs a full fetch)."""
        return EntryMetadata.from_entry(await self._load(resolve(path)))

    # ── Conveniences ────────────────────────────────────────────────────

    async def read_file(self, path: str) -> bytes:
        with await self.open(path) as handle:
            return handle.read_all()

    async def read_dir(self, path: str) -> list[ChildRef]:
        with await self.open(path) as handle:
            return handle.children()

    async def exists(self, path: str) -> bool:
        try:
            await self._load(resolve(path))
        except EntryNotFoundError:
            return False
        return True

    async def walk(
        self, path: str = ""
    ) -> AsyncIterator[tuple[str, list[ChildRef], list[ChildRef]]]:
        """Yield ``(dir_path, dirs, files)`` top-down, one directory fetch at a time.

        Children that are neither files nor directories are left out.  As with
        :func:`os.walk`, removing items from *dirs* prunes the traversal.
        """
        pending = [resolve(path)]
        while pending:
            current = pending.pop(0)
            children = await self.read_dir(current)
            dirs = [c for c in children if c.kind is EntryKind.DIRECTORY]
            files = [c for c in children if c.kind is EntryKind.FILE]
            yield current, dirs, files
            pending[:0] = [join(current, d.name) for d in dirs]
