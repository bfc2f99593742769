"""File handle — caller-owned, in-memory view over one already-fetched entry.

Nothing here touches the network: reads walk bytes that were fetched when the
handle was opened, and directory iteration re-walks the materialized listing.
"""

from __future__ import annotations

import io
from typing import Iterable, Iterator

from repo_source.domain.entities import (
    ChildRef,
    DirectoryEntry,
    Entry,
    EntryKind,
    EntryMetadata,
    FileEntry,
)
from repo_source.domain.exceptions import UnsupportedEntryKindError
from repo_source.services.path_resolver import basename
from repo_source.services.readonly_guard import reject_write


class FileHandle:
    """Read-only handle over a :class:`FileEntry`, :class:`DirectoryEntry` or :class:`OtherEntry`.

    Files support sequential reads through an internal cursor; reading past the
    end returns ``b""``.  Directories support restartable iteration over their
    children in listing order.  Every mutating call raises :class:`ReadonlyError`.
    """

    def __init__(self, entry: Entry) -> None:
        self._entry = entry
        self._pos = 0
        self._closed = False

    # ── Introspection ───────────────────────────────────────────────────

    @property
    def entry(self) -> Entry:
        return self._entry

    @property
    def path(self) -> str:
        return self._entry.path

    @property
    def name(self) -> str:
        return basename(self._entry.path)

    @property
    def kind(self) -> EntryKind:
        return self._entry.kind

    @property
    def is_dir(self) -> bool:
        return self._entry.kind is EntryKind.DIRECTORY

    @property
    def closed(self) -> bool:
        return self._closed

    def stat(self) -> EntryMetadata:
        return EntryMetadata.from_entry(self._entry)

    # ── File access ─────────────────────────────────────────────────────

    def read(self, size: int = -1) -> bytes:
        """Read up to *size* bytes from the cursor (all remaining when negative)."""
        content = self._content()
        if self._pos >= len(content):
            return b""
        end = len(content) if size is None or size < 0 else self._pos + size
        chunk = content[self._pos:end]
        self._pos += len(chunk)
        return chunk

    def read_all(self) -> bytes:
        """Return the whole content, independent of the cursor."""
        return self._content()

    def readline(self, size: int = -1) -> bytes:
        content = self._content()
        if self._pos >= len(content):
            return b""
        newline = content.find(b"\n", self._pos)
        end = len(content) if newline == -1 else newline + 1
        if size is not None and size >= 0:
            end = min(end, self._pos + size)
        chunk = content[self._pos:end]
        self._pos += len(chunk)
        return chunk

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        content = self._content()
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._pos + offset
        elif whence == io.SEEK_END:
            target = len(content) + offset
        else:
            raise ValueError(f"Invalid whence: {whence}")
        if target < 0:
            raise ValueError(f"Negative seek position {target}")
        self._pos = target
        return self._pos

    def tell(self) -> int:
        self._content()
        return self._pos

    # ── Directory access ────────────────────────────────────────────────

    def iterdir(self) -> Iterator[ChildRef]:
        """Iterate children in listing order; each call starts from the beginning."""
        entry = self._entry
        self._check_open()
        if not isinstance(entry, DirectoryEntry):
            raise UnsupportedEntryKindError(
                f"'{entry.path or '/'}' is a {entry.kind.value} entry, not a directory."
            )
        return iter(entry.children)

    def __iter__(self) -> Iterator[ChildRef]:
        return self.iterdir()

    def children(self) -> list[ChildRef]:
        return list(self.iterdir())

    # ── Mutation is never allowed ───────────────────────────────────────

    def write(self, data: bytes) -> int:
        reject_write("write to", self.path)

    def writelines(self, lines: Iterable[bytes]) -> None:
        reject_write("write to", self.path)

    def truncate(self, size: int | None = None) -> int:
        reject_write("truncate", self.path)

    def append(self, data: bytes) -> int:
        reject_write("append to", self.path)

    def flush(self) -> None:
        reject_write("flush", self.path)

    # ── Lifecycle ───────────────────────────────────────────────────────

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> FileHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"FileHandle(path={self.path!r}, kind={self.kind.value!r})"

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"I/O operation on closed handle for '{self.path or '/'}'.")

    def _content(self) -> bytes:
        entry = self._entry
        self._check_open()
        if not isinstance(entry, FileEntry):
            raise UnsupportedEntryKindError(
                f"'{entry.path or '/'}' is a {entry.kind.value} entry and has no readable content."
            )
        return entry.content
