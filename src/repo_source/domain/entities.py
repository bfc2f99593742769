"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Union


class EntryKind(str, Enum):
    """What a path points at."""

    FILE = "file"
    DIRECTORY = "dir"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class ChildRef:
    """One row of a directory listing."""

    name: str
    kind: EntryKind
    size: int = 0  # meaningful only for files


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A regular file with its fully materialized content."""

    path: str
    size: int
    content: bytes

    @property
    def kind(self) -> EntryKind:
        return EntryKind.FILE


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """A directory and its children, in the order the source listed them."""

    path: str
    children: tuple[ChildRef, ...] = ()

    @property
    def kind(self) -> EntryKind:
        return EntryKind.DIRECTORY


@dataclass(frozen=True, slots=True)
class OtherEntry:
    """A path that is neither a file nor a directory (symlink, submodule...)."""

    path: str
    remote_type: str
    size: int = 0
    target: str | None = None

    @property
    def kind(self) -> EntryKind:
        return EntryKind.OTHER


Entry = Union[FileEntry, DirectoryEntry, OtherEntry]


@dataclass(frozen=True, slots=True)
class EntryMetadata:
    """Kind and size of an entry, without its content."""

    path: str
    name: str
    kind: EntryKind
    size: int = 0

    @classmethod
    def from_entry(cls, entry: Entry) -> EntryMetadata:
        name = entry.path.rsplit("/", 1)[-1] if entry.path else ""
        if isinstance(entry, DirectoryEntry):
            return cls(path=entry.path, name=name, kind=entry.kind, size=0)
        return cls(path=entry.path, name=name, kind=entry.kind, size=entry.size)


@dataclass(frozen=True, slots=True)
class RawResponse:
    """An HTTP response as received, before any decoding."""

    status_code: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)
