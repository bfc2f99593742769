"""LocalFs — the same read-only contract over a checkout on local disk."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from repo_source.domain.entities import (
    ChildRef,
    DirectoryEntry,
    Entry,
    EntryKind,
    FileEntry,
    OtherEntry,
)
from repo_source.domain.exceptions import (
    AccessDeniedError,
    EntryNotFoundError,
    InvalidPathError,
    TransientFailureError,
)
from repo_source.services.read_only_fs import ReadOnlyFs

logger = logging.getLogger(__name__)


class LocalFs(ReadOnlyFs):
    """Concrete ``SourceFs`` over a directory on disk.

    Directory children are sorted by name since a local listing has no
    meaningful order of its own.  Symlinks are reported as ``other`` entries
    and never followed; a path that passes through a symlinked directory is
    rejected with ``InvalidPathError``.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self._root = Path(root).resolve()
        if not self._root.is_dir():
            raise ValueError(f"Not a directory: {self._root}")

    @property
    def root(self) -> Path:
        return self._root

    async def _load(self, resolved_path: str) -> Entry:
        return await asyncio.to_thread(self._load_sync, resolved_path)

    def _load_sync(self, resolved_path: str) -> Entry:
        if os.sep == "\\" and "\\" in resolved_path:
            raise InvalidPathError(f"Path must use '/' as separator: {resolved_path!r}")

        target = self._root / resolved_path if resolved_path else self._root
        if resolved_path and Path(os.path.realpath(target.parent)) != target.parent:
            raise InvalidPathError(
                f"Path passes through a symlinked directory: {resolved_path!r}"
            )

        try:
            if target.is_symlink():
                return OtherEntry(
                    path=resolved_path, remote_type="symlink", target=os.readlink(target)
                )
            if target.is_dir():
                return DirectoryEntry(path=resolved_path, children=self._children(target))
            if target.is_file():
                data = target.read_bytes()
                return FileEntry(path=resolved_path, size=len(data), content=data)
            if not target.exists():
                raise FileNotFoundError(str(target))
            return OtherEntry(path=resolved_path, remote_type="special")
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise EntryNotFoundError(f"Not found: '{resolved_path or '/'}' under {self._root}.") from exc
        except PermissionError as exc:
            raise AccessDeniedError(f"Permission denied reading '{resolved_path or '/'}'.") from exc
        except OSError as exc:
            logger.warning("I/O error reading %s: %s", target, exc)
            raise TransientFailureError(f"I/O error reading '{resolved_path or '/'}': {exc}") from exc

    @staticmethod
    def _children(directory: Path) -> tuple[ChildRef, ...]:
        children: list[ChildRef] = []
        with os.scandir(directory) as it:
            for item in sorted(it, key=lambda e: e.name):
                if item.is_symlink():
                    children.append(ChildRef(name=item.name, kind=EntryKind.OTHER))
                elif item.is_dir(follow_symlinks=False):
                    children.append(ChildRef(name=item.name, kind=EntryKind.DIRECTORY))
                elif item.is_file(follow_symlinks=False):
                    size = item.stat(follow_symlinks=False).st_size
                    children.append(ChildRef(name=item.name, kind=EntryKind.FILE, size=size))
                else:
                    children.append(ChildRef(name=item.name, kind=EntryKind.OTHER))
        return tuple(children)
