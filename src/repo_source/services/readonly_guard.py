"""Read-only guard shared by the adapters and the file handle."""

from __future__ import annotations

import os
from typing import NoReturn

from repo_source.domain.exceptions import ReadonlyError

_WRITE_FLAGS = (
    os.O_WRONLY | os.O_RDWR | os.O_APPEND | os.O_CREAT | os.O_TRUNC | os.O_EXCL
)
_WRITE_MODE_CHARS = frozenset("wax+")


def is_write_intent(flags: int | str) -> bool:
    """Return whether *flags* asks for anything beyond reading.

    Accepts ``os.O_*`` bit flags or an ``open()``-style mode string.
    """
    if isinstance(flags, str):
        return any(char in _WRITE_MODE_CHARS for char in flags)
    return bool(flags & _WRITE_FLAGS)


def reject_write(operation: str, path: str) -> NoReturn:
    raise ReadonlyError(f"Cannot {operation} '{path or '/'}': filesystem is read-only.")


def ensure_read_only(flags: int | str, path: str) -> None:
    """Raise :class:`ReadonlyError` when *flags* carries write intent."""
    if is_write_intent(flags):
        reject_write("open for writing", path)
