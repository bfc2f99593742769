"""Entry decoder — turns a raw contents-endpoint response into an :data:`Entry`.

The response shape is decided exactly once, here:

* a JSON array is a directory listing,
* a JSON object with ``type == "file"`` is a file with base64 content,
* any other object type (``symlink``, ``submodule``...) is an :class:`OtherEntry`.

Anything that does not fit raises :class:`CorruptContentError`; a file the
remote declined to inline raises :class:`ContentTooLargeError`.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, NonNegativeInt, StrictStr, TypeAdapter, ValidationError

from repo_source.domain.entities import (
    ChildRef,
    DirectoryEntry,
    Entry,
    EntryKind,
    FileEntry,
    OtherEntry,
    RawResponse,
)
from repo_source.domain.exceptions import ContentTooLargeError, CorruptContentError

logger = logging.getLogger(__name__)

_KINDS = {"file": EntryKind.FILE, "dir": EntryKind.DIRECTORY}


# ── Wire payloads ───────────────────────────────────────────────────────────


class _ListingItem(BaseModel):
    """One element of a directory listing array."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: StrictStr
    type: StrictStr
    size: NonNegativeInt = 0


class _ContentsObject(BaseModel):
    """A single-object response: a file, or a non-file marker."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: StrictStr
    size: NonNegativeInt = 0
    encoding: StrictStr | None = None
    content: StrictStr | None = None
    target: StrictStr | None = None
    entries: list[_ListingItem] | None = None


_LISTING = TypeAdapter(list[_ListingItem])


# ── Public API ──────────────────────────────────────────────────────────────


def decode(remote_path: str, raw: RawResponse) -> Entry:
    """Decode *raw* (fetched for *remote_path*) into a file, directory or other entry."""
    try:
        payload: Any = json.loads(raw.body)
    except ValueError as exc:
        raise CorruptContentError(
            f"Response for '{remote_path or '/'}' is not valid JSON: {exc}"
        ) from exc

    if isinstance(payload, list):
        return _decode_listing(remote_path, payload)

    if isinstance(payload, dict):
        try:
            obj = _ContentsObject.model_validate(payload)
        except ValidationError as exc:
            raise CorruptContentError(
                f"Unexpected contents object for '{remote_path or '/'}': {exc}"
            ) from exc
        return _decode_object(remote_path, obj)

    raise CorruptContentError(
        f"Response for '{remote_path or '/'}' is neither an object nor an array."
    )


# ── Helpers ─────────────────────────────────────────────────────────────────


def _decode_listing(remote_path: str, payload: list[Any]) -> DirectoryEntry:
    try:
        items = _LISTING.validate_python(payload)
    except ValidationError as exc:
        raise CorruptContentError(
            f"Malformed directory listing for '{remote_path or '/'}': {exc}"
        ) from exc
    return DirectoryEntry(path=remote_path, children=_children(remote_path, items))


def _children(remote_path: str, items: list[_ListingItem]) -> tuple[ChildRef, ...]:
    children: list[ChildRef] = []
    for item in items:
        if not item.name or "/" in item.name or item.name in (".", ".."):
            raise CorruptContentError(
                f"Directory listing for '{remote_path or '/'}' has an invalid name: {item.name!r}"
            )
        kind = _KINDS.get(item.type, EntryKind.OTHER)
        children.append(
            ChildRef(name=item.name, kind=kind, size=item.size if kind is EntryKind.FILE else 0)
        )
    return tuple(children)


def _decode_object(remote_path: str, obj: _ContentsObject) -> Entry:
    if obj.type == "file":
        return FileEntry(path=remote_path, size=obj.size, content=_file_bytes(remote_path, obj))

    if obj.type == "dir":
        # Only returned with the "object" media type; listings are normally arrays.
        if obj.entries is None:
            raise CorruptContentError(
                f"Directory object for '{remote_path or '/'}' carries no entries."
            )
        return DirectoryEntry(path=remote_path, children=_children(remote_path, obj.entries))

    logger.debug("Path '%s' is a %s entry", remote_path, obj.type)
    return OtherEntry(path=remote_path, remote_type=obj.type, size=obj.size, target=obj.target)


def _file_bytes(remote_path: str, obj: _ContentsObject) -> bytes:
    if obj.size == 0 and not obj.content:
        return b""

    if obj.encoding in (None, "none") or obj.content is None:
        raise ContentTooLargeError(
            f"File '{remote_path}' ({obj.size} bytes) is too large to be inlined by the remote."
        )

    if obj.encoding != "base64":
        raise CorruptContentError(
            f"File '{remote_path}' uses unsupported encoding {obj.encoding!r}."
        )

    try:
        data = base64.b64decode("".join(obj.content.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CorruptContentError(f"File '{remote_path}' has undecodable content: {exc}") from exc

    if len(data) < obj.size:
        raise ContentTooLargeError(
            f"File '{remote_path}' was truncated by the remote "
            f"({len(data)} of {obj.size} bytes)."
        )
    if len(data) > obj.size:
        raise CorruptContentError(
            f"File '{remote_path}' decoded to {len(data)} bytes, expected {obj.size}."
        )
    return data
