"""Path resolver — maps a caller path onto the remote contents path parameter.

Pure and deterministic: no I/O, same input always gives the same output.
"""

from __future__ import annotations

from repo_source.domain.exceptions import InvalidPathError

ROOT = ""


def resolve(path: str) -> str:
    """Normalize *path* relative to the repository root.

    ``""`` and ``"/"`` both denote the root and resolve to ``""``.  Leading and
    trailing separators are stripped, repeated separators collapse and ``.``
    segments are dropped.  Any ``..`` segment is rejected, even one that would
    stay inside the root, so callers can never address outside it.  Only
    ``/`` separates segments; a backslash is an ordinary name character.
    """
    if not isinstance(path, str):
        raise InvalidPathError(f"Path must be a string, got {type(path).__name__}.")
    if "\x00" in path:
        raise InvalidPathError(f"Path contains a NUL byte: {path!r}")

    segments: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise InvalidPathError(f"Path escapes the repository root: {path!r}")
        segments.append(segment)

    return "/".join(segments)


def join(parent: str, name: str) -> str:
    """Join a resolved directory path and a child name."""
    return f"{parent}/{name}" if parent else name


def basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]
