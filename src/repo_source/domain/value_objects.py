"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_GITHUB_URL_RE = re.compile(
    r"^https?://github\.com/(?P<owner>[A-Za-z0-9\-_.]+)/(?P<name>[A-Za-z0-9\-_.]+?)"
    r"(?:\.git)?(?:/tree/(?P<revision>[^?#]+?))?/?$"
)
_SEGMENT_RE = re.compile(r"^[A-Za-z0-9\-_.]+$")


@dataclass(frozen=True, slots=True)
class RepositoryCoordinates:
    """Identifies the remote repository every filesystem call targets.

    ``revision`` is a branch, tag or commit SHA; ``None`` lets the remote
    platform pick the repository's default branch.  ``credential`` is an
    opaque token and is kept out of ``repr`` so it never lands in logs.
    """

    owner: str
    name: str
    revision: str | None = None
    credential: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for label, value in (("owner", self.owner), ("name", self.name)):
            if not value or not _SEGMENT_RE.match(value) or value in (".", ".."):
                raise ValueError(f"Invalid repository {label}: {value!r}")
        if self.revision is not None and not self.revision.strip():
            raise ValueError("Revision must not be blank; pass None for the default branch.")

    @classmethod
    def from_url(
        cls, url: str, credential: str | None = None
    ) -> RepositoryCoordinates:
        """Parse ``https://github.com/<owner>/<name>[/tree/<revision>]``."""
        url = url.strip()
        match = _GITHUB_URL_RE.match(url)
        if not match:
            raise ValueError(
                f"Invalid GitHub URL: '{url}'. "
                "Expected format: https://github.com/<owner>/<repo>"
            )
        return cls(
            owner=match["owner"],
            name=match["name"],
            revision=match["revision"],
            credential=credential,
        )

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def with_revision(self, revision: str | None) -> RepositoryCoordinates:
        return RepositoryCoordinates(
            owner=self.owner,
            name=self.name,
            revision=revision,
            credential=self.credential,
        )
