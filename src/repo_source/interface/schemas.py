"""Pydantic response DTOs for the API boundary."""

from __future__ import annotations

from pydantic import BaseModel

from repo_source.domain.entities import ChildRef, EntryKind, EntryMetadata


class EntryMetadataResponse(BaseModel):
    """Response from ``GET /repos/{owner}/{repo}/stat/{path}``."""

    path: str
    name: str
    kind: EntryKind
    size: int

    @classmethod
    def from_metadata(cls, meta: EntryMetadata) -> EntryMetadataResponse:
        return cls(path=meta.path, name=meta.name, kind=meta.kind, size=meta.size)


class ChildResponse(BaseModel):
    name: str
    kind: EntryKind
    size: int

    @classmethod
    def from_child(cls, child: ChildRef) -> ChildResponse:
        return cls(name=child.name, kind=child.kind, size=child.size)


class ListingResponse(BaseModel):
    """Response from ``GET /repos/{owner}/{repo}/list/{path}`` — children in remote order."""

    path: str
    children: list[ChildResponse]


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str
