"""API routes — thin read-only controllers over the filesystem adapter."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from repo_source.infrastructure.github_fs import GitHubFs
from repo_source.interface.dependencies import get_fs
from repo_source.interface.schemas import (
    ChildResponse,
    EntryMetadataResponse,
    ErrorResponse,
    ListingResponse,
)
from repo_source.services.path_resolver import resolve

router = APIRouter(prefix="/repos/{owner}/{repo}")

_ERRORS = {
    403: {"model": ErrorResponse, "description": "Credential rejected"},
    404: {"model": ErrorResponse, "description": "Path not found"},
    422: {"model": ErrorResponse, "description": "Path escapes the repository root"},
    429: {"model": ErrorResponse, "description": "GitHub API rate limit exceeded"},
    503: {"model": ErrorResponse, "description": "GitHub unreachable"},
}


@router.get("/stat", response_model=EntryMetadataResponse, responses=_ERRORS)
@router.get("/stat/{path:path}", response_model=EntryMetadataResponse, responses=_ERRORS)
async def stat(path: str = "", fs: GitHubFs = Depends(get_fs)) -> EntryMetadataResponse:
    """Kind and size of one path."""
    return EntryMetadataResponse.from_metadata(await fs.stat(path))


@router.get("/list", response_model=ListingResponse, responses=_ERRORS)
@router.get("/list/{path:path}", response_model=ListingResponse, responses=_ERRORS)
async def list_directory(path: str = "", fs: GitHubFs = Depends(get_fs)) -> ListingResponse:
    """Children of a directory, in the order GitHub lists them."""
    children = await fs.read_dir(path)
    return ListingResponse(
        path=resolve(path),
        children=[ChildResponse.from_child(child) for child in children],
    )


@router.get(
    "/raw/{path:path}",
    response_class=Response,
    responses={**_ERRORS, 409: {"model": ErrorResponse, "description": "Not a file"}},
)
async def raw(path: str, fs: GitHubFs = Depends(get_fs)) -> Response:
    """Raw bytes of a file."""
    return Response(content=await fs.read_file(path), media_type="application/octet-stream")
