"""Static asset router: serves the browser bundle from a fixed root."""
from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from storelocator.config import Settings
from storelocator.dependencies import get_app_settings

router = APIRouter(tags=["static"])

INDEX_FILE = "index.html"


class PathOutsideRootError(ValueError):
    """The requested path resolves outside the static root."""


def resolve_static_path(root: Path, relative: str) -> Path:
    """Resolve ``relative`` against ``root`` without leaving it.

    Symlinks and ``..`` segments are resolved first, so the containment
    check runs on the real location. Nothing is opened or read here.
    """
    if "\x00" in relative:
        raise PathOutsideRootError(relative)
    root = root.resolve()
    candidate = (root / relative.lstrip("/")).resolve()
    if candidate != root and not candidate.is_relative_to(root):
        raise PathOutsideRootError(relative)
    if candidate.is_dir():
        candidate = candidate / INDEX_FILE
    return candidate


@router.get("/{file_path:path}", include_in_schema=False)
async def static_file(
    file_path: str,
    settings: Settings = Depends(get_app_settings),
) -> FileResponse:
    try:
        path = resolve_static_path(settings.static_dir, file_path)
    except PathOutsideRootError:
        raise HTTPException(status_code=403, detail="Forbidden")
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(path)
