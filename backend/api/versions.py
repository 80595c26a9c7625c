"""Download endpoint for the original upload and every produced version."""
from __future__ import annotations
import os
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from backend.api._state import get_store
from backend.errors import NotFoundError, VersionNotFound
from backend.models import ORIGINAL
from backend.store import SessionStore, parse_source_version

router = APIRouter()


@router.get("/session/{session_id}/versions/{version}/download")
async def download_version(session_id: str, version: str, source_id: Optional[str] = None,
                           store: SessionStore = Depends(get_store)):
    """Stream a version's file. ``original`` returns the upload itself."""
    parsed = parse_source_version(version)
    if parsed != ORIGINAL and not isinstance(parsed, int):
        raise VersionNotFound(session_id, version)
    path = store.resolve_input(session_id, parsed, source_id)
    if not os.path.exists(path):
        raise NotFoundError(f"File for version {version} is missing on disk")
    return FileResponse(path, filename=os.path.basename(path))
