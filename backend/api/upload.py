"""Upload endpoints."""
from __future__ import annotations
import os, shutil, uuid, re
from pathlib import Path
from datetime import datetime
from fastapi import APIRouter, Depends, File, UploadFile
from backend.api._state import get_store
from backend.config import VIDEO_EXTENSIONS
from backend.core.probe import probe_media
from backend.errors import ConfigurationError
from backend.logging_config import get_logger
from backend.models import SourceVideo
from backend.store import SessionStore

router = APIRouter()
logger = get_logger(__name__)


def _safe_filename(name: str) -> str:
    """Return a filesystem-safe filename with extension preserved."""
    base = Path(name).name  # strip any directory parts
    stem, ext = os.path.splitext(base)
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", stem).strip("._-")
    if not stem:
        stem = f"upload_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    ext = ext.lower() if ext else ".mp4"
    return f"{stem}{ext}"


async def _store_upload(store: SessionStore, session_id: str, file: UploadFile) -> SourceVideo:
    original_name = file.filename or "upload.mp4"
    safe_name = _safe_filename(original_name)
    ext = os.path.splitext(safe_name)[1]
    if ext not in VIDEO_EXTENSIONS:
        logger.warning("Rejected upload %s: not a video file", original_name)
        raise ConfigurationError(f"Only video files are allowed ({', '.join(VIDEO_EXTENSIONS)})")

    source_id = uuid.uuid4().hex[:12]
    stored_name = f"{source_id}{ext}"
    file_path = os.path.join(store.uploads_dir(session_id), stored_name)
    with open(file_path, "wb") as f:
        shutil.copyfileobj(file.file, f)

    source = SourceVideo(
        id=source_id,
        original_name=original_name,
        stored_filename=stored_name,
        size=os.path.getsize(file_path),
        path=file_path,
        media_info=await probe_media(file_path),
    )
    return store.register_source(session_id, source)


@router.post("/session/{session_id}/upload")
async def upload_video(session_id: str, file: UploadFile = File(...),
                       store: SessionStore = Depends(get_store)):
    """Upload one video into the session."""
    store.get_session(session_id)
    source = await _store_upload(store, session_id, file)
    return {"success": True, "file": source.to_dict(), "video_info": source.media_info.to_dict()}


@router.post("/session/{session_id}/upload-multiple")
async def upload_videos(session_id: str, files: list[UploadFile] = File(...),
                        store: SessionStore = Depends(get_store)):
    """Upload several videos for a multi-source join."""
    store.get_session(session_id)
    sources = [await _store_upload(store, session_id, f) for f in files]
    return {"success": True, "files": [s.to_dict() for s in sources]}


@router.get("/session/{session_id}/sources")
async def list_sources(session_id: str, store: SessionStore = Depends(get_store)):
    return {"sources": [s.to_dict() for s in store.list_sources(session_id)]}
