"""Session endpoints: lifecycle, history and custom vocabulary."""
from __future__ import annotations
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from backend.api._state import get_store
from backend.store import SessionStore

router = APIRouter()


class CustomWordsRequest(BaseModel):
    words: list[str] = Field(default_factory=list)


@router.post("/session")
async def create_session(store: SessionStore = Depends(get_store)):
    """Start a new editing session."""
    session = store.create_session()
    return {"success": True, "session_id": session.id, "created_at": session.created_at}


@router.get("/session/{session_id}")
async def get_session(session_id: str, store: SessionStore = Depends(get_store)):
    """Sources, version history and custom words of a session."""
    return store.get_session(session_id).to_dict()


@router.get("/session/{session_id}/history")
async def get_history(session_id: str, store: SessionStore = Depends(get_store)):
    """Every version in the order it was created, each naming its source version."""
    session = store.get_session(session_id)
    return {
        "session_id": session_id,
        "current_version": session.version_counter,
        "versions": [v.to_dict() for v in store.history(session_id)],
    }


@router.get("/session/{session_id}/custom-words")
async def list_custom_words(session_id: str, store: SessionStore = Depends(get_store)):
    return {"words": sorted(store.custom_words(session_id))}


@router.post("/session/{session_id}/custom-words")
async def add_custom_words(session_id: str, req: CustomWordsRequest,
                           store: SessionStore = Depends(get_store)):
    """Add words to this session's profanity vocabulary."""
    words = store.add_custom_words(session_id, req.words)
    return {"success": True, "words": sorted(words)}


@router.delete("/session/{session_id}")
async def destroy_session(session_id: str, store: SessionStore = Depends(get_store)):
    """Delete the session with all uploads and versions. Unknown ids are not an error."""
    existed = store.destroy_session(session_id)
    return {"success": True, "existed": existed}
