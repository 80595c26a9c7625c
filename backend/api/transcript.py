"""Transcript and profanity detection endpoints."""
from __future__ import annotations
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import Field
from backend.api._state import get_detector, get_engine, get_settings, get_transcriber
from backend.api.schemas import SourceRef, TranscriptEntryIn
from backend.config import Settings
from backend.core.profanity import ProfanityDetector
from backend.edit.engine import EditEngine
from backend.edit.transcript import Transcriber, detect_profanity, transcribe_version
from backend.models import TranscriptEntry

router = APIRouter()


class TranscriptRequest(SourceRef):
    language: Optional[str] = None


class DetectRequest(SourceRef):
    language: Optional[str] = None
    custom_words: list[str] = Field(default_factory=list)
    # a transcript fetched earlier skips transcription
    transcript: Optional[list[TranscriptEntryIn]] = None


@router.post("/session/{session_id}/transcript")
async def get_transcript(
    session_id: str,
    req: TranscriptRequest,
    engine: EditEngine = Depends(get_engine),
    transcriber: Transcriber = Depends(get_transcriber),
    settings: Settings = Depends(get_settings),
):
    """Transcribe a version of the session's video."""
    entries = await transcribe_version(engine, transcriber, session_id, req.source_version,
                                       req.source_id, req.language or settings.default_language)
    return {"success": True, "transcript": [e.to_dict() for e in entries]}


@router.post("/session/{session_id}/detect-profanity")
async def detect(
    session_id: str,
    req: DetectRequest,
    engine: EditEngine = Depends(get_engine),
    transcriber: Transcriber = Depends(get_transcriber),
    detector: ProfanityDetector = Depends(get_detector),
    settings: Settings = Depends(get_settings),
):
    """Find transcript segments containing profanity."""
    transcript = None
    if req.transcript is not None:
        transcript = [TranscriptEntry.from_dict(e.model_dump()) for e in req.transcript]
    entries, report = await detect_profanity(
        engine, transcriber, detector, session_id,
        source_version=req.source_version,
        source_id=req.source_id,
        language=req.language or settings.default_language,
        custom_words=req.custom_words,
        transcript=transcript,
    )
    return {"success": True, "transcript": [e.to_dict() for e in entries], **report.to_dict()}
