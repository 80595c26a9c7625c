"""Edit endpoints. Each successful call appends one version to the session."""
from __future__ import annotations
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from backend.api._state import get_detector, get_engine, get_settings, get_transcriber
from backend.api.schemas import ProfanitySegmentIn, Segment, SourceRef, version_response
from backend.config import Settings
from backend.core.profanity import ProfanityDetector
from backend.edit.engine import EditEngine
from backend.edit.segments import muted_duration
from backend.edit.transcript import Transcriber, mute_profanity, mute_selected_words
from backend.models import ProfanitySegment, TimeRange

router = APIRouter()


class AudioMuteRequest(SourceRef):
    segments: list[Segment] = Field(default_factory=list)


class ProfanityMuteRequest(SourceRef):
    language: Optional[str] = None
    segments: list[Segment] = Field(default_factory=list)
    selected_words: list[str] = Field(default_factory=list)
    profanity_segments: list[ProfanitySegmentIn] = Field(default_factory=list)


class TrimRequest(SourceRef):
    segments: list[Segment] = Field(default_factory=list)
    join: bool = False


class ClipIn(BaseModel):
    source_id: str
    segments: list[Segment] = Field(default_factory=list)


class MultiJoinRequest(BaseModel):
    clips: list[ClipIn] = Field(default_factory=list)


def _ranges(segments: list[Segment]) -> list[dict]:
    return [s.model_dump() for s in segments]


@router.post("/session/{session_id}/audio-mute")
async def audio_mute(session_id: str, req: AudioMuteRequest,
                     engine: EditEngine = Depends(get_engine)):
    """Silence the audio inside the given ranges. No ranges yields a plain copy."""
    record = await engine.mute(session_id, _ranges(req.segments), req.source_version, req.source_id)
    return version_response(session_id, record, segments_muted=len(req.segments))


@router.post("/session/{session_id}/profanity-mute")
async def profanity_mute(
    session_id: str,
    req: ProfanityMuteRequest,
    engine: EditEngine = Depends(get_engine),
    transcriber: Transcriber = Depends(get_transcriber),
    detector: ProfanityDetector = Depends(get_detector),
    settings: Settings = Depends(get_settings),
):
    """Mute profanity.

    Three ways to say what gets muted, checked in this order: words picked
    from an earlier detection (``selected_words`` + ``profanity_segments``),
    explicit ``segments``, or nothing at all, which runs detection first.
    """
    report = None
    if req.selected_words:
        segments = [ProfanitySegment.from_dict(s.model_dump()) for s in req.profanity_segments]
        record = await mute_selected_words(engine, session_id, segments, req.selected_words,
                                           req.source_version, req.source_id)
    else:
        record, report = await mute_profanity(
            engine, transcriber, detector, session_id,
            ranges=_ranges(req.segments),
            source_version=req.source_version,
            source_id=req.source_id,
            language=req.language or settings.default_language,
        )

    ranges = [TimeRange(**r) for r in record.params.get("ranges", [])]
    extra = {
        "segments_muted": len(ranges),
        "muted_duration": muted_duration(ranges),
        "muted_words": record.params.get("muted_words", []),
    }
    if report is not None:
        extra["auto_detected"] = True
        extra["detection"] = report.to_dict()
    return version_response(session_id, record, **extra)


@router.post("/session/{session_id}/trim")
async def trim(session_id: str, req: TrimRequest, engine: EditEngine = Depends(get_engine)):
    """Keep one range, or several ranges joined in the order given."""
    record = await engine.trim(session_id, _ranges(req.segments), req.join,
                               req.source_version, req.source_id)
    return version_response(session_id, record, segments_count=len(req.segments))


@router.post("/session/{session_id}/multi-join")
async def multi_join(session_id: str, req: MultiJoinRequest, engine: EditEngine = Depends(get_engine)):
    """Cut ranges out of several uploaded sources and join them into one video."""
    clips = [(c.source_id, _ranges(c.segments)) for c in req.clips]
    record = await engine.multi_join(session_id, clips)
    return version_response(session_id, record, clips_count=len(clips))
