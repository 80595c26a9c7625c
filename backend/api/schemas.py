"""Request models shared by the edit and transcript endpoints."""
from __future__ import annotations
from typing import Optional, Union
from pydantic import BaseModel, Field
from backend.models import EditRecord


class Segment(BaseModel):
    start: float
    end: float


class SourceRef(BaseModel):
    source_version: Union[int, str] = "original"
    source_id: Optional[str] = None


class HighlightedWordIn(BaseModel):
    word: str
    is_profane: bool = False
    source: Optional[str] = None


class ProfanitySegmentIn(BaseModel):
    index: int = 0
    start: float
    end: float
    text: str = ""
    highlighted_words: list[HighlightedWordIn] = Field(default_factory=list)


class TranscriptWordIn(BaseModel):
    word: str
    start: float
    end: float


class TranscriptEntryIn(BaseModel):
    index: int
    start: float
    end: float
    text: str = ""
    words: list[TranscriptWordIn] = Field(default_factory=list)


def version_response(session_id: str, record: EditRecord, **extra) -> dict:
    """Common response body for every operation that produced a version."""
    return {
        "success": True,
        "version": record.version,
        "source_version": record.source_version,
        "kind": record.kind.value,
        "output_file": record.output_filename,
        "download_url": f"/api/session/{session_id}/versions/{record.version}/download",
        **extra,
    }
