"""Data models."""
from .session import (
    ORIGINAL,
    EditRecord,
    MediaInfo,
    OperationKind,
    Session,
    SourceVersion,
    SourceVideo,
    TimeRange,
)
from .transcript import (
    HighlightedWord,
    ProfanityReport,
    ProfanitySegment,
    TranscriptEntry,
    TranscriptWord,
)

__all__ = [
    "ORIGINAL",
    "EditRecord",
    "HighlightedWord",
    "MediaInfo",
    "OperationKind",
    "ProfanityReport",
    "ProfanitySegment",
    "Session",
    "SourceVersion",
    "SourceVideo",
    "TimeRange",
    "TranscriptEntry",
    "TranscriptWord",
]
