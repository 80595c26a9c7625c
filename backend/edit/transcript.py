"""Transcript-based editing: mute video by picking words from the transcript."""
from __future__ import annotations
import os
from typing import Iterable, Optional, Protocol, Sequence
from backend.core.profanity import ProfanityDetector
from backend.edit.engine import EditEngine
from backend.edit.segments import ranges_for_selected_words
from backend.logging_config import get_logger
from backend.models import ORIGINAL, EditRecord, ProfanityReport, ProfanitySegment, SourceVersion, TranscriptEntry

logger = get_logger(__name__)


class Transcriber(Protocol):
    async def transcribe(self, video_path: str, work_dir: str, language: str = "hi") -> list[TranscriptEntry]: ...


async def transcribe_version(
    engine: EditEngine,
    transcriber: Transcriber,
    session_id: str,
    source_version: SourceVersion = ORIGINAL,
    source_id: Optional[str] = None,
    language: str = "hi",
) -> list[TranscriptEntry]:
    """Transcribe the file ``source_version`` resolves to."""
    video_path = engine.store.resolve_input(session_id, source_version, source_id)
    work_dir = engine.store.tmp_dir(session_id)
    logger.info("Transcribing %s for session %s", os.path.basename(video_path), session_id)
    return await transcriber.transcribe(video_path, work_dir, language)


async def detect_profanity(
    engine: EditEngine,
    transcriber: Transcriber,
    detector: ProfanityDetector,
    session_id: str,
    source_version: SourceVersion = ORIGINAL,
    source_id: Optional[str] = None,
    language: str = "hi",
    custom_words: Iterable[str] = (),
    transcript: Optional[list[TranscriptEntry]] = None,
) -> tuple[list[TranscriptEntry], ProfanityReport]:
    """Detect profanity, transcribing first unless the caller resent a transcript.

    ``custom_words`` are remembered on the session for later detections.
    """
    vocabulary = engine.store.add_custom_words(session_id, custom_words)
    if transcript is None:
        transcript = await transcribe_version(engine, transcriber, session_id,
                                              source_version, source_id, language)
    return transcript, detector.detect(transcript, language, vocabulary)


async def mute_selected_words(
    engine: EditEngine,
    session_id: str,
    segments: Sequence[ProfanitySegment],
    selected_words: Iterable[str],
    source_version: SourceVersion = ORIGINAL,
    source_id: Optional[str] = None,
) -> EditRecord:
    """Mute every segment containing one of ``selected_words``.

    The selected words join the session's custom vocabulary.
    """
    selected = sorted({w.strip().lower() for w in selected_words if w and w.strip()})
    engine.store.add_custom_words(session_id, selected)
    ranges = ranges_for_selected_words(segments, selected)
    logger.info("Muting %d segments for %d selected words", len(ranges), len(selected))
    return await engine.mute(session_id, ranges, source_version, source_id,
                             params={"muted_words": selected})


async def mute_profanity(
    engine: EditEngine,
    transcriber: Transcriber,
    detector: ProfanityDetector,
    session_id: str,
    ranges: Optional[Iterable] = None,
    source_version: SourceVersion = ORIGINAL,
    source_id: Optional[str] = None,
    language: str = "hi",
) -> tuple[EditRecord, Optional[ProfanityReport]]:
    """Mute the given ranges, or detect profanity first when none are given."""
    ranges = list(ranges or [])
    report = None
    if not ranges:
        logger.info("No segments provided, running automatic detection")
        _, report = await detect_profanity(engine, transcriber, detector, session_id,
                                           source_version, source_id, language)
        ranges = [{"start": s.start, "end": s.end} for s in report.segments]
        words = sorted({w.lower() for w, _ in report.word_hits})
        record = await engine.mute(session_id, ranges, source_version, source_id,
                                   params={"muted_words": words, "auto_detected": True})
    else:
        record = await engine.mute(session_id, ranges, source_version, source_id)
    return record, report
