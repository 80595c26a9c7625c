"""Transcript normalization: turns Whisper output into TranscriptEntry lists.

Two source formats are understood: SubRip (``.srt``, entry granularity) and
Whisper's JSON result (entry and word granularity). Callers get the same
shape back either way.
"""
from __future__ import annotations
import json, re
from enum import Enum
from typing import Union
from backend.errors import TranscriptUnavailable
from backend.models import TranscriptEntry, TranscriptWord


class TranscriptFormat(str, Enum):
    SRT = "srt"
    JSON = "json"


_TIMESTAMP = r"(\d{1,2}):(\d{2}):(\d{2})[,.](\d{1,3})"
_TIMING_LINE = re.compile(rf"^\s*{_TIMESTAMP}\s*-->\s*{_TIMESTAMP}")


def _seconds(h: str, m: str, s: str, ms: str) -> float:
    return int(h) * 3600 + int(m) * 60 + int(s) + int(ms.ljust(3, "0")) / 1000


def srt_time_to_seconds(value: str) -> float:
    """``"00:01:02,500"`` -> ``62.5``."""
    match = re.fullmatch(_TIMESTAMP, value.strip())
    if not match:
        raise ValueError(f"Invalid SRT timestamp: {value!r}")
    return _seconds(*match.groups())


def parse_srt(text: str) -> list[TranscriptEntry]:
    """Parse SRT blocks of index / timing / text / blank.

    Blocks with an unreadable timing line and an incomplete trailing block
    are skipped; scanning resumes at the next index line.
    """
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    entries = []
    i = 0
    while i < len(lines):
        line = lines[i].strip()
        if not line.isdigit() or i + 2 >= len(lines):
            i += 1
            continue
        timing = _TIMING_LINE.match(lines[i + 1])
        if not timing:
            i += 1
            continue
        g = timing.groups()
        start, end = _seconds(*g[:4]), _seconds(*g[4:])
        entries.append(TranscriptEntry(
            index=int(line),
            start=start,
            end=end,
            text=lines[i + 2].strip(),
        ))
        i += 4
    return entries


def _parse_words(raw_words) -> list[TranscriptWord]:
    words = []
    for w in raw_words or []:
        try:
            words.append(TranscriptWord(
                word=str(w.get("word", "")).strip(),
                start=float(w["start"]),
                end=float(w["end"]),
            ))
        except (KeyError, TypeError, ValueError, AttributeError):
            continue
    return words


def parse_whisper_json(data: Union[dict, str, bytes]) -> list[TranscriptEntry]:
    """Map Whisper's ``{"segments": [...]}`` result to entries, one per segment."""
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise TranscriptUnavailable(f"Transcript is not valid JSON: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("segments"), list):
        raise TranscriptUnavailable("Transcript JSON has no segment list")

    entries = []
    for position, seg in enumerate(data["segments"], start=1):
        try:
            start = float(seg["start"])
            end = float(seg["end"])
        except (KeyError, TypeError, ValueError):
            continue
        entries.append(TranscriptEntry(
            index=position,
            start=start,
            end=end,
            text=str(seg.get("text", "")).strip(),
            words=_parse_words(seg.get("words")),
        ))
    return entries


def normalize(raw, source_format: Union[TranscriptFormat, str]) -> list[TranscriptEntry]:
    """Convert raw transcription output to a list of TranscriptEntry."""
    try:
        fmt = TranscriptFormat(source_format)
    except ValueError:
        raise TranscriptUnavailable(f"Unknown transcript format: {source_format}")

    if fmt == TranscriptFormat.JSON:
        return parse_whisper_json(raw)

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise TranscriptUnavailable(f"SRT output is not UTF-8: {e}") from e
    if not isinstance(raw, str):
        raise TranscriptUnavailable("SRT output must be text")
    return parse_srt(raw)


def load_transcript(path: str, source_format: Union[TranscriptFormat, str]) -> list[TranscriptEntry]:
    """Read a transcript file written by the transcription tool."""
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise TranscriptUnavailable(f"Transcript output not readable: {e}") from e
    return normalize(raw, source_format)
