"""Transcript and profanity report models."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TranscriptWord:
    word: str
    start: float
    end: float


@dataclass
class TranscriptEntry:
    index: int
    start: float
    end: float
    text: str
    words: list[TranscriptWord] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "words": [{"word": w.word, "start": w.start, "end": w.end} for w in self.words],
        }

    @staticmethod
    def from_dict(data: dict) -> TranscriptEntry:
        return TranscriptEntry(
            index=int(data["index"]),
            start=float(data["start"]),
            end=float(data["end"]),
            text=str(data.get("text", "")),
            words=[TranscriptWord(word=w["word"], start=float(w["start"]), end=float(w["end"]))
                   for w in data.get("words") or []],
        )


@dataclass
class HighlightedWord:
    word: str
    is_profane: bool = False
    source: Optional[str] = None  # "list" | "filter" when profane

    def to_dict(self) -> dict:
        return {"word": self.word, "is_profane": self.is_profane, "source": self.source}


@dataclass
class ProfanitySegment:
    index: int
    start: float
    end: float
    text: str
    highlighted_words: list[HighlightedWord] = field(default_factory=list)

    @property
    def profane_words(self) -> list[str]:
        return [hw.word for hw in self.highlighted_words if hw.is_profane]

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "highlighted_words": [hw.to_dict() for hw in self.highlighted_words],
        }

    @staticmethod
    def from_dict(data: dict) -> ProfanitySegment:
        return ProfanitySegment(
            index=int(data.get("index", 0)),
            start=float(data["start"]),
            end=float(data["end"]),
            text=str(data.get("text", "")),
            highlighted_words=[
                HighlightedWord(word=hw["word"], is_profane=bool(hw.get("is_profane", False)),
                                source=hw.get("source"))
                for hw in data.get("highlighted_words") or []
            ],
        )


@dataclass
class ProfanityReport:
    segments: list[ProfanitySegment] = field(default_factory=list)
    word_hits: list[tuple[str, int]] = field(default_factory=list)  # (word, entry index)
    total_duration: float = 0.0

    @property
    def profanity_count(self) -> int:
        return len(self.segments)

    def to_dict(self) -> dict:
        return {
            "segments": [s.to_dict() for s in self.segments],
            "word_hits": [{"word": w, "index": i} for w, i in self.word_hits],
            "profanity_count": self.profanity_count,
            "total_duration": self.total_duration,
        }
