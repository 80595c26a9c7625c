"""Profanity detection over normalized transcripts.

Each whitespace token is checked against a combined vocabulary (static list
for the language family plus session custom words) and run through a word
filter. Tokens are not stripped of punctuation, so ``damn!`` misses the
exact list lookup; the default filter, backed by ``better_profanity``, still
catches it along with obfuscated spellings such as ``sh1t``.
"""
from __future__ import annotations
from better_profanity import Profanity
from functools import lru_cache
from typing import Callable, Iterable, Optional
from backend.edit.segments import muted_duration
from backend.logging_config import get_logger
from backend.models import HighlightedWord, ProfanityReport, ProfanitySegment, TimeRange, TranscriptEntry

logger = get_logger(__name__)

SOURCE_LIST = "list"
SOURCE_FILTER = "filter"

WordFilter = Callable[[str, str], str]

ENGLISH_WORDS = frozenset({
    "arse", "arsehole", "ass", "asshole", "bastard", "bitch", "bitches", "bloody",
    "bollocks", "bullshit", "crap", "cunt", "damn", "damned", "dick", "dickhead",
    "douche", "fuck", "fucked", "fucker", "fucking", "goddamn", "hell", "motherfucker",
    "piss", "pissed", "prick", "shit", "shitty", "slut", "twat", "wanker", "whore",
})

HINDI_WORDS = frozenset({
    # romanised
    "bakchod", "bakchodi", "behenchod", "bhenchod", "bc", "bhosdike", "bhosda",
    "chutiya", "chutiye", "chodu", "gaand", "gandu", "haramkhor", "harami",
    "kamina", "kamine", "kutta", "kutte", "kutiya", "lauda", "lavda", "lodu",
    "madarchod", "mc", "randi", "saala", "saali", "tatti",
    # Devanagari
    "चूतिया", "चुतिया", "भेनचोद", "बहनचोद", "मादरचोद", "गांडू", "गांड", "हरामी",
    "कमीना", "कुत्ता", "कुत्ते", "रंडी", "साला", "भोसडीके", "लौड़ा",
})

WORDLISTS: dict[str, frozenset[str]] = {
    "en": ENGLISH_WORDS,
    # Hindi speech is routinely code-mixed with English.
    "hi": HINDI_WORDS | ENGLISH_WORDS,
}

_LANGUAGE_ALIASES = {"english": "en", "hindi": "hi", "hinglish": "hi", "ur": "hi", "urdu": "hi"}


def language_family(language: Optional[str]) -> str:
    code = (language or "en").strip().lower()
    code = _LANGUAGE_ALIASES.get(code, code.split("-")[0].split("_")[0])
    return code if code in WORDLISTS else "en"


def static_wordlist(language: Optional[str]) -> frozenset[str]:
    return WORDLISTS[language_family(language)]


@lru_cache(maxsize=8)
def _censor_for(family: str) -> Profanity:
    # library vocabulary (with leetspeak variants) extended by the family's list
    censor = Profanity()
    censor.add_censor_words(sorted(WORDLISTS[family]))
    return censor


def mask_profanity(token: str, language: str) -> str:
    """Default word filter: ``better_profanity`` censoring for the language family."""
    return _censor_for(language_family(language)).censor(token)


class ProfanityDetector:
    """Classifies transcript tokens and builds profanity reports.

    Args:
        word_filter: ``(token, language) -> token``; a changed return value
            marks the token profane.
        wordlists: Static vocabularies keyed by language family.
    """

    def __init__(self, word_filter: WordFilter = mask_profanity,
                 wordlists: Optional[dict[str, frozenset[str]]] = None):
        self.word_filter = word_filter
        self.wordlists = wordlists if wordlists is not None else WORDLISTS

    def vocabulary(self, language: Optional[str], custom_words: Iterable[str] = ()) -> set[str]:
        base = self.wordlists.get(language_family(language), frozenset())
        vocab = {w.lower() for w in base}
        vocab.update(w.strip().lower() for w in custom_words if w and w.strip())
        return vocab

    def classify(self, token: str, language: str, vocab: set[str]) -> HighlightedWord:
        if token.lower() in vocab:
            return HighlightedWord(word=token, is_profane=True, source=SOURCE_LIST)
        if self.word_filter(token, language) != token:
            return HighlightedWord(word=token, is_profane=True, source=SOURCE_FILTER)
        return HighlightedWord(word=token)

    def detect(
        self,
        transcript: list[TranscriptEntry],
        language: str = "hi",
        custom_words: Iterable[str] = (),
    ) -> ProfanityReport:
        """Flag every entry that contains at least one profane token.

        The flagged range is always the whole entry; word timings are not
        used to narrow it.
        """
        vocab = self.vocabulary(language, custom_words)
        report = ProfanityReport()
        logger.info("Scanning %d transcript entries for profanity (language=%s, vocabulary=%d)",
                    len(transcript), language, len(vocab))

        for entry in transcript:
            highlighted = [self.classify(tok, language, vocab) for tok in entry.text.split()]
            hits = [hw for hw in highlighted if hw.is_profane]
            if not hits:
                continue
            report.segments.append(ProfanitySegment(
                index=entry.index,
                start=entry.start,
                end=entry.end,
                text=entry.text,
                highlighted_words=highlighted,
            ))
            report.word_hits.extend((hw.word, entry.index) for hw in hits)
            logger.debug("Profanity at entry %d (%.2f-%.2f): %s",
                         entry.index, entry.start, entry.end, [hw.word for hw in hits])

        report.total_duration = muted_duration(TimeRange(s.start, s.end) for s in report.segments)
        logger.info("Profanity scan completed: %d of %d entries flagged, %.2fs to mute",
                    report.profanity_count, len(transcript), report.total_duration)
        return report
