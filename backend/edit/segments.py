"""Segment resolution: turns requested time ranges into operation plans.

All validation happens here, before anything is handed to FFmpeg, so an
invalid request never produces output or a version record.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence
from backend.errors import ConfigurationError
from backend.models import OperationKind, ProfanitySegment, TimeRange


@dataclass
class ClipSpec:
    """Ordered ranges cut from one uploaded source for a multi-source join."""
    source_id: str
    ranges: list[TimeRange]


@dataclass
class OperationPlan:
    kind: OperationKind
    ranges: list[TimeRange] = field(default_factory=list)
    join: bool = False
    clips: list[ClipSpec] = field(default_factory=list)

    @property
    def is_passthrough(self) -> bool:
        return self.kind == OperationKind.AUDIO_MUTE and not self.ranges

    def params(self) -> dict:
        data = {"ranges": [r.to_dict() for r in self.ranges], "join": self.join}
        if self.clips:
            data["clips"] = [
                {"source_id": c.source_id, "ranges": [r.to_dict() for r in c.ranges]}
                for c in self.clips
            ]
        return data


def _coerce(raw) -> tuple:
    if isinstance(raw, TimeRange):
        return raw.start, raw.end
    if isinstance(raw, dict):
        return raw.get("start"), raw.get("end")
    try:
        start, end = raw
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid range: {raw!r}")
    return start, end


def validate_range(start, end, duration: Optional[float] = None) -> TimeRange:
    """Check ``0 <= start < end``; with a known duration, clamp ``end`` to it."""
    try:
        start, end = float(start), float(end)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Range bounds must be numbers: {start!r}, {end!r}")
    if start < 0 or start >= end:
        raise ConfigurationError(f"Invalid range {start}-{end}: need 0 <= start < end")
    if duration:
        if start >= duration:
            raise ConfigurationError(f"Range {start}-{end} starts beyond media duration {duration}")
        end = min(end, duration)
    return TimeRange(start, end)


def validate_ranges(raw_ranges: Iterable, duration: Optional[float] = None) -> list[TimeRange]:
    """Validate each range, keeping caller order, overlaps and duplicates."""
    return [validate_range(*_coerce(r), duration=duration) for r in raw_ranges or []]


def ranges_for_selected_words(
    segments: Sequence[ProfanitySegment],
    selected_words: Iterable[str],
) -> list[TimeRange]:
    """Ranges of the segments containing at least one selected word."""
    selected = {w.strip().lower() for w in selected_words if w and w.strip()}
    if not selected:
        return []
    return [
        TimeRange(s.start, s.end)
        for s in segments
        if any(hw.word.lower() in selected for hw in s.highlighted_words)
    ]


def muted_duration(ranges: Iterable[TimeRange]) -> float:
    """Length of the union of ``ranges``; overlapping time is counted once."""
    total = 0.0
    cur_start = cur_end = None
    for r in sorted(ranges, key=lambda r: (r.start, r.end)):
        if cur_end is None or r.start > cur_end:
            if cur_end is not None:
                total += cur_end - cur_start
            cur_start, cur_end = r.start, r.end
        else:
            cur_end = max(cur_end, r.end)
    if cur_end is not None:
        total += cur_end - cur_start
    return total


def plan_mute(raw_ranges: Iterable, duration: Optional[float] = None) -> OperationPlan:
    """Zero ranges is a valid pass-through copy."""
    return OperationPlan(kind=OperationKind.AUDIO_MUTE, ranges=validate_ranges(raw_ranges, duration))


def plan_trim(raw_ranges: Iterable, join: bool = False, duration: Optional[float] = None) -> OperationPlan:
    """One range without join, or several ranges joined in the order given."""
    ranges = validate_ranges(raw_ranges, duration)
    if not ranges:
        raise ConfigurationError("Trim needs at least one range")
    if len(ranges) == 1 and not join:
        return OperationPlan(kind=OperationKind.TRIM, ranges=ranges)
    if len(ranges) > 1 and join:
        return OperationPlan(kind=OperationKind.TRIM_JOIN, ranges=ranges, join=True)
    if join:
        raise ConfigurationError("Invalid trim configuration: join needs at least two ranges")
    raise ConfigurationError("Invalid trim configuration: several ranges need join enabled")


def plan_multi_join(clips: Iterable) -> OperationPlan:
    """Join ranges from several sources, in the order given.

    ``clips`` holds ``ClipSpec`` objects or ``(source_id, ranges)`` pairs.
    """
    specs = []
    for clip in clips or []:
        if isinstance(clip, ClipSpec):
            source_id, raw_ranges = clip.source_id, clip.ranges
        else:
            try:
                source_id, raw_ranges = clip
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid clip: {clip!r}")
        if not source_id:
            raise ConfigurationError("Every clip needs a source id")
        ranges = validate_ranges(raw_ranges)
        if not ranges:
            raise ConfigurationError(f"Clip for source {source_id} has no ranges")
        specs.append(ClipSpec(source_id=source_id, ranges=ranges))
    if not specs:
        raise ConfigurationError("Multi-source join needs at least one clip")
    return OperationPlan(kind=OperationKind.MULTI_JOIN, join=True, clips=specs)
