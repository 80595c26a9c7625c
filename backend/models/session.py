"""Session, source video and version records."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union
import time

ORIGINAL = "original"

SourceVersion = Union[str, int]


class OperationKind(str, Enum):
    AUDIO_MUTE = "audio_mute"
    TRIM = "trim"
    TRIM_JOIN = "trim_join"
    MULTI_JOIN = "multi_join"


@dataclass(frozen=True)
class TimeRange:
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass
class MediaInfo:
    duration: float = 0.0
    size: int = 0
    format: str = ""
    video_codec: str = ""
    resolution: str = ""
    width: int = 0
    height: int = 0
    fps: str = ""
    video_bitrate: int = 0
    audio_codec: str = ""
    audio_channels: int = 0
    sample_rate: int = 0

    def to_dict(self) -> dict:
        return {
            "duration": self.duration,
            "size": self.size,
            "format": self.format,
            "video": {
                "codec": self.video_codec,
                "resolution": self.resolution,
                "fps": self.fps,
                "bitrate": self.video_bitrate,
            },
            "audio": {
                "codec": self.audio_codec,
                "channels": self.audio_channels,
                "sample_rate": self.sample_rate,
            },
        }


@dataclass
class SourceVideo:
    id: str
    original_name: str
    stored_filename: str
    size: int
    path: str
    uploaded_at: float = field(default_factory=time.time)
    media_info: MediaInfo = field(default_factory=MediaInfo)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "original_name": self.original_name,
            "filename": self.stored_filename,
            "size": self.size,
            "uploaded_at": self.uploaded_at,
            "video_info": self.media_info.to_dict(),
        }


@dataclass
class EditRecord:
    version: int
    kind: OperationKind
    output_filename: str
    output_path: str
    source_version: SourceVersion = ORIGINAL
    source_id: Optional[str] = None
    params: dict = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "kind": self.kind.value,
            "output_file": self.output_filename,
            "source_version": self.source_version,
            "source_id": self.source_id,
            "params": self.params,
            "timestamp": self.timestamp,
        }


@dataclass
class Session:
    id: str
    workdir: str
    created_at: float = field(default_factory=time.time)
    sources: dict[str, SourceVideo] = field(default_factory=dict)  # insertion-ordered
    versions: list[EditRecord] = field(default_factory=list)
    version_counter: int = 0
    custom_words: set[str] = field(default_factory=set)

    def find_version(self, number: int) -> Optional[EditRecord]:
        return next((v for v in self.versions if v.version == number), None)

    def to_dict(self) -> dict:
        return {
            "session_id": self.id,
            "created_at": self.created_at,
            "sources": [s.to_dict() for s in self.sources.values()],
            "current_version": self.version_counter,
            "versions": [v.to_dict() for v in self.versions],
            "custom_words": sorted(self.custom_words),
        }
