"""Runtime settings read from the environment."""
from __future__ import annotations
import os
from dataclasses import dataclass, field

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "sessions")

VIDEO_EXTENSIONS = (".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm", ".mkv", ".m4v", ".3gp")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


@dataclass
class Settings:
    data_dir: str = DEFAULT_DATA_DIR
    whisper_model: str = "base"
    default_language: str = "hi"
    transcript_format: str = "json"  # json | srt
    log_level: str = "INFO"
    log_format: str | None = None
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    video_codec: str = "libx264"
    flush_on_shutdown: bool = True
    # Seconds; None means external tools may run indefinitely.
    tool_timeout: float | None = None

    @classmethod
    def from_env(cls) -> Settings:
        origins = os.getenv("VIDSCRUB_CORS_ORIGINS", "*")
        return cls(
            data_dir=os.getenv("VIDSCRUB_DATA_DIR", DEFAULT_DATA_DIR),
            whisper_model=os.getenv("WHISPER_MODEL", "base"),
            default_language=os.getenv("VIDSCRUB_LANGUAGE", "hi"),
            transcript_format=os.getenv("VIDSCRUB_TRANSCRIPT_FORMAT", "json").lower(),
            log_level=os.getenv("VIDSCRUB_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("VIDSCRUB_LOG_FORMAT") or None,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            video_codec=os.getenv("VIDSCRUB_VIDEO_CODEC", "libx264"),
            flush_on_shutdown=_env_bool("VIDSCRUB_FLUSH_ON_SHUTDOWN", True),
            tool_timeout=_env_float("VIDSCRUB_TOOL_TIMEOUT"),
        )
