"""Media metadata via ffprobe."""
from __future__ import annotations
import asyncio, json, subprocess
from backend.logging_config import get_logger
from backend.models import MediaInfo

logger = get_logger(__name__)


def _int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_probe(data: dict) -> MediaInfo:
    """Build MediaInfo from ``ffprobe -show_format -show_streams`` JSON."""
    streams = data.get("streams", [])
    video = next((s for s in streams if s.get("codec_type") == "video"), {})
    audio = next((s for s in streams if s.get("codec_type") == "audio"), {})
    fmt = data.get("format", {})
    width, height = _int(video.get("width")), _int(video.get("height"))
    try:
        duration = float(fmt.get("duration", 0) or 0)
    except (TypeError, ValueError):
        duration = 0.0
    return MediaInfo(
        duration=duration,
        size=_int(fmt.get("size")),
        format=fmt.get("format_name", ""),
        video_codec=video.get("codec_name", ""),
        resolution=f"{width}x{height}" if video else "",
        width=width,
        height=height,
        fps=video.get("r_frame_rate", ""),
        video_bitrate=_int(video.get("bit_rate")),
        audio_codec=audio.get("codec_name", ""),
        audio_channels=_int(audio.get("channels")),
        sample_rate=_int(audio.get("sample_rate")),
    )


def get_video_info(video_path: str) -> MediaInfo:
    """Best-effort probe; returns an empty MediaInfo when ffprobe fails."""
    try:
        result = subprocess.run([
            "ffprobe", "-v", "quiet", "-print_format", "json",
            "-show_format", "-show_streams", video_path
        ], capture_output=True, text=True, timeout=30)
        info = parse_probe(json.loads(result.stdout or "{}"))
    except (OSError, subprocess.SubprocessError, ValueError) as e:
        logger.warning("Video analysis failed for %s: %s", video_path, e)
        return MediaInfo()
    logger.info("Video analysis completed: duration=%.1fs resolution=%s format=%s",
                info.duration, info.resolution or "?", info.format or "?")
    return info


async def probe_media(video_path: str) -> MediaInfo:
    return await asyncio.to_thread(get_video_info, video_path)
