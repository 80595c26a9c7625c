"""FFmpeg engine: builds and executes ffmpeg commands for edit operations."""
from __future__ import annotations
import asyncio, os, subprocess
from dataclasses import dataclass, field
from typing import Optional, Sequence
from backend.errors import ConfigurationError, ExecutorFailure
from backend.logging_config import get_logger
from backend.models import OperationKind, TimeRange

logger = get_logger(__name__)


@dataclass
class RenderProfile:
    """Common encoding profile every input is scaled to before a multi-source join."""
    name: str
    width: int
    height: int
    fps: int = 30
    sample_rate: int = 44100
    codec: str = "libx264"

    @staticmethod
    def hd(codec: str = "libx264") -> RenderProfile:
        return RenderProfile("HD", 1280, 720, codec=codec)

    @staticmethod
    def original(w: int, h: int, fps: int = 30, codec: str = "libx264") -> RenderProfile:
        # libx264 with yuv420p needs even dimensions
        return RenderProfile("Original", w - w % 2, h - h % 2, fps, codec=codec)


@dataclass
class MediaOperation:
    """One request to the executor.

    ``clips`` is only used for multi-source joins: ``(input_path, ranges)``
    pairs in output order.
    """
    kind: OperationKind
    output_path: str
    input_path: str = ""
    ranges: list[TimeRange] = field(default_factory=list)
    join: bool = False
    clips: list[tuple[str, list[TimeRange]]] = field(default_factory=list)
    profile: Optional[RenderProfile] = None


def _ts(seconds: float) -> str:
    """Seconds formatted for ffmpeg args and filter expressions (ms precision)."""
    return f"{seconds:.3f}".rstrip("0").rstrip(".") or "0"


def _encode_args(codec: str) -> list[str]:
    return [
        "-c:v", codec,
        "-preset", "medium",
        "-crf", "23",
        "-c:a", "aac",
        "-movflags", "+faststart",
    ]


def build_copy_command(input_path: str, output_path: str) -> list[str]:
    return ["ffmpeg", "-y", "-i", input_path, "-c", "copy", output_path]


def build_mute_filter(ranges: Sequence[TimeRange]) -> str:
    """Volume filter silencing every range.

    The ``between()`` terms are summed, so overlapping or repeated ranges
    simply mute the same time again; ranges are used in the order given.
    """
    conditions = "+".join(f"between(t,{_ts(r.start)},{_ts(r.end)})" for r in ranges)
    return f"[0:a]volume=enable='{conditions}':volume=0[outa]"


def build_mute_command(input_path: str, output_path: str, ranges: Sequence[TimeRange]) -> list[str]:
    if not ranges:
        return build_copy_command(input_path, output_path)
    return [
        "ffmpeg", "-y", "-i", input_path,
        "-filter_complex", build_mute_filter(ranges),
        "-map", "0:v",
        "-map", "[outa]",
        "-c:v", "copy",
        "-c:a", "aac",
        "-movflags", "+faststart",
        output_path,
    ]


def build_trim_command(input_path: str, output_path: str, time_range: TimeRange,
                       codec: str = "libx264") -> list[str]:
    return [
        "ffmpeg", "-y", "-i", input_path,
        "-ss", _ts(time_range.start),
        "-t", _ts(time_range.duration),
        *_encode_args(codec),
        output_path,
    ]


def build_join_filter(ranges: Sequence[TimeRange]) -> tuple[str, str]:
    """Trim each range from input 0; returns (filter chains, concat input pads)."""
    chains, pads = [], ""
    for i, r in enumerate(ranges):
        v, a = f"v{i}", f"a{i}"
        chains.append(f"[0:v]trim=start={_ts(r.start)}:end={_ts(r.end)},setpts=PTS-STARTPTS[{v}]")
        chains.append(f"[0:a]atrim=start={_ts(r.start)}:end={_ts(r.end)},asetpts=PTS-STARTPTS[{a}]")
        pads += f"[{v}][{a}]"
    return ";".join(chains), pads


def build_join_command(input_path: str, output_path: str, ranges: Sequence[TimeRange],
                       codec: str = "libx264") -> list[str]:
    chains, pads = build_join_filter(ranges)
    graph = f"{chains};{pads}concat=n={len(ranges)}:v=1:a=1[outv][outa]"
    return [
        "ffmpeg", "-y", "-i", input_path,
        "-filter_complex", graph,
        "-map", "[outv]",
        "-map", "[outa]",
        *_encode_args(codec),
        output_path,
    ]


def build_multi_join_command(clips: Sequence[tuple[str, Sequence[TimeRange]]], output_path: str,
                             profile: RenderProfile) -> list[str]:
    """Concatenate ranges from several inputs after normalizing them to ``profile``."""
    cmd = ["ffmpeg", "-y"]
    for path, _ in clips:
        cmd += ["-i", path]

    w, h = profile.width, profile.height
    vnorm = (f"scale={w}:{h}:force_original_aspect_ratio=decrease,"
             f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2,setsar=1,fps={profile.fps},format=yuv420p")
    anorm = f"aresample={profile.sample_rate},aformat=sample_fmts=fltp:channel_layouts=stereo"

    chains, pads, count = [], "", 0
    for idx, (_, ranges) in enumerate(clips):
        for j, r in enumerate(ranges):
            v, a = f"v{idx}_{j}", f"a{idx}_{j}"
            chains.append(f"[{idx}:v]trim=start={_ts(r.start)}:end={_ts(r.end)},setpts=PTS-STARTPTS,{vnorm}[{v}]")
            chains.append(f"[{idx}:a]atrim=start={_ts(r.start)}:end={_ts(r.end)},asetpts=PTS-STARTPTS,{anorm}[{a}]")
            pads += f"[{v}][{a}]"
            count += 1
    graph = ";".join(chains) + f";{pads}concat=n={count}:v=1:a=1[outv][outa]"
    return cmd + [
        "-filter_complex", graph,
        "-map", "[outv]",
        "-map", "[outa]",
        *_encode_args(profile.codec),
        output_path,
    ]


def build_command(op: MediaOperation, codec: str = "libx264") -> list[str]:
    """Pick the command for an operation. Structural problems raise ConfigurationError."""
    if op.kind == OperationKind.AUDIO_MUTE:
        return build_mute_command(op.input_path, op.output_path, op.ranges)
    if op.kind == OperationKind.TRIM:
        if len(op.ranges) != 1 or op.join:
            raise ConfigurationError("Invalid trim configuration")
        return build_trim_command(op.input_path, op.output_path, op.ranges[0], codec)
    if op.kind == OperationKind.TRIM_JOIN:
        if len(op.ranges) < 2 or not op.join:
            raise ConfigurationError("Invalid trim configuration")
        return build_join_command(op.input_path, op.output_path, op.ranges, codec)
    if op.kind == OperationKind.MULTI_JOIN:
        if not op.clips or any(not ranges for _, ranges in op.clips):
            raise ConfigurationError("Multi-source join needs ranges for every clip")
        return build_multi_join_command(op.clips, op.output_path, op.profile or RenderProfile.hd(codec))
    raise ConfigurationError(f"Unknown operation: {op.kind}")


def _stderr_tail(stderr: str, lines: int = 15) -> str:
    return "\n".join((stderr or "").strip().splitlines()[-lines:])


class FFmpegExecutor:
    """Runs media operations with the ffmpeg binary.

    The blocking ffmpeg process runs in a worker thread so the calling task
    suspends without blocking the event loop. A failed run leaves no output
    file behind.
    """

    def __init__(self, codec: str = "libx264", timeout: Optional[float] = None, binary: str = "ffmpeg"):
        self.codec = codec
        self.timeout = timeout
        self.binary = binary

    async def run(self, op: MediaOperation) -> str:
        """Execute ``op`` and return the output filename."""
        cmd = build_command(op, self.codec)
        cmd[0] = self.binary
        logger.info("FFmpeg %s started -> %s", op.kind.value, os.path.basename(op.output_path))
        logger.debug("FFmpeg command: %s", " ".join(cmd))

        try:
            result = await asyncio.to_thread(
                subprocess.run, cmd, capture_output=True, text=True, timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            self._discard(op.output_path)
            logger.error("FFmpeg %s could not run: %s", op.kind.value, e)
            raise ExecutorFailure(f"ffmpeg could not run: {e}") from e

        if result.returncode != 0 or not os.path.exists(op.output_path):
            self._discard(op.output_path)
            tail = _stderr_tail(result.stderr)
            logger.error("FFmpeg %s failed (exit %s): %s", op.kind.value, result.returncode, tail)
            raise ExecutorFailure(f"ffmpeg {op.kind.value} failed with exit code {result.returncode}",
                                  stderr=tail)

        logger.info("FFmpeg %s completed -> %s", op.kind.value, os.path.basename(op.output_path))
        return os.path.basename(op.output_path)

    @staticmethod
    def _discard(path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not delete partial output %s: %s", path, e)
