"""Audio transcription using the Whisper CLI."""
from __future__ import annotations
import asyncio, os, subprocess, uuid
from typing import Optional
from backend.core.transcript import TranscriptFormat, load_transcript
from backend.errors import TranscriptUnavailable
from backend.logging_config import get_logger
from backend.models import TranscriptEntry
from backend.store import remove_files

logger = get_logger(__name__)


def extract_audio(video_path: str, output_path: str, timeout: Optional[float] = None) -> str:
    """Extract audio track from video as 16 kHz mono WAV."""
    result = subprocess.run([
        "ffmpeg", "-y", "-i", video_path,
        "-vn", "-acodec", "pcm_s16le", "-ar", "16000", "-ac", "1",
        output_path
    ], capture_output=True, text=True, timeout=timeout)
    if result.returncode != 0 or not os.path.exists(output_path):
        raise TranscriptUnavailable(f"Audio extraction failed: {(result.stderr or '').strip()[-300:]}")
    return output_path


def run_whisper(audio_path: str, output_dir: str, language: str, model: str,
                output_format: TranscriptFormat, timeout: Optional[float] = None) -> str:
    """Run Whisper and return the path of the transcript it wrote."""
    cmd = [
        "whisper", audio_path,
        "--model", model,
        "--language", language,
        "--task", "transcribe",
        "--output_format", output_format.value,
        "--output_dir", output_dir,
    ]
    if output_format == TranscriptFormat.JSON:
        cmd += ["--word_timestamps", "True"]
    logger.debug("Whisper command: %s", " ".join(cmd))
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    if result.returncode != 0:
        raise TranscriptUnavailable(f"Whisper failed: {(result.stderr or '').strip()[-300:]}")

    stem = os.path.splitext(os.path.basename(audio_path))[0]
    return os.path.join(output_dir, f"{stem}.{output_format.value}")


class WhisperTranscriber:
    """Transcribes a video file into normalized transcript entries.

    Transient files (extracted audio, Whisper output) are written under the
    given working directory and removed when the call finishes.
    """

    def __init__(self, model: str = "base", output_format: str = "json", timeout: Optional[float] = None):
        self.model = model
        self.output_format = TranscriptFormat(output_format)
        self.timeout = timeout

    def _transcribe_sync(self, video_path: str, work_dir: str, language: str) -> list[TranscriptEntry]:
        os.makedirs(work_dir, exist_ok=True)
        audio_path = os.path.join(work_dir, f"audio_{uuid.uuid4().hex[:8]}.wav")
        transcript_path = ""
        try:
            logger.info("Extracting audio from %s", os.path.basename(video_path))
            extract_audio(video_path, audio_path, timeout=self.timeout)
            logger.info("Transcribing with Whisper (model=%s, language=%s)", self.model, language)
            transcript_path = run_whisper(audio_path, work_dir, language, self.model,
                                          self.output_format, timeout=self.timeout)
            entries = load_transcript(transcript_path, self.output_format)
        except (OSError, subprocess.SubprocessError) as e:
            raise TranscriptUnavailable(f"Transcription failed: {e}") from e
        finally:
            remove_files([audio_path] + ([transcript_path] if transcript_path else []))
        logger.info("Transcription completed: %d entries", len(entries))
        return entries

    async def transcribe(self, video_path: str, work_dir: str, language: str = "hi") -> list[TranscriptEntry]:
        return await asyncio.to_thread(self._transcribe_sync, video_path, work_dir, language)
