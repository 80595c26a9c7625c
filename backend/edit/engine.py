"""Edit engine: runs validated operations and records the resulting versions.

Every edit reads the file its ``source_version`` resolves to and writes a new
file; nothing is modified in place. A version is appended only after the
executor reports success.
"""
from __future__ import annotations
import os, uuid
from typing import Iterable, Optional, Protocol
from backend.edit.segments import OperationPlan, plan_multi_join, plan_mute, plan_trim
from backend.errors import VidScrubError
from backend.logging_config import get_logger
from backend.models import ORIGINAL, EditRecord, OperationKind, SourceVersion
from backend.render.ffmpeg import MediaOperation, RenderProfile
from backend.store import SessionStore, parse_source_version, remove_files

logger = get_logger(__name__)


class MediaExecutor(Protocol):
    async def run(self, op: MediaOperation) -> str: ...


class EditEngine:
    def __init__(self, store: SessionStore, executor: MediaExecutor, codec: str = "libx264"):
        self.store = store
        self.executor = executor
        self.codec = codec

    def input_duration(self, session_id: str, source_version: SourceVersion = ORIGINAL,
                       source_id: Optional[str] = None) -> float:
        """Known duration of the input, or 0.0 when it was never probed."""
        if parse_source_version(source_version) != ORIGINAL:
            return 0.0
        sources = self.store.list_sources(session_id)
        if source_id:
            source = self.store.get_source(session_id, source_id)
        elif len(sources) == 1:
            source = sources[0]
        else:
            return 0.0
        return source.media_info.duration

    def _output_path(self, session_id: str, kind: OperationKind, input_path: str = "") -> str:
        # stream copy keeps the input container; re-encodes are written as mp4
        ext = os.path.splitext(input_path)[1] if kind == OperationKind.AUDIO_MUTE else ""
        filename = f"{kind.value}_{uuid.uuid4().hex[:8]}{ext or '.mp4'}"
        return os.path.join(self.store.versions_dir(session_id), filename)

    def _single_input(self, session_id: str, plan: OperationPlan, source_version, source_id) -> MediaOperation:
        input_path = self.store.resolve_input(session_id, source_version, source_id)
        return MediaOperation(
            kind=plan.kind,
            input_path=input_path,
            output_path=self._output_path(session_id, plan.kind, input_path),
            ranges=list(plan.ranges),
            join=plan.join,
        )

    def _multi_input(self, session_id: str, plan: OperationPlan, source_version, source_id) -> MediaOperation:
        clips = []
        profile = None
        for clip in plan.clips:
            source = self.store.get_source(session_id, clip.source_id)
            clips.append((source.path, list(clip.ranges)))
            if profile is None and source.media_info.width and source.media_info.height:
                profile = RenderProfile.original(source.media_info.width, source.media_info.height,
                                                 codec=self.codec)
        return MediaOperation(
            kind=plan.kind,
            output_path=self._output_path(session_id, plan.kind),
            join=True,
            clips=clips,
            profile=profile or RenderProfile.hd(self.codec),
        )

    async def apply(
        self,
        session_id: str,
        plan: OperationPlan,
        source_version: SourceVersion = ORIGINAL,
        source_id: Optional[str] = None,
        params: Optional[dict] = None,
    ) -> EditRecord:
        """Run ``plan`` against ``source_version`` and append the new version."""
        handlers = {
            OperationKind.AUDIO_MUTE: self._single_input,
            OperationKind.TRIM: self._single_input,
            OperationKind.TRIM_JOIN: self._single_input,
            OperationKind.MULTI_JOIN: self._multi_input,
        }
        source_version = parse_source_version(source_version)
        op = handlers[plan.kind](session_id, plan, source_version, source_id)
        logger.info("Applying %s to session %s (source version %s, %d ranges)",
                    plan.kind.value, session_id, source_version,
                    len(plan.ranges) or sum(len(c.ranges) for c in plan.clips))

        output_filename = await self.executor.run(op)

        record_params = plan.params()
        record_params.update(params or {})
        try:
            return self.store.append_version(
                session_id,
                kind=plan.kind,
                output_filename=output_filename,
                output_path=op.output_path,
                source_version=source_version,
                source_id=source_id,
                params=record_params,
            )
        except VidScrubError:
            # an output without a version record is never kept
            remove_files([op.output_path])
            logger.warning("Discarded %s output for session %s", plan.kind.value, session_id)
            raise

    # Convenience entry points

    async def mute(self, session_id: str, ranges: Iterable, source_version: SourceVersion = ORIGINAL,
                   source_id: Optional[str] = None, params: Optional[dict] = None) -> EditRecord:
        duration = self.input_duration(session_id, source_version, source_id)
        plan = plan_mute(ranges, duration=duration)
        return await self.apply(session_id, plan, source_version, source_id, params)

    async def trim(self, session_id: str, ranges: Iterable, join: bool = False,
                   source_version: SourceVersion = ORIGINAL, source_id: Optional[str] = None) -> EditRecord:
        duration = self.input_duration(session_id, source_version, source_id)
        plan = plan_trim(ranges, join=join, duration=duration)
        return await self.apply(session_id, plan, source_version, source_id)

    async def multi_join(self, session_id: str, clips: Iterable) -> EditRecord:
        plan = plan_multi_join(clips)
        return await self.apply(session_id, plan, ORIGINAL)
