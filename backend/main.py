"""VidScrub: session-based profanity muting and trimming backend."""
from __future__ import annotations
import argparse
import os
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from backend import __version__
from backend.api.edit import router as edit_router
from backend.api.session import router as session_router
from backend.api.transcript import router as transcript_router
from backend.api.upload import router as upload_router
from backend.api.versions import router as versions_router
from backend.config import Settings
from backend.core.profanity import ProfanityDetector
from backend.core.transcriber import WhisperTranscriber
from backend.edit.engine import EditEngine, MediaExecutor
from backend.edit.transcript import Transcriber
from backend.errors import (
    ConfigurationError, ExecutorFailure, NotFoundError, TranscriptUnavailable, VidScrubError,
)
from backend.logging_config import configure_logging, get_logger
from backend.render.ffmpeg import FFmpegExecutor
from backend.store import SessionStore

logger = get_logger(__name__)

_STATUS = (
    (NotFoundError, 404),
    (ConfigurationError, 400),
    (TranscriptUnavailable, 502),
    (ExecutorFailure, 502),
)


def _status_for(exc: VidScrubError) -> int:
    for cls, status in _STATUS:
        if isinstance(exc, cls):
            return status
    return 500


async def _domain_error(request: Request, exc: VidScrubError):
    status = _status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        if isinstance(exc, ExecutorFailure) and exc.stderr:
            logger.debug("stderr: %s", exc.stderr)
    return JSONResponse(status_code=status,
                        content={"success": False, "error": exc.message, "kind": exc.kind})


def create_app(
    settings: Optional[Settings] = None,
    executor: Optional[MediaExecutor] = None,
    transcriber: Optional[Transcriber] = None,
) -> FastAPI:
    """Build the application. ``executor`` and ``transcriber`` default to FFmpeg and Whisper."""
    settings = settings or Settings.from_env()
    configure_logging(level=settings.log_level, format_string=settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Session data under %s", settings.data_dir)
        yield
        if settings.flush_on_shutdown:
            count = app.state.store.flush()
            logger.info("Shutdown: %d sessions flushed", count)

    app = FastAPI(title="VidScrub", version=__version__, lifespan=lifespan)

    store = SessionStore(settings.data_dir)
    executor = executor or FFmpegExecutor(codec=settings.video_codec, timeout=settings.tool_timeout)
    app.state.settings = settings
    app.state.store = store
    app.state.executor = executor
    app.state.transcriber = transcriber or WhisperTranscriber(
        model=settings.whisper_model,
        output_format=settings.transcript_format,
        timeout=settings.tool_timeout,
    )
    app.state.detector = ProfanityDetector()
    app.state.engine = EditEngine(store, executor, codec=settings.video_codec)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(VidScrubError, _domain_error)

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "version": __version__}

    app.include_router(session_router, prefix="/api", tags=["session"])
    app.include_router(upload_router, prefix="/api", tags=["upload"])
    app.include_router(transcript_router, prefix="/api", tags=["transcript"])
    app.include_router(edit_router, prefix="/api", tags=["edit"])
    app.include_router(versions_router, prefix="/api", tags=["versions"])
    return app


def run(argv: Optional[list[str]] = None) -> None:
    """Console entry point: serve the API with uvicorn.

    The app is built by uvicorn through ``create_app``; logging flags are
    handed to it through the ``VIDSCRUB_LOG_*`` variables it reads.
    """
    import uvicorn

    parser = argparse.ArgumentParser(description="VidScrub API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    noise = parser.add_mutually_exclusive_group()
    noise.add_argument("-v", "--verbose", action="store_true", help="log FFmpeg and Whisper commands")
    noise.add_argument("-q", "--quiet", action="store_true", help="only log critical errors")
    parser.add_argument("--log-format", default=None, help="logging format string")
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, quiet=args.quiet, format_string=args.log_format)
    if args.verbose:
        os.environ["VIDSCRUB_LOG_LEVEL"] = "DEBUG"
    elif args.quiet:
        os.environ["VIDSCRUB_LOG_LEVEL"] = "CRITICAL"
    if args.log_format:
        os.environ["VIDSCRUB_LOG_FORMAT"] = args.log_format

    uvicorn.run("backend.main:create_app", factory=True,
                host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    run()
