"""Error taxonomy shared by the store, pipeline and API layers."""
from __future__ import annotations


class VidScrubError(Exception):
    """Base class for all domain errors."""

    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFoundError(VidScrubError):
    kind = "not_found"


class SessionNotFound(NotFoundError):
    kind = "session_not_found"

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class VersionNotFound(NotFoundError):
    kind = "version_not_found"

    def __init__(self, session_id: str, version):
        super().__init__(f"Version {version!r} not found in session {session_id}")
        self.session_id = session_id
        self.version = version


class SourceNotFound(NotFoundError):
    kind = "source_not_found"


class TranscriptUnavailable(VidScrubError):
    """Transcription failed or produced output that could not be parsed."""

    kind = "transcript_unavailable"


class ConfigurationError(VidScrubError):
    """Structurally invalid operation request. Raised before any work starts."""

    kind = "configuration_error"


class ExecutorFailure(VidScrubError):
    """The external media tool reported an error."""

    kind = "executor_failure"

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr
