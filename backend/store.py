"""Session & version store.

Process-wide, in-memory map from session id to its uploaded sources and its
edit history. One instance is created per application and shared through
``app.state``. All reads and writes go through a single coarse lock; the
long-running external tools are never invoked while it is held.

Each version records the ``source_version`` it was derived from. Two edits
started from the same source version therefore become siblings, and the
history is a tree. Only explicit version numbers are meaningful as a
pointer; ``current_version`` is merely the highest number handed out.
"""
from __future__ import annotations
import os
import shutil
import threading
import uuid
from typing import Iterable, Optional

from backend.errors import ConfigurationError, SessionNotFound, SourceNotFound, VersionNotFound
from backend.logging_config import get_logger
from backend.models import ORIGINAL, EditRecord, OperationKind, Session, SourceVersion, SourceVideo

logger = get_logger(__name__)


def parse_source_version(value) -> SourceVersion:
    """Normalize a client-supplied source version to ``"original"`` or an int.

    Anything else is returned unchanged so the lookup fails as not-found.
    """
    if value is None:
        return ORIGINAL
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    if text.lower() == ORIGINAL:
        return ORIGINAL
    try:
        return int(text)
    except ValueError:
        return text


class SessionStore:
    """Owns every session and the files that belong to it.

    Args:
        root_dir: Directory under which each session gets a working
            directory (``<root_dir>/<session_id>``).
    """

    def __init__(self, root_dir: str):
        self.root_dir = root_dir
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        os.makedirs(root_dir, exist_ok=True)

    # -- sessions -----------------------------------------------------------

    def create_session(self) -> Session:
        with self._lock:
            session_id = uuid.uuid4().hex
            if session_id in self._sessions:
                raise ConfigurationError(f"Session id collision: {session_id}")
            session = Session(id=session_id, workdir=os.path.join(self.root_dir, session_id))
            self._sessions[session_id] = session
        for sub in ("uploads", "versions", "tmp"):
            os.makedirs(os.path.join(session.workdir, sub), exist_ok=True)
        logger.info("Session created: %s", session_id)
        return session

    def get_session(self, session_id: str) -> Session:
        with self._lock:
            return self._get(session_id)

    def list_sessions(self) -> list[Session]:
        with self._lock:
            return list(self._sessions.values())

    def _get(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def uploads_dir(self, session_id: str) -> str:
        return os.path.join(self.get_session(session_id).workdir, "uploads")

    def versions_dir(self, session_id: str) -> str:
        return os.path.join(self.get_session(session_id).workdir, "versions")

    def tmp_dir(self, session_id: str) -> str:
        return os.path.join(self.get_session(session_id).workdir, "tmp")

    # -- sources ------------------------------------------------------------

    def register_source(self, session_id: str, source: SourceVideo) -> SourceVideo:
        with self._lock:
            session = self._get(session_id)
            session.sources[source.id] = source
        logger.info("Source registered: session=%s source=%s (%s, %d bytes)",
                    session_id, source.id, source.original_name, source.size)
        return source

    def get_source(self, session_id: str, source_id: str) -> SourceVideo:
        with self._lock:
            session = self._get(session_id)
            source = session.sources.get(source_id)
        if source is None:
            raise SourceNotFound(f"Source {source_id} not found in session {session_id}")
        return source

    def list_sources(self, session_id: str) -> list[SourceVideo]:
        with self._lock:
            return list(self._get(session_id).sources.values())

    # -- versions -----------------------------------------------------------

    def resolve_input(
        self,
        session_id: str,
        source_version: SourceVersion = ORIGINAL,
        source_id: Optional[str] = None,
    ) -> str:
        """Return the file an operation against ``source_version`` reads."""
        source_version = parse_source_version(source_version)
        with self._lock:
            session = self._get(session_id)
            if source_version == ORIGINAL:
                return self._original_path(session, source_id)
            if not isinstance(source_version, int):
                raise VersionNotFound(session_id, source_version)
            record = session.find_version(source_version)
            if record is None:
                raise VersionNotFound(session_id, source_version)
            return record.output_path

    def _original_path(self, session: Session, source_id: Optional[str]) -> str:
        if source_id:
            source = session.sources.get(source_id)
            if source is None:
                raise SourceNotFound(f"Source {source_id} not found in session {session.id}")
            return source.path
        if not session.sources:
            raise SourceNotFound(f"Session {session.id} has no uploaded video")
        if len(session.sources) > 1:
            raise ConfigurationError(
                "Session has several uploaded videos; source_id is required for the original"
            )
        return next(iter(session.sources.values())).path

    def append_version(
        self,
        session_id: str,
        kind: OperationKind,
        output_filename: str,
        output_path: str,
        source_version: SourceVersion = ORIGINAL,
        source_id: Optional[str] = None,
        params: Optional[dict] = None,
    ) -> EditRecord:
        """Record a successful operation and return it with its version number."""
        source_version = parse_source_version(source_version)
        with self._lock:
            session = self._get(session_id)
            if source_version != ORIGINAL and (
                not isinstance(source_version, int) or session.find_version(source_version) is None
            ):
                raise VersionNotFound(session_id, source_version)
            session.version_counter += 1
            record = EditRecord(
                version=session.version_counter,
                kind=kind,
                output_filename=output_filename,
                output_path=output_path,
                source_version=source_version,
                source_id=source_id,
                params=dict(params or {}),
            )
            session.versions.append(record)
        logger.info("Version %d appended: session=%s kind=%s from=%s",
                    record.version, session_id, kind.value, source_version)
        return record

    def get_version(self, session_id: str, version: int) -> EditRecord:
        with self._lock:
            record = self._get(session_id).find_version(version)
        if record is None:
            raise VersionNotFound(session_id, version)
        return record

    def history(self, session_id: str) -> list[EditRecord]:
        with self._lock:
            return list(self._get(session_id).versions)

    # -- custom vocabulary ----------------------------------------------------

    def add_custom_words(self, session_id: str, words: Iterable[str]) -> set[str]:
        cleaned = {w.strip().lower() for w in words if w and w.strip()}
        with self._lock:
            session = self._get(session_id)
            session.custom_words.update(cleaned)
            return set(session.custom_words)

    def custom_words(self, session_id: str) -> set[str]:
        with self._lock:
            return set(self._get(session_id).custom_words)

    # -- teardown -------------------------------------------------------------

    def destroy_session(self, session_id: str) -> bool:
        """Forget a session and delete all of its files.

        Returns ``False`` when the session was already gone.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            logger.debug("Destroy requested for unknown session %s", session_id)
            return False
        paths = [s.path for s in session.sources.values()] + [v.output_path for v in session.versions]
        removed = remove_files(paths)
        try:
            shutil.rmtree(session.workdir)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not delete %s: %s", session.workdir, e)
        logger.info("Session destroyed: %s (%d files removed)", session_id, removed)
        return True

    def flush(self) -> int:
        """Destroy every session. Returns how many were destroyed."""
        with self._lock:
            ids = list(self._sessions)
        return sum(1 for sid in ids if self.destroy_session(sid))


def remove_files(paths: Iterable[str]) -> int:
    """Best-effort delete; missing files are ignored and errors only logged."""
    removed = 0
    for path in paths:
        try:
            os.remove(path)
            removed += 1
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not delete %s: %s", path, e)
    return removed

