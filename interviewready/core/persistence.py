"""
Session persistence for InterviewReady

Completed interviews are stored as documents keyed by user:
    users/{user_id}/sessions/{session_id}

Two repositories share one interface:
- InMemorySessionRepository: process-local, for development and tests
- JsonFileSessionRepository: one JSON document per saved session
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from interviewready.config.settings import Settings, get_settings
from interviewready.models.report import InterviewSession

logger = logging.getLogger(__name__)

# Keys become path segments verbatim; ids outside this set are rejected, never rewritten
_SAFE_KEY = re.compile(r"[A-Za-z0-9_-]{1,128}")


class PersistenceError(Exception):
    """Raised when a session cannot be stored or read back."""
    pass


def _checked_key(value: str, what: str) -> str:
    if not _SAFE_KEY.fullmatch(value):
        raise PersistenceError(f"Unsupported {what}: {value!r}")
    return value


class SessionRepository(ABC):
    """Document store for completed interview sessions."""

    @abstractmethod
    async def save(self, session: InterviewSession) -> str:
        """Store a session and return its document ID."""

    @abstractmethod
    async def get(self, user_id: str, session_id: str) -> InterviewSession | None:
        """Fetch one saved session, or None."""

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[InterviewSession]:
        """All saved sessions for a user, most recent first."""


class InMemorySessionRepository(SessionRepository):
    """Sessions kept in a dict (lost on restart)."""

    def __init__(self):
        self._documents: dict[str, dict[str, InterviewSession]] = {}

    async def save(self, session: InterviewSession) -> str:
        self._documents.setdefault(session.user_id, {})[session.id] = session.model_copy(deep=True)
        logger.info(f"Saved session {session.id} for user {session.user_id}")
        return session.id

    async def get(self, user_id: str, session_id: str) -> InterviewSession | None:
        return self._documents.get(user_id, {}).get(session_id)

    async def list_for_user(self, user_id: str) -> list[InterviewSession]:
        sessions = list(self._documents.get(user_id, {}).values())
        return sorted(sessions, key=lambda s: s.completed_at, reverse=True)


class JsonFileSessionRepository(SessionRepository):
    """Sessions written as JSON documents under a root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _user_dir(self, user_id: str) -> Path:
        return self.root / "users" / _checked_key(user_id, "user id") / "sessions"

    def _document_path(self, user_id: str, session_id: str) -> Path:
        return self._user_dir(user_id) / f"{_checked_key(session_id, 'session id')}.json"

    async def save(self, session: InterviewSession) -> str:
        path = self._document_path(session.user_id, session.id)
        payload = session.model_dump_json(indent=2)

        try:
            await asyncio.to_thread(self._write, path, payload)
        except OSError as e:
            logger.error(f"Error saving interview session {session.id}: {e}")
            raise PersistenceError(f"Could not save session {session.id}") from e

        logger.info(f"Saved session {session.id} to {path}")
        return session.id

    async def get(self, user_id: str, session_id: str) -> InterviewSession | None:
        path = self._document_path(user_id, session_id)
        if not path.exists():
            return None
        return await asyncio.to_thread(self._read, path)

    async def list_for_user(self, user_id: str) -> list[InterviewSession]:
        user_dir = self._user_dir(user_id)
        if not user_dir.exists():
            return []

        sessions = [
            await asyncio.to_thread(self._read, path)
            for path in sorted(user_dir.glob("*.json"))
        ]
        return sorted(sessions, key=lambda s: s.completed_at, reverse=True)

    @staticmethod
    def _write(path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(path)

    @staticmethod
    def _read(path: Path) -> InterviewSession:
        try:
            return InterviewSession.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise PersistenceError(f"Could not read session document {path.name}") from e


def create_repository(settings: Settings | None = None) -> SessionRepository:
    """Build the repository named by ``settings.storage_backend``."""
    settings = settings or get_settings()
    if settings.storage_backend == "file":
        return JsonFileSessionRepository(settings.storage_path)
    return InMemorySessionRepository()
