"""
Session Manager for InterviewReady

Creates one fresh InterviewSessionController per interview and keeps
track of the live ones. Controllers share only stateless
collaborators (the question service and the repository).
"""

import logging
import time
from uuid import uuid4

from interviewready.config.settings import Settings, get_settings
from interviewready.core.events import EventHub
from interviewready.core.persistence import SessionRepository
from interviewready.core.question_service import QuestionService
from interviewready.core.session_controller import InterviewSessionController
from interviewready.core.speech import (
    EdgeTTSSynthesizer,
    RelayedSpeech,
    SilentSpeech,
    SpeechAdapter,
)

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when a session ID is unknown (or belongs to another user)."""
    pass


class SessionManager:
    """Registry of live interview sessions."""

    def __init__(
        self,
        question_service: QuestionService,
        repository: SessionRepository,
        settings: Settings | None = None,
    ):
        self.question_service = question_service
        self.repository = repository
        self.settings = settings or get_settings()

        # In-memory only; idle sessions are dropped by evict_idle()
        self._sessions: dict[str, InterviewSessionController] = {}
        self._last_seen: dict[str, float] = {}

    def create(self, user_id: str, speech_supported: bool = True) -> InterviewSessionController:
        """
        Create a new session in SETUP.

        Args:
            user_id: Owner of the session
            speech_supported: Whether the client can play and capture speech
        """
        session_id = uuid4().hex
        events = EventHub(session_id)

        controller = InterviewSessionController(
            question_service=self.question_service,
            speech=self._build_speech(events, speech_supported),
            repository=self.repository,
            user_id=user_id,
            session_id=session_id,
            events=events,
            listen_delay=self.settings.listen_delay_seconds,
            tick_seconds=self.settings.timer_tick_seconds,
        )
        self._sessions[controller.session_id] = controller
        self._last_seen[controller.session_id] = time.monotonic()

        if not speech_supported:
            logger.warning(f"Session {controller.session_id}: client has no speech support")
        logger.info(f"Created interview session: {controller.session_id}")
        return controller

    def _build_speech(self, events: EventHub, speech_supported: bool) -> SpeechAdapter:
        if not speech_supported:
            return SilentSpeech(events)

        synthesizer = None
        if self.settings.tts_enabled:
            synthesizer = EdgeTTSSynthesizer(self.settings.tts_voice)

        return RelayedSpeech(
            events,
            synthesizer=synthesizer,
            playback_timeout=self.settings.playback_timeout_seconds,
        )

    def get(self, session_id: str, user_id: str | None = None) -> InterviewSessionController:
        """
        Look up a live session.

        Raises:
            SessionNotFoundError: If unknown or owned by another user
        """
        controller = self._sessions.get(session_id)
        if controller is None or (user_id is not None and controller.user_id != user_id):
            raise SessionNotFoundError(f"Session not found: {session_id}")
        self._last_seen[session_id] = time.monotonic()
        return controller

    async def discard(self, session_id: str) -> None:
        """Close and forget a session."""
        controller = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if controller:
            await controller.close()

    async def evict_idle(self) -> list[str]:
        """
        Discard sessions untouched for longer than the idle timeout.

        Sessions with a connected event listener (an open WebSocket)
        are kept however long they have been quiet.
        """
        cutoff = time.monotonic() - self.settings.session_idle_timeout_seconds
        idle = [
            session_id
            for session_id, last_seen in self._last_seen.items()
            if last_seen <= cutoff and self._sessions[session_id].events.listener_count == 0
        ]

        for session_id in idle:
            await self.discard(session_id)
        if idle:
            logger.info(f"Evicted {len(idle)} idle session(s)")
        return idle

    async def close_all(self) -> None:
        """Close every live session (application shutdown)."""
        for session_id in list(self._sessions):
            await self.discard(session_id)

    def __len__(self) -> int:
        return len(self._sessions)
