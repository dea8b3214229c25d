"""
Core business logic modules for InterviewReady

Contains:
- Session Controller: State machine for one adaptive interview
- Question Service: Question generation and answer evaluation
- Speech: Prompt playback and answer capture
- Countdown: Per-question answer timer
- Persistence: Saved interview reports
- Session Manager: Registry of live sessions
"""

from interviewready.core.session_controller import (
    InterviewSessionController,
    StateTransitionError,
)
from interviewready.core.question_service import (
    QuestionService,
    OllamaQuestionService,
    HostedQuestionService,
    create_question_service,
)
from interviewready.core.speech import SpeechAdapter, RelayedSpeech, SilentSpeech
from interviewready.core.timer import Countdown
from interviewready.core.persistence import (
    SessionRepository,
    InMemorySessionRepository,
    JsonFileSessionRepository,
    PersistenceError,
    create_repository,
)
from interviewready.core.session_manager import SessionManager, SessionNotFoundError

__all__ = [
    "InterviewSessionController",
    "StateTransitionError",
    "QuestionService",
    "OllamaQuestionService",
    "HostedQuestionService",
    "create_question_service",
    "SpeechAdapter",
    "RelayedSpeech",
    "SilentSpeech",
    "Countdown",
    "SessionRepository",
    "InMemorySessionRepository",
    "JsonFileSessionRepository",
    "PersistenceError",
    "create_repository",
    "SessionManager",
    "SessionNotFoundError",
]
