"""
API Dependencies

Provides dependency injection for API endpoints.
Manages singleton instances of the shared collaborators.
"""

from fastapi import Header, HTTPException

from interviewready.config.settings import get_settings
from interviewready.core.persistence import SessionRepository, create_repository
from interviewready.core.question_service import QuestionService, create_question_service
from interviewready.core.session_manager import SessionManager


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_question_service: QuestionService | None = None
_repository: SessionRepository | None = None
_session_manager: SessionManager | None = None


def get_question_service() -> QuestionService:
    """Get the question/evaluation service singleton."""
    global _question_service

    if _question_service is None:
        _question_service = create_question_service(get_settings())

    return _question_service


def get_repository() -> SessionRepository:
    """Get the session repository singleton."""
    global _repository

    if _repository is None:
        _repository = create_repository(get_settings())

    return _repository


def get_session_manager() -> SessionManager:
    """
    Get the session manager singleton.

    Lazily initializes the shared collaborators.
    """
    global _session_manager

    if _session_manager is None:
        _session_manager = SessionManager(
            question_service=get_question_service(),
            repository=get_repository(),
            settings=get_settings(),
        )

    return _session_manager


async def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """
    Identify the caller.

    Authentication happens upstream; the gateway forwards the
    authenticated user's ID in the X-User-Id header.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


async def cleanup():
    """Cleanup resources on shutdown."""
    global _question_service, _repository, _session_manager

    if _session_manager:
        await _session_manager.close_all()

    if _question_service:
        await _question_service.close()

    _session_manager = None
    _question_service = None
    _repository = None
