"""
Report API endpoints

Handles:
- Report preview for a finished session
- Saving the report
- Saved report history
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from interviewready.api.dependencies import (
    get_repository,
    get_session_manager,
    get_user_id,
)
from interviewready.core.persistence import PersistenceError, SessionRepository
from interviewready.core.session_controller import StateTransitionError
from interviewready.core.session_manager import SessionManager, SessionNotFoundError
from interviewready.models.report import InterviewSession, SaveResult

router = APIRouter()


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class ReportResponse(BaseModel):
    """Full report response."""
    session: InterviewSession
    overall_score_interpretation: str
    total_questions: int


class ReportSummaryResponse(BaseModel):
    """Condensed saved-report entry for the history list."""
    session_id: str
    job_role: str
    interview_type: str
    overall_score: float
    completed_at: str


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/history/me", response_model=list[ReportSummaryResponse])
async def get_report_history(
    user_id: str = Depends(get_user_id),
    repository: SessionRepository = Depends(get_repository),
) -> list[ReportSummaryResponse]:
    """List the caller's saved interviews, most recent first."""
    try:
        sessions = await repository.list_for_user(user_id)
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return [
        ReportSummaryResponse(
            session_id=s.id,
            job_role=s.config.job_role,
            interview_type=s.config.interview_type.value,
            overall_score=s.overall_score,
            completed_at=s.completed_at.isoformat(),
        )
        for s in sessions
    ]


@router.get("/saved/{session_id}", response_model=InterviewSession)
async def get_saved_report(
    session_id: str,
    user_id: str = Depends(get_user_id),
    repository: SessionRepository = Depends(get_repository),
) -> InterviewSession:
    """Fetch one saved interview."""
    try:
        session = await repository.get(user_id, session_id)
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if session is None:
        raise HTTPException(status_code=404, detail="Saved session not found")
    return session


@router.get("/{session_id}", response_model=ReportResponse)
async def get_report(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> ReportResponse:
    """
    Get the report for a finished interview.

    Available once all questions have been answered, before or after saving.
    """
    try:
        controller = manager.get(session_id, user_id=user_id)
        report = controller.report()
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return ReportResponse(
        session=report,
        overall_score_interpretation=report.score_interpretation,
        total_questions=len(report.questions_and_answers),
    )


@router.post("/{session_id}/save", response_model=SaveResult)
async def save_report(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> SaveResult:
    """
    Save the finished interview.

    A failed save leaves the session untouched and can be retried.
    """
    try:
        controller = manager.get(session_id, user_id=user_id)
        result = await controller.save()
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not result.success:
        raise HTTPException(status_code=502, detail=result.error)

    return result
