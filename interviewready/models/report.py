"""
Report models for InterviewReady

Defines the saved interview record and the result of a save attempt.
"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from uuid import uuid4

from pydantic import BaseModel, Field

from interviewready.models.interview import InterviewConfig, QuestionAndAnswer


def compute_overall_score(questions_and_answers: list[QuestionAndAnswer]) -> float:
    """
    Mean feedback score across all turns, rounded to one decimal.

    A turn without feedback counts as 0. Rounds half up so 7.25 -> 7.3.
    """
    if not questions_and_answers:
        return 0.0

    total = sum(
        qna.feedback.score if qna.feedback else 0.0
        for qna in questions_and_answers
    )
    mean = Decimal(str(total)) / Decimal(len(questions_and_answers))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class InterviewSession(BaseModel):
    """Completed interview, as handed to the persistence layer."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    config: InterviewConfig

    questions_and_answers: list[QuestionAndAnswer] = Field(default_factory=list)
    overall_score: float = Field(..., ge=0, le=10)

    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def score_interpretation(self) -> str:
        """Short human-readable reading of the overall score."""
        if self.overall_score >= 8:
            return "Excellent - ready for the real thing"
        elif self.overall_score >= 6:
            return "Good performance with room for improvement"
        elif self.overall_score >= 4:
            return "Fair - keep practicing the weaker areas"
        else:
            return "Needs significant preparation"


class SaveResult(BaseModel):
    """Outcome of handing a report to the persistence layer."""

    success: bool
    session_id: str | None = None
    error: str | None = None
