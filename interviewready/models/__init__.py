"""
Data models and schemas for InterviewReady

Contains Pydantic models for:
- Interview configuration and difficulty ladder
- Question/answer turns and feedback
- Saved interview reports
"""

from interviewready.models.interview import (
    TOTAL_QUESTIONS,
    NO_ANSWER_PROVIDED,
    DEFAULT_DIFFICULTY,
    Difficulty,
    Feedback,
    InterviewConfig,
    InterviewType,
    QuestionAndAnswer,
    SessionPhase,
    SessionSnapshot,
    adapt_difficulty,
)
from interviewready.models.report import (
    InterviewSession,
    SaveResult,
    compute_overall_score,
)

__all__ = [
    # Interview
    "TOTAL_QUESTIONS",
    "NO_ANSWER_PROVIDED",
    "DEFAULT_DIFFICULTY",
    "Difficulty",
    "Feedback",
    "InterviewConfig",
    "InterviewType",
    "QuestionAndAnswer",
    "SessionPhase",
    "SessionSnapshot",
    "adapt_difficulty",
    # Report
    "InterviewSession",
    "SaveResult",
    "compute_overall_score",
]
