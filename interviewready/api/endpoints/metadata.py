"""
Metadata API endpoints

Provides reference data for:
- Interview types
- Difficulty levels and their answer timers
- Interview settings
"""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from interviewready.config.settings import get_settings
from interviewready.models.interview import (
    DEFAULT_DIFFICULTY,
    TOTAL_QUESTIONS,
    Difficulty,
    InterviewType,
)

router = APIRouter()


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class InterviewTypeInfo(BaseModel):
    """Information about an interview type."""
    id: str
    name: str
    description: str


class DifficultyInfo(BaseModel):
    """Information about a difficulty level."""
    id: str
    rank: int
    timer_seconds: int


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/interview-types")
async def get_interview_types() -> list[InterviewTypeInfo]:
    """Get all available interview types."""
    descriptions = {
        InterviewType.TECHNICAL: "Role-specific technical and problem-solving questions",
        InterviewType.HR: "Behavioural, motivation and teamwork questions",
    }

    return [
        InterviewTypeInfo(
            id=interview_type.value,
            name=interview_type.value,
            description=descriptions[interview_type],
        )
        for interview_type in InterviewType
    ]


@router.get("/difficulties")
async def get_difficulties() -> list[DifficultyInfo]:
    """Get the difficulty ladder, easiest first."""
    return [
        DifficultyInfo(
            id=difficulty.value,
            rank=difficulty.rank,
            timer_seconds=difficulty.timer_seconds,
        )
        for difficulty in sorted(Difficulty)
    ]


@router.get("/interview-settings")
async def get_interview_settings() -> dict[str, Any]:
    """Get the fixed interview parameters."""
    settings = get_settings()

    return {
        "total_questions": TOTAL_QUESTIONS,
        "starting_difficulty": DEFAULT_DIFFICULTY.value,
        "ai_backend": settings.ai_backend,
        "server_tts": settings.tts_enabled,
    }
