"""
Interview configuration, turn and state models for InterviewReady
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


TOTAL_QUESTIONS = 5

NO_ANSWER_PROVIDED = "No answer provided."


class InterviewType(str, Enum):
    """Kind of interview being practiced."""

    TECHNICAL = "Technical"
    HR = "HR"


class Difficulty(str, Enum):
    """
    Difficulty ladder for generated questions.

    Ordered easy < medium < hard. Also sizes the answer timer.
    """

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def rank(self) -> int:
        """Position on the ladder (0 = easy)."""
        return _LADDER.index(self)

    @property
    def timer_seconds(self) -> int:
        """Seconds the candidate gets to answer at this difficulty."""
        seconds = {
            "easy": 40,
            "medium": 35,
            "hard": 30,
        }
        return seconds[self.value]

    def escalate(self) -> "Difficulty":
        """One step harder, clamped at hard."""
        return _LADDER[min(self.rank + 1, len(_LADDER) - 1)]

    def deescalate(self) -> "Difficulty":
        """One step easier, clamped at easy."""
        return _LADDER[max(self.rank - 1, 0)]

    # str ordering would be alphabetical; compare by ladder position instead
    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: Any) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def coerce(cls, value: Any, default: "Difficulty") -> "Difficulty":
        """Map an untrusted value onto the ladder, falling back to ``default``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return default


_LADDER = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]

DEFAULT_DIFFICULTY = Difficulty.MEDIUM


def adapt_difficulty(current: Difficulty, score: float) -> Difficulty:
    """
    Pick the next difficulty from the latest answer score.

    8 or more escalates, 4 or less de-escalates, anything else holds.
    """
    if score >= 8:
        return current.escalate()
    if score <= 4:
        return current.deescalate()
    return current


class SessionPhase(str, Enum):
    """Session controller states."""

    SETUP = "setup"    # Configuring the interview
    ACTIVE = "active"  # Asking, listening, evaluating
    REPORT = "report"  # All questions answered


class InterviewConfig(BaseModel):
    """User's interview configuration. Frozen once the session starts."""

    model_config = ConfigDict(frozen=True)

    job_role: str = Field(
        ..., min_length=1,
        description="Job role the candidate is preparing for"
    )
    interview_type: InterviewType = Field(
        default=InterviewType.TECHNICAL,
        description="Technical or HR interview"
    )

    @field_validator("job_role")
    @classmethod
    def _strip_role(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("job_role must not be blank")
        return value


class Feedback(BaseModel):
    """Evaluation of a single answer. Produced once, never edited."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=10)
    strengths: str = ""
    weaknesses: str = ""
    suggestions: str = ""
    difficulty_next: Difficulty = Field(
        ...,
        description="Difficulty to use for the next question"
    )


class QuestionAndAnswer(BaseModel):
    """One turn: the question asked, the answer given and its feedback."""

    question: str
    answer: str = ""
    feedback: Feedback | None = None

    # Difficulty the question was generated at
    difficulty: Difficulty = DEFAULT_DIFFICULTY


class SessionSnapshot(BaseModel):
    """Everything the presentation layer needs to render a session."""

    session_id: str
    phase: SessionPhase
    config: InterviewConfig | None = None

    question_number: int = 0
    total_questions: int = TOTAL_QUESTIONS
    current_question: str | None = None
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    timer_remaining: int = 0

    is_busy: bool = False
    loading_text: str = ""

    is_capturing: bool = False
    transcript: str = ""
    speech_supported: bool = True
    warning: str | None = None

    questions_and_answers: list[QuestionAndAnswer] = Field(default_factory=list)
