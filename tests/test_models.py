import pytest
from pydantic import ValidationError

from interviewready.models.interview import (
    Difficulty,
    Feedback,
    InterviewConfig,
    InterviewType,
    QuestionAndAnswer,
    adapt_difficulty,
)
from interviewready.models.report import InterviewSession, compute_overall_score


def _qna(score):
    feedback = None
    if score is not None:
        feedback = Feedback(score=score, difficulty_next=Difficulty.MEDIUM)
    return QuestionAndAnswer(question="Q", answer="A", feedback=feedback)


def test_difficulty_ladder_order():
    """Difficulties sort easy < medium < hard, not alphabetically"""
    assert sorted([Difficulty.HARD, Difficulty.EASY, Difficulty.MEDIUM]) == [
        Difficulty.EASY,
        Difficulty.MEDIUM,
        Difficulty.HARD,
    ]
    assert Difficulty.EASY < Difficulty.HARD


def test_timer_seconds_per_difficulty():
    assert Difficulty.EASY.timer_seconds == 40
    assert Difficulty.MEDIUM.timer_seconds == 35
    assert Difficulty.HARD.timer_seconds == 30


def test_escalation_is_clamped():
    assert Difficulty.HARD.escalate() == Difficulty.HARD
    assert Difficulty.EASY.deescalate() == Difficulty.EASY
    assert Difficulty.MEDIUM.escalate() == Difficulty.HARD
    assert Difficulty.MEDIUM.deescalate() == Difficulty.EASY


@pytest.mark.parametrize(
    "current,score,expected",
    [
        (Difficulty.MEDIUM, 8, Difficulty.HARD),
        (Difficulty.MEDIUM, 4, Difficulty.EASY),
        (Difficulty.MEDIUM, 5, Difficulty.MEDIUM),
        (Difficulty.MEDIUM, 7.9, Difficulty.MEDIUM),
        (Difficulty.HARD, 10, Difficulty.HARD),
        (Difficulty.EASY, 0, Difficulty.EASY),
    ],
)
def test_adapt_difficulty_thresholds(current, score, expected):
    assert adapt_difficulty(current, score) == expected


def test_adapt_difficulty_sequence():
    """Scores 9, 3, 6, 9 walk medium -> hard -> medium -> medium -> hard"""
    difficulty = Difficulty.MEDIUM
    seen = [difficulty]
    for score in [9, 3, 6, 9]:
        difficulty = adapt_difficulty(difficulty, score)
        seen.append(difficulty)

    assert seen == [
        Difficulty.MEDIUM,
        Difficulty.HARD,
        Difficulty.MEDIUM,
        Difficulty.MEDIUM,
        Difficulty.HARD,
    ]


def test_coerce_untrusted_difficulty():
    assert Difficulty.coerce("HARD", default=Difficulty.EASY) == Difficulty.HARD
    assert Difficulty.coerce(" easy ", default=Difficulty.HARD) == Difficulty.EASY
    assert Difficulty.coerce("extreme", default=Difficulty.MEDIUM) == Difficulty.MEDIUM
    assert Difficulty.coerce(None, default=Difficulty.MEDIUM) == Difficulty.MEDIUM
    assert Difficulty.coerce(3, default=Difficulty.EASY) == Difficulty.EASY


def test_config_strips_and_rejects_blank_role():
    config = InterviewConfig(job_role="  Backend Engineer  ")
    assert config.job_role == "Backend Engineer"
    assert config.interview_type == InterviewType.TECHNICAL

    with pytest.raises(ValidationError):
        InterviewConfig(job_role="   ")


def test_config_accepts_long_role():
    role = "Senior Staff Platform Engineer, " * 20
    assert InterviewConfig(job_role=role).job_role == role.strip()


def test_config_is_frozen():
    config = InterviewConfig(job_role="Data Analyst", interview_type=InterviewType.HR)
    with pytest.raises(ValidationError):
        config.job_role = "Something else"


def test_feedback_score_bounds():
    with pytest.raises(ValidationError):
        Feedback(score=11, difficulty_next=Difficulty.EASY)
    with pytest.raises(ValidationError):
        Feedback(score=-1, difficulty_next=Difficulty.EASY)


def test_overall_score_all_tens():
    assert compute_overall_score([_qna(10)] * 5) == 10.0


def test_overall_score_all_fallbacks():
    assert compute_overall_score([_qna(0)] * 5) == 0.0


def test_overall_score_rounds_half_up():
    """7.5 and 7.0 average to 7.25, which rounds to 7.3"""
    assert compute_overall_score([_qna(7.5), _qna(7.0)]) == 7.3


def test_overall_score_missing_feedback_counts_as_zero():
    assert compute_overall_score([_qna(8), _qna(None)]) == 4.0


def test_overall_score_empty():
    assert compute_overall_score([]) == 0.0


def test_score_interpretation():
    config = InterviewConfig(job_role="QA Engineer")
    session = InterviewSession(user_id="u1", config=config, overall_score=8.4)
    assert session.score_interpretation.startswith("Excellent")

    session = InterviewSession(user_id="u1", config=config, overall_score=2.0)
    assert session.score_interpretation == "Needs significant preparation"
