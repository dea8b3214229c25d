"""
AI Interviewer Prompt Templates

Contains the prompts used to generate a single spoken interview question.
Questions are read aloud, so the model must return bare question text.
"""

from interviewready.models.interview import Difficulty, InterviewType


class InterviewerPrompts:
    """
    Prompt templates for the AI interviewer.

    Key principles:
    - One question per call
    - Plain text only (no labels, numbering or filler)
    - Matches the requested difficulty and interview type
    """

    SYSTEM_CONTEXT = (
        "You are an expert interviewer. Your task is to generate a single interview "
        "question. Provide only the raw text of the question, without any labels like "
        "'Question:', numbering, or conversational filler."
    )

    TYPE_GUIDANCE = {
        InterviewType.TECHNICAL: (
            "Focus on practical knowledge, problem solving and trade-offs the role "
            "deals with day to day."
        ),
        InterviewType.HR: (
            "Focus on behaviour, motivation, teamwork and communication. Prefer "
            "'Tell me about a time...' style questions."
        ),
    }

    DIFFICULTY_GUIDANCE = {
        Difficulty.EASY: "Keep it foundational and answerable in well under a minute.",
        Difficulty.MEDIUM: "Expect a structured answer with at least one concrete example.",
        Difficulty.HARD: "Probe depth: edge cases, trade-offs or a difficult scenario.",
    }

    def generate_question_prompt(
        self,
        job_role: str,
        interview_type: InterviewType,
        difficulty: Difficulty,
        question_number: int,
    ) -> str:
        """Generate the user prompt for the next interview question."""
        return (
            f"Generate one {difficulty.value} level {interview_type.value} interview question "
            f"for a \"{job_role}\" position. This is question number {question_number} "
            f"in the interview.\n"
            f"{self.TYPE_GUIDANCE[interview_type]}\n"
            f"{self.DIFFICULTY_GUIDANCE[difficulty]}\n"
            f"The question will be read aloud, so keep it to one or two sentences."
        )
