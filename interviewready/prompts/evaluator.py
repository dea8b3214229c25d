"""
AI Evaluator Prompt Templates

Contains the prompt used to score a spoken answer and recommend the
difficulty of the next question.

The response must be a single JSON object with the keys:
- score (0-10)
- strengths
- weaknesses
- suggestions
- difficultyNext ('easy' | 'medium' | 'hard')
"""

from interviewready.models.interview import Difficulty


class EvaluatorPrompts:
    """
    Prompt templates for AI evaluation of answers.

    Key principles:
    - Fair but critical scoring
    - Concise, constructive feedback
    - Strict JSON output
    """

    SYSTEM_CONTEXT = (
        "You are a fair but critical interview evaluator. Your task is to analyze an "
        "interview answer and provide structured feedback in a strict JSON format. "
        "Do not include any text outside of the JSON object."
    )

    ADAPTATION_RULES = """Evaluate the answer on a scale of 0-10. Based on this score, determine the next question's difficulty.
- If score >= 8, increase difficulty (e.g., medium -> hard).
- If score <= 4, decrease difficulty (e.g., medium -> easy).
- Otherwise, keep the difficulty the same.
- Difficulty cannot go below 'easy' or above 'hard'."""

    OUTPUT_FORMAT = (
        "Provide concise, constructive feedback. Return a single, valid JSON object with "
        "these exact keys: \"score\" (number), \"strengths\" (string), \"weaknesses\" "
        "(string), \"suggestions\" (string), \"difficultyNext\" (string: "
        "'easy'|'medium'|'hard')."
    )

    def generate_evaluation_prompt(
        self,
        question: str,
        answer: str,
        difficulty: Difficulty,
    ) -> str:
        """Generate the user prompt for evaluating one answer."""
        return f"""Question: "{question}"
Candidate's Answer: "{answer}"
Current Difficulty: "{difficulty.value}"

{self.ADAPTATION_RULES}

The answer was transcribed from speech, so ignore filler words and minor transcription errors.

{self.OUTPUT_FORMAT}
"""
