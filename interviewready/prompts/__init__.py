"""
AI prompt templates for InterviewReady

Contains structured prompts for:
- Question generation
- Answer evaluation
"""

from interviewready.prompts.interviewer import InterviewerPrompts
from interviewready.prompts.evaluator import EvaluatorPrompts

__all__ = [
    "InterviewerPrompts",
    "EvaluatorPrompts",
]
