"""
Question/Evaluation Service for InterviewReady

Handles all AI-powered operations:
- Question generation
- Answer evaluation (score, feedback, next difficulty)

Two interchangeable backends share one interface:
- OllamaQuestionService: local Ollama server via its OpenAI-compatible API
- HostedQuestionService: hosted model serving endpoint

Neither operation raises to the caller. Failures degrade to a fixed
fallback question or a zero-score fallback feedback.
Integrated with Langfuse for observability and tracing.
"""

import json
import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx
from langfuse import Langfuse

from interviewready.config.settings import Settings, get_settings
from interviewready.models.interview import Difficulty, Feedback, InterviewType
from interviewready.prompts.interviewer import InterviewerPrompts
from interviewready.prompts.evaluator import EvaluatorPrompts

logger = logging.getLogger(__name__)


FALLBACK_QUESTION = (
    "Sorry, I couldn't generate a question right now. Please check that the "
    "interview AI service is running and reachable."
)

FALLBACK_STRENGTHS = "Could not evaluate."
FALLBACK_WEAKNESSES = "There was an error communicating with the AI evaluation service."
FALLBACK_SUGGESTIONS = "Please ensure the interview AI service is running and accessible, then try again."


def get_fallback_feedback(difficulty: Difficulty) -> Feedback:
    """Zero-score feedback used when evaluation fails. Difficulty is unchanged."""
    return Feedback(
        score=0,
        strengths=FALLBACK_STRENGTHS,
        weaknesses=FALLBACK_WEAKNESSES,
        suggestions=FALLBACK_SUGGESTIONS,
        difficulty_next=difficulty,
    )


class QuestionService(ABC):
    """
    Base class for the question/evaluation backends.

    Subclasses only implement the raw chat completion call; prompt
    building, response cleaning, parsing and fallbacks live here.
    """

    backend_name = "base"

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Application settings (defaults to the cached settings)
            client: Pre-built HTTP client, mainly for tests
        """
        self.settings = settings or get_settings()
        self.client = client or self._build_client()

        # Prompt templates
        self.interviewer_prompts = InterviewerPrompts()
        self.evaluator_prompts = EvaluatorPrompts()

        # Initialize Langfuse for observability
        self.langfuse = None
        if self.settings.langfuse_enabled:
            if self.settings.langfuse_secret_key and self.settings.langfuse_public_key:
                try:
                    self.langfuse = Langfuse(
                        secret_key=self.settings.langfuse_secret_key,
                        public_key=self.settings.langfuse_public_key,
                        host=self.settings.langfuse_base_url,
                    )
                    logger.info("Langfuse initialized for LLM observability")
                except Exception as e:
                    logger.warning(f"Failed to initialize Langfuse: {e}")
            else:
                logger.info("Langfuse keys not configured, tracing disabled")

    async def close(self):
        """Close the HTTP client and flush Langfuse."""
        await self.client.aclose()
        if self.langfuse:
            try:
                self.langfuse.flush()
            except Exception as e:
                logger.warning(f"Failed to flush Langfuse: {e}")

    # =========================================================================
    # BACKEND HOOKS
    # =========================================================================

    @abstractmethod
    def _build_client(self) -> httpx.AsyncClient:
        """Create the HTTP client for this backend."""

    @abstractmethod
    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        """Run one chat completion and return the text content."""

    def _extract_content(self, result: dict) -> str:
        """Extract text content from API response, handling list/dict formats."""
        choices = result.get("choices") or [{}]
        content = choices[0].get("message", {}).get("content", "")

        # Handle case where content is a list (multi-part response)
        if isinstance(content, list):
            text_parts = []
            for part in content:
                if isinstance(part, str):
                    text_parts.append(part)
                elif isinstance(part, dict) and "text" in part:
                    text_parts.append(part["text"])
            content = "".join(text_parts)

        if content is None:
            return ""
        return content if isinstance(content, str) else str(content)

    # =========================================================================
    # QUESTION GENERATION
    # =========================================================================

    async def generate_question(
        self,
        job_role: str,
        interview_type: InterviewType,
        difficulty: Difficulty,
        question_number: int,
    ) -> str:
        """
        Generate one interview question.

        Args:
            job_role: Role the candidate is preparing for
            interview_type: Technical or HR
            difficulty: Difficulty to pitch the question at
            question_number: 1-based position in the interview

        Returns:
            Plain question text, or FALLBACK_QUESTION on any failure
        """
        span = self._start_span(
            "generate_question",
            metadata={
                "backend": self.backend_name,
                "job_role": job_role,
                "interview_type": interview_type.value,
                "difficulty": difficulty.value,
                "question_number": question_number,
            },
        )

        prompt = self.interviewer_prompts.generate_question_prompt(
            job_role, interview_type, difficulty, question_number
        )

        try:
            response = await self._complete(
                self.interviewer_prompts.SYSTEM_CONTEXT,
                prompt,
                temperature=self.settings.question_temperature,
                max_tokens=self.settings.question_max_tokens,
            )
            question = self._clean_question_text(response)
            if not question:
                raise ValueError("Received an empty question from the AI")

            logger.info(f"Generated question #{question_number} at {difficulty.value}")
            self._end_span(span, {"question": question})
            return question

        except Exception as e:
            logger.error(f"Question generation failed ({self.backend_name}): {e}")
            self._end_span(span, {"fallback_used": True, "error": str(e)})
            return FALLBACK_QUESTION

    def _clean_question_text(self, text: str) -> str:
        """Strip whitespace, wrapping quotes and markdown emphasis."""
        text = text.strip()
        text = re.sub(r'^"|"$', "", text)
        text = text.replace("*", "")
        return text.strip()

    # =========================================================================
    # ANSWER EVALUATION
    # =========================================================================

    async def evaluate_answer(
        self,
        question: str,
        answer: str,
        difficulty: Difficulty,
    ) -> Feedback:
        """
        Evaluate a candidate's answer.

        Args:
            question: The question that was asked
            answer: Transcribed answer
            difficulty: Difficulty the question was asked at

        Returns:
            Parsed Feedback, or zero-score fallback feedback on any failure
        """
        span = self._start_span(
            "evaluate_answer",
            metadata={
                "backend": self.backend_name,
                "difficulty": difficulty.value,
                "answer_length": len(answer),
            },
        )

        prompt = self.evaluator_prompts.generate_evaluation_prompt(
            question=question,
            answer=answer,
            difficulty=difficulty,
        )

        try:
            response = await self._complete(
                self.evaluator_prompts.SYSTEM_CONTEXT,
                prompt,
                temperature=self.settings.evaluation_temperature,
                max_tokens=self.settings.evaluation_max_tokens,
                json_mode=True,
            )
            feedback = self._parse_feedback(response, difficulty)

        except Exception as e:
            logger.error(f"Evaluation failed ({self.backend_name}): {e}")
            self._end_span(span, {"fallback_used": True, "error": str(e)})
            return get_fallback_feedback(difficulty)

        logger.info(
            f"Evaluation complete: score={feedback.score:.1f}, "
            f"difficulty {difficulty.value} -> {feedback.difficulty_next.value}"
        )

        if span:
            try:
                span.score(name="answer_score", value=feedback.score)
            except Exception as lf_err:
                logger.warning(f"Langfuse score failed: {lf_err}")
        self._end_span(span, feedback.model_dump(mode="json"))

        return feedback

    def _parse_feedback(self, response: str, difficulty: Difficulty) -> Feedback:
        """
        Parse the model's JSON reply into Feedback.

        Raises:
            ValueError: If there is no JSON object or the score is not numeric
        """
        text = response.strip()

        # Models sometimes wrap JSON in a markdown fence despite json mode
        if text.startswith("```"):
            text = re.sub(r"^```(?:json)?\s*", "", text)
            text = re.sub(r"\s*```$", "", text)

        json_start = text.find("{")
        json_end = text.rfind("}") + 1
        if json_start < 0 or json_end <= json_start:
            raise ValueError("No JSON object in evaluation response")

        data = json.loads(text[json_start:json_end])
        if not isinstance(data, dict):
            raise ValueError("Evaluation response is not a JSON object")

        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
            raise ValueError(f"Invalid score in evaluation response: {score!r}")

        raw_next = data.get("difficultyNext", data.get("difficulty_next"))
        difficulty_next = Difficulty.coerce(raw_next, default=difficulty)
        if raw_next is not None and difficulty_next.value != str(raw_next).strip().lower():
            logger.warning(f"Invalid difficultyNext {raw_next!r}, keeping {difficulty.value}")

        return Feedback(
            score=min(10.0, max(0.0, float(score))),
            strengths=self._as_text(data.get("strengths")),
            weaknesses=self._as_text(data.get("weaknesses")),
            suggestions=self._as_text(data.get("suggestions")),
            difficulty_next=difficulty_next,
        )

    def _as_text(self, value: Any) -> str:
        """Feedback fields are prose; flatten lists the model sometimes returns."""
        if value is None:
            return ""
        if isinstance(value, list):
            return " ".join(str(item).strip() for item in value if str(item).strip())
        return str(value).strip()

    # =========================================================================
    # TRACING
    # =========================================================================

    def _start_span(self, name: str, metadata: dict[str, Any]):
        if not self.langfuse:
            return None
        try:
            return self.langfuse.start_span(name=name, metadata=metadata)
        except Exception as lf_err:
            logger.warning(f"Langfuse span start failed: {lf_err}")
            return None

    def _end_span(self, span, output: dict[str, Any]) -> None:
        if not span:
            return
        try:
            span.update(output=output)
            span.end()
        except Exception as lf_err:
            logger.warning(f"Langfuse span end failed: {lf_err}")


class OllamaQuestionService(QuestionService):
    """Local Ollama server through its OpenAI-compatible chat API."""

    backend_name = "ollama"

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.ollama_base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {self.settings.ollama_api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.settings.ai_timeout_seconds,
        )

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self.settings.ollama_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.post("/chat/completions", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Ollama API error: {e}")
            raise

        return self._extract_content(response.json())


class HostedQuestionService(QuestionService):
    """Hosted model serving endpoint authenticated with a bearer token."""

    backend_name = "hosted"

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.hosted_base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {self.settings.hosted_token}",
                "Content-Type": "application/json",
            },
            timeout=self.settings.ai_timeout_seconds,
        )

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        # Serving endpoints do not all honour a system role, so fold it in
        payload = {
            "messages": [
                {"role": "user", "content": f"{system_prompt}\n\n{user_prompt}"},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            response = await self.client.post(self.settings.hosted_endpoint, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Hosted model API error: {e}")
            raise

        return self._extract_content(response.json())


def create_question_service(
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> QuestionService:
    """Build the backend named by ``settings.ai_backend``."""
    settings = settings or get_settings()
    backends: dict[str, type[QuestionService]] = {
        "ollama": OllamaQuestionService,
        "hosted": HostedQuestionService,
    }
    service_cls = backends.get(settings.ai_backend)
    if service_cls is None:
        raise ValueError(f"Unknown AI backend: {settings.ai_backend}")

    logger.info(f"Using {settings.ai_backend} question/evaluation backend")
    return service_cls(settings=settings, client=client)
