"""
Interview Session Controller - State machine for one adaptive interview.

This is the central coordinator for a single interview session.
It owns question progression, the answer countdown and difficulty
adaptation, and drives the question/evaluation service and the
speech adapter.
"""

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from uuid import uuid4

from interviewready.core.events import EventHub
from interviewready.core.persistence import SessionRepository
from interviewready.core.question_service import QuestionService
from interviewready.core.speech import SpeechAdapter, UNSUPPORTED_WARNING
from interviewready.core.timer import Countdown
from interviewready.models.interview import (
    DEFAULT_DIFFICULTY,
    NO_ANSWER_PROVIDED,
    TOTAL_QUESTIONS,
    Difficulty,
    InterviewConfig,
    QuestionAndAnswer,
    SessionPhase,
    SessionSnapshot,
)
from interviewready.models.report import (
    InterviewSession,
    SaveResult,
    compute_overall_score,
)

logger = logging.getLogger(__name__)


class StateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""
    pass


class InterviewSessionController:
    """
    Manages one interview using a state machine pattern.

    States:
        SETUP → ACTIVE → REPORT
          ↑                 │
          └──── reset ──────┘

    Each ACTIVE turn runs as one cancellable task:
        speak question → pause → arm capture → start countdown
    A manual submit or the countdown reaching zero ends the turn.
    """

    VALID_TRANSITIONS: dict[SessionPhase, list[SessionPhase]] = {
        SessionPhase.SETUP: [SessionPhase.ACTIVE],
        SessionPhase.ACTIVE: [SessionPhase.REPORT],
        SessionPhase.REPORT: [SessionPhase.SETUP],
    }

    def __init__(
        self,
        question_service: QuestionService,
        speech: SpeechAdapter,
        repository: SessionRepository,
        user_id: str,
        session_id: str | None = None,
        events: EventHub | None = None,
        total_questions: int = TOTAL_QUESTIONS,
        listen_delay: float = 2.0,
        tick_seconds: float = 1.0,
    ):
        """
        Initialize the controller with its collaborators.

        Args:
            question_service: Generates questions and evaluates answers
            speech: Plays prompts and captures answers
            repository: Stores the finished report
            user_id: Owner of the session
            session_id: Session ID (generated when omitted)
            events: Event hub for presentation listeners
            total_questions: Questions per interview
            listen_delay: Pause between prompt playback and capture
            tick_seconds: Length of one countdown tick
        """
        self.question_service = question_service
        self.speech = speech
        self.repository = repository
        self.user_id = user_id
        self.session_id = session_id or uuid4().hex
        self.events = events or EventHub(self.session_id)
        self.total_questions = total_questions
        self.listen_delay = listen_delay

        self.timer = Countdown(
            on_tick=self._on_tick,
            on_expire=self._on_timer_expired,
            tick_seconds=tick_seconds,
        )
        self._prompt_task: asyncio.Task | None = None
        self._auto_submit_task: asyncio.Task | None = None
        self._closed = False

        self.phase = SessionPhase.SETUP
        self._clear()

    def _clear(self) -> None:
        """Drop everything accumulated by a session. Leaves the phase alone."""
        self.config: InterviewConfig | None = None
        self.questions_and_answers: list[QuestionAndAnswer] = []
        self.question_index = 0
        self.current_difficulty: Difficulty = DEFAULT_DIFFICULTY
        self.completed_at: datetime | None = None
        self.is_busy = False
        self.loading_text = ""
        self._in_flight = False
        self.speech.clear_transcript()

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def _check_transition(self, new_phase: SessionPhase) -> None:
        valid_next = self.VALID_TRANSITIONS.get(self.phase, [])
        if new_phase not in valid_next:
            raise StateTransitionError(
                f"Invalid transition from {self.phase.value} to {new_phase.value}. "
                f"Valid transitions: {[p.value for p in valid_next]}"
            )

    async def _transition(self, new_phase: SessionPhase) -> None:
        self._check_transition(new_phase)
        old_phase = self.phase
        self.phase = new_phase

        logger.info(f"Session {self.session_id}: {old_phase.value} → {new_phase.value}")
        await self.events.publish(
            "state_change",
            old_state=old_phase.value,
            new_state=new_phase.value,
        )

    @property
    def timer_remaining(self) -> int:
        return self.timer.remaining

    @property
    def current_turn(self) -> QuestionAndAnswer | None:
        """The question currently being answered."""
        if self.questions_and_answers and self.question_index < len(self.questions_and_answers):
            return self.questions_and_answers[self.question_index]
        return None

    # =========================================================================
    # INTERVIEW FLOW
    # =========================================================================

    async def start(self, config: InterviewConfig) -> SessionSnapshot:
        """
        Start the interview: generate question #1 and begin the first turn.

        Raises:
            StateTransitionError: If the session is not in SETUP
        """
        self._check_transition(SessionPhase.ACTIVE)
        if self._in_flight:
            raise StateTransitionError("Interview is already starting")
        if not config.job_role.strip():
            raise ValueError("job_role must not be blank")

        self._in_flight = True
        self.config = config
        try:
            await self._set_busy("Generating your first question...")
            question = await self.question_service.generate_question(
                config.job_role,
                config.interview_type,
                self.current_difficulty,
                1,
            )
        except Exception:
            self.config = None
            raise
        finally:
            self._in_flight = False
            await self._set_busy(None)

        if self._closed:
            return self.snapshot()

        self.questions_and_answers.append(
            QuestionAndAnswer(question=question, difficulty=self.current_difficulty)
        )
        self.question_index = 0

        await self._transition(SessionPhase.ACTIVE)
        await self._publish_question()
        self._begin_turn()

        return self.snapshot()

    async def submit(self, transcript: str | None = None) -> SessionSnapshot:
        """
        Submit the answer to the current question.

        Args:
            transcript: Answer text. When None, the transcript captured
                so far is used.

        Raises:
            StateTransitionError: If not ACTIVE or an answer is already
                being evaluated
            ValueError: If transcript is not a string
        """
        if self.phase != SessionPhase.ACTIVE:
            raise StateTransitionError(f"Cannot submit an answer in state: {self.phase.value}")
        if self._in_flight:
            raise StateTransitionError("An answer is already being evaluated")
        if transcript is not None and not isinstance(transcript, str):
            raise ValueError(f"transcript must be a string, got {type(transcript).__name__}")

        self._in_flight = True
        try:
            await self._end_turn()

            if transcript is None:
                transcript = self.speech.transcript
            answer = transcript.strip() or NO_ANSWER_PROVIDED

            turn = self.questions_and_answers[self.question_index]
            turn.answer = answer

            await self._set_busy("Evaluating your answer and preparing the next question...")
            feedback = await self.question_service.evaluate_answer(
                turn.question,
                answer,
                self.current_difficulty,
            )
            turn.feedback = feedback
            self.speech.clear_transcript()

            await self.events.publish(
                "evaluation",
                question_number=self.question_index + 1,
                feedback=feedback.model_dump(mode="json"),
            )

            if self._closed:
                return self.snapshot()

            if self.question_index + 1 >= self.total_questions:
                self.completed_at = datetime.now(timezone.utc)
                await self._transition(SessionPhase.REPORT)
                await self.events.publish(
                    "report",
                    overall_score=compute_overall_score(self.questions_and_answers),
                )
                return self.snapshot()

            self.current_difficulty = Difficulty.coerce(
                feedback.difficulty_next, default=self.current_difficulty
            )
            question = await self.question_service.generate_question(
                self.config.job_role,
                self.config.interview_type,
                self.current_difficulty,
                self.question_index + 2,
            )

            if self._closed:
                return self.snapshot()

            self.questions_and_answers.append(
                QuestionAndAnswer(question=question, difficulty=self.current_difficulty)
            )
            self.question_index += 1
        finally:
            self._in_flight = False
            await self._set_busy(None)

        await self._publish_question()
        self._begin_turn()

        return self.snapshot()

    async def save(self) -> SaveResult:
        """
        Hand the finished report to the repository.

        The session stays in REPORT whatever the outcome, so a failed
        save can simply be retried.
        """
        record = self.report()

        try:
            document_id = await self.repository.save(record)
        except Exception as e:
            logger.error(f"Failed to save session {self.session_id}: {e}")
            await self.events.publish("save_failed", error=str(e))
            return SaveResult(success=False, error="Failed to save session. Please try again.")

        await self.events.publish("saved", document_id=document_id)
        return SaveResult(success=True, session_id=document_id)

    def report(self) -> InterviewSession:
        """
        Build the report record for a completed interview.

        Raises:
            StateTransitionError: If the interview has not finished
        """
        if self.phase != SessionPhase.REPORT:
            raise StateTransitionError(f"Interview not complete. Current state: {self.phase.value}")

        return InterviewSession(
            # Stable ID so a retried save overwrites rather than duplicates
            id=self.session_id,
            user_id=self.user_id,
            config=self.config,
            questions_and_answers=[qna.model_copy(deep=True) for qna in self.questions_and_answers],
            overall_score=compute_overall_score(self.questions_and_answers),
            completed_at=self.completed_at or datetime.now(timezone.utc),
        )

    async def reset(self) -> SessionSnapshot:
        """Return from REPORT to a clean SETUP."""
        self._check_transition(SessionPhase.SETUP)
        await self._end_turn()

        self._clear()
        await self._transition(SessionPhase.SETUP)

        return self.snapshot()

    async def close(self) -> None:
        """Tear the session down. No tick or turn fires afterwards."""
        self._closed = True
        self.timer.cancel()

        current = asyncio.current_task()
        for task in (self._prompt_task, self._auto_submit_task):
            if task and not task.done() and task is not current:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._prompt_task = None
        self._auto_submit_task = None

        await self.speech.stop_capture()
        logger.info(f"Closed session {self.session_id}")

    # =========================================================================
    # TURN HANDLING
    # =========================================================================

    def _begin_turn(self) -> None:
        """Play the current question, then arm capture and the countdown."""
        if self._closed:
            return
        self._prompt_task = asyncio.create_task(
            self._run_prompt(self.current_turn.question, self.current_difficulty),
            name=f"prompt-{self.session_id}-{self.question_index + 1}",
        )

    async def _run_prompt(self, question: str, difficulty: Difficulty) -> None:
        try:
            await self.speech.speak(question)
        except Exception as e:
            # Keep the turn alive; the question is still on screen
            logger.error(f"Question playback failed: {e}")

        if self.listen_delay > 0:
            await asyncio.sleep(self.listen_delay)

        await self.speech.start_capture()
        self.timer.start(difficulty.timer_seconds)

        await self.events.publish(
            "listening",
            question_number=self.question_index + 1,
            timer_seconds=difficulty.timer_seconds,
            is_capturing=self.speech.is_capturing,
        )

    async def _end_turn(self) -> None:
        """Cancel the countdown and any pending playback, stop capture."""
        self.timer.cancel()

        task = self._prompt_task
        self._prompt_task = None
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        await self.speech.stop_capture()

    async def wait_until_listening(self) -> None:
        """Wait for the current prompt to finish playing and capture to arm."""
        if self._prompt_task:
            await self._prompt_task

    async def _on_tick(self, remaining: int) -> None:
        await self.events.publish("tick", remaining=remaining)

    def _on_timer_expired(self) -> None:
        # Fires whether or not capture was ever armed, so an interview on
        # a client without speech support still advances on timeout
        if self.phase != SessionPhase.ACTIVE or self._in_flight or self._closed:
            return

        logger.info(f"Session {self.session_id}: answer time is up, auto-submitting")
        self._auto_submit_task = asyncio.create_task(
            self._auto_submit(),
            name=f"auto-submit-{self.session_id}",
        )

    async def _auto_submit(self) -> None:
        try:
            await self.submit()
        except StateTransitionError as e:
            # Lost the race against a manual submit
            logger.debug(f"Auto-submit skipped: {e}")
        except Exception as e:
            logger.error(f"Auto-submit failed for session {self.session_id}: {e}")

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    async def _set_busy(self, loading_text: str | None) -> None:
        self.is_busy = loading_text is not None
        self.loading_text = loading_text or ""
        await self.events.publish("busy", is_busy=self.is_busy, loading_text=self.loading_text)

    async def _publish_question(self) -> None:
        await self.events.publish(
            "question",
            question_number=self.question_index + 1,
            total_questions=self.total_questions,
            question_text=self.current_turn.question,
            difficulty=self.current_difficulty.value,
        )

    def snapshot(self) -> SessionSnapshot:
        """Current state for the presentation layer."""
        turn = self.current_turn if self.phase == SessionPhase.ACTIVE else None

        return SessionSnapshot(
            session_id=self.session_id,
            phase=self.phase,
            config=self.config,
            question_number=self.question_index + 1 if self.questions_and_answers else 0,
            total_questions=self.total_questions,
            current_question=turn.question if turn else None,
            difficulty=self.current_difficulty,
            timer_remaining=self.timer_remaining,
            is_busy=self.is_busy,
            loading_text=self.loading_text,
            is_capturing=self.speech.is_capturing,
            transcript=self.speech.transcript,
            speech_supported=self.speech.supported,
            warning=None if self.speech.supported else UNSUPPORTED_WARNING,
            questions_and_answers=[qna.model_copy(deep=True) for qna in self.questions_and_answers],
        )
