import asyncio

import pytest

from interviewready.config.settings import Settings
from interviewready.core.events import EventHub, SessionEvent
from interviewready.core.persistence import InMemorySessionRepository
from interviewready.core.session_controller import InterviewSessionController
from interviewready.core.speech import SpeechAdapter
from interviewready.models.interview import Feedback, adapt_difficulty


class FakeQuestionService:
    """Scripted question/evaluation backend."""

    def __init__(self, scores=None):
        self.scores = list(scores or [])
        self.questions_asked = []
        self.evaluated = []
        self.closed = False

    async def generate_question(self, job_role, interview_type, difficulty, question_number):
        self.questions_asked.append((question_number, difficulty))
        return f"Question {question_number} for {job_role} ({difficulty.value})"

    async def evaluate_answer(self, question, answer, difficulty):
        self.evaluated.append((question, answer, difficulty))
        score = self.scores.pop(0) if self.scores else 6
        return Feedback(
            score=score,
            strengths="Clear structure",
            weaknesses="Light on detail",
            suggestions="Give a concrete example",
            difficulty_next=adapt_difficulty(difficulty, score),
        )

    async def close(self):
        self.closed = True


class RecordingSpeech(SpeechAdapter):
    """Speech adapter that plays instantly and remembers what it said."""

    def __init__(self, events=None):
        super().__init__(events)
        self.spoken = []

    async def speak(self, text):
        self.spoken.append(text)
        await self._publish("speak", text=text, audio=None)


class EventRecorder:
    def __init__(self):
        self.events: list[SessionEvent] = []

    async def __call__(self, event):
        self.events.append(event)

    @property
    def types(self):
        return [e.type for e in self.events]


async def wait_for(predicate, timeout=2.0):
    """Poll until ``predicate()`` is true or fail after ``timeout`` seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def test_settings():
    return Settings(
        listen_delay_seconds=0,
        timer_tick_seconds=1.0,
        playback_timeout_seconds=0.05,
        langfuse_enabled=False,
        tts_enabled=False,
        storage_backend="memory",
    )


@pytest.fixture
def fake_service():
    return FakeQuestionService(scores=[9, 3, 6, 9, 7])


@pytest.fixture
def repository():
    return InMemorySessionRepository()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
async def controller(fake_service, repository, recorder):
    events = EventHub("test-session")
    events.subscribe(recorder)
    controller = InterviewSessionController(
        question_service=fake_service,
        speech=RecordingSpeech(events),
        repository=repository,
        user_id="user-1",
        session_id="test-session",
        events=events,
        listen_delay=0,
        tick_seconds=1.0,
    )
    yield controller
    await controller.close()
