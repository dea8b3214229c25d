import pytest

from interviewready.config.settings import Settings
from interviewready.core.persistence import InMemorySessionRepository
from interviewready.core.session_manager import SessionManager, SessionNotFoundError
from interviewready.core.speech import RelayedSpeech, SilentSpeech

from conftest import FakeQuestionService


def _manager(**overrides):
    settings = Settings(listen_delay_seconds=0, langfuse_enabled=False, **overrides)
    return SessionManager(FakeQuestionService(), InMemorySessionRepository(), settings=settings)


async def test_create_builds_speech_for_client():
    manager = _manager()

    spoken = manager.create("user-1")
    silent = manager.create("user-1", speech_supported=False)

    assert isinstance(spoken.speech, RelayedSpeech)
    assert isinstance(silent.speech, SilentSpeech)
    assert spoken.session_id != silent.session_id
    assert len(manager) == 2
    await manager.close_all()


async def test_get_checks_owner():
    manager = _manager()
    controller = manager.create("user-1")

    assert manager.get(controller.session_id, user_id="user-1") is controller
    with pytest.raises(SessionNotFoundError):
        manager.get(controller.session_id, user_id="user-2")
    with pytest.raises(SessionNotFoundError):
        manager.get("unknown")
    await manager.close_all()


async def test_evict_idle_keeps_connected_sessions():
    manager = _manager(session_idle_timeout_seconds=0)
    watched = manager.create("user-1")
    abandoned = manager.create("user-2")

    async def listener(event):
        pass

    watched.events.subscribe(listener)

    evicted = await manager.evict_idle()

    assert evicted == [abandoned.session_id]
    assert len(manager) == 1
    with pytest.raises(SessionNotFoundError):
        manager.get(abandoned.session_id)
    assert manager.get(watched.session_id) is watched
    await manager.close_all()


async def test_recent_sessions_are_not_evicted():
    manager = _manager(session_idle_timeout_seconds=3600)
    controller = manager.create("user-1")

    assert await manager.evict_idle() == []
    assert manager.get(controller.session_id) is controller
    await manager.close_all()


async def test_discard_forgets_session():
    manager = _manager()
    controller = manager.create("user-1")

    await manager.discard(controller.session_id)

    assert len(manager) == 0
    assert await manager.evict_idle() == []
