"""
Interview API endpoints

Handles interview session lifecycle:
- Creating sessions
- Starting interviews
- Relaying speech (capture, transcript segments, playback completion)
- Submitting answers
- Resetting and discarding sessions
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from interviewready.api.dependencies import get_session_manager, get_user_id
from interviewready.core.events import SessionEvent
from interviewready.core.session_controller import (
    InterviewSessionController,
    StateTransitionError,
)
from interviewready.core.session_manager import SessionManager, SessionNotFoundError
from interviewready.core.speech import UNSUPPORTED_WARNING
from interviewready.models.interview import InterviewConfig, SessionSnapshot

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class SetupRequest(BaseModel):
    """Request model for interview setup."""
    speech_supported: bool = True


class SetupResponse(BaseModel):
    """Response model for interview setup."""
    session_id: str
    status: str
    message: str
    speech_supported: bool
    warning: str | None = None


class SubmitAnswerRequest(BaseModel):
    """Request model for submitting an answer."""
    transcript: str | None = None  # None = use the captured transcript


class TranscriptSegmentRequest(BaseModel):
    """A recognized speech segment from the client."""
    text: str
    is_final: bool = True


class TranscriptResponse(BaseModel):
    """Running transcript after a segment was applied."""
    transcript: str
    is_capturing: bool


# ============================================================================
# HELPERS
# ============================================================================

def _get_controller(
    manager: SessionManager,
    session_id: str,
    user_id: str,
) -> InterviewSessionController:
    try:
        return manager.get(session_id, user_id=user_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


# ============================================================================
# REST ENDPOINTS
# ============================================================================

@router.post("/setup", response_model=SetupResponse)
async def setup_interview(
    request: SetupRequest,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> SetupResponse:
    """
    Create a new interview session.

    The session starts in SETUP; call /start with the configuration
    to begin.
    """
    await manager.evict_idle()
    controller = manager.create(user_id, speech_supported=request.speech_supported)

    return SetupResponse(
        session_id=controller.session_id,
        status="created",
        message="Interview session created. Call /start to begin.",
        speech_supported=request.speech_supported,
        warning=None if request.speech_supported else UNSUPPORTED_WARNING,
    )


@router.post("/{session_id}/start", response_model=SessionSnapshot)
async def start_interview(
    session_id: str,
    config: InterviewConfig,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSnapshot:
    """
    Start the interview.

    Generates the first question at medium difficulty. Playback,
    capture and the countdown follow in the background.
    """
    controller = _get_controller(manager, session_id, user_id)

    try:
        return await controller.start(config)
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/{session_id}/respond", response_model=SessionSnapshot)
async def submit_answer(
    session_id: str,
    request: SubmitAnswerRequest,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSnapshot:
    """
    Submit the answer to the current question.

    The answer is evaluated and the next question (or the report)
    is prepared.
    """
    controller = _get_controller(manager, session_id, user_id)

    try:
        return await controller.submit(request.transcript)
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{session_id}/capture/start", response_model=SessionSnapshot)
async def start_capture(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSnapshot:
    """Manually (re)arm speech capture, e.g. from the microphone button."""
    controller = _get_controller(manager, session_id, user_id)
    await controller.speech.start_capture()
    return controller.snapshot()


@router.post("/{session_id}/capture/stop", response_model=SessionSnapshot)
async def stop_capture(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSnapshot:
    """Manually stop speech capture without submitting."""
    controller = _get_controller(manager, session_id, user_id)
    await controller.speech.stop_capture()
    return controller.snapshot()


@router.post("/{session_id}/transcript", response_model=TranscriptResponse)
async def push_transcript(
    session_id: str,
    request: TranscriptSegmentRequest,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> TranscriptResponse:
    """Apply an interim or final recognition segment from the client."""
    controller = _get_controller(manager, session_id, user_id)
    controller.speech.push_segment(request.text, is_final=request.is_final)

    return TranscriptResponse(
        transcript=controller.speech.transcript,
        is_capturing=controller.speech.is_capturing,
    )


@router.post("/{session_id}/playback-complete")
async def playback_complete(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    """Signal that the client finished playing the current question."""
    controller = _get_controller(manager, session_id, user_id)
    controller.speech.playback_complete()
    return {"status": "ok", "session_id": session_id}


@router.get("/{session_id}/status", response_model=SessionSnapshot)
async def get_session_status(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSnapshot:
    """Get the current status of an interview session."""
    controller = _get_controller(manager, session_id, user_id)
    return controller.snapshot()


@router.post("/{session_id}/reset", response_model=SessionSnapshot)
async def reset_interview(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionSnapshot:
    """Start over from SETUP after the report ("Try Another Interview")."""
    controller = _get_controller(manager, session_id, user_id)

    try:
        return await controller.reset()
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/{session_id}")
async def discard_interview(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    """Tear down a session and release its timer and tasks."""
    _get_controller(manager, session_id, user_id)
    await manager.discard(session_id)
    return {"status": "discarded", "session_id": session_id}


# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws/{session_id}")
async def websocket_interview(
    websocket: WebSocket,
    session_id: str,
    user_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    WebSocket endpoint for real-time interview interaction.

    Browsers cannot set headers on WebSockets, so the user ID comes
    from the ``user_id`` query parameter.

    Message types:
    - start: Start the interview (job_role, interview_type)
    - transcript: Recognized speech segment (text, is_final)
    - capture_start / capture_stop: Microphone toggled
    - playback_complete: Question finished playing
    - submit: Submit the answer (optional transcript)
    - save: Save the report
    - reset: Back to setup after the report
    - ping

    Server sends every session event (state_change, question, speak,
    capture_started, listening, tick, evaluation, report, ...) plus:
    - snapshot: Full state after a command
    - error: Error occurred
    """
    await websocket.accept()

    try:
        controller = manager.get(session_id, user_id=user_id)
    except SessionNotFoundError:
        await websocket.close(code=4004, reason="Session not found")
        return

    async def forward(event: SessionEvent) -> None:
        await websocket.send_json(event.model_dump(mode="json"))

    controller.events.subscribe(forward)

    try:
        while True:
            data = await websocket.receive_json()
            if not isinstance(data, dict):
                await websocket.send_json({"type": "error", "message": "Messages must be JSON objects"})
                continue
            message_type = data.get("type")

            try:
                if message_type == "start":
                    await controller.start(InterviewConfig.model_validate(data))

                elif message_type == "transcript":
                    segment = TranscriptSegmentRequest.model_validate(data)
                    controller.speech.push_segment(segment.text, is_final=segment.is_final)
                    continue

                elif message_type == "capture_start":
                    await controller.speech.start_capture()

                elif message_type == "capture_stop":
                    await controller.speech.stop_capture()

                elif message_type == "playback_complete":
                    controller.speech.playback_complete()
                    continue

                elif message_type == "submit":
                    request = SubmitAnswerRequest.model_validate(data)
                    await controller.submit(request.transcript)

                elif message_type == "save":
                    result = await controller.save()
                    await websocket.send_json({
                        "type": "save_result",
                        "data": result.model_dump(mode="json"),
                    })
                    continue

                elif message_type == "reset":
                    await controller.reset()

                elif message_type == "ping":
                    await websocket.send_json({"type": "pong"})
                    continue

                else:
                    await websocket.send_json({
                        "type": "error",
                        "message": f"Unknown message type: {message_type}",
                    })
                    continue

            except (StateTransitionError, ValueError) as e:
                await websocket.send_json({"type": "error", "message": str(e)})
                continue
            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.error(f"WebSocket command {message_type!r} failed for session {session_id}: {e}")
                await websocket.send_json({"type": "error", "message": str(e)})
                continue

            await websocket.send_json({
                "type": "snapshot",
                "data": controller.snapshot().model_dump(mode="json"),
            })

    except WebSocketDisconnect:
        # Client disconnected; the session stays available for REST or a reconnect
        pass
    finally:
        controller.events.unsubscribe(forward)
