"""
Speech I/O Layer for InterviewReady

Handles:
- Question playback (text-to-speech) with a completion signal
- Answer capture (speech-to-text) as a running transcript

The browser does the actual audio work. The server-side adapter
relays prompts to it, optionally with audio synthesized by edge-tts,
and receives interim/final transcript segments back. When the client
has no speech support a silent adapter keeps the interview playable
through manual submission.
"""

import asyncio
import base64
import logging
from abc import ABC, abstractmethod
from typing import Any

import edge_tts

from interviewready.core.events import EventHub

logger = logging.getLogger(__name__)


UNSUPPORTED_WARNING = (
    "Speech recognition is not supported by your browser. "
    "You can still type your answers and submit them manually."
)


class EdgeTTSSynthesizer:
    """Generate question audio with Edge TTS (Microsoft)."""

    # Map short voice names to Edge TTS voices
    VOICES = {
        "male": "en-US-GuyNeural",
        "female": "en-US-JennyNeural",
        "professional": "en-US-AriaNeural",
    }

    def __init__(self, voice: str = "en-US-JennyNeural"):
        self.voice = self.VOICES.get(voice, voice)

    async def synthesize(self, text: str) -> dict[str, Any]:
        """
        Convert text to speech.

        Returns:
            Dict with audio_base64, format and an estimated duration
        """
        communicate = edge_tts.Communicate(text, self.voice)

        # Collect audio chunks
        audio_chunks = []
        async for chunk in communicate.stream():
            if chunk["type"] == "audio":
                audio_chunks.append(chunk["data"])

        audio_data = b"".join(audio_chunks)

        # Estimate duration (rough: 150 words per minute)
        word_count = len(text.split())

        return {
            "audio_base64": base64.b64encode(audio_data).decode("utf-8"),
            "format": "mp3",
            "duration_seconds": word_count / 150 * 60,
        }


class SpeechAdapter(ABC):
    """
    Speech capability for one interview session.

    Transcript handling follows the browser recognizer: final segments
    accumulate, the latest interim segment is shown after them until it
    is finalized or replaced.
    """

    supported = True

    def __init__(self, events: EventHub | None = None):
        self.events = events
        self.is_capturing = False
        self._final_segments: list[str] = []
        self._interim = ""

    @property
    def transcript(self) -> str:
        """Final segments plus the current interim segment."""
        parts = self._final_segments + ([self._interim] if self._interim else [])
        return " ".join(parts).strip()

    def clear_transcript(self) -> None:
        self._final_segments = []
        self._interim = ""

    def push_segment(self, text: str, is_final: bool = True) -> None:
        """Add recognized speech. Ignored unless capture is armed."""
        if not self.is_capturing:
            logger.debug("Dropping transcript segment received while not capturing")
            return

        text = text.strip()
        if is_final:
            if text:
                self._final_segments.append(text)
            self._interim = ""
        else:
            self._interim = text

    async def start_capture(self) -> None:
        """Arm speech capture for a new answer. Clears the transcript."""
        if not self.supported or self.is_capturing:
            return
        self.clear_transcript()
        self.is_capturing = True
        await self._publish("capture_started")

    async def stop_capture(self) -> None:
        """Stop speech capture. The transcript is kept."""
        if not self.is_capturing:
            return
        self.is_capturing = False
        await self._publish("capture_stopped", transcript=self.transcript)

    @abstractmethod
    async def speak(self, text: str) -> None:
        """Play ``text`` and return once playback has finished."""

    def playback_complete(self) -> None:
        """Signal from the client that the current prompt finished playing."""

    async def _publish(self, event_type: str, **data: Any) -> None:
        if self.events:
            await self.events.publish(event_type, **data)


class SilentSpeech(SpeechAdapter):
    """No speech capability: prompts are shown, never played or captured."""

    supported = False

    async def speak(self, text: str) -> None:
        # Nothing to wait for
        await self._publish("speak", text=text, audio=None)


class RelayedSpeech(SpeechAdapter):
    """
    Speech handled by the client.

    ``speak`` publishes the prompt (with synthesized audio when a
    synthesizer is configured) and waits for the client to report that
    playback completed, up to ``playback_timeout`` seconds.
    """

    def __init__(
        self,
        events: EventHub | None = None,
        synthesizer: EdgeTTSSynthesizer | None = None,
        playback_timeout: float = 60.0,
    ):
        super().__init__(events)
        self.synthesizer = synthesizer
        self.playback_timeout = playback_timeout
        self._playback_done: asyncio.Event | None = None

    async def speak(self, text: str) -> None:
        audio = None
        if self.synthesizer:
            try:
                audio = await self.synthesizer.synthesize(text)
            except Exception as e:
                # Client falls back to its own speech synthesis
                logger.error(f"Edge TTS failed: {e}")

        self._playback_done = asyncio.Event()
        await self._publish("speak", text=text, audio=audio)

        try:
            await asyncio.wait_for(self._playback_done.wait(), timeout=self.playback_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"No playback completion after {self.playback_timeout}s, continuing")
        finally:
            self._playback_done = None

    def playback_complete(self) -> None:
        if self._playback_done is not None:
            self._playback_done.set()
