"""
Answer countdown timer for InterviewReady

A single-shot countdown that ticks once per interval, can be restarted
for each question and cancelled on manual submission.
"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


TickCallback = Callable[[int], Awaitable[None]]
ExpireCallback = Callable[[], None]


class Countdown:
    """
    Cancellable countdown running as an asyncio task.

    Only one countdown is ever live: ``start`` cancels the previous one.
    Every run gets a generation number; callbacks from an older
    generation are dropped, so a stale tick never reaches a newer question.
    """

    def __init__(
        self,
        on_tick: TickCallback | None = None,
        on_expire: ExpireCallback | None = None,
        tick_seconds: float = 1.0,
    ):
        """
        Args:
            on_tick: Awaited after each tick with the seconds remaining
            on_expire: Called once when the countdown reaches zero
            tick_seconds: Wall-clock length of one tick
        """
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.tick_seconds = tick_seconds

        self.remaining = 0
        self.generation = 0
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, seconds: int) -> None:
        """(Re)start the countdown at ``seconds``."""
        self.cancel()
        self.generation += 1
        self.remaining = seconds
        self._task = asyncio.create_task(
            self._run(self.generation),
            name=f"countdown-{self.generation}",
        )

    def cancel(self) -> None:
        """Stop the countdown. Safe to call when nothing is running."""
        self.generation += 1
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None
        self.remaining = 0

    async def _run(self, generation: int) -> None:
        while self.remaining > 0:
            await asyncio.sleep(self.tick_seconds)
            if generation != self.generation:
                return

            self.remaining -= 1
            if self.on_tick:
                try:
                    await self.on_tick(self.remaining)
                except Exception as e:
                    logger.error(f"Countdown tick callback error: {e}")

            if generation != self.generation:
                return

        # Detach before expiring so the handler may cancel or restart freely
        self._task = None
        if self.on_expire:
            self.on_expire()
