import asyncio
import logging
from collections.abc import Awaitable, Callable

from meditimer.config import settings

logger = logging.getLogger(__name__)


class Countdown:
    """One-shot countdown that decrements ``seconds_remaining`` once per tick.

    Cancellation is cooperative: ``cancel()`` only sets a flag, and ``run()``
    checks it at every tick boundary.
    """

    def __init__(
        self,
        minutes: int,
        tick_seconds: float = settings.TICK_SECONDS,
        on_tick: Callable[[int], None] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.seconds_remaining = minutes * 60
        self.tick_seconds = tick_seconds
        self.on_tick = on_tick
        self._sleep = sleep
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    async def run(self) -> bool:
        """Count down to zero. Returns True on natural completion, False if cancelled."""
        while self.seconds_remaining > 0:
            if self._cancelled:
                break
            await self._sleep(self.tick_seconds)
            if self._cancelled:
                break
            self.seconds_remaining -= 1
            if self.on_tick is not None:
                self.on_tick(self.seconds_remaining)

        if self._cancelled:
            logger.debug("Countdown cancelled with %d seconds remaining", self.seconds_remaining)
            return False
        return True
