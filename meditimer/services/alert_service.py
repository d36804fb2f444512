import inspect
import logging
import sys
from collections.abc import Callable, Sequence
from typing import TextIO

import sentry_sdk

logger = logging.getLogger(__name__)

# Off/on durations in milliseconds, starting with an initial delay
VIBRATION_PATTERN_MS = (0, 400, 200, 400, 200, 600)

AlertChannel = Callable[[], object]


def terminal_chime(stream: TextIO | None = None) -> AlertChannel:
    """Chime channel that rings the terminal bell."""

    def chime() -> None:
        out = stream or sys.stdout
        out.write("\a")
        out.flush()

    return chime


def vibration(
    vibrator: Callable[[Sequence[int]], object] | None = None,
    pattern: Sequence[int] = VIBRATION_PATTERN_MS,
) -> AlertChannel:
    """Vibration channel. Without a vibrator installed it only logs the request."""

    def vibrate():
        if vibrator is None:
            logger.debug("No vibrator installed, skipping pattern %s", list(pattern))
            return None
        return vibrator(pattern)

    return vibrate


class Alerter:
    """Fires every alert channel once per completed session.

    A failing channel is logged and reported, never raised: a broken chime
    must not stop the session from being recorded.
    """

    def __init__(self, channels: Sequence[AlertChannel] | None = None):
        if channels is None:
            channels = [terminal_chime(), vibration()]
        self.channels = list(channels)

    async def alert(self) -> int:
        """Run all channels. Returns how many succeeded."""
        delivered = 0
        for channel in self.channels:
            try:
                result = channel()
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as exc:
                logger.exception("Alert channel %r failed", getattr(channel, "__name__", channel))
                sentry_sdk.capture_exception(exc)
        return delivered
