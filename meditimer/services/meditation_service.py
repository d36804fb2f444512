import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import date

import sentry_sdk

from meditimer.clock import Clock, local_today
from meditimer.config import settings
from meditimer.errors import CorruptDataError
from meditimer.schemas.stats import AppState, StatsSnapshot, TimerState
from meditimer.services.alert_service import Alerter
from meditimer.services.session_store import SessionStore
from meditimer.services.stats_service import compute_stats
from meditimer.services.timer_service import Countdown

logger = logging.getLogger(__name__)

Listener = Callable[[AppState], None]


class MeditationApp:
    """Timer state machine plus the latest history views.

    IDLE -> RUNNING -> FINISHED -> IDLE. Only a countdown that runs out records
    a session; cancelling returns to IDLE and leaves the log alone. Every change
    is pushed to subscribers as an ``AppState``.
    """

    def __init__(
        self,
        store: SessionStore,
        alerter: Alerter | None = None,
        clock: Clock = local_today,
        tick_seconds: float = settings.TICK_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.alerter = alerter or Alerter()
        self.clock = clock
        self.tick_seconds = tick_seconds
        self._sleep = sleep

        self.timer_state = TimerState.IDLE
        self.selected_minutes = settings.DEFAULT_MINUTES
        self.seconds_remaining = 0
        self.stats = StatsSnapshot.empty(clock())

        self._countdown: Countdown | None = None
        self._task: asyncio.Task | None = None
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return AppState(
            timer_state=self.timer_state,
            selected_minutes=self.selected_minutes,
            seconds_remaining=self.seconds_remaining,
            stats=self.stats,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:
                logger.exception("State listener %r failed", listener)
                sentry_sdk.capture_exception(exc)

    def set_minutes(self, minutes: int) -> int:
        self.selected_minutes = max(settings.MIN_MINUTES, min(settings.MAX_MINUTES, minutes))
        self._publish()
        return self.selected_minutes

    def start(self) -> asyncio.Task:
        """Start a countdown for the selected duration. Must be called from a running loop."""
        if self.timer_state == TimerState.RUNNING:
            raise RuntimeError("Timer is already running")

        minutes = self.selected_minutes
        countdown = Countdown(
            minutes,
            tick_seconds=self.tick_seconds,
            on_tick=self._on_tick,
            sleep=self._sleep,
        )
        self._countdown = countdown
        self.timer_state = TimerState.RUNNING
        self.seconds_remaining = countdown.seconds_remaining
        self._publish()

        logger.info("Started %d-minute session", minutes)
        self._task = asyncio.create_task(self._run(countdown, minutes))
        self._task.add_done_callback(self._on_run_done)
        return self._task

    def cancel(self) -> None:
        if self.timer_state != TimerState.RUNNING or self._countdown is None:
            return
        self._countdown.cancel()
        self.timer_state = TimerState.IDLE
        self.seconds_remaining = 0
        self._publish()
        logger.info("Session cancelled")

    def reset_to_idle(self) -> None:
        if self.timer_state == TimerState.FINISHED:
            self.timer_state = TimerState.IDLE
            self._publish()

    async def shutdown(self) -> None:
        self.cancel()
        if self._task is not None and not self._task.done():
            await self._task

    def _on_run_done(self, task: asyncio.Task) -> None:
        # Retrieve the failure so it is reported even if nobody awaits the task
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Session run failed: %s", exc)
            sentry_sdk.capture_exception(exc)

    def _on_tick(self, remaining: int) -> None:
        self.seconds_remaining = remaining
        self._publish()

    async def _run(self, countdown: Countdown, minutes: int) -> bool:
        if not await countdown.run():
            return False
        await self._complete(minutes)
        return True

    async def _complete(self, minutes: int) -> None:
        # One date for the append and every view derived from it
        today = self.clock()
        self.timer_state = TimerState.FINISHED
        self.seconds_remaining = 0
        self._publish()

        await self.alerter.alert()
        await self._record(minutes, today)
        await self.refresh_stats(today)

    async def _record(self, minutes: int, today: date) -> None:
        try:
            await self.store.append(minutes, today)
        except CorruptDataError:
            logger.warning("Session log is unreadable, starting a new one", exc_info=True)
            await self.store.clear()
            await self.store.append(minutes, today)

    async def refresh_stats(self, today: date | None = None) -> StatsSnapshot:
        """Recompute every history view from the stored log.

        A ``PersistenceError`` propagates and leaves the previous stats in place.
        """
        today = today or self.clock()
        try:
            sessions = await self.store.load_all()
        except CorruptDataError:
            logger.warning("Session log is unreadable, showing empty history", exc_info=True)
            sessions = []

        self.stats = compute_stats(today, sessions)
        self._publish()
        return self.stats
