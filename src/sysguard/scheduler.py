"""Self-rescheduling refresh timer for sysguard."""

from collections.abc import Callable
from enum import Enum
from typing import Protocol

from sysguard.logging_setup import get_logger

log = get_logger(__name__)

MIN_INTERVAL = 0.1  # seconds


class RefreshTimer(Protocol):
    """One-shot timer: fires ``callback`` once, ``interval`` seconds after start."""

    def start(self, interval: float, callback: Callable[[], None]) -> None: ...

    def cancel(self) -> None: ...


class SchedulerState(Enum):
    """Lifecycle of the refresh scheduler."""

    IDLE = "idle"
    ARMED = "armed"
    FIRING = "firing"


class RefreshScheduler:
    """
    Runs ``on_tick`` every ``interval`` seconds while the view is live.

    Each tick re-arms the timer exactly once, whether or not the tick did any
    work, so the cadence does not depend on what the consumer is looking at.
    At most one tick is pending at a time. ``on_tick`` decides whether a tick
    starts new work; the scheduler only keeps the cadence.
    """

    def __init__(
        self,
        timer: RefreshTimer,
        interval: float,
        on_tick: Callable[[], None],
        is_live: Callable[[], bool] = lambda: True,
    ) -> None:
        """
        Initialize the RefreshScheduler.

        Args:
            timer: One-shot timer used to schedule each tick.
            interval: Seconds between ticks (minimum 0.1s).
            on_tick: Work to run on a tick while the view is live.
            is_live: Whether the consumer currently needs fresh data.
        """
        self._timer = timer
        self._interval = max(MIN_INTERVAL, interval)
        self._on_tick = on_tick
        self._is_live = is_live
        self._state = SchedulerState.IDLE

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def interval(self) -> float:
        """Seconds between ticks."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the interval; applies from the next re-arm."""
        self._interval = max(MIN_INTERVAL, value)

    def start(self) -> None:
        """Arm the first tick. Does nothing if already running."""
        if self._state is not SchedulerState.IDLE:
            return
        self._arm()

    def stop(self) -> None:
        """Cancel the pending tick and go idle."""
        self._timer.cancel()
        self._state = SchedulerState.IDLE

    def _arm(self) -> None:
        self._state = SchedulerState.ARMED
        self._timer.start(self._interval, self._fire)

    def _fire(self) -> None:
        if self._state is not SchedulerState.ARMED:
            # Cancelled while the timer callback was already queued.
            return

        self._state = SchedulerState.FIRING
        try:
            if self._is_live():
                self._on_tick()
        except Exception:
            log.exception("scheduler.tick_failed")
        finally:
            # stop() during on_tick leaves us IDLE; don't re-arm then.
            if self._state is SchedulerState.FIRING:
                self._arm()
