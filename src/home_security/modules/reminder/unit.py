"""The reminder state machine for one door or window.

A SensorReminderUnit takes the raw open/closed state of a contact sensor
and decides when the occupant should be reminded that the opening was left
open. While the opening stays open the reminder is repeated: it is cleared
for BLINK_SECONDS and asserted again, so a consumer sees one falling and one
rising edge per cycle.

    CLOSED    --open-->  OPENED     (timer: first_remind)
    OPENED    --timer--> REMINDING  (reminder on, timer: cyclic period - 1s)
    REMINDING --timer--> OPENED     (reminder off, timer: 1s)
    OPENED    --close--> CLOSED
    REMINDING --close--> CLOSED     (reminder off)

Every raw state change is reported to the security controller before the
reminder state machine runs.

Licensed under MIT License
"""

import logging
import threading
from typing import Callable, Optional

from home_security.core.observer import NotificationQueue, SecurityObserver
from home_security.core.timer import ReminderTimer, TimerHandle, TimerScheduler

from .models import BLINK_SECONDS, ReminderState, ReminderTimings

_LOGGER = logging.getLogger(__name__)

# Receives (unit_id, is_open) for every raw state change
StateReporter = Callable[[int, bool], None]


class SensorReminderUnit:
    """Reminder state machine for one opening.

    Transitions are serialized by a per-unit lock. The lock is held while
    the raw state is reported, which keeps reports from one unit in order.
    Observer notifications are queued under the lock and delivered after
    it is released.
    """

    def __init__(
        self,
        unit_id: int,
        timings: ReminderTimings,
        scheduler: TimerScheduler,
        report_state: StateReporter,
        observer: SecurityObserver,
        name: Optional[str] = None,
        notifications: Optional[NotificationQueue] = None,
    ) -> None:
        """Create the unit in CLOSED and report the closed state.

        Args:
            unit_id: Serial number, unique per opening.
            timings: Resolved reminder durations.
            scheduler: Timer source for the reminder delays.
            report_state: Called with (unit_id, is_open) on every raw change.
            observer: Receives reminder output changes.
            name: Display name used in log messages.
            notifications: Queue shared with the security controller. A
                private queue for observer is created when omitted.
        """
        self._lock = threading.RLock()
        self._id = unit_id
        self._name = name or f"Opening {unit_id}"
        self._timings = timings
        self._report_state = report_state
        self._notifications = (
            notifications if notifications is not None else NotificationQueue(observer)
        )
        self._timer = ReminderTimer(scheduler)

        self._is_open = False
        self._reminder_active = False
        self._state = ReminderState.CLOSED
        self._fast_remind = False
        self._fast_remind_revision = 0

        # Register the initial (closed) state with the security system
        self._report_state(self._id, self._is_open)

        _LOGGER.debug(
            f"{self._name}: created (id={unit_id}, first_remind={timings.first_remind}s, "
            f"fast={timings.fast_cyclic_remind}s, slow={timings.slow_cyclic_remind}s)"
        )

    # --- Queries ---

    @property
    def id(self) -> int:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def timings(self) -> ReminderTimings:
        return self._timings

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._is_open

    @property
    def reminder_active(self) -> bool:
        with self._lock:
            return self._reminder_active

    @property
    def state(self) -> ReminderState:
        with self._lock:
            return self._state

    @property
    def fast_remind(self) -> bool:
        with self._lock:
            return self._fast_remind

    @property
    def has_pending_timer(self) -> bool:
        with self._lock:
            return self._timer.active

    @property
    def pending_delay(self) -> Optional[float]:
        """Delay of the armed timer in seconds, or None."""
        with self._lock:
            return self._timer.delay

    # --- Control ---

    def set_open(self, is_open: bool) -> bool:
        """Apply a raw sensor edge.

        Args:
            is_open: True if the opening is open.

        Returns:
            True if the state changed, False for a repeated value.
        """
        is_open = bool(is_open)

        with self._notifications.deferred(), self._lock:
            if is_open == self._is_open:
                _LOGGER.debug(f"{self._name}: already {'open' if is_open else 'closed'}")
                return False

            self._is_open = is_open
            self._report_state(self._id, is_open)
            _LOGGER.info(f"{self._name}: {'opened' if is_open else 'closed'}")

            self._run_state_machine(timeout=False)
            return True

    def set_fast_remind(self, fast_remind: bool, revision: Optional[int] = None) -> None:
        """Choose the cyclic period for the next reminder cycle.

        A cyclic timer that is already running keeps its duration.

        Args:
            fast_remind: True for the fast cyclic period.
            revision: Increasing broadcast number. A value older than the
                last one applied is ignored, so concurrent broadcasts
                cannot leave the unit on a superseded setting.
        """
        with self._lock:
            if revision is not None:
                if revision < self._fast_remind_revision:
                    _LOGGER.debug(f"{self._name}: ignoring stale fast remind {revision}")
                    return
                self._fast_remind_revision = revision
            self._fast_remind = bool(fast_remind)
            _LOGGER.debug(f"{self._name}: fast remind {'on' if self._fast_remind else 'off'}")

    def cancel(self) -> None:
        """Cancel the pending timer without changing state."""
        with self._lock:
            self._timer.cancel()

    # --- State machine ---

    def _on_timer_expired(self, handle: TimerHandle) -> None:
        with self._notifications.deferred(), self._lock:
            if not self._timer.claim(handle):
                _LOGGER.debug(f"{self._name}: ignoring superseded timer")
                return
            self._run_state_machine(timeout=True)

    def _run_state_machine(self, timeout: bool) -> None:
        """Advance the state machine. Caller holds the lock."""
        previous = self._state

        if self._state is ReminderState.CLOSED:
            if self._is_open:
                self._start_timer(self._timings.first_remind)
                self._state = ReminderState.OPENED

        elif self._state is ReminderState.OPENED:
            if not self._is_open:
                # Closed before the reminder was due
                self._timer.cancel()
                self._state = ReminderState.CLOSED
            elif timeout:
                self._set_reminder_active(True)
                self._start_timer(self._timings.cyclic_delay(self._fast_remind))
                self._state = ReminderState.REMINDING

        elif self._state is ReminderState.REMINDING:
            if not self._is_open:
                self._set_reminder_active(False)
                self._timer.cancel()
                self._state = ReminderState.CLOSED
            elif timeout:
                # Clear the reminder briefly, OPENED asserts it again
                self._set_reminder_active(False)
                self._start_timer(BLINK_SECONDS)
                self._state = ReminderState.OPENED

        if self._state is not previous:
            _LOGGER.info(
                f"{self._name}: {previous.name} -> {self._state.name} "
                f"({'timeout' if timeout else 'sensor'})"
            )

    def _start_timer(self, delay: float) -> None:
        self._timer.start(delay, self._on_timer_expired)
        _LOGGER.debug(f"{self._name}: timer armed for {delay}s")

    def _set_reminder_active(self, active: bool) -> None:
        if active == self._reminder_active:
            return
        self._reminder_active = active
        _LOGGER.info(f"{self._name}: reminder {'on' if active else 'off'}")
        self._notifications.reminder_active(self._id, active)
