"""
Timer primitives for the reminder state machines.

A state machine never blocks. It waits by scheduling a one-shot callback on a
TimerScheduler. The host decides where time comes from:

- ThreadingTimerScheduler: wall-clock timers on daemon threads
- ManualTimerScheduler: virtual clock advanced explicitly (tests, hosts that own time)

ReminderTimer is the single-slot handle a state machine owns. Starting it
always cancels whatever was pending, so at most one timer is ever outstanding.
"""

import heapq
import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

TimerCallback = Callable[["TimerHandle"], None]


class TimerHandle:
    """
    A scheduled one-shot callback.

    Attributes:
        delay: Requested delay in seconds
        due: Scheduler time at which the callback is due
        cancelled: True once cancel() was called
        fired: True once the callback ran
    """

    def __init__(self, callback: TimerCallback, delay: float, due: float) -> None:
        self._callback = callback
        self.delay = delay
        self.due = due
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        """True while the callback may still run."""
        return not self.cancelled and not self.fired

    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        self.cancelled = True

    def fire(self) -> None:
        """Run the callback unless cancelled or already fired."""
        if not self.active:
            return
        self.fired = True
        self._callback(self)


class TimerScheduler(ABC):
    """
    Abstract source of one-shot timers.

    The host platform provides the implementation; state machines only
    call schedule() and cancel the returned handle.
    """

    @abstractmethod
    def now(self) -> float:
        """
        Current scheduler time in seconds.

        Returns:
            Monotonic time in seconds (origin is implementation-defined)
        """
        pass

    @abstractmethod
    def schedule(self, delay: float, callback: TimerCallback) -> TimerHandle:
        """
        Schedule callback to run once after delay seconds.

        Args:
            delay: Seconds to wait (negative values are treated as 0)
            callback: Called with the handle once the delay elapses

        Returns:
            Handle that can cancel the callback
        """
        pass

    def shutdown(self) -> None:
        """Cancel everything still pending. Default does nothing."""
        pass


class _ThreadingTimerHandle(TimerHandle):
    """TimerHandle backed by a threading.Timer."""

    def __init__(self, callback: TimerCallback, delay: float, due: float) -> None:
        super().__init__(callback, delay, due)
        self._thread: Optional[threading.Timer] = None

    def cancel(self) -> None:
        super().cancel()
        if self._thread is not None:
            self._thread.cancel()


class ThreadingTimerScheduler(TimerScheduler):
    """
    Wall-clock scheduler using daemon threading.Timer instances.

    Callbacks run on the timer thread. Receivers are expected to
    serialize against their own lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handles: List[_ThreadingTimerHandle] = []

    def now(self) -> float:
        return time.monotonic()

    def schedule(self, delay: float, callback: TimerCallback) -> TimerHandle:
        delay = max(delay, 0.0)
        handle = _ThreadingTimerHandle(callback, delay, self.now() + delay)

        thread = threading.Timer(delay, handle.fire)
        thread.daemon = True
        handle._thread = thread

        with self._lock:
            # Drop finished handles so the list does not grow forever
            self._handles = [h for h in self._handles if h.active]
            self._handles.append(handle)

        thread.start()
        return handle

    def shutdown(self) -> None:
        with self._lock:
            handles, self._handles = self._handles, []

        for handle in handles:
            handle.cancel()
        logger.debug(f"Cancelled {len(handles)} wall-clock timers")


class ManualTimerScheduler(TimerScheduler):
    """
    Scheduler driven by an explicit virtual clock.

    Nothing fires until advance() is called. Callbacks run synchronously
    on the caller's thread, in due order. Timers scheduled from inside a
    callback fire in the same advance() call if they fall due before its end.

    Example:
        scheduler = ManualTimerScheduler()
        manager = HomeSecurityManager(config, scheduler=scheduler)
        manager.set_open(1, True)
        scheduler.advance(900)  # first reminder fires
    """

    # Queue length that triggers dropping cancelled entries
    COMPACT_THRESHOLD = 64

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: List[tuple[float, int, TimerHandle]] = []
        self._sequence = itertools.count()
        self._compact_at = self.COMPACT_THRESHOLD

    def now(self) -> float:
        return self._now

    def schedule(self, delay: float, callback: TimerCallback) -> TimerHandle:
        if len(self._queue) >= self._compact_at:
            self._compact()

        delay = max(delay, 0.0)
        handle = TimerHandle(callback, delay, self._now + delay)
        # Sequence number keeps FIFO order for timers due at the same instant
        heapq.heappush(self._queue, (handle.due, next(self._sequence), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and fire every timer that falls due.

        Args:
            seconds: How far to move the clock

        Returns:
            Number of callbacks that ran
        """
        target = self._now + seconds
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = due
            handle.fire()
            fired += 1

        self._now = target
        return fired

    def pending(self) -> int:
        """Number of timers that have neither fired nor been cancelled."""
        return sum(1 for _, _, handle in self._queue if handle.active)

    def next_due(self) -> Optional[float]:
        """Time of the earliest pending timer, or None."""
        due_times = [due for due, _, handle in self._queue if handle.active]
        return min(due_times) if due_times else None

    def shutdown(self) -> None:
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()

    def _compact(self) -> None:
        """Drop cancelled entries so rapid re-arming cannot grow the heap."""
        before = len(self._queue)
        self._queue = [entry for entry in self._queue if entry[2].active]
        heapq.heapify(self._queue)
        # Next compaction once the queue has doubled again
        self._compact_at = max(self.COMPACT_THRESHOLD, 2 * len(self._queue))
        logger.debug(f"Dropped {before - len(self._queue)} cancelled timers")


class ReminderTimer:
    """
    Single-slot timer owned by one state machine.

    start() cancels the pending handle before arming a new one. The
    callback receives the handle it was armed with; the owner passes it
    to claim() under its own lock to reject firings that were superseded
    between the timer thread waking up and the lock being acquired.
    """

    def __init__(self, scheduler: TimerScheduler) -> None:
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None

    @property
    def active(self) -> bool:
        """True while a timer is armed and has not been claimed."""
        return self._handle is not None and not self._handle.cancelled

    @property
    def delay(self) -> Optional[float]:
        """Delay of the armed timer, or None."""
        return self._handle.delay if self._handle is not None else None

    @property
    def due(self) -> Optional[float]:
        """Scheduler time at which the armed timer fires, or None."""
        return self._handle.due if self._handle is not None else None

    def start(self, delay: float, callback: TimerCallback) -> TimerHandle:
        """
        Arm the timer, replacing any pending one.

        Args:
            delay: Seconds until expiry
            callback: Called with the handle on expiry

        Returns:
            The new handle
        """
        self.cancel()

        handle = self._scheduler.schedule(delay, callback)
        self._handle = handle
        return handle

    def cancel(self) -> None:
        """Cancel the pending timer, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def claim(self, handle: TimerHandle) -> bool:
        """
        Accept an expiry for handle if it is still the armed one.

        Args:
            handle: Handle passed to the expiry callback

        Returns:
            True if handle was current (slot is now empty), False if stale
        """
        if handle is not self._handle or handle.cancelled:
            return False
        self._handle = None
        return True
