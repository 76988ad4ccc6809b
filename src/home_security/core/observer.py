"""
Observer interface between the state machines and the host platform.

The state machines push their outputs through a SecurityObserver. The host
accessory layer implements it to update its externally visible
characteristics (contact sensors, security system current state).

Notifications are only sent when a value actually changes, and never while
a state machine lock is held (see NotificationQueue).
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Deque, Iterator, List, Optional, Tuple

from home_security.core.bus import Event, EventBus

if TYPE_CHECKING:
    from home_security.modules.security.models import CurrentState

logger = logging.getLogger(__name__)

REMINDER_CHANGED = "reminder.changed"
SECURITY_STATE_CHANGED = "security.state_changed"
SECURITY_WARNING_CHANGED = "security.warning_changed"


class SecurityObserver(ABC):
    """
    Abstract receiver for state machine outputs.

    This interface is intentionally minimal:
    - notify_reminder_active: a reminder unit asserted or cleared its reminder
    - notify_arm_current_state: the security system changed its current state
    - notify_warning_active: the forgot-window warning changed
    """

    @abstractmethod
    def notify_reminder_active(self, unit_id: int, active: bool) -> None:
        """
        A reminder output changed.

        Args:
            unit_id: Serial of the reminder unit
            active: True while the occupant should be reminded
        """
        pass

    @abstractmethod
    def notify_arm_current_state(self, state: "CurrentState") -> None:
        """
        The security system current state changed.

        Args:
            state: New current state
        """
        pass

    @abstractmethod
    def notify_warning_active(self, active: bool) -> None:
        """
        The forgot-window warning changed.

        Args:
            active: True while arming is blocked by an open opening
        """
        pass


class NotificationQueue:
    """
    Delivers observer notifications outside the state machine locks.

    State machines enqueue notifications while holding their own lock and
    wrap every public entry point in deferred(). The queue is drained once
    the outermost deferred() block of the calling thread exits, after all
    of that thread's state machine locks have been released. Only one
    thread drains at a time, so notifications reach the observer in the
    order they were enqueued. An observer may call back into the control
    boundary; whatever that call enqueues is delivered by the drain that
    is already running.

    One queue is shared by every unit and the controller of a manager.
    """

    def __init__(self, observer: SecurityObserver) -> None:
        self._observer = observer
        self._lock = threading.Lock()
        self._pending: Deque[Tuple[Callable[..., None], Tuple[Any, ...]]] = deque()
        self._draining = False
        self._local = threading.local()

    @property
    def observer(self) -> SecurityObserver:
        return self._observer

    @contextmanager
    def deferred(self) -> Iterator[None]:
        """Hold back delivery until the outermost block of this thread exits."""
        depth = getattr(self._local, "depth", 0)
        self._local.depth = depth + 1
        try:
            yield
        finally:
            self._local.depth = depth
            if depth == 0:
                self.flush()

    def reminder_active(self, unit_id: int, active: bool) -> None:
        self._put(self._observer.notify_reminder_active, unit_id, active)

    def arm_current_state(self, state: "CurrentState") -> None:
        self._put(self._observer.notify_arm_current_state, state)

    def warning_active(self, active: bool) -> None:
        self._put(self._observer.notify_warning_active, active)

    def flush(self) -> None:
        """Deliver pending notifications unless another thread already is."""
        if getattr(self._local, "depth", 0):
            return

        with self._lock:
            if self._draining:
                return
            self._draining = True

        while True:
            with self._lock:
                if not self._pending:
                    self._draining = False
                    return
                notify, args = self._pending.popleft()

            try:
                notify(*args)
            except Exception as e:
                logger.error(f"Observer failed in {notify.__name__}: {e}", exc_info=True)

    def _put(self, notify: Callable[..., None], *args: Any) -> None:
        with self._lock:
            self._pending.append((notify, args))


class BusObserver(SecurityObserver):
    """
    Observer that republishes every notification on an EventBus.

    Events Emitted:
    - reminder.changed: payload {"active": bool}, unit_id set
    - security.state_changed: payload {"state": str, "value": int}
    - security.warning_changed: payload {"active": bool}
    """

    SOURCE = "home_security"

    def __init__(self, bus: Optional[EventBus] = None) -> None:
        self.bus = bus if bus is not None else EventBus()

    def notify_reminder_active(self, unit_id: int, active: bool) -> None:
        self.bus.publish(
            Event(
                type=REMINDER_CHANGED,
                source=self.SOURCE,
                unit_id=unit_id,
                payload={"active": active},
            )
        )

    def notify_arm_current_state(self, state: "CurrentState") -> None:
        self.bus.publish(
            Event(
                type=SECURITY_STATE_CHANGED,
                source=self.SOURCE,
                payload={"state": state.name, "value": int(state)},
            )
        )

    def notify_warning_active(self, active: bool) -> None:
        self.bus.publish(
            Event(
                type=SECURITY_WARNING_CHANGED,
                source=self.SOURCE,
                payload={"active": active},
            )
        )


class MockObserver(SecurityObserver):
    """
    Mock observer for testing.

    Records every notification in order as (kind, *args) tuples.
    """

    def __init__(self) -> None:
        self._calls: List[Tuple[Any, ...]] = []

    def get_calls(self) -> List[Tuple[Any, ...]]:
        """Get recorded notifications."""
        return self._calls.copy()

    def clear_calls(self) -> None:
        """Clear recorded notifications."""
        self._calls.clear()

    def reminder_calls(self, unit_id: int) -> List[bool]:
        """Reminder values notified for one unit, oldest first."""
        return [c[2] for c in self._calls if c[0] == "reminder" and c[1] == unit_id]

    def state_calls(self) -> List["CurrentState"]:
        """Current states notified, oldest first."""
        return [c[1] for c in self._calls if c[0] == "state"]

    def warning_calls(self) -> List[bool]:
        """Warning values notified, oldest first."""
        return [c[1] for c in self._calls if c[0] == "warning"]

    # SecurityObserver implementation

    def notify_reminder_active(self, unit_id: int, active: bool) -> None:
        self._calls.append(("reminder", unit_id, active))

    def notify_arm_current_state(self, state: "CurrentState") -> None:
        self._calls.append(("state", state))

    def notify_warning_active(self, active: bool) -> None:
        self._calls.append(("warning", active))
