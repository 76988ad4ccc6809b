"""
Core components of the home-security kernel.

This package contains:
- bus: Event Bus implementation
- observer: Observer interface for state machine outputs
- timer: Timer schedulers and the single-slot reminder timer
- config: Configuration dataclasses and defaults
- manager: HomeSecurityManager wiring the state machines together
"""

from home_security.core.bus import Event, EventBus, EventFilter
from home_security.core.observer import (
    BusObserver,
    MockObserver,
    NotificationQueue,
    SecurityObserver,
)
from home_security.core.timer import (
    ManualTimerScheduler,
    ReminderTimer,
    ThreadingTimerScheduler,
    TimerHandle,
    TimerScheduler,
)
from home_security.core.config import (
    HomeSecurityConfig,
    OpeningConfig,
    OpeningNames,
    SecurityNames,
)
from home_security.core.manager import HomeSecurityManager

__all__ = [
    "Event",
    "EventBus",
    "EventFilter",
    "SecurityObserver",
    "BusObserver",
    "MockObserver",
    "NotificationQueue",
    "TimerHandle",
    "TimerScheduler",
    "ThreadingTimerScheduler",
    "ManualTimerScheduler",
    "ReminderTimer",
    "HomeSecurityConfig",
    "OpeningConfig",
    "OpeningNames",
    "SecurityNames",
    "HomeSecurityManager",
]
