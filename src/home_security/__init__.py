"""
home-security: Platform-agnostic window reminder and security arming logic.

This library provides the state machines behind a lightweight home security
system built from door and window contact sensors:
- Per-opening reminders when a window or door is left open
- Arming state machine with forgot-window warning and alarm
- Observer interface and Event Bus for the host platform
- Pluggable timers (wall clock or host-driven)
"""

from home_security.core.bus import Event, EventBus, EventFilter
from home_security.core.observer import BusObserver, MockObserver, SecurityObserver
from home_security.core.timer import ManualTimerScheduler, ThreadingTimerScheduler
from home_security.core.config import HomeSecurityConfig, OpeningConfig
from home_security.core.manager import HomeSecurityManager
from home_security.modules.reminder import ReminderState, ReminderTimings, SensorReminderUnit
from home_security.modules.security import CurrentState, SecurityController, TargetState

__version__ = "0.1.0"

__all__ = [
    "Event",
    "EventBus",
    "EventFilter",
    "SecurityObserver",
    "BusObserver",
    "MockObserver",
    "ManualTimerScheduler",
    "ThreadingTimerScheduler",
    "HomeSecurityConfig",
    "OpeningConfig",
    "HomeSecurityManager",
    "SensorReminderUnit",
    "ReminderState",
    "ReminderTimings",
    "SecurityController",
    "CurrentState",
    "TargetState",
]
