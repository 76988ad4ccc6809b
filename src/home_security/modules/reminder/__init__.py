"""
Reminder module for home-security.

One SensorReminderUnit per door or window. Reminds the occupant when an
opening stays open too long and repeats the reminder until it is closed.

Features:
- Configurable first reminder delay
- Fast or slow cyclic reminders, switchable at runtime
- One-second blink before every repeated reminder
- Raw open/closed state reported to the security controller
"""

from .models import (
    BLINK_SECONDS,
    DEFAULT_FAST_CYCLIC_REMIND,
    DEFAULT_FIRST_REMIND,
    DEFAULT_SLOW_CYCLIC_REMIND,
    ReminderState,
    ReminderTimings,
)
from .unit import SensorReminderUnit, StateReporter

__all__ = [
    "SensorReminderUnit",
    "StateReporter",
    "ReminderState",
    "ReminderTimings",
    "BLINK_SECONDS",
    "DEFAULT_FIRST_REMIND",
    "DEFAULT_FAST_CYCLIC_REMIND",
    "DEFAULT_SLOW_CYCLIC_REMIND",
]
