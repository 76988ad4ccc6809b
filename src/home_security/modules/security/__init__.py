"""
Security module for home-security.

A single SecurityController aggregates the open/closed state of every
opening and decides whether the system can be armed, whether to raise the
forgot-window warning, and when to trigger the alarm.
"""

from .models import CurrentState, TargetState, GUARDED_TARGETS
from .controller import SecurityController

__all__ = [
    "SecurityController",
    "CurrentState",
    "TargetState",
    "GUARDED_TARGETS",
]
