"""Data models for the security module.

Values match the HomeKit SecuritySystemTargetState and
SecuritySystemCurrentState characteristics, so a host can relay raw
characteristic values without translation.
"""

from enum import IntEnum
from typing import Any, Optional


class TargetState(IntEnum):
    """Arming mode requested by the occupant."""

    STAY_ARM = 0
    AWAY_ARM = 1
    NIGHT_ARM = 2
    DISARM = 3

    @classmethod
    def coerce(cls, value: Any) -> Optional["TargetState"]:
        """Convert a member, its code, or its name to a TargetState.

        Returns:
            The matching TargetState, or None if value is not recognized.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        if isinstance(value, bool):
            return None
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None


class CurrentState(IntEnum):
    """Actual state of the security system."""

    STAY_ARMED = 0
    AWAY_ARMED = 1
    NIGHT_ARMED = 2
    DISARMED = 3
    ALARM_TRIGGERED = 4


# Target modes that are only reached once every opening is closed
GUARDED_TARGETS = {
    TargetState.AWAY_ARM: CurrentState.AWAY_ARMED,
    TargetState.NIGHT_ARM: CurrentState.NIGHT_ARMED,
}
