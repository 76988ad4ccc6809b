"""Data models for the reminder module.

Defines the reminder states and the per-opening timing configuration.
"""

from dataclasses import dataclass
from enum import Enum

DEFAULT_FIRST_REMIND = 900  # 15 minutes until the first reminder
DEFAULT_FAST_CYCLIC_REMIND = 120  # 2 minutes between reminders (e.g. in winter)
DEFAULT_SLOW_CYCLIC_REMIND = 1800  # 30 minutes between reminders

# The reminder output is cleared for this long before every repeat
BLINK_SECONDS = 1


class ReminderState(Enum):
    """State of one opening's reminder state machine.

    CLOSED: Opening is closed, nothing pending
    OPENED: Opening is open, waiting for the (next) reminder
    REMINDING: Reminder is asserted, waiting for the next cycle
    """

    CLOSED = "closed"
    OPENED = "opened"
    REMINDING = "reminding"


@dataclass(frozen=True)
class ReminderTimings:
    """Resolved reminder durations for one opening.

    Attributes:
        first_remind: Seconds the opening may stay open before the first reminder.
        fast_cyclic_remind: Seconds between reminders while fast remind is on.
        slow_cyclic_remind: Seconds between reminders while fast remind is off.
    """

    first_remind: int = DEFAULT_FIRST_REMIND
    fast_cyclic_remind: int = DEFAULT_FAST_CYCLIC_REMIND
    slow_cyclic_remind: int = DEFAULT_SLOW_CYCLIC_REMIND

    def cyclic_delay(self, fast_remind: bool) -> int:
        """Wait spent in REMINDING before the reminder blinks.

        The blink itself takes BLINK_SECONDS, so one full cycle lasts
        exactly the configured cyclic period.
        """
        period = self.fast_cyclic_remind if fast_remind else self.slow_cyclic_remind
        return max(period - BLINK_SECONDS, 0)
