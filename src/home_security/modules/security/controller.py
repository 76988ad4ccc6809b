"""The arming state machine of the security system.

The SecurityController keeps the last known open/closed state of every
reminder unit and recomputes its outputs whenever the occupant changes the
target state or any opening reports a change:

- DISARM and STAY_ARM are reached immediately
- AWAY_ARM and NIGHT_ARM are blocked while an opening is open; the
  forgot-window warning is raised instead and arming completes as soon
  as the last opening closes
- an opening that opens while AWAY_ARMED or NIGHT_ARMED triggers the alarm
- ALARM_TRIGGERED is only left by disarming

Licensed under MIT License
"""

import logging
import threading
from typing import Any, Dict, Optional

from home_security.core.observer import NotificationQueue, SecurityObserver

from .models import GUARDED_TARGETS, CurrentState, TargetState

_LOGGER = logging.getLogger(__name__)


class SecurityController:
    """Aggregates opening states and runs the arming state machine.

    All recomputations are serialized by one lock, so reports from
    different units are applied in a single total order. Notifications
    are queued under the lock and delivered after it is released.
    """

    def __init__(
        self,
        observer: SecurityObserver,
        name: str = "Security system",
        warning_name: str = "You forgot to close a window",
        notifications: Optional[NotificationQueue] = None,
    ) -> None:
        """Create the controller, disarmed with no known openings.

        Args:
            observer: Receives current state and warning changes.
            name: Display name used in log messages.
            warning_name: Host-facing name of the forgot-window warning.
            notifications: Queue shared with the reminder units. A private
                queue for observer is created when omitted.
        """
        self._lock = threading.RLock()
        self._notifications = (
            notifications if notifications is not None else NotificationQueue(observer)
        )
        self._name = name
        self._warning_name = warning_name

        self._target_state = TargetState.DISARM
        self._current_state = CurrentState.DISARMED
        self._warning_active = False
        self._sensor_states: Dict[int, bool] = {}

    # --- Queries ---

    @property
    def name(self) -> str:
        return self._name

    @property
    def warning_name(self) -> str:
        return self._warning_name

    @property
    def target_state(self) -> TargetState:
        with self._lock:
            return self._target_state

    @property
    def current_state(self) -> CurrentState:
        with self._lock:
            return self._current_state

    @property
    def warning_active(self) -> bool:
        with self._lock:
            return self._warning_active

    @property
    def sensor_states(self) -> Dict[int, bool]:
        """Copy of the last reported state per unit id."""
        with self._lock:
            return dict(self._sensor_states)

    @property
    def any_open(self) -> bool:
        with self._lock:
            return any(self._sensor_states.values())

    # --- Control ---

    def set_target_state(self, target: Any) -> bool:
        """Apply the occupant's requested mode.

        Args:
            target: TargetState, its integer code, or its name.

        Returns:
            True if the target changed, False if unchanged or not recognized.
        """
        new_target = TargetState.coerce(target)
        if new_target is None:
            _LOGGER.warning(f"{self._name}: ignoring unknown target state {target!r}")
            return False

        with self._notifications.deferred(), self._lock:
            if new_target == self._target_state:
                _LOGGER.debug(f"{self._name}: target already {new_target.name}")
                return False

            self._target_state = new_target
            _LOGGER.info(f"{self._name}: target state {new_target.name}")
            self._run_state_machine()
            return True

    def report_sensor_state(self, unit_id: int, is_open: bool) -> None:
        """Record the raw state of one opening and recompute.

        Args:
            unit_id: Serial of the reporting reminder unit.
            is_open: True if the opening is open.
        """
        with self._notifications.deferred(), self._lock:
            self._sensor_states[unit_id] = bool(is_open)
            _LOGGER.debug(f"{self._name}: unit {unit_id} {'open' if is_open else 'closed'}")
            self._run_state_machine()

    # --- State machine ---

    def _run_state_machine(self) -> None:
        """Recompute current state and warning. Caller holds the lock."""
        # Alarm is sticky until disarmed
        if (
            self._current_state is CurrentState.ALARM_TRIGGERED
            and self._target_state is not TargetState.DISARM
        ):
            _LOGGER.debug(f"{self._name}: alarm active, waiting for disarm")
            return

        any_open = any(self._sensor_states.values())
        new_state = self._current_state
        new_warning = self._warning_active

        if self._target_state is TargetState.DISARM:
            new_state = CurrentState.DISARMED
            new_warning = False

        elif self._target_state is TargetState.STAY_ARM:
            # Being at home does not require closed openings
            new_state = CurrentState.STAY_ARMED
            new_warning = False

        elif self._target_state in GUARDED_TARGETS:
            armed_state = GUARDED_TARGETS[self._target_state]

            if self._current_state is not armed_state:
                if any_open:
                    # Arming blocked, remind the occupant instead
                    new_warning = True
                else:
                    new_warning = False
                    new_state = armed_state
            elif any_open:
                new_state = CurrentState.ALARM_TRIGGERED

        self._update_current_state(new_state)
        self._update_warning_active(new_warning)

    def _update_current_state(self, state: CurrentState) -> None:
        if state is self._current_state:
            return
        previous = self._current_state
        self._current_state = state

        if state is CurrentState.ALARM_TRIGGERED:
            _LOGGER.warning(f"{self._name}: ALARM TRIGGERED (was {previous.name})")
        else:
            _LOGGER.info(f"{self._name}: {previous.name} -> {state.name}")

        self._notifications.arm_current_state(state)

    def _update_warning_active(self, active: bool) -> None:
        if active == self._warning_active:
            return
        self._warning_active = active
        _LOGGER.info(f"{self._name}: forgot-window warning {'on' if active else 'off'}")
        self._notifications.warning_active(active)
