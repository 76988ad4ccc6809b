"""
HomeSecurityManager - wiring and fan-out for the state machines.

The manager owns the reminder units and the security controller, not the
behavior. It builds them from configuration, relays control calls, and
broadcasts the global fast remind switch.
"""

from typing import Any, Dict, List, Optional, Union
import logging
import threading

from home_security.core.config import HomeSecurityConfig, OpeningNames, SecurityNames
from home_security.core.observer import BusObserver, NotificationQueue, SecurityObserver
from home_security.core.timer import ThreadingTimerScheduler, TimerScheduler
from home_security.modules.reminder import SensorReminderUnit
from home_security.modules.security import CurrentState, SecurityController

logger = logging.getLogger(__name__)


class HomeSecurityManager:
    """
    Owns one SecurityController and a fixed set of SensorReminderUnits.

    Responsibilities:
    - Create the controller, then one reminder unit per named opening
    - Wire every unit to report its raw state into the controller
    - Relay set_open / set_target_state to the owning state machine
    - Store the fast remind switch and forward changes to every unit

    Does NOT implement reminder or arming logic.
    """

    def __init__(
        self,
        config: Optional[Union[HomeSecurityConfig, Dict[str, Any]]] = None,
        observer: Optional[SecurityObserver] = None,
        scheduler: Optional[TimerScheduler] = None,
    ) -> None:
        """
        Build the state machines from configuration.

        Args:
            config: HomeSecurityConfig or the host's raw config dict
            observer: Receives state machine outputs (default: BusObserver)
            scheduler: Timer source (default: ThreadingTimerScheduler)
        """
        if config is None:
            config = HomeSecurityConfig()
        elif isinstance(config, dict):
            config = HomeSecurityConfig.from_dict(config)

        self._config = config
        self._observer = observer if observer is not None else BusObserver()
        self._scheduler = scheduler if scheduler is not None else ThreadingTimerScheduler()
        self._lock = threading.Lock()
        self._fast_remind = False
        self._fast_remind_revision = 0
        self._notifications = NotificationQueue(self._observer)

        logger.info(f"Initializing {config.home_security_name}")

        self._security = SecurityController(
            self._observer,
            name=config.security_system_name,
            warning_name=config.forgot_window_warning_name,
            notifications=self._notifications,
        )

        self._units: Dict[int, SensorReminderUnit] = {}
        self._names: Dict[int, OpeningNames] = {}
        self._create_units()

    def _create_units(self) -> None:
        """Create one reminder unit per named opening, serials starting at 1."""
        if not self._config.openings:
            logger.warning("No windows or doors found in configuration")
            return

        serial = 0
        for opening in self._config.openings:
            if not opening.name:
                logger.error(f"Window or door {opening.to_dict()} in configuration has no name")
                continue

            serial += 1
            unit = SensorReminderUnit(
                unit_id=serial,
                timings=self._config.resolve_timings(opening),
                scheduler=self._scheduler,
                report_state=self._security.report_sensor_state,
                observer=self._observer,
                notifications=self._notifications,
                name=opening.name,
            )
            names = self._config.names_for(opening)
            self._units[serial] = unit
            self._names[serial] = names

            logger.info(
                f"Added window or door {serial}: {opening.name}"
                + (f" - {opening.description}" if opening.description else "")
            )
            logger.debug(f"  switch={names.switch!r}, sensor={names.sensor!r}")

    # --- Queries ---

    @property
    def config(self) -> HomeSecurityConfig:
        return self._config

    @property
    def observer(self) -> SecurityObserver:
        return self._observer

    @property
    def scheduler(self) -> TimerScheduler:
        return self._scheduler

    @property
    def security(self) -> SecurityController:
        return self._security

    @property
    def units(self) -> List[SensorReminderUnit]:
        """Reminder units in serial order."""
        return list(self._units.values())

    @property
    def fast_remind(self) -> bool:
        with self._lock:
            return self._fast_remind

    def get_unit(self, unit_id: int) -> Optional[SensorReminderUnit]:
        """Get a reminder unit by serial."""
        return self._units.get(unit_id)

    def get_unit_by_name(self, name: str) -> Optional[SensorReminderUnit]:
        """Get a reminder unit by its configured name."""
        for unit in self._units.values():
            if unit.name == name:
                return unit
        return None

    def get_names(self, unit_id: int) -> Optional[OpeningNames]:
        """Host-facing names of a reminder unit."""
        return self._names.get(unit_id)

    def get_security_names(self) -> SecurityNames:
        """Host-facing names of the security system and its switches."""
        return self._config.security_names()

    def get_state(self) -> Dict[str, Any]:
        """Snapshot of every output, for hosts answering characteristic reads."""
        return {
            "fast_remind": self.fast_remind,
            "target_state": self._security.target_state.name,
            "current_state": self._security.current_state.name,
            "warning_active": self._security.warning_active,
            "units": {
                unit.id: {
                    "name": unit.name,
                    "is_open": unit.is_open,
                    "reminder_active": unit.reminder_active,
                    "state": unit.state.value,
                }
                for unit in self._units.values()
            },
        }

    # --- Control ---

    def set_open(self, unit_id: int, is_open: bool) -> bool:
        """
        Relay a raw sensor edge to a reminder unit.

        Args:
            unit_id: Serial of the reminder unit
            is_open: True if the opening is open

        Returns:
            True if the unit changed state, False if unchanged or unknown
        """
        unit = self._units.get(unit_id)
        if unit is None:
            logger.warning(f"Ignoring state for unknown window or door {unit_id}")
            return False
        return unit.set_open(is_open)

    def set_target_state(self, target: Any) -> bool:
        """Relay the occupant's requested mode to the security controller."""
        return self._security.set_target_state(target)

    def get_current_state(self) -> CurrentState:
        return self._security.current_state

    def set_fast_remind(self, fast_remind: bool) -> bool:
        """
        Switch fast cyclic reminders on or off for every unit.

        Args:
            fast_remind: New value of the switch

        Returns:
            True if the value changed and was broadcast
        """
        fast_remind = bool(fast_remind)

        with self._lock:
            if fast_remind == self._fast_remind:
                return False
            self._fast_remind = fast_remind
            self._fast_remind_revision += 1
            revision = self._fast_remind_revision

        logger.info(f"{self._config.fast_cyclic_reminder_name}: {'on' if fast_remind else 'off'}")

        # Broadcast without the manager lock; units drop superseded revisions
        for unit in self._units.values():
            unit.set_fast_remind(fast_remind, revision=revision)
        return True

    def shutdown(self) -> None:
        """Cancel all pending reminder timers."""
        for unit in self._units.values():
            unit.cancel()
        self._scheduler.shutdown()
        logger.info(f"{self._config.home_security_name} stopped")
