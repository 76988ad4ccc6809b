"""
Configuration for the home security system.

The configuration is a plain dict (as stored by the host platform) with
global settings and a "windows_and_doors" list. Durations are resolved per
opening: opening value, then global value, then the built-in default.
Missing or unusable values fall back silently to the next level.

Example:
    {
        "first_remind": 600,
        "windows_and_doors": [
            {"name": "Kitchen window", "slow_cyclic_remind": 900},
            {"name": "Front door", "first_remind": 120},
        ],
    }
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from home_security.modules.reminder.models import (
    DEFAULT_FAST_CYCLIC_REMIND,
    DEFAULT_FIRST_REMIND,
    DEFAULT_SLOW_CYCLIC_REMIND,
    ReminderTimings,
)

logger = logging.getLogger(__name__)

CURRENT_CONFIG_VERSION = 1

DEFAULT_HOME_SECURITY_NAME = "Home Security Lite"
DEFAULT_SECURITY_SYSTEM_NAME = "Security system"
DEFAULT_FAST_CYCLIC_REMINDER_NAME = "Remind me again fast"
DEFAULT_FORGOT_WINDOW_WARNING_NAME = "You forgot to close a window"
DEFAULT_PREFIX_REMIND_ME = "Remind me of"
DEFAULT_PREFIX_REMINDER = "Reminder:"
DEFAULT_PREFIX_REMINDER_ACCESSORY = "Reminder accessory"


def _seconds(value: Any) -> Optional[int]:
    """Parse a duration; None for missing, zero, negative or unparsable values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid duration {value!r}")
        return None
    return seconds if seconds > 0 else None


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


@dataclass
class OpeningConfig:
    """Configuration of one door or window.

    Attributes:
        name: Display name. Openings without a name are not created.
        description: Free text, only used in log messages.
        first_remind: Seconds until the first reminder (None = inherit).
        fast_cyclic_remind: Fast reminder period in seconds (None = inherit).
        slow_cyclic_remind: Slow reminder period in seconds (None = inherit).
    """

    name: Optional[str] = None
    description: Optional[str] = None
    first_remind: Optional[int] = None
    fast_cyclic_remind: Optional[int] = None
    slow_cyclic_remind: Optional[int] = None

    def to_dict(self) -> dict:
        """Serialize to dict (unset values are omitted)."""
        data = {
            "name": self.name,
            "description": self.description,
            "first_remind": self.first_remind,
            "fast_cyclic_remind": self.fast_cyclic_remind,
            "slow_cyclic_remind": self.slow_cyclic_remind,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "OpeningConfig":
        """Deserialize from dict."""
        name = data.get("name")
        return cls(
            name=name if isinstance(name, str) and name.strip() else None,
            description=data.get("description"),
            first_remind=_seconds(data.get("first_remind")),
            fast_cyclic_remind=_seconds(data.get("fast_cyclic_remind")),
            slow_cyclic_remind=_seconds(data.get("slow_cyclic_remind")),
        )


@dataclass(frozen=True)
class OpeningNames:
    """Host-facing names for one opening's accessory and services."""

    switch: str  # input switch mirroring the physical contact
    sensor: str  # reminder contact sensor
    accessory: str


@dataclass(frozen=True)
class SecurityNames:
    """Host-facing names for the security system accessory and its switches."""

    security_system: str
    forgot_window_warning: str
    fast_cyclic_reminder: str


@dataclass
class HomeSecurityConfig:
    """Global configuration of the home security system."""

    version: int = CURRENT_CONFIG_VERSION
    openings: List[OpeningConfig] = field(default_factory=list)

    # Global reminder durations (None = built-in default)
    first_remind: Optional[int] = None
    fast_cyclic_remind: Optional[int] = None
    slow_cyclic_remind: Optional[int] = None

    # Host-facing names
    home_security_name: str = DEFAULT_HOME_SECURITY_NAME
    security_system_name: str = DEFAULT_SECURITY_SYSTEM_NAME
    fast_cyclic_reminder_name: str = DEFAULT_FAST_CYCLIC_REMINDER_NAME
    forgot_window_warning_name: str = DEFAULT_FORGOT_WINDOW_WARNING_NAME
    prefix_remind_me: str = DEFAULT_PREFIX_REMIND_ME
    prefix_reminder: str = DEFAULT_PREFIX_REMINDER
    prefix_reminder_accessory: str = DEFAULT_PREFIX_REMINDER_ACCESSORY

    def resolve_timings(self, opening: OpeningConfig) -> ReminderTimings:
        """Resolve durations for one opening: opening → global → default."""
        return ReminderTimings(
            first_remind=opening.first_remind or self.first_remind or DEFAULT_FIRST_REMIND,
            fast_cyclic_remind=(
                opening.fast_cyclic_remind
                or self.fast_cyclic_remind
                or DEFAULT_FAST_CYCLIC_REMIND
            ),
            slow_cyclic_remind=(
                opening.slow_cyclic_remind
                or self.slow_cyclic_remind
                or DEFAULT_SLOW_CYCLIC_REMIND
            ),
        )

    def names_for(self, opening: OpeningConfig) -> OpeningNames:
        """Build the host-facing names for one opening."""
        return OpeningNames(
            switch=f"{self.prefix_remind_me} {opening.name}",
            sensor=f"{self.prefix_reminder} {opening.name}",
            accessory=f"{self.prefix_reminder_accessory} {opening.name}",
        )

    def security_names(self) -> SecurityNames:
        return SecurityNames(
            security_system=self.security_system_name,
            forgot_window_warning=self.forgot_window_warning_name,
            fast_cyclic_reminder=self.fast_cyclic_reminder_name,
        )

    def to_dict(self) -> dict:
        """Serialize to the host's dict format."""
        data: Dict[str, Any] = {
            "version": self.version,
            "windows_and_doors": [o.to_dict() for o in self.openings],
            "home_security_lite_name": self.home_security_name,
            "security_system_name": self.security_system_name,
            "fast_cyclic_reminder_name": self.fast_cyclic_reminder_name,
            "forgot_window_warning_name": self.forgot_window_warning_name,
            "prefix_remind_me": self.prefix_remind_me,
            "prefix_reminder": self.prefix_reminder,
            "prefix_reminder_accessory": self.prefix_reminder_accessory,
        }
        for key in ("first_remind", "fast_cyclic_remind", "slow_cyclic_remind"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "HomeSecurityConfig":
        """Deserialize from the host's dict format.

        Never raises for missing or malformed keys. A "windows_and_doors"
        value that is not a list is logged and treated as empty; entries
        that are not dicts are logged and skipped.
        """
        data = migrate_config(dict(data or {}))

        entries = data.get("windows_and_doors") or []
        if not isinstance(entries, (list, tuple)):
            logger.error(f"Ignoring windows_and_doors {entries!r}: not a list")
            entries = []

        openings = []
        for entry in entries:
            if not isinstance(entry, dict):
                logger.error(f"Ignoring window or door entry {entry!r}: not a mapping")
                continue
            openings.append(OpeningConfig.from_dict(entry))

        return cls(
            version=data.get("version", CURRENT_CONFIG_VERSION),
            openings=openings,
            first_remind=_seconds(data.get("first_remind")),
            fast_cyclic_remind=_seconds(data.get("fast_cyclic_remind")),
            slow_cyclic_remind=_seconds(data.get("slow_cyclic_remind")),
            home_security_name=_text(
                data.get("home_security_lite_name"), DEFAULT_HOME_SECURITY_NAME
            ),
            security_system_name=_text(
                data.get("security_system_name"), DEFAULT_SECURITY_SYSTEM_NAME
            ),
            fast_cyclic_reminder_name=_text(
                data.get("fast_cyclic_reminder_name"), DEFAULT_FAST_CYCLIC_REMINDER_NAME
            ),
            forgot_window_warning_name=_text(
                data.get("forgot_window_warning_name"), DEFAULT_FORGOT_WINDOW_WARNING_NAME
            ),
            prefix_remind_me=_text(data.get("prefix_remind_me"), DEFAULT_PREFIX_REMIND_ME),
            prefix_reminder=_text(data.get("prefix_reminder"), DEFAULT_PREFIX_REMINDER),
            prefix_reminder_accessory=_text(
                data.get("prefix_reminder_accessory"), DEFAULT_PREFIX_REMINDER_ACCESSORY
            ),
        )


def migrate_config(config: Dict) -> Dict:
    """
    Migrate configuration to current version.

    Args:
        config: Configuration dict (potentially older version)

    Returns:
        Migrated configuration dict
    """
    version = config.get("version", CURRENT_CONFIG_VERSION)
    if version == CURRENT_CONFIG_VERSION:
        return config

    # No migrations yet (v1 is first version)
    config["version"] = CURRENT_CONFIG_VERSION
    return config


def default_config() -> Dict:
    """Default configuration (no openings, built-in durations)."""
    return {
        "version": CURRENT_CONFIG_VERSION,
        "first_remind": DEFAULT_FIRST_REMIND,
        "fast_cyclic_remind": DEFAULT_FAST_CYCLIC_REMIND,
        "slow_cyclic_remind": DEFAULT_SLOW_CYCLIC_REMIND,
        "windows_and_doors": [],
    }


def config_schema() -> Dict:
    """JSON schema for UI configuration."""
    duration = {"type": "integer", "minimum": 1}
    return {
        "type": "object",
        "properties": {
            "first_remind": {
                **duration,
                "title": "First reminder (seconds)",
                "description": "How long a window or door may stay open before the first reminder",
                "default": DEFAULT_FIRST_REMIND,
            },
            "fast_cyclic_remind": {
                **duration,
                "title": "Fast cyclic reminder (seconds)",
                "description": "Reminder period while fast remind is switched on (e.g. in winter)",
                "default": DEFAULT_FAST_CYCLIC_REMIND,
            },
            "slow_cyclic_remind": {
                **duration,
                "title": "Slow cyclic reminder (seconds)",
                "description": "Reminder period while fast remind is switched off",
                "default": DEFAULT_SLOW_CYCLIC_REMIND,
            },
            "home_security_lite_name": {
                "type": "string",
                "default": DEFAULT_HOME_SECURITY_NAME,
            },
            "security_system_name": {
                "type": "string",
                "default": DEFAULT_SECURITY_SYSTEM_NAME,
            },
            "fast_cyclic_reminder_name": {
                "type": "string",
                "default": DEFAULT_FAST_CYCLIC_REMINDER_NAME,
            },
            "forgot_window_warning_name": {
                "type": "string",
                "default": DEFAULT_FORGOT_WINDOW_WARNING_NAME,
            },
            "prefix_remind_me": {"type": "string", "default": DEFAULT_PREFIX_REMIND_ME},
            "prefix_reminder": {"type": "string", "default": DEFAULT_PREFIX_REMINDER},
            "prefix_reminder_accessory": {
                "type": "string",
                "default": DEFAULT_PREFIX_REMINDER_ACCESSORY,
            },
            "windows_and_doors": {
                "type": "array",
                "title": "Windows and doors",
                "items": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "name": {"type": "string", "title": "Name"},
                        "description": {"type": "string", "title": "Description"},
                        "first_remind": duration,
                        "fast_cyclic_remind": duration,
                        "slow_cyclic_remind": duration,
                    },
                },
            },
        },
    }
