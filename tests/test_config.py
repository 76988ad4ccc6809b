"""
Tests for configuration parsing and timing resolution.
"""

import pytest

from home_security.core.config import (
    CURRENT_CONFIG_VERSION,
    HomeSecurityConfig,
    OpeningConfig,
    SecurityNames,
    config_schema,
    default_config,
    migrate_config,
)
from home_security.modules.reminder import ReminderTimings


class TestTimingResolution:
    """Opening value -> global value -> default."""

    def test_defaults(self):
        config = HomeSecurityConfig()

        assert config.resolve_timings(OpeningConfig(name="Door")) == ReminderTimings(900, 120, 1800)

    def test_global_overrides_default(self):
        config = HomeSecurityConfig.from_dict({"first_remind": 300, "slow_cyclic_remind": 600})

        timings = config.resolve_timings(OpeningConfig(name="Door"))

        assert timings == ReminderTimings(300, 120, 600)

    def test_opening_overrides_global(self):
        config = HomeSecurityConfig.from_dict(
            {
                "first_remind": 300,
                "fast_cyclic_remind": 60,
                "windows_and_doors": [{"name": "Bathroom", "first_remind": 120}],
            }
        )

        timings = config.resolve_timings(config.openings[0])

        assert timings == ReminderTimings(120, 60, 1800)

    @pytest.mark.parametrize("value", [0, -10, None, "", "soon", True])
    def test_unusable_values_fall_back(self, value):
        config = HomeSecurityConfig.from_dict(
            {"first_remind": 300, "windows_and_doors": [{"name": "Door", "first_remind": value}]}
        )

        assert config.resolve_timings(config.openings[0]).first_remind == 300

    def test_numeric_strings_are_accepted(self):
        opening = OpeningConfig.from_dict({"name": "Door", "slow_cyclic_remind": "45"})

        assert opening.slow_cyclic_remind == 45


class TestFromDict:
    """Tests for parsing the host's dict format."""

    def test_empty_config(self):
        config = HomeSecurityConfig.from_dict(None)

        assert config.openings == []
        assert config.version == CURRENT_CONFIG_VERSION
        assert config.home_security_name == "Home Security Lite"
        assert config.security_system_name == "Security system"
        assert config.fast_cyclic_reminder_name == "Remind me again fast"
        assert config.forgot_window_warning_name == "You forgot to close a window"

    def test_custom_names(self):
        config = HomeSecurityConfig.from_dict(
            {
                "home_security_lite_name": "Alarm",
                "security_system_name": "House",
                "prefix_remind_me": "Watch",
                "prefix_reminder": "Open:",
                "prefix_reminder_accessory": "Contact",
                "windows_and_doors": [{"name": "Garage"}],
            }
        )

        names = config.names_for(config.openings[0])

        assert config.home_security_name == "Alarm"
        assert config.security_system_name == "House"
        assert names.switch == "Watch Garage"
        assert names.sensor == "Open: Garage"
        assert names.accessory == "Contact Garage"

    def test_default_opening_names(self):
        config = HomeSecurityConfig()

        names = config.names_for(OpeningConfig(name="Kitchen"))

        assert names.switch == "Remind me of Kitchen"
        assert names.sensor == "Reminder: Kitchen"
        assert names.accessory == "Reminder accessory Kitchen"

    def test_blank_name_is_treated_as_missing(self):
        opening = OpeningConfig.from_dict({"name": "   ", "description": "hall"})

        assert opening.name is None
        assert opening.description == "hall"

    def test_non_mapping_entries_are_skipped(self):
        config = HomeSecurityConfig.from_dict(
            {"windows_and_doors": ["Kitchen", {"name": "Door"}, 42]}
        )

        assert [o.name for o in config.openings] == ["Door"]

    def test_round_trip_keeps_host_keys(self):
        raw = {
            "first_remind": 60,
            "windows_and_doors": [{"name": "Door", "fast_cyclic_remind": 30}],
        }

        data = HomeSecurityConfig.from_dict(raw).to_dict()

        assert data["first_remind"] == 60
        assert "slow_cyclic_remind" not in data
        assert data["windows_and_doors"] == [{"name": "Door", "fast_cyclic_remind": 30}]
        assert data["security_system_name"] == "Security system"


    @pytest.mark.parametrize("value", [5, True, 3.5, "Kitchen window", {"name": "Door"}])
    def test_windows_and_doors_not_a_list(self, value, caplog):
        config = HomeSecurityConfig.from_dict({"windows_and_doors": value, "first_remind": 60})

        assert config.openings == []
        assert config.first_remind == 60
        assert "not a list" in caplog.text

    def test_security_names(self):
        config = HomeSecurityConfig.from_dict(
            {"security_system_name": "House", "forgot_window_warning_name": "Close it"}
        )

        names = config.security_names()

        assert names == SecurityNames(
            security_system="House",
            forgot_window_warning="Close it",
            fast_cyclic_reminder="Remind me again fast",
        )


class TestDefaultsAndSchema:
    """Tests for default_config(), config_schema() and migrate_config()."""

    def test_default_config(self):
        config = default_config()

        assert config["version"] == CURRENT_CONFIG_VERSION
        assert config["first_remind"] == 900
        assert config["fast_cyclic_remind"] == 120
        assert config["slow_cyclic_remind"] == 1800
        assert config["windows_and_doors"] == []

    def test_default_config_parses(self):
        config = HomeSecurityConfig.from_dict(default_config())

        assert config.first_remind == 900
        assert config.openings == []

    def test_schema_describes_openings(self):
        schema = config_schema()

        assert schema["type"] == "object"
        item = schema["properties"]["windows_and_doors"]["items"]
        assert item["required"] == ["name"]
        assert schema["properties"]["slow_cyclic_remind"]["default"] == 1800

    def test_migrate_sets_current_version(self):
        assert migrate_config({"version": 0})["version"] == CURRENT_CONFIG_VERSION
        assert migrate_config({}) == {}
