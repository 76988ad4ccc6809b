#!/usr/bin/env python3
"""
Quick example demonstrating home-security basic usage.

Run with: PYTHONPATH=src python3 example.py

Uses the manual scheduler so an hour of reminders runs instantly.
"""

import logging

from home_security import (
    Event,
    HomeSecurityManager,
    ManualTimerScheduler,
    TargetState,
)
from home_security.core.observer import BusObserver

logging.basicConfig(level=logging.INFO, format="%(name)s - %(levelname)s - %(message)s")

print("=" * 60)
print("home-security Example")
print("=" * 60)

# 1. Kernel components
print("\n1. Creating manager...")
scheduler = ManualTimerScheduler()
observer = BusObserver()
manager = HomeSecurityManager(
    {
        "first_remind": 600,
        "windows_and_doors": [
            {"name": "Kitchen window"},
            {"name": "Front door", "first_remind": 60},
        ],
    },
    observer=observer,
    scheduler=scheduler,
)
print(f"   ✓ {len(manager.units)} windows and doors")


def print_event(event: Event) -> None:
    unit = f" unit={event.unit_id}" if event.unit_id is not None else ""
    print(f"   📢 t={scheduler.now():>6.0f}s {event.type}{unit} {event.payload}")


observer.bus.subscribe(print_event)

# 2. Leave the kitchen window open
print("\n2. Opening the kitchen window and waiting an hour...")
manager.set_open(1, True)
scheduler.advance(3600)

# 3. Try to leave the house
print("\n3. Arming away with the window still open...")
manager.set_target_state(TargetState.AWAY_ARM)
print(f"   ✓ current state: {manager.get_current_state().name}")

print("\n4. Closing the window...")
manager.set_open(1, False)
print(f"   ✓ current state: {manager.get_current_state().name}")

# 5. Somebody opens the front door
print("\n5. Front door opens while away...")
manager.set_open(2, True)
print(f"   ✓ current state: {manager.get_current_state().name}")

manager.set_target_state(TargetState.DISARM)
manager.shutdown()

print("\n" + "=" * 60)
print("Example complete!")
print("=" * 60)
