"""
Modules package for home-security.

Each module holds one of the state machines:
- reminder: per-opening reminder state machine
- security: arming state machine
"""
