"""
Tests for NotificationQueue.

Tests verify:
- Notifications are held back inside deferred() and delivered on exit
- Nested deferred() blocks deliver once, at the outermost exit
- Notifications enqueued by the observer itself are delivered in order
- A failing observer does not stop delivery
"""

import threading

from home_security import CurrentState
from home_security.core.observer import MockObserver, NotificationQueue


class TestDelivery:
    """Tests for deferred delivery."""

    def test_delivered_when_block_exits(self):
        observer = MockObserver()
        queue = NotificationQueue(observer)

        with queue.deferred():
            queue.reminder_active(1, True)
            queue.warning_active(True)
            assert observer.get_calls() == []

        assert observer.get_calls() == [("reminder", 1, True), ("warning", True)]

    def test_nested_blocks_deliver_at_outermost_exit(self):
        observer = MockObserver()
        queue = NotificationQueue(observer)

        with queue.deferred():
            with queue.deferred():
                queue.arm_current_state(CurrentState.AWAY_ARMED)
            assert observer.get_calls() == []

        assert observer.state_calls() == [CurrentState.AWAY_ARMED]

    def test_flush_inside_block_waits(self):
        observer = MockObserver()
        queue = NotificationQueue(observer)

        with queue.deferred():
            queue.warning_active(True)
            queue.flush()
            assert observer.get_calls() == []

        assert observer.warning_calls() == [True]

    def test_other_thread_blocks_do_not_hold_back_delivery(self):
        observer = MockObserver()
        queue = NotificationQueue(observer)
        inside = threading.Event()
        release = threading.Event()

        def hold():
            with queue.deferred():
                inside.set()
                release.wait(timeout=5)

        thread = threading.Thread(target=hold)
        thread.start()
        inside.wait(timeout=5)

        with queue.deferred():
            queue.warning_active(True)

        assert observer.warning_calls() == [True]
        release.set()
        thread.join(timeout=5)


class TestReentrancy:
    """Tests for observers that call back into the state machines."""

    def test_notifications_from_observer_keep_order(self):
        queue = None

        class ChainingObserver(MockObserver):
            def notify_warning_active(self, active):
                super().notify_warning_active(active)
                if active:
                    with queue.deferred():
                        queue.arm_current_state(CurrentState.NIGHT_ARMED)
                    # Delivered after this notification, not nested inside it
                    assert self.state_calls() == []

        observer = ChainingObserver()
        queue = NotificationQueue(observer)

        with queue.deferred():
            queue.warning_active(True)
            queue.warning_active(False)

        assert observer.get_calls() == [
            ("warning", True),
            ("warning", False),
            ("state", CurrentState.NIGHT_ARMED),
        ]

    def test_failing_observer_is_isolated(self):
        class FailingObserver(MockObserver):
            def notify_reminder_active(self, unit_id, active):
                raise RuntimeError("host unavailable")

        observer = FailingObserver()
        queue = NotificationQueue(observer)

        with queue.deferred():
            queue.reminder_active(1, True)
            queue.warning_active(True)

        assert observer.warning_calls() == [True]

        # Queue is usable afterwards
        with queue.deferred():
            queue.warning_active(False)
        assert observer.warning_calls() == [True, False]
