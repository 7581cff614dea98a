"""Tests for the notified-key registry and its expiry."""

from datetime import datetime, timedelta, timezone

from schedule_hub.notifications.registry import NotifiedRegistry

NOW = datetime(2025, 11, 19, 1, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def test_add_and_contains():
    registry = NotifiedRegistry(clock=FakeClock(NOW))

    registry.add("A", "A", NOW + timedelta(minutes=2))

    assert "A" in registry
    assert "B" not in registry
    assert len(registry) == 1


def test_entries_expire():
    clock = FakeClock(NOW)
    registry = NotifiedRegistry(clock=clock)
    registry.add("A", "A", NOW + timedelta(minutes=2))

    clock.now = NOW + timedelta(minutes=3)

    assert "A" not in registry
    assert len(registry) == 0


def test_already_expired_entry_not_kept():
    registry = NotifiedRegistry(clock=FakeClock(NOW))

    registry.add("A", "A", NOW - timedelta(seconds=1))

    assert "A" not in registry


def test_discard_for_removes_every_key_of_a_schedule():
    registry = NotifiedRegistry(clock=FakeClock(NOW))
    expiry = NOW + timedelta(minutes=5)
    registry.add("A", "A", expiry)
    registry.add("advance-A-3", "A", expiry)
    registry.add("advance-B-3", "B", expiry)

    assert registry.discard_for("A") == 2

    assert "A" not in registry
    assert "advance-A-3" not in registry
    assert "advance-B-3" in registry


def test_clear():
    registry = NotifiedRegistry(clock=FakeClock(NOW))
    registry.add("A", "A", NOW + timedelta(minutes=5))

    registry.clear()

    assert len(registry) == 0
