"""
Tests for domain/scheduling/conflicts.py

First come, first served resolution between a candidate and existing bookings.
"""

import unittest
from datetime import datetime, timezone

from app.domain.scheduling.conflicts import ScheduledAppointment, describe_conflict, find_conflict
from app.domain.scheduling.intervals import Interval


def at(hour, minute=0, day=2):
    return datetime(2024, 1, day, hour, minute, tzinfo=timezone.utc)


def booking(appointment_id, start, end, created_at, name="Alice", service="Haircut"):
    return ScheduledAppointment(
        id=appointment_id,
        start=start,
        end=end,
        created_at=created_at,
        display_name=name,
        service_name=service,
    )


class TestFindConflict(unittest.TestCase):
    """Tests for picking the winning appointment."""

    def test_free_range_returns_none(self):
        existing = [booking("a", at(13), at(13, 30), at(0, day=1))]
        self.assertIsNone(find_conflict(Interval(at(14), at(14, 30)), existing))

    def test_no_existing_appointments(self):
        self.assertIsNone(find_conflict(Interval(at(14), at(14, 30)), []))

    def test_adjacent_booking_is_free(self):
        existing = [booking("a", at(13), at(13, 30), at(0, day=1))]
        self.assertIsNone(find_conflict(Interval(at(13, 30), at(14)), existing))

    def test_contained_candidate_conflicts(self):
        existing = [booking("a", at(13), at(14), at(0, day=1))]
        winner = find_conflict(Interval(at(13, 15), at(13, 45)), existing)
        self.assertEqual(winner.id, "a")

    def test_earliest_created_wins(self):
        """Test the oldest booking is reported even when listed last."""
        existing = [
            booking("late", at(13, 15), at(13, 45), at(9, day=1)),
            booking("early", at(12, 45), at(13, 15), at(8, day=1)),
        ]
        winner = find_conflict(Interval(at(13), at(13, 30)), existing)
        self.assertEqual(winner.id, "early")

    def test_created_at_tie_breaks_on_id(self):
        created = at(8, day=1)
        existing = [
            booking("b", at(13), at(13, 30), created),
            booking("a", at(13), at(13, 30), created),
        ]
        self.assertEqual(find_conflict(Interval(at(13), at(13, 30)), existing).id, "a")

    def test_exclude_id_skips_own_prior_state(self):
        """Test an update never conflicts with its own previous interval."""
        existing = [booking("self", at(13), at(13, 30), at(8, day=1))]
        candidate = Interval(at(13, 15), at(13, 45))
        self.assertIsNone(find_conflict(candidate, existing, exclude_id="self"))
        self.assertEqual(find_conflict(candidate, existing).id, "self")


class TestDescribeConflict(unittest.TestCase):
    """Tests for the rejection message."""

    def test_message_uses_local_times(self):
        winner = booking("a", at(13), at(13, 30), at(8, day=1), name="Alice", service="Haircut")
        message = describe_conflict(winner, "America/Sao_Paulo")
        self.assertEqual(
            message,
            "This time slot is not available. Alice already has a Haircut appointment "
            "from 10:00 - 10:30",
        )


if __name__ == "__main__":
    unittest.main()
