"""
Tests for domain/scheduling/booking_rules.py

Working days, business hours and the advance-booking window.
"""

import unittest
from datetime import date

from app.domain.scheduling.booking_rules import BookingRules
from app.shared.exceptions import ValidationError

from .support import TZ, utc

# Friday 2023-12-01 09:00 local
NOW = utc(2023, 12, 1, 12)


class TestBookingRules(unittest.TestCase):
    """Tests for the enforced policy (Sao Paulo, 08:00-18:00, Monday to Saturday)."""

    def setUp(self):
        self.rules = BookingRules(
            tz_name=TZ,
            open_time="08:00",
            close_time="18:00",
            working_days=(1, 2, 3, 4, 5, 6),
            min_advance_hours=2,
            max_advance_days=30,
            enforce=True,
        )

    def test_within_hours(self):
        # Tuesday 10:00-10:30 local
        self.rules.validate(utc(2023, 12, 5, 13), utc(2023, 12, 5, 13, 30), now=NOW)

    def test_ending_exactly_at_close(self):
        self.rules.validate(utc(2023, 12, 5, 20, 30), utc(2023, 12, 5, 21), now=NOW)

    def test_starting_before_open(self):
        with self.assertRaises(ValidationError) as ctx:
            self.rules.validate(utc(2023, 12, 5, 10), utc(2023, 12, 5, 10, 30), now=NOW)
        self.assertIn("outside business hours", ctx.exception.message)

    def test_ending_after_close(self):
        with self.assertRaises(ValidationError):
            self.rules.validate(utc(2023, 12, 5, 20, 45), utc(2023, 12, 5, 21, 15), now=NOW)

    def test_closed_on_sunday(self):
        with self.assertRaises(ValidationError) as ctx:
            self.rules.validate(utc(2023, 12, 3, 13), utc(2023, 12, 3, 13, 30), now=NOW)
        self.assertIn("Sunday", ctx.exception.message)

    def test_minimum_advance(self):
        """Test a booking one hour from now is rejected."""
        with self.assertRaises(ValidationError) as ctx:
            self.rules.validate(utc(2023, 12, 1, 13), utc(2023, 12, 1, 13, 30), now=NOW)
        self.assertIn("in advance", ctx.exception.message)

    def test_maximum_advance(self):
        with self.assertRaises(ValidationError):
            self.rules.validate(utc(2024, 1, 9, 13), utc(2024, 1, 9, 13, 30), now=NOW)

    def test_not_enforced_accepts_anything(self):
        rules = BookingRules(tz_name=TZ, enforce=False)
        rules.validate(utc(2020, 1, 5, 3), utc(2020, 1, 5, 4), now=NOW)

    def test_working_day_helpers(self):
        self.assertTrue(self.rules.is_working_day(date(2024, 1, 6)))
        self.assertFalse(self.rules.is_working_day(date(2024, 1, 7)))
        self.assertEqual(self.rules.open_minutes, 480)
        self.assertEqual(self.rules.close_minutes, 1080)


class TestBookingRulesSettings(unittest.TestCase):
    """Tests for rejecting inconsistent settings."""

    def test_invalid_time_format(self):
        with self.assertRaises(ValueError):
            BookingRules(tz_name=TZ, open_time="8am")

    def test_close_before_open(self):
        with self.assertRaises(ValueError):
            BookingRules(tz_name=TZ, open_time="18:00", close_time="08:00")

    def test_invalid_weekday(self):
        with self.assertRaises(ValueError):
            BookingRules(tz_name=TZ, working_days=(1, 7))


if __name__ == "__main__":
    unittest.main()
