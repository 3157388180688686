"""Tests for slot label helpers."""

from datetime import time

from venuebook.services.registry import PICKLEBALL, POOL, TENNIS
from venuebook.slots import add_hours_to_label, format_label, hourly_slots, normalise_label, parse_label


class TestLabels:
    def test_format_label(self):
        assert format_label(time(9, 0)) == "09:00 AM"
        assert format_label(time(13, 0)) == "01:00 PM"
        assert format_label(time(0, 30)) == "12:30 AM"

    def test_parse_twelve_hour(self):
        assert parse_label("09:00 AM") == time(9, 0)
        assert parse_label("9:00 am") == time(9, 0)
        assert parse_label("12:00 PM") == time(12, 0)
        assert parse_label("12:00 AM") == time(0, 0)
        assert parse_label("06:00 PM") == time(18, 0)

    def test_parse_twenty_four_hour(self):
        assert parse_label("13:30") == time(13, 30)

    def test_parse_rejects_garbage(self):
        assert parse_label(None) is None
        assert parse_label("") is None
        assert parse_label("noon") is None
        assert parse_label("13:00 PM") is None
        assert parse_label("25:00") is None
        assert parse_label("10:75") is None

    def test_add_hours(self):
        assert add_hours_to_label("10:00 AM", 2) == "12:00 PM"
        assert add_hours_to_label("11:00 PM", 2) == "01:00 AM"
        assert add_hours_to_label("whenever", 1) is None

    def test_normalise_label(self):
        assert normalise_label("9:00 AM") == "09:00 AM"
        assert normalise_label(" 2:30 pm ") == "02:30 PM"
        assert normalise_label("14:00") == "02:00 PM"
        assert normalise_label("  after lunch ") == "after lunch"


class TestTemplates:
    def test_hourly_slots_inclusive(self):
        assert hourly_slots(9, 11) == ["09:00 AM", "10:00 AM", "11:00 AM"]

    def test_pool_and_tennis_run_nine_to_six(self):
        for spec in (POOL, TENNIS):
            assert spec.slots[0] == "09:00 AM"
            assert spec.slots[-1] == "06:00 PM"
            assert len(spec.slots) == 10

    def test_pickleball_runs_nine_to_eight(self):
        assert PICKLEBALL.slots[0] == "09:00 AM"
        assert PICKLEBALL.slots[-1] == "08:00 PM"
        assert len(PICKLEBALL.slots) == 12
