"""
Tests for slot summaries.
"""

import pytest

from serviceplanner.domain.models import Slot
from serviceplanner.domain.summary import format_compact, format_time_12h, summarize_slots


class TestFormatting:
    """Tests for time formatting."""

    @pytest.mark.parametrize(
        "label, expected",
        [("00:00", "12:00 AM"), ("09:05", "9:05 AM"), ("12:30", "12:30 PM"), ("18:00", "6:00 PM")],
    )
    def test_format_time_12h(self, label, expected):
        """Labels are rendered on a 12 hour clock."""
        assert format_time_12h(label) == expected

    def test_format_compact(self):
        """Whole hours drop the minutes."""
        assert format_compact(18 * 60) == "6PM"
        assert format_compact(18 * 60 + 30) == "6:30PM"
        assert format_compact(24 * 60) == "12AM"


class TestSummarizeSlots:
    """Tests for summarize_slots."""

    def test_contiguous_slots_merge(self):
        """Adjacent slots become one range ending after the last slot."""
        slots = [Slot("Monday", "18:00"), Slot("Monday", "18:30"), Slot("Monday", "19:00")]

        assert summarize_slots(slots, 30) == {"Monday": ["6PM - 7:30PM"]}

    def test_gaps_split_ranges_and_days_are_ordered(self):
        """Gaps start a new range; days follow the canonical week."""
        slots = [
            Slot("Tuesday", "10:00"),
            Slot("Sunday", "09:00"),
            Slot("Sunday", "11:00"),
            Slot("Sunday", "10:00"),
            Slot("Sunday", "13:00"),
        ]

        summary = summarize_slots(slots, 60)

        assert list(summary) == ["Sunday", "Tuesday"]
        assert summary["Sunday"] == ["9AM - 12PM", "1PM - 2PM"]
        assert summary["Tuesday"] == ["10AM - 11AM"]

    def test_empty(self):
        """No slots, no summary."""
        assert summarize_slots([], 30) == {}
