"""
Tests for slot grid generation.
"""

import pytest

from serviceplanner.domain.exceptions import InvalidConfig
from serviceplanner.domain.models import SlotConfig
from serviceplanner.domain.slot_grid import generate_slots, generate_time_labels


class TestGenerateSlots:
    """Tests for generate_slots."""

    def test_end_time_is_exclusive(self):
        """18:00-19:00 at 30 minutes yields two slots."""
        grid = generate_slots(
            {"days": ["Monday"], "time_start": "18:00", "time_end": "19:00", "interval_minutes": 30}
        )

        assert grid.ids() == ["Monday-18:00", "Monday-18:30"]

    @pytest.mark.parametrize(
        "days, start, end, interval",
        [
            (["Monday"], "09:00", "12:00", 15),
            (["Monday", "Wednesday", "Friday"], "18:00", "21:00", 30),
            (["Sunday", "Saturday"], "06:00", "22:00", 60),
        ],
    )
    def test_slot_count_matches_days_times_labels(self, days, start, end, interval):
        """The grid has days x floor(range / interval) unique slots."""
        config = SlotConfig.create(days, start, end, interval)

        grid = generate_slots(config)

        expected = len(days) * ((config.end_minutes - config.start_minutes) // interval)
        assert len(grid) == expected
        assert len({(slot.day, slot.time) for slot in grid}) == expected

    def test_partial_trailing_slot_is_omitted(self):
        """A trailing interval that does not fit is dropped."""
        config = SlotConfig.create(["Monday"], "18:00", "18:45", 30)

        assert generate_time_labels(config) == ["18:00"]

    def test_days_follow_canonical_order(self):
        """Configured day order does not affect column order."""
        grid = generate_slots(
            {"days": ["Saturday", "Monday", "Sunday"], "time_start": "10:00", "time_end": "11:00", "interval_minutes": 60}
        )

        assert grid.days == ("Sunday", "Monday", "Saturday")
        assert grid.ids() == ["Sunday-10:00", "Monday-10:00", "Saturday-10:00"]

    def test_no_days_yields_empty_grid(self):
        """No configured days is not an error."""
        grid = generate_slots(
            {"days": [], "time_start": "18:00", "time_end": "19:00", "interval_minutes": 30}
        )

        assert len(grid) == 0
        assert grid.rows() == []

    def test_range_shorter_than_interval_yields_empty_grid(self):
        """A range without one full interval has no slots."""
        grid = generate_slots(
            {"days": ["Monday"], "time_start": "18:00", "time_end": "18:10", "interval_minutes": 15}
        )

        assert len(grid) == 0

    def test_invalid_config_raises(self):
        """Start after end is surfaced to the caller."""
        with pytest.raises(InvalidConfig):
            generate_slots(
                {"days": ["Monday"], "time_start": "20:00", "time_end": "18:00", "interval_minutes": 30}
            )

    def test_is_repeatable(self):
        """Generating twice gives identical grids."""
        config = SlotConfig.create(["Monday", "Tuesday"], "18:00", "20:00", 30)

        assert generate_slots(config).ids() == generate_slots(config).ids()
