"""
Tests for ordered-list resequencing.
"""

import itertools

import pytest

from serviceplanner.domain.models import OrderedItem, PositionChange
from serviceplanner.domain.resequencer import (
    compact,
    next_position,
    position_changes,
    resequence,
    resequence_after_removal,
)


def _items(*titles):
    return [
        OrderedItem(id=f"i{index}", sequence_position=index, payload={"title": title})
        for index, title in enumerate(titles)
    ]


def _positions(items):
    return [item.sequence_position for item in items]


class TestResequence:
    """Tests for single-element moves."""

    def test_move_down(self):
        """Items between the two positions shift up by one."""
        items = _items("Welcome", "Song", "Prayer", "Sermon")

        result = resequence(items, 0, 2)

        assert [item.payload["title"] for item in result] == ["Song", "Prayer", "Welcome", "Sermon"]
        assert _positions(result) == [0, 1, 2, 3]

    def test_move_up(self):
        """Moving up shifts the passed items down."""
        items = _items("Welcome", "Song", "Prayer", "Sermon")

        result = resequence(items, 3, 1)

        assert [item.id for item in result] == ["i0", "i3", "i1", "i2"]
        assert _positions(result) == [0, 1, 2, 3]

    def test_payload_and_ids_are_kept(self):
        """Only positions change."""
        items = _items("Welcome", "Song")

        result = resequence(items, 1, 0)

        assert {item.id: item.payload for item in result} == {item.id: item.payload for item in items}

    def test_input_is_not_modified(self):
        """The input list keeps its order and positions."""
        items = _items("Welcome", "Song", "Prayer")

        resequence(items, 0, 2)

        assert [item.id for item in items] == ["i0", "i1", "i2"]
        assert _positions(items) == [0, 1, 2]

    def test_round_trip_restores_order(self):
        """Moving back restores the original order for every pair of indices."""
        items = _items("a", "b", "c", "d", "e")

        for i, j in itertools.product(range(len(items)), repeat=2):
            assert resequence(resequence(items, i, j), j, i) == items

    def test_positions_are_contiguous_for_every_move(self):
        """Every result is numbered 0..n-1 exactly once."""
        items = [
            OrderedItem(id=f"i{n}", sequence_position=position)
            for n, position in enumerate([5, 9, None, 2])
        ]

        for i, j in itertools.product(range(len(items)), repeat=2):
            assert _positions(resequence(items, i, j)) == [0, 1, 2, 3]

    @pytest.mark.parametrize("from_index, to_index", [(-1, 0), (0, 3), (3, 0)])
    def test_out_of_range(self, from_index, to_index):
        """Indices outside the collection raise IndexError."""
        with pytest.raises(IndexError):
            resequence(_items("a", "b", "c"), from_index, to_index)


class TestRemoval:
    """Tests for resequence_after_removal."""

    def test_remove_middle_item(self):
        """The gap is closed."""
        result = resequence_after_removal(_items("a", "b", "c"), "i1")

        assert [item.id for item in result] == ["i0", "i2"]
        assert _positions(result) == [0, 1]

    def test_unknown_id_only_compacts(self):
        """Removing an unknown id keeps every item."""
        result = resequence_after_removal(_items("a", "b"), "missing")

        assert [item.id for item in result] == ["i0", "i1"]

    def test_remove_last_item(self):
        """Removing the only item leaves an empty collection."""
        assert resequence_after_removal(_items("a"), "i0") == []


class TestHelpers:
    """Tests for compaction and change detection."""

    def test_compact_sorts_and_puts_unsequenced_last(self):
        """Stored positions decide order; missing positions go last."""
        items = [
            OrderedItem(id="x", sequence_position=None),
            OrderedItem(id="y", sequence_position=4),
            OrderedItem(id="z", sequence_position=1),
        ]

        result = compact(items)

        assert [item.id for item in result] == ["z", "y", "x"]
        assert _positions(result) == [0, 1, 2]

    def test_next_position(self):
        """New items are appended after the highest position."""
        assert next_position(_items("a", "b")) == 2
        assert next_position([OrderedItem(id="x", sequence_position=None)]) == 0
        assert next_position([]) == 0

    def test_position_changes_are_minimal(self):
        """Items whose position did not change are not reported."""
        before = _items("a", "b", "c", "d")
        after = resequence(before, 1, 2)

        assert position_changes(before, after) == [
            PositionChange(item_id="i2", old_position=2, new_position=1),
            PositionChange(item_id="i1", old_position=1, new_position=2),
        ]

    def test_position_changes_after_removal(self):
        """Only items after the removed one move."""
        before = _items("a", "b", "c")
        after = resequence_after_removal(before, "i0")

        assert [change.item_id for change in position_changes(before, after)] == ["i1", "i2"]

    def test_position_changes_need_numbered_items(self):
        """Unsequenced items must be renumbered before diffing."""
        before = _items("a")
        after = [OrderedItem(id="i0", sequence_position=None)]

        with pytest.raises(ValueError, match="no position"):
            position_changes(before, after)
