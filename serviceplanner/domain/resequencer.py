"""
Resequencing of ordered collections such as the order of service.

Every function returns new items and leaves its input untouched. Output
positions are always exactly 0..n-1.
"""

from dataclasses import replace
from typing import List, Optional, Sequence

from .models import OrderedItem, PositionChange


def _renumber(items: Sequence[OrderedItem]) -> List[OrderedItem]:
    return [
        item if item.sequence_position == index else replace(item, sequence_position=index)
        for index, item in enumerate(items)
    ]


def resequence(
    items: Sequence[OrderedItem],
    from_index: int,
    to_index: int,
) -> List[OrderedItem]:
    """
    Move the item at ``from_index`` to ``to_index`` and renumber.

    Items between the two positions shift by one. Only sequence positions
    change; ids and payloads are kept.

    Raises:
        IndexError: If either index is outside the collection
    """
    size = len(items)
    for name, index in (("from_index", from_index), ("to_index", to_index)):
        if not 0 <= index < size:
            raise IndexError(f"{name} {index} out of range for {size} item(s)")

    reordered = list(items)
    moved = reordered.pop(from_index)
    reordered.insert(to_index, moved)
    return _renumber(reordered)


def resequence_after_removal(
    items: Sequence[OrderedItem],
    removed_id: str,
) -> List[OrderedItem]:
    """
    Drop the item with ``removed_id`` and close the gap it leaves.

    An unknown id removes nothing; the remaining items are still compacted.
    """
    return _renumber([item for item in items if item.id != str(removed_id)])


def compact(items: Sequence[OrderedItem]) -> List[OrderedItem]:
    """
    Order items by their stored positions and renumber them from 0.

    Items without a position go last, keeping their relative order.
    """
    ordered = sorted(
        items,
        key=lambda item: (item.sequence_position is None, item.sequence_position or 0),
    )
    return _renumber(ordered)


def next_position(items: Sequence[OrderedItem]) -> int:
    """Position for an item appended after the current ones."""
    positions = [item.sequence_position for item in items if item.sequence_position is not None]
    return max(positions, default=-1) + 1


def position_changes(
    before: Sequence[OrderedItem],
    after: Sequence[OrderedItem],
) -> List[PositionChange]:
    """
    Minimal set of position updates turning ``before`` into ``after``.

    Items that kept their position, or that no longer exist, are not listed.

    Raises:
        ValueError: If an item of ``after`` has no position
    """
    previous = {item.id: item.sequence_position for item in before}
    changes: List[PositionChange] = []

    for item in after:
        if item.sequence_position is None:
            raise ValueError(f"Item {item.id} has no position; renumber before diffing")
        old: Optional[int] = previous.get(item.id)
        if item.id in previous and old == item.sequence_position:
            continue
        changes.append(
            PositionChange(item_id=item.id, old_position=old, new_position=item.sequence_position)
        )

    return changes
