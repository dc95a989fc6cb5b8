"""
Order of service management: seeding, moving, removing and appending service items.

Positions are computed by the resequencer; only items whose position actually
changed are written back to the store.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..domain.exceptions import NotFound, PersistenceError
from ..domain.models import OrderedItem, PositionChange
from ..domain.resequencer import (
    compact,
    next_position,
    position_changes,
    resequence,
    resequence_after_removal,
)
from .planner_store import PlannerStoreProtocol

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_ITEMS: List[Dict[str, Any]] = [
    {"type": "Generic", "title": "Welcome", "duration": "5 min",
     "details": "Opening remarks, welcome to visitors, and general announcements."},
    {"type": "Generic", "title": "Announcements", "duration": "5 min",
     "details": "Specific church announcements and upcoming events."},
    {"type": "Divider", "title": "Worship", "duration": None, "details": None},
    {"type": "Divider", "title": "---", "duration": None, "details": None},
    {"type": "Generic", "title": "Message", "duration": "30 min",
     "details": "Sermon or teaching segment."},
    {"type": "Divider", "title": "Response", "duration": None, "details": None},
    {"type": "Divider", "title": "---", "duration": None, "details": None},
    {"type": "Generic", "title": "Community Builder", "duration": "10 min",
     "details": "Closing remarks, prayer, and fellowship opportunities."},
]


class OrderOfServiceService:
    """
    Keeps the service items of a plan contiguously sequenced from 0.
    """

    def __init__(self, store: PlannerStoreProtocol) -> None:
        self._store = store

    def list_items(self, plan_id: str) -> List[OrderedItem]:
        """Service items of a plan in display order, positions compacted."""
        return compact(self._load(plan_id))

    def move_item(self, plan_id: str, from_index: int, to_index: int) -> List[OrderedItem]:
        """
        Move one item and persist the positions that changed.

        Raises:
            IndexError: If an index is outside the plan's items
            PersistenceError: If the store rejects an update
        """
        stored = self._load(plan_id)
        reordered = resequence(compact(stored), from_index, to_index)
        self._persist(position_changes(stored, reordered))
        logger.info("Moved item %d -> %d in plan %s", from_index, to_index, plan_id)
        return reordered

    def remove_item(self, plan_id: str, item_id: str) -> List[OrderedItem]:
        """
        Delete an item and close the gap it leaves.

        Raises:
            NotFound: If the item is not part of the plan
            PersistenceError: If the store rejects a request
        """
        stored = self._load(plan_id)
        if not any(item.id == str(item_id) for item in stored):
            raise NotFound(f"Service item {item_id} not found in plan {plan_id}")

        self._store.delete_service_item(str(item_id))
        remaining = resequence_after_removal(compact(stored), str(item_id))
        self._persist(position_changes(stored, remaining))
        logger.info("Removed item %s from plan %s", item_id, plan_id)
        return remaining

    def add_item(self, plan_id: str, payload: Mapping[str, Any]) -> OrderedItem:
        """Append a new item after the existing ones."""
        stored = self._load(plan_id)

        row: Dict[str, Any] = dict(payload)
        if row.get("id") in ("", None):
            row.pop("id", None)
        row["event_id"] = plan_id
        row["sequence_number"] = next_position(stored)

        inserted = self._store.insert_service_item(row)
        logger.info("Added item %s to plan %s at %d", inserted.get("id"), plan_id, row["sequence_number"])
        return OrderedItem.from_record(inserted)

    def seed_from_template(
        self,
        plan_id: str,
        template: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> List[OrderedItem]:
        """
        Fill the order of service of a plan from a template.

        Template items are appended in template order after any existing
        items. Ids and positions carried by the template are ignored.

        Args:
            plan_id: Plan (event) to fill
            template: Item payloads, defaults to DEFAULT_SERVICE_ITEMS

        Raises:
            PersistenceError: If the store rejects an insert
        """
        template = DEFAULT_SERVICE_ITEMS if template is None else template
        start = next_position(self._load(plan_id))

        for offset, entry in enumerate(template):
            row = {
                key: value for key, value in entry.items()
                if key not in ("id", "sequence_number", "event_id")
            }
            row["event_id"] = plan_id
            row["sequence_number"] = start + offset
            self._store.insert_service_item(row)

        logger.info("Seeded plan %s with %d template item(s)", plan_id, len(template))
        return self.list_items(plan_id)

    def _load(self, plan_id: str) -> List[OrderedItem]:
        return [OrderedItem.from_record(row) for row in self._store.list_service_items(plan_id)]

    def _persist(self, changes: List[PositionChange]) -> None:
        for change in changes:
            try:
                self._store.update_service_item(
                    change.item_id,
                    {"sequence_number": change.new_position},
                )
            except PersistenceError:
                logger.error(
                    "Failed to move item %s to %d; the stored order may be out of sync",
                    change.item_id,
                    change.new_position,
                )
                raise
        logger.debug("Persisted %d position change(s)", len(changes))
