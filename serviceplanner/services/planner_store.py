"""
Protocol describing the persistence collaborator used by the services.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence


class PlannerStoreProtocol(Protocol):
    """
    Filtered select / insert / update / delete over the planner tables.

    Rows are plain mappings shaped like the hosted tables.
    """

    def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        """Return the ``tasks`` row, or None."""

    def list_assignments(self, task_id: str) -> List[Dict[str, Any]]:
        """Return the task's assignments with the assignee profile joined."""

    def get_assignment(self, assignment_id: str) -> Optional[Dict[str, Any]]:
        """Return a single assignment row (including ``task_id``), or None."""

    def update_assignment(self, assignment_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Update an assignment and return the stored row."""

    def list_events(self, event_ids: Sequence[str]) -> List[Dict[str, Any]]:
        """Return the matching ``events`` rows ordered by date."""

    def list_service_items(self, plan_id: str) -> List[Dict[str, Any]]:
        """Return the plan's service items ordered by ``sequence_number``."""

    def insert_service_item(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert a service item and return the stored row."""

    def update_service_item(self, item_id: str, fields: Mapping[str, Any]) -> None:
        """Update fields of a service item."""

    def delete_service_item(self, item_id: str) -> None:
        """Delete a service item."""
