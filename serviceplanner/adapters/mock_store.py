"""
In-memory planner store for testing without the hosted backend.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import uuid4

from ..domain.exceptions import NotFound

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_planner_data.json"

TABLES = ("tasks", "task_assignments", "profiles", "events", "service_items")


class MockPlannerStore:
    """
    Store that serves realistic planner rows from a JSON file.

    Writes only change the in-memory copy; the file is never modified.
    """

    def __init__(self, data_file: Optional[Path] = None, data: Optional[Mapping[str, Any]] = None):
        """
        Initialize the mock store.

        Args:
            data_file: JSON file with one list of rows per table
            data: Rows to use instead of a file
        """
        if data is None:
            data = self._load_data(data_file or DEFAULT_DATA_FILE)
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            table: copy.deepcopy(list(data.get(table, []))) for table in TABLES
        }

    @staticmethod
    def _load_data(data_file: Path) -> Dict[str, Any]:
        """Load mock rows from a JSON file."""
        if not data_file.exists():
            return {}
        with open(data_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        return self._find("tasks", task_id)

    def list_assignments(self, task_id: str) -> List[Dict[str, Any]]:
        rows = [
            row for row in self.tables["task_assignments"]
            if str(row.get("task_id")) == str(task_id)
        ]
        return [self._with_assignee(row) for row in rows]

    def get_assignment(self, assignment_id: str) -> Optional[Dict[str, Any]]:
        return self._find("task_assignments", assignment_id)

    def update_assignment(self, assignment_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        row = self._find_row("task_assignments", assignment_id)
        row.update(copy.deepcopy(dict(fields)))
        return copy.deepcopy(row)

    def list_events(self, event_ids: Sequence[str]) -> List[Dict[str, Any]]:
        wanted = {str(event_id) for event_id in event_ids}
        rows = [row for row in self.tables["events"] if str(row.get("id")) in wanted]
        return copy.deepcopy(sorted(rows, key=lambda row: row.get("date") or ""))

    def list_service_items(self, plan_id: str) -> List[Dict[str, Any]]:
        rows = [
            row for row in self.tables["service_items"]
            if str(row.get("event_id")) == str(plan_id)
        ]
        rows.sort(key=lambda row: (row.get("sequence_number") is None, row.get("sequence_number") or 0))
        return copy.deepcopy(rows)

    def insert_service_item(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        stored = copy.deepcopy(dict(row))
        stored.setdefault("id", uuid4().hex)
        self.tables["service_items"].append(stored)
        return copy.deepcopy(stored)

    def update_service_item(self, item_id: str, fields: Mapping[str, Any]) -> None:
        self._find_row("service_items", item_id).update(copy.deepcopy(dict(fields)))

    def delete_service_item(self, item_id: str) -> None:
        row = self._find_row("service_items", item_id)
        self.tables["service_items"].remove(row)

    def _with_assignee(self, row: Dict[str, Any]) -> Dict[str, Any]:
        joined = copy.deepcopy(row)
        profile = self._find("profiles", row.get("assigned_to_user_id"))
        if profile is not None:
            joined["assignee"] = {
                "first_name": profile.get("first_name"),
                "last_name": profile.get("last_name"),
            }
        return joined

    def _find(self, table: str, row_id: Any) -> Optional[Dict[str, Any]]:
        for row in self.tables[table]:
            if str(row.get("id")) == str(row_id):
                return copy.deepcopy(row)
        return None

    def _find_row(self, table: str, row_id: Any) -> Dict[str, Any]:
        for row in self.tables[table]:
            if str(row.get("id")) == str(row_id):
                return row
        raise NotFound(f"No row {row_id} in {table}")
