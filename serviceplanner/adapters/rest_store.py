"""
PostgREST client for the hosted planner tables.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests

from ..domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class RestPlannerStore:
    """
    Client for the planner tables exposed through a PostgREST endpoint.

    Filters use PostgREST syntax (``?id=eq.42``). Requests are authorized
    with the project API key and, when given, the current actor's token.
    """

    REST_PATH = "/rest/v1"
    ASSIGNMENT_SELECT = "*, assignee:profiles!assigned_to_user_id(first_name, last_name)"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the store client.

        Args:
            base_url: Project URL, e.g. ``https://xyz.supabase.co``
            api_key: Public API key of the project
            access_token: Session token of the acting user
            timeout: Request timeout in seconds
            session: Optional requests session (useful for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
            "Content-Type": "application/json",
        }

    def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        rows = self._request("GET", "tasks", params={"select": "*", "id": f"eq.{task_id}"})
        return rows[0] if rows else None

    def list_assignments(self, task_id: str) -> List[Dict[str, Any]]:
        return self._request(
            "GET",
            "task_assignments",
            params={"select": self.ASSIGNMENT_SELECT, "task_id": f"eq.{task_id}"},
        )

    def get_assignment(self, assignment_id: str) -> Optional[Dict[str, Any]]:
        rows = self._request(
            "GET",
            "task_assignments",
            params={"select": "*", "id": f"eq.{assignment_id}"},
        )
        return rows[0] if rows else None

    def update_assignment(self, assignment_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        rows = self._request(
            "PATCH",
            "task_assignments",
            params={"id": f"eq.{assignment_id}"},
            json=dict(fields),
            returning=True,
        )
        if not rows:
            raise PersistenceError(f"Assignment {assignment_id} was not updated")
        return rows[0]

    def list_events(self, event_ids: Sequence[str]) -> List[Dict[str, Any]]:
        if not event_ids:
            return []
        return self._request(
            "GET",
            "events",
            params={
                "select": "id,title,date",
                "id": f"in.({','.join(str(event_id) for event_id in event_ids)})",
                "order": "date.asc",
            },
        )

    def list_service_items(self, plan_id: str) -> List[Dict[str, Any]]:
        return self._request(
            "GET",
            "service_items",
            params={
                "select": "*",
                "event_id": f"eq.{plan_id}",
                "order": "sequence_number.asc.nullslast",
            },
        )

    def insert_service_item(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        rows = self._request("POST", "service_items", json=[dict(row)], returning=True)
        if not rows:
            raise PersistenceError("Service item was not inserted")
        return rows[0]

    def update_service_item(self, item_id: str, fields: Mapping[str, Any]) -> None:
        self._request("PATCH", "service_items", params={"id": f"eq.{item_id}"}, json=dict(fields))

    def delete_service_item(self, item_id: str) -> None:
        self._request("DELETE", "service_items", params={"id": f"eq.{item_id}"})

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        returning: bool = False,
    ) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            PersistenceError: If the request fails or the response is not JSON
        """
        url = f"{self.base_url}{self.REST_PATH}/{table}"
        headers = dict(self.headers)
        if returning:
            headers["Prefer"] = "return=representation"

        logger.debug("%s %s %s", method, table, params or {})

        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, table, e)
            raise PersistenceError(f"Request to {table} failed: {e}") from e

        if not response.content:
            return []

        try:
            return response.json()
        except ValueError as e:
            raise PersistenceError(f"Invalid JSON from {table}: {e}") from e
