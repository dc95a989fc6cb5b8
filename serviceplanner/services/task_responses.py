"""
Submission of a participant's response to an assigned task.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import pendulum
from pendulum import DateTime

from ..domain.exceptions import (
    InvalidConfig,
    MalformedResponse,
    NotFound,
    PermissionDenied,
    TaskClosedError,
)
from ..domain.models import AssignmentStatus, TaskType
from ..domain.normalizer import (
    normalize_availability_response,
    normalize_rehearsal_response,
    parse_assignment,
)
from ..domain.records import TaskRecord
from ..domain.slot_grid import generate_slots
from .planner_store import PlannerStoreProtocol

logger = logging.getLogger(__name__)


def is_task_open(task: TaskRecord, now: DateTime, timezone: str = "UTC") -> bool:
    """
    A task accepts responses while active and until the end of its due day.
    """
    if not task.is_active:
        return False
    if not task.due_date:
        return True

    try:
        due = pendulum.parse(task.due_date, tz=timezone)
    except ValueError as exc:
        raise InvalidConfig(f"Invalid due date {task.due_date!r} on task {task.id}") from exc

    return now <= due.end_of("day")


class TaskResponseService:
    """
    Validates and stores responses. Every submission overwrites the previous
    payload as a whole.
    """

    def __init__(self, store: PlannerStoreProtocol, timezone: str = "UTC") -> None:
        self._store = store
        self._timezone = timezone

    def submit_response(
        self,
        assignment_id: str,
        response_data: Optional[Mapping[str, Any]],
        actor_id: str,
        now: Optional[DateTime] = None,
    ) -> Dict[str, Any]:
        """
        Complete an assignment with the given response payload.

        Args:
            assignment_id: Assignment being answered
            response_data: ``{"selected_slots": [...]}``, ``{"availabilities": {...}}``
                or None for an acknowledgement
            actor_id: Id of the user submitting the response
            now: Submission time, defaults to the current time

        Returns:
            The stored assignment row

        Raises:
            NotFound: If the assignment or its task does not exist
            PermissionDenied: If the assignment belongs to someone else
            TaskClosedError: If the task is inactive or past due
            MalformedResponse: If the payload does not fit the task
        """
        row = self._store.get_assignment(assignment_id)
        if not row:
            raise NotFound(f"Assignment {assignment_id} not found")

        record = parse_assignment(row)
        if record.participant_id != str(actor_id):
            raise PermissionDenied(f"Assignment {assignment_id} is not assigned to {actor_id}")

        task_row = self._store.get_task(str(row.get("task_id", "")))
        if not task_row:
            raise NotFound(f"Task of assignment {assignment_id} not found")
        task = TaskRecord.model_validate(task_row)

        now = now or pendulum.now(self._timezone)
        if not is_task_open(task, now, self._timezone):
            raise TaskClosedError(f"Task {task.id} is no longer accepting responses")

        payload = self._build_payload(task, record.participant_id, response_data or {}, now)

        stored = self._store.update_assignment(
            record.id,
            {
                "status": AssignmentStatus.COMPLETED.value,
                "completed_at": now.to_iso8601_string(),
                "response_data": payload,
            },
        )
        logger.info("Stored %s response for assignment %s", task.type.value, record.id)
        return stored

    def _build_payload(
        self,
        task: TaskRecord,
        participant_id: str,
        response_data: Mapping[str, Any],
        now: DateTime,
    ) -> Dict[str, Any]:
        candidate = {
            "id": "submission",
            "assigned_to_user_id": participant_id,
            "status": AssignmentStatus.COMPLETED.value,
            "response_data": dict(response_data),
        }

        if task.type is TaskType.REHEARSAL_POLL:
            grid = generate_slots(task.task_config)
            response = normalize_rehearsal_response(candidate)
            outside = [slot.id for slot in response.slots if slot not in grid]
            if outside:
                raise MalformedResponse(f"Slots outside the poll: {', '.join(outside)}")
            # Always written in the structured form
            return {
                "selected_slots": [{"day": slot.day, "time": slot.time} for slot in response.slots]
            }

        if task.type is TaskType.EVENT_AVAILABILITY:
            response = normalize_availability_response(candidate)
            unknown = [event_id for event_id in response.choices if event_id not in task.event_ids()]
            if unknown:
                raise MalformedResponse(f"Events not part of the task: {', '.join(unknown)}")
            return {
                "availabilities": {
                    event_id: choice.value for event_id, choice in response.choices.items()
                }
            }

        return {"acknowledged_at": now.to_iso8601_string()}
