"""
Tests for response submission.
"""

import pendulum
import pytest

from serviceplanner.domain.exceptions import (
    MalformedResponse,
    NotFound,
    PermissionDenied,
    TaskClosedError,
)
from serviceplanner.domain.records import TaskRecord
from serviceplanner.services.task_responses import TaskResponseService, is_task_open

NOW = pendulum.datetime(2099, 3, 1, 12, 0, tz="UTC")


class TestIsTaskOpen:
    """Tests for the deadline check."""

    def test_open_until_end_of_due_day(self):
        """The due day itself still accepts responses."""
        task = TaskRecord(id="t", type="ACKNOWLEDGEMENT", due_date="2099-03-20")

        assert is_task_open(task, pendulum.datetime(2099, 3, 20, 23, 30, tz="UTC"), "UTC")
        assert not is_task_open(task, pendulum.datetime(2099, 3, 21, 0, 1, tz="UTC"), "UTC")

    def test_no_due_date(self):
        """Tasks without a due date stay open while active."""
        assert is_task_open(TaskRecord(id="t", type="ACKNOWLEDGEMENT"), NOW)

    def test_inactive(self):
        """Inactive tasks are closed."""
        task = TaskRecord(id="t", type="ACKNOWLEDGEMENT", is_active=False)

        assert not is_task_open(task, NOW)


class TestSubmitResponse:
    """Tests for TaskResponseService.submit_response."""

    def test_rehearsal_response_is_stored_structured(self, mock_store):
        """Legacy keys are accepted and written back as day/time pairs."""
        service = TaskResponseService(store=mock_store)

        stored = service.submit_response(
            "a-3",
            {"selected_slots": ["Monday-19:30", {"day": "tuesday", "time": "18:00"}]},
            actor_id="u-carla",
            now=NOW,
        )

        assert stored["status"] == "COMPLETED"
        assert stored["completed_at"] == NOW.to_iso8601_string()
        assert stored["response_data"] == {
            "selected_slots": [
                {"day": "Monday", "time": "19:30"},
                {"day": "Tuesday", "time": "18:00"},
            ]
        }
        assert mock_store.get_assignment("a-3")["status"] == "COMPLETED"

    def test_submission_overwrites_previous_payload(self, mock_store):
        """A new submission replaces the earlier selection as a whole."""
        service = TaskResponseService(store=mock_store)

        stored = service.submit_response("a-1", {"selected_slots": []}, actor_id="u-anna", now=NOW)

        assert stored["response_data"] == {"selected_slots": []}

    def test_slot_outside_poll_is_rejected(self, mock_store):
        """Selections must be part of the poll grid."""
        service = TaskResponseService(store=mock_store)

        with pytest.raises(MalformedResponse, match="Friday-18:00"):
            service.submit_response("a-3", {"selected_slots": ["Friday-18:00"]}, actor_id="u-carla", now=NOW)

    def test_someone_elses_assignment(self, mock_store):
        """Users may only answer their own assignments."""
        service = TaskResponseService(store=mock_store)

        with pytest.raises(PermissionDenied):
            service.submit_response("a-3", {"selected_slots": []}, actor_id="u-anna", now=NOW)

    def test_past_due(self, mock_store):
        """Responses after the due day are refused."""
        service = TaskResponseService(store=mock_store)

        with pytest.raises(TaskClosedError):
            service.submit_response(
                "a-3",
                {"selected_slots": []},
                actor_id="u-carla",
                now=pendulum.datetime(2099, 3, 21, 9, 0, tz="UTC"),
            )

    def test_availability_drops_unknown_values(self, mock_store):
        """Unrecognized per-event values are not stored."""
        service = TaskResponseService(store=mock_store)

        stored = service.submit_response(
            "a-7",
            {"availabilities": {"e-palm": "yes", "e-easter": "bogus"}},
            actor_id="u-carla",
            now=NOW,
        )

        assert stored["response_data"] == {"availabilities": {"e-palm": "YES"}}

    def test_availability_for_foreign_event(self, mock_store):
        """Choices for events outside the task are rejected."""
        service = TaskResponseService(store=mock_store)

        with pytest.raises(MalformedResponse, match="e-other"):
            service.submit_response(
                "a-7", {"availabilities": {"e-other": "YES"}}, actor_id="u-carla", now=NOW
            )

    def test_acknowledgement(self, mock_store):
        """Acknowledging records the submission time."""
        service = TaskResponseService(store=mock_store)

        stored = service.submit_response("a-9", None, actor_id="u-ben", now=NOW)

        assert stored["response_data"] == {"acknowledged_at": NOW.to_iso8601_string()}

    def test_unknown_assignment(self, mock_store):
        """Missing assignments raise NotFound."""
        with pytest.raises(NotFound):
            TaskResponseService(store=mock_store).submit_response("a-404", None, actor_id="u-ben", now=NOW)
