"""
Tests for response normalization.
"""

import pytest

from serviceplanner.domain.exceptions import MalformedResponse
from serviceplanner.domain.models import AssignmentStatus, AvailabilityChoice, Slot
from serviceplanner.domain.normalizer import (
    describe_participant,
    normalize_acknowledgement_response,
    normalize_availability_response,
    normalize_rehearsal_response,
    normalize_slot,
)


def _row(status="COMPLETED", response_data=None, **extra):
    row = {
        "id": "a-1",
        "assigned_to_user_id": "u-1",
        "status": status,
        "response_data": response_data,
        "assignee": {"first_name": "Anna", "last_name": "Lee"},
    }
    row.update(extra)
    return row


class TestNormalizeSlot:
    """Tests for slot selections in both stored shapes."""

    def test_composite_string(self):
        """The legacy composite key is accepted."""
        assert normalize_slot("Monday-18:00") == Slot("Monday", "18:00")

    def test_structured_pair(self):
        """The structured pair is accepted and canonicalized."""
        assert normalize_slot({"day": "monday", "time": "9:30"}) == Slot("Monday", "09:30")

    @pytest.mark.parametrize("raw", ["Monday", "Funday-18:00", {"day": "Monday"}, 42, None])
    def test_unrecognized_selection(self, raw):
        """Anything else is a malformed response."""
        with pytest.raises(MalformedResponse):
            normalize_slot(raw)


class TestNormalizeRehearsal:
    """Tests for rehearsal poll rows."""

    def test_mixed_formats_and_duplicates(self):
        """Both formats normalize to the same slot and repeats collapse."""
        response = normalize_rehearsal_response(
            _row(response_data={"selected_slots": [
                "Monday-18:00",
                {"day": "Monday", "time": "18:00"},
                {"day": "Tuesday", "time": "19:00"},
            ]})
        )

        assert response.participant.name == "Anna Lee"
        assert response.is_completed
        assert [slot.id for slot in response.slots] == ["Monday-18:00", "Tuesday-19:00"]

    def test_empty_selection_is_a_response(self):
        """Responding with nothing selected differs from not responding."""
        response = normalize_rehearsal_response(_row(response_data={"selected_slots": []}))

        assert response.responded
        assert response.slots == ()

    def test_pending_payload_is_not_interpreted(self):
        """A stray payload on a PENDING row is ignored, even if malformed."""
        response = normalize_rehearsal_response(
            _row(status="PENDING", response_data={"selected_slots": "garbage"})
        )

        assert response.status is AssignmentStatus.PENDING
        assert response.slots == ()

    def test_payload_without_selected_slots(self):
        """A completed payload without selected_slots selected nothing."""
        response = normalize_rehearsal_response(_row(response_data={"availabilities": {}}))

        assert response.responded
        assert response.slots == ()

    def test_empty_payload(self):
        """An empty completed payload is an empty selection."""
        response = normalize_rehearsal_response(_row(response_data={}))

        assert response.is_completed
        assert response.slots == ()

    def test_selected_slots_must_be_a_list(self):
        """A plain string is not a list of selections."""
        with pytest.raises(MalformedResponse):
            normalize_rehearsal_response(_row(response_data={"selected_slots": "Monday-18:00"}))

    def test_unknown_status(self):
        """Rows with an unknown status cannot be read."""
        with pytest.raises(MalformedResponse):
            normalize_rehearsal_response(_row(status="SKIPPED"))

    def test_alternative_field_names(self):
        """Rows shaped with participantId/responseData are accepted too."""
        response = normalize_rehearsal_response({
            "assignmentId": 5,
            "participantId": 9,
            "status": "completed",
            "responseData": {"selected_slots": ["Friday-10:00"]},
            "participant_name": "Ben Cho",
        })

        assert response.participant.id == "9"
        assert response.participant.name == "Ben Cho"
        assert [slot.id for slot in response.slots] == ["Friday-10:00"]


class TestNormalizeAvailability:
    """Tests for event availability rows."""

    def test_known_and_unknown_values(self):
        """Unknown values mean no choice, not UNAVAILABLE."""
        response = normalize_availability_response(
            _row(response_data={"availabilities": {"E1": "YES", "E2": "NO", "E3": "MAYBE", "E4": "", "E5": None}})
        )

        assert response.choice_for("E1") is AvailabilityChoice.AVAILABLE
        assert response.choice_for("E2") is AvailabilityChoice.UNAVAILABLE
        assert response.choice_for("E3") is AvailabilityChoice.MAYBE
        assert response.choice_for("E4") is None
        assert response.choice_for("E5") is None
        assert response.choice_for("E6") is None

    def test_payload_without_availabilities(self):
        """A completed payload without availabilities recorded no choices."""
        response = normalize_availability_response(_row(response_data={}))

        assert response.responded
        assert dict(response.choices) == {}

    def test_availabilities_must_be_mapping(self):
        """A list of choices is malformed."""
        with pytest.raises(MalformedResponse):
            normalize_availability_response(_row(response_data={"availabilities": ["YES"]}))

    def test_pending_without_payload(self):
        """A PENDING row has no choices."""
        response = normalize_availability_response(_row(status="PENDING"))

        assert not response.responded
        assert dict(response.choices) == {}


class TestNormalizeAcknowledgement:
    """Tests for acknowledgement rows."""

    def test_acknowledged_at(self):
        """The acknowledgement timestamp is kept."""
        response = normalize_acknowledgement_response(
            _row(response_data={"acknowledged_at": "2099-01-05T10:00:00Z"})
        )

        assert response.acknowledged_at == "2099-01-05T10:00:00Z"


class TestDescribeParticipant:
    """Tests for best-effort participant identity."""

    def test_unknown_name(self):
        """Rows without a profile are labelled Unknown."""
        participant = describe_participant({"assigned_to_user_id": "u-3"})

        assert participant.id == "u-3"
        assert participant.name == "Unknown"

    def test_non_mapping(self):
        """Non-mapping rows still produce a participant."""
        assert describe_participant("oops").name == "Unknown"
