"""
Normalization of raw assignment rows into canonical responses.

Rehearsal selections have been stored in two shapes over time, the legacy
composite string ``"Monday-18:00"`` and the ``{"day", "time"}`` pair. Both are
accepted and converted to Slot records; the composite id is only ever derived.
"""

from typing import Any, Dict, List, Mapping, Sequence, Set, Union

from pydantic import ValidationError

from .exceptions import MalformedResponse
from .models import (
    AcknowledgementResponse,
    AssignmentStatus,
    AvailabilityChoice,
    AvailabilityResponse,
    Participant,
    RehearsalResponse,
    Slot,
)
from .records import AssignmentRecord, Profile

RawRow = Union[AssignmentRecord, Mapping[str, Any]]


def normalize_slot(raw: Any) -> Slot:
    """
    Convert one stored selection into a Slot.

    Raises:
        MalformedResponse: If the selection is neither a composite key nor a
            day/time pair, or names an invalid day or time
    """
    if isinstance(raw, Slot):
        return raw

    if isinstance(raw, str):
        # Weekday names never contain a dash, so the first one splits the key
        day, separator, time = raw.partition("-")
        if not separator:
            raise MalformedResponse(f"Unrecognized slot key: {raw!r}")
    elif isinstance(raw, Mapping):
        day, time = raw.get("day"), raw.get("time")
    else:
        raise MalformedResponse(f"Unrecognized slot selection: {raw!r}")

    try:
        return Slot.create(day, time)
    except ValueError as exc:
        raise MalformedResponse(f"Invalid slot selection {raw!r}: {exc}") from exc


def parse_assignment(row: RawRow) -> AssignmentRecord:
    """Validate a raw assignment row."""
    if isinstance(row, AssignmentRecord):
        return row
    if not isinstance(row, Mapping):
        raise MalformedResponse(f"Assignment row must be a mapping, got {type(row).__name__}")
    try:
        return AssignmentRecord.model_validate(dict(row))
    except ValidationError as exc:
        raise MalformedResponse(f"Unrecognized assignment row ({exc.error_count()} error(s))") from exc


def describe_participant(row: Any) -> Participant:
    """
    Best-effort participant identity for rows that failed validation.
    """
    if isinstance(row, AssignmentRecord):
        return row.participant
    if not isinstance(row, Mapping):
        return Participant(id="", name="Unknown")

    participant_id = ""
    for key in ("assigned_to_user_id", "participant_id", "participantId", "id", "assignment_id"):
        if row.get(key) not in (None, ""):
            participant_id = str(row[key])
            break

    name = row.get("participant_name") or row.get("name")
    if not isinstance(name, str) or not name.strip():
        assignee = row.get("assignee")
        if isinstance(assignee, Mapping):
            try:
                name = Profile.model_validate(dict(assignee)).display_name()
            except ValidationError:
                name = "Unknown"
        else:
            name = "Unknown"

    return Participant(id=participant_id, name=name.strip())


def _response_entry(record: AssignmentRecord, key: str) -> Any:
    # A missing entry means nothing was selected
    return (record.response_data or {}).get(key)


def normalize_rehearsal_response(row: RawRow) -> RehearsalResponse:
    """
    Normalize a rehearsal poll assignment row.

    A PENDING row never has its payload interpreted. A COMPLETED row with an
    empty selection is still a response. Repeated selections collapse to one.

    Raises:
        MalformedResponse: If the row or its ``selected_slots`` payload has an
            unrecognized shape
    """
    record = parse_assignment(row)
    responded = record.response_data is not None

    if record.status is not AssignmentStatus.COMPLETED or not responded:
        return RehearsalResponse(
            participant=record.participant,
            status=record.status,
            responded=responded,
        )

    raw_slots = _response_entry(record, "selected_slots")
    if raw_slots is None:
        raw_slots = []
    if isinstance(raw_slots, (str, bytes)) or not isinstance(raw_slots, Sequence):
        raise MalformedResponse(
            f"selected_slots of {record.participant_id} must be a list"
        )

    slots: List[Slot] = []
    seen: Set[Slot] = set()
    for raw in raw_slots:
        slot = normalize_slot(raw)
        if slot not in seen:
            seen.add(slot)
            slots.append(slot)

    return RehearsalResponse(
        participant=record.participant,
        status=record.status,
        slots=tuple(slots),
        responded=True,
    )


def normalize_availability_response(row: RawRow) -> AvailabilityResponse:
    """
    Normalize an event availability assignment row.

    Unknown or missing per-event values mean "no choice recorded"; they are
    dropped rather than mapped to UNAVAILABLE.

    Raises:
        MalformedResponse: If the row or its ``availabilities`` payload has an
            unrecognized shape
    """
    record = parse_assignment(row)
    responded = record.response_data is not None

    if record.status is not AssignmentStatus.COMPLETED or not responded:
        return AvailabilityResponse(
            participant=record.participant,
            status=record.status,
            responded=responded,
        )

    raw_choices = _response_entry(record, "availabilities")
    if raw_choices is None:
        raw_choices = {}
    if not isinstance(raw_choices, Mapping):
        raise MalformedResponse(
            f"availabilities of {record.participant_id} must be a mapping"
        )

    choices: Dict[str, AvailabilityChoice] = {}
    for event_id, value in raw_choices.items():
        choice = AvailabilityChoice.from_value(value)
        if choice is not None:
            choices[str(event_id)] = choice

    return AvailabilityResponse(
        participant=record.participant,
        status=record.status,
        choices=choices,
        responded=True,
    )


def normalize_acknowledgement_response(row: RawRow) -> AcknowledgementResponse:
    """Normalize an acknowledgement assignment row."""
    record = parse_assignment(row)
    acknowledged_at = None
    if record.status is AssignmentStatus.COMPLETED and record.response_data:
        value = record.response_data.get("acknowledged_at")
        acknowledged_at = str(value) if value is not None else None
    return AcknowledgementResponse(
        participant=record.participant,
        status=record.status,
        acknowledged_at=acknowledged_at,
    )
