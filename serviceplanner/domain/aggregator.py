"""
Aggregation of participant responses into heat maps and availability tallies.

Pure domain logic: rows that were already fetched go in, summaries come out.
Output ordering follows input ordering so repeated runs render identically.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple, Union

from pydantic import ValidationError

from .exceptions import MalformedResponse, NotFound
from .models import (
    AcknowledgementSummary,
    AggregationResult,
    AvailabilityResponse,
    EventTally,
    Participant,
    SlotGrid,
)
from .normalizer import (
    RawRow,
    describe_participant,
    normalize_acknowledgement_response,
    normalize_availability_response,
    normalize_rehearsal_response,
)
from .records import EventRecord

logger = logging.getLogger(__name__)

EventRow = Union[EventRecord, Mapping[str, Any]]


def parse_event_rows(events: Sequence[EventRow]) -> List[EventRecord]:
    """
    Validate event rows, dropping the ones that cannot be read.

    A dropped event is later reported as not found and shown under its id.
    """
    records: List[EventRecord] = []
    for event in events:
        if isinstance(event, EventRecord):
            records.append(event)
            continue
        try:
            records.append(EventRecord.model_validate(dict(event)))
        except (TypeError, ValueError, ValidationError) as exc:
            logger.warning("Ignoring unreadable event row %r: %s", event, exc)
    return records


class AvailabilityAggregator:
    """
    Folds normalized responses into per-slot and per-event summaries.

    Participants whose assignment is still PENDING never contribute, even when
    a stray payload is stored. A malformed row is logged and skipped without
    affecting the other participants.
    """

    def aggregate_rehearsal(
        self,
        grid: SlotGrid,
        rows: Sequence[RawRow],
    ) -> AggregationResult:
        """
        Count how many participants selected each slot of the grid.

        Args:
            grid: Slot universe of the poll
            rows: Assignment rows in processing order

        Returns:
            AggregationResult with zero-filled counts, rosters in processing
            order, the maximum count and the number of participants who responded
        """
        counts: Dict[str, int] = {slot.id: 0 for slot in grid}
        rosters: Dict[str, List[str]] = {slot.id: [] for slot in grid}
        responded: Set[str] = set()
        skipped: List[str] = []
        max_count = 0

        for row in rows:
            try:
                response = normalize_rehearsal_response(row)
            except MalformedResponse as exc:
                skipped.append(self._skip(row, exc).id)
                continue

            if not response.is_completed:
                continue

            responded.add(response.participant.id)

            for slot in response.slots:
                if slot not in grid:
                    logger.warning(
                        "Ignoring selection %s of %s outside the poll grid",
                        slot.id,
                        response.participant.name,
                    )
                    continue

                counts[slot.id] += 1
                rosters[slot.id].append(response.participant.name)
                max_count = max(max_count, counts[slot.id])

        logger.debug(
            "Aggregated %d rows over %d slots (max=%d, responded=%d)",
            len(rows),
            len(grid),
            max_count,
            len(responded),
        )

        return AggregationResult(
            grid=grid,
            counts=counts,
            rosters=rosters,
            max_count=max_count,
            total_responded=len(responded),
            total_assigned=len(rows),
            skipped=skipped,
        )

    def aggregate_availability(
        self,
        event_ids: Sequence[str],
        rows: Sequence[RawRow],
        events: Optional[Sequence[EventRow]] = None,
    ) -> List[EventTally]:
        """
        Partition every participant into one bucket per event.

        A participant lands in ``no_response`` for an event when their
        assignment is not COMPLETED, when no choice was recorded for that
        event, or when their row could not be read.

        Args:
            event_ids: Events of the task, in display order
            rows: Assignment rows in processing order
            events: Event rows used to resolve labels and dates

        Returns:
            One EventTally per distinct event id
        """
        lookup = self._event_lookup(events or [])
        responses = self._normalize_availability_rows(rows)

        tallies: List[EventTally] = []
        seen: Set[str] = set()

        for raw_id in event_ids:
            event_id = str(raw_id)
            if event_id in seen:
                continue
            seen.add(event_id)

            try:
                event = self._resolve_event(lookup, event_id)
                tally = EventTally(event_id=event_id, label=event.title or event_id, date=event.date)
            except NotFound as exc:
                logger.warning("%s; using its id as label", exc)
                tally = EventTally(event_id=event_id, label=event_id)

            for participant, response in responses:
                choice = None
                if response is not None and response.is_completed:
                    choice = response.choice_for(event_id)
                tally.bucket(choice).append(participant.name)

            tallies.append(tally)

        return tallies

    def aggregate_acknowledgements(self, rows: Sequence[RawRow]) -> AcknowledgementSummary:
        """Split participants into those who acknowledged and those still pending."""
        summary = AcknowledgementSummary()

        for row in rows:
            try:
                response = normalize_acknowledgement_response(row)
            except MalformedResponse as exc:
                summary.pending.append(self._skip(row, exc))
                continue

            if response.is_completed:
                summary.acknowledged.append(response)
            else:
                summary.pending.append(response.participant)

        return summary

    def _normalize_availability_rows(
        self,
        rows: Sequence[RawRow],
    ) -> List[Tuple[Participant, Optional[AvailabilityResponse]]]:
        normalized: List[Tuple[Participant, Optional[AvailabilityResponse]]] = []
        for row in rows:
            try:
                response = normalize_availability_response(row)
            except MalformedResponse as exc:
                normalized.append((self._skip(row, exc), None))
                continue
            normalized.append((response.participant, response))
        return normalized

    @staticmethod
    def _event_lookup(events: Sequence[EventRow]) -> Dict[str, EventRecord]:
        return {record.id: record for record in parse_event_rows(events)}

    @staticmethod
    def _resolve_event(lookup: Dict[str, EventRecord], event_id: str) -> EventRecord:
        try:
            return lookup[event_id]
        except KeyError:
            raise NotFound(f"Event {event_id} not found") from None

    @staticmethod
    def _skip(row: Any, exc: MalformedResponse) -> Participant:
        participant = describe_participant(row)
        logger.warning(
            "Skipping malformed response of %s: %s",
            participant.id or participant.name,
            exc,
        )
        return participant
