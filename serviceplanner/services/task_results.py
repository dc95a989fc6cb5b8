"""
Results reporting for tasks: heat maps, availability breakdowns and
individual responses.

The service fetches rows through a PlannerStoreProtocol and delegates every
computation to the domain layer, so any presentation layer can consume the
resulting TaskReport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..domain.aggregator import AvailabilityAggregator, parse_event_rows
from ..domain.exceptions import InvalidConfig, MalformedResponse, NotFound
from ..domain.models import (
    AcknowledgementSummary,
    AggregationResult,
    EventTally,
    SlotConfig,
    TaskType,
)
from ..domain.normalizer import (
    describe_participant,
    normalize_acknowledgement_response,
    normalize_availability_response,
    normalize_rehearsal_response,
)
from ..domain.records import EventRecord, TaskRecord
from ..domain.slot_grid import generate_slots
from ..domain.summary import summarize_slots
from .planner_store import PlannerStoreProtocol

logger = logging.getLogger(__name__)


@dataclass
class ParticipantResponse:
    """One line of the individual responses table."""
    name: str
    status: str
    details: List[str] = field(default_factory=list)


@dataclass
class TaskReport:
    task: TaskRecord
    assignment_count: int
    responses: List[ParticipantResponse] = field(default_factory=list)
    heatmap: Optional[AggregationResult] = None
    suggestions: Dict[str, List[str]] = field(default_factory=dict)
    event_tallies: List[EventTally] = field(default_factory=list)
    acknowledgements: Optional[AcknowledgementSummary] = None


class TaskResultsService:
    """
    Builds the results report of a single task.
    """

    def __init__(
        self,
        store: PlannerStoreProtocol,
        aggregator: Optional[AvailabilityAggregator] = None,
    ) -> None:
        self._store = store
        self._aggregator = aggregator or AvailabilityAggregator()

    def build_report(self, task_id: str) -> TaskReport:
        """
        Fetch a task with its assignments and aggregate the responses.

        Raises:
            NotFound: If the task does not exist
            InvalidConfig: If the task or its poll configuration is malformed
        """
        task = self.load_task(task_id)
        assignments = self._store.list_assignments(task.id)
        logger.info("Building report for task %s (%s, %d assignments)", task.id, task.type.value, len(assignments))

        report = TaskReport(task=task, assignment_count=len(assignments))

        if task.type is TaskType.REHEARSAL_POLL:
            config = SlotConfig.from_task_config(task.task_config)
            report.heatmap = self._aggregator.aggregate_rehearsal(generate_slots(config), assignments)
            report.suggestions = summarize_slots(
                report.heatmap.perfect_matches(),
                config.interval_minutes,
            )
            report.responses = [
                self._describe_rehearsal(row, config.interval_minutes) for row in assignments
            ]

        elif task.type is TaskType.EVENT_AVAILABILITY:
            event_ids = task.event_ids()
            events = self._load_events(event_ids)
            report.event_tallies = self._aggregator.aggregate_availability(
                self._order_by_date(event_ids, events),
                assignments,
                events,
            )
            labels = {tally.event_id: tally.label for tally in report.event_tallies}
            report.responses = [
                self._describe_availability(row, labels) for row in assignments
            ]

        else:
            report.acknowledgements = self._aggregator.aggregate_acknowledgements(assignments)
            report.responses = [self._describe_acknowledgement(row) for row in assignments]

        return report

    def load_task(self, task_id: str) -> TaskRecord:
        """Fetch and validate a task row."""
        row = self._store.get_task(task_id)
        if not row:
            raise NotFound(f"Task {task_id} not found")
        try:
            return TaskRecord.model_validate(row)
        except ValidationError as exc:
            raise InvalidConfig(f"Task {task_id} has an unrecognized shape: {exc}") from exc

    def _load_events(self, event_ids: List[str]) -> List[EventRecord]:
        if not event_ids:
            return []
        return parse_event_rows(self._store.list_events(event_ids))

    @staticmethod
    def _order_by_date(event_ids: List[str], events: List[EventRecord]) -> List[str]:
        """Known events in fetched (date) order, unresolved ids after them."""
        wanted = set(event_ids)
        fetched = [event.id for event in events if event.id in wanted]
        return fetched + [event_id for event_id in event_ids if event_id not in fetched]

    def _describe_rehearsal(self, row: Mapping[str, Any], interval_minutes: int) -> ParticipantResponse:
        try:
            response = normalize_rehearsal_response(row)
        except MalformedResponse:
            return self._unreadable(row)

        line = ParticipantResponse(name=response.participant.name, status=response.status.value)
        if response.is_completed:
            if not response.slots:
                line.details.append("Unavailable")
            for day, ranges in summarize_slots(response.slots, interval_minutes).items():
                line.details.append(f"{day}: {', '.join(ranges)}")
        return line

    def _describe_availability(self, row: Mapping[str, Any], labels: Dict[str, str]) -> ParticipantResponse:
        try:
            response = normalize_availability_response(row)
        except MalformedResponse:
            return self._unreadable(row)

        line = ParticipantResponse(name=response.participant.name, status=response.status.value)
        if response.is_completed:
            for event_id, choice in response.choices.items():
                line.details.append(f"{labels.get(event_id, event_id)}: {choice.label}")
            if not line.details:
                line.details.append("No selections")
        return line

    def _describe_acknowledgement(self, row: Mapping[str, Any]) -> ParticipantResponse:
        try:
            response = normalize_acknowledgement_response(row)
        except MalformedResponse:
            return self._unreadable(row)

        line = ParticipantResponse(name=response.participant.name, status=response.status.value)
        if response.is_completed:
            line.details.append(f"Acknowledged {response.acknowledged_at or ''}".strip())
        return line

    @staticmethod
    def _unreadable(row: Any) -> ParticipantResponse:
        participant = describe_participant(row)
        status = "UNKNOWN"
        if isinstance(row, Mapping) and isinstance(row.get("status"), str):
            status = row["status"].upper()
        return ParticipantResponse(name=participant.name, status=status, details=["Unreadable response"])
