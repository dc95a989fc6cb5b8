"""
Domain models for rehearsal slots, participant responses and ordered items.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .exceptions import InvalidConfig

logger = logging.getLogger(__name__)

# Canonical display order for grid columns
WEEKDAYS: Tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

STANDARD_INTERVALS: Tuple[int, ...] = (15, 30, 60)

TIME_RE = re.compile(r"^(?:[01]?\d|2[0-3]):[0-5]\d(?::[0-5]\d)?$")


def canonical_day(name: str) -> str:
    """Return the canonical weekday name for ``name`` (case-insensitive)."""
    if isinstance(name, str):
        key = name.strip().lower()
        for day in WEEKDAYS:
            if day.lower() == key:
                return day
    raise ValueError(f"Unknown weekday: {name!r}")


def day_index(day: str) -> int:
    """Position of a canonical weekday name, Sunday first."""
    return WEEKDAYS.index(day)


def parse_time_label(value: str) -> int:
    """
    Convert an ``HH:MM`` (or ``HH:MM:SS``) label to minutes after midnight.

    Raises:
        ValueError: If the label is not a valid 24h time of day
    """
    if not isinstance(value, str) or not TIME_RE.match(value.strip()):
        raise ValueError(f"Invalid time of day: {value!r}")
    hours, minutes = value.strip().split(":")[:2]
    return int(hours) * 60 + int(minutes)


def format_time_label(minutes: int) -> str:
    """Format minutes after midnight as a zero-padded ``HH:MM`` label."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class Slot:
    """
    A single (day, time-of-day) unit in a rehearsal poll.

    The composite ``id`` is derived from the pair and never stored on its own.
    """
    day: str
    time: str

    @classmethod
    def create(cls, day: str, time: str) -> "Slot":
        """
        Build a slot from loosely formatted input.

        Raises:
            ValueError: If the day or time cannot be canonicalized
        """
        return cls(day=canonical_day(day), time=format_time_label(parse_time_label(time)))

    @property
    def id(self) -> str:
        return f"{self.day}-{self.time}"

    @property
    def minutes(self) -> int:
        return parse_time_label(self.time)

    def sort_key(self) -> Tuple[int, int]:
        return day_index(self.day), self.minutes

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class SlotConfig:
    """
    Configuration of a rehearsal poll grid.

    Invariant: start_minutes < end_minutes and interval_minutes > 0.
    """
    days: Tuple[str, ...]
    start_minutes: int
    end_minutes: int
    interval_minutes: int

    def __post_init__(self):
        if isinstance(self.interval_minutes, bool) or not isinstance(self.interval_minutes, int):
            raise InvalidConfig(f"interval_minutes must be an integer, got {self.interval_minutes!r}")
        if self.interval_minutes <= 0:
            raise InvalidConfig(f"interval_minutes must be positive, got {self.interval_minutes}")
        if self.start_minutes >= self.end_minutes:
            raise InvalidConfig(
                f"Start time {format_time_label(self.start_minutes)} must be before "
                f"end time {format_time_label(self.end_minutes)}"
            )
        unknown = [day for day in self.days if day not in WEEKDAYS]
        if unknown:
            raise InvalidConfig(f"Unknown weekday(s): {', '.join(map(str, unknown))}")
        if len(set(self.days)) != len(self.days):
            raise InvalidConfig("Weekdays must not repeat")
        if self.interval_minutes not in STANDARD_INTERVALS:
            logger.warning("Non-standard poll interval of %d minutes", self.interval_minutes)

    @classmethod
    def create(
        cls,
        days: Sequence[str],
        time_start: str,
        time_end: str,
        interval_minutes: int,
    ) -> "SlotConfig":
        """
        Build a config from raw day names and ``HH:MM`` labels.

        Day names are matched case-insensitively and deduplicated.

        Raises:
            InvalidConfig: If any value is malformed or the range is empty
        """
        canonical: List[str] = []
        for name in days:
            try:
                day = canonical_day(name)
            except ValueError as exc:
                raise InvalidConfig(str(exc)) from exc
            if day not in canonical:
                canonical.append(day)

        try:
            start = parse_time_label(time_start)
            end = parse_time_label(time_end)
        except ValueError as exc:
            raise InvalidConfig(str(exc)) from exc

        return cls(
            days=tuple(canonical),
            start_minutes=start,
            end_minutes=end,
            interval_minutes=interval_minutes,
        )

    @classmethod
    def from_task_config(cls, config: Mapping[str, Any]) -> "SlotConfig":
        """Parse a stored ``task_config`` mapping of a rehearsal poll task."""
        if not isinstance(config, Mapping):
            raise InvalidConfig("Rehearsal poll configuration must be a mapping")

        missing = [
            key for key in ("time_start", "time_end", "interval_minutes")
            if config.get(key) in (None, "")
        ]
        if missing:
            raise InvalidConfig(f"Rehearsal poll configuration is missing: {', '.join(missing)}")

        days = config.get("days") or []
        if isinstance(days, str) or not isinstance(days, Sequence):
            raise InvalidConfig("days must be a list of weekday names")

        interval = config["interval_minutes"]
        if isinstance(interval, str) and interval.strip().isdigit():
            interval = int(interval)

        return cls.create(
            days=days,
            time_start=config["time_start"],
            time_end=config["time_end"],
            interval_minutes=interval,
        )

    @property
    def ordered_days(self) -> Tuple[str, ...]:
        """Configured days in canonical weekday order."""
        return tuple(sorted(self.days, key=day_index))

    @property
    def time_start(self) -> str:
        return format_time_label(self.start_minutes)

    @property
    def time_end(self) -> str:
        return format_time_label(self.end_minutes)


class SlotGrid:
    """
    The finite, ordered slot universe of a rehearsal poll.

    ``slots`` is ordered by canonical day, then time. ``rows()`` exposes the
    same slots grouped by time label for grid-row layout.
    """

    def __init__(self, days: Sequence[str], times: Sequence[str]):
        self.days: Tuple[str, ...] = tuple(days)
        self.times: Tuple[str, ...] = tuple(times)
        self._index: Dict[Tuple[str, str], Slot] = {}
        self._by_id: Dict[str, Slot] = {}

        slots: List[Slot] = []
        for day in self.days:
            for time in self.times:
                slot = Slot(day=day, time=time)
                slots.append(slot)
                self._index[(day, time)] = slot
                self._by_id[slot.id] = slot
        self.slots: Tuple[Slot, ...] = tuple(slots)

    @classmethod
    def empty(cls) -> "SlotGrid":
        return cls(days=(), times=())

    def get(self, day: str, time: str) -> Optional[Slot]:
        return self._index.get((day, time))

    def by_id(self, slot_id: str) -> Optional[Slot]:
        return self._by_id.get(slot_id)

    def ids(self) -> List[str]:
        return [slot.id for slot in self.slots]

    def rows(self) -> List[Tuple[str, List[Slot]]]:
        """One ``(time, [slot per day])`` row per time label."""
        return [
            (time, [self._index[(day, time)] for day in self.days])
            for time in self.times
        ]

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Slot):
            return (item.day, item.time) in self._index
        return item in self._by_id

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def __repr__(self) -> str:
        return f"SlotGrid(days={list(self.days)}, times={list(self.times)})"


class TaskType(str, Enum):
    ACKNOWLEDGEMENT = "ACKNOWLEDGEMENT"
    EVENT_AVAILABILITY = "EVENT_AVAILABILITY"
    REHEARSAL_POLL = "REHEARSAL_POLL"

    @property
    def label(self) -> str:
        """Human readable name, e.g. ``Rehearsal Poll``."""
        return " ".join(word.capitalize() for word in self.value.split("_"))


class AssignmentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class AvailabilityChoice(str, Enum):
    """Per-event answer; values are the serialized forms stored with responses."""
    AVAILABLE = "YES"
    UNAVAILABLE = "NO"
    MAYBE = "MAYBE"

    @classmethod
    def from_value(cls, value: Any) -> Optional["AvailabilityChoice"]:
        """Return the matching choice, or None when no choice was recorded."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return {"YES": "Available", "NO": "Unavailable", "MAYBE": "Maybe"}[self.value]


@dataclass(frozen=True)
class Participant:
    id: str
    name: str


@dataclass(frozen=True)
class RehearsalResponse:
    """Normalized rehearsal poll answer of one participant."""
    participant: Participant
    status: AssignmentStatus
    slots: Tuple[Slot, ...] = ()
    responded: bool = False  # a payload was stored, even if empty

    @property
    def is_completed(self) -> bool:
        return self.status is AssignmentStatus.COMPLETED


@dataclass(frozen=True)
class AvailabilityResponse:
    """Normalized per-event availability answer of one participant."""
    participant: Participant
    status: AssignmentStatus
    choices: Mapping[str, AvailabilityChoice] = field(default_factory=dict)
    responded: bool = False

    @property
    def is_completed(self) -> bool:
        return self.status is AssignmentStatus.COMPLETED

    def choice_for(self, event_id: str) -> Optional[AvailabilityChoice]:
        return self.choices.get(event_id)


@dataclass(frozen=True)
class AcknowledgementResponse:
    participant: Participant
    status: AssignmentStatus
    acknowledged_at: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status is AssignmentStatus.COMPLETED


@dataclass
class AggregationResult:
    """
    Heat-map summary of a rehearsal poll.

    ``counts`` and ``rosters`` hold an entry for every slot of the grid.
    """
    grid: SlotGrid
    counts: Dict[str, int]
    rosters: Dict[str, List[str]]
    max_count: int = 0
    total_responded: int = 0
    total_assigned: int = 0
    skipped: List[str] = field(default_factory=list)

    def count(self, slot_id: str) -> int:
        return self.counts.get(slot_id, 0)

    def intensity(self, slot_id: str) -> float:
        """Count scaled to 0.0-1.0 against the busiest slot."""
        if self.max_count == 0:
            return 0.0
        return self.count(slot_id) / self.max_count

    def perfect_matches(self) -> List[Slot]:
        """Slots selected by every assigned participant."""
        if self.total_assigned == 0:
            return []
        return [
            slot for slot in self.grid.slots
            if self.counts.get(slot.id, 0) == self.total_assigned
        ]


@dataclass
class EventTally:
    """Disjoint availability rosters for a single event."""
    event_id: str
    label: str
    date: Optional[str] = None
    available: List[str] = field(default_factory=list)
    unavailable: List[str] = field(default_factory=list)
    maybe: List[str] = field(default_factory=list)
    no_response: List[str] = field(default_factory=list)

    def bucket(self, choice: Optional[AvailabilityChoice]) -> List[str]:
        if choice is AvailabilityChoice.AVAILABLE:
            return self.available
        if choice is AvailabilityChoice.UNAVAILABLE:
            return self.unavailable
        if choice is AvailabilityChoice.MAYBE:
            return self.maybe
        return self.no_response

    @property
    def counts(self) -> Dict[str, int]:
        return {
            "available": len(self.available),
            "unavailable": len(self.unavailable),
            "maybe": len(self.maybe),
            "no_response": len(self.no_response),
        }


@dataclass
class AcknowledgementSummary:
    acknowledged: List[AcknowledgementResponse] = field(default_factory=list)
    pending: List[Participant] = field(default_factory=list)


@dataclass(frozen=True)
class OrderedItem:
    """
    An entry of an ordered collection, e.g. a service item in a plan.

    ``sequence_position`` may be None for rows that were never sequenced.
    """
    id: str
    sequence_position: Optional[int]
    payload: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "OrderedItem":
        """Build an item from a ``{id, sequence_number, ...}`` row."""
        payload = {
            key: value for key, value in record.items()
            if key not in ("id", "sequence_number")
        }
        return cls(
            id=str(record["id"]),
            sequence_position=record.get("sequence_number"),
            payload=payload,
        )

    def to_record(self) -> Dict[str, Any]:
        record = dict(self.payload)
        record["id"] = self.id
        record["sequence_number"] = self.sequence_position
        return record


@dataclass(frozen=True)
class PositionChange:
    item_id: str
    old_position: Optional[int]
    new_position: int
