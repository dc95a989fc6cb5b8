"""
Domain layer - Pure business logic without external dependencies.
"""

from .aggregator import AvailabilityAggregator
from .exceptions import (
    InvalidConfig,
    MalformedResponse,
    NotFound,
    PermissionDenied,
    PersistenceError,
    PlannerError,
    TaskClosedError,
)
from .models import (
    AggregationResult,
    AssignmentStatus,
    AvailabilityChoice,
    EventTally,
    OrderedItem,
    PositionChange,
    Slot,
    SlotConfig,
    SlotGrid,
    TaskType,
)
from .resequencer import resequence, resequence_after_removal
from .slot_grid import generate_slots

__all__ = [
    "AvailabilityAggregator",
    "AggregationResult",
    "AssignmentStatus",
    "AvailabilityChoice",
    "EventTally",
    "InvalidConfig",
    "MalformedResponse",
    "NotFound",
    "OrderedItem",
    "PermissionDenied",
    "PersistenceError",
    "PlannerError",
    "PositionChange",
    "Slot",
    "SlotConfig",
    "SlotGrid",
    "TaskClosedError",
    "TaskType",
    "generate_slots",
    "resequence",
    "resequence_after_removal",
]
