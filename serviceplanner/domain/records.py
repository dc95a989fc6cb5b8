"""
Pydantic models for the raw rows returned by the persistence service.

Only the fields the planner reads are declared; anything else is ignored.
"""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .models import AssignmentStatus, Participant, TaskType


def _to_str(value: Any) -> Any:
    # Row ids may be integers or UUID strings depending on the table
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class Profile(BaseModel):
    """Joined ``profiles`` row of an assignee."""
    model_config = ConfigDict(extra="ignore")

    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def display_name(self) -> str:
        name = f"{self.first_name or 'Unknown'} {self.last_name or ''}".strip()
        return name


class AssignmentRecord(BaseModel):
    """A ``task_assignments`` row linking one participant to a task."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(validation_alias=AliasChoices("id", "assignment_id", "assignmentId"))
    participant_id: str = Field(
        validation_alias=AliasChoices("assigned_to_user_id", "participant_id", "participantId")
    )
    status: AssignmentStatus
    response_data: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("response_data", "responseData"),
    )
    participant_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("participant_name", "name"),
    )
    assignee: Optional[Profile] = None
    completed_at: Optional[str] = None

    @field_validator("id", "participant_id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _to_str(value)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def display_name(self) -> str:
        if self.participant_name and self.participant_name.strip():
            return self.participant_name.strip()
        if self.assignee is not None:
            return self.assignee.display_name()
        return "Unknown"

    @property
    def participant(self) -> Participant:
        return Participant(id=self.participant_id, name=self.display_name())


class TaskRecord(BaseModel):
    """A ``tasks`` row."""
    model_config = ConfigDict(extra="ignore")

    id: str
    title: Optional[str] = None
    type: TaskType
    task_config: Dict[str, Any] = Field(default_factory=dict)
    due_date: Optional[str] = None
    is_active: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _to_str(value)

    @field_validator("task_config", mode="before")
    @classmethod
    def default_config(cls, value: Any) -> Any:
        return value if value is not None else {}

    def event_ids(self) -> List[str]:
        return [str(event_id) for event_id in self.task_config.get("event_ids") or []]


class EventRecord(BaseModel):
    """An ``events`` row referenced by an availability task."""
    model_config = ConfigDict(extra="ignore")

    id: str
    title: Optional[str] = None
    date: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _to_str(value)
