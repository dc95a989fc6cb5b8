"""
Service layer helpers that orchestrate the persistence store and domain logic.
"""

from .order_of_service import OrderOfServiceService
from .planner_store import PlannerStoreProtocol
from .task_responses import TaskResponseService, is_task_open
from .task_results import ParticipantResponse, TaskReport, TaskResultsService

__all__ = [
    "OrderOfServiceService",
    "ParticipantResponse",
    "PlannerStoreProtocol",
    "TaskReport",
    "TaskResponseService",
    "TaskResultsService",
    "is_task_open",
]
