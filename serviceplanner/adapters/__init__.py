"""
Adapters layer - External integrations (hosted planner tables).
"""

from .mock_store import MockPlannerStore
from .rest_store import RestPlannerStore

__all__ = ["MockPlannerStore", "RestPlannerStore"]
