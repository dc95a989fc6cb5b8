"""
Domain-specific exception hierarchy for the service planner.
"""


class PlannerError(Exception):
    """Base class for all application-level errors."""


class InvalidConfig(PlannerError):
    """Raised when a slot configuration cannot produce a valid grid."""


class MalformedResponse(PlannerError):
    """Raised when a participant's response payload has an unrecognized shape."""


class NotFound(PlannerError):
    """Raised when a referenced task, plan, item or event does not exist."""


class PersistenceError(PlannerError):
    """Raised when the persistence service rejects or fails a request."""


class TaskClosedError(PlannerError):
    """Raised when a response is submitted to an inactive or past-due task."""


class PermissionDenied(PlannerError):
    """Raised when the acting user may not modify the requested record."""
