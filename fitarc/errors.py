"""Domain errors raised by the plan resolution engine.

Absence (no plan, unscheduled day, empty template pool) is never an error:
reads return None or an empty list. These exceptions cover the cases where a
request must be refused before anything is written.
"""
from __future__ import annotations


class PlanEngineError(Exception):
    """Base class for engine errors."""


class PlanOwnershipError(PlanEngineError):
    """The plan does not exist or does not belong to the requesting user."""

    def __init__(self, plan_id: str, user_id: str):
        super().__init__(f"Plan {plan_id} is not owned by user {user_id}")
        self.plan_id = plan_id
        self.user_id = user_id


class MissingReferenceError(PlanEngineError):
    """A desired element has no catalog reference (exercise or food id)."""

    def __init__(self, position: int, field: str):
        super().__init__(f"Element at position {position} is missing '{field}'")
        self.position = position
        self.field = field


class InvalidElementIdError(PlanEngineError, ValueError):
    """An element identifier is neither a template-backed nor an override-backed id."""


class StaleDayError(PlanEngineError):
    """The day's overrides changed since the caller last read it."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f"Day revision is {actual}, expected {expected}")
        self.expected = expected
        self.actual = actual
