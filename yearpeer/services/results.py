"""Result values and the planner error taxonomy.

Rule entry points return ``Success`` or ``Failure`` instead of raising for
expected problems. The error classes are still exceptions so repositories and
the HTTP shell can raise them where that reads more naturally.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar, Union

T = TypeVar("T")


class PlannerError(Exception):
    """Base class for every failure the planner reports to its callers."""

    code = "planner_error"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class FieldError(PlannerError):
    code = "field_error"
    default_message = "Invalid data"

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        return {**super().to_payload(), "field": self.field}


class DateOrderError(PlannerError):
    code = "date_order"
    default_message = "End date cannot be before start date"


class OverlapError(PlannerError):
    code = "overlap"
    default_message = "A goal already exists during this time period"


class QuotaExceededError(PlannerError):
    code = "quota_exceeded"

    def __init__(self, limit: int, message: Optional[str] = None):
        self.limit = limit
        super().__init__(message or f"Cannot exceed {limit} tasks per day")

    def to_payload(self) -> Dict[str, Any]:
        return {**super().to_payload(), "limit": self.limit}


class NotFoundError(PlannerError):
    code = "not_found"
    default_message = "Not found"


class AuthorizationError(PlannerError):
    code = "unauthorized"
    default_message = "Unauthorized"


class PersistenceError(PlannerError):
    """Storage failure normalized to a message that is safe to show users."""

    code = "persistence_error"
    default_message = "Failed to save changes"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error: PlannerError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure]
