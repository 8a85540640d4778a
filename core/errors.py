"""Typed errors raised by the plan engine and its persistence boundary.

The HTTP layer maps these to status codes; nothing below the API matches
on error message text.
"""

from __future__ import annotations

from typing import Optional


class PlanEngineError(Exception):
    """Base class for all plan engine errors."""

    code = "PLAN_ENGINE_ERROR"
    retryable = False


class InvalidPlanFormatError(PlanEngineError):
    """A drafted workout list or feedback classification failed schema validation."""

    code = "INVALID_PLAN_FORMAT"

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class UnsupportedConfigurationError(PlanEngineError):
    """The athlete configuration is outside what the scheduling tables cover."""

    code = "UNSUPPORTED_CONFIGURATION"


class PlanNotFoundError(PlanEngineError):
    code = "PLAN_NOT_FOUND"

    def __init__(self, user_id: str, plan_id: str):
        super().__init__(f"Plan not found: user={user_id} plan={plan_id}")
        self.user_id = user_id
        self.plan_id = plan_id


class VersionConflictError(PlanEngineError):
    """The stored plan version moved on since the caller read it."""

    code = "VERSION_CONFLICT"
    retryable = True

    def __init__(self, plan_id: str, expected_version: int, actual_version: Optional[int]):
        super().__init__(
            f"Version conflict on plan {plan_id}: expected {expected_version}, found {actual_version}"
        )
        self.plan_id = plan_id
        self.expected_version = expected_version
        self.actual_version = actual_version
