# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain exceptions for the duty lifecycle.

Every error the services raise derives from ``StargateError`` and carries the
HTTP status the API layer answers with, plus a machine-readable ``kind``.
"""

from typing import Any, Optional


class StargateError(Exception):
    """Base exception for all domain errors."""

    status_code: int = 500
    kind: str = "stargate_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidRequest(StargateError):
    """Missing or blank required field, or an unusable start date."""

    status_code = 400
    kind = "invalid_request"

    def __init__(self, message: str, invalid_fields: Optional[list[str]] = None):
        details = {"invalid_fields": invalid_fields} if invalid_fields else {}
        super().__init__(message, details)


class PersonNotFound(StargateError):
    status_code = 404
    kind = "person_not_found"

    def __init__(self, name: str):
        super().__init__(f"Person '{name}' not found", {"name": name})


class PersonAlreadyExists(StargateError):
    status_code = 409
    kind = "person_already_exists"

    def __init__(self, name: str):
        super().__init__(f"Person '{name}' already exists", {"name": name})


class DuplicateDuty(StargateError):
    """The person already has a duty with this title starting on this date."""

    status_code = 409
    kind = "duplicate_duty"

    def __init__(self, name: str, duty_title: str, duty_start_date):
        super().__init__(
            f"Duty '{duty_title}' starting {duty_start_date.isoformat()} "
            f"already recorded for '{name}'",
            {"name": name, "duty_title": duty_title,
             "duty_start_date": duty_start_date.isoformat()},
        )


class NonPositiveDutyDuration(StargateError):
    """The new duty does not start strictly after the current open duty."""

    status_code = 409
    kind = "non_positive_duty_duration"

    def __init__(self, name: str, duty_start_date, current_start_date):
        super().__init__(
            f"Duty start {duty_start_date.isoformat()} must be after the current "
            f"duty start {current_start_date.isoformat()} for '{name}'",
            {"name": name, "duty_start_date": duty_start_date.isoformat(),
             "current_duty_start_date": current_start_date.isoformat()},
        )


class ConcurrencyConflict(StargateError):
    status_code = 409
    kind = "concurrency_conflict"

    def __init__(self, name: str, attempts: int):
        super().__init__(
            f"Duty for '{name}' could not be recorded after {attempts} attempts "
            "because of concurrent updates",
            {"name": name, "attempts": attempts},
        )


class StoreUnavailable(StargateError):
    """The underlying database failed; never retried here."""

    status_code = 503
    kind = "store_unavailable"

    def __init__(self, operation: str, message: str):
        super().__init__(message, {"operation": operation})
