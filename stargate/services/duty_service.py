# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Duty assignment lifecycle.

Records a new duty for a person and keeps the career timeline consistent:
  * at most one open duty per person
  * the previous open duty is closed the day before the new one starts
  * the status projection follows the newest duty (rank, title, retirement)

Validation and mutation run in ONE transaction. Concurrent writers for the
same person are serialised by a row lock where the dialect has one, and by
the store's unique indexes plus a bounded retry everywhere else.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Union

from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from stargate.core.config import settings
from stargate.core.exceptions import (
    ConcurrencyConflict,
    DuplicateDuty,
    InvalidRequest,
    NonPositiveDutyDuration,
    PersonNotFound,
    StargateError,
    StoreUnavailable,
)
from stargate.core.logging import get_logger
from stargate.metrics import DUTIES_CREATED, DUTIES_REJECTED, DUTY_CREATE_LATENCY, DUTY_RETRIES
from stargate.repositories import DutyRepository, PersonRepository, StatusRepository
from stargate.services.dates import (
    day_before,
    is_retirement,
    is_unset_date,
    normalize_to_utc_date,
)

logger = get_logger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """
    True when a unique index rejected the write, i.e. another writer got there
    first. Foreign-key, NOT NULL and CHECK failures are not races.
    """
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code == UNIQUE_VIOLATION_SQLSTATE
    message = str(orig)
    return "UNIQUE constraint failed" in message or "Duplicate entry" in message


class _OpenDutyLost(Exception):
    """The open duty was closed by another writer between read and update."""


class DutyService:
    """Business logic for creating duties and reading duty history."""

    def __init__(
        self,
        person_repo: PersonRepository,
        status_repo: StatusRepository,
        duty_repo: DutyRepository,
        max_attempts: Optional[int] = None,
    ) -> None:
        self._people = person_repo
        self._statuses = status_repo
        self._duties = duty_repo
        self._max_attempts = max(1, max_attempts or settings.DUTY_CREATE_MAX_ATTEMPTS)

    # ── Commands ──

    def create_duty(
        self,
        name: str,
        rank: str,
        duty_title: str,
        duty_start_date: Union[date, datetime, None],
    ) -> str:
        """
        Record a new duty and return its id.

        Raises InvalidRequest, PersonNotFound, DuplicateDuty,
        NonPositiveDutyDuration, ConcurrencyConflict or StoreUnavailable.
        Nothing is written unless the whole operation succeeds.
        """
        self._validate_fields(name, rank, duty_title, duty_start_date)
        start = normalize_to_utc_date(duty_start_date)
        retiring = is_retirement(duty_title)

        with DUTY_CREATE_LATENCY.time():
            for attempt in range(1, self._max_attempts + 1):
                try:
                    with self._duties.begin_transaction() as conn:
                        duty_id = self._apply(conn, name, rank, duty_title, start, retiring)
                except (IntegrityError, _OpenDutyLost) as exc:
                    if isinstance(exc, IntegrityError) and not is_unique_violation(exc):
                        raise StoreUnavailable("create_duty", f"Database error: {exc}") from exc
                    DUTY_RETRIES.inc()
                    logger.warning(
                        "Concurrent duty write person=%s attempt=%d/%d: %s",
                        name, attempt, self._max_attempts, exc,
                    )
                    continue
                except StargateError as exc:
                    DUTIES_REJECTED.labels(reason=exc.kind).inc()
                    raise
                except SQLAlchemyError as exc:
                    raise StoreUnavailable("create_duty", f"Database error: {exc}") from exc

                DUTIES_CREATED.labels(kind="retirement" if retiring else "assignment").inc()
                logger.info(
                    "Duty created id=%s person=%s rank=%s title=%s start=%s retired=%s",
                    duty_id, name, rank, duty_title, start.isoformat(), retiring,
                )
                return duty_id

        DUTIES_REJECTED.labels(reason=ConcurrencyConflict.kind).inc()
        raise ConcurrencyConflict(name, self._max_attempts)

    # ── Queries ──

    def get_duty_history(self, name: str) -> Dict[str, Any]:
        """Person status projection plus every duty, newest start first."""
        if not name or not name.strip():
            raise InvalidRequest("Name is required.", ["name"])
        try:
            history = self._duties.history_by_name(name)
        except SQLAlchemyError as exc:
            raise StoreUnavailable("get_duty_history", f"Database error: {exc}") from exc
        if history is None:
            raise PersonNotFound(name)
        person, duties = history
        return {"person": person, "duties": duties}

    # ── Internal ──

    @staticmethod
    def _validate_fields(name, rank, duty_title, duty_start_date) -> None:
        blank = [
            field for field, value in
            (("name", name), ("rank", rank), ("duty_title", duty_title))
            if not value or not value.strip()
        ]
        if blank:
            DUTIES_REJECTED.labels(reason=InvalidRequest.kind).inc()
            raise InvalidRequest("Name, rank, and duty title are required.", blank)
        if is_unset_date(duty_start_date):
            DUTIES_REJECTED.labels(reason=InvalidRequest.kind).inc()
            raise InvalidRequest("Duty start date is required.", ["duty_start_date"])

    def _apply(self, conn: Connection, name: str, rank: str, duty_title: str,
               start: date, retiring: bool) -> str:
        person = self._people.find_for_update(conn, name)
        if person is None:
            raise PersonNotFound(name)
        person_id = person["id"]

        if self._duties.exists(conn, person_id, duty_title, start):
            raise DuplicateDuty(name, duty_title, start)

        status = self._statuses.get_by_person(conn, person_id)
        open_duty = self._current_open_duty(conn, person_id, status)
        if open_duty is not None and start <= open_duty["duty_start_date"]:
            raise NonPositiveDutyDuration(name, start, open_duty["duty_start_date"])

        now = datetime.now(timezone.utc)
        if open_duty is not None and not self._duties.close(conn, open_duty["id"], day_before(start)):
            raise _OpenDutyLost(f"duty {open_duty['id']} no longer open")

        duty_id = str(uuid.uuid4())
        self._duties.insert_open(conn, duty_id, person_id, rank, duty_title, start, now)

        career_end = day_before(start) if retiring else None
        if status is None:
            earliest = self._duties.earliest_start(conn, person_id)
            career_start = min(earliest, start) if earliest else start
            self._statuses.insert(
                conn, str(uuid.uuid4()), person_id, rank, duty_title,
                career_start, career_end, duty_id, now,
            )
        else:
            self._statuses.update_current(
                conn, person_id, rank, duty_title, career_end, duty_id, now,
            )
        return duty_id

    def _current_open_duty(self, conn: Connection, person_id: str,
                           status: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Follow the status pointer; scan the ledger only when it is missing or stale."""
        if status is not None and status["current_duty_id"]:
            duty = self._duties.get_open_by_id(conn, status["current_duty_id"])
            if duty is not None:
                return duty
        return self._duties.find_open(conn, person_id)
