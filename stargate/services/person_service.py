# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: People — creation and read-only projections.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from stargate.core.exceptions import (
    InvalidRequest,
    PersonAlreadyExists,
    PersonNotFound,
    StoreUnavailable,
)
from stargate.core.logging import get_logger
from stargate.metrics import PEOPLE_CREATED
from stargate.repositories import PersonRepository

logger = get_logger(__name__)

DEFAULT_PEOPLE: tuple[dict[str, Any], ...] = (
    {
        "name": "John Doe",
        "duties": [
            {"rank": "1LT", "duty_title": "Commander", "duty_start_date": date(2020, 1, 1)},
        ],
    },
    {"name": "Jane Doe", "duties": []},
)


class PersonService:
    """Business logic for the person registry."""

    def __init__(self, person_repo: PersonRepository) -> None:
        self._people = person_repo

    # ── Commands ──

    def create_person(self, name: str) -> Dict[str, Any]:
        """Register a person under a unique, exact-match name."""
        if not name or not name.strip():
            raise InvalidRequest("Name is required.", ["name"])
        try:
            if self._people.get_by_name(name) is not None:
                raise PersonAlreadyExists(name)
            person = self._people.create_person(
                str(uuid.uuid4()), name, datetime.now(timezone.utc)
            )
        except IntegrityError as exc:
            raise PersonAlreadyExists(name) from exc
        except SQLAlchemyError as exc:
            raise StoreUnavailable("create_person", f"Database error: {exc}") from exc

        PEOPLE_CREATED.inc()
        logger.info("Person created id=%s name=%s", person["person_id"], name)
        return person

    # ── Queries ──

    def list_people(self) -> List[Dict[str, Any]]:
        try:
            return self._people.list_people()
        except SQLAlchemyError as exc:
            raise StoreUnavailable("list_people", f"Database error: {exc}") from exc

    def get_person(self, name: str) -> Dict[str, Any]:
        if not name or not name.strip():
            raise InvalidRequest("Name is required.", ["name"])
        try:
            person = self._people.get_by_name(name)
        except SQLAlchemyError as exc:
            raise StoreUnavailable("get_person", f"Database error: {exc}") from exc
        if person is None:
            raise PersonNotFound(name)
        return person

    # ── Seed ──

    def seed_defaults(self, duty_service) -> int:
        """
        Create the default roster when the registry is empty.
        Duties go through the lifecycle service so the seed obeys every rule.
        Returns the number of people created (0 when already populated).
        """
        if self._people.count() > 0:
            return 0
        for entry in DEFAULT_PEOPLE:
            self.create_person(entry["name"])
            for duty in entry["duties"]:
                duty_service.create_duty(entry["name"], **duty)
        logger.info("Seeded %d default people", len(DEFAULT_PEOPLE))
        return len(DEFAULT_PEOPLE)
