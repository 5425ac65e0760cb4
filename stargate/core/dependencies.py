# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire repositories and services.
"""

from stargate.core.database import engine
from stargate.repositories import DutyRepository, PersonRepository, StatusRepository
from stargate.services.duty_service import DutyService
from stargate.services.person_service import PersonService

# ── Singleton instances ──
_person_repo = PersonRepository(engine)
_status_repo = StatusRepository()
_duty_repo = DutyRepository(engine)

_person_service = PersonService(person_repo=_person_repo)
_duty_service = DutyService(
    person_repo=_person_repo,
    status_repo=_status_repo,
    duty_repo=_duty_repo,
)


# ── FastAPI dependency functions ──
def get_person_service() -> PersonService:
    return _person_service


def get_duty_service() -> DutyService:
    return _duty_service


def get_person_repo() -> PersonRepository:
    return _person_repo
