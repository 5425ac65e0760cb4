# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package — re-exports the person, status and duty repositories."""
from stargate.repositories.duty_repository import DutyRepository
from stargate.repositories.person_repository import PersonRepository
from stargate.repositories.status_repository import StatusRepository

__all__ = ["DutyRepository", "PersonRepository", "StatusRepository"]
