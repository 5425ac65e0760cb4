# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Astronaut duty endpoints — create a duty, read duty history.
Thin HTTP layer — delegates ALL logic to DutyService.
"""

from fastapi import APIRouter, Depends

from stargate.schemas import DutyCreate, DutyCreated, DutyHistory, DutyOut, PersonOut
from stargate.services.dates import normalize_to_utc_date
from stargate.services.duty_service import DutyService
from stargate.core.dependencies import get_duty_service

router = APIRouter(prefix="/api/v1", tags=["Duties"])


@router.post("/duties", status_code=201, response_model=DutyCreated)
def create_duty(
    payload: DutyCreate,
    service: DutyService = Depends(get_duty_service),
):
    """Record a new duty, closing the person's current one."""
    duty_id = service.create_duty(
        name=payload.name,
        rank=payload.rank,
        duty_title=payload.duty_title,
        duty_start_date=payload.duty_start_date,
    )
    return DutyCreated(
        id=duty_id,
        name=payload.name,
        duty_title=payload.duty_title,
        duty_start_date=normalize_to_utc_date(payload.duty_start_date),
    )


@router.get("/duties/{name}", response_model=DutyHistory)
def get_duty_history(
    name: str,
    service: DutyService = Depends(get_duty_service),
):
    """A person's status and full duty history, newest first."""
    history = service.get_duty_history(name)
    return DutyHistory(
        person=PersonOut(**history["person"]),
        duties=[DutyOut(**d) for d in history["duties"]],
    )
