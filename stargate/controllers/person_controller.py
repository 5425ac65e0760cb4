# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Person registry endpoints.
Thin HTTP layer — delegates ALL logic to PersonService.
Domain errors are translated to HTTP by the handler registered in main.py.
"""

from fastapi import APIRouter, Depends

from stargate.schemas import PersonCreate, PersonOut, PeopleList
from stargate.services.person_service import PersonService
from stargate.core.dependencies import get_person_service

router = APIRouter(prefix="/api/v1", tags=["People"])


@router.post("/people", status_code=201, response_model=PersonOut)
def create_person(
    payload: PersonCreate,
    service: PersonService = Depends(get_person_service),
):
    """Register a new person under a unique name."""
    return PersonOut(**service.create_person(payload.name))


@router.get("/people", response_model=PeopleList)
def list_people(service: PersonService = Depends(get_person_service)):
    """List every person with their current rank, title and career dates."""
    people = service.list_people()
    return PeopleList(total=len(people), people=[PersonOut(**p) for p in people])


@router.get("/people/{name}", response_model=PersonOut)
def get_person(
    name: str,
    service: PersonService = Depends(get_person_service),
):
    """Fetch one person by exact name."""
    return PersonOut(**service.get_person(name))
