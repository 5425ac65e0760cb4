# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Person Schemas ──

class PersonCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Unique display name")


class PersonOut(BaseModel):
    person_id: str
    name: str
    current_rank: str = ""
    current_duty_title: str = ""
    career_start_date: Optional[date] = None
    career_end_date: Optional[date] = None
    is_retired: bool = False


class PeopleList(BaseModel):
    total: int
    people: List[PersonOut]


# ── Duty Schemas ──

class DutyCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Person name (exact match)")
    rank: str = Field(..., min_length=1, max_length=100)
    duty_title: str = Field(..., min_length=1, max_length=255)
    duty_start_date: datetime = Field(
        ..., description="Start instant; stored as its UTC calendar day"
    )


class DutyCreated(BaseModel):
    id: str
    name: str
    duty_title: str
    duty_start_date: date


class DutyOut(BaseModel):
    id: str
    person_id: str
    rank: str
    duty_title: str
    duty_start_date: date
    duty_end_date: Optional[date] = None


class DutyHistory(BaseModel):
    person: PersonOut
    duties: List[DutyOut]


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
