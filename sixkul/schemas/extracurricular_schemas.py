# sixkul/schemas/extracurricular_schemas.py
"""Extracurricular, routine schedule and session payloads."""
import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from .base import CamelModel
from ..models import ExtracurricularStatus, DayOfWeek


class ExtracurricularCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    logo_url: Optional[str] = Field(default=None, max_length=500)
    status: Optional[ExtracurricularStatus] = None
    pembina_id: UUID


class ExtracurricularUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    logo_url: Optional[str] = Field(default=None, max_length=500)
    status: Optional[ExtracurricularStatus] = None
    pembina_id: Optional[UUID] = None


# Times stay plain strings so the service can report HH:MM problems per field

class ScheduleCreate(CamelModel):
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    location: str = ""


class ScheduleUpdate(CamelModel):
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None


class SessionGenerate(CamelModel):
    start_date: datetime.date
    end_date: datetime.date


class SessionCreate(CamelModel):
    date: datetime.date
    start_time: str
    end_time: str
    location: str = ""
    notes: Optional[str] = None


class SessionUpdate(CamelModel):
    date: Optional[datetime.date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
