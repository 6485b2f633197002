# sixkul/schemas/attendance_schemas.py
import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from .base import CamelModel


class AttendanceRecord(CamelModel):
    enrollment_id: UUID
    # Checked against AttendanceStatus by the service to report the record index
    status: str
    notes: Optional[str] = Field(default=None, max_length=500)


class SessionAttendanceSave(CamelModel):
    records: List[AttendanceRecord] = Field(default_factory=list)


class BatchAttendanceSave(CamelModel):
    date: datetime.date
    session_id: Optional[UUID] = None
    records: List[AttendanceRecord] = Field(default_factory=list)
