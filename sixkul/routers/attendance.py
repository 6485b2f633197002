"""Date-based attendance shared by pembina and admin."""
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.deps import require_pembina_or_admin
from ..models import User
from ..schemas.attendance_schemas import BatchAttendanceSave
from ..services.attendance_service import AttendanceService
from ..services.extracurricular_service import ExtracurricularService
from ..utils.responses import success_response

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


@router.get("")
async def get_attendance_by_date(
    extracurricular_id: UUID = Query(..., alias="extracurricularId"),
    attendance_date: date = Query(..., alias="date"),
    user: User = Depends(require_pembina_or_admin),
    db: AsyncSession = Depends(get_db),
):
    await ExtracurricularService(db).validate_pembina_ownership(extracurricular_id, user)
    return success_response(await AttendanceService(db).get_attendance_by_date(extracurricular_id, attendance_date))


@router.post("/batch")
async def save_batch_attendance(
    payload: BatchAttendanceSave,
    user: User = Depends(require_pembina_or_admin),
    db: AsyncSession = Depends(get_db),
):
    records = [record.model_dump() for record in payload.records]
    result = await AttendanceService(db).save_batch_attendance(user, payload.date, records, payload.session_id)
    return success_response(result, "Absensi berhasil disimpan!")
