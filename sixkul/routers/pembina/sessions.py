"""Concrete sessions of an extracurricular and the attendance taken at them."""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import get_owned_extracurricular
from ...models import Extracurricular
from ...schemas.attendance_schemas import SessionAttendanceSave
from ...schemas.extracurricular_schemas import SessionCreate, SessionGenerate, SessionUpdate
from ...services.attendance_service import AttendanceService
from ...services.session_service import SessionService
from ...utils.responses import success_response
from ...utils.serializers import session_to_dict

router = APIRouter(
    prefix="/api/pembina/extracurriculars/{extracurricular_id}/sessions",
    tags=["Pembina - Sessions"],
)


@router.get("")
async def list_sessions(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await SessionService(db).list_sessions(ekskul.id, start_date, end_date))


@router.post("/generate")
async def generate_sessions(
    payload: SessionGenerate,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    result = await SessionService(db).generate_sessions_from_schedules(ekskul, payload.start_date, payload.end_date)
    return success_response({"count": result["count"]}, result["message"])


@router.post("", status_code=201)
async def create_session(
    payload: SessionCreate,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    session = await SessionService(db).create_session(ekskul, payload.model_dump())
    return success_response(session_to_dict(session), "Pertemuan berhasil dibuat")


@router.put("/{session_id}")
async def update_session(
    session_id: UUID,
    payload: SessionUpdate,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    session = await SessionService(db).update_session(ekskul, session_id, payload.model_dump(exclude_unset=True))
    return success_response(session_to_dict(session), "Pertemuan berhasil diperbarui")


@router.patch("/{session_id}/cancel")
async def cancel_session(
    session_id: UUID,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    session = await SessionService(db).cancel_session(ekskul, session_id)
    return success_response(session_to_dict(session), "Pertemuan berhasil dibatalkan")


@router.delete("/{session_id}")
async def delete_session(
    session_id: UUID,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    await SessionService(db).delete_session(ekskul, session_id)
    return success_response(None, "Pertemuan berhasil dihapus")


@router.get("/{session_id}/attendance")
async def get_session_attendance(
    session_id: UUID,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await AttendanceService(db).get_session_attendance(ekskul, session_id))


@router.post("/{session_id}/attendance")
async def save_session_attendance(
    session_id: UUID,
    payload: SessionAttendanceSave,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    records = [record.model_dump() for record in payload.records]
    result = await AttendanceService(db).save_session_attendance(session_id, ekskul, records)
    return success_response(result, "Absensi berhasil disimpan!")
