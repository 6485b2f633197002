"""Student portal: dashboard, attendance, schedule, announcements and preferences."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import get_current_student
from ...models import StudentProfile
from ...schemas.preferences_schemas import PreferencesUpdate
from ...services.announcement_service import AnnouncementService
from ...services.preferences_service import PreferencesService, preferences_to_dict
from ...services.student_service import StudentService
from ...utils.dates import relative_time
from ...utils.responses import success_response
from ...utils.serializers import announcement_to_dict

router = APIRouter(prefix="/api/student", tags=["Student"])


@router.get("/dashboard")
async def dashboard(student: StudentProfile = Depends(get_current_student), db: AsyncSession = Depends(get_db)):
    return success_response(await StudentService(db).dashboard(student))


@router.get("/attendance")
async def attendance(
    group_by: Optional[str] = Query(None, alias="groupBy"),
    student: StudentProfile = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await StudentService(db).attendance(student, group_by))


@router.get("/schedule")
async def schedule(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    student: StudentProfile = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await StudentService(db).schedule(student, start_date, end_date))


@router.get("/announcements")
async def announcements(
    limit: Optional[int] = Query(None, ge=1, le=100),
    student: StudentProfile = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    items = []
    for announcement in await AnnouncementService(db).list_for_student(student, limit=limit):
        row = announcement_to_dict(announcement)
        row["relativeTime"] = relative_time(announcement.created_at)
        items.append(row)
    return success_response(items)


@router.get("/preferences")
async def get_preferences(student: StudentProfile = Depends(get_current_student), db: AsyncSession = Depends(get_db)):
    prefs = await PreferencesService(db).get_for_student(student)
    return success_response(preferences_to_dict(prefs))


@router.put("/preferences")
async def update_preferences(
    payload: PreferencesUpdate,
    student: StudentProfile = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    prefs = await PreferencesService(db).update_for_student(student, payload.model_dump(exclude_unset=True))
    return success_response(preferences_to_dict(prefs), "Preferensi berhasil disimpan")
