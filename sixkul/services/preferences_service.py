# sixkul/services/preferences_service.py
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from ..core.exceptions import ValidationError
from ..models import StudentPreferences, StudentProfile, ScheduleDefaultView

SCHEDULE_RANGE_OPTIONS = (7, 14, 30)
NOTIFY_FIELDS = ("notify_announcements", "notify_schedule_changes", "notify_attendance")


def preferences_to_dict(prefs: StudentPreferences) -> Dict[str, Any]:
    return {
        "notifyAnnouncements": prefs.notify_announcements,
        "notifyScheduleChanges": prefs.notify_schedule_changes,
        "notifyAttendance": prefs.notify_attendance,
        "scheduleDefaultView": prefs.schedule_default_view,
        "scheduleRangeDays": prefs.schedule_range_days,
    }


class PreferencesService(BaseService[StudentPreferences]):
    def __init__(self, db: AsyncSession):
        super().__init__(StudentPreferences, db)

    async def get_for_student(self, student: StudentProfile) -> StudentPreferences:
        """Return the student's preferences, creating the defaults on first access."""
        result = await self.db.execute(
            select(StudentPreferences).where(StudentPreferences.student_id == student.id)
        )
        prefs = result.scalar_one_or_none()
        if prefs is None:
            prefs = StudentPreferences(
                student_id=student.id,
                notify_announcements=True,
                notify_schedule_changes=True,
                notify_attendance=True,
                schedule_default_view=ScheduleDefaultView.DATE.value,
                schedule_range_days=7,
            )
            self.db.add(prefs)
            await self.db.commit()
        return prefs

    async def update_for_student(self, student: StudentProfile, changes: Dict[str, Any]) -> StudentPreferences:
        errors = []
        view = changes.get("schedule_default_view")
        if view is not None and view not in [v.value for v in ScheduleDefaultView]:
            errors.append({"field": "scheduleDefaultView", "message": "Tampilan harus 'date' atau 'extracurricular'"})
        range_days = changes.get("schedule_range_days")
        if range_days is not None and range_days not in SCHEDULE_RANGE_OPTIONS:
            errors.append({"field": "scheduleRangeDays", "message": "Rentang harus 7, 14, atau 30 hari"})
        if errors:
            raise ValidationError("Preferensi tidak valid.", errors)

        prefs = await self.get_for_student(student)
        for field in NOTIFY_FIELDS + ("schedule_default_view", "schedule_range_days"):
            if changes.get(field) is not None:
                setattr(prefs, field, changes[field])
        await self.db.commit()
        return prefs
