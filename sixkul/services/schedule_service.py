# sixkul/services/schedule_service.py
import logging
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from .notification_service import NotificationService
from ..core.exceptions import ValidationError, BusinessRuleError, NotFoundError
from ..models import Schedule, Session, Extracurricular, DayOfWeek
from ..utils.cache_invalidation import invalidate_student_cache
from ..utils.dates import WEEKDAYS, parse_hhmm

logger = logging.getLogger(__name__)


def validate_time_range(start_time: str, end_time: str, location: str = None, require_location: bool = True):
    """Raise ValidationError unless both times are HH:MM and end is after start."""
    errors = []
    try:
        start = parse_hhmm(start_time)
    except ValueError:
        start = None
        errors.append({"field": "startTime", "message": "Format waktu harus HH:MM"})
    try:
        end = parse_hhmm(end_time)
    except ValueError:
        end = None
        errors.append({"field": "endTime", "message": "Format waktu harus HH:MM"})
    if start and end and end <= start:
        errors.append({"field": "endTime", "message": "Waktu selesai harus setelah waktu mulai"})
    if require_location and not (location or "").strip():
        errors.append({"field": "location", "message": "Lokasi wajib diisi"})
    if errors:
        raise ValidationError("Data jadwal tidak valid.", errors)


class ScheduleService(BaseService[Schedule]):
    not_found_message = "Jadwal tidak ditemukan."

    def __init__(self, db: AsyncSession):
        super().__init__(Schedule, db)
        self.notifications = NotificationService(db)

    async def list_schedules(self, extracurricular_id: UUID) -> List[Schedule]:
        weekday_order = case(
            {day: index for index, day in enumerate(WEEKDAYS)},
            value=Schedule.day_of_week,
            else_=len(WEEKDAYS),
        )
        result = await self.db.execute(
            select(Schedule)
            .where(Schedule.extracurricular_id == extracurricular_id, Schedule.is_deleted == False)
            .order_by(weekday_order, Schedule.start_time)
        )
        return result.scalars().all()

    async def get_for_extracurricular(self, schedule_id: UUID, extracurricular_id: UUID) -> Schedule:
        schedule = await self.get(schedule_id)
        if schedule is None or schedule.extracurricular_id != extracurricular_id:
            raise NotFoundError(self.not_found_message)
        return schedule

    async def create_schedule(self, extracurricular: Extracurricular, data: Dict[str, Any]) -> Schedule:
        day = DayOfWeek(data["day_of_week"]).value
        validate_time_range(data["start_time"], data["end_time"], data.get("location"))

        schedule = Schedule(
            extracurricular=extracurricular,
            day_of_week=day,
            start_time=data["start_time"],
            end_time=data["end_time"],
            location=data["location"].strip(),
        )
        self.db.add(schedule)
        await self.db.flush()
        await self.notifications.notify_routine_schedule_change(extracurricular, schedule, "created")
        await self.db.commit()
        await invalidate_student_cache()
        logger.info(f"Schedule {schedule.id} created for extracurricular {extracurricular.id}")
        return schedule

    async def update_schedule(self, extracurricular: Extracurricular, schedule_id: UUID, data: Dict[str, Any]) -> Schedule:
        schedule = await self.get_for_extracurricular(schedule_id, extracurricular.id)

        day = DayOfWeek(data["day_of_week"]).value if data.get("day_of_week") else schedule.day_of_week
        start_time = data.get("start_time") or schedule.start_time
        end_time = data.get("end_time") or schedule.end_time
        location = data["location"] if data.get("location") is not None else schedule.location
        validate_time_range(start_time, end_time, location)

        schedule.day_of_week = day
        schedule.start_time = start_time
        schedule.end_time = end_time
        schedule.location = location.strip()
        await self.notifications.notify_routine_schedule_change(extracurricular, schedule, "updated")
        await self.db.commit()
        await invalidate_student_cache()
        logger.info(f"Schedule {schedule.id} updated")
        return schedule

    async def delete_schedule(self, extracurricular: Extracurricular, schedule_id: UUID) -> None:
        schedule = await self.get_for_extracurricular(schedule_id, extracurricular.id)

        used = await self.db.execute(
            select(func.count(Session.id)).where(
                Session.schedule_id == schedule.id,
                Session.is_deleted == False,
            )
        )
        if used.scalar():
            raise BusinessRuleError("Tidak dapat menghapus jadwal yang sudah memiliki pertemuan")

        schedule.is_deleted = True
        await self.db.commit()
        logger.info(f"Schedule {schedule.id} deleted")
