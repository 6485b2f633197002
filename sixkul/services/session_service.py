# sixkul/services/session_service.py
"""Concrete meetings: generation from weekly schedules, ad-hoc sessions, cancellation."""
import logging
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from .notification_service import NotificationService
from .schedule_service import ScheduleService, validate_time_range
from ..core.exceptions import ValidationError, BusinessRuleError, NotFoundError
from ..models import Session, Schedule, Attendance, Extracurricular
from ..utils.cache_invalidation import invalidate_student_cache, invalidate_admin_cache
from ..utils.dates import daterange, weekday_name
from ..utils.serializers import session_to_dict

logger = logging.getLogger(__name__)

MAX_GENERATION_DAYS = 366


class SessionService(BaseService[Session]):
    not_found_message = "Pertemuan tidak ditemukan."

    def __init__(self, db: AsyncSession):
        super().__init__(Session, db)
        self.notifications = NotificationService(db)

    async def get_for_extracurricular(self, session_id: UUID, extracurricular_id: UUID) -> Session:
        session = await self.get(session_id)
        if session is None or session.extracurricular_id != extracurricular_id:
            raise NotFoundError(self.not_found_message)
        return session

    async def generate_sessions_from_schedules(
        self,
        extracurricular: Extracurricular,
        start_date: date,
        end_date: date,
    ) -> Dict[str, Any]:
        """Materialise one session per matching weekday in ``[start_date, end_date]``.

        Existing non-deleted sessions for the same (date, schedule) are left
        alone, so running the generation twice creates nothing the second time.
        """
        if start_date > end_date:
            raise ValidationError("Tanggal mulai harus sebelum tanggal selesai.")
        if (end_date - start_date).days >= MAX_GENERATION_DAYS:
            raise ValidationError(f"Rentang tanggal maksimal {MAX_GENERATION_DAYS} hari.")

        schedules = await ScheduleService(self.db).list_schedules(extracurricular.id)
        if not schedules:
            raise BusinessRuleError("Tidak ada jadwal rutin. Buat jadwal terlebih dahulu.")

        result = await self.db.execute(
            select(Session.date, Session.schedule_id).where(
                Session.extracurricular_id == extracurricular.id,
                Session.date >= start_date,
                Session.date <= end_date,
                Session.schedule_id.is_not(None),
                Session.is_deleted == False,
            )
        )
        existing = {(row.date, row.schedule_id) for row in result.all()}

        by_weekday: Dict[str, List[Schedule]] = {}
        for schedule in schedules:
            by_weekday.setdefault(schedule.day_of_week, []).append(schedule)

        new_sessions = []
        for day in daterange(start_date, end_date):
            for schedule in by_weekday.get(weekday_name(day), []):
                if (day, schedule.id) in existing:
                    continue
                new_sessions.append(Session(
                    extracurricular=extracurricular,
                    schedule=schedule,
                    date=day,
                    start_time=schedule.start_time,
                    end_time=schedule.end_time,
                    location=schedule.location,
                    is_cancelled=False,
                ))

        if not new_sessions:
            return {"count": 0, "message": "Semua pertemuan dalam rentang tanggal sudah ada."}

        self.db.add_all(new_sessions)
        await self.db.commit()
        await invalidate_student_cache()
        await invalidate_admin_cache()
        logger.info(
            f"Generated {len(new_sessions)} sessions for extracurricular {extracurricular.id} "
            f"between {start_date} and {end_date}"
        )
        return {"count": len(new_sessions), "message": f"{len(new_sessions)} pertemuan berhasil dibuat."}

    async def list_sessions(
        self,
        extracurricular_id: UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_cancelled: bool = True,
    ) -> List[Dict[str, Any]]:
        stmt = select(Session).where(
            Session.extracurricular_id == extracurricular_id,
            Session.is_deleted == False,
        )
        if start_date:
            stmt = stmt.where(Session.date >= start_date)
        if end_date:
            stmt = stmt.where(Session.date <= end_date)
        if not include_cancelled:
            stmt = stmt.where(Session.is_cancelled == False)
        stmt = stmt.order_by(Session.date, Session.start_time)
        sessions = (await self.db.execute(stmt)).scalars().all()

        counts = await self.attendance_counts([s.id for s in sessions])
        data = []
        for session in sessions:
            row = session_to_dict(session)
            row["attendanceCount"] = counts.get(session.id, 0)
            data.append(row)
        return data

    async def attendance_counts(self, session_ids: List[UUID]) -> Dict[UUID, int]:
        if not session_ids:
            return {}
        result = await self.db.execute(
            select(Attendance.session_id, func.count(Attendance.id))
            .where(Attendance.session_id.in_(session_ids), Attendance.is_deleted == False)
            .group_by(Attendance.session_id)
        )
        return dict(result.all())

    async def create_session(self, extracurricular: Extracurricular, data: Dict[str, Any]) -> Session:
        """Ad-hoc meeting outside the weekly schedule."""
        validate_time_range(data["start_time"], data["end_time"], data.get("location"))
        session = Session(
            extracurricular=extracurricular,
            schedule=None,
            date=data["date"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            location=data["location"].strip(),
            notes=data.get("notes"),
            is_cancelled=False,
        )
        self.db.add(session)
        await self.db.flush()
        await self.notifications.notify_schedule_change(extracurricular, "created", session.date)
        await self.db.commit()
        await invalidate_student_cache()
        await invalidate_admin_cache()
        logger.info(f"Ad-hoc session {session.id} created on {session.date}")
        return session

    async def update_session(self, extracurricular: Extracurricular, session_id: UUID, data: Dict[str, Any]) -> Session:
        session = await self.get_for_extracurricular(session_id, extracurricular.id)
        if session.is_cancelled:
            raise BusinessRuleError("Pertemuan yang dibatalkan tidak dapat diubah.")

        start_time = data.get("start_time") or session.start_time
        end_time = data.get("end_time") or session.end_time
        location = data["location"] if data.get("location") is not None else session.location
        validate_time_range(start_time, end_time, location)

        if data.get("date") is not None and data["date"] != session.date:
            recorded = await self.attendance_counts([session.id])
            if recorded.get(session.id):
                raise BusinessRuleError("Tanggal pertemuan yang sudah memiliki absensi tidak dapat diubah.")
            session.date = data["date"]
        session.start_time = start_time
        session.end_time = end_time
        session.location = location.strip()
        if "notes" in data:
            session.notes = data["notes"]

        await self.notifications.notify_schedule_change(extracurricular, "updated", session.date)
        await self.db.commit()
        await invalidate_student_cache()
        await invalidate_admin_cache()
        logger.info(f"Session {session.id} updated")
        return session

    async def cancel_session(self, extracurricular: Extracurricular, session_id: UUID) -> Session:
        session = await self.get_for_extracurricular(session_id, extracurricular.id)
        if session.is_cancelled:
            return session
        session.is_cancelled = True
        await self.notifications.notify_schedule_change(extracurricular, "cancelled", session.date)
        await self.db.commit()
        await invalidate_student_cache()
        await invalidate_admin_cache()
        logger.info(f"Session {session.id} cancelled")
        return session

    async def delete_session(self, extracurricular: Extracurricular, session_id: UUID) -> None:
        session = await self.get_for_extracurricular(session_id, extracurricular.id)
        recorded = await self.attendance_counts([session.id])
        if recorded.get(session.id):
            raise BusinessRuleError("Tidak dapat menghapus pertemuan yang sudah memiliki absensi")
        session.is_deleted = True
        await self.db.commit()
        await invalidate_student_cache()
        await invalidate_admin_cache()
        logger.info(f"Session {session.id} deleted")
