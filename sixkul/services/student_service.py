# sixkul/services/student_service.py
"""Read models behind the student pages: dashboard, attendance, schedule, catalogue."""
import logging
from collections import Counter, OrderedDict
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from .announcement_service import AnnouncementService
from .enrollment_service import EnrollmentService
from .preferences_service import PreferencesService
from ..core.cache import cache_manager
from ..core.exceptions import ValidationError
from ..models import (
    Attendance, AttendanceStatus, Enrollment, EnrollmentStatus, Extracurricular, ExtracurricularStatus,
    Session, StudentProfile, ScheduleDefaultView,
)
from ..utils.dates import today, week_bounds, format_indonesian_date, relative_time
from ..utils.serializers import session_to_dict, announcement_to_dict, extracurricular_brief

logger = logging.getLogger(__name__)

DASHBOARD_ATTENDED = (
    AttendanceStatus.PRESENT.value,
    AttendanceStatus.SICK.value,
    AttendanceStatus.PERMISSION.value,
)
UPCOMING_LIMIT = 10
RECENT_ANNOUNCEMENTS = 5


def summarize_attendance(statuses: List[str]) -> Dict[str, int]:
    counts = Counter(statuses)
    total = len(statuses)
    present = counts[AttendanceStatus.PRESENT.value]
    return {
        "total": total,
        "present": present,
        "sick": counts[AttendanceStatus.SICK.value],
        "permission": counts[AttendanceStatus.PERMISSION.value],
        "alpha": counts[AttendanceStatus.ALPHA.value],
        "late": counts[AttendanceStatus.LATE.value],
        "percentage": round(present / total * 100) if total else 0,
        "absentLate": counts[AttendanceStatus.ALPHA.value] + counts[AttendanceStatus.LATE.value],
    }


class StudentService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _active_enrollments(self, student: StudentProfile) -> List[Enrollment]:
        return await EnrollmentService(self.db).get_by_student(student.id, EnrollmentStatus.ACTIVE.value)

    async def attendance(self, student: StudentProfile, group_by: Optional[str] = None) -> Dict[str, Any]:
        group_by = group_by or ScheduleDefaultView.DATE.value
        if group_by not in [v.value for v in ScheduleDefaultView]:
            raise ValidationError("Pengelompokan harus 'date' atau 'extracurricular'.")

        enrollments = await self._active_enrollments(student)
        by_id = {e.id: e for e in enrollments}
        if not enrollments:
            return {"records": [], "groups": [], "summary": summarize_attendance([]), "extracurriculars": []}

        result = await self.db.execute(
            select(Attendance)
            .outerjoin(Session, Session.id == Attendance.session_id)
            .where(
                Attendance.enrollment_id.in_(list(by_id)),
                Attendance.is_deleted == False,
                # Rows without a session were taken by date and always count
                (Attendance.session_id.is_(None)) | (Session.is_cancelled == False),
            )
            .order_by(desc(Attendance.date))
        )
        attendances = result.scalars().all()

        records = []
        for attendance in attendances:
            ekskul = by_id[attendance.enrollment_id].extracurricular
            session = attendance.session
            records.append({
                "id": str(attendance.id),
                "date": attendance.date.isoformat(),
                "dateLabel": format_indonesian_date(attendance.date),
                "status": attendance.status,
                "notes": attendance.notes,
                "enrollmentId": str(attendance.enrollment_id),
                "session": {
                    "id": str(session.id),
                    "startTime": session.start_time,
                    "endTime": session.end_time,
                } if session else None,
                "extracurricular": {"id": str(ekskul.id), "name": ekskul.name, "category": ekskul.category},
            })

        groups: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        for record in records:
            if group_by == ScheduleDefaultView.DATE.value:
                key, label = record["date"], record["dateLabel"]
            else:
                key, label = record["extracurricular"]["id"], record["extracurricular"]["name"]
            groups.setdefault(key, {"key": key, "label": label, "records": []})["records"].append(record)

        return {
            "records": records,
            "groups": list(groups.values()),
            "summary": summarize_attendance([r["status"] for r in records]),
            "extracurriculars": [extracurricular_brief(e.extracurricular) for e in enrollments],
        }

    async def schedule(
        self,
        student: StudentProfile,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        prefs = await PreferencesService(self.db).get_for_student(student)
        start_date = start_date or today()
        end_date = end_date or (start_date + timedelta(days=prefs.schedule_range_days - 1))
        if start_date > end_date:
            raise ValidationError("Tanggal mulai harus sebelum tanggal selesai.")

        enrollments = await self._active_enrollments(student)
        ekskul_ids = [e.extracurricular_id for e in enrollments]
        sessions = []
        if ekskul_ids:
            result = await self.db.execute(
                select(Session).where(
                    Session.extracurricular_id.in_(ekskul_ids),
                    Session.is_deleted == False,
                    Session.is_cancelled == False,
                    Session.date >= start_date,
                    Session.date <= end_date,
                ).order_by(Session.date, Session.start_time)
            )
            sessions = [session_to_dict(s, include_extracurricular=True) for s in result.scalars().all()]
        return {
            "sessions": sessions,
            "range": {"start": start_date.isoformat(), "end": end_date.isoformat()},
            "defaultView": prefs.schedule_default_view,
        }

    async def history(self, student: StudentProfile) -> Dict[str, Any]:
        return await EnrollmentService(self.db).history(student)

    async def dashboard(self, student: StudentProfile) -> Dict[str, Any]:
        cache_key = cache_manager.make_key("student", student.id, "dashboard")
        cached = await cache_manager.get(cache_key)
        if cached is not None:
            return cached

        enrollments = await self._active_enrollments(student)
        enrollment_ids = [e.id for e in enrollments]
        ekskul_ids = [e.extracurricular_id for e in enrollments]

        attendance_percentage = 0
        if enrollment_ids:
            result = await self.db.execute(
                select(Attendance.status).where(
                    Attendance.enrollment_id.in_(enrollment_ids),
                    Attendance.is_deleted == False,
                )
            )
            statuses = result.scalars().all()
            if statuses:
                attended = sum(1 for s in statuses if s in DASHBOARD_ATTENDED)
                attendance_percentage = round(attended / len(statuses) * 100)

        upcoming = []
        sessions_this_week = 0
        if ekskul_ids:
            start = today()
            _, week_end = week_bounds(start)
            live = (
                Session.extracurricular_id.in_(ekskul_ids),
                Session.is_deleted == False,
                Session.is_cancelled == False,
            )
            result = await self.db.execute(
                select(Session).where(*live, Session.date >= start)
                .order_by(Session.date, Session.start_time).limit(UPCOMING_LIMIT)
            )
            upcoming = [session_to_dict(s, include_extracurricular=True) for s in result.scalars().all()]
            sessions_this_week = (await self.db.execute(
                select(func.count(Session.id)).where(*live, Session.date >= start, Session.date <= week_end)
            )).scalar() or 0

        announcements_service = AnnouncementService(self.db)
        recent = []
        for announcement in await announcements_service.list_for_student(student, limit=RECENT_ANNOUNCEMENTS):
            row = announcement_to_dict(announcement)
            row["relativeTime"] = relative_time(announcement.created_at)
            recent.append(row)

        data = {
            "studentName": student.user.full_name,
            "stats": {
                "activeEnrollmentsCount": len(enrollments),
                "attendancePercentage": attendance_percentage,
                "sessionsThisWeek": sessions_this_week,
                "newAnnouncementsCount": await announcements_service.count_recent_for_student(student, days=7),
            },
            "upcomingSessions": upcoming,
            "recentAnnouncements": recent,
            "activeExtracurriculars": [extracurricular_brief(e.extracurricular) for e in enrollments],
        }
        await cache_manager.set(cache_key, data, expire=60)
        return data

    async def available_extracurriculars(self, student: StudentProfile) -> List[Dict[str, Any]]:
        result = await self.db.execute(
            select(Extracurricular).where(
                Extracurricular.is_deleted == False,
                Extracurricular.status == ExtracurricularStatus.ACTIVE.value,
            ).order_by(Extracurricular.name)
        )
        ekskuls = result.scalars().all()

        mine = await EnrollmentService(self.db).get_by_student(student.id)
        # Newest enrollment per extracurricular wins
        status_by_ekskul = {}
        for enrollment in mine:
            status_by_ekskul.setdefault(enrollment.extracurricular_id, enrollment.status)

        items = []
        for ekskul in ekskuls:
            row = extracurricular_brief(ekskul)
            row["description"] = ekskul.description
            row["enrollmentStatus"] = status_by_ekskul.get(ekskul.id)
            items.append(row)
        return items
