# sixkul/services/report_service.py
"""Period reports for the admin panel.

A session's attendance rate is the share of PRESENT or LATE records among the
records taken at that session. Sessions nobody recorded count as 0 %, so an
extracurricular that meets without taking attendance is not flattered.
"""
import logging
from collections import defaultdict
from datetime import date
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationError
from ..models import (
    Extracurricular, Session, Attendance, AttendanceStatus, Enrollment, EnrollmentStatus,
    PembinaProfile, StudentProfile, User,
)

logger = logging.getLogger(__name__)

ATTENDED_STATUSES = (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)


class ReportType:
    EXTRACURRICULAR = "EXTRACURRICULAR"
    PEMBINA = "PEMBINA"
    STUDENT = "STUDENT"

    ALL = (EXTRACURRICULAR, PEMBINA, STUDENT)


def session_rate(attended: int, records: int) -> float:
    return attended / records * 100 if records else 0.0


class ReportService:
    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _check_period(start_date: date, end_date: date):
        if start_date > end_date:
            raise ValidationError("Tanggal mulai harus sebelum tanggal selesai.")

    async def _session_stats(self, start_date: date, end_date: date) -> Dict[UUID, List[float]]:
        """Per extracurricular, the attendance rate of each held session in the period."""
        attended = func.sum(case((Attendance.status.in_(ATTENDED_STATUSES), 1), else_=0))
        result = await self.db.execute(
            select(Session.id, Session.extracurricular_id, func.count(Attendance.id), attended)
            .outerjoin(Attendance, (Attendance.session_id == Session.id) & (Attendance.is_deleted == False))
            .where(
                Session.date >= start_date,
                Session.date <= end_date,
                Session.is_cancelled == False,
                Session.is_deleted == False,
            )
            .group_by(Session.id, Session.extracurricular_id)
        )
        rates: Dict[UUID, List[float]] = defaultdict(list)
        for _, ekskul_id, records, present in result.all():
            rates[ekskul_id].append(session_rate(int(present or 0), int(records or 0)))
        return rates

    async def extracurricular_report(self, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        self._check_period(start_date, end_date)
        rates = await self._session_stats(start_date, end_date)

        ekskuls = (await self.db.execute(
            select(Extracurricular).where(Extracurricular.is_deleted == False).order_by(Extracurricular.name)
        )).scalars().all()

        counts_result = await self.db.execute(
            select(
                Enrollment.extracurricular_id,
                func.count(Enrollment.id),
                func.sum(case((Enrollment.status == EnrollmentStatus.ACTIVE.value, 1), else_=0)),
            )
            .where(Enrollment.is_deleted == False)
            .group_by(Enrollment.extracurricular_id)
        )
        counts = {row[0]: (int(row[1]), int(row[2] or 0)) for row in counts_result.all()}

        report = []
        for ekskul in ekskuls:
            session_rates = rates.get(ekskul.id, [])
            total, active = counts.get(ekskul.id, (0, 0))
            average = sum(session_rates) / len(session_rates) if session_rates else 0.0
            report.append({
                "id": str(ekskul.id),
                "name": ekskul.name,
                "category": ekskul.category,
                "status": ekskul.status,
                "pembinaName": ekskul.pembina.user.full_name if ekskul.pembina else None,
                "totalEnrollments": total,
                "activeEnrollments": active,
                "sessionsHeld": len(session_rates),
                "averageAttendanceRate": round(average, 2),
            })
        return report

    async def pembina_report(self, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        self._check_period(start_date, end_date)
        rates = await self._session_stats(start_date, end_date)

        pembinas = (await self.db.execute(
            select(PembinaProfile)
            .join(User, User.id == PembinaProfile.user_id)
            .where(PembinaProfile.is_deleted == False)
            .order_by(User.full_name)
        )).scalars().all()
        ekskuls = (await self.db.execute(
            select(Extracurricular).where(
                Extracurricular.is_deleted == False,
                Extracurricular.pembina_id.is_not(None),
            ).order_by(Extracurricular.name)
        )).scalars().all()

        by_pembina: Dict[UUID, List[Extracurricular]] = defaultdict(list)
        for ekskul in ekskuls:
            by_pembina[ekskul.pembina_id].append(ekskul)

        report = []
        for pembina in pembinas:
            owned = by_pembina.get(pembina.id, [])
            session_rates = [rate for ekskul in owned for rate in rates.get(ekskul.id, [])]
            average = sum(session_rates) / len(session_rates) if session_rates else 0.0
            report.append({
                "id": str(pembina.id),
                "name": pembina.user.full_name,
                "nip": pembina.nip,
                "assignedExtracurriculars": [e.name for e in owned],
                "totalSessionsHeld": len(session_rates),
                "averageAttendanceInClasses": round(average, 2),
            })
        return report

    async def student_report(self, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        self._check_period(start_date, end_date)

        students = (await self.db.execute(
            select(StudentProfile)
            .join(User, User.id == StudentProfile.user_id)
            .where(StudentProfile.is_deleted == False, User.is_deleted == False)
            .order_by(User.full_name)
        )).scalars().all()

        active_result = await self.db.execute(
            select(Enrollment.student_id, func.count(Enrollment.id))
            .where(Enrollment.status == EnrollmentStatus.ACTIVE.value, Enrollment.is_deleted == False)
            .group_by(Enrollment.student_id)
        )
        active_counts = dict(active_result.all())

        attended = func.sum(case((Attendance.status.in_(ATTENDED_STATUSES), 1), else_=0))
        records_result = await self.db.execute(
            select(Enrollment.student_id, Enrollment.id, func.count(Attendance.id), attended)
            .join(Attendance, Attendance.enrollment_id == Enrollment.id)
            .where(
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
                Enrollment.is_deleted == False,
                Attendance.is_deleted == False,
                Attendance.date >= start_date,
                Attendance.date <= end_date,
            )
            .group_by(Enrollment.student_id, Enrollment.id)
        )
        per_student: Dict[UUID, List[float]] = defaultdict(list)
        for student_id, _, records, present in records_result.all():
            per_student[student_id].append(session_rate(int(present or 0), int(records)))

        report = []
        for student in students:
            enrollment_rates = per_student.get(student.id, [])
            average = sum(enrollment_rates) / len(enrollment_rates) if enrollment_rates else 0.0
            report.append({
                "id": str(student.id),
                "name": student.user.full_name,
                "nis": student.nis,
                "class": student.class_name,
                "enrollmentsCount": active_counts.get(student.id, 0),
                "averageAttendance": round(average, 2),
                "zeroAttendanceCount": sum(1 for rate in enrollment_rates if rate == 0),
            })
        return report

    async def get_report(self, report_type: str, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        builders = {
            ReportType.EXTRACURRICULAR: self.extracurricular_report,
            ReportType.PEMBINA: self.pembina_report,
            ReportType.STUDENT: self.student_report,
        }
        builder = builders.get((report_type or "").upper())
        if builder is None:
            raise ValidationError(f"Jenis laporan tidak valid. Pilih salah satu: {', '.join(ReportType.ALL)}")
        logger.info(f"Building {report_type} report for {start_date} - {end_date}")
        return await builder(start_date, end_date)
