# sixkul/services/attendance_service.py
"""Recording attendance per session or per date, with lock-on-create rows."""
import logging
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from .notification_service import NotificationService
from .session_service import SessionService
from ..core.exceptions import ValidationError, BusinessRuleError, ConflictError, NotFoundError, PermissionDenied
from ..models import (
    Attendance, AttendanceStatus, Enrollment, EnrollmentStatus, Extracurricular, Session, User, Role,
)
from ..utils.cache_invalidation import invalidate_student_cache, invalidate_admin_cache
from ..utils.dates import today
from ..utils.serializers import attendance_to_dict, student_brief, session_to_dict

logger = logging.getLogger(__name__)

LOCKED_MESSAGE = "Absensi sudah dikunci dan tidak dapat diubah"
VALID_STATUSES = [status.value for status in AttendanceStatus]


class AttendanceService(BaseService[Attendance]):
    not_found_message = "Data absensi tidak ditemukan."

    def __init__(self, db: AsyncSession):
        super().__init__(Attendance, db)
        self.notifications = NotificationService(db)

    # Reads

    async def _active_roster(self, extracurricular_id: UUID) -> List[Enrollment]:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.extracurricular_id == extracurricular_id,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
                Enrollment.is_deleted == False,
            )
        )
        return sorted(result.scalars().all(), key=lambda e: e.student.user.full_name.lower())

    async def _records_on(self, enrollment_ids: List[UUID], attendance_date: date) -> Dict[UUID, Attendance]:
        if not enrollment_ids:
            return {}
        result = await self.db.execute(
            select(Attendance).where(
                Attendance.enrollment_id.in_(enrollment_ids),
                Attendance.date == attendance_date,
                Attendance.is_deleted == False,
            )
        )
        return {a.enrollment_id: a for a in result.scalars().all()}

    async def get_session_attendance(self, extracurricular: Extracurricular, session_id: UUID) -> Dict[str, Any]:
        session = await SessionService(self.db).get_for_extracurricular(session_id, extracurricular.id)
        roster = await self._active_roster(extracurricular.id)
        records = await self._records_on([e.id for e in roster], session.date)

        students = []
        summary = Counter()
        for enrollment in roster:
            record = records.get(enrollment.id)
            if record:
                summary[record.status] += 1
            students.append({
                "enrollmentId": str(enrollment.id),
                "student": student_brief(enrollment.student),
                "attendance": attendance_to_dict(record) if record else None,
            })
        return {
            "session": session_to_dict(session),
            "students": students,
            "summary": {status: summary.get(status, 0) for status in VALID_STATUSES},
            "isComplete": bool(roster) and len(records) == len(roster),
        }

    async def get_attendance_by_date(self, extracurricular_id: UUID, attendance_date: date) -> Dict[str, Any]:
        result = await self.db.execute(
            select(Attendance)
            .join(Enrollment, Enrollment.id == Attendance.enrollment_id)
            .where(
                Enrollment.extracurricular_id == extracurricular_id,
                Attendance.date == attendance_date,
                Attendance.is_deleted == False,
            )
        )
        records = [
            {"enrollmentId": str(a.enrollment_id), "status": a.status, "notes": a.notes, "isLocked": a.is_locked}
            for a in result.scalars().all()
        ]
        return {"hasExistingRecords": bool(records), "records": records}

    # Writes

    @staticmethod
    def _validate_records(records: List[Dict[str, Any]]):
        if not records:
            raise ValidationError("Data absensi tidak boleh kosong.")
        errors = []
        seen = set()
        for index, record in enumerate(records):
            if record["status"] not in VALID_STATUSES:
                errors.append(f"records[{index}].status must be one of: {', '.join(VALID_STATUSES)}")
            if record["enrollment_id"] in seen:
                errors.append(f"records[{index}].enrollmentId is duplicated")
            seen.add(record["enrollment_id"])
        if errors:
            raise ValidationError("Validasi gagal", errors)

    async def _load_active_enrollments(
        self,
        enrollment_ids: List[UUID],
        extracurricular_id: Optional[UUID] = None,
    ) -> Dict[UUID, Enrollment]:
        result = await self.db.execute(
            select(Enrollment).where(Enrollment.id.in_(enrollment_ids), Enrollment.is_deleted == False)
        )
        found = {e.id: e for e in result.scalars().all()}

        missing = [eid for eid in enrollment_ids if eid not in found]
        if missing:
            raise ValidationError(
                "Beberapa pendaftaran tidak ditemukan",
                [f"Enrollment not found: {eid}" for eid in missing],
            )

        invalid = [
            e for e in found.values()
            if e.status != EnrollmentStatus.ACTIVE.value
            or (extracurricular_id is not None and e.extracurricular_id != extracurricular_id)
        ]
        if invalid:
            logger.warning(f"Attendance refused for non-active enrollments: {[str(e.id) for e in invalid]}")
            raise ValidationError(
                "Absensi hanya dapat dicatat untuk anggota aktif ekstrakurikuler ini.",
                [f"Enrollment not active: {e.id}" for e in invalid],
            )
        return found

    async def _write_records(
        self,
        enrollments: Dict[UUID, Enrollment],
        attendance_date: date,
        session: Optional[Session],
        records: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Create or reopen rows keyed by (enrollment, date). Does not commit."""
        existing = await self._records_on(list(enrollments), attendance_date)

        locked = [str(eid) for eid, row in existing.items() if row.is_locked]
        if locked:
            raise ConflictError(LOCKED_MESSAGE, [f"Attendance locked: {eid}" for eid in locked])

        created = updated = 0
        saved = []
        for record in records:
            notes = (record.get("notes") or "").strip() or None
            row = existing.get(record["enrollment_id"])
            if row is not None:
                row.status = record["status"]
                row.notes = notes
                # A date-only correction keeps the session the row was taken at
                if session is not None:
                    row.session = session
                row.is_locked = True
                updated += 1
            else:
                self.db.add(Attendance(
                    enrollment=enrollments[record["enrollment_id"]],
                    session=session,
                    date=attendance_date,
                    status=record["status"],
                    notes=notes,
                    is_locked=True,
                ))
                created += 1
            saved.append({
                "enrollment": enrollments[record["enrollment_id"]],
                "status": record["status"],
                "date": attendance_date,
            })
        return {"created": created, "updated": updated, "saved": saved}

    async def _commit(self):
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Attendance write rejected by constraint: {e}")
            raise ConflictError("Absensi untuk siswa pada tanggal ini sudah ada.")
        await invalidate_student_cache()
        await invalidate_admin_cache()

    async def save_session_attendance(
        self,
        session_id: UUID,
        extracurricular: Extracurricular,
        records: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Record attendance for every listed enrollment at one session.

        All rows are written in a single transaction. A row that already
        exists and is locked rejects the whole save.
        """
        if not session_id:
            raise ValidationError("Pertemuan wajib dipilih.")
        self._validate_records(records)

        session = await SessionService(self.db).get_for_extracurricular(session_id, extracurricular.id)
        if session.is_cancelled:
            raise BusinessRuleError("Tidak dapat mengisi absensi untuk pertemuan yang dibatalkan.")

        enrollments = await self._load_active_enrollments(
            [r["enrollment_id"] for r in records], extracurricular.id
        )
        outcome = await self._write_records(enrollments, session.date, session, records)
        await self.notifications.notify_attendance_recorded(outcome["saved"], extracurricular.name)
        await self._commit()

        logger.info(
            f"Session {session.id} attendance saved: {outcome['created']} created, {outcome['updated']} updated"
        )
        return {
            "sessionId": str(session.id),
            "date": session.date.isoformat(),
            "totalRecords": len(records),
            "created": outcome["created"],
            "updated": outcome["updated"],
        }

    async def save_batch_attendance(
        self,
        user: User,
        attendance_date: date,
        records: List[Dict[str, Any]],
        session_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        if attendance_date > today():
            raise ValidationError("Validasi gagal", ["date cannot be in the future"])
        self._validate_records(records)

        enrollments = await self._load_active_enrollments([r["enrollment_id"] for r in records])

        ekskul_ids = {e.extracurricular_id for e in enrollments.values()}
        if user.role == Role.PEMBINA.value:
            profile = user.pembina_profile
            foreign = [
                e for e in enrollments.values()
                if profile is None or e.extracurricular.pembina_id != profile.id
            ]
            if foreign:
                raise PermissionDenied("Anda tidak memiliki akses ke ekstrakurikuler ini.")

        session = None
        if session_id is not None:
            session = await SessionService(self.db).get(session_id)
            if session is None or session.extracurricular_id not in ekskul_ids or session.date != attendance_date:
                raise ValidationError("Pertemuan tidak sesuai dengan tanggal atau ekstrakurikuler.")

        outcome = await self._write_records(enrollments, attendance_date, session, records)
        for ekskul_id in ekskul_ids:
            entries = [s for s in outcome["saved"] if s["enrollment"].extracurricular_id == ekskul_id]
            await self.notifications.notify_attendance_recorded(
                entries, entries[0]["enrollment"].extracurricular.name
            )
        await self._commit()

        logger.info(
            f"[ATTENDANCE BATCH] Processed {len(records)} records for {attendance_date} - "
            f"Created: {outcome['created']}, Updated: {outcome['updated']}"
        )
        return {
            "date": attendance_date.isoformat(),
            "totalRecords": len(records),
            "created": outcome["created"],
            "updated": outcome["updated"],
        }

    async def unlock_attendance(self, attendance_id: UUID) -> Attendance:
        """Admin correction path: reopen a locked row for one more write."""
        attendance = await self.get(attendance_id)
        if attendance is None:
            raise NotFoundError(self.not_found_message)
        attendance.is_locked = False
        await self.db.commit()
        logger.info(f"Attendance {attendance.id} unlocked")
        return attendance
