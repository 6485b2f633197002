# sixkul/services/notification_service.py
import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, func, update, desc
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from ..core.exceptions import NotFoundError
from ..models import (
    Notification, NotificationType, StudentPreferences, Enrollment, EnrollmentStatus,
    StudentProfile,
)
from ..utils.dates import format_indonesian_date, day_label
from ..utils.serializers import notification_to_dict

logger = logging.getLogger(__name__)

ATTENDANCE_STATUS_LABELS = {
    "PRESENT": "Hadir",
    "SICK": "Sakit",
    "PERMISSION": "Izin",
    "ALPHA": "Tidak Hadir (Alpha)",
    "LATE": "Terlambat",
}


def enrollment_status_message(status: str, extracurricular_name: str) -> Dict[str, str]:
    """Title and message shown to a student whose enrollment changed."""
    messages = {
        EnrollmentStatus.ACTIVE.value: (
            f"Pendaftaran Diterima - {extracurricular_name}",
            f"Selamat! Pendaftaran Anda di {extracurricular_name} telah disetujui.",
        ),
        EnrollmentStatus.REJECTED.value: (
            f"Pendaftaran Ditolak - {extracurricular_name}",
            f"Maaf, pendaftaran Anda di {extracurricular_name} tidak disetujui.",
        ),
        EnrollmentStatus.ALUMNI.value: (
            f"Status Alumni - {extracurricular_name}",
            f"Status keanggotaan Anda di {extracurricular_name} telah berubah menjadi Alumni.",
        ),
        EnrollmentStatus.CANCELLED.value: (
            f"Keanggotaan Dibatalkan - {extracurricular_name}",
            f"Keanggotaan Anda di {extracurricular_name} telah dibatalkan.",
        ),
    }
    title, message = messages.get(status, (
        f"Perubahan Status - {extracurricular_name}",
        f"Status keanggotaan Anda di {extracurricular_name} telah berubah menjadi {status}.",
    ))
    return {"title": title, "message": message}


SCHEDULE_CHANGE_TITLES = {
    "created": "Jadwal Baru - {name}",
    "updated": "Perubahan Jadwal - {name}",
    "cancelled": "Jadwal Dibatalkan - {name}",
}

SCHEDULE_CHANGE_MESSAGES = {
    "created": "Sesi baru telah dijadwalkan untuk {date}",
    "updated": "Jadwal sesi pada {date} telah diperbarui",
    "cancelled": "Sesi pada {date} telah dibatalkan",
}


class NotificationService(BaseService[Notification]):
    """Reads a user's notifications and fans out domain events as new ones.

    Trigger methods only add rows to the session; the caller commits them
    together with the change that caused them.
    """
    not_found_message = "Notifikasi tidak ditemukan."

    def __init__(self, db: AsyncSession):
        super().__init__(Notification, db)

    async def list_for_user(self, user_id: UUID, unread_only: bool = False, limit: int = 50) -> Dict[str, Any]:
        stmt = select(Notification).where(
            Notification.user_id == user_id,
            Notification.is_deleted == False,
        )
        if unread_only:
            stmt = stmt.where(Notification.is_read == False)
        stmt = stmt.order_by(desc(Notification.created_at)).limit(limit)
        result = await self.db.execute(stmt)
        items = result.scalars().all()

        unread_count = await self.unread_count(user_id)
        return {
            "items": [notification_to_dict(n) for n in items],
            "unreadCount": unread_count,
        }

    async def unread_count(self, user_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read == False,
                Notification.is_deleted == False,
            )
        )
        return result.scalar() or 0

    async def mark_as_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        notification = await self.get(notification_id)
        # Someone else's notification is reported as missing
        if notification is None or notification.user_id != user_id:
            raise NotFoundError(self.not_found_message)
        if not notification.is_read:
            notification.is_read = True
            await self.db.commit()
        return notification

    async def mark_all_as_read(self, user_id: UUID) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read == False,
                Notification.is_deleted == False,
            )
            .values(is_read=True)
        )
        await self.db.commit()
        logger.info(f"Marked {result.rowcount} notifications as read for user {user_id}")
        return result.rowcount

    # Triggers

    def _add(self, user_id: UUID, type: NotificationType, title: str, message: str,
             enrollment_id: Optional[UUID] = None) -> Notification:
        notification = Notification(
            user_id=user_id,
            enrollment_id=enrollment_id,
            type=type.value,
            title=title,
            message=message,
            is_read=False,
        )
        self.db.add(notification)
        return notification

    async def _preferences_for(self, student_ids: Iterable[UUID]) -> Dict[UUID, StudentPreferences]:
        ids = list(set(student_ids))
        if not ids:
            return {}
        result = await self.db.execute(
            select(StudentPreferences).where(StudentPreferences.student_id.in_(ids))
        )
        return {prefs.student_id: prefs for prefs in result.scalars().all()}

    async def _active_enrollments(self, extracurricular_id: UUID) -> List[Enrollment]:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.extracurricular_id == extracurricular_id,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
                Enrollment.is_deleted == False,
            )
        )
        return result.scalars().all()

    @staticmethod
    def _allowed(preferences: Dict[UUID, StudentPreferences], student_id: UUID, flag: str) -> bool:
        prefs = preferences.get(student_id)
        # No stored preferences means every notification is enabled
        return True if prefs is None else bool(getattr(prefs, flag))

    def notify_new_enrollment(self, enrollment: Enrollment, student: StudentProfile, extracurricular) -> Optional[Notification]:
        pembina = extracurricular.pembina
        if pembina is None:
            logger.warning(f"Extracurricular {extracurricular.id} has no pembina to notify")
            return None
        return self._add(
            pembina.user_id,
            NotificationType.ENROLLMENT,
            f"Pendaftaran Baru - {extracurricular.name}",
            f"Siswa {student.user.full_name} mengajukan pendaftaran baru untuk {extracurricular.name}.",
            enrollment_id=enrollment.id,
        )

    def notify_enrollment_status(self, enrollment: Enrollment) -> Notification:
        """Status changes are always delivered, regardless of preferences."""
        content = enrollment_status_message(enrollment.status, enrollment.extracurricular.name)
        return self._add(
            enrollment.student.user_id,
            NotificationType.ENROLLMENT,
            content["title"],
            content["message"],
            enrollment_id=enrollment.id,
        )

    async def notify_attendance_recorded(self, entries: List[Dict[str, Any]], extracurricular_name: str) -> int:
        """``entries`` hold ``enrollment``, ``status`` and ``date`` for each saved row."""
        preferences = await self._preferences_for(e["enrollment"].student_id for e in entries)
        created = 0
        for entry in entries:
            enrollment = entry["enrollment"]
            if not self._allowed(preferences, enrollment.student_id, "notify_attendance"):
                continue
            label = ATTENDANCE_STATUS_LABELS.get(entry["status"], entry["status"])
            self._add(
                enrollment.student.user_id,
                NotificationType.ATTENDANCE,
                f"Absensi Tercatat - {extracurricular_name}",
                f"Kehadiran Anda pada {format_indonesian_date(entry['date'])} telah dicatat sebagai: {label}",
                enrollment_id=enrollment.id,
            )
            created += 1
        return created

    async def notify_announcement(self, extracurricular, announcement_title: str) -> int:
        enrollments = await self._active_enrollments(extracurricular.id)
        preferences = await self._preferences_for(e.student_id for e in enrollments)
        created = 0
        for enrollment in enrollments:
            if not self._allowed(preferences, enrollment.student_id, "notify_announcements"):
                continue
            self._add(
                enrollment.student.user_id,
                NotificationType.ANNOUNCEMENT,
                f"Pengumuman Baru - {extracurricular.name}",
                announcement_title,
                enrollment_id=enrollment.id,
            )
            created += 1
        logger.info(f"Announcement notifications queued for {created} students of {extracurricular.id}")
        return created

    async def notify_schedule_change(self, extracurricular, change_type: str, session_date) -> int:
        if change_type not in SCHEDULE_CHANGE_TITLES:
            raise ValueError(f"Unknown schedule change type: {change_type}")
        enrollments = await self._active_enrollments(extracurricular.id)
        preferences = await self._preferences_for(e.student_id for e in enrollments)
        title = SCHEDULE_CHANGE_TITLES[change_type].format(name=extracurricular.name)
        message = SCHEDULE_CHANGE_MESSAGES[change_type].format(date=format_indonesian_date(session_date))
        created = 0
        for enrollment in enrollments:
            if not self._allowed(preferences, enrollment.student_id, "notify_schedule_changes"):
                continue
            self._add(
                enrollment.student.user_id,
                NotificationType.SCHEDULE,
                title,
                message,
                enrollment_id=enrollment.id,
            )
            created += 1
        return created

    async def notify_routine_schedule_change(self, extracurricular, schedule, change_type: str) -> int:
        """Weekly template changed; phrased by weekday instead of a date."""
        enrollments = await self._active_enrollments(extracurricular.id)
        preferences = await self._preferences_for(e.student_id for e in enrollments)
        verb = "ditambahkan" if change_type == "created" else "diperbarui"
        title = SCHEDULE_CHANGE_TITLES.get(change_type, SCHEDULE_CHANGE_TITLES["updated"]).format(name=extracurricular.name)
        message = (
            f"Jadwal rutin setiap {day_label(schedule.day_of_week)} "
            f"{schedule.start_time}-{schedule.end_time} di {schedule.location} telah {verb}"
        )
        created = 0
        for enrollment in enrollments:
            if not self._allowed(preferences, enrollment.student_id, "notify_schedule_changes"):
                continue
            self._add(enrollment.student.user_id, NotificationType.SCHEDULE, title, message,
                      enrollment_id=enrollment.id)
            created += 1
        return created
