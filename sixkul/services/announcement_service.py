# sixkul/services/announcement_service.py
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, desc, or_, and_, func
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from .notification_service import NotificationService
from ..core.exceptions import ValidationError, NotFoundError, PermissionDenied
from ..models import (
    Announcement, AnnouncementScope, Enrollment, EnrollmentStatus, Extracurricular, StudentProfile, User,
)
from ..utils.cache_invalidation import invalidate_student_cache
from ..utils.dates import utcnow

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255


def validate_announcement(title: Optional[str], content: Optional[str], partial: bool = False):
    errors = []
    if title is not None or not partial:
        title = (title or "").strip()
        if not title:
            errors.append({"field": "title", "message": "Judul wajib diisi"})
        elif len(title) > TITLE_MAX_LENGTH:
            errors.append({"field": "title", "message": f"Judul maksimal {TITLE_MAX_LENGTH} karakter"})
    if content is not None or not partial:
        if not (content or "").strip():
            errors.append({"field": "content", "message": "Isi pengumuman wajib diisi"})
    if errors:
        raise ValidationError("Data pengumuman tidak valid.", errors)


class AnnouncementService(BaseService[Announcement]):
    not_found_message = "Pengumuman tidak ditemukan."

    def __init__(self, db: AsyncSession):
        super().__init__(Announcement, db)
        self.notifications = NotificationService(db)

    # Extracurricular scope (pembina)

    async def list_for_extracurricular(self, extracurricular_id: UUID) -> List[Announcement]:
        result = await self.db.execute(
            select(Announcement).where(
                Announcement.extracurricular_id == extracurricular_id,
                Announcement.scope == AnnouncementScope.EXTRACURRICULAR.value,
                Announcement.is_deleted == False,
            ).order_by(desc(Announcement.created_at))
        )
        return result.scalars().all()

    async def create_extracurricular_announcement(
        self, extracurricular: Extracurricular, author: User, title: str, content: str
    ) -> Announcement:
        validate_announcement(title, content)
        announcement = Announcement(
            scope=AnnouncementScope.EXTRACURRICULAR.value,
            extracurricular=extracurricular,
            author=author,
            title=title.strip(),
            content=content.strip(),
        )
        self.db.add(announcement)
        await self.db.flush()
        await self.notifications.notify_announcement(extracurricular, announcement.title)
        await self.db.commit()
        await invalidate_student_cache()
        logger.info(f"Announcement {announcement.id} published for extracurricular {extracurricular.id}")
        return announcement

    async def _get_authored(self, announcement_id: UUID, extracurricular_id: UUID, author: User) -> Announcement:
        announcement = await self.get(announcement_id)
        if announcement is None or announcement.extracurricular_id != extracurricular_id:
            raise NotFoundError(self.not_found_message)
        if announcement.author_id != author.id:
            raise PermissionDenied("Anda hanya dapat mengubah pengumuman milik Anda.")
        return announcement

    async def update_extracurricular_announcement(
        self, extracurricular: Extracurricular, announcement_id: UUID, author: User,
        title: Optional[str] = None, content: Optional[str] = None,
    ) -> Announcement:
        announcement = await self._get_authored(announcement_id, extracurricular.id, author)
        validate_announcement(title, content, partial=True)
        if title is not None:
            announcement.title = title.strip()
        if content is not None:
            announcement.content = content.strip()
        await self.db.commit()
        await invalidate_student_cache()
        return announcement

    async def delete_extracurricular_announcement(
        self, extracurricular: Extracurricular, announcement_id: UUID, author: User
    ) -> None:
        announcement = await self._get_authored(announcement_id, extracurricular.id, author)
        announcement.is_deleted = True
        await self.db.commit()
        await invalidate_student_cache()
        logger.info(f"Announcement {announcement.id} deleted by {author.id}")

    # System scope (admin)

    async def get_system_announcement(self, announcement_id: UUID) -> Announcement:
        announcement = await self.get(announcement_id)
        if announcement is None:
            raise NotFoundError(self.not_found_message)
        if announcement.scope != AnnouncementScope.SYSTEM.value:
            raise PermissionDenied("Hanya pengumuman sistem yang dapat dikelola di sini.")
        return announcement

    async def list_system_announcements(self, page: int = 1, size: int = 20) -> Dict[str, Any]:
        stmt = select(Announcement).where(
            Announcement.scope == AnnouncementScope.SYSTEM.value,
            Announcement.is_deleted == False,
        ).order_by(desc(Announcement.created_at))
        return await self.paginate(stmt, page, size)

    async def create_system_announcement(self, author: User, title: str, content: str) -> Announcement:
        validate_announcement(title, content)
        announcement = Announcement(
            scope=AnnouncementScope.SYSTEM.value,
            extracurricular=None,
            author=author,
            title=title.strip(),
            content=content.strip(),
        )
        self.db.add(announcement)
        await self.db.commit()
        await invalidate_student_cache()
        logger.info(f"System announcement {announcement.id} published by {author.id}")
        return announcement

    async def update_system_announcement(
        self, announcement_id: UUID, title: Optional[str] = None, content: Optional[str] = None
    ) -> Announcement:
        announcement = await self.get_system_announcement(announcement_id)
        validate_announcement(title, content, partial=True)
        if title is not None:
            announcement.title = title.strip()
        if content is not None:
            announcement.content = content.strip()
        await self.db.commit()
        await invalidate_student_cache()
        return announcement

    async def delete_system_announcement(self, announcement_id: UUID) -> None:
        announcement = await self.get_system_announcement(announcement_id)
        announcement.is_deleted = True
        await self.db.commit()
        await invalidate_student_cache()
        logger.info(f"System announcement {announcement.id} deleted")

    # Student feed

    def _student_feed_query(self, student: StudentProfile):
        active_ekskul_ids = select(Enrollment.extracurricular_id).where(
            Enrollment.student_id == student.id,
            Enrollment.status == EnrollmentStatus.ACTIVE.value,
            Enrollment.is_deleted == False,
        )
        return select(Announcement).where(
            Announcement.is_deleted == False,
            or_(
                Announcement.scope == AnnouncementScope.SYSTEM.value,
                and_(
                    Announcement.scope == AnnouncementScope.EXTRACURRICULAR.value,
                    Announcement.extracurricular_id.in_(active_ekskul_ids),
                ),
            ),
        )

    async def list_for_student(self, student: StudentProfile, limit: Optional[int] = None) -> List[Announcement]:
        stmt = self._student_feed_query(student).order_by(desc(Announcement.created_at))
        if limit:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def count_recent_for_student(self, student: StudentProfile, days: int = 7) -> int:
        since = utcnow() - timedelta(days=days)
        feed = self._student_feed_query(student).where(Announcement.created_at >= since).subquery()
        result = await self.db.execute(select(func.count()).select_from(feed))
        return result.scalar() or 0
