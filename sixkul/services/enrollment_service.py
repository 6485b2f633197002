# sixkul/services/enrollment_service.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from .extracurricular_service import ExtracurricularService
from .notification_service import NotificationService, enrollment_status_message
from ..core.exceptions import BusinessRuleError, ConflictError, NotFoundError, ValidationError
from ..models import (
    Enrollment, EnrollmentStatus, Extracurricular, ExtracurricularStatus, StudentProfile, User,
    INACTIVE_ENROLLMENT_STATUSES,
)
from ..utils.cache_invalidation import invalidate_student_cache, invalidate_admin_cache
from ..utils.dates import academic_year, utcnow
from ..utils.serializers import enrollment_to_dict

logger = logging.getLogger(__name__)

REVIEW_STATUSES = (EnrollmentStatus.ACTIVE.value, EnrollmentStatus.REJECTED.value)


class EnrollmentService(BaseService[Enrollment]):
    not_found_message = "Pendaftaran tidak ditemukan."

    def __init__(self, db: AsyncSession):
        super().__init__(Enrollment, db)
        self.notifications = NotificationService(db)

    async def get_by_student_and_extracurricular(self, student_id: UUID, extracurricular_id: UUID) -> Optional[Enrollment]:
        stmt = select(self.model).where(
            self.model.student_id == student_id,
            self.model.extracurricular_id == extracurricular_id,
            self.model.is_deleted == False
        ).order_by(desc(self.model.joined_at))
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_by_student(self, student_id: UUID, status: Optional[str] = None) -> List[Enrollment]:
        stmt = select(self.model).where(
            self.model.student_id == student_id,
            self.model.is_deleted == False
        )
        if status:
            stmt = stmt.where(self.model.status == status)
        result = await self.db.execute(stmt.order_by(desc(self.model.joined_at)))
        return result.scalars().all()

    async def enroll(self, student: StudentProfile, extracurricular_id: UUID) -> Enrollment:
        """Student applies to an extracurricular; the row starts as PENDING."""
        result = await self.db.execute(
            select(Extracurricular).where(
                Extracurricular.id == extracurricular_id,
                Extracurricular.is_deleted == False,
            )
        )
        ekskul = result.scalar_one_or_none()
        if ekskul is None:
            raise NotFoundError("Ekstrakurikuler tidak ditemukan.")
        if ekskul.status != ExtracurricularStatus.ACTIVE.value:
            raise BusinessRuleError("Ekstrakurikuler ini sedang tidak menerima pendaftaran.")

        existing = await self.get_by_student_and_extracurricular(student.id, ekskul.id)
        if existing and existing.status not in (EnrollmentStatus.REJECTED.value, EnrollmentStatus.CANCELLED.value):
            raise ConflictError("Anda sudah terdaftar di ekstrakurikuler ini.")

        if existing:
            # Re-applying after a rejection or withdrawal reopens the same row
            enrollment = existing
            enrollment.status = EnrollmentStatus.PENDING.value
            enrollment.joined_at = utcnow()
            enrollment.academic_year = academic_year()
        else:
            enrollment = Enrollment(
                student=student,
                extracurricular=ekskul,
                status=EnrollmentStatus.PENDING.value,
                joined_at=utcnow(),
                academic_year=academic_year(),
            )
            self.db.add(enrollment)
        await self.db.flush()

        self.notifications.notify_new_enrollment(enrollment, student, ekskul)
        await self.db.commit()
        await invalidate_student_cache(student.id)
        await invalidate_admin_cache()
        logger.info(f"Student {student.id} applied to extracurricular {ekskul.id}")
        return enrollment

    async def update_enrollment_status(self, enrollment_id: UUID, new_status: str, actor: User) -> Enrollment:
        """Approve or reject a pending application."""
        if new_status not in REVIEW_STATUSES:
            raise ValidationError("Status harus ACTIVE atau REJECTED.")

        enrollment = await self.get_or_404(enrollment_id)
        await ExtracurricularService(self.db).validate_pembina_ownership(enrollment.extracurricular_id, actor)

        if enrollment.status != EnrollmentStatus.PENDING.value:
            raise BusinessRuleError("Pendaftaran bukan status PENDING")

        enrollment.status = new_status
        if new_status == EnrollmentStatus.ACTIVE.value:
            enrollment.joined_at = utcnow()
        self.notifications.notify_enrollment_status(enrollment)
        await self.db.commit()
        await invalidate_student_cache(enrollment.student_id)
        await invalidate_admin_cache()
        logger.info(f"Enrollment {enrollment.id} moved to {new_status} by {actor.id}")
        return enrollment

    async def cancel_enrollment(self, student: StudentProfile, enrollment_id: UUID) -> Enrollment:
        enrollment = await self.get(enrollment_id)
        if enrollment is None or enrollment.student_id != student.id:
            raise NotFoundError(self.not_found_message)
        if enrollment.status != EnrollmentStatus.PENDING.value:
            raise BusinessRuleError("Hanya pendaftaran berstatus PENDING yang dapat dibatalkan.")
        enrollment.status = EnrollmentStatus.CANCELLED.value
        await self.db.commit()
        await invalidate_student_cache(student.id)
        logger.info(f"Enrollment {enrollment.id} withdrawn by student {student.id}")
        return enrollment

    async def list_for_extracurricular(self, extracurricular_id: UUID, status: Optional[str] = None) -> List[Dict[str, Any]]:
        stmt = select(Enrollment).where(
            Enrollment.extracurricular_id == extracurricular_id,
            Enrollment.is_deleted == False,
        )
        if status:
            stmt = stmt.where(Enrollment.status == status)
        result = await self.db.execute(stmt.order_by(desc(Enrollment.joined_at)))
        return [enrollment_to_dict(e, include_extracurricular=False) for e in result.scalars().all()]

    async def history(self, student: StudentProfile) -> Dict[str, Any]:
        enrollments = await self.get_by_student(student.id)
        items = []
        for enrollment in enrollments:
            row = enrollment_to_dict(enrollment, include_student=False)
            row["statusMessage"] = enrollment_status_message(
                enrollment.status, enrollment.extracurricular.name
            )["message"] if enrollment.status != EnrollmentStatus.PENDING.value else "Menunggu persetujuan pembina."
            items.append(row)
        return {
            "items": items,
            "summary": {
                "total": len(enrollments),
                "active": sum(1 for e in enrollments if e.status == EnrollmentStatus.ACTIVE.value),
                "pending": sum(1 for e in enrollments if e.status == EnrollmentStatus.PENDING.value),
                "inactive": sum(1 for e in enrollments if e.status in INACTIVE_ENROLLMENT_STATUSES),
            },
        }
