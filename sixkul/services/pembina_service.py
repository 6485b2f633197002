# sixkul/services/pembina_service.py
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from .extracurricular_service import ExtracurricularService
from .schedule_service import ScheduleService
from ..core.exceptions import ValidationError
from ..models import (
    Extracurricular, Enrollment, EnrollmentStatus, PembinaProfile, Session,
)
from ..utils.dates import today
from ..utils.serializers import (
    extracurricular_brief, session_to_dict, schedule_to_dict, student_brief, enrollment_to_dict,
    pembina_profile_to_dict,
)

logger = logging.getLogger(__name__)

PREVIEW_LIST_CAP = 5
UPCOMING_WINDOW_DAYS = 7


class PembinaService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.extracurriculars = ExtracurricularService(db)

    async def _owned(self, pembina: PembinaProfile) -> List[Extracurricular]:
        result = await self.db.execute(
            select(Extracurricular).where(
                Extracurricular.pembina_id == pembina.id,
                Extracurricular.is_deleted == False,
            ).order_by(Extracurricular.name)
        )
        return result.scalars().all()

    async def list_extracurriculars(self, pembina: PembinaProfile) -> List[Dict[str, Any]]:
        return await self._summaries(await self._owned(pembina))

    async def _summaries(self, owned: List[Extracurricular]) -> List[Dict[str, Any]]:
        ids = [e.id for e in owned]
        counts = await self.extracurriculars.enrollment_counts(ids)
        schedules = await self.extracurriculars.schedule_counts(ids)
        sessions = await self.extracurriculars.session_counts(ids)

        items = []
        for ekskul in owned:
            row = extracurricular_brief(ekskul)
            row.update({
                "description": ekskul.description,
                "membersCount": counts[ekskul.id]["members"],
                "pendingCount": counts[ekskul.id]["pending"],
                "schedulesCount": schedules[ekskul.id],
                "sessionsCount": sessions[ekskul.id],
            })
            items.append(row)
        return items

    async def dashboard(self, pembina: PembinaProfile) -> Dict[str, Any]:
        owned = await self._owned(pembina)
        summaries = await self._summaries(owned)
        owned_ids = [e.id for e in owned]

        start = today()
        window_end = start + timedelta(days=UPCOMING_WINDOW_DAYS)
        upcoming_filter = (
            Session.extracurricular_id.in_(owned_ids),
            Session.is_deleted == False,
            Session.is_cancelled == False,
            Session.date >= start,
            Session.date < window_end,
        )
        upcoming_count = 0
        upcoming = []
        pending = []
        if owned_ids:
            upcoming_count = (await self.db.execute(
                select(func.count(Session.id)).where(*upcoming_filter)
            )).scalar() or 0
            result = await self.db.execute(
                select(Session).where(*upcoming_filter)
                .order_by(Session.date, Session.start_time).limit(PREVIEW_LIST_CAP)
            )
            upcoming = [session_to_dict(s, include_extracurricular=True) for s in result.scalars().all()]

            result = await self.db.execute(
                select(Enrollment).where(
                    Enrollment.extracurricular_id.in_(owned_ids),
                    Enrollment.status == EnrollmentStatus.PENDING.value,
                    Enrollment.is_deleted == False,
                ).order_by(desc(Enrollment.joined_at)).limit(PREVIEW_LIST_CAP)
            )
            pending = [enrollment_to_dict(e) for e in result.scalars().all()]

        return {
            "stats": {
                "totalExtracurriculars": len(summaries),
                "totalActiveMembers": sum(row["membersCount"] for row in summaries),
                "totalPendingEnrollments": sum(row["pendingCount"] for row in summaries),
                "totalUpcomingSessions": upcoming_count,
            },
            "upcomingSessions": upcoming,
            "pendingEnrollments": pending,
            "extracurriculars": summaries,
        }

    async def get_extracurricular_students(self, extracurricular: Extracurricular) -> Dict[str, Any]:
        schedules = await ScheduleService(self.db).list_schedules(extracurricular.id)
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.extracurricular_id == extracurricular.id,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
                Enrollment.is_deleted == False,
            )
        )
        roster = sorted(result.scalars().all(), key=lambda e: e.student.user.full_name.lower())
        return {
            "schedules": [schedule_to_dict(s) for s in schedules],
            "students": [
                {"enrollmentId": str(e.id), "student": student_brief(e.student)} for e in roster
            ],
        }

    async def update_profile(
        self,
        pembina: PembinaProfile,
        expertise: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Pembina may only edit their expertise and phone number."""
        if phone_number is not None:
            cleaned = phone_number.strip()
            digits = cleaned.replace("+", "").replace("-", "").replace(" ", "")
            if cleaned and (not digits.isdigit() or not 8 <= len(digits) <= 15):
                raise ValidationError(
                    "Data profil tidak valid.",
                    [{"field": "phoneNumber", "message": "Nomor telepon tidak valid"}],
                )
            pembina.phone_number = cleaned or None
        if expertise is not None:
            pembina.expertise = expertise.strip() or None
        await self.db.commit()
        logger.info(f"Pembina profile {pembina.id} updated")
        data = pembina_profile_to_dict(pembina)
        data.update({"fullName": pembina.user.full_name, "email": pembina.user.email})
        return data
