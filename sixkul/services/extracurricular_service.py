# sixkul/services/extracurricular_service.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, func, or_, case
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from ..core.exceptions import NotFoundError, ConflictError, PermissionDenied
from ..models import (
    Extracurricular, ExtracurricularStatus, PembinaProfile, Enrollment, EnrollmentStatus,
    Schedule, Session, User, Role,
)
from ..utils.serializers import extracurricular_to_dict

logger = logging.getLogger(__name__)


class ExtracurricularService(BaseService[Extracurricular]):
    not_found_message = "Ekstrakurikuler tidak ditemukan."

    def __init__(self, db: AsyncSession):
        super().__init__(Extracurricular, db)

    async def validate_pembina_ownership(self, extracurricular_id: UUID, user: User) -> Extracurricular:
        """Load the extracurricular and make sure ``user`` may manage it.

        Admins manage every extracurricular; a pembina only the ones assigned
        to their profile.
        """
        ekskul = await self.get_or_404(extracurricular_id)
        if user.role == Role.ADMIN.value:
            return ekskul
        profile = user.pembina_profile
        if user.role != Role.PEMBINA.value or profile is None or ekskul.pembina_id != profile.id:
            logger.warning(f"User {user.id} attempted to manage extracurricular {extracurricular_id}")
            raise PermissionDenied("Anda tidak memiliki akses ke ekstrakurikuler ini.")
        return ekskul

    async def enrollment_counts(self, extracurricular_ids: List[UUID]) -> Dict[UUID, Dict[str, int]]:
        if not extracurricular_ids:
            return {}
        stmt = (
            select(
                Enrollment.extracurricular_id,
                func.sum(case((Enrollment.status == EnrollmentStatus.ACTIVE.value, 1), else_=0)),
                func.sum(case((Enrollment.status == EnrollmentStatus.PENDING.value, 1), else_=0)),
            )
            .where(
                Enrollment.extracurricular_id.in_(extracurricular_ids),
                Enrollment.is_deleted == False,
            )
            .group_by(Enrollment.extracurricular_id)
        )
        result = await self.db.execute(stmt)
        counts = {ekskul_id: {"members": 0, "pending": 0} for ekskul_id in extracurricular_ids}
        for ekskul_id, active, pending in result.all():
            counts[ekskul_id] = {"members": int(active or 0), "pending": int(pending or 0)}
        return counts

    async def _count_by_extracurricular(self, model, extracurricular_ids: List[UUID]) -> Dict[UUID, int]:
        if not extracurricular_ids:
            return {}
        result = await self.db.execute(
            select(model.extracurricular_id, func.count(model.id))
            .where(model.extracurricular_id.in_(extracurricular_ids), model.is_deleted == False)
            .group_by(model.extracurricular_id)
        )
        counts = dict.fromkeys(extracurricular_ids, 0)
        counts.update({ekskul_id: total for ekskul_id, total in result.all()})
        return counts

    async def schedule_counts(self, extracurricular_ids: List[UUID]) -> Dict[UUID, int]:
        return await self._count_by_extracurricular(Schedule, extracurricular_ids)

    async def session_counts(self, extracurricular_ids: List[UUID]) -> Dict[UUID, int]:
        return await self._count_by_extracurricular(Session, extracurricular_ids)

    async def _ensure_unique_name(self, name: str, exclude_id: Optional[UUID] = None):
        stmt = select(Extracurricular.id).where(
            func.lower(Extracurricular.name) == name.strip().lower(),
            Extracurricular.is_deleted == False,
        )
        if exclude_id is not None:
            stmt = stmt.where(Extracurricular.id != exclude_id)
        if (await self.db.execute(stmt)).first():
            raise ConflictError(f"Ekstrakurikuler dengan nama '{name}' sudah ada.")

    async def _get_pembina(self, pembina_id: UUID) -> PembinaProfile:
        result = await self.db.execute(
            select(PembinaProfile).where(PembinaProfile.id == pembina_id, PembinaProfile.is_deleted == False)
        )
        pembina = result.scalar_one_or_none()
        if pembina is None:
            raise NotFoundError("Pembina tidak ditemukan.")
        return pembina

    async def list_extracurriculars(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        stmt = select(Extracurricular).where(Extracurricular.is_deleted == False)
        if status:
            stmt = stmt.where(Extracurricular.status == status)
        if category:
            stmt = stmt.where(Extracurricular.category == category)
        if search:
            term = f"%{search.strip().lower()}%"
            stmt = stmt.where(or_(
                func.lower(Extracurricular.name).like(term),
                func.lower(Extracurricular.category).like(term),
            ))
        stmt = stmt.order_by(Extracurricular.name)
        items = (await self.db.execute(stmt)).scalars().all()

        counts = await self.enrollment_counts([e.id for e in items])
        data = []
        for ekskul in items:
            row = extracurricular_to_dict(ekskul)
            row.update({
                "membersCount": counts[ekskul.id]["members"],
                "pendingCount": counts[ekskul.id]["pending"],
            })
            data.append(row)
        return data

    async def get_detail(self, extracurricular_id: UUID) -> Dict[str, Any]:
        ekskul = await self.get_or_404(extracurricular_id)
        counts = await self.enrollment_counts([ekskul.id])
        data = extracurricular_to_dict(ekskul)
        data.update({
            "membersCount": counts[ekskul.id]["members"],
            "pendingCount": counts[ekskul.id]["pending"],
            "schedulesCount": (await self.schedule_counts([ekskul.id]))[ekskul.id],
            "sessionsCount": (await self.session_counts([ekskul.id]))[ekskul.id],
        })
        return data

    async def create_extracurricular(self, data: Dict[str, Any]) -> Extracurricular:
        await self._ensure_unique_name(data["name"])
        pembina = await self._get_pembina(data["pembina_id"])

        ekskul = Extracurricular(
            name=data["name"].strip(),
            category=data["category"].strip(),
            description=data.get("description"),
            logo_url=data.get("logo_url"),
            status=data.get("status") or ExtracurricularStatus.ACTIVE.value,
            pembina=pembina,
        )
        self.db.add(ekskul)
        await self.db.commit()
        logger.info(f"Extracurricular created: {ekskul.name} ({ekskul.id})")
        return ekskul

    async def update_extracurricular(self, extracurricular_id: UUID, data: Dict[str, Any]) -> Extracurricular:
        ekskul = await self.get_or_404(extracurricular_id)

        if data.get("name") is not None and data["name"].strip().lower() != ekskul.name.lower():
            await self._ensure_unique_name(data["name"], exclude_id=ekskul.id)
            ekskul.name = data["name"].strip()
        if data.get("pembina_id") is not None and data["pembina_id"] != ekskul.pembina_id:
            ekskul.pembina = await self._get_pembina(data["pembina_id"])
        for field in ("category", "description", "logo_url", "status"):
            if data.get(field) is not None:
                setattr(ekskul, field, data[field])

        await self.db.commit()
        await self.db.refresh(ekskul)
        logger.info(f"Extracurricular updated: {ekskul.id}")
        return ekskul

    async def archive_extracurricular(self, extracurricular_id: UUID) -> Extracurricular:
        """Deleting from the admin panel keeps history and only deactivates."""
        ekskul = await self.get_or_404(extracurricular_id)
        ekskul.status = ExtracurricularStatus.INACTIVE.value
        await self.db.commit()
        logger.info(f"Extracurricular archived: {ekskul.id}")
        return ekskul
