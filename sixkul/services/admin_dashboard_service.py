# sixkul/services/admin_dashboard_service.py
from typing import Any, Dict, List

from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import cache_manager
from ..models import (
    User, Role, Extracurricular, ExtracurricularStatus, Enrollment, EnrollmentStatus,
)


class AdminDashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, stmt) -> int:
        return (await self.db.execute(stmt)).scalar() or 0

    async def get_dashboard_stats(self) -> Dict[str, Any]:
        cache_key = cache_manager.make_key("admin", "dashboard")
        cached = await cache_manager.get(cache_key)
        if cached is not None:
            return cached

        users = select(func.count(User.id)).where(User.is_deleted == False, User.is_active == True)
        enrollments = select(func.count(Enrollment.id)).where(Enrollment.is_deleted == False)

        total_enrollments = await self._count(enrollments)
        active_enrollments = await self._count(
            enrollments.where(Enrollment.status == EnrollmentStatus.ACTIVE.value)
        )
        stats = {
            "totalStudents": await self._count(users.where(User.role == Role.SISWA.value)),
            "totalPembina": await self._count(users.where(User.role == Role.PEMBINA.value)),
            "activeExtracurriculars": await self._count(
                select(func.count(Extracurricular.id)).where(
                    Extracurricular.is_deleted == False,
                    Extracurricular.status == ExtracurricularStatus.ACTIVE.value,
                )
            ),
            "pendingEnrollments": await self._count(
                enrollments.where(Enrollment.status == EnrollmentStatus.PENDING.value)
            ),
            "activeEnrollments": active_enrollments,
            "activityPercentage": round(active_enrollments / total_enrollments * 100) if total_enrollments else 0,
        }
        await cache_manager.set(cache_key, stats)
        return stats

    async def get_recent_activity(self, limit: int = 5) -> List[Dict[str, Any]]:
        """Newest sign-ups and applications merged into one timeline."""
        users = (await self.db.execute(
            select(User).where(User.is_deleted == False).order_by(desc(User.created_at)).limit(limit)
        )).scalars().all()
        enrollments = (await self.db.execute(
            select(Enrollment).where(Enrollment.is_deleted == False).order_by(desc(Enrollment.joined_at)).limit(limit)
        )).scalars().all()

        activities = [
            {
                "id": f"user-{user.id}",
                "action": "User baru terdaftar",
                "user": user.full_name,
                "time": user.created_at,
                "type": "user",
            }
            for user in users
        ]
        for enrollment in enrollments:
            suffix = " (Pending)" if enrollment.status == EnrollmentStatus.PENDING.value else ""
            activities.append({
                "id": f"enrollment-{enrollment.id}",
                "action": f"Pendaftaran ekskul{suffix}",
                "user": f"{enrollment.student.user.full_name} -> {enrollment.extracurricular.name}",
                "time": enrollment.joined_at,
                "type": "enrollment",
            })

        activities.sort(key=lambda a: a["time"], reverse=True)
        for activity in activities:
            activity["time"] = activity["time"].isoformat()
        return activities[:limit]

    async def get_top_extracurriculars(self, limit: int = 5) -> List[Dict[str, Any]]:
        members = func.count(Enrollment.id)
        result = await self.db.execute(
            select(Extracurricular.id, Extracurricular.name, Extracurricular.category, members)
            .join(Enrollment, Enrollment.extracurricular_id == Extracurricular.id)
            .where(
                Extracurricular.is_deleted == False,
                Extracurricular.status == ExtracurricularStatus.ACTIVE.value,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
                Enrollment.is_deleted == False,
            )
            .group_by(Extracurricular.id, Extracurricular.name, Extracurricular.category)
            .order_by(desc(members), Extracurricular.name)
            .limit(limit)
        )
        return [
            {"id": str(ekskul_id), "name": name, "category": category, "membersCount": count}
            for ekskul_id, name, category, count in result.all()
        ]
