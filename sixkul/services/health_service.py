# sixkul/services/health_service.py
"""Extracurricular health scoring and system-wide admin aggregates."""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from .extracurricular_service import ExtracurricularService
from ..core.cache import cache_manager
from ..models import (
    Extracurricular, ExtracurricularStatus, Session, Attendance, AttendanceStatus, Enrollment,
    EnrollmentStatus, PembinaProfile, User, Role,
)
from ..utils.dates import today, utcnow

logger = logging.getLogger(__name__)

NO_SESSION_DAYS = 999
WARNING_AFTER_DAYS = 14
CRITICAL_AFTER_DAYS = 30
RECENT_SESSIONS = 5


class HealthStatus:
    HEALTHY = "HEALTHY"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    INACTIVE = "INACTIVE"

    ALL = (HEALTHY, WARNING, CRITICAL, INACTIVE)


def classify_health(ekskul_status: str, has_pembina: bool, days_since_last_session: int) -> str:
    if ekskul_status == ExtracurricularStatus.INACTIVE.value:
        return HealthStatus.INACTIVE
    if not has_pembina or days_since_last_session > CRITICAL_AFTER_DAYS:
        return HealthStatus.CRITICAL
    if days_since_last_session > WARNING_AFTER_DAYS:
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


def calculate_growth(current: int, past: int) -> int:
    """Percentage change against 30 days ago; from zero any growth counts as 100."""
    if past == 0:
        return 100 if current > 0 else 0
    return round((current - past) / past * 100)


def days_since(last_session_date: Optional[date], reference: Optional[date] = None) -> int:
    if last_session_date is None:
        return NO_SESSION_DAYS
    return ((reference or today()) - last_session_date).days


class HealthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _held_sessions(self):
        """Sessions that actually took place: not deleted, not cancelled, not in the future."""
        return (
            Session.is_deleted == False,
            Session.is_cancelled == False,
            Session.date <= today(),
        )

    async def _last_session_dates(self, extracurricular_ids: List[UUID]) -> Dict[UUID, date]:
        if not extracurricular_ids:
            return {}
        result = await self.db.execute(
            select(Session.extracurricular_id, func.max(Session.date))
            .where(Session.extracurricular_id.in_(extracurricular_ids), *self._held_sessions())
            .group_by(Session.extracurricular_id)
        )
        return dict(result.all())

    async def _sessions_since(self, extracurricular_ids: List[UUID], since: date) -> Dict[UUID, int]:
        if not extracurricular_ids:
            return {}
        result = await self.db.execute(
            select(Session.extracurricular_id, func.count(Session.id))
            .where(
                Session.extracurricular_id.in_(extracurricular_ids),
                Session.date >= since,
                *self._held_sessions(),
            )
            .group_by(Session.extracurricular_id)
        )
        return dict(result.all())

    async def _health_rows(self, extracurriculars: List[Extracurricular]) -> List[Dict[str, Any]]:
        ids = [e.id for e in extracurriculars]
        last_dates = await self._last_session_dates(ids)
        recent_counts = await self._sessions_since(ids, today() - timedelta(days=30))
        members = await ExtracurricularService(self.db).enrollment_counts(ids)

        rows = []
        for ekskul in extracurriculars:
            last_date = last_dates.get(ekskul.id)
            elapsed = days_since(last_date)
            rows.append({
                "id": str(ekskul.id),
                "name": ekskul.name,
                "category": ekskul.category,
                "status": ekskul.status,
                "pembinaName": ekskul.pembina.user.full_name if ekskul.pembina else None,
                "healthStatus": classify_health(ekskul.status, ekskul.pembina_id is not None, elapsed),
                "membersCount": members.get(ekskul.id, {}).get("members", 0),
                "totalSessions30Days": recent_counts.get(ekskul.id, 0),
                "lastSessionDate": last_date.isoformat() if last_date else None,
                "daysSinceLastSession": elapsed,
            })
        return rows

    async def get_health_status(self, extracurricular: Extracurricular) -> Dict[str, Any]:
        return (await self._health_rows([extracurricular]))[0]

    async def list_health(self) -> Dict[str, Any]:
        cache_key = cache_manager.make_key("admin", "health")
        cached = await cache_manager.get(cache_key)
        if cached is not None:
            return cached

        result = await self.db.execute(
            select(Extracurricular)
            .where(Extracurricular.is_deleted == False)
            .order_by(Extracurricular.name)
        )
        rows = await self._health_rows(result.scalars().all())
        summary = {status: 0 for status in HealthStatus.ALL}
        for row in rows:
            summary[row["healthStatus"]] += 1

        data = {"items": rows, "summary": summary}
        await cache_manager.set(cache_key, data)
        return data

    async def get_health_detail(self, extracurricular_id: UUID) -> Dict[str, Any]:
        ekskul = await ExtracurricularService(self.db).get_or_404(extracurricular_id)
        detail = await self.get_health_status(ekskul)
        active_members = detail["membersCount"]

        present = func.sum(case((Attendance.status == AttendanceStatus.PRESENT.value, 1), else_=0))
        result = await self.db.execute(
            select(Session.id, Session.date, func.coalesce(present, 0))
            .outerjoin(Attendance, (Attendance.session_id == Session.id) & (Attendance.is_deleted == False))
            .where(Session.extracurricular_id == ekskul.id, *self._held_sessions())
            .group_by(Session.id, Session.date)
            .order_by(Session.date.desc())
            .limit(RECENT_SESSIONS)
        )
        recent = []
        for session_id, session_date, present_count in result.all():
            present_count = int(present_count or 0)
            rate = round(present_count / active_members * 100) if active_members > 0 else 0
            recent.append({
                "sessionId": str(session_id),
                "date": session_date.isoformat(),
                "presentCount": present_count,
                "attendanceRate": rate,
            })
        detail["recentSessions"] = recent
        detail["description"] = ekskul.description
        return detail

    async def _count(self, stmt) -> int:
        return (await self.db.execute(stmt)).scalar() or 0

    async def get_system_overview(self) -> Dict[str, Any]:
        """Headline counts, each paired with its growth against 30 days ago."""
        cache_key = cache_manager.make_key("admin", "overview")
        cached = await cache_manager.get(cache_key)
        if cached is not None:
            return cached

        thirty_days_ago = utcnow() - timedelta(days=30)
        live_users = select(func.count(User.id)).where(User.is_deleted == False, User.is_active == True)
        metrics = {
            "students": (live_users.where(User.role == Role.SISWA.value), User.created_at),
            "pembina": (live_users.where(User.role == Role.PEMBINA.value), User.created_at),
            "activeExtracurriculars": (
                select(func.count(Extracurricular.id)).where(
                    Extracurricular.is_deleted == False,
                    Extracurricular.status == ExtracurricularStatus.ACTIVE.value,
                ),
                Extracurricular.created_at,
            ),
            "activeEnrollments": (
                select(func.count(Enrollment.id)).where(
                    Enrollment.is_deleted == False,
                    Enrollment.status == EnrollmentStatus.ACTIVE.value,
                ),
                Enrollment.joined_at,
            ),
            "sessions": (
                select(func.count(Session.id)).where(Session.is_deleted == False, Session.is_cancelled == False),
                Session.created_at,
            ),
        }

        data = {}
        for name, (stmt, created_column) in metrics.items():
            current = await self._count(stmt)
            past = await self._count(stmt.where(created_column < thirty_days_ago))
            data[name] = {"count": current, "growth": calculate_growth(current, past)}

        await cache_manager.set(cache_key, data)
        return data

    async def get_pembina_metrics(self) -> List[Dict[str, Any]]:
        result = await self.db.execute(
            select(PembinaProfile)
            .join(User, User.id == PembinaProfile.user_id)
            .where(PembinaProfile.is_deleted == False, User.is_deleted == False)
            .order_by(User.full_name)
        )
        pembinas = result.scalars().all()

        ekskul_result = await self.db.execute(
            select(Extracurricular.id, Extracurricular.pembina_id).where(
                Extracurricular.pembina_id.in_([p.id for p in pembinas]),
                Extracurricular.is_deleted == False,
            )
        )
        owner_of = dict(ekskul_result.all())
        ekskul_ids = list(owner_of)
        last_dates = await self._last_session_dates(ekskul_ids)
        recent_counts = await self._sessions_since(ekskul_ids, today() - timedelta(days=30))

        metrics = []
        for pembina in pembinas:
            owned = [eid for eid, pid in owner_of.items() if pid == pembina.id]
            dates = [last_dates[eid] for eid in owned if eid in last_dates]
            last_date = max(dates) if dates else None
            metrics.append({
                "id": str(pembina.id),
                "userId": str(pembina.user_id),
                "name": pembina.user.full_name,
                "assignedExtracurricularsCount": len(owned),
                "sessionsCreated30Days": sum(recent_counts.get(eid, 0) for eid in owned),
                "lastSessionDate": last_date.isoformat() if last_date else None,
            })
        return metrics
