"""Admin dashboard, extracurricular health and pembina monitoring."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import require_admin
from ...models import User
from ...services.admin_dashboard_service import AdminDashboardService
from ...services.health_service import HealthService
from ...utils.responses import success_response

router = APIRouter(prefix="/api/admin", tags=["Admin - Dashboard"])


@router.get("/dashboard/stats")
async def dashboard_stats(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return success_response(await AdminDashboardService(db).get_dashboard_stats())


@router.get("/dashboard/activity")
async def recent_activity(
    limit: int = Query(5, ge=1, le=50),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await AdminDashboardService(db).get_recent_activity(limit))


@router.get("/dashboard/top-extracurriculars")
async def top_extracurriculars(
    limit: int = Query(5, ge=1, le=20),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await AdminDashboardService(db).get_top_extracurriculars(limit))


@router.get("/overview")
async def system_overview(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return success_response(await HealthService(db).get_system_overview())


@router.get("/health")
async def extracurricular_health(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return success_response(await HealthService(db).list_health())


@router.get("/health/{extracurricular_id}")
async def extracurricular_health_detail(
    extracurricular_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await HealthService(db).get_health_detail(extracurricular_id))


@router.get("/pembina-metrics")
async def pembina_metrics(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return success_response(await HealthService(db).get_pembina_metrics())
