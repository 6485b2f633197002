from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import require_admin
from ...models import User
from ...services.attendance_service import AttendanceService
from ...services.report_service import ReportService
from ...utils.cache_invalidation import invalidate_admin_cache
from ...utils.responses import success_response
from ...utils.serializers import attendance_to_dict

router = APIRouter(prefix="/api/admin", tags=["Admin - Reports"])


@router.get("/reports")
async def get_report(
    report_type: str = Query(..., alias="type"),
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await ReportService(db).get_report(report_type, start_date, end_date)
    return success_response({
        "type": report_type.upper(),
        "period": {"start": start_date.isoformat(), "end": end_date.isoformat()},
        "rows": rows,
    })


@router.patch("/attendance/{attendance_id}/unlock")
async def unlock_attendance(
    attendance_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    attendance = await AttendanceService(db).unlock_attendance(attendance_id)
    await invalidate_admin_cache()
    return success_response(attendance_to_dict(attendance), "Absensi dibuka untuk koreksi")
