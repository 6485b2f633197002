from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import require_admin
from ...models import User, ExtracurricularStatus
from ...schemas.extracurricular_schemas import ExtracurricularCreate, ExtracurricularUpdate
from ...services.extracurricular_service import ExtracurricularService
from ...utils.cache_invalidation import invalidate_extracurricular_cache
from ...utils.responses import success_response
from ...utils.serializers import extracurricular_to_dict

router = APIRouter(prefix="/api/admin/extracurriculars", tags=["Admin - Extracurriculars"])


@router.get("")
async def list_extracurriculars(
    status: Optional[ExtracurricularStatus] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    items = await ExtracurricularService(db).list_extracurriculars(
        status=status.value if status else None, category=category, search=search
    )
    return success_response(items)


@router.post("", status_code=201)
async def create_extracurricular(
    payload: ExtracurricularCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    ekskul = await ExtracurricularService(db).create_extracurricular(payload.model_dump())
    await invalidate_extracurricular_cache()
    return success_response(extracurricular_to_dict(ekskul), "Ekstrakurikuler berhasil dibuat")


@router.get("/{extracurricular_id}")
async def get_extracurricular(
    extracurricular_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await ExtracurricularService(db).get_detail(extracurricular_id))


@router.put("/{extracurricular_id}")
async def update_extracurricular(
    extracurricular_id: UUID,
    payload: ExtracurricularUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    ekskul = await ExtracurricularService(db).update_extracurricular(
        extracurricular_id, payload.model_dump(exclude_unset=True)
    )
    await invalidate_extracurricular_cache()
    return success_response(extracurricular_to_dict(ekskul), "Ekstrakurikuler berhasil diperbarui")


@router.delete("/{extracurricular_id}")
async def archive_extracurricular(
    extracurricular_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    ekskul = await ExtracurricularService(db).archive_extracurricular(extracurricular_id)
    await invalidate_extracurricular_cache()
    return success_response(extracurricular_to_dict(ekskul), "Ekstrakurikuler berhasil diarsipkan")
