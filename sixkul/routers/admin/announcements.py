from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import require_admin
from ...models import User
from ...schemas.announcement_schemas import AnnouncementCreate, AnnouncementUpdate
from ...services.announcement_service import AnnouncementService
from ...utils.pagination import Paginator, PaginationParams
from ...utils.responses import success_response
from ...utils.serializers import announcement_to_dict

router = APIRouter(prefix="/api/admin/announcements", tags=["Admin - Announcements"])


@router.get("")
async def list_system_announcements(
    pagination: PaginationParams = Depends(Paginator.get_pagination_params),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await AnnouncementService(db).list_system_announcements(pagination.page, pagination.size)
    return success_response(Paginator.create_response(
        [announcement_to_dict(a) for a in result["items"]], result["page"], result["size"], result["total"]
    ))


@router.post("", status_code=201)
async def create_system_announcement(
    payload: AnnouncementCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    announcement = await AnnouncementService(db).create_system_announcement(admin, payload.title, payload.content)
    return success_response(announcement_to_dict(announcement), "Pengumuman berhasil dibuat")


@router.get("/{announcement_id}")
async def get_system_announcement(
    announcement_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    announcement = await AnnouncementService(db).get_system_announcement(announcement_id)
    return success_response(announcement_to_dict(announcement))


@router.put("/{announcement_id}")
async def update_system_announcement(
    announcement_id: UUID,
    payload: AnnouncementUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    announcement = await AnnouncementService(db).update_system_announcement(
        announcement_id, payload.title, payload.content
    )
    return success_response(announcement_to_dict(announcement), "Pengumuman berhasil diperbarui")


@router.delete("/{announcement_id}")
async def delete_system_announcement(
    announcement_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await AnnouncementService(db).delete_system_announcement(announcement_id)
    return success_response(None, "Pengumuman berhasil dihapus")
