from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import get_owned_extracurricular, require_pembina
from ...models import Extracurricular, User
from ...schemas.announcement_schemas import AnnouncementCreate, AnnouncementUpdate
from ...services.announcement_service import AnnouncementService
from ...utils.responses import success_response
from ...utils.serializers import announcement_to_dict

router = APIRouter(
    prefix="/api/pembina/extracurriculars/{extracurricular_id}/announcements",
    tags=["Pembina - Announcements"],
)


@router.get("")
async def list_announcements(
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    announcements = await AnnouncementService(db).list_for_extracurricular(ekskul.id)
    return success_response([announcement_to_dict(a) for a in announcements])


@router.post("", status_code=201)
async def create_announcement(
    payload: AnnouncementCreate,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    user: User = Depends(require_pembina),
    db: AsyncSession = Depends(get_db),
):
    announcement = await AnnouncementService(db).create_extracurricular_announcement(
        ekskul, user, payload.title, payload.content
    )
    return success_response(announcement_to_dict(announcement), "Pengumuman berhasil dibuat")


@router.put("/{announcement_id}")
async def update_announcement(
    announcement_id: UUID,
    payload: AnnouncementUpdate,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    user: User = Depends(require_pembina),
    db: AsyncSession = Depends(get_db),
):
    announcement = await AnnouncementService(db).update_extracurricular_announcement(
        ekskul, announcement_id, user, payload.title, payload.content
    )
    return success_response(announcement_to_dict(announcement), "Pengumuman berhasil diperbarui")


@router.delete("/{announcement_id}")
async def delete_announcement(
    announcement_id: UUID,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    user: User = Depends(require_pembina),
    db: AsyncSession = Depends(get_db),
):
    await AnnouncementService(db).delete_extracurricular_announcement(ekskul, announcement_id, user)
    return success_response(None, "Pengumuman berhasil dihapus")
