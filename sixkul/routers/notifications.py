"""In-app notifications of the signed-in user, whatever their role."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.deps import get_current_user
from ..models import User
from ..services.notification_service import NotificationService
from ..utils.responses import success_response
from ..utils.serializers import notification_to_dict

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await NotificationService(db).list_for_user(user.id, unread_only, limit))


@router.patch("/read-all")
async def mark_all_as_read(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    count = await NotificationService(db).mark_all_as_read(user.id)
    return success_response({"count": count}, f"{count} notifikasi ditandai sudah dibaca")


@router.patch("/{notification_id}/read")
async def mark_as_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await NotificationService(db).mark_as_read(notification_id, user.id)
    return success_response(notification_to_dict(notification))
