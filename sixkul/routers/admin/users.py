from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import require_admin
from ...models import User, Role
from ...schemas.user_schemas import UserCreate, UserUpdate
from ...services.admin_user_service import AdminUserService
from ...utils.pagination import Paginator, PaginationParams
from ...utils.responses import success_response
from ...utils.serializers import user_to_dict

router = APIRouter(prefix="/api/admin/users", tags=["Admin - Users"])


@router.get("")
async def list_users(
    role: Optional[Role] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    pagination: PaginationParams = Depends(Paginator.get_pagination_params),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await AdminUserService(db).list_users(
        role=role.value if role else None,
        search=search,
        page=pagination.page,
        size=pagination.size,
    )
    return success_response(Paginator.create_response(
        [user_to_dict(u) for u in result["items"]], result["page"], result["size"], result["total"]
    ))


@router.post("", status_code=201)
async def create_user(payload: UserCreate, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    result = await AdminUserService(db).create_user(payload.model_dump())
    data = user_to_dict(result["user"])
    data["defaultPassword"] = result["defaultPassword"]
    return success_response(data, "Pengguna berhasil dibuat")


@router.get("/{user_id}")
async def get_user(user_id: UUID, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return success_response(user_to_dict(await AdminUserService(db).get_or_404(user_id)))


@router.put("/{user_id}")
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await AdminUserService(db).update_user(user_id, payload.model_dump(exclude_unset=True), admin)
    return success_response(user_to_dict(user), "Pengguna berhasil diperbarui")


@router.delete("/{user_id}")
async def deactivate_user(user_id: UUID, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    user = await AdminUserService(db).deactivate_user(user_id, admin)
    return success_response(user_to_dict(user), "Pengguna berhasil dinonaktifkan")
