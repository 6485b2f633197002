# sixkul/core/deps.py
"""Authentication and role dependencies shared by the routers."""
import logging
import uuid
from typing import Optional

import jwt
from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_db
from .exceptions import AuthenticationError, PermissionDenied, NotFoundError
from .security import decode_access_token
from ..models import User, Role, StudentProfile, PembinaProfile, Extracurricular
from ..services.extracurricular_service import ExtracurricularService

logger = logging.getLogger(__name__)


def _extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return None


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    token = _extract_token(request)
    if not token:
        raise AuthenticationError()

    try:
        claims = decode_access_token(token)
        user_id = uuid.UUID(claims["sub"])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Sesi telah berakhir. Silakan login kembali.")
    except (jwt.InvalidTokenError, ValueError, KeyError) as e:
        logger.warning(f"Rejected access token: {e}")
        raise AuthenticationError("Token tidak valid. Silakan login kembali.")

    result = await db.execute(
        select(User).where(User.id == user_id, User.is_deleted == False)
    )
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise AuthenticationError("Akun tidak ditemukan atau tidak aktif.")
    return user


def require_roles(*roles: Role):
    """Dependency factory: the current user must hold one of ``roles``."""
    allowed = {role.value for role in roles}

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            logger.warning(f"User {user.id} with role {user.role} denied, requires {sorted(allowed)}")
            raise PermissionDenied()
        return user

    return checker


require_admin = require_roles(Role.ADMIN)
require_pembina = require_roles(Role.PEMBINA)
require_student = require_roles(Role.SISWA)
require_pembina_or_admin = require_roles(Role.PEMBINA, Role.ADMIN)


async def get_current_student(user: User = Depends(require_student)) -> StudentProfile:
    if not user.student_profile:
        raise NotFoundError("Profil siswa tidak ditemukan.")
    return user.student_profile


async def get_current_pembina(user: User = Depends(require_pembina)) -> PembinaProfile:
    if not user.pembina_profile:
        raise NotFoundError("Profil pembina tidak ditemukan.")
    return user.pembina_profile


async def get_owned_extracurricular(
    extracurricular_id: uuid.UUID,
    user: User = Depends(require_pembina),
    db: AsyncSession = Depends(get_db),
) -> Extracurricular:
    """Path dependency for ``/{extracurricular_id}/...`` pembina routes."""
    return await ExtracurricularService(db).validate_pembina_ownership(extracurricular_id, user)
