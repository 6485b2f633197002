"""Login, logout and the current-user endpoint."""
import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_db
from ..core.deps import get_current_user
from ..models import User
from ..schemas.auth_schemas import LoginRequest
from ..services.auth_service import AuthService
from ..utils.responses import success_response
from ..utils.serializers import user_to_dict

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login")
async def login(payload: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    result = await AuthService(db).login(payload.email, payload.password)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=result["token"],
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )
    return success_response({"user": user_to_dict(result["user"])}, "Login berhasil")


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.auth_cookie_name, path="/")
    return success_response(None, "Logout berhasil")


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return success_response(user_to_dict(user))
