# sixkul/services/auth_service.py
import logging
from typing import Any, Dict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthenticationError
from ..core.security import verify_password, create_access_token
from ..models import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Email atau password salah"


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate(self, email: str, password: str) -> User:
        result = await self.db.execute(
            select(User).where(
                func.lower(User.email) == email.strip().lower(),
                User.is_deleted == False,
            )
        )
        user = result.scalar_one_or_none()
        # Unknown email, wrong password and deactivated accounts look the same
        if user is None or not user.is_active or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for {email}")
            raise AuthenticationError(INVALID_CREDENTIALS)
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        claims: Dict[str, Any] = {
            "sub": str(user.id),
            "role": user.role,
            "email": user.email,
            "name": user.full_name,
        }
        return create_access_token(claims)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        user = await self.authenticate(email, password)
        logger.info(f"User {user.id} logged in as {user.role}")
        return {"user": user, "token": self.issue_token(user)}
