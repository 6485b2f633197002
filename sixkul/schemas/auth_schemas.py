# sixkul/schemas/auth_schemas.py
from pydantic import EmailStr, Field

from .base import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")
