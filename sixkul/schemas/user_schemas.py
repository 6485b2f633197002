# sixkul/schemas/user_schemas.py
"""Admin user management and profile payloads."""
from typing import Optional

from pydantic import AliasChoices, Field

from .base import CamelModel
from ..models import Role


class UserCreate(CamelModel):
    # Email and role-specific fields are checked by the service so that all
    # problems come back together as field errors
    full_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("name", "fullName", "full_name"))
    email: Optional[str] = Field(default=None, max_length=255)
    role: Optional[str] = None
    specific_id: Optional[str] = Field(default=None, max_length=30, description="NIS for SISWA, NIP for PEMBINA")
    class_name: Optional[str] = Field(default=None, max_length=50)
    major: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=20)
    expertise: Optional[str] = Field(default=None, max_length=255)


class UserUpdate(CamelModel):
    """All fields optional; profile fields apply to the user's role profile."""
    full_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("name", "fullName", "full_name"))
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    specific_id: Optional[str] = Field(default=None, max_length=30)
    class_name: Optional[str] = Field(default=None, max_length=50)
    major: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=20)
    expertise: Optional[str] = Field(default=None, max_length=255)


class PembinaProfileUpdate(CamelModel):
    expertise: Optional[str] = Field(default=None, max_length=255)
    phone_number: Optional[str] = Field(default=None, max_length=20)
