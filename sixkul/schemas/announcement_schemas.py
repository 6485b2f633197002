# sixkul/schemas/announcement_schemas.py
from typing import Optional

from .base import CamelModel


class AnnouncementCreate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None


class AnnouncementUpdate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
