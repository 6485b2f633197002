# sixkul/models/announcement.py
from sqlalchemy import Column, String, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base
import enum


class AnnouncementScope(str, enum.Enum):
    SYSTEM = "SYSTEM"
    EXTRACURRICULAR = "EXTRACURRICULAR"


class Announcement(Base):
    __tablename__ = "announcements"

    scope = Column(String(20), nullable=False, index=True)
    extracurricular_id = Column(Uuid, ForeignKey("extracurriculars.id"), nullable=True, index=True)
    author_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)

    author = relationship("User", lazy="selectin")
    extracurricular = relationship("Extracurricular", lazy="selectin")
