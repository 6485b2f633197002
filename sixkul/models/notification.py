# sixkul/models/notification.py
from sqlalchemy import Column, String, Text, Boolean, Integer, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base
import enum


class NotificationType(str, enum.Enum):
    ENROLLMENT = "ENROLLMENT"
    ATTENDANCE = "ATTENDANCE"
    ANNOUNCEMENT = "ANNOUNCEMENT"
    SCHEDULE = "SCHEDULE"


class ScheduleDefaultView(str, enum.Enum):
    DATE = "date"
    EXTRACURRICULAR = "extracurricular"


class Notification(Base):
    """In-app notification delivered to a single user."""
    __tablename__ = "notifications"

    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    enrollment_id = Column(Uuid, ForeignKey("enrollments.id"), nullable=True)
    type = Column(String(20), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False, index=True)


class StudentPreferences(Base):
    __tablename__ = "student_preferences"

    student_id = Column(Uuid, ForeignKey("student_profiles.id"), unique=True, nullable=False)

    notify_announcements = Column(Boolean, default=True, nullable=False)
    notify_schedule_changes = Column(Boolean, default=True, nullable=False)
    notify_attendance = Column(Boolean, default=True, nullable=False)

    schedule_default_view = Column(String(20), default=ScheduleDefaultView.DATE.value, nullable=False)
    schedule_range_days = Column(Integer, default=7, nullable=False)

    student = relationship("StudentProfile", back_populates="preferences")
