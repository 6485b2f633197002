# sixkul/models/extracurricular.py
from sqlalchemy import Column, String, Text, Date, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base
import enum


class ExtracurricularStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class DayOfWeek(str, enum.Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class Extracurricular(Base):
    __tablename__ = "extracurriculars"

    name = Column(String(150), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text)
    logo_url = Column(String(500))
    status = Column(String(20), default=ExtracurricularStatus.ACTIVE.value, nullable=False, index=True)

    pembina_id = Column(Uuid, ForeignKey("pembina_profiles.id"), nullable=True, index=True)

    pembina = relationship("PembinaProfile", back_populates="extracurriculars", lazy="selectin")
    schedules = relationship("Schedule", back_populates="extracurricular")
    sessions = relationship("Session", back_populates="extracurricular")
    enrollments = relationship("Enrollment", back_populates="extracurricular")


class Schedule(Base):
    """Weekly recurring template that concrete sessions are generated from."""
    __tablename__ = "schedules"

    extracurricular_id = Column(Uuid, ForeignKey("extracurriculars.id"), nullable=False, index=True)
    day_of_week = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    location = Column(String(255), nullable=False)

    extracurricular = relationship("Extracurricular", back_populates="schedules", lazy="selectin")
    sessions = relationship("Session", back_populates="schedule")


class Session(Base):
    """A single dated meeting. ``schedule_id`` is empty for ad-hoc meetings."""
    __tablename__ = "sessions"

    extracurricular_id = Column(Uuid, ForeignKey("extracurriculars.id"), nullable=False, index=True)
    schedule_id = Column(Uuid, ForeignKey("schedules.id"), nullable=True, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    location = Column(String(255), nullable=False)
    notes = Column(Text)
    is_cancelled = Column(Boolean, default=False, nullable=False)

    extracurricular = relationship("Extracurricular", back_populates="sessions", lazy="selectin")
    schedule = relationship("Schedule", back_populates="sessions", lazy="selectin")
    attendances = relationship("Attendance", back_populates="session")
