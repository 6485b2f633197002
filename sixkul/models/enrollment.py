# sixkul/models/enrollment.py
from sqlalchemy import Column, String, Text, Date, DateTime, Boolean, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base
from ..utils.dates import utcnow
import enum


class EnrollmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"
    ALUMNI = "ALUMNI"
    CANCELLED = "CANCELLED"


INACTIVE_ENROLLMENT_STATUSES = (
    EnrollmentStatus.ALUMNI.value,
    EnrollmentStatus.REJECTED.value,
    EnrollmentStatus.CANCELLED.value,
)


class AttendanceStatus(str, enum.Enum):
    PRESENT = "PRESENT"
    SICK = "SICK"
    PERMISSION = "PERMISSION"
    ALPHA = "ALPHA"
    LATE = "LATE"


class Enrollment(Base):
    __tablename__ = "enrollments"

    student_id = Column(Uuid, ForeignKey("student_profiles.id"), nullable=False, index=True)
    extracurricular_id = Column(Uuid, ForeignKey("extracurriculars.id"), nullable=False, index=True)

    status = Column(String(20), default=EnrollmentStatus.PENDING.value, nullable=False, index=True)
    joined_at = Column(DateTime, default=utcnow, nullable=False)
    academic_year = Column(String(10), nullable=False)

    student = relationship("StudentProfile", back_populates="enrollments", lazy="selectin")
    extracurricular = relationship("Extracurricular", back_populates="enrollments", lazy="selectin")
    attendances = relationship("Attendance", back_populates="enrollment")


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "date", name="uq_attendance_enrollment_date"),
    )

    enrollment_id = Column(Uuid, ForeignKey("enrollments.id"), nullable=False, index=True)
    session_id = Column(Uuid, ForeignKey("sessions.id"), nullable=True, index=True)
    date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False)
    notes = Column(Text)
    # Rows are locked on creation; only an admin unlock reopens them
    is_locked = Column(Boolean, default=True, nullable=False)

    enrollment = relationship("Enrollment", back_populates="attendances", lazy="selectin")
    session = relationship("Session", back_populates="attendances", lazy="selectin")
