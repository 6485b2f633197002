# sixkul/models/__init__.py
"""Import all models here, needed for Alembic migration."""
from .base import Base

from .user import User, StudentProfile, PembinaProfile, Role
from .extracurricular import Extracurricular, Schedule, Session, ExtracurricularStatus, DayOfWeek
from .enrollment import (
    Enrollment, Attendance, EnrollmentStatus, AttendanceStatus, INACTIVE_ENROLLMENT_STATUSES
)
from .announcement import Announcement, AnnouncementScope
from .notification import Notification, NotificationType, StudentPreferences, ScheduleDefaultView
