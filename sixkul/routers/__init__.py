from . import health, auth, notifications, attendance
from .admin import users, extracurriculars, announcements, dashboard, reports
from .pembina import (
    dashboard as pembina_dashboard,
    schedules as pembina_schedules,
    sessions as pembina_sessions,
    announcements as pembina_announcements,
)
from .student import dashboard as student_dashboard, enrollments as student_enrollments

__all__ = [
    "health",
    "auth",
    "notifications",
    "attendance",
    "users",
    "extracurriculars",
    "announcements",
    "dashboard",
    "reports",
    "pembina_dashboard",
    "pembina_schedules",
    "pembina_sessions",
    "pembina_announcements",
    "student_dashboard",
    "student_enrollments",
]
