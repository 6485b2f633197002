from .base_service import BaseService
from .auth_service import AuthService
from .admin_user_service import AdminUserService
from .admin_dashboard_service import AdminDashboardService
from .announcement_service import AnnouncementService
from .attendance_service import AttendanceService
from .enrollment_service import EnrollmentService
from .extracurricular_service import ExtracurricularService
from .health_service import HealthService
from .notification_service import NotificationService
from .pembina_service import PembinaService
from .preferences_service import PreferencesService
from .report_service import ReportService
from .schedule_service import ScheduleService
from .session_service import SessionService
from .student_service import StudentService

__all__ = [
    "BaseService",
    "AuthService",
    "AdminUserService",
    "AdminDashboardService",
    "AnnouncementService",
    "AttendanceService",
    "EnrollmentService",
    "ExtracurricularService",
    "HealthService",
    "NotificationService",
    "PembinaService",
    "PreferencesService",
    "ReportService",
    "ScheduleService",
    "SessionService",
    "StudentService",
]
