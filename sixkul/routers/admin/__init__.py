from . import users, extracurriculars, announcements, dashboard, reports

__all__ = ["users", "extracurriculars", "announcements", "dashboard", "reports"]
