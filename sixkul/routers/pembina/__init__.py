from . import dashboard, schedules, sessions, announcements

__all__ = ["dashboard", "schedules", "sessions", "announcements"]
