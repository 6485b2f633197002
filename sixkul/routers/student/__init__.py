from . import dashboard, enrollments

__all__ = ["dashboard", "enrollments"]
