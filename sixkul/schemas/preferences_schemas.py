# sixkul/schemas/preferences_schemas.py
from typing import Optional

from .base import CamelModel


class PreferencesUpdate(CamelModel):
    notify_announcements: Optional[bool] = None
    notify_schedule_changes: Optional[bool] = None
    notify_attendance: Optional[bool] = None
    schedule_default_view: Optional[str] = None
    schedule_range_days: Optional[int] = None
