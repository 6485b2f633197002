# sixkul/utils/dates.py
"""Date helpers: academic year, Indonesian formatting, relative time."""
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional, Tuple

# Indexed by ``date.weekday()``
WEEKDAYS = ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY"]

DAY_LABELS = {
    "MONDAY": "Senin",
    "TUESDAY": "Selasa",
    "WEDNESDAY": "Rabu",
    "THURSDAY": "Kamis",
    "FRIDAY": "Jumat",
    "SATURDAY": "Sabtu",
    "SUNDAY": "Minggu",
}

MONTH_NAMES = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    return date.today()


def weekday_name(d: date) -> str:
    return WEEKDAYS[d.weekday()]


def day_label(day_of_week: str) -> str:
    return DAY_LABELS.get(day_of_week, day_of_week)


def academic_year(d: Optional[date] = None) -> str:
    """School years start in July: ``2025/2026`` runs July 2025 to June 2026."""
    d = d or today()
    if d.month < 7:
        return f"{d.year - 1}/{d.year}"
    return f"{d.year}/{d.year + 1}"


def format_indonesian_date(d: date) -> str:
    """``Senin, 15 Desember 2025``"""
    return f"{DAY_LABELS[weekday_name(d)]}, {d.day} {MONTH_NAMES[d.month - 1]} {d.year}"


def daterange(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_bounds(d: Optional[date] = None) -> Tuple[date, date]:
    """Monday and Sunday of the week containing ``d``."""
    d = d or today()
    monday = d - timedelta(days=d.weekday())
    return monday, monday + timedelta(days=6)


def relative_time(moment: datetime, now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    diff = now - moment
    minutes = int(diff.total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "Baru saja"
    if minutes < 60:
        return f"{minutes} menit lalu"
    if hours < 24:
        return f"{hours} jam lalu"
    if days == 1:
        return "Kemarin"
    if days < 7:
        return f"{days} hari lalu"
    if days < 30:
        return f"{days // 7} minggu lalu"
    return f"{days // 30} bulan lalu"


def parse_hhmm(value: str) -> Tuple[int, int]:
    """Parse ``HH:MM``. Raises ValueError when malformed."""
    parts = value.split(":") if isinstance(value, str) else []
    if len(parts) != 2 or not all(p.isdigit() and len(p) == 2 for p in parts):
        raise ValueError(f"Invalid time: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return hour, minute
