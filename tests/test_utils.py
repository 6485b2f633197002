from datetime import date, datetime, timedelta

import jwt
import pytest

from sixkul.core.exceptions import ValidationError
from sixkul.core.security import create_access_token, decode_access_token, hash_password, verify_password
from sixkul.services.health_service import HealthStatus, calculate_growth, classify_health, days_since
from sixkul.services.report_service import session_rate
from sixkul.services.schedule_service import validate_time_range
from sixkul.services.student_service import summarize_attendance
from sixkul.utils.dates import (
    academic_year, daterange, format_indonesian_date, parse_hhmm, relative_time, week_bounds,
)
from sixkul.utils.pagination import Paginator


@pytest.mark.parametrize("day, expected", [
    (date(2025, 7, 1), "2025/2026"),
    (date(2025, 12, 15), "2025/2026"),
    (date(2026, 1, 10), "2025/2026"),
    (date(2026, 6, 30), "2025/2026"),
    (date(2026, 7, 1), "2026/2027"),
])
def test_academic_year_starts_in_july(day, expected):
    assert academic_year(day) == expected


def test_format_indonesian_date():
    assert format_indonesian_date(date(2025, 12, 15)) == "Senin, 15 Desember 2025"
    assert format_indonesian_date(date(2026, 3, 1)) == "Minggu, 1 Maret 2026"


@pytest.mark.parametrize("delta, expected", [
    (timedelta(seconds=30), "Baru saja"),
    (timedelta(minutes=5), "5 menit lalu"),
    (timedelta(hours=3), "3 jam lalu"),
    (timedelta(days=1, hours=2), "Kemarin"),
    (timedelta(days=3), "3 hari lalu"),
    (timedelta(days=14), "2 minggu lalu"),
    (timedelta(days=65), "2 bulan lalu"),
])
def test_relative_time(delta, expected):
    now = datetime(2025, 12, 15, 12, 0)
    assert relative_time(now - delta, now=now) == expected


def test_parse_hhmm():
    assert parse_hhmm("07:30") == (7, 30)
    assert parse_hhmm("23:59") == (23, 59)
    for bad in ("7:30", "24:00", "12:60", "ab:cd", "", None):
        with pytest.raises(ValueError):
            parse_hhmm(bad)


def test_week_bounds_and_daterange():
    monday, sunday = week_bounds(date(2025, 12, 17))
    assert monday == date(2025, 12, 15)
    assert sunday == date(2025, 12, 21)
    assert list(daterange(date(2025, 12, 30), date(2026, 1, 1))) == [
        date(2025, 12, 30), date(2025, 12, 31), date(2026, 1, 1),
    ]
    assert list(daterange(date(2025, 12, 2), date(2025, 12, 1))) == []


def test_validate_time_range_collects_field_errors():
    validate_time_range("15:00", "17:00", "Aula")

    with pytest.raises(ValidationError) as exc:
        validate_time_range("17:00", "15:00", " ")
    fields = {e["field"] for e in exc.value.errors}
    assert fields == {"endTime", "location"}

    with pytest.raises(ValidationError) as exc:
        validate_time_range("1500", "17:00", "Aula")
    assert exc.value.errors == [{"field": "startTime", "message": "Format waktu harus HH:MM"}]


@pytest.mark.parametrize("current, past, expected", [
    (10, 0, 100),
    (0, 0, 0),
    (15, 10, 50),
    (5, 10, -50),
    (10, 10, 0),
])
def test_calculate_growth(current, past, expected):
    assert calculate_growth(current, past) == expected


@pytest.mark.parametrize("status, has_pembina, days, expected", [
    ("INACTIVE", True, 0, HealthStatus.INACTIVE),
    ("INACTIVE", False, 999, HealthStatus.INACTIVE),
    ("ACTIVE", False, 0, HealthStatus.CRITICAL),
    ("ACTIVE", True, 31, HealthStatus.CRITICAL),
    ("ACTIVE", True, 30, HealthStatus.WARNING),
    ("ACTIVE", True, 15, HealthStatus.WARNING),
    ("ACTIVE", True, 14, HealthStatus.HEALTHY),
    ("ACTIVE", True, 0, HealthStatus.HEALTHY),
])
def test_classify_health(status, has_pembina, days, expected):
    assert classify_health(status, has_pembina, days) == expected


def test_days_since():
    assert days_since(None) == 999
    assert days_since(date(2025, 12, 1), reference=date(2025, 12, 15)) == 14


def test_summarize_attendance():
    summary = summarize_attendance(["PRESENT", "PRESENT", "LATE", "ALPHA", "SICK"])
    assert summary["total"] == 5
    assert summary["present"] == 2
    assert summary["percentage"] == 40
    assert summary["absentLate"] == 2
    assert summarize_attendance([])["percentage"] == 0


def test_session_rate():
    assert session_rate(3, 4) == 75.0
    assert session_rate(0, 0) == 0.0


def test_pagination_meta_uses_camel_case():
    response = Paginator.create_response(["a", "b"], page=2, size=2, total=5)
    assert response["items"] == ["a", "b"]
    assert response["meta"] == {
        "page": 2, "size": 2, "total": 5, "totalPages": 3, "hasNext": True, "hasPrevious": True,
    }


def test_password_hashing():
    hashed = hash_password("rahasia123")
    assert hashed != "rahasia123"
    assert verify_password("rahasia123", hashed)
    assert not verify_password("salah", hashed)
    assert not verify_password("rahasia123", None)
    assert not verify_password("rahasia123", "not-a-bcrypt-hash")


def test_access_token_round_trip_and_expiry():
    token = create_access_token({"sub": "abc", "role": "ADMIN"})
    claims = decode_access_token(token)
    assert claims["sub"] == "abc"
    assert claims["role"] == "ADMIN"

    expired = create_access_token({"sub": "abc"}, expires_delta=timedelta(seconds=-10))
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(expired)

    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(token + "x")
