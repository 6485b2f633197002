from datetime import date, timedelta

import pytest
from sqlalchemy import select

from sixkul.core.exceptions import ValidationError
from sixkul.models import Session
from sixkul.services.attendance_service import AttendanceService
from sixkul.services.health_service import HealthService
from sixkul.services.report_service import ReportService
from sixkul.services.session_service import SessionService

DECEMBER = (date(2025, 12, 1), date(2025, 12, 31))


def _session_data(day, location="Aula"):
    return {"date": day, "start_time": "15:00", "end_time": "17:00", "location": location}


async def _record_first_december_session(db, seed):
    await SessionService(db).generate_sessions_from_schedules(seed.ekskul, *DECEMBER)
    first = (await db.execute(select(Session).where(Session.date == DECEMBER[0]))).scalar_one()
    first_student, second_student = seed.active_enrollments
    await AttendanceService(db).save_session_attendance(first.id, seed.ekskul, [
        {"enrollment_id": first_student.id, "status": "PRESENT", "notes": None},
        {"enrollment_id": second_student.id, "status": "ALPHA", "notes": None},
    ])


async def test_health_classifies_by_last_held_session(db, seed):
    sessions = SessionService(db)
    today = date.today()
    await sessions.create_session(seed.ekskul, _session_data(today - timedelta(days=3)))
    # Future and cancelled meetings do not count as held
    await sessions.create_session(seed.ekskul, _session_data(today + timedelta(days=5)))
    cancelled = await sessions.create_session(seed.ekskul, _session_data(today - timedelta(days=1)))
    await sessions.cancel_session(seed.ekskul, cancelled.id)

    health = await HealthService(db).list_health()

    rows = {row["name"]: row for row in health["items"]}
    assert rows["Pramuka"]["healthStatus"] == "HEALTHY"
    assert rows["Pramuka"]["daysSinceLastSession"] == 3
    assert rows["Pramuka"]["totalSessions30Days"] == 1
    assert rows["Pramuka"]["membersCount"] == 2
    assert rows["Paduan Suara"]["healthStatus"] == "CRITICAL"
    assert rows["Paduan Suara"]["daysSinceLastSession"] == 999
    assert rows["Paduan Suara"]["lastSessionDate"] is None
    assert health["summary"] == {"HEALTHY": 1, "WARNING": 0, "CRITICAL": 1, "INACTIVE": 0}


async def test_health_warning_after_two_weeks(db, seed):
    await SessionService(db).create_session(seed.ekskul, _session_data(date.today() - timedelta(days=20)))

    row = await HealthService(db).get_health_status(seed.ekskul)

    assert row["healthStatus"] == "WARNING"


async def test_health_detail_uses_present_records_over_members(db, seed):
    session = await SessionService(db).create_session(seed.ekskul, _session_data(date.today() - timedelta(days=2)))
    first_student, second_student = seed.active_enrollments
    await AttendanceService(db).save_session_attendance(session.id, seed.ekskul, [
        {"enrollment_id": first_student.id, "status": "PRESENT", "notes": None},
        {"enrollment_id": second_student.id, "status": "LATE", "notes": None},
    ])

    detail = await HealthService(db).get_health_detail(seed.ekskul.id)

    assert detail["description"] == "Latihan kepanduan rutin"
    assert detail["recentSessions"] == [{
        "sessionId": str(session.id),
        "date": session.date.isoformat(),
        "presentCount": 1,
        "attendanceRate": 50,
    }]


async def test_system_overview_counts_and_growth(db, seed):
    overview = await HealthService(db).get_system_overview()

    assert overview == {
        "students": {"count": 3, "growth": 100},
        "pembina": {"count": 2, "growth": 100},
        "activeExtracurriculars": {"count": 2, "growth": 100},
        "activeEnrollments": {"count": 2, "growth": 100},
        "sessions": {"count": 0, "growth": 0},
    }


async def test_pembina_metrics(db, seed):
    await SessionService(db).create_session(seed.ekskul, _session_data(date.today() - timedelta(days=4)))

    metrics = await HealthService(db).get_pembina_metrics()

    assert [m["name"] for m in metrics] == ["Budi Santoso", "Sari Dewi"]
    budi, sari = metrics
    assert budi["assignedExtracurricularsCount"] == 1
    assert budi["sessionsCreated30Days"] == 1
    assert budi["lastSessionDate"] == (date.today() - timedelta(days=4)).isoformat()
    assert sari["sessionsCreated30Days"] == 0
    assert sari["lastSessionDate"] is None


async def test_extracurricular_report_averages_session_rates(db, seed):
    await _record_first_december_session(db, seed)

    rows = await ReportService(db).get_report("extracurricular", *DECEMBER)

    by_name = {row["name"]: row for row in rows}
    # One session at 50 %, four unrecorded sessions at 0 %
    assert by_name["Pramuka"]["sessionsHeld"] == 5
    assert by_name["Pramuka"]["averageAttendanceRate"] == 10.0
    assert by_name["Pramuka"]["totalEnrollments"] == 3
    assert by_name["Pramuka"]["activeEnrollments"] == 2
    assert by_name["Paduan Suara"]["sessionsHeld"] == 0
    assert by_name["Paduan Suara"]["averageAttendanceRate"] == 0.0


async def test_pembina_and_student_reports(db, seed):
    await _record_first_december_session(db, seed)
    service = ReportService(db)

    pembina_rows = {row["name"]: row for row in await service.get_report("PEMBINA", *DECEMBER)}
    assert pembina_rows["Budi Santoso"]["assignedExtracurriculars"] == ["Pramuka"]
    assert pembina_rows["Budi Santoso"]["totalSessionsHeld"] == 5
    assert pembina_rows["Budi Santoso"]["averageAttendanceInClasses"] == 10.0
    assert pembina_rows["Sari Dewi"]["totalSessionsHeld"] == 0

    student_rows = {row["name"]: row for row in await service.get_report("STUDENT", *DECEMBER)}
    assert student_rows["Andi Pratama"]["averageAttendance"] == 100.0
    assert student_rows["Andi Pratama"]["enrollmentsCount"] == 1
    assert student_rows["Citra Lestari"]["averageAttendance"] == 0.0
    assert student_rows["Citra Lestari"]["zeroAttendanceCount"] == 1
    assert student_rows["Dodi Saputra"]["enrollmentsCount"] == 0
    assert student_rows["Dodi Saputra"]["zeroAttendanceCount"] == 0


async def test_report_outside_period_is_empty(db, seed):
    await _record_first_december_session(db, seed)

    rows = await ReportService(db).get_report("EXTRACURRICULAR", date(2026, 1, 1), date(2026, 1, 31))

    assert all(row["sessionsHeld"] == 0 for row in rows)


@pytest.mark.parametrize("report_type, start, end", [
    ("ATTENDANCE", DECEMBER[0], DECEMBER[1]),
    ("STUDENT", DECEMBER[1], DECEMBER[0]),
])
async def test_report_rejects_bad_requests(db, seed, report_type, start, end):
    with pytest.raises(ValidationError):
        await ReportService(db).get_report(report_type, start, end)
