from datetime import date, timedelta

import pytest
from sqlalchemy import select

from sixkul.core.exceptions import ValidationError
from sixkul.models import Session
from sixkul.services.attendance_service import AttendanceService
from sixkul.services.pembina_service import PembinaService
from sixkul.services.session_service import SessionService
from sixkul.services.student_service import StudentService


async def _record_december(db, seed, statuses):
    """Record the first student's attendance on consecutive December Mondays."""
    await SessionService(db).generate_sessions_from_schedules(seed.ekskul, date(2025, 12, 1), date(2025, 12, 31))
    result = await db.execute(select(Session).order_by(Session.date))
    sessions = result.scalars().all()
    attendance = AttendanceService(db)
    for session, status in zip(sessions, statuses):
        await attendance.save_session_attendance(session.id, seed.ekskul, [
            {"enrollment_id": seed.active_enrollments[0].id, "status": status, "notes": None},
        ])


async def _upcoming_session(db, seed, days_ahead=2):
    return await SessionService(db).create_session(seed.ekskul, {
        "date": date.today() + timedelta(days=days_ahead),
        "start_time": "07:00",
        "end_time": "09:00",
        "location": "Aula",
    })


async def test_student_dashboard_counts_excused_absences_as_attended(db, seed):
    await _record_december(db, seed, ["PRESENT", "SICK", "ALPHA"])
    upcoming = await _upcoming_session(db, seed)

    dashboard = await StudentService(db).dashboard(seed.students[0])

    assert dashboard["studentName"] == "Andi Pratama"
    assert dashboard["stats"]["activeEnrollmentsCount"] == 1
    assert dashboard["stats"]["attendancePercentage"] == 67
    assert [s["id"] for s in dashboard["upcomingSessions"]] == [str(upcoming.id)]
    assert [e["name"] for e in dashboard["activeExtracurriculars"]] == ["Pramuka"]


async def test_dashboard_for_student_without_memberships(db, seed):
    dashboard = await StudentService(db).dashboard(seed.students[2])

    assert dashboard["stats"]["activeEnrollmentsCount"] == 0
    assert dashboard["stats"]["attendancePercentage"] == 0
    assert dashboard["upcomingSessions"] == []


async def test_student_attendance_grouping(db, seed):
    await _record_december(db, seed, ["PRESENT", "SICK", "ALPHA"])
    service = StudentService(db)

    by_date = await service.attendance(seed.students[0])
    assert [g["key"] for g in by_date["groups"]] == ["2025-12-15", "2025-12-08", "2025-12-01"]
    assert by_date["groups"][2]["label"] == "Senin, 1 Desember 2025"
    assert by_date["summary"]["total"] == 3
    assert by_date["summary"]["percentage"] == 33
    assert by_date["summary"]["absentLate"] == 1

    by_ekskul = await service.attendance(seed.students[0], "extracurricular")
    assert [(g["label"], len(g["records"])) for g in by_ekskul["groups"]] == [("Pramuka", 3)]

    with pytest.raises(ValidationError):
        await service.attendance(seed.students[0], "month")


async def test_cancelled_session_attendance_is_hidden(db, seed):
    await _record_december(db, seed, ["PRESENT", "LATE"])
    first = (await db.execute(select(Session).where(Session.date == date(2025, 12, 1)))).scalar_one()
    await SessionService(db).cancel_session(seed.ekskul, first.id)

    attendance = await StudentService(db).attendance(seed.students[0])

    assert [r["status"] for r in attendance["records"]] == ["LATE"]


async def test_student_schedule_uses_preferred_range(db, seed):
    upcoming = await _upcoming_session(db, seed, days_ahead=3)
    await _upcoming_session(db, seed, days_ahead=20)
    service = StudentService(db)

    schedule = await service.schedule(seed.students[0])
    assert [s["id"] for s in schedule["sessions"]] == [str(upcoming.id)]
    assert schedule["sessions"][0]["extracurricular"]["name"] == "Pramuka"
    assert schedule["defaultView"] == "date"

    wide = await service.schedule(seed.students[0], date.today(), date.today() + timedelta(days=30))
    assert len(wide["sessions"]) == 2

    pending_only = await service.schedule(seed.students[2])
    assert pending_only["sessions"] == []

    with pytest.raises(ValidationError):
        await service.schedule(seed.students[0], date(2026, 1, 10), date(2026, 1, 1))


async def test_available_extracurriculars_show_enrollment_status(db, seed):
    service = StudentService(db)

    member = {e["name"]: e["enrollmentStatus"] for e in await service.available_extracurriculars(seed.students[0])}
    applicant = {e["name"]: e["enrollmentStatus"] for e in await service.available_extracurriculars(seed.students[2])}

    assert member == {"Paduan Suara": None, "Pramuka": "ACTIVE"}
    assert applicant == {"Paduan Suara": None, "Pramuka": "PENDING"}


async def test_pembina_dashboard(db, seed):
    await _upcoming_session(db, seed)
    await _upcoming_session(db, seed, days_ahead=10)

    dashboard = await PembinaService(db).dashboard(seed.pembina)

    assert dashboard["stats"] == {
        "totalExtracurriculars": 1,
        "totalActiveMembers": 2,
        "totalPendingEnrollments": 1,
        "totalUpcomingSessions": 1,
    }
    assert [e["id"] for e in dashboard["pendingEnrollments"]] == [str(seed.pending_enrollment.id)]
    assert dashboard["extracurriculars"][0]["schedulesCount"] == 1


async def test_dashboard_only_covers_own_extracurriculars(db, seed):
    await _upcoming_session(db, seed)

    dashboard = await PembinaService(db).dashboard(seed.other_pembina)

    assert [e["name"] for e in dashboard["extracurriculars"]] == ["Paduan Suara"]
    assert dashboard["stats"]["totalActiveMembers"] == 0
    assert dashboard["upcomingSessions"] == []
    assert dashboard["pendingEnrollments"] == []


async def test_extracurricular_students_roster(db, seed):
    roster = await PembinaService(db).get_extracurricular_students(seed.ekskul)

    assert [row["student"]["name"] for row in roster["students"]] == ["Andi Pratama", "Citra Lestari"]
    assert roster["schedules"][0]["location"] == "Lapangan Utama"


async def test_pembina_profile_update(db, seed):
    service = PembinaService(db)

    with pytest.raises(ValidationError) as exc:
        await service.update_profile(seed.pembina, phone_number="telepon")
    assert exc.value.errors[0]["field"] == "phoneNumber"

    profile = await service.update_profile(seed.pembina, expertise=" Kepanduan ", phone_number="0812-3456-7890")
    assert profile["expertise"] == "Kepanduan"
    assert profile["phoneNumber"] == "0812-3456-7890"
    assert profile["fullName"] == "Budi Santoso"
    assert profile["nip"] == "198501012010011001"


async def test_default_schedule_window_spans_preferred_days(db, seed):
    last_day = await _upcoming_session(db, seed, days_ahead=6)
    await _upcoming_session(db, seed, days_ahead=7)

    schedule = await StudentService(db).schedule(seed.students[0])

    assert [s["id"] for s in schedule["sessions"]] == [str(last_day.id)]
    assert schedule["range"] == {
        "start": date.today().isoformat(),
        "end": (date.today() + timedelta(days=6)).isoformat(),
    }
