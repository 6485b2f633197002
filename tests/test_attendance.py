from datetime import date, timedelta

import pytest
from sqlalchemy import select

from sixkul.core.cache import cache_manager
from sixkul.core.exceptions import (
    BusinessRuleError, ConflictError, NotFoundError, PermissionDenied, ValidationError,
)
from sixkul.models import Attendance, Notification, NotificationType, Session
from sixkul.services.attendance_service import AttendanceService
from sixkul.services.preferences_service import PreferencesService
from sixkul.services.session_service import SessionService

SESSION_DATE = date(2025, 12, 1)


@pytest.fixture
async def session(db, seed):
    await SessionService(db).generate_sessions_from_schedules(seed.ekskul, SESSION_DATE, SESSION_DATE)
    result = await db.execute(select(Session).where(Session.date == SESSION_DATE))
    return result.scalar_one()


def _records(enrollments, *statuses):
    return [
        {"enrollment_id": enrollment.id, "status": status, "notes": None}
        for enrollment, status in zip(enrollments, statuses)
    ]


async def test_session_attendance_is_locked_after_save(db, seed, session):
    service = AttendanceService(db)

    result = await service.save_session_attendance(
        session.id, seed.ekskul, _records(seed.active_enrollments, "PRESENT", "SICK")
    )
    assert result["created"] == 2
    assert result["updated"] == 0
    assert result["date"] == "2025-12-01"

    rows = (await db.execute(select(Attendance))).scalars().all()
    assert len(rows) == 2
    assert all(row.is_locked and row.session_id == session.id for row in rows)

    with pytest.raises(ConflictError) as exc:
        await service.save_session_attendance(
            session.id, seed.ekskul, _records(seed.active_enrollments, "ALPHA", "ALPHA")
        )
    assert exc.value.status_code == 409
    assert exc.value.detail == "Absensi sudah dikunci dan tidak dapat diubah"


async def test_unlocked_row_accepts_one_correction(db, seed, session):
    service = AttendanceService(db)
    first = seed.active_enrollments[:1]
    await service.save_session_attendance(session.id, seed.ekskul, _records(first, "ALPHA"))
    row = (await db.execute(select(Attendance))).scalar_one()

    unlocked = await service.unlock_attendance(row.id)
    assert not unlocked.is_locked

    result = await service.save_session_attendance(session.id, seed.ekskul, _records(first, "PERMISSION"))
    assert result["updated"] == 1
    assert row.status == "PERMISSION"
    assert row.is_locked


async def test_unlock_unknown_attendance(db, seed):
    with pytest.raises(NotFoundError):
        await AttendanceService(db).unlock_attendance(seed.ekskul.id)


async def test_attendance_refused_for_pending_enrollment(db, seed, session):
    pending_id = seed.pending_enrollment.id

    with pytest.raises(ValidationError) as exc:
        await AttendanceService(db).save_session_attendance(
            session.id, seed.ekskul, _records([seed.pending_enrollment], "PRESENT")
        )
    assert exc.value.status_code == 400
    assert exc.value.errors == [f"Enrollment not active: {pending_id}"]
    assert (await db.execute(select(Attendance))).scalars().all() == []


async def test_batch_attendance_lists_non_active_enrollments(db, seed):
    pending_id = seed.pending_enrollment.id

    with pytest.raises(ValidationError) as exc:
        await AttendanceService(db).save_batch_attendance(
            seed.admin, date(2025, 11, 28), _records([seed.active_enrollments[0], seed.pending_enrollment],
                                                      "PRESENT", "PRESENT")
        )
    assert exc.value.errors == [f"Enrollment not active: {pending_id}"]


async def test_attendance_refused_for_cancelled_session(db, seed, session):
    await SessionService(db).cancel_session(seed.ekskul, session.id)

    with pytest.raises(BusinessRuleError):
        await AttendanceService(db).save_session_attendance(
            session.id, seed.ekskul, _records(seed.active_enrollments, "PRESENT", "PRESENT")
        )


async def test_invalid_and_duplicate_records(db, seed, session):
    service = AttendanceService(db)
    enrollment = seed.active_enrollments[0]

    with pytest.raises(ValidationError) as exc:
        await service.save_session_attendance(session.id, seed.ekskul, [
            {"enrollment_id": enrollment.id, "status": "ABSENT", "notes": None},
            {"enrollment_id": enrollment.id, "status": "PRESENT", "notes": None},
        ])
    assert exc.value.errors == [
        "records[0].status must be one of: PRESENT, SICK, PERMISSION, ALPHA, LATE",
        "records[1].enrollmentId is duplicated",
    ]

    with pytest.raises(ValidationError):
        await service.save_session_attendance(session.id, seed.ekskul, [])


async def test_attendance_notifications_respect_preferences(db, seed, session):
    await PreferencesService(db).update_for_student(seed.students[0], {"notify_attendance": False})

    await AttendanceService(db).save_session_attendance(
        session.id, seed.ekskul, _records(seed.active_enrollments, "PRESENT", "LATE")
    )

    result = await db.execute(select(Notification).where(Notification.type == NotificationType.ATTENDANCE.value))
    notifications = result.scalars().all()
    assert [n.user_id for n in notifications] == [seed.student_users[1].id]
    assert notifications[0].title == "Absensi Tercatat - Pramuka"
    assert notifications[0].message == (
        "Kehadiran Anda pada Senin, 1 Desember 2025 telah dicatat sebagai: Terlambat"
    )


async def test_batch_attendance_by_date(db, seed):
    service = AttendanceService(db)
    day = date(2025, 11, 28)

    result = await service.save_batch_attendance(
        seed.pembina_user, day, _records(seed.active_enrollments, "PRESENT", "ALPHA")
    )
    assert result == {"date": "2025-11-28", "totalRecords": 2, "created": 2, "updated": 0}

    existing = await service.get_attendance_by_date(seed.ekskul.id, day)
    assert existing["hasExistingRecords"]
    assert {r["status"] for r in existing["records"]} == {"PRESENT", "ALPHA"}

    with pytest.raises(ConflictError):
        await service.save_batch_attendance(seed.admin, day, _records(seed.active_enrollments, "PRESENT"))


async def test_batch_attendance_rejects_future_date(db, seed):
    with pytest.raises(ValidationError):
        await AttendanceService(db).save_batch_attendance(
            seed.pembina_user, date.today() + timedelta(days=1), _records(seed.active_enrollments, "PRESENT")
        )


async def test_batch_attendance_checks_ownership(db, seed):
    with pytest.raises(PermissionDenied):
        await AttendanceService(db).save_batch_attendance(
            seed.other_pembina_user, date(2025, 11, 28), _records(seed.active_enrollments, "PRESENT")
        )


async def test_batch_attendance_session_must_match_date(db, seed, session):
    with pytest.raises(ValidationError):
        await AttendanceService(db).save_batch_attendance(
            seed.pembina_user, date(2025, 12, 2), _records(seed.active_enrollments, "PRESENT"), session.id
        )

    result = await AttendanceService(db).save_batch_attendance(
        seed.pembina_user, SESSION_DATE, _records(seed.active_enrollments, "PRESENT"), session.id
    )
    assert result["created"] == 1


async def test_unknown_enrollment_is_reported(db, seed, session):
    with pytest.raises(ValidationError) as exc:
        await AttendanceService(db).save_session_attendance(session.id, seed.ekskul, [
            {"enrollment_id": seed.ekskul.id, "status": "PRESENT", "notes": None},
        ])
    assert exc.value.errors == [f"Enrollment not found: {seed.ekskul.id}"]


async def test_session_attendance_view(db, seed, session, fresh_db):
    await AttendanceService(db).save_session_attendance(
        session.id, seed.ekskul, _records(seed.active_enrollments[:1], "PRESENT")
    )

    view = await AttendanceService(fresh_db).get_session_attendance(seed.ekskul, session.id)

    assert [s["student"]["name"] for s in view["students"]] == ["Andi Pratama", "Citra Lestari"]
    assert view["students"][0]["attendance"]["status"] == "PRESENT"
    assert view["students"][1]["attendance"] is None
    assert view["summary"]["PRESENT"] == 1
    assert not view["isComplete"]


async def test_date_only_correction_keeps_session_link(db, seed, session):
    service = AttendanceService(db)
    first = seed.active_enrollments[:1]
    await service.save_session_attendance(session.id, seed.ekskul, _records(first, "ALPHA"))
    row = (await db.execute(select(Attendance))).scalar_one()
    await service.unlock_attendance(row.id)

    result = await service.save_batch_attendance(seed.pembina_user, SESSION_DATE, _records(first, "SICK"))

    assert result == {"date": "2025-12-01", "totalRecords": 1, "created": 0, "updated": 1}
    assert row.status == "SICK"
    assert row.session_id == session.id
    assert row.is_locked


async def test_constraint_violation_on_commit_is_a_conflict(db, seed, session, fresh_db):
    enrollment_id = seed.active_enrollments[0].id
    # A soft-deleted row still holds the (enrollment, date) slot
    fresh_db.add(Attendance(
        enrollment_id=enrollment_id,
        session_id=None,
        date=SESSION_DATE,
        status="PRESENT",
        is_locked=True,
        is_deleted=True,
    ))
    await fresh_db.commit()

    with pytest.raises(ConflictError) as exc:
        await AttendanceService(db).save_session_attendance(
            session.id, seed.ekskul, _records(seed.active_enrollments[:1], "LATE")
        )
    assert exc.value.status_code == 409
    assert exc.value.detail == "Absensi untuk siswa pada tanggal ini sudah ada."

    result = await fresh_db.execute(
        select(Attendance).where(Attendance.enrollment_id == enrollment_id, Attendance.is_deleted == False)
    )
    assert result.scalars().all() == []


async def test_saving_attendance_clears_cached_views(db, seed, session, monkeypatch):
    cleared = []

    async def record_pattern(pattern):
        cleared.append(pattern)
        return 0

    monkeypatch.setattr(cache_manager, "delete_pattern", record_pattern)

    await AttendanceService(db).save_session_attendance(
        session.id, seed.ekskul, _records(seed.active_enrollments, "PRESENT", "PRESENT")
    )

    assert set(cleared) == {"sixkul:student:*", "sixkul:admin:*"}
