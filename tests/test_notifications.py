import pytest

from sixkul.core.exceptions import NotFoundError, ValidationError
from sixkul.models import NotificationType
from sixkul.services.notification_service import NotificationService, enrollment_status_message
from sixkul.services.preferences_service import PreferencesService


def _add(db, user, title="Info"):
    return NotificationService(db)._add(user.id, NotificationType.SCHEDULE, title, "Pesan")


async def test_list_and_mark_as_read(db, seed):
    student = seed.student_users[0]
    first = _add(db, student, "Pertama")
    _add(db, student, "Kedua")
    _add(db, seed.student_users[1])
    await db.commit()
    service = NotificationService(db)

    listing = await service.list_for_user(student.id)
    assert listing["unreadCount"] == 2
    assert {n["title"] for n in listing["items"]} == {"Pertama", "Kedua"}

    read = await service.mark_as_read(first.id, student.id)
    assert read.is_read
    unread = await service.list_for_user(student.id, unread_only=True)
    assert [n["title"] for n in unread["items"]] == ["Kedua"]
    assert unread["unreadCount"] == 1


async def test_mark_someone_elses_notification_is_not_found(db, seed):
    other = _add(db, seed.student_users[1])
    await db.commit()

    with pytest.raises(NotFoundError):
        await NotificationService(db).mark_as_read(other.id, seed.student_users[0].id)


async def test_mark_all_as_read_only_touches_own(db, seed):
    for _ in range(3):
        _add(db, seed.student_users[0])
    _add(db, seed.student_users[1])
    await db.commit()
    service = NotificationService(db)

    assert await service.mark_all_as_read(seed.student_users[0].id) == 3
    assert await service.unread_count(seed.student_users[0].id) == 0
    assert await service.unread_count(seed.student_users[1].id) == 1


def test_enrollment_status_messages():
    assert enrollment_status_message("REJECTED", "Pramuka") == {
        "title": "Pendaftaran Ditolak - Pramuka",
        "message": "Maaf, pendaftaran Anda di Pramuka tidak disetujui.",
    }
    assert enrollment_status_message("ALUMNI", "Pramuka")["title"] == "Status Alumni - Pramuka"
    assert "menjadi PENDING" in enrollment_status_message("PENDING", "Pramuka")["message"]


async def test_preferences_defaults_and_update(db, seed):
    service = PreferencesService(db)

    prefs = await service.get_for_student(seed.students[0])
    assert prefs.notify_announcements and prefs.notify_schedule_changes and prefs.notify_attendance
    assert prefs.schedule_default_view == "date"
    assert prefs.schedule_range_days == 7

    updated = await service.update_for_student(seed.students[0], {
        "notify_schedule_changes": False,
        "schedule_default_view": "extracurricular",
        "schedule_range_days": 30,
    })
    assert updated.id == prefs.id
    assert not updated.notify_schedule_changes
    assert updated.notify_attendance
    assert updated.schedule_range_days == 30


@pytest.mark.parametrize("changes, field", [
    ({"schedule_range_days": 10}, "scheduleRangeDays"),
    ({"schedule_default_view": "calendar"}, "scheduleDefaultView"),
])
async def test_preferences_validation(db, seed, changes, field):
    with pytest.raises(ValidationError) as exc:
        await PreferencesService(db).update_for_student(seed.students[0], changes)
    assert exc.value.errors[0]["field"] == field
