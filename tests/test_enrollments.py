import pytest
from sqlalchemy import select

from sixkul.core.exceptions import (
    BusinessRuleError, ConflictError, NotFoundError, PermissionDenied, ValidationError,
)
from sixkul.models import Enrollment, Notification, NotificationType
from sixkul.services.enrollment_service import EnrollmentService
from sixkul.services.extracurricular_service import ExtracurricularService
from sixkul.utils.dates import academic_year


async def _notifications_for(db, user):
    result = await db.execute(
        select(Notification).where(
            Notification.user_id == user.id,
            Notification.type == NotificationType.ENROLLMENT.value,
        )
    )
    return result.scalars().all()


async def test_enroll_creates_pending_and_notifies_pembina(db, seed):
    enrollment = await EnrollmentService(db).enroll(seed.students[0], seed.other_ekskul.id)

    assert enrollment.status == "PENDING"
    assert enrollment.academic_year == academic_year()
    notifications = await _notifications_for(db, seed.other_pembina_user)
    assert len(notifications) == 1
    assert notifications[0].title == "Pendaftaran Baru - Paduan Suara"
    assert notifications[0].message == (
        "Siswa Andi Pratama mengajukan pendaftaran baru untuk Paduan Suara."
    )
    assert notifications[0].enrollment_id == enrollment.id


@pytest.mark.parametrize("student_index", [0, 2])
async def test_enroll_twice_conflicts(db, seed, student_index):
    with pytest.raises(ConflictError):
        await EnrollmentService(db).enroll(seed.students[student_index], seed.ekskul.id)


async def test_enroll_into_inactive_or_missing_extracurricular(db, seed):
    await ExtracurricularService(db).archive_extracurricular(seed.other_ekskul.id)

    with pytest.raises(BusinessRuleError):
        await EnrollmentService(db).enroll(seed.students[0], seed.other_ekskul.id)
    with pytest.raises(NotFoundError):
        await EnrollmentService(db).enroll(seed.students[0], seed.students[0].id)


async def test_pembina_approves_pending_enrollment(db, seed):
    service = EnrollmentService(db)

    enrollment = await service.update_enrollment_status(seed.pending_enrollment.id, "ACTIVE", seed.pembina_user)

    assert enrollment.status == "ACTIVE"
    notifications = await _notifications_for(db, seed.student_users[2])
    assert [n.title for n in notifications] == ["Pendaftaran Diterima - Pramuka"]

    with pytest.raises(BusinessRuleError) as exc:
        await service.update_enrollment_status(seed.pending_enrollment.id, "REJECTED", seed.pembina_user)
    assert exc.value.detail == "Pendaftaran bukan status PENDING"


async def test_reapply_after_rejection_reuses_row(db, seed):
    service = EnrollmentService(db)
    await service.update_enrollment_status(seed.pending_enrollment.id, "REJECTED", seed.pembina_user)

    reapplied = await service.enroll(seed.students[2], seed.ekskul.id)

    assert reapplied.id == seed.pending_enrollment.id
    assert reapplied.status == "PENDING"
    rows = (await db.execute(
        select(Enrollment).where(Enrollment.student_id == seed.students[2].id)
    )).scalars().all()
    assert len(rows) == 1


async def test_review_requires_ownership_and_valid_status(db, seed):
    service = EnrollmentService(db)

    with pytest.raises(PermissionDenied):
        await service.update_enrollment_status(seed.pending_enrollment.id, "ACTIVE", seed.other_pembina_user)
    with pytest.raises(ValidationError):
        await service.update_enrollment_status(seed.pending_enrollment.id, "ALUMNI", seed.pembina_user)
    with pytest.raises(NotFoundError):
        await service.update_enrollment_status(seed.ekskul.id, "ACTIVE", seed.pembina_user)

    # Admins may review any extracurricular
    enrollment = await service.update_enrollment_status(seed.pending_enrollment.id, "REJECTED", seed.admin)
    assert enrollment.status == "REJECTED"


async def test_student_cancels_own_pending_application(db, seed):
    service = EnrollmentService(db)

    with pytest.raises(NotFoundError):
        await service.cancel_enrollment(seed.students[0], seed.pending_enrollment.id)
    with pytest.raises(BusinessRuleError):
        await service.cancel_enrollment(seed.students[0], seed.active_enrollments[0].id)

    cancelled = await service.cancel_enrollment(seed.students[2], seed.pending_enrollment.id)
    assert cancelled.status == "CANCELLED"

    history = await service.history(seed.students[2])
    assert history["summary"] == {"total": 1, "active": 0, "pending": 0, "inactive": 1}
    assert history["items"][0]["statusMessage"] == "Keanggotaan Anda di Pramuka telah dibatalkan."


async def test_history_lists_all_applications(db, seed):
    service = EnrollmentService(db)
    await service.enroll(seed.students[0], seed.other_ekskul.id)

    history = await service.history(seed.students[0])

    assert history["summary"] == {"total": 2, "active": 1, "pending": 1, "inactive": 0}
    names = {item["extracurricular"]["name"]: item["statusMessage"] for item in history["items"]}
    assert names["Paduan Suara"] == "Menunggu persetujuan pembina."
    assert names["Pramuka"] == "Selamat! Pendaftaran Anda di Pramuka telah disetujui."


async def test_list_for_extracurricular_filters_by_status(db, seed):
    service = EnrollmentService(db)

    pending = await service.list_for_extracurricular(seed.ekskul.id, "PENDING")
    everyone = await service.list_for_extracurricular(seed.ekskul.id)

    assert [e["student"]["name"] for e in pending] == ["Dodi Saputra"]
    assert len(everyone) == 3
