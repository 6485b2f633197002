"""Pembina home: dashboard, assigned extracurriculars, rosters and own profile."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import get_current_pembina, get_owned_extracurricular, require_pembina
from ...models import Extracurricular, EnrollmentStatus, PembinaProfile, User
from ...schemas.enrollment_schemas import EnrollmentStatusUpdate
from ...schemas.user_schemas import PembinaProfileUpdate
from ...services.enrollment_service import EnrollmentService
from ...services.pembina_service import PembinaService
from ...utils.responses import success_response
from ...utils.serializers import enrollment_to_dict, pembina_profile_to_dict

router = APIRouter(prefix="/api/pembina", tags=["Pembina"])


@router.get("/dashboard")
async def dashboard(pembina: PembinaProfile = Depends(get_current_pembina), db: AsyncSession = Depends(get_db)):
    return success_response(await PembinaService(db).dashboard(pembina))


@router.get("/extracurriculars")
async def list_extracurriculars(
    pembina: PembinaProfile = Depends(get_current_pembina),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await PembinaService(db).list_extracurriculars(pembina))


@router.get("/extracurriculars/{extracurricular_id}/students")
async def extracurricular_students(
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await PembinaService(db).get_extracurricular_students(ekskul))


@router.get("/extracurriculars/{extracurricular_id}/enrollments")
async def list_enrollments(
    status: Optional[EnrollmentStatus] = Query(None),
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    items = await EnrollmentService(db).list_for_extracurricular(ekskul.id, status.value if status else None)
    return success_response(items)


@router.patch("/enrollments/{enrollment_id}")
async def update_enrollment_status(
    enrollment_id: UUID,
    payload: EnrollmentStatusUpdate,
    user: User = Depends(require_pembina),
    db: AsyncSession = Depends(get_db),
):
    enrollment = await EnrollmentService(db).update_enrollment_status(enrollment_id, payload.status, user)
    message = (
        "Pendaftaran berhasil disetujui"
        if enrollment.status == EnrollmentStatus.ACTIVE.value
        else "Pendaftaran berhasil ditolak"
    )
    return success_response(enrollment_to_dict(enrollment), message)


@router.get("/profile")
async def get_profile(pembina: PembinaProfile = Depends(get_current_pembina)):
    data = pembina_profile_to_dict(pembina)
    data.update({"fullName": pembina.user.full_name, "email": pembina.user.email})
    return success_response(data)


@router.put("/profile")
async def update_profile(
    payload: PembinaProfileUpdate,
    pembina: PembinaProfile = Depends(get_current_pembina),
    db: AsyncSession = Depends(get_db),
):
    data = await PembinaService(db).update_profile(pembina, payload.expertise, payload.phone_number)
    return success_response(data, "Profil berhasil diperbarui")
