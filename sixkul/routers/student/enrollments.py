"""Extracurricular catalogue and the student's own applications."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import get_current_student
from ...models import StudentProfile
from ...schemas.enrollment_schemas import EnrollRequest
from ...services.enrollment_service import EnrollmentService
from ...services.student_service import StudentService
from ...utils.responses import success_response
from ...utils.serializers import enrollment_to_dict

router = APIRouter(prefix="/api/student", tags=["Student - Enrollments"])


@router.get("/extracurriculars")
async def available_extracurriculars(
    student: StudentProfile = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await StudentService(db).available_extracurriculars(student))


@router.post("/enrollments", status_code=201)
async def enroll(
    payload: EnrollRequest,
    student: StudentProfile = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    enrollment = await EnrollmentService(db).enroll(student, payload.extracurricular_id)
    return success_response(
        enrollment_to_dict(enrollment, include_student=False),
        "Pendaftaran berhasil dikirim. Menunggu persetujuan pembina.",
    )


@router.patch("/enrollments/{enrollment_id}/cancel")
async def cancel_enrollment(
    enrollment_id: UUID,
    student: StudentProfile = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    enrollment = await EnrollmentService(db).cancel_enrollment(student, enrollment_id)
    return success_response(enrollment_to_dict(enrollment, include_student=False), "Pendaftaran dibatalkan")


@router.get("/enrollments")
async def history(student: StudentProfile = Depends(get_current_student), db: AsyncSession = Depends(get_db)):
    return success_response(await StudentService(db).history(student))
