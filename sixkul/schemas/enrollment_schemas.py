# sixkul/schemas/enrollment_schemas.py
from uuid import UUID

from .base import CamelModel


class EnrollRequest(CamelModel):
    extracurricular_id: UUID


class EnrollmentStatusUpdate(CamelModel):
    """ACTIVE approves, REJECTED declines a pending application."""
    status: str
