from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.deps import get_owned_extracurricular
from ...models import Extracurricular
from ...schemas.extracurricular_schemas import ScheduleCreate, ScheduleUpdate
from ...services.schedule_service import ScheduleService
from ...utils.responses import success_response
from ...utils.serializers import schedule_to_dict

router = APIRouter(
    prefix="/api/pembina/extracurriculars/{extracurricular_id}/schedules",
    tags=["Pembina - Schedules"],
)


@router.get("")
async def list_schedules(
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    schedules = await ScheduleService(db).list_schedules(ekskul.id)
    return success_response([schedule_to_dict(s) for s in schedules])


@router.post("", status_code=201)
async def create_schedule(
    payload: ScheduleCreate,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    schedule = await ScheduleService(db).create_schedule(ekskul, payload.model_dump())
    return success_response(schedule_to_dict(schedule), "Jadwal berhasil dibuat")


@router.put("/{schedule_id}")
async def update_schedule(
    schedule_id: UUID,
    payload: ScheduleUpdate,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    schedule = await ScheduleService(db).update_schedule(ekskul, schedule_id, payload.model_dump(exclude_unset=True))
    return success_response(schedule_to_dict(schedule), "Jadwal berhasil diperbarui")


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: UUID,
    ekskul: Extracurricular = Depends(get_owned_extracurricular),
    db: AsyncSession = Depends(get_db),
):
    await ScheduleService(db).delete_schedule(ekskul, schedule_id)
    return success_response(None, "Jadwal berhasil dihapus")
