from datetime import date

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from equipmaint.api.dependencies import get_pm_generator, get_schedule_store
from equipmaint.maintenance.pm_generator import PMGenerator
from equipmaint.maintenance.schedules import PMScheduleStore
from equipmaint.models.schemas import (
    GenerationSummary,
    ScheduleCreate,
    ScheduleRead,
    ScheduleUpdate,
)

router = APIRouter(prefix="/pm-schedules", tags=["pm-schedules"])


class GenerateRequest(BaseModel):
    as_of: date | None = None


@router.post("/generate-work-orders", response_model=GenerationSummary)
def generate_work_orders(
    body: GenerateRequest | None = None,
    generator: PMGenerator = Depends(get_pm_generator),
):
    """Create work orders for every due PM schedule."""
    as_of = body.as_of if body else None
    return generator.generate_due_work_orders(as_of)


@router.get("/", response_model=list[ScheduleRead])
def list_schedules(
    equipment_id: int | None = None,
    active_only: bool = False,
    store: PMScheduleStore = Depends(get_schedule_store),
):
    return store.list_schedules(equipment_id, active_only)


@router.post("/", response_model=ScheduleRead, status_code=201)
def create_schedule(
    body: ScheduleCreate, store: PMScheduleStore = Depends(get_schedule_store)
):
    return store.create_schedule(body)


@router.get("/{schedule_id}", response_model=ScheduleRead)
def get_schedule(
    schedule_id: int, store: PMScheduleStore = Depends(get_schedule_store)
):
    return store.get_schedule(schedule_id)


@router.put("/{schedule_id}", response_model=ScheduleRead)
def update_schedule(
    schedule_id: int,
    body: ScheduleUpdate,
    store: PMScheduleStore = Depends(get_schedule_store),
):
    return store.update_schedule(schedule_id, body)


@router.delete("/{schedule_id}", status_code=204)
def delete_schedule(
    schedule_id: int, store: PMScheduleStore = Depends(get_schedule_store)
):
    store.delete_schedule(schedule_id)
    return Response(status_code=204)
