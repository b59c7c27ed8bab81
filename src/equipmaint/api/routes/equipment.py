from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from equipmaint.api.dependencies import get_db
from equipmaint.ingestion.equipment_loader import (
    get_equipment,
    get_equipment_by_location,
    load_equipment,
)
from equipmaint.ingestion.schedule_loader import load_pm_schedules
from equipmaint.ingestion.work_order_loader import load_open_work_orders
from equipmaint.models.schemas import EquipmentRead, ScheduleRead, WorkOrderRead

router = APIRouter(prefix="/equipment", tags=["equipment"])


@router.get("/", response_model=list[EquipmentRead])
def list_equipment(location: str | None = None, session: Session = Depends(get_db)):
    if location:
        return get_equipment_by_location(session, location)
    return load_equipment(session)


@router.get("/{equipment_id}")
def get_equipment_detail(equipment_id: int, session: Session = Depends(get_db)):
    """Equipment record with its PM schedules and open work orders."""
    eq = get_equipment(session, equipment_id)
    open_orders = load_open_work_orders(session, equipment_id=eq.id)
    return {
        **EquipmentRead.model_validate(eq).model_dump(),
        "pm_schedules": [
            ScheduleRead.model_validate(s).model_dump(mode="json")
            for s in load_pm_schedules(session, equipment_id=eq.id)
        ],
        "open_work_orders": [
            WorkOrderRead.model_validate(wo).model_dump(mode="json")
            for wo in open_orders
        ],
    }
