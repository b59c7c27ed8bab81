from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from equipmaint.api.dependencies import get_db, get_work_order_engine
from equipmaint.ingestion.work_order_loader import load_work_orders
from equipmaint.maintenance.work_orders import WorkOrderEngine
from equipmaint.models.schemas import (
    PartQuantity,
    WorkOrderCreate,
    WorkOrderRead,
    WorkOrderUpdate,
)

router = APIRouter(prefix="/work-orders", tags=["work-orders"])


@router.get("/", response_model=list[WorkOrderRead])
def list_work_orders(
    status: str | None = None,
    equipment_id: int | None = None,
    assigned_to: str | None = None,
    reported_by: str | None = None,
    wo_type: str | None = None,
    priority: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    session: Session = Depends(get_db),
):
    """List work orders with filters and pagination."""
    return load_work_orders(
        session,
        status=status,
        equipment_id=equipment_id,
        assigned_to=assigned_to,
        reported_by=reported_by,
        wo_type=wo_type,
        priority=priority,
        limit=page_size,
        offset=(page - 1) * page_size,
    )


@router.post("/", response_model=WorkOrderRead, status_code=201)
def create_work_order(
    body: WorkOrderCreate, engine: WorkOrderEngine = Depends(get_work_order_engine)
):
    """Report an issue and open a work order."""
    return engine.create_work_order(body)


@router.get("/{work_order_id}", response_model=WorkOrderRead)
def get_work_order(
    work_order_id: int, engine: WorkOrderEngine = Depends(get_work_order_engine)
):
    return engine.get_work_order(work_order_id)


@router.patch("/{work_order_id}", response_model=WorkOrderRead)
def update_work_order(
    work_order_id: int,
    body: WorkOrderUpdate,
    engine: WorkOrderEngine = Depends(get_work_order_engine),
):
    """Assign, transition, annotate, or log parts against a work order."""
    return engine.update_work_order(work_order_id, body)


@router.post("/{work_order_id}/parts", response_model=WorkOrderRead, status_code=201)
def log_part_usage(
    work_order_id: int,
    body: PartQuantity,
    engine: WorkOrderEngine = Depends(get_work_order_engine),
):
    """Consume spare-part stock against a work order."""
    return engine.log_part_usage(work_order_id, body.part_id, body.quantity)


@router.delete("/{work_order_id}", status_code=204)
def delete_work_order(
    work_order_id: int, engine: WorkOrderEngine = Depends(get_work_order_engine)
):
    engine.delete_work_order(work_order_id)
    return Response(status_code=204)
