from sqlalchemy import select
from sqlalchemy.orm import Session

from equipmaint.models.enums import Priority, WorkOrderStatus, WorkOrderType
from equipmaint.models.orm import WorkOrder


def load_work_orders(
    session: Session,
    status: WorkOrderStatus | str | None = None,
    equipment_id: int | None = None,
    assigned_to: str | None = None,
    reported_by: str | None = None,
    wo_type: WorkOrderType | str | None = None,
    priority: Priority | str | None = None,
    pm_schedule_id: int | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[WorkOrder]:
    """Load work orders matching every filter given, newest first.

    String filters for status, type and priority are parsed, so an
    unrecognized value raises instead of silently matching nothing.
    """
    stmt = select(WorkOrder).order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc())
    if status is not None:
        stmt = stmt.where(WorkOrder.status == WorkOrderStatus.parse(status))
    if equipment_id is not None:
        stmt = stmt.where(WorkOrder.equipment_id == equipment_id)
    if assigned_to is not None:
        stmt = stmt.where(WorkOrder.assigned_to == assigned_to)
    if reported_by is not None:
        stmt = stmt.where(WorkOrder.reported_by == reported_by)
    if wo_type is not None:
        stmt = stmt.where(WorkOrder.wo_type == WorkOrderType.parse(wo_type))
    if priority is not None:
        stmt = stmt.where(WorkOrder.priority == Priority.parse(priority))
    if pm_schedule_id is not None:
        stmt = stmt.where(WorkOrder.pm_schedule_id == pm_schedule_id)
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(session.scalars(stmt).all())


def load_open_work_orders(
    session: Session,
    assigned_to: str | None = None,
    equipment_id: int | None = None,
) -> list[WorkOrder]:
    """Load non-terminal work orders, optionally for one technician or asset."""
    stmt = (
        select(WorkOrder)
        .where(
            WorkOrder.status.not_in(
                [WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED]
            )
        )
        .order_by(WorkOrder.created_at, WorkOrder.id)
    )
    if assigned_to is not None:
        stmt = stmt.where(WorkOrder.assigned_to == assigned_to)
    if equipment_id is not None:
        stmt = stmt.where(WorkOrder.equipment_id == equipment_id)
    return list(session.scalars(stmt).all())
