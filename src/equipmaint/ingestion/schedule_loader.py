from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from equipmaint.models.orm import PMSchedule


def load_pm_schedules(
    session: Session, equipment_id: int | None = None, active_only: bool = False
) -> list[PMSchedule]:
    """Load PM schedules, optionally filtered by equipment or active flag."""
    stmt = select(PMSchedule).order_by(PMSchedule.next_due_date, PMSchedule.id)
    if equipment_id is not None:
        stmt = stmt.where(PMSchedule.equipment_id == equipment_id)
    if active_only:
        stmt = stmt.where(PMSchedule.is_active.is_(True))
    return list(session.scalars(stmt).all())


def load_due_schedules(session: Session, as_of: date) -> list[PMSchedule]:
    """Load active schedules whose next due date is on or before ``as_of``."""
    stmt = (
        select(PMSchedule)
        .where(PMSchedule.is_active.is_(True), PMSchedule.next_due_date <= as_of)
        .order_by(PMSchedule.next_due_date, PMSchedule.id)
    )
    return list(session.scalars(stmt).all())
