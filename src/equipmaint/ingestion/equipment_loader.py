from sqlalchemy import select
from sqlalchemy.orm import Session

from equipmaint.exceptions import NotFoundError
from equipmaint.models.orm import Equipment


def load_equipment(session: Session) -> list[Equipment]:
    """Load all equipment records from the database."""
    stmt = select(Equipment).order_by(Equipment.id)
    return list(session.scalars(stmt).all())


def get_equipment(session: Session, equipment_id: int) -> Equipment:
    """Resolve an equipment reference, raising NotFoundError if it is dangling."""
    eq = session.get(Equipment, equipment_id)
    if eq is None:
        raise NotFoundError("Equipment", equipment_id)
    return eq


def get_equipment_by_location(session: Session, location: str) -> list[Equipment]:
    """Load equipment filtered by location."""
    stmt = (
        select(Equipment)
        .where(Equipment.location == location)
        .order_by(Equipment.id)
    )
    return list(session.scalars(stmt).all())
