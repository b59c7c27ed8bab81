import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from equipmaint.exceptions import (
    ConcurrentUpdateError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from equipmaint.models.orm import PartUsage, SparePart
from equipmaint.models.schemas import SparePartCreate, SparePartUpdate

logger = logging.getLogger(__name__)


class SparePartLedger:
    """Spare-part stock levels with an atomic, never-negative decrement."""

    def __init__(self, session: Session):
        self.session = session

    def get_part(self, part_id: int) -> SparePart:
        part = self.session.get(SparePart, part_id)
        if part is None:
            raise NotFoundError("Spare part", part_id)
        return part

    def list_parts(
        self, category: str | None = None, low_stock_only: bool = False
    ) -> list[SparePart]:
        """List spare parts, optionally filtered by category or low-stock state."""
        stmt = select(SparePart).order_by(SparePart.name, SparePart.id)
        if category:
            stmt = stmt.where(SparePart.category == category)
        if low_stock_only:
            stmt = stmt.where(SparePart.is_low_stock)
        return list(self.session.scalars(stmt).all())

    def low_stock_parts(self) -> list[SparePart]:
        """Parts at or below their reorder threshold."""
        return self.list_parts(low_stock_only=True)

    def create_part(self, data: SparePartCreate) -> SparePart:
        if not data.name or not data.name.strip():
            raise ValidationError("Spare part name is required", field="name")
        _check_non_negative("quantity", data.quantity)
        _check_non_negative("minimum_quantity", data.minimum_quantity)

        part = SparePart(**data.model_dump(), last_updated=datetime.now())
        self.session.add(part)
        self.session.flush()
        logger.info("Created spare part %s (%s)", part.id, part.name)
        return part

    def update_part(self, part_id: int, data: SparePartUpdate) -> SparePart:
        """Apply an administrative edit, including direct restock corrections."""
        part = self.get_part(part_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields provided for update.")
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Spare part name is required", field="name")
        for field in ("quantity", "minimum_quantity"):
            if field in changes:
                _check_non_negative(field, changes[field])

        for field, value in changes.items():
            setattr(part, field, value)
        part.last_updated = datetime.now()
        self.session.flush()
        self._warn_if_low(part)
        return part

    def delete_part(self, part_id: int) -> None:
        part = self.get_part(part_id)
        used = self.session.execute(
            select(PartUsage.id).where(PartUsage.spare_part_id == part_id).limit(1)
        ).scalar_one_or_none()
        if used is not None:
            raise ValidationError(
                f"Spare part {part_id} has recorded usage and cannot be deleted",
                field="id",
            )
        self.session.delete(part)
        self.session.flush()

    def restock(self, part_id: int, quantity: int) -> SparePart:
        """Atomically add received stock to a part."""
        _check_positive(quantity)
        result = self._execute_stock_update(
            part_id,
            update(SparePart)
            .where(SparePart.id == part_id)
            .values(
                quantity=SparePart.quantity + quantity, last_updated=datetime.now()
            ),
        )
        if result.rowcount == 0:
            raise NotFoundError("Spare part", part_id)
        return self._reload(part_id)

    def decrement(self, part_id: int, quantity: int) -> SparePart:
        """Take ``quantity`` units out of stock in one conditional UPDATE.

        The check and the write are a single statement, so two concurrent
        consumers can never both succeed past the available quantity. On
        SQLite the second writer waits out the busy timeout and then gets
        ``ConcurrentUpdateError``; nothing is taken from stock for it.
        """
        _check_positive(quantity)
        result = self._execute_stock_update(
            part_id,
            update(SparePart)
            .where(SparePart.id == part_id, SparePart.quantity >= quantity)
            .values(
                quantity=SparePart.quantity - quantity, last_updated=datetime.now()
            ),
        )
        if result.rowcount == 0:
            available = self.session.execute(
                select(SparePart.quantity).where(SparePart.id == part_id)
            ).scalar_one_or_none()
            if available is None:
                raise NotFoundError("Spare part", part_id)
            raise InsufficientStockError(part_id, quantity, available)

        part = self._reload(part_id)
        self._warn_if_low(part)
        return part

    def usage_history(self, part_id: int) -> list[PartUsage]:
        """All consumption records for a part, newest first."""
        self.get_part(part_id)
        return list(
            self.session.scalars(
                select(PartUsage)
                .where(PartUsage.spare_part_id == part_id)
                .order_by(PartUsage.used_at.desc(), PartUsage.id.desc())
            ).all()
        )

    def _execute_stock_update(self, part_id: int, stmt):
        try:
            return self.session.execute(
                stmt.execution_options(synchronize_session=False)
            )
        except OperationalError as exc:
            if not _is_lock_contention(exc):
                raise
            logger.warning(
                "Stock update for part %s hit a held lock: %s", part_id, exc.orig
            )
            raise ConcurrentUpdateError("Spare part", part_id) from exc

    def _reload(self, part_id: int) -> SparePart:
        part = self.session.get(SparePart, part_id, populate_existing=True)
        if part is None:
            raise NotFoundError("Spare part", part_id)
        return part

    def _warn_if_low(self, part: SparePart) -> None:
        if part.is_low_stock:
            logger.warning(
                "Spare part %s (%s) is low on stock: %d <= %d",
                part.id,
                part.name,
                part.quantity,
                part.minimum_quantity,
            )


def _check_non_negative(field: str, value: int | None) -> None:
    if value is None or value < 0:
        raise ValidationError(f"{field} must be zero or greater", field=field)


def _check_positive(quantity: int) -> None:
    if quantity is None or quantity <= 0:
        raise ValidationError("quantity must be a positive integer", field="quantity")


def _is_lock_contention(exc: OperationalError) -> bool:
    message = str(exc.orig).lower()
    return "database is locked" in message or "lock timeout" in message
