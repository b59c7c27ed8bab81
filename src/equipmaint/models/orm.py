from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from equipmaint.models.enums import Frequency, Priority, WorkOrderStatus, WorkOrderType


def _label_enum(enum_cls, length: int = 20) -> SAEnum:
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class Base(DeclarativeBase):
    pass


class Equipment(Base):
    __tablename__ = "equipment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    asset_tag: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    manufacturer: Mapped[str | None] = mapped_column(String(100))
    model_name: Mapped[str | None] = mapped_column(String(100))
    serial_number: Mapped[str | None] = mapped_column(String(50))
    location: Mapped[str | None] = mapped_column(String(100))
    department: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[str | None] = mapped_column(String(20))


class WorkOrder(Base):
    __tablename__ = "work_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    work_order_number: Mapped[str | None] = mapped_column(String(30), unique=True)
    # Soft reference: the registry is not enforced at the storage layer.
    equipment_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    issue: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    wo_type: Mapped[WorkOrderType] = mapped_column(
        _label_enum(WorkOrderType), nullable=False
    )
    priority: Mapped[Priority] = mapped_column(
        _label_enum(Priority), nullable=False, default=Priority.MEDIUM
    )
    status: Mapped[WorkOrderStatus] = mapped_column(
        _label_enum(WorkOrderStatus), nullable=False, index=True
    )
    reported_by: Mapped[str] = mapped_column(String(50), nullable=False)
    assigned_to: Mapped[str | None] = mapped_column(String(50), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    completion_date: Mapped[date | None] = mapped_column(Date)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
    actions: Mapped[str | None] = mapped_column(Text)
    completion_notes: Mapped[str | None] = mapped_column(Text)
    pm_schedule_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("pm_schedules.id", ondelete="SET NULL")
    )

    parts_needed: Mapped[list["WorkOrderPartNeeded"]] = relationship(
        back_populates="work_order",
        cascade="all, delete-orphan",
        order_by="WorkOrderPartNeeded.id",
    )
    parts_used: Mapped[list["PartUsage"]] = relationship(
        back_populates="work_order",
        cascade="all, delete-orphan",
        order_by="PartUsage.id",
    )
    pm_schedule: Mapped[Optional["PMSchedule"]] = relationship(
        back_populates="work_orders"
    )


class WorkOrderPartNeeded(Base):
    """Advisory list of parts a work order is expected to need."""

    __tablename__ = "work_order_parts_needed"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    work_order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False
    )
    spare_part_id: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    work_order: Mapped["WorkOrder"] = relationship(back_populates="parts_needed")


class PartUsage(Base):
    """Authoritative consumption record of a spare part against a work order."""

    __tablename__ = "work_order_part_usages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    work_order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False
    )
    spare_part_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("spare_parts.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    used_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    work_order: Mapped["WorkOrder"] = relationship(back_populates="parts_used")
    spare_part: Mapped["SparePart"] = relationship(back_populates="usages")


class PMSchedule(Base):
    __tablename__ = "pm_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    equipment_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    task_description: Mapped[str] = mapped_column(String(500), nullable=False)
    frequency: Mapped[Frequency] = mapped_column(
        _label_enum(Frequency), nullable=False
    )
    next_due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    last_generated_at: Mapped[datetime | None] = mapped_column(DateTime)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    assigned_to_user_id: Mapped[str | None] = mapped_column(String(50))
    priority: Mapped[Priority] = mapped_column(
        _label_enum(Priority), nullable=False, default=Priority.MEDIUM
    )
    notes: Mapped[str | None] = mapped_column(Text)

    work_orders: Mapped[list["WorkOrder"]] = relationship(back_populates="pm_schedule")


class SparePart(Base):
    __tablename__ = "spare_parts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    minimum_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit: Mapped[str | None] = mapped_column(String(20))
    location: Mapped[str | None] = mapped_column(String(100))
    category: Mapped[str | None] = mapped_column(String(50))
    supplier: Mapped[str | None] = mapped_column(String(100))
    unit_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    min_order_qty: Mapped[int | None] = mapped_column(Integer)
    lead_time_days: Mapped[int | None] = mapped_column(Integer)
    equipment_id: Mapped[int | None] = mapped_column(Integer)
    notes: Mapped[str | None] = mapped_column(Text)
    last_updated: Mapped[datetime | None] = mapped_column(DateTime)

    usages: Mapped[list["PartUsage"]] = relationship(back_populates="spare_part")

    @hybrid_property
    def is_low_stock(self):
        return self.quantity <= self.minimum_quantity
