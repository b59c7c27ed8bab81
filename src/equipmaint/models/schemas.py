from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from equipmaint.models.enums import Frequency, Priority, WorkOrderStatus, WorkOrderType

# --- Work order schemas ---


class PartQuantity(BaseModel):
    part_id: int
    quantity: int


class WorkOrderCreate(BaseModel):
    """Inbound payload for a manual issue report or a system-generated order."""

    equipment_id: int | None = None
    issue: str = ""
    wo_type: WorkOrderType | str = WorkOrderType.CORRECTIVE
    priority: Priority | str | None = None
    reported_by: str = ""
    assigned_to: str | None = None
    description: str | None = None
    completion_date: date | None = None
    parts_needed: list[PartQuantity] = []


class WorkOrderUpdate(BaseModel):
    """Partial update. Only fields explicitly set are applied.

    ``assigned_to=None`` unassigns; omitting the field leaves it untouched.
    ``parts_used`` entries are logged as new consumption, never merged.
    """

    status: WorkOrderStatus | str | None = None
    assigned_to: str | None = None
    actions: str | None = None
    completion_notes: str | None = None
    priority: Priority | str | None = None
    completion_date: date | None = None
    parts_used: list[PartQuantity] | None = None


class PartNeededRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    spare_part_id: int
    quantity: int


class PartUsageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    work_order_id: int
    spare_part_id: int
    quantity: int
    used_at: datetime


class WorkOrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    work_order_number: str | None
    equipment_id: int
    issue: str
    description: str | None
    wo_type: WorkOrderType
    priority: Priority
    status: WorkOrderStatus
    reported_by: str
    assigned_to: str | None
    created_at: datetime
    updated_at: datetime
    completion_date: date | None
    completed_at: datetime | None
    actions: str | None
    completion_notes: str | None
    pm_schedule_id: int | None
    parts_needed: list[PartNeededRead]
    parts_used: list[PartUsageRead]


# --- PM schedule schemas ---


class ScheduleCreate(BaseModel):
    equipment_id: int | None = None
    task_description: str = ""
    frequency: Frequency | str | None = None
    next_due_date: date | None = None
    is_active: bool = True
    assigned_to_user_id: str | None = None
    priority: Priority | str | None = None
    notes: str | None = None


class ScheduleUpdate(BaseModel):
    equipment_id: int | None = None
    task_description: str | None = None
    frequency: Frequency | str | None = None
    next_due_date: date | None = None
    is_active: bool | None = None
    assigned_to_user_id: str | None = None
    priority: Priority | str | None = None
    notes: str | None = None


class ScheduleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    equipment_id: int
    task_description: str
    frequency: Frequency
    next_due_date: date
    last_generated_at: datetime | None
    is_active: bool
    assigned_to_user_id: str | None
    priority: Priority
    notes: str | None


class ScheduleGenerationError(BaseModel):
    schedule_id: int
    error: str


class GenerationSummary(BaseModel):
    """Outcome of one PM generation run."""

    generated_count: int
    error_count: int
    errors: list[ScheduleGenerationError]
    work_order_ids: list[int]


# --- Spare part schemas ---


class SparePartCreate(BaseModel):
    name: str = ""
    quantity: int = 0
    minimum_quantity: int = 0
    unit: str | None = None
    location: str | None = None
    category: str | None = None
    supplier: str | None = None
    unit_cost: Decimal | None = None
    min_order_qty: int | None = None
    lead_time_days: int | None = None
    equipment_id: int | None = None
    notes: str | None = None


class SparePartUpdate(BaseModel):
    name: str | None = None
    quantity: int | None = None
    minimum_quantity: int | None = None
    unit: str | None = None
    location: str | None = None
    category: str | None = None
    supplier: str | None = None
    unit_cost: Decimal | None = None
    min_order_qty: int | None = None
    lead_time_days: int | None = None
    equipment_id: int | None = None
    notes: str | None = None


class SparePartRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    quantity: int
    minimum_quantity: int
    unit: str | None
    location: str | None
    category: str | None
    supplier: str | None
    unit_cost: Decimal | None
    min_order_qty: int | None
    lead_time_days: int | None
    equipment_id: int | None
    notes: str | None
    last_updated: datetime | None
    is_low_stock: bool


class RestockRequest(BaseModel):
    quantity: int


# --- Equipment registry ---


class EquipmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    asset_tag: str
    name: str
    manufacturer: str | None
    model_name: str | None
    serial_number: str | None
    location: str | None
    department: str | None
    status: str | None
