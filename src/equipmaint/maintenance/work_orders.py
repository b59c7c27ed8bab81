import logging
from datetime import datetime

from sqlalchemy.orm import Session

from equipmaint.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from equipmaint.inventory.spare_parts import SparePartLedger
from equipmaint.models.enums import (
    ALLOWED_TRANSITIONS,
    Priority,
    WorkOrderStatus,
    WorkOrderType,
)
from equipmaint.models.orm import PartUsage, WorkOrder, WorkOrderPartNeeded
from equipmaint.models.schemas import PartQuantity, WorkOrderCreate, WorkOrderUpdate

logger = logging.getLogger(__name__)


def initial_status(assigned_to: str | None) -> WorkOrderStatus:
    """Status a new work order starts in."""
    return WorkOrderStatus.ASSIGNED if assigned_to else WorkOrderStatus.REPORTED


def _clean_assignee(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class WorkOrderEngine:
    """Work-order lifecycle: creation, assignment, status transitions, part usage."""

    def __init__(self, session: Session, ledger: SparePartLedger | None = None):
        self.session = session
        self.ledger = ledger or SparePartLedger(session)

    def get_work_order(self, work_order_id: int) -> WorkOrder:
        wo = self.session.get(WorkOrder, work_order_id)
        if wo is None:
            raise NotFoundError("Work order", work_order_id)
        return wo

    def create_work_order(
        self,
        data: WorkOrderCreate,
        pm_schedule_id: int | None = None,
        now: datetime | None = None,
    ) -> WorkOrder:
        """Create a work order from a manual report or a PM schedule.

        Args:
            data: Creation payload. ``reported_by`` is the caller identity.
            pm_schedule_id: Schedule that spawned the order, if system-created.
            now: Creation timestamp. Defaults to the current time.

        Returns:
            The flushed WorkOrder, in Reported or Assigned status.
        """
        if not data.equipment_id or data.equipment_id <= 0:
            raise ValidationError("equipment_id is required", field="equipment_id")
        if not data.issue or not data.issue.strip():
            raise ValidationError("issue is required", field="issue")
        if not data.reported_by or not data.reported_by.strip():
            raise ValidationError("reported_by is required", field="reported_by")
        for entry in data.parts_needed:
            _check_part_quantity(entry)

        wo_type = WorkOrderType.parse(data.wo_type)
        priority = Priority.parse(data.priority) if data.priority else Priority.MEDIUM
        assignee = _clean_assignee(data.assigned_to)
        now = now or datetime.now()

        wo = WorkOrder(
            equipment_id=data.equipment_id,
            issue=data.issue.strip(),
            description=data.description,
            wo_type=wo_type,
            priority=priority,
            status=initial_status(assignee),
            reported_by=data.reported_by.strip(),
            assigned_to=assignee,
            created_at=now,
            updated_at=now,
            completion_date=data.completion_date,
            pm_schedule_id=pm_schedule_id,
        )
        wo.parts_needed = [
            WorkOrderPartNeeded(spare_part_id=p.part_id, quantity=p.quantity)
            for p in data.parts_needed
        ]
        self.session.add(wo)
        self.session.flush()
        wo.work_order_number = f"WO-{now:%Y%m}-{wo.id:05d}"
        self.session.flush()

        logger.info(
            "Created work order %s (%s, %s) for equipment %s",
            wo.work_order_number,
            wo.wo_type.value,
            wo.status.value,
            wo.equipment_id,
        )
        return wo

    def update_work_order(
        self, work_order_id: int, data: WorkOrderUpdate, now: datetime | None = None
    ) -> WorkOrder:
        """Apply a partial update, all-or-nothing.

        Assignment is applied first, so assigning a Reported order and moving
        it to In Progress can happen in one call. Terminal orders reject every
        update.
        """
        wo = self.get_work_order(work_order_id)
        self._guard_terminal(wo)

        fields = data.model_fields_set
        target = None
        if "status" in fields and data.status is not None:
            target = WorkOrderStatus.parse(data.status)
        priority = None
        if "priority" in fields and data.priority is not None:
            priority = Priority.parse(data.priority)
        for entry in data.parts_used or []:
            _check_part_quantity(entry)
        now = now or datetime.now()

        with self.session.begin_nested():
            if "assigned_to" in fields:
                self._assign(wo, data.assigned_to)
            if target is not None:
                self._transition(wo, target, now)
            for entry in data.parts_used or []:
                self._consume(wo, entry.part_id, entry.quantity, now)
            if "actions" in fields:
                wo.actions = data.actions
            if "completion_notes" in fields:
                wo.completion_notes = data.completion_notes
            if priority is not None:
                wo.priority = priority
            if "completion_date" in fields:
                wo.completion_date = data.completion_date
            wo.updated_at = now
            self.session.flush()
        return wo

    def log_part_usage(
        self,
        work_order_id: int,
        part_id: int,
        quantity: int,
        now: datetime | None = None,
    ) -> WorkOrder:
        """Consume stock against a work order.

        The stock decrement and the usage entry are written in one savepoint.
        Repeated usage of the same part appends a new entry.
        """
        if quantity is None or quantity <= 0:
            raise ValidationError(
                "quantity must be a positive integer", field="quantity"
            )
        wo = self.get_work_order(work_order_id)
        self._guard_terminal(wo)
        now = now or datetime.now()

        with self.session.begin_nested():
            self._consume(wo, part_id, quantity, now)
            wo.updated_at = now
            self.session.flush()
        return wo

    def delete_work_order(self, work_order_id: int) -> None:
        """Administrative delete. Consumed stock is not returned."""
        wo = self.get_work_order(work_order_id)
        self.session.delete(wo)
        self.session.flush()
        logger.info("Deleted work order %s", work_order_id)

    def _guard_terminal(self, wo: WorkOrder) -> None:
        if wo.status.is_terminal:
            raise InvalidTransitionError(
                f"Work order {wo.id} is {wo.status.value} and can no longer change",
                current_status=wo.status.value,
            )

    def _assign(self, wo: WorkOrder, assignee: str | None) -> None:
        assignee = _clean_assignee(assignee)
        wo.assigned_to = assignee
        if assignee and wo.status.is_unassigned_queue:
            wo.status = WorkOrderStatus.ASSIGNED

    def _transition(
        self, wo: WorkOrder, target: WorkOrderStatus, now: datetime
    ) -> None:
        current = wo.status
        if target == current:
            return
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"Cannot move work order {wo.id} from {current.value} "
                f"to {target.value}",
                current_status=current.value,
                target_status=target.value,
            )
        if target == WorkOrderStatus.ASSIGNED and not wo.assigned_to:
            raise InvalidTransitionError(
                f"Work order {wo.id} needs an assignee before it can be Assigned",
                current_status=current.value,
                target_status=target.value,
            )
        wo.status = target
        if target == WorkOrderStatus.COMPLETED:
            wo.completed_at = now
        logger.info(
            "Work order %s: %s -> %s", wo.id, current.value, target.value
        )

    def _consume(
        self, wo: WorkOrder, part_id: int, quantity: int, now: datetime
    ) -> None:
        self.ledger.decrement(part_id, quantity)
        wo.parts_used.append(
            PartUsage(spare_part_id=part_id, quantity=quantity, used_at=now)
        )


def _check_part_quantity(entry: PartQuantity) -> None:
    if entry.quantity <= 0:
        raise ValidationError(
            f"quantity for part {entry.part_id} must be a positive integer",
            field="quantity",
        )
