import logging

from sqlalchemy.orm import Session

from equipmaint.config.settings import get_settings
from equipmaint.exceptions import NotFoundError, ValidationError
from equipmaint.ingestion.schedule_loader import load_pm_schedules
from equipmaint.models.enums import Frequency, Priority
from equipmaint.models.orm import PMSchedule
from equipmaint.models.schemas import ScheduleCreate, ScheduleUpdate

logger = logging.getLogger(__name__)


class PMScheduleStore:
    """Administrative CRUD for recurring preventive-maintenance definitions."""

    def __init__(self, session: Session):
        self.session = session

    def get_schedule(self, schedule_id: int) -> PMSchedule:
        schedule = self.session.get(PMSchedule, schedule_id)
        if schedule is None:
            raise NotFoundError("PM schedule", schedule_id)
        return schedule

    def list_schedules(
        self, equipment_id: int | None = None, active_only: bool = False
    ) -> list[PMSchedule]:
        return load_pm_schedules(self.session, equipment_id, active_only)

    def create_schedule(self, data: ScheduleCreate) -> PMSchedule:
        missing = [
            name
            for name, value in (
                ("equipment_id", data.equipment_id),
                ("task_description", (data.task_description or "").strip()),
                ("frequency", data.frequency),
                ("next_due_date", data.next_due_date),
            )
            if not value
        ]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}", field=missing[0]
            )

        priority = data.priority or get_settings().pm_default_priority
        schedule = PMSchedule(
            equipment_id=data.equipment_id,
            task_description=data.task_description.strip(),
            frequency=Frequency.parse(data.frequency),
            next_due_date=data.next_due_date,
            is_active=data.is_active,
            assigned_to_user_id=data.assigned_to_user_id or None,
            priority=Priority.parse(priority),
            notes=data.notes,
        )
        self.session.add(schedule)
        self.session.flush()
        logger.info(
            "Created PM schedule %s (%s) for equipment %s, next due %s",
            schedule.id,
            schedule.frequency.value,
            schedule.equipment_id,
            schedule.next_due_date,
        )
        return schedule

    def update_schedule(self, schedule_id: int, data: ScheduleUpdate) -> PMSchedule:
        """Partial update. An empty ``assigned_to_user_id`` clears the assignee."""
        schedule = self.get_schedule(schedule_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields provided for update.")

        for field in ("equipment_id", "task_description", "frequency", "next_due_date"):
            if field in changes and not changes[field]:
                raise ValidationError(f"{field} cannot be empty", field=field)
        if "is_active" in changes and changes["is_active"] is None:
            raise ValidationError("is_active cannot be empty", field="is_active")

        if "frequency" in changes:
            changes["frequency"] = Frequency.parse(changes["frequency"])
        if "priority" in changes:
            changes["priority"] = Priority.parse(
                changes["priority"] or get_settings().pm_default_priority
            )
        if "assigned_to_user_id" in changes:
            changes["assigned_to_user_id"] = changes["assigned_to_user_id"] or None
        if "task_description" in changes:
            changes["task_description"] = changes["task_description"].strip()

        for field, value in changes.items():
            setattr(schedule, field, value)
        self.session.flush()
        return schedule

    def delete_schedule(self, schedule_id: int) -> None:
        """Delete a schedule. Work orders it generated are kept and unlinked."""
        schedule = self.get_schedule(schedule_id)
        self.session.delete(schedule)
        self.session.flush()
