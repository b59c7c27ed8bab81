import calendar
import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from equipmaint.config.settings import Settings, get_settings
from equipmaint.exceptions import MaintenanceError
from equipmaint.ingestion.equipment_loader import get_equipment
from equipmaint.ingestion.schedule_loader import load_due_schedules
from equipmaint.maintenance.work_orders import WorkOrderEngine
from equipmaint.models.enums import Frequency, WorkOrderType
from equipmaint.models.orm import Equipment, PMSchedule, WorkOrder
from equipmaint.models.schemas import (
    GenerationSummary,
    ScheduleGenerationError,
    WorkOrderCreate,
)

logger = logging.getLogger(__name__)

_MONTH_STEPS = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.ANNUALLY: 12,
}
_DAY_STEPS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
}


def add_months(d: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of the month."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _shift(due: date, frequency: Frequency, steps: int) -> date:
    if frequency in _DAY_STEPS:
        return due + timedelta(days=_DAY_STEPS[frequency] * steps)
    return add_months(due, _MONTH_STEPS[frequency] * steps)


def next_due_after(due: date, frequency: Frequency, as_of: date) -> date:
    """Advance ``due`` by whole intervals until it falls strictly after ``as_of``.

    Intervals are counted from ``due``, so month-end clamping does not compound
    within one catch-up. The returned date is the anchor for the next run, so a
    schedule clamped to Feb 29 stays on the 29th afterwards.
    """
    frequency = Frequency.parse(frequency)
    steps = 1
    while True:
        candidate = _shift(due, frequency, steps)
        if candidate > as_of:
            return candidate
        steps += 1


def _as_datetime(now: datetime | date | None) -> datetime:
    if now is None:
        return datetime.now()
    if isinstance(now, datetime):
        return now
    return datetime.combine(now, time.min)


def _describe(schedule: PMSchedule, equipment: Equipment) -> str:
    asset = " ".join(
        part for part in (equipment.manufacturer, equipment.model_name) if part
    ) or equipment.name
    serial = f" (S/N: {equipment.serial_number})" if equipment.serial_number else ""
    return (
        f"Preventive maintenance based on schedule: {schedule.task_description} "
        f"for {asset}{serial}. Frequency: {schedule.frequency.value}."
    )


class PMGenerator:
    """Turns due preventive-maintenance schedules into work orders.

    Overdue schedules get a single catch-up order per run; the due date then
    jumps to the first interval after the run date.
    """

    def __init__(
        self,
        session: Session,
        engine: WorkOrderEngine | None = None,
        settings: Settings | None = None,
    ):
        self.session = session
        self.engine = engine or WorkOrderEngine(session)
        self.settings = settings or get_settings()

    def generate_due_work_orders(
        self, now: datetime | date | None = None
    ) -> GenerationSummary:
        """Generate one Preventive work order for every due, active schedule.

        Args:
            now: Run timestamp. A bare date is treated as midnight.

        Returns:
            GenerationSummary with counts, per-schedule errors, and new order ids.
        """
        now = _as_datetime(now)
        due = load_due_schedules(self.session, now.date())
        logger.info("PM generation at %s: %d schedule(s) due", now, len(due))

        work_order_ids: list[int] = []
        errors: list[ScheduleGenerationError] = []

        for schedule in due:
            schedule_id = schedule.id
            try:
                with self.session.begin_nested():
                    wo = self._generate_for(schedule, now)
            except (MaintenanceError, SQLAlchemyError) as exc:
                message = getattr(exc, "message", None) or str(exc)
                logger.warning(
                    "Failed to generate work order for PM schedule %s: %s",
                    schedule_id,
                    message,
                )
                errors.append(
                    ScheduleGenerationError(schedule_id=schedule_id, error=message)
                )
                continue

            if wo is None:
                logger.info(
                    "PM schedule %s was already advanced by another run", schedule_id
                )
                continue
            work_order_ids.append(wo.id)

        return GenerationSummary(
            generated_count=len(work_order_ids),
            error_count=len(errors),
            errors=errors,
            work_order_ids=work_order_ids,
        )

    def _generate_for(self, schedule: PMSchedule, now: datetime) -> WorkOrder | None:
        equipment = get_equipment(self.session, schedule.equipment_id)
        previous_due = schedule.next_due_date
        new_due = next_due_after(previous_due, schedule.frequency, now.date())

        # Claim the schedule; zero rows means a concurrent run got there first.
        claimed = self.session.execute(
            update(PMSchedule)
            .where(
                PMSchedule.id == schedule.id,
                PMSchedule.next_due_date == previous_due,
                PMSchedule.is_active.is_(True),
            )
            .values(next_due_date=new_due, last_generated_at=now)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            return None
        self.session.refresh(schedule)

        wo = self.engine.create_work_order(
            WorkOrderCreate(
                equipment_id=schedule.equipment_id,
                issue=schedule.task_description,
                wo_type=WorkOrderType.PREVENTIVE,
                priority=schedule.priority,
                reported_by=self.settings.pm_reporter,
                assigned_to=schedule.assigned_to_user_id,
                description=_describe(schedule, equipment),
            ),
            pm_schedule_id=schedule.id,
            now=now,
        )
        logger.info(
            "Generated %s from PM schedule %s; next due %s",
            wo.work_order_number,
            schedule.id,
            new_due,
        )
        return wo
