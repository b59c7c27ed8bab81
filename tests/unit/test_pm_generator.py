from datetime import date, datetime

from sqlalchemy import update

from equipmaint.config.settings import Settings
from equipmaint.maintenance.pm_generator import (
    PMGenerator,
    add_months,
    next_due_after,
)
from equipmaint.models.enums import Frequency, Priority, WorkOrderStatus, WorkOrderType
from equipmaint.models.orm import PMSchedule, WorkOrder

RUN_AT = datetime(2024, 1, 15, 6, 0)


def _schedule(session, equipment_id, **overrides):
    values = dict(
        equipment_id=equipment_id,
        task_description="Quarterly electrical safety check",
        frequency=Frequency.QUARTERLY,
        next_due_date=date(2024, 1, 10),
        is_active=True,
        priority=Priority.MEDIUM,
    )
    values.update(overrides)
    schedule = PMSchedule(**values)
    session.add(schedule)
    session.flush()
    return schedule


class TestDueDateArithmetic:
    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_add_months_crosses_year(self):
        assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 15)

    def test_one_interval_each_frequency(self):
        d = date(2024, 1, 1)
        assert next_due_after(d, Frequency.DAILY, d) == date(2024, 1, 2)
        assert next_due_after(d, Frequency.WEEKLY, d) == date(2024, 1, 8)
        assert next_due_after(d, Frequency.MONTHLY, d) == date(2024, 2, 1)
        assert next_due_after(d, Frequency.QUARTERLY, d) == date(2024, 4, 1)
        assert next_due_after(d, Frequency.ANNUALLY, d) == date(2025, 1, 1)

    def test_accepts_label(self):
        d = date(2024, 1, 1)
        assert next_due_after(d, "weekly", d) == date(2024, 1, 8)

    def test_leap_day_annual(self):
        d = date(2024, 2, 29)
        assert next_due_after(d, Frequency.ANNUALLY, d) == date(2025, 2, 28)

    def test_next_due_single_step(self):
        assert next_due_after(
            date(2024, 1, 1), Frequency.MONTHLY, date(2024, 1, 15)
        ) == date(2024, 2, 1)

    def test_next_due_catches_up(self):
        # 6 weekly intervals land on 2024-01-12, the 7th is the first after the run
        assert next_due_after(
            date(2023, 12, 1), Frequency.WEEKLY, date(2024, 1, 15)
        ) == date(2024, 1, 19)

    def test_next_due_is_strictly_after(self):
        assert next_due_after(
            date(2024, 1, 14), Frequency.DAILY, date(2024, 1, 15)
        ) == date(2024, 1, 16)

    def test_next_due_keeps_month_end_anchor(self):
        assert next_due_after(
            date(2024, 1, 31), Frequency.MONTHLY, date(2024, 3, 15)
        ) == date(2024, 3, 31)

    def test_clamped_date_becomes_next_anchor(self):
        first = next_due_after(date(2024, 1, 31), Frequency.MONTHLY, date(2024, 2, 1))
        assert first == date(2024, 2, 29)
        assert next_due_after(first, Frequency.MONTHLY, date(2024, 3, 1)) == date(
            2024, 3, 29
        )


class TestPMGenerator:
    def test_generates_due_schedule(self, session, monthly_schedule):
        summary = PMGenerator(session).generate_due_work_orders(RUN_AT)

        assert summary.generated_count == 1
        assert summary.error_count == 0
        wo = session.get(WorkOrder, summary.work_order_ids[0])
        assert wo.wo_type == WorkOrderType.PREVENTIVE
        assert wo.status == WorkOrderStatus.ASSIGNED
        assert wo.assigned_to == "tech.chen"
        assert wo.priority == Priority.HIGH
        assert wo.reported_by == "System Scheduler"
        assert wo.pm_schedule_id == monthly_schedule.id
        assert wo.issue == "Ventilator monthly PM"
        assert wo.created_at == RUN_AT

    def test_advances_schedule(self, session, monthly_schedule):
        PMGenerator(session).generate_due_work_orders(RUN_AT)
        session.refresh(monthly_schedule)
        assert monthly_schedule.next_due_date == date(2024, 2, 1)
        assert monthly_schedule.last_generated_at == RUN_AT

    def test_description_names_the_asset(self, session, monthly_schedule):
        summary = PMGenerator(session).generate_due_work_orders(RUN_AT)
        wo = session.get(WorkOrder, summary.work_order_ids[0])
        assert "Ventilator monthly PM" in wo.description
        assert "Draeger Evita V800 (S/N: SN-DR123456)" in wo.description
        assert wo.description.endswith("Frequency: Monthly.")

    def test_second_run_is_idempotent(self, session, monthly_schedule):
        gen = PMGenerator(session)
        first = gen.generate_due_work_orders(RUN_AT)
        second = gen.generate_due_work_orders(RUN_AT)
        assert first.generated_count == 1
        assert second.generated_count == 0
        assert session.query(WorkOrder).count() == 1

    def test_overdue_schedule_gets_one_catch_up_order(self, session, sample_equipment):
        schedule = _schedule(
            session,
            sample_equipment.id,
            frequency=Frequency.WEEKLY,
            next_due_date=date(2023, 12, 1),
        )
        summary = PMGenerator(session).generate_due_work_orders(RUN_AT)
        assert summary.generated_count == 1
        session.refresh(schedule)
        assert schedule.next_due_date == date(2024, 1, 19)

    def test_unassigned_schedule_creates_reported_order(
        self, session, sample_equipment
    ):
        _schedule(session, sample_equipment.id)
        summary = PMGenerator(session).generate_due_work_orders(RUN_AT)
        wo = session.get(WorkOrder, summary.work_order_ids[0])
        assert wo.status == WorkOrderStatus.REPORTED
        assert wo.assigned_to is None

    def test_skips_inactive_and_future(self, session, sample_equipment):
        _schedule(session, sample_equipment.id, is_active=False)
        _schedule(session, sample_equipment.id, next_due_date=date(2024, 1, 16))
        summary = PMGenerator(session).generate_due_work_orders(RUN_AT)
        assert summary.generated_count == 0
        assert summary.errors == []

    def test_due_today_is_generated(self, session, sample_equipment):
        _schedule(session, sample_equipment.id, next_due_date=date(2024, 1, 15))
        summary = PMGenerator(session).generate_due_work_orders(RUN_AT)
        assert summary.generated_count == 1

    def test_missing_equipment_is_isolated(
        self, session, sample_equipment, monthly_schedule
    ):
        orphan = _schedule(session, 9999, next_due_date=date(2023, 12, 20))
        summary = PMGenerator(session).generate_due_work_orders(RUN_AT)

        assert summary.generated_count == 1
        assert summary.error_count == 1
        assert summary.errors[0].schedule_id == orphan.id
        assert "Equipment 9999 not found" in summary.errors[0].error
        session.refresh(orphan)
        assert orphan.next_due_date == date(2023, 12, 20)
        assert orphan.last_generated_at is None

    def test_schedule_claimed_elsewhere_is_skipped(self, session, monthly_schedule):
        gen = PMGenerator(session)
        session.execute(
            update(PMSchedule)
            .where(PMSchedule.id == monthly_schedule.id)
            .values(next_due_date=date(2024, 2, 1))
            .execution_options(synchronize_session=False)
        )
        # in-memory copy still says 2024-01-01
        assert gen._generate_for(monthly_schedule, RUN_AT) is None
        assert session.query(WorkOrder).count() == 0

    def test_bare_date_runs_at_midnight(self, session, monthly_schedule):
        summary = PMGenerator(session).generate_due_work_orders(date(2024, 1, 15))
        wo = session.get(WorkOrder, summary.work_order_ids[0])
        assert wo.created_at == datetime(2024, 1, 15)

    def test_reporter_from_settings(self, session, monthly_schedule):
        settings = Settings(pm_reporter="PM Bot")
        summary = PMGenerator(session, settings=settings).generate_due_work_orders(
            RUN_AT
        )
        wo = session.get(WorkOrder, summary.work_order_ids[0])
        assert wo.reported_by == "PM Bot"
