from datetime import date

import pytest

from equipmaint.exceptions import NotFoundError, ValidationError
from equipmaint.maintenance.pm_generator import PMGenerator
from equipmaint.maintenance.schedules import PMScheduleStore
from equipmaint.models.enums import Frequency, Priority
from equipmaint.models.orm import WorkOrder
from equipmaint.models.schemas import ScheduleCreate, ScheduleUpdate


@pytest.fixture
def store(session):
    return PMScheduleStore(session)


class TestCreateSchedule:
    def test_create(self, store, sample_equipment):
        schedule = store.create_schedule(
            ScheduleCreate(
                equipment_id=sample_equipment.id,
                task_description="  Annual calibration ",
                frequency="annually",
                next_due_date=date(2024, 6, 1),
                assigned_to_user_id="tech.singh",
            )
        )
        assert schedule.id is not None
        assert schedule.frequency == Frequency.ANNUALLY
        assert schedule.task_description == "Annual calibration"
        assert schedule.priority == Priority.MEDIUM
        assert schedule.is_active

    def test_missing_fields_listed(self, store):
        with pytest.raises(ValidationError) as exc:
            store.create_schedule(ScheduleCreate(task_description="x"))
        assert "equipment_id" in exc.value.message
        assert "frequency" in exc.value.message
        assert "next_due_date" in exc.value.message

    def test_unknown_frequency(self, store, sample_equipment):
        with pytest.raises(ValidationError):
            store.create_schedule(
                ScheduleCreate(
                    equipment_id=sample_equipment.id,
                    task_description="x",
                    frequency="Fortnightly",
                    next_due_date=date(2024, 6, 1),
                )
            )

    def test_empty_assignee_stored_as_none(self, store, sample_equipment):
        schedule = store.create_schedule(
            ScheduleCreate(
                equipment_id=sample_equipment.id,
                task_description="Inspect",
                frequency=Frequency.WEEKLY,
                next_due_date=date(2024, 6, 1),
                assigned_to_user_id="",
            )
        )
        assert schedule.assigned_to_user_id is None


class TestUpdateSchedule:
    def test_partial_update(self, store, monthly_schedule):
        schedule = store.update_schedule(
            monthly_schedule.id, ScheduleUpdate(frequency="Quarterly", is_active=False)
        )
        assert schedule.frequency == Frequency.QUARTERLY
        assert not schedule.is_active
        assert schedule.next_due_date == date(2024, 1, 1)

    def test_clear_assignee(self, store, monthly_schedule):
        schedule = store.update_schedule(
            monthly_schedule.id, ScheduleUpdate(assigned_to_user_id="")
        )
        assert schedule.assigned_to_user_id is None

    def test_empty_update(self, store, monthly_schedule):
        with pytest.raises(ValidationError):
            store.update_schedule(monthly_schedule.id, ScheduleUpdate())

    def test_required_field_cannot_be_blanked(self, store, monthly_schedule):
        with pytest.raises(ValidationError):
            store.update_schedule(
                monthly_schedule.id, ScheduleUpdate(task_description="")
            )

    def test_unknown_schedule(self, store):
        with pytest.raises(NotFoundError):
            store.update_schedule(9999, ScheduleUpdate(notes="x"))


class TestListAndDelete:
    def test_list_filters(self, store, monthly_schedule, second_equipment):
        store.create_schedule(
            ScheduleCreate(
                equipment_id=second_equipment.id,
                task_description="Pump check",
                frequency="Monthly",
                next_due_date=date(2024, 2, 1),
                is_active=False,
            )
        )
        assert len(store.list_schedules()) == 2
        assert [s.id for s in store.list_schedules(active_only=True)] == [
            monthly_schedule.id
        ]
        assert len(store.list_schedules(equipment_id=second_equipment.id)) == 1

    def test_delete_keeps_generated_orders(self, store, session, monthly_schedule):
        summary = PMGenerator(session).generate_due_work_orders(date(2024, 1, 15))
        store.delete_schedule(monthly_schedule.id)

        wo = session.get(WorkOrder, summary.work_order_ids[0])
        session.refresh(wo)
        assert wo.pm_schedule_id is None
        with pytest.raises(NotFoundError):
            store.get_schedule(monthly_schedule.id)
