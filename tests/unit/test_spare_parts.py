import logging
from datetime import datetime

import pytest

from equipmaint.exceptions import InsufficientStockError, NotFoundError, ValidationError
from equipmaint.inventory.spare_parts import SparePartLedger
from equipmaint.models.orm import PartUsage, SparePart
from equipmaint.models.schemas import SparePartCreate, SparePartUpdate


@pytest.fixture
def ledger(session):
    return SparePartLedger(session)


@pytest.fixture
def filter_part(session):
    part = SparePart(
        name="HEPA Filter", quantity=2, minimum_quantity=6, category="Filters"
    )
    session.add(part)
    session.flush()
    return part


class TestLowStock:
    def test_is_low_stock_at_threshold(self):
        assert SparePart(name="x", quantity=5, minimum_quantity=5).is_low_stock
        assert not SparePart(name="x", quantity=6, minimum_quantity=5).is_low_stock

    def test_low_stock_query(self, ledger, spare_part, filter_part):
        low = ledger.low_stock_parts()
        assert [p.name for p in low] == ["HEPA Filter"]

    def test_list_filters(self, ledger, spare_part, filter_part):
        assert len(ledger.list_parts()) == 2
        assert [p.id for p in ledger.list_parts(category="Sensors")] == [spare_part.id]
        assert [p.id for p in ledger.list_parts(low_stock_only=True)] == [
            filter_part.id
        ]


class TestDecrement:
    def test_decrement(self, ledger, spare_part):
        part = ledger.decrement(spare_part.id, 4)
        assert part.quantity == 6
        assert part.last_updated is not None

    def test_insufficient_stock(self, ledger, spare_part):
        with pytest.raises(InsufficientStockError) as exc:
            ledger.decrement(spare_part.id, 11)
        assert exc.value.details == {"part_id": spare_part.id, "requested": 11, "available": 10}
        assert ledger.get_part(spare_part.id).quantity == 10

    def test_unknown_part(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.decrement(424242, 1)

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive(self, ledger, spare_part, quantity):
        with pytest.raises(ValidationError):
            ledger.decrement(spare_part.id, quantity)

    def test_crossing_threshold_logs_warning(self, ledger, spare_part, caplog):
        with caplog.at_level(logging.WARNING, logger="equipmaint.inventory.spare_parts"):
            ledger.decrement(spare_part.id, 5)
        assert "low on stock" in caplog.text


class TestRestock:
    def test_restock(self, ledger, filter_part):
        part = ledger.restock(filter_part.id, 10)
        assert part.quantity == 12
        assert not part.is_low_stock

    def test_restock_unknown(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.restock(424242, 1)

    def test_restock_requires_positive(self, ledger, filter_part):
        with pytest.raises(ValidationError):
            ledger.restock(filter_part.id, 0)


class TestCrud:
    def test_create(self, ledger):
        part = ledger.create_part(
            SparePartCreate(name="Defib Pads", quantity=30, minimum_quantity=12)
        )
        assert part.id is not None
        assert part.last_updated is not None

    def test_create_requires_name(self, ledger):
        with pytest.raises(ValidationError):
            ledger.create_part(SparePartCreate(name=" ", quantity=1))

    def test_create_rejects_negative(self, ledger):
        with pytest.raises(ValidationError):
            ledger.create_part(SparePartCreate(name="Bulb", quantity=-1))

    def test_update(self, ledger, spare_part):
        part = ledger.update_part(
            spare_part.id, SparePartUpdate(minimum_quantity=12, supplier="Acme")
        )
        assert part.minimum_quantity == 12
        assert part.supplier == "Acme"
        assert part.name == "O2 Sensor"
        assert part.is_low_stock

    def test_empty_update(self, ledger, spare_part):
        with pytest.raises(ValidationError, match="No fields provided"):
            ledger.update_part(spare_part.id, SparePartUpdate())

    def test_get_unknown(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.get_part(424242)

    def test_delete_unused(self, ledger, spare_part):
        ledger.delete_part(spare_part.id)
        with pytest.raises(NotFoundError):
            ledger.get_part(spare_part.id)

    def test_delete_with_usage_history(self, ledger, session, spare_part, sample_equipment):
        from equipmaint.maintenance.work_orders import WorkOrderEngine
        from equipmaint.models.schemas import WorkOrderCreate

        engine = WorkOrderEngine(session, ledger)
        wo = engine.create_work_order(
            WorkOrderCreate(
                equipment_id=sample_equipment.id,
                issue="Replace sensor",
                reported_by="nurse.adams",
                assigned_to="tech.chen",
            )
        )
        engine.log_part_usage(wo.id, spare_part.id, 1)
        with pytest.raises(ValidationError):
            ledger.delete_part(spare_part.id)

    def test_usage_history_newest_first(self, ledger, session, spare_part, sample_equipment):
        from equipmaint.maintenance.work_orders import WorkOrderEngine
        from equipmaint.models.schemas import WorkOrderCreate

        engine = WorkOrderEngine(session, ledger)
        wo = engine.create_work_order(
            WorkOrderCreate(
                equipment_id=sample_equipment.id,
                issue="Replace sensor",
                reported_by="nurse.adams",
            )
        )
        engine.log_part_usage(wo.id, spare_part.id, 1, now=datetime(2024, 1, 1))
        engine.log_part_usage(wo.id, spare_part.id, 2, now=datetime(2024, 1, 2))
        history = ledger.usage_history(spare_part.id)
        assert [u.quantity for u in history] == [2, 1]
        assert all(isinstance(u, PartUsage) for u in history)
