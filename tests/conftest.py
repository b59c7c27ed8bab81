from datetime import date

import pytest
from sqlalchemy.orm import Session

from equipmaint.models.database import get_engine
from equipmaint.models.enums import Frequency, Priority
from equipmaint.models.orm import Base, Equipment, PMSchedule, SparePart


@pytest.fixture(scope="session")
def engine():
    eng = get_engine("sqlite:///:memory:")
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    sess = Session(bind=connection)
    yield sess
    sess.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def sample_equipment(session):
    """Create a ventilator in the ICU."""
    eq = Equipment(
        asset_tag="EQ-TEST-0001",
        name="Ventilator",
        manufacturer="Draeger",
        model_name="Evita V800",
        serial_number="SN-DR123456",
        location="Main Hospital",
        department="ICU",
        status="active",
    )
    session.add(eq)
    session.flush()
    return eq


@pytest.fixture
def second_equipment(session):
    """Create an infusion pump in a different building."""
    eq = Equipment(
        asset_tag="EQ-TEST-0002",
        name="Infusion Pump",
        manufacturer="Mindray",
        model_name="BeneFusion SP5",
        location="North Clinic",
        department="Emergency",
        status="active",
    )
    session.add(eq)
    session.flush()
    return eq


@pytest.fixture
def spare_part(session):
    """O2 sensor with 10 in stock and a reorder threshold of 5."""
    part = SparePart(
        name="O2 Sensor",
        quantity=10,
        minimum_quantity=5,
        unit="pcs",
        category="Sensors",
        supplier="Draeger Parts",
        location="Store Room A",
    )
    session.add(part)
    session.flush()
    return part


@pytest.fixture
def monthly_schedule(session, sample_equipment):
    """Monthly PM due on 2024-01-01, assigned to a technician."""
    schedule = PMSchedule(
        equipment_id=sample_equipment.id,
        task_description="Ventilator monthly PM",
        frequency=Frequency.MONTHLY,
        next_due_date=date(2024, 1, 1),
        is_active=True,
        assigned_to_user_id="tech.chen",
        priority=Priority.HIGH,
    )
    session.add(schedule)
    session.flush()
    return schedule
