"""Synthetic data generator for equipmaint.

Seeds a hospital biomedical department: an equipment registry, a spare-part
store, recurring PM schedules, and a mix of open and closed work orders that
went through the real lifecycle (assignment, part usage, completion).
"""

import random
import sys
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path

# Ensure src is importable when running as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from sqlalchemy.orm import Session

from equipmaint.inventory.spare_parts import SparePartLedger
from equipmaint.maintenance.schedules import PMScheduleStore
from equipmaint.maintenance.work_orders import WorkOrderEngine
from equipmaint.models.database import get_engine, init_db
from equipmaint.models.enums import Frequency, Priority, WorkOrderStatus, WorkOrderType
from equipmaint.models.orm import Base, Equipment
from equipmaint.models.schemas import (
    PartQuantity,
    ScheduleCreate,
    SparePartCreate,
    WorkOrderCreate,
    WorkOrderUpdate,
)

SEED = 42
random.seed(SEED)

LOCATIONS = ["Main Hospital", "North Clinic", "Outpatient Center"]

DEPARTMENTS = [
    "Radiology",
    "ICU",
    "Emergency",
    "Surgery",
    "Cardiology",
    "Neonatal",
]

TECHNICIANS = ["tech.alvarez", "tech.chen", "tech.okafor", "tech.novak", "tech.singh"]
REPORTERS = ["nurse.adams", "nurse.baker", "dr.patel", "dr.kim", "clerk.lopez"]

# (name, count, frequency, manufacturers, models)
EQUIPMENT_SPECS = [
    ("Ventilator", 12, Frequency.QUARTERLY, ["Draeger", "Mindray"], ["Evita V800", "SV800"]),
    ("Infusion Pump", 20, Frequency.MONTHLY, ["GE Healthcare", "Mindray"], ["Alaris System", "BeneFusion SP5"]),
    ("Patient Monitor", 15, Frequency.QUARTERLY, ["Philips Healthcare", "Masimo"], ["IntelliVue MX800", "Root"]),
    ("Defibrillator", 8, Frequency.MONTHLY, ["Philips Healthcare", "Stryker"], ["HeartStart MRx", "LIFEPAK 15"]),
    ("Anesthesia Machine", 5, Frequency.QUARTERLY, ["Draeger", "GE Healthcare"], ["Perseus A500", "Aisys CS2"]),
    ("Surgical Light", 6, Frequency.ANNUALLY, ["Stryker", "Draeger"], ["Visum II", "Polaris 600"]),
    ("Blood Gas Analyzer", 4, Frequency.WEEKLY, ["Siemens Healthineers"], ["RAPIDPoint 500"]),
]

# (name, category, unit, quantity, minimum, unit_cost, supplier, lead_time_days)
SPARE_PART_SPECS = [
    ("O2 Sensor", "Sensors", "pcs", 25, 5, "145.00", "Draeger Parts", 14),
    ("Flow Sensor", "Sensors", "pcs", 12, 4, "210.00", "Draeger Parts", 21),
    ("SpO2 Probe", "Sensors", "pcs", 40, 10, "89.50", "Masimo Direct", 7),
    ("Pump Tubing Set", "Consumables", "box", 60, 20, "32.00", "BD Supply", 5),
    ("Battery Pack 12V", "Electrical", "pcs", 8, 6, "175.00", "Medical Power Co", 10),
    ("Defib Pads", "Consumables", "pair", 30, 12, "54.00", "Stryker Service", 7),
    ("HEPA Filter", "Filters", "pcs", 18, 6, "64.00", "FilterTech", 10),
    ("Bacterial Filter", "Filters", "pcs", 50, 15, "12.50", "FilterTech", 5),
    ("Halogen Bulb", "Electrical", "pcs", 4, 5, "38.00", "Lumen Medical", 14),
    ("Calibration Gas Kit", "Calibration", "kit", 3, 2, "310.00", "CalGas Inc", 30),
]

ISSUES = [
    "Alarm sounding intermittently",
    "Display flickering",
    "Battery not holding charge",
    "Occlusion error during infusion",
    "Sensor reading out of range",
    "Fails self-test on startup",
    "Unusual noise from fan",
    "Power button unresponsive",
]

TODAY = date(2026, 2, 26)


def _random_date(start: date, end: date) -> date:
    delta = (end - start).days
    if delta <= 0:
        return start
    return start + timedelta(days=random.randint(0, delta))


def _random_time(d: date) -> datetime:
    return datetime.combine(d, datetime.min.time()) + timedelta(
        hours=random.randint(7, 18), minutes=random.randint(0, 59)
    )


def generate_equipment(session: Session) -> list[Equipment]:
    """Generate the equipment registry."""
    equipment_list = []
    asset_counter = 0

    for name, count, _freq, mfrs, models in EQUIPMENT_SPECS:
        for _ in range(count):
            asset_counter += 1
            manufacturer = random.choice(mfrs)
            eq = Equipment(
                asset_tag=f"EQ-{asset_counter:04d}",
                name=name,
                manufacturer=manufacturer,
                model_name=random.choice(models),
                serial_number=f"SN-{manufacturer[:2].upper()}{random.randint(100000, 999999)}",
                location=random.choice(LOCATIONS),
                department=random.choice(DEPARTMENTS),
                status=random.choice(["active"] * 9 + ["out_of_service"]),
            )
            session.add(eq)
            equipment_list.append(eq)

    session.flush()
    return equipment_list


def generate_spare_parts(session: Session) -> list:
    """Stock the spare-part store; a few parts start below their minimum."""
    ledger = SparePartLedger(session)
    parts = []
    for name, category, unit, qty, minimum, cost, supplier, lead in SPARE_PART_SPECS:
        parts.append(
            ledger.create_part(
                SparePartCreate(
                    name=name,
                    category=category,
                    unit=unit,
                    quantity=qty,
                    minimum_quantity=minimum,
                    unit_cost=Decimal(cost),
                    supplier=supplier,
                    lead_time_days=lead,
                    min_order_qty=max(minimum, 1),
                    location=f"Store Room {random.choice('ABC')}",
                )
            )
        )
    return parts


def generate_pm_schedules(session: Session, equipment_list: list[Equipment]) -> int:
    """One recurring PM schedule per asset; some are already overdue."""
    store = PMScheduleStore(session)
    frequencies = {spec[0]: spec[2] for spec in EQUIPMENT_SPECS}
    count = 0
    for eq in equipment_list:
        store.create_schedule(
            ScheduleCreate(
                equipment_id=eq.id,
                task_description=f"{eq.name} preventive maintenance",
                frequency=frequencies[eq.name],
                next_due_date=_random_date(
                    TODAY - timedelta(days=45), TODAY + timedelta(days=90)
                ),
                is_active=random.random() > 0.05,
                assigned_to_user_id=random.choice(TECHNICIANS + [None]),
                priority=random.choice([Priority.MEDIUM, Priority.HIGH]),
            )
        )
        count += 1
    return count


def generate_work_orders(
    session: Session, equipment_list: list[Equipment], parts: list
) -> int:
    """Report issues and walk a share of them through the lifecycle."""
    engine = WorkOrderEngine(session)
    count = 0

    for _ in range(80):
        eq = random.choice(equipment_list)
        reported = _random_time(_random_date(TODAY - timedelta(days=180), TODAY))
        wo = engine.create_work_order(
            WorkOrderCreate(
                equipment_id=eq.id,
                issue=random.choice(ISSUES),
                wo_type=random.choice(
                    [WorkOrderType.CORRECTIVE] * 4
                    + [WorkOrderType.CALIBRATION, WorkOrderType.INSPECTION]
                ),
                priority=random.choice(list(Priority)),
                reported_by=random.choice(REPORTERS),
                parts_needed=[
                    PartQuantity(part_id=random.choice(parts).id, quantity=1)
                ],
            ),
            now=reported,
        )
        count += 1

        stage = random.random()
        if stage < 0.2:
            continue

        t = reported + timedelta(hours=random.randint(1, 24))
        engine.update_work_order(
            wo.id,
            WorkOrderUpdate(assigned_to=random.choice(TECHNICIANS)),
            now=t,
        )
        if stage < 0.35:
            continue

        t += timedelta(hours=random.randint(1, 48))
        engine.update_work_order(
            wo.id, WorkOrderUpdate(status=WorkOrderStatus.IN_PROGRESS), now=t
        )
        if stage < 0.45:
            engine.update_work_order(
                wo.id,
                WorkOrderUpdate(
                    status=WorkOrderStatus.ON_HOLD,
                    actions="Waiting on vendor part",
                ),
                now=t + timedelta(hours=2),
            )
            continue

        part = random.choice(parts)
        session.refresh(part)
        used = []
        if part.quantity > 1:
            used = [PartQuantity(part_id=part.id, quantity=1)]

        t += timedelta(hours=random.randint(1, 72))
        if stage < 0.95:
            engine.update_work_order(
                wo.id,
                WorkOrderUpdate(
                    status=WorkOrderStatus.COMPLETED,
                    actions="Diagnosed and repaired",
                    completion_notes="Verified operation against OEM checklist",
                    completion_date=t.date(),
                    parts_used=used,
                ),
                now=t,
            )
        else:
            engine.update_work_order(
                wo.id,
                WorkOrderUpdate(
                    status=WorkOrderStatus.CANCELLED,
                    completion_notes="Duplicate report",
                ),
                now=t,
            )

    return count


def main() -> None:
    engine = get_engine()
    Base.metadata.drop_all(engine)
    init_db(engine)

    with Session(engine) as session:
        print("Generating equipment...")
        equipment_list = generate_equipment(session)
        print(f"  Created {len(equipment_list)} equipment records")

        print("Generating spare parts...")
        parts = generate_spare_parts(session)
        print(f"  Created {len(parts)} spare parts")

        print("Generating PM schedules...")
        schedule_count = generate_pm_schedules(session, equipment_list)
        print(f"  Created {schedule_count} PM schedules")

        print("Generating work orders...")
        wo_count = generate_work_orders(session, equipment_list, parts)
        print(f"  Created {wo_count} work orders")

        session.commit()
        print("Done!")


if __name__ == "__main__":
    main()
