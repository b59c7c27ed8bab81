from decimal import Decimal
from pathlib import Path

import pandas as pd
from sqlalchemy import select
from sqlalchemy.orm import Session

from equipmaint.exceptions import ValidationError
from equipmaint.inventory.spare_parts import SparePartLedger
from equipmaint.models.orm import SparePart
from equipmaint.models.schemas import SparePartCreate, SparePartUpdate

REQUIRED_COLUMNS = ("name", "quantity", "minimum_quantity")
INT_COLUMNS = (
    "quantity",
    "minimum_quantity",
    "min_order_qty",
    "lead_time_days",
    "equipment_id",
)
OPTIONAL_COLUMNS = (
    "unit",
    "location",
    "category",
    "supplier",
    "unit_cost",
    "min_order_qty",
    "lead_time_days",
    "equipment_id",
    "notes",
)


def read_parts_csv(path: str | Path) -> pd.DataFrame:
    """Read a spare-part catalogue CSV and normalize its columns.

    Headers are lower-cased with spaces turned into underscores, so
    ``Minimum Quantity`` and ``minimum_quantity`` both work.
    """
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower().replace(" ", "_") for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValidationError(
            f"CSV is missing required columns: {', '.join(missing)}", field=missing[0]
        )
    df = df.dropna(subset=["name"])
    df["name"] = df["name"].astype(str).str.strip()
    return df


def _row_payload(row: pd.Series) -> dict:
    payload = {}
    for column in REQUIRED_COLUMNS + OPTIONAL_COLUMNS:
        if column not in row.index or pd.isna(row[column]):
            continue
        value = row[column]
        if column in INT_COLUMNS:
            value = int(value)
        elif column == "unit_cost":
            value = Decimal(str(value))
        else:
            value = str(value)
        payload[column] = value
    return payload


def load_parts_csv(session: Session, path: str | Path) -> tuple[int, int]:
    """Import spare parts from CSV, matching existing parts by name.

    Returns:
        Tuple of (created, updated) counts.
    """
    df = read_parts_csv(path)
    ledger = SparePartLedger(session)
    existing = {
        p.name: p for p in session.scalars(select(SparePart)).all()
    }

    created = updated = 0
    for _, row in df.iterrows():
        payload = _row_payload(row)
        part = existing.get(payload["name"])
        if part is None:
            part = ledger.create_part(SparePartCreate(**payload))
            existing[part.name] = part
            created += 1
        else:
            ledger.update_part(part.id, SparePartUpdate(**payload))
            updated += 1
    return created, updated
