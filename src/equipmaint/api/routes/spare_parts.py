from fastapi import APIRouter, Depends, Response

from equipmaint.api.dependencies import get_ledger
from equipmaint.inventory.spare_parts import SparePartLedger
from equipmaint.models.schemas import (
    PartUsageRead,
    RestockRequest,
    SparePartCreate,
    SparePartRead,
    SparePartUpdate,
)

router = APIRouter(prefix="/spare-parts", tags=["spare-parts"])


@router.get("/", response_model=list[SparePartRead])
def list_spare_parts(
    category: str | None = None,
    low_stock: bool = False,
    ledger: SparePartLedger = Depends(get_ledger),
):
    return ledger.list_parts(category, low_stock_only=low_stock)


@router.get("/low-stock", response_model=list[SparePartRead])
def low_stock(ledger: SparePartLedger = Depends(get_ledger)):
    """Parts at or below their minimum quantity."""
    return ledger.low_stock_parts()


@router.post("/", response_model=SparePartRead, status_code=201)
def create_spare_part(
    body: SparePartCreate, ledger: SparePartLedger = Depends(get_ledger)
):
    return ledger.create_part(body)


@router.get("/{part_id}", response_model=SparePartRead)
def get_spare_part(part_id: int, ledger: SparePartLedger = Depends(get_ledger)):
    return ledger.get_part(part_id)


@router.put("/{part_id}", response_model=SparePartRead)
def update_spare_part(
    part_id: int, body: SparePartUpdate, ledger: SparePartLedger = Depends(get_ledger)
):
    return ledger.update_part(part_id, body)


@router.post("/{part_id}/restock", response_model=SparePartRead)
def restock_spare_part(
    part_id: int, body: RestockRequest, ledger: SparePartLedger = Depends(get_ledger)
):
    """Add received stock to a part."""
    return ledger.restock(part_id, body.quantity)


@router.get("/{part_id}/usage", response_model=list[PartUsageRead])
def spare_part_usage(part_id: int, ledger: SparePartLedger = Depends(get_ledger)):
    """Consumption history of a part across work orders."""
    return ledger.usage_history(part_id)


@router.delete("/{part_id}", status_code=204)
def delete_spare_part(part_id: int, ledger: SparePartLedger = Depends(get_ledger)):
    ledger.delete_part(part_id)
    return Response(status_code=204)
