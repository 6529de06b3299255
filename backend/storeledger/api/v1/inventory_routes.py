from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storeledger.core.errors import LedgerError
from storeledger.deps import get_db, get_store_id, http_error
from storeledger.schemas.catalog import InventoryAdjust, InventoryOut, StockReconcileOut
from storeledger.services import catalog_service, stock_service

router = APIRouter()


@router.get(
    "/product/{product_id}",
    response_model=List[InventoryOut],
    summary="Per-warehouse quantities for a product",
)
def product_inventory(
    product_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> List[InventoryOut]:
    try:
        catalog_service.get_product(db, store_id, product_id)
    except LedgerError as exc:
        raise http_error(exc)
    return stock_service.list_inventory(db, product_id)


@router.post("", response_model=InventoryOut, summary="Apply a signed quantity change to one warehouse")
def adjust_inventory(
    payload: InventoryAdjust,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> InventoryOut:
    try:
        return stock_service.adjust_inventory(
            db, store_id, payload.product_id, payload.warehouse_id, payload.quantity
        )
    except LedgerError as exc:
        raise http_error(exc)


@router.post(
    "/reconcile/{product_id}",
    response_model=StockReconcileOut,
    summary="Recompute a product's total stock from its warehouses",
)
def reconcile(
    product_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> StockReconcileOut:
    try:
        total = stock_service.reconcile_product(db, store_id, product_id)
    except LedgerError as exc:
        raise http_error(exc)
    return StockReconcileOut(product_id=product_id, total_stock=total)
