import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from storeledger.core.errors import LedgerError
from storeledger.deps import get_db, get_store_id, http_error
from storeledger.schemas.purchase import PurchaseCreate, PurchaseOut, PurchasePaymentIn, PurchaseUpdate
from storeledger.services import purchase_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=PurchaseOut,
    status_code=status.HTTP_201_CREATED,
    summary="Receive stock from a vendor",
)
def create_purchase(
    payload: PurchaseCreate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> PurchaseOut:
    try:
        return purchase_service.record_purchase(db, store_id, payload)
    except LedgerError as exc:
        raise http_error(exc)
    except Exception as exc:
        logger.exception("Failed to record purchase: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")


@router.get("", response_model=List[PurchaseOut], summary="List purchases")
def list_purchases(
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> List[PurchaseOut]:
    return purchase_service.list_purchases(db, store_id, start=start, end=end)


@router.get("/{purchase_id}", response_model=PurchaseOut, summary="Get a purchase")
def get_purchase(
    purchase_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> PurchaseOut:
    try:
        return purchase_service.get_purchase(db, store_id, purchase_id)
    except LedgerError as exc:
        raise http_error(exc)


@router.put("/{purchase_id}", response_model=PurchaseOut, summary="Edit purchase metadata")
def update_purchase(
    purchase_id: int,
    payload: PurchaseUpdate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> PurchaseOut:
    try:
        return purchase_service.update_purchase(db, store_id, purchase_id, payload)
    except LedgerError as exc:
        raise http_error(exc)


@router.delete("/{purchase_id}", summary="Delete a purchase and take its stock back out")
def delete_purchase(
    purchase_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
):
    try:
        return purchase_service.delete_purchase(db, store_id, purchase_id)
    except LedgerError as exc:
        raise http_error(exc)
    except Exception as exc:
        logger.exception("Failed to delete purchase %s: %s", purchase_id, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")


@router.post("/{purchase_id}/payments", response_model=PurchaseOut, summary="Pay down a purchase")
def pay_purchase(
    purchase_id: int,
    payload: PurchasePaymentIn,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> PurchaseOut:
    try:
        return purchase_service.add_purchase_payment(db, store_id, purchase_id, payload.amount)
    except LedgerError as exc:
        raise http_error(exc)
