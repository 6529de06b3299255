from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storeledger.core.errors import LedgerError
from storeledger.deps import get_db, get_store_id, http_error
from storeledger.models.party import Retailer
from storeledger.schemas.party import (
    BalanceAdjustment,
    RetailerCreate,
    RetailerOut,
    RetailerPaymentIn,
    RetailerSummaryOut,
    RetailerUpdate,
)
from storeledger.services import ledger_service

router = APIRouter()


def _summary(retailer: Retailer) -> RetailerSummaryOut:
    totals = ledger_service.ledger_totals(retailer.transactions)
    return RetailerSummaryOut(
        **RetailerOut.model_validate(retailer).model_dump(),
        total_sales=totals["total_sales"],
        total_purchases=totals["total_purchases"],
        total_debit=totals["total_debit"],
        total_paid=totals["total_paid"],
    )


@router.post(
    "",
    response_model=RetailerSummaryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a retailer",
)
def create_retailer(
    payload: RetailerCreate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> RetailerSummaryOut:
    try:
        return _summary(ledger_service.create_retailer(db, store_id, payload))
    except LedgerError as exc:
        raise http_error(exc)


@router.get("", response_model=List[RetailerSummaryOut], summary="List retailers with ledger totals")
def list_retailers(
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> List[RetailerSummaryOut]:
    return [_summary(retailer) for retailer in ledger_service.list_retailers(db, store_id)]


@router.get("/{retailer_id}", response_model=RetailerSummaryOut, summary="Get a retailer with ledger totals")
def get_retailer(
    retailer_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> RetailerSummaryOut:
    try:
        return _summary(ledger_service.get_retailer(db, store_id, retailer_id))
    except LedgerError as exc:
        raise http_error(exc)


@router.put("/{retailer_id}", response_model=RetailerSummaryOut, summary="Update a retailer")
def update_retailer(
    retailer_id: int,
    payload: RetailerUpdate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> RetailerSummaryOut:
    try:
        return _summary(ledger_service.update_retailer(db, store_id, retailer_id, payload))
    except LedgerError as exc:
        raise http_error(exc)


@router.post("/{retailer_id}/balance", response_model=RetailerSummaryOut, summary="Append a ledger entry")
def adjust_retailer_balance(
    retailer_id: int,
    payload: BalanceAdjustment,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> RetailerSummaryOut:
    try:
        retailer = ledger_service.get_retailer(db, store_id, retailer_id)
        return _summary(ledger_service.adjust_balance(db, retailer, payload))
    except LedgerError as exc:
        raise http_error(exc)


@router.post("/{retailer_id}/payment", response_model=RetailerSummaryOut, summary="Record a retailer payment")
def retailer_payment(
    retailer_id: int,
    payload: RetailerPaymentIn,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> RetailerSummaryOut:
    try:
        retailer = ledger_service.add_retailer_payment(
            db,
            store_id,
            retailer_id,
            payload.amount,
            description=payload.description,
            sale_id=payload.sale_id,
        )
    except LedgerError as exc:
        raise http_error(exc)
    return _summary(retailer)


@router.delete(
    "/{retailer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a retailer",
)
def delete_retailer(
    retailer_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
):
    try:
        ledger_service.delete_retailer(db, store_id, retailer_id)
    except LedgerError as exc:
        raise http_error(exc)
    return None
