from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storeledger.core.errors import LedgerError
from storeledger.deps import get_db, get_store_id, http_error
from storeledger.schemas.party import BalanceAdjustment, CustomerCreate, CustomerOut, CustomerUpdate
from storeledger.services import ledger_service

router = APIRouter()


@router.post(
    "",
    response_model=CustomerOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer",
)
def create_customer(
    payload: CustomerCreate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> CustomerOut:
    try:
        return ledger_service.create_customer(db, store_id, payload)
    except LedgerError as exc:
        raise http_error(exc)


@router.get("", response_model=List[CustomerOut], summary="List customers")
def list_customers(
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> List[CustomerOut]:
    return ledger_service.list_customers(db, store_id)


@router.get("/phone/{phone}", response_model=CustomerOut, summary="Find a customer by phone")
def customer_by_phone(
    phone: str,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> CustomerOut:
    try:
        return ledger_service.get_customer_by_phone(db, store_id, phone)
    except LedgerError as exc:
        raise http_error(exc)


@router.get("/{customer_id}", response_model=CustomerOut, summary="Get a customer with ledger entries")
def get_customer(
    customer_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> CustomerOut:
    try:
        return ledger_service.get_customer(db, store_id, customer_id)
    except LedgerError as exc:
        raise http_error(exc)


@router.put("/{customer_id}", response_model=CustomerOut, summary="Update a customer")
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> CustomerOut:
    try:
        return ledger_service.update_customer(db, store_id, customer_id, payload)
    except LedgerError as exc:
        raise http_error(exc)


@router.put("/{customer_id}/balance", response_model=CustomerOut, summary="Append a ledger entry")
def adjust_customer_balance(
    customer_id: int,
    payload: BalanceAdjustment,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> CustomerOut:
    try:
        customer = ledger_service.get_customer(db, store_id, customer_id)
        return ledger_service.adjust_balance(db, customer, payload)
    except LedgerError as exc:
        raise http_error(exc)


@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a settled customer",
)
def delete_customer(
    customer_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
):
    try:
        ledger_service.delete_customer(db, store_id, customer_id)
    except LedgerError as exc:
        raise http_error(exc)
    return None
