import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from storeledger.core.errors import LedgerError
from storeledger.deps import get_db, get_store_id, http_error
from storeledger.schemas.sale import SaleCreate, SaleOut, SaleType, SaleUpdate
from storeledger.services import sale_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=SaleOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record an invoice, quotation or estimate",
)
def create_sale(
    payload: SaleCreate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> SaleOut:
    try:
        return sale_service.record_sale(db, store_id, payload)
    except LedgerError as exc:
        raise http_error(exc)
    except Exception as exc:
        logger.exception("Failed to record sale: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")


@router.get("", response_model=List[SaleOut], summary="List sales, optionally by date range and type")
def list_sales(
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    sale_type: Optional[SaleType] = Query(default=None, alias="type"),
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> List[SaleOut]:
    return sale_service.list_sales(db, store_id, start=start, end=end, sale_type=sale_type)


@router.get("/{sale_id}", response_model=SaleOut, summary="Get a sale with its items")
def get_sale(
    sale_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> SaleOut:
    try:
        return sale_service.get_sale(db, store_id, sale_id)
    except LedgerError as exc:
        raise http_error(exc)


@router.put("/{sale_id}", response_model=SaleOut, summary="Edit sale metadata")
def update_sale(
    sale_id: int,
    payload: SaleUpdate,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> SaleOut:
    try:
        return sale_service.update_sale(db, store_id, sale_id, payload)
    except LedgerError as exc:
        raise http_error(exc)


@router.delete("/{sale_id}", summary="Void a sale and put its stock back")
def void_sale(
    sale_id: int,
    reverse_ledger: Optional[bool] = Query(default=None),
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
):
    try:
        return sale_service.void_sale(db, store_id, sale_id, reverse_ledger=reverse_ledger)
    except LedgerError as exc:
        raise http_error(exc)
    except Exception as exc:
        logger.exception("Failed to void sale %s: %s", sale_id, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")


@router.post("/{sale_id}/convert", response_model=SaleOut, summary="Convert a quotation or estimate to an invoice")
def convert_sale(
    sale_id: int,
    store_id: int = Depends(get_store_id),
    db: Session = Depends(get_db),
) -> SaleOut:
    try:
        return sale_service.convert_to_invoice(db, store_id, sale_id)
    except LedgerError as exc:
        raise http_error(exc)
    except Exception as exc:
        logger.exception("Failed to convert sale %s: %s", sale_id, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")
