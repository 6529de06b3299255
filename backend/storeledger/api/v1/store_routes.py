from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storeledger.core.errors import LedgerError
from storeledger.deps import get_db, http_error
from storeledger.schemas.store import StoreCreate, StoreOut, WarehouseCreate, WarehouseOut, WarehouseUpdate
from storeledger.services import stock_service, store_service

router = APIRouter()


@router.post(
    "/stores",
    response_model=StoreOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a store",
)
def create_store(payload: StoreCreate, db: Session = Depends(get_db)) -> StoreOut:
    return store_service.create_store(db, payload)


@router.get("/stores", response_model=List[StoreOut], summary="List stores")
def list_stores(db: Session = Depends(get_db)) -> List[StoreOut]:
    return store_service.list_stores(db)


@router.get("/stores/{store_id}", response_model=StoreOut, summary="Get a store")
def get_store(store_id: int, db: Session = Depends(get_db)) -> StoreOut:
    try:
        return store_service.get_store(db, store_id)
    except LedgerError as exc:
        raise http_error(exc)


@router.post(
    "/warehouses",
    response_model=WarehouseOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a warehouse",
)
def create_warehouse(payload: WarehouseCreate, db: Session = Depends(get_db)) -> WarehouseOut:
    try:
        return store_service.create_warehouse(db, payload)
    except LedgerError as exc:
        raise http_error(exc)


@router.get("/warehouses", response_model=List[WarehouseOut], summary="List warehouses")
def list_warehouses(db: Session = Depends(get_db)) -> List[WarehouseOut]:
    return store_service.list_warehouses(db)


@router.get("/warehouses/{warehouse_id}", response_model=WarehouseOut, summary="Get a warehouse")
def get_warehouse(warehouse_id: int, db: Session = Depends(get_db)) -> WarehouseOut:
    try:
        return stock_service.get_warehouse(db, warehouse_id)
    except LedgerError as exc:
        raise http_error(exc)


@router.put("/warehouses/{warehouse_id}", response_model=WarehouseOut, summary="Update a warehouse")
def update_warehouse(
    warehouse_id: int,
    payload: WarehouseUpdate,
    db: Session = Depends(get_db),
) -> WarehouseOut:
    try:
        return store_service.update_warehouse(db, warehouse_id, payload)
    except LedgerError as exc:
        raise http_error(exc)


@router.delete(
    "/warehouses/{warehouse_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an empty warehouse",
)
def delete_warehouse(warehouse_id: int, db: Session = Depends(get_db)):
    try:
        store_service.delete_warehouse(db, warehouse_id)
    except LedgerError as exc:
        raise http_error(exc)
    return None
