from typing import List

from sqlalchemy.orm import Session

from storeledger.core.errors import NotFoundError, ValidationError
from storeledger.models.catalog import Inventory
from storeledger.models.purchase import PurchaseItem
from storeledger.models.sale import StockAllocation
from storeledger.models.store import Store, Warehouse
from storeledger.schemas.store import StoreCreate, WarehouseCreate, WarehouseUpdate
from storeledger.services import stock_service
from storeledger.utils.text_cleaner import normalize_whitespace


def create_store(db: Session, payload: StoreCreate) -> Store:
    store = Store(
        name=normalize_whitespace(payload.name),
        location=payload.location,
        contact_number=payload.contact_number,
    )
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


def list_stores(db: Session) -> List[Store]:
    return db.query(Store).order_by(Store.store_id).all()


def get_store(db: Session, store_id: int) -> Store:
    store = db.get(Store, store_id)
    if not store:
        raise NotFoundError("Store not found")
    return store


def create_warehouse(db: Session, payload: WarehouseCreate) -> Warehouse:
    if payload.store_id is not None:
        get_store(db, payload.store_id)
    warehouse = Warehouse(
        name=normalize_whitespace(payload.name),
        location=payload.location,
        contact_person=payload.contact_person,
        phone=payload.phone,
        printer_enabled=payload.printer_enabled,
        printer_endpoint=payload.printer_endpoint,
        store_id=payload.store_id,
    )
    db.add(warehouse)
    db.commit()
    db.refresh(warehouse)
    return warehouse


def list_warehouses(db: Session) -> List[Warehouse]:
    # Shared across stores
    return db.query(Warehouse).order_by(Warehouse.warehouse_id).all()


def update_warehouse(db: Session, warehouse_id: int, payload: WarehouseUpdate) -> Warehouse:
    warehouse = stock_service.get_warehouse(db, warehouse_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("name"):
        warehouse.name = normalize_whitespace(data["name"])
    for field in ("location", "contact_person", "phone", "printer_enabled", "printer_endpoint"):
        if field in data and data[field] is not None:
            setattr(warehouse, field, data[field])
    db.commit()
    db.refresh(warehouse)
    return warehouse


def delete_warehouse(db: Session, warehouse_id: int) -> None:
    """Only empty warehouses can go; zero-quantity rows are dropped with them."""
    warehouse = stock_service.get_warehouse(db, warehouse_id)
    rows = db.query(Inventory).filter(Inventory.warehouse_id == warehouse_id).all()
    if any(row.quantity != 0 for row in rows):
        raise ValidationError("Warehouse still holds stock")
    if (
        db.query(StockAllocation.allocation_id).filter(StockAllocation.warehouse_id == warehouse_id).first()
        or db.query(PurchaseItem.purchase_item_id).filter(PurchaseItem.warehouse_id == warehouse_id).first()
    ):
        raise ValidationError("Warehouse is referenced by sales or purchases")

    product_ids = [row.product_id for row in rows]
    for row in rows:
        db.delete(row)
    db.flush()
    for product_id in product_ids:
        stock_service.reconcile_stock(db, product_id)
    db.delete(warehouse)
    db.commit()
