import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from storeledger.core.errors import NotFoundError, ValidationError
from storeledger.models.catalog import Inventory, Product
from storeledger.models.store import Warehouse

logger = logging.getLogger(__name__)

# (warehouse_id, quantity) pairs describing where stock was taken from
Allocation = Tuple[int, int]


def lock_products(db: Session, product_ids: Iterable[int]) -> Dict[int, Product]:
    """
    Load products with a row lock, in ascending id order so concurrent
    writers always queue in the same sequence.

    Stock validation and every inventory write for these products happen after
    this call and inside the same transaction. SQLite ignores FOR UPDATE.
    """
    ids = sorted(set(product_ids))
    if not ids:
        return {}
    rows = (
        db.query(Product)
        .filter(Product.product_id.in_(ids))
        .order_by(Product.product_id)
        .with_for_update()
        .populate_existing()
        .all()
    )
    return {row.product_id: row for row in rows}


def reconcile_stock(db: Session, product_id: int) -> int:
    """
    Recompute Product.total_stock as the sum of its warehouse quantities.

    Negative rows count. A product without inventory rows ends at 0.
    Runs inside the caller's transaction; the caller commits.
    """
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")

    db.flush()
    total = (
        db.query(func.coalesce(func.sum(Inventory.quantity), 0))
        .filter(Inventory.product_id == product_id)
        .scalar()
    )
    product.total_stock = int(total or 0)
    db.flush()
    return product.total_stock


def default_warehouse(db: Session) -> Warehouse:
    warehouse = db.query(Warehouse).order_by(Warehouse.warehouse_id).first()
    if not warehouse:
        raise ValidationError("No warehouse configured to hold stock")
    return warehouse


def get_warehouse(db: Session, warehouse_id: int) -> Warehouse:
    warehouse = db.get(Warehouse, warehouse_id)
    if not warehouse:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")
    return warehouse


def _inventory_row(db: Session, product_id: int, warehouse_id: int) -> Inventory:
    row = (
        db.query(Inventory)
        .filter(Inventory.product_id == product_id, Inventory.warehouse_id == warehouse_id)
        .with_for_update()
        .first()
    )
    if row is None:
        row = Inventory(product_id=product_id, warehouse_id=warehouse_id, quantity=0)
        db.add(row)
        db.flush()
    return row


def apply_inventory_delta(db: Session, product_id: int, warehouse_id: int, delta: int) -> Inventory:
    """Add a signed delta to one (product, warehouse) row, creating it if needed, then reconcile."""
    get_warehouse(db, warehouse_id)
    row = _inventory_row(db, product_id, warehouse_id)
    row.quantity = (row.quantity or 0) + int(delta)
    reconcile_stock(db, product_id)
    return row


def draw_stock(db: Session, product_id: int, quantity: int) -> List[Allocation]:
    """
    Take `quantity` units of a product out of warehouse inventory.

    Rows holding positive stock are drained first, largest first. Whatever is
    still owed lands on the first of those rows, or on any existing row, or on
    a new row in the default warehouse, leaving it negative.
    """
    rows = (
        db.query(Inventory)
        .filter(Inventory.product_id == product_id)
        .order_by(Inventory.inventory_id)
        .with_for_update()
        .all()
    )
    taken: Dict[int, int] = {}
    remaining = int(quantity)

    positive = sorted(
        (row for row in rows if row.quantity > 0),
        key=lambda row: (-row.quantity, row.inventory_id),
    )
    for row in positive:
        if remaining <= 0:
            break
        step = min(row.quantity, remaining)
        row.quantity -= step
        taken[row.warehouse_id] = taken.get(row.warehouse_id, 0) + step
        remaining -= step

    if remaining > 0:
        if positive:
            target = positive[0]
        elif rows:
            target = rows[0]
        else:
            target = _inventory_row(db, product_id, default_warehouse(db).warehouse_id)
        target.quantity -= remaining
        taken[target.warehouse_id] = taken.get(target.warehouse_id, 0) + remaining
        logger.warning(
            "Product %s oversold by %s unit(s); warehouse %s now at %s",
            product_id,
            remaining,
            target.warehouse_id,
            target.quantity,
        )

    reconcile_stock(db, product_id)
    return list(taken.items())


def restore_stock(
    db: Session,
    product_id: int,
    quantity: int,
    allocations: Optional[List[Allocation]] = None,
) -> int:
    """
    Put sold units back. With allocations, each warehouse gets back exactly
    what was taken from it; otherwise the product's first inventory row (or
    the default warehouse) receives the full quantity.
    """
    if allocations:
        for warehouse_id, qty in allocations:
            row = _inventory_row(db, product_id, warehouse_id)
            row.quantity += int(qty)
    else:
        row = (
            db.query(Inventory)
            .filter(Inventory.product_id == product_id)
            .order_by(Inventory.inventory_id)
            .with_for_update()
            .first()
        )
        if row is None:
            row = _inventory_row(db, product_id, default_warehouse(db).warehouse_id)
        row.quantity += int(quantity)
    return reconcile_stock(db, product_id)


def list_inventory(db: Session, product_id: int) -> List[Inventory]:
    return (
        db.query(Inventory)
        .filter(Inventory.product_id == product_id)
        .order_by(Inventory.warehouse_id)
        .all()
    )


def adjust_inventory(db: Session, store_id: int, product_id: int, warehouse_id: int, delta: int) -> Inventory:
    """Manual stock correction for one warehouse. Negative results are allowed."""
    product = lock_products(db, [product_id]).get(product_id)
    if not product or product.store_id != store_id:
        raise NotFoundError(f"Product {product_id} not found")
    row = apply_inventory_delta(db, product_id, warehouse_id, delta)
    db.commit()
    db.refresh(row)
    logger.info(
        "Inventory adjusted",
        extra={"product_id": product_id, "warehouse_id": warehouse_id, "delta": delta, "quantity": row.quantity},
    )
    return row


def reconcile_product(db: Session, store_id: int, product_id: int) -> int:
    product = db.get(Product, product_id)
    if not product or product.store_id != store_id:
        raise NotFoundError(f"Product {product_id} not found")
    total = reconcile_stock(db, product_id)
    db.commit()
    return total
