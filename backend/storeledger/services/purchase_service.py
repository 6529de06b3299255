import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from storeledger.core.errors import NotFoundError, ValidationError
from storeledger.models.catalog import Inventory
from storeledger.models.party import RetailerTransaction
from storeledger.models.purchase import Purchase, PurchaseItem, PurchasePayment
from storeledger.schemas.purchase import PurchaseCreate, PurchaseUpdate
from storeledger.services import stock_service
from storeledger.utils.text_cleaner import normalize_whitespace

logger = logging.getLogger(__name__)


def get_purchase(db: Session, store_id: int, purchase_id: int) -> Purchase:
    purchase = (
        db.query(Purchase)
        .filter(Purchase.purchase_id == purchase_id, Purchase.store_id == store_id)
        .first()
    )
    if not purchase:
        raise NotFoundError("Purchase not found")
    return purchase


def list_purchases(
    db: Session,
    store_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Purchase]:
    query = db.query(Purchase).filter(Purchase.store_id == store_id)
    if start and end:
        query = query.filter(Purchase.purchase_date >= start, Purchase.purchase_date <= end)
    return query.order_by(Purchase.purchase_id.desc()).all()


def record_purchase(db: Session, store_id: int, payload: PurchaseCreate) -> Purchase:
    """
    Receive vendor stock:
    - product cost price becomes the purchase cost price (last write wins)
    - quantity lands in the item's warehouse, or the default warehouse
    - product total_stock is reconciled after each item
    """
    if not payload.items:
        raise ValidationError("No items in purchase")

    products = stock_service.lock_products(db, [item.product_id for item in payload.items])
    for item in payload.items:
        product = products.get(item.product_id)
        if not product or product.store_id != store_id:
            raise NotFoundError(f"Product {item.product_id} not found")

    paid = Decimal(payload.paid_amount or 0)
    total = Decimal(payload.total_amount)
    balance = payload.balance if payload.balance is not None else total - paid

    purchase = Purchase(
        store_id=store_id,
        vendor_name=normalize_whitespace(payload.vendor_name),
        total_amount=total,
        paid_amount=paid,
        balance=balance,
        created_by=payload.created_by,
    )
    if payload.purchase_date:
        purchase.purchase_date = payload.purchase_date
    db.add(purchase)

    fallback_warehouse_id: Optional[int] = None
    for item in payload.items:
        warehouse_id = item.warehouse_id
        if warehouse_id is None:
            if fallback_warehouse_id is None:
                fallback_warehouse_id = stock_service.default_warehouse(db).warehouse_id
            warehouse_id = fallback_warehouse_id

        cost_price = Decimal(item.cost_price)
        products[item.product_id].cost_price = cost_price
        stock_service.apply_inventory_delta(db, item.product_id, warehouse_id, item.quantity)

        purchase.items.append(
            PurchaseItem(
                product_id=item.product_id,
                warehouse_id=warehouse_id,
                quantity=item.quantity,
                cost_price=cost_price,
                total=item.total if item.total is not None else cost_price * item.quantity,
            )
        )

    db.commit()
    db.refresh(purchase)
    logger.info(
        "Purchase recorded",
        extra={"purchase_id": purchase.purchase_id, "vendor": purchase.vendor_name, "items": len(purchase.items)},
    )
    return purchase


def add_purchase_payment(db: Session, store_id: int, purchase_id: int, amount: Decimal) -> Purchase:
    """Pay down a purchase. The balance is not floored at zero."""
    purchase = get_purchase(db, store_id, purchase_id)
    amount = Decimal(amount)
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")

    purchase.paid_amount = Decimal(purchase.paid_amount or 0) + amount
    purchase.balance = Decimal(purchase.balance or 0) - amount
    purchase.payments.append(PurchasePayment(amount=amount))

    db.commit()
    db.refresh(purchase)
    if purchase.balance < 0:
        logger.warning("Purchase %s overpaid: balance %s", purchase.purchase_id, purchase.balance)
    return purchase


def update_purchase(db: Session, store_id: int, purchase_id: int, payload: PurchaseUpdate) -> Purchase:
    """
    Edit purchase metadata. Line items and the stock they delivered are fixed;
    when totals change without an explicit balance, balance is total minus paid.
    """
    purchase = get_purchase(db, store_id, purchase_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("vendor_name"):
        purchase.vendor_name = normalize_whitespace(data["vendor_name"])
    for field in ("total_amount", "paid_amount", "purchase_date", "created_by"):
        if data.get(field) is not None:
            setattr(purchase, field, data[field])

    if data.get("balance") is not None:
        purchase.balance = data["balance"]
    elif data.get("total_amount") is not None or data.get("paid_amount") is not None:
        purchase.balance = Decimal(purchase.total_amount) - Decimal(purchase.paid_amount or 0)

    db.commit()
    db.refresh(purchase)
    return purchase


def delete_purchase(db: Session, store_id: int, purchase_id: int) -> Dict[str, Any]:
    """
    Remove a purchase and take its received quantities back out of the
    warehouses they landed in. Refused once any of that stock has been sold
    on, or while a retailer ledger entry points at the purchase.
    """
    purchase = get_purchase(db, store_id, purchase_id)
    if db.query(RetailerTransaction.entry_id).filter(RetailerTransaction.purchase_id == purchase_id).first():
        raise ValidationError("Purchase is referenced by retailer ledger entries")

    received: Dict[Tuple[int, int], int] = {}
    for item in purchase.items:
        key = (item.product_id, item.warehouse_id)
        received[key] = received.get(key, 0) + item.quantity

    stock_service.lock_products(db, [product_id for product_id, _ in received])
    for (product_id, warehouse_id), quantity in received.items():
        row = (
            db.query(Inventory)
            .filter(Inventory.product_id == product_id, Inventory.warehouse_id == warehouse_id)
            .first()
        )
        on_hand = row.quantity if row else 0
        if on_hand < quantity:
            raise ValidationError(
                f"Purchased stock of product {product_id} has already left warehouse {warehouse_id}"
            )

    for (product_id, warehouse_id), quantity in received.items():
        stock_service.apply_inventory_delta(db, product_id, warehouse_id, -quantity)

    db.delete(purchase)
    db.commit()
    logger.info("Purchase removed", extra={"purchase_id": purchase_id, "stock_rows": len(received)})
    return {"message": "Purchase removed and stock reverted", "purchase_id": purchase_id}
