import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storeledger.core.config import settings
from storeledger.core.errors import (
    ConversionError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from storeledger.models.catalog import Product
from storeledger.models.party import Customer, Retailer
from storeledger.models.sale import (
    SALE_TYPE_ESTIMATE,
    SALE_TYPE_INVOICE,
    SALE_TYPE_QUOTATION,
    Sale,
    SaleItem,
    StockAllocation,
)
from storeledger.schemas.sale import SaleCreate, SaleUpdate
from storeledger.services import ledger_service, receipt_service, stock_service

logger = logging.getLogger(__name__)

INVOICE_PREFIXES = {
    SALE_TYPE_INVOICE: "INV",
    SALE_TYPE_QUOTATION: "QUT",
    SALE_TYPE_ESTIMATE: "EST",
}

# Fresh invoice ids tried before a clash surfaces as an error
INVOICE_ID_ATTEMPTS = 3


def next_invoice_id(db: Session, sale_type: str) -> str:
    """<prefix>-<epoch millis>, bumped past any id already taken."""
    prefix = INVOICE_PREFIXES[sale_type]
    stamp = int(time.time() * 1000)
    candidate = f"{prefix}-{stamp}"
    while db.query(Sale.sale_id).filter(Sale.invoice_id == candidate).first():
        stamp += 1
        candidate = f"{prefix}-{stamp}"
    return candidate


def get_sale(db: Session, store_id: int, sale_id: int) -> Sale:
    sale = db.query(Sale).filter(Sale.sale_id == sale_id, Sale.store_id == store_id).first()
    if not sale:
        raise NotFoundError("Sale not found")
    return sale


def list_sales(
    db: Session,
    store_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    sale_type: Optional[str] = None,
) -> List[Sale]:
    query = db.query(Sale).filter(Sale.store_id == store_id)
    if start and end:
        query = query.filter(Sale.sale_date >= start, Sale.sale_date <= end)
    if sale_type:
        query = query.filter(Sale.sale_type == sale_type)
    return query.order_by(Sale.sale_id.desc()).all()


def _store_products(db: Session, store_id: int, product_ids: List[int]) -> Dict[int, Product]:
    products = stock_service.lock_products(db, product_ids)
    for product_id in product_ids:
        product = products.get(product_id)
        if not product or product.store_id != store_id:
            raise NotFoundError(f"Product {product_id} not found")
    return products


def _check_stock(items, products: Dict[int, Product]) -> None:
    requested: Dict[int, int] = {}
    for item in items:
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity
    for product_id, quantity in requested.items():
        product = products[product_id]
        available = product.total_stock or 0
        if quantity > available:
            raise InsufficientStockError(product.name, available, quantity)


def _commit_stock(db: Session, sale: Sale) -> None:
    """Decrement warehouse inventory for every line and remember where it came from."""
    for item in sale.items:
        taken = stock_service.draw_stock(db, item.product_id, item.quantity)
        item.allocations = [
            StockAllocation(warehouse_id=warehouse_id, quantity=quantity)
            for warehouse_id, quantity in taken
        ]
    db.flush()


def _retry_on_invoice_clash(db: Session, operation: Callable[..., Sale], *args) -> Sale:
    """
    Run a sale-writing operation, starting over when the invoice id it picked
    was committed by another request first.
    """
    for attempt in range(1, INVOICE_ID_ATTEMPTS + 1):
        try:
            return operation(db, *args)
        except IntegrityError as exc:
            db.rollback()
            if "invoice_id" not in str(exc.orig) or attempt == INVOICE_ID_ATTEMPTS:
                raise
            logger.warning("Invoice id taken concurrently, retrying (attempt %s)", attempt)


def record_sale(db: Session, store_id: int, payload: SaleCreate) -> Sale:
    """
    Record an invoice, quotation or estimate.

    Only invoices touch stock and party ledgers. Product rows are locked
    before the stock check so validation, decrement and ledger postings land
    in one transaction.
    """
    return _retry_on_invoice_clash(db, _record_sale, store_id, payload)


def _record_sale(db: Session, store_id: int, payload: SaleCreate) -> Sale:
    if not payload.items:
        raise ValidationError("No items in sale")
    if payload.customer_id and payload.retailer_id:
        raise ValidationError("A sale can be linked to a customer or a retailer, not both")

    is_invoice = payload.sale_type == SALE_TYPE_INVOICE
    products = _store_products(db, store_id, [item.product_id for item in payload.items])

    customer: Optional[Customer] = None
    retailer: Optional[Retailer] = None
    if payload.customer_id:
        customer = ledger_service.get_customer(db, store_id, payload.customer_id)
    if payload.retailer_id:
        retailer = ledger_service.get_retailer(db, store_id, payload.retailer_id)

    if is_invoice:
        _check_stock(payload.items, products)

    subtotal = payload.subtotal
    if subtotal is None:
        subtotal = sum((Decimal(item.total) for item in payload.items), Decimal("0"))

    sale = Sale(
        store_id=store_id,
        salesman=payload.salesman,
        invoice_id=next_invoice_id(db, payload.sale_type),
        sale_type=payload.sale_type,
        subtotal=subtotal,
        invoice_discount=payload.invoice_discount,
        total_amount=payload.total_amount,
        paid_amount=payload.paid_amount,
        payment_status=ledger_service.derive_payment_status(payload.paid_amount, payload.total_amount),
        customer_id=payload.customer_id,
        retailer_id=payload.retailer_id,
        customer_name=payload.customer_name or (customer.name if customer else None),
        customer_phone=payload.customer_phone or (customer.phone if customer else None),
        customer_address=payload.customer_address or (customer.address if customer else None),
        reference_no=payload.reference_no,
        remarks=payload.remarks,
        due_date=payload.due_date,
    )
    if payload.sale_date:
        sale.sale_date = payload.sale_date

    for item in payload.items:
        sale.items.append(
            SaleItem(
                product_id=item.product_id,
                quantity=item.quantity,
                cost_price=products[item.product_id].cost_price,
                price=item.price,
                discount=item.discount,
                total=item.total,
            )
        )
    db.add(sale)
    db.flush()

    if is_invoice:
        _commit_stock(db, sale)
        if customer is not None:
            ledger_service.post_sale(db, customer, sale)
        if retailer is not None:
            ledger_service.post_sale(db, retailer, sale)

    db.commit()
    db.refresh(sale)
    logger.info(
        "Sale recorded",
        extra={
            "invoice_id": sale.invoice_id,
            "sale_type": sale.sale_type,
            "store_id": store_id,
            "total": str(sale.total_amount),
        },
    )

    if is_invoice:
        receipt_service.dispatch_receipts(db, sale)
    return sale


def void_sale(
    db: Session,
    store_id: int,
    sale_id: int,
    reverse_ledger: Optional[bool] = None,
) -> Dict[str, Any]:
    """
    Put an invoice's stock back where it was taken from and delete the sale.

    Ledger entries stay untouched unless reverse_ledger (or the
    VOID_REVERSES_LEDGER setting) asks for compensating adjustments.
    """
    sale = get_sale(db, store_id, sale_id)
    if reverse_ledger is None:
        reverse_ledger = settings.VOID_REVERSES_LEDGER

    committed_stock = sale.sale_type == SALE_TYPE_INVOICE
    if committed_stock:
        stock_service.lock_products(db, [item.product_id for item in sale.items])
        for item in sale.items:
            taken = [(a.warehouse_id, a.quantity) for a in item.allocations]
            stock_service.restore_stock(db, item.product_id, item.quantity, taken)

    ledger_reversed = False
    if reverse_ledger:
        if sale.customer_id:
            customer = db.get(Customer, sale.customer_id)
            if customer is not None:
                ledger_service.reverse_sale(db, customer, sale)
                ledger_reversed = True
        if sale.retailer_id:
            retailer = db.get(Retailer, sale.retailer_id)
            if retailer is not None:
                ledger_service.reverse_sale(db, retailer, sale)
                ledger_reversed = True

    invoice_id = sale.invoice_id
    db.delete(sale)
    db.commit()
    logger.info(
        "Sale voided",
        extra={"invoice_id": invoice_id, "stock_reverted": committed_stock, "ledger_reversed": ledger_reversed},
    )
    return {
        "message": "Sale removed and stock reverted" if committed_stock else "Sale removed",
        "sale_id": sale_id,
        "invoice_id": invoice_id,
        "stock_reverted": committed_stock,
        "ledger_reversed": ledger_reversed,
    }


def convert_to_invoice(db: Session, store_id: int, sale_id: int) -> Sale:
    """
    Turn a quotation or estimate into an invoice: new INV- id, stock drawn,
    customer ledger posted. Retailer ledgers are not posted on this path.
    """
    return _retry_on_invoice_clash(db, _convert_to_invoice, store_id, sale_id)


def _convert_to_invoice(db: Session, store_id: int, sale_id: int) -> Sale:
    sale = get_sale(db, store_id, sale_id)
    if sale.sale_type == SALE_TYPE_INVOICE:
        raise ConversionError("Sale is already an invoice")

    stock_service.lock_products(db, [item.product_id for item in sale.items])
    previous_id = sale.invoice_id
    sale.sale_type = SALE_TYPE_INVOICE
    sale.invoice_id = next_invoice_id(db, SALE_TYPE_INVOICE)
    _commit_stock(db, sale)

    if sale.customer_id:
        customer = ledger_service.get_customer(db, store_id, sale.customer_id)
        ledger_service.post_sale(db, customer, sale)
    if sale.retailer_id:
        logger.info("Converted sale %s keeps retailer ledger unchanged", sale.invoice_id)

    db.commit()
    db.refresh(sale)
    logger.info("Sale converted", extra={"from": previous_id, "invoice_id": sale.invoice_id})

    receipt_service.dispatch_receipts(db, sale)
    return sale


def update_sale(db: Session, store_id: int, sale_id: int, payload: SaleUpdate) -> Sale:
    """Edit sale metadata. Payment status follows any change to paid_amount."""
    sale = get_sale(db, store_id, sale_id)
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        if field == "paid_amount" and value is None:
            continue
        setattr(sale, field, value)
    if "paid_amount" in data:
        sale.payment_status = ledger_service.derive_payment_status(sale.paid_amount, sale.total_amount)
    db.commit()
    db.refresh(sale)
    return sale
