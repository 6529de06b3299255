import logging
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Session

from storeledger.core.config import settings
from storeledger.models.sale import Sale
from storeledger.models.store import Warehouse
from storeledger.worker.tasks import print_receipt

logger = logging.getLogger(__name__)

WALK_IN_CUSTOMER = "Walk-in Customer"
CENTS = Decimal("0.01")


def _share_of_line(total: Decimal, part: int, whole: int) -> Decimal:
    if part == whole or not whole:
        return Decimal(total)
    return (Decimal(total) * part / whole).quantize(CENTS)


def build_receipt_payloads(db: Session, sale: Sale) -> List[Tuple[str, Dict[str, Any]]]:
    """
    One receipt per printer-enabled warehouse that supplied stock for the sale,
    listing only the units taken from that warehouse.
    """
    lines_by_warehouse: Dict[int, List[Dict[str, Any]]] = {}
    totals_by_warehouse: Dict[int, Decimal] = {}
    for item in sale.items:
        for allocation in item.allocations:
            line_total = _share_of_line(item.total, allocation.quantity, item.quantity)
            lines_by_warehouse.setdefault(allocation.warehouse_id, []).append(
                {
                    "name": item.product.name if item.product else str(item.product_id),
                    "quantity": allocation.quantity,
                    "price": str(item.price),
                    "total": str(line_total),
                }
            )
            totals_by_warehouse[allocation.warehouse_id] = (
                totals_by_warehouse.get(allocation.warehouse_id, Decimal("0")) + line_total
            )

    if not lines_by_warehouse:
        return []

    warehouses = (
        db.query(Warehouse)
        .filter(Warehouse.warehouse_id.in_(list(lines_by_warehouse.keys())))
        .order_by(Warehouse.warehouse_id)
        .all()
    )

    payloads: List[Tuple[str, Dict[str, Any]]] = []
    for warehouse in warehouses:
        if not warehouse.printer_enabled or not warehouse.printer_endpoint:
            logger.info("Printing skipped for warehouse %s: printer not configured", warehouse.name)
            continue
        payloads.append(
            (
                warehouse.printer_endpoint,
                {
                    "invoice_id": sale.invoice_id,
                    "customer_name": sale.customer_name or WALK_IN_CUSTOMER,
                    "customer_phone": sale.customer_phone or "",
                    "date": sale.sale_date.isoformat() if sale.sale_date else None,
                    "warehouse_name": warehouse.name,
                    "items": lines_by_warehouse[warehouse.warehouse_id],
                    "warehouse_total": str(totals_by_warehouse[warehouse.warehouse_id]),
                },
            )
        )
    return payloads


def dispatch_receipts(db: Session, sale: Sale) -> int:
    """
    Queue receipt jobs for a committed invoice. Returns how many were queued.

    Runs after the sale transaction commits; nothing here can change the
    outcome of the sale.
    """
    if not settings.RECEIPT_PRINTING_ENABLED:
        return 0

    try:
        payloads = build_receipt_payloads(db, sale)
    except Exception as exc:
        logger.error("Could not build receipts for %s: %s", sale.invoice_id, exc, exc_info=True)
        return 0

    queued = 0
    for endpoint, payload in payloads:
        try:
            print_receipt.delay(endpoint, payload)
            queued += 1
        except Exception as exc:
            logger.warning("Could not queue receipt for %s to %s: %s", sale.invoice_id, endpoint, exc)
    return queued
