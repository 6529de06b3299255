"""
Customer and retailer ledgers.

Both parties keep an append-only transaction log. The stored balance is
always recomputed from the full log after an entry is appended; it is never
incremented in place. Every path that appends an entry first reloads the
party under a row lock, so concurrent appends queue behind each other.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storeledger.core.errors import DuplicateConstraintError, NotFoundError, ValidationError
from storeledger.models.party import (
    CUSTOMER_ENTRY_TYPES,
    ENTRY_ADJUSTMENT,
    ENTRY_PAYMENT,
    ENTRY_PURCHASE,
    ENTRY_SALE,
    RETAILER_ENTRY_TYPES,
    Customer,
    CustomerTransaction,
    Retailer,
    RetailerTransaction,
)
from storeledger.models.sale import PAYMENT_PAID, PAYMENT_PARTIAL, PAYMENT_UNPAID, Sale
from storeledger.schemas.party import (
    BalanceAdjustment,
    CustomerCreate,
    CustomerUpdate,
    RetailerCreate,
    RetailerUpdate,
)
from storeledger.services import purchase_service
from storeledger.utils.text_cleaner import normalize_phone, normalize_whitespace

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Direction each entry type moves the balance (positive = party owes the store)
ENTRY_SIGNS = {
    ENTRY_SALE: 1,
    ENTRY_PURCHASE: 1,
    ENTRY_PAYMENT: -1,
    ENTRY_ADJUSTMENT: 1,
}

Party = Union[Customer, Retailer]


def derive_payment_status(paid_amount, total_amount) -> str:
    paid = Decimal(paid_amount or 0)
    total = Decimal(total_amount or 0)
    if paid >= total:
        return PAYMENT_PAID
    if paid > 0:
        return PAYMENT_PARTIAL
    return PAYMENT_UNPAID


def ledger_totals(entries: Iterable) -> Dict[str, Decimal]:
    totals = {
        ENTRY_SALE: ZERO,
        ENTRY_PURCHASE: ZERO,
        ENTRY_PAYMENT: ZERO,
        ENTRY_ADJUSTMENT: ZERO,
    }
    for entry in entries:
        totals[entry.entry_type] = totals.get(entry.entry_type, ZERO) + Decimal(entry.amount or 0)

    total_debit = totals[ENTRY_SALE] + totals[ENTRY_PURCHASE]
    remaining = sum((ENTRY_SIGNS[kind] * amount for kind, amount in totals.items()), ZERO)
    return {
        "total_sales": totals[ENTRY_SALE],
        "total_purchases": totals[ENTRY_PURCHASE],
        "total_adjustments": totals[ENTRY_ADJUSTMENT],
        "total_debit": total_debit,
        "total_paid": totals[ENTRY_PAYMENT],
        "remaining_balance": remaining,
    }


def recompute_customer_balance(db: Session, customer: Customer) -> Decimal:
    db.flush()
    customer.balance = ledger_totals(customer.transactions)["remaining_balance"]
    db.flush()
    return customer.balance


def recompute_retailer_balance(db: Session, retailer: Retailer) -> Decimal:
    db.flush()
    totals = ledger_totals(retailer.transactions)
    retailer.balance = totals["remaining_balance"]
    retailer.paid_amount = totals["total_paid"]
    retailer.remaining_balance = totals["remaining_balance"]
    db.flush()
    return retailer.balance


def _append_entry(party: Party, entry_type: str, amount: Decimal, **fields) -> None:
    if isinstance(party, Customer):
        party.transactions.append(CustomerTransaction(entry_type=entry_type, amount=amount, **fields))
    else:
        party.transactions.append(RetailerTransaction(entry_type=entry_type, amount=amount, **fields))


def _recompute(db: Session, party: Party) -> Decimal:
    if isinstance(party, Customer):
        return recompute_customer_balance(db, party)
    return recompute_retailer_balance(db, party)


def lock_party(db: Session, party: Party) -> Party:
    """Reload a customer or retailer under a row lock before its log is appended to."""
    db.refresh(party, with_for_update=True)
    return party


def _linked_sale(db: Session, party: Party, sale_id: int) -> Sale:
    sale = db.query(Sale).filter(Sale.sale_id == sale_id, Sale.store_id == party.store_id).first()
    if not sale:
        raise NotFoundError("Sale not found")
    linked_id = sale.customer_id if isinstance(party, Customer) else sale.retailer_id
    party_id = party.customer_id if isinstance(party, Customer) else party.retailer_id
    if linked_id != party_id:
        raise ValidationError(f"Sale {sale.invoice_id} is not linked to this {type(party).__name__.lower()}")
    return sale


# ---------------------------------------------------------------------------
# Sale-driven postings
# ---------------------------------------------------------------------------


def post_sale(db: Session, party: Party, sale: Sale) -> Decimal:
    """Book an invoice against a customer or retailer: the full total, then any upfront payment."""
    lock_party(db, party)
    total = Decimal(sale.total_amount or 0)
    paid = Decimal(sale.paid_amount or 0)
    _append_entry(party, ENTRY_SALE, total, sale_id=sale.sale_id, description=f"Sale {sale.invoice_id}")
    if paid > 0:
        _append_entry(
            party,
            ENTRY_PAYMENT,
            paid,
            sale_id=sale.sale_id,
            description=f"Payment received with {sale.invoice_id}",
        )
    return _recompute(db, party)


def reverse_sale(db: Session, party: Party, sale: Sale) -> Decimal:
    """
    Cancel the ledger effect of a voided sale with compensating adjustments.
    Existing entries are left in place.
    """
    lock_party(db, party)
    linked = [entry for entry in party.transactions if entry.sale_id == sale.sale_id]
    sold = sum((Decimal(e.amount) for e in linked if e.entry_type == ENTRY_SALE), ZERO)
    paid = sum((Decimal(e.amount) for e in linked if e.entry_type == ENTRY_PAYMENT), ZERO)
    if sold:
        _append_entry(party, ENTRY_ADJUSTMENT, -sold, sale_id=sale.sale_id, description=f"Void of {sale.invoice_id}")
    if paid:
        _append_entry(
            party,
            ENTRY_ADJUSTMENT,
            paid,
            sale_id=sale.sale_id,
            description=f"Refund on void of {sale.invoice_id}",
        )
    return _recompute(db, party)


# ---------------------------------------------------------------------------
# Direct balance adjustments
# ---------------------------------------------------------------------------


def adjust_balance(db: Session, party: Party, payload: BalanceAdjustment) -> Party:
    """
    Append one typed entry and recompute: sale/purchase raise the balance,
    payment lowers it, adjustment applies its own sign.
    """
    allowed = CUSTOMER_ENTRY_TYPES if isinstance(party, Customer) else RETAILER_ENTRY_TYPES
    if payload.entry_type not in allowed:
        raise ValidationError(f"Entry type '{payload.entry_type}' is not allowed here")

    amount = Decimal(payload.amount)
    if payload.entry_type == ENTRY_ADJUSTMENT:
        if amount == 0:
            raise ValidationError("Adjustment amount cannot be zero")
    elif amount <= 0:
        raise ValidationError("Amount must be greater than zero")

    # Referenced sale and purchase must exist in the party's store
    if payload.sale_id is not None:
        _linked_sale(db, party, payload.sale_id)
    fields = {"sale_id": payload.sale_id, "description": payload.description}
    if isinstance(party, Retailer):
        if payload.purchase_id is not None:
            purchase_service.get_purchase(db, party.store_id, payload.purchase_id)
        fields["purchase_id"] = payload.purchase_id
        if not fields["description"]:
            label = "Purchase" if payload.entry_type == ENTRY_PURCHASE else payload.entry_type.capitalize()
            fields["description"] = f"{label} of Rs. {amount}"
    elif payload.purchase_id is not None:
        raise ValidationError("Customer entries cannot reference a purchase")

    lock_party(db, party)
    _append_entry(party, payload.entry_type, amount, **fields)
    balance = _recompute(db, party)
    db.commit()
    db.refresh(party)
    logger.info(
        "Balance adjusted",
        extra={"party": type(party).__name__, "entry_type": payload.entry_type, "balance": str(balance)},
    )
    return party


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


def get_customer(db: Session, store_id: int, customer_id: int) -> Customer:
    customer = (
        db.query(Customer)
        .filter(Customer.customer_id == customer_id, Customer.store_id == store_id)
        .first()
    )
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def get_customer_by_phone(db: Session, store_id: int, phone: str) -> Customer:
    customer = (
        db.query(Customer)
        .filter(Customer.phone == normalize_phone(phone), Customer.store_id == store_id)
        .first()
    )
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def list_customers(db: Session, store_id: int) -> List[Customer]:
    return (
        db.query(Customer)
        .filter(Customer.store_id == store_id)
        .order_by(Customer.created_at.desc(), Customer.customer_id.desc())
        .all()
    )


def _ensure_phone_free(db: Session, store_id: int, phone: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Customer).filter(Customer.store_id == store_id, Customer.phone == phone)
    if exclude_id is not None:
        query = query.filter(Customer.customer_id != exclude_id)
    if query.first():
        raise DuplicateConstraintError("Customer with this phone number already exists in this store")


def create_customer(db: Session, store_id: int, payload: CustomerCreate) -> Customer:
    phone = normalize_phone(payload.phone)
    _ensure_phone_free(db, store_id, phone)

    customer = Customer(
        store_id=store_id,
        name=normalize_whitespace(payload.name),
        phone=phone,
        address=payload.address,
        kata_account_id=payload.kata_account_id,
        is_kata_customer=bool(payload.kata_account_id),
        credit_limit=payload.credit_limit or ZERO,
        balance=ZERO,
        notes=payload.notes,
    )
    db.add(customer)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateConstraintError("Customer with this phone number already exists in this store") from exc
    db.refresh(customer)
    return customer


def update_customer(db: Session, store_id: int, customer_id: int, payload: CustomerUpdate) -> Customer:
    customer = get_customer(db, store_id, customer_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("phone"):
        phone = normalize_phone(data["phone"])
        _ensure_phone_free(db, store_id, phone, exclude_id=customer.customer_id)
        customer.phone = phone
    if data.get("name"):
        customer.name = normalize_whitespace(data["name"])
    for field in ("address", "credit_limit", "notes", "is_active"):
        if field in data and data[field] is not None:
            setattr(customer, field, data[field])
    if "kata_account_id" in data:
        customer.kata_account_id = data["kata_account_id"]
        customer.is_kata_customer = bool(customer.kata_account_id)

    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, store_id: int, customer_id: int) -> None:
    customer = get_customer(db, store_id, customer_id)
    if Decimal(customer.balance or 0) != 0:
        raise ValidationError("Cannot delete customer with outstanding balance")
    if db.query(Sale.sale_id).filter(Sale.customer_id == customer.customer_id).first():
        raise ValidationError("Customer is linked to sales")
    db.delete(customer)
    db.commit()


# ---------------------------------------------------------------------------
# Retailers
# ---------------------------------------------------------------------------


def get_retailer(db: Session, store_id: int, retailer_id: int) -> Retailer:
    retailer = (
        db.query(Retailer)
        .filter(Retailer.retailer_id == retailer_id, Retailer.store_id == store_id)
        .first()
    )
    if not retailer:
        raise NotFoundError("Retailer not found")
    return retailer


def list_retailers(db: Session, store_id: int) -> List[Retailer]:
    return (
        db.query(Retailer)
        .filter(Retailer.store_id == store_id)
        .order_by(Retailer.created_at.desc(), Retailer.retailer_id.desc())
        .all()
    )


def create_retailer(db: Session, store_id: int, payload: RetailerCreate) -> Retailer:
    retailer = Retailer(
        store_id=store_id,
        name=normalize_whitespace(payload.name),
        contact=normalize_phone(payload.contact),
        address=payload.address,
        bank_account=payload.bank_account,
        bank_name=payload.bank_name,
        initial_pay=payload.initial_pay or ZERO,
        notes=payload.notes,
    )
    db.add(retailer)
    if payload.initial_pay and payload.initial_pay > 0:
        _append_entry(retailer, ENTRY_PAYMENT, Decimal(payload.initial_pay), description="Initial payment")
    recompute_retailer_balance(db, retailer)
    db.commit()
    db.refresh(retailer)
    return retailer


def update_retailer(db: Session, store_id: int, retailer_id: int, payload: RetailerUpdate) -> Retailer:
    retailer = get_retailer(db, store_id, retailer_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("name"):
        retailer.name = normalize_whitespace(data["name"])
    if data.get("contact"):
        retailer.contact = normalize_phone(data["contact"])
    for field in ("address", "bank_account", "bank_name", "notes"):
        if field in data:
            setattr(retailer, field, data[field])
    db.commit()
    db.refresh(retailer)
    return retailer


def delete_retailer(db: Session, store_id: int, retailer_id: int) -> None:
    retailer = get_retailer(db, store_id, retailer_id)
    if db.query(Sale.sale_id).filter(Sale.retailer_id == retailer.retailer_id).first():
        raise ValidationError("Retailer is linked to sales")
    db.delete(retailer)
    db.commit()


def add_retailer_payment(
    db: Session,
    store_id: int,
    retailer_id: int,
    amount: Decimal,
    description: Optional[str] = None,
    sale_id: Optional[int] = None,
) -> Retailer:
    """
    Record money received from a retailer. When tied to a sale, the sale's
    paid amount becomes the sum of this retailer's payments against it.
    """
    retailer = get_retailer(db, store_id, retailer_id)
    amount = Decimal(amount)
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")

    sale = _linked_sale(db, retailer, sale_id) if sale_id is not None else None
    lock_party(db, retailer)

    _append_entry(
        retailer,
        ENTRY_PAYMENT,
        amount,
        sale_id=sale_id,
        description=description or f"Payment of Rs. {amount}",
    )
    recompute_retailer_balance(db, retailer)

    if sale is not None:
        sale.paid_amount = sum(
            (
                Decimal(entry.amount)
                for entry in retailer.transactions
                if entry.entry_type == ENTRY_PAYMENT and entry.sale_id == sale.sale_id
            ),
            ZERO,
        )
        sale.payment_status = derive_payment_status(sale.paid_amount, sale.total_amount)
        logger.info(
            "Sale %s payment updated: total=%s paid=%s status=%s",
            sale.invoice_id,
            sale.total_amount,
            sale.paid_amount,
            sale.payment_status,
        )

    db.commit()
    db.refresh(retailer)
    logger.info(
        "Retailer %s payment recorded: paid=%s remaining=%s",
        retailer.name,
        retailer.paid_amount,
        retailer.remaining_balance,
    )
    return retailer
