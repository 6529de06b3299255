"""
Customer and retailer ledger tests.

Balances are recomputed from the full entry log after each append, so every
assertion on a balance can be checked against the entries themselves.
"""
from decimal import Decimal

import pytest
from sqlalchemy import insert

from storeledger.core.errors import DuplicateConstraintError, NotFoundError, ValidationError
from storeledger.models.party import CustomerTransaction
from storeledger.schemas.party import BalanceAdjustment, CustomerCreate, CustomerUpdate, RetailerCreate
from storeledger.schemas.purchase import PurchaseCreate
from storeledger.schemas.sale import SaleCreate
from storeledger.services import ledger_service, purchase_service, sale_service


def _entries(party):
    return [(e.entry_type, e.amount) for e in party.transactions]


class TestCustomers:
    def test_create_normalizes_phone(self, db, store):
        customer = ledger_service.create_customer(
            db, store.store_id, CustomerCreate(name="  Sara   Khan ", phone="0300 765-4321", kata_account_id="K-9")
        )
        assert customer.name == "Sara Khan"
        assert customer.phone == "03007654321"
        assert customer.is_kata_customer is True
        assert customer.balance == Decimal("0")

    def test_duplicate_phone_in_store(self, db, store, customer):
        with pytest.raises(DuplicateConstraintError):
            ledger_service.create_customer(db, store.store_id, CustomerCreate(name="Other", phone="0300-1234567"))

    def test_same_phone_in_other_store(self, db, other_store, customer):
        created = ledger_service.create_customer(
            db, other_store.store_id, CustomerCreate(name="Other", phone=customer.phone)
        )
        assert created.store_id == other_store.store_id

    def test_lookup_by_phone(self, db, store, customer):
        found = ledger_service.get_customer_by_phone(db, store.store_id, "0300 1234567")
        assert found.customer_id == customer.customer_id

    def test_update_rejects_taken_phone(self, db, store, customer):
        other = ledger_service.create_customer(db, store.store_id, CustomerCreate(name="B", phone="03009999999"))
        with pytest.raises(DuplicateConstraintError):
            ledger_service.update_customer(db, store.store_id, other.customer_id, CustomerUpdate(phone=customer.phone))

    def test_delete_requires_zero_balance(self, db, store, customer):
        ledger_service.adjust_balance(db, customer, BalanceAdjustment(entry_type="sale", amount=Decimal("50")))
        with pytest.raises(ValidationError):
            ledger_service.delete_customer(db, store.store_id, customer.customer_id)

        ledger_service.adjust_balance(db, customer, BalanceAdjustment(entry_type="payment", amount=Decimal("50")))
        ledger_service.delete_customer(db, store.store_id, customer.customer_id)
        with pytest.raises(NotFoundError):
            ledger_service.get_customer(db, store.store_id, customer.customer_id)

    def test_scoped_to_store(self, db, other_store, customer):
        with pytest.raises(NotFoundError):
            ledger_service.get_customer(db, other_store.store_id, customer.customer_id)


class TestAdjustments:
    def test_entry_signs(self, db, customer):
        ledger_service.adjust_balance(db, customer, BalanceAdjustment(entry_type="sale", amount=Decimal("500")))
        ledger_service.adjust_balance(db, customer, BalanceAdjustment(entry_type="payment", amount=Decimal("120")))
        ledger_service.adjust_balance(db, customer, BalanceAdjustment(entry_type="adjustment", amount=Decimal("-30")))

        assert customer.balance == Decimal("350")
        assert _entries(customer) == [
            ("sale", Decimal("500")),
            ("payment", Decimal("120")),
            ("adjustment", Decimal("-30")),
        ]

    def test_customer_rejects_purchase_entry(self, db, customer):
        with pytest.raises(ValidationError):
            ledger_service.adjust_balance(db, customer, BalanceAdjustment(entry_type="purchase", amount=Decimal("1")))

    @pytest.mark.parametrize("entry_type,amount", [("sale", "0"), ("payment", "-5"), ("adjustment", "0")])
    def test_rejects_bad_amounts(self, db, customer, entry_type, amount):
        with pytest.raises(ValidationError):
            ledger_service.adjust_balance(db, customer, BalanceAdjustment(entry_type=entry_type, amount=Decimal(amount)))
        assert customer.transactions == []

    def test_append_sees_entries_written_elsewhere(self, db, customer):
        assert customer.transactions == []
        db.execute(
            insert(CustomerTransaction).values(
                customer_id=customer.customer_id, entry_type="sale", amount=Decimal("100")
            )
        )

        ledger_service.adjust_balance(db, customer, BalanceAdjustment(entry_type="payment", amount=Decimal("30")))

        assert customer.balance == Decimal("70")
        assert _entries(customer) == [("sale", Decimal("100")), ("payment", Decimal("30"))]

    def test_balance_matches_log_across_paths(self, db, store, product, customer):
        """Sale postings and manual adjustments share one log and one balance."""
        sale_service.record_sale(
            db,
            store.store_id,
            SaleCreate(
                salesman="Bilal",
                items=[{"product_id": product.product_id, "quantity": 3, "price": "100", "total": "300"}],
                total_amount=Decimal("300"),
                paid_amount=Decimal("100"),
                customer_id=customer.customer_id,
            ),
        )
        ledger_service.adjust_balance(db, customer, BalanceAdjustment(entry_type="payment", amount=Decimal("150")))
        db.refresh(customer)

        totals = ledger_service.ledger_totals(customer.transactions)
        assert customer.balance == totals["remaining_balance"] == Decimal("50")


class TestRetailers:
    def test_initial_pay_recorded_as_payment(self, db, store):
        retailer = ledger_service.create_retailer(
            db,
            store.store_id,
            RetailerCreate(name="Rehman Sons", contact="0311 222 3333", initial_pay=Decimal("200")),
        )
        assert retailer.contact == "03112223333"
        assert _entries(retailer) == [("payment", Decimal("200"))]
        assert retailer.paid_amount == Decimal("200")
        assert retailer.balance == Decimal("-200")

    def test_totals(self, db, retailer):
        ledger_service.adjust_balance(db, retailer, BalanceAdjustment(entry_type="purchase", amount=Decimal("1000")))
        ledger_service.adjust_balance(db, retailer, BalanceAdjustment(entry_type="sale", amount=Decimal("250")))
        ledger_service.adjust_balance(db, retailer, BalanceAdjustment(entry_type="payment", amount=Decimal("400")))

        totals = ledger_service.ledger_totals(retailer.transactions)
        assert totals["total_purchases"] == Decimal("1000")
        assert totals["total_sales"] == Decimal("250")
        assert totals["total_debit"] == Decimal("1250")
        assert totals["total_paid"] == Decimal("400")
        assert retailer.remaining_balance == Decimal("850")
        assert retailer.paid_amount == Decimal("400")

    def test_default_description(self, db, retailer):
        ledger_service.adjust_balance(db, retailer, BalanceAdjustment(entry_type="purchase", amount=Decimal("75")))
        assert retailer.transactions[0].description == "Purchase of Rs. 75"

    def test_payment_linked_to_sale_updates_sale(self, db, store, product, retailer):
        sale = sale_service.record_sale(
            db,
            store.store_id,
            SaleCreate(
                salesman="Bilal",
                items=[{"product_id": product.product_id, "quantity": 5, "price": "100", "total": "500"}],
                total_amount=Decimal("500"),
                retailer_id=retailer.retailer_id,
            ),
        )
        assert sale.payment_status == "unpaid"

        ledger_service.add_retailer_payment(db, store.store_id, retailer.retailer_id, Decimal("200"), sale_id=sale.sale_id)
        db.refresh(sale)
        assert sale.paid_amount == Decimal("200")
        assert sale.payment_status == "partial"

        retailer = ledger_service.add_retailer_payment(
            db, store.store_id, retailer.retailer_id, Decimal("300"), sale_id=sale.sale_id
        )
        db.refresh(sale)
        assert sale.paid_amount == Decimal("500")
        assert sale.payment_status == "paid"
        assert retailer.remaining_balance == Decimal("0")

    def test_payment_for_unknown_sale(self, db, store, retailer):
        with pytest.raises(NotFoundError):
            ledger_service.add_retailer_payment(db, store.store_id, retailer.retailer_id, Decimal("10"), sale_id=404)

    def test_payment_must_be_positive(self, db, store, retailer):
        with pytest.raises(ValidationError):
            ledger_service.add_retailer_payment(db, store.store_id, retailer.retailer_id, Decimal("0"))

    def test_delete_refused_when_linked_to_sales(self, db, store, product, retailer):
        sale_service.record_sale(
            db,
            store.store_id,
            SaleCreate(
                salesman="Bilal",
                items=[{"product_id": product.product_id, "quantity": 1, "price": "100", "total": "100"}],
                total_amount=Decimal("100"),
                retailer_id=retailer.retailer_id,
            ),
        )
        with pytest.raises(ValidationError):
            ledger_service.delete_retailer(db, store.store_id, retailer.retailer_id)

    def test_payment_against_unlinked_sale_refused(self, db, store, product, retailer):
        walk_in = sale_service.record_sale(
            db,
            store.store_id,
            SaleCreate(
                salesman="Bilal",
                items=[{"product_id": product.product_id, "quantity": 5, "price": "200", "total": "1000"}],
                total_amount=Decimal("1000"),
                paid_amount=Decimal("400"),
            ),
        )
        with pytest.raises(ValidationError):
            ledger_service.add_retailer_payment(
                db, store.store_id, retailer.retailer_id, Decimal("100"), sale_id=walk_in.sale_id
            )
        db.rollback()

        db.refresh(walk_in)
        db.refresh(retailer)
        assert walk_in.paid_amount == Decimal("400")
        assert walk_in.payment_status == "partial"
        assert retailer.transactions == []


class TestEntryReferences:
    def test_unknown_purchase_rejected(self, db, retailer):
        with pytest.raises(NotFoundError):
            ledger_service.adjust_balance(
                db, retailer, BalanceAdjustment(entry_type="purchase", amount=Decimal("5"), purchase_id=999)
            )
        assert retailer.transactions == []

    def test_unknown_sale_rejected(self, db, retailer):
        with pytest.raises(NotFoundError):
            ledger_service.adjust_balance(
                db, retailer, BalanceAdjustment(entry_type="sale", amount=Decimal("5"), sale_id=12345)
            )
        assert retailer.transactions == []

    def test_purchase_from_other_store_rejected(self, db, store, other_store, product):
        purchase = purchase_service.record_purchase(
            db,
            store.store_id,
            PurchaseCreate(
                vendor_name="Metro",
                items=[{"product_id": product.product_id, "quantity": 1, "cost_price": "80"}],
                total_amount=Decimal("80"),
            ),
        )
        outsider = ledger_service.create_retailer(
            db, other_store.store_id, RetailerCreate(name="Karachi Traders", contact="0300 7654321")
        )
        with pytest.raises(NotFoundError):
            ledger_service.adjust_balance(
                db,
                outsider,
                BalanceAdjustment(entry_type="purchase", amount=Decimal("80"), purchase_id=purchase.purchase_id),
            )

    def test_known_purchase_stored(self, db, store, product, retailer):
        purchase = purchase_service.record_purchase(
            db,
            store.store_id,
            PurchaseCreate(
                vendor_name="Metro",
                items=[{"product_id": product.product_id, "quantity": 2, "cost_price": "80"}],
                total_amount=Decimal("160"),
            ),
        )
        ledger_service.adjust_balance(
            db,
            retailer,
            BalanceAdjustment(entry_type="purchase", amount=Decimal("160"), purchase_id=purchase.purchase_id),
        )
        assert retailer.transactions[0].purchase_id == purchase.purchase_id
        assert retailer.balance == Decimal("160")

    def test_sale_of_another_customer_rejected(self, db, store, product, customer):
        walk_in = sale_service.record_sale(
            db,
            store.store_id,
            SaleCreate(
                salesman="Bilal",
                items=[{"product_id": product.product_id, "quantity": 1, "price": "100", "total": "100"}],
                total_amount=Decimal("100"),
            ),
        )
        with pytest.raises(ValidationError):
            ledger_service.adjust_balance(
                db, customer, BalanceAdjustment(entry_type="payment", amount=Decimal("50"), sale_id=walk_in.sale_id)
            )
        assert customer.transactions == []

    def test_customer_cannot_reference_purchase(self, db, customer):
        with pytest.raises(ValidationError):
            ledger_service.adjust_balance(
                db, customer, BalanceAdjustment(entry_type="payment", amount=Decimal("50"), purchase_id=1)
            )
