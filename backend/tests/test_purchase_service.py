from decimal import Decimal

import pytest

from storeledger.core.errors import NotFoundError, ValidationError
from storeledger.models.catalog import Inventory
from storeledger.models.purchase import Purchase
from storeledger.schemas.party import BalanceAdjustment
from storeledger.schemas.purchase import PurchaseCreate, PurchaseUpdate
from storeledger.schemas.sale import SaleCreate
from storeledger.services import ledger_service, purchase_service, sale_service


def _purchase(product, quantity=5, cost="85.50", warehouse_id=None, **extra):
    data = {
        "vendor_name": " Al  Noor  Traders ",
        "items": [
            {
                "product_id": product.product_id,
                "quantity": quantity,
                "cost_price": Decimal(cost),
                "warehouse_id": warehouse_id,
            }
        ],
        "total_amount": Decimal(cost) * quantity,
    }
    data.update(extra)
    return PurchaseCreate(**data)


def test_purchase_into_named_warehouse(db, store, product, warehouses):
    _, w2 = warehouses
    purchase = purchase_service.record_purchase(db, store.store_id, _purchase(product, warehouse_id=w2.warehouse_id))
    db.refresh(product)

    assert purchase.vendor_name == "Al Noor Traders"
    assert product.total_stock == 15
    assert product.cost_price == Decimal("85.50")
    row = (
        db.query(Inventory)
        .filter(Inventory.product_id == product.product_id, Inventory.warehouse_id == w2.warehouse_id)
        .one()
    )
    assert row.quantity == 8
    assert purchase.items[0].total == Decimal("427.50")


def test_purchase_defaults_to_first_warehouse(db, store, product, warehouses):
    w1, _ = warehouses
    purchase = purchase_service.record_purchase(db, store.store_id, _purchase(product, quantity=3))
    assert purchase.items[0].warehouse_id == w1.warehouse_id
    db.refresh(product)
    assert product.total_stock == 13


def test_balance_defaults_to_total_minus_paid(db, store, product):
    purchase = purchase_service.record_purchase(
        db, store.store_id, _purchase(product, quantity=2, cost="100", paid_amount=Decimal("50"))
    )
    assert purchase.balance == Decimal("150")


def test_empty_purchase_rejected(db, store):
    with pytest.raises(ValidationError):
        purchase_service.record_purchase(
            db, store.store_id, PurchaseCreate(vendor_name="X", items=[], total_amount=Decimal("0"))
        )


def test_unknown_product_rejected(db, other_store, product):
    with pytest.raises(NotFoundError):
        purchase_service.record_purchase(db, other_store.store_id, _purchase(product))


def test_payments_reduce_balance(db, store, product):
    purchase = purchase_service.record_purchase(db, store.store_id, _purchase(product, quantity=2, cost="100"))
    purchase = purchase_service.add_purchase_payment(db, store.store_id, purchase.purchase_id, Decimal("120"))

    assert purchase.paid_amount == Decimal("120")
    assert purchase.balance == Decimal("80")
    assert [p.amount for p in purchase.payments] == [Decimal("120")]

    purchase = purchase_service.add_purchase_payment(db, store.store_id, purchase.purchase_id, Decimal("100"))
    assert purchase.balance == Decimal("-20")


def test_list_and_get_scoped(db, store, other_store, product):
    purchase = purchase_service.record_purchase(db, store.store_id, _purchase(product))
    assert [p.purchase_id for p in purchase_service.list_purchases(db, store.store_id)] == [purchase.purchase_id]
    assert purchase_service.list_purchases(db, other_store.store_id) == []
    with pytest.raises(NotFoundError):
        purchase_service.get_purchase(db, other_store.store_id, purchase.purchase_id)


def test_update_edits_metadata_only(db, store, product):
    purchase = purchase_service.record_purchase(db, store.store_id, _purchase(product, quantity=2, cost="100"))
    updated = purchase_service.update_purchase(
        db,
        store.store_id,
        purchase.purchase_id,
        PurchaseUpdate(vendor_name="  Metro   Wholesale ", total_amount=Decimal("180"), paid_amount=Decimal("30")),
    )
    assert updated.vendor_name == "Metro Wholesale"
    assert updated.balance == Decimal("150")
    assert [(i.quantity, i.cost_price) for i in updated.items] == [(2, Decimal("100"))]
    db.refresh(product)
    assert product.total_stock == 12


def test_update_keeps_explicit_balance(db, store, product):
    purchase = purchase_service.record_purchase(db, store.store_id, _purchase(product, quantity=2, cost="100"))
    updated = purchase_service.update_purchase(
        db, store.store_id, purchase.purchase_id, PurchaseUpdate(paid_amount=Decimal("50"), balance=Decimal("0"))
    )
    assert updated.paid_amount == Decimal("50")
    assert updated.balance == Decimal("0")


def test_delete_takes_stock_back_out(db, store, product, warehouses):
    _, w2 = warehouses
    purchase = purchase_service.record_purchase(db, store.store_id, _purchase(product, warehouse_id=w2.warehouse_id))
    purchase_service.delete_purchase(db, store.store_id, purchase.purchase_id)

    db.refresh(product)
    assert product.total_stock == 10
    assert db.query(Purchase).count() == 0
    row = (
        db.query(Inventory)
        .filter(Inventory.product_id == product.product_id, Inventory.warehouse_id == w2.warehouse_id)
        .one()
    )
    assert row.quantity == 3


def test_delete_refused_once_stock_sold(db, store, product, warehouses):
    _, w2 = warehouses
    purchase = purchase_service.record_purchase(
        db, store.store_id, _purchase(product, quantity=2, warehouse_id=w2.warehouse_id)
    )
    sale_service.record_sale(
        db,
        store.store_id,
        SaleCreate(
            salesman="Bilal",
            items=[{"product_id": product.product_id, "quantity": 12, "price": "100", "total": "1200"}],
            total_amount=Decimal("1200"),
        ),
    )
    with pytest.raises(ValidationError):
        purchase_service.delete_purchase(db, store.store_id, purchase.purchase_id)
    db.rollback()
    assert db.query(Purchase).count() == 1


def test_delete_refused_when_on_retailer_ledger(db, store, product, retailer):
    purchase = purchase_service.record_purchase(db, store.store_id, _purchase(product, quantity=1, cost="80"))
    ledger_service.adjust_balance(
        db,
        retailer,
        BalanceAdjustment(entry_type="purchase", amount=Decimal("80"), purchase_id=purchase.purchase_id),
    )
    with pytest.raises(ValidationError):
        purchase_service.delete_purchase(db, store.store_id, purchase.purchase_id)


def test_update_and_delete_scoped(db, store, other_store, product):
    purchase = purchase_service.record_purchase(db, store.store_id, _purchase(product))
    with pytest.raises(NotFoundError):
        purchase_service.update_purchase(db, other_store.store_id, purchase.purchase_id, PurchaseUpdate(vendor_name="X"))
    with pytest.raises(NotFoundError):
        purchase_service.delete_purchase(db, other_store.store_id, purchase.purchase_id)
