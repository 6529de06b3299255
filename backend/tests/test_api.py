"""
HTTP surface tests.

Verifies:
- store context header is required and must name an existing store
- service errors map to their status codes
- end-to-end sale, void, convert, purchase and ledger flows over /api/v1
"""
from io import BytesIO

import pandas as pd
import pytest

API = "/api/v1"


def _sale_body(product_id, quantity, total, **extra):
    body = {
        "salesman": "Bilal",
        "items": [
            {"product_id": product_id, "quantity": quantity, "price": str(total / quantity), "total": str(total)}
        ],
        "total_amount": str(total),
    }
    body.update(extra)
    return body


class TestStoreContext:
    def test_health(self, client):
        resp = client.get(f"{API}/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_missing_header(self, client, product):
        resp = client.get(f"{API}/products")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Store context required"

    def test_unknown_store(self, client):
        resp = client.get(f"{API}/products", headers={"X-Store-Id": "999"})
        assert resp.status_code == 404

    def test_products_are_store_scoped(self, client, product, headers, other_store):
        assert len(client.get(f"{API}/products", headers=headers).json()) == 1
        other = client.get(f"{API}/products", headers={"X-Store-Id": str(other_store.store_id)})
        assert other.json() == []


class TestStoresAndWarehouses:
    def test_create_and_list(self, client):
        store = client.post(f"{API}/stores", json={"name": "Gulberg"})
        assert store.status_code == 201

        warehouse = client.post(
            f"{API}/warehouses",
            json={"name": "Back room", "printer_enabled": True, "printer_endpoint": "http://p.local/print"},
        )
        assert warehouse.status_code == 201
        assert warehouse.json()["printer_enabled"] is True
        assert [w["name"] for w in client.get(f"{API}/warehouses").json()] == ["Back room"]

    def test_cannot_delete_stocked_warehouse(self, client, product, warehouses):
        w1, _ = warehouses
        resp = client.delete(f"{API}/warehouses/{w1.warehouse_id}")
        assert resp.status_code == 400

    def test_delete_empty_warehouse(self, client):
        created = client.post(f"{API}/warehouses", json={"name": "Spare"}).json()
        assert client.delete(f"{API}/warehouses/{created['warehouse_id']}").status_code == 204
        assert client.get(f"{API}/warehouses").json() == []


class TestSales:
    def test_sale_then_void(self, client, headers, product, warehouses):
        resp = client.post(f"{API}/sales", json=_sale_body(product.product_id, 10, 1000), headers=headers)
        assert resp.status_code == 201
        sale = resp.json()
        assert sale["invoice_id"].startswith("INV-")
        assert sale["payment_status"] == "unpaid"
        assert sum(a["quantity"] for a in sale["items"][0]["allocations"]) == 10

        stock = client.get(f"{API}/products/{product.product_id}", headers=headers).json()
        assert stock["total_stock"] == 0

        voided = client.delete(f"{API}/sales/{sale['sale_id']}", headers=headers)
        assert voided.status_code == 200
        assert voided.json()["stock_reverted"] is True

        rows = client.get(f"{API}/inventory/product/{product.product_id}", headers=headers).json()
        assert sorted(r["quantity"] for r in rows) == [3, 7]
        assert client.get(f"{API}/sales/{sale['sale_id']}", headers=headers).status_code == 404

    def test_insufficient_stock_response(self, client, headers, product):
        resp = client.post(f"{API}/sales", json=_sale_body(product.product_id, 15, 1500), headers=headers)
        assert resp.status_code == 409
        detail = resp.json()["detail"]
        assert detail["product"] == "Rice 5kg"
        assert detail["available"] == 10
        assert detail["requested"] == 15

    def test_empty_items(self, client, headers):
        resp = client.post(
            f"{API}/sales", json={"salesman": "Bilal", "items": [], "total_amount": "0"}, headers=headers
        )
        assert resp.status_code == 400

    def test_convert_once(self, client, headers, product):
        quote = client.post(
            f"{API}/sales", json=_sale_body(product.product_id, 2, 200, sale_type="quotation"), headers=headers
        ).json()
        assert quote["invoice_id"].startswith("QUT-")

        converted = client.post(f"{API}/sales/{quote['sale_id']}/convert", headers=headers)
        assert converted.status_code == 200
        assert converted.json()["sale_type"] == "invoice"

        again = client.post(f"{API}/sales/{quote['sale_id']}/convert", headers=headers)
        assert again.status_code == 400

    def test_list_by_type(self, client, headers, product):
        client.post(f"{API}/sales", json=_sale_body(product.product_id, 1, 100), headers=headers)
        client.post(
            f"{API}/sales", json=_sale_body(product.product_id, 1, 100, sale_type="estimate"), headers=headers
        )
        resp = client.get(f"{API}/sales", params={"type": "estimate"}, headers=headers)
        assert [s["sale_type"] for s in resp.json()] == ["estimate"]

    def test_update_paid_amount(self, client, headers, product):
        sale = client.post(f"{API}/sales", json=_sale_body(product.product_id, 2, 200), headers=headers).json()
        resp = client.put(f"{API}/sales/{sale['sale_id']}", json={"paid_amount": "200"}, headers=headers)
        assert resp.json()["payment_status"] == "paid"

    def test_void_with_ledger_reversal(self, client, headers, product, customer):
        sale = client.post(
            f"{API}/sales",
            json=_sale_body(product.product_id, 5, 500, paid_amount="100", customer_id=customer.customer_id),
            headers=headers,
        ).json()
        before = client.get(f"{API}/customers/{customer.customer_id}", headers=headers).json()
        assert float(before["balance"]) == 400

        resp = client.delete(f"{API}/sales/{sale['sale_id']}", params={"reverse_ledger": True}, headers=headers)
        assert resp.json()["ledger_reversed"] is True
        after = client.get(f"{API}/customers/{customer.customer_id}", headers=headers).json()
        assert float(after["balance"]) == 0


class TestInventory:
    def test_adjust_and_reconcile(self, client, headers, product, warehouses):
        _, w2 = warehouses
        resp = client.post(
            f"{API}/inventory",
            json={"product_id": product.product_id, "warehouse_id": w2.warehouse_id, "quantity": -4},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["quantity"] == -1

        total = client.post(f"{API}/inventory/reconcile/{product.product_id}", headers=headers).json()
        assert total == {"product_id": product.product_id, "total_stock": 6}


class TestProducts:
    def test_crud(self, client, headers, warehouses):
        created = client.post(
            f"{API}/products",
            json={"name": "Tea 500g", "barcode": "7001", "cost_price": "300", "sale_price": "350", "initial_stock": 4},
            headers=headers,
        )
        assert created.status_code == 201
        product_id = created.json()["product_id"]
        assert created.json()["total_stock"] == 4

        dup = client.post(
            f"{API}/products",
            json={"name": "Tea copy", "barcode": "7001", "cost_price": "1", "sale_price": "2"},
            headers=headers,
        )
        assert dup.status_code == 409

        updated = client.put(f"{API}/products/{product_id}", json={"sale_price": "360"}, headers=headers)
        assert float(updated.json()["sale_price"]) == 360
        assert client.delete(f"{API}/products/{product_id}", headers=headers).status_code == 204

    def test_upload_csv(self, client, headers, warehouses):
        df = pd.DataFrame({"barcode": ["9001", "9002"], "name": ["Soap", "Shampoo"], "cost": ["40", "200"], "price": ["55", "260"]})
        buffer = BytesIO()
        df.to_csv(buffer, index=False)
        resp = client.post(
            f"{API}/products/upload-excel",
            files={"file": ("products.csv", buffer.getvalue(), "text/csv")},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["inserted"] == 2

    @pytest.mark.parametrize(
        "filename,content",
        [("products.txt", b"barcode,name\n1,a\n"), ("products.csv", b"")],
    )
    def test_upload_rejects_bad_files(self, client, headers, filename, content):
        resp = client.post(
            f"{API}/products/upload-excel",
            files={"file": (filename, content, "text/csv")},
            headers=headers,
        )
        assert resp.status_code == 400


class TestPurchases:
    def test_purchase_and_payment(self, client, headers, product):
        resp = client.post(
            f"{API}/purchases",
            json={
                "vendor_name": "Metro Wholesale",
                "items": [{"product_id": product.product_id, "quantity": 6, "cost_price": "78"}],
                "total_amount": "468",
            },
            headers=headers,
        )
        assert resp.status_code == 201
        purchase = resp.json()
        assert float(purchase["balance"]) == 468

        paid = client.post(
            f"{API}/purchases/{purchase['purchase_id']}/payments", json={"amount": "68"}, headers=headers
        )
        assert float(paid.json()["balance"]) == 400
        assert client.get(f"{API}/products/{product.product_id}", headers=headers).json()["total_stock"] == 16

    def test_edit_and_delete(self, client, headers, product):
        purchase = client.post(
            f"{API}/purchases",
            json={
                "vendor_name": "Metro Wholesale",
                "items": [{"product_id": product.product_id, "quantity": 4, "cost_price": "78"}],
                "total_amount": "312",
            },
            headers=headers,
        ).json()

        edited = client.put(
            f"{API}/purchases/{purchase['purchase_id']}",
            json={"vendor_name": "Metro Cash & Carry", "paid_amount": "112"},
            headers=headers,
        )
        assert edited.status_code == 200
        assert edited.json()["vendor_name"] == "Metro Cash & Carry"
        assert float(edited.json()["balance"]) == 200

        removed = client.delete(f"{API}/purchases/{purchase['purchase_id']}", headers=headers)
        assert removed.status_code == 200
        assert client.get(f"{API}/purchases/{purchase['purchase_id']}", headers=headers).status_code == 404
        assert client.get(f"{API}/products/{product.product_id}", headers=headers).json()["total_stock"] == 10


class TestParties:
    def test_customer_flow(self, client, headers):
        created = client.post(f"{API}/customers", json={"name": "Nadia", "phone": "0321-5556677"}, headers=headers)
        assert created.status_code == 201
        customer_id = created.json()["customer_id"]

        dup = client.post(f"{API}/customers", json={"name": "N2", "phone": "03215556677"}, headers=headers)
        assert dup.status_code == 409

        found = client.get(f"{API}/customers/phone/03215556677", headers=headers)
        assert found.json()["customer_id"] == customer_id

        adjusted = client.put(
            f"{API}/customers/{customer_id}/balance",
            json={"entry_type": "sale", "amount": "250", "description": "Opening balance"},
            headers=headers,
        )
        assert float(adjusted.json()["balance"]) == 250
        assert adjusted.json()["transactions"][0]["description"] == "Opening balance"

        refused = client.delete(f"{API}/customers/{customer_id}", headers=headers)
        assert refused.status_code == 400

    def test_retailer_flow(self, client, headers):
        created = client.post(
            f"{API}/retailers", json={"name": "Hassan Traders", "contact": "0333 1112222"}, headers=headers
        )
        assert created.status_code == 201
        retailer_id = created.json()["retailer_id"]

        client.post(
            f"{API}/retailers/{retailer_id}/balance",
            json={"entry_type": "purchase", "amount": "900"},
            headers=headers,
        )
        paid = client.post(f"{API}/retailers/{retailer_id}/payment", json={"amount": "300"}, headers=headers)
        body = paid.json()
        assert float(body["total_purchases"]) == 900
        assert float(body["total_paid"]) == 300
        assert float(body["remaining_balance"]) == 600

        listed = client.get(f"{API}/retailers", headers=headers).json()
        assert [r["retailer_id"] for r in listed] == [retailer_id]

    def test_retailer_rejects_zero_payment(self, client, headers, retailer):
        resp = client.post(f"{API}/retailers/{retailer.retailer_id}/payment", json={"amount": "0"}, headers=headers)
        assert resp.status_code == 422

    def test_retailer_balance_unknown_purchase(self, client, headers, retailer):
        resp = client.post(
            f"{API}/retailers/{retailer.retailer_id}/balance",
            json={"entry_type": "purchase", "amount": "5", "purchase_id": 999},
            headers=headers,
        )
        assert resp.status_code == 404
