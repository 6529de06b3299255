import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from storeledger.core.errors import DuplicateConstraintError, NotFoundError, ValidationError
from storeledger.models.catalog import Product
from storeledger.models.purchase import PurchaseItem
from storeledger.models.sale import SaleItem
from storeledger.schemas.catalog import ProductCreate, ProductUpdate
from storeledger.services import stock_service
from storeledger.utils.text_cleaner import normalize_barcode, normalize_whitespace

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"barcode", "name", "cost_price", "sale_price"}

# Allowed column aliases from Excel -> model field
HEADER_ALIASES = {
    "barcode": "barcode",
    "bar_code": "barcode",
    "sku": "barcode",
    "name": "name",
    "product": "name",
    "product_name": "name",
    "item_name": "name",
    "cost": "cost_price",
    "cost_price": "cost_price",
    "purchase_price": "cost_price",
    "price": "sale_price",
    "sale_price": "sale_price",
    "selling_price": "sale_price",
    "retail_price": "sale_price",
    "discount": "discount",
    "vendor": "vendor",
    "supplier": "vendor",
    "category": "category",
    "description": "description",
    "qty": "qty",
    "quantity": "qty",
    "stock": "qty",
    "opening_stock": "qty",
}


def _clean_decimal(value: Any) -> Decimal | None:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    try:
        number = Decimal(str(value).replace(",", "").strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _clean_int(value: Any) -> int:
    number = _clean_decimal(value)
    if number is None:
        return 0
    return int(number)


def _clean_text(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    return normalize_whitespace(value) or None


def _normalize_header(header: str) -> str:
    """Lowercase, strip, and collapse non-alphanumerics to underscore."""
    cleaned = "".join(ch.lower() if ch.isalnum() else "_" for ch in str(header))
    return "_".join([segment for segment in cleaned.split("_") if segment])


def _build_column_map(df: pd.DataFrame) -> Dict[int, str]:
    col_map: Dict[int, str] = {}
    for idx, raw_header in enumerate(df.columns):
        target = HEADER_ALIASES.get(_normalize_header(raw_header))
        if target and target not in col_map.values():
            col_map[idx] = target

    missing = REQUIRED_FIELDS - set(col_map.values())
    if missing:
        raise ValidationError(f"Missing required columns for products: {sorted(missing)}")
    return col_map


def get_product(db: Session, store_id: int, product_id: int) -> Product:
    product = (
        db.query(Product)
        .filter(Product.product_id == product_id, Product.store_id == store_id)
        .first()
    )
    if not product:
        raise NotFoundError("Product not found")
    return product


def list_products(db: Session, store_id: int, q: Optional[str] = None) -> List[Product]:
    query = db.query(Product).filter(Product.store_id == store_id)
    if q:
        like = f"%{q.strip()}%"
        query = query.filter((Product.name.ilike(like)) | (Product.barcode.ilike(like)))
    return query.order_by(Product.name).all()


def _find_by_barcode(db: Session, store_id: int, barcode: str) -> Optional[Product]:
    return (
        db.query(Product)
        .filter(Product.store_id == store_id, Product.barcode == barcode)
        .first()
    )


def create_product(db: Session, store_id: int, payload: ProductCreate) -> Product:
    barcode = normalize_barcode(payload.barcode)
    if _find_by_barcode(db, store_id, barcode):
        raise DuplicateConstraintError("Barcode already exists")

    product = Product(
        store_id=store_id,
        name=normalize_whitespace(payload.name),
        barcode=barcode,
        cost_price=payload.cost_price,
        sale_price=payload.sale_price,
        discount=payload.discount,
        vendor=payload.vendor,
        category=payload.category,
        description=payload.description,
        total_stock=0,
    )
    db.add(product)
    db.flush()

    if payload.initial_stock > 0:
        warehouse_id = payload.warehouse_id or stock_service.default_warehouse(db).warehouse_id
        stock_service.apply_inventory_delta(db, product.product_id, warehouse_id, payload.initial_stock)

    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, store_id: int, product_id: int, payload: ProductUpdate) -> Product:
    """Catalog fields only; total_stock follows inventory and is not editable here."""
    product = get_product(db, store_id, product_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("barcode"):
        barcode = normalize_barcode(data["barcode"])
        existing = _find_by_barcode(db, store_id, barcode)
        if existing and existing.product_id != product.product_id:
            raise DuplicateConstraintError("Barcode already exists")
        product.barcode = barcode
    if data.get("name"):
        product.name = normalize_whitespace(data["name"])
    for field in ("cost_price", "sale_price", "discount", "vendor", "category", "description"):
        if field in data and data[field] is not None:
            setattr(product, field, data[field])

    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, store_id: int, product_id: int) -> None:
    product = get_product(db, store_id, product_id)
    in_sales = db.query(SaleItem.sale_item_id).filter(SaleItem.product_id == product_id).first()
    in_purchases = db.query(PurchaseItem.purchase_item_id).filter(PurchaseItem.product_id == product_id).first()
    if in_sales or in_purchases:
        raise ValidationError("Product is referenced by sales or purchases")
    # inventory rows go with the product (relationship cascade)
    db.delete(product)
    db.commit()


def import_products_from_excel(
    db: Session,
    df: pd.DataFrame,
    store_id: int,
    warehouse_id: Optional[int] = None,
) -> Dict[str, int]:
    """
    Ingest a product sheet:
    - new barcodes become products, known barcodes get their catalog fields updated
    - a qty column is booked into the chosen warehouse and reconciled
    """
    col_map = _build_column_map(df)
    target_warehouse_id: Optional[int] = None
    if "qty" in col_map.values():
        if warehouse_id is not None:
            target_warehouse_id = stock_service.get_warehouse(db, warehouse_id).warehouse_id
        else:
            target_warehouse_id = stock_service.default_warehouse(db).warehouse_id

    stats = {
        "inserted": 0,
        "updated": 0,
        "stock_rows": 0,
        "skipped_missing_barcode": 0,
        "skipped_bad_price": 0,
    }

    for _, row in df.iterrows():
        row_data: Dict[str, Any] = {}
        for idx, field in col_map.items():
            row_data[field] = row.iloc[idx]

        barcode = normalize_barcode(_clean_text(row_data.get("barcode")) or "")
        if not barcode:
            stats["skipped_missing_barcode"] += 1
            continue

        cost_price = _clean_decimal(row_data.get("cost_price"))
        sale_price = _clean_decimal(row_data.get("sale_price"))
        if cost_price is None or sale_price is None or cost_price < 0 or sale_price < 0:
            stats["skipped_bad_price"] += 1
            continue

        fields = {
            "name": _clean_text(row_data.get("name")) or barcode,
            "cost_price": cost_price,
            "sale_price": sale_price,
            "discount": _clean_decimal(row_data.get("discount")) or Decimal("0"),
            "vendor": _clean_text(row_data.get("vendor")),
            "category": _clean_text(row_data.get("category")),
            "description": _clean_text(row_data.get("description")),
        }

        product = _find_by_barcode(db, store_id, barcode)
        if product:
            for field, value in fields.items():
                if value is not None:
                    setattr(product, field, value)
            stats["updated"] += 1
        else:
            product = Product(store_id=store_id, barcode=barcode, total_stock=0, **fields)
            db.add(product)
            db.flush()
            stats["inserted"] += 1

        qty = _clean_int(row_data.get("qty"))
        if target_warehouse_id is not None and qty:
            stock_service.apply_inventory_delta(db, product.product_id, target_warehouse_id, qty)
            stats["stock_rows"] += 1

    db.commit()
    logger.info("Product sheet ingested", extra={"store_id": store_id, **stats})
    return stats
