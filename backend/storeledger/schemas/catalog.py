from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1)
    barcode: str = Field(..., min_length=1)
    cost_price: Decimal = Field(..., ge=0)
    sale_price: Decimal = Field(..., ge=0)
    discount: Decimal = Decimal("0")
    vendor: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class ProductCreate(ProductBase):
    # Opening stock is booked into this warehouse
    initial_stock: int = Field(default=0, ge=0)
    warehouse_id: Optional[int] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    barcode: Optional[str] = None
    cost_price: Optional[Decimal] = Field(default=None, ge=0)
    sale_price: Optional[Decimal] = Field(default=None, ge=0)
    discount: Optional[Decimal] = None
    vendor: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class ProductOut(ProductBase):
    product_id: int
    store_id: int
    total_stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InventoryAdjust(BaseModel):
    product_id: int
    warehouse_id: int
    quantity: int = Field(..., description="Signed delta applied to the warehouse quantity")


class InventoryOut(BaseModel):
    inventory_id: int
    product_id: int
    warehouse_id: int
    quantity: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StockReconcileOut(BaseModel):
    product_id: int
    total_stock: int
