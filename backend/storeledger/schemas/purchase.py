from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class PurchaseItemIn(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    cost_price: Decimal = Field(..., ge=0)
    total: Optional[Decimal] = None
    warehouse_id: Optional[int] = None


class PurchaseCreate(BaseModel):
    vendor_name: str = Field(..., min_length=1)
    items: List[PurchaseItemIn]
    total_amount: Decimal = Field(..., ge=0)
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    balance: Optional[Decimal] = None
    purchase_date: Optional[datetime] = None
    created_by: Optional[str] = None


class PurchaseUpdate(BaseModel):
    vendor_name: Optional[str] = Field(default=None, min_length=1)
    total_amount: Optional[Decimal] = Field(default=None, ge=0)
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)
    balance: Optional[Decimal] = None
    purchase_date: Optional[datetime] = None
    created_by: Optional[str] = None


class PurchasePaymentIn(BaseModel):
    amount: Decimal = Field(..., gt=0)


class PurchaseItemOut(BaseModel):
    purchase_item_id: int
    product_id: int
    warehouse_id: int
    quantity: int
    cost_price: Decimal
    total: Decimal

    class Config:
        from_attributes = True


class PurchasePaymentOut(BaseModel):
    payment_id: int
    amount: Decimal
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PurchaseOut(BaseModel):
    purchase_id: int
    store_id: int
    vendor_name: str
    total_amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    purchase_date: Optional[datetime] = None
    created_by: Optional[str] = None
    items: List[PurchaseItemOut] = []
    payments: List[PurchasePaymentOut] = []

    class Config:
        from_attributes = True
