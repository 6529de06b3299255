from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

SaleType = Literal["invoice", "quotation", "estimate"]


class SaleItemIn(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    discount: Decimal = Decimal("0")
    total: Decimal = Field(..., ge=0)


class SaleCreate(BaseModel):
    salesman: str = Field(..., min_length=1)
    items: List[SaleItemIn]
    subtotal: Optional[Decimal] = None
    invoice_discount: Decimal = Decimal("0")
    total_amount: Decimal = Field(..., ge=0)
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    sale_type: SaleType = "invoice"

    customer_id: Optional[int] = None
    retailer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    reference_no: Optional[str] = None
    remarks: Optional[str] = None
    due_date: Optional[date] = None
    sale_date: Optional[datetime] = None


class SaleUpdate(BaseModel):
    """Metadata only; line items are immutable once recorded."""

    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    reference_no: Optional[str] = None
    remarks: Optional[str] = None
    due_date: Optional[date] = None
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)


class StockAllocationOut(BaseModel):
    warehouse_id: int
    quantity: int

    class Config:
        from_attributes = True


class SaleItemOut(BaseModel):
    sale_item_id: int
    product_id: int
    quantity: int
    cost_price: Decimal
    price: Decimal
    discount: Decimal
    total: Decimal
    allocations: List[StockAllocationOut] = []

    class Config:
        from_attributes = True


class SaleOut(BaseModel):
    sale_id: int
    store_id: int
    salesman: str
    invoice_id: str
    sale_type: str
    subtotal: Decimal
    invoice_discount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    payment_status: str
    customer_id: Optional[int] = None
    retailer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    reference_no: Optional[str] = None
    remarks: Optional[str] = None
    due_date: Optional[date] = None
    sale_date: Optional[datetime] = None
    items: List[SaleItemOut] = []

    class Config:
        from_attributes = True
