from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

EntryType = Literal["sale", "payment", "purchase", "adjustment"]


class LedgerEntryOut(BaseModel):
    entry_id: int
    entry_type: str
    amount: Decimal
    sale_id: Optional[int] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RetailerEntryOut(LedgerEntryOut):
    purchase_id: Optional[int] = None


class BalanceAdjustment(BaseModel):
    entry_type: EntryType
    amount: Decimal
    description: Optional[str] = None
    sale_id: Optional[int] = None
    purchase_id: Optional[int] = None


class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=3, examples=["03001234567"])
    address: Optional[str] = None
    kata_account_id: Optional[str] = None
    credit_limit: Decimal = Decimal("0")
    notes: Optional[str] = None


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    kata_account_id: Optional[str] = None
    credit_limit: Optional[Decimal] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class CustomerOut(CustomerBase):
    customer_id: int
    store_id: int
    is_kata_customer: bool
    balance: Decimal
    is_active: bool
    transactions: List[LedgerEntryOut] = []

    class Config:
        from_attributes = True


class RetailerBase(BaseModel):
    name: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=1)
    address: Optional[str] = None
    bank_account: Optional[str] = None
    bank_name: Optional[str] = None
    notes: Optional[str] = None


class RetailerCreate(RetailerBase):
    initial_pay: Decimal = Field(default=Decimal("0"), ge=0)


class RetailerUpdate(BaseModel):
    name: Optional[str] = None
    contact: Optional[str] = None
    address: Optional[str] = None
    bank_account: Optional[str] = None
    bank_name: Optional[str] = None
    notes: Optional[str] = None


class RetailerPaymentIn(BaseModel):
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = None
    sale_id: Optional[int] = None


class RetailerOut(RetailerBase):
    retailer_id: int
    store_id: int
    initial_pay: Decimal
    balance: Decimal
    paid_amount: Decimal
    remaining_balance: Decimal
    is_active: bool
    transactions: List[RetailerEntryOut] = []

    class Config:
        from_attributes = True


class RetailerSummaryOut(RetailerOut):
    total_sales: Decimal
    total_purchases: Decimal
    total_debit: Decimal
    total_paid: Decimal
