from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class StoreBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Main Street Branch"])
    location: Optional[str] = Field(default=None, examples=["Lahore"])
    contact_number: Optional[str] = None


class StoreCreate(StoreBase):
    pass


class StoreOut(StoreBase):
    store_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WarehouseBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Central Godown"])
    location: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    printer_enabled: bool = False
    printer_endpoint: Optional[str] = Field(default=None, examples=["http://10.0.0.12:9100/print"])
    store_id: Optional[int] = None


class WarehouseCreate(WarehouseBase):
    pass


class WarehouseUpdate(BaseModel):
    name: Optional[str] = None
    location: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    printer_enabled: Optional[bool] = None
    printer_endpoint: Optional[str] = None


class WarehouseOut(WarehouseBase):
    warehouse_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
