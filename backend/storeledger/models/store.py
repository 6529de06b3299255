from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from storeledger.models.base import Base


class Store(Base):
    __tablename__ = "stores"

    store_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    location = Column(String(255))
    contact_number = Column(String(30))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Warehouse(Base):
    __tablename__ = "warehouses"

    warehouse_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    location = Column(String(255))
    contact_person = Column(String(150))
    phone = Column(String(30))

    # Receipt printer attached to this stock point
    printer_enabled = Column(Boolean, nullable=False, default=False)
    printer_endpoint = Column(String(500))

    # Optional: warehouses are shared across stores unless pinned
    store_id = Column(Integer, ForeignKey("stores.store_id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
