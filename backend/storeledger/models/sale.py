from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from storeledger.models.base import Base

SALE_TYPE_INVOICE = "invoice"
SALE_TYPE_QUOTATION = "quotation"
SALE_TYPE_ESTIMATE = "estimate"
SALE_TYPES = (SALE_TYPE_INVOICE, SALE_TYPE_QUOTATION, SALE_TYPE_ESTIMATE)

PAYMENT_PAID = "paid"
PAYMENT_PARTIAL = "partial"
PAYMENT_UNPAID = "unpaid"


class Sale(Base):
    __tablename__ = "sales"

    sale_id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.store_id"), nullable=False, index=True)
    salesman = Column(String(150), nullable=False)

    invoice_id = Column(String(40), nullable=False, unique=True)
    sale_type = Column(String(20), nullable=False, default=SALE_TYPE_INVOICE)  # invoice/quotation/estimate

    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    invoice_discount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_status = Column(String(20), nullable=False, default=PAYMENT_UNPAID)  # paid/partial/unpaid

    customer_id = Column(Integer, ForeignKey("customers.customer_id"), nullable=True, index=True)
    retailer_id = Column(Integer, ForeignKey("retailers.retailer_id"), nullable=True, index=True)

    # Walk-in details printed on receipts
    customer_name = Column(String(150))
    customer_phone = Column(String(30))
    customer_address = Column(String(255))
    reference_no = Column(String(100))
    remarks = Column(String(500))
    due_date = Column(Date)

    sale_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.sale_item_id",
    )


class SaleItem(Base):
    __tablename__ = "sale_items"

    sale_item_id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.sale_id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.product_id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    # Product cost at the time of sale; never refreshed afterwards
    cost_price = Column(Numeric(12, 2), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")
    allocations = relationship("StockAllocation", back_populates="item", cascade="all, delete-orphan")


class StockAllocation(Base):
    __tablename__ = "stock_allocations"

    allocation_id = Column(Integer, primary_key=True, index=True)
    sale_item_id = Column(Integer, ForeignKey("sale_items.sale_item_id"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.warehouse_id"), nullable=False)
    quantity = Column(Integer, nullable=False)

    item = relationship("SaleItem", back_populates="allocations")
    warehouse = relationship("Warehouse")
