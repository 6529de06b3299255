from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import relationship
from storeledger.models.base import Base

ENTRY_SALE = "sale"
ENTRY_PAYMENT = "payment"
ENTRY_PURCHASE = "purchase"
ENTRY_ADJUSTMENT = "adjustment"

CUSTOMER_ENTRY_TYPES = (ENTRY_SALE, ENTRY_PAYMENT, ENTRY_ADJUSTMENT)
RETAILER_ENTRY_TYPES = (ENTRY_SALE, ENTRY_PURCHASE, ENTRY_PAYMENT, ENTRY_ADJUSTMENT)


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("store_id", "phone", name="uq_customers_store_phone"),
    )

    customer_id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.store_id"), nullable=False, index=True)

    name = Column(String(150), nullable=False)
    phone = Column(String(30), nullable=False, index=True)
    address = Column(String(255))
    kata_account_id = Column(String(100))
    is_kata_customer = Column(Boolean, nullable=False, default=False)

    # Positive = customer owes the store, negative = store owes the customer
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    credit_limit = Column(Numeric(12, 2), nullable=False, default=0)

    notes = Column(String(1000))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    transactions = relationship(
        "CustomerTransaction",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="CustomerTransaction.entry_id",
    )


class CustomerTransaction(Base):
    __tablename__ = "customer_transactions"

    entry_id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.customer_id"), nullable=False, index=True)
    entry_type = Column(String(20), nullable=False)  # sale/payment/adjustment
    amount = Column(Numeric(12, 2), nullable=False)
    # Plain reference: the sale may be voided later, the entry stays
    sale_id = Column(Integer, nullable=True)
    description = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="transactions")


class Retailer(Base):
    __tablename__ = "retailers"

    retailer_id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.store_id"), nullable=False, index=True)

    name = Column(String(150), nullable=False)
    contact = Column(String(30), nullable=False)
    address = Column(String(255))
    bank_account = Column(String(100))
    bank_name = Column(String(150))
    initial_pay = Column(Numeric(12, 2), nullable=False, default=0)

    # Derived from the transaction log by ledger_service
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    remaining_balance = Column(Numeric(12, 2), nullable=False, default=0)

    notes = Column(String(1000))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    transactions = relationship(
        "RetailerTransaction",
        back_populates="retailer",
        cascade="all, delete-orphan",
        order_by="RetailerTransaction.entry_id",
    )


class RetailerTransaction(Base):
    __tablename__ = "retailer_transactions"

    entry_id = Column(Integer, primary_key=True, index=True)
    retailer_id = Column(Integer, ForeignKey("retailers.retailer_id"), nullable=False, index=True)
    entry_type = Column(String(20), nullable=False)  # sale/purchase/payment/adjustment
    amount = Column(Numeric(12, 2), nullable=False)
    sale_id = Column(Integer, nullable=True)
    purchase_id = Column(Integer, ForeignKey("purchases.purchase_id"), nullable=True)
    description = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    retailer = relationship("Retailer", back_populates="transactions")
