from .base import Base
from .store import Store, Warehouse
from .catalog import Product, Inventory
from .sale import Sale, SaleItem, StockAllocation
from .purchase import Purchase, PurchaseItem, PurchasePayment
from .party import Customer, CustomerTransaction, Retailer, RetailerTransaction
