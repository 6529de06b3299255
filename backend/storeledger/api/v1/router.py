from fastapi import APIRouter

from storeledger.api.v1 import (
    customer_routes,
    health,
    inventory_routes,
    product_routes,
    purchase_routes,
    retailer_routes,
    sale_routes,
    store_routes,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(store_routes.router, tags=["Stores"])
api_router.include_router(product_routes.router, prefix="/products", tags=["Products"])
api_router.include_router(inventory_routes.router, prefix="/inventory", tags=["Inventory"])
api_router.include_router(sale_routes.router, prefix="/sales", tags=["Sales"])
api_router.include_router(purchase_routes.router, prefix="/purchases", tags=["Purchases"])
api_router.include_router(customer_routes.router, prefix="/customers", tags=["Customers"])
api_router.include_router(retailer_routes.router, prefix="/retailers", tags=["Retailers"])
