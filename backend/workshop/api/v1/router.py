"""Workshop ERP - API v1 router aggregation."""
from fastapi import APIRouter

from workshop.api.v1.endpoints import inventory, orders

api_router = APIRouter()

api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
