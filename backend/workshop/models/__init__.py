"""Workshop ERP - SQLAlchemy models."""
from workshop.models.catalog import ItemCategory, ItemDefinition
from workshop.models.inventory import InventoryItem, InventoryStatus
from workshop.models.order import Order, OrderItem, OrderStatus
from workshop.models.product import Product, ProductIngredient

__all__ = [
    "ItemCategory", "ItemDefinition",
    "InventoryItem", "InventoryStatus",
    "Product", "ProductIngredient",
    "Order", "OrderItem", "OrderStatus",
]
