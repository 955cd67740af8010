"""Workshop ERP - AvailabilityService: per-order material check (ready / cut needed / missing)."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from workshop.core.errors import NotFoundError
from workshop.models.order import Order, OrderItem
from workshop.models.product import Product, ProductIngredient
from workshop.services.inventory_service import InventoryService
from workshop.services.requirements import (
    MaterialRequirement,
    aggregate_definition_demand,
    classify,
)


def order_with_recipes():
    """Loader options for an order down to each recipe line's material."""
    return (
        selectinload(Order.items)
        .selectinload(OrderItem.product)
        .selectinload(Product.ingredients)
        .options(
            selectinload(ProductIngredient.item_definition),
            selectinload(ProductIngredient.inventory_item),
        ),
    )


class AvailabilityService:
    """Read-only; safe to call repeatedly, e.g. after every allocation cut."""

    @staticmethod
    async def compute_availability(db: AsyncSession, order_id: int) -> list[MaterialRequirement]:
        result = await db.execute(select(Order).where(Order.id == order_id).options(*order_with_recipes()))
        order = result.scalar_one_or_none()
        if not order:
            raise NotFoundError("Order not found")

        requirements = []
        for demand in aggregate_definition_demand(order):
            definition = demand.definition
            if demand.is_dimensional:
                exact = await InventoryService.find_available_exact(
                    db, definition.id, demand.width, demand.height, order_id=order.id
                )
                larger = await InventoryService.find_available_larger(
                    db, definition.id, demand.width, demand.height, order_id=order.id
                )
                exact_count, larger_count = len(exact), len(larger)
            else:
                exact_count = len(await InventoryService.find_available(db, definition.id, order_id=order.id))
                larger_count = 0

            requirements.append(
                MaterialRequirement(
                    item_definition_id=definition.id,
                    definition_name=definition.name,
                    category=demand.category,
                    quantity_required=demand.quantity,
                    width=demand.width,
                    height=demand.height,
                    status=classify(demand, exact_count, larger_count),
                    exact_count=exact_count,
                    larger_count=larger_count if demand.is_dimensional else None,
                )
            )
        return requirements
