"""Workshop ERP - Order status and material availability schemas."""
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from workshop.models.catalog import ItemCategory
from workshop.models.order import OrderStatus
from workshop.services.requirements import AvailabilityStatus


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    id: int
    product_id: UUID
    quantity: int
    unit_price: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    formatted_id: str
    name: str
    status: OrderStatus
    items: list[OrderItemResponse] = []

    class Config:
        from_attributes = True


class MaterialRequirementResponse(BaseModel):
    item_definition_id: int
    definition_name: str
    category: ItemCategory
    quantity_required: Decimal
    width: Decimal | None = None
    height: Decimal | None = None
    status: AvailabilityStatus
    exact_count: int | None = None
    larger_count: int | None = None

    class Config:
        from_attributes = True


class ReservationShortfallResponse(BaseModel):
    material: str
    required: Decimal
    covered: Decimal
    missing: Decimal


class OrderTransitionResponse(BaseModel):
    order: OrderResponse
    previous_status: OrderStatus
    message: str
    shortfalls: list[ReservationShortfallResponse] = []
