"""Workshop ERP - Inventory schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class InventoryItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    width: Decimal = Field(..., gt=0, decimal_places=2, description="Width in mm")
    height: Decimal = Field(..., gt=0, decimal_places=2, description="Height in mm")
    thickness: Decimal = Field(..., gt=0, decimal_places=2, description="Thickness in mm")
    quantity: int = Field(1, ge=1, description="Number of identical boards received")
    total_price: Decimal = Field(..., ge=0, description="Price for the whole batch")
    item_definition_id: int | None = None


class InventoryItemResponse(BaseModel):
    id: UUID
    name: str
    width: Decimal
    height: Decimal
    thickness: Decimal
    price: Decimal
    status: str
    reserved_quantity: Decimal
    reserved_for_order_id: int | None = None
    item_definition_id: int | None = None
    parent_id: UUID | None = None
    parent_name: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class CandidateBoardResponse(BaseModel):
    id: UUID
    name: str
    width: Decimal
    height: Decimal
    thickness: Decimal
    price: Decimal

    class Config:
        from_attributes = True


class ManualCutRequest(BaseModel):
    cut_width: Decimal = Field(..., gt=0, decimal_places=2)
    cut_height: Decimal = Field(..., gt=0, decimal_places=2)
    direction: Literal["horizontal", "vertical"]
    save_main_remnant: bool = True
    save_secondary_remnant: bool = True


class AllocationCutRequest(BaseModel):
    order_id: int
    target_width: Decimal = Field(..., gt=0, decimal_places=2)
    target_height: Decimal = Field(..., gt=0, decimal_places=2)
    quantity: int = Field(1, ge=1, le=1, description="One piece per cut; call again for more")


class CutResultResponse(BaseModel):
    message: str
    source_id: UUID
    created: list[InventoryItemResponse] = []
