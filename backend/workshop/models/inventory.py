"""Workshop ERP - Inventory (physical stock unit) models."""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop.db.base import Base
from workshop.models.catalog import utcnow


class InventoryStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    CONSUMED = "CONSUMED"
    REMNANT = "REMNANT"


class InventoryItem(Base):
    """One physical piece of material. Never deleted; cuts consume it and create children."""

    __tablename__ = "inventory_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    width: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    height: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    thickness: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=InventoryStatus.AVAILABLE.value, index=True)
    # 0 or 1 in practice: is this specific piece earmarked for an order.
    reserved_quantity: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False, default=Decimal("0"))
    reserved_for_order_id: Mapped[int | None] = mapped_column(
        ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True
    )
    item_definition_id: Mapped[int | None] = mapped_column(
        ForeignKey("item_definitions.id", ondelete="SET NULL"), nullable=True, index=True
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    parent: Mapped["InventoryItem | None"] = relationship("InventoryItem", remote_side=[id])

    @property
    def is_reserved(self) -> bool:
        return self.reserved_quantity > 0
