"""Workshop ERP - Product and recipe (bill of materials) models."""
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop.db.base import Base
from workshop.models.catalog import ItemDefinition, utcnow
from workshop.models.inventory import InventoryItem


class Product(Base):
    """A finished good with its recipe."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    selling_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    production_steps: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    ingredients: Mapped[list["ProductIngredient"]] = relationship(
        "ProductIngredient", back_populates="product", cascade="all, delete-orphan"
    )


class ProductIngredient(Base):
    """One recipe row.

    New rows reference a catalog definition; rows written before the catalog
    existed reference a concrete stock unit instead (``inventory_item_id``).
    """

    __tablename__ = "product_ingredients"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), index=True)
    item_definition_id: Mapped[int | None] = mapped_column(
        ForeignKey("item_definitions.id", ondelete="CASCADE"), nullable=True, index=True
    )
    inventory_item_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=True, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    width: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    height: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    product: Mapped["Product"] = relationship("Product", back_populates="ingredients")
    item_definition: Mapped[ItemDefinition | None] = relationship(ItemDefinition)
    inventory_item: Mapped[InventoryItem | None] = relationship(InventoryItem)
