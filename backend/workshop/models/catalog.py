"""Workshop ERP - Catalog (item definition) models."""
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from workshop.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ItemCategory(str, Enum):
    """Closed set of catalog categories.

    The category decides whether a recipe line carries a required size and
    whether stock is matched by dimensions or simply counted.
    """

    SHEET_MATERIAL = "SHEET_MATERIAL"
    COMPONENT = "COMPONENT"
    OTHER = "OTHER"

    @property
    def is_dimensional(self) -> bool:
        return self is ItemCategory.SHEET_MATERIAL


class ItemDefinition(Base):
    """A material or part type, e.g. "18mm Birch Ply"."""

    __tablename__ = "item_definitions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    properties: Mapped[dict | None] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def category_kind(self) -> ItemCategory:
        return ItemCategory(self.category)
