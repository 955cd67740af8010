"""catalog, inventory, products and orders

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. Catalog ───────────────────────────────────────────────────────────
    op.create_table(
        "item_definitions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("properties", JSONB(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("name", name="uq_item_definitions_name"),
        sa.CheckConstraint("category IN ('SHEET_MATERIAL', 'COMPONENT', 'OTHER')", name="ck_item_definitions_category"),
    )
    op.create_index("ix_item_definitions_category", "item_definitions", ["category"])

    # ── 2. Orders (referenced by inventory reservations) ─────────────────────
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="DRAFT"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("status IN ('DRAFT', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')", name="ck_orders_status"),
    )
    op.create_index("ix_orders_status", "orders", ["status"])
    op.create_index("ix_orders_created_at", "orders", ["created_at"])

    # ── 3. Inventory ─────────────────────────────────────────────────────────
    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("width", sa.Numeric(10, 2), nullable=False),
        sa.Column("height", sa.Numeric(10, 2), nullable=False),
        sa.Column("thickness", sa.Numeric(10, 2), nullable=False),
        sa.Column("price", sa.Numeric(14, 4), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="AVAILABLE"),
        sa.Column("reserved_quantity", sa.Numeric(10, 4), nullable=False, server_default="0"),
        sa.Column("reserved_for_order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="SET NULL"), nullable=True),
        sa.Column("item_definition_id", sa.Integer(), sa.ForeignKey("item_definitions.id", ondelete="SET NULL"), nullable=True),
        sa.Column("parent_id", sa.Uuid(), sa.ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("status IN ('AVAILABLE', 'CONSUMED', 'REMNANT')", name="ck_inventory_items_status"),
        sa.CheckConstraint("reserved_quantity >= 0 AND reserved_quantity <= 1", name="ck_inventory_items_reserved"),
    )
    op.create_index("ix_inventory_items_status", "inventory_items", ["status"])
    op.create_index("ix_inventory_items_created_at", "inventory_items", ["created_at"])
    op.create_index("ix_inventory_items_parent_id", "inventory_items", ["parent_id"])
    op.create_index("ix_inventory_items_item_definition_id", "inventory_items", ["item_definition_id"])
    op.create_index("ix_inventory_items_reserved_for_order_id", "inventory_items", ["reserved_for_order_id"])

    # ── 4. Products and recipes ──────────────────────────────────────────────
    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("selling_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("production_steps", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_products_name", "products", ["name"])

    op.create_table(
        "product_ingredients",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("product_id", sa.Uuid(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("item_definition_id", sa.Integer(), sa.ForeignKey("item_definitions.id", ondelete="CASCADE"), nullable=True),
        sa.Column("inventory_item_id", sa.Uuid(), sa.ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=True),
        sa.Column("quantity", sa.Numeric(12, 4), nullable=False),
        sa.Column("width", sa.Numeric(10, 2), nullable=True),
        sa.Column("height", sa.Numeric(10, 2), nullable=True),
    )
    op.create_index("ix_product_ingredients_product_id", "product_ingredients", ["product_id"])
    op.create_index("ix_product_ingredients_item_definition_id", "product_ingredients", ["item_definition_id"])
    op.create_index("ix_product_ingredients_inventory_item_id", "product_ingredients", ["inventory_item_id"])

    # ── 5. Order lines ───────────────────────────────────────────────────────
    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.Uuid(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.UniqueConstraint("order_id", "product_id", name="uq_order_items_order_product"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])
    op.create_index("ix_order_items_product_id", "order_items", ["product_id"])


def downgrade() -> None:
    op.drop_index("ix_order_items_product_id", table_name="order_items")
    op.drop_index("ix_order_items_order_id", table_name="order_items")
    op.drop_table("order_items")

    op.drop_index("ix_product_ingredients_inventory_item_id", table_name="product_ingredients")
    op.drop_index("ix_product_ingredients_item_definition_id", table_name="product_ingredients")
    op.drop_index("ix_product_ingredients_product_id", table_name="product_ingredients")
    op.drop_table("product_ingredients")

    op.drop_index("ix_products_name", table_name="products")
    op.drop_table("products")

    op.drop_index("ix_inventory_items_reserved_for_order_id", table_name="inventory_items")
    op.drop_index("ix_inventory_items_item_definition_id", table_name="inventory_items")
    op.drop_index("ix_inventory_items_parent_id", table_name="inventory_items")
    op.drop_index("ix_inventory_items_created_at", table_name="inventory_items")
    op.drop_index("ix_inventory_items_status", table_name="inventory_items")
    op.drop_table("inventory_items")

    op.drop_index("ix_orders_created_at", table_name="orders")
    op.drop_index("ix_orders_status", table_name="orders")
    op.drop_table("orders")

    op.drop_index("ix_item_definitions_category", table_name="item_definitions")
    op.drop_table("item_definitions")
