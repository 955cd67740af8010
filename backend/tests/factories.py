"""Row builders for tests. Each helper flushes so ids are assigned."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workshop.models import (
    InventoryItem,
    InventoryStatus,
    ItemCategory,
    ItemDefinition,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ProductIngredient,
)


def D(value) -> Decimal:
    return Decimal(str(value))


async def settle(db: AsyncSession) -> None:
    """Commit setup rows and detach them so services load fresh state."""
    await db.commit()
    db.expunge_all()


async def make_definition(
    db: AsyncSession, name: str = "Ply18", category: ItemCategory = ItemCategory.SHEET_MATERIAL
) -> ItemDefinition:
    definition = ItemDefinition(name=name, category=category.value)
    db.add(definition)
    await db.flush()
    return definition


async def make_item(
    db: AsyncSession,
    *,
    name: str = "Ply18 board",
    width=1000,
    height=2000,
    thickness=18,
    price=1000,
    definition: ItemDefinition | None = None,
    status: InventoryStatus = InventoryStatus.AVAILABLE,
    reserved=0,
    reserved_for: Order | None = None,
    created_at: datetime | None = None,
) -> InventoryItem:
    item = InventoryItem(
        name=name,
        width=D(width),
        height=D(height),
        thickness=D(thickness),
        price=D(price),
        status=status.value,
        reserved_quantity=D(reserved),
        reserved_for_order_id=reserved_for.id if reserved_for else None,
        item_definition_id=definition.id if definition else None,
    )
    if created_at is not None:
        item.created_at = created_at
    db.add(item)
    await db.flush()
    return item


def ingredient(
    definition: ItemDefinition | None = None,
    quantity=1,
    width=None,
    height=None,
    legacy_item: InventoryItem | None = None,
) -> ProductIngredient:
    return ProductIngredient(
        item_definition_id=definition.id if definition else None,
        inventory_item_id=legacy_item.id if legacy_item else None,
        quantity=D(quantity),
        width=D(width) if width is not None else None,
        height=D(height) if height is not None else None,
    )


async def make_product(
    db: AsyncSession, name: str = "Bookshelf", ingredients: list[ProductIngredient] | None = None, price=2500
) -> Product:
    product = Product(name=name, selling_price=D(price), ingredients=ingredients or [])
    db.add(product)
    await db.flush()
    return product


async def make_order(
    db: AsyncSession,
    lines: list[tuple[Product, int]] | None = None,
    *,
    name: str = "Kitchen job",
    status: OrderStatus = OrderStatus.DRAFT,
) -> Order:
    order = Order(
        name=name,
        status=status.value,
        items=[
            OrderItem(product_id=product.id, quantity=quantity, unit_price=product.selling_price)
            for product, quantity in (lines or [])
        ],
    )
    db.add(order)
    await db.flush()
    return order


async def get_item(db: AsyncSession, item_id) -> InventoryItem:
    return await db.get(InventoryItem, item_id)


async def children_of(db: AsyncSession, item_id) -> list[InventoryItem]:
    result = await db.execute(
        select(InventoryItem)
        .where(InventoryItem.parent_id == item_id)
        .order_by((InventoryItem.width * InventoryItem.height).desc())
    )
    return list(result.scalars().all())


async def count_items(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(InventoryItem.id)))).scalar_one()


async def assert_reservations_consistent(db: AsyncSession) -> None:
    """Per (definition, width, height) group: reserved <= number of AVAILABLE units."""
    result = await db.execute(
        select(
            InventoryItem.item_definition_id,
            InventoryItem.width,
            InventoryItem.height,
            func.coalesce(func.sum(InventoryItem.reserved_quantity), 0),
            func.count(InventoryItem.id),
        )
        .where(InventoryItem.status == InventoryStatus.AVAILABLE.value)
        .group_by(InventoryItem.item_definition_id, InventoryItem.width, InventoryItem.height)
    )
    for definition_id, width, height, reserved, available in result.all():
        assert D(reserved) <= available, f"group {definition_id} {width}x{height} over-reserved"

    leaked = await db.execute(
        select(func.count(InventoryItem.id)).where(
            InventoryItem.status != InventoryStatus.AVAILABLE.value,
            InventoryItem.reserved_quantity > 0,
        )
    )
    assert leaked.scalar_one() == 0
