"""Workshop ERP - InventoryService: stock intake, listing and the stock queries the engine relies on."""
import logging
from collections.abc import Collection
from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from workshop.core.errors import NotFoundError, ValidationError
from workshop.models.catalog import ItemDefinition
from workshop.models.inventory import InventoryItem, InventoryStatus
from workshop.services.cut_engine import PRECISION_MESSAGE, is_whole_hundredths
from workshop.services.requirements import ByDefinition, ByName, MatchKey

logger = logging.getLogger(__name__)

_OLDEST_FIRST = (InventoryItem.created_at.asc(), InventoryItem.id.asc())


def _match_conditions(key: MatchKey) -> list:
    if isinstance(key, ByDefinition):
        conditions = [InventoryItem.item_definition_id == key.definition_id]
        if key.width is not None and key.height is not None:
            conditions += [InventoryItem.width == key.width, InventoryItem.height == key.height]
        return conditions
    if isinstance(key, ByName):
        return [InventoryItem.name == key.name]
    raise TypeError(f"Unsupported match key: {key!r}")


def _not_in(ids: Collection[UUID]) -> list:
    return [InventoryItem.id.not_in(list(ids))] if ids else []


def _usable_by(order_id: int | None) -> list:
    """AVAILABLE and not reserved for someone else."""
    conditions = [InventoryItem.status == InventoryStatus.AVAILABLE.value]
    if order_id is not None:
        conditions.append(
            or_(InventoryItem.reserved_quantity == 0, InventoryItem.reserved_for_order_id == order_id)
        )
    return conditions


class InventoryService:
    """Physical stock units: intake, lookups and reservation selection."""

    @staticmethod
    async def get_by_id(db: AsyncSession, item_id: UUID, *, for_update: bool = False) -> InventoryItem | None:
        q = select(InventoryItem).where(InventoryItem.id == item_id)
        if for_update:
            q = q.with_for_update()
        result = await db.execute(q)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_items(db: AsyncSession, status: InventoryStatus | str | None = None) -> list[InventoryItem]:
        """Newest first, with the parent loaded for lineage display."""
        q = select(InventoryItem).options(selectinload(InventoryItem.parent))
        if status:
            q = q.where(InventoryItem.status == InventoryStatus(status).value)
        q = q.order_by(InventoryItem.created_at.desc())
        result = await db.execute(q)
        return list(result.scalars().all())

    @staticmethod
    async def add_items(
        db: AsyncSession,
        name: str,
        width: Decimal,
        height: Decimal,
        thickness: Decimal,
        total_price: Decimal,
        quantity: int = 1,
        item_definition_id: int | None = None,
    ) -> list[InventoryItem]:
        """Receive ``quantity`` identical boards; the total price is split evenly."""
        field_errors: dict[str, str] = {}
        if not name or not name.strip():
            field_errors["name"] = "Name is required"
        for field, value in (("width", width), ("height", height), ("thickness", thickness)):
            if Decimal(str(value)) <= 0:
                field_errors[field] = f"{field.capitalize()} must be a positive number"
            elif not is_whole_hundredths(value):
                field_errors[field] = PRECISION_MESSAGE
        if quantity < 1:
            field_errors["quantity"] = "Quantity must be a positive whole number"
        if Decimal(str(total_price)) < 0:
            field_errors["total_price"] = "Total price must not be negative"
        if field_errors:
            raise ValidationError("Invalid inventory item data", field_errors)

        if item_definition_id is not None:
            definition = await db.get(ItemDefinition, item_definition_id)
            if not definition:
                raise NotFoundError("Item definition not found")

        unit_price = Decimal(str(total_price)) / quantity
        items = []
        for _ in range(quantity):
            item = InventoryItem(
                name=name.strip(),
                width=Decimal(str(width)),
                height=Decimal(str(height)),
                thickness=Decimal(str(thickness)),
                price=unit_price,
                status=InventoryStatus.AVAILABLE.value,
                reserved_quantity=Decimal("0"),
                item_definition_id=item_definition_id,
            )
            db.add(item)
            items.append(item)
        await db.flush()
        logger.info("Received %s x '%s' (%sx%sx%s)", quantity, name, width, height, thickness)
        return items

    # ── Board selection for cuts ────────────────────────────────────────────

    @staticmethod
    async def find_available_matching_or_larger(
        db: AsyncSession,
        definition_id: int,
        min_width: Decimal,
        min_height: Decimal,
    ) -> list[InventoryItem]:
        """Unreserved AVAILABLE boards big enough for the piece, smallest first."""
        result = await db.execute(
            select(InventoryItem)
            .where(
                InventoryItem.item_definition_id == definition_id,
                InventoryItem.status == InventoryStatus.AVAILABLE.value,
                InventoryItem.reserved_quantity == 0,
                InventoryItem.width >= min_width,
                InventoryItem.height >= min_height,
            )
            .order_by(InventoryItem.width * InventoryItem.height, *_OLDEST_FIRST)
        )
        return list(result.scalars().all())

    # ── Availability classification ─────────────────────────────────────────

    @staticmethod
    async def find_available(
        db: AsyncSession, definition_id: int, *, order_id: int | None = None
    ) -> list[InventoryItem]:
        result = await db.execute(
            select(InventoryItem)
            .where(InventoryItem.item_definition_id == definition_id, *_usable_by(order_id))
            .order_by(*_OLDEST_FIRST)
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_available_exact(
        db: AsyncSession,
        definition_id: int,
        width: Decimal,
        height: Decimal,
        *,
        order_id: int | None = None,
    ) -> list[InventoryItem]:
        result = await db.execute(
            select(InventoryItem)
            .where(
                InventoryItem.item_definition_id == definition_id,
                InventoryItem.width == width,
                InventoryItem.height == height,
                *_usable_by(order_id),
            )
            .order_by(*_OLDEST_FIRST)
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_available_larger(
        db: AsyncSession,
        definition_id: int,
        width: Decimal,
        height: Decimal,
        *,
        order_id: int | None = None,
    ) -> list[InventoryItem]:
        """Boards that could be cut down to width x height (exact matches excluded)."""
        result = await db.execute(
            select(InventoryItem)
            .where(
                InventoryItem.item_definition_id == definition_id,
                InventoryItem.width >= width,
                InventoryItem.height >= height,
                or_(InventoryItem.width != width, InventoryItem.height != height),
                *_usable_by(order_id),
            )
            .order_by(*_OLDEST_FIRST)
        )
        return list(result.scalars().all())

    # ── Reservation bookkeeping ─────────────────────────────────────────────

    @staticmethod
    async def find_available_unreserved(db: AsyncSession, key: MatchKey, limit: int) -> list[InventoryItem]:
        """Oldest AVAILABLE, unreserved units for a key, locked for update."""
        result = await db.execute(
            select(InventoryItem)
            .where(
                *_match_conditions(key),
                InventoryItem.status == InventoryStatus.AVAILABLE.value,
                InventoryItem.reserved_quantity == 0,
            )
            .order_by(*_OLDEST_FIRST)
            .limit(limit)
            .with_for_update()
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_available_or_reserved(
        db: AsyncSession, key: MatchKey, order_id: int, limit: int, *, exclude: Collection[UUID] = ()
    ) -> list[InventoryItem]:
        """Reserved units for a key: the order's own first, then ownerless ones, oldest first.

        Ownerless reservations come from data written before reservations
        recorded their order. Units in ``exclude`` are skipped.
        """
        own_first = case((InventoryItem.reserved_for_order_id == order_id, 0), else_=1)
        result = await db.execute(
            select(InventoryItem)
            .where(
                *_match_conditions(key),
                *_not_in(exclude),
                InventoryItem.status == InventoryStatus.AVAILABLE.value,
                InventoryItem.reserved_quantity > 0,
                or_(
                    InventoryItem.reserved_for_order_id == order_id,
                    InventoryItem.reserved_for_order_id.is_(None),
                ),
            )
            .order_by(own_first, *_OLDEST_FIRST)
            .limit(limit)
            .with_for_update()
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_held(
        db: AsyncSession, key: MatchKey, order_id: int, *, exclude: Collection[UUID] = ()
    ) -> list[InventoryItem]:
        """AVAILABLE units for a key already reserved for the order, oldest first."""
        result = await db.execute(
            select(InventoryItem)
            .where(
                *_match_conditions(key),
                *_not_in(exclude),
                InventoryItem.status == InventoryStatus.AVAILABLE.value,
                InventoryItem.reserved_for_order_id == order_id,
                InventoryItem.reserved_quantity > 0,
            )
            .order_by(*_OLDEST_FIRST)
            .with_for_update()
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_held_by_order(db: AsyncSession, order_id: int) -> list[InventoryItem]:
        result = await db.execute(
            select(InventoryItem)
            .where(
                InventoryItem.reserved_for_order_id == order_id,
                InventoryItem.reserved_quantity > 0,
            )
            .order_by(*_OLDEST_FIRST)
            .with_for_update()
        )
        return list(result.scalars().all())
