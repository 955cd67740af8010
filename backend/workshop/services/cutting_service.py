"""Workshop ERP - CuttingService: manual cuts and order allocation cuts.

Both operations consume the source board and create its children in the
same flush, so the caller's commit either records the whole cut or none
of it. All checks run before the first write.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from workshop.config import get_settings
from workshop.core.errors import ConflictError, NotFoundError, ValidationError
from workshop.models.inventory import InventoryItem, InventoryStatus
from workshop.models.order import Order, OrderStatus
from workshop.services.cut_engine import CutDirection, Piece, plan_l_shape_cut, plan_manual_cut
from workshop.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

# Orders that may still receive material.
_ALLOCATABLE_ORDER_STATUSES = {OrderStatus.DRAFT.value, OrderStatus.IN_PROGRESS.value}


@dataclass
class CutResult:
    message: str
    source: InventoryItem
    created: list[InventoryItem] = field(default_factory=list)


def remnant_name(original_name: str) -> str:
    # Re-cutting a remnant stacks the prefix; the depth is left visible on purpose.
    return f"{get_settings().REMNANT_NAME_PREFIX}{original_name}"


def _child(source: InventoryItem, piece: Piece, *, name: str, status: InventoryStatus) -> InventoryItem:
    return InventoryItem(
        name=name,
        width=piece.width,
        height=piece.height,
        thickness=source.thickness,
        price=piece.price,
        status=status.value,
        reserved_quantity=Decimal("0"),
        item_definition_id=source.item_definition_id,
        parent_id=source.id,
    )


async def _load_cuttable(db: AsyncSession, item_id: UUID) -> InventoryItem:
    item = await InventoryService.get_by_id(db, item_id, for_update=True)
    if not item:
        raise NotFoundError("Inventory item not found")
    if item.status != InventoryStatus.AVAILABLE.value:
        raise ConflictError(f"Inventory item is not available for cutting (status {item.status})")
    if item.is_reserved:
        raise ConflictError("Inventory item is reserved for an order")
    return item


def _consume(item: InventoryItem) -> None:
    item.status = InventoryStatus.CONSUMED.value
    item.reserved_quantity = Decimal("0")
    item.reserved_for_order_id = None


class CuttingService:

    @staticmethod
    async def manual_cut(
        db: AsyncSession,
        item_id: UUID,
        cut_width: Decimal,
        cut_height: Decimal,
        direction: CutDirection | str,
        save_main_remnant: bool,
        save_secondary_remnant: bool,
    ) -> CutResult:
        """Cut a piece off a board along an operator-chosen line.

        The source is consumed; requested remnants are stored with status
        REMNANT. Cutting the full board just consumes it.
        """
        item = await _load_cuttable(db, item_id)
        plan = plan_manual_cut(item.width, item.height, item.price, cut_width, cut_height, direction)

        _consume(item)

        if plan.consume_whole:
            await db.flush()
            logger.info("Consumed whole item %s ('%s')", item.id, item.name)
            return CutResult(message="Item consumed", source=item)

        created = []
        name = remnant_name(item.name)
        if save_main_remnant and plan.main_remnant:
            created.append(_child(item, plan.main_remnant, name=name, status=InventoryStatus.REMNANT))
        if save_secondary_remnant and plan.secondary_remnant:
            created.append(_child(item, plan.secondary_remnant, name=name, status=InventoryStatus.REMNANT))
        db.add_all(created)
        await db.flush()

        logger.info(
            "Cut %sx%s %s from item %s ('%s'), kept %d remnant(s)",
            cut_width, cut_height, CutDirection(direction).value, item.id, item.name, len(created),
        )
        return CutResult(message="Cut completed", source=item, created=created)

    @staticmethod
    async def allocate_cut(
        db: AsyncSession,
        source_id: UUID,
        target_width: Decimal,
        target_height: Decimal,
        order_id: int,
        quantity: int = 1,
    ) -> CutResult:
        """Cut one exact-size piece for an order from a larger board.

        The piece is created already reserved for the order; the right and top
        offcuts go back to general stock when they are large enough to keep.
        Produces a single piece per call; callers needing more call again.
        """
        target_width = Decimal(str(target_width))
        target_height = Decimal(str(target_height))
        field_errors: dict[str, str] = {}
        if target_width <= 0:
            field_errors["target_width"] = "Width must be a positive number"
        if target_height <= 0:
            field_errors["target_height"] = "Height must be a positive number"
        if quantity != 1:
            field_errors["quantity"] = "An allocation cut produces exactly one piece"
        if field_errors:
            raise ValidationError("Invalid allocation cut", field_errors)

        order = await db.get(Order, order_id)
        if not order:
            raise NotFoundError("Order not found")
        if order.status not in _ALLOCATABLE_ORDER_STATUSES:
            raise ConflictError(f"Cannot allocate material to an order in status {order.status}")

        source = await _load_cuttable(db, source_id)
        if source.width < target_width or source.height < target_height:
            raise ValidationError(
                "Source item is smaller than the requested piece",
                {"source_id": f"{source.width}x{source.height} cannot yield {target_width}x{target_height}"},
            )

        plan = plan_l_shape_cut(
            source.width, source.height, source.price,
            target_width, target_height,
            min_offcut=get_settings().MIN_OFFCUT_MM,
        )

        _consume(source)

        target = _child(source, plan.target, name=source.name, status=InventoryStatus.AVAILABLE)
        target.reserved_quantity = Decimal("1")
        target.reserved_for_order_id = order.id
        offcut_name = remnant_name(source.name)
        offcuts = [
            _child(source, piece, name=offcut_name, status=InventoryStatus.AVAILABLE)
            for piece in plan.offcuts
        ]
        db.add(target)
        db.add_all(offcuts)
        await db.flush()

        logger.info(
            "Allocated %sx%s from item %s to order %s, %d offcut(s) returned to stock",
            target_width, target_height, source.id, order.id, len(offcuts),
        )
        return CutResult(message="Piece cut and reserved for the order", source=source, created=[target, *offcuts])
