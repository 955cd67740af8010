"""Workshop ERP - OrderStatusService: status transitions with stock reservation side effects.

Each transition runs inside the caller's transaction: the status write and
every reserve / consume / release update are flushed together and commit or
roll back as one unit.

    DRAFT       -> IN_PROGRESS        reserve
    IN_PROGRESS -> COMPLETED          consume
    IN_PROGRESS -> DRAFT | CANCELLED  release
    COMPLETED   -> IN_PROGRESS        reserve again
    CANCELLED   -> DRAFT              nothing to do

CANCELLED is reachable from every status.
"""
import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workshop.core.errors import ConflictError, NotFoundError, ValidationError
from workshop.models.inventory import InventoryStatus
from workshop.models.order import Order, OrderStatus
from workshop.services.availability_service import order_with_recipes
from workshop.services.inventory_service import InventoryService
from workshop.services.requirements import ByDefinition, MatchKey, aggregate_reservation_demand

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.DRAFT: {OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED},
    OrderStatus.IN_PROGRESS: {OrderStatus.COMPLETED, OrderStatus.DRAFT, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: {OrderStatus.CANCELLED, OrderStatus.IN_PROGRESS},
    OrderStatus.CANCELLED: {OrderStatus.DRAFT},
}

_ZERO = Decimal("0")
_ONE = Decimal("1")


class InventoryEffect(str, Enum):
    NONE = "none"
    RESERVE = "reserve"
    CONSUME = "consume"
    RELEASE = "release"


@dataclass(frozen=True)
class ReservationShortfall:
    """A material group the transition could not fully reserve."""

    key: MatchKey
    required: Decimal
    covered: Decimal

    @property
    def missing(self) -> Decimal:
        return self.required - self.covered


@dataclass
class TransitionResult:
    order: Order
    previous_status: OrderStatus
    message: str
    shortfalls: list[ReservationShortfall] = field(default_factory=list)


def is_transition_allowed(current: OrderStatus, target: OrderStatus) -> bool:
    if target is OrderStatus.CANCELLED:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, set())


def inventory_effect(current: OrderStatus, target: OrderStatus) -> InventoryEffect:
    if target is OrderStatus.IN_PROGRESS and current in (OrderStatus.DRAFT, OrderStatus.COMPLETED):
        return InventoryEffect.RESERVE
    if current is OrderStatus.IN_PROGRESS and target is OrderStatus.COMPLETED:
        return InventoryEffect.CONSUME
    if current is OrderStatus.IN_PROGRESS and target in (OrderStatus.DRAFT, OrderStatus.CANCELLED):
        return InventoryEffect.RELEASE
    return InventoryEffect.NONE


def transition_message(current: OrderStatus, target: OrderStatus) -> str:
    if current is OrderStatus.CANCELLED and target is OrderStatus.DRAFT:
        return "Order restored to draft"
    if current is OrderStatus.COMPLETED and target is OrderStatus.IN_PROGRESS:
        return "Order reopened"
    return {
        OrderStatus.IN_PROGRESS: "Order started",
        OrderStatus.COMPLETED: "Order completed",
        OrderStatus.DRAFT: "Order returned to draft",
        OrderStatus.CANCELLED: "Order cancelled",
    }[target]


def _narrowest_first(demand: dict[MatchKey, Decimal]) -> list[tuple[MatchKey, Decimal]]:
    """Sized keys before whole-definition keys, which also match the sized units."""
    return sorted(
        demand.items(),
        key=lambda entry: isinstance(entry[0], ByDefinition) and entry[0].width is None,
    )


class OrderStatusService:

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int, *, for_update: bool = False) -> Order | None:
        q = select(Order).where(Order.id == order_id).options(*order_with_recipes())
        if for_update:
            q = q.with_for_update()
        result = await db.execute(q)
        return result.scalar_one_or_none()

    @staticmethod
    async def transition(db: AsyncSession, order_id: int, target_status: OrderStatus | str) -> TransitionResult:
        try:
            target = OrderStatus(target_status)
        except ValueError:
            raise ValidationError(f"Unknown order status: {target_status}", {"status": "Invalid order status"})
        order = await OrderStatusService.get_order(db, order_id, for_update=True)
        if not order:
            raise NotFoundError("Order not found")

        current = OrderStatus(order.status)
        if not is_transition_allowed(current, target):
            logger.info("Rejected order %s transition %s -> %s", order.id, current.value, target.value)
            raise ConflictError(f"Cannot change order status from {current.value} to {target.value}")

        demand = aggregate_reservation_demand(order)
        shortfalls: list[ReservationShortfall] = []
        effect = inventory_effect(current, target)
        if effect is InventoryEffect.RESERVE:
            shortfalls = await OrderStatusService._reserve(db, order, demand)
        elif effect is InventoryEffect.CONSUME:
            await OrderStatusService._consume(db, order, demand)
        elif effect is InventoryEffect.RELEASE:
            await OrderStatusService._release(db, order, demand)

        if target is OrderStatus.CANCELLED:
            await OrderStatusService._release_all_held(db, order)

        order.status = target.value
        await db.flush()

        logger.info(
            "Order %s: %s -> %s (%s, %d shortfall(s))",
            order.id, current.value, target.value, effect.value, len(shortfalls),
        )
        return TransitionResult(
            order=order,
            previous_status=current,
            message=transition_message(current, target),
            shortfalls=shortfalls,
        )

    @staticmethod
    async def _reserve(
        db: AsyncSession, order: Order, demand: dict[MatchKey, Decimal]
    ) -> list[ReservationShortfall]:
        """Best effort: reserve what exists and report the rest."""
        shortfalls = []
        claimed: set[UUID] = set()
        for key, required in _narrowest_first(demand):
            remaining = required
            # Pieces already earmarked for this order (allocation cuts) count first.
            for unit in await InventoryService.find_held(db, key, order.id, exclude=claimed):
                if remaining <= _ZERO:
                    break
                claimed.add(unit.id)
                remaining -= unit.reserved_quantity
            if remaining <= _ZERO:
                continue

            units = await InventoryService.find_available_unreserved(db, key, math.ceil(remaining))
            for unit in units:
                if remaining <= _ZERO:
                    break
                amount = min(_ONE, remaining)
                unit.reserved_quantity = amount
                unit.reserved_for_order_id = order.id
                claimed.add(unit.id)
                remaining -= amount
            await db.flush()

            if remaining > _ZERO:
                logger.warning(
                    "Not enough stock to reserve %s for order %s: required %s, reserved %s",
                    key.label, order.id, required, required - remaining,
                )
                shortfalls.append(ReservationShortfall(key=key, required=required, covered=required - remaining))
        return shortfalls

    @staticmethod
    async def _consume(db: AsyncSession, order: Order, demand: dict[MatchKey, Decimal]) -> None:
        claimed: set[UUID] = set()
        for key, required in _narrowest_first(demand):
            units = await InventoryService.find_available_or_reserved(
                db, key, order.id, math.ceil(required), exclude=claimed
            )
            remaining = required
            for unit in units:
                if remaining <= _ZERO:
                    break
                amount = min(unit.reserved_quantity, remaining)
                unit.status = InventoryStatus.CONSUMED.value
                unit.reserved_quantity = _ZERO
                unit.reserved_for_order_id = None
                claimed.add(unit.id)
                remaining -= amount
            await db.flush()
            if remaining > _ZERO:
                logger.warning(
                    "Order %s completed with %s of %s not consumed from reserved stock",
                    order.id, remaining, key.label,
                )

    @staticmethod
    async def _release(db: AsyncSession, order: Order, demand: dict[MatchKey, Decimal]) -> None:
        claimed: set[UUID] = set()
        for key, required in _narrowest_first(demand):
            units = await InventoryService.find_available_or_reserved(
                db, key, order.id, math.ceil(required), exclude=claimed
            )
            remaining = required
            for unit in units:
                if remaining <= _ZERO:
                    break
                amount = min(unit.reserved_quantity, remaining)
                unit.reserved_quantity = max(_ZERO, unit.reserved_quantity - amount)
                if unit.reserved_quantity == _ZERO:
                    unit.reserved_for_order_id = None
                claimed.add(unit.id)
                remaining -= amount
            await db.flush()

    @staticmethod
    async def _release_all_held(db: AsyncSession, order: Order) -> None:
        """Drop every reservation still recorded against a cancelled order."""
        units = await InventoryService.find_held_by_order(db, order.id)
        for unit in units:
            unit.reserved_quantity = _ZERO
            unit.reserved_for_order_id = None
        if units:
            await db.flush()
            logger.info("Released %d leftover reservation(s) of cancelled order %s", len(units), order.id)
