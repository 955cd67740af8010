"""Workshop ERP - Material requirement aggregation for an order.

Walks order lines and product recipes and sums the demand per material.
Two groupings are produced from the same walk:

* per (definition, width, height) for the availability check, which only
  understands catalog-linked recipe lines;
* per ``MatchKey`` for reservation bookkeeping, which also covers legacy
  recipe lines pointing directly at a stock unit.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

from workshop.models.catalog import ItemCategory, ItemDefinition
from workshop.models.order import Order
from workshop.models.product import ProductIngredient


@dataclass(frozen=True)
class ByDefinition:
    """Match stock by catalog definition, and by exact size when one is given."""

    definition_id: int
    width: Decimal | None = None
    height: Decimal | None = None

    @property
    def label(self) -> str:
        if self.width is None or self.height is None:
            return f"definition {self.definition_id}"
        return f"definition {self.definition_id} ({self.width:f} x {self.height:f})"


@dataclass(frozen=True)
class ByName:
    """Match stock by display name (units that predate catalog linkage)."""

    name: str

    @property
    def label(self) -> str:
        return f"'{self.name}'"


MatchKey = Union[ByDefinition, ByName]


class AvailabilityStatus(str, Enum):
    READY = "ready"
    CUT_NEEDED = "cut_needed"
    MISSING = "missing"


@dataclass
class DefinitionDemand:
    """Summed demand for one (definition, size) group of an order."""

    definition: ItemDefinition
    quantity: Decimal
    width: Decimal | None = None
    height: Decimal | None = None

    @property
    def category(self) -> ItemCategory:
        return self.definition.category_kind

    @property
    def is_dimensional(self) -> bool:
        return self.category.is_dimensional and self.width is not None and self.height is not None


@dataclass
class MaterialRequirement:
    item_definition_id: int
    definition_name: str
    category: ItemCategory
    quantity_required: Decimal
    status: AvailabilityStatus
    width: Decimal | None = None
    height: Decimal | None = None
    exact_count: int | None = None
    larger_count: int | None = None


def _size_for(definition: ItemDefinition, ingredient: ProductIngredient) -> tuple[Decimal | None, Decimal | None]:
    # Only sheet material is matched by size; everything else shares one bucket.
    if not definition.category_kind.is_dimensional:
        return None, None
    if ingredient.width is None or ingredient.height is None:
        return None, None
    return ingredient.width, ingredient.height


def aggregate_definition_demand(order: Order) -> list[DefinitionDemand]:
    """Group catalog-linked recipe demand by (definition, width, height).

    Recipe lines without a definition are skipped. Expects ``order.items``,
    each item's product and ingredients, and each ingredient's definition
    to be loaded.
    """
    groups: dict[tuple, DefinitionDemand] = {}
    for order_item in order.items:
        for ingredient in order_item.product.ingredients:
            definition = ingredient.item_definition
            if definition is None:
                continue
            width, height = _size_for(definition, ingredient)
            needed = Decimal(order_item.quantity) * ingredient.quantity
            key = (definition.id, width, height)
            demand = groups.get(key)
            if demand is None:
                groups[key] = DefinitionDemand(definition=definition, quantity=needed, width=width, height=height)
            else:
                demand.quantity += needed
    return list(groups.values())


def match_key_for(ingredient: ProductIngredient) -> MatchKey | None:
    """Reservation key for one recipe line, or None if it points at nothing."""
    definition = ingredient.item_definition
    if definition is not None:
        width, height = _size_for(definition, ingredient)
        return ByDefinition(definition.id, width, height)

    legacy = ingredient.inventory_item
    if legacy is None:
        return None
    if legacy.item_definition_id is not None:
        return ByDefinition(legacy.item_definition_id)
    return ByName(legacy.name)


def aggregate_reservation_demand(order: Order) -> dict[MatchKey, Decimal]:
    """Sum demand per match key, in first-seen order."""
    demand: dict[MatchKey, Decimal] = {}
    for order_item in order.items:
        for ingredient in order_item.product.ingredients:
            key = match_key_for(ingredient)
            if key is None:
                continue
            needed = Decimal(order_item.quantity) * ingredient.quantity
            demand[key] = demand.get(key, Decimal("0")) + needed
    return demand


def classify(demand: DefinitionDemand, exact_count: int, larger_count: int = 0) -> AvailabilityStatus:
    """ready / cut_needed / missing for one demand group.

    ``larger_count`` is ignored for non-dimensional demand; there is nothing
    to cut.
    """
    if exact_count >= demand.quantity:
        return AvailabilityStatus.READY
    if demand.is_dimensional and exact_count + larger_count > 0:
        return AvailabilityStatus.CUT_NEEDED
    return AvailabilityStatus.MISSING
