"""Tests for demand aggregation and availability classification (no database)."""
from decimal import Decimal

import pytest

from workshop.models import InventoryItem, ItemCategory, ItemDefinition, Order, OrderItem, Product, ProductIngredient
from workshop.services.requirements import (
    AvailabilityStatus,
    ByDefinition,
    ByName,
    DefinitionDemand,
    aggregate_definition_demand,
    aggregate_reservation_demand,
    classify,
    match_key_for,
)

PLY = ItemDefinition(id=1, name="Ply18", category=ItemCategory.SHEET_MATERIAL.value)
HINGE = ItemDefinition(id=2, name="Hinge", category=ItemCategory.COMPONENT.value)


def D(value) -> Decimal:
    return Decimal(str(value))


def line(definition=None, quantity=1, width=None, height=None, legacy=None) -> ProductIngredient:
    return ProductIngredient(
        item_definition=definition,
        inventory_item=legacy,
        quantity=D(quantity),
        width=D(width) if width is not None else None,
        height=D(height) if height is not None else None,
    )


def order_of(*lines: tuple[list[ProductIngredient], int]) -> Order:
    return Order(
        id=7,
        name="Test",
        items=[
            OrderItem(product=Product(name=f"P{i}", ingredients=ingredients), quantity=quantity)
            for i, (ingredients, quantity) in enumerate(lines)
        ],
    )


# =============================================================================
# Definition demand
# =============================================================================


def test_sheet_demand_is_grouped_by_size():
    order = order_of(([line(PLY, 1, 500, 500), line(PLY, 2, 300, 300)], 1))

    groups = aggregate_definition_demand(order)

    assert [(g.width, g.height, g.quantity) for g in groups] == [
        (D(500), D(500), D(1)),
        (D(300), D(300), D(2)),
    ]


def test_demand_is_multiplied_by_order_quantity_and_summed_across_lines():
    shelf = [line(PLY, 2, 400, 600)]
    cabinet = [line(PLY, 1, 400, 600), line(HINGE, 4)]
    order = order_of((shelf, 3), (cabinet, 2))

    groups = aggregate_definition_demand(order)

    by_definition = {g.definition.id: g for g in groups}
    assert by_definition[PLY.id].quantity == D(8)
    assert by_definition[HINGE.id].quantity == D(8)
    assert len(groups) == 2


def test_component_demand_ignores_dimensions():
    order = order_of(([line(HINGE, 2, 10, 10)], 1), ([line(HINGE, 1)], 1))

    [demand] = aggregate_definition_demand(order)

    assert demand.width is None and demand.height is None
    assert demand.quantity == D(3)
    assert not demand.is_dimensional


def test_sheet_line_without_size_is_not_dimensional():
    [demand] = aggregate_definition_demand(order_of(([line(PLY, 1)], 1)))

    assert demand.category is ItemCategory.SHEET_MATERIAL
    assert not demand.is_dimensional


def test_legacy_lines_are_skipped_for_availability():
    legacy = InventoryItem(name="Oak veneer")
    order = order_of(([line(legacy=legacy)], 1))

    assert aggregate_definition_demand(order) == []


def test_empty_order_has_no_demand():
    assert aggregate_definition_demand(Order(id=1, name="Empty", items=[])) == []
    assert aggregate_reservation_demand(Order(id=1, name="Empty", items=[])) == {}


# =============================================================================
# Reservation keys
# =============================================================================


def test_match_key_for_sheet_line_carries_size():
    assert match_key_for(line(PLY, 1, 500, 500)) == ByDefinition(1, D(500), D(500))


def test_match_key_for_component_line_has_no_size():
    assert match_key_for(line(HINGE, 1, 10, 10)) == ByDefinition(2)


def test_match_key_for_legacy_line_with_definition_uses_definition():
    legacy = InventoryItem(name="Old ply", item_definition_id=1)
    assert match_key_for(line(legacy=legacy)) == ByDefinition(1)


def test_match_key_for_unlinked_legacy_line_uses_name():
    legacy = InventoryItem(name="Oak veneer")
    assert match_key_for(line(legacy=legacy)) == ByName("Oak veneer")


def test_match_key_for_empty_line_is_none():
    assert match_key_for(line()) is None


def test_reservation_demand_sums_per_key():
    veneer = InventoryItem(name="Oak veneer")
    order = order_of(
        ([line(PLY, 1, 500, 500), line(legacy=veneer, quantity=2)], 2),
        ([line(PLY, 1, 500, 500)], 1),
    )

    demand = aggregate_reservation_demand(order)

    assert demand == {
        ByDefinition(1, D(500), D(500)): D(3),
        ByName("Oak veneer"): D(4),
    }


def test_match_key_labels():
    assert ByDefinition(1, D("500.00"), D(300)).label == "definition 1 (500.00 x 300)"
    assert ByDefinition(2).label == "definition 2"
    assert ByName("Oak veneer").label == "'Oak veneer'"


# =============================================================================
# Classification
# =============================================================================


def sheet_demand(quantity) -> DefinitionDemand:
    return DefinitionDemand(definition=PLY, quantity=D(quantity), width=D(500), height=D(500))


def component_demand(quantity) -> DefinitionDemand:
    return DefinitionDemand(definition=HINGE, quantity=D(quantity))


@pytest.mark.parametrize(
    "exact,larger,expected",
    [
        (2, 0, AvailabilityStatus.READY),
        (3, 5, AvailabilityStatus.READY),
        (1, 0, AvailabilityStatus.CUT_NEEDED),
        (0, 1, AvailabilityStatus.CUT_NEEDED),
        (0, 0, AvailabilityStatus.MISSING),
    ],
)
def test_classify_sheet_demand(exact, larger, expected):
    assert classify(sheet_demand(2), exact, larger) is expected


@pytest.mark.parametrize(
    "exact,larger,expected",
    [
        (4, 0, AvailabilityStatus.READY),
        (3, 0, AvailabilityStatus.MISSING),
        (3, 10, AvailabilityStatus.MISSING),
    ],
)
def test_classify_component_demand_never_needs_a_cut(exact, larger, expected):
    assert classify(component_demand(4), exact, larger) is expected


def test_fractional_demand_needs_a_whole_unit():
    assert classify(component_demand("0.5"), 1) is AvailabilityStatus.READY
    assert classify(component_demand("1.5"), 1) is AvailabilityStatus.MISSING
