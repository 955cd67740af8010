"""Tests for the pure guillotine cut calculations."""
from decimal import Decimal

import pytest

from workshop.core.errors import ValidationError
from workshop.services.cut_engine import (
    CutDirection,
    plan_l_shape_cut,
    plan_manual_cut,
    proportional_price,
)


def D(value) -> Decimal:
    return Decimal(str(value))


# =============================================================================
# Pricing
# =============================================================================


def test_proportional_price_by_area():
    assert proportional_price(D(1000), D(1000), D(2000), D(500), D(1000)) == D("250")


def test_proportional_price_rounds_to_four_places():
    price = proportional_price(D(100), D(3), D(1), D(1), D(1))
    assert price == D("33.3333")


def test_proportional_price_of_empty_source_is_zero():
    assert proportional_price(D(100), D(0), D(10), D(0), D(10)) == D(0)


# =============================================================================
# Manual cut
# =============================================================================


def test_horizontal_cut_splits_into_main_and_secondary():
    plan = plan_manual_cut(1000, 2000, 1000, 500, 1000, "horizontal")

    assert not plan.consume_whole
    assert (plan.main_remnant.width, plan.main_remnant.height) == (D(500), D(2000))
    assert plan.main_remnant.price == D(500)
    assert (plan.secondary_remnant.width, plan.secondary_remnant.height) == (D(500), D(1000))
    assert plan.secondary_remnant.price == D(250)
    assert plan.cut_piece.price == D(250)


def test_vertical_cut_splits_into_main_and_secondary():
    plan = plan_manual_cut(1000, 2000, 1000, 400, 500, CutDirection.VERTICAL)

    assert (plan.main_remnant.width, plan.main_remnant.height) == (D(1000), D(1500))
    assert plan.main_remnant.price == D(750)
    assert (plan.secondary_remnant.width, plan.secondary_remnant.height) == (D(600), D(500))
    assert plan.secondary_remnant.price == D(150)
    assert (plan.cut_piece.width, plan.cut_piece.height) == (D(400), D(500))
    assert plan.cut_piece.price == D(100)


@pytest.mark.parametrize("direction", ["horizontal", "vertical"])
def test_manual_cut_conserves_area_and_price(direction):
    plan = plan_manual_cut(1220, 2440, D("3660.00"), 600, 800, direction)

    pieces = [plan.cut_piece, *plan.remnants]
    assert sum(p.area for p in pieces) == D(1220) * D(2440)
    assert sum(p.price for p in pieces) == D("3660.00")


def test_cutting_the_whole_board_consumes_it():
    plan = plan_manual_cut(1000, 2000, 1000, 1000, 2000, "horizontal")

    assert plan.consume_whole
    assert plan.remnants == []
    assert plan.cut_piece is None


def test_full_height_horizontal_cut_has_no_secondary():
    plan = plan_manual_cut(1000, 2000, 1000, 300, 2000, "horizontal")

    assert plan.secondary_remnant is None
    assert (plan.main_remnant.width, plan.main_remnant.height) == (D(700), D(2000))


def test_full_width_vertical_cut_has_no_secondary():
    plan = plan_manual_cut(1000, 2000, 1000, 1000, 500, "vertical")

    assert plan.secondary_remnant is None
    assert (plan.main_remnant.width, plan.main_remnant.height) == (D(1000), D(1500))


def test_full_width_horizontal_cut_drops_zero_area_main():
    plan = plan_manual_cut(1000, 2000, 1000, 1000, 500, "horizontal")

    assert plan.main_remnant is None
    assert (plan.secondary_remnant.width, plan.secondary_remnant.height) == (D(1000), D(1500))


def test_manual_cut_larger_than_source_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        plan_manual_cut(1000, 2000, 1000, 1200, 2500, "horizontal")

    assert set(exc_info.value.field_errors) == {"cut_width", "cut_height"}


@pytest.mark.parametrize("width,height,field", [(0, 100, "cut_width"), (100, -5, "cut_height")])
def test_manual_cut_requires_positive_dimensions(width, height, field):
    with pytest.raises(ValidationError) as exc_info:
        plan_manual_cut(1000, 2000, 1000, width, height, "vertical")

    assert field in exc_info.value.field_errors


def test_manual_cut_rejects_unknown_direction():
    with pytest.raises(ValidationError) as exc_info:
        plan_manual_cut(1000, 2000, 1000, 100, 100, "diagonal")

    assert "direction" in exc_info.value.field_errors


# =============================================================================
# Allocation (L-shape) cut
# =============================================================================


def test_l_shape_cut_leaves_right_and_top_offcuts():
    plan = plan_l_shape_cut(1000, 2000, 1000, 400, 500)

    assert (plan.target.width, plan.target.height) == (D(400), D(500))
    assert plan.target.price == D(100)
    assert (plan.right_offcut.width, plan.right_offcut.height) == (D(600), D(2000))
    assert plan.right_offcut.price == D(600)
    assert (plan.top_offcut.width, plan.top_offcut.height) == (D(400), D(1500))
    assert plan.top_offcut.price == D(300)


def test_l_shape_cut_conserves_area_and_price_when_nothing_is_dropped():
    plan = plan_l_shape_cut(1000, 2000, 1000, 400, 500)

    pieces = [plan.target, *plan.offcuts]
    assert sum(p.area for p in pieces) == D(1000) * D(2000)
    assert sum(p.price for p in pieces) == D(1000)


def test_l_shape_cut_drops_thin_offcuts():
    plan = plan_l_shape_cut(1000, 1000, 1000, 995, 1000)

    assert plan.right_offcut is None
    assert plan.top_offcut is None
    assert plan.offcuts == []


def test_offcut_exactly_at_minimum_is_dropped():
    plan = plan_l_shape_cut(1000, 1000, 1000, 990, 500)

    assert plan.right_offcut is None
    assert (plan.top_offcut.width, plan.top_offcut.height) == (D(990), D(500))


def test_offcut_just_above_minimum_is_kept():
    plan = plan_l_shape_cut(1000, 1000, 1000, 989, 1000)

    assert (plan.right_offcut.width, plan.right_offcut.height) == (D(11), D(1000))


def test_min_offcut_is_configurable():
    plan = plan_l_shape_cut(1000, 1000, 1000, 900, 1000, min_offcut=150)

    assert plan.offcuts == []


def test_exact_size_target_has_no_offcuts():
    plan = plan_l_shape_cut(500, 500, 80, 500, 500)

    assert plan.offcuts == []
    assert plan.target.price == D(80)


def test_l_shape_target_larger_than_source_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        plan_l_shape_cut(1000, 500, 100, 500, 600)

    assert "target_height" in exc_info.value.field_errors
    assert "target_width" not in exc_info.value.field_errors


# =============================================================================
# Dimension precision
# =============================================================================


def test_manual_cut_rejects_sub_hundredth_dimensions():
    with pytest.raises(ValidationError) as exc_info:
        plan_manual_cut(1000, 2000, 1000, D("333.335"), 2000, "horizontal")

    assert exc_info.value.field_errors == {"cut_width": "At most 2 decimal places are allowed"}


def test_hundredth_precision_prices_the_stored_size():
    plan = plan_manual_cut(1000, 2000, 1000, D("333.34"), 2000, "horizontal")

    assert plan.main_remnant.width == D("666.66")
    assert plan.main_remnant.price == D("666.6600")


def test_trailing_zeros_are_not_extra_precision():
    plan = plan_l_shape_cut(1000, 2000, 1000, D("400.000"), D("500.0"))

    assert plan.target.price == D(100)


def test_l_shape_rejects_sub_hundredth_dimensions():
    with pytest.raises(ValidationError) as exc_info:
        plan_l_shape_cut(1000, 2000, 1000, 400, D("500.001"))

    assert set(exc_info.value.field_errors) == {"target_height"}
