"""Workshop ERP - Guillotine cut calculations.

Pure geometry and pricing for a single guillotine split of a rectangular
board. Nothing here touches the database; the cutting service turns the
returned plans into inventory rows.

Two conventions are supported:

* manual cuts, where the operator picks a direction and gets a *main* and a
  *secondary* remnant;
* allocation cuts, which always take the target from one corner and leave a
  *right* and a *top* offcut (L-shape). Offcuts with a side at or below the
  minimum offcut size are dropped.

Every produced piece is priced by area:
``price = source_price * piece_area / source_area``.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from workshop.core.errors import ValidationError

PRICE_QUANTUM = Decimal("0.0001")
# Sizes are stored to hundredths of a millimetre.
DIMENSION_QUANTUM = Decimal("0.01")
PRECISION_MESSAGE = "At most 2 decimal places are allowed"
DEFAULT_MIN_OFFCUT = Decimal("10")


class CutDirection(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class Piece:
    """A rectangle produced by a cut, priced proportionally to the source."""

    width: Decimal
    height: Decimal
    price: Decimal

    @property
    def area(self) -> Decimal:
        return self.width * self.height


@dataclass(frozen=True)
class ManualCutPlan:
    consume_whole: bool
    cut_piece: Piece | None = None
    main_remnant: Piece | None = None
    secondary_remnant: Piece | None = None

    @property
    def remnants(self) -> list[Piece]:
        return [p for p in (self.main_remnant, self.secondary_remnant) if p is not None]


@dataclass(frozen=True)
class AllocationCutPlan:
    target: Piece
    right_offcut: Piece | None = None
    top_offcut: Piece | None = None

    @property
    def offcuts(self) -> list[Piece]:
        return [p for p in (self.right_offcut, self.top_offcut) if p is not None]


def _dec(value: Decimal | int | float | str) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def is_whole_hundredths(value: Decimal | int | float | str) -> bool:
    """True when ``value`` is stored without rounding at 0.01 precision."""
    value = _dec(value)
    return value == value.quantize(DIMENSION_QUANTUM)


def proportional_price(
    source_price: Decimal,
    source_width: Decimal,
    source_height: Decimal,
    width: Decimal,
    height: Decimal,
) -> Decimal:
    """Share of ``source_price`` covered by a ``width`` x ``height`` piece."""
    source_area = _dec(source_width) * _dec(source_height)
    if source_area <= 0:
        return Decimal("0")
    price = _dec(source_price) * _dec(width) * _dec(height) / source_area
    return price.quantize(PRICE_QUANTUM)


def _piece(
    source_width: Decimal, source_height: Decimal, source_price: Decimal, width: Decimal, height: Decimal
) -> Piece | None:
    if width <= 0 or height <= 0:
        return None
    return Piece(
        width=width,
        height=height,
        price=proportional_price(source_price, source_width, source_height, width, height),
    )


def _validate_fits(
    source_width: Decimal,
    source_height: Decimal,
    width: Decimal,
    height: Decimal,
    width_field: str,
    height_field: str,
) -> None:
    field_errors: dict[str, str] = {}
    if width <= 0:
        field_errors[width_field] = "Width must be a positive number"
    elif not is_whole_hundredths(width):
        field_errors[width_field] = PRECISION_MESSAGE
    elif width > source_width:
        field_errors[width_field] = f"Width {width} exceeds source width {source_width}"
    if height <= 0:
        field_errors[height_field] = "Height must be a positive number"
    elif not is_whole_hundredths(height):
        field_errors[height_field] = PRECISION_MESSAGE
    elif height > source_height:
        field_errors[height_field] = f"Height {height} exceeds source height {source_height}"
    if field_errors:
        raise ValidationError("Cut dimensions do not fit the source item", field_errors)


def plan_manual_cut(
    source_width: Decimal,
    source_height: Decimal,
    source_price: Decimal,
    cut_width: Decimal,
    cut_height: Decimal,
    direction: CutDirection | str,
) -> ManualCutPlan:
    """Split a board along an operator-chosen guillotine line.

    horizontal: main = (W - cw) x H, secondary = cw x (H - ch) when ch < H
    vertical:   main = W x (H - ch), secondary = (W - cw) x ch when cw < W

    Cutting exactly the whole board is a plain consumption with no remnants.
    Zero-area leftovers are not returned.
    """
    W, H, P = _dec(source_width), _dec(source_height), _dec(source_price)
    cw, ch = _dec(cut_width), _dec(cut_height)
    try:
        direction = CutDirection(direction)
    except ValueError:
        raise ValidationError(
            "Direction must be horizontal or vertical", {"direction": f"Unknown direction: {direction}"}
        )

    _validate_fits(W, H, cw, ch, "cut_width", "cut_height")

    if cw == W and ch == H:
        return ManualCutPlan(consume_whole=True)

    if direction is CutDirection.HORIZONTAL:
        main = _piece(W, H, P, W - cw, H)
        secondary = _piece(W, H, P, cw, H - ch) if ch < H else None
    else:
        main = _piece(W, H, P, W, H - ch)
        secondary = _piece(W, H, P, W - cw, ch) if cw < W else None

    return ManualCutPlan(
        consume_whole=False,
        cut_piece=_piece(W, H, P, cw, ch),
        main_remnant=main,
        secondary_remnant=secondary,
    )


def plan_l_shape_cut(
    source_width: Decimal,
    source_height: Decimal,
    source_price: Decimal,
    target_width: Decimal,
    target_height: Decimal,
    min_offcut: Decimal | int = DEFAULT_MIN_OFFCUT,
) -> AllocationCutPlan:
    """Take the target from a corner, leaving a right strip and a top strip.

    right = (W - tw) x H
    top   = tw x (H - th)

    An offcut is kept only when both of its sides are strictly larger than
    ``min_offcut``.
    """
    W, H, P = _dec(source_width), _dec(source_height), _dec(source_price)
    tw, th = _dec(target_width), _dec(target_height)
    limit = _dec(min_offcut)

    _validate_fits(W, H, tw, th, "target_width", "target_height")

    def keep(width: Decimal, height: Decimal) -> Piece | None:
        if width <= limit or height <= limit:
            return None
        return _piece(W, H, P, width, height)

    return AllocationCutPlan(
        target=_piece(W, H, P, tw, th),
        right_offcut=keep(W - tw, H),
        top_offcut=keep(tw, H - th),
    )
