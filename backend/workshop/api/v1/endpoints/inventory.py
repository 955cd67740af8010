"""Workshop ERP - Inventory endpoints: stock intake, cuts and cut candidates."""
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Query

from workshop.api.deps import DbSession
from workshop.models.inventory import InventoryItem, InventoryStatus
from workshop.schemas.common import ApiResponse, Meta
from workshop.schemas.inventory import (
    AllocationCutRequest,
    CandidateBoardResponse,
    CutResultResponse,
    InventoryItemCreate,
    InventoryItemResponse,
    ManualCutRequest,
)
from workshop.services.cutting_service import CuttingService, CutResult
from workshop.services.inventory_service import InventoryService

router = APIRouter()


def _item_to_response(item: InventoryItem, parent_name: str | None = None) -> InventoryItemResponse:
    response = InventoryItemResponse.model_validate(item)
    response.parent_name = parent_name
    return response


def _cut_to_response(result: CutResult) -> CutResultResponse:
    return CutResultResponse(
        message=result.message,
        source_id=result.source.id,
        created=[_item_to_response(i) for i in result.created],
    )


@router.get("", response_model=ApiResponse[list[InventoryItemResponse]])
async def list_inventory_items(
    db: DbSession,
    status: InventoryStatus | None = Query(None, description="Filter by status"),
):
    """List stock units, newest first."""
    items = await InventoryService.list_items(db, status)
    return ApiResponse(
        data=[_item_to_response(i, i.parent.name if i.parent else None) for i in items],
        meta=Meta(page=1, page_size=len(items), total_count=len(items)),
    )


@router.post("", response_model=ApiResponse[list[InventoryItemResponse]], status_code=201)
async def add_inventory_items(body: InventoryItemCreate, db: DbSession):
    """Receive one or more identical boards."""
    items = await InventoryService.add_items(
        db,
        name=body.name,
        width=body.width,
        height=body.height,
        thickness=body.thickness,
        total_price=body.total_price,
        quantity=body.quantity,
        item_definition_id=body.item_definition_id,
    )
    return ApiResponse(
        data=[_item_to_response(i) for i in items],
        meta=Meta(message=f"Added {len(items)} item(s)"),
    )


@router.get("/candidates", response_model=ApiResponse[list[CandidateBoardResponse]])
async def list_cut_candidates(
    db: DbSession,
    definition_id: int = Query(...),
    min_width: Decimal = Query(..., gt=0),
    min_height: Decimal = Query(..., gt=0),
):
    """Boards that can be cut down to the requested size, smallest first."""
    boards = await InventoryService.find_available_matching_or_larger(db, definition_id, min_width, min_height)
    return ApiResponse(data=[CandidateBoardResponse.model_validate(b) for b in boards])


@router.post("/{item_id}/cut", response_model=ApiResponse[CutResultResponse])
async def cut_inventory_item(item_id: UUID, body: ManualCutRequest, db: DbSession):
    """Cut a board along an operator-chosen line."""
    result = await CuttingService.manual_cut(
        db,
        item_id=item_id,
        cut_width=body.cut_width,
        cut_height=body.cut_height,
        direction=body.direction,
        save_main_remnant=body.save_main_remnant,
        save_secondary_remnant=body.save_secondary_remnant,
    )
    return ApiResponse(data=_cut_to_response(result), meta=Meta(message=result.message))


@router.post("/{item_id}/allocate-cut", response_model=ApiResponse[CutResultResponse])
async def allocate_cut(item_id: UUID, body: AllocationCutRequest, db: DbSession):
    """Cut an exact-size piece for an order; the piece is reserved immediately."""
    result = await CuttingService.allocate_cut(
        db,
        source_id=item_id,
        target_width=body.target_width,
        target_height=body.target_height,
        order_id=body.order_id,
        quantity=body.quantity,
    )
    return ApiResponse(data=_cut_to_response(result), meta=Meta(message=result.message))
