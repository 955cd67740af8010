"""Workshop ERP - Order endpoints: material check and status transitions."""
from fastapi import APIRouter

from workshop.api.deps import DbSession
from workshop.schemas.common import ApiResponse, Meta
from workshop.schemas.order import (
    MaterialRequirementResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderTransitionResponse,
    ReservationShortfallResponse,
)
from workshop.services.availability_service import AvailabilityService
from workshop.services.order_status_service import OrderStatusService, TransitionResult

router = APIRouter()


def _transition_to_response(result: TransitionResult) -> OrderTransitionResponse:
    return OrderTransitionResponse(
        order=OrderResponse.model_validate(result.order),
        previous_status=result.previous_status,
        message=result.message,
        shortfalls=[
            ReservationShortfallResponse(
                material=s.key.label,
                required=s.required,
                covered=s.covered,
                missing=s.missing,
            )
            for s in result.shortfalls
        ],
    )


@router.get("/{order_id}/materials", response_model=ApiResponse[list[MaterialRequirementResponse]])
async def get_order_materials(order_id: int, db: DbSession):
    """Material availability for every (material, size) the order needs."""
    requirements = await AvailabilityService.compute_availability(db, order_id)
    return ApiResponse(data=[MaterialRequirementResponse.model_validate(r) for r in requirements])


@router.post("/{order_id}/status", response_model=ApiResponse[OrderTransitionResponse])
async def update_order_status(order_id: int, body: OrderStatusUpdate, db: DbSession):
    """Move an order through its workflow, reserving or consuming stock on the way."""
    result = await OrderStatusService.transition(db, order_id, body.status)
    return ApiResponse(data=_transition_to_response(result), meta=Meta(message=result.message))
