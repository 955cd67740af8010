"""Workshop ERP - API response helpers."""
from fastapi import Request
from fastapi.responses import JSONResponse

from workshop.core.errors import WorkshopError


def error_response(code: str, message: str, field_errors: list[dict] | None = None, meta: dict | None = None) -> dict:
    return {
        "data": None,
        "error": {
            "code": code,
            "message": message,
            "field_errors": field_errors or []
        },
        "meta": meta
    }


async def workshop_error_handler(request: Request, exc: WorkshopError) -> JSONResponse:
    """Render domain errors in the standard envelope."""
    field_errors = [{"field": k, "message": v} for k, v in exc.field_errors.items()]
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message, field_errors),
    )
