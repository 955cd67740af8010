"""Workshop ERP - Domain error taxonomy."""


class WorkshopError(Exception):
    """Base error for terminal failures of an inventory operation."""

    code = "ERROR"
    status_code = 400

    def __init__(self, message: str, field_errors: dict[str, str] | None = None):
        self.message = message
        self.field_errors = field_errors or {}
        super().__init__(message)


class NotFoundError(WorkshopError):
    """Referenced order, stock unit, product or catalog definition does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(WorkshopError):
    """Entity is not in the state the operation requires."""

    code = "CONFLICT"
    status_code = 409


class ValidationError(WorkshopError):
    """Malformed or out-of-range input."""

    code = "VALIDATION_ERROR"
    status_code = 422
