"""Domain errors with stable codes and user-safe messages.

Services raise these; a single exception handler in ``eventify.main`` turns
them into status-coded JSON bodies of the form ``{"code": ..., "message": ...}``.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    PRICE_MISMATCH = "PRICE_MISMATCH"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    PURCHASE_NOT_FOUND = "PURCHASE_NOT_FOUND"
    USERNAME_TAKEN = "USERNAME_TAKEN"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    FORBIDDEN = "FORBIDDEN"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    status_code: int = 400

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}


class ValidationError(DomainError):
    status_code = 422

    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
        super().__init__(code=code, message=message)


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class InsufficientInventoryError(ConflictError):
    """Raised when a cart asks for more tickets than a ticket type has left."""

    def __init__(self, ticket_type_id: int, name: str, requested: int, available: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_INVENTORY,
            message=f"Not enough tickets available for {name}",
        )
        self.ticket_type_id = ticket_type_id
        self.requested = requested
        self.available = available


class UnauthorizedError(DomainError):
    status_code = 401

    def __init__(self, message: str = "Not authenticated", code: ErrorCode = ErrorCode.NOT_AUTHENTICATED) -> None:
        super().__init__(code=code, message=message)


class ForbiddenError(DomainError):
    status_code = 403

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: int) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message=f"Event {event_id} not found")
        self.event_id = event_id


class CategoryNotFoundError(NotFoundError):
    def __init__(self, category_id: int) -> None:
        super().__init__(code=ErrorCode.CATEGORY_NOT_FOUND, message=f"Category {category_id} not found")
        self.category_id = category_id


class TicketTypeNotFoundError(NotFoundError):
    def __init__(self, ticket_type_id: int) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_FOUND,
            message=f"Ticket type {ticket_type_id} not found",
        )
        self.ticket_type_id = ticket_type_id


class PurchaseNotFoundError(NotFoundError):
    def __init__(self, purchase_id: int) -> None:
        super().__init__(code=ErrorCode.PURCHASE_NOT_FOUND, message="Purchase not found")
        self.purchase_id = purchase_id


class UsernameTakenError(ConflictError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.USERNAME_TAKEN, message="Username already taken")


class EmailTakenError(ConflictError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.EMAIL_TAKEN, message="Email already in use")
