from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """
    Base class for errors raised by the service layer.

    Each subclass carries a machine-readable code and the HTTP status the API
    layer should answer with. The unit of work that raised it is rolled back.
    """

    code: str = "DOMAIN_ERROR"
    http_status: int = 400

    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(DomainError):
    """Referenced entity id (or business key) does not resolve in the tenant."""
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, entity: str, key: Any) -> None:
        super().__init__(f"{entity} not found: {key}", details={"entity": entity, "key": str(key)})
        self.entity = entity
        self.key = key


class AlreadyExistsError(DomainError):
    """Duplicate business key within the tenant scope."""
    code = "ALREADY_EXISTS"
    http_status = 409

    def __init__(self, entity: str, key: Any) -> None:
        super().__init__(f"{entity} already exists: {key}", details={"entity": entity, "key": str(key)})
        self.entity = entity
        self.key = key


class InvalidStateError(DomainError):
    """Operation is not allowed from the entity's current status."""
    code = "INVALID_STATE"
    http_status = 409

    def __init__(self, message: str, *, current: Any = None) -> None:
        super().__init__(message, details={"current": str(current)} if current is not None else None)
        self.current = current


class InvalidStatusTransitionError(DomainError):
    """Requested status cannot follow the current status."""
    code = "INVALID_STATUS_TRANSITION"
    http_status = 400

    def __init__(self, current: Any, requested: Any) -> None:
        super().__init__(
            f"Invalid status transition: {current} -> {requested}",
            details={"current": str(current), "requested": str(requested)},
        )
        self.current = current
        self.requested = requested


class ValidationError(DomainError):
    """Caller-supplied data fails a basic precondition."""
    code = "VALIDATION_ERROR"
    http_status = 400


class AuthenticationError(DomainError):
    """Credentials or token could not be verified."""
    code = "AUTHENTICATION_FAILED"
    http_status = 401
