"""
Centralized HTTP exceptions for consistent error handling.

The REST collaborator can let these propagate unchanged: each one carries the
status code and staff-facing detail it should be rendered with.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError, ResourceInUseError

    raise NotFoundError("Producto", product_id)
    raise ValidationError("El precio debe ser positivo", field="base_price")
    raise ResourceInUseError("Ingrediente", ingredient_id, blockers)
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        # Log the error with context
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Producto", 123)
        raise NotFoundError("Sucursal", branch_id)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} con ID {entity_id} no encontrado"
        else:
            detail = f"{entity} no encontrado"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("El precio debe ser positivo")
        raise ValidationError("Tipo inválido", field="item_type", value="drink")
    """

    def __init__(self, detail: str, **log_context: Any):
        self.field = log_context.get("field")
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class TypeMismatchError(ValidationError):
    """A group's members do not all wrap the kind of item the group holds."""

    def __init__(self, group_type: str, mismatched_ids: list[int], **log_context: Any):
        ids_str = ", ".join(str(i) for i in mismatched_ids)
        detail = (
            f"Un grupo de tipo '{group_type}' solo admite ítems de tipo "
            f"'{group_type}' (ítems incompatibles: {ids_str})"
        )
        self.mismatched_ids = list(mismatched_ids)
        super().__init__(
            detail,
            field="group_item_ids",
            group_type=group_type,
            mismatched_ids=mismatched_ids,
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("El grupo ya contiene este ítem")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class ResourceInUseError(ConflictError):
    """
    Delete refused because other records still reference the entity.

    `blockers` holds the staff-facing labels of every dependant, so the UI can
    tell the user what to detach first.
    """

    def __init__(
        self,
        entity: str,
        entity_id: int,
        blockers: list[str],
        **log_context: Any,
    ):
        self.blockers = list(blockers)
        detail = f"{entity} con ID {entity_id} está en uso por: " + ", ".join(self.blockers)
        super().__init__(
            detail,
            entity=entity,
            entity_id=entity_id,
            blocker_count=len(self.blockers),
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to persist availability", branch_id=3)
    """

    def __init__(self, detail: str = "Error interno del servidor", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Error de base de datos durante {operation}. Por favor intente de nuevo."
        super().__init__(detail, operation=operation, **log_context)
