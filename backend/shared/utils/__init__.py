"""
Utilities module: Exceptions, validators, schemas.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ValidationError,
    TypeMismatchError,
    ConflictError,
    ResourceInUseError,
    DatabaseError,
)
from shared.utils.validators import (
    validate_name,
    validate_price,
    dedupe_ids,
)

__all__ = [
    # exceptions
    "NotFoundError",
    "ValidationError",
    "TypeMismatchError",
    "ConflictError",
    "ResourceInUseError",
    "DatabaseError",
    # validators
    "validate_name",
    "validate_price",
    "dedupe_ids",
]
