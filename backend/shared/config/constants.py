"""
Centralized constants for the backend application.
Avoid magic strings and repeated constants.

Usage:
    from shared.config.constants import ItemType, EntityKind, WeekDay

    if group_item.item_type == ItemType.PRODUCT:
        ...
"""

from enum import Enum
from typing import Final


# =============================================================================
# Catalog Enums
# =============================================================================


class ItemType(str, Enum):
    """
    What a GroupItem wraps, and what a ProductGroup is meant to hold.

    A "product" group bundles related menu items; an "ingredient" group is a
    customer-facing customization slot.
    """

    PRODUCT = "product"
    INGREDIENT = "ingredient"


class EntityKind(str, Enum):
    """Record kinds known to the catalog store and the dependency guard."""

    INGREDIENT = "ingredient"
    PRODUCT = "product"
    GROUP_ITEM = "group_item"
    PRODUCT_GROUP = "product_group"
    BRANCH = "branch"


# Human-readable (staff-facing) names used in messages and blocker labels
ENTITY_LABELS: Final[dict[EntityKind, str]] = {
    EntityKind.INGREDIENT: "Ingrediente",
    EntityKind.PRODUCT: "Producto",
    EntityKind.GROUP_ITEM: "Ítem de grupo",
    EntityKind.PRODUCT_GROUP: "Grupo",
    EntityKind.BRANCH: "Sucursal",
}


# =============================================================================
# Branch Schedule
# =============================================================================


class WeekDay:
    """Week-day keys for branch activity times (upper case, Sunday first)."""

    SUNDAY: Final[str] = "SUNDAY"
    MONDAY: Final[str] = "MONDAY"
    TUESDAY: Final[str] = "TUESDAY"
    WEDNESDAY: Final[str] = "WEDNESDAY"
    THURSDAY: Final[str] = "THURSDAY"
    FRIDAY: Final[str] = "FRIDAY"
    SATURDAY: Final[str] = "SATURDAY"

    ALL: Final[list[str]] = [
        SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY,
    ]


# =============================================================================
# Validation Limits
# =============================================================================


class Limits:
    """Validation limits for catalog data."""

    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 5000
    MAX_TAGS: Final[int] = 50
    MAX_PRICE: Final[float] = 1_000_000.0
