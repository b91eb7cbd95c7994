"""
Pydantic output schemas for the catalog and branch services.
Centralized to avoid circular imports between services.

Services accept plain dicts as input (validated in the service layer) and
return these DTOs.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from shared.config.constants import EntityKind, ItemType


# =============================================================================
# Ingredient Schemas
# =============================================================================


class IngredientOutput(BaseModel):
    id: int
    name: str
    base_price: float
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# Product Schemas
# =============================================================================


class ProductOutput(BaseModel):
    id: int
    name: str
    description: str = ""
    base_price: float
    discounted_price: Optional[float] = None
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    group_ids: list[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# Composition Schemas
# =============================================================================


class GroupItemOutput(BaseModel):
    id: int
    item_id: int
    item_type: ItemType
    # None = inherit the wrapped item's price; 0.0 = free
    override_price: Optional[float] = None

    class Config:
        from_attributes = True


class ProductGroupOutput(BaseModel):
    id: int
    name: str
    type: ItemType
    group_item_ids: list[int] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ResolvedItem(BaseModel):
    """A GroupItem flattened into the concrete item it wraps, price resolved."""

    kind: ItemType
    id: int
    name: str
    effective_price: float
    group_item_id: int


class ResolvedGroup(BaseModel):
    group_id: int
    group_name: str
    type: ItemType
    items: list[ResolvedItem] = Field(default_factory=list)


class ProductView(BaseModel):
    """Ready-to-render product with every group resolved, for menus and ordering."""

    id: int
    name: str
    description: str = ""
    base_price: float
    discounted_price: Optional[float] = None
    groups: list[ResolvedGroup] = Field(default_factory=list)


# =============================================================================
# Dependency Guard Schemas
# =============================================================================


class DeleteCheck(BaseModel):
    kind: EntityKind
    id: int
    ok: bool
    blockers: list[str] = Field(default_factory=list)


# =============================================================================
# Branch Schemas
# =============================================================================


class BranchOutput(BaseModel):
    id: int
    name: str
    phone: str
    city: str
    address: str
    is_open: bool
    activity_times: dict[str, list[str]] = Field(default_factory=dict)
    kosher_type: str = ""
    accessibility_list: list[str] = Field(default_factory=list)
    product_ids: list[int] = Field(default_factory=list)
    ingredient_ids: list[int] = Field(default_factory=list)
    product_availability: dict[int, bool] = Field(default_factory=dict)
    ingredient_availability: dict[int, bool] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PropagationResult(BaseModel):
    """Summary of one availability cascade."""

    branch_id: int
    product_id: int
    active: bool
    products_marked: list[int] = Field(default_factory=list)
    ingredients_marked: list[int] = Field(default_factory=list)
    # Missing products or groups met during the walk
    skipped: int = 0
    # Walk stopped at settings.propagation_max_nodes
    truncated: bool = False
