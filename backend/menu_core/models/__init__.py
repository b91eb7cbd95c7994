"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and AuditMixin
- ingredient: Ingredient
- catalog: Product, ProductGroup, GroupItem
- branch: Branch, BranchProduct, BranchIngredient
"""

# Base classes
from .base import Base, AuditMixin

# Ingredients (graph leaves)
from .ingredient import Ingredient

# Catalog (composition graph)
from .catalog import Product, ProductGroup, GroupItem

# Branches and per-branch availability
from .branch import Branch, BranchProduct, BranchIngredient

__all__ = [
    # Base
    "Base",
    "AuditMixin",
    # Ingredient
    "Ingredient",
    # Catalog
    "Product",
    "ProductGroup",
    "GroupItem",
    # Branch
    "Branch",
    "BranchProduct",
    "BranchIngredient",
]
