"""
Domain Services - application layer.

Services contain business logic and validation. They use the CatalogStore and
Repositories for data access.

Structure:
    CLI / REST collaborator (thin)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from menu_core.services.domain import ProductService

    service = ProductService(db)
    products = service.list_all()
"""

from .ingredient_service import IngredientService
from .product_service import ProductService
from .group_service import GroupItemService, ProductGroupService
from .branch_service import BranchService
from .availability_service import AvailabilityService

__all__ = [
    "IngredientService",
    "ProductService",
    "GroupItemService",
    "ProductGroupService",
    "BranchService",
    "AvailabilityService",
]
