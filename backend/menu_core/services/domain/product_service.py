"""
Product Service.

Handles product CRUD and the product's ordered list of ProductGroups.

Usage:
    from menu_core.services.domain import ProductService

    service = ProductService(db)
    product = service.create({"name": "Burger", "base_price": 45.0, "group_ids": [toppings_id]})
    view = service.get_view(product.id)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from menu_core.models import Product
from menu_core.services.base_service import BaseCRUDService
from menu_core.services.catalog import CompositionResolver, DependencyGuard
from shared.config.constants import EntityKind
from shared.config.logging import get_logger
from shared.utils.admin_schemas import ProductOutput, ProductView
from shared.utils.exceptions import ValidationError
from shared.utils.validators import (
    validate_description,
    validate_id_list,
    validate_name,
    validate_optional_text,
    validate_price,
    validate_string_list,
)

logger = get_logger(__name__)


class ProductService(BaseCRUDService[Product, ProductOutput]):
    """
    Service for product management.

    Business rules:
    - A product with no groups is a plain, non-customizable item
    - Every referenced ProductGroup must exist when it is attached
    - A product is deleted only when no GroupItem wraps it
    - Deleting a product withdraws it from every branch that offers it
    """

    writable_fields = frozenset({
        "name", "description", "base_price", "discounted_price",
        "category", "tags", "group_ids",
    })

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            kind=EntityKind.PRODUCT,
            output_schema=ProductOutput,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def list_by_category(self, category: str) -> list[ProductOutput]:
        entities = self._repo.find_where(category=category.strip())
        return [self.to_output(e) for e in entities]

    def get_view(self, product_id: int) -> ProductView:
        """Product with every group resolved to concrete items and prices."""
        return CompositionResolver(self._store).build_product(product_id)

    # =========================================================================
    # Group membership
    # =========================================================================

    def add_group(self, product_id: int, group_id: int) -> ProductOutput:
        """Append a group to the product. Already-attached groups are left in place."""
        product = self.get_entity_or_404(product_id)
        self._require_existing("group_ids", EntityKind.PRODUCT_GROUP, [group_id])

        if group_id not in product.group_ids:
            product.group_ids = [*product.group_ids, group_id]
            self._commit("actualizar", entity_id=product_id)
            logger.info("Group attached to product", product_id=product_id, group_id=group_id)
        return self.to_output(product)

    def remove_group(self, product_id: int, group_id: int) -> ProductOutput:
        product = self.get_entity_or_404(product_id)

        if group_id in product.group_ids:
            product.group_ids = [g for g in product.group_ids if g != group_id]
            self._commit("actualizar", entity_id=product_id)
            logger.info("Group detached from product", product_id=product_id, group_id=group_id)
        return self.to_output(product)

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_fields(self, data: dict[str, Any]) -> dict[str, Any]:
        if "name" in data:
            with self._field("name"):
                data["name"] = validate_name(data["name"])
        if "base_price" in data:
            with self._field("base_price"):
                data["base_price"] = validate_price(data["base_price"])
        if "description" in data:
            with self._field("description"):
                data["description"] = validate_description(data["description"])
        if "discounted_price" in data:
            with self._field("discounted_price"):
                data["discounted_price"] = validate_price(data["discounted_price"], allow_none=True)
        if "category" in data:
            with self._field("category"):
                data["category"] = validate_optional_text(data["category"], "La categoría")
        if "tags" in data:
            with self._field("tags"):
                data["tags"] = validate_string_list(data["tags"], "Las etiquetas")
        if "group_ids" in data:
            with self._field("group_ids"):
                data["group_ids"] = validate_id_list(data["group_ids"], "group_ids")
            self._require_existing("group_ids", EntityKind.PRODUCT_GROUP, data["group_ids"])
        return data

    def _validate_create(self, data: dict[str, Any]) -> dict[str, Any]:
        for required in ("name", "base_price"):
            if data.get(required) is None:
                raise ValidationError(f"{required} es requerido", field=required)
        data.setdefault("description", "")
        data.setdefault("tags", [])
        data.setdefault("group_ids", [])
        return self._validate_fields(data)

    def _validate_update(self, entity: Product, data: dict[str, Any]) -> dict[str, Any]:
        return self._validate_fields(data)

    def _validate_delete(self, entity: Product) -> None:
        DependencyGuard(self._store).ensure_deletable(self._kind, entity.id)

    def _before_delete(self, entity: Product) -> None:
        branch_ids = self._store.withdraw_from_branches(self._kind, entity.id)
        if branch_ids:
            logger.info("Product withdrawn from branches", product_id=entity.id, branch_ids=branch_ids)
