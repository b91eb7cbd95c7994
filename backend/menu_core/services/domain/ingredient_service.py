"""
Ingredient Service.

Ingredients are the leaves of the composition graph. They are deleted only
when no GroupItem wraps them. Deleting one also withdraws it from every
branch that stocks it.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_core.models import Ingredient
from menu_core.services.base_service import BaseCRUDService
from menu_core.services.catalog import DependencyGuard
from shared.config.constants import EntityKind
from shared.config.logging import get_logger
from shared.utils.admin_schemas import IngredientOutput
from shared.utils.exceptions import ValidationError
from shared.utils.validators import validate_name, validate_price

logger = get_logger(__name__)


class IngredientService(BaseCRUDService[Ingredient, IngredientOutput]):
    """Service for ingredient management."""

    writable_fields = frozenset({"name", "base_price"})

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            kind=EntityKind.INGREDIENT,
            output_schema=IngredientOutput,
        )

    def search(
        self,
        *,
        name: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
    ) -> list[IngredientOutput]:
        """Case-insensitive name search and/or inclusive price range."""
        if min_price is not None and max_price is not None and min_price > max_price:
            raise ValidationError(
                "El precio mínimo no puede superar al máximo", field="min_price"
            )

        query = select(Ingredient)
        if name and name.strip():
            query = query.where(Ingredient.name.icontains(name.strip(), autoescape=True))
        if min_price is not None:
            query = query.where(Ingredient.base_price >= min_price)
        if max_price is not None:
            query = query.where(Ingredient.base_price <= max_price)

        entities = self._db.scalars(query.order_by(Ingredient.id)).all()
        return [self.to_output(e) for e in entities]

    def _validate_create(self, data: dict[str, Any]) -> dict[str, Any]:
        with self._field("name"):
            data["name"] = validate_name(data.get("name"))
        with self._field("base_price"):
            data["base_price"] = validate_price(data.get("base_price"))
        return data

    def _validate_update(self, entity: Ingredient, data: dict[str, Any]) -> dict[str, Any]:
        if "name" in data:
            with self._field("name"):
                data["name"] = validate_name(data["name"])
        if "base_price" in data:
            with self._field("base_price"):
                data["base_price"] = validate_price(data["base_price"])
        return data

    def _validate_delete(self, entity: Ingredient) -> None:
        DependencyGuard(self._store).ensure_deletable(self._kind, entity.id)

    def _before_delete(self, entity: Ingredient) -> None:
        branch_ids = self._store.withdraw_from_branches(self._kind, entity.id)
        if branch_ids:
            logger.info(
                "Ingredient withdrawn from branches",
                ingredient_id=entity.id,
                branch_ids=branch_ids,
            )
