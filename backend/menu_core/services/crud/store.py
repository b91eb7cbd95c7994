"""
Catalog Store - the persistence contract consumed by the graph algorithms.

The resolver, guard and propagator never query models directly; they go
through this store by record kind:

    load(kind, id) -> record | None
    save(kind, record) -> id
    delete(kind, id) -> bool
    withdraw_from_branches(kind, id) -> [branch_id]
    find_ids_where_list_contains(kind, field, value) -> [id]

Nothing here commits: callers own the transaction.

Usage:
    store = CatalogStore(db)
    group = store.load(EntityKind.PRODUCT_GROUP, 7)
    owners = store.find_ids_where_list_contains(EntityKind.PRODUCT, "group_ids", 7)
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_core.models import (
    Base,
    Branch,
    BranchIngredient,
    BranchProduct,
    GroupItem,
    Ingredient,
    Product,
    ProductGroup,
)
from menu_core.services.crud.repository import BaseRepository
from shared.config.constants import EntityKind

MODEL_BY_KIND: dict[EntityKind, type[Base]] = {
    EntityKind.INGREDIENT: Ingredient,
    EntityKind.PRODUCT: Product,
    EntityKind.GROUP_ITEM: GroupItem,
    EntityKind.PRODUCT_GROUP: ProductGroup,
    EntityKind.BRANCH: Branch,
}


class CatalogStore:
    """Kind-addressed record access over one SQLAlchemy session."""

    def __init__(self, db: Session):
        self._db = db
        self._repos: dict[EntityKind, BaseRepository] = {}

    @property
    def db(self) -> Session:
        return self._db

    def repo(self, kind: EntityKind) -> BaseRepository:
        """Repository for the given record kind."""
        kind = EntityKind(kind)
        if kind not in self._repos:
            self._repos[kind] = BaseRepository(MODEL_BY_KIND[kind], self._db)
        return self._repos[kind]

    def load(self, kind: EntityKind, entity_id: int) -> Any | None:
        return self.repo(kind).find_by_id(entity_id)

    def load_many(self, kind: EntityKind, entity_ids: Sequence[int]) -> dict[int, Any]:
        """Records found for the given IDs, keyed by ID. Missing IDs are absent."""
        return {record.id: record for record in self.repo(kind).find_by_ids(entity_ids)}

    def list_all(self, kind: EntityKind, **kwargs: Any) -> Sequence[Any]:
        return self.repo(kind).find_all(**kwargs)

    def save(self, kind: EntityKind, record: Any) -> int:
        """Add (or re-add) the record and flush so it has an ID."""
        repo = self.repo(kind)
        if not isinstance(record, repo.model):
            raise TypeError(
                f"Expected {repo.model.__name__} for kind '{EntityKind(kind).value}', "
                f"got {type(record).__name__}"
            )
        repo.add(record)
        self._db.flush()
        return record.id

    def delete(self, kind: EntityKind, entity_id: int) -> bool:
        """Delete the record if present. Returns False when it did not exist."""
        repo = self.repo(kind)
        record = repo.find_by_id(entity_id)
        if record is None:
            return False
        repo.delete(record)
        self._db.flush()
        return True

    def withdraw_from_branches(self, kind: EntityKind, entity_id: int) -> list[int]:
        """
        Drop a product or ingredient from every branch that lists it.

        Returns the affected branch IDs. Other kinds never appear on branches.
        """
        kind = EntityKind(kind)
        if kind == EntityKind.PRODUCT:
            stmt = select(BranchProduct.branch_id).where(BranchProduct.product_id == entity_id)
        elif kind == EntityKind.INGREDIENT:
            stmt = select(BranchIngredient.branch_id).where(
                BranchIngredient.ingredient_id == entity_id
            )
        else:
            return []

        branch_ids = sorted(set(self._db.scalars(stmt).all()))
        for branch in self.load_many(EntityKind.BRANCH, branch_ids).values():
            if kind == EntityKind.PRODUCT:
                branch.drop_product(entity_id)
            else:
                branch.drop_ingredient(entity_id)
        self._db.flush()
        return branch_ids

    def exists(self, kind: EntityKind, entity_id: int) -> bool:
        return self.repo(kind).exists(entity_id)

    def find_ids_where(self, kind: EntityKind, **equals: Any) -> list[int]:
        return self.repo(kind).find_ids_where(**equals)

    def find_ids_where_list_contains(
        self, kind: EntityKind, field: str, value: int
    ) -> list[int]:
        return self.repo(kind).find_ids_where_list_contains(field, value)
