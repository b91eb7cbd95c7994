"""
Dependency guard: who still references a record that is about to be deleted.

Edges point from owner to owned and there is no maintained reverse index, so
dependants are found by scanning owners for exact membership of the ID in
their lists:

    Ingredient / Product <- GroupItem <- ProductGroup <- Product

Every delete in the domain services asks the guard first and refuses with
ResourceInUseError when anything is returned.
"""

from __future__ import annotations

from menu_core.services.crud.store import CatalogStore
from shared.config.constants import ENTITY_LABELS, EntityKind, ItemType
from shared.config.logging import get_logger
from shared.utils.admin_schemas import DeleteCheck
from shared.utils.exceptions import ResourceInUseError

logger = get_logger(__name__)


class DependencyGuard:
    """Reverse-reference scans over a CatalogStore."""

    def __init__(self, store: CatalogStore):
        self._store = store

    # =========================================================================
    # Labels
    # =========================================================================

    def _label(self, kind: EntityKind, entity_id: int) -> str:
        label = ENTITY_LABELS[kind]
        record = self._store.load(kind, entity_id)
        name = getattr(record, "name", None)
        if name:
            return f"{label} '{name}' #{entity_id}"
        return f"{label} #{entity_id}"

    # =========================================================================
    # Reverse scans
    # =========================================================================

    def _groups_containing(self, group_item_id: int) -> list[int]:
        return self._store.find_ids_where_list_contains(
            EntityKind.PRODUCT_GROUP, "group_item_ids", group_item_id
        )

    def _products_referencing(self, group_id: int) -> list[int]:
        return self._store.find_ids_where_list_contains(
            EntityKind.PRODUCT, "group_ids", group_id
        )

    def _collect_from_group_items(
        self, group_item_ids: list[int], found: dict[tuple[EntityKind, int], None]
    ) -> None:
        for group_item_id in group_item_ids:
            found[(EntityKind.GROUP_ITEM, group_item_id)] = None
            self._collect_from_groups(self._groups_containing(group_item_id), found)

    def _collect_from_groups(
        self, group_ids: list[int], found: dict[tuple[EntityKind, int], None]
    ) -> None:
        for group_id in group_ids:
            found[(EntityKind.PRODUCT_GROUP, group_id)] = None
            for product_id in self._products_referencing(group_id):
                found[(EntityKind.PRODUCT, product_id)] = None

    def find_dependants(self, kind: EntityKind, entity_id: int) -> list[str]:
        """
        Labels of every record that would be left dangling by deleting
        (kind, entity_id). Order is stable (discovery order) and de-duplicated.
        """
        kind = EntityKind(kind)
        # Insertion-ordered set of (kind, id)
        found: dict[tuple[EntityKind, int], None] = {}

        if kind in (EntityKind.INGREDIENT, EntityKind.PRODUCT):
            wrappers = self._store.find_ids_where(
                EntityKind.GROUP_ITEM,
                item_type=ItemType(kind.value),
                item_id=entity_id,
            )
            self._collect_from_group_items(wrappers, found)
        elif kind == EntityKind.GROUP_ITEM:
            self._collect_from_groups(self._groups_containing(entity_id), found)
        elif kind == EntityKind.PRODUCT_GROUP:
            for product_id in self._products_referencing(entity_id):
                found[(EntityKind.PRODUCT, product_id)] = None
        # Branches are never referenced by catalog records

        # A product reached through its own groups is not its own dependant
        found.pop((kind, entity_id), None)

        labels = [self._label(k, i) for k, i in found]
        if labels:
            logger.debug(
                "Dependants found",
                kind=kind.value,
                entity_id=entity_id,
                count=len(labels),
            )
        return labels

    def can_delete(self, kind: EntityKind, entity_id: int) -> DeleteCheck:
        blockers = self.find_dependants(kind, entity_id)
        return DeleteCheck(kind=kind, id=entity_id, ok=not blockers, blockers=blockers)

    def ensure_deletable(self, kind: EntityKind, entity_id: int) -> None:
        """
        Raises:
            ResourceInUseError: If anything still references the record.
        """
        blockers = self.find_dependants(kind, entity_id)
        if blockers:
            raise ResourceInUseError(ENTITY_LABELS[EntityKind(kind)], entity_id, blockers)
