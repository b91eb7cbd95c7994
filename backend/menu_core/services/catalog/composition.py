"""
Composition resolver.

Turns a ProductGroup's ordered GroupItem IDs into the concrete Products and
Ingredients they wrap, each with its effective price:

    effective_price = override_price if override_price is not None else base_price

Stale references are expected (the graph has no referential integrity), so a
GroupItem or target that no longer exists is skipped, never raised.

Usage:
    resolver = CompositionResolver(CatalogStore(db))
    items = resolver.resolve(group)
    view = resolver.build_product(product_id)
"""

from __future__ import annotations

from menu_core.models import GroupItem, Product, ProductGroup
from menu_core.services.crud.store import CatalogStore
from shared.config.constants import ENTITY_LABELS, EntityKind, ItemType
from shared.config.logging import get_logger
from shared.utils.admin_schemas import ProductView, ResolvedGroup, ResolvedItem
from shared.utils.exceptions import NotFoundError

logger = get_logger(__name__)


def effective_price(group_item: GroupItem, base_price: float) -> float:
    """Override wins whenever it is set, including 0.0 (free)."""
    if group_item.override_price is not None:
        return group_item.override_price
    return base_price


class CompositionResolver:
    """Resolves groups and products over a CatalogStore. Read-only."""

    def __init__(self, store: CatalogStore):
        self._store = store

    def resolve(self, group: ProductGroup) -> list[ResolvedItem]:
        """
        Resolve every GroupItem of `group`, in `group_item_ids` order.

        Missing GroupItems and missing targets are skipped.
        """
        group_items = self._store.load_many(EntityKind.GROUP_ITEM, group.group_item_ids)

        # Batch-load targets per kind; order still follows group_item_ids
        target_ids: dict[ItemType, list[int]] = {ItemType.PRODUCT: [], ItemType.INGREDIENT: []}
        for group_item in group_items.values():
            target_ids[ItemType(group_item.item_type)].append(group_item.item_id)
        targets = {
            item_type: self._store.load_many(EntityKind(item_type.value), ids)
            for item_type, ids in target_ids.items()
        }

        resolved: list[ResolvedItem] = []
        for group_item_id in group.group_item_ids:
            group_item = group_items.get(group_item_id)
            if group_item is None:
                logger.debug(
                    "Skipping missing group item",
                    group_id=group.id,
                    group_item_id=group_item_id,
                )
                continue

            item_type = ItemType(group_item.item_type)
            target = targets[item_type].get(group_item.item_id)
            if target is None:
                logger.debug(
                    f"Skipping group item with missing {item_type.value}",
                    group_id=group.id,
                    group_item_id=group_item_id,
                    item_id=group_item.item_id,
                )
                continue

            resolved.append(
                ResolvedItem(
                    kind=item_type,
                    id=target.id,
                    name=target.name,
                    effective_price=effective_price(group_item, target.base_price),
                    group_item_id=group_item.id,
                )
            )

        return resolved

    def resolve_by_id(self, group_id: int) -> list[ResolvedItem]:
        """
        Load the group and resolve it.

        Raises:
            NotFoundError: If the group itself does not exist.
        """
        group = self._store.load(EntityKind.PRODUCT_GROUP, group_id)
        if group is None:
            raise NotFoundError(ENTITY_LABELS[EntityKind.PRODUCT_GROUP], group_id)
        return self.resolve(group)

    def resolve_group(self, group: ProductGroup) -> ResolvedGroup:
        return ResolvedGroup(
            group_id=group.id,
            group_name=group.name,
            type=ItemType(group.type),
            items=self.resolve(group),
        )

    def build_product(self, product_id: int) -> ProductView:
        """
        Ready-to-render view of a product with every group resolved.

        Groups that no longer exist are left out.

        Raises:
            NotFoundError: If the product does not exist.
        """
        product: Product | None = self._store.load(EntityKind.PRODUCT, product_id)
        if product is None:
            raise NotFoundError(ENTITY_LABELS[EntityKind.PRODUCT], product_id)

        groups_by_id = self._store.load_many(EntityKind.PRODUCT_GROUP, product.group_ids)
        groups: list[ResolvedGroup] = []
        for group_id in product.group_ids:
            group = groups_by_id.get(group_id)
            if group is None:
                logger.debug("Skipping missing group", product_id=product_id, group_id=group_id)
                continue
            groups.append(self.resolve_group(group))

        return ProductView(
            id=product.id,
            name=product.name,
            description=product.description,
            base_price=product.base_price,
            discounted_price=product.discounted_price,
            groups=groups,
        )
