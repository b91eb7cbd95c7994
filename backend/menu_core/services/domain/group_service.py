"""
GroupItem and ProductGroup Services.

A GroupItem wraps exactly one Product or Ingredient with an optional price
override. A ProductGroup is a typed, ordered list of GroupItems; every member
must wrap the kind of item the group is typed for.

Lifecycle: targets exist before their GroupItems, GroupItems before the
groups that list them. Deletes go the other way, enforced by the guard.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from menu_core.models import GroupItem, ProductGroup
from menu_core.services.base_service import BaseCRUDService
from menu_core.services.catalog import CompositionResolver, DependencyGuard
from shared.config.constants import ENTITY_LABELS, EntityKind, ItemType
from shared.config.logging import get_logger
from shared.utils.admin_schemas import GroupItemOutput, ProductGroupOutput, ResolvedItem
from shared.utils.exceptions import TypeMismatchError, ValidationError
from shared.utils.validators import (
    parse_item_type,
    validate_id_list,
    validate_name,
    validate_price,
)

logger = get_logger(__name__)


class GroupItemService(BaseCRUDService[GroupItem, GroupItemOutput]):
    """Service for priced item wrappers."""

    writable_fields = frozenset({"item_id", "item_type", "override_price"})

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            kind=EntityKind.GROUP_ITEM,
            output_schema=GroupItemOutput,
        )

    def list_wrapping(self, item_type: ItemType | str, item_id: int) -> list[GroupItemOutput]:
        """GroupItems that wrap the given Product or Ingredient."""
        with self._field("item_type"):
            item_type = parse_item_type(item_type)
        entities = self._repo.find_where(item_type=item_type, item_id=item_id)
        return [self.to_output(e) for e in entities]

    def _require_target(self, item_type: ItemType, item_id: Any) -> None:
        if isinstance(item_id, bool) or not isinstance(item_id, int) or item_id <= 0:
            raise ValidationError(f"item_id inválido: {item_id!r}", field="item_id")
        target_kind = EntityKind(item_type.value)
        if not self._store.exists(target_kind, item_id):
            raise ValidationError(
                f"{ENTITY_LABELS[target_kind]} con ID {item_id} no existe",
                field="item_id",
            )

    def _validate_create(self, data: dict[str, Any]) -> dict[str, Any]:
        for required in ("item_id", "item_type"):
            if data.get(required) is None:
                raise ValidationError(f"{required} es requerido", field=required)

        with self._field("item_type"):
            data["item_type"] = parse_item_type(data["item_type"])
        self._require_target(data["item_type"], data["item_id"])
        with self._field("override_price"):
            data["override_price"] = validate_price(data.get("override_price"), allow_none=True)
        return data

    def _validate_update(self, entity: GroupItem, data: dict[str, Any]) -> dict[str, Any]:
        if "item_type" in data:
            with self._field("item_type"):
                data["item_type"] = parse_item_type(data["item_type"])
        if "override_price" in data:
            with self._field("override_price"):
                data["override_price"] = validate_price(data["override_price"], allow_none=True)

        item_type = data.get("item_type", entity.item_type)
        item_id = data.get("item_id", entity.item_id)
        if "item_type" in data or "item_id" in data:
            self._require_target(item_type, item_id)

        if item_type != entity.item_type:
            # Retyping must not break any group that already lists this item
            group_ids = self._store.find_ids_where_list_contains(
                EntityKind.PRODUCT_GROUP, "group_item_ids", entity.id
            )
            for group in self._store.load_many(EntityKind.PRODUCT_GROUP, group_ids).values():
                if group.type != item_type:
                    raise TypeMismatchError(
                        ItemType(group.type).value, [entity.id], group_id=group.id
                    )
        return data

    def _validate_delete(self, entity: GroupItem) -> None:
        DependencyGuard(self._store).ensure_deletable(self._kind, entity.id)


class ProductGroupService(BaseCRUDService[ProductGroup, ProductGroupOutput]):
    """
    Service for product groups.

    Business rules:
    - `type` is "product" or "ingredient"
    - Every member GroupItem must exist and wrap an item of the group's type
    - A group is deleted only when no Product references it
    """

    writable_fields = frozenset({"name", "type", "group_item_ids"})

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            kind=EntityKind.PRODUCT_GROUP,
            output_schema=ProductGroupOutput,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def list_by_type(self, group_type: ItemType | str) -> list[ProductGroupOutput]:
        with self._field("type"):
            group_type = parse_item_type(group_type)
        entities = self._repo.find_where(type=group_type)
        return [self.to_output(e) for e in entities]

    def list_containing(self, group_item_id: int) -> list[ProductGroupOutput]:
        ids = self._store.find_ids_where_list_contains(
            self._kind, "group_item_ids", group_item_id
        )
        return [self.to_output(e) for e in self._repo.find_by_ids(ids)]

    def resolve(self, group_id: int) -> list[ResolvedItem]:
        return CompositionResolver(self._store).resolve_by_id(group_id)

    # =========================================================================
    # Membership
    # =========================================================================

    def add_item(self, group_id: int, group_item_id: int) -> ProductGroupOutput:
        """Append a GroupItem. An item already in the group keeps its position."""
        group = self.get_entity_or_404(group_id)
        if group_item_id not in group.group_item_ids:
            self._check_members(ItemType(group.type), [group_item_id])
            group.group_item_ids = [*group.group_item_ids, group_item_id]
            self._commit("actualizar", entity_id=group_id)
            logger.info("Item added to group", group_id=group_id, group_item_id=group_item_id)
        return self.to_output(group)

    def remove_item(self, group_id: int, group_item_id: int) -> ProductGroupOutput:
        group = self.get_entity_or_404(group_id)
        if group_item_id in group.group_item_ids:
            group.group_item_ids = [i for i in group.group_item_ids if i != group_item_id]
            self._commit("actualizar", entity_id=group_id)
            logger.info("Item removed from group", group_id=group_id, group_item_id=group_item_id)
        return self.to_output(group)

    # =========================================================================
    # Validation
    # =========================================================================

    def _check_members(self, group_type: ItemType, group_item_ids: list[int]) -> None:
        """
        Raises:
            ValidationError: If a member does not exist.
            TypeMismatchError: If a member wraps the other kind of item.
        """
        self._require_existing("group_item_ids", EntityKind.GROUP_ITEM, group_item_ids)
        members = self._store.load_many(EntityKind.GROUP_ITEM, group_item_ids)
        mismatched = [i for i in group_item_ids if members[i].item_type != group_type]
        if mismatched:
            raise TypeMismatchError(group_type.value, mismatched)

    def _validate_create(self, data: dict[str, Any]) -> dict[str, Any]:
        for required in ("name", "type"):
            if data.get(required) is None:
                raise ValidationError(f"{required} es requerido", field=required)

        with self._field("name"):
            data["name"] = validate_name(data["name"])
        with self._field("type"):
            data["type"] = parse_item_type(data["type"])
        with self._field("group_item_ids"):
            data["group_item_ids"] = validate_id_list(data.get("group_item_ids"), "group_item_ids")

        self._check_members(data["type"], data["group_item_ids"])
        return data

    def _validate_update(self, entity: ProductGroup, data: dict[str, Any]) -> dict[str, Any]:
        if "name" in data:
            with self._field("name"):
                data["name"] = validate_name(data["name"])
        if "type" in data:
            with self._field("type"):
                data["type"] = parse_item_type(data["type"])
        if "group_item_ids" in data:
            with self._field("group_item_ids"):
                data["group_item_ids"] = validate_id_list(data["group_item_ids"], "group_item_ids")

        if "type" in data or "group_item_ids" in data:
            self._check_members(
                data.get("type", ItemType(entity.type)),
                data.get("group_item_ids", entity.group_item_ids),
            )
        return data

    def _validate_delete(self, entity: ProductGroup) -> None:
        DependencyGuard(self._store).ensure_deletable(self._kind, entity.id)
