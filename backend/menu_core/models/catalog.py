"""
Catalog Models: Product, ProductGroup, GroupItem.

The composition graph is Product -> ProductGroup -> GroupItem -> (Product | Ingredient).
Edges are plain ordered ID lists stored on the owning record (JSON columns),
with no foreign keys and no reverse index: a referenced record can vanish
without the owner noticing, and readers must tolerate dangling IDs.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import JSON, Enum as SAEnum, Float, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import ItemType

from .base import AuditMixin, Base, IdType


def _item_type_column() -> SAEnum:
    return SAEnum(
        ItemType,
        name="item_type",
        values_callable=lambda enum: [member.value for member in enum],
        native_enum=False,
        validate_strings=True,
    )


class Product(AuditMixin, Base):
    """
    A sellable menu item.

    A product with an empty `group_ids` is a plain, non-customizable item;
    otherwise each referenced ProductGroup is a customization slot or bundle.
    """

    __tablename__ = "product"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    base_price: Mapped[float] = mapped_column(Float, nullable=False)
    discounted_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # Ordered ProductGroup IDs
    group_ids: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)


class GroupItem(AuditMixin, Base):
    """
    A priced wrapper around exactly one Ingredient or Product.

    Lets the same item appear in several groups at different prices.
    `override_price` is None to inherit the wrapped item's base price;
    0.0 is a real override meaning "free".
    """

    __tablename__ = "group_item"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(IdType, nullable=False)
    item_type: Mapped[ItemType] = mapped_column(_item_type_column(), nullable=False)
    override_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    __table_args__ = (
        # Reverse lookups by the dependency guard ("which items wrap X?")
        Index("ix_group_item_target", "item_type", "item_id"),
    )


class ProductGroup(AuditMixin, Base):
    """
    A named, typed, ordered set of GroupItems.

    A `product` group holds GroupItems wrapping Products; an `ingredient`
    group holds GroupItems wrapping Ingredients. The services reject
    mismatched members on create and update.
    """

    __tablename__ = "product_group"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[ItemType] = mapped_column(_item_type_column(), nullable=False, index=True)
    # Ordered GroupItem IDs (display order is significant)
    group_item_ids: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
