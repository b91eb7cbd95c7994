"""
Branch Models: Branch and its per-branch availability rows.

Availability is stored as one row per (branch, product) and one row per
(branch, ingredient). Row presence is membership in the branch's lists; the
row's `is_available` is the flag. Every mutation goes through the Branch
methods below, so enumeration and yes/no lookups always agree.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, IdType


class Branch(AuditMixin, Base):
    """
    Represents a physical restaurant location/branch.
    Each branch has its own open/closed state, schedule and availability flags.
    """

    __tablename__ = "branch"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False, default="")
    city: Mapped[str] = mapped_column(Text, nullable=False, default="")
    address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # {"SUNDAY": ["08:00-13:00", "16:00-21:00"], ...}
    activity_times: Mapped[dict[str, list[str]]] = mapped_column(JSON, nullable=False, default=dict)
    kosher_type: Mapped[str] = mapped_column(Text, nullable=False, default="")
    accessibility_list: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Relationships
    branch_products: Mapped[list["BranchProduct"]] = relationship(
        back_populates="branch",
        cascade="all, delete-orphan",
        order_by="BranchProduct.id",
    )
    branch_ingredients: Mapped[list["BranchIngredient"]] = relationship(
        back_populates="branch",
        cascade="all, delete-orphan",
        order_by="BranchIngredient.id",
    )

    # =========================================================================
    # Lookups
    # =========================================================================

    @property
    def product_ids(self) -> list[int]:
        return [bp.product_id for bp in self.branch_products]

    @property
    def ingredient_ids(self) -> list[int]:
        return [bi.ingredient_id for bi in self.branch_ingredients]

    @property
    def product_availability(self) -> dict[int, bool]:
        return {bp.product_id: bp.is_available for bp in self.branch_products}

    @property
    def ingredient_availability(self) -> dict[int, bool]:
        return {bi.ingredient_id: bi.is_available for bi in self.branch_ingredients}

    def is_product_available(self, product_id: int) -> bool:
        """Unknown products are unavailable."""
        return self.product_availability.get(product_id, False)

    def is_ingredient_available(self, ingredient_id: int) -> bool:
        """Unknown ingredients are unavailable."""
        return self.ingredient_availability.get(ingredient_id, False)

    # =========================================================================
    # Mutations
    # =========================================================================

    def set_product_flag(self, product_id: int, available: bool) -> None:
        """Add the product to the branch if needed, then set its flag."""
        for bp in self.branch_products:
            if bp.product_id == product_id:
                bp.is_available = available
                return
        self.branch_products.append(
            BranchProduct(product_id=product_id, is_available=available)
        )

    def set_ingredient_flag(self, ingredient_id: int, available: bool) -> None:
        """Add the ingredient to the branch if needed, then set its flag."""
        for bi in self.branch_ingredients:
            if bi.ingredient_id == ingredient_id:
                bi.is_available = available
                return
        self.branch_ingredients.append(
            BranchIngredient(ingredient_id=ingredient_id, is_available=available)
        )

    def drop_product(self, product_id: int) -> bool:
        """Remove the product from the branch. Returns False if it was not there."""
        for bp in list(self.branch_products):
            if bp.product_id == product_id:
                self.branch_products.remove(bp)
                return True
        return False

    def drop_ingredient(self, ingredient_id: int) -> bool:
        """Remove the ingredient from the branch. Returns False if it was not there."""
        for bi in list(self.branch_ingredients):
            if bi.ingredient_id == ingredient_id:
                self.branch_ingredients.remove(bi)
                return True
        return False

    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, name='{self.name}', city='{self.city}')>"


class BranchProduct(Base):
    """
    A product offered at a branch, with its availability flag.

    `product_id` is a plain ID: products carry no reverse reference to
    branches, mirroring the rest of the catalog graph.
    """

    __tablename__ = "branch_product"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    branch_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("branch.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(IdType, nullable=False, index=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    branch: Mapped[Optional["Branch"]] = relationship(back_populates="branch_products")

    __table_args__ = (
        UniqueConstraint("branch_id", "product_id", name="uq_branch_product"),
    )


class BranchIngredient(Base):
    """An ingredient stocked at a branch, with its availability flag."""

    __tablename__ = "branch_ingredient"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    branch_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("branch.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ingredient_id: Mapped[int] = mapped_column(IdType, nullable=False, index=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    branch: Mapped[Optional["Branch"]] = relationship(back_populates="branch_ingredients")

    __table_args__ = (
        UniqueConstraint("branch_id", "ingredient_id", name="uq_branch_ingredient"),
    )
