"""
Ingredient Model: leaf menu component with a base price.
"""

from __future__ import annotations

from sqlalchemy import Float, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, IdType


class Ingredient(AuditMixin, Base):
    """
    Ingredient catalog entry (e.g., cheese, lettuce).

    Leaf of the composition graph. Referenced only through GroupItems, and
    only deletable once no GroupItem wraps it.

    Per-branch availability lives on the Branch side (BranchIngredient),
    never on the ingredient itself.
    """

    __tablename__ = "ingredient"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    base_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
