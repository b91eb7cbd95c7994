"""
Branch Service.

Branch record CRUD plus the schedule, accessibility and kosher setters.
Availability of products and ingredients at a branch lives in
AvailabilityService.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_core.models import Branch, BranchIngredient, BranchProduct
from menu_core.services.base_service import BaseCRUDService
from shared.config.constants import EntityKind
from shared.config.logging import get_logger
from shared.utils.admin_schemas import BranchOutput
from shared.utils.exceptions import ValidationError
from shared.utils.validators import (
    normalize_week_day,
    validate_activity_times,
    validate_name,
    validate_optional_text,
    validate_string_list,
    validate_time_slot,
)

logger = get_logger(__name__)

# Contact fields every branch must be created with
REQUIRED_FIELDS = ("name", "phone", "city", "address")


class BranchService(BaseCRUDService[Branch, BranchOutput]):
    """Service for branch management."""

    writable_fields = frozenset({
        "name", "phone", "city", "address", "is_open",
        "activity_times", "kosher_type", "accessibility_list",
    })

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            kind=EntityKind.BRANCH,
            output_schema=BranchOutput,
        )

    # =========================================================================
    # Finders
    # =========================================================================

    def find_by_city(self, city: str) -> list[BranchOutput]:
        return [self.to_output(b) for b in self._repo.find_where(city=city.strip())]

    def find_open(self) -> list[BranchOutput]:
        return [self.to_output(b) for b in self._repo.find_where(is_open=True)]

    def find_by_kosher_type(self, kosher_type: str) -> list[BranchOutput]:
        return [self.to_output(b) for b in self._repo.find_where(kosher_type=kosher_type.strip())]

    def find_with_accessibility(self, feature: str) -> list[BranchOutput]:
        feature = feature.strip()
        return [
            self.to_output(b)
            for b in self._repo.find_all()
            if feature in (b.accessibility_list or [])
        ]

    def find_offering_product(self, product_id: int) -> list[BranchOutput]:
        """Branches that list the product, whatever its availability flag."""
        query = (
            select(Branch)
            .join(BranchProduct, BranchProduct.branch_id == Branch.id)
            .where(BranchProduct.product_id == product_id)
            .order_by(Branch.id)
        )
        return [self.to_output(b) for b in self._db.scalars(query).all()]

    def find_with_ingredient(self, ingredient_id: int) -> list[BranchOutput]:
        query = (
            select(Branch)
            .join(BranchIngredient, BranchIngredient.branch_id == Branch.id)
            .where(BranchIngredient.ingredient_id == ingredient_id)
            .order_by(Branch.id)
        )
        return [self.to_output(b) for b in self._db.scalars(query).all()]

    # =========================================================================
    # Setters
    # =========================================================================

    def set_is_open(self, branch_id: int, is_open: bool) -> BranchOutput:
        branch = self.get_entity_or_404(branch_id)
        branch.is_open = bool(is_open)
        self._commit("actualizar", entity_id=branch_id)
        logger.info("Branch open state changed", branch_id=branch_id, is_open=branch.is_open)
        return self.to_output(branch)

    def add_activity_time(self, branch_id: int, day: str, slot: str) -> BranchOutput:
        """
        Add a slot such as "08:00-14:00" to a week day. Repeated slots are ignored.

        Raises:
            ValidationError: If the day or the slot is invalid.
        """
        with self._field("day"):
            day_uc = normalize_week_day(day)
        with self._field("slot"):
            slot = validate_time_slot(slot)

        branch = self.get_entity_or_404(branch_id)
        times = dict(branch.activity_times or {})
        slots = list(times.get(day_uc, []))
        if slot not in slots:
            times[day_uc] = [*slots, slot]
            branch.activity_times = times
            self._commit("actualizar", entity_id=branch_id)
        return self.to_output(branch)

    def remove_activity_time(self, branch_id: int, day: str, slot: str) -> BranchOutput:
        """Remove a slot; days left without slots are dropped. Unknown slots are a no-op."""
        with self._field("day"):
            day_uc = normalize_week_day(day)

        branch = self.get_entity_or_404(branch_id)
        times = dict(branch.activity_times or {})
        slots = times.get(day_uc, [])
        slot = slot.strip() if isinstance(slot, str) else slot
        if slot in slots:
            remaining = [s for s in slots if s != slot]
            if remaining:
                times[day_uc] = remaining
            else:
                times.pop(day_uc)
            branch.activity_times = times
            self._commit("actualizar", entity_id=branch_id)
        return self.to_output(branch)

    def add_accessibility(self, branch_id: int, feature: str) -> BranchOutput:
        with self._field("accessibility_list"):
            cleaned = validate_string_list([feature], "La accesibilidad")
        if not cleaned:
            raise ValidationError("La accesibilidad no puede estar vacía", field="accessibility_list")
        feature = cleaned[0]

        branch = self.get_entity_or_404(branch_id)
        if feature not in branch.accessibility_list:
            branch.accessibility_list = [*branch.accessibility_list, feature]
            self._commit("actualizar", entity_id=branch_id)
        return self.to_output(branch)

    def remove_accessibility(self, branch_id: int, feature: str) -> BranchOutput:
        branch = self.get_entity_or_404(branch_id)
        feature = feature.strip()
        if feature in branch.accessibility_list:
            branch.accessibility_list = [f for f in branch.accessibility_list if f != feature]
            self._commit("actualizar", entity_id=branch_id)
        return self.to_output(branch)

    def set_kosher_type(self, branch_id: int, kosher_type: str) -> BranchOutput:
        with self._field("kosher_type"):
            value = validate_optional_text(kosher_type, "El tipo kosher")
        branch = self.get_entity_or_404(branch_id)
        branch.kosher_type = value or ""
        self._commit("actualizar", entity_id=branch_id)
        return self.to_output(branch)

    def clear_kosher_type(self, branch_id: int) -> BranchOutput:
        return self.set_kosher_type(branch_id, "")

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_fields(self, data: dict[str, Any]) -> dict[str, Any]:
        if "name" in data:
            with self._field("name"):
                data["name"] = validate_name(data["name"])
        for field_name, label in (("phone", "El teléfono"), ("city", "La ciudad"), ("address", "La dirección")):
            if field_name in data:
                with self._field(field_name):
                    data[field_name] = validate_optional_text(data[field_name], label) or ""
        if "is_open" in data:
            if not isinstance(data["is_open"], bool):
                raise ValidationError("is_open debe ser booleano", field="is_open")
        if "activity_times" in data:
            with self._field("activity_times"):
                data["activity_times"] = validate_activity_times(data["activity_times"])
        if "kosher_type" in data:
            with self._field("kosher_type"):
                data["kosher_type"] = validate_optional_text(data["kosher_type"], "El tipo kosher") or ""
        if "accessibility_list" in data:
            with self._field("accessibility_list"):
                data["accessibility_list"] = validate_string_list(
                    data["accessibility_list"], "La accesibilidad"
                )
        return data

    def _validate_create(self, data: dict[str, Any]) -> dict[str, Any]:
        missing = [f for f in REQUIRED_FIELDS if f not in data]
        if missing:
            raise ValidationError(f"Faltan campos obligatorios: {', '.join(missing)}", field=missing[0])
        data.setdefault("is_open", False)
        data.setdefault("activity_times", {})
        data.setdefault("kosher_type", "")
        data.setdefault("accessibility_list", [])
        return self._validate_fields(data)

    def _validate_update(self, entity: Branch, data: dict[str, Any]) -> dict[str, Any]:
        return self._validate_fields(data)
