"""
Branch Availability Service.

Decides which products and ingredients can be sold at a branch.

Enabling a product cascades: every Product and Ingredient reachable through
its groups is marked available too. The walk uses an explicit stack and a
visited set, so cycles (A contains B contains A) terminate and deep menus
cannot exhaust the call stack. Flags are accumulated in memory and written
once at the end; re-running the same call converges to the same state.

Disabling does not cascade: sub-items may be shared with other enabled
parents and there is no reference counting.

Usage:
    service = AvailabilityService(db)
    result = service.set_product_available(branch_id, burger_id, True)
    service.is_ingredient_available(branch_id, cheese_id)  # True
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from menu_core.models import Branch
from menu_core.services.base_service import BaseService
from menu_core.services.catalog import CompositionResolver
from shared.config.constants import ENTITY_LABELS, EntityKind, ItemType
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.correlation import operation_scope
from shared.utils.admin_schemas import PropagationResult
from shared.utils.exceptions import NotFoundError

logger = get_logger(__name__)


class AvailabilityService(BaseService[Branch]):
    """Per-branch availability of products and ingredients."""

    def __init__(self, db: Session, *, max_nodes: int | None = None):
        super().__init__(db, EntityKind.BRANCH)
        self._resolver = CompositionResolver(self._store)
        # 0 = unlimited
        self._max_nodes = settings.propagation_max_nodes if max_nodes is None else max_nodes

    def _get_branch(self, branch_id: int) -> Branch:
        branch = self._repo.find_by_id(branch_id)
        if branch is None:
            raise NotFoundError(ENTITY_LABELS[EntityKind.BRANCH], branch_id)
        return branch

    # =========================================================================
    # Queries
    # =========================================================================

    def is_product_available(self, branch_id: int, product_id: int) -> bool:
        """False for products never added to the branch."""
        return self._get_branch(branch_id).is_product_available(product_id)

    def is_ingredient_available(self, branch_id: int, ingredient_id: int) -> bool:
        """False for ingredients never added to the branch."""
        return self._get_branch(branch_id).is_ingredient_available(ingredient_id)

    # =========================================================================
    # Cascading enable
    # =========================================================================

    def set_product_available(
        self, branch_id: int, product_id: int, active: bool
    ) -> PropagationResult:
        """
        Mark a product at a branch and, when `active`, everything it contains.

        Missing products and groups met during the walk are logged and
        skipped. Only an unknown branch raises.

        Raises:
            NotFoundError: If the branch does not exist.
        """
        with operation_scope(branch_id):
            branch = self._get_branch(branch_id)
            result = PropagationResult(branch_id=branch_id, product_id=product_id, active=active)

            product_flags: dict[int, bool] = {product_id: active}
            ingredient_flags: dict[int, bool] = {}
            if active:
                self._walk(product_id, product_flags, ingredient_flags, result)

            for pid, flag in product_flags.items():
                branch.set_product_flag(pid, flag)
            for iid, flag in ingredient_flags.items():
                branch.set_ingredient_flag(iid, flag)

            self._commit("actualizar disponibilidad", branch_id=branch_id, product_id=product_id)

            result.products_marked = list(product_flags)
            result.ingredients_marked = list(ingredient_flags)
            logger.info(
                "Product availability propagated",
                product_id=product_id,
                active=active,
                products=len(result.products_marked),
                ingredients=len(result.ingredients_marked),
                skipped=result.skipped,
            )
            return result

    def _walk(
        self,
        root_id: int,
        product_flags: dict[int, bool],
        ingredient_flags: dict[int, bool],
        result: PropagationResult,
    ) -> None:
        """Depth-first walk from `root_id`, accumulating flags in place."""
        stack = [root_id]
        visited: set[int] = set()

        while stack:
            pid = stack.pop()
            if pid in visited:
                continue
            if self._max_nodes and len(visited) >= self._max_nodes:
                logger.warning(
                    "Propagation stopped at node limit",
                    product_id=root_id,
                    max_nodes=self._max_nodes,
                    pending=len(stack) + 1,
                )
                result.truncated = True
                return
            visited.add(pid)

            product = self._store.load(EntityKind.PRODUCT, pid)
            if product is None:
                logger.warning("Skipping missing product during propagation", product_id=pid)
                result.skipped += 1
                continue

            groups = self._store.load_many(EntityKind.PRODUCT_GROUP, product.group_ids)
            for group_id in product.group_ids:
                group = groups.get(group_id)
                if group is None:
                    logger.warning(
                        "Skipping missing group during propagation",
                        product_id=pid,
                        group_id=group_id,
                    )
                    result.skipped += 1
                    continue

                for item in self._resolver.resolve(group):
                    if item.kind == ItemType.PRODUCT:
                        product_flags[item.id] = True
                        stack.append(item.id)
                    else:
                        ingredient_flags[item.id] = True

    # =========================================================================
    # Direct, non-cascading mutations
    # =========================================================================

    def set_product_availability(self, branch_id: int, product_id: int, active: bool) -> None:
        """Overwrite one product flag, adding the product to the branch if needed."""
        with operation_scope(branch_id):
            branch = self._get_branch(branch_id)
            branch.set_product_flag(product_id, active)
            self._commit("actualizar disponibilidad", branch_id=branch_id, product_id=product_id)
            logger.info("Product flag set", product_id=product_id, active=active)

    def set_ingredient_availability(self, branch_id: int, ingredient_id: int, active: bool) -> None:
        """Overwrite one ingredient flag, adding the ingredient to the branch if needed."""
        with operation_scope(branch_id):
            branch = self._get_branch(branch_id)
            branch.set_ingredient_flag(ingredient_id, active)
            self._commit("actualizar disponibilidad", branch_id=branch_id, ingredient_id=ingredient_id)
            logger.info("Ingredient flag set", ingredient_id=ingredient_id, active=active)

    def add_ingredient(self, branch_id: int, ingredient_id: int, active: bool = True) -> None:
        self.set_ingredient_availability(branch_id, ingredient_id, active)

    def remove_product(self, branch_id: int, product_id: int) -> bool:
        """
        Take one product off the branch. Sub-items keep their flags.

        Returns:
            False if the product was not at the branch.
        """
        with operation_scope(branch_id):
            branch = self._get_branch(branch_id)
            removed = branch.drop_product(product_id)
            if removed:
                self._commit("actualizar disponibilidad", branch_id=branch_id, product_id=product_id)
                logger.info("Product removed from branch", product_id=product_id)
            return removed

    def remove_ingredient(self, branch_id: int, ingredient_id: int) -> bool:
        with operation_scope(branch_id):
            branch = self._get_branch(branch_id)
            removed = branch.drop_ingredient(ingredient_id)
            if removed:
                self._commit("actualizar disponibilidad", branch_id=branch_id, ingredient_id=ingredient_id)
                logger.info("Ingredient removed from branch", ingredient_id=ingredient_id)
            return removed
