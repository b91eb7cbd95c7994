"""
Tests for AvailabilityService - branch availability propagation.

Tests cover:
- Cascading enable through ingredient and product groups
- Cycle termination and idempotence
- Non-cascading disable, removal and direct setters
- Closed-world defaults for unknown IDs
"""

import pytest

from menu_core.services.domain import AvailabilityService
from shared.config.constants import ItemType
from shared.utils.exceptions import NotFoundError
from tests.conftest import (
    add_group,
    add_group_item,
    add_ingredient,
    add_product,
)


@pytest.fixture
def service(db_session):
    return AvailabilityService(db_session)


def _snapshot(branch):
    return dict(branch.product_availability), dict(branch.ingredient_availability)


@pytest.fixture
def cycle(db_session):
    """Product A's group wraps B, B's group wraps A."""
    a = add_product(db_session, "A", 10.0)
    b = add_product(db_session, "B", 20.0)
    group_a = add_group(db_session, "A parts", ItemType.PRODUCT, [add_group_item(db_session, b)])
    group_b = add_group(db_session, "B parts", ItemType.PRODUCT, [add_group_item(db_session, a)])
    a.group_ids = [group_a.id]
    b.group_ids = [group_b.id]
    db_session.commit()
    return a, b


class TestSetProductAvailable:
    """Tests for AvailabilityService.set_product_available()"""

    def test_burger_enables_cheese(self, service, seed_branch, burger_menu):
        burger, cheese = burger_menu["burger"], burger_menu["cheese"]

        result = service.set_product_available(seed_branch.id, burger.id, True)

        assert seed_branch.product_availability[burger.id] is True
        assert seed_branch.ingredient_availability[cheese.id] is True
        assert result.products_marked == [burger.id]
        assert result.ingredients_marked == [cheese.id]
        assert service.is_ingredient_available(seed_branch.id, cheese.id)

    def test_cascade_reaches_nested_products(self, service, seed_branch, combo_menu):
        service.set_product_available(seed_branch.id, combo_menu["combo"].id, True)

        for name in ("combo", "burger", "fries"):
            assert service.is_product_available(seed_branch.id, combo_menu[name].id)
        for name in ("cheese", "ketchup"):
            assert service.is_ingredient_available(seed_branch.id, combo_menu[name].id)

    def test_enumeration_lists_match_maps(self, service, seed_branch, combo_menu):
        service.set_product_available(seed_branch.id, combo_menu["combo"].id, True)

        assert sorted(seed_branch.product_ids) == sorted(seed_branch.product_availability)
        assert sorted(seed_branch.ingredient_ids) == sorted(seed_branch.ingredient_availability)

    def test_cycle_terminates_and_marks_each_once(self, service, seed_branch, cycle):
        a, b = cycle

        result = service.set_product_available(seed_branch.id, a.id, True)

        assert sorted(result.products_marked) == sorted([a.id, b.id])
        assert sorted(seed_branch.product_ids) == sorted([a.id, b.id])
        assert seed_branch.product_availability == {a.id: True, b.id: True}

    def test_idempotent(self, service, seed_branch, combo_menu):
        service.set_product_available(seed_branch.id, combo_menu["combo"].id, True)
        first = _snapshot(seed_branch)

        service.set_product_available(seed_branch.id, combo_menu["combo"].id, True)

        assert _snapshot(seed_branch) == first
        assert len(seed_branch.branch_products) == 3

    def test_disable_does_not_cascade(self, service, seed_branch, burger_menu):
        burger, cheese = burger_menu["burger"], burger_menu["cheese"]
        service.set_product_available(seed_branch.id, burger.id, True)

        result = service.set_product_available(seed_branch.id, burger.id, False)

        assert result.products_marked == [burger.id]
        assert result.ingredients_marked == []
        assert service.is_product_available(seed_branch.id, burger.id) is False
        assert service.is_ingredient_available(seed_branch.id, cheese.id) is True

    def test_disable_unknown_product_records_false(self, service, seed_branch, burger_menu):
        burger = burger_menu["burger"]

        service.set_product_available(seed_branch.id, burger.id, False)

        assert seed_branch.product_availability == {burger.id: False}
        assert seed_branch.ingredient_availability == {}

    def test_missing_group_is_skipped(self, db_session, service, seed_branch, burger_menu):
        burger = add_product(
            db_session, "Burger XL", 55.0, group_ids=[9999, burger_menu["toppings"].id]
        )

        result = service.set_product_available(seed_branch.id, burger.id, True)

        assert result.skipped == 1
        assert service.is_ingredient_available(seed_branch.id, burger_menu["cheese"].id)

    def test_missing_root_product_is_recorded_and_skipped(self, service, seed_branch):
        result = service.set_product_available(seed_branch.id, 5150, True)

        assert result.skipped == 1
        assert seed_branch.product_availability == {5150: True}

    def test_shared_sub_item_visited_once(self, db_session, service, seed_branch):
        """Diamond: Combo -> (Burger, Wrap) -> Cheese."""
        cheese = add_ingredient(db_session, "Cheese", 1.5)
        toppings = add_group(db_session, "Toppings", items=[add_group_item(db_session, cheese)])
        burger = add_product(db_session, "Burger", 45.0, group_ids=[toppings.id])
        wrap = add_product(db_session, "Wrap", 30.0, group_ids=[toppings.id])
        mains = add_group(
            db_session,
            "Mains",
            ItemType.PRODUCT,
            [add_group_item(db_session, burger), add_group_item(db_session, wrap)],
        )
        combo = add_product(db_session, "Combo", 60.0, group_ids=[mains.id])

        result = service.set_product_available(seed_branch.id, combo.id, True)

        assert result.ingredients_marked == [cheese.id]
        assert len(seed_branch.branch_ingredients) == 1

    def test_node_cap_truncates_walk(self, db_session, seed_branch, combo_menu):
        service = AvailabilityService(db_session, max_nodes=1)

        result = service.set_product_available(seed_branch.id, combo_menu["combo"].id, True)

        assert result.truncated is True
        # Children of the root are marked; their own groups are not walked
        assert not service.is_ingredient_available(seed_branch.id, combo_menu["cheese"].id)
        assert service.is_product_available(seed_branch.id, combo_menu["burger"].id)

    def test_unknown_branch_raises(self, service, burger_menu):
        with pytest.raises(NotFoundError):
            service.set_product_available(404, burger_menu["burger"].id, True)


class TestRemoval:

    def test_remove_product_keeps_sub_items(self, service, seed_branch, burger_menu):
        burger, cheese = burger_menu["burger"], burger_menu["cheese"]
        service.set_product_available(seed_branch.id, burger.id, True)

        assert service.remove_product(seed_branch.id, burger.id) is True

        assert burger.id not in seed_branch.product_ids
        assert burger.id not in seed_branch.product_availability
        assert service.is_ingredient_available(seed_branch.id, cheese.id)

    def test_remove_absent_product_returns_false(self, service, seed_branch):
        assert service.remove_product(seed_branch.id, 77) is False

    def test_add_and_remove_ingredient(self, service, seed_branch):
        service.add_ingredient(seed_branch.id, 8)
        assert service.is_ingredient_available(seed_branch.id, 8)

        assert service.remove_ingredient(seed_branch.id, 8) is True
        assert seed_branch.ingredient_ids == []
        assert service.remove_ingredient(seed_branch.id, 8) is False


class TestDirectSetters:

    def test_product_setter_does_not_propagate(self, service, seed_branch, burger_menu):
        burger, cheese = burger_menu["burger"], burger_menu["cheese"]

        service.set_product_availability(seed_branch.id, burger.id, True)

        assert service.is_product_available(seed_branch.id, burger.id)
        assert not service.is_ingredient_available(seed_branch.id, cheese.id)

    def test_ingredient_setter_overwrites_flag(self, service, seed_branch, burger_menu):
        burger, cheese = burger_menu["burger"], burger_menu["cheese"]
        service.set_product_available(seed_branch.id, burger.id, True)

        service.set_ingredient_availability(seed_branch.id, cheese.id, False)

        assert seed_branch.ingredient_availability == {cheese.id: False}
        assert service.is_product_available(seed_branch.id, burger.id)


class TestDefaults:

    def test_unknown_ids_are_unavailable(self, service, seed_branch):
        assert service.is_product_available(seed_branch.id, 123) is False
        assert service.is_ingredient_available(seed_branch.id, 123) is False

    def test_unknown_branch_query_raises(self, service):
        with pytest.raises(NotFoundError):
            service.is_product_available(999, 1)
