"""
Tests for CompositionResolver.

Tests cover:
- Override precedence (None inherits, 0.0 is free)
- Output order follows group_item_ids
- Tolerance of dangling GroupItems and targets
- Product views with every group resolved
"""

import pytest

from menu_core.services.catalog import CompositionResolver
from shared.config.constants import ItemType
from shared.utils.exceptions import NotFoundError
from tests.conftest import (
    add_group,
    add_group_item,
    add_ingredient,
    add_product,
)


@pytest.fixture
def resolver(store):
    return CompositionResolver(store)


class TestResolve:
    """Tests for CompositionResolver.resolve()"""

    def test_burger_toppings_scenario(self, resolver, burger_menu):
        """Cheese wrapped at 1.00 resolves to 1.00, not its 1.50 base."""
        items = resolver.resolve(burger_menu["toppings"])

        assert len(items) == 1
        assert items[0].kind == ItemType.INGREDIENT
        assert items[0].id == burger_menu["cheese"].id
        assert items[0].name == "Cheese"
        assert items[0].effective_price == 1.00
        assert items[0].group_item_id == burger_menu["cheese_item"].id

    def test_null_override_inherits_base_price(self, db_session, resolver):
        onion = add_ingredient(db_session, "Onion", 0.75)
        group = add_group(db_session, items=[add_group_item(db_session, onion)])

        [item] = resolver.resolve(group)

        assert item.effective_price == 0.75

    def test_zero_override_is_free_not_inherited(self, db_session, resolver):
        bacon = add_ingredient(db_session, "Bacon", 3.00)
        group = add_group(db_session, items=[add_group_item(db_session, bacon, override_price=0.0)])

        [item] = resolver.resolve(group)

        assert item.effective_price == 0.0

    def test_same_ingredient_priced_per_group(self, db_session, resolver):
        cheese = add_ingredient(db_session, "Cheese", 1.50)
        cheap = add_group(db_session, "Extras", items=[add_group_item(db_session, cheese, 1.00)])
        premium = add_group(db_session, "Premium", items=[add_group_item(db_session, cheese, 2.25)])

        assert resolver.resolve(cheap)[0].effective_price == 1.00
        assert resolver.resolve(premium)[0].effective_price == 2.25

    def test_order_follows_group_item_ids(self, db_session, resolver):
        a = add_group_item(db_session, add_ingredient(db_session, "A", 1.0))
        b = add_group_item(db_session, add_ingredient(db_session, "B", 2.0))
        c = add_group_item(db_session, add_ingredient(db_session, "C", 3.0))
        group = add_group(db_session, items=[c, a, b])

        names = [item.name for item in resolver.resolve(group)]

        assert names == ["C", "A", "B"]

    def test_product_items_resolve_to_products(self, resolver, combo_menu):
        items = resolver.resolve(combo_menu["mains"])

        assert [(i.kind, i.name, i.effective_price) for i in items] == [
            (ItemType.PRODUCT, "Burger", 45.00),
            (ItemType.PRODUCT, "Fries", 8.00),
        ]

    def test_missing_group_item_is_skipped(self, db_session, resolver):
        cheese = add_ingredient(db_session, "Cheese", 1.50)
        item = add_group_item(db_session, cheese)
        group = add_group(db_session, items=[999_999, item.id])

        items = resolver.resolve(group)

        assert [i.id for i in items] == [cheese.id]

    def test_missing_target_is_skipped(self, db_session, resolver):
        ghost = add_ingredient(db_session, "Ghost", 1.0)
        kept = add_ingredient(db_session, "Kept", 2.0)
        group = add_group(
            db_session,
            items=[add_group_item(db_session, ghost), add_group_item(db_session, kept)],
        )
        db_session.delete(ghost)
        db_session.commit()

        items = resolver.resolve(group)

        assert [i.name for i in items] == ["Kept"]

    def test_empty_group_resolves_to_empty_list(self, db_session, resolver):
        assert resolver.resolve(add_group(db_session, items=[])) == []


class TestResolveById:

    def test_resolves_existing_group(self, resolver, burger_menu):
        items = resolver.resolve_by_id(burger_menu["toppings"].id)
        assert [i.name for i in items] == ["Cheese"]

    def test_missing_group_raises_not_found(self, resolver):
        with pytest.raises(NotFoundError) as exc_info:
            resolver.resolve_by_id(4242)
        assert exc_info.value.status_code == 404


class TestBuildProduct:
    """Tests for CompositionResolver.build_product()"""

    def test_view_contains_resolved_groups(self, resolver, burger_menu):
        view = resolver.build_product(burger_menu["burger"].id)

        assert view.name == "Burger"
        assert view.base_price == 45.00
        assert len(view.groups) == 1
        assert view.groups[0].group_name == "Toppings"
        assert view.groups[0].type == ItemType.INGREDIENT
        assert view.groups[0].items[0].effective_price == 1.00

    def test_plain_product_has_no_groups(self, db_session, resolver):
        water = add_product(db_session, "Water", 5.0, discounted_price=4.0)

        view = resolver.build_product(water.id)

        assert view.groups == []
        assert view.discounted_price == 4.0

    def test_missing_group_is_left_out(self, db_session, resolver, burger_menu):
        product = add_product(
            db_session, "Burger XL", 55.0, group_ids=[777, burger_menu["toppings"].id]
        )

        view = resolver.build_product(product.id)

        assert [g.group_id for g in view.groups] == [burger_menu["toppings"].id]

    def test_missing_product_raises_not_found(self, resolver):
        with pytest.raises(NotFoundError):
            resolver.build_product(31337)
