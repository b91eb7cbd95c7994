"""
Property-based Testing with Hypothesis.

Each example builds its own schema through isolated_session(), since
function-scoped fixtures are shared across examples.
"""

from hypothesis import given, settings, strategies as st

from menu_core.services.catalog import CompositionResolver, DependencyGuard
from menu_core.services.crud import CatalogStore
from menu_core.services.domain import AvailabilityService
from shared.config.constants import EntityKind, ItemType
from shared.utils.validators import dedupe_ids
from tests.conftest import (
    add_branch,
    add_group,
    add_group_item,
    add_ingredient,
    add_product,
    isolated_session,
)

prices = st.floats(min_value=0.0, max_value=10_000.0, allow_nan=False, allow_infinity=False)


class TestResolverProperties:

    @given(base_price=prices, override=st.one_of(st.none(), prices))
    @settings(max_examples=40, deadline=None)
    def test_override_precedence(self, base_price, override):
        """Property: null inherits the base price, any set override (0.0 included) wins."""
        with isolated_session() as db:
            ingredient = add_ingredient(db, "Item", base_price)
            group = add_group(db, items=[add_group_item(db, ingredient, override)])

            [item] = CompositionResolver(CatalogStore(db)).resolve(group)

            expected = base_price if override is None else override
            assert item.effective_price == expected

    @given(order=st.permutations(list(range(5))))
    @settings(max_examples=30, deadline=None)
    def test_resolution_order_matches_group_item_ids(self, order):
        """Property: output order equals group_item_ids order for any permutation."""
        with isolated_session() as db:
            items = [
                add_group_item(db, add_ingredient(db, f"I{i}", float(i)))
                for i in range(5)
            ]
            group = add_group(db, items=[items[i] for i in order])

            resolved = CompositionResolver(CatalogStore(db)).resolve(group)

            assert [r.name for r in resolved] == [f"I{i}" for i in order]


# Random product graphs: node i's single group wraps the listed products
graphs = st.integers(min_value=1, max_value=6).flatmap(
    lambda n: st.lists(
        st.lists(st.integers(min_value=0, max_value=n - 1), max_size=3),
        min_size=n,
        max_size=n,
    )
)


def _build_graph(db, edges):
    products = [add_product(db, f"P{i}", 1.0) for i in range(len(edges))]
    for i, targets in enumerate(edges):
        wrapped = [add_group_item(db, products[t]) for t in dedupe_ids(targets)]
        group = add_group(db, f"G{i}", ItemType.PRODUCT, wrapped)
        products[i].group_ids = [group.id]
    db.commit()
    return products


def _reachable(edges, root):
    seen, stack = set(), [root]
    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        stack.extend(edges[node])
    return seen


class TestPropagationProperties:

    @given(edges=graphs)
    @settings(max_examples=40, deadline=None)
    def test_enable_marks_exactly_the_reachable_products(self, edges):
        """Property: terminates on any graph (cycles included) and marks each reachable product once."""
        with isolated_session() as db:
            products = _build_graph(db, edges)
            branch = add_branch(db)

            AvailabilityService(db).set_product_available(branch.id, products[0].id, True)

            expected = {products[i].id for i in _reachable(edges, 0)}
            assert set(branch.product_ids) == expected
            assert len(branch.product_ids) == len(expected)
            assert all(branch.product_availability.values())

    @given(edges=graphs)
    @settings(max_examples=30, deadline=None)
    def test_enable_is_idempotent(self, edges):
        with isolated_session() as db:
            products = _build_graph(db, edges)
            branch = add_branch(db)
            service = AvailabilityService(db)

            service.set_product_available(branch.id, products[0].id, True)
            once = (branch.product_availability, branch.ingredient_availability)
            service.set_product_available(branch.id, products[0].id, True)

            assert (branch.product_availability, branch.ingredient_availability) == once


class TestGuardProperties:

    @given(
        group_lists=st.lists(
            st.lists(st.integers(min_value=1, max_value=300), max_size=6),
            min_size=1,
            max_size=8,
        ),
        probe=st.integers(min_value=1, max_value=300),
    )
    @settings(max_examples=40, deadline=None)
    def test_group_dependants_are_exact_members(self, group_lists, probe):
        """Property: a product blocks group G iff G is an element of its group_ids."""
        with isolated_session() as db:
            for i, group_ids in enumerate(group_lists):
                add_product(db, f"P{i}", 1.0, group_ids=group_ids)

            store = CatalogStore(db)
            found = store.find_ids_where_list_contains(EntityKind.PRODUCT, "group_ids", probe)
            blockers = DependencyGuard(store).find_dependants(EntityKind.PRODUCT_GROUP, probe)

            expected = [i + 1 for i, ids in enumerate(group_lists) if probe in ids]
            assert found == expected
            assert len(blockers) == len(expected)


class TestValidatorProperties:

    @given(ids=st.lists(st.integers(min_value=1, max_value=50)))
    def test_dedupe_keeps_first_occurrence_order(self, ids):
        result = dedupe_ids(ids)

        assert len(result) == len(set(ids))
        assert result == sorted(set(ids), key=ids.index)
