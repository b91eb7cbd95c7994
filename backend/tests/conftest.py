"""
Pytest configuration and fixtures for backend tests.
"""

from contextlib import contextmanager

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from menu_core.models import (
    Base, Branch, GroupItem, Ingredient, Product, ProductGroup,
)
from menu_core.services.crud import CatalogStore
from shared.config.constants import ItemType


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def isolated_session():
    """
    Fresh schema and session, dropped on exit.

    Hypothesis examples use this directly: function-scoped fixtures are not
    reset between examples.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    with isolated_session() as session:
        yield session


@pytest.fixture
def store(db_session):
    return CatalogStore(db_session)


# =============================================================================
# Builders
# =============================================================================


def add_ingredient(db, name="Cheese", base_price=1.50):
    ingredient = Ingredient(name=name, base_price=base_price)
    db.add(ingredient)
    db.commit()
    return ingredient


def add_product(db, name="Burger", base_price=45.00, group_ids=None, **kwargs):
    product = Product(name=name, base_price=base_price, group_ids=list(group_ids or []), **kwargs)
    db.add(product)
    db.commit()
    return product


def add_group_item(db, target, override_price=None):
    item_type = ItemType.PRODUCT if isinstance(target, Product) else ItemType.INGREDIENT
    group_item = GroupItem(item_id=target.id, item_type=item_type, override_price=override_price)
    db.add(group_item)
    db.commit()
    return group_item


def add_group(db, name="Toppings", group_type=ItemType.INGREDIENT, items=()):
    group = ProductGroup(
        name=name,
        type=group_type,
        group_item_ids=[gi.id if isinstance(gi, GroupItem) else gi for gi in items],
    )
    db.add(group)
    db.commit()
    return group


def add_branch(db, name="Centro", **kwargs):
    kwargs.setdefault("phone", "+54 11 5555-0000")
    kwargs.setdefault("city", "Buenos Aires")
    kwargs.setdefault("address", "Av. Corrientes 1234")
    branch = Branch(name=name, **kwargs)
    db.add(branch)
    db.commit()
    return branch


# =============================================================================
# Seed fixtures
# =============================================================================


@pytest.fixture
def seed_branch(db_session):
    """Create a test branch."""
    return add_branch(db_session)


@pytest.fixture
def burger_menu(db_session):
    """
    Cheese (1.50) wrapped at 1.00 in the "Toppings" ingredient group,
    referenced by Burger (45.00).
    """
    cheese = add_ingredient(db_session, "Cheese", 1.50)
    cheese_item = add_group_item(db_session, cheese, override_price=1.00)
    toppings = add_group(db_session, "Toppings", ItemType.INGREDIENT, [cheese_item])
    burger = add_product(db_session, "Burger", 45.00, group_ids=[toppings.id])
    return {
        "cheese": cheese,
        "cheese_item": cheese_item,
        "toppings": toppings,
        "burger": burger,
    }


@pytest.fixture
def combo_menu(db_session, burger_menu):
    """
    "Combo" bundles Burger and Fries through a product group; Fries carries
    its own "Sauces" ingredient group.
    """
    ketchup = add_ingredient(db_session, "Ketchup", 0.50)
    ketchup_item = add_group_item(db_session, ketchup, override_price=0.0)
    sauces = add_group(db_session, "Sauces", ItemType.INGREDIENT, [ketchup_item])
    fries = add_product(db_session, "Fries", 12.00, group_ids=[sauces.id])

    burger_item = add_group_item(db_session, burger_menu["burger"])
    fries_item = add_group_item(db_session, fries, override_price=8.00)
    mains = add_group(db_session, "Mains", ItemType.PRODUCT, [burger_item, fries_item])
    combo = add_product(db_session, "Combo", 60.00, group_ids=[mains.id])
    return {
        **burger_menu,
        "ketchup": ketchup,
        "ketchup_item": ketchup_item,
        "sauces": sauces,
        "fries": fries,
        "burger_item": burger_item,
        "fries_item": fries_item,
        "mains": mains,
        "combo": combo,
    }
