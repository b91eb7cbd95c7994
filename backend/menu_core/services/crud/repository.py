"""
Repository Pattern for database access.

Provides a clean abstraction layer between business logic and data access.

Usage:
    from menu_core.services.crud.repository import BaseRepository

    product_repo = BaseRepository(Product, db)

    products = product_repo.find_all(order_by=Product.name)
    product = product_repo.find_by_id(42)
    exists = product_repo.exists(42)

    # Exact membership scan over an ID-list column
    product_ids = product_repo.find_ids_where_list_contains("group_ids", 7)
"""

from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import select, func, exists as sql_exists
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from menu_core.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Base repository providing common database operations.
    """

    def __init__(self, model: type[ModelT], session: Session):
        self._model = model
        self._session = session

    @property
    def model(self) -> type[ModelT]:
        """The SQLAlchemy model class."""
        return self._model

    @property
    def session(self) -> Session:
        """The database session."""
        return self._session

    def _base_query(self) -> Select:
        """Create base select query."""
        return select(self._model)

    def _apply_options(
        self, query: Select, options: list[Any] | None
    ) -> Select:
        """Apply eager loading options."""
        if options:
            query = query.options(*options)
        return query

    def _column(self, field: str) -> Any:
        column = getattr(self._model, field, None)
        if column is None:
            raise AttributeError(
                f"Model {self._model.__name__} does not have a '{field}' column."
            )
        return column

    def find_by_id(
        self,
        entity_id: int,
        *,
        options: list[Any] | None = None,
    ) -> ModelT | None:
        """
        Find entity by primary key.

        Args:
            entity_id: The primary key value.
            options: SQLAlchemy loader options (selectinload, joinedload).

        Returns:
            Entity or None if not found.
        """
        query = self._base_query().where(self._model.id == entity_id)
        query = self._apply_options(query, options)
        return self._session.scalar(query)

    def find_all(
        self,
        *,
        options: list[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """
        Find all entities.

        Args:
            options: SQLAlchemy loader options.
            limit: Maximum number of results.
            offset: Number of results to skip.
            order_by: Column or expression to order by (defaults to id).

        Returns:
            Sequence of entities.
        """
        query = self._base_query()
        query = self._apply_options(query, options)

        query = query.order_by(order_by if order_by is not None else self._model.id)
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return self._session.scalars(query).all()

    def find_by_ids(
        self,
        entity_ids: Sequence[int],
        *,
        options: list[Any] | None = None,
    ) -> Sequence[ModelT]:
        """
        Find multiple entities by IDs.

        Returns:
            Sequence of found entities (may be less than requested), ordered by id.
        """
        if not entity_ids:
            return []

        query = self._base_query().where(self._model.id.in_(list(entity_ids)))
        query = self._apply_options(query, options).order_by(self._model.id)
        return self._session.scalars(query).all()

    def find_where(self, **equals: Any) -> Sequence[ModelT]:
        """Find entities whose columns equal the given values, ordered by id."""
        query = self._base_query()
        for field, value in equals.items():
            query = query.where(self._column(field) == value)
        return self._session.scalars(query.order_by(self._model.id)).all()

    def find_ids_where(self, **equals: Any) -> list[int]:
        """IDs of entities whose columns equal the given values, ordered by id."""
        query = select(self._model.id)
        for field, value in equals.items():
            query = query.where(self._column(field) == value)
        return list(self._session.scalars(query.order_by(self._model.id)).all())

    def find_ids_where_list_contains(self, field: str, value: int) -> list[int]:
        """
        IDs of entities whose ID-list column contains `value` as an element.

        Membership is exact element equality, so 12 never matches a list
        holding only 112. The scan is linear in the table size: list columns
        are JSON and carry no reverse index.
        """
        column = self._column(field)
        rows = self._session.execute(
            select(self._model.id, column).order_by(self._model.id)
        ).all()
        return [
            row_id
            for row_id, values in rows
            if values and any(int(v) == value for v in values)
        ]

    def count(self) -> int:
        """Count all entities."""
        query = select(func.count()).select_from(self._model)
        return self._session.scalar(query) or 0

    def exists(self, entity_id: int) -> bool:
        """Check if entity exists by ID."""
        query = select(sql_exists().where(self._model.id == entity_id))
        return self._session.scalar(query) or False

    def add(self, entity: ModelT) -> ModelT:
        """Add entity to session (not committed)."""
        self._session.add(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        """Delete entity from session (not committed)."""
        self._session.delete(entity)

    def refresh(self, entity: ModelT) -> ModelT:
        """Refresh entity from database."""
        self._session.refresh(entity)
        return entity
