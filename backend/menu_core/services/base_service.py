"""
Base Service Classes for the catalog and branch services.

Provides abstract base classes for application services that:
- Use the CatalogStore / Repository for data access (not direct queries)
- Transform entities into pydantic output DTOs
- Handle business logic and validation before any write

Architecture:
    CLI / REST collaborator (thin) → Service (business logic) → Repository → Model

Usage:
    from menu_core.services.base_service import BaseCRUDService

    class IngredientService(BaseCRUDService[Ingredient, IngredientOutput]):
        def __init__(self, db: Session):
            super().__init__(
                db=db,
                kind=EntityKind.INGREDIENT,
                output_schema=IngredientOutput,
            )
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Generic, Iterator, TypeVar, Type
from contextlib import contextmanager

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from menu_core.models import Base
from menu_core.services.crud.repository import BaseRepository
from menu_core.services.crud.store import CatalogStore, MODEL_BY_KIND
from shared.config.constants import ENTITY_LABELS, EntityKind
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DatabaseError, NotFoundError, ValidationError

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseService(ABC, Generic[ModelT]):
    """
    Abstract base service for domain operations.

    Subclasses implement specific business logic while this class
    provides common infrastructure (store and repository access).
    """

    def __init__(self, db: Session, kind: EntityKind):
        self._db = db
        self._kind = EntityKind(kind)
        self._model: Type[ModelT] = MODEL_BY_KIND[self._kind]
        self._store = CatalogStore(db)
        self._repo: BaseRepository[ModelT] = self._store.repo(self._kind)

    @property
    def db(self) -> Session:
        """Database session."""
        return self._db

    @property
    def store(self) -> CatalogStore:
        """Kind-addressed access to every catalog record."""
        return self._store

    @property
    def repo(self) -> BaseRepository[ModelT]:
        """Repository for this service's own model."""
        return self._repo

    @property
    def kind(self) -> EntityKind:
        return self._kind

    @property
    def entity_name(self) -> str:
        """Human-readable entity name for messages."""
        return ENTITY_LABELS[self._kind]

    @contextmanager
    def _field(self, field_name: str) -> Iterator[None]:
        """Re-raise a validator ValueError as ValidationError on `field_name`."""
        try:
            yield
        except ValueError as e:
            raise ValidationError(str(e), field=field_name) from e

    def _require_existing(self, field_name: str, kind: EntityKind, ids: list[int]) -> None:
        """
        Raises:
            ValidationError: If any of `ids` has no `kind` record.
        """
        found = self._store.load_many(kind, ids)
        missing = [i for i in ids if i not in found]
        if missing:
            raise ValidationError(
                f"{ENTITY_LABELS[kind]} inexistente: {', '.join(str(i) for i in missing)}",
                field=field_name,
                missing_ids=missing,
            )

    def _commit(self, operation: str, **log_context: Any) -> None:
        """
        Commit, translating driver failures into DatabaseError.

        `operation` is the staff-facing verb ("crear", "eliminar", ...).
        """
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            logger.error(
                f"Commit failed for {self._kind.value}",
                operation=operation,
                error=str(e),
                **log_context,
            )
            raise DatabaseError(f"{operation} {self.entity_name.lower()}") from e


class BaseCRUDService(BaseService[ModelT], Generic[ModelT, OutputT]):
    """
    Base service for entities with CRUD operations.

    Provides standard CRUD methods that can be overridden for
    custom business logic. Uses Repository for all data access.

    Responsibilities:
    - Data access via Repository (not direct queries)
    - DTO transformation via output schema
    - Audit fields for mutations
    - Business rule validation (before any write)
    """

    # Fields accepted by create() and update(); anything else is rejected
    writable_fields: frozenset[str] = frozenset()

    def __init__(
        self,
        db: Session,
        kind: EntityKind,
        output_schema: Type[OutputT],
    ):
        super().__init__(db, kind)
        self._output_schema = output_schema

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_by_id(self, entity_id: int, *, options: list[Any] | None = None) -> OutputT:
        """
        Get entity by ID.

        Raises:
            NotFoundError: If entity not found.
        """
        return self.to_output(self.get_entity_or_404(entity_id, options=options))

    def get_entity(
        self, entity_id: int, *, options: list[Any] | None = None
    ) -> ModelT | None:
        """Get raw entity (for internal use)."""
        return self._repo.find_by_id(entity_id, options=options)

    def get_entity_or_404(
        self, entity_id: int, *, options: list[Any] | None = None
    ) -> ModelT:
        entity = self._repo.find_by_id(entity_id, options=options)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    def list_all(
        self,
        *,
        options: list[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> list[OutputT]:
        """List all entities, ordered by id unless `order_by` is given."""
        entities = self._repo.find_all(
            options=options,
            limit=limit,
            offset=offset,
            order_by=order_by,
        )
        return [self.to_output(e) for e in entities]

    def count(self) -> int:
        return self._repo.count()

    def exists(self, entity_id: int) -> bool:
        return self._repo.exists(entity_id)

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(
        self,
        data: dict[str, Any],
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> OutputT:
        """
        Create new entity.

        Args:
            data: Entity data dictionary.
            user_id: Creating user ID (audit only).
            user_email: Creating user email (audit only).

        Returns:
            Output DTO for created entity.

        Raises:
            ValidationError: If data is invalid.
            DatabaseError: If creation fails.
        """
        self._reject_unknown_fields(data)
        data = self._validate_create(dict(data))

        entity = self._model(**data)
        entity.set_created_by(user_id, user_email)

        self._store.save(self._kind, entity)
        self._commit("crear")
        self._db.refresh(entity)

        logger.info(f"{self.entity_name} created", entity_id=entity.id)
        self._after_create(entity)

        return self.to_output(entity)

    def update(
        self,
        entity_id: int,
        data: dict[str, Any],
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> OutputT:
        """
        Update existing entity with the given fields only.

        Raises:
            NotFoundError: If entity not found.
            ValidationError: If data is invalid.
            DatabaseError: If update fails.
        """
        entity = self.get_entity_or_404(entity_id)

        self._reject_unknown_fields(data)
        data = self._validate_update(entity, dict(data))

        for field_name, value in data.items():
            setattr(entity, field_name, value)

        entity.set_updated_by(user_id, user_email)

        self._commit("actualizar", entity_id=entity_id)
        self._db.refresh(entity)

        logger.info(
            f"{self.entity_name} updated",
            entity_id=entity_id,
            fields=sorted(data.keys()),
        )
        return self.to_output(entity)

    def delete(self, entity_id: int) -> None:
        """
        Hard-delete the entity once `_validate_delete` allows it.

        Check and delete happen in the same session and transaction.

        Raises:
            NotFoundError: If entity not found.
            ResourceInUseError: If other records still reference it.
        """
        entity = self.get_entity_or_404(entity_id)

        self._validate_delete(entity)
        self._before_delete(entity)

        self._store.delete(self._kind, entity_id)
        self._commit("eliminar", entity_id=entity_id)

        logger.info(f"{self.entity_name} deleted", entity_id=entity_id)

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_output(self, entity: ModelT) -> OutputT:
        """
        Convert entity to output DTO.

        Override this method for custom transformation logic.
        """
        return self._output_schema.model_validate(entity)

    # =========================================================================
    # Validation Hooks (override in subclasses)
    # =========================================================================

    def _reject_unknown_fields(self, data: dict[str, Any]) -> None:
        unknown = sorted(set(data) - self.writable_fields)
        if unknown:
            raise ValidationError(
                f"Campos desconocidos: {', '.join(unknown)}", field=unknown[0]
            )

    def _validate_create(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Validate and normalize data before create.

        Raises:
            ValidationError: If validation fails.
        """
        return data

    def _validate_update(self, entity: ModelT, data: dict[str, Any]) -> dict[str, Any]:
        """
        Validate and normalize data before update.

        Raises:
            ValidationError: If validation fails.
        """
        return data

    def _validate_delete(self, entity: ModelT) -> None:
        """
        Validate before delete.

        Override to check for dependent entities.

        Raises:
            ResourceInUseError: If deletion is not allowed.
        """
        pass

    def _before_delete(self, entity: ModelT) -> None:
        """Hook called after validation, in the same transaction as the delete."""
        pass

    # =========================================================================
    # Lifecycle Hooks (override in subclasses)
    # =========================================================================

    def _after_create(self, entity: ModelT) -> None:
        """Hook called after entity creation. Override for side effects."""
        pass
