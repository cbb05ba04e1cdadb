"""
Base Repository Pattern Implementation

Provides abstract base repository with common database operations,
translating store errors into domain exceptions.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, List, Optional, Dict, Any, Type, Sequence
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from destinations.core.database import DatabaseManager
from destinations.core.exceptions import (
    BaseApplicationException,
    ConflictException,
    DatabaseException,
    DuplicateIdentifierException,
)
from destinations.utils.logger import get_logger, log_database_operation

ModelType = TypeVar("ModelType")

logger = get_logger(__name__)

_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


def _error_code(exc: IntegrityError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the integrity error comes from a UNIQUE or PRIMARY KEY constraint."""
    if _error_code(exc) == _UNIQUE_VIOLATION:
        return True
    text = str(getattr(exc, "orig", exc)).lower()
    return "unique" in text or "duplicate" in text


def is_primary_key_violation(exc: IntegrityError, table: str) -> bool:
    """True when a unique violation is on the ``id`` primary key of ``table``."""
    if not is_unique_violation(exc):
        return False
    text = str(getattr(exc, "orig", exc)).lower()
    # SQLite names the column, PostgreSQL the constraint
    return f"{table}.id" in text or f"{table}_pkey" in text


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    """True when the integrity error comes from a FOREIGN KEY constraint."""
    if _error_code(exc) == _FOREIGN_KEY_VIOLATION:
        return True
    return "foreign key" in str(getattr(exc, "orig", exc)).lower()


class BaseRepository(Generic[ModelType], ABC):
    """Abstract base repository providing common CRUD operations."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    @property
    @abstractmethod
    def model(self) -> Type[ModelType]:
        """Return the SQLAlchemy model class."""
        pass

    def get_session(self) -> AsyncSession:
        """Get database session."""
        return self.db_manager.session_factory()

    def translate_integrity_error(
        self, exc: IntegrityError, data: Dict[str, Any]
    ) -> BaseApplicationException:
        """Map a constraint violation to a domain exception."""
        if is_primary_key_violation(exc, self.model.__tablename__):
            return DuplicateIdentifierException(self.model.__name__, data.get("id"))
        if is_unique_violation(exc):
            return ConflictException(f"{self.model.__name__} already exists")
        return DatabaseException(f"Integrity error on {self.model.__tablename__}")

    def _database_error(self, action: str, exc: SQLAlchemyError) -> DatabaseException:
        logger.error(
            "Database error",
            action=action,
            model=self.model.__name__,
            error=str(exc),
        )
        return DatabaseException(f"Failed to {action} {self.model.__name__}")

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        if filters:
            for field, value in filters.items():
                if value is None or not hasattr(self.model, field):
                    continue
                column = getattr(self.model, field)
                if isinstance(value, (list, tuple, set)):
                    query = query.where(column.in_(value))
                else:
                    query = query.where(column == value)
        return query

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """Get entity by ID."""
        async with self.get_session() as session:
            try:
                return await session.get(self.model, id)
            except SQLAlchemyError as e:
                raise self._database_error("get", e) from e

    async def get_multi(
        self,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Sequence[Any] = (),
    ) -> List[ModelType]:
        """Get multiple entities with pagination and filtering."""
        async with self.get_session() as session:
            try:
                query = self._apply_filters(select(self.model), filters)
                query = query.order_by(*order_by, self.model.id)
                query = query.offset(skip).limit(limit)
                result = await session.execute(query)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                raise self._database_error("list", e) from e

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count entities with optional filters."""
        async with self.get_session() as session:
            try:
                query = self._apply_filters(select(func.count(self.model.id)), filters)
                result = await session.execute(query)
                return result.scalar() or 0
            except SQLAlchemyError as e:
                raise self._database_error("count", e) from e

    async def exists(self, id: str) -> bool:
        """Check if entity exists by ID."""
        return await self.count({"id": id}) > 0

    async def create(self, data: Dict[str, Any]) -> ModelType:
        """Create new entity."""
        try:
            async with self.db_manager.session() as session:
                db_obj = self.model(**data)
                session.add(db_obj)
                await session.flush()
        except IntegrityError as e:
            raise self.translate_integrity_error(e, data) from e
        except SQLAlchemyError as e:
            raise self._database_error("create", e) from e

        log_database_operation("create", self.model.__tablename__, record_id=db_obj.id)
        return db_obj

    async def update(
        self,
        id: str,
        data: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Update an existing entity in place.

        Args:
            id: Entity identifier
            data: Column values to write
            expected: Column values the row must still hold for the write to
                apply; used as a compare-and-swap guard

        Returns:
            bool: True when a row matched and was written
        """
        conditions = [self.model.id == id]
        for field, value in (expected or {}).items():
            conditions.append(getattr(self.model, field) == value)

        query = (
            update(self.model)
            .where(*conditions)
            .values(**data)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self.db_manager.session() as session:
                result = await session.execute(query)
                matched = result.rowcount > 0
        except IntegrityError as e:
            raise self.translate_integrity_error(e, data) from e
        except SQLAlchemyError as e:
            raise self._database_error("update", e) from e

        if matched:
            log_database_operation("update", self.model.__tablename__, record_id=id, fields=sorted(data))
        return matched

    async def delete(self, id: str) -> bool:
        """Delete entity by ID."""
        query = (
            delete(self.model)
            .where(self.model.id == id)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self.db_manager.session() as session:
                result = await session.execute(query)
                deleted = result.rowcount > 0
        except SQLAlchemyError as e:
            raise self._database_error("delete", e) from e

        if deleted:
            log_database_operation("delete", self.model.__tablename__, record_id=id)
        return deleted
