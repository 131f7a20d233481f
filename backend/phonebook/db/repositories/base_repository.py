"""
Base repository class with common read helpers.
Repositories handle database access through an injected StorageEngine.
"""

from typing import Generic, TypeVar, Type, Optional
from sqlalchemy import ColumnElement, exists, func, select

from phonebook.db.base import Base
from phonebook.db.storage import StorageEngine

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common lookups."""

    def __init__(self, model: Type[ModelType], storage: StorageEngine):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            storage: Connected storage engine
        """
        self.model = model
        self.storage = storage

    def _base_query(self):
        """Query every repository read starts from. Subclasses add scoping and eager loads."""
        return select(self.model)

    async def get(self, id: int) -> Optional[ModelType]:
        """
        Get a record by ID.

        Args:
            id: Record ID

        Returns:
            Model instance or None
        """
        return await self.storage.fetch_one(
            self._base_query().where(self.model.id == id)
        )

    async def _count_where(self, *predicates: ColumnElement) -> int:
        """Count distinct records matching all predicates."""
        total = await self.storage.fetch_value(
            select(func.count(self.model.id.distinct())).where(*predicates)
        )
        return total or 0

    async def _exists_where(self, *predicates: ColumnElement) -> bool:
        """Check whether any record matches all predicates."""
        found = await self.storage.fetch_value(
            select(exists().where(*predicates))
        )
        return bool(found)
