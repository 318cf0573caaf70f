from datetime import datetime, timezone
from typing import Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tender_filing.utils.logging import get_logger

ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository implementing common CRUD operations.

    Writes are flushed, not committed: the calling service owns the
    transaction so a document and its queue entry land together.
    Models with a ``deleted_at`` column are soft-deleted; ``active_only``
    lookups exclude them.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def get_by_id(self, id: UUID, active_only: bool = False) -> Optional[ModelType]:
        """Get a record by its ID.

        Args:
            id: The UUID of the record
            active_only: Ignore soft-deleted records

        Returns:
            The record if found, None otherwise
        """
        try:
            query = select(self.model).where(self.model.id == id)
            if active_only and hasattr(self.model, "deleted_at"):
                query = query.where(self.model.deleted_at.is_(None))
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving {self.model.__name__} by ID {id}: {str(e)}",
                exc_info=True
            )
            raise

    async def create(self, **kwargs) -> ModelType:
        """Add a new record and flush it so generated IDs are available."""
        try:
            instance = self.model(**kwargs)
            self.session.add(instance)
            await self.session.flush()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error creating {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise

    async def update(self, id: UUID, **kwargs) -> Optional[ModelType]:
        """Update an existing record.

        Returns:
            The updated record if found, None otherwise
        """
        try:
            instance = await self.get_by_id(id)
            if not instance:
                return None

            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)

            if hasattr(instance, "updated_at"):
                setattr(instance, "updated_at", datetime.now(timezone.utc))

            await self.session.flush()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error updating {self.model.__name__} {id}: {str(e)}",
                exc_info=True
            )
            raise

    async def soft_delete(self, id: UUID, actor_id: str) -> bool:
        """Stamp ``deleted_at`` on a record instead of removing the row.

        Returns:
            True if a live record was marked deleted, False otherwise
        """
        instance = await self.get_by_id(id, active_only=True)
        if not instance:
            return False
        await self.update(
            id,
            deleted_at=datetime.now(timezone.utc),
            updated_by=actor_id,
        )
        return True
