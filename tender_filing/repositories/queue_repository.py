from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tender_filing.database.models import DocumentQueue
from tender_filing.repositories.base_repository import BaseRepository
from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)


class QueueRepository(BaseRepository[DocumentQueue]):
    """Repository for the per-document processing queue."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, DocumentQueue)

    async def get_by_document_id(self, document_id: UUID) -> Optional[DocumentQueue]:
        result = await self.session.execute(
            select(DocumentQueue).where(DocumentQueue.document_id == document_id)
        )
        return result.scalar_one_or_none()

    async def create_entry(
        self, document_id: UUID, status: str = "pending", retry_count: int = 0
    ) -> DocumentQueue:
        return await self.create(
            document_id=document_id,
            status=status,
            retry_count=retry_count,
        )

    async def set_state(
        self,
        entry: DocumentQueue,
        status: str,
        error: Optional[str] = None,
        retry_count: Optional[int] = None,
    ) -> DocumentQueue:
        """Write a new status (and optionally error/retry count) onto an entry."""
        entry.status = status
        entry.error = error
        if retry_count is not None:
            entry.retry_count = retry_count
        if status in ("completed", "failed"):
            entry.processed_at = datetime.now(timezone.utc)
        entry.updated_at = datetime.now(timezone.utc)
        await self.session.flush()
        return entry

    async def claim_pending(self, limit: int = 10) -> List[DocumentQueue]:
        """Lock up to ``limit`` pending entries, oldest first.

        ``SKIP LOCKED`` lets several workers poll the table without handing
        the same entry to two of them.
        """
        result = await self.session.execute(
            select(DocumentQueue)
            .where(DocumentQueue.status == "pending")
            .order_by(DocumentQueue.created_at)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        entries = list(result.scalars().all())
        LOGGER.debug(f"Claimed {len(entries)} pending queue entries")
        return entries
