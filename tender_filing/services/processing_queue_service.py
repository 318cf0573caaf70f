"""Processing queue state machine.

    pending -> processing -> completed
                          -> failed -> (retry) -> pending

The extraction worker drives pending -> processing -> completed/failed
through ``claim_pending``, ``mark_completed`` and ``mark_failed``. Users move
a document back to pending with ``retry``, which works from any state so a
stuck ``processing`` entry can be re-queued too.
"""

from typing import Dict, FrozenSet, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tender_filing.core.exceptions import (
    DocumentNotFoundError,
    ErrorCode,
    FilingError,
    InvalidTransitionError,
)
from tender_filing.models.filing import ProcessingStatus
from tender_filing.repositories.document_repository import DocumentRepository
from tender_filing.repositories.queue_repository import QueueRepository
from tender_filing.schemas.results import ActionResult
from tender_filing.services.base_service import BaseService
from tender_filing.utils.logging import get_logger
from tender_filing.utils.responses import action_success

LOGGER = get_logger(__name__)

WORKER_TRANSITIONS: Dict[ProcessingStatus, FrozenSet[ProcessingStatus]] = {
    ProcessingStatus.PENDING: frozenset({ProcessingStatus.PROCESSING}),
    ProcessingStatus.PROCESSING: frozenset({ProcessingStatus.COMPLETED, ProcessingStatus.FAILED}),
    ProcessingStatus.FAILED: frozenset(),
    ProcessingStatus.COMPLETED: frozenset(),
}


class ProcessingQueueService(BaseService):
    """Tracks post-ingestion processing for each document."""

    failure_code = ErrorCode.RETRY_FAILED
    failure_message = "Failed to retry extraction"

    def __init__(
        self,
        session: AsyncSession,
        document_repo: Optional[DocumentRepository] = None,
        queue_repo: Optional[QueueRepository] = None,
    ):
        super().__init__(session)
        self.doc_repo = document_repo or DocumentRepository(session)
        self.queue_repo = queue_repo or QueueRepository(session)

    async def retry(self, document_id: UUID, caller_id: Optional[str]) -> ActionResult:
        """Re-queue a document for processing.

        Resets the queue entry to pending with no error and a zero retry
        count, recreating the entry if it has gone missing.

        Args:
            document_id: Document to re-queue
            caller_id: Authenticated caller

        Returns:
            ActionResult with no data; NOT_FOUND when the document is gone
        """
        return await self.execute(document_id=document_id, caller_id=caller_id)

    def validate(self, document_id, caller_id):
        if not caller_id:
            raise FilingError("User not authenticated", code=ErrorCode.UNAUTHORIZED)

    async def run(self, document_id: UUID, caller_id: str) -> ActionResult:
        document = await self.doc_repo.get_by_id(document_id, active_only=True)
        if document is None:
            raise FilingError("Document not found", code=ErrorCode.NOT_FOUND)

        await self.doc_repo.update_status(
            document_id, ProcessingStatus.PENDING.value, actor_id=caller_id
        )

        entry = await self.queue_repo.get_by_document_id(document_id)
        if entry is not None:
            await self.queue_repo.set_state(
                entry, ProcessingStatus.PENDING.value, error=None, retry_count=0
            )
        else:
            await self.queue_repo.create_entry(
                document_id, status=ProcessingStatus.PENDING.value, retry_count=0
            )
        await self.session.commit()

        LOGGER.info(
            "Document re-queued for extraction",
            extra={
                "document_id": str(document_id),
                "project_id": document.project_id,
                "caller_id": caller_id,
                "queue_entry_recreated": entry is None,
            },
        )
        return action_success(None)

    async def claim_pending(self, limit: int = 10) -> List[UUID]:
        """Move up to ``limit`` pending entries to processing for a worker.

        Returns:
            IDs of the claimed documents
        """
        entries = await self.queue_repo.claim_pending(limit)
        for entry in entries:
            await self.queue_repo.set_state(entry, ProcessingStatus.PROCESSING.value)
            await self.doc_repo.update_status(entry.document_id, ProcessingStatus.PROCESSING.value)
        await self.session.commit()
        return [entry.document_id for entry in entries]

    async def mark_completed(self, document_id: UUID) -> None:
        await self._transition(document_id, ProcessingStatus.COMPLETED)

    async def mark_failed(self, document_id: UUID, error: str) -> None:
        """Record a processing failure and bump the retry count."""
        await self._transition(document_id, ProcessingStatus.FAILED, error=error)

    async def _transition(
        self,
        document_id: UUID,
        target: ProcessingStatus,
        error: Optional[str] = None,
    ) -> None:
        """Apply a worker transition, mirroring it onto the document.

        Raises:
            DocumentNotFoundError: No queue entry exists for the document
            InvalidTransitionError: ``target`` is not reachable from the current state
        """
        entry = await self.queue_repo.get_by_document_id(document_id)
        if entry is None:
            raise DocumentNotFoundError(f"No queue entry for document {document_id}")

        current = ProcessingStatus(entry.status)
        if target not in WORKER_TRANSITIONS[current]:
            raise InvalidTransitionError(document_id, current.value, target.value)

        retry_count = entry.retry_count + 1 if target is ProcessingStatus.FAILED else None
        await self.queue_repo.set_state(entry, target.value, error=error, retry_count=retry_count)
        await self.doc_repo.update_status(document_id, target.value)
        await self.session.commit()

        log = LOGGER.warning if target is ProcessingStatus.FAILED else LOGGER.info
        log(
            f"Queue entry moved {current.value} -> {target.value}",
            extra={"document_id": str(document_id), "error": error},
        )
