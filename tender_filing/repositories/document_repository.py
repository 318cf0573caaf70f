from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tender_filing.database.models import Document
from tender_filing.repositories.base_repository import BaseRepository
from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentRepository(BaseRepository[Document]):
    """Repository for managing Document records.

    Inherits from BaseRepository for standard CRUD operations.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, Document)

    async def create_document(
        self,
        project_id: str,
        path: str,
        name: str,
        display_name: str,
        storage_key: str,
        storage_bucket: str,
        url: Optional[str],
        size: int,
        mime_type: str,
        checksum: str,
        actor_id: str,
        filing_metadata: Optional[Dict[str, Any]] = None,
        processing_status: str = "pending",
    ) -> Document:
        """Create a new document record.

        Args:
            project_id: Owning project
            path: Slash-delimited folder path
            name: Original filename
            display_name: Generated (or overridden) display name
            storage_key: Object key in the storage bucket
            storage_bucket: Bucket holding the object
            url: Public URL returned by the storage service
            size: Size in bytes
            mime_type: Declared content type
            checksum: Content fingerprint
            actor_id: Caller recorded as creator and last modifier
            filing_metadata: Audit record of the filing decision
            processing_status: Initial denormalized queue status

        Returns:
            Created Document record
        """
        return await self.create(
            project_id=project_id,
            path=path,
            name=name,
            display_name=display_name,
            storage_key=storage_key,
            storage_bucket=storage_bucket,
            url=url,
            size=size,
            mime_type=mime_type,
            checksum=checksum,
            processing_status=processing_status,
            filing_metadata=filing_metadata,
            created_by=actor_id,
            updated_by=actor_id,
        )

    async def find_active_by_checksum(
        self, project_id: str, checksum: str
    ) -> Optional[Document]:
        """Return the live document in a project with identical content, if any."""
        result = await self.session.execute(
            select(Document)
            .where(
                Document.project_id == project_id,
                Document.checksum == checksum,
                Document.deleted_at.is_(None),
            )
            .order_by(Document.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def count_in_path(
        self, project_id: str, path: str, name_contains: str
    ) -> int:
        """Count live documents in a folder whose display name contains a substring.

        The match is case-sensitive; LIKE wildcards in ``name_contains`` are
        escaped so firm names such as ``50%_Builders`` match literally.
        """
        try:
            result = await self.session.execute(
                select(func.count())
                .select_from(Document)
                .where(
                    Document.project_id == project_id,
                    Document.path == path,
                    Document.display_name.contains(name_contains, autoescape=True),
                    Document.deleted_at.is_(None),
                )
            )
            return result.scalar_one()
        except SQLAlchemyError as e:
            LOGGER.error(
                f"Error counting documents in {path}: {str(e)}",
                exc_info=True,
                extra={"project_id": project_id},
            )
            raise

    async def list_for_project(
        self, project_id: str, folder_path: Optional[str] = None
    ) -> List[Document]:
        """List live documents for a project, newest first."""
        query = select(Document).where(
            Document.project_id == project_id,
            Document.deleted_at.is_(None),
        )
        if folder_path is not None:
            query = query.where(Document.path == folder_path)
        result = await self.session.execute(query.order_by(Document.created_at.desc()))
        return list(result.scalars().all())

    async def update_status(self, document_id: UUID, status: str, actor_id: Optional[str] = None) -> bool:
        """Update the denormalized processing status.

        Returns:
            True if updated, False if not found
        """
        fields: Dict[str, Any] = {"processing_status": status}
        if actor_id:
            fields["updated_by"] = actor_id
        return await self.update(document_id, **fields) is not None

    async def bulk_soft_delete(self, document_ids: Sequence[UUID], actor_id: str) -> int:
        """Soft-delete every live document in ``document_ids``.

        Returns:
            Number of rows marked deleted
        """
        result = await self.session.execute(
            update(Document)
            .where(Document.id.in_(list(document_ids)), Document.deleted_at.is_(None))
            .values(deleted_at=datetime.now(timezone.utc), updated_by=actor_id)
        )
        return result.rowcount

    async def bulk_move(
        self, document_ids: Sequence[UUID], target_path: str, actor_id: str
    ) -> int:
        """Move every live document in ``document_ids`` to ``target_path``."""
        result = await self.session.execute(
            update(Document)
            .where(Document.id.in_(list(document_ids)), Document.deleted_at.is_(None))
            .values(path=target_path, updated_by=actor_id)
        )
        return result.rowcount
