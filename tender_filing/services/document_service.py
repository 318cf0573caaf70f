"""Document management actions: listing, soft delete, move and tagging."""

import asyncio
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tender_filing.core.exceptions import ErrorCode, FilingError
from tender_filing.database.models import Document
from tender_filing.repositories.document_repository import DocumentRepository
from tender_filing.repositories.firm_repository import FirmRepository
from tender_filing.schemas.documents import DocumentResponse, FirmResponse
from tender_filing.schemas.results import ActionResult
from tender_filing.services.base_service import BaseService
from tender_filing.services.filing.firm_registry import FirmRegistry
from tender_filing.services.storage_service import StorageService
from tender_filing.utils.logging import get_logger
from tender_filing.utils.responses import action_success

LOGGER = get_logger(__name__)

ACTION_FAILURES: Dict[str, Tuple[ErrorCode, str]] = {
    "list_documents": (ErrorCode.FETCH_FAILED, "Failed to fetch documents"),
    "list_firms": (ErrorCode.FETCH_FAILED, "Failed to fetch firms"),
    "delete": (ErrorCode.DELETE_FAILED, "Failed to delete document"),
    "move": (ErrorCode.MOVE_FAILED, "Failed to move document"),
    "update_tags": (ErrorCode.UPDATE_FAILED, "Failed to update document"),
    "bulk_delete": (ErrorCode.BULK_DELETE_FAILED, "Failed to delete documents"),
    "bulk_move": (ErrorCode.BULK_MOVE_FAILED, "Failed to move documents"),
}


def normalize_folder_path(path: str) -> str:
    """Strip surrounding whitespace and slashes; "" is the project root."""
    return path.strip().strip("/")


class DocumentService(BaseService):
    """Document actions behind the project's document screens.

    Deletes are soft: the row gets ``deleted_at``, while the stored blob and
    the processing queue entry are left alone.
    """

    def __init__(
        self,
        session: AsyncSession,
        storage_service: Optional[StorageService] = None,
        document_repo: Optional[DocumentRepository] = None,
        firm_repo: Optional[FirmRepository] = None,
    ):
        super().__init__(session)
        self.storage_service = storage_service or StorageService()
        self.doc_repo = document_repo or DocumentRepository(session)
        self.firm_registry = FirmRegistry(firm_repo or FirmRepository(session))

    async def run(self, *args, **kwargs) -> ActionResult:
        """Route to the handler for ``action``."""
        action = kwargs.pop("action")

        if action == "list_documents":
            return await self._list_documents(**kwargs)
        elif action == "list_firms":
            return await self._list_firms(**kwargs)
        elif action == "delete":
            return await self._delete(**kwargs)
        elif action == "move":
            return await self._move(**kwargs)
        elif action == "update_tags":
            return await self._update_tags(**kwargs)
        elif action == "bulk_delete":
            return await self._bulk_delete(**kwargs)
        elif action == "bulk_move":
            return await self._bulk_move(**kwargs)
        raise ValueError(f"Unknown action: {action}")

    def validate(self, *args, **kwargs):
        action = kwargs.get("action")

        if not kwargs.get("caller_id"):
            raise FilingError("User not authenticated", code=ErrorCode.UNAUTHORIZED)
        if action in ("list_documents", "list_firms") and not kwargs.get("project_id"):
            raise FilingError("Project ID is required", code=ErrorCode.MISSING_PROJECT)
        if action in ("bulk_delete", "bulk_move") and not kwargs.get("document_ids"):
            raise FilingError("No documents selected", code=ErrorCode.NO_DOCUMENTS)

    def failure_for(self, *args, **kwargs) -> Tuple[ErrorCode, str]:
        return ACTION_FAILURES.get(
            kwargs.get("action"), (self.failure_code, self.failure_message)
        )

    async def list_documents(
        self, project_id: Optional[str], caller_id: Optional[str], folder_path: Optional[str] = None
    ) -> ActionResult:
        """List live documents of a project, newest first, with signed download URLs.

        Args:
            project_id: Project to list
            caller_id: Authenticated caller
            folder_path: Restrict to one folder when given

        Returns:
            ActionResult whose data is a list of DocumentResponse
        """
        return await self.execute(
            action="list_documents",
            project_id=project_id,
            caller_id=caller_id,
            folder_path=folder_path,
        )

    async def list_firms(self, project_id: Optional[str], caller_id: Optional[str]) -> ActionResult:
        return await self.execute(action="list_firms", project_id=project_id, caller_id=caller_id)

    async def delete_document(self, document_id: UUID, caller_id: Optional[str]) -> ActionResult:
        return await self.execute(action="delete", document_id=document_id, caller_id=caller_id)

    async def move_document(
        self, document_id: UUID, new_path: str, caller_id: Optional[str]
    ) -> ActionResult:
        return await self.execute(
            action="move", document_id=document_id, new_path=new_path, caller_id=caller_id
        )

    async def update_tags(
        self, document_id: UUID, tags: Sequence[str], caller_id: Optional[str]
    ) -> ActionResult:
        """Replace a document's tags.

        Tags are trimmed, blanks dropped and duplicates removed, keeping the
        first occurrence's position.
        """
        return await self.execute(
            action="update_tags", document_id=document_id, tags=tags, caller_id=caller_id
        )

    async def bulk_delete(
        self, document_ids: Sequence[UUID], caller_id: Optional[str]
    ) -> ActionResult:
        return await self.execute(
            action="bulk_delete", document_ids=document_ids, caller_id=caller_id
        )

    async def bulk_move(
        self, document_ids: Sequence[UUID], target_path: str, caller_id: Optional[str]
    ) -> ActionResult:
        return await self.execute(
            action="bulk_move",
            document_ids=document_ids,
            target_path=target_path,
            caller_id=caller_id,
        )

    async def _list_documents(
        self, project_id: str, caller_id: str, folder_path: Optional[str]
    ) -> ActionResult:
        documents = await self.doc_repo.list_for_project(project_id, folder_path)
        signed_urls = await asyncio.gather(
            *(self.storage_service.signed_download_url(doc.storage_key) for doc in documents)
        )

        responses = []
        for document, signed_url in zip(documents, signed_urls):
            if signed_url is None:
                LOGGER.warning(
                    f"No download URL for document {document.id}",
                    extra={"project_id": project_id, "storage_key": document.storage_key},
                )
            response = DocumentResponse.model_validate(document)
            responses.append(response.model_copy(update={"signed_url": signed_url}))
        return action_success(responses)

    async def _list_firms(self, project_id: str, caller_id: str) -> ActionResult:
        firms = await self.firm_registry.list_firms(project_id)
        return action_success([FirmResponse.model_validate(firm) for firm in firms])

    async def _delete(self, document_id: UUID, caller_id: str) -> ActionResult:
        deleted = await self.doc_repo.soft_delete(document_id, caller_id)
        if not deleted:
            raise FilingError("Document not found", code=ErrorCode.NOT_FOUND)
        await self.session.commit()

        LOGGER.info(
            "Document deleted",
            extra={"document_id": str(document_id), "caller_id": caller_id},
        )
        return action_success(None)

    async def _move(self, document_id: UUID, new_path: str, caller_id: str) -> ActionResult:
        document = await self._get_live_document(document_id)
        old_path = document.path
        new_path = normalize_folder_path(new_path)

        document = await self.doc_repo.update(document_id, path=new_path, updated_by=caller_id)
        await self.session.commit()

        LOGGER.info(
            f"Document moved from '{old_path}' to '{new_path}'",
            extra={"document_id": str(document_id), "caller_id": caller_id},
        )
        return action_success(DocumentResponse.model_validate(document))

    async def _update_tags(
        self, document_id: UUID, tags: Sequence[str], caller_id: str
    ) -> ActionResult:
        await self._get_live_document(document_id)

        cleaned: List[str] = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in cleaned:
                cleaned.append(tag)

        document = await self.doc_repo.update(document_id, tags=cleaned, updated_by=caller_id)
        await self.session.commit()
        return action_success(DocumentResponse.model_validate(document))

    async def _bulk_delete(self, document_ids: Sequence[UUID], caller_id: str) -> ActionResult:
        count = await self.doc_repo.bulk_soft_delete(document_ids, caller_id)
        await self.session.commit()

        LOGGER.info(
            f"Bulk deleted {count} of {len(document_ids)} documents",
            extra={"caller_id": caller_id},
        )
        return action_success({"deleted": count})

    async def _bulk_move(
        self, document_ids: Sequence[UUID], target_path: str, caller_id: str
    ) -> ActionResult:
        target_path = normalize_folder_path(target_path)
        count = await self.doc_repo.bulk_move(document_ids, target_path, caller_id)
        await self.session.commit()

        LOGGER.info(
            f"Bulk moved {count} of {len(document_ids)} documents to '{target_path}'",
            extra={"caller_id": caller_id},
        )
        return action_success({"moved": count})

    async def _get_live_document(self, document_id: UUID) -> Document:
        document = await self.doc_repo.get_by_id(document_id, active_only=True)
        if document is None:
            raise FilingError("Document not found", code=ErrorCode.NOT_FOUND)
        return document
