"""Batch upload: validate, deduplicate, file, store and enqueue."""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from tender_filing.core.exceptions import ErrorCode, FilingError
from tender_filing.core.locks import FilingLockRegistry, filing_locks
from tender_filing.database.models import Document
from tender_filing.models.filing import (
    FilingContext,
    FilingMetadata,
    FilingResult,
    IncomingFile,
    ProcessingStatus,
)
from tender_filing.repositories.document_repository import DocumentRepository
from tender_filing.repositories.firm_repository import FirmRepository
from tender_filing.repositories.queue_repository import QueueRepository
from tender_filing.schemas.documents import (
    DocumentResponse,
    FileFailureResponse,
    IngestionReportResponse,
)
from tender_filing.schemas.results import ActionResult
from tender_filing.services.base_service import BaseService
from tender_filing.services.filing.classifier import classify
from tender_filing.services.filing.fingerprint import fingerprint
from tender_filing.services.filing.firm_registry import FirmRegistry
from tender_filing.services.filing.path_resolver import FilingPathResolver, SequenceCounter
from tender_filing.services.filing.validation import UploadValidator
from tender_filing.services.storage_service import StorageService, generate_storage_key
from tender_filing.utils.logging import get_logger
from tender_filing.utils.responses import action_failure, action_success

LOGGER = get_logger(__name__)


class IngestionService(BaseService):
    """Entry point for uploads.

    Validation failures reject the whole batch before any I/O. After that,
    each file is ingested on its own: a storage or database failure marks
    that file as failed and the remaining files carry on.
    """

    failure_code = ErrorCode.UPLOAD_FAILED
    failure_message = "Failed to upload documents"

    def __init__(
        self,
        session: AsyncSession,
        storage_service: Optional[StorageService] = None,
        document_repo: Optional[DocumentRepository] = None,
        firm_repo: Optional[FirmRepository] = None,
        queue_repo: Optional[QueueRepository] = None,
        locks: Optional[FilingLockRegistry] = None,
        validator: Optional[UploadValidator] = None,
    ):
        """Initialize the ingestion service.

        Repositories and the storage client default to the real
        implementations bound to ``session``.
        """
        super().__init__(session)
        self.storage_service = storage_service or StorageService()
        self.doc_repo = document_repo or DocumentRepository(session)
        self.queue_repo = queue_repo or QueueRepository(session)
        self.locks = locks if locks is not None else filing_locks
        self.validator = validator or UploadValidator()
        self.firm_registry = FirmRegistry(firm_repo or FirmRepository(session), self.locks)
        self.resolver = FilingPathResolver(SequenceCounter(self.doc_repo), self.firm_registry)

    async def ingest(
        self,
        files: Sequence[IncomingFile],
        context: FilingContext,
        project_id: Optional[str],
        caller_id: Optional[str],
    ) -> ActionResult:
        """Upload a batch of files into a project.

        Args:
            files: Files read into memory, each with an optional manual override
            context: Where the batch was dropped
            project_id: Target project
            caller_id: Authenticated caller

        Returns:
            ActionResult whose data is an IngestionReportResponse. It is a
            failure (UPLOAD_FAILED) when any file failed; ``data`` still lists
            the files that made it.
        """
        return await self.execute(
            files=files, context=context, project_id=project_id, caller_id=caller_id
        )

    def validate(self, files, context, project_id, caller_id):
        if not caller_id:
            raise FilingError("User not authenticated", code=ErrorCode.UNAUTHORIZED)
        if not project_id:
            raise FilingError("Project ID is required", code=ErrorCode.MISSING_PROJECT)
        self.validator.validate_batch(files)

    async def run(
        self,
        files: Sequence[IncomingFile],
        context: FilingContext,
        project_id: str,
        caller_id: str,
    ) -> ActionResult:
        documents: List[DocumentResponse] = []
        failures: List[FileFailureResponse] = []
        deduplicated = []

        for file in files:
            try:
                document, was_duplicate = await self._ingest_file(
                    file, context, project_id, caller_id
                )
            except Exception as e:
                await self.session.rollback()
                LOGGER.error(
                    f"Document upload failed: {file.file_name}",
                    exc_info=True,
                    extra={
                        "file_name": file.file_name,
                        "project_id": project_id,
                        "caller_id": caller_id,
                        "error_type": type(e).__name__,
                    },
                )
                failures.append(
                    FileFailureResponse(
                        file_name=file.file_name,
                        code=ErrorCode.UPLOAD_FAILED.value,
                        message=f"Failed to upload {file.file_name}",
                    )
                )
                continue

            documents.append(DocumentResponse.model_validate(document))
            if was_duplicate:
                deduplicated.append(document.id)

        LOGGER.info(
            f"Upload batch completed: total={len(files)}, "
            f"stored={len(documents) - len(deduplicated)}, "
            f"deduplicated={len(deduplicated)}, failed={len(failures)}",
            extra={"project_id": project_id, "caller_id": caller_id},
        )

        report = IngestionReportResponse(
            documents=documents, failures=failures, deduplicated=deduplicated
        )
        if failures:
            names = ", ".join(f.file_name for f in failures)
            return action_failure(
                ErrorCode.UPLOAD_FAILED, f"Failed to upload: {names}", data=report
            )
        return action_success(report)

    async def _ingest_file(
        self,
        file: IncomingFile,
        context: FilingContext,
        project_id: str,
        caller_id: str,
    ) -> Tuple[Document, bool]:
        """File one document; returns it and whether it already existed."""
        checksum = fingerprint(file.content)

        async with self.locks.hold(project_id, "checksum", checksum):
            existing = await self.doc_repo.find_active_by_checksum(project_id, checksum)
            if existing is not None:
                LOGGER.info(
                    f"Duplicate content, returning existing document for {file.file_name}",
                    extra={
                        "document_id": str(existing.id),
                        "project_id": project_id,
                        "caller_id": caller_id,
                        "checksum": checksum,
                    },
                )
                return existing, True

            if file.override is not None:
                category = None
                path = file.override.path
            else:
                category = classify(file.file_name, context)
                path = self.resolver.target_path(category, context, file.file_name)

            async with self.locks.hold(project_id, "path", path):
                if file.override is not None:
                    filing = FilingResult(
                        path=file.override.path,
                        display_name=file.override.display_name,
                    )
                else:
                    filing = await self.resolver.resolve(
                        category, context, file.file_name, project_id, caller_id
                    )
                document = await self._store_and_record(
                    file, context, filing, checksum, project_id, caller_id
                )
                return document, False

    async def _store_and_record(
        self,
        file: IncomingFile,
        context: FilingContext,
        filing: FilingResult,
        checksum: str,
        project_id: str,
        caller_id: str,
    ) -> Document:
        """Write the blob, then the document and its queue entry in one commit.

        If the database write fails after the blob landed, the blob is
        deleted again on a best-effort basis.
        """
        manual = file.override is not None
        storage_key = generate_storage_key(project_id, filing.path, filing.display_name)
        stored = None

        try:
            stored = await self.storage_service.put(file.content, storage_key, file.content_type)

            metadata = FilingMetadata(
                auto_filed=not manual,
                manually_overridden=manual,
                original_file_name=file.file_name,
                filing_context=context.model_dump(mode="json"),
                firm_id=filing.firm_id,
                category=filing.category.value if filing.category else None,
            )
            document = await self.doc_repo.create_document(
                project_id=project_id,
                path=filing.path,
                name=file.file_name,
                display_name=filing.display_name,
                storage_key=stored.key,
                storage_bucket=stored.bucket,
                url=stored.url,
                size=file.size,
                mime_type=file.content_type,
                checksum=checksum,
                actor_id=caller_id,
                filing_metadata=metadata.model_dump(),
                processing_status=ProcessingStatus.PENDING.value,
            )
            await self.queue_repo.create_entry(document.id, status=ProcessingStatus.PENDING.value)
            await self.session.commit()

        except Exception as e:
            if stored is not None:
                await self._discard_blob(stored.key, project_id)
            raise FilingError(
                f"Failed to upload {file.file_name}",
                code=ErrorCode.UPLOAD_FAILED,
                original_error=e,
            ) from e

        LOGGER.info(
            "Document manually filed" if manual else "Document auto-filed",
            extra={
                "document_id": str(document.id),
                "project_id": project_id,
                "caller_id": caller_id,
                "file_name": file.file_name,
                "path": filing.path,
                "display_name": filing.display_name,
                "category": metadata.category,
                "firm_id": filing.firm_id,
                "manually_overridden": manual,
            },
        )
        return document

    async def _discard_blob(self, key: str, project_id: str) -> None:
        """Compensating delete for a blob whose document row was never written."""
        try:
            await self.storage_service.delete(key)
            LOGGER.info(
                f"Removed orphaned blob {key}", extra={"project_id": project_id}
            )
        except Exception:
            # Left for the storage garbage-collection sweep
            LOGGER.warning(
                f"Could not remove orphaned blob {key}",
                exc_info=True,
                extra={"project_id": project_id},
            )
