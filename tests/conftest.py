"""Pytest configuration and shared fixtures.

Environment variables are set before the package is imported so the
settings singleton picks them up.
"""

import os

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-at-least-32-bytes")
os.environ.setdefault("ENVIRONMENT", "test")

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from tender_filing.core.exceptions import StorageError
from tender_filing.core.locks import FilingLockRegistry
from tender_filing.database.models import Document, DocumentQueue, Firm
from tender_filing.main import app
from tender_filing.services.document_service import DocumentService
from tender_filing.services.ingestion_service import IngestionService
from tender_filing.services.processing_queue_service import ProcessingQueueService
from tender_filing.services.storage_service import StoredObject

PROJECT_ID = "project-123"
CALLER_ID = "user-456"
BUCKET = "documents"

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeDocumentRepository:
    """In-memory stand-in for DocumentRepository."""

    def __init__(self):
        self.documents: Dict[UUID, Document] = {}
        self._clock = 0

    def _now(self) -> datetime:
        self._clock += 1
        return _EPOCH + timedelta(seconds=self._clock)

    def add(self, **fields) -> Document:
        """Insert a document directly, filling in anything not given."""
        now = self._now()
        values = {
            "id": uuid4(),
            "project_id": PROJECT_ID,
            "path": "Plan/Misc",
            "name": "file.pdf",
            "display_name": "file.pdf",
            "storage_key": f"{PROJECT_ID}/Plan/Misc/1-file.pdf",
            "storage_bucket": BUCKET,
            "url": None,
            "size": 10,
            "mime_type": "application/pdf",
            "checksum": uuid4().hex,
            "processing_status": "pending",
            "filing_metadata": None,
            "tags": None,
            "deleted_at": None,
            "created_by": CALLER_ID,
            "updated_by": CALLER_ID,
            "created_at": now,
            "updated_at": now,
        }
        values.update(fields)
        document = Document(**values)
        self.documents[document.id] = document
        return document

    async def create_document(
        self,
        project_id,
        path,
        name,
        display_name,
        storage_key,
        storage_bucket,
        url,
        size,
        mime_type,
        checksum,
        actor_id,
        filing_metadata=None,
        processing_status="pending",
    ) -> Document:
        return self.add(
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
            filing_metadata=filing_metadata,
            processing_status=processing_status,
            created_by=actor_id,
            updated_by=actor_id,
        )

    def _live(self, project_id: str) -> List[Document]:
        return [
            d for d in self.documents.values()
            if d.project_id == project_id and d.deleted_at is None
        ]

    async def find_active_by_checksum(self, project_id: str, checksum: str) -> Optional[Document]:
        matches = [d for d in self._live(project_id) if d.checksum == checksum]
        return min(matches, key=lambda d: d.created_at) if matches else None

    async def count_in_path(self, project_id: str, path: str, name_contains: str) -> int:
        return sum(
            1 for d in self._live(project_id)
            if d.path == path and name_contains in d.display_name
        )

    async def list_for_project(self, project_id: str, folder_path: Optional[str] = None):
        documents = [
            d for d in self._live(project_id)
            if folder_path is None or d.path == folder_path
        ]
        return sorted(documents, key=lambda d: d.created_at, reverse=True)

    async def get_by_id(self, id: UUID, active_only: bool = False) -> Optional[Document]:
        document = self.documents.get(id)
        if document is None or (active_only and document.deleted_at is not None):
            return None
        return document

    async def update(self, id: UUID, **kwargs) -> Optional[Document]:
        document = self.documents.get(id)
        if document is None:
            return None
        for key, value in kwargs.items():
            setattr(document, key, value)
        document.updated_at = self._now()
        return document

    async def update_status(self, document_id: UUID, status: str, actor_id: Optional[str] = None) -> bool:
        fields = {"processing_status": status}
        if actor_id:
            fields["updated_by"] = actor_id
        return await self.update(document_id, **fields) is not None

    async def soft_delete(self, id: UUID, actor_id: str) -> bool:
        if await self.get_by_id(id, active_only=True) is None:
            return False
        await self.update(id, deleted_at=self._now(), updated_by=actor_id)
        return True

    async def bulk_soft_delete(self, document_ids, actor_id: str) -> int:
        count = 0
        for document_id in document_ids:
            if await self.soft_delete(document_id, actor_id):
                count += 1
        return count

    async def bulk_move(self, document_ids, target_path: str, actor_id: str) -> int:
        count = 0
        for document_id in document_ids:
            if await self.get_by_id(document_id, active_only=True) is not None:
                await self.update(document_id, path=target_path, updated_by=actor_id)
                count += 1
        return count


class InterleavingDocumentRepository(FakeDocumentRepository):
    """Yields to the event loop before each lookup, as a database round trip would."""

    async def find_active_by_checksum(self, project_id: str, checksum: str) -> Optional[Document]:
        await asyncio.sleep(0)
        return await super().find_active_by_checksum(project_id, checksum)

    async def count_in_path(self, project_id: str, path: str, name_contains: str) -> int:
        await asyncio.sleep(0)
        return await super().count_in_path(project_id, path, name_contains)


class FakeFirmRepository:
    """In-memory stand-in for FirmRepository."""

    def __init__(self, session):
        self.session = session
        self.firms: List[Firm] = []

    def add(self, entity: str, display_order: int, project_id: str = PROJECT_ID, deleted: bool = False) -> Firm:
        firm = Firm(
            id=uuid4(),
            project_id=project_id,
            entity=entity,
            display_order=display_order,
            deleted_at=_EPOCH if deleted else None,
            created_by="system",
            updated_by="system",
        )
        self.firms.append(firm)
        return firm

    def _live(self, project_id: str) -> List[Firm]:
        return [f for f in self.firms if f.project_id == project_id and f.deleted_at is None]

    async def find_active_by_name(self, project_id: str, entity: str) -> Optional[Firm]:
        for firm in self._live(project_id):
            if firm.entity == entity:
                return firm
        return None

    async def max_display_order(self, project_id: str) -> Optional[int]:
        orders = [f.display_order for f in self._live(project_id)]
        return max(orders) if orders else None

    async def create_firm(self, project_id: str, entity: str, display_order: int, actor_id: str) -> Firm:
        firm = self.add(entity, display_order, project_id=project_id)
        firm.created_by = actor_id
        firm.updated_by = actor_id
        return firm

    async def list_for_project(self, project_id: str) -> List[Firm]:
        return sorted(self._live(project_id), key=lambda f: f.display_order)


class InterleavingFirmRepository(FakeFirmRepository):
    """Yields to the event loop before each lookup, as a database round trip would."""

    async def find_active_by_name(self, project_id: str, entity: str) -> Optional[Firm]:
        await asyncio.sleep(0)
        return await super().find_active_by_name(project_id, entity)

    async def max_display_order(self, project_id: str) -> Optional[int]:
        await asyncio.sleep(0)
        return await super().max_display_order(project_id)


class FakeQueueRepository:
    """In-memory stand-in for QueueRepository."""

    def __init__(self):
        self.entries: Dict[UUID, DocumentQueue] = {}

    async def get_by_document_id(self, document_id: UUID) -> Optional[DocumentQueue]:
        return self.entries.get(document_id)

    async def create_entry(self, document_id: UUID, status: str = "pending", retry_count: int = 0) -> DocumentQueue:
        entry = DocumentQueue(
            id=uuid4(),
            document_id=document_id,
            status=status,
            error=None,
            retry_count=retry_count,
            created_at=_EPOCH + timedelta(seconds=len(self.entries)),
        )
        self.entries[document_id] = entry
        return entry

    async def set_state(self, entry, status, error=None, retry_count=None):
        entry.status = status
        entry.error = error
        if retry_count is not None:
            entry.retry_count = retry_count
        if status in ("completed", "failed"):
            entry.processed_at = datetime.now(timezone.utc)
        return entry

    async def claim_pending(self, limit: int = 10) -> List[DocumentQueue]:
        pending = [e for e in self.entries.values() if e.status == "pending"]
        return sorted(pending, key=lambda e: e.created_at)[:limit]


class FakeStorageService:
    """Records uploads in memory; flip ``fail_put`` / ``fail_delete`` to simulate outages."""

    def __init__(self, bucket: str = BUCKET):
        self.bucket = bucket
        self.objects: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail_put = False
        self.fail_delete = False

    async def put(self, content: bytes, key: str, content_type: str) -> StoredObject:
        if self.fail_put:
            raise StorageError("Upload failed: storage unavailable")
        self.objects[key] = content
        return StoredObject(key=key, bucket=self.bucket, url=f"https://storage.test/{self.bucket}/{key}")

    async def signed_download_url(self, key: str, expires_in: Optional[int] = None) -> Optional[str]:
        if key not in self.objects:
            return None
        return f"https://storage.test/signed/{key}?token=abc"

    async def delete(self, key: str) -> None:
        if self.fail_delete:
            raise StorageError("Delete failed: storage unavailable")
        self.deleted.append(key)
        self.objects.pop(key, None)


@pytest.fixture
def session() -> AsyncMock:
    """Async session double; repositories are faked, so only commit/rollback matter."""
    return AsyncMock()


@pytest.fixture
def doc_repo() -> FakeDocumentRepository:
    return FakeDocumentRepository()


@pytest.fixture
def firm_repo(session) -> FakeFirmRepository:
    return FakeFirmRepository(session)


@pytest.fixture
def queue_repo() -> FakeQueueRepository:
    return FakeQueueRepository()


@pytest.fixture
def storage() -> FakeStorageService:
    return FakeStorageService()


@pytest.fixture
def locks() -> FilingLockRegistry:
    return FilingLockRegistry()


@pytest.fixture
def ingestion_service(session, storage, doc_repo, firm_repo, queue_repo, locks) -> IngestionService:
    return IngestionService(
        session,
        storage_service=storage,
        document_repo=doc_repo,
        firm_repo=firm_repo,
        queue_repo=queue_repo,
        locks=locks,
    )


@pytest.fixture
def queue_service(session, doc_repo, queue_repo) -> ProcessingQueueService:
    return ProcessingQueueService(session, document_repo=doc_repo, queue_repo=queue_repo)


@pytest.fixture
def document_service(session, storage, doc_repo, firm_repo) -> DocumentService:
    return DocumentService(
        session,
        storage_service=storage,
        document_repo=doc_repo,
        firm_repo=firm_repo,
    )


@pytest.fixture
def test_client() -> TestClient:
    """FastAPI test client; the lifespan (database startup) is not run."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}
