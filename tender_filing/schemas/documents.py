"""Pydantic schemas for document, firm and filing payloads."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tender_filing.models.filing import FilingContext


class DocumentResponse(BaseModel):
    """Document as returned to the CRUD layer."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: str
    path: str
    name: str
    display_name: str
    storage_key: str
    storage_bucket: str
    url: Optional[str] = None
    size: int
    mime_type: str
    checksum: str
    processing_status: str
    filing_metadata: Optional[Dict[str, Any]] = Field(None, serialization_alias="metadata")
    tags: Optional[List[str]] = None
    created_by: str
    updated_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    signed_url: Optional[str] = None


class FirmResponse(BaseModel):
    """Firm record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: str
    entity: str
    display_order: int


class FileFailureResponse(BaseModel):
    file_name: str
    code: str
    message: str


class IngestionReportResponse(BaseModel):
    """Documents produced by an upload batch and the files that failed."""

    documents: List[DocumentResponse] = Field(default_factory=list)
    failures: List[FileFailureResponse] = Field(default_factory=list)
    deduplicated: List[UUID] = Field(
        default_factory=list,
        description="IDs of documents returned because identical content already existed",
    )


class PreviewRequest(BaseModel):
    file_name: str = Field(..., min_length=1)
    context: FilingContext = Field(default_factory=FilingContext)


class PreviewResponse(BaseModel):
    path: str
    display_name: str
    category: str


class MoveRequest(BaseModel):
    path: str


class BulkDeleteRequest(BaseModel):
    document_ids: List[UUID]


class BulkMoveRequest(BaseModel):
    document_ids: List[UUID]
    target_path: str


class TagsRequest(BaseModel):
    tags: List[str]
