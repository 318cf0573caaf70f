"""Document actions: retry, delete, move, tag and the bulk variants."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from tender_filing.core.auth import get_caller_id
from tender_filing.dependencies import get_document_service, get_processing_queue_service
from tender_filing.schemas.documents import (
    BulkDeleteRequest,
    BulkMoveRequest,
    MoveRequest,
    TagsRequest,
)
from tender_filing.services.document_service import DocumentService
from tender_filing.services.processing_queue_service import ProcessingQueueService
from tender_filing.utils.responses import create_api_response

router = APIRouter()


@router.post(
    "/bulk-delete",
    response_model=dict,
    summary="Soft-delete several documents",
    operation_id="bulk_delete_documents",
)
async def bulk_delete_documents(
    request: BulkDeleteRequest,
    caller_id: Annotated[Optional[str], Depends(get_caller_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
):
    result = await document_service.bulk_delete(request.document_ids, caller_id)
    return create_api_response(result)


@router.post(
    "/bulk-move",
    response_model=dict,
    summary="Move several documents to one folder",
    operation_id="bulk_move_documents",
)
async def bulk_move_documents(
    request: BulkMoveRequest,
    caller_id: Annotated[Optional[str], Depends(get_caller_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
):
    result = await document_service.bulk_move(request.document_ids, request.target_path, caller_id)
    return create_api_response(result)


@router.post(
    "/{document_id}/retry",
    response_model=dict,
    summary="Re-queue a document for extraction",
    operation_id="retry_document_extraction",
)
async def retry_extraction(
    document_id: UUID,
    caller_id: Annotated[Optional[str], Depends(get_caller_id)] = None,
    queue_service: Annotated[ProcessingQueueService, Depends(get_processing_queue_service)] = None,
):
    """Reset the document's queue entry to pending."""
    result = await queue_service.retry(document_id, caller_id)
    return create_api_response(result)


@router.delete(
    "/{document_id}",
    response_model=dict,
    summary="Soft-delete a document",
    operation_id="delete_document",
)
async def delete_document(
    document_id: UUID,
    caller_id: Annotated[Optional[str], Depends(get_caller_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
):
    result = await document_service.delete_document(document_id, caller_id)
    return create_api_response(result)


@router.patch(
    "/{document_id}/move",
    response_model=dict,
    summary="Move a document to another folder",
    operation_id="move_document",
)
async def move_document(
    document_id: UUID,
    request: MoveRequest,
    caller_id: Annotated[Optional[str], Depends(get_caller_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
):
    result = await document_service.move_document(document_id, request.path, caller_id)
    return create_api_response(result)


@router.put(
    "/{document_id}/tags",
    response_model=dict,
    summary="Replace a document's tags",
    operation_id="update_document_tags",
)
async def update_tags(
    document_id: UUID,
    request: TagsRequest,
    caller_id: Annotated[Optional[str], Depends(get_caller_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
):
    result = await document_service.update_tags(document_id, request.tags, caller_id)
    return create_api_response(result)
