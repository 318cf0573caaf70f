"""Project-scoped routes: upload, document listing and firms."""

import json
from typing import Annotated, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError

from tender_filing.core.auth import get_caller_id
from tender_filing.core.config import settings
from tender_filing.dependencies import get_document_service, get_ingestion_service
from tender_filing.models.filing import (
    CardType,
    FilingContext,
    IncomingFile,
    ManualOverride,
    UploadLocation,
)
from tender_filing.services.document_service import DocumentService
from tender_filing.services.ingestion_service import IngestionService
from tender_filing.utils.logging import get_logger
from tender_filing.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def parse_overrides(raw: Optional[str], file_count: int) -> Dict[int, ManualOverride]:
    """Parse the ``overrides`` form field, keyed by file index.

    The field is a JSON object such as
    ``{"0": {"path": "Plan/Misc", "display_name": "Site Plan.PDF"}}``.
    Anything unparseable is ignored with a warning and the batch is auto filed.
    """
    if not raw:
        return {}

    try:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError("overrides must be a JSON object")
        overrides = {
            int(index): ManualOverride.model_validate(value)
            for index, value in payload.items()
        }
    except (ValueError, TypeError, ValidationError) as e:
        LOGGER.warning(f"Ignoring unparseable overrides, falling back to auto filing: {e}")
        return {}

    out_of_range = [index for index in overrides if not 0 <= index < file_count]
    if out_of_range:
        LOGGER.warning(f"Ignoring overrides for unknown file indexes: {out_of_range}")
    return {index: o for index, o in overrides.items() if 0 <= index < file_count}


@router.post(
    "/{project_id}/documents/upload",
    response_model=dict,
    summary="Upload documents into a project",
    operation_id="upload_project_documents",
)
async def upload_documents(
    project_id: str,
    files: List[UploadFile] = File(..., description="One or more documents to file"),
    upload_location: UploadLocation = Form("general"),
    card_type: Optional[CardType] = Form(None),
    discipline_or_trade: Optional[str] = Form(None),
    section_name: Optional[str] = Form(None),
    firm_name: Optional[str] = Form(None),
    add_to_documents: bool = Form(True),
    overrides: Optional[str] = Form(None, description="JSON object of manual overrides by file index"),
    caller_id: Annotated[Optional[str], Depends(get_caller_id)] = None,
    ingestion_service: Annotated[IngestionService, Depends(get_ingestion_service)] = None,
):
    """Classify, name, deduplicate, store and enqueue each uploaded file."""
    context = FilingContext(
        upload_location=upload_location,
        card_type=card_type,
        discipline_or_trade=discipline_or_trade,
        section_name=section_name,
        firm_name=firm_name,
        add_to_documents=add_to_documents,
    )
    manual = parse_overrides(overrides, len(files))
    max_bytes = settings.filing.max_upload_bytes

    incoming = []
    for index, upload in enumerate(files):
        file_name = upload.filename or f"upload-{index}"
        if upload.size is not None and upload.size > max_bytes:
            # Left unread; validation rejects the batch on declared_size
            content, declared_size = b"", upload.size
        else:
            content, declared_size = await upload.read(), None

        incoming.append(
            IncomingFile(
                file_name=file_name,
                content_type=upload.content_type or DEFAULT_CONTENT_TYPE,
                content=content,
                override=manual.get(index),
                declared_size=declared_size,
            )
        )

    result = await ingestion_service.ingest(incoming, context, project_id, caller_id)
    return create_api_response(result)


@router.get(
    "/{project_id}/documents",
    response_model=dict,
    summary="List project documents",
    operation_id="list_project_documents",
)
async def list_documents(
    project_id: str,
    folder_path: Optional[str] = Query(None, description="Only documents in this folder"),
    caller_id: Annotated[Optional[str], Depends(get_caller_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
):
    """List live documents, newest first, with signed download URLs."""
    result = await document_service.list_documents(project_id, caller_id, folder_path)
    return create_api_response(result)


@router.get(
    "/{project_id}/firms",
    response_model=dict,
    summary="List project firms",
    operation_id="list_project_firms",
)
async def list_firms(
    project_id: str,
    caller_id: Annotated[Optional[str], Depends(get_caller_id)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
):
    result = await document_service.list_firms(project_id, caller_id)
    return create_api_response(result)
