"""Centralized dependency injection for the FastAPI application.

Each factory binds a service to the request's database session.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tender_filing.core.database import get_async_session
from tender_filing.services.document_service import DocumentService
from tender_filing.services.ingestion_service import IngestionService
from tender_filing.services.processing_queue_service import ProcessingQueueService


async def get_ingestion_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> IngestionService:
    """Get ingestion service instance.

    Args:
        db_session: Database session from dependency injection

    Returns:
        IngestionService: Service for batch uploads
    """
    return IngestionService(db_session)


async def get_processing_queue_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ProcessingQueueService:
    return ProcessingQueueService(db_session)


async def get_document_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> DocumentService:
    return DocumentService(db_session)
