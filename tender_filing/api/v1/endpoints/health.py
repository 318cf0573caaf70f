from fastapi import APIRouter
from pydantic import BaseModel, Field

from tender_filing.core.config import settings
from tender_filing.core.database import db_client

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="healthy or degraded")
    version: str
    service: str
    database: dict = Field(default_factory=dict)


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check endpoint",
    operation_id="get_service_health_status",
)
async def health_check() -> HealthCheckResponse:
    """Report service status along with database connectivity."""
    db_health = await db_client.health_check()

    return HealthCheckResponse(
        status="healthy" if db_health["status"] == "healthy" else "degraded",
        version=settings.app_version,
        service=settings.app_name,
        database=db_health,
    )
