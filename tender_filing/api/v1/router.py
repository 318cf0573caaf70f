from fastapi import APIRouter

from tender_filing.api.v1.endpoints import documents, filing, health, projects

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(filing.router, prefix="/filing", tags=["Filing"])

__all__ = ["api_router"]
