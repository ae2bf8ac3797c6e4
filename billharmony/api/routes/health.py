"""Health check endpoint."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from billharmony import __version__
from billharmony.api.dependencies import get_catalog
from billharmony.services.catalog import ReferenceCatalog

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    facilities: int
    procedures: int


@router.get("/health", response_model=HealthResponse)
async def health_check(catalog: ReferenceCatalog = Depends(get_catalog)):
    """
    Basic health check.

    Loading the catalog is part of the check, so a broken data directory
    reports as an error instead of "healthy".
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        facilities=len(catalog.facilities),
        procedures=len(catalog.procedures),
    )
