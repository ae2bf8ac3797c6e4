"""Form-based search endpoint."""
from fastapi import APIRouter, Depends

from billharmony.api.dependencies import get_structured_search_service
from billharmony.api.schemas import SearchRequest
from billharmony.models.search import SearchResponse
from billharmony.services.matching import StructuredSearchService

router = APIRouter()


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    service: StructuredSearchService = Depends(get_structured_search_service),
):
    """Facilities within `max_distance` miles of `location` offering `procedure`."""
    return service.run(
        procedure=request.procedure,
        location=request.location,
        radius=request.max_distance,
        insurance=request.insurance,
        plan=request.insurance_plan,
    )
