"""Free-text search endpoint."""
from fastapi import APIRouter, Depends

from billharmony.api.dependencies import get_ai_search_service
from billharmony.api.schemas import AISearchRequest
from billharmony.models.search import SearchResponse
from billharmony.services.matching import AISearchService

router = APIRouter()


@router.post("/ai-search", response_model=SearchResponse)
async def ai_search(
    request: AISearchRequest,
    service: AISearchService = Depends(get_ai_search_service),
):
    """
    Answer a request such as "How much is an MRI near 90210 with Blue Cross premium?".

    **Returns:**
    - `results`: facilities offering every requested procedure, nearest first
      (cheapest first when paying cash)
    - `parsed_data`: what was understood from the query
    - `missing_info`: set instead of results when a cost question arrives
      without any insurer; ask the user and search again
    """
    return service.run(request.ai_query, request.user_profile)
