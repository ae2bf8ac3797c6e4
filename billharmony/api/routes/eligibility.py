"""Charity care eligibility endpoint."""
from fastapi import APIRouter, Depends

from billharmony.api.dependencies import get_catalog, get_eligibility_scorer
from billharmony.api.schemas import CharityEligibilityRequest
from billharmony.models.eligibility import EligibilityResult
from billharmony.services.catalog import ReferenceCatalog
from billharmony.services.eligibility import EligibilityScorer, build_profile
from billharmony.utils.errors import NotFoundError

router = APIRouter()


@router.post("/charity-eligibility", response_model=EligibilityResult)
async def charity_eligibility(
    request: CharityEligibilityRequest,
    catalog: ReferenceCatalog = Depends(get_catalog),
    scorer: EligibilityScorer = Depends(get_eligibility_scorer),
):
    """
    Screen a household for the catalog's financial assistance programs.

    Missing household income, family size or employment status is a 400
    naming every missing field.
    """
    profile = build_profile(
        request.household_income,
        request.family_size,
        request.employment_status,
        request.zip_code,
    )
    if request.hospital_id and catalog.get_facility(request.hospital_id) is None:
        raise NotFoundError("Hospital", request.hospital_id)

    return scorer.score(profile, request.procedure_cost, catalog.programs)
