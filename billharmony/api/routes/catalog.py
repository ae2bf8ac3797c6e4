"""Read-only catalog endpoints used to populate search forms."""
from typing import List

from fastapi import APIRouter, Depends

from billharmony.api.dependencies import get_catalog
from billharmony.models.catalog import Facility, Insurer, Procedure
from billharmony.services.catalog import ReferenceCatalog
from billharmony.utils.errors import NotFoundError

router = APIRouter()


@router.get("/procedures", response_model=List[Procedure])
async def list_procedures(catalog: ReferenceCatalog = Depends(get_catalog)):
    return list(catalog.procedures)


@router.get("/insurances", response_model=List[Insurer])
async def list_insurers(catalog: ReferenceCatalog = Depends(get_catalog)):
    return list(catalog.insurers)


@router.get("/insurances/{insurer_id}", response_model=Insurer)
async def get_insurer(insurer_id: str, catalog: ReferenceCatalog = Depends(get_catalog)):
    insurer = catalog.get_insurer(insurer_id)
    if insurer is None:
        raise NotFoundError("Insurer", insurer_id)
    return insurer


@router.get("/hospitals/{hospital_id}", response_model=Facility)
async def get_hospital(hospital_id: str, catalog: ReferenceCatalog = Depends(get_catalog)):
    facility = catalog.get_facility(hospital_id)
    if facility is None:
        raise NotFoundError("Hospital", hospital_id)
    return facility
