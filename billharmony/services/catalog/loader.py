"""Reference catalog: load once, read everywhere."""
import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from billharmony.config.settings import get_settings
from billharmony.models.catalog import (
    AssistanceProgram,
    Coordinates,
    Facility,
    Insurer,
    Procedure,
)
from billharmony.services.catalog.normalize import (
    build_code_index,
    build_payer_index,
    normalize_facility,
    normalize_insurer,
    normalize_procedure,
    normalize_program,
    normalize_zip_codes,
)
from billharmony.utils.errors import CatalogError
from billharmony.utils.logger import get_logger

logger = get_logger(__name__)

PROCEDURES_FILE = "procedures.json"
INSURERS_FILE = "insurances.json"
FACILITIES_FILE = "hospitals.json"
ZIP_CODES_FILE = "zipCodes.json"
PROGRAMS_FILE = "charityPrograms.json"


@dataclass(frozen=True)
class ReferenceCatalog:
    """
    Immutable reference data shared by every request.

    Built once by :func:`build_catalog` or :func:`load_catalog`; the core only
    reads from it.
    """

    procedures: Tuple[Procedure, ...]
    insurers: Tuple[Insurer, ...]
    facilities: Tuple[Facility, ...]
    zip_codes: Mapping[str, Coordinates]
    programs: Tuple[AssistanceProgram, ...] = ()
    code_index: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def procedure_ids(self) -> List[str]:
        return [procedure.id for procedure in self.procedures]

    def get_procedure(self, procedure_id: str) -> Optional[Procedure]:
        return next((p for p in self.procedures if p.id == procedure_id), None)

    def procedure_name(self, procedure_id: str) -> str:
        procedure = self.get_procedure(procedure_id)
        return procedure.name if procedure else procedure_id

    def procedure_for_code(self, code: str) -> Optional[str]:
        return self.code_index.get(code)

    def get_insurer(self, insurer_id: Optional[str]) -> Optional[Insurer]:
        if not insurer_id:
            return None
        return next((i for i in self.insurers if i.id == insurer_id), None)

    def get_facility(self, facility_id: str) -> Optional[Facility]:
        return next((f for f in self.facilities if f.id == facility_id), None)


def build_catalog(
    procedures: List[Mapping[str, Any]],
    insurers: List[Mapping[str, Any]],
    facilities: List[Mapping[str, Any]],
    zip_codes: Mapping[str, Any],
    programs: Optional[List[Mapping[str, Any]]] = None,
) -> ReferenceCatalog:
    """
    Build a catalog from raw, already-parsed JSON records.

    Raises:
        CatalogError: if any record fails validation
    """
    try:
        procedure_models = tuple(normalize_procedure(record) for record in procedures)
        insurer_models = tuple(normalize_insurer(record) for record in insurers)
        program_models = tuple(normalize_program(record) for record in programs or [])
    except (KeyError, PydanticValidationError) as e:
        raise CatalogError("Invalid reference record", details={"error": str(e)}) from e

    code_index = build_code_index(procedure_models)
    payer_index = build_payer_index(insurer_models)

    try:
        facility_models = tuple(
            normalize_facility(record, procedure_models, code_index, payer_index)
            for record in facilities
        )
    except PydanticValidationError as e:
        raise CatalogError("Invalid facility record", details={"error": str(e)}) from e

    catalog = ReferenceCatalog(
        procedures=procedure_models,
        insurers=insurer_models,
        facilities=facility_models,
        zip_codes=MappingProxyType(normalize_zip_codes(zip_codes)),
        programs=program_models,
        code_index=MappingProxyType(code_index),
    )

    logger.info(
        "Reference catalog built",
        procedures=len(catalog.procedures),
        insurers=len(catalog.insurers),
        facilities=len(catalog.facilities),
        zip_codes=len(catalog.zip_codes),
        programs=len(catalog.programs),
    )
    return catalog


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"Reference data file missing: {path.name}", details={"path": str(path)}) from e
    except json.JSONDecodeError as e:
        raise CatalogError(
            f"Reference data file is not valid JSON: {path.name}",
            details={"path": str(path), "line": e.lineno},
        ) from e


def load_catalog(data_dir: Path) -> ReferenceCatalog:
    """Load every reference table from ``data_dir``. The programs file is optional."""
    data_dir = Path(data_dir)
    logger.info("Loading reference catalog", data_dir=str(data_dir))

    programs_path = data_dir / PROGRAMS_FILE
    programs = _read_json(programs_path) if programs_path.exists() else []

    return build_catalog(
        procedures=_read_json(data_dir / PROCEDURES_FILE),
        insurers=_read_json(data_dir / INSURERS_FILE),
        facilities=_read_json(data_dir / FACILITIES_FILE),
        zip_codes=_read_json(data_dir / ZIP_CODES_FILE),
        programs=programs,
    )


@lru_cache
def get_default_catalog() -> ReferenceCatalog:
    """Catalog from the configured data directory, loaded once per process."""
    return load_catalog(get_settings().reference_data_dir)
