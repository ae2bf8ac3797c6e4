"""Normalize raw reference records into catalog models.

Facility records arrive in two shapes:

- Price transparency files (``hospital_id``, ``hospital_name``,
  ``standard_charge_information`` with ``payer_specific_negotiated_charges``
  keyed by payer display name)
- The older flat shape (``id``, ``name``, ``address`` dict,
  ``procedures`` mapping procedure id to ``withInsurance``/``withoutInsurance``)

Both become a single :class:`~billharmony.models.catalog.Facility`. Nothing
downstream checks which shape a facility came from.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from billharmony.models.catalog import (
    Address,
    AssistanceProgram,
    ChargeInfo,
    Coordinates,
    Facility,
    Insurer,
    Procedure,
)
from billharmony.models.enums import CareSetting
from billharmony.utils.decimal_utils import decimal_to_float, parse_financial_amount
from billharmony.utils.errors import CatalogError
from billharmony.utils.logger import get_logger

logger = get_logger(__name__)


def _first_present(record: Mapping[str, Any], *keys: str) -> Any:
    """Value of the first key that is set. Zero is a value; None and "" are not."""
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _amount(value: Any) -> Optional[float]:
    return decimal_to_float(parse_financial_amount(value))


def _first_amount(record: Mapping[str, Any], *keys: str) -> Optional[float]:
    """First of ``keys`` holding a parseable amount. A published 0 is kept, not skipped."""
    for key in keys:
        amount = _amount(record.get(key))
        if amount is not None:
            return amount
    return None


def build_code_index(procedures: Iterable[Procedure]) -> Dict[str, str]:
    """Map billing code -> procedure id. The first procedure to claim a code keeps it."""
    index: Dict[str, str] = {}
    for procedure in procedures:
        for code in procedure.code_values:
            if code in index and index[code] != procedure.id:
                logger.warning(
                    "Billing code claimed by multiple procedures",
                    code=code,
                    kept=index[code],
                    ignored=procedure.id,
                )
                continue
            index[code] = procedure.id
    return index


def build_payer_index(insurers: Iterable[Insurer]) -> Dict[str, str]:
    """Map lower-cased payer display name and id -> insurer id."""
    index: Dict[str, str] = {}
    for insurer in insurers:
        index.setdefault(insurer.name.lower(), insurer.id)
        index.setdefault(insurer.id.lower(), insurer.id)
    return index


def normalize_procedure(record: Mapping[str, Any]) -> Procedure:
    codes = record.get("code_information") or record.get("codes") or []
    if not codes and record.get("code"):
        codes = [{"code": record["code"], "type": record.get("code_type", "CPT")}]
    return Procedure(
        id=str(record["id"]),
        name=record.get("name") or str(record["id"]),
        description=record.get("description", ""),
        codes=tuple(codes),
    )


def normalize_insurer(record: Mapping[str, Any]) -> Insurer:
    return Insurer.model_validate(record)


def normalize_program(record: Mapping[str, Any]) -> AssistanceProgram:
    return AssistanceProgram.model_validate(record)


def _normalize_address(raw: Any) -> Address:
    if isinstance(raw, str):
        return Address(street=raw)
    if isinstance(raw, Mapping):
        return Address(
            street=str(raw.get("street", "")),
            city=str(raw.get("city", "")),
            state=str(raw.get("state", "")),
            zip=str(raw.get("zip", "")),
        )
    return Address()


def _setting(raw: Any) -> CareSetting:
    return CareSetting.INPATIENT if raw == CareSetting.INPATIENT.value else CareSetting.OUTPATIENT


def _charges_from_standard_charge_information(
    entries: List[Mapping[str, Any]],
    code_index: Mapping[str, str],
    payer_index: Mapping[str, str],
    facility_id: str,
) -> Dict[str, ChargeInfo]:
    charges: Dict[str, ChargeInfo] = {}
    for entry in entries:
        code_information = entry.get("code_information") or []
        code = code_information[0].get("code") if code_information else None
        procedure_id = code_index.get(str(code)) if code else None
        if procedure_id is None:
            logger.debug("Skipping charge with unknown billing code", facility_id=facility_id, code=code)
            continue
        if procedure_id in charges:
            continue

        standard = entry.get("standard_charges") or {}
        gross = _first_amount(standard, "gross_charge", "discounted_cash_price")

        negotiated: Dict[str, float] = {}
        for payer_charge in standard.get("payer_specific_negotiated_charges") or []:
            insurer_id = payer_index.get(str(payer_charge.get("payer_name", "")).lower())
            if insurer_id is None:
                continue
            price = _first_amount(payer_charge, "standard_charge", "estimated_allowed_amount")
            if price is not None:
                negotiated[insurer_id] = price

        charges[procedure_id] = ChargeInfo(
            gross_charge=gross if gross is not None else 0.0,
            negotiated_charges=negotiated,
            setting=_setting(entry.get("setting")),
        )
    return charges


def _charges_from_procedure_map(
    procedures: Mapping[str, Mapping[str, Any]],
    known_procedures: Mapping[str, str],
    facility_id: str,
) -> Dict[str, ChargeInfo]:
    charges: Dict[str, ChargeInfo] = {}
    for key, data in procedures.items():
        procedure_id = known_procedures.get(key.lower())
        if procedure_id is None:
            logger.debug("Skipping charge for unknown procedure", facility_id=facility_id, procedure=key)
            continue

        negotiated = {}
        for insurer_id, price in (data.get("withInsurance") or data.get("with_insurance") or {}).items():
            amount = _amount(price)
            if amount is not None:
                negotiated[insurer_id] = amount

        gross = _first_amount(data, "withoutInsurance", "without_insurance", "gross_charge")
        charges[procedure_id] = ChargeInfo(
            gross_charge=gross if gross is not None else 0.0,
            negotiated_charges=negotiated,
            setting=_setting(data.get("setting")),
        )
    return charges


def normalize_facility(
    record: Mapping[str, Any],
    procedures: Iterable[Procedure],
    code_index: Mapping[str, str],
    payer_index: Mapping[str, str],
) -> Facility:
    """
    Convert one raw facility record into a :class:`Facility`.

    Raises:
        CatalogError: if the record has no id or no usable coordinates
    """
    facility_id = _first_present(record, "hospital_id", "id")
    if facility_id is None:
        raise CatalogError("Facility record has no id", details={"keys": sorted(record.keys())})
    facility_id = str(facility_id)

    if "standard_charge_information" in record:
        charges = _charges_from_standard_charge_information(
            record.get("standard_charge_information") or [], code_index, payer_index, facility_id
        )
    else:
        known = {}
        for procedure in procedures:
            known.setdefault(procedure.id.lower(), procedure.id)
            known.setdefault(procedure.name.lower(), procedure.id)
        charges = _charges_from_procedure_map(record.get("procedures") or {}, known, facility_id)

    try:
        coordinates = Coordinates.model_validate(record.get("coordinates") or {})
    except PydanticValidationError as e:
        raise CatalogError(
            f"Facility {facility_id} has invalid coordinates",
            details={"errors": e.errors(include_url=False)},
        ) from e

    in_network = record.get("in_network_insurances")
    if in_network is None:
        in_network = record.get("inNetworkInsurances") or []

    return Facility(
        id=facility_id,
        name=str(_first_present(record, "hospital_name", "name") or facility_id),
        address=_normalize_address(_first_present(record, "hospital_address", "address")),
        coordinates=coordinates,
        phone=str(record.get("phone") or ""),
        in_network_insurers=tuple(in_network),
        charges=charges,
    )


def normalize_zip_codes(raw: Mapping[str, Any]) -> Dict[str, Coordinates]:
    """Zip table entries may carry extra fields (city, state); only lat/lng are kept."""
    table: Dict[str, Coordinates] = {}
    for zip_code, entry in raw.items():
        try:
            table[str(zip_code)] = Coordinates(lat=entry["lat"], lng=entry["lng"])
        except (KeyError, TypeError, PydanticValidationError):
            logger.warning("Skipping malformed zip code entry", zip_code=zip_code)
    return table
