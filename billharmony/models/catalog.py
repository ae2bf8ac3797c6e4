"""
Reference catalog entities.

These models describe the read-only reference data the engine works from:

- Procedure: a billable service identified by one or more billing codes
- Insurer / Plan: a payer and its benefit designs
- Facility / ChargeInfo: a hospital and its published charges per procedure
- AssistanceProgram: a charity care program and its eligibility rule

All of them are frozen. Raw JSON in the various legacy shapes is normalized
into these models by ``billharmony.services.catalog.normalize`` before any
matching or pricing code sees it.
"""
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from billharmony.models.enums import CareSetting, CoverageType, NetworkType


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class BillingCode(FrozenModel):
    code: str
    code_type: str = Field("CPT", alias="type")


class Procedure(FrozenModel):
    """A billable procedure."""

    id: str
    name: str
    description: str = ""
    codes: Tuple[BillingCode, ...] = Field(default=(), alias="code_information")

    @property
    def code_values(self) -> List[str]:
        return [code.code for code in self.codes]


class PlanBenefits(FrozenModel):
    """Cost-sharing terms of a plan. Coinsurance is a percentage (20 means 20%)."""

    deductible: float = Field(0, ge=0)
    copay: float = Field(0, ge=0)
    coinsurance: float = Field(0, ge=0, le=100)
    out_of_pocket_max: float = Field(0, ge=0, alias="outOfPocketMax")


class Plan(FrozenModel):
    id: str
    name: str
    description: str = ""
    benefits: PlanBenefits
    network_type: NetworkType = Field(NetworkType.BOTH, alias="networkType")

    def matches_keyword(self, keyword: str) -> bool:
        """True if ``keyword`` appears in this plan's name or id (case-insensitive)."""
        keyword = keyword.lower()
        return keyword in self.name.lower() or keyword in self.id.lower()


class Insurer(FrozenModel):
    """An insurance carrier and its plans, in catalog order."""

    id: str
    name: str
    type: str = ""
    plans: Tuple[Plan, ...] = ()

    def get_plan(self, plan_id: Optional[str]) -> Optional[Plan]:
        if not plan_id:
            return None
        return next((plan for plan in self.plans if plan.id == plan_id), None)

    def find_plan(self, keyword: str) -> Optional[Plan]:
        """First plan whose name or id contains ``keyword``."""
        return next((plan for plan in self.plans if plan.matches_keyword(keyword)), None)


class Coordinates(FrozenModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class Address(FrozenModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""

    def one_line(self) -> str:
        locality = " ".join(part for part in (self.state, self.zip) if part)
        parts = [part for part in (self.street, self.city, locality) if part]
        return ", ".join(parts)


class ChargeInfo(FrozenModel):
    """
    Published charges for one procedure at one facility.

    ``negotiated_charges`` is keyed by insurer id. A missing key means the
    price for that payer is unknown, which is not the same as zero.
    """

    gross_charge: float = Field(ge=0)
    negotiated_charges: Dict[str, float] = Field(default_factory=dict)
    setting: CareSetting = CareSetting.OUTPATIENT

    def negotiated_for(self, insurer_id: str) -> Optional[float]:
        return self.negotiated_charges.get(insurer_id)


class Facility(FrozenModel):
    """A hospital or imaging center."""

    id: str
    name: str
    address: Address = Address()
    coordinates: Coordinates
    phone: str = ""
    in_network_insurers: Tuple[str, ...] = ()
    charges: Dict[str, ChargeInfo] = Field(default_factory=dict)

    def charge_for(self, procedure_id: str) -> Optional[ChargeInfo]:
        return self.charges.get(procedure_id)

    def offers_all(self, procedure_ids: List[str]) -> bool:
        return all(procedure_id in self.charges for procedure_id in procedure_ids)

    def is_in_network(self, insurer_id: Optional[str]) -> bool:
        return bool(insurer_id) and insurer_id in self.in_network_insurers


class EligibilityCriteria(FrozenModel):
    max_income: Optional[float] = Field(None, alias="maxIncome")
    max_income_percent_of_fpl: Optional[float] = Field(None, alias="maxIncomePercentOfFPL")
    employment_status: Optional[Tuple[str, ...]] = Field(None, alias="employmentStatus")


class AssistanceProgram(FrozenModel):
    """A charity care or financial assistance program."""

    id: str
    name: str
    description: str = ""
    eligibility: EligibilityCriteria = Field(EligibilityCriteria(), alias="eligibilityCriteria")
    coverage_type: CoverageType = Field(alias="coverageType")
    coverage_amount: Union[float, str] = Field(alias="coverageAmount")

    @field_validator("coverage_amount")
    @classmethod
    def validate_coverage_amount(cls, value):
        if isinstance(value, str) and value != "full":
            raise ValueError("coverage_amount must be a number or 'full'")
        if not isinstance(value, str) and value < 0:
            raise ValueError("coverage_amount must be >= 0")
        return value
