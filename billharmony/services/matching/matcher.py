"""
Facility matching and ranking.

For a parsed intent and an origin coordinate, keeps every facility that is
within the search radius and publishes a charge for *every* requested
procedure, prices each procedure with and without insurance, and ranks the
survivors.
"""
from decimal import Decimal
from typing import List, Optional

from billharmony.models.catalog import ChargeInfo, Coordinates, Facility, Plan
from billharmony.models.search import CostBreakdown, ParsedIntent, ProcedurePrice, SearchResultEntry
from billharmony.services.catalog.loader import ReferenceCatalog
from billharmony.services.location.geo import calculate_distance
from billharmony.services.pricing.benefits import BenefitCalculator
from billharmony.utils.decimal_utils import decimal_to_float, to_decimal
from billharmony.utils.logger import get_logger

logger = get_logger(__name__)


class FacilityMatcher:
    """Filters, prices and ranks facilities for one request."""

    def __init__(self, calculator: Optional[BenefitCalculator] = None):
        self.calculator = calculator or BenefitCalculator()

    def search(
        self,
        intent: ParsedIntent,
        origin: Coordinates,
        catalog: ReferenceCatalog,
    ) -> List[SearchResultEntry]:
        """
        Facilities that can perform every requested procedure within range.

        Ordered by cash total when the patient has no insurance, by distance
        otherwise. The sort is stable, so ties keep catalog order.
        """
        insurer_id = intent.effective_insurer()
        plan = self._selected_plan(intent, catalog)

        results: List[SearchResultEntry] = []
        for facility in catalog.facilities:
            distance = calculate_distance(
                origin.lat, origin.lng, facility.coordinates.lat, facility.coordinates.lng
            )
            if distance > intent.radius:
                continue

            if not facility.offers_all(intent.procedures):
                continue

            results.append(self._build_entry(facility, distance, intent, insurer_id, plan, catalog))

        if intent.explicitly_no_insurance:
            results = sorted(results, key=lambda entry: entry.total_price_without_insurance)
        else:
            results = sorted(results, key=lambda entry: entry.distance)

        logger.info(
            "Facility search complete",
            result_count=len(results),
            procedures=intent.procedures,
            radius=intent.radius,
            insurer_id=insurer_id,
            plan_id=plan.id if plan else None,
        )
        return results

    @staticmethod
    def _selected_plan(intent: ParsedIntent, catalog: ReferenceCatalog) -> Optional[Plan]:
        insurer = catalog.get_insurer(intent.effective_insurer())
        if insurer is None:
            return None

        plan_id = intent.effective_plan()
        plan = insurer.get_plan(plan_id)
        if plan_id and plan is None:
            logger.warning("Plan not found for insurer", insurer_id=insurer.id, plan_id=plan_id)
        return plan

    def explain_price(
        self,
        charge: ChargeInfo,
        with_insurance: Optional[float],
        insurer_id: Optional[str],
        insurer_name: Optional[str],
        plan: Optional[Plan],
    ) -> CostBreakdown:
        """Breakdown for the price the patient would actually be quoted."""
        if with_insurance is None:
            return self.calculator.explain(charge.gross_charge)
        if plan is not None:
            negotiated = charge.negotiated_for(insurer_id)
            base = negotiated if negotiated is not None else charge.gross_charge
            return self.calculator.explain(base, plan=plan, insurer_name=insurer_name)
        return self.calculator.explain(with_insurance, insurer_name=insurer_name)

    def price_with_insurance(
        self,
        charge: ChargeInfo,
        insurer_id: str,
        plan: Optional[Plan],
    ) -> Optional[float]:
        """
        Insured price for one in-network procedure.

        With a plan, the plan's cost sharing is applied to the negotiated
        charge (or the gross charge when the insurer has none). Without a
        plan this is the insurer's negotiated charge, or None when unknown.
        """
        negotiated = charge.negotiated_for(insurer_id)
        if plan is not None:
            base = negotiated if negotiated is not None else charge.gross_charge
            return self.calculator.apply(base, plan)
        return negotiated

    def _build_entry(
        self,
        facility: Facility,
        distance: float,
        intent: ParsedIntent,
        insurer_id: Optional[str],
        plan: Optional[Plan],
        catalog: ReferenceCatalog,
    ) -> SearchResultEntry:
        in_network = facility.is_in_network(insurer_id)
        insurer = catalog.get_insurer(insurer_id)
        insurer_name = insurer.name if insurer else insurer_id

        prices: List[ProcedurePrice] = []
        for procedure_id in intent.procedures:
            charge = facility.charge_for(procedure_id)
            with_insurance = None
            if in_network:
                with_insurance = self.price_with_insurance(charge, insurer_id, plan)

            prices.append(
                ProcedurePrice(
                    procedure_id=procedure_id,
                    procedure_name=catalog.procedure_name(procedure_id),
                    price_with_insurance=with_insurance,
                    price_without_insurance=charge.gross_charge,
                    setting=charge.setting,
                    cost_breakdown=self.explain_price(charge, with_insurance, insurer_id, insurer_name, plan),
                )
            )

        total_without = sum((to_decimal(price.price_without_insurance) for price in prices), Decimal("0"))

        # Only report an insured total when every procedure is priced
        total_with: Optional[Decimal] = None
        if prices and all(price.price_with_insurance is not None for price in prices):
            total_with = sum((to_decimal(price.price_with_insurance) for price in prices), Decimal("0"))

        return SearchResultEntry(
            facility=facility,
            distance=distance,
            in_network=in_network,
            procedures=prices,
            total_price_with_insurance=decimal_to_float(total_with),
            total_price_without_insurance=decimal_to_float(total_without),
            insurance_plan=plan if in_network else None,
        )
