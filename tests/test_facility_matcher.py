"""Tests for facility matching and ranking."""
import pytest

from billharmony.models.search import ParsedIntent
from billharmony.services.matching import FacilityMatcher
from tests.factories import (
    ChargeInfoFactory,
    CoordinatesFactory,
    FacilityFactory,
    InsurerFactory,
    PlanFactory,
    ProcedureFactory,
    make_catalog,
)

ORIGIN = CoordinatesFactory()


@pytest.fixture
def small_catalog():
    """Three facilities near 90210 with an in-network insurer "acme"."""
    mri = ProcedureFactory(id="MRI", name="MRI")
    xray = ProcedureFactory(id="X-Ray", name="X-Ray")
    acme = InsurerFactory(id="acme", name="Acme Health", plans=(PlanFactory(id="acme-basic"),))

    near = FacilityFactory(
        id="near",
        coordinates=CoordinatesFactory(lat=34.0800),
        in_network_insurers=("acme",),
        charges={
            "MRI": ChargeInfoFactory(gross_charge=3000, negotiated_charges={"acme": 1800}),
            "X-Ray": ChargeInfoFactory(gross_charge=400),
        },
    )
    middle = FacilityFactory(
        id="middle",
        coordinates=CoordinatesFactory(lat=34.1500),
        in_network_insurers=("acme",),
        charges={
            "MRI": ChargeInfoFactory(gross_charge=2000, negotiated_charges={"acme": 1200}),
            "X-Ray": ChargeInfoFactory(gross_charge=300, negotiated_charges={"acme": 150}),
        },
    )
    far = FacilityFactory(
        id="far",
        coordinates=CoordinatesFactory(lat=34.3000),
        charges={"MRI": ChargeInfoFactory(gross_charge=1000)},
    )
    return make_catalog(procedures=[mri, xray], insurers=[acme], facilities=[near, middle, far])


def _intent(**kwargs):
    values = {"procedures": ["MRI"], "location": "90210", "radius": 100}
    values.update(kwargs)
    return ParsedIntent(**values)


@pytest.mark.unit
class TestFacilityFiltering:
    """Tests for radius and procedure coverage filters."""

    def test_radius_filter(self, matcher, small_catalog):
        results = matcher.search(_intent(radius=10), ORIGIN, small_catalog)

        assert [entry.facility.id for entry in results] == ["near", "middle"]
        assert all(entry.distance <= 10 for entry in results)

    def test_facility_must_offer_every_procedure(self, matcher, small_catalog):
        """'far' has no X-Ray and is dropped even though it is in range."""
        results = matcher.search(_intent(procedures=["MRI", "X-Ray"]), ORIGIN, small_catalog)

        assert [entry.facility.id for entry in results] == ["near", "middle"]
        assert [price.procedure_id for price in results[0].procedures] == ["MRI", "X-Ray"]

    def test_empty_catalog(self, matcher):
        assert matcher.search(_intent(), ORIGIN, make_catalog()) == []


@pytest.mark.unit
class TestFacilityPricing:
    """Tests for per-procedure and aggregate prices."""

    def test_out_of_network_has_no_insured_price(self, matcher, small_catalog):
        results = matcher.search(_intent(insurer_id="acme"), ORIGIN, small_catalog)
        far = next(entry for entry in results if entry.facility.id == "far")

        assert far.in_network is False
        assert far.procedures[0].price_with_insurance is None
        assert far.total_price_with_insurance is None
        assert far.insurance_plan is None

    def test_negotiated_price_without_plan(self, matcher, small_catalog):
        results = matcher.search(_intent(insurer_id="acme"), ORIGIN, small_catalog)

        assert results[0].facility.id == "near"
        assert results[0].procedures[0].price_with_insurance == 1800
        assert results[0].total_price_with_insurance == 1800

    def test_plan_applied_to_negotiated_price(self, matcher, small_catalog):
        """Default plan: 500 deductible, 25 copay, 10% coinsurance."""
        results = matcher.search(_intent(insurer_id="acme", plan_id="acme-basic"), ORIGIN, small_catalog)

        near = results[0]
        assert near.procedures[0].price_with_insurance == 653
        assert near.insurance_plan.id == "acme-basic"
        assert near.procedures[0].cost_breakdown.deductible == 500

    def test_plan_falls_back_to_gross_charge(self, matcher, small_catalog):
        """'near' has no negotiated X-Ray rate, so the plan applies to the 400 gross."""
        intent = _intent(procedures=["X-Ray"], insurer_id="acme", plan_id="acme-basic")

        results = matcher.search(intent, ORIGIN, small_catalog)

        assert results[0].facility.id == "near"
        assert results[0].procedures[0].price_with_insurance == 400

    def test_partial_insured_total_is_null(self, matcher, small_catalog):
        """One unpriced procedure nulls the insured total; the cash total stays."""
        intent = _intent(procedures=["MRI", "X-Ray"], insurer_id="acme")

        near = matcher.search(intent, ORIGIN, small_catalog)[0]

        assert near.procedures[0].price_with_insurance == 1800
        assert near.procedures[1].price_with_insurance is None
        assert near.total_price_with_insurance is None
        assert near.total_price_without_insurance == 3400

    def test_full_insured_total(self, matcher, small_catalog):
        intent = _intent(procedures=["MRI", "X-Ray"], insurer_id="acme")

        middle = matcher.search(intent, ORIGIN, small_catalog)[1]

        assert middle.facility.id == "middle"
        assert middle.total_price_with_insurance == 1350
        assert middle.total_price_without_insurance == 2300

    def test_unknown_plan_uses_negotiated_price(self, matcher, small_catalog, mocker):
        mock_logger = mocker.patch("billharmony.services.matching.matcher.logger")

        results = matcher.search(_intent(insurer_id="acme", plan_id="missing"), ORIGIN, small_catalog)

        assert results[0].procedures[0].price_with_insurance == 1800
        mock_logger.warning.assert_called_once()

    def test_no_insurance_ignores_insurer(self, matcher, small_catalog):
        intent = _intent(insurer_id="acme", plan_id="acme-basic", explicitly_no_insurance=True)

        results = matcher.search(intent, ORIGIN, small_catalog)

        assert all(entry.in_network is False for entry in results)
        assert all(entry.total_price_with_insurance is None for entry in results)

    def test_cash_breakdown(self, matcher, small_catalog):
        near = matcher.search(_intent(), ORIGIN, small_catalog)[0]

        assert near.procedures[0].cost_breakdown.total == 3000
        assert near.procedures[0].cost_breakdown.plain_language.startswith("Without insurance")


@pytest.mark.unit
class TestFacilityOrdering:
    """Tests for result ordering."""

    def test_sorted_by_distance_with_insurance(self, matcher, small_catalog):
        results = matcher.search(_intent(insurer_id="acme"), ORIGIN, small_catalog)

        distances = [entry.distance for entry in results]
        assert distances == sorted(distances)
        assert [entry.facility.id for entry in results] == ["near", "middle", "far"]

    def test_sorted_by_cash_total_without_insurance(self, matcher, small_catalog):
        results = matcher.search(_intent(explicitly_no_insurance=True), ORIGIN, small_catalog)

        assert [entry.facility.id for entry in results] == ["far", "middle", "near"]

    def test_distance_ties_keep_catalog_order(self, matcher):
        """Equal distances keep catalog order, and the returned list is already sorted."""
        facilities = [
            FacilityFactory(
                id=f"clinic-{n}",
                coordinates=CoordinatesFactory(lat=lat),
                charges={"MRI": ChargeInfoFactory()},
            )
            for n, lat in enumerate([34.10, 34.08, 34.10, 34.08])
        ]
        catalog = make_catalog(procedures=[ProcedureFactory(id="MRI")], facilities=facilities)

        results = matcher.search(_intent(), ORIGIN, catalog)

        assert sorted(results, key=lambda entry: entry.distance) == results
        assert [entry.facility.id for entry in results] == ["clinic-1", "clinic-3", "clinic-0", "clinic-2"]

    def test_cash_price_ties_keep_catalog_order(self, matcher):
        """Equal cash totals keep catalog order regardless of distance."""
        facilities = [
            FacilityFactory(
                id=f"clinic-{n}",
                coordinates=CoordinatesFactory(lat=lat),
                charges={"MRI": ChargeInfoFactory(gross_charge=gross)},
            )
            for n, (lat, gross) in enumerate([(34.08, 500), (34.30, 300), (34.10, 500), (34.20, 300)])
        ]
        catalog = make_catalog(procedures=[ProcedureFactory(id="MRI")], facilities=facilities)

        results = matcher.search(_intent(explicitly_no_insurance=True), ORIGIN, catalog)

        assert sorted(results, key=lambda entry: entry.total_price_without_insurance) == results
        assert [entry.facility.id for entry in results] == ["clinic-1", "clinic-3", "clinic-0", "clinic-2"]


@pytest.mark.integration
class TestFacilityMatcherWithReferenceData:
    """Matching against the bundled reference data."""

    def test_mri_with_premium_plan(self, catalog, resolver):
        origin = resolver.resolve("90210").coordinates
        intent = _intent(radius=10, insurer_id="bluecross", plan_id="bluecross-premium")

        results = FacilityMatcher().search(intent, origin, catalog)

        assert [entry.facility.id for entry in results] == [
            "cedars-sinai",
            "ucla-ronald-reagan",
            "providence-saint-johns",
        ]
        assert [entry.total_price_with_insurance for entry in results] == [653, 638, 628]

    def test_cash_search_for_two_procedures(self, catalog, resolver):
        origin = resolver.resolve("90210").coordinates
        intent = _intent(procedures=["MRI", "CT Scan"], radius=50, explicitly_no_insurance=True)

        results = FacilityMatcher().search(intent, origin, catalog)

        assert [entry.facility.id for entry in results] == [
            "uci-medical-center",
            "huntington-pasadena",
            "keck-usc",
            "ucla-ronald-reagan",
            "cedars-sinai",
        ]
        assert [entry.total_price_without_insurance for entry in results] == [3400, 3900, 4400, 4800, 5300]
