"""
Parameter Normalizer Tests
tests/test_normalizer.py

Defaults, clamping, alias handling and partner coercion.
"""

import math
from decimal import Decimal

import pytest

from nexus_engine.models.enumerations import PartnershipType, VerificationStatus
from nexus_engine.models.inputs import (
    CompetitionInput,
    InvestmentInput,
    MonteCarloInput,
    Partner,
    PartnershipViabilityInput,
    RCIInput,
    RegionalCostBenefitInput,
    RegionalProfileInput,
    RiskInput,
    SEAMInput,
)
from nexus_engine.models.results import MonteCarloResult
from nexus_engine.scoring.monte_carlo import MonteCarloSimulator
from nexus_engine.scoring.normalizer import (
    INPUT_SPECS,
    MAX_AMOUNT,
    ParameterNormalizer,
    coerce_number,
    ensure_input,
    normalize_input,
    normalized_values,
)
from nexus_engine.scoring.random_source import make_rng
from nexus_engine.scoring.roi_calculator import ROICalculator
from nexus_engine.scoring.tpp_calculator import TPPCalculator


class TestCoerceNumber:
    """Tests for coerce_number."""

    @pytest.mark.parametrize("value", [None, True, False, "12", "abc", [], {}, math.nan, math.inf, -math.inf])
    def test_unusable_values_return_none(self, value):
        """Strings, booleans, containers and non-finite numbers are rejected."""
        assert coerce_number(value) is None

    @pytest.mark.parametrize("value,expected", [(3, 3.0), (2.5, 2.5), (Decimal("1.25"), 1.25), (-4, -4.0)])
    def test_numbers_become_floats(self, value, expected):
        """Ints, floats and Decimals pass through as floats."""
        assert coerce_number(value) == expected


class TestNormalize:
    """Tests for ParameterNormalizer.normalize."""

    def test_empty_mapping_uses_every_default(self):
        """Every field is defaulted and listed by its wire name."""
        result = normalize_input(RCIInput, {})
        assert result.economic == 5e11
        assert result.infrastructure == 70.0
        assert result.human_capital == 75.0
        assert result.institutions == 75.0
        assert result.innovation == 65.0
        assert result.market_access == 80.0
        assert result.defaulted == (
            "economic", "infrastructure", "humanCapital", "institutions", "innovation", "marketAccess",
        )

    def test_none_and_non_mapping_inputs(self):
        """None or a list never raises; it is treated as an empty mapping."""
        assert normalize_input(RCIInput, None).defaulted == normalize_input(RCIInput, {}).defaulted
        assert len(normalize_input(InvestmentInput, [1, 2, 3]).defaulted) == 6

    def test_camel_case_and_snake_case_keys(self):
        """Wire aliases and snake_case names are both accepted."""
        camel = normalize_input(RCIInput, {"humanCapital": 40})
        snake = normalize_input(RCIInput, {"human_capital": 40})
        assert camel.human_capital == snake.human_capital == 40.0
        assert "humanCapital" not in camel.defaulted

    def test_string_degrades_to_default(self):
        """A string where a number is required falls back to the default."""
        result = normalize_input(InvestmentInput, {"expectedROI": "fifteen"})
        assert result.expected_roi == 15.0
        assert "expectedROI" in result.defaulted

    def test_nan_degrades_to_default(self):
        """NaN never reaches a calculator."""
        result = normalize_input(InvestmentInput, {"initialInvestment": float("nan")})
        assert result.initial_investment == 1_000_000.0
        assert "initialInvestment" in result.defaulted

    def test_out_of_range_values_are_clamped_not_defaulted(self):
        """Clamped fields keep their supplied status."""
        result = normalize_input(RCIInput, {"infrastructure": 150, "innovation": -20})
        assert result.infrastructure == 100.0
        assert result.innovation == 0.0
        assert "infrastructure" not in result.defaulted
        assert "innovation" not in result.defaulted

    def test_negative_investment_clamped_to_zero(self):
        result = normalize_input(InvestmentInput, {"initialInvestment": -5})
        assert result.initial_investment == 0.0

    def test_integer_fields_round_half_up(self):
        """Timeline 2.5 → 3 and iterations are integral."""
        assert normalize_input(InvestmentInput, {"timeline": 2.5}).timeline == 3
        assert normalize_input(InvestmentInput, {"timeline": 0}).timeline == 1
        result = normalize_input(MonteCarloInput, {"iterations": 10.4})
        assert result.iterations == 10
        assert isinstance(result.iterations, int)

    def test_competitor_count_is_integer(self):
        result = normalize_input(CompetitionInput, {"competitorCount": 3.6})
        assert result.competitor_count == 4

    def test_every_spec_default_is_inside_its_domain(self):
        """Defaults survive clamping unchanged."""
        for specs in INPUT_SPECS.values():
            for spec in specs:
                if spec.minimum is not None:
                    assert spec.default >= spec.minimum, spec.name
                if spec.maximum is not None:
                    assert spec.default <= spec.maximum, spec.name

    def test_field_count(self):
        normalizer = ParameterNormalizer()
        assert normalizer.field_count(InvestmentInput) == 6
        assert normalizer.field_count(str) == 0


class TestEnsureInput:
    """Tests for ensure_input."""

    def test_typed_input_passes_through(self):
        typed = RCIInput(1e12, 80, 80, 80, 80, 80)
        assert ensure_input(RCIInput, typed) is typed

    def test_mapping_is_normalized(self):
        assert isinstance(ensure_input(RCIInput, {"economic": 1}), RCIInput)


class TestNormalizeSeam:
    """Tests for partner list coercion."""

    def test_missing_partner_list_is_defaulted(self):
        result = normalize_input(SEAMInput, {})
        assert result.partners == ()
        assert result.defaulted == ("partners",)

    def test_partner_entries_are_coerced(self):
        """Bad numbers default, unknown types keep their label, garbage entries drop."""
        result = normalize_input(
            SEAMInput,
            {
                "region": "Cebu",
                "partners": [
                    {"name": "Cebu Port Authority", "type": "Infrastructure", "commitment": 250},
                    "not a partner",
                    {"entity": "Visayas Fund", "type": "Capital", "reputation": "high",
                     "capabilities": ["Finance", 3]},
                    {},
                ],
            },
        )
        assert [p.name for p in result.partners] == ["Cebu Port Authority", "Visayas Fund", "Partner 4"]
        assert result.partners[0].commitment == 100.0
        assert result.partners[1].reputation == 70.0
        assert result.partners[1].capabilities == ["Finance"]
        assert result.partners[2].type == "Anchor"
        assert result.defaulted == ("partners[1]",)
        assert result.region == "Cebu"

    def test_partner_models_pass_through(self):
        partner = Partner(name="Metro Cebu Water", type="Infrastructure")
        result = normalize_input(SEAMInput, {"partners": [partner]})
        assert result.partners == (partner,)


class TestAmountCeiling:
    """Monetary amounts are capped so downstream sums stay finite."""

    @pytest.mark.parametrize(
        "input_cls,alias,attr",
        [
            (InvestmentInput, "initialInvestment", "initial_investment"),
            (InvestmentInput, "marketSize", "market_size"),
            (MonteCarloInput, "initialInvestment", "initial_investment"),
            (RCIInput, "economic", "economic"),
        ],
    )
    def test_huge_amounts_are_clamped(self, input_cls, alias, attr):
        result = normalize_input(input_cls, {alias: 1e308})
        assert getattr(result, attr) == MAX_AMOUNT
        assert alias not in result.defaulted

    def test_trade_balance_is_clamped_both_ways(self):
        assert normalize_input(RiskInput, {"tradeBalance": -1e308}).trade_balance == -MAX_AMOUNT
        assert normalize_input(RiskInput, {"tradeBalance": 1e308}).trade_balance == MAX_AMOUNT

    def test_clamped_investment_gives_finite_results(self):
        raw = {"initialInvestment": 1e308, "marketSize": 1e308, "expectedROI": 1000, "timeline": 50}
        roi = ROICalculator().calculate(raw)
        tpp = TPPCalculator().calculate(raw)
        monte_carlo = MonteCarloSimulator(rng=make_rng(3)).calculate({**raw, "iterations": 200})
        values = [
            roi.components.npv,
            roi.components.risk_adjusted_return,
            tpp.components.final_npv,
            monte_carlo.components.mean_npv,
            monte_carlo.components.standard_deviation,
        ]
        assert all(math.isfinite(v) for v in values)
        assert MonteCarloResult.model_validate_json(monte_carlo.model_dump_json()) == monte_carlo


class TestNormalizeRegional:
    """Tests for regional profile, cost-benefit and partnership inputs."""

    def test_empty_profile_uses_defaults(self):
        result = normalize_input(RegionalProfileInput, {})
        assert result.proximity_to_trade_routes == 50.0
        assert result.tax_incentives == (60.0,)
        assert result.verification_status is VerificationStatus.ESTIMATED
        assert result.competitive_advantages == ()
        assert result.city == ""
        assert len(result.defaulted) == ParameterNormalizer().field_count(RegionalProfileInput)

    def test_nested_groups_are_flattened(self):
        flat = ParameterNormalizer.flatten_groups(
            {"city": "Iloilo", "economicProfile": {"unemploymentRate": 4, "wageLevels": {"averageSalary": 900}}}
        )
        assert flat == {"city": "Iloilo", "unemploymentRate": 4, "averageSalary": 900}

    def test_unusable_incentives_and_status(self):
        result = normalize_input(
            RegionalProfileInput,
            {"taxIncentives": [50, None, -10], "verificationStatus": "rumoured"},
        )
        assert result.tax_incentives == (50.0, 0.0)
        assert result.verification_status is VerificationStatus.ESTIMATED
        assert "taxIncentives[1]" in result.defaulted
        assert "verificationStatus" in result.defaulted

    def test_cost_benefit_reads_top_level_when_groups_absent(self):
        result = normalize_input(
            RegionalCostBenefitInput,
            {"averageSalary": 2500, "expectedROI": 20, "alternatives": [{"city": "Davao"}, 4]},
        )
        assert result.region.average_salary == 2500.0
        assert result.investment.expected_roi == 20.0
        assert [alt.city for alt in result.alternatives] == ["Davao"]
        assert "alternatives[1]" in result.defaulted

    def test_partnership_type_and_deal_parameters(self):
        result = normalize_input(
            PartnershipViabilityInput,
            {"partnershipType": "banking", "dealParameters": {"size": 5e6}, "regionalData": {"crimeRate": 20}},
        )
        assert result.partnership_type is PartnershipType.BANKING
        assert result.deal_parameters == {"size": 5e6}
        assert result.region.crime_rate == 20.0
        assert "partnershipType" not in result.defaulted

    def test_field_counts(self):
        normalizer = ParameterNormalizer()
        regional = normalizer.field_count(RegionalProfileInput)
        assert regional == len(INPUT_SPECS[RegionalProfileInput]) + 2
        assert normalizer.field_count(RegionalCostBenefitInput) == regional + 6
        assert normalizer.field_count(PartnershipViabilityInput) == regional + 1


class TestNormalizedValues:
    """Tests for the wire-named echo of a normalized input."""

    def test_values_use_wire_names(self):
        values = normalized_values(normalize_input(InvestmentInput, {"expected_roi": 12}))
        assert values["expectedROI"] == 12.0
        assert values["marketSize"] == 10_000_000.0
        assert "defaulted" not in values
