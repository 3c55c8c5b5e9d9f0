"""
Regional Analysis Calculators
nexus_engine/scoring/regional_analysis.py

Location-level analyses over a RegionalProfileInput:

    ComprehensiveRegionalCalculator   six weighted profile sub-scores
    RegionalCostBenefitCalculator     cost vs benefit, ranked against alternatives
    PartnershipViabilityCalculator    profile fit for one partnership type

Comprehensive Regional:
    location     = max(0, 100 − trade_km/10 − port_km/5 − airport_km/2)
    economic     = gdp_share × 0.4 + (100 − unemployment) × 0.3 + (100 − poverty) × 0.3
    score        = Σ sub_score × weight       weights sum to 1.0
    confidence   = 0.85 × freshness / 100     (verified 100, estimated 70, outdated 40)

Regional Cost-Benefit (every factor on 0-100):
    cost         = mean(labor, living cost, transport gap, regulation, corruption, distance)
    benefit      = mean(market, incentives, transport, workforce, stability, trade access)
    position     = base / best_alternative × 100   (base itself when no alternative)
    adjusted_roi = expected_roi + (benefit − cost) / 10
    score        = clamp(position + (benefit − cost))

Partnership Viability:
    factor_k     = min(100, base_factor_k × multiplier[type][k])
    score        = Σ factor_k × weight_k       weights sum to 1.0
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import structlog

from nexus_engine.models.enumerations import CalculatorKind, PartnershipType, VerificationStatus
from nexus_engine.models.inputs import (
    PartnershipViabilityInput,
    RegionalCostBenefitInput,
    RegionalProfileInput,
)
from nexus_engine.models.results import (
    AlternativeComparison,
    ComprehensiveRegionalComponents,
    ComprehensiveRegionalResult,
    PartnershipViabilityComponents,
    PartnershipViabilityResult,
    RegionalCostBenefitComponents,
    RegionalCostBenefitResult,
)
from nexus_engine.scoring.normalizer import ParameterNormalizer, ensure_input
from nexus_engine.scoring.recommendations import generate_recommendations
from nexus_engine.scoring.utils import (
    check_weights,
    clamp,
    mean,
    round_score,
    scaled_confidence,
    weighted_sum,
)

logger = structlog.get_logger(__name__)

_field_counts = ParameterNormalizer()

COMPREHENSIVE_REGIONAL_WEIGHTS: Dict[str, Decimal] = {
    "location_score":       Decimal("0.15"),
    "economic_score":       Decimal("0.25"),
    "infrastructure_score": Decimal("0.20"),
    "business_score":       Decimal("0.20"),
    "incentives_score":     Decimal("0.10"),
    "social_score":         Decimal("0.10"),
}

INFRASTRUCTURE_WEIGHTS: Dict[str, float] = {
    "transportation_score": 0.25,
    "utilities_score":      0.20,
    "digital_connectivity": 0.20,
    "education_quality":    0.15,
    "healthcare_access":    0.10,
    "housing_availability": 0.10,
}

FRESHNESS_SCORES: Dict[VerificationStatus, float] = {
    VerificationStatus.VERIFIED: 100.0,
    VerificationStatus.ESTIMATED: 70.0,
    VerificationStatus.OUTDATED: 40.0,
}

# monthly salary incl. 30% benefits at which labor cost saturates
LABOR_COST_CEILING = 10_000.0

PARTNERSHIP_WEIGHTS: Dict[str, Decimal] = {
    "regulatory_compatibility":     Decimal("0.25"),
    "political_alignment":          Decimal("0.20"),
    "corruption_transparency":      Decimal("0.20"),
    "cultural_alignment":           Decimal("0.15"),
    "economic_complementary":       Decimal("0.10"),
    "infrastructure_compatibility": Decimal("0.10"),
}

# factor → multiplier per partnership type
PARTNERSHIP_MULTIPLIERS: Dict[PartnershipType, Dict[str, Decimal]] = {
    PartnershipType.GOV_GOV: {
        "regulatory_compatibility": Decimal("1.2"), "political_alignment": Decimal("1.3"),
        "corruption_transparency": Decimal("1.1"), "cultural_alignment": Decimal("1.0"),
        "economic_complementary": Decimal("0.9"), "infrastructure_compatibility": Decimal("0.8"),
    },
    PartnershipType.GOV_BUSINESS: {
        "regulatory_compatibility": Decimal("1.1"), "political_alignment": Decimal("1.0"),
        "corruption_transparency": Decimal("1.2"), "cultural_alignment": Decimal("0.9"),
        "economic_complementary": Decimal("1.1"), "infrastructure_compatibility": Decimal("1.0"),
    },
    PartnershipType.BUSINESS_BUSINESS: {
        "regulatory_compatibility": Decimal("0.9"), "political_alignment": Decimal("0.8"),
        "corruption_transparency": Decimal("1.0"), "cultural_alignment": Decimal("1.1"),
        "economic_complementary": Decimal("1.2"), "infrastructure_compatibility": Decimal("1.1"),
    },
    PartnershipType.BANKING: {
        "regulatory_compatibility": Decimal("1.3"), "political_alignment": Decimal("1.1"),
        "corruption_transparency": Decimal("1.4"), "cultural_alignment": Decimal("0.8"),
        "economic_complementary": Decimal("1.0"), "infrastructure_compatibility": Decimal("0.9"),
    },
    PartnershipType.CROSS_SECTOR: {
        "regulatory_compatibility": Decimal("1.0"), "political_alignment": Decimal("0.9"),
        "corruption_transparency": Decimal("1.1"), "cultural_alignment": Decimal("1.2"),
        "economic_complementary": Decimal("1.1"), "infrastructure_compatibility": Decimal("1.0"),
    },
}


def _band(score: float, bands: Tuple[Tuple[float, str], ...], floor: str) -> str:
    for threshold, label in bands:
        if score > threshold:
            return label
    return floor


# =============================================================================
# Comprehensive Regional
# =============================================================================

def location_score(profile: RegionalProfileInput) -> float:
    return max(
        0.0,
        100
        - profile.proximity_to_trade_routes / 10
        - profile.proximity_to_ports / 5
        - profile.proximity_to_airports / 2,
    )


def profile_components(profile: RegionalProfileInput) -> ComprehensiveRegionalComponents:
    """Six 0-100 sub-scores plus data freshness for one profile."""
    economic = (
        profile.contribution_to_national_gdp / 100 * 40
        + (1 - profile.unemployment_rate / 100) * 30
        + (1 - profile.poverty_rate / 100) * 30
    )
    infrastructure = sum(
        getattr(profile, name) * weight for name, weight in INFRASTRUCTURE_WEIGHTS.items()
    )
    business = (
        profile.ease_of_doing_business * 0.25
        + (100 - profile.regulatory_complexity) * 0.20
        + (100 - profile.corruption_index) * 0.20
        + (100 - profile.crime_rate) * 0.15
        + profile.political_stability * 0.10
        + profile.government_efficiency * 0.10
    )
    incentives = (
        mean(profile.tax_incentives) * 0.4
        + profile.tariff_offsets * 0.3
        + profile.subsidies * 0.3
    )
    social = (
        (100 - profile.family_separation_risk) * 0.30
        + profile.community_acceptance * 0.25
        + profile.cultural_compatibility * 0.20
        + profile.labor_rights * 0.15
        + profile.environmental_standards * 0.10
    )
    return ComprehensiveRegionalComponents(
        location_score=round(location_score(profile), 4),
        economic_score=round(economic, 4),
        infrastructure_score=round(infrastructure, 4),
        business_score=round(business, 4),
        incentives_score=round(incentives, 4),
        social_score=round(social, 4),
        competitive_advantages=list(profile.competitive_advantages),
        data_freshness=FRESHNESS_SCORES[profile.verification_status],
    )


class ComprehensiveRegionalCalculator:
    BASE_CONFIDENCE = 0.85

    def __init__(self):
        self.weights = check_weights(COMPREHENSIVE_REGIONAL_WEIGHTS, "Comprehensive regional weights")

    def raw_score(self, components: ComprehensiveRegionalComponents) -> Decimal:
        return weighted_sum(components.model_dump(), self.weights)

    def calculate(self, data: Any) -> ComprehensiveRegionalResult:
        profile = ensure_input(RegionalProfileInput, data)
        components = profile_components(profile)
        raw = self.raw_score(components)
        score = round_score(raw)

        logger.info(
            "comprehensive_regional_calculated",
            city=profile.city,
            score=score,
            freshness=components.data_freshness,
            defaulted=len(profile.defaulted),
        )

        band = _band(
            float(raw),
            ((80, "Excellent opportunity"), (65, "Strong potential"), (50, "Moderate potential")),
            "Limited potential",
        )
        return ComprehensiveRegionalResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.COMPREHENSIVE_REGIONAL, components),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE * components.data_freshness / 100,
                len(profile.defaulted),
                _field_counts.field_count(RegionalProfileInput),
            ),
            analysis=f"Comprehensive Regional Score: {score}/100 - {band}",
            defaulted_fields=list(profile.defaulted),
        )


# =============================================================================
# Regional Cost-Benefit
# =============================================================================

def cost_factors(profile: RegionalProfileInput) -> Dict[str, float]:
    """Cost of doing business, each factor 0-100 where higher is costlier."""
    return {
        "labor_costs": min(profile.average_salary * 1.3 / LABOR_COST_CEILING * 100, 100.0),
        "operational_costs": min(profile.cost_of_living_index, 100.0),
        "infrastructure_costs": 100 - profile.transportation_score,
        "regulatory_costs": profile.regulatory_complexity,
        "corruption_costs": profile.corruption_index,
        "proximity_costs": min(
            (profile.proximity_to_trade_routes + profile.proximity_to_ports) / 2 / 10, 100.0
        ),
    }


def benefit_factors(profile: RegionalProfileInput) -> Dict[str, float]:
    """Benefits of the location, each factor 0-100 where higher is better."""
    return {
        "market_access": min(profile.local_market_size / 1_000_000, 100.0),
        "incentives": min(sum(profile.tax_incentives), 100.0),
        "infrastructure": profile.transportation_score,
        "workforce": profile.education_quality,
        "stability": profile.political_stability,
        "trade_routes": max(0.0, 100 - profile.proximity_to_trade_routes),
    }


class RegionalCostBenefitCalculator:
    BASE_CONFIDENCE = 0.78

    def __init__(self, regional: Optional[ComprehensiveRegionalCalculator] = None):
        self.regional = regional or ComprehensiveRegionalCalculator()

    def _location_score(self, profile: RegionalProfileInput) -> int:
        return round_score(self.regional.raw_score(profile_components(profile)))

    def calculate(self, data: Any) -> RegionalCostBenefitResult:
        inputs = ensure_input(RegionalCostBenefitInput, data)
        region = inputs.region
        base_score = self._location_score(region)

        costs = cost_factors(region)
        benefits = benefit_factors(region)
        cost_index = mean(costs.values())
        benefit_index = mean(benefits.values())

        comparisons: List[AlternativeComparison] = []
        for i, alternative in enumerate(inputs.alternatives):
            alt_score = self._location_score(alternative)
            comparisons.append(
                AlternativeComparison(
                    location=alternative.city or f"Alternative {i + 1}",
                    score=alt_score,
                    difference=base_score - alt_score,
                )
            )

        if not comparisons:
            position = float(base_score)
        else:
            best = max(c.score for c in comparisons)
            position = base_score / best * 100 if best > 0 else 100.0

        net_benefit = benefit_index - cost_index
        adjusted_roi = inputs.investment.expected_roi + net_benefit / 10
        raw = clamp(position + net_benefit, 0.0, 100.0)
        score = round_score(raw)

        components = RegionalCostBenefitComponents(
            base_location_score=base_score,
            total_cost_index=round(cost_index, 4),
            total_benefit_index=round(benefit_index, 4),
            competitive_position=round(position, 4),
            adjusted_roi=round(adjusted_roi, 4),
            cost_breakdown={k: round(v, 4) for k, v in costs.items()},
            benefit_breakdown={k: round(v, 4) for k, v in benefits.items()},
            alternative_comparison=comparisons,
        )

        logger.info(
            "regional_cost_benefit_calculated",
            city=region.city,
            score=score,
            cost_index=components.total_cost_index,
            benefit_index=components.total_benefit_index,
            alternatives=len(comparisons),
        )

        band = _band(
            raw, ((75, "Strong value proposition"), (60, "Competitive positioning")),
            "Cost challenges present",
        )
        return RegionalCostBenefitResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.REGIONAL_COST_BENEFIT, components),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE,
                len(region.defaulted) + len(inputs.investment.defaulted),
                _field_counts.field_count(RegionalCostBenefitInput),
            ),
            analysis=f"Regional Cost-Benefit Score: {score}/100 - {band}",
            defaulted_fields=list(inputs.defaulted),
        )


# =============================================================================
# Partnership Viability
# =============================================================================

def partnership_base_factors(profile: RegionalProfileInput) -> Dict[str, float]:
    return {
        "regulatory_compatibility": 80.0 if profile.regulatory_complexity < 50 else 60.0,
        "cultural_alignment": profile.cultural_compatibility,
        "economic_complementary": profile.growth_potential,
        "infrastructure_compatibility": profile.transportation_score,
        "political_alignment": profile.political_stability,
        "corruption_transparency": 100 - profile.corruption_index,
    }


class PartnershipViabilityCalculator:
    BASE_CONFIDENCE = 0.82

    def __init__(self):
        self.weights = check_weights(PARTNERSHIP_WEIGHTS, "Partnership viability weights")

    def calculate(self, data: Any) -> PartnershipViabilityResult:
        inputs = ensure_input(PartnershipViabilityInput, data)
        base = partnership_base_factors(inputs.region)
        multipliers = PARTNERSHIP_MULTIPLIERS[inputs.partnership_type]

        adjusted = {
            name: float(min(Decimal("100"), Decimal(str(value)) * multipliers[name]))
            for name, value in base.items()
        }
        raw = weighted_sum(adjusted, self.weights)
        score = round_score(raw)

        components = PartnershipViabilityComponents(
            **adjusted,
            partnership_type=inputs.partnership_type.value,
            base_factors=base,
            adjustments={name: float(m) for name, m in multipliers.items()},
            deal_parameters=inputs.deal_parameters,
        )

        logger.info(
            "partnership_viability_calculated",
            partnership_type=inputs.partnership_type.value,
            score=score,
            defaulted=len(inputs.defaulted),
        )

        band = _band(
            float(raw),
            ((80, "High partnership potential"), (65, "Moderate partnership potential")),
            "Partnership challenges present",
        )
        return PartnershipViabilityResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(
                CalculatorKind.PARTNERSHIP_VIABILITY,
                components,
                context={"partnership_type": inputs.partnership_type.value},
            ),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE,
                len(inputs.defaulted),
                _field_counts.field_count(PartnershipViabilityInput),
            ),
            analysis=f"Partnership Viability Score: {score}/100 - {band}",
            defaulted_fields=list(inputs.defaulted),
        )
