"""
Factor Index Calculators
nexus_engine/scoring/factor_indices.py

Weighted-sum indices over 0-100 factor scores:

    DealSuccessCalculator           12 factors, corruption inverted
    TrustCalculator                  8 factors
    InvestmentAttractionCalculator  12 factors, corruption inverted

Formula (all three):
    score = Σ (factor_k × weight_k)      weights sum to 1.0
"""

from decimal import Decimal
from typing import Any, Dict

import structlog

from nexus_engine.models.enumerations import CalculatorKind
from nexus_engine.models.inputs import DealSuccessInput, InvestmentAttractionInput, TrustInput
from nexus_engine.models.results import (
    DealSuccessComponents,
    DealSuccessResult,
    InvestmentAttractionComponents,
    InvestmentAttractionResult,
    TrustComponents,
    TrustResult,
)
from nexus_engine.scoring.normalizer import ensure_input
from nexus_engine.scoring.recommendations import generate_recommendations
from nexus_engine.scoring.utils import check_weights, round_score, scaled_confidence, weighted_sum

logger = structlog.get_logger(__name__)

DEAL_SUCCESS_WEIGHTS: Dict[str, Decimal] = {
    "economic_stability":     Decimal("0.15"),
    "political_stability":    Decimal("0.15"),
    "regulatory_quality":     Decimal("0.12"),
    "infrastructure_quality": Decimal("0.10"),
    "market_access":          Decimal("0.10"),
    "human_capital":          Decimal("0.08"),
    "corruption_index":       Decimal("0.08"),
    "contract_enforcement":   Decimal("0.08"),
    "partner_reputation":     Decimal("0.06"),
    "cultural_compatibility": Decimal("0.04"),
    "technology_adoption":    Decimal("0.03"),
    "financial_health":       Decimal("0.01"),
}

TRUST_WEIGHTS: Dict[str, Decimal] = {
    "reputation_score":       Decimal("0.20"),
    "track_record":           Decimal("0.20"),
    "transparency":           Decimal("0.15"),
    "communication_quality":  Decimal("0.10"),
    "alignment_of_interests": Decimal("0.15"),
    "power_balance":          Decimal("0.10"),
    "exit_strategy":          Decimal("0.05"),
    "conflict_resolution":    Decimal("0.05"),
}

# tax_regime carries 0.08 so the twelve weights sum to exactly 1.0
INVESTMENT_ATTRACTION_WEIGHTS: Dict[str, Decimal] = {
    "investment_incentives":    Decimal("0.12"),
    "ease_of_doing_business":   Decimal("0.12"),
    "tax_regime":               Decimal("0.08"),
    "intellectual_property":    Decimal("0.08"),
    "dispute_resolution":       Decimal("0.08"),
    "market_size":              Decimal("0.10"),
    "growth_potential":         Decimal("0.10"),
    "strategic_location":       Decimal("0.08"),
    "political_stability":      Decimal("0.08"),
    "corruption_perception":    Decimal("0.08"),
    "infrastructure_readiness": Decimal("0.04"),
    "workforce_quality":        Decimal("0.04"),
}


def _band(score: float, high: float, mid: float, labels) -> str:
    if score > high:
        return labels[0]
    if score > mid:
        return labels[1]
    return labels[2]


class DealSuccessCalculator:
    BASE_CONFIDENCE = 0.85

    def __init__(self):
        self.weights = check_weights(DEAL_SUCCESS_WEIGHTS, "Deal success weights")

    def calculate(self, data: Any) -> DealSuccessResult:
        inputs = ensure_input(DealSuccessInput, data)
        components = DealSuccessComponents(
            economic_stability=inputs.economic_stability,
            political_stability=inputs.political_stability,
            regulatory_quality=inputs.regulatory_quality,
            infrastructure_quality=inputs.infrastructure_quality,
            market_access=inputs.market_access,
            human_capital=inputs.human_capital,
            corruption_index=100 - inputs.corruption_index,
            contract_enforcement=inputs.contract_enforcement,
            partner_reputation=inputs.partner_reputation,
            cultural_compatibility=inputs.cultural_compatibility,
            technology_adoption=inputs.technology_adoption,
            financial_health=inputs.financial_health,
        )
        raw = weighted_sum(components.model_dump(), self.weights)
        score = round_score(raw)

        logger.info("deal_success_calculated", score=score, defaulted=len(inputs.defaulted))

        band = _band(
            float(raw), 75, 60,
            ("High success potential", "Moderate success potential", "Low success potential"),
        )
        return DealSuccessResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.DEAL_SUCCESS, components),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE, len(inputs.defaulted), len(self.weights)
            ),
            analysis=f"Deal Success Score: {score}/100 - {band}",
            defaulted_fields=list(inputs.defaulted),
        )


class TrustCalculator:
    BASE_CONFIDENCE = 0.80

    def __init__(self):
        self.weights = check_weights(TRUST_WEIGHTS, "Trust weights")

    def calculate(self, data: Any) -> TrustResult:
        inputs = ensure_input(TrustInput, data)
        components = TrustComponents(
            reputation_score=inputs.reputation,
            track_record=inputs.track_record,
            transparency=inputs.transparency,
            communication_quality=inputs.communication,
            alignment_of_interests=inputs.alignment,
            power_balance=inputs.power_balance,
            exit_strategy=inputs.exit_strategy,
            conflict_resolution=inputs.conflict_resolution,
        )
        raw = weighted_sum(components.model_dump(), self.weights)
        score = round_score(raw)

        logger.info("trust_calculated", score=score, defaulted=len(inputs.defaulted))

        band = _band(float(raw), 80, 65, ("Strong foundation", "Good foundation", "Needs improvement"))
        return TrustResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.TRUST, components),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE, len(inputs.defaulted), len(self.weights)
            ),
            analysis=f"Trust & Partnership Score: {score}/100 - {band}",
            defaulted_fields=list(inputs.defaulted),
        )


class InvestmentAttractionCalculator:
    BASE_CONFIDENCE = 0.82

    def __init__(self):
        self.weights = check_weights(INVESTMENT_ATTRACTION_WEIGHTS, "Investment attraction weights")

    def calculate(self, data: Any) -> InvestmentAttractionResult:
        inputs = ensure_input(InvestmentAttractionInput, data)
        components = InvestmentAttractionComponents(
            investment_incentives=inputs.incentives,
            ease_of_doing_business=inputs.business_ease,
            tax_regime=inputs.tax_regime,
            intellectual_property=inputs.ip_protection,
            dispute_resolution=inputs.dispute_resolution,
            market_size=inputs.market_size,
            growth_potential=inputs.growth_potential,
            strategic_location=inputs.location,
            political_stability=inputs.political_stability,
            corruption_perception=100 - inputs.corruption,
            infrastructure_readiness=inputs.infrastructure,
            workforce_quality=inputs.workforce,
        )
        raw = weighted_sum(components.model_dump(), self.weights)
        score = round_score(raw)

        logger.info("investment_attraction_calculated", score=score, defaulted=len(inputs.defaulted))

        band = _band(
            float(raw), 75, 60,
            ("Highly attractive", "Moderately attractive", "Low attraction potential"),
        )
        return InvestmentAttractionResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(
                CalculatorKind.INVESTMENT_ATTRACTION, components
            ),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE, len(inputs.defaulted), len(self.weights)
            ),
            analysis=f"Investment Attraction Score: {score}/100 - {band}",
            defaulted_fields=list(inputs.defaulted),
        )
