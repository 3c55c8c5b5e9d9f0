"""
Risk Calculator
nexus_engine/scoring/risk_calculator.py

Risk Index on a 0-100 scale where higher means riskier.

Factors (each clamped to [0, 1]):
    economic_volatility = |gdp_growth − 3| / 5       deviation from 3% ideal
    market_instability  = inflation / 10
    currency            = 0.3 if trade_balance < 0 else 0.1
    political           = baseline 0.20
    regulatory          = baseline 0.15
    operational         = baseline 0.25

    Risk = min(100, 25 × Σ factors)
"""

from typing import Any

import structlog

from nexus_engine.models.enumerations import CalculatorKind
from nexus_engine.models.inputs import RiskInput
from nexus_engine.models.results import RiskComponents, RiskResult
from nexus_engine.scoring.normalizer import ensure_input
from nexus_engine.scoring.recommendations import generate_recommendations
from nexus_engine.scoring.utils import clamp, round_score, scaled_confidence

logger = structlog.get_logger(__name__)


def risk_band(score: float) -> str:
    if score < 30:
        return "Low risk"
    if score < 60:
        return "Moderate risk"
    return "High risk"


class RiskCalculator:
    """Calculate the Risk Index from economic indicators and project baselines."""

    BASE_CONFIDENCE = 0.75
    FIELD_COUNT = 6
    IDEAL_GROWTH = 3.0

    def calculate(self, data: Any) -> RiskResult:
        inputs = ensure_input(RiskInput, data)

        economic = clamp(abs(inputs.gdp_growth - self.IDEAL_GROWTH) / 5, 0.0, 1.0)
        market = clamp(inputs.inflation / 10, 0.0, 1.0)
        currency = 0.3 if inputs.trade_balance < 0 else 0.1
        political = clamp(inputs.political_risk, 0.0, 1.0)
        regulatory = clamp(inputs.regulatory_risk, 0.0, 1.0)
        operational = clamp(inputs.operational_risk, 0.0, 1.0)

        total = economic + market + currency + political + regulatory + operational
        raw = min(total * 25, 100.0)
        score = round_score(raw)

        components = RiskComponents(
            economic_risk=economic * 100,
            market_risk=market * 100,
            currency_risk=currency * 100,
            political_risk=political * 100,
            regulatory_risk=regulatory * 100,
            operational_risk=operational * 100,
            total_risk_score=raw,
        )

        logger.info(
            "risk_calculated",
            gdp_growth=inputs.gdp_growth,
            inflation=inputs.inflation,
            trade_balance=inputs.trade_balance,
            score=score,
        )

        return RiskResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.RISK, components),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE, len(inputs.defaulted), self.FIELD_COUNT
            ),
            analysis=f"Risk Assessment: {score}/100 - {risk_band(raw)} profile",
            defaulted_fields=list(inputs.defaulted),
        )
