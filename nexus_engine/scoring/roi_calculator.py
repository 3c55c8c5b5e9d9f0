"""
ROI Calculator
nexus_engine/scoring/roi_calculator.py

Discounted-cash-flow view of a constant annual return stream.

Formula:
    annual  = P × roi / 100
    NPV     = Σ_{y=1..T} annual / (1 + r)^y − P
    IRR     = roi × (1 − r)              (risk-adjusted approximation)
    payback = P / annual                 (None when annual ≤ 0)
    score   = clamp(NPV / P × 50 + 50)   (50 when P = 0)

Where P = initial investment, r = risk factor used as discount rate,
T = timeline in years.
"""

from typing import Any, Optional

import structlog

from nexus_engine.models.enumerations import CalculatorKind
from nexus_engine.models.inputs import InvestmentInput
from nexus_engine.models.results import ROIComponents, ROIResult
from nexus_engine.scoring.normalizer import ensure_input
from nexus_engine.scoring.recommendations import generate_recommendations
from nexus_engine.scoring.utils import clamp, round_score, safe_ratio, scaled_confidence

logger = structlog.get_logger(__name__)


def discounted_npv(principal: float, annual: float, rate: float, years: int) -> float:
    """NPV of `years` equal cash flows discounted at `rate`, less principal."""
    present = sum(annual / (1 + rate) ** year for year in range(1, years + 1))
    return present - principal


class ROICalculator:
    """Calculate NPV, payback and a bounded ROI score."""

    BASE_CONFIDENCE = 0.82
    # ROI reads four of the six investment fields
    FIELDS = ("initialInvestment", "expectedROI", "timeline", "riskFactor")

    def calculate(self, data: Any) -> ROIResult:
        inputs = ensure_input(InvestmentInput, data)
        principal = inputs.initial_investment
        rate = inputs.risk_factor

        annual = principal * inputs.expected_roi / 100
        npv = discounted_npv(principal, annual, rate, inputs.timeline)
        payback: Optional[float] = (
            principal / annual if annual > 0 else None
        )
        risk_adjusted = inputs.expected_roi * (1 - rate)

        ratio = safe_ratio(npv, principal, default=0.0)
        score = round_score(clamp(ratio * 50 + 50))

        components = ROIComponents(
            npv=npv,
            irr=risk_adjusted,
            payback_period=payback,
            roi=inputs.expected_roi,
            risk_adjusted_return=risk_adjusted,
        )
        defaulted = [f for f in inputs.defaulted if f in self.FIELDS]

        logger.info(
            "roi_calculated",
            principal=principal,
            expected_roi=inputs.expected_roi,
            timeline=inputs.timeline,
            npv=round(npv, 2),
            payback_period=payback,
            score=score,
        )

        return ROIResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.ROI, components),
            confidence=scaled_confidence(self.BASE_CONFIDENCE, len(defaulted), len(self.FIELDS)),
            analysis=f"Investment ROI Analysis: {score}/100 confidence score",
            defaulted_fields=defaulted,
        )
