"""
RCI Calculator
nexus_engine/scoring/rci_calculator.py

Regional Competitiveness Index from six regional sub-scores.

Formula:
    economic_component = min(economic / ceiling, 1) × 100
    RCI = Σ (component_k × weight_k)      rounded half-up, clamped to [0, 100]

Default weights (config.py, sum = 1.0):
    economic        0.25
    infrastructure  0.20
    human_capital   0.20
    institutions    0.15
    innovation      0.10
    market_access   0.10
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

import structlog

from nexus_engine.models.enumerations import CalculatorKind
from nexus_engine.models.inputs import RCIInput
from nexus_engine.models.results import RCIComponents, RCIResult
from nexus_engine.scoring.normalizer import ensure_input
from nexus_engine.scoring.recommendations import generate_recommendations
from nexus_engine.scoring.utils import (
    check_weights,
    clamp,
    round_score,
    scaled_confidence,
    weighted_sum,
)

logger = structlog.get_logger(__name__)

DEFAULT_RCI_WEIGHTS: Dict[str, Decimal] = {
    "economic":       Decimal("0.25"),
    "infrastructure": Decimal("0.20"),
    "human_capital":  Decimal("0.20"),
    "institutions":   Decimal("0.15"),
    "innovation":     Decimal("0.10"),
    "market_access":  Decimal("0.10"),
}


def rci_band(score: float) -> str:
    if score > 75:
        return "Highly Competitive"
    if score > 60:
        return "Moderately Competitive"
    return "Needs Improvement"


class RCICalculator:
    """Calculate the Regional Competitiveness Index."""

    BASE_CONFIDENCE = 0.85
    FIELD_COUNT = 6

    def __init__(
        self,
        weights: Optional[Mapping[str, Decimal]] = None,
        economic_ceiling: float = 1e12,
    ):
        self.weights = check_weights(weights or DEFAULT_RCI_WEIGHTS, "RCI weights")
        if set(self.weights) != set(DEFAULT_RCI_WEIGHTS):
            raise ValueError(
                f"RCI weights must cover exactly {sorted(DEFAULT_RCI_WEIGHTS)}"
            )
        if economic_ceiling <= 0:
            raise ValueError("economic_ceiling must be positive")
        self.economic_ceiling = economic_ceiling

    def calculate(self, data: Any) -> RCIResult:
        """
        Args:
            data: RCIInput or a raw mapping with camelCase/snake_case keys.
                  "economic" is a magnitude (GDP in USD), the rest are 0-100.

        Returns:
            RCIResult with score, components and recommendations.
        """
        inputs = ensure_input(RCIInput, data)

        components = RCIComponents(
            economic=min(inputs.economic / self.economic_ceiling, 1.0) * 100,
            infrastructure=clamp(inputs.infrastructure),
            human_capital=clamp(inputs.human_capital),
            institutions=clamp(inputs.institutions),
            innovation=clamp(inputs.innovation),
            market_access=clamp(inputs.market_access),
        )

        raw = weighted_sum(components.model_dump(), self.weights)
        score = round_score(raw)

        logger.info(
            "rci_calculated",
            economic=components.economic,
            infrastructure=components.infrastructure,
            human_capital=components.human_capital,
            raw_score=float(raw),
            score=score,
            defaulted=list(inputs.defaulted),
        )

        return RCIResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.RCI, components),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE, len(inputs.defaulted), self.FIELD_COUNT
            ),
            analysis=f"RCI Score: {score}/100 - {rci_band(float(raw))}",
            defaulted_fields=list(inputs.defaulted),
        )
