"""
Competition Calculator
nexus_engine/scoring/competition.py

Formula:
    intensity = min(competitor_count / 10, 1)
    score     = 0.4 × entry_barriers + 0.3 × innovation_rate + 30 × (1 − intensity)

Market concentration (0.3-0.7) and the per-competitor share split are
drawn from the injected random source; they are reported but do not
enter the score.
"""

from typing import Any, Optional

import numpy as np
import structlog

from nexus_engine.models.enumerations import CalculatorKind
from nexus_engine.models.inputs import CompetitionInput
from nexus_engine.models.results import CompetitionComponents, CompetitionResult
from nexus_engine.scoring.normalizer import ensure_input
from nexus_engine.scoring.random_source import make_rng, uniform
from nexus_engine.scoring.recommendations import generate_recommendations
from nexus_engine.scoring.utils import round_score, scaled_confidence

logger = structlog.get_logger(__name__)

COMPETITIVE_ADVANTAGES = ["Technology", "Cost efficiency", "Brand strength", "Distribution network"]


class CompetitionCalculator:
    BASE_CONFIDENCE = 0.72
    FIELD_COUNT = 3

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng

    def calculate(self, data: Any) -> CompetitionResult:
        inputs = ensure_input(CompetitionInput, data)
        rng = self.rng if self.rng is not None else make_rng()

        intensity = min(inputs.competitor_count / 10, 1.0)
        shares = rng.random(inputs.competitor_count)
        if shares.size and shares.sum() > 0:
            shares = shares / shares.sum()

        components = CompetitionComponents(
            market_concentration=uniform(rng, 0.3, 0.7),
            competitive_intensity=intensity,
            entry_barriers=inputs.entry_barriers,
            innovation_rate=inputs.innovation_rate,
            market_share_distribution=[float(s) for s in shares],
            competitive_advantages=list(COMPETITIVE_ADVANTAGES),
        )

        raw = 0.4 * inputs.entry_barriers + 0.3 * inputs.innovation_rate + 30 * (1 - intensity)
        score = round_score(raw)

        logger.info(
            "competition_calculated",
            competitor_count=inputs.competitor_count,
            intensity=intensity,
            score=score,
        )

        if raw > 70:
            band = "Favorable"
        elif raw > 50:
            band = "Competitive"
        else:
            band = "Challenging"

        return CompetitionResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.COMPETITION, components),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE, len(inputs.defaulted), self.FIELD_COUNT
            ),
            analysis=f"Competition Analysis: {score}/100 - {band} market conditions",
            defaulted_fields=list(inputs.defaulted),
        )
