"""
Monte Carlo Simulator
nexus_engine/scoring/monte_carlo.py

Sensitivity of investment NPV to ROI and horizon uncertainty.

Per trial i (vectorised over all trials):
    roi_i      = roi × (1 + (u₁ − 0.5) × r)
    horizon_i  = T × (1 + (u₂ − 0.5) × 0.2)
    NPV_i      = −P + Σ_{y=1..⌊horizon_i⌋} P × roi_i / 100 / (1 + r)^y

Statistics:
    mean, population std, 95% CI = mean ± 1.96 × std,
    P(NPV > 0), best / worst observed NPV
    score = clamp(mean / P × 50 + 50)    (50 when P = 0)

All randomness comes from an injected numpy Generator; the same seed
yields the same trials.
"""

from typing import Any, Optional

import numpy as np
import structlog

from nexus_engine.models.enumerations import CalculatorKind
from nexus_engine.models.inputs import MonteCarloInput
from nexus_engine.models.results import (
    ConfidenceInterval,
    MonteCarloComponents,
    MonteCarloResult,
)
from nexus_engine.scoring.normalizer import ensure_input
from nexus_engine.scoring.random_source import make_rng
from nexus_engine.scoring.recommendations import generate_recommendations
from nexus_engine.scoring.utils import clamp, round_score, safe_ratio, scaled_confidence

logger = structlog.get_logger(__name__)

Z_95 = 1.96
HORIZON_SPREAD = 0.2


def simulate_npv(
    rng: np.random.Generator,
    principal: float,
    expected_roi: float,
    timeline: int,
    risk_factor: float,
    iterations: int,
) -> np.ndarray:
    """Return one NPV per trial."""
    draws = rng.random((iterations, 2))
    rois = expected_roi * (1 + (draws[:, 0] - 0.5) * risk_factor)
    horizons = timeline * (1 + (draws[:, 1] - 0.5) * HORIZON_SPREAD)

    cash_flows = principal * rois / 100
    npv = np.full(iterations, -principal, dtype=float)
    max_year = int(np.floor(horizons.max()))
    for year in range(1, max_year + 1):
        active = horizons >= year
        npv += np.where(active, cash_flows / (1 + risk_factor) ** year, 0.0)
    return npv


class MonteCarloSimulator:
    """Run seeded NPV trials and summarise the distribution."""

    BASE_CONFIDENCE = 0.88
    FIELD_COUNT = 5

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else make_rng(seed)

    def calculate(self, data: Any) -> MonteCarloResult:
        inputs = ensure_input(MonteCarloInput, data)
        principal = inputs.initial_investment

        results = simulate_npv(
            self.rng,
            principal,
            inputs.expected_roi,
            inputs.timeline,
            inputs.risk_factor,
            inputs.iterations,
        )

        mean_npv = float(results.mean())
        std = float(results.std())  # population (ddof=0)
        probability = float(np.count_nonzero(results > 0)) / inputs.iterations

        components = MonteCarloComponents(
            mean_npv=mean_npv,
            standard_deviation=std,
            confidence_95=ConfidenceInterval(
                lower=mean_npv - Z_95 * std,
                upper=mean_npv + Z_95 * std,
            ),
            probability_of_profit=probability,
            best_case=float(results.max()),
            worst_case=float(results.min()),
            iterations=inputs.iterations,
        )

        ratio = safe_ratio(mean_npv, principal, default=0.0)
        score = round_score(clamp(ratio * 50 + 50))

        logger.info(
            "monte_carlo_calculated",
            iterations=inputs.iterations,
            mean_npv=round(mean_npv, 2),
            standard_deviation=round(std, 2),
            probability_of_profit=probability,
            score=score,
        )

        return MonteCarloResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.MONTE_CARLO, components),
            confidence=scaled_confidence(
                self.BASE_CONFIDENCE, len(inputs.defaulted), self.FIELD_COUNT
            ),
            analysis=(
                f"Monte Carlo Analysis: {score}/100 confidence - "
                f"{probability * 100:.1f}% probability of profit"
            ),
            defaulted_fields=list(inputs.defaulted),
        )
