"""
SEAM Calculator
nexus_engine/scoring/seam_calculator.py

Strategic Ecosystem Analysis: fit of a partner set.

Formula:
    SEAM = 0.4 × strength + 0.4 × synergy + 20 × diversity

Deterministic mode (default), from partner attributes:
    coverage   = distinct partner types / 6
    strength   = 0.6 × mean(commitment) + 0.4 × min(coverage, 1) × 100
    synergy    = 0.5 × mean(reputation) + 0.5 × complementarity × 100
                 complementarity = unique capabilities / total capabilities
    diversity  = min(coverage, 1)

Illustrative mode draws the three drivers from the injected random source:
    strength ∈ [70, 100), synergy ∈ [75, 95), diversity ∈ [0.6, 0.9)

Derived components (both modes):
    network_density             = diversity × 0.8
    value_creation_potential    = (strength + synergy) / 2
    partnership_stability_index = synergy × 0.9
"""

from typing import Any, List, Optional, Sequence

import numpy as np
import structlog

from nexus_engine.models.enumerations import CalculatorKind, SEAMMode
from nexus_engine.models.inputs import Partner, SEAMInput
from nexus_engine.models.results import SEAMComponents, SEAMResult
from nexus_engine.scoring.normalizer import ensure_input
from nexus_engine.scoring.random_source import make_rng, uniform
from nexus_engine.scoring.recommendations import generate_recommendations
from nexus_engine.scoring.utils import clamp, mean, round_score, safe_ratio, scaled_confidence

logger = structlog.get_logger(__name__)

PARTNER_TYPES = ("Anchor", "Infrastructure", "Innovation", "Capital", "Government", "Community")

BASE_MITIGATIONS = (
    "Diversified partnerships",
    "Local stakeholder engagement",
    "Regulatory compliance",
)


def seam_band(score: float) -> str:
    if score > 80:
        return "Excellent synergy potential"
    if score > 70:
        return "Good ecosystem fit"
    return "Needs ecosystem development"


def _mitigations(partners: Sequence[Partner]) -> List[str]:
    strategies = list(BASE_MITIGATIONS)
    types = {p.type for p in partners}
    if "Government" not in types:
        strategies.append("Secure a government liaison partner")
    if "Capital" not in types:
        strategies.append("Line up co-investment capital")
    return strategies


class SEAMCalculator:
    """Score a partner ecosystem."""

    BASE_CONFIDENCE = 0.80

    def __init__(
        self,
        mode: SEAMMode = SEAMMode.DETERMINISTIC,
        rng: Optional[np.random.Generator] = None,
    ):
        self.mode = SEAMMode(mode)
        self.rng = rng

    def _deterministic_drivers(self, partners: Sequence[Partner]):
        if not partners:
            return 0.0, 0.0, 0.0, 0

        coverage = min(len({p.type for p in partners}) / len(PARTNER_TYPES), 1.0)
        strength = 0.6 * mean(p.commitment for p in partners) + 0.4 * coverage * 100

        all_caps = [c.strip().lower() for p in partners for c in p.capabilities if c.strip()]
        complementarity = safe_ratio(len(set(all_caps)), len(all_caps), default=0.0)
        synergy = 0.5 * mean(p.reputation for p in partners) + 0.5 * complementarity * 100

        # one opportunity per distinct pair of partner types
        type_count = len({p.type for p in partners})
        opportunities = type_count * (type_count - 1) // 2
        return strength, synergy, coverage, opportunities

    def _illustrative_drivers(self):
        rng = self.rng if self.rng is not None else make_rng()
        strength = uniform(rng, 70, 100)
        synergy = uniform(rng, 75, 95)
        diversity = uniform(rng, 0.6, 0.9)
        opportunities = int(rng.integers(3, 8))
        return strength, synergy, diversity, opportunities

    def calculate(self, data: Any) -> SEAMResult:
        """
        Args:
            data: SEAMInput or a raw mapping {partners: [...], region, industry}.
        """
        inputs = ensure_input(SEAMInput, data)
        partners = inputs.partners

        if self.mode is SEAMMode.ILLUSTRATIVE:
            strength, synergy, diversity, opportunities = self._illustrative_drivers()
        else:
            strength, synergy, diversity, opportunities = self._deterministic_drivers(partners)

        strength = clamp(strength)
        synergy = clamp(synergy)
        diversity = clamp(diversity, 0.0, 1.0)

        raw = 0.4 * strength + 0.4 * synergy + 20 * diversity
        score = round_score(raw)

        components = SEAMComponents(
            ecosystem_strength=strength,
            synergy_score=synergy,
            partner_diversity=diversity,
            network_density=diversity * 0.8,
            collaboration_opportunities=opportunities,
            risk_mitigation_strategies=_mitigations(partners),
            value_creation_potential=(strength + synergy) / 2,
            partnership_stability_index=synergy * 0.9,
            partner_count=len(partners),
            mode=self.mode.value,
        )

        logger.info(
            "seam_calculated",
            mode=self.mode.value,
            partner_count=len(partners),
            strength=round(strength, 2),
            synergy=round(synergy, 2),
            diversity=round(diversity, 4),
            score=score,
        )

        analysis = f"SEAM Ecosystem Score: {score}/100 - {seam_band(raw)}"
        if self.mode is SEAMMode.ILLUSTRATIVE:
            analysis += " (illustrative drivers, not derived from partner data)"
        elif not partners:
            analysis += " (no partners supplied)"

        defaulted = list(inputs.defaulted)
        # an empty partner list counts as a fully defaulted input
        missing_share = 1 if not partners else 0
        return SEAMResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.SEAM, components),
            confidence=scaled_confidence(self.BASE_CONFIDENCE, missing_share, 1),
            analysis=analysis,
            defaulted_fields=defaulted,
        )
