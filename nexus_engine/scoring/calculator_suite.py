"""
Calculator Suite
nexus_engine/scoring/calculator_suite.py

Builds every composite index calculator from Settings and dispatches by
CalculatorKind. One suite is created per request so stochastic
calculators share a single seeded Generator.

Class: CalculatorSuite
Method: calculate(kind, data) → CompositeResult subclass
"""

from typing import Any, Optional

import numpy as np
import structlog

from nexus_engine.config import Settings, get_settings
from nexus_engine.models.enumerations import CalculatorKind, SEAMMode
from nexus_engine.models.results import CompositeResult
from nexus_engine.scoring.competition import CompetitionCalculator
from nexus_engine.scoring.factor_indices import (
    DealSuccessCalculator,
    InvestmentAttractionCalculator,
    TrustCalculator,
)
from nexus_engine.scoring.monte_carlo import MonteCarloSimulator
from nexus_engine.scoring.random_source import make_rng
from nexus_engine.scoring.rci_calculator import RCICalculator
from nexus_engine.scoring.regional_analysis import (
    ComprehensiveRegionalCalculator,
    PartnershipViabilityCalculator,
    RegionalCostBenefitCalculator,
)
from nexus_engine.scoring.risk_calculator import RiskCalculator
from nexus_engine.scoring.roi_calculator import ROICalculator
from nexus_engine.scoring.seam_calculator import SEAMCalculator
from nexus_engine.scoring.tpp_calculator import TPPCalculator

logger = structlog.get_logger(__name__)


class CalculatorSuite:
    """All calculators configured from one Settings instance."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        self.settings = settings or get_settings()
        if rng is None:
            rng = make_rng(seed if seed is not None else self.settings.MONTE_CARLO_SEED)
        self.rng = rng

        s = self.settings
        self.rci = RCICalculator(s.rci_weights, economic_ceiling=s.RCI_ECONOMIC_CEILING)
        self.roi = ROICalculator()
        self.tpp = TPPCalculator(
            operating_cost_ratio=s.TPP_OPERATING_COST_RATIO,
            discount_rate=s.TPP_DISCOUNT_RATE,
            horizon_cap=s.TPP_HORIZON_CAP,
        )
        self.seam = SEAMCalculator(mode=SEAMMode(s.SEAM_MODE), rng=rng)
        self.risk = RiskCalculator()
        self.monte_carlo = MonteCarloSimulator(rng=rng)
        self.deal_success = DealSuccessCalculator()
        self.trust = TrustCalculator()
        self.investment_attraction = InvestmentAttractionCalculator()
        self.competition = CompetitionCalculator(rng=rng)
        self.comprehensive_regional = ComprehensiveRegionalCalculator()
        self.regional_cost_benefit = RegionalCostBenefitCalculator(self.comprehensive_regional)
        self.partnership_viability = PartnershipViabilityCalculator()

    def calculator_for(self, kind: CalculatorKind):
        return getattr(self, CalculatorKind(kind).value)

    def calculate(self, kind: CalculatorKind, data: Any) -> CompositeResult:
        """
        Run one calculator on raw or typed input.

        Monte Carlo inputs without an explicit iteration count use
        MONTE_CARLO_ITERATIONS from Settings.
        """
        kind = CalculatorKind(kind)
        if kind is CalculatorKind.MONTE_CARLO and isinstance(data, dict) and "iterations" not in data:
            data = {**data, "iterations": self.settings.MONTE_CARLO_ITERATIONS}
        result = self.calculator_for(kind).calculate(data)
        logger.debug("calculator_dispatched", kind=kind.value, score=result.score)
        return result
