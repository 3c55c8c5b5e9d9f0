"""
TPP Calculator
nexus_engine/scoring/tpp_calculator.py

Time-to-Profit: how many years until cumulative profit turns positive.

Formula:
    g            = growth_rate / 100
    revenue_y    = M × g × (1 + g)^(y − 1)       captured share of market M
    profit_y     = revenue_y − cost_ratio × P    cost_ratio = 0.30
    TTP          = 0 if profit_1 > 0
                   else first y ≤ horizon_cap with Σ profit_1..y > 0
                   else horizon_cap (breaks_even_within_horizon = False)
    final_NPV    = Σ_{y=1..T} profit_y / 1.10^y
    score        = max(0, 100 − 10 × TTP)

Revenue is non-decreasing in g for every year, so the score never drops
when growth rises with everything else fixed.
"""

from typing import Any, List, Tuple

import structlog

from nexus_engine.models.enumerations import CalculatorKind
from nexus_engine.models.inputs import InvestmentInput
from nexus_engine.models.results import TPPComponents, TPPResult, YearProjection
from nexus_engine.scoring.normalizer import ensure_input
from nexus_engine.scoring.recommendations import generate_recommendations
from nexus_engine.scoring.utils import round_score, scaled_confidence

logger = structlog.get_logger(__name__)


def tpp_band(score: float) -> str:
    if score > 70:
        return "Strong"
    if score > 50:
        return "Moderate"
    return "Challenging"


class TPPCalculator:
    """Calculate time-to-profit with year-by-year projections."""

    BASE_CONFIDENCE = 0.78
    FIELDS = ("initialInvestment", "timeline", "marketSize", "growthRate")

    def __init__(
        self,
        operating_cost_ratio: float = 0.30,
        discount_rate: float = 0.10,
        horizon_cap: int = 10,
    ):
        self.operating_cost_ratio = operating_cost_ratio
        self.discount_rate = discount_rate
        self.horizon_cap = horizon_cap

    def _revenue(self, market_size: float, growth: float, year: int) -> float:
        return market_size * growth * (1 + growth) ** (year - 1)

    def _time_to_profit(
        self, market_size: float, growth: float, annual_cost: float, first_profit: float
    ) -> Tuple[int, bool]:
        if first_profit > 0 or (first_profit == 0 and annual_cost == 0):
            return 0, True
        cumulative = 0.0
        for year in range(1, self.horizon_cap + 1):
            cumulative += self._revenue(market_size, growth, year) - annual_cost
            if cumulative > 0:
                return year, True
        return self.horizon_cap, False

    def calculate(self, data: Any) -> TPPResult:
        inputs = ensure_input(InvestmentInput, data)
        growth = inputs.growth_rate / 100
        annual_cost = inputs.initial_investment * self.operating_cost_ratio

        first_profit = self._revenue(inputs.market_size, growth, 1) - annual_cost
        ttp, breaks_even = self._time_to_profit(
            inputs.market_size, growth, annual_cost, first_profit
        )

        projections: List[YearProjection] = []
        cumulative = 0.0
        final_npv = 0.0
        for year in range(1, inputs.timeline + 1):
            revenue = self._revenue(inputs.market_size, growth, year)
            profit = revenue - annual_cost
            cumulative += profit
            final_npv += profit / (1 + self.discount_rate) ** year
            projections.append(
                YearProjection(
                    year=year,
                    revenue=revenue,
                    profit=profit,
                    cumulative_profit=cumulative,
                )
            )

        score = round_score(max(0, 100 - 10 * ttp))
        components = TPPComponents(
            time_to_profit=ttp,
            breaks_even_within_horizon=breaks_even,
            final_npv=final_npv,
            annual_profit=first_profit,
            projections=projections,
            market_penetration=growth * 100,
        )

        extra: Tuple[str, ...] = ()
        if first_profit < final_npv * 0.1:
            extra = ("Optimize cost structure and revenue streams",)

        defaulted = [f for f in inputs.defaulted if f in self.FIELDS]
        logger.info(
            "tpp_calculated",
            market_size=inputs.market_size,
            growth_rate=inputs.growth_rate,
            time_to_profit=ttp,
            breaks_even=breaks_even,
            score=score,
        )

        horizon_note = "" if breaks_even else f" (no break-even within {self.horizon_cap} years)"
        return TPPResult(
            score=score,
            components=components,
            recommendations=generate_recommendations(CalculatorKind.TPP, components, extra),
            confidence=scaled_confidence(self.BASE_CONFIDENCE, len(defaulted), len(self.FIELDS)),
            analysis=f"Time to Profit: {ttp} years{horizon_note} - {tpp_band(score)} opportunity",
            defaulted_fields=defaulted,
        )
