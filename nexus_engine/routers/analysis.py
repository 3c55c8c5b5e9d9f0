"""
routers/analysis.py — Composite index endpoints

Endpoints:
  POST {API_V1_PREFIX}/analysis/{kind}   — Run one calculator on a raw input mapping

`kind` is any CalculatorKind value (rci, roi, tpp, seam, risk, monte_carlo,
deal_success, trust, investment_attraction, competition,
comprehensive_regional, regional_cost_benefit, partnership_viability). Missing or
invalid fields fall back to documented defaults; the response lists them
under defaultedFields.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query

from nexus_engine.config import get_settings
from nexus_engine.models.enumerations import CalculatorKind
from nexus_engine.models.results import AnyCompositeResult
from nexus_engine.scoring.calculator_suite import CalculatorSuite

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["Analysis"])


@router.post(
    "/{kind}",
    response_model=AnyCompositeResult,
    summary="Run a composite index calculator",
)
async def run_calculator(
    kind: CalculatorKind,
    data: Optional[Dict[str, Any]] = Body(default=None),
    seed: Optional[int] = Query(default=None, description="Seed for stochastic calculators"),
):
    suite = CalculatorSuite(get_settings(), seed=seed)
    result = suite.calculate(kind, data or {})
    logger.info(f"Calculator {kind.value} scored {result.score}/100")
    return result
