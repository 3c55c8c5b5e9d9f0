"""
Pipeline Orchestrator
nexus_engine/pipelines/orchestrator.py

Runs the three analysis stages in order, each consuming the previous
stage's state:

    diagnose(request)            Uninitialized → Diagnosed
    simulate(state, request)     Diagnosed     → Simulated
    architect(state, request)    Simulated     → Architected

A stage handed the wrong state raises StageOrderException. With
allow_placeholders=True the missing earlier stages are filled from
default inputs instead, and every output built that way carries
placeholder_inputs=True.

Every stage runs under STAGE_TIMEOUT_SECONDS; on expiry the in-flight
work (including the indicator fan-out) is cancelled and
StageTimeoutException is raised.
"""

import asyncio
import time
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

import structlog

from nexus_engine.config import Settings, get_country_code, get_settings
from nexus_engine.core.exceptions import StageOrderException, StageTimeoutException
from nexus_engine.models.enumerations import CalculatorKind, Indicator, PipelineStage
from nexus_engine.models.inputs import InvestmentInput, MonteCarloInput, RCIInput, RiskInput, SEAMInput
from nexus_engine.models.pipeline import (
    ArchitectureResult,
    DiagnosisResult,
    IndicatorObservation,
    PredictedOutcome,
    SimulationResult,
    StageRequest,
)
from nexus_engine.pipelines.partners import IllustrativePartnerDirectory, PartnerDirectory
from nexus_engine.pipelines.stages import (
    Architected,
    Diagnosed,
    PipelineState,
    Simulated,
    Uninitialized,
    state_name,
)
from nexus_engine.scoring.calculator_suite import CalculatorSuite
from nexus_engine.scoring.normalizer import normalize_input, normalized_values
from nexus_engine.scoring.rci_calculator import rci_band
from nexus_engine.scoring.risk_calculator import risk_band
from nexus_engine.services.economic_data import EconomicDataSource, WorldBankClient

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_INTERVENTION = "Comprehensive Regional Development Initiative"


def _value(indicators: Dict[str, Optional[IndicatorObservation]], indicator: Indicator) -> Optional[float]:
    observation = indicators.get(indicator.value)
    return observation.value if observation is not None else None


def _dedupe(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


class PipelineOrchestrator:
    """Diagnose → simulate → architect over one request."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        data_source: Optional[EconomicDataSource] = None,
        partner_directory: Optional[PartnerDirectory] = None,
    ):
        self.settings = settings or get_settings()
        self.data_source = data_source or WorldBankClient(self.settings)
        self.partner_directory = partner_directory or IllustrativePartnerDirectory()

    # ------------------------------------------------------------------
    # Deadline handling
    # ------------------------------------------------------------------

    async def _with_deadline(self, stage: PipelineStage, work: Awaitable[T]) -> T:
        timeout = self.settings.STAGE_TIMEOUT_SECONDS
        start = time.perf_counter()
        logger.info("stage_started", stage=stage.value)
        try:
            result = await asyncio.wait_for(work, timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning("stage_timed_out", stage=stage.value, timeout=timeout)
            raise StageTimeoutException(stage.value, timeout) from e
        logger.info(
            "stage_completed",
            stage=stage.value,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return result

    def _suite(self, request: StageRequest) -> CalculatorSuite:
        return CalculatorSuite(self.settings, seed=request.seed)

    # ------------------------------------------------------------------
    # Diagnose
    # ------------------------------------------------------------------

    async def _gather_indicators(
        self, country_code: Optional[str]
    ) -> Dict[str, Optional[IndicatorObservation]]:
        codes = [indicator.value for indicator in Indicator]
        if country_code is None:
            return {code: None for code in codes}
        return await self.data_source.fetch_indicators(country_code, codes)

    def _build_diagnosis(
        self,
        request: StageRequest,
        country_code: Optional[str],
        indicators: Dict[str, Optional[IndicatorObservation]],
        placeholder: bool,
    ) -> DiagnosisResult:
        suite = self._suite(request)

        regional: Dict[str, Any] = {} if placeholder else dict(request.regional)
        gdp = _value(indicators, Indicator.GDP)
        if "economic" not in regional and gdp is not None:
            regional["economic"] = gdp

        risk_inputs: Dict[str, Any] = {
            "gdpGrowth": _value(indicators, Indicator.GDP_GROWTH),
            "inflation": _value(indicators, Indicator.INFLATION),
            "tradeBalance": _value(indicators, Indicator.TRADE_BALANCE),
        }
        if not placeholder:
            risk_inputs.update(request.project)

        rci_input = normalize_input(RCIInput, regional)
        risk_input = normalize_input(RiskInput, risk_inputs)
        rci = suite.calculate(CalculatorKind.RCI, rci_input)
        risk = suite.calculate(CalculatorKind.RISK, risk_input)

        missing = [code for code, obs in indicators.items() if obs is None]
        available = len(indicators) - len(missing)
        summary = (
            f"{request.region}: RCI {rci.score}/100 ({rci_band(rci.score)}), "
            f"risk {risk.score}/100 ({risk_band(risk.score)}). "
            f"{available} of {len(indicators)} economic indicators available"
            + (f" for {country_code}." if country_code else "; region not matched to a supported country.")
        )

        logger.info(
            "diagnosis_built",
            region=request.region,
            country_code=country_code,
            missing_indicators=missing,
            rci=rci.score,
            risk=risk.score,
            placeholder=placeholder,
        )

        return DiagnosisResult(
            region=request.region,
            objective=request.objective,
            country_code=country_code,
            indicators=indicators,
            missing_indicators=missing,
            rci=rci,
            risk=risk,
            summary=summary,
            normalized_inputs={
                "rci": normalized_values(rci_input),
                "risk": normalized_values(risk_input),
            },
            placeholder_inputs=placeholder,
        )

    async def _diagnose(self, request: StageRequest) -> Diagnosed:
        country_code = get_country_code(request.region)
        if request.refresh_data and country_code is not None:
            self.data_source.invalidate(country_code)
        indicators = await self._gather_indicators(country_code)
        return Diagnosed(self._build_diagnosis(request, country_code, indicators, placeholder=False))

    async def diagnose(
        self, request: StageRequest, state: Optional[PipelineState] = None
    ) -> Diagnosed:
        """
        Gather indicators and compute RCI and Risk for the request's region.

        Raises:
            StageOrderException: if state is not Uninitialized
            StageTimeoutException: if the stage exceeds its deadline
        """
        if state is not None and not isinstance(state, Uninitialized):
            raise StageOrderException(
                PipelineStage.DIAGNOSE.value, "Uninitialized", state_name(state)
            )
        return await self._with_deadline(PipelineStage.DIAGNOSE, self._diagnose(request))

    def _placeholder_diagnosis(self, request: StageRequest) -> DiagnosisResult:
        indicators = {indicator.value: None for indicator in Indicator}
        return self._build_diagnosis(
            request, get_country_code(request.region), indicators, placeholder=True
        )

    # ------------------------------------------------------------------
    # Simulate
    # ------------------------------------------------------------------

    def _predicted_outcomes(
        self,
        diagnosis: DiagnosisResult,
        investment: InvestmentInput,
    ) -> List[PredictedOutcome]:
        """
        Trajectory over the investment timeline, scaled by the RCI.

            annual_uplift = growth_rate / 100 × RCI / 100
            GDP, employment, FDI grow by (1 + annual_uplift)^T
            infrastructure closes RCI% of its gap to 100 over ≤ 10 years
        """
        years = investment.timeline
        rci_share = diagnosis.rci.score / 100
        uplift = investment.growth_rate / 100 * rci_share
        growth = (1 + uplift) ** years

        gdp = _value(diagnosis.indicators, Indicator.GDP)
        if gdp is None:
            gdp = diagnosis.rci.components.economic / 100 * self.settings.RCI_ECONOMIC_CEILING
        fdi = _value(diagnosis.indicators, Indicator.FDI) or 0.0
        infra = diagnosis.rci.components.infrastructure

        return [
            PredictedOutcome(
                metric="GDP",
                start_value=round(gdp / 1e9, 2),
                end_value=round(gdp / 1e9 * growth, 2),
                unit="billion USD",
            ),
            PredictedOutcome(
                metric="Employment Index",
                start_value=100.0,
                end_value=round(100 * (1 + uplift * 0.5) ** years, 2),
                unit="index (start = 100)",
            ),
            PredictedOutcome(
                metric="FDI Attraction",
                start_value=round(fdi / 1e6, 2),
                end_value=round(fdi / 1e6 * growth + investment.initial_investment / 1e6, 2),
                unit="million USD",
            ),
            PredictedOutcome(
                metric="Infrastructure Quality Index",
                start_value=round(infra, 2),
                end_value=round(infra + (100 - infra) * rci_share * min(years, 10) / 10, 2),
                unit="index score",
            ),
        ]

    def _build_simulation(
        self, request: StageRequest, diagnosis: DiagnosisResult, placeholder: bool
    ) -> SimulationResult:
        suite = self._suite(request)
        raw_investment: Dict[str, Any] = {} if placeholder else dict(request.investment)
        investment = normalize_input(InvestmentInput, raw_investment)
        trials = normalize_input(
            MonteCarloInput,
            {"iterations": self.settings.MONTE_CARLO_ITERATIONS, **raw_investment},
        )

        roi = suite.calculate(CalculatorKind.ROI, investment)
        tpp = suite.calculate(CalculatorKind.TPP, investment)
        monte_carlo = suite.calculate(CalculatorKind.MONTE_CARLO, trials)

        probability = monte_carlo.components.probability_of_profit
        if probability >= 0.6:
            scenario = "Optimistic Development Trajectory"
        elif probability >= 0.3:
            scenario = "Balanced Development Trajectory"
        else:
            scenario = "Conservative Development Trajectory"

        intervention = request.intervention or DEFAULT_INTERVENTION
        impact = (
            f"{intervention} in {request.region}: NPV {roi.components.npv:,.0f} over "
            f"{investment.timeline} years (ROI score {roi.score}/100), time to profit "
            f"{tpp.components.time_to_profit} years, {probability * 100:.1f}% probability "
            f"of profit across {monte_carlo.components.iterations} simulated trials."
        )

        logger.info(
            "simulation_built",
            region=request.region,
            roi=roi.score,
            tpp=tpp.score,
            monte_carlo=monte_carlo.score,
            placeholder=placeholder,
        )

        return SimulationResult(
            scenario=scenario,
            intervention=intervention,
            timeline=f"{investment.timeline} years",
            impact_analysis=impact,
            roi=roi,
            tpp=tpp,
            monte_carlo=monte_carlo,
            predicted_outcomes=self._predicted_outcomes(diagnosis, investment),
            normalized_inputs={
                "investment": normalized_values(investment),
                "monteCarlo": normalized_values(trials),
            },
            recommendations=_dedupe(
                roi.recommendations + tpp.recommendations + monte_carlo.recommendations
            ),
            placeholder_inputs=placeholder or diagnosis.placeholder_inputs,
        )

    async def _simulate(self, request: StageRequest, diagnosis: DiagnosisResult) -> Simulated:
        simulation = self._build_simulation(request, diagnosis, placeholder=False)
        return Simulated(diagnosis, simulation)

    async def simulate(
        self,
        state: Optional[PipelineState],
        request: StageRequest,
        allow_placeholders: bool = False,
    ) -> Simulated:
        """
        Compute ROI, TPP, Monte Carlo and the predicted-outcome trajectory.

        Raises:
            StageOrderException: if state is not Diagnosed and placeholders are off
        """
        if isinstance(state, Diagnosed):
            diagnosis = state.diagnosis
        elif allow_placeholders and (state is None or isinstance(state, Uninitialized)):
            logger.warning("stage_using_placeholders", stage="simulate", missing=["diagnose"])
            diagnosis = self._placeholder_diagnosis(request)
        else:
            raise StageOrderException(
                PipelineStage.SIMULATE.value, "Diagnosed", state_name(state)
            )
        return await self._with_deadline(
            PipelineStage.SIMULATE, self._simulate(request, diagnosis)
        )

    # ------------------------------------------------------------------
    # Architect
    # ------------------------------------------------------------------

    async def _architect(
        self, request: StageRequest, diagnosis: DiagnosisResult, simulation: SimulationResult
    ) -> Architected:
        if request.partners:
            partners = list(request.partners)
        else:
            partners = await self.partner_directory.find_partners(
                request.region, request.objective, diagnosis
            )

        suite = self._suite(request)
        seam = suite.calculate(
            CalculatorKind.SEAM,
            SEAMInput(partners=tuple(partners), region=request.region, industry=request.industry),
        )

        partner_types = sorted({p.type for p in partners})
        placeholder = diagnosis.placeholder_inputs or simulation.placeholder_inputs
        architecture = ArchitectureResult(
            strategic_objective=request.objective
            or f"Transform {request.region} into a competitive regional economic hub",
            ecosystem_summary=(
                f"{len(partners)} partners across {len(partner_types)} partner types "
                f"({', '.join(partner_types) or 'none'}); SEAM {seam.score}/100."
            ),
            partners=partners,
            seam=seam,
            recommendations=list(seam.recommendations),
            placeholder_inputs=placeholder,
        )

        logger.info(
            "architecture_built",
            region=request.region,
            partner_count=len(partners),
            seam=seam.score,
            placeholder=placeholder,
        )
        return Architected(diagnosis, simulation, architecture)

    async def architect(
        self,
        state: Optional[PipelineState],
        request: StageRequest,
        allow_placeholders: bool = False,
    ) -> Architected:
        """
        Source partners and score the ecosystem.

        Raises:
            StageOrderException: if state is not Simulated and placeholders are off
        """
        if isinstance(state, Simulated):
            diagnosis, simulation = state.diagnosis, state.simulation
        elif allow_placeholders and not isinstance(state, Architected):
            missing = []
            if isinstance(state, Diagnosed):
                diagnosis = state.diagnosis
            else:
                diagnosis = self._placeholder_diagnosis(request)
                missing.append("diagnose")
            simulation = self._build_simulation(request, diagnosis, placeholder=True)
            missing.append("simulate")
            logger.warning("stage_using_placeholders", stage="architect", missing=missing)
        else:
            raise StageOrderException(
                PipelineStage.ARCHITECT.value, "Simulated", state_name(state)
            )
        return await self._with_deadline(
            PipelineStage.ARCHITECT, self._architect(request, diagnosis, simulation)
        )

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    async def run(self, request: StageRequest) -> Architected:
        """All three stages in order."""
        diagnosed = await self.diagnose(request)
        simulated = await self.simulate(diagnosed, request)
        return await self.architect(simulated, request)
