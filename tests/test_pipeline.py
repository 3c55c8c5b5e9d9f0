"""
Pipeline Orchestrator Tests
tests/test_pipeline.py

Stage ordering, placeholder fallback, partial data failure and deadlines.
"""

import asyncio
import math

import pytest

from nexus_engine.config import Settings
from nexus_engine.core.exceptions import StageOrderException, StageTimeoutException
from nexus_engine.models.enumerations import Indicator
from nexus_engine.models.inputs import Partner
from nexus_engine.models.pipeline import SimulationResult, StageRequest
from nexus_engine.pipelines.orchestrator import PipelineOrchestrator
from nexus_engine.pipelines.partners import (
    PARTNER_CAPABILITIES,
    IllustrativePartnerDirectory,
    StaticPartnerDirectory,
)
from nexus_engine.pipelines.stages import Architected, Diagnosed, Simulated, Uninitialized, state_name


class TestDiagnose:
    """Tests for the diagnose stage."""

    def test_diagnose_uses_indicators(self, orchestrator, stage_request, data_source):
        state = asyncio.run(orchestrator.diagnose(stage_request))
        assert isinstance(state, Diagnosed)
        diagnosis = state.diagnosis
        assert diagnosis.country_code == "PHL"
        assert data_source.calls == ["PHL"]
        assert diagnosis.missing_indicators == []
        # GDP 404B against a 1T ceiling
        assert diagnosis.rci.components.economic == pytest.approx(40.4)
        assert "economic" not in diagnosis.rci.defaulted_fields
        # trade deficit → elevated currency risk
        assert diagnosis.risk.components.currency_risk == pytest.approx(30)
        assert diagnosis.placeholder_inputs is False
        assert "6 of 6 economic indicators available for PHL" in diagnosis.summary

    def test_partial_fetch_failure_yields_missing_indicator(self, settings, stage_request, make_data_source):
        source = make_data_source(missing=[Indicator.INFLATION.value, Indicator.FDI.value])
        state = asyncio.run(PipelineOrchestrator(settings, data_source=source).diagnose(stage_request))
        diagnosis = state.diagnosis
        assert diagnosis.indicators[Indicator.INFLATION.value] is None
        assert sorted(diagnosis.missing_indicators) == sorted(
            [Indicator.INFLATION.value, Indicator.FDI.value]
        )
        assert "inflation" in diagnosis.risk.defaulted_fields

    def test_unknown_region_skips_data_source(self, orchestrator, data_source):
        state = asyncio.run(orchestrator.diagnose(StageRequest(region="Atlantis")))
        assert state.diagnosis.country_code is None
        assert data_source.calls == []
        assert len(state.diagnosis.missing_indicators) == len(Indicator)
        assert "not matched to a supported country" in state.diagnosis.summary

    def test_request_sub_scores_override(self, orchestrator):
        request = StageRequest(region="Vietnam", regional={"economic": 1e12, "infrastructure": 40})
        diagnosis = asyncio.run(orchestrator.diagnose(request)).diagnosis
        assert diagnosis.rci.components.economic == 100.0
        assert diagnosis.rci.components.infrastructure == 40.0

    def test_diagnosis_records_normalized_inputs(self, orchestrator):
        request = StageRequest(region="Vietnam", regional={"economic": 1e12, "infrastructure": "high"})
        normalized = asyncio.run(orchestrator.diagnose(request)).diagnosis.normalized_inputs
        assert normalized["rci"]["economic"] == 1e12
        assert normalized["rci"]["infrastructure"] == 70.0
        assert set(normalized["risk"]) >= {"gdpGrowth", "inflation", "tradeBalance"}

    def test_refresh_data_invalidates_cached_indicators(self, orchestrator, stage_request, data_source):
        asyncio.run(orchestrator.diagnose(stage_request))
        assert data_source.invalidated == []
        refreshed = stage_request.model_copy(update={"refresh_data": True})
        asyncio.run(orchestrator.diagnose(refreshed))
        assert data_source.invalidated == ["PHL"]
        assert data_source.calls == ["PHL", "PHL"]

    def test_diagnose_rejects_later_state(self, orchestrator, stage_request):
        diagnosed = asyncio.run(orchestrator.diagnose(stage_request))
        with pytest.raises(StageOrderException):
            asyncio.run(orchestrator.diagnose(stage_request, diagnosed))

    def test_diagnose_accepts_uninitialized(self, orchestrator, stage_request):
        state = asyncio.run(orchestrator.diagnose(stage_request, Uninitialized()))
        assert isinstance(state, Diagnosed)


class TestSimulate:
    """Tests for the simulate stage."""

    def test_simulate_after_diagnose(self, orchestrator, stage_request):
        diagnosed = asyncio.run(orchestrator.diagnose(stage_request))
        state = asyncio.run(orchestrator.simulate(diagnosed, stage_request))
        assert isinstance(state, Simulated)
        simulation = state.simulation
        assert simulation.roi.score == 28
        assert simulation.timeline == "5 years"
        assert simulation.scenario == "Conservative Development Trajectory"
        assert simulation.placeholder_inputs is False
        assert [o.metric for o in simulation.predicted_outcomes] == [
            "GDP", "Employment Index", "FDI Attraction", "Infrastructure Quality Index",
        ]
        gdp = simulation.predicted_outcomes[0]
        assert gdp.start_value == pytest.approx(404.0)
        assert gdp.end_value > gdp.start_value

    def test_simulate_without_diagnosis_raises(self, orchestrator, stage_request):
        with pytest.raises(StageOrderException) as exc:
            asyncio.run(orchestrator.simulate(Uninitialized(), stage_request))
        assert exc.value.expected == "Diagnosed"
        assert exc.value.actual == "Uninitialized"

    def test_simulate_with_placeholders(self, orchestrator, stage_request, data_source):
        state = asyncio.run(orchestrator.simulate(None, stage_request, allow_placeholders=True))
        assert state.diagnosis.placeholder_inputs is True
        assert state.simulation.placeholder_inputs is True
        assert data_source.calls == []

    def test_oversized_investment_stays_finite(self, orchestrator):
        request = StageRequest(
            region="Cebu, Philippines",
            investment={"initialInvestment": 1e308, "marketSize": 1e308, "expectedROI": 15},
            seed=5,
        )
        state = asyncio.run(orchestrator.simulate(asyncio.run(orchestrator.diagnose(request)), request))
        simulation = state.simulation
        assert simulation.normalized_inputs["investment"]["initialInvestment"] == 1e15
        assert simulation.normalized_inputs["investment"]["marketSize"] == 1e15
        assert simulation.normalized_inputs["monteCarlo"]["initialInvestment"] == 1e15
        assert math.isfinite(simulation.roi.components.npv)
        assert math.isfinite(simulation.tpp.components.final_npv)
        assert math.isfinite(simulation.monte_carlo.components.mean_npv)
        assert math.isfinite(simulation.monte_carlo.components.standard_deviation)
        revalidated = SimulationResult.model_validate_json(simulation.model_dump_json(by_alias=True))
        assert revalidated.roi.score == simulation.roi.score

    def test_same_seed_same_simulation(self, orchestrator, stage_request):
        diagnosed = asyncio.run(orchestrator.diagnose(stage_request))
        first = asyncio.run(orchestrator.simulate(diagnosed, stage_request)).simulation
        second = asyncio.run(orchestrator.simulate(diagnosed, stage_request)).simulation
        assert first.monte_carlo.components == second.monte_carlo.components


class TestArchitect:
    """Tests for the architect stage and the full run."""

    def test_full_run(self, orchestrator, stage_request):
        state = asyncio.run(orchestrator.run(stage_request))
        assert isinstance(state, Architected)
        assert set(state.context) == {"diagnose", "simulate", "architect"}
        architecture = state.architecture
        assert len(architecture.partners) == len(PARTNER_CAPABILITIES)
        assert architecture.seam.components.partner_diversity == 1.0
        assert architecture.strategic_objective == stage_request.objective
        assert state.placeholder_inputs is False

    def test_request_partners_take_precedence(self, orchestrator, stage_request):
        partners = [Partner(name="Mactan Export Zone", type="Anchor", capabilities=["Electronics"])]
        request = stage_request.model_copy(update={"partners": partners})
        state = asyncio.run(orchestrator.run(request))
        assert [p.name for p in state.architecture.partners] == ["Mactan Export Zone"]
        assert state.architecture.seam.components.partner_count == 1

    def test_architect_requires_simulation(self, orchestrator, stage_request):
        diagnosed = asyncio.run(orchestrator.diagnose(stage_request))
        with pytest.raises(StageOrderException):
            asyncio.run(orchestrator.architect(diagnosed, stage_request))

    def test_architect_placeholders_keep_real_diagnosis(self, orchestrator, stage_request):
        diagnosed = asyncio.run(orchestrator.diagnose(stage_request))
        state = asyncio.run(orchestrator.architect(diagnosed, stage_request, allow_placeholders=True))
        assert state.diagnosis.placeholder_inputs is False
        assert state.simulation.placeholder_inputs is True
        assert state.architecture.placeholder_inputs is True

    def test_architect_rejects_completed_state(self, orchestrator, stage_request):
        done = asyncio.run(orchestrator.run(stage_request))
        with pytest.raises(StageOrderException):
            asyncio.run(orchestrator.architect(done, stage_request, allow_placeholders=True))

    def test_static_partner_directory(self, settings, stage_request, make_data_source):
        directory = StaticPartnerDirectory([Partner(name="Cebu Chamber", type="Community")])
        orchestrator = PipelineOrchestrator(settings, data_source=make_data_source(), partner_directory=directory)
        state = asyncio.run(orchestrator.run(stage_request))
        assert [p.type for p in state.architecture.partners] == ["Community"]


class TestDeadlines:
    """Tests for per-stage timeouts."""

    def test_slow_data_source_times_out(self, stage_request, make_data_source):
        settings = Settings(_env_file=None, STAGE_TIMEOUT_SECONDS=0.05)
        orchestrator = PipelineOrchestrator(settings, data_source=make_data_source(delay=1.0))
        with pytest.raises(StageTimeoutException) as exc:
            asyncio.run(orchestrator.diagnose(stage_request))
        assert exc.value.stage == "diagnose"


class TestPartners:
    """Tests for partner sourcing."""

    def test_illustrative_without_diagnosis(self):
        partners = asyncio.run(IllustrativePartnerDirectory().find_partners("Cebu", "", None))
        assert {p.type for p in partners} == set(PARTNER_CAPABILITIES)
        assert all(p.commitment == 70.0 for p in partners)
        assert partners[0].name == "Cebu Anchor Partner 1"

    def test_state_name(self):
        assert state_name(None) == "Uninitialized"
        assert state_name(Uninitialized()) == "Uninitialized"
