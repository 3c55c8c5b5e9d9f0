# tests/conftest.py

"""
Pytest Fixtures - Shared settings, fake collaborators and API client

No test touches the network: the World Bank client is replaced by
FakeDataSource and the text generator by the offline generator.
"""

import asyncio
from typing import Dict, Iterable, Optional

import pytest
from fastapi.testclient import TestClient

from nexus_engine.config import Settings
from nexus_engine.models.enumerations import Indicator
from nexus_engine.models.pipeline import IndicatorObservation, StageRequest
from nexus_engine.pipelines.orchestrator import PipelineOrchestrator
from nexus_engine.services.report_assembler import ReportAssembler
from nexus_engine.services.text_generation import OfflineTextGenerator


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================

PHILIPPINES_INDICATORS = {
    Indicator.GDP.value: 4.04e11,
    Indicator.POPULATION.value: 1.15e8,
    Indicator.INFLATION.value: 5.8,
    Indicator.FDI.value: 9.2e9,
    Indicator.GDP_GROWTH.value: 7.6,
    Indicator.TRADE_BALANCE.value: -6.1e10,
}


class FakeDataSource:
    """In-memory EconomicDataSource; listed codes come back as None."""

    def __init__(self, values: Optional[Dict[str, float]] = None, missing: Iterable[str] = (), delay: float = 0.0):
        self.values = dict(PHILIPPINES_INDICATORS if values is None else values)
        self.missing = set(missing)
        self.delay = delay
        self.calls = []
        self.invalidated = []

    async def fetch_indicators(self, country_code, indicators):
        self.calls.append(country_code)
        if self.delay:
            await asyncio.sleep(self.delay)
        result = {}
        for code in indicators:
            if code in self.missing or code not in self.values:
                result[code] = None
            else:
                result[code] = IndicatorObservation(indicator=code, value=self.values[code], year="2023")
        return result

    def invalidate(self, country_code):
        self.invalidated.append(country_code)


# =============================================================================
# SETTINGS / ORCHESTRATOR FIXTURES
# =============================================================================

@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        CACHE_ENABLED=False,
        OPENAI_API_KEY=None,
        MONTE_CARLO_ITERATIONS=500,
        MONTE_CARLO_SEED=42,
    )


@pytest.fixture
def make_data_source():
    """Factory for FakeDataSource with custom values, gaps or latency."""
    return FakeDataSource


@pytest.fixture
def data_source():
    return FakeDataSource()


@pytest.fixture
def orchestrator(settings, data_source):
    return PipelineOrchestrator(settings, data_source=data_source)


@pytest.fixture
def stage_request():
    """Typical request for a supported country."""
    return StageRequest(
        region="Cebu, Philippines",
        objective="Build a regional electronics manufacturing cluster",
        investment={"initialInvestment": 1_000_000, "expectedROI": 15, "timeline": 5, "riskFactor": 0.1},
        seed=7,
    )


@pytest.fixture
def roi_example():
    """ROI worked example: payback = 1,000,000 / 150,000."""
    return {"initialInvestment": 1_000_000, "expectedROI": 15, "timeline": 5, "riskFactor": 0.1}


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture
def client(settings):
    """TestClient with network collaborators swapped for fakes."""
    from nexus_engine.core.dependencies import (
        get_orchestrator,
        get_report_assembler,
        get_text_generator,
    )
    from nexus_engine.main import app

    app.dependency_overrides[get_orchestrator] = lambda: PipelineOrchestrator(
        settings, data_source=FakeDataSource()
    )
    app.dependency_overrides[get_text_generator] = lambda: OfflineTextGenerator()
    app.dependency_overrides[get_report_assembler] = lambda: ReportAssembler(
        OfflineTextGenerator(), settings
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
