"""
Dependencies - Nexus Intelligence Engine
nexus_engine/core/dependencies.py

FastAPI dependency injection for the engine's collaborators.
"""

from functools import lru_cache

from nexus_engine.config import get_settings
from nexus_engine.pipelines.orchestrator import PipelineOrchestrator
from nexus_engine.services.economic_data import WorldBankClient
from nexus_engine.services.report_assembler import ReportAssembler
from nexus_engine.services.text_generation import TextGenerator, build_text_generator


@lru_cache()
def get_data_source() -> WorldBankClient:
    """Get cached World Bank client."""
    return WorldBankClient(get_settings())


@lru_cache()
def get_text_generator() -> TextGenerator:
    """Live text generator when an API key is configured, offline otherwise."""
    return build_text_generator(get_settings())


@lru_cache()
def get_orchestrator() -> PipelineOrchestrator:
    """Get cached PipelineOrchestrator instance."""
    return PipelineOrchestrator(get_settings(), data_source=get_data_source())


@lru_cache()
def get_report_assembler() -> ReportAssembler:
    """Get cached ReportAssembler instance."""
    return ReportAssembler(get_text_generator(), get_settings())
