"""
services/ — External collaborators and report output

Modules:
    redis_cache.py       - Pydantic-aware Redis wrapper
    cache.py             - Indicator cache singleton (graceful degradation)
    economic_data.py     - World Bank indicator client
    text_generation.py   - Chat-completions client and offline fallback
    report_assembler.py  - Report tree assembly and NSIL markup
"""

from nexus_engine.services.cache import get_cache, reset_cache
from nexus_engine.services.economic_data import WorldBankClient
from nexus_engine.services.report_assembler import ReportAssembler, parse_report, serialize_report
from nexus_engine.services.text_generation import (
    OfflineTextGenerator,
    TextGenerationClient,
    build_text_generator,
)

__all__ = [
    "get_cache",
    "reset_cache",
    "WorldBankClient",
    "ReportAssembler",
    "serialize_report",
    "parse_report",
    "TextGenerationClient",
    "OfflineTextGenerator",
    "build_text_generator",
]
