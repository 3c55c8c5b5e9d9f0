"""
Models Package - Nexus Intelligence Engine

Typed calculator inputs, composite results, pipeline stage outputs and the
report tree.
"""

from nexus_engine.models.base import NexusModel
from nexus_engine.models.enumerations import (
    CalculatorKind,
    Indicator,
    PipelineStage,
    ReportLength,
    SEAMMode,
)
from nexus_engine.models.inputs import Partner
from nexus_engine.models.pipeline import (
    ArchitectureResult,
    DiagnosisResult,
    IndicatorObservation,
    PredictedOutcome,
    SimulationResult,
    StageRequest,
)
from nexus_engine.models.report import Paragraph, Recommendation, Report, Section
from nexus_engine.models.results import AnyCompositeResult, CompositeResult

__all__ = [
    "NexusModel",
    "CalculatorKind",
    "Indicator",
    "PipelineStage",
    "ReportLength",
    "SEAMMode",
    "Partner",
    "ArchitectureResult",
    "DiagnosisResult",
    "IndicatorObservation",
    "PredictedOutcome",
    "SimulationResult",
    "StageRequest",
    "Paragraph",
    "Recommendation",
    "Report",
    "Section",
    "AnyCompositeResult",
    "CompositeResult",
]
