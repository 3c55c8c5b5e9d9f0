"""
Pipeline request and stage-output models.

Each stage output is a plain value: the orchestrator threads it forward
into the next stage, never backwards.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import Field

from nexus_engine.models.base import NexusModel
from nexus_engine.models.enumerations import ReportLength
from nexus_engine.models.inputs import Partner
from nexus_engine.models.results import (
    MonteCarloResult,
    RCIResult,
    RiskResult,
    ROIResult,
    SEAMResult,
    TPPResult,
)


class StageRequest(NexusModel):
    """One {region, objective}-shaped request, optionally with stage inputs."""
    region: str = Field(default="Global Region", max_length=255)
    objective: str = Field(default="", max_length=2000)
    intervention: Optional[str] = None
    regional: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw RCI sub-scores; absent fields are filled from indicators or defaults",
    )
    investment: Dict[str, Any] = Field(default_factory=dict)
    project: Dict[str, Any] = Field(default_factory=dict, description="Risk baseline overrides")
    partners: Optional[List[Partner]] = None
    industry: str = ""
    report_length: ReportLength = ReportLength.STANDARD
    seed: Optional[int] = None
    refresh_data: bool = Field(default=False, description="Drop cached indicators for the region before diagnosing")


class IndicatorObservation(NexusModel):
    """Latest time-stamped observation for one country/indicator."""
    indicator: str
    value: float
    year: str


class DiagnosisResult(NexusModel):
    region: str
    objective: str
    country_code: Optional[str] = None
    indicators: Dict[str, Optional[IndicatorObservation]] = Field(default_factory=dict)
    missing_indicators: List[str] = Field(default_factory=list)
    rci: RCIResult
    risk: RiskResult
    summary: str
    normalized_inputs: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    placeholder_inputs: bool = False
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PredictedOutcome(NexusModel):
    metric: str
    start_value: float
    end_value: float
    unit: str


class SimulationResult(NexusModel):
    scenario: str
    intervention: str
    timeline: str
    impact_analysis: str
    roi: ROIResult
    tpp: TPPResult
    monte_carlo: MonteCarloResult
    predicted_outcomes: List[PredictedOutcome]
    normalized_inputs: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)
    placeholder_inputs: bool = False
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ArchitectureResult(NexusModel):
    strategic_objective: str
    ecosystem_summary: str
    partners: List[Partner]
    seam: SEAMResult
    recommendations: List[str] = Field(default_factory=list)
    placeholder_inputs: bool = False
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
