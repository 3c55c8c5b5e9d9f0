"""
Pipeline states.

The pipeline is a tagged state machine:

    Uninitialized → Diagnosed(d) → Simulated(d, s) → Architected(d, s, a)

Each state is immutable and carries everything earlier stages produced;
`context` exposes those outputs keyed by stage name.
"""

from dataclasses import dataclass
from typing import Any, Dict, Union

from nexus_engine.models.enumerations import PipelineStage
from nexus_engine.models.pipeline import ArchitectureResult, DiagnosisResult, SimulationResult


@dataclass(frozen=True)
class Uninitialized:
    @property
    def context(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class Diagnosed:
    diagnosis: DiagnosisResult

    @property
    def context(self) -> Dict[str, Any]:
        return {PipelineStage.DIAGNOSE.value: self.diagnosis}


@dataclass(frozen=True)
class Simulated:
    diagnosis: DiagnosisResult
    simulation: SimulationResult

    @property
    def context(self) -> Dict[str, Any]:
        return {
            PipelineStage.DIAGNOSE.value: self.diagnosis,
            PipelineStage.SIMULATE.value: self.simulation,
        }


@dataclass(frozen=True)
class Architected:
    diagnosis: DiagnosisResult
    simulation: SimulationResult
    architecture: ArchitectureResult

    @property
    def context(self) -> Dict[str, Any]:
        return {
            PipelineStage.DIAGNOSE.value: self.diagnosis,
            PipelineStage.SIMULATE.value: self.simulation,
            PipelineStage.ARCHITECT.value: self.architecture,
        }

    @property
    def placeholder_inputs(self) -> bool:
        return (
            self.diagnosis.placeholder_inputs
            or self.simulation.placeholder_inputs
            or self.architecture.placeholder_inputs
        )


PipelineState = Union[Uninitialized, Diagnosed, Simulated, Architected]


def state_name(state: Any) -> str:
    if state is None:
        return "Uninitialized"
    return type(state).__name__
