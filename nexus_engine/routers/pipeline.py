"""
routers/pipeline.py — Staged pipeline endpoints

Endpoints:
  POST {API_V1_PREFIX}/pipeline/diagnose    — Diagnose a region
  POST {API_V1_PREFIX}/pipeline/simulate    — Simulate; body carries the diagnosis
  POST {API_V1_PREFIX}/pipeline/architect   — Architect; body carries diagnosis + simulation
  POST {API_V1_PREFIX}/pipeline/report      — Full run, NSIL markup (application/xml)

The service is stateless: each call carries the prior stage outputs in
its body. A stage called without them is rejected with 409 unless
allowPlaceholders is set.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from nexus_engine.core.dependencies import get_orchestrator, get_report_assembler
from nexus_engine.models.pipeline import (
    ArchitectureResult,
    DiagnosisResult,
    SimulationResult,
    StageRequest,
)
from nexus_engine.pipelines.orchestrator import PipelineOrchestrator
from nexus_engine.pipelines.stages import Diagnosed, PipelineState, Simulated, Uninitialized
from nexus_engine.services.report_assembler import ReportAssembler, serialize_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pipeline", tags=["Pipeline"])


# =====================================================================
# Request Models
# =====================================================================

class SimulateRequest(StageRequest):
    diagnosis: Optional[DiagnosisResult] = None
    allow_placeholders: bool = False


class ArchitectRequest(StageRequest):
    diagnosis: Optional[DiagnosisResult] = None
    simulation: Optional[SimulationResult] = None
    allow_placeholders: bool = False


def _state_from(diagnosis: Optional[DiagnosisResult], simulation: Optional[SimulationResult] = None) -> PipelineState:
    if diagnosis is not None and simulation is not None:
        return Simulated(diagnosis, simulation)
    if diagnosis is not None:
        return Diagnosed(diagnosis)
    return Uninitialized()


# =====================================================================
# Endpoints
# =====================================================================

@router.post("/diagnose", response_model=DiagnosisResult, summary="Diagnose a region")
async def diagnose(
    request: StageRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    state = await orchestrator.diagnose(request)
    return state.diagnosis


@router.post("/simulate", response_model=SimulationResult, summary="Simulate a transformation")
async def simulate(
    request: SimulateRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    state = await orchestrator.simulate(
        _state_from(request.diagnosis),
        request,
        allow_placeholders=request.allow_placeholders,
    )
    return state.simulation


@router.post("/architect", response_model=ArchitectureResult, summary="Architect a partner ecosystem")
async def architect(
    request: ArchitectRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    state = await orchestrator.architect(
        _state_from(request.diagnosis, request.simulation),
        request,
        allow_placeholders=request.allow_placeholders,
    )
    return state.architecture


@router.post(
    "/report",
    response_class=Response,
    responses={200: {"content": {"application/xml": {}}}},
    summary="Run all stages and return the NSIL report",
)
async def report(
    request: StageRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
    assembler: ReportAssembler = Depends(get_report_assembler),
):
    state = await orchestrator.run(request)
    built = await assembler.assemble(state, request)
    logger.info(f"Report generated for {request.region}")
    return Response(content=serialize_report(built), media_type="application/xml")
