"""
routers/assistant.py — Assistant endpoints

Endpoints:
  GET  {API_V1_PREFIX}/assistant/capabilities   — {greeting, capabilities[]}
  GET  {API_V1_PREFIX}/assistant/opportunities  — {feed[]}
  POST {API_V1_PREFIX}/assistant/brief          — Streamed plain-text brief

The JSON endpoints are validated against their declared shape before
being returned. Offline, capabilities fall back to a fixed list, the
feed is empty and the brief is the labelled offline narrative.
"""

from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from nexus_engine.config import get_settings
from nexus_engine.core.dependencies import get_text_generator
from nexus_engine.models.base import NexusModel
from nexus_engine.models.enumerations import ReportLength
from nexus_engine.services.text_generation import (
    NEXUS_PERSONA,
    CapabilitiesResponse,
    FeedResponse,
    Prompt,
    TextGenerator,
)

router = APIRouter(prefix="/assistant", tags=["Assistant"])

CAPABILITIES_PROMPT = Prompt(
    persona=NEXUS_PERSONA,
    directives=[
        "Introduce yourself briefly and list 3 core capabilities most useful to a "
        "government official or business strategist.",
        "Focus on turning a simple idea into a detailed report.",
        "For each capability give a title, a description and an example prompt.",
    ],
    schema_name="capabilities",
)

FEED_PROMPT = Prompt(
    persona=(
        "You are a Global Intelligence Analyst for an economic development platform."
    ),
    directives=[
        "List 5-7 recent, significant global development opportunities, news items "
        "and economic indicators.",
        "Each feed item has id, timestamp, type (opportunity, news or indicator) and content.",
        "Opportunity content: project_name, country, sector, value, summary, source_url, "
        "ai_feasibility_score (1-100), ai_risk_assessment.",
        "News content: headline, summary, source, link, region.",
        "Indicator content: name, value, change, region.",
    ],
    schema_name="feed",
)


@router.get("/capabilities", response_model=CapabilitiesResponse, summary="Assistant capabilities")
async def capabilities(generator: TextGenerator = Depends(get_text_generator)):
    return await generator.generate_json(
        CAPABILITIES_PROMPT, get_settings().max_tokens_for("brief")
    )


@router.get("/opportunities", response_model=FeedResponse, summary="Live opportunity feed")
async def opportunities(generator: TextGenerator = Depends(get_text_generator)):
    return await generator.generate_json(
        FEED_PROMPT, get_settings().max_tokens_for("standard")
    )


class BriefRequest(NexusModel):
    topic: str
    region: Optional[str] = None
    length: ReportLength = ReportLength.BRIEF


def brief_prompt(request: BriefRequest) -> Prompt:
    context = {"objective": request.topic}
    if request.region:
        context["region"] = request.region
    return Prompt(
        persona=NEXUS_PERSONA,
        directives=[
            "Write a short strategic brief on the objective below as plain prose.",
            "Cover the opportunity, the main risks and one next step.",
        ],
        context=context,
    )


@router.post("/brief", response_class=StreamingResponse, summary="Stream a strategic brief")
async def brief(request: BriefRequest, generator: TextGenerator = Depends(get_text_generator)):
    chunks = generator.stream_text(brief_prompt(request), get_settings().max_tokens_for(request.length.value))
    # first chunk is awaited here so connection failures map to 502
    try:
        first = await chunks.__anext__()
    except StopAsyncIteration:
        first = ""

    async def body() -> AsyncIterator[str]:
        yield first
        async for chunk in chunks:
            yield chunk

    return StreamingResponse(body(), media_type="text/plain; charset=utf-8")
