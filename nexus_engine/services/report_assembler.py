"""
Report Assembler - Nexus Intelligence Engine
nexus_engine/services/report_assembler.py

Builds the Report tree from a completed pipeline and writes it as NSIL
markup. No scoring happens here: computed numbers come from the stage
outputs, narrative filler from the text generator.

Markup vocabulary (namespace prefix "nsil"):
    <nsil:report>
      <nsil:report_title title="..."/>
      <nsil:report_subtitle subtitle="..."/>
      <nsil:section title="..." source="rci" score="76">
        <nsil:paragraph>...</nsil:paragraph>
        <nsil:recommendation>...</nsil:recommendation>
        <nsil:section ...>...</nsil:section>
      </nsil:section>
    </nsil:report>

parse_report(serialize_report(r)).structure() == r.structure()
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Sequence, Tuple

from nexus_engine.config import Settings, get_settings
from nexus_engine.core.exceptions import TextGenerationException
from nexus_engine.models.pipeline import StageRequest
from nexus_engine.models.report import Paragraph, Recommendation, Report, ReportMetadata, Section
from nexus_engine.models.results import CompositeResult
from nexus_engine.pipelines.stages import Architected
from nexus_engine.services.text_generation import (
    NEXUS_PERSONA,
    OfflineTextGenerator,
    Prompt,
    TextGenerator,
)

logger = logging.getLogger(__name__)

NSIL_NAMESPACE = "urn:nexus:nsil:1.0"
ET.register_namespace("nsil", NSIL_NAMESPACE)

SECTION_TITLES = (
    "Executive Summary",
    "Regional Diagnosis",
    "Transformation Simulation",
    "Ecosystem Architecture",
    "Strategic Recommendations",
)


def _tag(name: str) -> str:
    return f"{{{NSIL_NAMESPACE}}}{name}"


def _local(tag: str) -> str:
    return tag.split("}", 1)[1] if tag.startswith("{") else tag


# characters XML 1.0 cannot carry
_XML_INVALID = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _xml_safe(text: str) -> str:
    return _XML_INVALID.sub("", text)


# =============================================================================
# Serialization
# =============================================================================

def _section_element(section: Section) -> ET.Element:
    attrs = {"title": _xml_safe(section.title)}
    if section.source is not None:
        attrs["source"] = section.source
    if section.score is not None:
        attrs["score"] = str(section.score)
    element = ET.Element(_tag("section"), attrs)
    for block in section.blocks:
        if isinstance(block, Section):
            element.append(_section_element(block))
        else:
            child = ET.SubElement(element, _tag(block.type))
            child.text = _xml_safe(block.text)
    return element


def serialize_report(report: Report) -> str:
    """Write the report tree as indented NSIL markup (metadata excluded)."""
    root = ET.Element(_tag("report"))
    ET.SubElement(root, _tag("report_title"), {"title": _xml_safe(report.title)})
    ET.SubElement(root, _tag("report_subtitle"), {"subtitle": _xml_safe(report.subtitle)})
    for section in report.sections:
        root.append(_section_element(section))
    ET.indent(root, space="  ")
    markup = ET.tostring(root, encoding="unicode")
    # parsers normalize raw CR and attribute tabs; indentation adds neither
    return markup.replace("\r", "&#13;").replace("\t", "&#9;")


def _parse_section(element: ET.Element) -> Section:
    score = element.get("score")
    section = Section(
        title=element.get("title", ""),
        source=element.get("source"),
        score=int(score) if score is not None else None,
    )
    for child in element:
        name = _local(child.tag)
        if name == "section":
            section.blocks.append(_parse_section(child))
        elif name == "paragraph":
            section.blocks.append(Paragraph(text=child.text or ""))
        elif name == "recommendation":
            section.blocks.append(Recommendation(text=child.text or ""))
        else:
            raise ValueError(f"Unexpected element in section: {name}")
    return section


def parse_report(markup: str) -> Report:
    """
    Rebuild a Report tree from NSIL markup.

    Raises:
        ValueError: on malformed markup or unknown elements
    """
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as e:
        raise ValueError(f"Malformed report markup: {e}") from e
    if _local(root.tag) != "report":
        raise ValueError(f"Expected <report> root, got <{_local(root.tag)}>")

    title, subtitle, sections = "", "", []
    for child in root:
        name = _local(child.tag)
        if name == "report_title":
            title = child.get("title", "")
        elif name == "report_subtitle":
            subtitle = child.get("subtitle", "")
        elif name == "section":
            sections.append(_parse_section(child))
        else:
            raise ValueError(f"Unexpected element in report: {name}")
    return Report(title=title, subtitle=subtitle, sections=sections)


# =============================================================================
# Assembly
# =============================================================================

def _result_section(title: str, result: CompositeResult) -> Section:
    section = Section(title=title, source=result.kind, score=result.score)
    section.add_paragraph(result.analysis)
    section.add_paragraph(f"Confidence: {result.confidence:.2f}")
    if result.defaulted_fields:
        section.add_paragraph(
            "Computed with documented defaults for: " + ", ".join(result.defaulted_fields)
        )
    return section.add_recommendations(result.recommendations)


class ReportAssembler:
    """Merge stage outputs and composite results into one Report."""

    def __init__(
        self,
        text_generator: Optional[TextGenerator] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.text_generator = text_generator or OfflineTextGenerator()
        self._offline = OfflineTextGenerator()

    async def _narrate(self, prompt: Prompt, max_tokens: int) -> Tuple[str, bool]:
        """Return (text, offline); live failures fall back to the offline generator."""
        if getattr(self.text_generator, "offline", False):
            return await self._offline.generate_text(prompt, max_tokens), True
        try:
            return await self.text_generator.generate_text(prompt, max_tokens), False
        except TextGenerationException as e:
            logger.warning(f"Narrative generation failed, using offline text: {e}")
            return await self._offline.generate_text(prompt, max_tokens), True

    def _prompt(self, request: StageRequest, headline: str, focus: str) -> Prompt:
        return Prompt(
            persona=NEXUS_PERSONA,
            directives=[
                f"Write the {focus} for a {request.report_length.value} intelligence report.",
                "Use only the numbers given in the context; do not invent figures.",
                "Plain prose, no headings, no markdown.",
            ],
            context={
                "region": request.region,
                "objective": request.objective,
                "headline": headline,
            },
        )

    async def assemble(
        self,
        state: Architected,
        request: StageRequest,
        extra_results: Sequence[CompositeResult] = (),
    ) -> Report:
        """
        Build the report for a completed pipeline run.

        Args:
            state: Architected pipeline state.
            request: The originating request.
            extra_results: Further composite results (e.g. trust, competition)
                           rendered under "Supplementary Indices".
        """
        diagnosis, simulation, architecture = state.diagnosis, state.simulation, state.architecture
        max_tokens = self.settings.max_tokens_for(request.report_length.value)
        results: Dict[str, CompositeResult] = {
            "rci": diagnosis.rci,
            "risk": diagnosis.risk,
            "roi": simulation.roi,
            "tpp": simulation.tpp,
            "monte_carlo": simulation.monte_carlo,
            "seam": architecture.seam,
        }
        for extra in extra_results:
            results[extra.kind] = extra

        headline = (
            f"RCI {diagnosis.rci.score}/100, risk {diagnosis.risk.score}/100, "
            f"ROI {simulation.roi.score}/100, time to profit "
            f"{simulation.tpp.components.time_to_profit} years, "
            f"SEAM {architecture.seam.score}/100"
        )

        summary_text, offline = await self._narrate(
            self._prompt(request, headline, "executive summary"), max_tokens
        )
        executive = Section(title=SECTION_TITLES[0])
        executive.add_paragraph(summary_text).add_paragraph(f"Headline indices: {headline}.")
        if state.placeholder_inputs:
            executive.add_paragraph(
                "Some stages were computed from default placeholder inputs; "
                "treat affected figures as indicative only."
            )

        regional = Section(title=SECTION_TITLES[1], source="diagnose")
        regional.add_paragraph(diagnosis.summary)
        regional.add_section(_result_section("Regional Competitiveness Index", diagnosis.rci))
        regional.add_section(_result_section("Risk Profile", diagnosis.risk))
        coverage = Section(title="Data Coverage")
        available = [code for code, obs in diagnosis.indicators.items() if obs is not None]
        coverage.add_paragraph(
            f"Indicators available: {', '.join(available) or 'none'}."
        )
        if diagnosis.missing_indicators:
            coverage.add_paragraph(
                f"Indicators absent: {', '.join(diagnosis.missing_indicators)}."
            )
        regional.add_section(coverage)

        transformation = Section(title=SECTION_TITLES[2], source="simulate")
        transformation.add_paragraph(f"{simulation.scenario}: {simulation.impact_analysis}")
        transformation.add_section(_result_section("Return on Investment", simulation.roi))
        transformation.add_section(_result_section("Time to Profit", simulation.tpp))
        transformation.add_section(
            _result_section("Monte Carlo Sensitivity", simulation.monte_carlo)
        )
        outcomes = Section(title="Predicted Outcomes")
        for outcome in simulation.predicted_outcomes:
            outcomes.add_paragraph(
                f"{outcome.metric}: {outcome.start_value:,.2f} → {outcome.end_value:,.2f} "
                f"{outcome.unit} over {simulation.timeline}"
            )
        transformation.add_section(outcomes)

        ecosystem = Section(title=SECTION_TITLES[3], source="architect")
        ecosystem.add_paragraph(architecture.strategic_objective)
        ecosystem.add_paragraph(architecture.ecosystem_summary)
        ecosystem.add_section(_result_section("Ecosystem Synergy", architecture.seam))
        partners = Section(title="Partners")
        for partner in architecture.partners:
            partners.add_paragraph(
                f"{partner.name} ({partner.type}): {partner.rationale or ', '.join(partner.capabilities)}"
            )
        ecosystem.add_section(partners)

        sections: List[Section] = [executive, regional, transformation, ecosystem]

        if request.report_length.value == "comprehensive":
            for section, focus in (
                (regional, "regional diagnosis narrative"),
                (transformation, "transformation simulation narrative"),
                (ecosystem, "ecosystem architecture narrative"),
            ):
                text, section_offline = await self._narrate(
                    self._prompt(request, headline, focus), max_tokens
                )
                section.blocks.insert(1, Paragraph(text=text))
                offline = offline or section_offline

        if extra_results:
            supplementary = Section(title="Supplementary Indices")
            for extra in extra_results:
                supplementary.add_section(
                    _result_section(extra.kind.replace("_", " ").title(), extra)
                )
            sections.append(supplementary)

        strategic = Section(title=SECTION_TITLES[4])
        merged: List[str] = []
        for result in results.values():
            merged.extend(result.recommendations)
        merged.extend(simulation.recommendations)
        merged.extend(architecture.recommendations)
        strategic.add_recommendations(list(dict.fromkeys(merged)))
        sections.append(strategic)

        logger.info(
            f"Report assembled for {request.region}",
            extra={"sections": len(sections), "offline_narrative": offline},
        )

        return Report(
            title=f"Nexus Intelligence Report: {request.region}",
            subtitle=request.objective or "Regional development intelligence",
            sections=sections,
            metadata=ReportMetadata(
                region=request.region,
                objective=request.objective,
                report_length=request.report_length.value,
                offline_narrative=offline,
                inputs=request.model_dump(mode="json", by_alias=True),
                normalized_inputs={**diagnosis.normalized_inputs, **simulation.normalized_inputs},
                results={
                    key: result.model_dump(mode="json", by_alias=True)
                    for key, result in results.items()
                },
            ),
        )
