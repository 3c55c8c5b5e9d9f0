"""
Report Assembler Tests
tests/test_report_assembler.py

Report tree assembly, NSIL markup and the offline narrative fallback.
"""

import asyncio

import pytest

from nexus_engine.core.exceptions import TextGenerationException
from nexus_engine.models.enumerations import ReportLength
from nexus_engine.models.report import Paragraph, Recommendation, Report, Section
from nexus_engine.scoring.factor_indices import TrustCalculator
from nexus_engine.services.report_assembler import (
    NSIL_NAMESPACE,
    SECTION_TITLES,
    ReportAssembler,
    parse_report,
    serialize_report,
)
from nexus_engine.services.text_generation import OFFLINE_LABEL, OfflineTextGenerator


class FailingGenerator:
    """Live generator whose service is down."""

    offline = False

    async def generate_text(self, prompt, max_tokens):
        raise TextGenerationException("connection refused")

    async def generate_json(self, prompt, max_tokens):
        raise TextGenerationException("connection refused")


class EchoGenerator:
    offline = False

    async def generate_text(self, prompt, max_tokens):
        return f"Narrative for {prompt.context['region']}"


@pytest.fixture
def architected(orchestrator, stage_request):
    return asyncio.run(orchestrator.run(stage_request))


def assemble(settings, state, request, generator=None, **kwargs):
    assembler = ReportAssembler(generator or OfflineTextGenerator(), settings)
    return asyncio.run(assembler.assemble(state, request, **kwargs))


class TestAssemble:
    """Tests for ReportAssembler.assemble."""

    def test_section_order(self, settings, architected, stage_request):
        report = assemble(settings, architected, stage_request)
        assert [s.title for s in report.sections] == list(SECTION_TITLES)
        assert report.title == "Nexus Intelligence Report: Cebu, Philippines"
        assert report.subtitle == stage_request.objective

    def test_scores_come_from_stage_outputs(self, settings, architected, stage_request):
        report = assemble(settings, architected, stage_request)
        regional = report.sections[1]
        rci_section = next(b for b in regional.blocks if isinstance(b, Section) and b.source == "rci")
        assert rci_section.score == architected.diagnosis.rci.score
        assert report.metadata.results["roi"]["score"] == architected.simulation.roi.score
        assert set(report.metadata.results) == {"rci", "risk", "roi", "tpp", "monte_carlo", "seam"}

    def test_metadata_keeps_raw_and_normalized_inputs(self, settings, architected, stage_request):
        report = assemble(settings, architected, stage_request)
        assert report.metadata.inputs["investment"] == stage_request.investment
        assert "marketSize" not in report.metadata.inputs["investment"]

        normalized = report.metadata.normalized_inputs
        assert set(normalized) == {"rci", "risk", "investment", "monteCarlo"}
        assert normalized["investment"]["initialInvestment"] == 1_000_000
        assert "marketSize" in normalized["investment"]
        assert normalized["monteCarlo"]["iterations"] == settings.MONTE_CARLO_ITERATIONS
        assert normalized["rci"]["economic"] == 4.04e11

    def test_recommendations_are_deduplicated(self, settings, architected, stage_request):
        strategic = assemble(settings, architected, stage_request).sections[-1]
        texts = [b.text for b in strategic.blocks]
        assert all(isinstance(b, Recommendation) for b in strategic.blocks)
        assert len(texts) == len(set(texts))
        assert "Consider phased investment approach to reduce payback time" in texts

    def test_offline_narrative_is_labelled(self, settings, architected, stage_request):
        report = assemble(settings, architected, stage_request)
        assert report.sections[0].blocks[0].text.startswith(OFFLINE_LABEL)
        assert report.metadata.offline_narrative is True

    def test_live_failure_falls_back_to_offline(self, settings, architected, stage_request):
        report = assemble(settings, architected, stage_request, FailingGenerator())
        assert report.sections[0].blocks[0].text.startswith(OFFLINE_LABEL)
        assert report.metadata.offline_narrative is True

    def test_live_narrative(self, settings, architected, stage_request):
        report = assemble(settings, architected, stage_request, EchoGenerator())
        assert report.sections[0].blocks[0].text == "Narrative for Cebu, Philippines"
        assert report.metadata.offline_narrative is False

    def test_comprehensive_adds_stage_narratives(self, settings, architected, stage_request):
        request = stage_request.model_copy(update={"report_length": ReportLength.COMPREHENSIVE})
        report = assemble(settings, architected, request, EchoGenerator())
        for section in report.sections[1:4]:
            assert section.blocks[1] == Paragraph(text="Narrative for Cebu, Philippines")

    def test_supplementary_indices(self, settings, architected, stage_request):
        trust = TrustCalculator().calculate({})
        report = assemble(settings, architected, stage_request, extra_results=[trust])
        assert [s.title for s in report.sections][-2] == "Supplementary Indices"
        assert report.metadata.results["trust"]["score"] == trust.score

    def test_placeholder_note(self, settings, orchestrator, stage_request):
        state = asyncio.run(orchestrator.architect(None, stage_request, allow_placeholders=True))
        report = assemble(settings, state, stage_request)
        texts = [b.text for b in report.sections[0].blocks]
        assert any("placeholder" in t for t in texts)


class TestMarkup:
    """Tests for NSIL serialization."""

    def test_round_trip_preserves_structure(self, settings, architected, stage_request):
        report = assemble(settings, architected, stage_request)
        markup = serialize_report(report)
        assert parse_report(markup).structure() == report.structure()

    def test_markup_vocabulary(self, settings, architected, stage_request):
        markup = serialize_report(assemble(settings, architected, stage_request))
        assert markup.startswith("<nsil:report")
        assert f'xmlns:nsil="{NSIL_NAMESPACE}"' in markup
        assert "<nsil:report_title" in markup
        assert "<nsil:recommendation>" in markup

    def test_special_characters_are_escaped(self):
        report = Report(
            title='R&D "Hub" <North>',
            sections=[Section(title="A & B").add_paragraph("x < y && y > z\x01")],
        )
        parsed = parse_report(serialize_report(report))
        assert parsed.title == 'R&D "Hub" <North>'
        assert parsed.sections[0].title == "A & B"
        assert parsed.sections[0].blocks[0].text == "x < y && y > z"

    def test_carriage_returns_survive_round_trip(self):
        report = Report(
            title="Line one\r\nLine\ttwo",
            sections=[
                Section(title="CR\rsection")
                .add_paragraph("first\r\nsecond\rthird\n")
                .add_recommendations(["tab\tseparated\r\n"])
            ],
        )
        markup = serialize_report(report)
        assert "\r" not in markup
        parsed = parse_report(markup)
        assert parsed.title == "Line one\r\nLine\ttwo"
        assert parsed.sections[0].title == "CR\rsection"
        assert parsed.sections[0].blocks[0].text == "first\r\nsecond\rthird\n"
        assert parsed.structure() == report.structure()

    def test_empty_paragraph_round_trip(self):
        report = Report(title="T", sections=[Section(title="S", source="rci", score=0).add_paragraph("")])
        assert parse_report(serialize_report(report)).structure() == report.structure()

    @pytest.mark.parametrize(
        "markup",
        [
            "<nsil:report",
            "<other/>",
            f'<nsil:report xmlns:nsil="{NSIL_NAMESPACE}"><nsil:table/></nsil:report>',
        ],
    )
    def test_invalid_markup_raises(self, markup):
        with pytest.raises(ValueError):
            parse_report(markup)
