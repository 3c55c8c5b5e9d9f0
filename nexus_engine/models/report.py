"""
Report tree models.

A Report is an ordered tree of sections. Each section holds a title and
zero or more blocks: paragraphs, recommendations, or nested sections.
Metadata (inputs and results) travels with the tree but is not serialized
into the markup.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class Paragraph(BaseModel):
    type: Literal["paragraph"] = "paragraph"
    text: str


class Recommendation(BaseModel):
    type: Literal["recommendation"] = "recommendation"
    text: str


class Section(BaseModel):
    type: Literal["section"] = "section"
    title: str
    source: Optional[str] = None   # calculator/stage that produced the section
    score: Optional[int] = None
    blocks: List[Union[Paragraph, Recommendation, "Section"]] = Field(default_factory=list)

    def add_paragraph(self, text: str) -> "Section":
        self.blocks.append(Paragraph(text=text))
        return self

    def add_recommendations(self, items: List[str]) -> "Section":
        self.blocks.extend(Recommendation(text=item) for item in items)
        return self

    def add_section(self, section: "Section") -> "Section":
        self.blocks.append(section)
        return self


Section.model_rebuild()


class ReportMetadata(BaseModel):
    region: str = ""
    objective: str = ""
    report_length: str = "standard"
    offline_narrative: bool = False
    inputs: Dict[str, Any] = Field(default_factory=dict, description="Request as received")
    normalized_inputs: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Calculator inputs after normalization, keyed by calculator",
    )
    results: Dict[str, Any] = Field(
        default_factory=dict,
        description="Composite results keyed by the section source that rendered them",
    )


class Report(BaseModel):
    title: str
    subtitle: str = ""
    sections: List[Section] = Field(default_factory=list)
    metadata: ReportMetadata = Field(default_factory=ReportMetadata)

    def structure(self) -> Dict[str, Any]:
        """Tree without metadata, used for round-trip comparison."""
        return self.model_dump(exclude={"metadata"})
