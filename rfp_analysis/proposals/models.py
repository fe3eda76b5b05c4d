"""Schemas for proposal analysis and vendor comparison results.

Attributes are snake_case in Python and camelCase in JSON, which is the shape
callers persist next to the proposal record.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _round_score(value: Any) -> Any:
    if isinstance(value, float):
        return int(round(value))
    return value


def _null_as_empty_list(value: Any) -> Any:
    return [] if value is None else value


def _null_as_empty_text(value: Any) -> Any:
    return "" if value is None else value


class PriceLine(CamelModel):
    item: str
    amount: float


class Pricing(CamelModel):
    total: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None
    breakdown: List[PriceLine] = Field(default_factory=list)

    @field_validator("breakdown", mode="before")
    @classmethod
    def null_breakdown(cls, value: Any) -> Any:
        return _null_as_empty_list(value)


class Milestone(CamelModel):
    phase: str
    date: str


class Timeline(CamelModel):
    delivery_date: Optional[str] = None
    lead_time: Optional[str] = None
    milestones: List[Milestone] = Field(default_factory=list)

    @field_validator("milestones", mode="before")
    @classmethod
    def null_milestones(cls, value: Any) -> Any:
        return _null_as_empty_list(value)


class Terms(CamelModel):
    payment_terms: Optional[str] = None
    warranty: Optional[str] = None
    validity: Optional[str] = None


class Compliance(CamelModel):
    certifications: List[str] = Field(default_factory=list)
    standards: List[str] = Field(default_factory=list)

    @field_validator("certifications", "standards", mode="before")
    @classmethod
    def null_lists(cls, value: Any) -> Any:
        return _null_as_empty_list(value)


class Technical(CamelModel):
    technologies: List[str] = Field(default_factory=list)
    methodology: Optional[str] = None

    @field_validator("technologies", mode="before")
    @classmethod
    def null_technologies(cls, value: Any) -> Any:
        return _null_as_empty_list(value)


def _has_value(value: Any) -> bool:
    return value is not None and value != "" and value != []


def _merge_section(base: Optional[CamelModel], override: Optional[CamelModel]) -> Optional[CamelModel]:
    if override is None:
        return base
    if base is None:
        return override
    values = {}
    for name in type(base).model_fields:
        preferred = getattr(override, name)
        values[name] = preferred if _has_value(preferred) else getattr(base, name)
    return type(base)(**values)


class ExtractedFields(CamelModel):
    """Structured fields found in a proposal; ``None`` means not found."""

    pricing: Optional[Pricing] = None
    timeline: Optional[Timeline] = None
    terms: Optional[Terms] = None
    compliance: Optional[Compliance] = None
    technical: Optional[Technical] = None

    def merged_with(self, other: Optional["ExtractedFields"]) -> "ExtractedFields":
        """Fold ``other`` over this instance, field by field.

        Values present in ``other`` win; gaps are filled from ``self``.
        """
        if other is None:
            return self.model_copy()
        return ExtractedFields(
            **{name: _merge_section(getattr(self, name), getattr(other, name)) for name in type(self).model_fields}
        )

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in type(self).model_fields)


class CriterionAnalysis(CamelModel):
    criteria_name: str
    score: int = Field(ge=0, le=10)
    feedback: str = ""
    evidence: str = ""

    @field_validator("score", mode="before")
    @classmethod
    def coerce_score(cls, value: Any) -> Any:
        return _round_score(value)

    @field_validator("feedback", "evidence", mode="before")
    @classmethod
    def null_text(cls, value: Any) -> Any:
        return _null_as_empty_text(value)


class AnalysisResult(CamelModel):
    overall_score: int = Field(ge=0, le=100)
    personal_feedback: str = ""
    criteria_analysis: List[CriterionAnalysis] = Field(min_length=1)
    ai_summary: str = ""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    extracted_data: ExtractedFields = Field(default_factory=ExtractedFields)

    @field_validator("overall_score", mode="before")
    @classmethod
    def coerce_overall_score(cls, value: Any) -> Any:
        return _round_score(value)

    @field_validator("personal_feedback", "ai_summary", mode="before")
    @classmethod
    def null_text(cls, value: Any) -> Any:
        return _null_as_empty_text(value)

    @field_validator("strengths", "weaknesses", mode="before")
    @classmethod
    def null_lists(cls, value: Any) -> Any:
        return _null_as_empty_list(value)

    @field_validator("extracted_data", mode="before")
    @classmethod
    def null_extracted_data(cls, value: Any) -> Any:
        return ExtractedFields() if value is None else value


class ComparisonResult(CamelModel):
    rank: int = Field(ge=1)
    is_recommended: bool = False
    reasoning: str = ""
    comparison_notes: str = ""
    risk_factors: List[str] = Field(default_factory=list)

    @field_validator("reasoning", "comparison_notes", mode="before")
    @classmethod
    def null_text(cls, value: Any) -> Any:
        return _null_as_empty_text(value)

    @field_validator("risk_factors", mode="before")
    @classmethod
    def null_risk_factors(cls, value: Any) -> Any:
        return _null_as_empty_list(value)


class AnalysisRequest(CamelModel):
    proposal_text: str
    space_requirements: Any = Field(default_factory=dict)
    vendor_info: Any = Field(default_factory=dict)


class VendorProposal(CamelModel):
    """A persisted analysis paired with the vendor it belongs to."""

    vendor_name: str = "Unknown"
    analysis: AnalysisResult
