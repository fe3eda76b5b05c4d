"""Proposal evaluation: field extraction, LLM scoring and vendor ranking."""

from .analyzer import ProposalAnalyzer, build_fallback_analysis
from .comparator import ProposalComparator, build_fallback_ranking
from .fields import extract_fields
from .models import (
    AnalysisRequest,
    AnalysisResult,
    ComparisonResult,
    CriterionAnalysis,
    ExtractedFields,
    VendorProposal,
)

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "ComparisonResult",
    "CriterionAnalysis",
    "ExtractedFields",
    "ProposalAnalyzer",
    "ProposalComparator",
    "VendorProposal",
    "build_fallback_analysis",
    "build_fallback_ranking",
    "extract_fields",
]
