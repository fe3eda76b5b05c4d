from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter

from rfp_analysis.llm.invoker import InvokeOptions, LLMInvoker

from .fields import extract_fields
from .models import AnalysisRequest, AnalysisResult, CriterionAnalysis, ExtractedFields
from .prompts import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt

logger = logging.getLogger(__name__)

ANALYSIS_SCHEMA = TypeAdapter(AnalysisResult)

FALLBACK_SCORE = 50


def build_fallback_analysis(extracted: ExtractedFields) -> AnalysisResult:
    """Result used when the model could not be reached or never answered usably."""

    return AnalysisResult(
        overall_score=FALLBACK_SCORE,
        personal_feedback=(
            "Thank you for your proposal. We are currently reviewing it and will get back to you soon."
        ),
        criteria_analysis=[
            CriterionAnalysis(
                criteria_name="General Response",
                score=5,
                feedback="Proposal received and under review",
                evidence="Manual analysis required",
            )
        ],
        ai_summary="Proposal received. Automated analysis unavailable - manual review in progress.",
        strengths=["Response received", "Proposal submitted on time"],
        weaknesses=["Automated analysis unavailable"],
        extracted_data=extracted,
    )


class ProposalAnalyzer:
    """Score a single vendor proposal with the LLM, degrading to a fixed result."""

    def __init__(self, invoker: LLMInvoker, *, max_retries: int = 3, temperature: float = 0.3) -> None:
        self._invoker = invoker
        self._options = InvokeOptions(max_retries=max_retries, temperature=temperature, max_tokens=2500)

    async def analyze(self, proposal_text: str, space_requirements: Any, vendor_info: Any) -> AnalysisResult:
        extracted = extract_fields(proposal_text)
        prompt = build_analysis_prompt(proposal_text, space_requirements, vendor_info)

        try:
            analysis: AnalysisResult = await self._invoker.invoke(
                prompt,
                ANALYSIS_SYSTEM_PROMPT,
                self._options,
                schema=ANALYSIS_SCHEMA,
            )
        except Exception as exc:
            logger.error(f"Proposal analysis failed, using fallback result: {exc}", exc_info=True)
            return build_fallback_analysis(extracted)

        # Leave the cached instance untouched.
        result = analysis.model_copy(deep=True)
        result.extracted_data = extracted.merged_with(result.extracted_data)
        return result

    async def analyze_request(self, request: AnalysisRequest) -> AnalysisResult:
        return await self.analyze(request.proposal_text, request.space_requirements, request.vendor_info)
