from __future__ import annotations

import logging
from typing import Any, List, Sequence

from pydantic import TypeAdapter

from rfp_analysis.llm.client import LLMResponseFormatError
from rfp_analysis.llm.invoker import InvokeOptions, LLMInvoker

from .models import ComparisonResult, VendorProposal
from .prompts import COMPARISON_SYSTEM_PROMPT, build_comparison_prompt, summarize_for_comparison

logger = logging.getLogger(__name__)

COMPARISON_SCHEMA = TypeAdapter(List[ComparisonResult])

MAX_RECOMMENDED = 2


def build_fallback_ranking(count: int) -> List[ComparisonResult]:
    """Rank proposals in the order given, recommending only the first."""

    return [
        ComparisonResult(
            rank=index + 1,
            is_recommended=index == 0,
            reasoning="Highest overall score" if index == 0 else "Lower score than top candidate",
            comparison_notes="Manual review recommended",
            risk_factors=[],
        )
        for index in range(count)
    ]


def validate_ranking(ranking: Sequence[ComparisonResult], expected: int) -> None:
    """Reject rankings that are not a permutation of ``1..expected``."""

    if len(ranking) != expected:
        raise LLMResponseFormatError(f"Expected {expected} rankings, got {len(ranking)}")
    ranks = sorted(item.rank for item in ranking)
    if ranks != list(range(1, expected + 1)):
        raise LLMResponseFormatError(f"Ranks are not a permutation of 1..{expected}: {ranks}")
    recommended = sum(1 for item in ranking if item.is_recommended)
    if recommended > MAX_RECOMMENDED:
        raise LLMResponseFormatError(f"{recommended} proposals marked as recommended")


class ProposalComparator:
    """Rank the proposals of one space against each other."""

    def __init__(
        self,
        invoker: LLMInvoker,
        *,
        max_retries: int = 3,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> None:
        self._invoker = invoker
        self._options = InvokeOptions(max_retries=max_retries, temperature=temperature, max_tokens=max_tokens)

    async def compare(self, proposals: Sequence[VendorProposal], space_requirements: Any) -> List[ComparisonResult]:
        if not proposals:
            return []

        summaries = [
            summarize_for_comparison(index, proposal.vendor_name, proposal.analysis)
            for index, proposal in enumerate(proposals)
        ]
        prompt = build_comparison_prompt(summaries, space_requirements)

        try:
            ranking: List[ComparisonResult] = await self._invoker.invoke(
                prompt,
                COMPARISON_SYSTEM_PROMPT,
                self._options,
                schema=COMPARISON_SCHEMA,
                check=lambda value: validate_ranking(value, len(proposals)),
            )
        except Exception as exc:
            logger.error(f"Comparison analysis failed, using fallback ranking: {exc}", exc_info=True)
            return build_fallback_ranking(len(proposals))

        return [item.model_copy(deep=True) for item in ranking]
