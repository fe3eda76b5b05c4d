"""Facade used by request handlers: analyze, compare and inspect the cache."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from rfp_analysis.common.cache import NullResponseCache, ResponseCache
from rfp_analysis.common.llm_retry import SleepFunc
from rfp_analysis.core.config import Settings, get_settings
from rfp_analysis.extractors import AttachmentText, compose_proposal_text
from rfp_analysis.llm import ChatCompletionClient, LLMInvoker
from rfp_analysis.proposals import (
    AnalysisResult,
    ComparisonResult,
    ExtractedFields,
    ProposalAnalyzer,
    ProposalComparator,
    VendorProposal,
    extract_fields,
)

logger = logging.getLogger(__name__)


class ProposalAnalysisService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        client: Optional[ChatCompletionClient] = None,
        cache: Optional[Union[ResponseCache, NullResponseCache]] = None,
        sleep: Optional[SleepFunc] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client or ChatCompletionClient(self._settings)
        self._cache = (
            cache
            if cache is not None
            else ResponseCache(ttl=self._settings.cache_ttl_seconds, maxsize=self._settings.cache_maxsize)
        )
        self._invoker = LLMInvoker(self._client, self._cache, sleep=sleep)
        self.analyzer = ProposalAnalyzer(
            self._invoker,
            max_retries=self._settings.llm_max_retries,
            temperature=self._settings.llm_temperature,
        )
        self.comparator = ProposalComparator(
            self._invoker,
            max_retries=self._settings.llm_max_retries,
            temperature=self._settings.llm_temperature,
            max_tokens=self._settings.llm_max_tokens,
        )

    async def analyze(self, proposal_text: str, space_requirements: Any, vendor_info: Any) -> AnalysisResult:
        return await self.analyzer.analyze(proposal_text, space_requirements, vendor_info)

    async def analyze_with_attachments(
        self,
        body: str,
        attachments: Iterable[AttachmentText],
        space_requirements: Any,
        vendor_info: Any,
    ) -> AnalysisResult:
        attachments = list(attachments)
        for attachment in attachments:
            if not attachment.success:
                logger.warning(f"Attachment {attachment.filename} skipped: {attachment.error}")
        text = compose_proposal_text(body, attachments)
        return await self.analyzer.analyze(text, space_requirements, vendor_info)

    async def compare(
        self,
        proposals: Sequence[VendorProposal],
        space_requirements: Any,
    ) -> List[Tuple[VendorProposal, ComparisonResult]]:
        """Rank the proposals of one space, best score first.

        Proposals are ordered by ``overall_score`` descending (ties keep their
        input order) before the comparison, so the fallback ranking follows the
        scores. Each pair holds a proposal and its ranking, in that order.
        """
        ordered = sorted(proposals, key=lambda proposal: proposal.analysis.overall_score, reverse=True)
        ranking = await self.comparator.compare(ordered, space_requirements)
        return list(zip(ordered, ranking))

    def extract_fields(self, text: str) -> ExtractedFields:
        return extract_fields(text)

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> Dict[str, Any]:
        return self._cache.stats()

    async def aclose(self) -> None:
        await self._client.aclose()


@lru_cache()
def get_service() -> ProposalAnalysisService:
    """Return the process-wide service built from environment settings."""

    return ProposalAnalysisService()
