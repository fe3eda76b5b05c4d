from __future__ import annotations

import pytest
from conftest import FakeChatClient, FakeClock, as_reply

from rfp_analysis.common.cache import ResponseCache
from rfp_analysis.llm.invoker import LLMInvoker
from rfp_analysis.proposals.analyzer import build_fallback_analysis
from rfp_analysis.proposals.comparator import ProposalComparator, validate_ranking
from rfp_analysis.proposals.fields import extract_fields
from rfp_analysis.proposals.models import ComparisonResult, VendorProposal
from rfp_analysis.proposals.prompts import COMPARISON_SYSTEM_PROMPT
from rfp_analysis.llm.client import LLMResponseFormatError

REQUIREMENTS = {"name": "Website Redesign", "budget": 50000}


def make_proposals(count: int):
    proposals = []
    for index in range(count):
        analysis = build_fallback_analysis(extract_fields(f"Total: ${(index + 1) * 10_000}"))
        analysis = analysis.model_copy(update={"overall_score": 90 - index * 10, "ai_summary": f"Vendor {index}"})
        proposals.append(VendorProposal(vendor_name=f"Vendor {index}", analysis=analysis))
    return proposals


def ranking_payload(ranks, recommended=(1,)):
    return [
        {
            "rank": rank,
            "isRecommended": rank in recommended,
            "reasoning": f"Ranked {rank}",
            "comparisonNotes": "notes",
            "riskFactors": ["risk"] if rank > 1 else [],
        }
        for rank in ranks
    ]


def make_comparator(client, sleep_recorder, cache=None):
    return ProposalComparator(LLMInvoker(client, cache or ResponseCache(), sleep=sleep_recorder))


@pytest.mark.asyncio
async def test_model_ranking_is_returned_in_input_order(sleep_recorder):
    client = FakeChatClient(as_reply(ranking_payload([2, 1, 3], recommended=(1,))))
    comparator = make_comparator(client, sleep_recorder)

    results = await comparator.compare(make_proposals(3), REQUIREMENTS)

    assert [r.rank for r in results] == [2, 1, 3]
    assert [r.is_recommended for r in results] == [False, True, False]
    assert results[0].risk_factors == ["risk"]
    assert client.calls[0]["system_prompt"] == COMPARISON_SYSTEM_PROMPT
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_prompt_contains_vendor_summaries(sleep_recorder):
    client = FakeChatClient(as_reply(ranking_payload([1, 2])))
    comparator = make_comparator(client, sleep_recorder)

    await comparator.compare(make_proposals(2), REQUIREMENTS)

    prompt = client.calls[0]["prompt"]
    assert '"vendor": "Vendor 1"' in prompt
    assert '"score": 80' in prompt
    assert '"total": 20000.0' in prompt
    assert '"budget": 50000' in prompt


@pytest.mark.asyncio
async def test_backend_failure_falls_back_to_input_order(failing_client, sleep_recorder):
    comparator = make_comparator(failing_client, sleep_recorder)

    results = await comparator.compare(make_proposals(4), REQUIREMENTS)

    assert [r.rank for r in results] == [1, 2, 3, 4]
    assert [r.is_recommended for r in results] == [True, False, False, False]
    assert results[0].reasoning == "Highest overall score"
    assert results[1].reasoning == "Lower score than top candidate"
    assert all(r.comparison_notes == "Manual review recommended" for r in results)
    assert all(r.risk_factors == [] for r in results)


@pytest.mark.asyncio
async def test_wrong_number_of_rankings_falls_back(sleep_recorder):
    client = FakeChatClient(as_reply(ranking_payload([1, 2])))
    comparator = make_comparator(client, sleep_recorder)

    results = await comparator.compare(make_proposals(3), REQUIREMENTS)

    assert [r.rank for r in results] == [1, 2, 3]
    assert results[2].comparison_notes == "Manual review recommended"
    assert len(client.calls) == 3


@pytest.mark.asyncio
async def test_duplicate_ranks_are_retried(sleep_recorder):
    client = FakeChatClient(as_reply(ranking_payload([1, 1])), as_reply(ranking_payload([2, 1], recommended=(1,))))
    comparator = make_comparator(client, sleep_recorder)

    results = await comparator.compare(make_proposals(2), REQUIREMENTS)

    assert [r.rank for r in results] == [2, 1]
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_non_array_answer_falls_back(sleep_recorder):
    client = FakeChatClient(as_reply({"rank": 1}))
    comparator = make_comparator(client, sleep_recorder)

    results = await comparator.compare(make_proposals(2), REQUIREMENTS)

    assert [r.rank for r in results] == [1, 2]


@pytest.mark.asyncio
async def test_empty_input_skips_backend(failing_client, sleep_recorder):
    comparator = make_comparator(failing_client, sleep_recorder)

    assert await comparator.compare([], REQUIREMENTS) == []
    assert failing_client.calls == []


@pytest.mark.asyncio
async def test_second_compare_within_ttl_hits_cache(sleep_recorder):
    clock = FakeClock()
    client = FakeChatClient(as_reply(ranking_payload([1, 2])))
    comparator = make_comparator(client, sleep_recorder, cache=ResponseCache(timer=clock))
    proposals = make_proposals(2)

    first = await comparator.compare(proposals, REQUIREMENTS)
    clock.advance(60)
    second = await comparator.compare(proposals, REQUIREMENTS)

    assert first == second
    assert len(client.calls) == 1


def test_validate_ranking_rejects_too_many_recommendations():
    ranking = [ComparisonResult(rank=i, is_recommended=True) for i in (1, 2, 3)]

    with pytest.raises(LLMResponseFormatError):
        validate_ranking(ranking, 3)


def test_validate_ranking_accepts_permutation():
    ranking = [ComparisonResult(rank=r, is_recommended=r <= 2) for r in (3, 1, 2)]

    validate_ranking(ranking, 3)


@pytest.mark.asyncio
async def test_caller_edits_do_not_leak_into_cached_ranking(sleep_recorder):
    client = FakeChatClient(as_reply(ranking_payload([1, 2])))
    comparator = make_comparator(client, sleep_recorder)
    proposals = make_proposals(2)

    first = await comparator.compare(proposals, REQUIREMENTS)
    first[1].risk_factors.append("Edited by reviewer")
    first[0].is_recommended = False
    second = await comparator.compare(proposals, REQUIREMENTS)

    assert len(client.calls) == 1
    assert second[1].risk_factors == ["risk"]
    assert second[0].is_recommended is True


@pytest.mark.asyncio
async def test_null_fields_in_ranking_are_accepted(sleep_recorder):
    payload = ranking_payload([1, 2])
    payload[1]["riskFactors"] = None
    payload[1]["comparisonNotes"] = None
    client = FakeChatClient(as_reply(payload))
    comparator = make_comparator(client, sleep_recorder)

    results = await comparator.compare(make_proposals(2), REQUIREMENTS)

    assert len(client.calls) == 1
    assert results[1].risk_factors == []
    assert results[1].comparison_notes == ""
    assert results[1].reasoning == "Ranked 2"
