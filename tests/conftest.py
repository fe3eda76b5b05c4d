from __future__ import annotations

import json
from typing import Any, List, Optional

import pytest

from rfp_analysis.llm.client import LLMRequestError

SAMPLE_PROPOSAL = """
PROPOSAL FOR WEBSITE REDESIGN PROJECT

PRICING:
- Design & Development: $30,000
- Testing & QA: $8,000
Total Project Cost: $45,000 USD

TIMELINE:
Project Duration: 7 weeks
Delivery Date: 2025-03-15

TECHNICAL APPROACH:
We will use React for the frontend, Node.js for the backend, and MongoDB for the database.

TERMS & CONDITIONS:
- Payment Terms: 30% upfront, 40% at midpoint, 30% on completion
- Warranty: 6 months post-launch support

COMPLIANCE & CERTIFICATIONS:
- ISO 9001:2015 Certified
- SOC 2 Type II Compliant
- GDPR Compliant processes
"""


class FakeChatClient:
    """Scripted stand-in for ChatCompletionClient.

    Each call pops the next item: strings are returned, exceptions raised.
    Once the script is exhausted the last item repeats.
    """

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.calls: List[dict] = []
        self.closed = False

    async def complete(self, *, prompt: str, system_prompt: str, temperature: float = 0.3, max_tokens: int = 2000) -> str:
        self.calls.append(
            {"prompt": prompt, "system_prompt": system_prompt, "temperature": temperature, "max_tokens": max_tokens}
        )
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def llm_analysis_payload(score: int = 82, extracted: Optional[dict] = None) -> dict:
    return {
        "personalFeedback": "Clear pricing and a realistic plan.",
        "overallScore": score,
        "criteriaAnalysis": [
            {"criteriaName": "Price Competitiveness", "score": 8, "feedback": "Under budget", "evidence": "$45,000"},
            {"criteriaName": "Timeline Adherence", "score": 9, "feedback": "7 weeks", "evidence": "7 weeks"},
            {"criteriaName": "Technical Capability", "score": 8, "feedback": "Matches stack", "evidence": "React"},
            {"criteriaName": "Compliance & Certifications", "score": 7, "feedback": "ISO, SOC", "evidence": "ISO 9001"},
        ],
        "aiSummary": "Strong, well priced proposal.",
        "strengths": ["Competitive price", "Matching stack"],
        "weaknesses": ["Short warranty"],
        "extractedData": extracted if extracted is not None else {},
    }


def as_reply(payload: Any, prose: bool = True) -> str:
    text = json.dumps(payload)
    if prose:
        return f"Here is the analysis you asked for:\n{text}\nLet me know if you need more."
    return text


@pytest.fixture
def sample_proposal() -> str:
    return SAMPLE_PROPOSAL


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def failing_client() -> FakeChatClient:
    return FakeChatClient(LLMRequestError("backend unavailable"))
