"""Prompt templates for proposal evaluation and vendor comparison."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .models import AnalysisResult

PROPOSAL_CHAR_LIMIT = 4000
TRUNCATION_MARKER = "...(truncated)"

CRITERIA = [
    "Price Competitiveness",
    "Timeline Adherence",
    "Technical Capability",
    "Compliance & Certifications",
]

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert RFP evaluator with deep knowledge of procurement, vendor assessment, and proposal analysis.\n"
    "You provide detailed, objective analysis with specific evidence from proposals.\n"
    "Always respond with valid JSON only, no additional text."
)

COMPARISON_SYSTEM_PROMPT = (
    "You are an expert procurement advisor who compares vendor proposals objectively.\n"
    "You provide clear rankings with specific reasoning based on evidence.\n"
    "Always respond with valid JSON array only, no additional text."
)

_CRITERION_HINTS = {
    "Price Competitiveness": ("detailed feedback with specific numbers", "direct quote from proposal"),
    "Timeline Adherence": ("detailed feedback", "direct quote"),
    "Technical Capability": ("detailed feedback", "direct quote"),
    "Compliance & Certifications": ("detailed feedback", "direct quote"),
}


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def truncate_proposal(text: str, limit: int = PROPOSAL_CHAR_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def _criteria_template() -> str:
    blocks = []
    for name in CRITERIA:
        feedback, evidence = _CRITERION_HINTS[name]
        blocks.append(
            "    {\n"
            f'      "criteriaName": "{name}",\n'
            '      "score": <0-10>,\n'
            f'      "feedback": "{feedback}",\n'
            f'      "evidence": "{evidence}"\n'
            "    }"
        )
    return ",\n".join(blocks)


def build_analysis_prompt(proposal_text: str, space_requirements: Any, vendor_info: Any) -> str:
    return f"""Analyze this vendor proposal comprehensively.

SPACE REQUIREMENTS:
{_dump(space_requirements)}

VENDOR INFORMATION:
{_dump(vendor_info)}

PROPOSAL CONTENT:
{truncate_proposal(proposal_text)}

Provide a detailed analysis in this EXACT JSON format:
{{
  "personalFeedback": "A personalized message to this vendor about their proposal - be specific and constructive",
  "overallScore": <0-100>,
  "criteriaAnalysis": [
{_criteria_template()}
  ],
  "aiSummary": "brief 2-3 sentence overall summary",
  "strengths": ["specific strength 1", "specific strength 2", "specific strength 3"],
  "weaknesses": ["specific weakness 1", "specific weakness 2"],
  "extractedData": {{
    "pricing": {{
      "total": <number>,
      "currency": "USD",
      "breakdown": [{{"item": "string", "amount": <number>}}]
    }},
    "timeline": {{
      "deliveryDate": "YYYY-MM-DD",
      "leadTime": "X weeks/months"
    }},
    "terms": {{
      "paymentTerms": "string",
      "warranty": "string"
    }},
    "compliance": {{
      "certifications": ["cert1", "cert2"],
      "standards": ["standard1"]
    }}
  }}
}}

Respond ONLY with the JSON, no other text."""


def summarize_for_comparison(index: int, vendor_name: str, analysis: AnalysisResult) -> Dict[str, Any]:
    extracted = analysis.extracted_data
    return {
        "index": index,
        "vendor": vendor_name or "Unknown",
        "score": analysis.overall_score,
        "summary": analysis.ai_summary or "No summary",
        "pricing": extracted.pricing.to_json() if extracted.pricing else None,
        "timeline": extracted.timeline.to_json() if extracted.timeline else None,
        "strengths": list(analysis.strengths),
        "weaknesses": list(analysis.weaknesses),
    }


def build_comparison_prompt(summaries: List[Dict[str, Any]], space_requirements: Any) -> str:
    return f"""Compare these vendor proposals and provide rankings.

REQUIREMENTS:
{_dump(space_requirements)}

PROPOSALS:
{_dump(summaries)}

Provide recommendations in this EXACT JSON format, one entry per proposal in the same order as PROPOSALS:
[
  {{
    "rank": 1,
    "isRecommended": true,
    "reasoning": "Specific reasons why this vendor is ranked #1 with evidence",
    "comparisonNotes": "How this vendor compares to others with specific metrics",
    "riskFactors": ["specific risk 1", "specific risk 2"]
  }},
  {{
    "rank": 2,
    "isRecommended": false,
    "reasoning": "Specific reasons for this ranking",
    "comparisonNotes": "Comparison to top vendor",
    "riskFactors": ["risk 1"]
  }}
]

Rank from best (1) to worst. Mark only top 1-2 as recommended.
Respond ONLY with the JSON array, no other text."""
