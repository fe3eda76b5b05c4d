"""Regex based extraction of commercial fields from vendor proposal text.

Every extractor is best effort: a pattern that does not match leaves its
section as ``None``. ``extract_fields`` never raises for string input.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .models import Compliance, ExtractedFields, Pricing, Technical, Terms, Timeline

_AMOUNT = r"([0-9][0-9,]*(?:\.[0-9]{2})?)"
_CURRENCY_SUFFIX = re.compile(r"\s*(USD|EUR|GBP|CAD|AUD|INR)\b")
DEFAULT_CURRENCY = "USD"

# Tried in order, first match wins.
PRICE_PATTERNS = [
    re.compile(r"(?:total|price|cost)[:\s]+\$?" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\$" + _AMOUNT),
]

DATE_PATTERNS = [
    re.compile(r"(?:delivery|completion|deadline)[:\s]+(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})", re.IGNORECASE),
    re.compile(r"(\d{4}-\d{2}-\d{2})"),
    re.compile(r"(\d{1,2}/\d{1,2}/\d{4})"),
]

DURATION_PATTERN = re.compile(r"(\d+)\s*(weeks?|months?|days?)", re.IGNORECASE)
PAYMENT_PATTERN = re.compile(r"payment[:\s]+([^.\n]+)", re.IGNORECASE)
WARRANTY_PATTERN = re.compile(r"warranty[:\s]+([^.\n]+)", re.IGNORECASE)

CERTIFICATION_PATTERNS = [
    re.compile(r"ISO\s*\d+", re.IGNORECASE),
    re.compile(r"SOC\s*\d+", re.IGNORECASE),
    re.compile(r"GDPR", re.IGNORECASE),
    re.compile(r"HIPAA", re.IGNORECASE),
]

TECH_KEYWORDS = [
    "React",
    "Angular",
    "Vue",
    "Node.js",
    "Python",
    "Java",
    "MongoDB",
    "PostgreSQL",
    "MySQL",
    "AWS",
    "Azure",
    "GCP",
    "Docker",
    "Kubernetes",
    "TypeScript",
    "JavaScript",
]


def extract_fields(text: str) -> ExtractedFields:
    """Pull pricing, timeline, terms, certifications and technologies out of ``text``."""

    if not text:
        return ExtractedFields()

    timeline = extract_timeline(text)
    return ExtractedFields(
        pricing=extract_pricing(text),
        timeline=timeline,
        terms=extract_terms(text),
        compliance=extract_compliance(text),
        technical=extract_technical(text),
    )


def extract_pricing(text: str) -> Optional[Pricing]:
    for pattern in PRICE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        try:
            total = float(match.group(1).replace(",", ""))
        except ValueError:
            continue
        suffix = _CURRENCY_SUFFIX.match(text, match.end())
        currency = suffix.group(1).upper() if suffix else DEFAULT_CURRENCY
        return Pricing(total=total, currency=currency)
    return None


def extract_timeline(text: str) -> Optional[Timeline]:
    timeline: Optional[Timeline] = None
    for pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            timeline = Timeline(delivery_date=match.group(1))
            break

    # A duration on its own is not enough to report a timeline.
    if timeline is not None:
        duration = DURATION_PATTERN.search(text)
        if duration:
            timeline.lead_time = f"{duration.group(1)} {duration.group(2)}"
    return timeline


def extract_terms(text: str) -> Optional[Terms]:
    payment = PAYMENT_PATTERN.search(text)
    warranty = WARRANTY_PATTERN.search(text)
    payment_terms = payment.group(1).strip() if payment else None
    warranty_text = warranty.group(1).strip() if warranty else None
    if not payment_terms and not warranty_text:
        return None
    return Terms(payment_terms=payment_terms or None, warranty=warranty_text or None)


def extract_compliance(text: str) -> Optional[Compliance]:
    found: List[str] = []
    for pattern in CERTIFICATION_PATTERNS:
        found.extend(pattern.findall(text))
    certifications = _dedupe(found)
    if not certifications:
        return None
    return Compliance(certifications=certifications)


def extract_technical(text: str) -> Optional[Technical]:
    technologies = _dedupe(keyword for keyword in TECH_KEYWORDS if keyword in text)
    if not technologies:
        return None
    return Technical(technologies=technologies)


def _dedupe(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered
