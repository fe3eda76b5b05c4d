"""Command line entry point: extract fields, analyze or compare proposals."""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

from pydantic import TypeAdapter

from rfp_analysis.core.config import get_settings
from rfp_analysis.core.log import configure_logging
from rfp_analysis.extractors import extract_attachment_text
from rfp_analysis.proposals import VendorProposal, extract_fields
from rfp_analysis.service import ProposalAnalysisService

_VENDOR_LIST = TypeAdapter(List[VendorProposal])


def _load_json(path: Optional[str]) -> Any:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _print(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rfp-analysis", description="Vendor proposal analysis")
    parser.add_argument("--log-level", default=None, help="Override RFP_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Regex field extraction only, no LLM call")
    extract.add_argument("file", help="Proposal text file")

    analyze = sub.add_parser("analyze", help="Score one proposal")
    analyze.add_argument("file", help="Proposal text file (email body)")
    analyze.add_argument("--requirements", help="JSON file with the space requirements")
    analyze.add_argument("--vendor", help="JSON file with vendor name/email/company")
    analyze.add_argument("--attachment", action="append", default=[], help="PDF or image attachment")

    compare = sub.add_parser("compare", help="Rank analysed proposals of one space")
    compare.add_argument("analyses", help='JSON list of {"vendorName": ..., "analysis": {...}}')
    compare.add_argument("--requirements", help="JSON file with the space requirements")
    return parser


async def _analyze(service: ProposalAnalysisService, args: argparse.Namespace) -> Any:
    body = Path(args.file).read_text(encoding="utf-8")
    attachments = []
    for path in args.attachment:
        mime_type, _ = mimetypes.guess_type(path)
        attachments.append(extract_attachment_text(Path(path).read_bytes(), Path(path).name, mime_type))
    result = await service.analyze_with_attachments(
        body,
        attachments,
        _load_json(args.requirements),
        _load_json(args.vendor),
    )
    return result.to_json()


async def _compare(service: ProposalAnalysisService, args: argparse.Namespace) -> Any:
    proposals = _VENDOR_LIST.validate_python(_load_json(args.analyses))
    ranking = await service.compare(proposals, _load_json(args.requirements))
    return [{"vendorName": proposal.vendor_name, **item.to_json()} for proposal, item in ranking]


async def _run(args: argparse.Namespace) -> Any:
    service = ProposalAnalysisService()
    try:
        if args.command == "analyze":
            return await _analyze(service, args)
        return await _compare(service, args)
    finally:
        await service.aclose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)

    if args.command == "extract":
        text = Path(args.file).read_text(encoding="utf-8")
        _print(extract_fields(text).to_json())
        return 0

    _print(asyncio.run(_run(args)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
