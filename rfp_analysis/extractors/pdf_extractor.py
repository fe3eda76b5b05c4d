from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pdfminer.high_level import extract_text
from pdfminer.pdfdocument import PDFDocument
from pdfminer.pdfpage import PDFPage
from pdfminer.pdfparser import PDFParser
from pdfminer.pdftypes import resolve1
from pdfminer.utils import decode_text

logger = logging.getLogger(__name__)


@dataclass
class PdfExtractionResult:
    text: str
    num_pages: int
    metadata: Dict[str, str] = field(default_factory=dict)
    success: bool = True
    error: Optional[str] = None


def extract_pdf_text(data: bytes) -> PdfExtractionResult:
    """Best-effort PDF text extraction; failures are reported, not raised."""

    try:
        text = extract_text(io.BytesIO(data))
        num_pages = sum(1 for _ in PDFPage.get_pages(io.BytesIO(data)))
    except Exception as exc:
        logger.error("PDF extraction error: %s", exc)
        return PdfExtractionResult(text="", num_pages=0, success=False, error=str(exc) or type(exc).__name__)

    try:
        metadata = _read_info(data)
    except Exception as exc:
        logger.warning("PDF metadata unreadable, keeping extracted text: %s", exc)
        metadata = {}

    logger.info("Extracted %s characters from %s PDF page(s)", len(text), num_pages)
    return PdfExtractionResult(text=text, num_pages=num_pages, metadata=metadata)


def _read_info(data: bytes) -> Dict[str, str]:
    parser = PDFParser(io.BytesIO(data))
    document = PDFDocument(parser)
    metadata: Dict[str, str] = {}
    for info in document.info:
        for key, value in info.items():
            metadata[str(key)] = _to_text(resolve1(value))
    return metadata


def _to_text(value: Any) -> str:
    if isinstance(value, bytes):
        return decode_text(value)
    return str(value)
