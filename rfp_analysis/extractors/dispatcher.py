"""Route vendor reply attachments to the right text extractor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .ocr_extractor import extract_image_text
from .pdf_extractor import extract_pdf_text

logger = logging.getLogger(__name__)

_IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".gif", ".webp"}


@dataclass
class AttachmentText:
    filename: str
    kind: str
    text: str = ""
    success: bool = True
    error: Optional[str] = None


def attachment_kind(mime_type: Optional[str], filename: Optional[str] = None) -> str:
    """Return ``pdf``, ``image`` or ``other``."""

    if mime_type:
        if mime_type == "application/pdf":
            return "pdf"
        if mime_type.startswith("image/"):
            return "image"
    if filename:
        suffix = Path(filename).suffix.lower()
        if suffix == ".pdf":
            return "pdf"
        if suffix in _IMAGE_SUFFIXES:
            return "image"
    return "other"


def extract_attachment_text(data: bytes, filename: str, mime_type: Optional[str] = None) -> AttachmentText:
    kind = attachment_kind(mime_type, filename)
    logger.info("Extracting attachment: filename=%s kind=%s size=%s", filename, kind, len(data))

    if kind == "pdf":
        pdf = extract_pdf_text(data)
        return AttachmentText(filename=filename, kind=kind, text=pdf.text.strip(), success=pdf.success, error=pdf.error)
    if kind == "image":
        image = extract_image_text(data)
        return AttachmentText(filename=filename, kind=kind, text=image.text, success=image.success, error=image.error)

    return AttachmentText(
        filename=filename,
        kind=kind,
        success=False,
        error="Unsupported file type for AI analysis",
    )


def compose_proposal_text(body: str, attachments: Iterable[AttachmentText]) -> str:
    """Append the text of each readable attachment to the reply body."""

    parts = [body.strip()] if body and body.strip() else []
    for attachment in attachments:
        if not attachment.text:
            continue
        parts.append(f"--- Attachment: {attachment.filename} ---\n{attachment.text}")
    return "\n\n".join(parts)
