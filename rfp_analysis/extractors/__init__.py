"""Text extraction for proposal attachments."""

from .dispatcher import AttachmentText, attachment_kind, compose_proposal_text, extract_attachment_text
from .ocr_extractor import ImageExtractionResult, extract_image_text
from .pdf_extractor import PdfExtractionResult, extract_pdf_text

__all__ = [
    "AttachmentText",
    "ImageExtractionResult",
    "PdfExtractionResult",
    "attachment_kind",
    "compose_proposal_text",
    "extract_attachment_text",
    "extract_image_text",
    "extract_pdf_text",
]
