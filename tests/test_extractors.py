from __future__ import annotations

import io

import pytest
from PIL import Image

from rfp_analysis.extractors import (
    AttachmentText,
    attachment_kind,
    compose_proposal_text,
    extract_attachment_text,
    extract_image_text,
    extract_pdf_text,
)
from rfp_analysis.extractors import ocr_extractor, pdf_extractor


def png_bytes(mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (40, 20)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.parametrize(
    "mime_type, filename, expected",
    [
        ("application/pdf", "quote.bin", "pdf"),
        ("image/png", None, "image"),
        (None, "Quote.PDF", "pdf"),
        (None, "scan.jpeg", "image"),
        ("application/octet-stream", "scan.tiff", "image"),
        ("text/plain", "notes.txt", "other"),
        (None, None, "other"),
    ],
)
def test_attachment_kind(mime_type, filename, expected):
    assert attachment_kind(mime_type, filename) == expected


def test_pdf_garbage_is_reported_not_raised():
    result = extract_pdf_text(b"this is not a pdf")

    assert result.success is False
    assert result.text == ""
    assert result.num_pages == 0
    assert result.error


def test_image_garbage_is_reported_not_raised():
    result = extract_image_text(b"\x00\x01 not an image")

    assert result.success is False
    assert result.error


def test_image_text_is_ocr_output(monkeypatch):
    seen = {}

    def fake_image_to_string(image, lang="eng"):
        seen["mode"] = image.mode
        seen["lang"] = lang
        return "  Total: $12,000 USD\n"

    monkeypatch.setattr(ocr_extractor.pytesseract, "image_to_string", fake_image_to_string)

    result = extract_image_text(png_bytes("RGBA"))

    assert result.success is True
    assert result.text == "Total: $12,000 USD"
    assert seen == {"mode": "RGB", "lang": "eng"}


def test_ocr_failure_is_reported(monkeypatch):
    def broken(image, lang="eng"):
        raise RuntimeError("tesseract is not installed")

    monkeypatch.setattr(ocr_extractor.pytesseract, "image_to_string", broken)

    result = extract_image_text(png_bytes())

    assert result.success is False
    assert result.error == "tesseract is not installed"


def test_unsupported_attachment():
    result = extract_attachment_text(b"PK\x03\x04", "quote.docx", "application/zip")

    assert result.kind == "other"
    assert result.success is False
    assert result.error == "Unsupported file type for AI analysis"


def test_image_attachment_goes_through_ocr(monkeypatch):
    monkeypatch.setattr(ocr_extractor.pytesseract, "image_to_string", lambda image, lang="eng": "ISO 27001")

    result = extract_attachment_text(png_bytes(), "cert.png", "image/png")

    assert result == AttachmentText(filename="cert.png", kind="image", text="ISO 27001")


def test_compose_proposal_text_skips_empty_attachments():
    text = compose_proposal_text(
        "  Please find our quote attached.  ",
        [
            AttachmentText(filename="quote.pdf", kind="pdf", text="Total: $9,500"),
            AttachmentText(filename="broken.pdf", kind="pdf", success=False, error="bad xref"),
            AttachmentText(filename="cert.png", kind="image", text="ISO 9001"),
        ],
    )

    assert text == (
        "Please find our quote attached.\n\n"
        "--- Attachment: quote.pdf ---\nTotal: $9,500\n\n"
        "--- Attachment: cert.png ---\nISO 9001"
    )


def test_compose_proposal_text_without_body():
    text = compose_proposal_text("", [AttachmentText(filename="a.pdf", kind="pdf", text="Price: 100")])

    assert text == "--- Attachment: a.pdf ---\nPrice: 100"


def test_unreadable_pdf_metadata_keeps_text(monkeypatch):
    def broken_info(data):
        raise ValueError("bad /Info dictionary")

    monkeypatch.setattr(pdf_extractor, "extract_text", lambda fp: "Total: $5,000\n")
    monkeypatch.setattr(pdf_extractor.PDFPage, "get_pages", lambda fp: iter(["page 1", "page 2"]))
    monkeypatch.setattr(pdf_extractor, "_read_info", broken_info)

    result = extract_pdf_text(b"%PDF-1.4 stub")

    assert result.success is True
    assert result.text == "Total: $5,000\n"
    assert result.num_pages == 2
    assert result.metadata == {}
