from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional

import pytesseract
from PIL import Image

logger = logging.getLogger(__name__)


@dataclass
class ImageExtractionResult:
    text: str
    success: bool = True
    error: Optional[str] = None


def extract_image_text(data: bytes, lang: str = "eng") -> ImageExtractionResult:
    """OCR an image attachment (scanned quote, screenshot of a price table)."""

    try:
        with Image.open(io.BytesIO(data)) as img:
            text = _ocr_image(img, lang)
    except Exception as exc:
        logger.error("Image OCR error: %s", exc)
        return ImageExtractionResult(text="", success=False, error=str(exc) or type(exc).__name__)
    return ImageExtractionResult(text=text.strip())


def _ocr_image(image: Image.Image, lang: str) -> str:
    if image.mode not in {"L", "RGB"}:
        image = image.convert("RGB")
    return pytesseract.image_to_string(image, lang=lang)
