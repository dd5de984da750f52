"""
Local OCR adapter - Tesseract via pytesseract

Used only as the image fallback when cloud OCR fails.
"""

import io
import logging
from typing import Optional

import cv2
import numpy as np
import pytesseract
from PIL import Image

from .models import OcrResult, SourceRef

logger = logging.getLogger(__name__)


class TesseractOCR:
    """Runs Tesseract on an image held in memory or on disk"""

    def __init__(self, lang: str = "eng", tesseract_cmd: Optional[str] = None, timeout: float = 60.0):
        self.lang = lang
        self.timeout = timeout
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def extract(self, source: SourceRef) -> OcrResult:
        """
        OCR an image source

        Args:
            source: Inline bytes or local path (cloud URIs are not readable here)

        Returns:
            OcrResult with mean word confidence scaled to 0..1
        """
        if source.kind == "uri":
            raise ValueError("Local OCR cannot read cloud URIs")

        image = self._load_image(source)
        preprocessed = self.preprocess(image)

        data = pytesseract.image_to_data(
            preprocessed,
            lang=self.lang,
            output_type=pytesseract.Output.DICT,
            timeout=self.timeout,
        )
        text, confidence = _assemble_text(data)
        logger.info("Tesseract extracted %d characters (confidence %.2f)", len(text), confidence)

        return OcrResult(
            success=True,
            text=text,
            confidence=confidence,
            word_count=len(text.split()),
            source="local-ocr",
        )

    def _load_image(self, source: SourceRef) -> Image.Image:
        if source.kind == "bytes":
            image = Image.open(io.BytesIO(source.data))
        else:
            image = Image.open(source.path)
        return image.convert("RGB")

    @staticmethod
    def preprocess(image: Image.Image) -> Image.Image:
        """Grayscale, upscale small scans, binarize with Otsu"""
        img_array = np.array(image)
        gray = cv2.cvtColor(img_array, cv2.COLOR_RGB2GRAY)

        height, width = gray.shape[:2]
        if width < 1000:
            gray = cv2.resize(gray, (width * 2, height * 2), interpolation=cv2.INTER_CUBIC)

        _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
        return Image.fromarray(binary)


def _assemble_text(data: dict) -> tuple:
    """Rebuild line-ordered text and mean word confidence from image_to_data output"""
    lines = {}
    confidences = []
    for i, word in enumerate(data.get("text", [])):
        word = (word or "").strip()
        if not word:
            continue
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(word)
        conf = float(data["conf"][i])
        if conf >= 0:
            confidences.append(conf)

    text = "\n".join(" ".join(words) for _, words in sorted(lines.items()))
    confidence = (sum(confidences) / len(confidences) / 100.0) if confidences else 0.0
    return text, max(0.0, min(1.0, confidence))
