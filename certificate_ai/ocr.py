"""
Text extraction module
Cloud OCR first, local OCR as fallback for images only
"""

import logging
import re
from typing import Optional

from .models import NormalizedSource, OcrResult

logger = logging.getLogger(__name__)

# Characters kept besides word characters and whitespace
_DISALLOWED_CHARS = re.compile(r"[^\w\s\-.,:/()@#&]")
_WHITESPACE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """
    Normalize OCR output before it is sent to the model

    Drops characters outside the certificate allow-list, then collapses
    every whitespace run (blank lines included) to a single space.
    Idempotent: clean_text(clean_text(t)) == clean_text(t).
    """
    if not text:
        return ""
    text = _DISALLOWED_CHARS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


class TextExtractor:
    """Extracts text from a normalized source with a cloud/local strategy"""

    def __init__(self, cloud_ocr=None, local_ocr=None, min_text_length: int = 10, use_cloud: bool = True):
        """
        Args:
            cloud_ocr: Object with extract_image(source) and extract_pdf(source)
            local_ocr: Object with extract(source); used for images only
            min_text_length: Cloud output this short or shorter counts as a failure
            use_cloud: Skip the cloud step entirely when False
        """
        self.cloud_ocr = cloud_ocr
        self.local_ocr = local_ocr
        self.min_text_length = min_text_length
        self.use_cloud = use_cloud and cloud_ocr is not None

    def extract(self, source: NormalizedSource) -> OcrResult:
        """
        Main extraction method - never raises

        Args:
            source: Output of the source normalizer

        Returns:
            OcrResult; callers must check success
        """
        cloud_error = "cloud OCR disabled"

        # STEP 1: cloud OCR
        if self.use_cloud:
            result, cloud_error = self._try_cloud(source)
            if result is not None:
                result.text = clean_text(result.text)
                return result

        # STEP 2: no local fallback for PDFs
        if source.is_pdf:
            logger.warning("PDF OCR failed (%s); local fallback disabled for PDFs", cloud_error)
            return OcrResult.failure(f"PDF processing failed: {cloud_error}. Fallback disabled for PDFs.")

        # STEP 3: local OCR for images
        if not source.has_local_copy:
            logger.warning("Cloud OCR failed and only a cloud URI is available")
            return OcrResult.failure("OCR failed and fallback unavailable for remote file.")

        if self.local_ocr is None:
            return OcrResult.failure(f"OCR failed: {cloud_error}. No local OCR engine configured.")

        logger.info("Using local OCR fallback for %r", source.original_filename)
        try:
            result = self.local_ocr.extract(source.source)
        except Exception as e:
            logger.warning("Local OCR failed: %s", e)
            return OcrResult.failure(f"Local OCR failed: {e}")

        if result.success:
            result.text = clean_text(result.text)
        return result

    def _try_cloud(self, source: NormalizedSource):
        """Returns (result, None) on usable output, else (None, reason)"""
        try:
            if source.is_pdf:
                result = self.cloud_ocr.extract_pdf(source.source)
            else:
                result = self.cloud_ocr.extract_image(source.source)
        except Exception as e:
            logger.warning("Cloud OCR failed: %s", e)
            return None, str(e) or type(e).__name__

        if result.success and len(result.text or "") > self.min_text_length:
            logger.info("Cloud OCR succeeded (%d characters)", len(result.text))
            return result, None

        logger.warning("Cloud OCR returned insufficient text")
        return None, result.error or "insufficient text"


def is_usable_text(text: Optional[str], min_length: int = 10) -> bool:
    """Near-empty OCR output is treated as a failure even when the engine succeeded"""
    return bool(text) and len(text.strip()) >= min_length
