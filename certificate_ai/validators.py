"""
Validation and post-normalization of extracted data
"""

import logging
import re
from typing import Any, Dict, List, Tuple

from .dates import academic_year, to_iso
from .models import OcrResult
from .schemas import CertificateTypeSchema

logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)\b")
_ACADEMIC_YEAR = re.compile(r"^\s*(\d{4})\s*[-/–]\s*(\d{2}|\d{4})\s*$")


class FieldNormalizer:
    """Brings model-returned values onto the shapes the submission forms expect"""

    def normalize(
        self,
        fields: Dict[str, Any],
        field_confidence: Dict[str, float],
        schema: CertificateTypeSchema,
    ) -> Tuple[Dict[str, Any], Dict[str, float]]:
        """
        Normalize values per field type; null stays null

        Args:
            fields: Complete field mapping (every schema key present)
            field_confidence: Per-field confidence from the model
            schema: Certificate type the fields belong to

        Returns:
            (normalized fields, confidence for the non-null fields)
        """
        fields = dict(fields)
        confidence = dict(field_confidence)

        for spec in schema.fields:
            value = fields.get(spec.name)
            if value is None:
                continue
            if spec.type == "date":
                fields[spec.name] = to_iso(value) or value
            elif spec.type == "number":
                fields[spec.name] = _to_number(value)
            if spec.options:
                fields[spec.name] = _match_option(fields[spec.name], spec.options)

        if "academic_year" in schema.field_names:
            self._fill_academic_year(fields, confidence)

        confidence = {
            name: score for name, score in confidence.items()
            if name in fields and fields[name] is not None
        }
        return fields, confidence

    def _fill_academic_year(self, fields: Dict[str, Any], confidence: Dict[str, float]) -> None:
        current = fields.get("academic_year")
        if current is not None:
            fields["academic_year"] = _format_academic_year(current)
            return

        # Derived only from a date the model actually found
        derived = academic_year(fields["date"]) if fields.get("date") else None
        if derived:
            fields["academic_year"] = derived
            if "date" in confidence:
                confidence["academic_year"] = confidence["date"]
            logger.info("Derived academic year %s from date", derived)


def _to_number(value: Any) -> Any:
    if isinstance(value, (int, float)):
        return int(value) if float(value).is_integer() else value
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return value
    number = float(match.group(1))
    return int(number) if number.is_integer() else number


def _match_option(value: Any, options) -> Any:
    if not isinstance(value, str):
        return value
    for option in options:
        if value.strip().lower() == option.lower():
            return option
    return value


def _format_academic_year(value: Any) -> Any:
    """'2024-2025' / '2024/25' -> '2024-25'"""
    match = _ACADEMIC_YEAR.match(str(value))
    if not match:
        return value
    return f"{match.group(1)}-{match.group(2)[-2:]}"


def assess_ocr_quality(ocr: OcrResult) -> Dict[str, Any]:
    """
    Rate OCR output so the UI can warn about poor scans

    Returns:
        {isValid, issues, quality} with quality in good / fair / poor
    """
    issues: List[str] = []

    if ocr.confidence < 0.6:
        issues.append("Low OCR confidence. Image quality may be poor.")

    if ocr.word_count < 10:
        issues.append("Very little text detected. Please ensure the certificate is clearly visible.")

    if not ocr.text or len(ocr.text) < 50:
        issues.append(
            "Insufficient text extracted. This might be a scanned PDF. "
            "Please try converting it to an Image (PNG/JPG) and uploading again."
        )

    if ocr.confidence >= 0.8:
        quality = "good"
    elif ocr.confidence >= 0.6:
        quality = "fair"
    else:
        quality = "poor"

    return {
        "isValid": not issues,
        "issues": issues,
        "quality": quality,
    }
