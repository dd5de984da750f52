"""
Parsing and shape validation of raw model output
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ParseError

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence markers wherever they appear"""
    return _FENCE.sub("", text or "").strip()


def _as_confidence(value: Any) -> float:
    """
    Coerce a model-reported confidence onto 0..1

    "85%" and whole numbers such as 85 are read as percentages; any other
    out-of-range value is clamped, so 1.5 becomes 1.0.
    """
    if isinstance(value, bool):
        raise ValueError("confidence must be a number")
    percent = False
    if isinstance(value, str):
        value = value.strip()
        percent = value.endswith("%")
        value = value.rstrip("%")
    try:
        number = float(value)
    except TypeError:
        raise ValueError(f"confidence must be a number, got {type(value).__name__}")
    if not math.isfinite(number):
        raise ValueError("confidence must be finite")
    if percent or (1.0 < number <= 100.0 and number.is_integer()):
        number = number / 100.0
    return max(0.0, min(1.0, number))


class ClassificationPayload(BaseModel):
    """Expected pass-1 answer"""
    model_config = ConfigDict(extra="ignore")

    detected_type: str
    confidence: float = 0.0
    reason: str = ""

    @field_validator('detected_type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("detected_type must be a non-empty string")
        return v.strip().upper().replace(" ", "_")

    @field_validator('confidence', mode='before')
    @classmethod
    def normalize_confidence(cls, v):
        if v is None:
            return 0.0
        return _as_confidence(v)

    @field_validator('reason', mode='before')
    @classmethod
    def normalize_reason(cls, v):
        return "" if v is None else str(v)


class ExtractionPayload(BaseModel):
    """Expected pass-2 answer"""
    model_config = ConfigDict(extra="ignore")

    extracted_fields: Dict[str, Any]
    field_confidence: Dict[str, float] = Field(default_factory=dict)
    missing_required: List[str] = Field(default_factory=list)

    @field_validator('extracted_fields', mode='before')
    @classmethod
    def validate_values(cls, v):
        if not isinstance(v, dict):
            raise ValueError("extracted_fields must be an object")
        cleaned = {}
        for key, value in v.items():
            if isinstance(value, dict):
                raise ValueError(f"field {key!r} has a nested object value")
            if isinstance(value, list):
                value = ", ".join(str(item) for item in value if item is not None) or None
            elif isinstance(value, bool):
                value = "Yes" if value else "No"
            elif isinstance(value, float) and not math.isfinite(value):
                raise ValueError(f"field {key!r} is not a finite number")
            elif isinstance(value, str):
                value = value.strip()
                if not value or value.lower() in ("null", "none", "n/a"):
                    value = None
            cleaned[str(key)] = value
        return cleaned

    @field_validator('field_confidence', mode='before')
    @classmethod
    def validate_confidence(cls, v):
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("field_confidence must be an object")
        confidences = {}
        for key, value in v.items():
            try:
                confidences[str(key)] = _as_confidence(value)
            except (TypeError, ValueError):
                # Unusable per-field scores are dropped, not fatal
                continue
        return confidences

    @field_validator('missing_required', mode='before')
    @classmethod
    def validate_missing(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if not isinstance(v, list):
            raise ValueError("missing_required must be a list")
        return [str(item) for item in v if item]


def parse_json_object(raw: str) -> Optional[Dict[str, Any]]:
    """Decode model text into a dict, None when it is not a JSON object"""
    cleaned = strip_code_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Model output is not valid JSON: %s", e)
        return None
    if not isinstance(parsed, dict):
        logger.warning("Model output is JSON but not an object")
        return None
    return parsed


def parse_classification(raw: str) -> Optional[ClassificationPayload]:
    """Pass-1 parsing; any failure degrades to None"""
    parsed = parse_json_object(raw)
    if parsed is None:
        return None
    try:
        return ClassificationPayload.model_validate(parsed)
    except ValidationError as e:
        logger.warning("Classification output has the wrong shape: %s", e.errors()[0]["msg"])
        return None


def parse_extraction(raw: str) -> ExtractionPayload:
    """
    Pass-2 parsing; failures are fatal

    Raises:
        ParseError: when the output is not JSON or has the wrong shape
    """
    parsed = parse_json_object(raw)
    if parsed is None:
        raise ParseError("Failed to parse extraction results")
    try:
        return ExtractionPayload.model_validate(parsed)
    except ValidationError as e:
        raise ParseError(f"Failed to parse extraction results: {e.errors()[0]['msg']}") from e
