"""
Configuration file for the certificate ingestion pipeline
"""

import json
import logging
import os
from typing import List, Optional

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Config:
    """Pipeline configuration"""

    # Google Cloud
    GOOGLE_CREDENTIALS: Optional[str] = os.getenv("GOOGLE_CREDENTIALS")  # service-account JSON
    GOOGLE_CLOUD_PROJECT: Optional[str] = os.getenv("GOOGLE_CLOUD_PROJECT")
    VERTEX_LOCATION: str = os.getenv("VERTEX_LOCATION", "us-central1")

    # LLM Settings
    VERTEX_MODELS: List[str] = _env_list("VERTEX_MODELS", "gemini-2.5-pro,gemini-2.5-flash")
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.1"))
    LLM_MAX_OUTPUT_TOKENS: int = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "2048"))
    RATE_LIMIT_BACKOFF_SECONDS: float = float(os.getenv("RATE_LIMIT_BACKOFF_SECONDS", "2.0"))
    CLASSIFICATION_CHAR_LIMIT: int = int(os.getenv("CLASSIFICATION_CHAR_LIMIT", "3000"))

    # Timeouts (seconds)
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
    CLOUD_OCR_TIMEOUT_SECONDS: float = float(os.getenv("CLOUD_OCR_TIMEOUT_SECONDS", "30"))
    LOCAL_OCR_TIMEOUT_SECONDS: float = float(os.getenv("LOCAL_OCR_TIMEOUT_SECONDS", "60"))

    # OCR Settings
    USE_CLOUD_OCR: bool = _env_bool("USE_CLOUD_OCR", True)
    TESSERACT_LANG: str = os.getenv("TESSERACT_LANG", "eng")
    TESSERACT_CMD: Optional[str] = os.getenv("TESSERACT_CMD")  # Custom path if needed

    # Processing Settings
    MIN_TEXT_LENGTH: int = int(os.getenv("MIN_TEXT_LENGTH", "10"))
    MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", "10"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def project_id(cls) -> Optional[str]:
        """Explicit project wins, else the project_id inside the credentials JSON"""
        if cls.GOOGLE_CLOUD_PROJECT:
            return cls.GOOGLE_CLOUD_PROJECT
        if cls.GOOGLE_CREDENTIALS:
            try:
                return json.loads(cls.GOOGLE_CREDENTIALS).get("project_id")
            except (json.JSONDecodeError, AttributeError) as e:
                logger.error("Error reading credentials: %s", e)
        return None

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration"""
        if not cls.project_id():
            logger.warning("No Google Cloud project configured (GOOGLE_CLOUD_PROJECT or GOOGLE_CREDENTIALS)")
            return False
        if not cls.VERTEX_MODELS:
            logger.warning("VERTEX_MODELS is empty")
            return False
        return True
