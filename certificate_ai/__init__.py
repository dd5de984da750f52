"""
Certificate ingestion pipeline: OCR, two-pass model classification and
field extraction for faculty achievement certificates
"""

import logging
import sys

from .errors import (
    CertificateAIError,
    ModelCallError,
    ParseError,
    RateLimitError,
    SourceError,
    UnknownCertificateTypeError,
)
from .models import (
    ClassificationResult,
    ExtractionRequest,
    FieldExtractionResult,
    NormalizedSource,
    OcrResult,
    PipelineResult,
    ReconciledAnalysis,
)
from .orchestrator import DocumentPipeline
from .registry import CertificateRegistry, UNKNOWN_TYPE, default_registry, supported_types

__version__ = "1.0.0"


def setup_logging(level="INFO") -> None:
    """Attach one stdout handler to the package logger (safe to call twice)"""
    logger = logging.getLogger(__name__)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(handler)
    logger.setLevel(level)


__all__ = [
    'CertificateAIError',
    'CertificateRegistry',
    'ClassificationResult',
    'DocumentPipeline',
    'ExtractionRequest',
    'FieldExtractionResult',
    'ModelCallError',
    'NormalizedSource',
    'OcrResult',
    'ParseError',
    'PipelineResult',
    'RateLimitError',
    'ReconciledAnalysis',
    'SourceError',
    'UNKNOWN_TYPE',
    'UnknownCertificateTypeError',
    'default_registry',
    'setup_logging',
    'supported_types',
]
