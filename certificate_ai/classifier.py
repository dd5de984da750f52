"""
Document classification module (pass 1)
Asks the model which registered certificate type the text belongs to
"""

import logging
from typing import Optional

from .llm_client import TextGenerator
from .models import ClassificationResult
from .prompts import CLASSIFICATION_CHAR_LIMIT, build_classification_prompt
from .registry import CertificateRegistry, UNKNOWN_TYPE
from .response_parser import parse_classification
from .retry import ModelRetryPolicy

logger = logging.getLogger(__name__)


class DocumentClassifier:
    """Classifies certificate text into one registered type or UNKNOWN"""

    def __init__(
        self,
        generator: TextGenerator,
        registry: CertificateRegistry,
        retry_policy: ModelRetryPolicy,
        char_limit: int = CLASSIFICATION_CHAR_LIMIT,
    ):
        self.generator = generator
        self.registry = registry
        self.retry_policy = retry_policy
        self.char_limit = char_limit

    def classify(self, text: str) -> ClassificationResult:
        """
        Classify document text

        Args:
            text: Cleaned OCR text

        Returns:
            ClassificationResult; unparseable answers, missing types and
            types outside the registry all come back as UNKNOWN

        Raises:
            ModelCallError: if every candidate model fails
        """
        prompt = build_classification_prompt(text, self.registry, self.char_limit)
        raw = self.retry_policy.run(lambda model: self.generator.generate(prompt, model))

        payload = parse_classification(raw)
        if payload is None:
            return self.unknown("Could not identify document type")

        if payload.detected_type == UNKNOWN_TYPE:
            return self.unknown(payload.reason or "Could not identify document type")

        if payload.detected_type not in self.registry:
            logger.warning("Model answered unregistered type %r", payload.detected_type)
            return self.unknown(f"Unsupported document type: {payload.detected_type}")

        logger.info("Detected type %s (confidence %.2f)", payload.detected_type, payload.confidence)
        return ClassificationResult(
            detected_type=payload.detected_type,
            confidence=payload.confidence,
            reason=payload.reason,
        )

    @staticmethod
    def unknown(reason: Optional[str] = None) -> ClassificationResult:
        return ClassificationResult(
            detected_type=UNKNOWN_TYPE,
            confidence=0.0,
            reason=reason or "Could not identify document type",
        )
