"""
Information extraction module (pass 2)
Pulls the fields of one certificate type out of the full document text
"""

import logging

from .llm_client import TextGenerator
from .models import FieldExtractionResult
from .prompts import build_extraction_prompt
from .registry import CertificateRegistry
from .response_parser import parse_extraction
from .retry import ModelRetryPolicy
from .validators import FieldNormalizer

logger = logging.getLogger(__name__)


class InformationExtractor:
    """Extracts structured fields for a known certificate type"""

    def __init__(
        self,
        generator: TextGenerator,
        registry: CertificateRegistry,
        retry_policy: ModelRetryPolicy,
        normalizer: FieldNormalizer = None,
    ):
        self.generator = generator
        self.registry = registry
        self.retry_policy = retry_policy
        self.normalizer = normalizer or FieldNormalizer()

    def extract_fields(self, text: str, type_key: str) -> FieldExtractionResult:
        """
        Extract the schema fields of type_key from text

        Args:
            text: Full cleaned OCR text (not truncated)
            type_key: A registered certificate type

        Returns:
            FieldExtractionResult whose extracted_fields has exactly the
            schema's field names as keys

        Raises:
            UnknownCertificateTypeError: type_key is not registered
            ModelCallError: every candidate model failed
            ParseError: the model answer could not be parsed
        """
        schema = self.registry.require(type_key)
        prompt = build_extraction_prompt(text, schema)
        raw = self.retry_policy.run(lambda model: self.generator.generate(prompt, model))
        payload = parse_extraction(raw)

        # Every schema field gets a key, whatever the model returned
        fields = {
            name: payload.extracted_fields.get(name)
            for name in schema.field_names
        }
        fields, confidence = self.normalizer.normalize(fields, payload.field_confidence, schema)

        ignored = set(payload.extracted_fields) - set(schema.field_names)
        if ignored:
            logger.info("Ignoring fields outside the %s schema: %s", type_key, sorted(ignored))

        missing = [name for name in payload.missing_required if name in fields]

        found = sum(1 for value in fields.values() if value is not None)
        logger.info("Extracted %d/%d fields for %s", found, len(fields), type_key)

        return FieldExtractionResult(
            extracted_fields=fields,
            field_confidence=confidence,
            missing_required=missing,
        )
