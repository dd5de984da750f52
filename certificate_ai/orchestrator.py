"""
Main orchestrator for the certificate ingestion pipeline
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .classifier import DocumentClassifier
from .errors import ModelCallError, ParseError, make_error
from .extractor import InformationExtractor
from .llm_client import TextGenerator, VertexGeminiClient
from .models import ExtractionRequest, PipelineResult, ReconciledAnalysis
from .normalizer import SourceNormalizer
from .ocr import TextExtractor, is_usable_text
from .reconciler import Reconciler
from .registry import CertificateRegistry, default_registry
from .retry import ModelRetryPolicy
from .tesseract_ocr import TesseractOCR
from .validators import assess_ocr_quality
from .vision_ocr import CloudVisionOCR

logger = logging.getLogger(__name__)

UNRECOGNIZED_WARNING = (
    "Document type could not be confidently identified. "
    "Please review and select the correct type."
)


class DocumentPipeline:
    """
    Certificate ingestion pipeline

    Flow (strictly sequential per upload):
    1. Normalize source
    2. Extract text (cloud OCR, local OCR fallback for images)
    3. Classify (pass 1) - UNKNOWN stops here
    4. Extract fields (pass 2)
    5. Reconcile
    """

    def __init__(
        self,
        text_extractor: TextExtractor,
        classifier: DocumentClassifier,
        extractor: InformationExtractor,
        registry: CertificateRegistry,
        normalizer: Optional[SourceNormalizer] = None,
        reconciler: Optional[Reconciler] = None,
        min_text_length: int = 10,
    ):
        self.text_extractor = text_extractor
        self.classifier = classifier
        self.extractor = extractor
        self.registry = registry
        self.normalizer = normalizer or SourceNormalizer()
        self.reconciler = reconciler or Reconciler()
        self.min_text_length = min_text_length

    @classmethod
    def build(
        cls,
        generator: TextGenerator,
        retry_policy: ModelRetryPolicy,
        cloud_ocr=None,
        local_ocr=None,
        registry: Optional[CertificateRegistry] = None,
        use_cloud_ocr: bool = True,
        min_text_length: int = 10,
        classification_char_limit: int = 3000,
    ) -> "DocumentPipeline":
        """Wire the stages around the given collaborators"""
        registry = registry or default_registry()
        return cls(
            text_extractor=TextExtractor(
                cloud_ocr=cloud_ocr,
                local_ocr=local_ocr,
                min_text_length=min_text_length,
                use_cloud=use_cloud_ocr,
            ),
            classifier=DocumentClassifier(generator, registry, retry_policy, classification_char_limit),
            extractor=InformationExtractor(generator, registry, retry_policy),
            registry=registry,
            min_text_length=min_text_length,
        )

    @classmethod
    def from_config(cls, config, registry: Optional[CertificateRegistry] = None) -> "DocumentPipeline":
        """
        Production wiring: Vision + Tesseract + Gemini on Vertex AI

        Args:
            config: Object exposing the Config attributes
            registry: Certificate types (defaults to the built-in ones)
        """
        generator = VertexGeminiClient(
            project=config.project_id(),
            location=config.VERTEX_LOCATION,
            credentials_json=config.GOOGLE_CREDENTIALS,
            temperature=config.LLM_TEMPERATURE,
            max_output_tokens=config.LLM_MAX_OUTPUT_TOKENS,
            timeout=config.LLM_TIMEOUT_SECONDS,
        )
        retry_policy = ModelRetryPolicy.from_models(
            config.VERTEX_MODELS,
            backoff_seconds=config.RATE_LIMIT_BACKOFF_SECONDS,
        )
        return cls.build(
            generator=generator,
            retry_policy=retry_policy,
            cloud_ocr=CloudVisionOCR(
                credentials_json=config.GOOGLE_CREDENTIALS,
                timeout=config.CLOUD_OCR_TIMEOUT_SECONDS,
            ),
            local_ocr=TesseractOCR(
                lang=config.TESSERACT_LANG,
                tesseract_cmd=config.TESSERACT_CMD,
                timeout=config.LOCAL_OCR_TIMEOUT_SECONDS,
            ),
            registry=registry,
            use_cloud_ocr=config.USE_CLOUD_OCR,
            min_text_length=config.MIN_TEXT_LENGTH,
            classification_char_limit=config.CLASSIFICATION_CHAR_LIMIT,
        )

    def analyze_text(self, text: str) -> ReconciledAnalysis:
        """
        Run both model passes on already extracted text

        Raises:
            ModelCallError: a pass exhausted every model candidate
            ParseError: the extraction answer could not be parsed
        """
        classification = self.classifier.classify(text)
        if classification.is_unknown:
            logger.info("Document type not recognized, skipping field extraction")
            return self.reconciler.reconcile(classification)

        schema = self.registry.require(classification.detected_type)
        field_result = self.extractor.extract_fields(text, classification.detected_type)
        return self.reconciler.reconcile(classification, field_result, schema)

    def process(self, request: ExtractionRequest) -> PipelineResult:
        """
        Process one uploaded document through the full pipeline

        Args:
            request: The upload to analyze

        Returns:
            PipelineResult; OCR and model failures are reported in it

        Raises:
            SourceError: the request itself is malformed
        """
        source = self.normalizer.normalize(request)
        filename = source.original_filename

        # STEP 1: Extract text
        ocr = self.text_extractor.extract(source)
        if not ocr.success or not is_usable_text(ocr.text, self.min_text_length):
            code = "INSUFFICIENT_TEXT_PDF" if source.is_pdf else "INSUFFICIENT_TEXT_IMAGE"
            details = ocr.error or f"Only {len(ocr.text.strip())} characters extracted"
            logger.warning("Text extraction failed for %r: %s", filename, details)
            return _failure(code, details, filename)

        logger.info("OCR extracted %d characters from %r", len(ocr.text), filename)

        # STEP 2: Classify + extract
        try:
            analysis = self.analyze_text(ocr.text)
        except (ModelCallError, ParseError) as e:
            logger.error("AI analysis failed for %r: %s", filename, e)
            return _failure("PROCESSING_FAILED", str(e), filename)

        logger.info("Processing complete: %s", analysis.detected_type)
        return PipelineResult(
            success=True,
            analysis=analysis,
            ocr=ocr,
            ocr_quality=assess_ocr_quality(ocr),
            filename=filename,
            warning=None if analysis.is_recognized else UNRECOGNIZED_WARNING,
        )

    def process_file(self, file_path: Union[str, Path], media_type: Optional[str] = None) -> PipelineResult:
        """Convenience wrapper for a file on disk"""
        return self.process(ExtractionRequest.from_parts(local_path=file_path, declared_media_type=media_type))


def _failure(code: str, details: Optional[str], filename: str) -> PipelineResult:
    error = make_error(code, details)
    return PipelineResult(
        success=False,
        filename=filename,
        code=code,
        error=error["error"],
        hint=error["hint"],
        details=details,
    )
