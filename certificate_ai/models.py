"""
Data structures that flow through the ingestion pipeline

All of them are created per request and discarded afterwards.
"""

from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .errors import SourceError
from .registry import UNKNOWN_TYPE


# ---------------------------------------------------------------------------
# Inbound request
# ---------------------------------------------------------------------------

class InlineBytesSource(BaseModel):
    """Raw uploaded bytes held in memory"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["bytes"] = "bytes"
    data: bytes = Field(..., repr=False)


class LocalPathSource(BaseModel):
    """File on the local filesystem"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["path"] = "path"
    path: str


class CloudUriSource(BaseModel):
    """Object already staged in cloud storage (gs://bucket/key)"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["uri"] = "uri"
    uri: str

    @field_validator('uri')
    @classmethod
    def validate_uri(cls, v):
        if not v.startswith("gs://"):
            raise ValueError(f"Cloud URI must start with gs://, got {v!r}")
        return v


SourceRef = Annotated[
    Union[InlineBytesSource, LocalPathSource, CloudUriSource],
    Field(discriminator="kind"),
]


class ExtractionRequest(BaseModel):
    """One uploaded document submitted to the pipeline"""
    model_config = ConfigDict(frozen=True)

    source: SourceRef
    declared_media_type: Optional[str] = Field(None, description="e.g. 'application/pdf'")
    original_filename: str = Field(default="", description="Name of the uploaded file")

    @classmethod
    def from_parts(
        cls,
        inline_bytes: Optional[bytes] = None,
        local_path: Optional[Union[str, Path]] = None,
        cloud_uri: Optional[str] = None,
        declared_media_type: Optional[str] = None,
        original_filename: Optional[str] = None,
    ) -> "ExtractionRequest":
        """
        Build a request from the loose upload-handler arguments

        Exactly one of inline_bytes, local_path and cloud_uri must be given.

        Raises:
            SourceError: if zero or several sources are populated
        """
        given = [
            name for name, value in (
                ("inline_bytes", inline_bytes),
                ("local_path", local_path),
                ("cloud_uri", cloud_uri),
            )
            if value is not None
        ]
        if len(given) != 1:
            raise SourceError(
                f"Exactly one source must be provided, got {len(given)}"
                + (f" ({', '.join(given)})" if given else "")
            )

        if inline_bytes is not None:
            source = InlineBytesSource(data=inline_bytes)
            default_name = ""
        elif local_path is not None:
            source = LocalPathSource(path=str(local_path))
            default_name = Path(local_path).name
        else:
            try:
                source = CloudUriSource(uri=cloud_uri)
            except ValueError as e:
                raise SourceError(str(e)) from e
            default_name = cloud_uri.rsplit("/", 1)[-1]

        return cls(
            source=source,
            declared_media_type=declared_media_type,
            original_filename=original_filename or default_name,
        )


class NormalizedSource(BaseModel):
    """Resolved source handle handed to the text extractor"""
    model_config = ConfigDict(frozen=True)

    source: SourceRef
    is_pdf: bool
    original_filename: str = ""

    @property
    def kind(self) -> str:
        return self.source.kind

    @property
    def has_local_copy(self) -> bool:
        """True when the bytes are reachable without cloud storage"""
        return self.source.kind in ("bytes", "path")


# ---------------------------------------------------------------------------
# Stage outputs
# ---------------------------------------------------------------------------

OcrSource = Literal["cloud-ocr", "cloud-ocr-pdf", "local-ocr"]


class OcrResult(BaseModel):
    """Output of the text extractor"""

    success: bool
    text: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source: Optional[OcrSource] = None
    word_count: int = 0
    page_count: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "OcrResult":
        return cls(success=False, text="", confidence=0.0, error=error)


class ClassificationResult(BaseModel):
    """Output of pass 1"""

    detected_type: str
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reason: str = ""

    @property
    def is_unknown(self) -> bool:
        return self.detected_type == UNKNOWN_TYPE


class FieldExtractionResult(BaseModel):
    """Output of pass 2, scoped to one certificate type"""

    extracted_fields: Dict[str, Any] = Field(default_factory=dict)
    field_confidence: Dict[str, float] = Field(default_factory=dict)
    missing_required: List[str] = Field(default_factory=list)


class ReconciledAnalysis(BaseModel):
    """Final analysis returned across the pipeline boundary"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_recognized: bool
    detected_type: str
    type_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reason: str = ""
    certificate_type: Optional[str] = None
    table_name: Optional[str] = None
    section_code: Optional[str] = None
    extracted: Dict[str, Any] = Field(default_factory=dict)
    field_confidence: Dict[str, float] = Field(default_factory=dict)
    overall_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    missing_required: List[str] = Field(default_factory=list)
    model_reported_missing: List[str] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class PipelineResult(BaseModel):
    """Outcome of one pipeline run, successful or not"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    analysis: Optional[ReconciledAnalysis] = None
    ocr: Optional[OcrResult] = Field(None, exclude=True)
    ocr_quality: Optional[Dict[str, Any]] = None
    filename: str = ""
    warning: Optional[str] = None
    code: Optional[str] = None
    error: Optional[str] = None
    hint: Optional[str] = None
    details: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        """
        Flatten into the JSON payload returned to the upload UI

        Successful runs expose the analysis keys at top level, next to the
        OCR metadata; failures expose error/hint (and diagnostics details).
        """
        if not self.success:
            payload: Dict[str, Any] = {
                "success": False,
                "code": self.code,
                "error": self.error,
                "hint": self.hint,
            }
            if self.details:
                payload["detail"] = self.details
            return payload

        payload = {"success": True}
        if self.analysis is not None:
            payload.update(self.analysis.to_dict())
        if self.ocr is not None:
            payload["ocrTextLength"] = len(self.ocr.text)
            payload["ocrSource"] = self.ocr.source
            payload["ocrConfidence"] = self.ocr.confidence
        payload["ocrQuality"] = self.ocr_quality
        payload["filename"] = self.filename
        if self.warning:
            payload["warning"] = self.warning
        return payload
