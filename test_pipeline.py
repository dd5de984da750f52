"""
End-to-end tests for the certificate ingestion pipeline
"""

import json

import pytest

from certificate_ai import ExtractionRequest, SourceError
from certificate_ai.errors import ModelCallError, RateLimitError
from certificate_ai.models import CloudUriSource, LocalPathSource
from certificate_ai.normalizer import SourceNormalizer, is_pdf_source
from certificate_ai.ocr import TextExtractor
from conftest import (
    FDP_TEXT,
    FakeCloudOCR,
    FakeGenerator,
    FakeLocalOCR,
    fdp_classification,
    fdp_extraction,
)

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"
PDF_BYTES = b"%PDF-1.7 fake"


def test_happy_path_image(make_pipeline):
    """JPEG bytes -> FDP with the expected pre-filled fields"""
    generator = FakeGenerator(fdp_classification(), fdp_extraction())
    cloud = FakeCloudOCR(text=FDP_TEXT)
    local = FakeLocalOCR()
    pipeline = make_pipeline(generator, cloud_ocr=cloud, local_ocr=local)

    request = ExtractionRequest.from_parts(
        inline_bytes=JPEG_BYTES,
        declared_media_type="image/jpeg",
        original_filename="fdp.jpg",
    )
    result = pipeline.process(request)

    assert result.success
    analysis = result.analysis
    assert analysis.is_recognized
    assert analysis.detected_type == "FDP"
    assert analysis.table_name == "fdp"
    assert analysis.section_code == "6.1.2.2.1"
    assert analysis.certificate_type == "FDP/Training Program"
    assert analysis.extracted["organizer"] == "IIT Bombay"
    assert analysis.extracted["duration_days"] == 6
    assert analysis.extracted["mode"] == "Online"
    assert analysis.extracted["academic_year"] == "2024-25"
    assert analysis.overall_confidence == pytest.approx(0.93)
    assert analysis.missing_required == []
    assert analysis.model_reported_missing == ["certificate_number", "location"]
    assert cloud.image_calls == 1
    assert local.calls == 0


def test_happy_path_response_shape(make_pipeline):
    generator = FakeGenerator(fdp_classification(), fdp_extraction())
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(text=FDP_TEXT))

    result = pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES, original_filename="a.png"))
    response = result.to_response()

    for key in ("isRecognized", "detectedType", "typeConfidence", "reason", "certificateType",
                "tableName", "sectionCode", "extracted", "fieldConfidence",
                "overallConfidence", "missingRequired"):
        assert key in response
    assert response["success"] is True
    assert response["filename"] == "a.png"
    assert response["ocrSource"] == "cloud-ocr"
    assert response["ocrTextLength"] == len(result.ocr.text)
    assert "warning" not in response


def test_scanned_pdf_ocr_failure(make_pipeline):
    """Cloud OCR network error on a PDF never falls back to local OCR"""
    generator = FakeGenerator(fdp_classification(), fdp_extraction())
    cloud = FakeCloudOCR(error=ConnectionError("network unreachable"))
    local = FakeLocalOCR(text=FDP_TEXT)
    pipeline = make_pipeline(generator, cloud_ocr=cloud, local_ocr=local)

    request = ExtractionRequest.from_parts(
        inline_bytes=PDF_BYTES,
        declared_media_type="application/pdf",
        original_filename="scan.pdf",
    )
    ocr = pipeline.text_extractor.extract(SourceNormalizer().normalize(request))
    assert ocr.success is False
    assert ocr.error.startswith("PDF processing failed")
    assert ocr.error.endswith("Fallback disabled for PDFs.")

    result = pipeline.process(request)
    assert result.success is False
    assert result.code == "INSUFFICIENT_TEXT_PDF"
    assert "scanned" in result.hint
    assert "Fallback disabled for PDFs." in result.details
    assert local.calls == 0
    assert generator.calls == []


def test_unknown_classification_short_circuits(make_pipeline):
    generator = FakeGenerator(
        {"detected_type": "UNKNOWN", "confidence": 0.2, "reason": "Looks like an invoice"},
        fdp_extraction(),
    )
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(text="INVOICE No 42 Total amount due 1200 INR"))

    result = pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES, original_filename="x.jpg"))

    assert result.success
    assert result.analysis.is_recognized is False
    assert result.analysis.extracted == {}
    assert result.analysis.field_confidence == {}
    assert result.analysis.missing_required == []
    assert len(generator.classification_calls) == 1
    assert generator.extraction_calls == []
    assert "could not be confidently identified" in result.to_response()["warning"]


@pytest.mark.parametrize("raw", [
    "not json at all",
    '{"confidence": 0.9}',
    '{"detected_type": "", "confidence": 0.9}',
    '{"detected_type": "PATENT", "confidence": 0.9}',
    "[1, 2, 3]",
])
def test_unusable_classification_degrades_to_unknown(make_pipeline, raw):
    generator = FakeGenerator(raw, fdp_extraction())
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(text=FDP_TEXT))

    result = pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES))

    assert result.success
    assert result.analysis.detected_type == "UNKNOWN"
    assert result.analysis.type_confidence == 0.0
    assert generator.extraction_calls == []


def test_unparseable_extraction_is_fatal(make_pipeline):
    generator = FakeGenerator(fdp_classification(), "Sorry, I cannot help with that.")
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(text=FDP_TEXT))

    result = pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES))

    assert result.success is False
    assert result.code == "PROCESSING_FAILED"
    assert result.error == "Server encountered a problem"
    assert "Failed to parse extraction results" in result.details


def test_non_finite_extracted_number_is_a_parse_failure(make_pipeline):
    answer = '{"extracted_fields": {"participant_name": "Dr. John Doe", "duration_days": 1e999}}'
    generator = FakeGenerator(fdp_classification(), answer)
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(text=FDP_TEXT))

    result = pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES))

    assert result.success is False
    assert result.code == "PROCESSING_FAILED"
    assert result.hint
    json.dumps(result.to_response(), allow_nan=False)


def test_model_exhaustion_reports_processing_failure(make_pipeline, sleeps):
    generator = FakeGenerator(RateLimitError("429 Too Many Requests"), fdp_extraction())
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(text=FDP_TEXT))

    result = pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES))

    assert result.success is False
    assert result.code == "PROCESSING_FAILED"
    assert "429" in result.details
    # two candidates, each retried once after the fixed backoff
    assert len(generator.calls) == 4
    assert sleeps == [2.0, 2.0]


def test_analyze_text_raises_model_call_error(make_pipeline):
    generator = FakeGenerator(ModelCallError("404 model not found"), fdp_extraction())
    pipeline = make_pipeline(generator)

    with pytest.raises(ModelCallError):
        pipeline.analyze_text(FDP_TEXT)


def test_blurry_image_hint(make_pipeline):
    pipeline = make_pipeline(
        FakeGenerator(fdp_classification(), fdp_extraction()),
        cloud_ocr=FakeCloudOCR(text=""),
        local_ocr=FakeLocalOCR(text="~~ ::"),
    )

    result = pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES, original_filename="blur.jpg"))

    assert result.success is False
    assert result.code == "INSUFFICIENT_TEXT_IMAGE"
    assert "clearer image" in result.hint
    assert result.to_response()["hint"] == result.hint


def test_local_fallback_feeds_the_models(make_pipeline):
    generator = FakeGenerator(fdp_classification(), fdp_extraction())
    local = FakeLocalOCR(text=FDP_TEXT)
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(error=TimeoutError("deadline exceeded")), local_ocr=local)

    result = pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES))

    assert result.success
    assert result.ocr.source == "local-ocr"
    assert local.calls == 1
    assert result.analysis.detected_type == "FDP"


def test_classification_prompt_is_truncated_extraction_is_not(make_pipeline):
    long_text = FDP_TEXT + " " + ("lorem ipsum " * 600) + "END-OF-DOCUMENT"
    generator = FakeGenerator(fdp_classification(), fdp_extraction())
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(text=long_text))

    pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES))

    classification_prompt = generator.classification_calls[0][0]
    extraction_prompt = generator.extraction_calls[0][0]
    assert "END-OF-DOCUMENT" not in classification_prompt
    assert "END-OF-DOCUMENT" in extraction_prompt


def test_stages_run_in_order(make_pipeline):
    generator = FakeGenerator(fdp_classification(), fdp_extraction())
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(text=FDP_TEXT))

    pipeline.process(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES))

    kinds = ["classify" if "IDENTIFY the document type" in prompt else "extract" for prompt, _ in generator.calls]
    assert kinds == ["classify", "extract"]


# ---------------------------------------------------------------------------
# Source normalizer
# ---------------------------------------------------------------------------

def test_request_needs_exactly_one_source():
    with pytest.raises(SourceError):
        ExtractionRequest.from_parts()
    with pytest.raises(SourceError):
        ExtractionRequest.from_parts(inline_bytes=b"abc", local_path="/tmp/a.jpg")
    with pytest.raises(SourceError):
        ExtractionRequest.from_parts(cloud_uri="https://example.com/a.pdf")


def test_request_defaults_filename_from_source():
    by_path = ExtractionRequest.from_parts(local_path="/uploads/cert.PDF")
    by_uri = ExtractionRequest.from_parts(cloud_uri="gs://bucket/faculty/mooc.png")

    assert isinstance(by_path.source, LocalPathSource)
    assert by_path.original_filename == "cert.PDF"
    assert isinstance(by_uri.source, CloudUriSource)
    assert by_uri.original_filename == "mooc.png"


def test_normalizer_pdf_detection():
    normalizer = SourceNormalizer()

    assert normalizer.normalize(ExtractionRequest.from_parts(local_path="/uploads/cert.PDF")).is_pdf
    assert normalizer.normalize(ExtractionRequest.from_parts(
        inline_bytes=b"x", declared_media_type="application/pdf", original_filename="upload")).is_pdf
    assert normalizer.normalize(ExtractionRequest.from_parts(
        inline_bytes=b"x", declared_media_type="image/png", original_filename="misnamed.pdf")).is_pdf
    assert not normalizer.normalize(ExtractionRequest.from_parts(
        inline_bytes=b"x", declared_media_type="image/png", original_filename="scan.png")).is_pdf
    assert normalizer.normalize(ExtractionRequest.from_parts(
        inline_bytes=b"x", declared_media_type="application/octet-stream", original_filename="a.pdf")).is_pdf


def test_is_pdf_source_either_signal_marks_pdf():
    assert is_pdf_source("application/pdf; charset=binary", "a.jpg")
    assert is_pdf_source("image/jpeg", "a.pdf")
    assert not is_pdf_source("image/jpeg", "a.jpg")
    assert is_pdf_source(None, "report.pdf")
    assert not is_pdf_source(None, "")


def test_normalizer_rejects_non_requests():
    with pytest.raises(SourceError):
        SourceNormalizer().normalize(None)


def test_process_file_reads_local_path(make_pipeline, tmp_path):
    path = tmp_path / "certificate.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")
    generator = FakeGenerator(fdp_classification(), fdp_extraction())
    pipeline = make_pipeline(generator, cloud_ocr=FakeCloudOCR(text=FDP_TEXT))

    result = pipeline.process_file(path)

    assert result.success
    assert result.filename == "certificate.png"


def test_text_extractor_without_cloud_uses_local_for_images():
    local = FakeLocalOCR(text=FDP_TEXT)
    extractor = TextExtractor(cloud_ocr=None, local_ocr=local)
    source = SourceNormalizer().normalize(ExtractionRequest.from_parts(inline_bytes=JPEG_BYTES, original_filename="a.jpg"))

    result = extractor.extract(source)

    assert result.success
    assert local.calls == 1
