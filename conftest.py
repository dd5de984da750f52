"""
Shared fakes for the pipeline tests (no network, no Tesseract binary)
"""

import json

import pytest

from certificate_ai import DocumentPipeline, default_registry
from certificate_ai.models import OcrResult
from certificate_ai.retry import ModelRetryPolicy


FDP_TEXT = (
    "CERTIFICATE OF PARTICIPATION\n"
    "This is to certify that Dr. John Doe has participated in the\n"
    "Faculty Development Program on Machine Learning\n"
    "Organized by IIT Bombay\n"
    "from 10 July 2024 to 15 July 2024\n"
    "Mode: Online"
)


class FakeGenerator:
    """Answers pass-1 and pass-2 prompts with canned text"""

    def __init__(self, classification=None, extraction=None):
        self.classification = classification
        self.extraction = extraction
        self.calls = []

    def generate(self, prompt, model):
        self.calls.append((prompt, model))
        if "IDENTIFY the document type" in prompt:
            answer = self.classification
        else:
            answer = self.extraction
        if isinstance(answer, BaseException):
            raise answer
        if isinstance(answer, dict):
            return json.dumps(answer)
        return answer

    @property
    def classification_calls(self):
        return [c for c in self.calls if "IDENTIFY the document type" in c[0]]

    @property
    def extraction_calls(self):
        return [c for c in self.calls if "IDENTIFY the document type" not in c[0]]


class FakeCloudOCR:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.image_calls = 0
        self.pdf_calls = 0

    def _answer(self, source_name):
        if self.error is not None:
            raise self.error
        return OcrResult(success=True, text=self.text, confidence=0.95,
                         word_count=len(self.text.split()), source=source_name)

    def extract_image(self, source):
        self.image_calls += 1
        return self._answer("cloud-ocr")

    def extract_pdf(self, source):
        self.pdf_calls += 1
        return self._answer("cloud-ocr-pdf")

    def health(self):
        return {"configured": True, "status": "ready"}


class FakeLocalOCR:
    def __init__(self, text="", error=None, confidence=0.82):
        self.text = text
        self.error = error
        self.confidence = confidence
        self.calls = 0

    def extract(self, source):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return OcrResult(success=True, text=self.text, confidence=self.confidence,
                         word_count=len(self.text.split()), source="local-ocr")


def fdp_classification(confidence=0.93):
    return {
        "detected_type": "FDP",
        "confidence": confidence,
        "reason": "Mentions participation in a Faculty Development Program",
    }


def fdp_extraction():
    payload = {
        "extracted_fields": {
            "participant_name": "Dr. John Doe",
            "program_name": "Faculty Development Program on Machine Learning",
            "organizer": "IIT Bombay",
            "date": "2024-07-10",
            "duration_days": 6,
            "mode": "online",
            "event_type": "FDP",
            "location": None,
            "academic_year": None,
        },
        "field_confidence": {
            "participant_name": 0.95,
            "program_name": 0.9,
            "organizer": 0.92,
            "date": 0.88,
            "duration_days": 0.8,
            "mode": 0.85,
            "event_type": 0.7,
        },
        "missing_required": ["certificate_number", "location"],
    }
    return "```json\n" + json.dumps(payload) + "\n```"


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def retry_policy(sleeps):
    return ModelRetryPolicy.from_models(
        ["model-a", "model-b"], backoff_seconds=2.0, sleep=sleeps.append
    )


@pytest.fixture
def make_pipeline(registry, retry_policy):
    def _make(generator, cloud_ocr=None, local_ocr=None, use_cloud_ocr=True):
        return DocumentPipeline.build(
            generator=generator,
            retry_policy=retry_policy,
            cloud_ocr=cloud_ocr,
            local_ocr=local_ocr,
            registry=registry,
            use_cloud_ocr=use_cloud_ocr,
        )
    return _make
