"""
Cloud OCR adapter - Google Cloud Vision

Images go through TEXT_DETECTION, PDFs through DOCUMENT_TEXT_DETECTION
on the file-annotation endpoint. Errors are raised; the text extractor
decides what to do with them.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from google.cloud import vision
from google.oauth2 import service_account

from .models import OcrResult, SourceRef

logger = logging.getLogger(__name__)

VISION_CONFIDENCE = 0.95


class CloudOCRError(RuntimeError):
    """Vision API answered with an error payload"""


class CloudVisionOCR:
    """Text extraction through the Google Cloud Vision API"""

    def __init__(
        self,
        client: Optional[vision.ImageAnnotatorClient] = None,
        credentials_json: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            client: Pre-built client (tests inject a fake here)
            credentials_json: Service-account JSON; falls back to
                application default credentials when absent
            timeout: Per-request timeout in seconds
        """
        self._client = client
        self._credentials_json = credentials_json
        self.timeout = timeout

    @property
    def client(self) -> vision.ImageAnnotatorClient:
        if self._client is None:
            if self._credentials_json:
                info = json.loads(self._credentials_json)
                credentials = service_account.Credentials.from_service_account_info(info)
                self._client = vision.ImageAnnotatorClient(credentials=credentials)
            else:
                self._client = vision.ImageAnnotatorClient()
        return self._client

    def extract_image(self, source: SourceRef) -> OcrResult:
        """OCR a single image"""
        if source.kind == "uri":
            image = vision.Image(source=vision.ImageSource(image_uri=source.uri))
        else:
            image = vision.Image(content=_read_bytes(source))

        response = self.client.text_detection(image=image, timeout=self.timeout)
        if response.error.message:
            raise CloudOCRError(response.error.message)

        annotations = response.text_annotations
        if not annotations:
            logger.info("Vision found no text in image")
            return OcrResult(success=True, text="", confidence=0.0, source="cloud-ocr")

        # First annotation holds the full text
        full_text = (annotations[0].description or "").strip()
        logger.info("Vision extracted %d characters from image", len(full_text))
        return OcrResult(
            success=True,
            text=full_text,
            confidence=VISION_CONFIDENCE,
            word_count=len(full_text.split()),
            source="cloud-ocr",
        )

    def extract_pdf(self, source: SourceRef) -> OcrResult:
        """OCR every page of a PDF and join the page texts"""
        if source.kind == "uri":
            input_config = vision.InputConfig(
                gcs_source=vision.GcsSource(uri=source.uri),
                mime_type="application/pdf",
            )
        else:
            input_config = vision.InputConfig(
                content=_read_bytes(source),
                mime_type="application/pdf",
            )

        request = vision.AnnotateFileRequest(
            input_config=input_config,
            features=[vision.Feature(type_=vision.Feature.Type.DOCUMENT_TEXT_DETECTION)],
        )
        result = self.client.batch_annotate_files(requests=[request], timeout=self.timeout)

        page_texts = []
        for file_response in result.responses:
            if file_response.error.message:
                raise CloudOCRError(file_response.error.message)
            for page in file_response.responses:
                if page.error.message:
                    logger.warning("Vision page error: %s", page.error.message)
                    continue
                if page.full_text_annotation.text:
                    page_texts.append(page.full_text_annotation.text)

        full_text = "\n".join(page_texts).strip()
        logger.info("Vision extracted %d characters from %d PDF pages", len(full_text), len(page_texts))
        return OcrResult(
            success=True,
            text=full_text,
            confidence=VISION_CONFIDENCE if full_text else 0.0,
            word_count=len(full_text.split()),
            page_count=len(page_texts) or 1,
            source="cloud-ocr-pdf",
        )

    def health(self) -> dict:
        """Whether credentials are configured (no API call is made)"""
        key_file = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        if self._client is not None or self._credentials_json:
            configured = True
        else:
            configured = bool(key_file and Path(key_file).exists())
        return {
            "configured": configured,
            "status": "ready" if configured else "missing_credentials",
        }


def _read_bytes(source: SourceRef) -> bytes:
    if source.kind == "bytes":
        return source.data
    with open(source.path, "rb") as f:
        return f.read()
