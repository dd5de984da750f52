"""
Certificate ingestion API

POST /analyze endpoint for certificate analysis
"""

import logging
import os
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse

from certificate_ai import DocumentPipeline, ExtractionRequest, SourceError, setup_logging, supported_types
from certificate_ai.errors import make_error
from certificate_ai.normalizer import IMAGE_EXTENSIONS
from config import Config

setup_logging(Config.LOG_LEVEL)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
ACCEPTED_EXTENSIONS = ('.pdf',) + IMAGE_EXTENSIONS

app = FastAPI(title="Certificate AI API", version=API_VERSION)


@lru_cache(maxsize=1)
def get_pipeline() -> DocumentPipeline:
    """Pipeline built once per process from the environment"""
    Config.validate()
    return DocumentPipeline.from_config(Config)


def _error_response(code: str, status_code: int, details: Optional[str] = None) -> JSONResponse:
    error = make_error(code, details)
    content = {"success": False, "code": code, "error": error["error"], "hint": error["hint"]}
    if details:
        content["detail"] = details
    return JSONResponse(status_code=status_code, content=content)


@app.post("/analyze")
async def analyze_certificate(
    file: Optional[UploadFile] = File(default=None),
    gcs_uri: Optional[str] = Form(default=None),
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    """
    Analyze a certificate through the ingestion pipeline

    Pipeline stages:
    Normalize → OCR → Classify → Extract fields → Reconcile

    Args:
        file: Uploaded certificate (PDF or image)
        gcs_uri: Alternatively, a gs:// URI of an already staged upload

    Returns:
        Analysis with detected type, target table and pre-filled fields
    """
    inline_bytes = None
    filename = None
    media_type = None

    if file is not None:
        filename = file.filename or ""
        ext = os.path.splitext(filename)[1].lower()
        if ext not in ACCEPTED_EXTENSIONS:
            return _error_response("UNSUPPORTED_FILE", 400, f"Unsupported extension: {ext or 'none'}")

        inline_bytes = await file.read()
        if len(inline_bytes) > Config.MAX_UPLOAD_MB * 1024 * 1024:
            return _error_response("FILE_TOO_LARGE", 400)
        media_type = file.content_type

    try:
        request = ExtractionRequest.from_parts(
            inline_bytes=inline_bytes,
            cloud_uri=gcs_uri or None,
            declared_media_type=media_type,
            original_filename=filename,
        )
    except SourceError as e:
        return _error_response("INVALID_SOURCE", 400, str(e))

    try:
        result = pipeline.process(request)
    except SourceError as e:
        return _error_response("INVALID_SOURCE", 400, str(e))

    payload = result.to_response()
    if not result.success:
        status_code = 500 if result.code == "PROCESSING_FAILED" else 400
        return JSONResponse(status_code=status_code, content=payload)

    payload["supportedTypes"] = supported_types(pipeline.registry)
    return payload


@app.get("/types")
async def list_types(pipeline: DocumentPipeline = Depends(get_pipeline)):
    """Certificate types the pipeline can recognize"""
    return {"types": supported_types(pipeline.registry)}


@app.get("/health")
async def health_check(pipeline: DocumentPipeline = Depends(get_pipeline)):
    """Health check endpoint"""
    cloud_ocr = pipeline.text_extractor.cloud_ocr
    cloud_status = cloud_ocr.health() if cloud_ocr is not None else {"configured": False, "status": "disabled"}
    return {"status": "healthy", "version": API_VERSION, "cloudOcr": cloud_status}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
