"""
Source normalization - resolves which extractor path an upload takes
"""

import logging
import os
from typing import Optional

from .errors import SourceError
from .models import ExtractionRequest, NormalizedSource

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.tif', '.webp')


class SourceNormalizer:
    """Turns an ExtractionRequest into a NormalizedSource (no I/O)"""

    def normalize(self, request: ExtractionRequest) -> NormalizedSource:
        """
        Resolve the source handle and the PDF flag

        Args:
            request: Upload to analyze

        Returns:
            NormalizedSource passed unchanged into the text extractor

        Raises:
            SourceError: if the request does not carry exactly one source
        """
        if not isinstance(request, ExtractionRequest) or request.source is None:
            raise SourceError("ExtractionRequest must carry exactly one source")

        filename = request.original_filename or _name_from_source(request)
        is_pdf = is_pdf_source(request.declared_media_type, filename)

        logger.info("Normalized %s source %r (pdf=%s)", request.source.kind, filename, is_pdf)
        return NormalizedSource(
            source=request.source,
            is_pdf=is_pdf,
            original_filename=filename,
        )


def is_pdf_source(declared_media_type: Optional[str], filename: Optional[str]) -> bool:
    """
    A source is a PDF when either the declared media type or the file
    extension says so

    An upload named cert.pdf but declared as an image is still treated
    as a PDF, so local OCR never sees PDF bytes.
    """
    if declared_media_type:
        media_type = declared_media_type.split(";", 1)[0].strip().lower()
        if media_type == PDF_MEDIA_TYPE:
            return True
    ext = os.path.splitext(filename or "")[1].lower()
    return ext == '.pdf'


def _name_from_source(request: ExtractionRequest) -> str:
    source = request.source
    if source.kind == "path":
        return os.path.basename(source.path)
    if source.kind == "uri":
        return source.uri.rsplit("/", 1)[-1]
    return ""
