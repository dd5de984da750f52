"""
Error taxonomy and user-facing error codes for the ingestion pipeline
"""

from typing import Dict, Optional


class CertificateAIError(Exception):
    """Base class for pipeline errors"""


class SourceError(CertificateAIError, ValueError):
    """Malformed ExtractionRequest: zero or several sources populated"""


class ModelCallError(CertificateAIError):
    """Every candidate model failed for one pass"""

    def __init__(self, message: str, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.last_error = last_error


class RateLimitError(ModelCallError):
    """Model endpoint refused the call because of quota / rate limiting"""

    def __init__(self, message: str, retry_after: Optional[float] = None, last_error: Optional[BaseException] = None):
        super().__init__(message, last_error=last_error)
        self.retry_after = retry_after


class ParseError(CertificateAIError):
    """Model output was not JSON or did not have the expected shape"""


class UnknownCertificateTypeError(CertificateAIError, KeyError):
    """Registry lookup for a type key that is not registered"""

    def __init__(self, type_key: str):
        super().__init__(type_key)
        self.type_key = type_key

    def __str__(self) -> str:
        return f"Unknown certificate type: {self.type_key}"


# Stable error codes -> (error, hint)
ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "INSUFFICIENT_TEXT_PDF": {
        "error": "Could not extract sufficient text from the file.",
        "hint": "This PDF appears to be scanned or empty. Please verify it works, "
                "or try uploading a screenshot (PNG/JPG) of it instead.",
    },
    "INSUFFICIENT_TEXT_IMAGE": {
        "error": "Could not extract sufficient text from the file.",
        "hint": "The image was too blurry or contained no readable text. Please try a clearer image.",
    },
    "PROCESSING_FAILED": {
        "error": "Server encountered a problem",
        "hint": "Please try again later or upload a different file.",
    },
    "INVALID_SOURCE": {
        "error": "Invalid upload",
        "hint": "Provide exactly one of inline bytes, a local path or a cloud URI.",
    },
    "FILE_TOO_LARGE": {
        "error": "File is too large",
        "hint": "Please upload a file smaller than 10MB.",
    },
    "UNSUPPORTED_FILE": {
        "error": "Invalid file format",
        "hint": "Only PDF, JPG, PNG, TIFF, BMP and WEBP files are accepted.",
    },
}


def message_for(code: str) -> Optional[Dict[str, str]]:
    return ERROR_MESSAGES.get(code)


def make_error(code: str, details: Optional[str] = None) -> Dict[str, Optional[str]]:
    """Build the {code, error, hint, details} payload for a failure"""
    entry = ERROR_MESSAGES.get(code, ERROR_MESSAGES["PROCESSING_FAILED"])
    return {
        "code": code,
        "error": entry["error"],
        "hint": entry["hint"],
        "details": details,
    }
