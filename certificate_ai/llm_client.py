"""
Generative model client - Gemini on Vertex AI through the google-genai SDK
"""

import json
import logging
import re
from typing import Optional, Protocol

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from google.oauth2 import service_account

from .errors import ModelCallError, RateLimitError

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
RETRY_INFO_TYPE = "type.googleapis.com/google.rpc.RetryInfo"

_SECONDS = re.compile(r"^\s*(\d+(?:\.\d+)?)s?\s*$")


class TextGenerator(Protocol):
    """Anything that turns a prompt into raw model text"""

    def generate(self, prompt: str, model: str) -> str:
        ...


class VertexGeminiClient:
    """Calls Gemini models on Vertex AI and returns the raw response text"""

    def __init__(
        self,
        project: Optional[str] = None,
        location: str = "us-central1",
        credentials_json: Optional[str] = None,
        temperature: float = 0.1,
        max_output_tokens: int = 2048,
        timeout: float = 60.0,
        client: Optional[genai.Client] = None,
    ):
        self.project = project
        self.location = location
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self._credentials_json = credentials_json
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            credentials = None
            if self._credentials_json:
                info = json.loads(self._credentials_json)
                credentials = service_account.Credentials.from_service_account_info(
                    info, scopes=[CLOUD_PLATFORM_SCOPE]
                )
            self._client = genai.Client(
                vertexai=True,
                project=self.project,
                location=self.location,
                credentials=credentials,
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        return self._client

    def generate(self, prompt: str, model: str) -> str:
        """
        Run one generation request

        Raises:
            RateLimitError: on HTTP 429 / RESOURCE_EXHAUSTED
            ModelCallError: on any other API error or an empty answer
        """
        config = types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            response_mime_type="application/json",
        )
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            if e.code == 429 or e.status == "RESOURCE_EXHAUSTED":
                raise RateLimitError(
                    f"{model} rate limited: {e.message}",
                    retry_after=retry_after_seconds(e),
                    last_error=e,
                ) from e
            raise ModelCallError(f"{model} failed with HTTP {e.code}: {e.message}", last_error=e) from e

        text = response.text
        if not text:
            raise ModelCallError(f"{model} returned an empty response")
        return text


def retry_after_seconds(error: genai_errors.APIError) -> Optional[float]:
    """
    Server-suggested wait before retrying, if the error carries one

    Reads the RetryInfo entry of the error body ("retryDelay": "13s"),
    then the Retry-After response header.
    """
    body = getattr(error, "details", None)
    payload = body.get("error") if isinstance(body, dict) else None
    if isinstance(payload, dict):
        for detail in payload.get("details") or []:
            if isinstance(detail, dict) and detail.get("@type") == RETRY_INFO_TYPE:
                seconds = _parse_seconds(detail.get("retryDelay"))
                if seconds is not None:
                    return seconds

    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None)
    if headers is not None:
        return _parse_seconds(headers.get("Retry-After"))
    return None


def _parse_seconds(value) -> Optional[float]:
    if value is None:
        return None
    match = _SECONDS.match(str(value))
    return float(match.group(1)) if match else None
