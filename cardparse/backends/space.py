"""
OCR.space HTTP backend.

Posts the base64 image to the OCR.space ``parse/image`` endpoint. Retries
for transient HTTP failures live in the mounted requests adapter, not in
the gateway.
"""

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import (
    BackendExecutionError,
    DecodeError,
    HttpError,
    NoTextFound,
    TransportError,
    UnexpectedResponse,
)
from .base import OCRBackend, OCRResult, clean_base64_data

logger = logging.getLogger(__name__)

# Public demo key, heavily rate limited by the provider
DEMO_API_KEY = "helloworld"

SUPPORTED_LANGUAGES = ("eng", "jpn", "eng,jpn", "jpn,eng")


def normalize_language(language: str) -> str:
    """Map a language tag to one OCR.space accepts; anything unknown is "eng"."""
    return language if language in SUPPORTED_LANGUAGES else "eng"


class OCRSpaceBackend(OCRBackend):
    """OCR through the OCR.space REST API."""

    name = "ocr_space"

    ENDPOINT = "https://api.ocr.space/parse/image"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        retries: int = 3,
        endpoint: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Args:
            api_key: OCR.space API key (falls back to the public demo key)
            timeout: Read timeout in seconds
            retries: Total attempts for connection errors and 5xx/429 replies
            endpoint: Override the API URL
            session: Pre-configured requests session (tests)
        """
        if not api_key:
            logger.warning("OCRSPACE_API_KEY not set - using the public demo key")
        self.api_key = api_key or DEMO_API_KEY
        self.timeout = timeout
        self.endpoint = endpoint or self.ENDPOINT
        self.session = session or self._build_session(retries)

    @staticmethod
    def _build_session(retries: int) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=max(retries - 1, 0),
            backoff_factor=0.1,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["POST"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def parse_image(self, base64_data: str, language: str = "eng", file_type: str = "jpg") -> OCRResult:
        payload = {
            "apikey": self.api_key,
            "base64Image": f"data:image/{file_type};base64,{clean_base64_data(base64_data)}",
            "language": normalize_language(language),
            "isOverlayRequired": "false",
            "filetype": file_type,
        }

        try:
            response = self.session.post(self.endpoint, data=payload, timeout=(10, self.timeout))
        except requests.exceptions.Timeout as e:
            raise TransportError("timeout", original_error=e)
        except requests.exceptions.RequestException as e:
            raise TransportError(type(e).__name__, original_error=e)

        if response.status_code != 200:
            raise HttpError(response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError("response is not valid JSON", original_error=e)

        if not isinstance(data, dict):
            raise UnexpectedResponse("OCR.space returned a non-object body")

        if data.get("IsErroredOnProcessing"):
            message = data.get("ErrorMessage") or "unknown processing error"
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            raise BackendExecutionError(str(message))

        results = data.get("ParsedResults")
        if results == []:
            raise NoTextFound("OCR.space found no text")
        if not isinstance(results, list) or not isinstance(results[0], dict) or "ParsedText" not in results[0]:
            raise UnexpectedResponse("OCR.space response has no ParsedResults")

        meta = {
            key: data[key]
            for key in ("OCRExitCode", "ProcessingTimeInMilliseconds")
            if key in data
        }
        logger.debug(f"OCR.space parsed image - exit code {meta.get('OCRExitCode')}")
        return OCRResult(text=results[0]["ParsedText"], meta=meta)
