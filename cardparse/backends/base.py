"""Base OCR backend interface for pluggable OCR implementations."""

import base64
import binascii
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict

from ..errors import DecodeError

_DATA_URI_PREFIX = re.compile(r"^data:image/[^;]+;base64,")


@dataclass
class OCRResult:
    """OCR extraction result container.

    Attributes:
        text: Extracted text content
        meta: Backend specific details (exit codes, processing time, ...)
    """
    text: str
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "meta": self.meta}


def clean_base64_data(data: str) -> str:
    """Strip a ``data:image/...;base64,`` prefix if present."""
    return _DATA_URI_PREFIX.sub("", (data or "").strip())


def decode_base64(data: str) -> bytes:
    """Decode (optionally data-URI prefixed) base64 image data.

    Raises:
        DecodeError: If the payload is empty or not valid base64
    """
    cleaned = clean_base64_data(data)
    if not cleaned:
        raise DecodeError("empty image payload")
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("invalid base64 image data", original_error=e)


class OCRBackend(ABC):
    """Abstract base class for OCR backends.

    Implementations turn a base64 encoded image into text and raise the
    ``BackendError`` variants from ``cardparse.errors`` on failure.
    """

    name = "base"

    @abstractmethod
    def parse_image(self, base64_data: str, language: str = "eng", file_type: str = "jpg") -> OCRResult:
        """Extract text from a base64 encoded image.

        Args:
            base64_data: Image bytes, base64 encoded (data-URI prefix allowed)
            language: OCR language tag ("eng", "jpn", "eng,jpn")
            file_type: Image type hint ("jpg", "png", ...)

        Returns:
            OCRResult

        Raises:
            BackendError: If extraction fails
        """
        pass
