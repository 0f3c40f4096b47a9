"""
Local Tesseract backend.

Decodes the image in memory, optionally cleans it up with OpenCV and runs
the ``tesseract`` binary through pytesseract. Useful when the hosted OCR
provider is unavailable or rate limited.
"""

import logging
import time
from typing import Optional

import pytesseract

from ..errors import BackendExecutionError, BackendUnavailable, NoTextFound
from .base import OCRBackend, OCRResult, decode_base64
from .preprocessing import ImagePreprocessor

logger = logging.getLogger(__name__)

LANGUAGES = {
    "eng": "eng",
    "jpn": "jpn",
    "eng,jpn": "eng+jpn",
    "jpn,eng": "jpn+eng",
}

# Assume a single uniform block of text; works well for most card layouts
DEFAULT_CONFIG = "--oem 3 --psm 6"


def normalize_language(language: str) -> str:
    return LANGUAGES.get(language, "eng")


class TesseractBackend(OCRBackend):
    """OCR through a local Tesseract install."""

    name = "tesseract"

    def __init__(
        self,
        tesseract_cmd: Optional[str] = None,
        preprocess: bool = True,
        config: str = DEFAULT_CONFIG,
        timeout: float = 30.0
    ):
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.preprocess = preprocess
        self.config = config
        self.timeout = timeout
        self.preprocessor = ImagePreprocessor()

    def parse_image(self, base64_data: str, language: str = "eng", file_type: str = "jpg") -> OCRResult:
        tess_lang = normalize_language(language)
        start = time.perf_counter()

        image = self.preprocessor.load(decode_base64(base64_data))
        if self.preprocess:
            image = self.preprocessor.prepare(image)

        try:
            text = pytesseract.image_to_string(
                image, lang=tess_lang, config=self.config, timeout=self.timeout
            )
        except pytesseract.TesseractNotFoundError as e:
            raise BackendUnavailable("tesseract binary not found", original_error=e)
        except pytesseract.TesseractError as e:
            raise BackendExecutionError(str(e.message or e), original_error=e)
        except RuntimeError as e:
            # pytesseract signals its own timeout with a bare RuntimeError
            raise BackendExecutionError(str(e), original_error=e)

        text = text.strip()
        if not text:
            raise NoTextFound("Tesseract found no text")

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Tesseract extracted {len(text)} characters in {duration_ms:.0f}ms")
        return OCRResult(
            text=text,
            meta={
                "engine": "tesseract",
                "language": tess_lang,
                "processing_time_ms": round(duration_ms),
            },
        )
