"""Deterministic OCR backend for tests, demos and fallback responses."""

from typing import Optional

from .base import OCRBackend, OCRResult


ENGLISH_CARD = (
    "John Doe\n"
    "Software Engineer\n"
    "Example Corp\n"
    "john.doe@example.com\n"
    "+1 (555) 123-4567"
)

JAPANESE_CARD = (
    "田中太郎\n"
    "営業部長\n"
    "株式会社サンプル\n"
    "tanaka@sample.co.jp\n"
    "03-1234-5678"
)


class FixtureBackend(OCRBackend):
    """Returns canned card text without looking at the image.

    ``calls`` counts invocations; set ``fail_with`` to an exception to make
    every call raise it.
    """

    name = "fixture"

    def __init__(self, fail_with: Optional[BaseException] = None):
        self.fail_with = fail_with
        self.calls = 0

    def parse_image(self, base64_data: str, language: str = "eng", file_type: str = "jpg") -> OCRResult:
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with

        if "jpn" in (language or ""):
            return OCRResult(
                text=JAPANESE_CARD,
                meta={"OCRExitCode": 1, "ProcessingTimeInMilliseconds": 150},
            )
        return OCRResult(
            text=ENGLISH_CARD,
            meta={"OCRExitCode": 1, "ProcessingTimeInMilliseconds": 200},
        )
